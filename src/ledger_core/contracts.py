"""
Data contracts for ledger-core: Execution, Order, Position, DayRecord and
the analytics result records.

ledger-core consumes Executions and produces Positions, DayRecords and
statistics. No I/O; these are plain dataclasses.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class InstrumentType(str, Enum):
    """Derivative classification of a contract."""

    CE = "CE"    # call option
    PE = "PE"    # put option
    FUT = "FUT"  # future


class Side(str, Enum):
    """Execution side."""

    BUY = "buy"
    SELL = "sell"


class PositionStatus(str, Enum):
    """Lifecycle of a matched lot. CLOSED is terminal."""

    OPEN = "open"
    CLOSED = "closed"


class Exchange(str, Enum):
    NSE = "NSE"
    BSE = "BSE"


class Outcome(str, Enum):
    """Sign of a closed position's realized P&L."""

    WIN = "win"
    LOSS = "loss"


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Execution:
    """One raw fill as delivered by the tradebook boundary. Immutable."""

    symbol: str
    instrument_type: InstrumentType
    strike: float | None
    expiry_date: date
    side: Side
    quantity: int
    price: float
    executed_at: datetime
    trade_date: date
    order_id: str
    execution_id: str
    exchange: Exchange = Exchange.NSE
    underlying: str = ""

    @property
    def value(self) -> float:
        return self.quantity * self.price


@dataclass(frozen=True)
class InstrumentKey:
    """Fungible inventory bucket. All matching happens within one key."""

    symbol: str
    instrument_type: InstrumentType
    strike: float
    expiry_date: date

    def label(self) -> str:
        strike = f"{self.strike:g}"
        return f"{self.symbol}_{self.instrument_type.value}_{strike}_{self.expiry_date.isoformat()}"


@dataclass(frozen=True)
class Order:
    """Executions sharing one order identifier, merged into one logical order.

    value == sum(execution.quantity * execution.price)
    price == value / quantity when quantity > 0, else 0.0
    """

    order_id: str
    symbol: str
    underlying: str
    instrument_type: InstrumentType
    strike: float | None
    expiry_date: date
    side: Side
    exchange: Exchange
    quantity: int
    value: float
    price: float
    executed_at: datetime
    trade_date: date
    executions: tuple[Execution, ...] = ()

    @property
    def key(self) -> InstrumentKey:
        return InstrumentKey(
            symbol=self.symbol,
            instrument_type=self.instrument_type,
            strike=self.strike or 0.0,
            expiry_date=self.expiry_date,
        )

    @property
    def execution_count(self) -> int:
        return len(self.executions)


# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------


@dataclass
class Position:
    """A matched inventory lot.

    Mutated only by the position engine while remaining_quantity > 0.
    Once CLOSED, no field changes again; a new Position is opened instead.
    """

    position_id: str
    symbol: str
    underlying: str
    instrument_type: InstrumentType
    strike: float | None
    expiry_date: date
    net_quantity: int            # +long / -short, 0 once closed
    max_quantity: int
    remaining_quantity: int
    entry_price: float
    opened_at: datetime
    exit_price: float | None = None
    closed_at: datetime | None = None
    avg_buy_price: float = 0.0
    avg_sell_price: float = 0.0
    total_buy_value: float = 0.0
    total_sell_value: float = 0.0
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0  # placeholder; no mark-to-market
    status: PositionStatus = PositionStatus.OPEN
    orders: list[Order] = field(default_factory=list)

    @property
    def key(self) -> InstrumentKey:
        return InstrumentKey(self.symbol, self.instrument_type, self.strike or 0.0, self.expiry_date)

    @property
    def is_long(self) -> bool:
        """Direction at open. Stays meaningful after net_quantity drops to 0."""
        if not self.orders:
            return self.net_quantity > 0
        return self.orders[0].side == Side.BUY

    @property
    def is_closed(self) -> bool:
        return self.status == PositionStatus.CLOSED

    @property
    def execution_count(self) -> int:
        return sum(o.execution_count for o in self.orders)

    @property
    def trade_dates(self) -> list[date]:
        """Sorted distinct trade dates spanned by the contributing orders."""
        return sorted({o.trade_date for o in self.orders})

    @property
    def hold_minutes(self) -> float:
        if self.closed_at is None:
            return 0.0
        return (self.closed_at - self.opened_at).total_seconds() / 60.0


@dataclass(frozen=True)
class ChargeBreakdown:
    """Regulatory and brokerage charges for one order (or a sum of orders)."""

    brokerage: float = 0.0
    stt: float = 0.0
    transaction_charges: float = 0.0
    sebi_charges: float = 0.0
    stamp_charges: float = 0.0
    gst: float = 0.0
    total: float = 0.0

    @classmethod
    def zero(cls) -> "ChargeBreakdown":
        return cls()

    def __add__(self, other: "ChargeBreakdown") -> "ChargeBreakdown":
        return ChargeBreakdown(
            brokerage=self.brokerage + other.brokerage,
            stt=self.stt + other.stt,
            transaction_charges=self.transaction_charges + other.transaction_charges,
            sebi_charges=self.sebi_charges + other.sebi_charges,
            stamp_charges=self.stamp_charges + other.stamp_charges,
            gst=self.gst + other.gst,
            total=self.total + other.total,
        )


@dataclass
class DayRecord:
    """One calendar-date bucket. Created lazily per distinct trade date."""

    date: date
    gross_turnover: float = 0.0
    brokerage: float = 0.0
    order_count: int = 0
    execution_count: int = 0
    realized_pnl: float = 0.0
    net_pnl: float = 0.0
    winning_orders: int = 0
    losing_orders: int = 0
    winning_executions: int = 0
    losing_executions: int = 0
    order_win_rate: float = 0.0
    execution_win_rate: float = 0.0


# ---------------------------------------------------------------------------
# Analytics records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DrawdownPeriod:
    """Maximal interval where cumulative net P&L sits below a running peak."""

    start_date: date
    end_date: date
    peak_value: float
    trough_value: float
    drawdown_amount: float
    drawdown_pct: float
    duration_days: int
    recovery_date: date | None = None
    recovery_days: int | None = None
    recovered: bool = False


@dataclass(frozen=True)
class DrawdownAnalysis:
    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    current_drawdown: float = 0.0
    current_drawdown_pct: float = 0.0
    periods: tuple[DrawdownPeriod, ...] = ()
    avg_drawdown: float = 0.0
    avg_drawdown_pct: float = 0.0
    avg_recovery_days: float = 0.0
    total_drawdown_days: int = 0
    drawdown_frequency: float = 0.0  # periods per 365 days


@dataclass(frozen=True)
class Streak:
    outcome: Outcome
    length: int


@dataclass(frozen=True)
class StreakAnalysis:
    streaks: tuple[Streak, ...] = ()
    current: Streak | None = None
    longest_win: int = 0
    longest_loss: int = 0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    distribution: tuple[tuple[int, int, int], ...] = ()  # (length, wins, losses)


@dataclass(frozen=True)
class PerformanceRatios:
    sharpe: float = 0.0
    sortino: float = 0.0
    calmar: float = 0.0
    max_drawdown_ratio: float = 0.0
    profit_to_max_drawdown: float = 0.0
    annualized_return: float = 0.0
    daily_mean: float = 0.0
    daily_std: float = 0.0


@dataclass(frozen=True)
class TradeStatistics:
    total_orders: int = 0
    closed_positions: int = 0
    winning: int = 0
    losing: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    max_win: float = 0.0
    max_loss: float = 0.0
    profit_factor: float = 0.0
    gross_turnover: float = 0.0
    total_brokerage: float = 0.0
    net_pnl: float = 0.0
