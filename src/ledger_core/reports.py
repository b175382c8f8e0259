"""
Derived reports: thin one-pass map-reduce layers over the position ledger and
the DayRecord series.

Each function is pure and returns plain frozen records. Empty input always
yields an empty list (or an all-zero record), never an exception.
"""

from __future__ import annotations

import calendar
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from ledger_core.contracts import (
    DayRecord,
    InstrumentType,
    Order,
    Position,
    Side,
)
from ledger_core.statistics import mean, pearson, population_std, safe_div

MIN_COMMON_DAYS = 5
REVENGE_WINDOW = timedelta(hours=2)

_INSTRUMENT_NAMES = {
    InstrumentType.CE: "Call Options",
    InstrumentType.PE: "Put Options",
    InstrumentType.FUT: "Futures",
}

# (lower bound inclusive, upper bound exclusive, label), minutes
HOLD_TIME_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (0, 15, "0-15 min (Scalping)"),
    (15, 60, "15-60 min (Short-term)"),
    (60, 240, "1-4 hours (Intraday)"),
    (240, 1440, "4-24 hours (Swing)"),
    (1440, math.inf, "1+ days (Position)"),
)

# (start, end) minutes after midnight IST, name; entries outside all windows count as Mid-Day
MARKET_SESSIONS: tuple[tuple[int, int, str], ...] = (
    (420, 555, "Pre-Market (07:00-09:15)"),
    (555, 630, "Opening (09:15-10:30)"),
    (630, 870, "Mid-Day (10:30-14:30)"),
    (870, 930, "Closing (14:30-15:30)"),
    (930, 1020, "After-Hours (15:30-17:00)"),
)
_DEFAULT_SESSION = 2

MARKET_HOURS = range(9, 16)

# (lower, upper) fraction of the observed min..max position size
SIZE_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (0.0, 0.2, "Small (0-20%)"),
    (0.2, 0.4, "Small-Medium (20-40%)"),
    (0.4, 0.6, "Medium (40-60%)"),
    (0.6, 0.8, "Medium-Large (60-80%)"),
    (0.8, 1.0, "Large (80-100%)"),
)

SECTORS: dict[str, str] = {
    "HDFCBANK": "Banking", "ICICIBANK": "Banking", "SBIN": "Banking", "AXISBANK": "Banking",
    "KOTAKBANK": "Banking", "INDUSINDBK": "Banking", "BANKBARODA": "Banking",
    "TCS": "IT", "INFY": "IT", "WIPRO": "IT", "HCLTECH": "IT", "TECHM": "IT", "LTI": "IT",
    "MARUTI": "Auto", "TATAMOTORS": "Auto", "M&M": "Auto", "BAJAJ-AUTO": "Auto", "HEROMOTOCO": "Auto",
    "SUNPHARMA": "Pharma", "DRREDDY": "Pharma", "CIPLA": "Pharma", "DIVISLAB": "Pharma",
    "HINDUNILVR": "FMCG", "ITC": "FMCG", "NESTLEIND": "FMCG", "BRITANNIA": "FMCG",
    "TATASTEEL": "Metals", "JSWSTEEL": "Metals", "HINDALCO": "Metals", "VEDL": "Metals",
    "RELIANCE": "Energy", "ONGC": "Energy", "IOC": "Energy", "BPCL": "Energy",
    "NIFTY": "Index", "BANKNIFTY": "Index", "FINNIFTY": "Index",
}
OTHER_SECTOR = "Others"

LARGE_AFTER_LOSS_FACTOR = 1.5
RAPID_FIRE_WINDOW = timedelta(minutes=15)
LATE_ENTRY_HOUR = 15

RATIO_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (0, 0.5, "< 0.5"),
    (0.5, 1, "0.5 - 1.0"),
    (1, 1.5, "1.0 - 1.5"),
    (1.5, 2, "1.5 - 2.0"),
    (2, 3, "2.0 - 3.0"),
    (3, math.inf, "> 3.0"),
)


def _closed(positions: Iterable[Position]) -> list[Position]:
    return [p for p in positions if p.is_closed]


def _win_rate(pnls: Sequence[float]) -> float:
    return safe_div(sum(1 for v in pnls if v > 0), len(pnls)) * 100


def _last_trade_date(position: Position) -> date:
    return max(o.trade_date for o in position.orders)


# ---------------------------------------------------------------------------
# Grouped performance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GroupPerformance:
    """Closed-position performance for one group (symbol, instrument, weekday...)."""

    label: str
    positions: int
    total_pnl: float
    avg_pnl: float
    win_rate: float
    winning: int
    losing: int
    max_win: float
    max_loss: float
    avg_hold_minutes: float
    volume: int


def _group(label: str, members: Sequence[Position]) -> GroupPerformance:
    pnls = [p.realized_pnl for p in members]
    return GroupPerformance(
        label=label,
        positions=len(members),
        total_pnl=sum(pnls),
        avg_pnl=mean(pnls),
        win_rate=_win_rate(pnls),
        winning=sum(1 for v in pnls if v > 0),
        losing=sum(1 for v in pnls if v <= 0),
        max_win=max([v for v in pnls if v > 0], default=0.0),
        max_loss=min([v for v in pnls if v < 0], default=0.0),
        avg_hold_minutes=mean([p.hold_minutes for p in members]),
        volume=sum(p.max_quantity for p in members),
    )


def symbol_performance(positions: Iterable[Position]) -> list[GroupPerformance]:
    """Per-symbol performance, best total P&L first."""
    groups: dict[str, list[Position]] = {}
    for p in _closed(positions):
        groups.setdefault(p.symbol, []).append(p)
    rows = [_group(symbol, members) for symbol, members in groups.items()]
    return sorted(rows, key=lambda r: r.total_pnl, reverse=True)


def instrument_type_breakdown(positions: Iterable[Position]) -> list[GroupPerformance]:
    """Calls vs puts vs futures, best total P&L first."""
    groups: dict[InstrumentType, list[Position]] = {}
    for p in _closed(positions):
        groups.setdefault(p.instrument_type, []).append(p)
    rows = [_group(_INSTRUMENT_NAMES[kind], members) for kind, members in groups.items()]
    return sorted(rows, key=lambda r: r.total_pnl, reverse=True)


def day_of_week_breakdown(positions: Iterable[Position]) -> list[GroupPerformance]:
    """Performance by weekday of each position's last trade date, Monday first."""
    groups: dict[int, list[Position]] = {}
    for p in _closed(positions):
        groups.setdefault(_last_trade_date(p).weekday(), []).append(p)
    return [_group(calendar.day_name[d], groups[d]) for d in sorted(groups)]


def hold_time_breakdown(positions: Iterable[Position]) -> list[GroupPerformance]:
    """Performance by holding-period bucket. Empty buckets are dropped."""
    closed = _closed(positions)
    rows: list[GroupPerformance] = []
    for low, high, label in HOLD_TIME_BUCKETS:
        members = [p for p in closed if low <= p.hold_minutes < high]
        if members:
            rows.append(_group(label, members))
    return rows


def _session_index(moment: datetime) -> int:
    minutes = moment.hour * 60 + moment.minute
    for i, (start, end, _) in enumerate(MARKET_SESSIONS):
        if start <= minutes < end:
            return i
    return _DEFAULT_SESSION


def market_session_breakdown(positions: Iterable[Position]) -> list[GroupPerformance]:
    """Performance by the market session each position was opened in."""
    groups: dict[int, list[Position]] = {}
    for p in _closed(positions):
        groups.setdefault(_session_index(p.opened_at), []).append(p)
    return [_group(MARKET_SESSIONS[i][2], groups[i]) for i in sorted(groups)]


@dataclass(frozen=True)
class HourTiming:
    hour: int
    label: str
    entries: int
    exits: int
    entry_avg_pnl: float
    exit_avg_pnl: float
    entry_win_rate: float
    exit_win_rate: float


def entry_exit_timing(positions: Iterable[Position]) -> list[HourTiming]:
    """Position P&L by the market hour of its open and of its close.

    Only hours 9 through 15 are tracked; hours with neither an entry nor an
    exit are dropped.
    """
    entries: dict[int, list[float]] = {h: [] for h in MARKET_HOURS}
    exits: dict[int, list[float]] = {h: [] for h in MARKET_HOURS}
    for p in _closed(positions):
        if p.opened_at.hour in entries:
            entries[p.opened_at.hour].append(p.realized_pnl)
        if p.closed_at.hour in exits:
            exits[p.closed_at.hour].append(p.realized_pnl)

    return [
        HourTiming(
            hour=h,
            label=f"{h}:00",
            entries=len(entries[h]),
            exits=len(exits[h]),
            entry_avg_pnl=mean(entries[h]),
            exit_avg_pnl=mean(exits[h]),
            entry_win_rate=_win_rate(entries[h]),
            exit_win_rate=_win_rate(exits[h]),
        )
        for h in MARKET_HOURS
        if entries[h] or exits[h]
    ]


# ---------------------------------------------------------------------------
# Calendar views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthReturn:
    year: int
    month: int
    month_name: str
    net_pnl: float
    pct_of_year: float
    execution_count: int


@dataclass(frozen=True)
class YearReturns:
    year: int
    months: tuple[MonthReturn, ...]
    net_pnl: float


def monthly_returns(days: Sequence[DayRecord]) -> list[YearReturns]:
    """Monthly net P&L heatmap rows, grouped by year ascending.

    pct_of_year is each month's share of the absolute yearly total.
    """
    buckets: dict[tuple[int, int], list[DayRecord]] = {}
    for day in days:
        buckets.setdefault((day.date.year, day.date.month), []).append(day)

    years: dict[int, list[tuple[int, float, int]]] = {}
    for (year, month), members in sorted(buckets.items()):
        years.setdefault(year, []).append(
            (month, sum(d.net_pnl for d in members), sum(d.execution_count for d in members))
        )

    result: list[YearReturns] = []
    for year, months in years.items():
        total = sum(pnl for _, pnl, _ in months)
        result.append(
            YearReturns(
                year=year,
                months=tuple(
                    MonthReturn(
                        year=year,
                        month=month,
                        month_name=calendar.month_abbr[month],
                        net_pnl=pnl,
                        pct_of_year=safe_div(pnl, abs(total)) * 100,
                        execution_count=count,
                    )
                    for month, pnl, count in months
                ),
                net_pnl=total,
            )
        )
    return result


@dataclass(frozen=True)
class RollingWindow:
    end_date: date
    window: int
    net_pnl: float
    volatility: float
    sharpe: float
    max_drawdown: float
    win_rate: float


def rolling_performance(days: Sequence[DayRecord], window: int = 30) -> list[RollingWindow]:
    """Trailing-window metrics for every day with a full window behind it."""
    if window <= 0 or len(days) < window:
        return []

    rows: list[RollingWindow] = []
    for end in range(window - 1, len(days)):
        returns = [d.net_pnl for d in days[end - window + 1 : end + 1]]
        avg = mean(returns)
        vol = population_std(returns)

        peak = returns[0]
        cumulative = 0.0
        max_dd = 0.0
        for r in returns:
            cumulative += r
            peak = max(peak, cumulative)
            max_dd = max(max_dd, peak - cumulative)

        rows.append(
            RollingWindow(
                end_date=days[end].date,
                window=window,
                net_pnl=sum(returns),
                volatility=vol,
                sharpe=safe_div(avg, vol),
                max_drawdown=max_dd,
                win_rate=sum(1 for r in returns if r > 0) / window * 100,
            )
        )
    return rows


# ---------------------------------------------------------------------------
# Risk-reward
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RatioBucket:
    label: str
    count: int
    pct: float


@dataclass(frozen=True)
class RiskRewardAnalysis:
    ratios: tuple[float, ...] = ()
    avg_ratio: float = 0.0
    median_ratio: float = 0.0
    distribution: tuple[RatioBucket, ...] = ()
    breakeven_ratio: float = 0.0  # ratio needed to break even at the observed win rate


def risk_reward_analysis(positions: Iterable[Position]) -> RiskRewardAnalysis:
    """Each win measured in average losses, each loss in average wins."""
    decided = [p.realized_pnl for p in _closed(positions) if p.realized_pnl != 0]
    wins = [v for v in decided if v > 0]
    losses = [abs(v) for v in decided if v < 0]
    avg_win = mean(wins)
    avg_loss = mean(losses)

    ratios: list[float] = []
    for pnl in decided:
        if pnl > 0:
            ratios.append(pnl / avg_loss if avg_loss > 0 else 1.0)
        elif avg_win > 0:
            ratios.append(avg_win / abs(pnl))
    if not ratios:
        return RiskRewardAnalysis()

    ordered = sorted(ratios)
    win_fraction = len(wins) / len(decided)
    return RiskRewardAnalysis(
        ratios=tuple(ratios),
        avg_ratio=mean(ratios),
        median_ratio=ordered[len(ordered) // 2],
        distribution=tuple(
            RatioBucket(
                label=label,
                count=sum(1 for r in ratios if low <= r < high),
                pct=sum(1 for r in ratios if low <= r < high) / len(ratios) * 100,
            )
            for low, high, label in RATIO_BUCKETS
        ),
        breakeven_ratio=(1 - win_fraction) / win_fraction if win_fraction > 0 else math.inf,
    )


# ---------------------------------------------------------------------------
# Sizing and capital
# ---------------------------------------------------------------------------


def _exposure(position: Position) -> float:
    return max(abs(position.total_buy_value), abs(position.total_sell_value))


@dataclass(frozen=True)
class SizeBucket:
    label: str
    low: float
    high: float
    count: int
    avg_pnl: float
    win_rate: float


@dataclass(frozen=True)
class PositionSizeAnalysis:
    buckets: tuple[SizeBucket, ...] = ()
    optimal_bucket: str = ""
    size_pnl_correlation: float = 0.0


def position_size_analysis(positions: Iterable[Position]) -> PositionSizeAnalysis:
    """Closed positions bucketed by exposure, the larger of buy and sell value.

    Buckets split the observed min..max exposure into fifths. Each position
    lands in exactly one bucket; the largest exposure belongs to the last.
    """
    closed = _closed(positions)
    if not closed:
        return PositionSizeAnalysis()

    sizes = [_exposure(p) for p in closed]
    low, spread = min(sizes), max(sizes) - min(sizes)

    def slot(size: float) -> int:
        for i, (_, upper, _) in enumerate(SIZE_BUCKETS[:-1]):
            if size < low + spread * upper:
                return i
        return len(SIZE_BUCKETS) - 1

    members: list[list[float]] = [[] for _ in SIZE_BUCKETS]
    for size, p in zip(sizes, closed):
        members[slot(size)].append(p.realized_pnl)

    buckets = tuple(
        SizeBucket(
            label=label,
            low=low + spread * lower,
            high=low + spread * upper,
            count=len(pnls),
            avg_pnl=mean(pnls),
            win_rate=_win_rate(pnls),
        )
        for (lower, upper, label), pnls in zip(SIZE_BUCKETS, members)
    )
    filled = [b for b in buckets if b.count]
    return PositionSizeAnalysis(
        buckets=buckets,
        optimal_bucket=max(filled, key=lambda b: b.avg_pnl).label,
        size_pnl_correlation=pearson(sizes, [p.realized_pnl for p in closed]),
    )


@dataclass(frozen=True)
class CapitalUsage:
    date: date
    capital_used: float
    max_capital: float
    utilization_pct: float
    orders: int
    avg_order_value: float
    efficiency: float  # net P&L per rupee of turnover


def capital_utilization(days: Sequence[DayRecord]) -> list[CapitalUsage]:
    """Daily turnover against a ceiling of twice the busiest day's turnover."""
    ceiling = max((d.gross_turnover for d in days), default=0.0) * 2
    return [
        CapitalUsage(
            date=d.date,
            capital_used=d.gross_turnover,
            max_capital=ceiling,
            utilization_pct=safe_div(d.gross_turnover, ceiling) * 100,
            orders=d.order_count,
            avg_order_value=safe_div(d.gross_turnover, d.order_count),
            efficiency=safe_div(d.net_pnl, d.gross_turnover),
        )
        for d in days
    ]


# ---------------------------------------------------------------------------
# Behaviour
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OvertradingAnalysis:
    threshold: int = 0
    overtrading_days: tuple[date, ...] = ()
    normal_days: int = 0
    overtrading_avg_pnl: float = 0.0
    normal_avg_pnl: float = 0.0
    overtrading_win_rate: float = 0.0
    normal_win_rate: float = 0.0


def overtrading_analysis(days: Sequence[DayRecord]) -> OvertradingAnalysis:
    """Flag days whose order count exceeds ceil(mean + 1 std) of daily order counts.

    Per-day P&L is net P&L per order; win rates are the day's order win rate.
    """
    if not days:
        return OvertradingAnalysis()

    counts = [d.order_count for d in days]
    threshold = math.ceil(mean(counts) + population_std(counts))
    heavy = [d for d in days if d.order_count > threshold]
    normal = [d for d in days if d.order_count <= threshold]

    def per_order(group: list[DayRecord]) -> float:
        return mean([safe_div(d.net_pnl, d.order_count) for d in group])

    return OvertradingAnalysis(
        threshold=threshold,
        overtrading_days=tuple(d.date for d in heavy),
        normal_days=len(normal),
        overtrading_avg_pnl=per_order(heavy),
        normal_avg_pnl=per_order(normal),
        overtrading_win_rate=mean([d.order_win_rate for d in heavy]),
        normal_win_rate=mean([d.order_win_rate for d in normal]),
    )


@dataclass(frozen=True)
class RevengeTradingAnalysis:
    revenge_positions: tuple[str, ...] = ()
    revenge_pct: float = 0.0
    revenge_avg_pnl: float = 0.0
    revenge_win_rate: float = 0.0
    normal_avg_pnl: float = 0.0
    normal_win_rate: float = 0.0


def revenge_trading_analysis(positions: Iterable[Position]) -> RevengeTradingAnalysis:
    """A position opened within two hours of a losing position's close is a revenge trade.

    Closed positions are walked in (closed_at, opened_at) order, so each
    position is compared with the one that closed just before it. Ties on
    the close time fall back to the open time.
    """
    closed = sorted(_closed(positions), key=lambda p: (p.closed_at, p.opened_at))
    if len(closed) < 2:
        return RevengeTradingAnalysis()

    revenge: list[Position] = []
    normal: list[Position] = [closed[0]]
    for previous, current in zip(closed, closed[1:]):
        gap = current.opened_at - previous.closed_at
        if previous.realized_pnl < 0 and timedelta(0) <= gap <= REVENGE_WINDOW:
            revenge.append(current)
        else:
            normal.append(current)

    revenge_pnls = [p.realized_pnl for p in revenge]
    normal_pnls = [p.realized_pnl for p in normal]
    return RevengeTradingAnalysis(
        revenge_positions=tuple(p.position_id for p in revenge),
        revenge_pct=len(revenge) / len(closed) * 100,
        revenge_avg_pnl=mean(revenge_pnls),
        revenge_win_rate=_win_rate(revenge_pnls),
        normal_avg_pnl=mean(normal_pnls),
        normal_win_rate=_win_rate(normal_pnls),
    )


@dataclass(frozen=True)
class BehaviouralPatterns:
    avg_win_hold_minutes: float = 0.0
    avg_loss_hold_minutes: float = 0.0
    hold_ratio: float = 1.0
    hold_pattern: str = "Balanced"
    monday_avg_pnl: float = 0.0
    friday_avg_pnl: float = 0.0
    weekend_gap_impact: float = 0.0
    large_after_loss: int = 0
    rapid_fire: int = 0
    late_entries: int = 0


def _hold_pattern(ratio: float) -> str:
    if ratio < 0.7:
        return "Quick Profits, Slow Losses"
    if ratio > 1.3:
        return "Slow Profits, Quick Losses"
    return "Balanced"


def behavioural_patterns(positions: Iterable[Position]) -> BehaviouralPatterns:
    """Holding discipline, Monday/Friday gap and emotional-trading counters.

    hold_ratio is avg winner hold / avg loser hold (1.0 without losers).
    Counters walk closed positions by open time:
        large_after_loss  position value > 1.5x the average, right after a loss
        rapid_fire        opened within 15 minutes of the previous close
        late_entries      opened at or after 15:00
    """
    closed = sorted(_closed(positions), key=lambda p: p.opened_at)
    if not closed:
        return BehaviouralPatterns()

    win_hold = mean([p.hold_minutes for p in closed if p.realized_pnl > 0])
    loss_hold = mean([p.hold_minutes for p in closed if p.realized_pnl < 0])
    ratio = win_hold / loss_hold if loss_hold > 0 else 1.0

    monday = mean([p.realized_pnl for p in closed if _last_trade_date(p).weekday() == 0])
    friday = mean([p.realized_pnl for p in closed if _last_trade_date(p).weekday() == 4])

    def value(p: Position) -> float:
        return p.total_buy_value + p.total_sell_value

    avg_value = mean([value(p) for p in closed])
    large = rapid = 0
    for previous, current in zip(closed, closed[1:]):
        if previous.realized_pnl < 0 and value(current) > avg_value * LARGE_AFTER_LOSS_FACTOR:
            large += 1
        if timedelta(0) <= current.opened_at - previous.closed_at <= RAPID_FIRE_WINDOW:
            rapid += 1

    return BehaviouralPatterns(
        avg_win_hold_minutes=win_hold,
        avg_loss_hold_minutes=loss_hold,
        hold_ratio=ratio,
        hold_pattern=_hold_pattern(ratio),
        monday_avg_pnl=monday,
        friday_avg_pnl=friday,
        weekend_gap_impact=monday - friday,
        large_after_loss=large,
        rapid_fire=rapid,
        late_entries=sum(1 for p in closed if p.opened_at.hour >= LATE_ENTRY_HOUR),
    )


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


def sector_of(symbol: str, underlying: str = "") -> str:
    """Map a contract to its sector: exact underlying, then symbol, then substring."""
    base = re.sub(r"[^A-Z]", "", symbol)
    for name in (underlying, symbol, base):
        if name in SECTORS:
            return SECTORS[name]
    for key, sector in SECTORS.items():
        if key in symbol or (base and base in key):
            return sector
    return OTHER_SECTOR


@dataclass(frozen=True)
class SectorExposure:
    sector: str
    symbols: tuple[str, ...]
    positions: int
    total_pnl: float
    avg_pnl: float
    win_rate: float
    exposure_pct: float
    avg_position_value: float


def sector_exposure(positions: Iterable[Position]) -> list[SectorExposure]:
    """Closed-position value and P&L per sector, largest exposure first.

    Position value is buy value plus sell value; exposure_pct is the
    sector's share of the summed value of every closed position.
    """
    groups: dict[str, list[Position]] = {}
    for p in _closed(positions):
        groups.setdefault(sector_of(p.symbol, p.underlying), []).append(p)
    grand_total = sum(p.total_buy_value + p.total_sell_value for members in groups.values() for p in members)

    rows: list[SectorExposure] = []
    for sector, members in groups.items():
        pnls = [p.realized_pnl for p in members]
        values = [p.total_buy_value + p.total_sell_value for p in members]
        rows.append(
            SectorExposure(
                sector=sector,
                symbols=tuple(dict.fromkeys(p.symbol for p in members)),
                positions=len(members),
                total_pnl=sum(pnls),
                avg_pnl=mean(pnls),
                win_rate=_win_rate(pnls),
                exposure_pct=safe_div(sum(values), grand_total) * 100,
                avg_position_value=mean(values),
            )
        )
    return sorted(rows, key=lambda r: r.exposure_pct, reverse=True)


@dataclass(frozen=True)
class SymbolCorrelation:
    symbol_a: str
    symbol_b: str
    correlation: float
    common_days: int


def correlation_matrix(orders: Iterable[Order]) -> list[SymbolCorrelation]:
    """Pairwise correlation of per-symbol daily cash flow (sells +, buys -).

    Pairs with fewer than MIN_COMMON_DAYS common trade dates are omitted,
    not reported as 0. Sorted by absolute correlation, strongest first.
    """
    flows: dict[str, dict[date, float]] = {}
    for order in orders:
        signed = order.value if order.side == Side.SELL else -order.value
        by_day = flows.setdefault(order.symbol, {})
        by_day[order.trade_date] = by_day.get(order.trade_date, 0.0) + signed

    symbols = list(flows)
    rows: list[SymbolCorrelation] = []
    for i, a in enumerate(symbols):
        for b in symbols[i + 1 :]:
            common = sorted(set(flows[a]) & set(flows[b]))
            if len(common) < MIN_COMMON_DAYS:
                continue
            rows.append(
                SymbolCorrelation(
                    symbol_a=a,
                    symbol_b=b,
                    correlation=pearson([flows[a][d] for d in common], [flows[b][d] for d in common]),
                    common_days=len(common),
                )
            )
    return sorted(rows, key=lambda r: abs(r.correlation), reverse=True)
