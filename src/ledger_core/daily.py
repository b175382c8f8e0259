"""
Temporal Aggregator: Order[] + Position[] -> DayRecord[] (one per trade date).

Two passes:
    1. Turnover pass over orders: turnover, charges, order and execution counts.
    2. P&L pass over closed positions with nonzero realized P&L.

Multi-day positions have their realized P&L apportioned evenly across every
trade date their orders span; the win/loss classification goes to the last
spanned date only. This is a smoothing approximation (it does not reflect
the day the P&L was actually realized) and is kept for compatibility of the
daily series and the ratios derived from it.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from config.fee_schedule import DEFAULT_FEE_SCHEDULE, FeeSchedule
from ledger_core.contracts import DayRecord, Exchange, Order, Position
from ledger_core.cost_model import compute_charges


def _pct(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _record_outcome(day: DayRecord, position: Position) -> None:
    if position.realized_pnl > 0:
        day.winning_orders += 1
        day.winning_executions += position.execution_count
    else:
        day.losing_orders += 1
        day.losing_executions += position.execution_count


def build_day_records(
    orders: Iterable[Order],
    positions: Iterable[Position],
    exchange: Exchange | None = None,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> list[DayRecord]:
    """Bucket orders and positions into calendar-day records, date ascending."""
    days: dict[date, DayRecord] = {}

    for order in orders:
        day = days.get(order.trade_date)
        if day is None:
            day = days[order.trade_date] = DayRecord(date=order.trade_date)
        day.gross_turnover += order.value
        day.brokerage += compute_charges(order, exchange, schedule).total
        day.order_count += 1
        day.execution_count += order.execution_count

    for position in positions:
        if not position.is_closed or position.realized_pnl == 0:
            continue
        spanned = position.trade_dates
        share = position.realized_pnl / len(spanned)
        for i, trade_date in enumerate(spanned):
            day = days.get(trade_date)
            if day is None:
                day = days[trade_date] = DayRecord(date=trade_date)
            day.realized_pnl += share if len(spanned) > 1 else position.realized_pnl
            if i == len(spanned) - 1:
                _record_outcome(day, position)

    for day in days.values():
        day.net_pnl = day.realized_pnl - day.brokerage
        day.order_win_rate = _pct(day.winning_orders, day.winning_orders + day.losing_orders)
        day.execution_win_rate = _pct(
            day.winning_executions, day.winning_executions + day.losing_executions
        )

    return [days[d] for d in sorted(days)]


def aggregate_win_rates(days: Sequence[DayRecord]) -> tuple[float, float]:
    """Aggregate (order-based, execution-based) win rates across all days."""
    won = sum(d.winning_orders for d in days)
    lost = sum(d.losing_orders for d in days)
    won_ex = sum(d.winning_executions for d in days)
    lost_ex = sum(d.losing_executions for d in days)
    return _pct(won, won + lost), _pct(won_ex, won_ex + lost_ex)
