"""
Aggregate statistics over the position ledger, plus the numeric guards every
analytics module shares.

Guards replace undefined math with safe defaults instead of raising:
division by zero -> 0.0, std-dev over fewer than 2 samples -> 0.0.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from config.fee_schedule import DEFAULT_FEE_SCHEDULE, FeeSchedule
from ledger_core.contracts import (
    Exchange,
    Order,
    Position,
    TradeStatistics,
)
from ledger_core.cost_model import compute_charges


# ---------------------------------------------------------------------------
# Numeric guards
# ---------------------------------------------------------------------------


def safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator != 0 else 0.0


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def population_std(values: Sequence[float], center: float | None = None) -> float:
    """Population standard deviation around *center* (the mean by default)."""
    if len(values) < 2:
        return 0.0
    mu = mean(values) if center is None else center
    return math.sqrt(sum((v - mu) ** 2 for v in values) / len(values))


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson correlation; 0.0 when either side has no variance."""
    if len(xs) < 2 or len(xs) != len(ys):
        return 0.0
    mx, my = mean(xs), mean(ys)
    num = sum((x - mx) * (y - my) for x, y in zip(xs, ys))
    dx = math.sqrt(sum((x - mx) ** 2 for x in xs))
    dy = math.sqrt(sum((y - my) ** 2 for y in ys))
    if dx <= 0 or dy <= 0:
        return 0.0
    return num / (dx * dy)


def profit_factor(gross_wins: float, gross_losses: float) -> float:
    """wins / |losses|; +inf with wins and no losses; 0.0 with neither."""
    gross_losses = abs(gross_losses)
    if gross_losses > 0:
        return gross_wins / gross_losses
    return math.inf if gross_wins > 0 else 0.0


# ---------------------------------------------------------------------------
# Ledger statistics
# ---------------------------------------------------------------------------


def trade_statistics(
    orders: Sequence[Order],
    positions: Iterable[Position],
    exchange: Exchange | None = None,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> TradeStatistics:
    """Totals, win/loss counts and averages across closed positions.

    Turnover and brokerage are computed over every order (open or closed);
    P&L figures over closed positions only.
    """
    closed = [p for p in positions if p.is_closed]
    wins = [p.realized_pnl for p in closed if p.realized_pnl > 0]
    losses = [p.realized_pnl for p in closed if p.realized_pnl < 0]

    total_pnl = sum(p.realized_pnl for p in closed)
    gross_turnover = sum(o.value for o in orders)
    total_brokerage = sum(compute_charges(o, exchange, schedule).total for o in orders)

    return TradeStatistics(
        total_orders=len(orders),
        closed_positions=len(closed),
        winning=len(wins),
        losing=len(losses),
        win_rate=safe_div(len(wins), len(closed)) * 100,
        total_pnl=total_pnl,
        avg_win=mean(wins),
        avg_loss=mean(losses),
        max_win=max(wins) if wins else 0.0,
        max_loss=min(losses) if losses else 0.0,
        profit_factor=profit_factor(sum(wins), sum(losses)),
        gross_turnover=gross_turnover,
        total_brokerage=total_brokerage,
        net_pnl=total_pnl - total_brokerage,
    )
