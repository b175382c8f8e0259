"""
Risk & Behaviour Analytics: drawdown path, win/loss streaks, risk-adjusted ratios.

Inputs are the DayRecord series (drawdown, ratios) and the position ledger
(streaks). Every ratio resolves to 0.0 when its denominator is 0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from ledger_core.contracts import (
    DayRecord,
    DrawdownAnalysis,
    DrawdownPeriod,
    Outcome,
    PerformanceRatios,
    Position,
    Streak,
    StreakAnalysis,
)
from ledger_core.statistics import mean, population_std, safe_div

TRADING_DAYS_PER_YEAR = 252


# ---------------------------------------------------------------------------
# Drawdown
# ---------------------------------------------------------------------------


def cumulative_series(days: Sequence[DayRecord]) -> list[tuple[date, float]]:
    """Day-ordered running total of net P&L."""
    running = 0.0
    series: list[tuple[date, float]] = []
    for day in days:
        running += day.net_pnl
        series.append((day.date, running))
    return series


def _days_between(start: date, end: date) -> int:
    return (end - start).days


def _pct_of_peak(amount: float, peak: float) -> float:
    return amount / abs(peak) * 100 if peak != 0 else 0.0


@dataclass
class _OpenDrawdown:
    start: date
    trough: float


def _period(
    state: _OpenDrawdown,
    peak: float,
    end: date,
    recovery: date | None,
) -> DrawdownPeriod:
    amount = peak - state.trough
    return DrawdownPeriod(
        start_date=state.start,
        end_date=end,
        peak_value=peak,
        trough_value=state.trough,
        drawdown_amount=amount,
        drawdown_pct=_pct_of_peak(amount, peak),
        duration_days=_days_between(state.start, end),
        recovery_date=recovery,
        recovery_days=_days_between(end, recovery) if recovery is not None else None,
        recovered=recovery is not None,
    )


def analyze_drawdown(series: Sequence[tuple[date, float]]) -> DrawdownAnalysis:
    """Reconstruct drawdown periods from a (date, cumulative value) series.

    State machine:
        - peak starts at the first value
        - first value below the peak opens a period
        - the trough is the lowest value seen inside the period
        - a value strictly above the peak closes the period (end = previous
          day, recovery = this day) and becomes the new peak
        - a period still open at the end of the series is emitted unrecovered
    """
    if not series:
        return DrawdownAnalysis()

    peak = series[0][1]
    state: _OpenDrawdown | None = None
    periods: list[DrawdownPeriod] = []

    for i in range(1, len(series)):
        day, value = series[i]
        if value > peak:
            if state is not None:
                periods.append(_period(state, peak, series[i - 1][0], day))
                state = None
            peak = value
        elif value < peak:
            if state is None:
                state = _OpenDrawdown(start=day, trough=value)
            else:
                state.trough = min(state.trough, value)

    last_day, last_value = series[-1]
    current = 0.0
    if state is not None:
        periods.append(_period(state, peak, last_day, None))
        current = peak - last_value

    amounts = [p.drawdown_amount for p in periods]
    pcts = [p.drawdown_pct for p in periods]
    recovered = [p.recovery_days for p in periods if p.recovered and p.recovery_days is not None]
    history_days = _days_between(series[0][0], last_day)

    return DrawdownAnalysis(
        max_drawdown=max(amounts, default=0.0),
        max_drawdown_pct=max(pcts, default=0.0),
        current_drawdown=current,
        current_drawdown_pct=_pct_of_peak(current, peak) if state is not None else 0.0,
        periods=tuple(periods),
        avg_drawdown=mean(amounts),
        avg_drawdown_pct=mean(pcts),
        avg_recovery_days=mean(recovered),
        total_drawdown_days=sum(p.duration_days for p in periods),
        drawdown_frequency=safe_div(len(periods), history_days) * 365,
    )


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


def _outcome(position: Position) -> Outcome:
    return Outcome.WIN if position.realized_pnl > 0 else Outcome.LOSS


def analyze_streaks(positions: Iterable[Position]) -> StreakAnalysis:
    """Run-length encode consecutive same-sign closed positions by open time."""
    decided = sorted(
        (p for p in positions if p.is_closed and p.realized_pnl != 0),
        key=lambda p: p.opened_at,
    )
    if not decided:
        return StreakAnalysis()

    streaks: list[Streak] = []
    run_outcome = _outcome(decided[0])
    run_length = 1
    for position in decided[1:]:
        outcome = _outcome(position)
        if outcome == run_outcome:
            run_length += 1
        else:
            streaks.append(Streak(run_outcome, run_length))
            run_outcome, run_length = outcome, 1
    streaks.append(Streak(run_outcome, run_length))

    wins = [s.length for s in streaks if s.outcome == Outcome.WIN]
    losses = [s.length for s in streaks if s.outcome == Outcome.LOSS]
    longest = max(max(wins, default=0), max(losses, default=0))
    distribution = tuple(
        (n, wins.count(n), losses.count(n))
        for n in range(1, longest + 1)
        if n in wins or n in losses
    )

    return StreakAnalysis(
        streaks=tuple(streaks),
        current=streaks[-1],
        longest_win=max(wins, default=0),
        longest_loss=max(losses, default=0),
        avg_win=mean(wins),
        avg_loss=mean(losses),
        distribution=distribution,
    )


# ---------------------------------------------------------------------------
# Ratios
# ---------------------------------------------------------------------------


def performance_ratios(days: Sequence[DayRecord], drawdown: DrawdownAnalysis) -> PerformanceRatios:
    """Sharpe, Sortino and Calmar from the daily net-P&L series.

    Sharpe  = (mean * 252) / (std * sqrt(252))
    Sortino = same numerator over the deviation of below-mean days
    Calmar  = annualized return / max drawdown amount
    Risk-free rate is taken as zero.
    """
    if not days:
        return PerformanceRatios()

    returns = [d.net_pnl for d in days]
    total = sum(returns)
    daily_mean = mean(returns)
    daily_std = population_std(returns)
    annualized = daily_mean * TRADING_DAYS_PER_YEAR
    root = math.sqrt(TRADING_DAYS_PER_YEAR)

    # Population deviation of below-mean days around the overall mean.
    below = [r for r in returns if r < daily_mean]
    downside_std = math.sqrt(sum((r - daily_mean) ** 2 for r in below) / len(below)) if below else 0.0

    return PerformanceRatios(
        sharpe=safe_div(annualized, daily_std * root),
        sortino=safe_div(annualized, downside_std * root),
        calmar=safe_div(annualized, drawdown.max_drawdown),
        max_drawdown_ratio=safe_div(drawdown.max_drawdown, abs(total)),
        profit_to_max_drawdown=safe_div(total, drawdown.max_drawdown),
        annualized_return=annualized,
        daily_mean=daily_mean,
        daily_std=daily_std,
    )
