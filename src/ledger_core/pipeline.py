"""
Pipeline orchestrator: Execution[] -> AnalyticsResult.

Single entry point for a full recompute. Stage ordering:
    1. Order Aggregator:   Execution[] -> Order[]
    2. Matching Engine:    Order[] -> Position[]
    3. Temporal Aggregator + Cost Model: -> DayRecord[]
    4. Statistics, drawdown, streaks, ratios
    5. Derived reports

Every stage is a pure function of the previous stage's output. No state
survives between calls except what a caller keeps in an AnalyticsCache.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from config.fee_schedule import DEFAULT_FEE_SCHEDULE, FeeSchedule
from ledger_core.contracts import (
    ChargeBreakdown,
    DayRecord,
    DrawdownAnalysis,
    Exchange,
    Execution,
    Order,
    PerformanceRatios,
    Position,
    StreakAnalysis,
    TradeStatistics,
)
from ledger_core.cost_model import charge_breakdown
from ledger_core.daily import aggregate_win_rates, build_day_records
from ledger_core.order_aggregator import merge_executions
from ledger_core.position_engine import match_positions
from ledger_core.reports import (
    BehaviouralPatterns,
    CapitalUsage,
    GroupPerformance,
    HourTiming,
    OvertradingAnalysis,
    PositionSizeAnalysis,
    RevengeTradingAnalysis,
    RiskRewardAnalysis,
    RollingWindow,
    SectorExposure,
    SymbolCorrelation,
    YearReturns,
    behavioural_patterns,
    capital_utilization,
    correlation_matrix,
    day_of_week_breakdown,
    entry_exit_timing,
    hold_time_breakdown,
    instrument_type_breakdown,
    market_session_breakdown,
    monthly_returns,
    overtrading_analysis,
    position_size_analysis,
    revenge_trading_analysis,
    risk_reward_analysis,
    rolling_performance,
    sector_exposure,
    symbol_performance,
)
from ledger_core.risk_analytics import (
    analyze_drawdown,
    analyze_streaks,
    cumulative_series,
    performance_ratios,
)
from ledger_core.statistics import trade_statistics

logger = logging.getLogger("ledger.engine")


@dataclass(frozen=True)
class ReportBundle:
    """Derived reports. Each is recomputed from the ledger, never stored."""

    symbols: list[GroupPerformance] = field(default_factory=list)
    instrument_types: list[GroupPerformance] = field(default_factory=list)
    day_of_week: list[GroupPerformance] = field(default_factory=list)
    hold_time: list[GroupPerformance] = field(default_factory=list)
    sessions: list[GroupPerformance] = field(default_factory=list)
    timing: list[HourTiming] = field(default_factory=list)
    position_sizes: PositionSizeAnalysis = field(default_factory=PositionSizeAnalysis)
    capital: list[CapitalUsage] = field(default_factory=list)
    monthly: list[YearReturns] = field(default_factory=list)
    risk_reward: RiskRewardAnalysis = field(default_factory=RiskRewardAnalysis)
    overtrading: OvertradingAnalysis = field(default_factory=OvertradingAnalysis)
    revenge_trading: RevengeTradingAnalysis = field(default_factory=RevengeTradingAnalysis)
    behaviour: BehaviouralPatterns = field(default_factory=BehaviouralPatterns)
    sectors: list[SectorExposure] = field(default_factory=list)
    correlations: list[SymbolCorrelation] = field(default_factory=list)
    rolling: list[RollingWindow] = field(default_factory=list)


@dataclass(frozen=True)
class AnalyticsResult:
    """Complete output of one recompute.

    Every stage's output is preserved so callers can drill down from a
    summary figure to the orders and executions behind it.
    """

    fingerprint: str
    orders: list[Order] = field(default_factory=list)
    positions: list[Position] = field(default_factory=list)
    days: list[DayRecord] = field(default_factory=list)
    charges: ChargeBreakdown = field(default_factory=ChargeBreakdown)
    charges_by_date: list[tuple[date, ChargeBreakdown]] = field(default_factory=list)
    statistics: TradeStatistics = field(default_factory=TradeStatistics)
    order_win_rate: float = 0.0
    execution_win_rate: float = 0.0
    cumulative: list[tuple[date, float]] = field(default_factory=list)
    drawdown: DrawdownAnalysis = field(default_factory=DrawdownAnalysis)
    streaks: StreakAnalysis = field(default_factory=StreakAnalysis)
    ratios: PerformanceRatios = field(default_factory=PerformanceRatios)
    reports: ReportBundle = field(default_factory=ReportBundle)


def _canonical(ex: Execution) -> str:
    strike = "" if ex.strike is None else repr(float(ex.strike))
    return "|".join(
        (
            ex.execution_id,
            ex.order_id,
            ex.symbol,
            ex.underlying,
            ex.instrument_type.value,
            strike,
            ex.expiry_date.isoformat(),
            ex.side.value,
            str(ex.quantity),
            repr(float(ex.price)),
            ex.executed_at.isoformat(),
            ex.trade_date.isoformat(),
            ex.exchange.value,
        )
    )


def execution_fingerprint(executions: Iterable[Execution]) -> str:
    """SHA-256 over the sorted canonical form of every execution.

    Input order does not affect the digest; any field change does.
    """
    digest = hashlib.sha256()
    for line in sorted(_canonical(ex) for ex in executions):
        digest.update(line.encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()


def run_analytics(
    executions: Iterable[Execution],
    *,
    exchange: Exchange | None = None,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    workers: int = 1,
    rolling_window: int = 30,
) -> AnalyticsResult:
    """Run the full recompute over an execution set.

    Parameters
    ----------
    executions:
        Raw fills, any order.
    exchange:
        Override for the transaction-charge rate. Defaults to each order's exchange.
    schedule:
        Fee schedule for the cost model.
    workers:
        Thread count for position matching (one task per instrument key).
    rolling_window:
        Window length in trading days for rolling performance.

    Returns
    -------
    AnalyticsResult
        Empty input yields empty lists and all-zero records.
    """
    executions = list(executions)
    fingerprint = execution_fingerprint(executions)

    orders = merge_executions(executions)
    positions = match_positions(orders, workers=workers)
    days = build_day_records(orders, positions, exchange, schedule)
    charges, charges_by_date = charge_breakdown(orders, exchange, schedule)
    stats = trade_statistics(orders, positions, exchange, schedule)
    order_rate, execution_rate = aggregate_win_rates(days)

    cumulative = cumulative_series(days)
    drawdown = analyze_drawdown(cumulative)
    streaks = analyze_streaks(positions)
    ratios = performance_ratios(days, drawdown)

    reports = ReportBundle(
        symbols=symbol_performance(positions),
        instrument_types=instrument_type_breakdown(positions),
        day_of_week=day_of_week_breakdown(positions),
        hold_time=hold_time_breakdown(positions),
        sessions=market_session_breakdown(positions),
        timing=entry_exit_timing(positions),
        position_sizes=position_size_analysis(positions),
        capital=capital_utilization(days),
        monthly=monthly_returns(days),
        risk_reward=risk_reward_analysis(positions),
        overtrading=overtrading_analysis(days),
        revenge_trading=revenge_trading_analysis(positions),
        behaviour=behavioural_patterns(positions),
        sectors=sector_exposure(positions),
        correlations=correlation_matrix(orders),
        rolling=rolling_performance(days, rolling_window),
    )

    logger.info(
        "Analytics: %d executions -> %d orders -> %d positions over %d days",
        len(executions), len(orders), len(positions), len(days),
    )

    return AnalyticsResult(
        fingerprint=fingerprint,
        orders=orders,
        positions=positions,
        days=days,
        charges=charges,
        charges_by_date=charges_by_date,
        statistics=stats,
        order_win_rate=order_rate,
        execution_win_rate=execution_rate,
        cumulative=cumulative,
        drawdown=drawdown,
        streaks=streaks,
        ratios=ratios,
        reports=reports,
    )


class AnalyticsCache:
    """Memoize run_analytics per execution set.

    Keyed by (fingerprint, exchange, schedule version, rolling window). The
    memo lives on the instance; two caches never share results.
    """

    def __init__(
        self,
        *,
        exchange: Exchange | None = None,
        schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
        workers: int = 1,
        rolling_window: int = 30,
    ) -> None:
        self._exchange = exchange
        self._schedule = schedule
        self._workers = workers
        self._rolling_window = rolling_window
        self._results: dict[tuple, AnalyticsResult] = {}
        self.hits = 0
        self.misses = 0

    def get(self, executions: Iterable[Execution]) -> AnalyticsResult:
        executions = list(executions)
        key = (
            execution_fingerprint(executions),
            self._exchange,
            self._schedule.version,
            self._rolling_window,
        )
        cached = self._results.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = run_analytics(
            executions,
            exchange=self._exchange,
            schedule=self._schedule,
            workers=self._workers,
            rolling_window=self._rolling_window,
        )
        self._results[key] = result
        return result

    def clear(self) -> None:
        self._results.clear()

    def __len__(self) -> int:
        return len(self._results)
