"""
Human-readable ledger output for the terminal.

Every figure shown is traceable: positions list their order ids, days list
their counts. Figures are rounded here and nowhere else.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ledger_core.contracts import (
        ChargeBreakdown,
        DayRecord,
        DrawdownAnalysis,
        PerformanceRatios,
        Position,
        StreakAnalysis,
    )
    from ledger_core.pipeline import AnalyticsResult, ReportBundle
    from ledger_core.reports import GroupPerformance


def _fmt_inr(value: float, decimals: int = 0) -> str:
    """Rupees with Indian digit grouping: 12,34,567."""
    sign = "-" if value < 0 else ""
    whole, _, frac = f"{abs(value):.{decimals}f}".partition(".")
    head, tail = whole[:-3], whole[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail])
    return f"{sign}₹{grouped}" + (f".{frac}" if frac else "")


def _fmt_ratio(value: float) -> str:
    if math.isinf(value):
        return "∞"
    return f"{value:.2f}"


def _fmt_hold(minutes: float) -> str:
    if minutes < 60:
        return f"{round(minutes)}m"
    if minutes < 1440:
        hours, mins = int(minutes // 60), round(minutes % 60)
        return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"
    days, hours = int(minutes // 1440), int((minutes % 1440) // 60)
    return f"{days}d {hours}h" if hours > 0 else f"{days}d"


def format_summary(result: AnalyticsResult) -> str:
    """Headline figures for the whole ledger."""
    s = result.statistics
    if not result.orders:
        return "No executions in store. Run 'fno-ledger import' first."
    period = f"{result.days[0].date.isoformat()} -> {result.days[-1].date.isoformat()}" if result.days else "n/a"
    lines = [
        "=== F&O Ledger Summary ===",
        f"Period           : {period} ({len(result.days)} trading days)",
        f"Orders           : {s.total_orders}  ({sum(o.execution_count for o in result.orders)} executions)",
        f"Positions        : {len(result.positions)} ({s.closed_positions} closed)",
        f"Gross P&L        : {_fmt_inr(s.total_pnl, 2)}",
        f"Charges          : {_fmt_inr(s.total_brokerage, 2)}",
        f"Net P&L          : {_fmt_inr(s.net_pnl, 2)}",
        f"Turnover         : {_fmt_inr(s.gross_turnover)}",
        f"Win rate         : {s.win_rate:.1f}%  ({s.winning}W / {s.losing}L)",
        f"  order-based    : {result.order_win_rate:.1f}%",
        f"  execution-based: {result.execution_win_rate:.1f}%",
        f"Avg win / loss   : {_fmt_inr(s.avg_win, 2)} / {_fmt_inr(s.avg_loss, 2)}",
        f"Max win / loss   : {_fmt_inr(s.max_win, 2)} / {_fmt_inr(s.max_loss, 2)}",
        f"Profit factor    : {_fmt_ratio(s.profit_factor)}",
    ]
    return "\n".join(lines)


def format_charges(total: ChargeBreakdown) -> str:
    lines = [
        "--- Charges ---",
        f"  Brokerage       : {_fmt_inr(total.brokerage, 2)}",
        f"  STT             : {_fmt_inr(total.stt, 2)}",
        f"  Exchange txn    : {_fmt_inr(total.transaction_charges, 2)}",
        f"  SEBI            : {_fmt_inr(total.sebi_charges, 2)}",
        f"  Stamp duty      : {_fmt_inr(total.stamp_charges, 2)}",
        f"  GST             : {_fmt_inr(total.gst, 2)}",
        f"  Total           : {_fmt_inr(total.total, 2)}",
    ]
    return "\n".join(lines)


def format_drawdown(dd: DrawdownAnalysis) -> str:
    lines = [
        "--- Drawdown ---",
        f"  Max drawdown    : {_fmt_inr(dd.max_drawdown, 2)} ({dd.max_drawdown_pct:.1f}%)",
        f"  Current         : {_fmt_inr(dd.current_drawdown, 2)} ({dd.current_drawdown_pct:.1f}%)",
        f"  Periods         : {len(dd.periods)}  avg {_fmt_inr(dd.avg_drawdown, 2)}  avg recovery {dd.avg_recovery_days:.1f}d",
    ]
    for p in dd.periods:
        recovery = p.recovery_date.isoformat() if p.recovery_date else "open"
        lines.append(
            f"    {p.start_date.isoformat()} -> {p.end_date.isoformat()}  "
            f"peak {_fmt_inr(p.peak_value)}  trough {_fmt_inr(p.trough_value)}  "
            f"-{_fmt_inr(p.drawdown_amount)}  recovered: {recovery}"
        )
    return "\n".join(lines)


def format_streaks(st: StreakAnalysis) -> str:
    current = f"{st.current.length} {st.current.outcome.value}" if st.current else "none"
    return "\n".join([
        "--- Streaks ---",
        f"  Current         : {current}",
        f"  Longest win     : {st.longest_win}",
        f"  Longest loss    : {st.longest_loss}",
        f"  Avg win / loss  : {st.avg_win:.1f} / {st.avg_loss:.1f}",
    ])


def format_ratios(r: PerformanceRatios) -> str:
    return "\n".join([
        "--- Risk-adjusted ---",
        f"  Sharpe          : {r.sharpe:.2f}",
        f"  Sortino         : {r.sortino:.2f}",
        f"  Calmar          : {r.calmar:.2f}",
        f"  Return / max DD : {r.profit_to_max_drawdown:.2f}",
        f"  Daily mean/std  : {_fmt_inr(r.daily_mean, 2)} / {_fmt_inr(r.daily_std, 2)}",
    ])


def _format_groups(title: str, rows: Sequence[GroupPerformance]) -> list[str]:
    lines = [f"--- {title} ---"]
    if not rows:
        lines.append("  (none)")
    for row in rows:
        lines.append(
            f"  {row.label:24s} {row.positions:>4d} pos  {_fmt_inr(row.total_pnl):>14s}  "
            f"win {row.win_rate:5.1f}%  hold {_fmt_hold(row.avg_hold_minutes)}"
        )
    return lines


def format_reports(reports: ReportBundle) -> str:
    """Grouped breakdowns and behaviour flags."""
    lines: list[str] = []
    lines += _format_groups("By symbol", reports.symbols)
    lines += _format_groups("By instrument", reports.instrument_types)
    lines += _format_groups("By weekday", reports.day_of_week)
    lines += _format_groups("By hold time", reports.hold_time)
    lines += _format_groups("By session", reports.sessions)

    lines.append("--- Timing ---")
    for t in reports.timing:
        lines.append(
            f"  {t.label:>5s}  in {t.entries:>3d} avg {_fmt_inr(t.entry_avg_pnl, 2):>12s}  "
            f"out {t.exits:>3d} avg {_fmt_inr(t.exit_avg_pnl, 2):>12s}"
        )

    lines.append("--- Sectors ---")
    for s in reports.sectors:
        lines.append(
            f"  {s.sector:10s} {s.exposure_pct:5.1f}% exposure  {_fmt_inr(s.total_pnl):>12s}  "
            f"win {s.win_rate:.1f}%  ({', '.join(s.symbols)})"
        )

    sizes = reports.position_sizes
    lines.append("--- Sizing ---")
    if sizes.buckets:
        lines.append(f"  Best size bucket : {sizes.optimal_bucket}  (size/P&L corr {sizes.size_pnl_correlation:+.2f})")
    if reports.capital:
        avg_use = sum(c.utilization_pct for c in reports.capital) / len(reports.capital)
        lines.append(f"  Capital used     : avg {avg_use:.1f}% of {_fmt_inr(reports.capital[0].max_capital)}")

    lines.append("--- Monthly ---")
    for year in reports.monthly:
        months = "  ".join(f"{m.month_name} {_fmt_inr(m.net_pnl)}" for m in year.months)
        lines.append(f"  {year.year}: {months}  | total {_fmt_inr(year.net_pnl)}")

    rr = reports.risk_reward
    lines.append("--- Behaviour ---")
    lines.append(f"  Risk-reward avg : {rr.avg_ratio:.2f}  median {rr.median_ratio:.2f}  breakeven {_fmt_ratio(rr.breakeven_ratio)}")
    ot = reports.overtrading
    lines.append(
        f"  Overtrading     : {len(ot.overtrading_days)} days above {ot.threshold} orders "
        f"(avg/order {_fmt_inr(ot.overtrading_avg_pnl, 2)} vs {_fmt_inr(ot.normal_avg_pnl, 2)})"
    )
    rv = reports.revenge_trading
    lines.append(
        f"  Revenge trades  : {len(rv.revenge_positions)} ({rv.revenge_pct:.1f}%)  "
        f"win {rv.revenge_win_rate:.1f}% vs {rv.normal_win_rate:.1f}%"
    )
    bp = reports.behaviour
    lines.append(
        f"  Hold discipline : {bp.hold_pattern} (winners {_fmt_hold(bp.avg_win_hold_minutes)}, "
        f"losers {_fmt_hold(bp.avg_loss_hold_minutes)})"
    )
    lines.append(
        f"  Emotional flags : {bp.large_after_loss} oversized after loss, "
        f"{bp.rapid_fire} rapid-fire, {bp.late_entries} late entries"
    )
    for corr in reports.correlations[:5]:
        lines.append(f"  Corr {corr.symbol_a}/{corr.symbol_b}: {corr.correlation:+.2f} over {corr.common_days} days")
    return "\n".join(lines)


def format_positions(positions: Sequence[Position]) -> str:
    if not positions:
        return "No positions."
    lines = [f"{'Position':40s} {'Dir':5s} {'Qty':>6s} {'Entry':>10s} {'Exit':>10s} {'P&L':>14s}  Status"]
    for p in positions:
        direction = "LONG" if p.is_long else "SHORT"
        exit_price = f"{p.exit_price:.2f}" if p.exit_price is not None else "-"
        lines.append(
            f"{p.position_id:40s} {direction:5s} {p.max_quantity:>6d} {p.entry_price:>10.2f} "
            f"{exit_price:>10s} {_fmt_inr(p.realized_pnl, 2):>14s}  {p.status.value}"
        )
    return "\n".join(lines)


def format_days(days: Sequence[DayRecord]) -> str:
    if not days:
        return "No trading days."
    lines = [f"{'Date':10s} {'Orders':>6s} {'Execs':>6s} {'Turnover':>14s} {'Charges':>10s} {'Net P&L':>14s} {'Win%':>6s}"]
    for d in days:
        lines.append(
            f"{d.date.isoformat():10s} {d.order_count:>6d} {d.execution_count:>6d} "
            f"{_fmt_inr(d.gross_turnover):>14s} {_fmt_inr(d.brokerage, 2):>10s} "
            f"{_fmt_inr(d.net_pnl, 2):>14s} {d.order_win_rate:>5.1f}%"
        )
    return "\n".join(lines)
