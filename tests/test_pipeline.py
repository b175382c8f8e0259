"""Tests for the pipeline orchestrator, execution fingerprint and analytics cache."""

from dataclasses import replace

import pytest

from ledger_core.contracts import PositionStatus
from ledger_core.cost_model import compute_charges
from ledger_core.pipeline import AnalyticsCache, execution_fingerprint, run_analytics


class TestRunAnalytics:

    def test_end_to_end_round_trip(self, round_trip) -> None:
        result = run_analytics(round_trip)
        charges = sum(compute_charges(o).total for o in result.orders)

        assert len(result.orders) == 2
        assert len(result.positions) == 1
        assert result.positions[0].status == PositionStatus.CLOSED
        assert result.positions[0].realized_pnl == pytest.approx(100.0)
        assert result.statistics.total_pnl == pytest.approx(100.0)
        assert result.statistics.win_rate == pytest.approx(100.0)
        assert len(result.days) == 1
        assert result.days[0].net_pnl == pytest.approx(100.0 - charges)
        assert result.charges.total == pytest.approx(charges)
        assert result.order_win_rate == 100.0
        assert result.cumulative[-1][1] == pytest.approx(100.0 - charges)

    def test_report_bundle_covers_ledger(self, round_trip) -> None:
        reports = run_analytics(round_trip).reports
        assert [s.label for s in reports.sessions] == ["Opening (09:15-10:30)"]
        assert [(t.hour, t.entries, t.exits) for t in reports.timing] == [(9, 1, 0), (10, 0, 1)]
        assert reports.position_sizes.optimal_bucket == "Large (80-100%)"
        assert len(reports.capital) == 1
        assert reports.capital[0].utilization_pct == pytest.approx(50.0)
        assert [s.sector for s in reports.sectors] == ["Index"]
        assert reports.behaviour.hold_pattern == "Balanced"

    def test_empty_input(self) -> None:
        result = run_analytics([])
        assert result.orders == []
        assert result.positions == []
        assert result.days == []
        assert result.drawdown.max_drawdown == 0.0
        assert result.ratios.sharpe == 0.0
        assert result.streaks.current is None
        assert result.reports.symbols == []
        assert result.reports.rolling == []
        assert result.reports.sectors == []
        assert result.reports.capital == []

    def test_workers_do_not_change_result(self, make_execution) -> None:
        fills = []
        for i, strike in enumerate([24000.0, 24100.0, 24200.0]):
            symbol = f"NIFTY25JUN{int(strike)}CE"
            fills.append(make_execution("buy", 10, 100.0 + i, minute=i, strike=strike, symbol=symbol))
            fills.append(make_execution("sell", 10, 95.0 + 3 * i, minute=10 + i, strike=strike, symbol=symbol))
        seq = run_analytics(fills, workers=1)
        par = run_analytics(fills, workers=3)
        assert [p.position_id for p in par.positions] == [p.position_id for p in seq.positions]
        assert par.statistics == seq.statistics


class TestFingerprint:

    def test_order_independent(self, round_trip) -> None:
        assert execution_fingerprint(round_trip) == execution_fingerprint(list(reversed(round_trip)))

    def test_sensitive_to_fields(self, round_trip) -> None:
        changed = [round_trip[0], replace(round_trip[1], price=111.0)]
        assert execution_fingerprint(changed) != execution_fingerprint(round_trip)

    def test_hex_digest(self) -> None:
        fp = execution_fingerprint([])
        assert len(fp) == 64
        int(fp, 16)


class TestAnalyticsCache:

    def test_hit_on_same_set(self, round_trip) -> None:
        cache = AnalyticsCache()
        first = cache.get(round_trip)
        second = cache.get(list(reversed(round_trip)))
        assert second is first
        assert cache.hits == 1
        assert cache.misses == 1
        assert len(cache) == 1

    def test_miss_on_changed_set(self, round_trip, make_execution) -> None:
        cache = AnalyticsCache()
        cache.get(round_trip)
        cache.get(round_trip + [make_execution("buy", 1, 50.0, day=3)])
        assert cache.misses == 2
        assert len(cache) == 2

    def test_instances_do_not_share(self, round_trip) -> None:
        a, b = AnalyticsCache(), AnalyticsCache()
        a.get(round_trip)
        assert len(b) == 0
        b.get(round_trip)
        assert b.misses == 1

    def test_clear(self, round_trip) -> None:
        cache = AnalyticsCache()
        cache.get(round_trip)
        cache.clear()
        assert len(cache) == 0
