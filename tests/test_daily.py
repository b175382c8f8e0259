"""Tests for the Temporal Aggregator: orders + positions -> DayRecord[]."""

from datetime import date

import pytest

from ledger_core.cost_model import compute_charges
from ledger_core.daily import aggregate_win_rates, build_day_records
from ledger_core.contracts import DayRecord
from ledger_core.order_aggregator import merge_executions
from ledger_core.position_engine import match_positions


def _days(executions):
    orders = merge_executions(executions)
    return orders, build_day_records(orders, match_positions(orders))


class TestSingleDay:

    def test_round_trip_day(self, round_trip) -> None:
        orders, days = _days(round_trip)
        assert len(days) == 1
        day = days[0]
        charges = sum(compute_charges(o).total for o in orders)
        assert day.date == date(2025, 6, 2)
        assert day.order_count == 2
        assert day.execution_count == 2
        assert day.gross_turnover == pytest.approx(2100.0)
        assert day.realized_pnl == pytest.approx(100.0)
        assert day.brokerage == pytest.approx(charges)
        assert day.net_pnl == pytest.approx(100.0 - charges)
        assert day.winning_orders == 1
        assert day.order_win_rate == 100.0

    def test_breakeven_position_is_not_classified(self, make_execution) -> None:
        _, days = _days([make_execution("buy", 10, 100.0), make_execution("sell", 10, 100.0, minute=40)])
        assert days[0].winning_orders == 0
        assert days[0].losing_orders == 0
        assert days[0].order_win_rate == 0.0

    def test_execution_weighted_counts(self, make_execution) -> None:
        _, days = _days([
            make_execution("buy", 5, 100.0, order_id="A"),
            make_execution("buy", 5, 100.0, order_id="A"),
            make_execution("sell", 10, 90.0, minute=45),
        ])
        assert days[0].losing_orders == 1
        assert days[0].losing_executions == 3
        assert days[0].execution_win_rate == 0.0

    def test_empty(self) -> None:
        assert build_day_records([], []) == []


class TestApportionment:

    def test_pnl_split_across_spanned_dates(self, make_execution) -> None:
        _, days = _days([
            make_execution("buy", 10, 100.0, day=2),
            make_execution("sell", 5, 120.0, day=3),
            make_execution("sell", 5, 140.0, day=4),
        ])
        assert [d.date for d in days] == [date(2025, 6, 2), date(2025, 6, 3), date(2025, 6, 4)]
        for d in days:
            assert d.realized_pnl == pytest.approx(100.0)

    def test_outcome_on_last_date_only(self, make_execution) -> None:
        _, days = _days([
            make_execution("buy", 10, 100.0, day=2),
            make_execution("sell", 5, 120.0, day=3),
            make_execution("sell", 5, 140.0, day=4),
        ])
        assert [d.winning_orders for d in days] == [0, 0, 1]

    def test_records_sorted_by_date(self, make_execution) -> None:
        _, days = _days([
            make_execution("buy", 1, 100.0, day=5),
            make_execution("buy", 1, 100.0, day=3, strike=24100.0, symbol="NIFTY25JUN24100CE"),
        ])
        assert [d.date.day for d in days] == [3, 5]


class TestAggregateWinRates:

    def test_rates_across_days(self) -> None:
        days = [
            DayRecord(date=date(2025, 6, 2), winning_orders=3, losing_orders=1, winning_executions=3, losing_executions=5),
            DayRecord(date=date(2025, 6, 3), winning_orders=0, losing_orders=4, winning_executions=0, losing_executions=0),
        ]
        order_rate, execution_rate = aggregate_win_rates(days)
        assert order_rate == pytest.approx(37.5)
        assert execution_rate == pytest.approx(37.5)

    def test_no_decided_positions(self) -> None:
        assert aggregate_win_rates([]) == (0.0, 0.0)
