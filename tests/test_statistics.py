"""Tests for numeric guards and ledger-wide trade statistics."""

import math

import pytest

from ledger_core.cost_model import compute_charges
from ledger_core.order_aggregator import merge_executions
from ledger_core.position_engine import match_positions
from ledger_core.statistics import (
    mean,
    pearson,
    population_std,
    profit_factor,
    safe_div,
    trade_statistics,
)


class TestGuards:

    def test_safe_div(self) -> None:
        assert safe_div(10, 4) == 2.5
        assert safe_div(10, 0) == 0.0

    def test_mean(self) -> None:
        assert mean([]) == 0.0
        assert mean([1, 2, 3]) == 2.0

    def test_population_std(self) -> None:
        assert population_std([5.0]) == 0.0
        assert population_std([]) == 0.0
        assert population_std([1.0, 3.0]) == pytest.approx(1.0)
        assert population_std([1.0, 3.0], center=0.0) == pytest.approx(math.sqrt(5.0))

    def test_profit_factor(self) -> None:
        assert profit_factor(300.0, -100.0) == pytest.approx(3.0)
        assert profit_factor(100.0, 0.0) == math.inf
        assert profit_factor(0.0, 0.0) == 0.0
        assert profit_factor(0.0, -50.0) == 0.0

    def test_pearson(self) -> None:
        assert pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
        assert pearson([1, 1, 1], [1, 2, 3]) == 0.0
        assert pearson([1], [1]) == 0.0


class TestTradeStatistics:

    @pytest.fixture
    def ledger(self, make_execution):
        other = {"strike": 24100.0, "symbol": "NIFTY25JUN24100CE"}
        orders = merge_executions([
            make_execution("buy", 10, 100.0, minute=30),
            make_execution("sell", 10, 110.0, minute=40),
            make_execution("buy", 10, 100.0, minute=31, **other),
            make_execution("sell", 10, 95.0, minute=41, **other),
            make_execution("buy", 5, 80.0, minute=50, strike=24200.0, symbol="NIFTY25JUN24200CE"),
        ])
        return orders, match_positions(orders)

    def test_counts_and_pnl(self, ledger) -> None:
        orders, positions = ledger
        s = trade_statistics(orders, positions)
        assert s.total_orders == 5
        assert s.closed_positions == 2
        assert s.winning == 1
        assert s.losing == 1
        assert s.win_rate == pytest.approx(50.0)
        assert s.total_pnl == pytest.approx(50.0)
        assert s.avg_win == pytest.approx(100.0)
        assert s.avg_loss == pytest.approx(-50.0)
        assert s.max_win == pytest.approx(100.0)
        assert s.max_loss == pytest.approx(-50.0)
        assert s.profit_factor == pytest.approx(2.0)

    def test_turnover_and_charges_cover_all_orders(self, ledger) -> None:
        orders, positions = ledger
        s = trade_statistics(orders, positions)
        charges = sum(compute_charges(o).total for o in orders)
        assert s.gross_turnover == pytest.approx(1000 + 1100 + 1000 + 950 + 400)
        assert s.total_brokerage == pytest.approx(charges)
        assert s.net_pnl == pytest.approx(50.0 - charges)

    def test_only_winners(self, round_trip) -> None:
        orders = merge_executions(round_trip)
        s = trade_statistics(orders, match_positions(orders))
        assert s.profit_factor == math.inf

    def test_empty(self) -> None:
        s = trade_statistics([], [])
        assert s.total_orders == 0
        assert s.win_rate == 0.0
        assert s.profit_factor == 0.0
