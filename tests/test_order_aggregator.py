"""Tests for Order Aggregator: Execution[] -> Order[]."""

from datetime import date, datetime

import pytest

from ledger_core.contracts import Execution, InstrumentType, Side
from ledger_core.order_aggregator import merge_executions


class TestMerge:

    def test_fills_sharing_order_id_merge(self, make_execution) -> None:
        orders = merge_executions([
            make_execution("buy", 10, 100.0, order_id="A", minute=30),
            make_execution("buy", 20, 103.0, order_id="A", minute=31),
        ])
        assert len(orders) == 1
        order = orders[0]
        assert order.quantity == 30
        assert order.value == pytest.approx(3060.0)
        assert order.price == pytest.approx(102.0)
        assert order.execution_count == 2
        assert order.executed_at == datetime(2025, 6, 2, 9, 30)

    def test_first_seen_order_preserved(self, make_execution) -> None:
        orders = merge_executions([
            make_execution(order_id="B"),
            make_execution(order_id="A"),
            make_execution(order_id="B"),
        ])
        assert [o.order_id for o in orders] == ["B", "A"]
        assert orders[0].execution_count == 2

    def test_value_is_sum_of_fills(self, make_execution) -> None:
        fills = [make_execution("sell", q, p, order_id="X") for q, p in [(25, 80.5), (50, 81.0), (25, 79.0)]]
        order = merge_executions(fills)[0]
        assert order.value == pytest.approx(sum(f.quantity * f.price for f in fills))
        assert order.side == Side.SELL

    def test_zero_quantity_order_has_zero_price(self, make_execution) -> None:
        order = merge_executions([make_execution(quantity=0, price=100.0)])[0]
        assert order.quantity == 0
        assert order.price == 0.0

    def test_empty_input(self) -> None:
        assert merge_executions([]) == []


class TestIdentityFields:

    def test_underlying_falls_back_to_symbol(self) -> None:
        ex = Execution(
            symbol="BANKNIFTY25JUNFUT",
            instrument_type=InstrumentType.FUT,
            strike=None,
            expiry_date=date(2025, 6, 26),
            side=Side.BUY,
            quantity=30,
            price=56000.0,
            executed_at=datetime(2025, 6, 2, 9, 15),
            trade_date=date(2025, 6, 2),
            order_id="F1",
            execution_id="T1",
        )
        order = merge_executions([ex])[0]
        assert order.underlying == "BANKNIFTY25JUNFUT"
        assert order.key.strike == 0.0

    def test_executions_kept_for_drill_down(self, make_execution) -> None:
        fills = [make_execution(order_id="A"), make_execution(order_id="A")]
        order = merge_executions(fills)[0]
        assert order.executions == tuple(fills)
