"""Tests for Cost Model: Order -> ChargeBreakdown."""

from dataclasses import replace
from datetime import date

import pytest

from config.fee_schedule import DEFAULT_FEE_SCHEDULE
from ledger_core.contracts import ChargeBreakdown, Exchange, InstrumentType
from ledger_core.cost_model import charge_breakdown, compute_charges
from ledger_core.order_aggregator import merge_executions


def _order(make_execution, *args, **kwargs):
    return merge_executions([make_execution(*args, **kwargs)])[0]


def _future(make_execution, side: str, quantity: int, price: float, **kwargs):
    return _order(
        make_execution, side, quantity, price,
        symbol="NIFTY25JUNFUT", instrument_type=InstrumentType.FUT, strike=None, **kwargs,
    )


class TestOptions:

    def test_buy_option(self, make_execution) -> None:
        c = compute_charges(_order(make_execution, "buy", 10, 100.0))
        assert c.brokerage == 20.0
        assert c.stt == 0.0
        assert c.transaction_charges == pytest.approx(1000 * 0.0003503)
        assert c.stamp_charges == pytest.approx(0.03)
        assert c.sebi_charges == pytest.approx(0.001)
        assert c.gst == pytest.approx((20 + 0.001 + 0.3503) * 0.18)
        assert c.total == pytest.approx(24.044534)

    def test_sell_option_pays_stt_not_stamp(self, make_execution) -> None:
        c = compute_charges(_order(make_execution, "sell", 10, 110.0))
        assert c.stt == pytest.approx(1.1)
        assert c.stamp_charges == 0.0
        assert c.brokerage == 20.0

    def test_bse_rate(self, make_execution) -> None:
        c = compute_charges(_order(make_execution, "buy", 10, 100.0, exchange=Exchange.BSE))
        assert c.transaction_charges == pytest.approx(1000 * 0.000325)

    def test_exchange_override(self, make_execution) -> None:
        order = _order(make_execution, "buy", 10, 100.0)
        c = compute_charges(order, Exchange.BSE)
        assert c.transaction_charges == pytest.approx(1000 * 0.000325)


class TestFutures:

    def test_brokerage_capped(self, make_execution) -> None:
        c = compute_charges(_future(make_execution, "buy", 100, 10_000.0))
        assert c.brokerage == 20.0

    def test_brokerage_percentage_below_cap(self, make_execution) -> None:
        c = compute_charges(_future(make_execution, "buy", 1, 10_000.0))
        assert c.brokerage == pytest.approx(3.0)

    def test_stamp_buy_side(self, make_execution) -> None:
        c = compute_charges(_future(make_execution, "buy", 100, 10_000.0))
        assert c.stamp_charges == pytest.approx(20.0)

    def test_stt_sell_side(self, make_execution) -> None:
        c = compute_charges(_future(make_execution, "sell", 100, 10_000.0))
        assert c.stt == pytest.approx(200.0)
        assert c.stamp_charges == 0.0

    def test_futures_bse_has_no_txn_charge(self, make_execution) -> None:
        c = compute_charges(_future(make_execution, "buy", 1, 10_000.0, exchange=Exchange.BSE))
        assert c.transaction_charges == 0.0


class TestBreakdown:

    def test_total_is_sum_of_components(self, make_execution) -> None:
        c = compute_charges(_order(make_execution, "sell", 75, 212.35))
        parts = c.brokerage + c.stt + c.transaction_charges + c.sebi_charges + c.stamp_charges + c.gst
        assert c.total == pytest.approx(parts)

    def test_custom_schedule(self, make_execution) -> None:
        schedule = replace(DEFAULT_FEE_SCHEDULE, options=replace(DEFAULT_FEE_SCHEDULE.options, brokerage_flat=0.0))
        c = compute_charges(_order(make_execution, "buy", 10, 100.0), schedule=schedule)
        assert c.brokerage == 0.0

    def test_charge_breakdown_by_date(self, make_execution) -> None:
        orders = merge_executions([
            make_execution("buy", 10, 100.0, day=3),
            make_execution("sell", 10, 110.0, day=2),
            make_execution("sell", 10, 110.0, day=3),
        ])
        total, by_date = charge_breakdown(orders)
        assert [d for d, _ in by_date] == [date(2025, 6, 2), date(2025, 6, 3)]
        assert total.total == pytest.approx(sum(b.total for _, b in by_date))
        assert total.brokerage == pytest.approx(60.0)

    def test_empty_breakdown(self) -> None:
        total, by_date = charge_breakdown([])
        assert total == ChargeBreakdown.zero()
        assert by_date == []
