"""
Cost Model: Order -> ChargeBreakdown (India F&O fee schedule).

Pure formula evaluator. No state, no error conditions.

    brokerage   FUT min(value * pct, cap)   CE/PE flat
    STT         sell side only
    txn charges exchange- and instrument-dependent rate on value
    SEBI        per crore, side-independent
    stamp       buy side only, min(rate * value, cap per crore)
    GST         on brokerage + SEBI + txn charges
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from config.fee_schedule import CRORE, DEFAULT_FEE_SCHEDULE, FeeSchedule, InstrumentFees
from ledger_core.contracts import (
    ChargeBreakdown,
    Exchange,
    InstrumentType,
    Order,
    Side,
)


def _tariff(instrument_type: InstrumentType | None, schedule: FeeSchedule) -> InstrumentFees | None:
    if instrument_type == InstrumentType.FUT:
        return schedule.futures
    if instrument_type in (InstrumentType.CE, InstrumentType.PE):
        return schedule.options
    return None


def compute_charges(
    order: Order,
    exchange: Exchange | None = None,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> ChargeBreakdown:
    """Evaluate every charge component for one order.

    Parameters
    ----------
    order:
        Merged order. Only value, side, instrument type and exchange are read.
    exchange:
        Exchange override. Defaults to the order's own exchange.
    schedule:
        Tariff. Defaults to the built-in India F&O schedule.

    Unknown instrument types pay no brokerage, STT, txn charges or stamp duty.
    """
    exchange = exchange or order.exchange
    value = order.value
    fees = _tariff(order.instrument_type, schedule)

    brokerage = 0.0
    stt = 0.0
    transaction_charges = 0.0
    stamp_charges = 0.0

    if fees is not None:
        if fees.brokerage_flat is not None:
            brokerage = fees.brokerage_flat
        else:
            brokerage = min(value * fees.brokerage_pct, fees.brokerage_cap)

        if order.side == Side.SELL:
            stt = value * fees.stt_sell_pct

        rate = fees.txn_nse_pct if exchange == Exchange.NSE else fees.txn_bse_pct
        transaction_charges = value * rate

        if order.side == Side.BUY:
            stamp_charges = min(value * fees.stamp_buy_pct, value / CRORE * fees.stamp_cap_per_crore)

    sebi_charges = value / CRORE * schedule.sebi_per_crore
    gst = (brokerage + sebi_charges + transaction_charges) * schedule.gst_rate
    total = brokerage + stt + transaction_charges + sebi_charges + stamp_charges + gst

    return ChargeBreakdown(
        brokerage=brokerage,
        stt=stt,
        transaction_charges=transaction_charges,
        sebi_charges=sebi_charges,
        stamp_charges=stamp_charges,
        gst=gst,
        total=total,
    )


def charge_breakdown(
    orders: Iterable[Order],
    exchange: Exchange | None = None,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> tuple[ChargeBreakdown, list[tuple[date, ChargeBreakdown]]]:
    """Summed charges over all orders plus a per-trade-date breakdown (date ascending)."""
    total = ChargeBreakdown.zero()
    by_date: dict[date, ChargeBreakdown] = {}
    for order in orders:
        charges = compute_charges(order, exchange, schedule)
        total = total + charges
        by_date[order.trade_date] = by_date.get(order.trade_date, ChargeBreakdown.zero()) + charges
    return total, sorted(by_date.items())
