"""
Order Aggregator: Execution[] -> Order[].

Executions sharing an order identifier are one logical order. Quantity and
notional value are summed; the average price is recomputed from the sums.
No filtering: a zero-quantity order is still emitted with price 0.0.
"""

from __future__ import annotations

from typing import Iterable

from ledger_core.contracts import Execution, Order


def merge_executions(executions: Iterable[Execution]) -> list[Order]:
    """Merge executions by order_id, preserving first-seen order.

    Identity fields (symbol, side, instrument, trade date, timestamp) come
    from the first execution of each group. Constituent executions are kept
    in input order for drill-down.
    """
    groups: dict[str, list[Execution]] = {}
    for ex in executions:
        groups.setdefault(ex.order_id, []).append(ex)

    return [_build_order(order_id, members) for order_id, members in groups.items()]


def _build_order(order_id: str, members: list[Execution]) -> Order:
    first = members[0]
    quantity = sum(ex.quantity for ex in members)
    value = sum(ex.value for ex in members)
    price = value / quantity if quantity > 0 else 0.0

    return Order(
        order_id=order_id,
        symbol=first.symbol,
        underlying=first.underlying or first.symbol,
        instrument_type=first.instrument_type,
        strike=first.strike,
        expiry_date=first.expiry_date,
        side=first.side,
        exchange=first.exchange,
        quantity=quantity,
        value=value,
        price=price,
        executed_at=first.executed_at,
        trade_date=first.trade_date,
        executions=tuple(members),
    )
