"""
Position Matching Engine: Order[] -> Position[] via FIFO inventory matching.

Responsibilities:
    - Chronological replay of orders (stable sort on execution time)
    - Per instrument key, close opposite-side open positions oldest first
    - Open a new position for any unmatched remainder
    - Closed positions are terminal and leave the matching pool

FIFO ordering only holds within an instrument key, so keys are independent
partitions. With workers > 1 each partition is matched on a thread pool and
the results are merged back into global creation order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from ledger_core.contracts import (
    InstrumentKey,
    Order,
    Position,
    PositionStatus,
    Side,
)

logger = logging.getLogger("ledger.engine")


def _sorted_orders(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.executed_at)


def _close_against(position: Position, order: Order, quantity: int) -> None:
    """Apply `quantity` of an opposing order to an open position."""
    share = (quantity / order.quantity) * order.value
    position.orders.append(order)
    position.remaining_quantity -= quantity

    if order.side == Side.BUY:
        # buying back a short
        position.total_buy_value += share
        position.realized_pnl += quantity * (position.entry_price - order.price)
    else:
        position.total_sell_value += share
        position.realized_pnl += quantity * (order.price - position.entry_price)

    if position.remaining_quantity == 0:
        position.status = PositionStatus.CLOSED
        position.closed_at = order.executed_at
        position.exit_price = order.price
        position.net_quantity = 0
        if order.side == Side.BUY:
            position.avg_buy_price = position.total_buy_value / position.max_quantity
        else:
            position.avg_sell_price = position.total_sell_value / position.max_quantity
    elif order.side == Side.BUY:
        position.net_quantity = -position.remaining_quantity
    else:
        position.net_quantity = position.remaining_quantity


def _open_position(position_id: str, order: Order, quantity: int) -> Position:
    share = (quantity / order.quantity) * order.value
    is_buy = order.side == Side.BUY
    return Position(
        position_id=position_id,
        symbol=order.symbol,
        underlying=order.underlying,
        instrument_type=order.instrument_type,
        strike=order.strike,
        expiry_date=order.expiry_date,
        net_quantity=quantity if is_buy else -quantity,
        max_quantity=quantity,
        remaining_quantity=quantity,
        entry_price=order.price,
        opened_at=order.executed_at,
        avg_buy_price=order.price if is_buy else 0.0,
        avg_sell_price=0.0 if is_buy else order.price,
        total_buy_value=share if is_buy else 0.0,
        total_sell_value=0.0 if is_buy else share,
        orders=[order],
    )


def _match_sequence(
    sequenced: Sequence[tuple[int, Order]],
    counters: dict[InstrumentKey, int] | None = None,
) -> list[tuple[int, Position]]:
    """Match pre-sorted (sequence, order) pairs.

    Returns (creating order sequence, position) pairs in creation order.
    Open-position lists and id counters are local to this call.
    """
    open_by_key: dict[InstrumentKey, list[Position]] = {}
    counters = {} if counters is None else counters
    created: list[tuple[int, Position]] = []

    for seq, order in sequenced:
        key = order.key
        book = open_by_key.setdefault(key, [])
        remaining = order.quantity

        # Buys close shorts, sells close longs. Oldest first.
        closing_longs = order.side == Side.SELL
        for position in book:
            if remaining <= 0:
                break
            if position.remaining_quantity <= 0:
                continue
            if (position.net_quantity > 0) != closing_longs:
                continue
            quantity = min(position.remaining_quantity, remaining)
            _close_against(position, order, quantity)
            remaining -= quantity

        if remaining > 0:
            counters[key] = counters.get(key, 0) + 1
            position_id = f"{key.label()}#{counters[key]}"
            position = _open_position(position_id, order, remaining)
            book.append(position)
            created.append((seq, position))

        open_by_key[key] = [p for p in book if p.remaining_quantity > 0]

    return created


def match_positions(orders: Iterable[Order], *, workers: int = 1) -> list[Position]:
    """Replay orders chronologically and return every Position ever created.

    Parameters
    ----------
    orders:
        Merged orders, any order. Sorted by execution time here (stable).
    workers:
        Number of threads. Values > 1 fan out one task per instrument key;
        the returned ledger is identical to the single-threaded result.

    Returns
    -------
    list[Position]
        Open and closed positions in creation order.
    """
    sequenced = list(enumerate(_sorted_orders(orders)))
    if not sequenced:
        return []

    if workers <= 1:
        created = _match_sequence(sequenced)
    else:
        partitions: dict[InstrumentKey, list[tuple[int, Order]]] = {}
        for seq, order in sequenced:
            partitions.setdefault(order.key, []).append((seq, order))
        logger.debug("Matching %d instrument keys on %d workers", len(partitions), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_match_sequence, partitions.values()))
        # fan-in: each position carries the sequence of the order that opened it
        created = sorted((pair for part in results for pair in part), key=lambda pair: pair[0])

    return [position for _, position in created]


def open_positions(positions: Iterable[Position]) -> list[Position]:
    return [p for p in positions if not p.is_closed]


def closed_positions(positions: Iterable[Position]) -> list[Position]:
    return [p for p in positions if p.is_closed]
