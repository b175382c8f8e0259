"""Pytest fixtures: execution builders for deterministic ledger tests."""

import itertools
from datetime import date, datetime
from typing import Callable

import pytest

from ledger_core.contracts import Exchange, Execution, InstrumentType, Side

EXPIRY = date(2025, 6, 26)


def _ts(day: int, hour: int = 9, minute: int = 30) -> datetime:
    # June 2025: the 2nd is a Monday
    return datetime(2025, 6, day, hour, minute, 0)


@pytest.fixture
def make_execution() -> Callable[..., Execution]:
    """Factory for Executions. Each call gets a fresh order and trade id unless given."""
    counter = itertools.count(1)

    def _make(
        side: str = "buy",
        quantity: int = 10,
        price: float = 100.0,
        *,
        day: int = 2,
        hour: int = 9,
        minute: int = 30,
        symbol: str = "NIFTY25JUN24000CE",
        instrument_type: InstrumentType = InstrumentType.CE,
        strike: float | None = 24000.0,
        order_id: str | None = None,
        execution_id: str | None = None,
        exchange: Exchange = Exchange.NSE,
        underlying: str = "NIFTY",
    ) -> Execution:
        n = next(counter)
        executed_at = _ts(day, hour, minute)
        return Execution(
            symbol=symbol,
            instrument_type=instrument_type,
            strike=strike,
            expiry_date=EXPIRY,
            side=Side(side),
            quantity=quantity,
            price=price,
            executed_at=executed_at,
            trade_date=executed_at.date(),
            order_id=order_id or f"O{n}",
            execution_id=execution_id or f"T{n}",
            exchange=exchange,
            underlying=underlying,
        )

    return _make


@pytest.fixture
def round_trip(make_execution) -> list[Execution]:
    """Buy 10 @ 100 then sell 10 @ 110, same day: realized P&L 100."""
    return [
        make_execution("buy", 10, 100.0, hour=9, minute=30),
        make_execution("sell", 10, 110.0, hour=10, minute=15),
    ]
