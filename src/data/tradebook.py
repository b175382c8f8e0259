"""
Broker tradebook CSV -> Execution[].

Column layout (header row required):
    symbol, isin, trade_date, exchange, segment, series, trade_type, auction,
    quantity, price, trade_id, order_id, order_execution_time, expiry_date

A row that fails validation is recorded in ParseResult.errors and skipped;
only an unreadable file or a missing required column raises TradebookError.
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

from ledger_core.contracts import Exchange, Execution, InstrumentType, Side

logger = logging.getLogger("ledger.data")

REQUIRED_COLUMNS = (
    "symbol",
    "trade_date",
    "exchange",
    "segment",
    "trade_type",
    "quantity",
    "price",
    "trade_id",
    "order_id",
    "order_execution_time",
    "expiry_date",
)

# NIFTY2560524750PE: underlying, yymdd expiry, strike, type
_NUMERIC_OPTION = re.compile(r"^([A-Z]+)(\d{5})(\d+)(CE|PE)$")
# BANKNIFTY25APR51200PE: underlying, yyMON expiry, strike, type
_MONTHLY_OPTION = re.compile(r"^([A-Z]+)(\d{2}[A-Z]{3})(\d+)(CE|PE)$")
_FUTURE_SUFFIX = re.compile(r"\d+[A-Z]+FUT$")
_OPTION_SUFFIX = re.compile(r"(CE|PE)$")
_OPTION_TAIL = re.compile(r"\d+[CP]E$")


class TradebookError(Exception):
    """Raised when a tradebook file cannot be read at all."""


@dataclass(frozen=True)
class SymbolInfo:
    underlying: str
    instrument_type: InstrumentType
    strike: float | None = None
    expiry_code: str | None = None


@dataclass
class ParseResult:
    executions: list[Execution] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_rows: int = 0
    valid_rows: int = 0


def parse_symbol(symbol: str) -> SymbolInfo:
    """Decode underlying, instrument type and strike from an exchange trading symbol.

    >>> parse_symbol("NIFTY2560524750PE").strike
    24750.0
    >>> parse_symbol("NIFTY25JUNFUT").underlying
    'NIFTY'
    """
    if "FUT" in symbol:
        return SymbolInfo(_FUTURE_SUFFIX.sub("", symbol), InstrumentType.FUT)

    for pattern in (_NUMERIC_OPTION, _MONTHLY_OPTION):
        match = pattern.match(symbol)
        if match:
            underlying, expiry_code, strike, kind = match.groups()
            return SymbolInfo(underlying, InstrumentType(kind), float(int(strike)), expiry_code)

    match = _OPTION_SUFFIX.search(symbol)
    if match:
        return SymbolInfo(_OPTION_TAIL.sub("", symbol), InstrumentType(match.group(1)))

    return SymbolInfo(symbol, InstrumentType.FUT)


def _parse_date(value: str) -> date:
    return datetime.fromisoformat(value.strip()).date()


def _parse_row(row: Mapping[str, Any]) -> Execution:
    missing = [c for c in REQUIRED_COLUMNS if not str(row.get(c) or "").strip()]
    if missing:
        raise ValueError(f"missing {', '.join(missing)}")

    side_raw = row["trade_type"].strip().lower()
    if side_raw not in ("buy", "sell"):
        raise ValueError(f"trade_type must be buy or sell, got {row['trade_type']!r}")

    try:
        exchange = Exchange(row["exchange"].strip().upper())
    except ValueError:
        raise ValueError(f"unknown exchange {row['exchange']!r}") from None

    quantity = float(row["quantity"])
    if quantity != int(quantity):
        raise ValueError(f"quantity must be whole, got {row['quantity']!r}")

    symbol = row["symbol"].strip()
    info = parse_symbol(symbol)
    return Execution(
        symbol=symbol,
        underlying=info.underlying,
        instrument_type=info.instrument_type,
        strike=info.strike,
        expiry_date=_parse_date(row["expiry_date"]),
        side=Side(side_raw),
        quantity=int(quantity),
        price=float(row["price"]),
        executed_at=datetime.fromisoformat(row["order_execution_time"].strip()),
        trade_date=_parse_date(row["trade_date"]),
        order_id=row["order_id"].strip(),
        execution_id=row["trade_id"].strip(),
        exchange=exchange,
    )


def parse_rows(rows: Iterable[Mapping[str, Any]]) -> ParseResult:
    """Validate and convert dict rows. Row numbers in errors count the header as row 1."""
    result = ParseResult()
    for index, row in enumerate(rows):
        result.total_rows += 1
        try:
            result.executions.append(_parse_row(row))
            result.valid_rows += 1
        except (ValueError, TypeError, AttributeError, OverflowError) as exc:
            result.errors.append(f"Row {index + 2}: {exc}")
    return result


def load_tradebook(path: str | Path) -> ParseResult:
    """Read a tradebook CSV file.

    Raises TradebookError if the file is missing, unreadable, or lacks a
    required column in its header.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise TradebookError(f"Tradebook not found: {csv_path}")

    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            header = [h.strip() for h in reader.fieldnames or []]
            absent = [c for c in REQUIRED_COLUMNS if c not in header]
            if absent:
                raise TradebookError(f"{csv_path}: missing columns {', '.join(absent)}")
            rows = [
                {(k or "").strip(): v for k, v in row.items()}
                for row in reader
                if any((v or "").strip() for v in row.values() if isinstance(v, str))
            ]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise TradebookError(f"Failed to read {csv_path}: {exc}") from exc

    result = parse_rows(rows)
    logger.info(
        "Parsed %s: %d/%d rows valid, %d errors",
        csv_path.name, result.valid_rows, result.total_rows, len(result.errors),
    )
    return result
