"""
Persist and load imported executions (SQLite).

Executions are keyed by execution_id; re-importing the same tradebook is a
no-op. The ledger is always rebuilt from the full stored set.
"""

import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Sequence

from ledger_core.contracts import Exchange, Execution, InstrumentType, Side


class ExecutionStore:
    """SQLite-backed execution storage. One file per path."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self._path))

    def _init_schema(self) -> None:
        with self._conn() as c:
            c.execute(
                """
                CREATE TABLE IF NOT EXISTS executions (
                    execution_id TEXT PRIMARY KEY,
                    order_id TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    underlying TEXT NOT NULL,
                    instrument_type TEXT NOT NULL,
                    strike REAL,
                    expiry_date TEXT NOT NULL,
                    side TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    price REAL NOT NULL,
                    executed_at TEXT NOT NULL,
                    trade_date TEXT NOT NULL,
                    exchange TEXT NOT NULL
                )
                """
            )
            c.execute("CREATE INDEX IF NOT EXISTS idx_exec_time ON executions (executed_at)")

    def write_executions(self, executions: Sequence[Execution]) -> int:
        """Upsert executions (by execution_id). Returns the number of new rows."""
        before = self.count_executions()
        with self._conn() as c:
            for ex in executions:
                c.execute(
                    """
                    INSERT OR REPLACE INTO executions (
                        execution_id, order_id, symbol, underlying, instrument_type, strike,
                        expiry_date, side, quantity, price, executed_at, trade_date, exchange
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        ex.execution_id,
                        ex.order_id,
                        ex.symbol,
                        ex.underlying,
                        ex.instrument_type.value,
                        ex.strike,
                        ex.expiry_date.isoformat(),
                        ex.side.value,
                        ex.quantity,
                        ex.price,
                        ex.executed_at.isoformat(),
                        ex.trade_date.isoformat(),
                        ex.exchange.value,
                    ),
                )
        return self.count_executions() - before

    def get_executions(
        self,
        *,
        since: date | None = None,
        until: date | None = None,
        symbol: str | None = None,
    ) -> list[Execution]:
        """Return executions in ascending execution-time order. Date bounds are inclusive."""
        with self._conn() as c:
            q = (
                "SELECT execution_id, order_id, symbol, underlying, instrument_type, strike, "
                "expiry_date, side, quantity, price, executed_at, trade_date, exchange "
                "FROM executions WHERE 1 = 1"
            )
            params: list = []
            if since is not None:
                q += " AND trade_date >= ?"
                params.append(since.isoformat())
            if until is not None:
                q += " AND trade_date <= ?"
                params.append(until.isoformat())
            if symbol is not None:
                q += " AND symbol = ?"
                params.append(symbol)
            q += " ORDER BY executed_at ASC, execution_id ASC"
            rows = c.execute(q, params).fetchall()
        return self._rows_to_executions(rows)

    def count_executions(self) -> int:
        with self._conn() as c:
            row = c.execute("SELECT COUNT(*) FROM executions").fetchone()
        return row[0] if row else 0

    def date_range(self) -> tuple[date, date] | None:
        """First and last stored trade date, or None when empty."""
        with self._conn() as c:
            row = c.execute("SELECT MIN(trade_date), MAX(trade_date) FROM executions").fetchone()
        if not row or row[0] is None:
            return None
        return date.fromisoformat(row[0]), date.fromisoformat(row[1])

    def clear(self) -> None:
        with self._conn() as c:
            c.execute("DELETE FROM executions")

    def _rows_to_executions(self, rows: list) -> list[Execution]:
        out: list[Execution] = []
        for (
            execution_id, order_id, symbol, underlying, kind, strike,
            expiry, side, qty, price, executed_at, trade_date, exchange,
        ) in rows:
            # SQLite has no native date type; we store ISO strings
            out.append(
                Execution(
                    symbol=symbol,
                    underlying=underlying,
                    instrument_type=InstrumentType(kind),
                    strike=strike,
                    expiry_date=date.fromisoformat(expiry),
                    side=Side(side),
                    quantity=qty,
                    price=price,
                    executed_at=datetime.fromisoformat(executed_at),
                    trade_date=date.fromisoformat(trade_date),
                    order_id=order_id,
                    execution_id=execution_id,
                    exchange=Exchange(exchange),
                )
            )
        return out
