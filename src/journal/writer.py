"""
Structured ledger export: append-only JSON lines, one event per position, day and summary.
"""

import json
import math
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from ledger_core.contracts import DayRecord, Position


def _serialize(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float) and math.isinf(obj):
        # JSON has no infinity
        return "inf" if obj > 0 else "-inf"
    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        return {k: _serialize(v) for k, v in vars(obj).items() if not k.startswith("_")}
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize(x) for x in obj]
    return obj


class JournalWriter:
    """Append-only journal. Each line is a JSON object with event type and payload."""

    def __init__(self, path: str | Path, *, echo_stdout: bool = False) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._echo = echo_stdout
        self.lines_written = 0

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, event_type: str, payload: dict) -> None:
        record = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event_type, **payload}
        line = json.dumps(_serialize(record)) + "\n"
        with open(self._path, "a") as f:
            f.write(line)
        self.lines_written += 1
        if self._echo:
            print(line.rstrip())

    def position(self, position: Position, **extra: Any) -> None:
        # orders flattened to ids; full drill-down stays in the execution store
        payload = {k: v for k, v in vars(position).items() if k != "orders"}
        payload["order_ids"] = [o.order_id for o in position.orders]
        self._write("position", {**payload, **extra})

    def day(self, day: DayRecord, **extra: Any) -> None:
        self._write("day", {**vars(day), **extra})

    def summary(self, fingerprint: str, statistics: Any, drawdown: Any, ratios: Any, **extra: Any) -> None:
        self._write(
            "summary",
            {
                "fingerprint": fingerprint,
                "statistics": statistics,
                "max_drawdown": drawdown.max_drawdown,
                "max_drawdown_pct": drawdown.max_drawdown_pct,
                "current_drawdown": drawdown.current_drawdown,
                "ratios": ratios,
                **extra,
            },
        )

    def export(self, result: Any) -> int:
        """Write every position, every day, then one summary. Returns lines written."""
        start = self.lines_written
        for position in result.positions:
            self.position(position)
        for day in result.days:
            self.day(day)
        self.summary(
            result.fingerprint,
            result.statistics,
            result.drawdown,
            result.ratios,
            order_win_rate=result.order_win_rate,
            execution_win_rate=result.execution_win_rate,
        )
        return self.lines_written - start
