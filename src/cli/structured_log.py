"""
Structured JSON event logger for batch observability.

Emits one JSON object per line to stderr. Events are designed to be
parsed by log aggregators (Grafana Loki, CloudWatch, ELK).

Optional webhook: when configured, run-level events (analytics_complete,
error) are POSTed to the URL.
"""

from __future__ import annotations

import json
import logging
import sys
import urllib.request
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("ledger.events")


class StructuredEventLogger:
    """Emit structured JSON events to stderr and optional webhook."""

    def __init__(
        self,
        account: str,
        *,
        enabled: bool = True,
        webhook_url: str = "",
        stream: Any = None,
    ) -> None:
        self._account = account
        self._enabled = enabled
        self._webhook_url = webhook_url.strip()
        self._stream = stream or sys.stderr
        self._ALERT_EVENTS = {
            "analytics_complete",
            "error",
        }

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "account": self._account,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record) + "\n")
            self._stream.flush()

        if self._webhook_url and event_type in self._ALERT_EVENTS:
            self._post_webhook(record)

        return record

    def _post_webhook(self, record: dict) -> None:
        try:
            data = json.dumps(record).encode("utf-8")
            req = urllib.request.Request(
                self._webhook_url,
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )
            urllib.request.urlopen(req, timeout=5)
        except Exception as exc:
            logger.warning("Webhook POST failed: %s", exc)

    def import_start(self, source: str) -> dict:
        return self._emit("import_start", source=source)

    def import_complete(self, total_rows: int, valid_rows: int, errors: int, new_executions: int) -> dict:
        return self._emit(
            "import_complete",
            total_rows=total_rows,
            valid_rows=valid_rows,
            errors=errors,
            new_executions=new_executions,
        )

    def analytics_complete(
        self,
        fingerprint: str,
        positions: int,
        days: int,
        net_pnl: float,
    ) -> dict:
        return self._emit(
            "analytics_complete",
            fingerprint=fingerprint,
            positions=positions,
            days=days,
            net_pnl=round(net_pnl, 2),
        )

    def export_complete(self, path: str, lines: int) -> dict:
        return self._emit("export_complete", path=path, lines=lines)

    def error(self, message: str, detail: str = "") -> dict:
        return self._emit("error", message=message, detail=detail)
