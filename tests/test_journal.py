"""Tests for journal writer. Append-only JSONL export of the ledger."""

import json
from pathlib import Path

from journal.writer import JournalWriter
from ledger_core.pipeline import run_analytics


def _read(path: Path) -> list[dict]:
    with open(path) as f:
        return [json.loads(line) for line in f]


def test_export_writes_positions_days_and_summary(tmp_path: Path, round_trip) -> None:
    path = tmp_path / "out" / "ledger.jsonl"
    result = run_analytics(round_trip)
    lines = JournalWriter(path).export(result)

    records = _read(path)
    assert lines == len(records) == 3
    assert [r["event"] for r in records] == ["position", "day", "summary"]

    position = records[0]
    assert position["status"] == "closed"
    assert position["realized_pnl"] == 100.0
    assert position["order_ids"] == [o.order_id for o in result.orders]
    assert "orders" not in position
    assert position["opened_at"] == "2025-06-02T09:30:00"

    day = records[1]
    assert day["date"] == "2025-06-02"
    assert day["order_count"] == 2

    summary = records[2]
    assert summary["fingerprint"] == result.fingerprint
    assert summary["statistics"]["profit_factor"] == "inf"
    assert summary["order_win_rate"] == 100.0


def test_journal_is_append_only(tmp_path: Path, round_trip) -> None:
    path = tmp_path / "ledger.jsonl"
    result = run_analytics(round_trip)
    j = JournalWriter(path)
    j.export(result)
    j.export(result)
    assert len(_read(path)) == 6
    assert j.lines_written == 6


def test_echo_stdout(tmp_path: Path, round_trip, capsys) -> None:
    result = run_analytics(round_trip)
    JournalWriter(tmp_path / "ledger.jsonl", echo_stdout=True).day(result.days[0])
    out = capsys.readouterr().out
    assert json.loads(out)["event"] == "day"
