"""Tests for CLI commands using click CliRunner. No network; uses a fixture tradebook."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from cli.main import cli

TRADEBOOK = """symbol,isin,trade_date,exchange,segment,series,trade_type,auction,quantity,price,trade_id,order_id,order_execution_time,expiry_date
NIFTY2560524750PE,,2025-06-02,NSE,FO,OPTIDX,buy,false,75,120.50,T1,O1,2025-06-02T09:20:00,2025-06-05
NIFTY2560524750PE,,2025-06-02,NSE,FO,OPTIDX,sell,false,75,130.50,T2,O2,2025-06-02T10:05:00,2025-06-05
BANKNIFTY25JUN56000CE,,2025-06-03,NSE,FO,OPTIDX,buy,false,30,300.00,T3,O3,2025-06-03T11:00:00,2025-06-26
BANKNIFTY25JUN56000CE,,2025-06-03,NSE,FO,OPTIDX,sell,false,30,280.00,T4,O4,2025-06-03T13:30:00,2025-06-26
NIFTY25JUNFUT,,2025-06-04,NSE,FO,FUTIDX,buy,false,75,24800.00,T5,O5,2025-06-04T09:30:00,2025-06-26
NIFTY25JUNFUT,,2025-06-04,NSE,FO,FUTIDX,hold,false,75,24800.00,T6,O6,2025-06-04T09:31:00,2025-06-26
"""


@pytest.fixture
def tmp_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Write a temp config.yaml pointing the store and journal into tmp_path."""
    monkeypatch.delenv("FNO_LEDGER_DB", raising=False)
    monkeypatch.delenv("FNO_LEDGER_EXCHANGE", raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"""
account: test
data:
  db_path: "{tmp_path / 'executions.db'}"
  tradebook_dir: "{tmp_path / 'tradebooks'}"
analytics:
  workers: 2
  rolling_window: 2
journal:
  path: "{tmp_path / 'ledger.jsonl'}"
alerting:
  structured_logs: false
"""
    )
    return config_path


@pytest.fixture
def tradebook(tmp_path: Path) -> Path:
    path = tmp_path / "tradebook.csv"
    path.write_text(TRADEBOOK)
    return path


@pytest.fixture
def imported(tmp_config: Path, tradebook: Path) -> Path:
    result = CliRunner().invoke(cli, ["--config", str(tmp_config), "import", str(tradebook)])
    assert result.exit_code == 0, result.output
    return tmp_config


def test_cli_import(tmp_config: Path, tradebook: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(tmp_config), "import", str(tradebook)])
    assert result.exit_code == 0, result.output
    assert "5/6 rows valid, 5 new executions" in result.output
    assert "1 rows rejected" in result.output
    assert "Row 7" in result.output

    again = runner.invoke(cli, ["--config", str(tmp_config), "import", str(tradebook)])
    assert "0 new executions" in again.output
    assert "Total executions in store: 5" in again.output


def test_cli_import_missing_file(tmp_config: Path, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(tmp_config), "import", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_cli_import_from_tradebook_dir(tmp_config: Path, tmp_path: Path) -> None:
    folder = tmp_path / "tradebooks"
    folder.mkdir()
    (folder / "b_june.csv").write_text(TRADEBOOK)
    (folder / "a_empty.csv").write_text(TRADEBOOK.splitlines()[0] + "\n")
    (folder / "notes.txt").write_text("ignored")
    result = CliRunner().invoke(cli, ["--config", str(tmp_config), "import"])
    assert result.exit_code == 0, result.output
    assert result.output.index("a_empty.csv") < result.output.index("b_june.csv")
    assert "Total executions in store: 5" in result.output


def test_cli_import_empty_tradebook_dir(tmp_config: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(tmp_config), "import"])
    assert result.exit_code == 1
    assert "no CSV files" in result.output


def test_cli_report(imported: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(imported), "report", "--detail"])
    assert result.exit_code == 0, result.output
    assert "F&O Ledger Summary" in result.output
    assert "Net P&L" in result.output
    assert "Drawdown" in result.output
    assert "Sharpe" in result.output
    assert "By symbol" in result.output
    assert "By session" in result.output
    assert "--- Sectors ---" in result.output
    assert "Hold discipline" in result.output
    assert "(1W / 1L)" in result.output


def test_cli_report_empty_store(tmp_config: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(tmp_config), "report"])
    assert result.exit_code == 0
    assert "No executions in store" in result.output


def test_cli_report_bad_date(imported: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(imported), "report", "--start", "June"])
    assert result.exit_code != 0


def test_cli_positions(imported: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(imported), "positions"])
    assert result.exit_code == 0, result.output
    assert "NIFTY2560524750PE_PE_24750_2025-06-05#1" in result.output

    only_open = runner.invoke(cli, ["--config", str(imported), "positions", "--status", "open"])
    assert "NIFTY25JUNFUT" in only_open.output
    assert "BANKNIFTY" not in only_open.output


def test_cli_daily(imported: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(imported), "daily", "--start", "2025-06-03"])
    assert result.exit_code == 0, result.output
    assert "2025-06-03" in result.output
    assert "2025-06-02" not in result.output


def test_cli_export(imported: Path, tmp_path: Path) -> None:
    out = tmp_path / "export.jsonl"
    result = CliRunner().invoke(cli, ["--config", str(imported), "export", "--out", str(out)])
    assert result.exit_code == 0, result.output
    events = [json.loads(line)["event"] for line in out.read_text().splitlines()]
    assert events.count("position") == 3
    assert events.count("day") == 3
    assert events[-1] == "summary"


def test_cli_health_ok(imported: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(imported), "health"])
    assert result.exit_code == 0, result.output
    assert "HEALTHY" in result.output
    assert "5 executions" in result.output


def test_cli_health_missing_config(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(tmp_path / "missing.yaml"), "health"])
    assert result.exit_code == 1
    assert "UNHEALTHY" in result.output
