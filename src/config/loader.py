"""
Config loader: YAML file -> frozen dataclass tree.

Environment overrides (resolved after the file is read):
    FNO_LEDGER_DB        -> data.db_path
    FNO_LEDGER_EXCHANGE  -> analytics.exchange
Config file holds only non-secret values.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from ledger_core.contracts import Exchange


@dataclass(frozen=True)
class DataConfig:
    db_path: str = "data/executions.db"
    tradebook_dir: str = "data/tradebooks"


@dataclass(frozen=True)
class AnalyticsConfig:
    exchange: Exchange | None = None
    workers: int = 1
    rolling_window: int = 30
    fee_overrides_path: str = ""


@dataclass(frozen=True)
class JournalConfig:
    path: str = "data/ledger.jsonl"
    echo_stdout: bool = False


@dataclass(frozen=True)
class AlertingConfig:
    structured_logs: bool = True
    webhook_url: str = ""


@dataclass(frozen=True)
class AppConfig:
    account: str
    data: DataConfig
    analytics: AnalyticsConfig
    journal: JournalConfig
    alerting: AlertingConfig = AlertingConfig()


def _exchange(value: object) -> Exchange | None:
    if value in (None, ""):
        return None
    try:
        return Exchange(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"analytics.exchange must be NSE or BSE, got {value!r}") from None


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load configuration from a YAML file.

    Missing sections fall back to dataclass defaults. FNO_LEDGER_DB and
    FNO_LEDGER_EXCHANGE, when set, win over the file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    data_raw = raw.get("data", {})
    data_cfg = DataConfig(
        db_path=os.environ.get("FNO_LEDGER_DB") or data_raw.get("db_path", "data/executions.db"),
        tradebook_dir=data_raw.get("tradebook_dir", "data/tradebooks"),
    )

    an_raw = raw.get("analytics", {})
    workers = int(an_raw.get("workers", 1))
    if workers < 1:
        raise ValueError(f"analytics.workers must be >= 1, got {workers}")
    an_cfg = AnalyticsConfig(
        exchange=_exchange(os.environ.get("FNO_LEDGER_EXCHANGE") or an_raw.get("exchange")),
        workers=workers,
        rolling_window=int(an_raw.get("rolling_window", 30)),
        fee_overrides_path=str(an_raw.get("fee_overrides_path") or ""),
    )

    j_raw = raw.get("journal", {})
    j_cfg = JournalConfig(
        path=j_raw.get("path", "data/ledger.jsonl"),
        echo_stdout=bool(j_raw.get("echo_stdout", False)),
    )

    a_raw = raw.get("alerting", {})
    a_cfg = AlertingConfig(
        structured_logs=bool(a_raw.get("structured_logs", True)),
        webhook_url=str(a_raw.get("webhook_url", "")),
    )

    return AppConfig(
        account=str(raw.get("account", "default")),
        data=data_cfg,
        analytics=an_cfg,
        journal=j_cfg,
        alerting=a_cfg,
    )
