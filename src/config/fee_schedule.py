"""
Fee schedule loader: JSON file -> frozen dataclass tree, validated against JSON Schema.

Default values:  docs/config/fees.default.json
Schema:          docs/config/fee_schedule.schema.json

The dataclass defaults mirror fees.default.json exactly, so the cost model
works without touching the filesystem. A partial override file (for a
broker with a different tariff) is deep-merged on top of the base file
before schema validation.

Usage:
    from config.fee_schedule import load_fee_schedule
    fees = load_fee_schedule()                          # loads default
    fees = load_fee_schedule(overrides_path="my.json")  # merges a partial file
    fees.futures.brokerage_cap  # -> 20.0
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

logger = logging.getLogger("ledger.config")


def _find_project_root() -> Path:
    """Walk up from this file looking for pyproject.toml; fall back to CWD."""
    candidate = Path(__file__).resolve().parent
    for _ in range(10):
        if (candidate / "pyproject.toml").exists():
            return candidate
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return Path.cwd()


_PROJECT_ROOT = _find_project_root()

DEFAULT_FEES_PATH = _PROJECT_ROOT / "docs" / "config" / "fees.default.json"
DEFAULT_FEES_SCHEMA_PATH = _PROJECT_ROOT / "docs" / "config" / "fee_schedule.schema.json"

CRORE = 10_000_000


# ---------------------------------------------------------------------------
# Frozen dataclass tree, mirrors fees.default.json
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InstrumentFees:
    """Per-instrument-class tariff. Rates are fractions of order value."""

    brokerage_pct: float
    brokerage_cap: float
    brokerage_flat: float | None   # when set, overrides pct/cap
    stt_sell_pct: float
    txn_nse_pct: float
    txn_bse_pct: float
    stamp_buy_pct: float
    stamp_cap_per_crore: float


FUTURES_FEES = InstrumentFees(
    brokerage_pct=0.0003,
    brokerage_cap=20.0,
    brokerage_flat=None,
    stt_sell_pct=0.0002,
    txn_nse_pct=0.0000173,
    txn_bse_pct=0.0,
    stamp_buy_pct=0.00002,
    stamp_cap_per_crore=200.0,
)

OPTIONS_FEES = InstrumentFees(
    brokerage_pct=0.0,
    brokerage_cap=0.0,
    brokerage_flat=20.0,
    stt_sell_pct=0.001,
    txn_nse_pct=0.0003503,
    txn_bse_pct=0.000325,
    stamp_buy_pct=0.00003,
    stamp_cap_per_crore=300.0,
)


@dataclass(frozen=True)
class FeeSchedule:
    """India F&O fee schedule. Deterministic; no state."""

    version: str = "2025.1"
    futures: InstrumentFees = FUTURES_FEES
    options: InstrumentFees = OPTIONS_FEES
    sebi_per_crore: float = 10.0
    gst_rate: float = 0.18


DEFAULT_FEE_SCHEDULE = FeeSchedule()


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class FeeScheduleError(Exception):
    """Raised when fee schedule loading or validation fails."""


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overrides* into a copy of *base* (override keys win)."""
    merged = dict(base)
    for key, val in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


def _read_json(path: Path, label: str) -> dict[str, Any]:
    if not path.exists():
        raise FeeScheduleError(f"{label} not found: {path}")
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise FeeScheduleError(f"{label} is not valid JSON: {exc}") from exc


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    schema = _read_json(schema_path, "Fee schedule schema")
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise FeeScheduleError(f"Fee schedule validation failed: {exc.message}") from exc


def _build_instrument(raw: dict[str, Any]) -> InstrumentFees:
    return InstrumentFees(
        brokerage_pct=float(raw["brokerage_pct"]),
        brokerage_cap=float(raw["brokerage_cap"]),
        brokerage_flat=float(raw["brokerage_flat"]) if raw.get("brokerage_flat") is not None else None,
        stt_sell_pct=float(raw["stt_sell_pct"]),
        txn_nse_pct=float(raw["txn_nse_pct"]),
        txn_bse_pct=float(raw["txn_bse_pct"]),
        stamp_buy_pct=float(raw["stamp_buy_pct"]),
        stamp_cap_per_crore=float(raw["stamp_cap_per_crore"]),
    )


def _build_schedule(data: dict[str, Any]) -> FeeSchedule:
    return FeeSchedule(
        version=str(data["version"]),
        futures=_build_instrument(data["futures"]),
        options=_build_instrument(data["options"]),
        sebi_per_crore=float(data["sebi_per_crore"]),
        gst_rate=float(data["gst_rate"]),
    )


def load_fee_schedule(
    config_path: str | Path | None = None,
    schema_path: str | Path | None = None,
    overrides_path: str | Path | None = None,
) -> FeeSchedule:
    """Load and validate a fee schedule.

    Parameters
    ----------
    config_path:
        Base fee JSON. Defaults to ``docs/config/fees.default.json``.
    schema_path:
        JSON Schema. Defaults to ``docs/config/fee_schedule.schema.json``.
    overrides_path:
        Optional partial JSON deep-merged on top of the base before validation.

    Raises
    ------
    FeeScheduleError
        If a file is missing, unparseable, or fails schema validation.
    """
    cfg_path = Path(config_path) if config_path else DEFAULT_FEES_PATH
    sch_path = Path(schema_path) if schema_path else DEFAULT_FEES_SCHEMA_PATH

    data = _read_json(cfg_path, "Fee schedule")
    if overrides_path:
        overrides = _read_json(Path(overrides_path), "Fee schedule override")
        data = _deep_merge(data, overrides)
        logger.info("Applied fee schedule override: %s", Path(overrides_path).name)

    _validate_schema(data, sch_path)
    return _build_schedule(data)
