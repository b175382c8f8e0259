"""
Configuration loaders.

App config:    reads config.yaml, applies FNO_LEDGER_* env overrides.
Fee schedule:  reads fees.default.json (plus optional overrides), validates against JSON Schema.
"""

from config.fee_schedule import (
    DEFAULT_FEE_SCHEDULE,
    FeeSchedule,
    FeeScheduleError,
    InstrumentFees,
    load_fee_schedule,
)
from config.loader import (
    AlertingConfig,
    AnalyticsConfig,
    AppConfig,
    DataConfig,
    JournalConfig,
    load_config,
)

__all__ = [
    # App config (YAML)
    "AlertingConfig",
    "AnalyticsConfig",
    "AppConfig",
    "DataConfig",
    "JournalConfig",
    "load_config",
    # Fee schedule (JSON + schema)
    "DEFAULT_FEE_SCHEDULE",
    "FeeSchedule",
    "FeeScheduleError",
    "InstrumentFees",
    "load_fee_schedule",
]
