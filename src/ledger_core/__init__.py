"""
ledger-core: pure F&O trade ledger engine.

No I/O, no network, no side effects. Consumes executions, produces orders,
FIFO-matched positions, daily records and risk analytics. Fully
deterministic and unit-testable.
"""

from ledger_core.contracts import (
    DayRecord,
    Exchange,
    Execution,
    InstrumentType,
    Order,
    Position,
    PositionStatus,
    Side,
)
from ledger_core.order_aggregator import merge_executions
from ledger_core.pipeline import AnalyticsCache, AnalyticsResult, execution_fingerprint, run_analytics
from ledger_core.position_engine import match_positions

__all__ = [
    "AnalyticsCache",
    "AnalyticsResult",
    "DayRecord",
    "Exchange",
    "execution_fingerprint",
    "Execution",
    "InstrumentType",
    "match_positions",
    "merge_executions",
    "Order",
    "Position",
    "PositionStatus",
    "run_analytics",
    "Side",
]
