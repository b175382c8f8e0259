"""
Data boundary: parse broker tradebooks into Executions, persist them locally.

Depends on ledger_core.contracts for Execution; no dependency from ledger_core back to data.
"""

from data.execution_store import ExecutionStore
from data.tradebook import ParseResult, TradebookError, load_tradebook, parse_rows, parse_symbol

__all__ = [
    "ExecutionStore",
    "load_tradebook",
    "parse_rows",
    "parse_symbol",
    "ParseResult",
    "TradebookError",
]
