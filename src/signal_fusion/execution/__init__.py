"""Execution adapter boundary and the in-memory paper adapter."""

from signal_fusion.execution.base import (
    ExecutionAdapter,
    ExecutionResult,
    TransactionEvent,
)
from signal_fusion.execution.paper import PaperExecutionAdapter, PaperPosition

__all__ = [
    "ExecutionAdapter",
    "ExecutionResult",
    "PaperExecutionAdapter",
    "PaperPosition",
    "TransactionEvent",
]
