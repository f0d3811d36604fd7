"""Orchestrator — builds the engine from config and feeds it market events."""

from signal_fusion.orchestrator.runner import (
    build_engine,
    dispatch_transactions,
    instantiate_modules,
    process_snapshot,
    run_loop,
)

__all__ = [
    "build_engine",
    "dispatch_transactions",
    "instantiate_modules",
    "process_snapshot",
    "run_loop",
]
