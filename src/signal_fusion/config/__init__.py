"""Configuration system."""

from signal_fusion.config.loader import load_config
from signal_fusion.config.schema import (
    AggregationConfig,
    AppConfig,
    ExecutionConfig,
    LoggingConfig,
    ModuleParams,
    SetupConfig,
    SymbolParams,
)

__all__ = [
    "AggregationConfig",
    "AppConfig",
    "ExecutionConfig",
    "LoggingConfig",
    "ModuleParams",
    "SetupConfig",
    "SymbolParams",
    "load_config",
]
