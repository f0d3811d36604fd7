"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AggregationConfig(BaseModel):
    min_confidence: float = Field(default=60.0, ge=0, le=100)
    neutral_band: float = Field(default=5.0, ge=0, lt=100)
    evaluation_interval_s: float = Field(default=10.0, gt=0)
    # None means "one evaluation interval"
    staleness_s: float | None = Field(default=None, gt=0)
    use_component_weights: bool = True

    @property
    def staleness_bound_s(self) -> float:
        if self.staleness_s is None:
            return self.evaluation_interval_s
        return self.staleness_s


class ModuleParams(BaseModel):
    enabled: bool = True
    weight: float = 1.0
    params: dict[str, float | int | str | bool | list[str]] = Field(default_factory=dict)


class SymbolParams(BaseModel):
    """Per-symbol decision parameters.

    Deliberately unconstrained here: bad values are rejected as a whole at
    symbol registration, see ``signal_fusion.decision.validate_symbol_params``.
    """

    buy_threshold: float = 70.0
    sell_threshold: float = 70.0
    cooldown_minutes: float = 15.0
    max_positions: int = 1
    allow_position_override: bool = False
    risk_pct: float = 0.01


class SetupConfig(BaseModel):
    atr_stop_multiplier: float = 1.5
    stop_loss_pct: float = 0.01
    base_rr: float = 2.0
    min_size_multiplier: float = 0.5
    max_size_multiplier: float = 1.5


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    status_interval_s: float = 60.0


class ExecutionConfig(BaseModel):
    equity: float = 10000
    max_margin_pct: float = 0.50
    leverage: float = 10.0


class AppConfig(BaseModel):
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    modules: dict[str, ModuleParams] = Field(default_factory=dict)
    symbols: dict[str, SymbolParams] = Field(default_factory=dict)
    setup: SetupConfig = Field(default_factory=SetupConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
