"""Pydantic domain models."""

from signal_fusion.models.decision import (
    Decision,
    DecisionResult,
    DecisionStatistics,
    Phase,
    SymbolDecisionState,
    SymbolStatus,
    TradeSetup,
)
from signal_fusion.models.market import (
    CandlePattern,
    IndicatorSnapshot,
    PriceUpdate,
    PriceZone,
)
from signal_fusion.models.signal import (
    AgreementCount,
    ComponentSignal,
    CompositeSignal,
    Direction,
)

__all__ = [
    "AgreementCount",
    "CandlePattern",
    "ComponentSignal",
    "CompositeSignal",
    "Decision",
    "DecisionResult",
    "DecisionStatistics",
    "Direction",
    "IndicatorSnapshot",
    "Phase",
    "PriceUpdate",
    "PriceZone",
    "SymbolDecisionState",
    "SymbolStatus",
    "TradeSetup",
]
