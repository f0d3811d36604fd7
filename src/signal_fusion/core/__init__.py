"""Decision core — collection, aggregation, gates, setups and the state machine."""

from signal_fusion.core.aggregation import aggregate, classify_direction, normalize_weights
from signal_fusion.core.collector import SignalCollector
from signal_fusion.core.risk import (
    RiskVerdict,
    check_cooldown,
    check_max_positions,
    check_setup,
    check_threshold,
)
from signal_fusion.core.setup import build_trade_setup, calculate_position_size
from signal_fusion.core.state_machine import DecisionStateMachine

__all__ = [
    "DecisionStateMachine",
    "RiskVerdict",
    "SignalCollector",
    "aggregate",
    "build_trade_setup",
    "calculate_position_size",
    "check_cooldown",
    "check_max_positions",
    "check_setup",
    "check_threshold",
    "classify_direction",
    "normalize_weights",
]
