"""Decision engine — per-symbol state machines behind one event-driven facade."""

from signal_fusion.decision.engine import DecisionEngine, validate_symbol_params

__all__ = ["DecisionEngine", "validate_symbol_params"]
