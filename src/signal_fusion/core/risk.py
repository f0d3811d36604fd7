"""Decision gates — pure check functions returning a RiskVerdict."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from signal_fusion.models import (
    CompositeSignal,
    Direction,
    SymbolDecisionState,
    TradeSetup,
)


@dataclass
class RiskVerdict:
    """Result of a gate check — allowed or rejected with a reason."""

    allowed: bool
    reason: str = ""


def check_cooldown(state: SymbolDecisionState, now: datetime) -> RiskVerdict:
    """Reject while ``now`` is before ``cooldown_until``."""
    if state.in_cooldown(now):
        return RiskVerdict(
            allowed=False,
            reason=f"cooldown_active (until {state.cooldown_until.isoformat()})",
        )
    return RiskVerdict(allowed=True)


def check_max_positions(
    state: SymbolDecisionState,
    allow_override: bool = False,
) -> RiskVerdict:
    """Reject new entries once ``open_position_count`` reaches ``max_positions``."""
    if allow_override:
        return RiskVerdict(allowed=True)
    if state.open_position_count >= state.max_positions:
        return RiskVerdict(
            allowed=False,
            reason=f"max_positions ({state.open_position_count}/{state.max_positions})",
        )
    return RiskVerdict(allowed=True)


def threshold_for(state: SymbolDecisionState, direction: Direction) -> float | None:
    if direction is Direction.BULLISH:
        return state.buy_threshold
    if direction is Direction.BEARISH:
        return state.sell_threshold
    return None


def check_threshold(composite: CompositeSignal, state: SymbolDecisionState) -> RiskVerdict:
    """Reject when confidence is below the buy/sell threshold for the direction."""
    threshold = threshold_for(state, composite.dominant_direction)
    if threshold is None:
        return RiskVerdict(allowed=False, reason="no_direction")
    if composite.overall_confidence < threshold:
        return RiskVerdict(
            allowed=False,
            reason=f"below_threshold ({composite.overall_confidence:.1f}/{threshold:.1f})",
        )
    return RiskVerdict(allowed=True)


def check_setup(setup: TradeSetup | None) -> RiskVerdict:
    """Reject a missing setup or one with stop/target on the wrong side."""
    if setup is None:
        return RiskVerdict(allowed=False, reason="no_setup")
    if not setup.is_valid():
        return RiskVerdict(allowed=False, reason="invalid_setup")
    return RiskVerdict(allowed=True)
