"""Tests for the decision gate checks."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from signal_fusion.core.risk import (
    RiskVerdict,
    check_cooldown,
    check_max_positions,
    check_setup,
    check_threshold,
    threshold_for,
)
from signal_fusion.models import (
    AgreementCount,
    CompositeSignal,
    Direction,
    SymbolDecisionState,
    TradeSetup,
)

from conftest import NOW


def _composite(direction=Direction.BULLISH, confidence=80.0):
    score = 40.0 * direction.sign
    return CompositeSignal(
        symbol="EURUSD", evaluated_at=NOW, weighted_score=score,
        overall_confidence=confidence, dominant_direction=direction,
        agreement=AgreementCount(agree=2, oppose=0),
    )


class TestRiskVerdict:
    def test_allowed(self):
        v = RiskVerdict(allowed=True)
        assert v.allowed
        assert v.reason == ""

    def test_rejected(self):
        v = RiskVerdict(allowed=False, reason="too risky")
        assert not v.allowed
        assert v.reason == "too risky"


class TestCooldown:
    def test_no_cooldown(self):
        assert check_cooldown(SymbolDecisionState(), NOW).allowed

    def test_active_cooldown(self):
        state = SymbolDecisionState(cooldown_until=NOW + timedelta(minutes=10))
        v = check_cooldown(state, NOW)
        assert not v.allowed
        assert v.reason.startswith("cooldown_active")

    def test_expired_cooldown(self):
        state = SymbolDecisionState(cooldown_until=NOW - timedelta(minutes=1))
        assert check_cooldown(state, NOW).allowed


class TestMaxPositions:
    def test_under_limit(self):
        state = SymbolDecisionState(open_position_count=1, max_positions=2)
        assert check_max_positions(state).allowed

    def test_at_limit(self):
        state = SymbolDecisionState(open_position_count=2, max_positions=2)
        v = check_max_positions(state)
        assert not v.allowed
        assert "max_positions" in v.reason

    def test_override(self):
        state = SymbolDecisionState(open_position_count=5, max_positions=1)
        assert check_max_positions(state, allow_override=True).allowed


class TestThreshold:
    def test_threshold_by_direction(self):
        state = SymbolDecisionState(buy_threshold=65, sell_threshold=75)
        assert threshold_for(state, Direction.BULLISH) == 65
        assert threshold_for(state, Direction.BEARISH) == 75
        assert threshold_for(state, Direction.NEUTRAL) is None

    def test_above_threshold(self):
        state = SymbolDecisionState(buy_threshold=70)
        assert check_threshold(_composite(confidence=70.0), state).allowed

    def test_below_threshold(self):
        state = SymbolDecisionState(sell_threshold=80)
        v = check_threshold(_composite(Direction.BEARISH, confidence=79.9), state)
        assert not v.allowed
        assert v.reason.startswith("below_threshold")

    def test_neutral_rejected(self):
        v = check_threshold(_composite(Direction.NEUTRAL), SymbolDecisionState())
        assert not v.allowed
        assert v.reason == "no_direction"


class TestSetupCheck:
    def test_missing_setup(self):
        assert check_setup(None).reason == "no_setup"

    def test_invalid_setup(self):
        setup = TradeSetup(direction=Direction.BULLISH, entry_price=Decimal("100"),
                           stop_loss=Decimal("101"), take_profit=Decimal("104"))
        assert check_setup(setup).reason == "invalid_setup"

    def test_valid_setup(self):
        setup = TradeSetup(direction=Direction.BULLISH, entry_price=Decimal("100"),
                           stop_loss=Decimal("98"), take_profit=Decimal("104"))
        assert check_setup(setup).allowed
