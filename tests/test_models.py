"""Tests for signal and decision models."""

from __future__ import annotations

from datetime import timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from signal_fusion.models import (
    AgreementCount,
    ComponentSignal,
    CompositeSignal,
    Decision,
    DecisionStatistics,
    Direction,
    IndicatorSnapshot,
    Phase,
    PriceUpdate,
    PriceZone,
    SymbolDecisionState,
    TradeSetup,
)

from conftest import NOW


class TestDirection:
    def test_sign(self):
        assert Direction.BULLISH.sign == 1
        assert Direction.BEARISH.sign == -1
        assert Direction.NEUTRAL.sign == 0

    def test_opposite(self):
        assert Direction.BULLISH.opposite is Direction.BEARISH
        assert Direction.BEARISH.opposite is Direction.BULLISH
        assert Direction.NEUTRAL.opposite is Direction.NEUTRAL


class TestComponentSignal:
    def test_valid_signal(self):
        s = ComponentSignal(name="trend", direction=Direction.BULLISH, score=80,
                            confidence=90, timestamp=NOW)
        assert s.active is True
        assert s.weight == 1.0
        assert s.sign == 1

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ComponentSignal(name="trend", score=101, confidence=50, timestamp=NOW)

    def test_confidence_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ComponentSignal(name="trend", score=50, confidence=-1, timestamp=NOW)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            ComponentSignal(name="trend", weight=-0.5, timestamp=NOW)

    def test_inactive_factory(self):
        s = ComponentSignal.inactive("poi", NOW, "no zones")
        assert s.active is False
        assert s.details == "no zones"
        assert s.direction is Direction.NEUTRAL

    def test_model_construct_bypass_is_not_well_formed(self):
        s = ComponentSignal.model_construct(
            name="bad", direction=Direction.BULLISH, score=250.0, confidence=50.0,
            weight=1.0, active=True, timestamp=NOW, details="",
        )
        assert s.is_well_formed() is False

    def test_summary(self):
        s = ComponentSignal(name="trend", direction=Direction.BEARISH, score=60,
                            confidence=70, timestamp=NOW, details="bear=3")
        line = s.summary(use_icons=False)
        assert "trend" in line
        assert "BEARISH" in line
        assert "bear=3" in line


class TestCompositeSignal:
    def test_defaults_are_neutral_and_invalid(self):
        c = CompositeSignal(symbol="EURUSD", evaluated_at=NOW)
        assert c.dominant_direction is Direction.NEUTRAL
        assert c.is_valid is False
        assert c.is_well_formed() is True

    def test_valid_composite(self):
        c = CompositeSignal(
            symbol="EURUSD", evaluated_at=NOW, weighted_score=40, overall_confidence=75,
            dominant_direction=Direction.BULLISH, agreement=AgreementCount(agree=2, oppose=1),
        )
        assert c.is_valid is True

    def test_low_confidence_invalid(self):
        c = CompositeSignal(
            symbol="EURUSD", evaluated_at=NOW, weighted_score=40, overall_confidence=59.9,
            dominant_direction=Direction.BULLISH, agreement=AgreementCount(agree=2, oppose=0),
        )
        assert c.is_valid is False

    def test_tied_agreement_invalid(self):
        c = CompositeSignal(
            symbol="EURUSD", evaluated_at=NOW, weighted_score=-40, overall_confidence=80,
            dominant_direction=Direction.BEARISH, agreement=AgreementCount(agree=1, oppose=1),
        )
        assert c.is_valid is False

    def test_sign_mismatch_not_well_formed(self):
        c = CompositeSignal(
            symbol="EURUSD", evaluated_at=NOW, weighted_score=-40, overall_confidence=80,
            dominant_direction=Direction.BULLISH, agreement=AgreementCount(agree=2, oppose=0),
        )
        assert c.is_well_formed() is False
        assert c.is_valid is False

    def test_is_valid_serialised(self):
        c = CompositeSignal(symbol="EURUSD", evaluated_at=NOW)
        assert c.model_dump()["is_valid"] is False


class TestDecision:
    def test_entry_flags(self):
        assert Decision.BUY.is_entry
        assert Decision.SELL.is_entry
        assert not Decision.CLOSE.is_entry
        assert not Decision.HOLD.is_entry

    def test_direction(self):
        assert Decision.BUY.direction is Direction.BULLISH
        assert Decision.SELL.direction is Direction.BEARISH
        assert Decision.NONE.direction is Direction.NEUTRAL

    def test_label(self):
        assert Decision.BUY.label == "Buy"


class TestTradeSetup:
    def test_valid_long(self):
        s = TradeSetup(direction=Direction.BULLISH, entry_price=Decimal("100"),
                       stop_loss=Decimal("98"), take_profit=Decimal("104"),
                       risk_reward_ratio=2.0)
        assert s.is_valid()
        assert s.risk_distance == Decimal("2")
        assert s.reward_distance == Decimal("4")
        assert s.rrr_string() == "1:2.00"

    def test_stop_wrong_side_invalid(self):
        s = TradeSetup(direction=Direction.BEARISH, entry_price=Decimal("100"),
                       stop_loss=Decimal("98"), take_profit=Decimal("96"))
        assert not s.is_valid()

    def test_neutral_direction_invalid(self):
        s = TradeSetup(direction=Direction.NEUTRAL, entry_price=Decimal("100"),
                       stop_loss=Decimal("98"), take_profit=Decimal("104"))
        assert not s.is_valid()

    def test_frozen(self):
        s = TradeSetup(direction=Direction.BULLISH, entry_price=Decimal("100"),
                       stop_loss=Decimal("98"), take_profit=Decimal("104"))
        with pytest.raises(ValidationError):
            s.entry_price = Decimal("101")


class TestSymbolDecisionState:
    def test_phase_idle(self):
        assert SymbolDecisionState().phase(NOW) is Phase.IDLE

    def test_phase_cooldown_wins_over_open_position(self):
        state = SymbolDecisionState(cooldown_until=NOW + timedelta(minutes=5),
                                    open_position_count=1)
        assert state.phase(NOW) is Phase.COOLDOWN

    def test_phase_open_position_after_cooldown(self):
        state = SymbolDecisionState(cooldown_until=NOW - timedelta(seconds=1),
                                    open_position_count=1)
        assert state.phase(NOW) is Phase.HAS_OPEN_POSITION

    def test_cooldown_ends_exactly_at_boundary(self):
        state = SymbolDecisionState(cooldown_until=NOW)
        assert state.in_cooldown(NOW) is False

    def test_accuracy(self):
        stats = DecisionStatistics(closed_trades=4, profitable_trades=3)
        assert stats.accuracy == 75.0
        assert DecisionStatistics().accuracy == 0.0


class TestMarketModels:
    def test_zone_distance(self):
        zone = PriceZone(kind="demand", low=Decimal("1.0900"), high=Decimal("1.0950"))
        assert zone.distance(Decimal("1.0920")) == 0
        assert zone.distance(Decimal("1.1000")) == Decimal("0.0050")
        assert zone.distance(Decimal("1.0800")) == Decimal("0.0100")

    def test_snapshot_value_with_timeframe(self):
        snap = IndicatorSnapshot(symbol="EURUSD", ts=NOW, price=Decimal("1.1"),
                                 values={"rsi": 55.0, "ema_fast:H1": 1.2})
        assert snap.value("rsi") == 55.0
        assert snap.value("ema_fast", "H1") == 1.2
        assert snap.value("ema_fast", "H4") is None

    def test_to_price_update(self):
        snap = IndicatorSnapshot(symbol="EURUSD", ts=NOW, price=Decimal("1.1"),
                                 atr=Decimal("0.001"))
        update = snap.to_price_update()
        assert update.symbol == "EURUSD"
        assert update.atr == Decimal("0.001")


class TestEventTimestamps:
    def test_naive_price_update_read_as_utc(self):
        update = PriceUpdate(symbol="EURUSD", price=Decimal("1.1"), ts=NOW.replace(tzinfo=None))
        assert update.ts.tzinfo is timezone.utc
        assert update.ts == NOW

    def test_offset_timestamp_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        update = PriceUpdate(symbol="EURUSD", price=Decimal("1.1"), ts=NOW.astimezone(plus_two))
        assert update.ts.tzinfo is timezone.utc
        assert update.ts.hour == 12

    def test_naive_snapshot_from_json(self):
        snap = IndicatorSnapshot.model_validate_json(
            '{"symbol": "EURUSD", "ts": "2025-06-15T12:00:00", "price": "1.1"}'
        )
        assert snap.ts == NOW
        assert snap.to_price_update().ts.tzinfo is timezone.utc

    def test_naive_component_timestamp_read_as_utc(self):
        signal = ComponentSignal(name="trend", direction=Direction.BULLISH, score=50,
                                 confidence=50, timestamp=NOW.replace(tzinfo=None))
        assert signal.timestamp == NOW
