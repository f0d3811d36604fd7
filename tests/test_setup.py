"""Tests for trade setup construction and position sizing."""

from __future__ import annotations

from decimal import Decimal

import pytest

from signal_fusion.config import SetupConfig
from signal_fusion.core.setup import (
    build_trade_setup,
    calculate_position_size,
    calculate_stop_price,
    calculate_take_profit_price,
    confidence_adjusted_rr,
    size_multiplier,
)
from signal_fusion.models import Direction

CONFIG = SetupConfig()


class TestStopPrice:
    def test_atr_long(self):
        stop = calculate_stop_price(Direction.BULLISH, Decimal("100"), CONFIG, atr=Decimal("2"))
        assert stop == Decimal("97.0")

    def test_atr_short(self):
        stop = calculate_stop_price(Direction.BEARISH, Decimal("100"), CONFIG, atr=Decimal("2"))
        assert stop == Decimal("103.0")

    def test_pct_fallback_without_atr(self):
        stop = calculate_stop_price(Direction.BULLISH, Decimal("100"), CONFIG)
        assert stop == Decimal("99.00")

    def test_zero_atr_uses_pct(self):
        stop = calculate_stop_price(Direction.BEARISH, Decimal("100"), CONFIG, atr=Decimal("0"))
        assert stop == Decimal("101.00")


class TestTakeProfit:
    def test_confidence_stretches_rr(self):
        assert confidence_adjusted_rr(2.0, 50) == pytest.approx(2.0)
        assert confidence_adjusted_rr(2.0, 100) == pytest.approx(3.0)

    def test_long_target(self):
        tp = calculate_take_profit_price(Direction.BULLISH, Decimal("100"), Decimal("98"), 2.0)
        assert tp == Decimal("104.0")

    def test_short_target(self):
        tp = calculate_take_profit_price(Direction.BEARISH, Decimal("100"), Decimal("102"), 1.5)
        assert tp == Decimal("97.0")


class TestSizeMultiplier:
    def test_at_threshold_is_minimum(self):
        assert size_multiplier(70, 70, CONFIG) == pytest.approx(0.5)

    def test_at_hundred_is_maximum(self):
        assert size_multiplier(100, 70, CONFIG) == pytest.approx(1.5)

    def test_midpoint(self):
        assert size_multiplier(85, 70, CONFIG) == pytest.approx(1.0)

    def test_threshold_of_hundred(self):
        assert size_multiplier(100, 100, CONFIG) == pytest.approx(0.5)


class TestBuildTradeSetup:
    def test_long_setup_is_valid(self):
        setup = build_trade_setup(Direction.BULLISH, Decimal("1.1000"), 85, 70, CONFIG,
                                  atr=Decimal("0.0010"))
        assert setup.is_valid()
        assert setup.stop_loss == Decimal("1.09850")
        assert setup.risk_reward_ratio == pytest.approx(2.7)
        assert setup.position_size_multiplier == pytest.approx(1.0)

    def test_short_setup_is_valid(self):
        setup = build_trade_setup(Direction.BEARISH, Decimal("2000"), 75, 70, CONFIG)
        assert setup.is_valid()
        assert setup.stop_loss > setup.entry_price > setup.take_profit


class TestPositionSize:
    def test_fixed_fractional(self):
        setup = build_trade_setup(Direction.BULLISH, Decimal("100"), 70, 70, CONFIG,
                                  atr=Decimal("2"))
        # risk 10000 * 0.01 * 0.5 = 50 over a 3.0 stop distance
        qty = calculate_position_size(setup, Decimal("10000"), 0.01)
        assert qty == pytest.approx(Decimal("50") / Decimal("3"))

    def test_zero_risk_distance(self):
        setup = build_trade_setup(Direction.BULLISH, Decimal("100"), 70, 70,
                                  SetupConfig(stop_loss_pct=0.0))
        assert calculate_position_size(setup, Decimal("10000"), 0.01) == 0
