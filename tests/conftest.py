"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from signal_fusion.config import AppConfig
from signal_fusion.core.risk import RiskVerdict
from signal_fusion.decision import DecisionEngine
from signal_fusion.execution import ExecutionAdapter, ExecutionResult
from signal_fusion.models import ComponentSignal, Direction, IndicatorSnapshot, PriceUpdate
from signal_fusion.modules import SignalModule

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class FixedModule(SignalModule):
    """Test module whose current signal is set directly by the test."""

    def __init__(self, name: str, weight: float = 1.0) -> None:
        self.name = name
        super().__init__(weight=weight)

    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        return self._inactive(snapshot, "fixed")

    def set(self, symbol: str, direction: Direction, score: float, confidence: float,
            ts: datetime = NOW, active: bool = True) -> None:
        self._latest[symbol] = ComponentSignal(
            name=self.name,
            direction=direction,
            score=score,
            confidence=confidence,
            weight=self.weight,
            timestamp=ts,
            active=active,
        )


class RecordingAdapter(ExecutionAdapter):
    """Accepts (or rejects) every request and records what it was asked to do."""

    def __init__(self, accept: bool = True, raise_exc: Exception | None = None) -> None:
        self.accept = accept
        self.raise_exc = raise_exc
        self.opened: list[tuple[str, Direction]] = []
        self.closed: list[tuple[str, str]] = []

    def validate(self, symbol, setup) -> RiskVerdict:
        if self.raise_exc is not None:
            raise self.raise_exc
        if not self.accept:
            return RiskVerdict(allowed=False, reason="rejected_by_test")
        return RiskVerdict(allowed=True)

    def open(self, symbol, direction, setup) -> ExecutionResult:
        self.opened.append((symbol, direction))
        return ExecutionResult(accepted=True, order_id=f"test-{len(self.opened)}")

    def close(self, symbol, reason) -> ExecutionResult:
        if self.raise_exc is not None:
            raise self.raise_exc
        if not self.accept:
            return ExecutionResult(accepted=False, reason="rejected_by_test")
        self.closed.append((symbol, reason))
        return ExecutionResult(accepted=True)


def price(symbol: str = "EURUSD", value: str = "1.1000", ts: datetime = NOW,
          atr: str | None = "0.0010") -> PriceUpdate:
    return PriceUpdate(
        symbol=symbol,
        price=Decimal(value),
        ts=ts,
        atr=Decimal(atr) if atr is not None else None,
    )


@pytest.fixture
def modules():
    return [FixedModule("trend"), FixedModule("poi"), FixedModule("oscillator")]


@pytest.fixture
def adapter():
    return RecordingAdapter()


@pytest.fixture
def engine(modules, adapter):
    eng = DecisionEngine(AppConfig(), modules, adapter)
    eng.quick_register("EURUSD", buy_threshold=70, sell_threshold=70, cooldown_minutes=15)
    return eng


def set_all(modules, symbol, direction, score=80.0, confidence=85.0, ts=NOW):
    for m in modules:
        m.set(symbol, direction, score, confidence, ts=ts)
