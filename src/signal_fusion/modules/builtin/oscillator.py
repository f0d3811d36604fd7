"""RSI oscillator module."""

from __future__ import annotations

from typing import Any

from signal_fusion.models import ComponentSignal, Direction, IndicatorSnapshot
from signal_fusion.modules import SignalModule, register


@register
class RSIOscillatorModule(SignalModule):
    """Fade overbought/oversold RSI readings.

    RSI >= overbought → BEARISH (expect reversion down)
    RSI <= oversold   → BULLISH (expect reversion up)
    Anything in between is an active NEUTRAL opinion.
    """

    name = "oscillator"
    docs = {
        "thesis": "Extreme RSI readings tend to revert as momentum exhausts.",
        "data": "RSI value supplied by the indicator collaborator (key 'rsi', optional timeframe suffix).",
        "risk": "RSI can stay extreme in strong trends; pair with the trend module.",
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.overbought = float(self.params.get("overbought", 70))
        self.oversold = float(self.params.get("oversold", 30))
        self.timeframe = self.params.get("timeframe")

    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        rsi = snapshot.value("rsi", self.timeframe)
        if rsi is None:
            return self._inactive(snapshot, "rsi unavailable")

        if rsi >= self.overbought:
            excess = min((rsi - self.overbought) / (100 - self.overbought), 1.0)
            direction = Direction.BEARISH
        elif rsi <= self.oversold:
            excess = min((self.oversold - rsi) / self.oversold, 1.0)
            direction = Direction.BULLISH
        else:
            return self._signal(
                snapshot,
                direction=Direction.NEUTRAL,
                score=0.0,
                confidence=50.0,
                details=f"rsi={rsi:.1f}",
            )

        return self._signal(
            snapshot,
            direction=direction,
            score=50.0 + 50.0 * excess,
            confidence=60.0 + 40.0 * excess,
            details=f"rsi={rsi:.1f}",
        )
