"""Multi-timeframe trend alignment module."""

from __future__ import annotations

from statistics import mean
from typing import Any

from signal_fusion.models import ComponentSignal, Direction, IndicatorSnapshot
from signal_fusion.modules import SignalModule, register


@register
class TrendAlignmentModule(SignalModule):
    """Vote fast/slow EMA alignment across timeframes, scale confidence by ADX.

    score      = share of timeframes agreeing with the majority (0-100)
    confidence = mean ADX relative to ``adx_strong`` (50 when no ADX supplied)
    """

    name = "trend"
    docs = {
        "thesis": "Trades with the higher-timeframe trend have better follow-through.",
        "data": "'ema_fast:<tf>', 'ema_slow:<tf>' and optional 'adx:<tf>' per configured timeframe.",
        "risk": "Lags at turning points; alignment flips late after reversals.",
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.timeframes = list(self.params.get("timeframes", ["M15", "H1", "H4"]))
        self.adx_strong = float(self.params.get("adx_strong", 25))

    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        bullish = bearish = available = 0
        adx_values: list[float] = []
        for tf in self.timeframes:
            fast = snapshot.value("ema_fast", tf)
            slow = snapshot.value("ema_slow", tf)
            if fast is None or slow is None:
                continue
            available += 1
            if fast > slow:
                bullish += 1
            elif fast < slow:
                bearish += 1
            adx = snapshot.value("adx", tf)
            if adx is not None:
                adx_values.append(adx)

        if available == 0:
            return self._inactive(snapshot, "no timeframe data")

        if bullish > bearish:
            direction, aligned = Direction.BULLISH, bullish
        elif bearish > bullish:
            direction, aligned = Direction.BEARISH, bearish
        else:
            direction, aligned = Direction.NEUTRAL, 0

        if adx_values:
            confidence = min(mean(adx_values) / self.adx_strong * 60.0, 100.0)
        else:
            confidence = 50.0

        return self._signal(
            snapshot,
            direction=direction,
            score=aligned / available * 100.0,
            confidence=confidence,
            details=f"bull={bullish} bear={bearish} of {available}",
        )
