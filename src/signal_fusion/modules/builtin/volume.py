"""Volume confirmation module."""

from __future__ import annotations

from typing import Any

from signal_fusion.models import ComponentSignal, Direction, IndicatorSnapshot
from signal_fusion.modules import SignalModule, register


@register
class VolumeConfirmationModule(SignalModule):
    """Above-average volume confirms the direction of the latest price move.

    Climax volume (ratio >= ``climax_ratio``) still confirms, with reduced
    confidence since it often marks exhaustion.
    """

    name = "volume"
    docs = {
        "thesis": "Moves on above-average volume are more likely to continue.",
        "data": "'volume', 'volume_avg' and 'price_change' of the latest bar.",
        "risk": "Climax volume often marks exhaustion rather than continuation.",
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.confirm_ratio = float(self.params.get("confirm_ratio", 1.2))
        self.spike_ratio = float(self.params.get("spike_ratio", 2.0))
        self.climax_ratio = float(self.params.get("climax_ratio", 3.0))

    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        volume = snapshot.value("volume")
        average = snapshot.value("volume_avg")
        change = snapshot.value("price_change")
        if volume is None or average is None or average <= 0 or change is None:
            return self._inactive(snapshot, "volume data unavailable")

        ratio = volume / average
        if ratio < self.confirm_ratio or change == 0:
            return self._signal(
                snapshot,
                direction=Direction.NEUTRAL,
                score=0.0,
                confidence=40.0,
                details=f"ratio={ratio:.2f}",
            )

        span = max(self.spike_ratio - self.confirm_ratio, 1e-9)
        confidence = min(50.0 + (ratio - self.confirm_ratio) / span * 30.0, 100.0)
        details = f"ratio={ratio:.2f}"
        if ratio >= self.climax_ratio:
            confidence *= 0.7
            details += " climax"

        return self._signal(
            snapshot,
            direction=Direction.BULLISH if change > 0 else Direction.BEARISH,
            score=min(ratio / self.spike_ratio * 100.0, 100.0),
            confidence=confidence,
            details=details,
        )
