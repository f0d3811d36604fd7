"""Candle pattern module."""

from __future__ import annotations

from typing import Any

from signal_fusion.models import ComponentSignal, IndicatorSnapshot
from signal_fusion.modules import SignalModule, register

# Pattern reliability used as confidence (0-100).
PATTERN_RELIABILITY: dict[str, float] = {
    "bullish_engulfing": 70.0,
    "bearish_engulfing": 70.0,
    "morning_star": 75.0,
    "evening_star": 75.0,
    "three_white_soldiers": 80.0,
    "three_black_crows": 80.0,
    "piercing_line": 65.0,
    "dark_cloud_cover": 65.0,
    "hammer": 60.0,
    "inverted_hammer": 55.0,
    "shooting_star": 60.0,
    "hanging_man": 55.0,
    "bullish_harami": 55.0,
    "bearish_harami": 55.0,
    "marubozu_bullish": 60.0,
    "marubozu_bearish": 60.0,
    "doji": 40.0,
    "spinning_top": 35.0,
}
DEFAULT_RELIABILITY = 50.0


@register
class CandlePatternModule(SignalModule):
    """Use the most recent recognised candle pattern.

    Strength is discounted by 20% per bar of age; patterns older than
    ``max_bars_ago`` are ignored.
    """

    name = "candles"
    docs = {
        "thesis": "Reversal and continuation patterns hint at the next few bars.",
        "data": "Patterns reported by the pattern-recognition collaborator, newest first by bars_ago.",
        "risk": "Single patterns are noisy; reliability table values are rough priors.",
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.max_bars_ago = int(self.params.get("max_bars_ago", 3))

    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        recent = [p for p in snapshot.patterns if p.bars_ago <= self.max_bars_ago]
        if not recent:
            return self._inactive(snapshot, "no recent pattern")

        pattern = min(recent, key=lambda p: (p.bars_ago, -p.strength))
        age_factor = max(1.0 - 0.2 * max(pattern.bars_ago - 1, 0), 0.0)

        return self._signal(
            snapshot,
            direction=pattern.direction,
            score=pattern.strength * age_factor,
            confidence=PATTERN_RELIABILITY.get(pattern.name, DEFAULT_RELIABILITY),
            details=f"{pattern.name} ({pattern.bars_ago} bars ago)",
        )
