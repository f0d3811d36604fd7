"""Points-of-interest (supply/demand zone) module."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from signal_fusion.models import ComponentSignal, Direction, IndicatorSnapshot
from signal_fusion.modules import SignalModule, register


@register
class PointOfInterestModule(SignalModule):
    """Score proximity to the nearest supply or demand zone.

    Inside a demand zone → BULLISH, inside a supply zone → BEARISH; the
    opinion decays linearly to nothing at ``max_distance_pct`` away.
    """

    name = "poi"
    docs = {
        "thesis": "Price reacts at zones where unfilled orders previously accumulated.",
        "data": "Zones (kind, low, high, strength) supplied by the zone-detection collaborator.",
        "risk": "Zones break; a zone touched many times is weaker than its strength suggests.",
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.max_distance_pct = float(self.params.get("max_distance_pct", 0.5))

    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        if not snapshot.zones or snapshot.price <= 0:
            return self._inactive(snapshot, "no zones")

        nearest = min(snapshot.zones, key=lambda z: z.distance(snapshot.price))
        distance_pct = float(nearest.distance(snapshot.price) / snapshot.price * Decimal(100))
        if distance_pct > self.max_distance_pct:
            return self._inactive(snapshot, f"nearest zone {distance_pct:.2f}% away")

        proximity = 1.0 - distance_pct / self.max_distance_pct
        direction = Direction.BULLISH if nearest.kind == "demand" else Direction.BEARISH
        where = "inside" if nearest.contains(snapshot.price) else f"{distance_pct:.2f}% away"

        return self._signal(
            snapshot,
            direction=direction,
            score=nearest.strength * proximity,
            confidence=40.0 + 60.0 * proximity * nearest.strength / 100.0,
            details=f"{nearest.kind} {where}",
        )
