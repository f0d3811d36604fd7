"""Signal models — per-module component signals and the fused composite."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, computed_field


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class Direction(str, Enum):
    """Directional opinion of a signal."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"

    @property
    def sign(self) -> int:
        if self is Direction.BULLISH:
            return 1
        if self is Direction.BEARISH:
            return -1
        return 0

    @property
    def opposite(self) -> Direction:
        if self is Direction.BULLISH:
            return Direction.BEARISH
        if self is Direction.BEARISH:
            return Direction.BULLISH
        return Direction.NEUTRAL


_ICONS = {
    Direction.BULLISH: "▲",
    Direction.BEARISH: "▼",
    Direction.NEUTRAL: "•",
}


def _in_range(value: float, low: float, high: float) -> bool:
    return isinstance(value, (int, float)) and not math.isnan(value) and low <= value <= high


class ComponentSignal(BaseModel):
    """One analysis module's opinion for one symbol at one point in time.

    An inactive signal means "no opinion right now"; it is dropped from
    aggregation instead of being counted as a neutral zero.
    """

    name: str
    direction: Direction = Direction.NEUTRAL
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    weight: float = Field(default=1.0, ge=0.0)
    active: bool = True
    timestamp: UtcDatetime
    details: str = ""

    @classmethod
    def inactive(cls, name: str, timestamp: datetime, details: str = "") -> ComponentSignal:
        """A signal that carries no directional weight."""
        return cls(name=name, timestamp=timestamp, active=False, details=details)

    @property
    def sign(self) -> int:
        return self.direction.sign

    def is_well_formed(self) -> bool:
        """False for instances that bypassed validation (e.g. ``model_construct``)."""
        return (
            _in_range(self.score, 0.0, 100.0)
            and _in_range(self.confidence, 0.0, 100.0)
            and isinstance(self.weight, (int, float))
            and not math.isnan(self.weight)
            and self.weight >= 0.0
        )

    def summary(self, use_icons: bool = True) -> str:
        icon = _ICONS[self.direction] + " " if use_icons else ""
        state = "" if self.active else " (inactive)"
        line = (
            f"{self.name:<12} {icon}{self.direction.value:<8} "
            f"score={self.score:5.1f} conf={self.confidence:5.1f} w={self.weight:.2f}{state}"
        )
        if self.details:
            line += f" | {self.details}"
        return line


class AgreementCount(BaseModel):
    """Active components agreeing with vs. opposing the dominant direction."""

    agree: int = 0
    oppose: int = 0


class CompositeSignal(BaseModel):
    """Fused result of the active component signals of one symbol."""

    symbol: str
    evaluated_at: datetime
    weighted_score: float = 0.0
    overall_confidence: float = 0.0
    dominant_direction: Direction = Direction.NEUTRAL
    agreement: AgreementCount = Field(default_factory=AgreementCount)
    min_confidence: float = 60.0
    components: list[ComponentSignal] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        """Validation gate: confidence, agreement and a non-neutral direction."""
        return (
            self.is_well_formed()
            and self.dominant_direction is not Direction.NEUTRAL
            and self.overall_confidence >= self.min_confidence
            and self.agreement.agree > self.agreement.oppose
        )

    def is_well_formed(self) -> bool:
        """Range checks plus direction/sign consistency of ``weighted_score``."""
        if not _in_range(self.overall_confidence, 0.0, 100.0):
            return False
        if not _in_range(self.weighted_score, -100.0, 100.0):
            return False
        if self.dominant_direction is Direction.BULLISH:
            return self.weighted_score > 0
        if self.dominant_direction is Direction.BEARISH:
            return self.weighted_score < 0
        return True

    def summary(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        return (
            f"{self.symbol} {self.dominant_direction.value} "
            f"score={self.weighted_score:+.1f} conf={self.overall_confidence:.1f} "
            f"agree={self.agreement.agree}/{self.agreement.oppose} {status}"
        )
