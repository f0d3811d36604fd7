"""Market inputs — price updates and numeric analysis snapshots."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from signal_fusion.models.signal import Direction, UtcDatetime


class PriceUpdate(BaseModel):
    """High-frequency price-update event for one symbol."""

    symbol: str
    price: Decimal
    ts: UtcDatetime
    atr: Decimal | None = None


class PriceZone(BaseModel):
    """A supply or demand zone reported by the zone-detection collaborator."""

    kind: Literal["demand", "supply"]
    low: Decimal
    high: Decimal
    strength: float = Field(default=50.0, ge=0.0, le=100.0)

    def contains(self, price: Decimal) -> bool:
        return self.low <= price <= self.high

    def distance(self, price: Decimal) -> Decimal:
        if self.contains(price):
            return Decimal(0)
        if price < self.low:
            return self.low - price
        return price - self.high


class CandlePattern(BaseModel):
    """A recognised candle pattern reported by the pattern collaborator."""

    name: str
    direction: Direction
    strength: float = Field(default=50.0, ge=0.0, le=100.0)
    bars_ago: int = Field(default=1, ge=0)


class IndicatorSnapshot(BaseModel):
    """Pre-computed indicator values for one symbol, passed to analysis modules.

    ``values`` holds scalar readings keyed by name, with an optional
    ``:<timeframe>`` suffix (e.g. ``"ema_fast:H1"``, ``"rsi"``).
    """

    symbol: str
    ts: UtcDatetime
    price: Decimal
    atr: Decimal | None = None
    values: dict[str, float] = Field(default_factory=dict)
    zones: list[PriceZone] = Field(default_factory=list)
    patterns: list[CandlePattern] = Field(default_factory=list)

    def value(self, key: str, timeframe: str | None = None) -> float | None:
        if timeframe is not None:
            key = f"{key}:{timeframe}"
        return self.values.get(key)

    def to_price_update(self) -> PriceUpdate:
        return PriceUpdate(symbol=self.symbol, price=self.price, ts=self.ts, atr=self.atr)
