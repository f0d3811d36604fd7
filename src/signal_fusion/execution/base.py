"""Execution adapter boundary — order placement lives behind this interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from signal_fusion.core.risk import RiskVerdict
from signal_fusion.models import Direction, PriceUpdate, TradeSetup


@dataclass
class ExecutionResult:
    """Outcome of an open/close request."""

    accepted: bool
    reason: str = ""
    order_id: str | None = None


@dataclass
class TransactionEvent:
    """A fill reported back by the order-management side."""

    kind: Literal["opened", "closed"]
    symbol: str
    direction: Direction = Direction.NEUTRAL
    profitable: bool | None = None
    ts: datetime | None = None


class ExecutionAdapter(ABC):
    """Order-management collaborator the decision engine hands decisions to.

    Implementations may reject by returning ``ExecutionResult(accepted=False)``
    or by raising ``signal_fusion.errors.ExecutionError``. Retries, if any,
    are the adapter's business.
    """

    @abstractmethod
    def validate(self, symbol: str, setup: TradeSetup) -> RiskVerdict:
        """Size and margin checks for a prospective entry."""
        ...

    @abstractmethod
    def open(self, symbol: str, direction: Direction, setup: TradeSetup) -> ExecutionResult:
        ...

    @abstractmethod
    def close(self, symbol: str, reason: str) -> ExecutionResult:
        ...

    def on_price(self, update: PriceUpdate) -> None:
        """Price feed hook for adapters that manage stops/targets locally."""

    def drain_events(self) -> list[TransactionEvent]:
        """Transaction events produced since the last call."""
        return []
