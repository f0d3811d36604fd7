"""Analysis module abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from signal_fusion.models import ComponentSignal, IndicatorSnapshot


class SignalModule(ABC):
    """Base class for every analysis module that produces a ComponentSignal.

    Subclasses set ``name`` and implement ``compute()``. A module recomputes
    only on its own tick (``update()``); ``get_current_signal()`` is a pure
    read of the last computed value and never triggers recomputation.
    Instantiate with keyword params from config to override defaults.
    """

    name: str
    weight: float = 1.0

    def __init__(self, **params: Any) -> None:
        self.params = params
        if "weight" in params:
            self.weight = float(params["weight"])
        self._latest: dict[str, ComponentSignal] = {}

    @abstractmethod
    def compute(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        """Turn one snapshot into this module's opinion.

        Must be pure. Return ``ComponentSignal.inactive(...)`` when the
        inputs the module needs are missing.
        """
        ...

    def update(self, snapshot: IndicatorSnapshot) -> ComponentSignal:
        """The module's own tick: recompute and cache the signal for the symbol."""
        signal = self.compute(snapshot)
        self._latest[snapshot.symbol] = signal
        return signal

    def get_current_signal(self, symbol: str) -> ComponentSignal | None:
        return self._latest.get(symbol)

    def forget(self, symbol: str) -> None:
        self._latest.pop(symbol, None)

    def _signal(self, snapshot: IndicatorSnapshot, **fields: Any) -> ComponentSignal:
        return ComponentSignal(
            name=self.name,
            weight=self.weight,
            timestamp=snapshot.ts,
            **fields,
        )

    def _inactive(self, snapshot: IndicatorSnapshot, details: str) -> ComponentSignal:
        return ComponentSignal(
            name=self.name,
            weight=self.weight,
            timestamp=snapshot.ts,
            active=False,
            details=details,
        )
