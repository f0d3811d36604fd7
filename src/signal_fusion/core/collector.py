"""Signal collector — snapshot reads of every registered module for a symbol."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

import structlog

from signal_fusion.models import ComponentSignal
from signal_fusion.modules import SignalModule

log = structlog.get_logger("collector")


class SignalCollector:
    """Gathers the latest active, fresh ComponentSignal from each module.

    Inactive and stale signals are omitted from the result, never zeroed.
    An empty list is a valid "no opinion" outcome.
    """

    def __init__(
        self,
        modules: Iterable[SignalModule],
        staleness_s: float,
        weights: Mapping[str, float] | None = None,
        use_component_weights: bool = True,
    ) -> None:
        self.modules = list(modules)
        self.staleness_s = staleness_s
        self.weights = dict(weights or {})
        self.use_component_weights = use_component_weights

    def _effective_weight(self, signal: ComponentSignal) -> float:
        if not self.use_component_weights:
            return 1.0
        return self.weights.get(signal.name, signal.weight)

    def is_stale(self, signal: ComponentSignal, now: datetime) -> bool:
        return (now - signal.timestamp).total_seconds() > self.staleness_s

    def collect(self, symbol: str, now: datetime) -> list[ComponentSignal]:
        """Return the usable signals for *symbol*, in module registration order."""
        collected: list[ComponentSignal] = []
        for module in self.modules:
            try:
                signal = module.get_current_signal(symbol)
            except Exception:
                log.exception("module_read_error", module=module.name, symbol=symbol)
                continue

            if signal is None or not signal.active:
                continue
            try:
                stale = self.is_stale(signal, now)
            except TypeError:
                # naive timestamp against an aware clock, or a non-datetime
                log.warning(
                    "signal_timestamp_unusable",
                    module=module.name,
                    symbol=symbol,
                    timestamp=repr(signal.timestamp),
                )
                continue
            if stale:
                log.debug(
                    "stale_signal_skipped",
                    module=module.name,
                    symbol=symbol,
                    age_s=(now - signal.timestamp).total_seconds(),
                )
                continue

            weight = self._effective_weight(signal)
            if weight != signal.weight:
                signal = signal.model_copy(update={"weight": weight})
            collected.append(signal)
        return collected
