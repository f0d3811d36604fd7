"""DecisionEngine — symbol registry and the collect → aggregate → evaluate → execute pipeline."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from signal_fusion.config.schema import AppConfig, SymbolParams
from signal_fusion.core.aggregation import aggregate
from signal_fusion.core.collector import SignalCollector
from signal_fusion.core.state_machine import DecisionStateMachine
from signal_fusion.errors import ConfigurationError, ExecutionError
from signal_fusion.execution.base import ExecutionAdapter
from signal_fusion.logging.throttle import LogThrottle
from signal_fusion.models import (
    CompositeSignal,
    Decision,
    DecisionResult,
    Direction,
    PriceUpdate,
    SymbolDecisionState,
    SymbolStatus,
)
from signal_fusion.models.signal import as_utc
from signal_fusion.modules import SignalModule

log = structlog.get_logger("decision_engine")


def validate_symbol_params(params: SymbolParams) -> list[str]:
    """Every problem with *params*, empty when they are usable."""
    problems: list[str] = []
    if not 0 < params.buy_threshold <= 100:
        problems.append(f"buy_threshold must be in (0, 100], got {params.buy_threshold}")
    if not 0 < params.sell_threshold <= 100:
        problems.append(f"sell_threshold must be in (0, 100], got {params.sell_threshold}")
    if params.cooldown_minutes < 0:
        problems.append(f"cooldown_minutes must be >= 0, got {params.cooldown_minutes}")
    if params.max_positions < 1:
        problems.append(f"max_positions must be >= 1, got {params.max_positions}")
    if not 0 < params.risk_pct <= 1:
        problems.append(f"risk_pct must be in (0, 1], got {params.risk_pct}")
    return problems


class DecisionEngine:
    """Turns module signals into per-symbol trade decisions.

    Single-threaded: every public method runs to completion before the next
    event is dispatched, so evaluations for one symbol never interleave and
    transaction notifications are serialised with them.
    """

    def __init__(
        self,
        config: AppConfig,
        modules: Iterable[SignalModule],
        adapter: ExecutionAdapter,
    ) -> None:
        self.config = config
        self.aggregation = config.aggregation.model_copy()
        self.modules = list(modules)
        self.adapter = adapter
        self.collector = SignalCollector(
            self.modules,
            staleness_s=self.aggregation.staleness_bound_s,
            weights={name: m.weight for name, m in config.modules.items()},
            use_component_weights=self.aggregation.use_component_weights,
        )
        self._machines: dict[str, DecisionStateMachine] = {}
        self._last_composite: dict[str, CompositeSignal] = {}
        self._last_result: dict[str, DecisionResult] = {}
        self._status_throttle = LogThrottle(config.logging.status_interval_s)
        self._last_event_ts: datetime | None = None

    # ── Symbol registry ───────────────────────────────────────

    def register_symbol(self, symbol: str, params: SymbolParams | None = None) -> None:
        """Create the state machine for *symbol*.

        Raises ConfigurationError (logged once, here) when the parameters
        are unusable or the symbol is already registered.
        """
        params = params or SymbolParams()
        problems = validate_symbol_params(params)
        if symbol in self._machines:
            problems.insert(0, "symbol already registered")
        if problems:
            log.warning("symbol_registration_rejected", symbol=symbol, problems=problems)
            raise ConfigurationError(symbol, problems)

        self._machines[symbol] = DecisionStateMachine(symbol, params, self.config.setup)
        log.info(
            "symbol_registered",
            symbol=symbol,
            buy_threshold=params.buy_threshold,
            sell_threshold=params.sell_threshold,
            cooldown_minutes=params.cooldown_minutes,
            max_positions=params.max_positions,
        )

    def quick_register(
        self,
        symbol: str,
        buy_threshold: float = 70.0,
        sell_threshold: float = 70.0,
        risk_pct: float = 0.01,
        cooldown_minutes: float = 15.0,
        max_positions: int = 1,
    ) -> None:
        self.register_symbol(
            symbol,
            SymbolParams(
                buy_threshold=buy_threshold,
                sell_threshold=sell_threshold,
                risk_pct=risk_pct,
                cooldown_minutes=cooldown_minutes,
                max_positions=max_positions,
            ),
        )

    def unregister_symbol(self, symbol: str) -> bool:
        machine = self._machines.pop(symbol, None)
        if machine is None:
            return False
        self._last_composite.pop(symbol, None)
        self._last_result.pop(symbol, None)
        for module in self.modules:
            module.forget(symbol)
        log.info("symbol_unregistered", symbol=symbol)
        return True

    def has_symbol(self, symbol: str) -> bool:
        return symbol in self._machines

    @property
    def symbol_count(self) -> int:
        return len(self._machines)

    @property
    def symbols(self) -> list[str]:
        return list(self._machines)

    def set_symbol_params(self, symbol: str, params: SymbolParams) -> None:
        machine = self._require(symbol)
        problems = validate_symbol_params(params)
        if problems:
            log.warning("symbol_params_rejected", symbol=symbol, problems=problems)
            raise ConfigurationError(symbol, problems)
        machine.apply_params(params)
        log.info("symbol_params_updated", symbol=symbol)

    def get_symbol_params(self, symbol: str) -> SymbolParams:
        return self._require(symbol).params.model_copy()

    def _require(self, symbol: str) -> DecisionStateMachine:
        machine = self._machines.get(symbol)
        if machine is None:
            raise KeyError(f"Symbol not registered: {symbol!r}")
        return machine

    # ── Global tuning ─────────────────────────────────────────

    def set_min_confidence(self, value: float) -> None:
        if not 0 <= value <= 100:
            raise ConfigurationError("min_confidence", [f"must be in [0, 100], got {value}"])
        self.aggregation.min_confidence = value
        log.info("min_confidence_updated", min_confidence=value)

    def set_neutral_band(self, value: float) -> None:
        if not 0 <= value < 100:
            raise ConfigurationError("neutral_band", [f"must be in [0, 100), got {value}"])
        self.aggregation.neutral_band = value
        log.info("neutral_band_updated", neutral_band=value)

    def set_use_component_weights(self, use: bool) -> None:
        self.aggregation.use_component_weights = use
        self.collector.use_component_weights = use

    # ── Events ────────────────────────────────────────────────

    def on_price_update(self, update: PriceUpdate) -> DecisionResult:
        """Run the whole pipeline for one symbol, synchronously."""
        self._last_event_ts = update.ts
        machine = self._machines.get(update.symbol)
        if machine is None:
            return DecisionResult(
                symbol=update.symbol,
                decision=Decision.HOLD,
                reason="symbol_not_registered",
                evaluated_at=update.ts,
            )

        now = update.ts
        signals = self.collector.collect(update.symbol, now)
        composite = aggregate(update.symbol, signals, self.aggregation, now)
        self._last_composite[update.symbol] = composite

        previous = machine.snapshot()
        result = machine.evaluate(composite, now, quote=update)
        if result.decision.is_entry:
            result = self._execute_entry(machine, previous, result)
        elif result.decision is Decision.CLOSE:
            result = self._execute_close(machine, previous, result)
        else:
            log.debug("hold", symbol=update.symbol, reason=result.reason)

        self._last_result[update.symbol] = result
        return result

    def _execute_entry(
        self,
        machine: DecisionStateMachine,
        previous: SymbolDecisionState,
        result: DecisionResult,
    ) -> DecisionResult:
        setup = result.setup
        direction = result.decision.direction
        try:
            verdict = self.adapter.validate(result.symbol, setup)
            if not verdict.allowed:
                return self._reject(machine, previous, result, verdict.reason)
            outcome = self.adapter.open(result.symbol, direction, setup)
        except ExecutionError as exc:
            return self._reject(machine, previous, result, str(exc))
        except Exception:
            log.exception("execution_adapter_error", symbol=result.symbol)
            return self._reject(machine, previous, result, "adapter_error")

        if not outcome.accepted:
            return self._reject(machine, previous, result, outcome.reason)

        log.info(
            "decision_executed",
            symbol=result.symbol,
            decision=result.decision.value,
            confidence=round(result.composite.overall_confidence, 2),
            score=round(result.composite.weighted_score, 2),
            entry=str(setup.entry_price),
            stop=str(setup.stop_loss),
            target=str(setup.take_profit),
            rr=setup.rrr_string(),
            size_multiplier=round(setup.position_size_multiplier, 3),
            order_id=outcome.order_id,
        )
        return result.model_copy(update={"executed": True})

    def _execute_close(
        self,
        machine: DecisionStateMachine,
        previous: SymbolDecisionState,
        result: DecisionResult,
    ) -> DecisionResult:
        try:
            outcome = self.adapter.close(result.symbol, result.reason)
        except ExecutionError as exc:
            return self._reject(machine, previous, result, str(exc))
        except Exception:
            log.exception("execution_adapter_error", symbol=result.symbol)
            return self._reject(machine, previous, result, "adapter_error")

        if not outcome.accepted:
            return self._reject(machine, previous, result, outcome.reason)
        log.info("close_requested", symbol=result.symbol, reason=result.reason)
        return result.model_copy(update={"executed": True})

    def _reject(
        self,
        machine: DecisionStateMachine,
        previous: SymbolDecisionState,
        result: DecisionResult,
        reason: str,
    ) -> DecisionResult:
        """Decision not applied: restore pre-decision state, cooldown not consumed."""
        machine.revert(previous)
        log.warning(
            "execution_rejected",
            symbol=result.symbol,
            decision=result.decision.value,
            reason=reason,
        )
        return result.model_copy(
            update={"executed": False, "reason": f"execution_rejected: {reason}"}
        )

    def on_timer(self, now: datetime | None = None) -> None:
        """Lower-frequency housekeeping: a throttled status summary."""
        now = self.clock(now)
        if not self._machines or not self._status_throttle.should_log("status", now):
            return
        log.info(
            "engine_status",
            symbols=self.symbol_count,
            phases={s: m.phase(now).value for s, m in self._machines.items()},
            composites={s: c.summary() for s, c in self._last_composite.items()},
            accuracy=round(self.get_decision_accuracy(), 2),
        )

    def on_position_opened(self, symbol: str, direction: Direction | None = None) -> None:
        machine = self._machines.get(symbol)
        if machine is None:
            log.warning("notification_for_unknown_symbol", symbol=symbol, kind="opened")
            return
        machine.on_position_opened(direction)
        log.info(
            "position_opened",
            symbol=symbol,
            open_positions=machine.state.open_position_count,
        )

    def on_position_closed(self, symbol: str, outcome_profitable: bool) -> None:
        machine = self._machines.get(symbol)
        if machine is None:
            log.warning("notification_for_unknown_symbol", symbol=symbol, kind="closed")
            return
        machine.on_position_closed(outcome_profitable)
        log.info(
            "position_closed",
            symbol=symbol,
            profitable=outcome_profitable,
            open_positions=machine.state.open_position_count,
        )

    # ── Diagnostics (read-only) ───────────────────────────────

    def get_last_composite(self, symbol: str) -> CompositeSignal | None:
        composite = self._last_composite.get(symbol)
        return composite.model_copy(deep=True) if composite is not None else None

    def get_last_result(self, symbol: str) -> DecisionResult | None:
        result = self._last_result.get(symbol)
        return result.model_copy(deep=True) if result is not None else None

    def get_current_decision(self, symbol: str) -> Decision:
        return self._require(symbol).state.last_decision

    @property
    def last_event_time(self) -> datetime | None:
        return self._last_event_ts

    def clock(self, now: datetime | None = None) -> datetime:
        """Time used for phase queries: *now* if given, else the last event's time.

        Cooldowns are kept in event time, so wall time is only a fallback
        before the first price update.
        """
        if now is not None:
            return as_utc(now)
        if self._last_event_ts is not None:
            return self._last_event_ts
        return datetime.now(timezone.utc)

    def get_state(self, symbol: str) -> SymbolDecisionState:
        return self._require(symbol).snapshot()

    def get_status(self, symbol: str, now: datetime | None = None) -> SymbolStatus:
        machine = self._require(symbol)
        now = self.clock(now)
        state = machine.state
        composite = self._last_composite.get(symbol)
        return SymbolStatus(
            symbol=symbol,
            phase=machine.phase(now),
            last_decision=state.last_decision,
            last_decision_time=state.last_decision_time,
            cooldown_until=state.cooldown_until,
            open_position_count=state.open_position_count,
            max_positions=state.max_positions,
            buy_threshold=state.buy_threshold,
            sell_threshold=state.sell_threshold,
            decisions_executed=state.statistics.decisions_executed,
            closed_trades=state.statistics.closed_trades,
            profitable_trades=state.statistics.profitable_trades,
            accuracy=state.statistics.accuracy,
            last_composite=composite.summary() if composite is not None else None,
        )

    def get_decision_accuracy(self) -> float:
        """Percent of closed trades that were profitable, across all symbols."""
        closed = sum(m.state.statistics.closed_trades for m in self._machines.values())
        if closed == 0:
            return 0.0
        profitable = sum(m.state.statistics.profitable_trades for m in self._machines.values())
        return profitable / closed * 100

    def reset_statistics(self, symbol: str | None = None) -> None:
        machines = [self._require(symbol)] if symbol is not None else self._machines.values()
        for machine in machines:
            machine.reset_statistics()
