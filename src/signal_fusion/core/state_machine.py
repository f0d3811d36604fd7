"""Per-symbol decision state machine.

Phases (derived from state, see ``SymbolDecisionState.phase``):

    IDLE --BUY/SELL--> COOLDOWN --expiry--> IDLE | HAS_OPEN_POSITION
    IDLE --position opened--> HAS_OPEN_POSITION --last position closed--> IDLE

Cooldown and the position count are independent gates: the cooldown
throttles entry timing, ``max_positions`` caps volume.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import structlog

from signal_fusion.config.schema import SetupConfig, SymbolParams
from signal_fusion.core.risk import (
    check_cooldown,
    check_max_positions,
    check_setup,
    check_threshold,
    threshold_for,
)
from signal_fusion.core.setup import build_trade_setup
from signal_fusion.models import (
    CompositeSignal,
    Decision,
    DecisionResult,
    DecisionStatistics,
    Direction,
    Phase,
    PriceUpdate,
    SymbolDecisionState,
    TradeSetup,
)

log = structlog.get_logger("state_machine")


class DecisionStateMachine:
    """Owns the SymbolDecisionState of exactly one symbol."""

    def __init__(
        self,
        symbol: str,
        params: SymbolParams,
        setup_config: SetupConfig | None = None,
    ) -> None:
        self.symbol = symbol
        self.setup_config = setup_config or SetupConfig()
        self.params = params
        self.state = SymbolDecisionState(
            max_positions=params.max_positions,
            buy_threshold=params.buy_threshold,
            sell_threshold=params.sell_threshold,
        )

    @property
    def cooldown(self) -> timedelta:
        return timedelta(minutes=self.params.cooldown_minutes)

    def apply_params(self, params: SymbolParams) -> None:
        """Swap in new (already validated) parameters, keeping runtime state."""
        self.params = params
        self.state.max_positions = params.max_positions
        self.state.buy_threshold = params.buy_threshold
        self.state.sell_threshold = params.sell_threshold

    def phase(self, now: datetime) -> Phase:
        return self.state.phase(now)

    def snapshot(self) -> SymbolDecisionState:
        return self.state.model_copy(deep=True)

    # ── Evaluation ────────────────────────────────────────────

    def evaluate(
        self,
        composite: CompositeSignal,
        now: datetime,
        quote: PriceUpdate | None = None,
    ) -> DecisionResult:
        """Turn a composite into a decision. Never raises."""
        try:
            return self._evaluate(composite, now, quote)
        except Exception:
            log.exception("evaluation_error", symbol=self.symbol)
            return self._hold(now, "evaluation_error", composite)

    def _evaluate(
        self,
        composite: CompositeSignal,
        now: datetime,
        quote: PriceUpdate | None,
    ) -> DecisionResult:
        if composite.symbol != self.symbol:
            return self._hold(now, "symbol_mismatch", composite)
        if not composite.is_well_formed():
            return self._hold(now, "malformed_composite", composite)

        verdict = check_cooldown(self.state, now)
        if not verdict.allowed:
            return self._hold(now, verdict.reason, composite)
        if self.state.cooldown_until is not None:
            # Cooldown expired: fall through and evaluate in this same call
            self.state.cooldown_until = None

        if not composite.is_valid:
            return self._hold(now, "composite_invalid", composite)

        direction = composite.dominant_direction
        if (
            self.state.open_position_count > 0
            and self.state.position_direction is direction.opposite
        ):
            return self._evaluate_reversal(composite, now)

        verdict = check_threshold(composite, self.state)
        if not verdict.allowed:
            return self._hold(now, verdict.reason, composite)

        verdict = check_max_positions(self.state, self.params.allow_position_override)
        if not verdict.allowed:
            return self._hold(now, verdict.reason, composite)

        setup = self._build_setup(composite, quote)
        verdict = check_setup(setup)
        if not verdict.allowed:
            return self._hold(now, verdict.reason, composite)

        decision = Decision.BUY if direction is Direction.BULLISH else Decision.SELL
        self.state.cooldown_until = now + self.cooldown
        return self._emit(decision, now, "signal_confirmed", composite, setup)

    def _evaluate_reversal(self, composite: CompositeSignal, now: datetime) -> DecisionResult:
        """Strong opposing signal against open positions → advisory CLOSE."""
        threshold = threshold_for(self.state, composite.dominant_direction)
        if threshold is not None and composite.overall_confidence >= threshold:
            return self._emit(Decision.CLOSE, now, "signal_reversal", composite)
        return self._hold(now, "reversal_below_threshold", composite)

    def _build_setup(
        self,
        composite: CompositeSignal,
        quote: PriceUpdate | None,
    ) -> TradeSetup | None:
        if quote is None:
            return None
        threshold = threshold_for(self.state, composite.dominant_direction)
        return build_trade_setup(
            direction=composite.dominant_direction,
            entry_price=quote.price,
            confidence=composite.overall_confidence,
            threshold=threshold if threshold is not None else 0.0,
            config=self.setup_config,
            atr=quote.atr,
        )

    def _emit(
        self,
        decision: Decision,
        now: datetime,
        reason: str,
        composite: CompositeSignal,
        setup: TradeSetup | None = None,
    ) -> DecisionResult:
        self.state.last_decision = decision
        self.state.last_decision_time = now
        return DecisionResult(
            symbol=self.symbol,
            decision=decision,
            reason=reason,
            evaluated_at=now,
            setup=setup,
            composite=composite,
        )

    def _hold(self, now: datetime, reason: str, composite: CompositeSignal | None) -> DecisionResult:
        return DecisionResult(
            symbol=self.symbol,
            decision=Decision.HOLD,
            reason=reason,
            evaluated_at=now,
            composite=composite,
        )

    # ── Outcome callbacks ─────────────────────────────────────

    def revert(self, previous: SymbolDecisionState) -> None:
        """Undo a decision the execution adapter did not apply.

        Only the decision-path fields roll back; position counts and
        statistics belong to the transaction notifications.
        """
        self.state.last_decision = previous.last_decision
        self.state.last_decision_time = previous.last_decision_time
        self.state.cooldown_until = previous.cooldown_until

    def on_position_opened(self, direction: Direction | None = None) -> None:
        """Count an opened position; *direction* falls back to the last entry decision.

        With no usable direction the position is still counted, but a reversal
        CLOSE cannot be detected for it until the direction is known.
        """
        if direction is None or direction is Direction.NEUTRAL:
            direction = self.state.last_decision.direction
        if direction is Direction.NEUTRAL:
            direction = self.state.position_direction
        if direction is Direction.NEUTRAL:
            log.warning(
                "position_direction_unknown",
                symbol=self.symbol,
                last_decision=self.state.last_decision.value,
            )
        self.state.open_position_count += 1
        self.state.position_direction = direction
        self.state.statistics.decisions_executed += 1

    def on_position_closed(self, profitable: bool) -> None:
        self.state.open_position_count = max(self.state.open_position_count - 1, 0)
        if self.state.open_position_count == 0:
            self.state.position_direction = Direction.NEUTRAL
        self.state.statistics.closed_trades += 1
        if profitable:
            self.state.statistics.profitable_trades += 1

    def reset_statistics(self) -> None:
        self.state.statistics = DecisionStatistics()
