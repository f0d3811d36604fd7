"""In-memory paper execution adapter — fills at the quoted price."""

from __future__ import annotations

import itertools
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import structlog

from signal_fusion.config.schema import ExecutionConfig
from signal_fusion.core.risk import RiskVerdict
from signal_fusion.core.setup import calculate_position_size
from signal_fusion.execution.base import ExecutionAdapter, ExecutionResult, TransactionEvent
from signal_fusion.models import Direction, PriceUpdate, TradeSetup

log = structlog.get_logger("paper_execution")


def calculate_pnl(
    direction: Direction,
    entry_price: Decimal,
    exit_price: Decimal,
    quantity: Decimal,
) -> Decimal:
    """Realised P&L for a closed position.

    BULLISH: (exit - entry) * qty
    BEARISH: (entry - exit) * qty
    """
    if direction is Direction.BULLISH:
        return (exit_price - entry_price) * quantity
    return (entry_price - exit_price) * quantity


@dataclass
class PaperPosition:
    order_id: str
    symbol: str
    direction: Direction
    entry_price: Decimal
    stop_loss: Decimal
    take_profit: Decimal
    quantity: Decimal
    opened_at: datetime | None = None

    @property
    def notional(self) -> Decimal:
        return self.entry_price * self.quantity

    def exit_reason(self, price: Decimal) -> str | None:
        """'stop_loss' / 'take_profit' when *price* crosses a level."""
        if self.direction is Direction.BULLISH:
            if price <= self.stop_loss:
                return "stop_loss"
            if price >= self.take_profit:
                return "take_profit"
        else:
            if price >= self.stop_loss:
                return "stop_loss"
            if price <= self.take_profit:
                return "take_profit"
        return None


class PaperExecutionAdapter(ExecutionAdapter):
    """Simulated order management with fixed-fractional sizing and a margin cap."""

    def __init__(
        self,
        config: ExecutionConfig | None = None,
        symbol_risk: dict[str, float] | None = None,
        default_risk_pct: float = 0.01,
    ) -> None:
        self.config = config or ExecutionConfig()
        self.equity = Decimal(str(self.config.equity))
        self.symbol_risk = dict(symbol_risk or {})
        self.default_risk_pct = default_risk_pct
        self.positions: dict[str, list[PaperPosition]] = defaultdict(list)
        self._last_price: dict[str, PriceUpdate] = {}
        self._events: list[TransactionEvent] = []
        self._ids = itertools.count(1)

    # ── Sizing / margin ───────────────────────────────────────

    def _quantity(self, symbol: str, setup: TradeSetup) -> Decimal:
        risk_pct = self.symbol_risk.get(symbol, self.default_risk_pct)
        return calculate_position_size(setup, self.equity, risk_pct)

    def used_margin(self) -> Decimal:
        leverage = Decimal(str(self.config.leverage))
        return sum(
            (p.notional / leverage for ps in self.positions.values() for p in ps),
            Decimal(0),
        )

    def validate(self, symbol: str, setup: TradeSetup) -> RiskVerdict:
        if not setup.is_valid():
            return RiskVerdict(allowed=False, reason="invalid_setup")
        quantity = self._quantity(symbol, setup)
        if quantity <= 0:
            return RiskVerdict(allowed=False, reason="zero_quantity")
        margin = setup.entry_price * quantity / Decimal(str(self.config.leverage))
        budget = self.equity * Decimal(str(self.config.max_margin_pct))
        if self.used_margin() + margin > budget:
            return RiskVerdict(
                allowed=False,
                reason=f"insufficient_margin ({float(self.used_margin() + margin):.0f}/{float(budget):.0f})",
            )
        return RiskVerdict(allowed=True)

    # ── Orders ────────────────────────────────────────────────

    def open(self, symbol: str, direction: Direction, setup: TradeSetup) -> ExecutionResult:
        verdict = self.validate(symbol, setup)
        if not verdict.allowed:
            return ExecutionResult(accepted=False, reason=verdict.reason)

        quote = self._last_price.get(symbol)
        position = PaperPosition(
            order_id=f"paper-{next(self._ids)}",
            symbol=symbol,
            direction=direction,
            entry_price=setup.entry_price,
            stop_loss=setup.stop_loss,
            take_profit=setup.take_profit,
            quantity=self._quantity(symbol, setup),
            opened_at=quote.ts if quote else None,
        )
        self.positions[symbol].append(position)
        self._events.append(TransactionEvent(
            kind="opened",
            symbol=symbol,
            direction=direction,
            ts=position.opened_at,
        ))
        log.info(
            "paper_position_opened",
            symbol=symbol,
            direction=direction.value,
            entry=str(position.entry_price),
            quantity=str(position.quantity),
            order_id=position.order_id,
        )
        return ExecutionResult(accepted=True, order_id=position.order_id)

    def close(self, symbol: str, reason: str) -> ExecutionResult:
        open_positions = self.positions.get(symbol)
        if not open_positions:
            return ExecutionResult(accepted=False, reason="no_open_position")
        quote = self._last_price.get(symbol)
        if quote is None:
            return ExecutionResult(accepted=False, reason="no_price")
        for position in list(open_positions):
            self._close_position(position, quote, reason)
        return ExecutionResult(accepted=True)

    def _close_position(self, position: PaperPosition, quote: PriceUpdate, reason: str) -> None:
        pnl = calculate_pnl(position.direction, position.entry_price, quote.price, position.quantity)
        self.equity += pnl
        self.positions[position.symbol].remove(position)
        self._events.append(TransactionEvent(
            kind="closed",
            symbol=position.symbol,
            ts=quote.ts,
            direction=position.direction,
            profitable=pnl > 0,
        ))
        log.info(
            "paper_position_closed",
            symbol=position.symbol,
            reason=reason,
            exit=str(quote.price),
            pnl=float(pnl),
            order_id=position.order_id,
        )

    # ── Feed / events ─────────────────────────────────────────

    def on_price(self, update: PriceUpdate) -> None:
        """Record the quote and close positions whose stop or target was hit."""
        self._last_price[update.symbol] = update
        for position in list(self.positions.get(update.symbol, [])):
            reason = position.exit_reason(update.price)
            if reason is not None:
                self._close_position(position, update, reason)

    def drain_events(self) -> list[TransactionEvent]:
        events, self._events = self._events, []
        return events
