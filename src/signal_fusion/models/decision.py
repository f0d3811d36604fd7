"""Decision models — trade setups, per-symbol decision state and results."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from signal_fusion.models.signal import CompositeSignal, Direction


class Decision(str, Enum):
    """Final output of the decision engine."""

    NONE = "NONE"
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    CLOSE = "CLOSE"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def is_entry(self) -> bool:
        return self in (Decision.BUY, Decision.SELL)

    @property
    def direction(self) -> Direction:
        if self is Decision.BUY:
            return Direction.BULLISH
        if self is Decision.SELL:
            return Direction.BEARISH
        return Direction.NEUTRAL


class Phase(str, Enum):
    """Decision state machine phases."""

    IDLE = "IDLE"
    COOLDOWN = "COOLDOWN"
    HAS_OPEN_POSITION = "HAS_OPEN_POSITION"


class TradeSetup(BaseModel):
    """Entry/stop/target/size plan attached to an actionable decision."""

    model_config = ConfigDict(frozen=True)

    direction: Direction
    entry_price: Decimal
    stop_loss: Decimal
    take_profit: Decimal
    position_size_multiplier: float = 1.0
    risk_reward_ratio: float = 0.0

    @property
    def risk_distance(self) -> Decimal:
        return abs(self.entry_price - self.stop_loss)

    @property
    def reward_distance(self) -> Decimal:
        return abs(self.take_profit - self.entry_price)

    def is_valid(self) -> bool:
        """Stop and target on the correct side of entry, positive risk distance."""
        if self.entry_price <= 0 or self.position_size_multiplier <= 0:
            return False
        if self.direction is Direction.BULLISH:
            return self.stop_loss < self.entry_price < self.take_profit
        if self.direction is Direction.BEARISH:
            return self.take_profit < self.entry_price < self.stop_loss
        return False

    def rrr_string(self) -> str:
        return f"1:{self.risk_reward_ratio:.2f}"


class DecisionStatistics(BaseModel):
    """Outcome counters, fed only by trade-transaction notifications."""

    decisions_executed: int = 0
    closed_trades: int = 0
    profitable_trades: int = 0

    @property
    def accuracy(self) -> float:
        """Percent of closed trades that were profitable."""
        if self.closed_trades <= 0:
            return 0.0
        return self.profitable_trades / self.closed_trades * 100


class SymbolDecisionState(BaseModel):
    """Mutable per-symbol state owned by one DecisionStateMachine."""

    last_decision: Decision = Decision.NONE
    last_decision_time: datetime | None = None
    cooldown_until: datetime | None = None
    open_position_count: int = 0
    position_direction: Direction = Direction.NEUTRAL
    max_positions: int = 1
    buy_threshold: float = 70.0
    sell_threshold: float = 70.0
    statistics: DecisionStatistics = Field(default_factory=DecisionStatistics)

    def in_cooldown(self, now: datetime) -> bool:
        return self.cooldown_until is not None and now < self.cooldown_until

    def phase(self, now: datetime) -> Phase:
        if self.in_cooldown(now):
            return Phase.COOLDOWN
        if self.open_position_count > 0:
            return Phase.HAS_OPEN_POSITION
        return Phase.IDLE


class DecisionResult(BaseModel):
    """What one evaluation decided, and why."""

    symbol: str
    decision: Decision
    reason: str = ""
    evaluated_at: datetime
    setup: TradeSetup | None = None
    composite: CompositeSignal | None = None
    executed: bool = False


class SymbolStatus(BaseModel):
    """Read-only diagnostics snapshot of one symbol."""

    symbol: str
    phase: Phase
    last_decision: Decision
    last_decision_time: datetime | None = None
    cooldown_until: datetime | None = None
    open_position_count: int
    max_positions: int
    buy_threshold: float
    sell_threshold: float
    decisions_executed: int
    closed_trades: int
    profitable_trades: int
    accuracy: float
    last_composite: str | None = None
