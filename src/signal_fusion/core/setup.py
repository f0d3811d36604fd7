"""Trade setup construction and sizing — pure functions, no state."""

from __future__ import annotations

from decimal import Decimal

from signal_fusion.config.schema import SetupConfig
from signal_fusion.models import Direction, TradeSetup


def calculate_stop_price(
    direction: Direction,
    entry_price: Decimal,
    config: SetupConfig,
    atr: Decimal | None = None,
) -> Decimal:
    """Calculate the stop-loss price.

    With ATR:    entry ∓ atr * atr_stop_multiplier
    Without ATR: entry * (1 ∓ stop_loss_pct)
    """
    if atr is not None and atr > 0:
        distance = atr * Decimal(str(config.atr_stop_multiplier))
    else:
        distance = entry_price * Decimal(str(config.stop_loss_pct))
    if direction is Direction.BULLISH:
        return entry_price - distance
    return entry_price + distance


def confidence_adjusted_rr(base_rr: float, confidence: float) -> float:
    """Stretch the reward target with confidence: base_rr * (0.5 + confidence/100)."""
    return base_rr * (0.5 + confidence / 100.0)


def calculate_take_profit_price(
    direction: Direction,
    entry_price: Decimal,
    stop_loss: Decimal,
    rr: float,
) -> Decimal:
    """Target placed ``rr`` risk distances beyond entry."""
    reward = abs(entry_price - stop_loss) * Decimal(str(rr))
    if direction is Direction.BULLISH:
        return entry_price + reward
    return entry_price - reward


def size_multiplier(confidence: float, threshold: float, config: SetupConfig) -> float:
    """Linear map: ``min_size_multiplier`` at the threshold → ``max_size_multiplier`` at 100."""
    low, high = config.min_size_multiplier, config.max_size_multiplier
    if threshold >= 100:
        return low
    t = (confidence - threshold) / (100.0 - threshold)
    t = min(max(t, 0.0), 1.0)
    return low + (high - low) * t


def build_trade_setup(
    direction: Direction,
    entry_price: Decimal,
    confidence: float,
    threshold: float,
    config: SetupConfig,
    atr: Decimal | None = None,
) -> TradeSetup:
    """Build the immutable TradeSetup for a BUY (BULLISH) or SELL (BEARISH)."""
    stop = calculate_stop_price(direction, entry_price, config, atr)
    rr = confidence_adjusted_rr(config.base_rr, confidence)
    target = calculate_take_profit_price(direction, entry_price, stop, rr)
    return TradeSetup(
        direction=direction,
        entry_price=entry_price,
        stop_loss=stop,
        take_profit=target,
        position_size_multiplier=size_multiplier(confidence, threshold, config),
        risk_reward_ratio=rr,
    )


def calculate_position_size(
    setup: TradeSetup,
    equity: Decimal,
    risk_pct: float,
) -> Decimal:
    """Fixed-fractional size scaled by the setup's multiplier.

    risk_amount = equity * risk_pct * multiplier
    quantity    = risk_amount / risk_distance
    """
    if setup.risk_distance == 0:
        return Decimal("0")
    risk_amount = equity * Decimal(str(risk_pct)) * Decimal(str(setup.position_size_multiplier))
    return risk_amount / setup.risk_distance
