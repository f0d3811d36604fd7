"""Aggregation — weight normalisation, composite score and the validation gate.

Pure functions, no state. Given the same inputs they return identical
outputs, so a composite can always be recomputed for auditing.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import numpy as np
import structlog

from signal_fusion.config.schema import AggregationConfig
from signal_fusion.models import (
    AgreementCount,
    ComponentSignal,
    CompositeSignal,
    Direction,
)

log = structlog.get_logger("aggregation")


def normalize_weights(weights: Sequence[float]) -> np.ndarray:
    """Scale *weights* to sum to 1.0; equal weighting when the sum is zero."""
    arr = np.asarray(weights, dtype=np.float64)
    if arr.size == 0:
        return arr
    total = arr.sum()
    if total <= 0:
        return np.full(arr.size, 1.0 / arr.size)
    return arr / total


def classify_direction(weighted_score: float, neutral_band: float) -> Direction:
    """Dead-zone classification; a score exactly on the band edge is NEUTRAL."""
    if weighted_score > neutral_band:
        return Direction.BULLISH
    if weighted_score < -neutral_band:
        return Direction.BEARISH
    return Direction.NEUTRAL


def count_agreement(signals: Sequence[ComponentSignal], dominant: Direction) -> AgreementCount:
    if dominant is Direction.NEUTRAL:
        return AgreementCount()
    agree = sum(1 for s in signals if s.direction is dominant)
    oppose = sum(1 for s in signals if s.direction is dominant.opposite)
    return AgreementCount(agree=agree, oppose=oppose)


def usable_signals(signals: Sequence[ComponentSignal]) -> list[ComponentSignal]:
    """Drop inactive and malformed signals before any weighting happens."""
    usable = []
    for s in signals:
        if not s.active:
            continue
        if not s.is_well_formed():
            log.warning("malformed_signal_discarded", module=s.name)
            continue
        usable.append(s)
    return usable


def aggregate(
    symbol: str,
    signals: Sequence[ComponentSignal],
    config: AggregationConfig,
    now: datetime,
) -> CompositeSignal:
    """Fuse component signals into one CompositeSignal.

    weighted_score     = clip(sum(w_i * score_i * sign_i), -100, 100)
    overall_confidence = sum(w_i * confidence_i)   (weighted mean)
    with w_i the normalised weights of the usable signals.
    """
    usable = usable_signals(signals)
    if not usable:
        return CompositeSignal(
            symbol=symbol,
            evaluated_at=now,
            min_confidence=config.min_confidence,
        )

    weights = normalize_weights([s.weight for s in usable])
    scores = np.array([s.score for s in usable], dtype=np.float64)
    signs = np.array([s.sign for s in usable], dtype=np.float64)
    confidences = np.array([s.confidence for s in usable], dtype=np.float64)

    weighted_score = float(np.clip(np.sum(weights * scores * signs), -100.0, 100.0))
    overall_confidence = float(np.clip(np.sum(weights * confidences), 0.0, 100.0))
    dominant = classify_direction(weighted_score, config.neutral_band)

    return CompositeSignal(
        symbol=symbol,
        evaluated_at=now,
        weighted_score=weighted_score,
        overall_confidence=overall_confidence,
        dominant_direction=dominant,
        agreement=count_agreement(usable, dominant),
        min_confidence=config.min_confidence,
        components=list(usable),
    )
