"""
Momentum Signal Module
======================
Scores the synthesized series and maps the score to a discrete signal.

    momentum = (P_last - P_{-20}) / P_{-20} + U(-0.5, 0.5) · 0.1

The uniform jitter is part of the scoring rule; a seeded random source
makes it reproducible.
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from titan_engine.errors import NumericAnomaly, PreconditionViolation
from titan_engine.market_data import PricePoint
from titan_engine.random_source import resolve_rng

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
LOOKBACK: int = 20
MIN_SERIES_LENGTH: int = LOOKBACK + 1
SIGNAL_THRESHOLD: float = 0.02
MOMENTUM_NOISE: float = 0.1


class Signal(enum.Enum):
    BULLISH = "BULLISH"
    NEUTRAL = "NEUTRAL"
    BEARISH = "BEARISH"


@dataclass(frozen=True)
class SignalScore:
    """Discrete signal plus the momentum value that produced it."""

    signal: Signal
    momentum: float


def classify_momentum(momentum: float, threshold: float = SIGNAL_THRESHOLD) -> Signal:
    """Strict thresholds: exactly ±threshold is NEUTRAL."""
    if momentum > threshold:
        return Signal.BULLISH
    if momentum < -threshold:
        return Signal.BEARISH
    return Signal.NEUTRAL


def score_signal(
    series: Sequence[PricePoint],
    rng: Optional[object] = None,
) -> SignalScore:
    """
    Compute noisy momentum over the last 20 steps and classify it.

    Parameters
    ----------
    series : sequence of PricePoint
        At least 21 points.
    rng : RandomSource, optional
        Source of the single jitter draw.

    Returns
    -------
    SignalScore

    Raises
    ------
    PreconditionViolation
        If the series holds fewer than 21 points.
    NumericAnomaly
        If the reference close is zero or the score is not finite.
    """
    if len(series) < MIN_SERIES_LENGTH:
        raise PreconditionViolation(
            f"Momentum needs at least {MIN_SERIES_LENGTH} points, got {len(series)}",
            {"length": len(series)},
        )
    rng = resolve_rng(rng)

    last = series[-1].close
    reference = series[-LOOKBACK].close
    if reference == 0:
        raise NumericAnomaly("Reference close is zero", {"reference": reference})

    momentum = (last - reference) / reference + (rng.random() - 0.5) * MOMENTUM_NOISE
    if not math.isfinite(momentum):
        raise NumericAnomaly("Momentum is not finite", {"momentum": momentum})

    signal = classify_momentum(momentum)
    logger.debug("Momentum %.5f -> %s", momentum, signal.value)
    return SignalScore(signal=signal, momentum=momentum)
