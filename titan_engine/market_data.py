"""
Synthetic Market Data Module
============================
Generates the daily price series every other stage of the analysis
consumes. There is no data ingestion: prices follow a multiplicative
random walk whose step size scales with the current price.

Mathematical Foundation:
    Price step:    P_t = P_{t-1} + U(-0.5, 0.5) · σ · P_{t-1}
    Log return:    r_t = ln(P_t / P_{t-1})
    Reflexivity:   ρ_t = ((P_t - M_t) / M_t) · (V_t / V_ref)

The "MA20" M_t is NOT a rolling average. It is the current price
perturbed by up to ±2.5%, kept synthetic so reflexivity readings match
the dashboard this engine backs.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from titan_engine.errors import NumericAnomaly, require_count
from titan_engine.random_source import resolve_rng

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
DEFAULT_DAYS: int = 100
BASE_PRICE: float = 100.0
PRICE_RANGE: float = 50.0
DAILY_VOLATILITY: float = 0.02
MA_NOISE: float = 0.05
MIN_VOLUME: int = 1_000_000
VOLUME_RANGE: int = 5_000_000
REFERENCE_VOLUME: float = 2_500_000.0


@dataclass(frozen=True)
class PricePoint:
    """One synthetic trading day."""

    date: date
    close: float
    reflexivity: float
    volume: int = 0
    ma20: float = 0.0


Series = Tuple[PricePoint, ...]


def synthesize_market_data(
    days: int = DEFAULT_DAYS,
    rng: Optional[object] = None,
    today: Optional[date] = None,
) -> Series:
    """
    Generate a chronological synthetic price series.

    Per day, three uniform draws are consumed in this order: price
    shock, volume, MA perturbation.

    Parameters
    ----------
    days : int
        Number of points to produce (>= 1).
    rng : RandomSource, optional
        Source of uniform draws. A fresh unseeded source if omitted.
    today : datetime.date, optional
        Anchor date; point ``i`` is dated ``today - (days - i)``.

    Returns
    -------
    tuple of PricePoint
        Exactly ``days`` points in strictly increasing date order.

    Raises
    ------
    PreconditionViolation
        If ``days`` is not a positive integer.
    NumericAnomaly
        If the walk produces a non-positive or non-finite close.
    """
    days = require_count(days, "days", 1)
    rng = resolve_rng(rng)
    anchor = today or date.today()

    price = BASE_PRICE + rng.random() * PRICE_RANGE
    points = []

    for i in range(days):
        change = (rng.random() - 0.5) * DAILY_VOLATILITY * price
        price += change

        if not math.isfinite(price) or price <= 0:
            raise NumericAnomaly(
                f"Synthetic close became non-positive at step {i}",
                {"step": i, "close": price},
            )

        volume = math.floor(rng.random() * VOLUME_RANGE) + MIN_VOLUME
        ma20 = price * (1 + (rng.random() - 0.5) * MA_NOISE)
        reflexivity = ((price - ma20) / ma20) * (volume / REFERENCE_VOLUME)

        points.append(PricePoint(
            date=anchor - timedelta(days=days - i),
            close=price,
            reflexivity=reflexivity,
            volume=volume,
            ma20=ma20,
        ))

    logger.debug(
        "Synthesized %d days: first close %.4f, last close %.4f",
        days, points[0].close, points[-1].close,
    )
    return tuple(points)


def series_to_frame(series: Sequence[PricePoint]) -> pd.DataFrame:
    """
    Tabulate a series as a DataFrame indexed by date.

    Columns: close, reflexivity, volume, ma20.
    """
    frame = pd.DataFrame(
        {
            "close": [p.close for p in series],
            "reflexivity": [p.reflexivity for p in series],
            "volume": [p.volume for p in series],
            "ma20": [p.ma20 for p in series],
        },
        index=pd.DatetimeIndex([p.date for p in series], name="date"),
    )
    return frame


def compute_log_returns(series: Sequence[PricePoint]) -> np.ndarray:
    """
    Compute one-step logarithmic returns in chronological order.

    Mathematical Definition:
        r_i = ln(P_i / P_{i-1})

    Parameters
    ----------
    series : sequence of PricePoint
        Price series (any length; fewer than two points gives an empty
        array).

    Returns
    -------
    np.ndarray
        ``len(series) - 1`` log returns.

    Raises
    ------
    NumericAnomaly
        If any close is non-positive or a return is not finite.
    """
    closes = np.array([p.close for p in series], dtype=float)

    if closes.size and (not np.all(np.isfinite(closes)) or np.any(closes <= 0)):
        raise NumericAnomaly(
            "Cannot take log returns of non-positive or non-finite closes",
            {"min_close": float(np.min(closes))},
        )

    log_returns = np.log(closes[1:] / closes[:-1])

    if not np.all(np.isfinite(log_returns)):
        raise NumericAnomaly("Log returns contain NaN or Inf")

    return log_returns
