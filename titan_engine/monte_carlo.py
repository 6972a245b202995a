"""
Monte Carlo Path Simulation Engine
==================================
Forward price paths under discretized geometric Brownian motion, plus a
summary of the terminal-price distribution.

Mathematical Foundation:
    Shock:   Z ≈ (U_1 + … + U_6 - 3) / √0.5        (Irwin-Hall)
    Step:    r = (μ - σ²/2) · Δt + σ · √Δt · Z
    Price:   P_t = P_{t-1} · exp(r)

The Irwin-Hall shock is reproduced as-is rather than swapped for a
library normal sampler: its variance is 1 only approximately, and the
ensembles must stay comparable with those the dashboard has always shown.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from titan_engine.errors import (
    NumericAnomaly,
    PreconditionViolation,
    require_count,
    require_finite,
)
from titan_engine.random_source import resolve_rng

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
TRADING_DAYS_PER_YEAR: int = 252
DT: float = 1 / TRADING_DAYS_PER_YEAR
VOLATILITY: float = 0.35
DRIFT: float = 0.05
SHOCK_DRAWS: int = 6
DEFAULT_HORIZON_DAYS: int = 10
DEFAULT_NUM_SIMULATIONS: int = 50
SUMMARY_PERCENTILES: Tuple[int, ...] = (5, 25, 50, 75, 95)


@dataclass(frozen=True)
class PathPoint:
    step: int
    price: float


Path = Tuple[PathPoint, ...]
Ensemble = Tuple[Path, ...]


@dataclass(frozen=True)
class EnsembleSummary:
    """Terminal-price distribution of an ensemble."""

    start_price: float
    num_paths: int
    horizon_days: int
    mean_terminal: float
    percentiles: Dict[int, float]
    prob_below_start: float
    var_95: float
    es_95: float


def irwin_hall_shock(rng: object) -> float:
    """
    Approximate standard normal draw from six uniforms.

    Consumes exactly six ``rng.random()`` calls.
    """
    total = 0.0
    for _ in range(SHOCK_DRAWS):
        total += rng.random()
    return (total - 3) / math.sqrt(0.5)


def gbm_step_return(shock: float) -> float:
    """One-step log return under GBM with the engine's fixed μ and σ."""
    return (DRIFT - 0.5 * VOLATILITY * VOLATILITY) * DT + VOLATILITY * math.sqrt(DT) * shock


def simulate_path(start_price: float, days: int, rng: object) -> Path:
    """
    Single trajectory of ``days + 1`` points starting at ``start_price``.

    Raises
    ------
    NumericAnomaly
        If the price leaves the finite positive reals.
    """
    price = start_price
    points = [PathPoint(step=0, price=price)]

    for t in range(1, days + 1):
        price = price * math.exp(gbm_step_return(irwin_hall_shock(rng)))
        if not math.isfinite(price) or price <= 0:
            raise NumericAnomaly(
                f"Simulated price left the positive reals at step {t}",
                {"step": t, "price": price},
            )
        points.append(PathPoint(step=t, price=price))

    return tuple(points)


def simulate_ensemble(
    start_price: float,
    days: int = DEFAULT_HORIZON_DAYS,
    sims: int = DEFAULT_NUM_SIMULATIONS,
    rng: Optional[object] = None,
) -> Ensemble:
    """
    Run ``sims`` independent GBM paths from the same starting price.

    Paths are drawn one after another: all steps of path 0, then path 1,
    and so on. With a seeded source the ensemble is reproducible.

    Parameters
    ----------
    start_price : float
        Positive, finite anchor price (the series' last close).
    days : int
        Horizon in trading days (>= 0). Zero gives anchor-only paths.
    sims : int
        Number of paths (>= 1).
    rng : RandomSource, optional
        Source of uniform draws.

    Returns
    -------
    tuple of tuple of PathPoint

    Raises
    ------
    PreconditionViolation
        On a non-positive start price, negative horizon or ``sims < 1``.
    """
    start_price = require_finite(start_price, "start_price")
    if start_price <= 0:
        raise PreconditionViolation(
            f"start_price must be positive, got {start_price}",
            {"start_price": start_price},
        )
    days = require_count(days, "days", 0)
    sims = require_count(sims, "sims", 1)
    rng = resolve_rng(rng)

    ensemble = tuple(simulate_path(start_price, days, rng) for _ in range(sims))

    logger.debug(
        "Simulated %d paths x %d days from %.4f", sims, days, start_price
    )
    return ensemble


# ─────────────────────────────────────────────────────────────
# Ensemble analytics
# ─────────────────────────────────────────────────────────────

def ensemble_to_frame(ensemble: Sequence[Path]) -> pd.DataFrame:
    """
    Prices as a (step x path) DataFrame.

    Rows are indexed by step, columns by path number.
    """
    data = {
        i: [point.price for point in path] for i, path in enumerate(ensemble)
    }
    frame = pd.DataFrame(data)
    frame.index.name = "step"
    frame.columns.name = "path"
    return frame


def compute_mc_var(pnl: np.ndarray, confidence_level: float = 0.95) -> float:
    """
    Loss at the (1 - confidence_level) percentile of ``pnl``.

    Returns a positive number for a loss.
    """
    var = -np.percentile(pnl, (1 - confidence_level) * 100)
    return float(var)


def compute_mc_expected_shortfall(
    pnl: np.ndarray, confidence_level: float = 0.95
) -> float:
    """Mean loss at or beyond the VaR threshold, as a positive number."""
    threshold = np.percentile(pnl, (1 - confidence_level) * 100)
    tail_losses = pnl[pnl <= threshold]
    return float(-np.mean(tail_losses))


def summarize_ensemble(ensemble: Sequence[Path]) -> EnsembleSummary:
    """
    Terminal-price statistics of an ensemble.

    VaR and ES are computed on the terminal simple return
    ``P_T / P_0 - 1`` across paths.

    Raises
    ------
    PreconditionViolation
        If the ensemble is empty or its paths have no steps beyond the
        anchor.
    """
    if len(ensemble) == 0:
        raise PreconditionViolation("Cannot summarize an empty ensemble")
    horizon = len(ensemble[0]) - 1
    if horizon < 1:
        raise PreconditionViolation(
            "Cannot summarize anchor-only paths", {"horizon_days": horizon}
        )

    start_price = ensemble[0][0].price
    terminal = np.array([path[-1].price for path in ensemble], dtype=float)
    terminal_returns = terminal / start_price - 1

    percentiles = {
        q: float(v)
        for q, v in zip(SUMMARY_PERCENTILES, np.percentile(terminal, SUMMARY_PERCENTILES))
    }

    return EnsembleSummary(
        start_price=start_price,
        num_paths=len(ensemble),
        horizon_days=horizon,
        mean_terminal=float(np.mean(terminal)),
        percentiles=percentiles,
        prob_below_start=float(np.mean(terminal < start_price)),
        var_95=compute_mc_var(terminal_returns, 0.95),
        es_95=compute_mc_expected_shortfall(terminal_returns, 0.95),
    )
