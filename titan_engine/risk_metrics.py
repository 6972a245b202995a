"""
Risk Metrics Module
====================
Historical Value-at-Risk of the synthesized series, the position-sizing
heuristic shown next to it, and supporting return diagnostics.

Mathematical Foundation:
    Log returns:        r_i = ln(P_i / P_{i-1}),  sorted ascending
    Historical VaR:     VaR = |r_(k)|,  k = floor(α · n)   (nearest rank)
    Expected Shortfall: ES  = |mean(r_(0) … r_(k))|
    Parametric VaR:     VaR_α = z_{1-α} · σ - μ

The Kelly figure is a randomized placeholder in [0.15, 0.25), not a
Kelly-criterion computation.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import stats

from titan_engine.errors import NumericAnomaly, PreconditionViolation, require_finite
from titan_engine.market_data import PricePoint, compute_log_returns
from titan_engine.random_source import resolve_rng

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
VAR_TAIL: float = 0.05
KELLY_BASE: float = 0.15
KELLY_SPREAD: float = 0.1
TRADING_DAYS_PER_YEAR: int = 252


@dataclass(frozen=True)
class RiskEstimate:
    var_pct: float
    var_cash: float
    kelly: float


@dataclass(frozen=True)
class ReturnDiagnostics:
    """Distribution statistics of the series' log returns."""

    num_returns: int
    mean_return: float
    std_return: float
    annualized_volatility: float
    skewness: float
    excess_kurtosis: float
    hist_var: float
    hist_es: float
    param_var: float


# ─────────────────────────────────────────────────────────────
# Historical VaR
# ─────────────────────────────────────────────────────────────

def _tail_index(n: int, tail: float) -> int:
    return min(int(math.floor(n * tail)), n - 1)


def historical_var(returns: Sequence[float], tail: float = VAR_TAIL) -> float:
    """
    Nearest-rank historical VaR, no interpolation.

    Parameters
    ----------
    returns : sequence of float
        Returns in any order; sorted internally.
    tail : float
        Tail probability (default: 0.05 → 95% VaR).

    Returns
    -------
    float
        ``abs(sorted_returns[floor(tail * n)])``.

    Raises
    ------
    PreconditionViolation
        If ``returns`` is empty.
    """
    ordered = np.sort(np.asarray(returns, dtype=float))
    if ordered.size == 0:
        raise PreconditionViolation("Historical VaR needs at least one return")
    return float(abs(ordered[_tail_index(ordered.size, tail)]))


def historical_es(returns: Sequence[float], tail: float = VAR_TAIL) -> float:
    """
    Mean of the returns at or below the nearest-rank VaR return,
    reported as a magnitude.
    """
    ordered = np.sort(np.asarray(returns, dtype=float))
    if ordered.size == 0:
        raise PreconditionViolation("Expected Shortfall needs at least one return")
    tail_returns = ordered[: _tail_index(ordered.size, tail) + 1]
    return float(abs(np.mean(tail_returns)))


def compute_parametric_var(
    mean_return: float,
    std_return: float,
    tail: float = VAR_TAIL,
) -> float:
    """
    Gaussian VaR at confidence ``1 - tail``.

    VaR = z · σ - μ, where z is the standard normal quantile at
    ``1 - tail``.
    """
    z_alpha = stats.norm.ppf(1 - tail)
    return float(z_alpha * std_return - mean_return)


# ─────────────────────────────────────────────────────────────
# Risk estimate
# ─────────────────────────────────────────────────────────────

def estimate_risk(
    series: Sequence[PricePoint],
    capital: float,
    rng: Optional[object] = None,
) -> RiskEstimate:
    """
    Historical 95% VaR of the series, scaled to ``capital``.

    Parameters
    ----------
    series : sequence of PricePoint
        At least two points.
    capital : float
        Finite amount the VaR percentage is applied to.
    rng : RandomSource, optional
        Source of the single Kelly draw.

    Returns
    -------
    RiskEstimate

    Raises
    ------
    PreconditionViolation
        Fewer than two points, or non-finite capital.
    NumericAnomaly
        A non-positive close makes the log returns undefined.
    """
    capital = require_finite(capital, "capital")
    if len(series) < 2:
        raise PreconditionViolation(
            f"Risk estimate needs at least 2 points, got {len(series)}",
            {"length": len(series)},
        )
    rng = resolve_rng(rng)

    log_returns = compute_log_returns(series)
    var_pct = historical_var(log_returns, VAR_TAIL)
    var_cash = var_pct * capital
    kelly = KELLY_BASE + rng.random() * KELLY_SPREAD

    if not math.isfinite(var_cash):
        raise NumericAnomaly("VaR in cash terms is not finite", {"var_cash": var_cash})

    logger.debug(
        "VaR95 %.6f over %d returns (cash %.2f), kelly %.4f",
        var_pct, log_returns.size, var_cash, kelly,
    )
    return RiskEstimate(var_pct=var_pct, var_cash=var_cash, kelly=kelly)


def return_diagnostics(
    series: Sequence[PricePoint],
    tail: float = VAR_TAIL,
) -> ReturnDiagnostics:
    """
    Summary statistics of the series' log-return distribution.

    Skewness < 0 and excess kurtosis > 0 flag a heavier-than-Gaussian
    left tail, where the parametric figure understates the historical
    one. Both are reported as 0 for a constant return series.

    Raises
    ------
    PreconditionViolation
        If the series holds fewer than three points.
    """
    if len(series) < 3:
        raise PreconditionViolation(
            f"Return diagnostics need at least 3 points, got {len(series)}",
            {"length": len(series)},
        )

    log_returns = compute_log_returns(series)
    mean_return = float(np.mean(log_returns))
    std_return = float(np.std(log_returns, ddof=1))

    if std_return > 0:
        skewness = float(stats.skew(log_returns))
        excess_kurtosis = float(stats.kurtosis(log_returns))
    else:
        skewness = 0.0
        excess_kurtosis = 0.0

    return ReturnDiagnostics(
        num_returns=int(log_returns.size),
        mean_return=mean_return,
        std_return=std_return,
        annualized_volatility=std_return * math.sqrt(TRADING_DAYS_PER_YEAR),
        skewness=skewness,
        excess_kurtosis=excess_kurtosis,
        hist_var=historical_var(log_returns, tail),
        hist_es=historical_es(log_returns, tail),
        param_var=compute_parametric_var(mean_return, std_return, tail),
    )
