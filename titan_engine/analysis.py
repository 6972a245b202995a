"""
Analysis Orchestrator
=====================
Runs one complete analysis and hands the five artifacts to the caller.

Execution Flow:
    1. Synthesize the price series
    2. Simulate the forward ensemble from the last close
    3. Synthesize the display spectrum
    4. Score the momentum signal
    5. Estimate historical VaR and the Kelly heuristic

Steps 2-5 depend only on step 1 (or on nothing). In sequential mode they
share one random source in the order above; in parallel mode each runs
on its own child source in a thread pool.
"""

import enum
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from titan_engine.errors import (
    AnalysisInProgressError,
    PreconditionViolation,
    require_count,
    require_finite,
)
from titan_engine.market_data import DEFAULT_DAYS, Series, synthesize_market_data
from titan_engine.monte_carlo import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_NUM_SIMULATIONS,
    Ensemble,
    simulate_ensemble,
)
from titan_engine.random_source import RandomSource, spawn_sources
from titan_engine.risk_metrics import RiskEstimate, estimate_risk
from titan_engine.signals import MIN_SERIES_LENGTH, SignalScore, score_signal
from titan_engine.spectrum import SpectrumPoint, synthesize_spectrum

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────
DEFAULT_TICKER: str = "BTC-USD"
DEFAULT_CAPITAL: float = 1_000_000.0


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Per-run knobs.

    ``delay`` (seconds) is applied before results are surfaced and has
    no effect on the numbers.
    """

    history_days: int = DEFAULT_DAYS
    horizon_days: int = DEFAULT_HORIZON_DAYS
    num_simulations: int = DEFAULT_NUM_SIMULATIONS
    seed: Optional[int] = None
    delay: float = 0.0
    parallel: bool = False


@dataclass(frozen=True)
class AnalysisResult:
    ticker: str
    capital: float
    series: Series
    signal: SignalScore
    risk: RiskEstimate
    ensemble: Ensemble
    spectrum: Tuple[SpectrumPoint, ...]

    @property
    def last_close(self) -> float:
        return self.series[-1].close


class AnalysisState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


def _validate(config: AnalysisConfig) -> None:
    require_count(config.history_days, "history_days", MIN_SERIES_LENGTH)
    require_count(config.horizon_days, "horizon_days", 0)
    require_count(config.num_simulations, "num_simulations", 1)
    delay = require_finite(config.delay, "delay")
    if delay < 0:
        raise PreconditionViolation(f"delay must be >= 0, got {delay}", {"delay": delay})


def _run_sequential(series, capital, config, rng):
    ensemble = simulate_ensemble(
        series[-1].close, config.horizon_days, config.num_simulations, rng
    )
    spectrum = synthesize_spectrum(rng)
    signal = score_signal(series, rng)
    risk = estimate_risk(series, capital, rng)
    return signal, risk, ensemble, spectrum


def _run_parallel(series, capital, config, rng):
    signal_rng, risk_rng, mc_rng, spectrum_rng = spawn_sources(rng, 4)

    with ThreadPoolExecutor(max_workers=4, thread_name_prefix="titan") as pool:
        signal_future = pool.submit(score_signal, series, signal_rng)
        risk_future = pool.submit(estimate_risk, series, capital, risk_rng)
        mc_future = pool.submit(
            simulate_ensemble,
            series[-1].close,
            config.horizon_days,
            config.num_simulations,
            mc_rng,
        )
        spectrum_future = pool.submit(synthesize_spectrum, spectrum_rng)

        # .result() re-raises the task's own exception
        return (
            signal_future.result(),
            risk_future.result(),
            mc_future.result(),
            spectrum_future.result(),
        )


def run_analysis(
    ticker: str = DEFAULT_TICKER,
    capital: float = DEFAULT_CAPITAL,
    config: Optional[AnalysisConfig] = None,
    rng: Optional[object] = None,
    today: Optional[date] = None,
) -> AnalysisResult:
    """
    Produce series, signal, risk, ensemble and spectrum in one call.

    Parameters
    ----------
    ticker : str
        Display label only; it does not influence any number.
    capital : float
        Finite amount the VaR is scaled to.
    config : AnalysisConfig, optional
        Run settings; defaults reproduce the dashboard (100 days of
        history, 50 paths of 10 days).
    rng : RandomSource, optional
        Overrides ``config.seed`` when given.
    today : datetime.date, optional
        Date of the day after the last synthesized point.

    Returns
    -------
    AnalysisResult

    Raises
    ------
    PreconditionViolation
        Invalid capital or config, checked before any computation.
    NumericAnomaly
        A computation produced a non-finite or non-positive value.
    """
    config = config or AnalysisConfig()
    capital = require_finite(capital, "capital")
    _validate(config)

    if rng is None:
        rng = RandomSource(config.seed)

    started = time.perf_counter()
    logger.info(
        "Analysis started: ticker=%s capital=%.2f parallel=%s",
        ticker, capital, config.parallel,
    )

    series = synthesize_market_data(config.history_days, rng, today=today)
    runner = _run_parallel if config.parallel else _run_sequential
    signal, risk, ensemble, spectrum = runner(series, capital, config, rng)

    if config.delay > 0:
        time.sleep(config.delay)

    logger.info(
        "Analysis finished in %.3fs: signal=%s var=%.4f",
        time.perf_counter() - started, signal.signal.value, risk.var_pct,
    )
    return AnalysisResult(
        ticker=ticker,
        capital=capital,
        series=series,
        signal=signal,
        risk=risk,
        ensemble=ensemble,
        spectrum=spectrum,
    )


class AnalysisRunner:
    """
    Two-state wrapper (IDLE / RUNNING) around ``run_analysis``.

    The runner never exposes a partial result: ``latest`` is replaced
    only when a run completes, and a failed run leaves the previous
    result in place.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self.state = AnalysisState.IDLE
        self.latest: Optional[AnalysisResult] = None
        self._lock = threading.Lock()

    def run(
        self,
        ticker: str = DEFAULT_TICKER,
        capital: float = DEFAULT_CAPITAL,
        rng: Optional[object] = None,
        today: Optional[date] = None,
    ) -> AnalysisResult:
        with self._lock:
            if self.state is AnalysisState.RUNNING:
                raise AnalysisInProgressError("An analysis is already running")
            self.state = AnalysisState.RUNNING

        try:
            result = run_analysis(ticker, capital, self.config, rng, today)
            # set while still RUNNING: no newer run can have finished yet
            self.latest = result
        finally:
            with self._lock:
                self.state = AnalysisState.IDLE

        return result
