"""
Titan Engine — Command-Line Entry Point
=======================================
Runs one analysis and prints the report the dashboard would display.

Execution Flow:
    1. Parse arguments into an AnalysisConfig
    2. Run the analysis (series, ensemble, spectrum, signal, risk)
    3. Print signal, risk, ensemble and return-distribution sections
    4. Optionally render the three chart views to PNG
"""

import argparse
import logging
import sys
from typing import List, Optional

from titan_engine.analysis import (
    DEFAULT_CAPITAL,
    DEFAULT_TICKER,
    AnalysisConfig,
    AnalysisResult,
    run_analysis,
)
from titan_engine.errors import TitanEngineError
from titan_engine.market_data import DEFAULT_DAYS
from titan_engine.monte_carlo import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_NUM_SIMULATIONS,
    summarize_ensemble,
)
from titan_engine.risk_metrics import return_diagnostics
from titan_engine.visualization import format_pct, format_usd, render_all

logger = logging.getLogger("titan_engine")


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def print_header(text: str) -> None:
    """Print formatted section header."""
    width = 60
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width)


def print_metrics(metrics: dict, indent: int = 4) -> None:
    """Print dictionary of metrics with formatting."""
    prefix = " " * indent
    for key, val in metrics.items():
        if isinstance(val, float):
            print(f"{prefix}{key:.<35} {val:>14.6f}")
        else:
            print(f"{prefix}{key:.<35} {str(val):>14}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="titan-engine",
        description="Synthetic market analysis: momentum signal, historical VaR, "
                    "Monte Carlo paths and a decorative spectrum.",
    )
    parser.add_argument("--ticker", default=DEFAULT_TICKER,
                        help="display label (does not affect results)")
    parser.add_argument("--capital", type=float, default=DEFAULT_CAPITAL)
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for a reproducible run")
    parser.add_argument("--days", type=int, default=DEFAULT_DAYS,
                        help="history length in days")
    parser.add_argument("--horizon", type=int, default=DEFAULT_HORIZON_DAYS,
                        help="Monte Carlo horizon in trading days")
    parser.add_argument("--sims", type=int, default=DEFAULT_NUM_SIMULATIONS,
                        help="number of Monte Carlo paths")
    parser.add_argument("--delay", type=float, default=0.0,
                        help="seconds to wait before reporting")
    parser.add_argument("--parallel", action="store_true",
                        help="run post-series stages in a thread pool")
    parser.add_argument("--plot", metavar="DIR", default=None,
                        help="write chart PNGs to DIR")
    parser.add_argument("--log-level", default="WARNING", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return parser


def print_report(result: AnalysisResult) -> None:
    """Print every section of a finished analysis."""
    print_header(f"ANALYSIS — {result.ticker}")
    first, last = result.series[0], result.series[-1]
    print(f"  Period:        {first.date} → {last.date}")
    print(f"  Last close:    {last.close:,.4f}")
    print(f"  Reflexivity:   {last.reflexivity:+.4f}")

    print_header("SIGNAL")
    print_metrics({
        "signal": result.signal.signal.value,
        "momentum": result.signal.momentum,
    })

    print_header("RISK")
    print_metrics({
        "var_95_pct": format_pct(result.risk.var_pct),
        "var_95_cash": format_usd(result.risk.var_cash),
        "kelly": format_pct(result.risk.kelly),
    })
    print("\n  Return diagnostics:")
    print_metrics(vars(return_diagnostics(result.series)))

    print_header("MONTE CARLO")
    if len(result.ensemble[0]) > 1:
        summary = summarize_ensemble(result.ensemble)
        print_metrics({
            "paths": summary.num_paths,
            "horizon_days": summary.horizon_days,
            "mean_terminal": summary.mean_terminal,
            "p05_terminal": summary.percentiles[5],
            "p50_terminal": summary.percentiles[50],
            "p95_terminal": summary.percentiles[95],
            "prob_below_start": summary.prob_below_start,
            "mc_var_95": summary.var_95,
            "mc_es_95": summary.es_95,
        })
    else:
        print("    Zero-day horizon: paths hold only the anchor price.")

    print_header("SPECTRUM (synthetic)")
    peak = max(result.spectrum, key=lambda p: p.amplitude)
    print_metrics({"peak_frequency": peak.frequency, "peak_amplitude": peak.amplitude})


def main(argv: Optional[List[str]] = None) -> int:
    """Execute one analysis from the command line."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    config = AnalysisConfig(
        history_days=args.days,
        horizon_days=args.horizon,
        num_simulations=args.sims,
        seed=args.seed,
        delay=args.delay,
        parallel=args.parallel,
    )

    try:
        result = run_analysis(args.ticker, args.capital, config)
        print_report(result)

        if args.plot:
            print_header("CHARTS")
            for path in render_all(result, args.plot).values():
                print(f"  ✓ {path}")
    except TitanEngineError as exc:
        logger.error("Analysis failed: %s", exc)
        print(f"\n  ERROR: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        logger.error("Could not write charts to %s: %s", args.plot, exc)
        print(f"\n  ERROR: could not write charts: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
