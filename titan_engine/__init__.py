"""
Titan Engine
============
Synthetic market analytics behind the Titan dashboard:
- Synthetic price series with a reflexivity indicator
- Momentum signal (BULLISH / NEUTRAL / BEARISH)
- Historical Value-at-Risk with a Kelly placeholder
- Monte Carlo GBM path ensembles
- Decorative frequency spectrum
"""

from titan_engine.analysis import AnalysisConfig, AnalysisResult, AnalysisRunner, run_analysis
from titan_engine.errors import NumericAnomaly, PreconditionViolation, TitanEngineError
from titan_engine.random_source import RandomSource

__version__ = "1.0.0"

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "AnalysisRunner",
    "NumericAnomaly",
    "PreconditionViolation",
    "RandomSource",
    "TitanEngineError",
    "run_analysis",
]
