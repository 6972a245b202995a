"""
Synthetic spectrum for the frequency chart.

This is decorative output, not a Fourier transform of the price series:

    amplitude_i = |sin(0.5 · i)| · U(0, 10) + (30 - i) · 0.5,   i = 0 … 29

The shape (a noisy, decaying envelope over frequencies 1..30) is fixed;
only the jitter changes between calls.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import pandas as pd

from titan_engine.random_source import resolve_rng

logger = logging.getLogger(__name__)

NUM_BINS: int = 30
PHASE_STEP: float = 0.5
JITTER_SCALE: float = 10.0
DECAY: float = 0.5


@dataclass(frozen=True)
class SpectrumPoint:
    frequency: int
    amplitude: float


def synthesize_spectrum(rng: Optional[object] = None) -> Tuple[SpectrumPoint, ...]:
    """Thirty points, frequency 1..30, one uniform draw per point."""
    rng = resolve_rng(rng)
    points = tuple(
        SpectrumPoint(
            frequency=i + 1,
            amplitude=abs(math.sin(i * PHASE_STEP)) * rng.random() * JITTER_SCALE
            + (NUM_BINS - i) * DECAY,
        )
        for i in range(NUM_BINS)
    )
    logger.debug("Synthesized %d spectrum bins", len(points))
    return points


def spectrum_to_frame(spectrum: Sequence[SpectrumPoint]) -> pd.DataFrame:
    frame = pd.DataFrame(
        {"amplitude": [p.amplitude for p in spectrum]},
        index=pd.Index([p.frequency for p in spectrum], name="frequency"),
    )
    return frame
