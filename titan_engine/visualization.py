"""
Visualization Module
====================
Static renderings of an analysis, one per dashboard view.

Views:
    1. MARKET       Close price with reflexivity bars
    2. MONTE_CARLO  Forward paths and terminal-price histogram
    3. SPECTRUM     Synthetic amplitude spectrum

The view selection lives here, downstream of the engine; nothing in the
engine knows which view is being shown.
"""

import enum
from pathlib import Path
from typing import Dict, Sequence

import matplotlib.pyplot as plt
import matplotlib.ticker as mtick
import numpy as np
import seaborn as sns

from titan_engine.analysis import AnalysisResult
from titan_engine.market_data import PricePoint, series_to_frame
from titan_engine.monte_carlo import Path as SimPath
from titan_engine.monte_carlo import ensemble_to_frame
from titan_engine.spectrum import SpectrumPoint, spectrum_to_frame


# ─────────────────────────────────────────────────────────────
# Style Configuration
# ─────────────────────────────────────────────────────────────
plt.rcParams.update({
    "figure.figsize": (12, 7),
    "figure.dpi": 110,
    "font.size": 11,
    "axes.grid": True,
    "grid.alpha": 0.3,
    "axes.spines.top": False,
    "axes.spines.right": False,
})

COLORS = {
    "primary": "#3b82f6",
    "path": "#8b5cf6",
    "anchor": "#f59e0b",
    "positive": "#10b981",
    "negative": "#ef4444",
    "spectrum": "#06b6d4",
}


class ViewState(enum.Enum):
    MARKET = "market"
    MONTE_CARLO = "monte_carlo"
    SPECTRUM = "spectrum"


def format_usd(value: float) -> str:
    """``1234.5`` -> ``$1,234.50``; negatives as ``-$1,234.50``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_pct(value: float) -> str:
    """Fraction to percent with two decimals: ``0.0123`` -> ``1.23%``."""
    return f"{value * 100:.2f}%"


def save_figure(fig: plt.Figure, name: str, output_dir: str = "results/figures") -> str:
    """Save figure to disk and return the path."""
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    filepath = path / f"{name}.png"
    fig.savefig(filepath, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return str(filepath)


def plot_market(series: Sequence[PricePoint], ticker: str = "") -> plt.Figure:
    """
    Close price line with reflexivity bars on a secondary axis.

    Parameters
    ----------
    series : sequence of PricePoint
        Synthesized history.
    ticker : str
        Label for the title.

    Returns
    -------
    matplotlib.figure.Figure
    """
    frame = series_to_frame(series)
    fig, ax = plt.subplots(figsize=(14, 7))

    ax.plot(frame.index, frame["close"], color=COLORS["primary"],
            linewidth=1.8, label="Close")
    ax.set_ylabel("Price", fontsize=12)

    ax2 = ax.twinx()
    bar_colors = np.where(frame["reflexivity"] >= 0,
                          COLORS["positive"], COLORS["negative"])
    ax2.bar(frame.index, frame["reflexivity"], color=bar_colors,
            alpha=0.35, width=0.8, label="Reflexivity")
    ax2.set_ylabel("Reflexivity (synthetic)", fontsize=12)
    ax2.grid(False)

    ax.set_title(f"{ticker} Price & Reflexivity".strip(),
                 fontsize=14, fontweight="bold")
    fig.autofmt_xdate()
    return fig


def plot_monte_carlo(ensemble: Sequence[SimPath]) -> plt.Figure:
    """Every simulated path, with the terminal distribution alongside."""
    frame = ensemble_to_frame(ensemble)
    fig, (ax, ax_hist) = plt.subplots(
        1, 2, figsize=(16, 7), gridspec_kw={"width_ratios": [3, 1]}
    )

    for column in frame.columns:
        ax.plot(frame.index, frame[column], color=COLORS["path"],
                alpha=0.25, linewidth=1)
    ax.axhline(frame.iloc[0, 0], color=COLORS["anchor"], linewidth=1.5,
               linestyle="--", label=f"Start = {frame.iloc[0, 0]:.2f}")
    ax.set_xlabel("Trading day", fontsize=12)
    ax.set_ylabel("Price", fontsize=12)
    ax.set_title(f"Monte Carlo GBM Paths (n={frame.shape[1]})",
                 fontsize=14, fontweight="bold")
    ax.legend(fontsize=11)

    sns.histplot(y=frame.iloc[-1], ax=ax_hist, color=COLORS["path"],
                 bins=min(20, max(frame.shape[1], 1)))
    ax_hist.set_title("Terminal price", fontsize=12)
    ax_hist.set_xlabel("Count")
    ax_hist.set_ylabel("")
    return fig


def plot_spectrum(spectrum: Sequence[SpectrumPoint]) -> plt.Figure:
    """Amplitude bars. Titled as synthetic since no transform is involved."""
    frame = spectrum_to_frame(spectrum)
    fig, ax = plt.subplots(figsize=(12, 6))

    ax.bar(frame.index, frame["amplitude"], color=COLORS["spectrum"], alpha=0.85)
    ax.set_xlabel("Frequency", fontsize=12)
    ax.set_ylabel("Amplitude", fontsize=12)
    ax.set_title("Synthetic Frequency Spectrum (decorative)",
                 fontsize=14, fontweight="bold")
    ax.xaxis.set_major_locator(mtick.MaxNLocator(integer=True))
    return fig


def render_view(
    result: AnalysisResult,
    view: ViewState,
    output_dir: str = "results/figures",
) -> str:
    """Render one view of ``result`` to PNG and return the file path."""
    if view is ViewState.MARKET:
        fig = plot_market(result.series, result.ticker)
    elif view is ViewState.MONTE_CARLO:
        fig = plot_monte_carlo(result.ensemble)
    elif view is ViewState.SPECTRUM:
        fig = plot_spectrum(result.spectrum)
    else:
        raise ValueError(f"Unknown view: {view!r}")
    return save_figure(fig, view.value, output_dir)


def render_all(result: AnalysisResult, output_dir: str = "results/figures") -> Dict[ViewState, str]:
    return {view: render_view(result, view, output_dir) for view in ViewState}
