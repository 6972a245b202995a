"""Tests for chart rendering and report formatting"""

from pathlib import Path

import matplotlib.pyplot as plt
import pytest

from titan_engine.analysis import AnalysisConfig, run_analysis
from titan_engine.visualization import (
    ViewState,
    format_pct,
    format_usd,
    plot_market,
    plot_monte_carlo,
    plot_spectrum,
    render_all,
    render_view,
)


@pytest.fixture(scope="module")
def result():
    return run_analysis("BTC-USD", 1_000_000, AnalysisConfig(seed=21, num_simulations=10))


class TestFormatting:

    def test_usd(self):
        assert format_usd(1234.5) == "$1,234.50"
        assert format_usd(-0.5) == "-$0.50"
        assert format_usd(1_000_000) == "$1,000,000.00"

    def test_pct(self):
        assert format_pct(0.0123) == "1.23%"
        assert format_pct(0.2) == "20.00%"


class TestPlots:

    def test_market_figure(self, result):
        fig = plot_market(result.series, result.ticker)
        assert "BTC-USD" in fig.axes[0].get_title()
        plt.close(fig)

    def test_monte_carlo_figure(self, result):
        fig = plot_monte_carlo(result.ensemble)
        # one line per path plus the start-price marker
        assert len(fig.axes[0].lines) == len(result.ensemble) + 1
        plt.close(fig)

    def test_spectrum_figure_is_labelled_synthetic(self, result):
        fig = plot_spectrum(result.spectrum)
        assert "Synthetic" in fig.axes[0].get_title()
        assert len(fig.axes[0].patches) == 30
        plt.close(fig)

    def test_render_view(self, result, tmp_path):
        path = render_view(result, ViewState.SPECTRUM, str(tmp_path))
        assert Path(path) == tmp_path / "spectrum.png"
        assert Path(path).stat().st_size > 0

    def test_render_all(self, result, tmp_path):
        paths = render_all(result, str(tmp_path / "figs"))
        assert set(paths) == set(ViewState)
        assert all(Path(p).exists() for p in paths.values())

    def test_unknown_view(self, result, tmp_path):
        with pytest.raises(ValueError):
            render_view(result, "market", str(tmp_path))
