"""Tests for historical VaR, the risk estimate and return diagnostics"""

import math
import random

import pytest

from titan_engine.errors import NumericAnomaly, PreconditionViolation
from titan_engine.market_data import synthesize_market_data
from titan_engine.risk_metrics import (
    RiskEstimate,
    compute_parametric_var,
    estimate_risk,
    historical_es,
    historical_var,
    return_diagnostics,
)
from tests.conftest import ScriptedRandomSource, make_series

HAND_RETURNS = [-0.05, -0.03, -0.01, 0.0, 0.02, 0.04, 0.06, 0.08, 0.10, 0.12]


class TestHistoricalVar:
    """Nearest-rank quantile, no interpolation"""

    def test_hand_computed_example(self):
        # floor(0.05 * 10) = 0 -> worst return
        assert historical_var(HAND_RETURNS) == 0.05

    def test_order_of_input_does_not_matter(self):
        shuffled = list(HAND_RETURNS)
        random.Random(3).shuffle(shuffled)
        assert historical_var(shuffled) == 0.05

    def test_nearest_rank_index(self):
        # n = 40 -> floor(2.0) = 2 -> third-worst return
        returns = [-0.09, -0.08, -0.07] + [0.01] * 37
        assert historical_var(returns) == pytest.approx(0.07)

    def test_positive_quantile_is_reported_as_magnitude(self):
        assert historical_var([0.01, 0.02, 0.03]) == 0.01

    def test_empty_rejected(self):
        with pytest.raises(PreconditionViolation):
            historical_var([])

    def test_expected_shortfall_averages_tail(self):
        returns = [-0.09, -0.08, -0.07] + [0.01] * 37
        assert historical_es(returns) == pytest.approx(0.08)

    def test_expected_shortfall_single_tail_point(self):
        assert historical_es(HAND_RETURNS) == pytest.approx(0.05)


class TestEstimateRisk:

    def test_known_series(self):
        rng = ScriptedRandomSource([0.5])
        result = estimate_risk(make_series([100.0, 90.0, 99.0]), 1_000_000, rng)

        expected_var = abs(math.log(0.9))
        assert result.var_pct == pytest.approx(expected_var)
        assert result.var_cash == pytest.approx(expected_var * 1_000_000)
        assert result.kelly == pytest.approx(0.2)
        assert isinstance(result, RiskEstimate)

    def test_kelly_range(self, seeded_rng):
        series = synthesize_market_data(100, seeded_rng)
        for _ in range(50):
            kelly = estimate_risk(series, 1.0, seeded_rng).kelly
            assert 0.15 <= kelly < 0.25

    def test_var_is_non_negative(self, seeded_rng):
        series = synthesize_market_data(100, seeded_rng)
        result = estimate_risk(series, 250_000, seeded_rng)
        assert result.var_pct >= 0
        assert result.var_cash == pytest.approx(result.var_pct * 250_000)

    def test_negative_capital_is_allowed(self, midpoint_rng):
        result = estimate_risk(make_series([100.0, 95.0]), -10.0, midpoint_rng)
        assert result.var_cash < 0

    @pytest.mark.parametrize("length", [0, 1])
    def test_short_series_rejected(self, length, midpoint_rng):
        with pytest.raises(PreconditionViolation):
            estimate_risk(make_series([100.0] * length), 1_000_000, midpoint_rng)

    @pytest.mark.parametrize("capital", [float("nan"), float("inf"), "1e6", None])
    def test_invalid_capital_rejected(self, capital, midpoint_rng):
        with pytest.raises(PreconditionViolation):
            estimate_risk(make_series([100.0, 101.0]), capital, midpoint_rng)
        assert midpoint_rng.calls == 0

    def test_non_positive_close_is_numeric_anomaly(self, midpoint_rng):
        with pytest.raises(NumericAnomaly):
            estimate_risk(make_series([100.0, -1.0, 100.0]), 1_000_000, midpoint_rng)


class TestReturnDiagnostics:

    def test_matches_historical_var(self, seeded_rng):
        series = synthesize_market_data(100, seeded_rng)
        diag = return_diagnostics(series)
        risk = estimate_risk(series, 1.0, seeded_rng)

        assert diag.num_returns == 99
        assert diag.hist_var == risk.var_pct
        assert diag.hist_es >= diag.hist_var - 1e-12
        assert diag.std_return > 0
        assert diag.annualized_volatility == pytest.approx(diag.std_return * math.sqrt(252))
        assert math.isfinite(diag.param_var)
        assert math.isfinite(diag.skewness)
        assert math.isfinite(diag.excess_kurtosis)

    def test_needs_three_points(self):
        with pytest.raises(PreconditionViolation):
            return_diagnostics(make_series([100.0, 101.0]))

    def test_parametric_var_standard_normal(self):
        assert compute_parametric_var(0.0, 1.0) == pytest.approx(1.6448536, rel=1e-6)

    def test_parametric_var_subtracts_mean(self):
        assert compute_parametric_var(0.01, 0.0) == pytest.approx(-0.01)
