"""Tests for the degradation rate and remaining-useful-life estimation."""

import math

import numpy as np
import pytest

from spindlesim.analytics.health import HealthStatistics
from spindlesim.prognostics.degradation_model import (
    decay_rate,
    stress_factor,
    temperature_factor,
    viscosity_factor,
)
from spindlesim.prognostics.rul_estimator import (
    RulEstimator,
    forecast_curve,
    format_rul,
    remaining_useful_life,
    rms_velocity_mm_s,
)


def _stats(peak_velocity=0.001, rms_acceleration=0.0, status="OPTIMAL"):
    return HealthStatistics(
        rms_displacement=0.0,
        peak_velocity=peak_velocity,
        rms_acceleration=rms_acceleration,
        dominant_frequency=50.0,
        avg_load=20.0,
        status=status,
    )


class TestDecayRate:
    def test_stress_factors(self):
        assert stress_factor("OPTIMAL") == 0.05
        assert stress_factor("WARNING") == 0.15
        assert stress_factor("CRITICAL") == 0.35

    def test_reference_conditions(self):
        assert decay_rate("OPTIMAL", 0.0, 68.0, 40.0) == pytest.approx(0.05)
        assert decay_rate("CRITICAL", 0.0, 68.0, 40.0) == pytest.approx(0.35)

    def test_acceleration_stress(self):
        assert decay_rate("WARNING", 10.0, 68.0, 40.0) == pytest.approx(0.30)

    def test_thin_oil_accelerates(self):
        assert viscosity_factor(17.0) == pytest.approx(2.0)
        assert viscosity_factor(0.0) == pytest.approx(math.sqrt(68.0))
        assert viscosity_factor(272.0) == pytest.approx(0.5)

    def test_temperature_only_accelerates(self):
        assert temperature_factor(20.0) == 1.0
        assert temperature_factor(80.0) == pytest.approx(2.0)

    def test_positive(self):
        for status in ("OPTIMAL", "WARNING", "CRITICAL"):
            assert decay_rate(status, 3.0, 40.0, 60.0) > 0.0


class TestRemainingUsefulLife:
    def test_over_limit_is_zero(self):
        assert remaining_useful_life(11.2, 0.05) == 0.0
        assert remaining_useful_life(50.0, 0.0) == 0.0

    def test_non_positive_rate_is_stable(self):
        assert math.isinf(remaining_useful_life(1.0, 0.0))
        assert math.isinf(remaining_useful_life(1.0, -0.3))
        assert math.isinf(remaining_useful_life(1.0, float("nan")))

    def test_closed_form(self):
        assert remaining_useful_life(1.12, 1.0) == pytest.approx(math.log(10.0) / 0.1)

    def test_start_value_floor(self):
        assert remaining_useful_life(0.0, 1.0) == pytest.approx(math.log(112.0) / 0.1)

    def test_beyond_horizon_is_stable(self):
        assert math.isinf(remaining_useful_life(1.0, 0.001))

    def test_never_negative(self):
        for v0 in np.linspace(0.0, 11.1, 20):
            for rate in (0.05, 0.5, 5.0):
                rul = remaining_useful_life(v0, rate)
                assert rul >= 0.0 and not math.isnan(rul)


class TestForecast:
    def test_shape(self):
        f = forecast_curve(1.0, 0.1)
        assert len(f.times) == 31
        assert f.times[-1] == pytest.approx(300.0)
        assert f.values[0] == pytest.approx(1.0)

    def test_growth(self):
        f = forecast_curve(1.0, 0.5)
        np.testing.assert_allclose(f.values, np.exp(0.05 * f.times))

    def test_earliest_crossing(self):
        f = forecast_curve(1.0, 1.0)
        # e^(0.1 t) >= 11.2 first at t = 30 s (t = 20 gives 7.39)
        assert f.time_to_failure == pytest.approx(30.0)

    def test_no_crossing_is_stable(self):
        assert math.isinf(forecast_curve(1.0, 0.01).time_to_failure)
        assert math.isinf(forecast_curve(1.0, 0.0).time_to_failure)

    def test_already_over_limit(self):
        assert forecast_curve(12.0, 0.1).time_to_failure == 0.0

    @pytest.mark.parametrize("v0", [0.0, 0.01, 0.5, 2.0, 8.0])
    @pytest.mark.parametrize("rate", [1.0, 2.0, 5.0])
    def test_agrees_with_closed_form(self, v0, rate):
        """Forecast crossing lands within one step after the closed-form RUL."""
        rul = remaining_useful_life(v0, rate)
        ttf = forecast_curve(v0, rate).time_to_failure
        assert math.isfinite(rul) and rul <= 300.0
        assert rul - 1e-9 <= ttf < rul + 10.0

    def test_start_value_floor(self):
        f = forecast_curve(0.0, 2.0)
        assert f.values[0] == pytest.approx(0.1)
        assert f.time_to_failure == pytest.approx(30.0)

    def test_finite_for_large_rates(self):
        f = forecast_curve(5.0, 1e6)
        assert np.all(np.isfinite(f.values))


class TestRulEstimator:
    def test_record_buckets(self):
        est = RulEstimator()
        assert est.record(0.005, _stats())
        assert not est.record(0.3, _stats())
        assert est.record(0.5, _stats())
        assert not est.record(0.995, _stats())
        assert est.record(1.0, _stats())
        np.testing.assert_allclose(est.history.snapshot()["time"], [0.0, 0.5, 1.0])

    def test_record_rms_velocity(self):
        est = RulEstimator()
        est.record(0.1, _stats(peak_velocity=0.002))
        assert est.history.snapshot()["rms_velocity"][0] == pytest.approx(2.0 * 0.707)
        assert rms_velocity_mm_s(0.002) == pytest.approx(1.414)

    def test_history_capped(self):
        est = RulEstimator()
        for i in range(100):
            est.record(i * 0.5, _stats())
        assert len(est.history) == 60

    def test_insufficient_history_is_stable(self):
        est = RulEstimator()
        for i in range(4):
            est.record(i * 0.5, _stats())
        result = est.estimate(_stats(peak_velocity=0.005, status="CRITICAL"))
        assert result.is_stable
        assert result.forecast is None

    def test_estimate_with_history(self):
        est = RulEstimator()
        stats = _stats(peak_velocity=0.005, rms_acceleration=20.0, status="CRITICAL")
        for i in range(6):
            est.record(i * 0.5, stats)
        result = est.estimate(stats)
        v0 = 0.005 * 1000 * 0.707
        rate = 0.35 * 3.0
        assert result.current_value == pytest.approx(v0)
        assert result.decay_rate == pytest.approx(rate)
        assert result.rul_seconds == pytest.approx(math.log(11.2 / v0) / (rate * 0.1))
        assert result.forecast is not None

    def test_over_limit_without_history(self):
        result = RulEstimator().estimate(_stats(peak_velocity=0.02))
        assert result.rul_seconds == 0.0
        assert result.forecast.time_to_failure == 0.0

    def test_over_limit_with_history(self):
        est = RulEstimator()
        stats = _stats(peak_velocity=0.02, status="CRITICAL")
        for i in range(5):
            est.record(i * 0.5, stats)
        assert est.estimate(stats).rul_seconds == 0.0


class TestFormatRul:
    def test_stable(self):
        assert format_rul(float("inf")) == "> 48h"

    def test_minutes(self):
        assert format_rul(90.0) == "1.5 min"
        assert format_rul(0.0) == "0.0 min"
