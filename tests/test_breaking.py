"""Tests for breaking wave height estimation."""

from __future__ import annotations

import pytest

from surfcast.forecast.breaking import (
    DEFAULT_CALIBRATIONS,
    ShoalingEstimator,
    breaking_height,
    dominant_swell,
    format_wave_height,
    score_to_rating,
    swell_components,
)
from surfcast.forecast.models import SwellComponent, TidePhase


def _swell(height, period, direction=160.0):
    return SwellComponent("primary", height, period, direction, height * height * period)


class TestDominantSwell:
    def test_primary_wins(self, make_point, now):
        point = make_point(now, wave_height_ft=3.0, wave_period_s=8.0,
                           secondary_swell_height_ft=2.0, secondary_swell_period_s=14.0)
        assert dominant_swell(point).type == "primary"

    def test_long_period_secondary_wins(self, make_point, now):
        point = make_point(now, wave_height_ft=3.0, wave_period_s=8.0,
                           secondary_swell_height_ft=3.0, secondary_swell_period_s=14.0)
        swell = dominant_swell(point)
        assert swell.type == "secondary"
        assert swell.energy == pytest.approx(126.0)

    def test_tie_goes_to_primary(self, make_point, now):
        point = make_point(now, wave_height_ft=2.0, wave_period_s=10.0,
                           secondary_swell_height_ft=2.0, secondary_swell_period_s=10.0)
        assert dominant_swell(point).type == "primary"

    def test_incomplete_components_skipped(self, make_point, now):
        point = make_point(now, wave_height_ft=None, wind_wave_height_ft=1.0, wind_wave_period_s=4.0)
        assert [c.type for c in swell_components(point)] == ["wind"]

    def test_no_swell(self, make_point, now):
        assert dominant_swell(make_point(now, wave_height_ft=None)) is None


class TestSwellLabel:
    @pytest.mark.parametrize("period, label", [
        (5.0, "Wind Swell"),
        (7.0, "Swell"),
        (12.0, "Swell"),
        (13.0, "Groundswell"),
    ])
    def test_label(self, period, label):
        assert _swell(2.0, period).label == label


class TestBreakingHeight:
    def test_groundswell_bonus(self):
        # 4ft @ 12s: 4 * 1.2 * (1.05 + 0.1)
        height = breaking_height(_swell(4.0, 12.0), DEFAULT_CALIBRATIONS["long-beach"])
        assert height == pytest.approx(5.52)

    def test_west_swell_blocked(self):
        height = breaking_height(_swell(4.0, 12.0, 270.0), DEFAULT_CALIBRATIONS["long-beach"])
        assert height == pytest.approx(0.552)

    def test_east_swell_shadowed(self):
        height = breaking_height(_swell(4.0, 10.0, 95.0), DEFAULT_CALIBRATIONS["lido"])
        assert height == pytest.approx(4.0 * 1.0 * 1.1 * 0.5)

    def test_small_swell_multiplier(self):
        height = breaking_height(_swell(1.5, 8.0), DEFAULT_CALIBRATIONS["long-beach"])
        assert height == pytest.approx(0.96)


class TestFormatting:
    @pytest.mark.parametrize("height, label", [
        (0.3, "<1ft"),
        (3.0, "3ft"),
        (3.2, "3ft"),
        (3.5, "3-4ft"),
        (3.8, "4ft"),
    ])
    def test_wave_height_label(self, height, label):
        assert format_wave_height(height) == label

    @pytest.mark.parametrize("score, rating", [
        (0, "Don't Bother"),
        (39, "Don't Bother"),
        (40, "Worth a Look"),
        (59, "Worth a Look"),
        (60, "Go Surf"),
        (75, "Go Surf"),
        (76, "Firing"),
        (90, "Firing"),
        (91, "All-Time"),
    ])
    def test_rating(self, score, rating):
        assert score_to_rating(score) == rating


class TestShoalingEstimator:
    def test_estimate(self, make_point, now):
        point = make_point(now, wave_height_ft=4.0, wave_period_s=12.0, wind_speed_kt=4.0)
        estimate = ShoalingEstimator().estimate(point, "long-beach", 3.0)
        assert estimate.breaking_height_ft == 5.5
        assert estimate.breaking_height_label == "5-6ft"
        # 60 swell + 0 direction + 20 tide + 20 wind
        assert estimate.score == 100
        assert estimate.rating == "All-Time"
        assert estimate.dominant_swell.type == "primary"
        assert "offshore winds" in estimate.reason
        assert "optimal tide" in estimate.reason

    def test_gusty_onshore_scores_lower(self, make_point, now):
        calm = make_point(now, wave_height_ft=4.0, wave_period_s=12.0,
                          wind_speed_kt=10.0, wind_direction_deg=180.0)
        gusty = make_point(now, wave_height_ft=4.0, wave_period_s=12.0,
                           wind_speed_kt=10.0, wind_direction_deg=180.0, wind_gusts_kt=22.0)
        estimator = ShoalingEstimator()
        assert estimator.estimate(calm, "long-beach", 3.0).score == 35
        estimate = estimator.estimate(gusty, "long-beach", 3.0)
        assert estimate.score == 20
        assert "gusty" in estimate.reason

    def test_rising_tide_push(self, make_point, now):
        point = make_point(now, wave_height_ft=4.0, wave_period_s=12.0)
        estimator = ShoalingEstimator()
        assert estimator.estimate(point, "long-beach", 2.0).score == 95
        assert estimator.estimate(point, "long-beach", 2.0, TidePhase.RISING).score == 100
        assert estimator.estimate(point, "long-beach", 2.0, TidePhase.FALLING).score == 95

    def test_east_facing_spot_takes_east_swell(self, make_point, now):
        point = make_point(now, wave_height_ft=4.0, wave_period_s=11.0, wave_direction_deg=95.0)
        estimator = ShoalingEstimator()
        assert "ideal direction" in estimator.estimate(point, "ditch-plains", 3.0).reason
        assert "ideal direction" not in estimator.estimate(point, "long-beach", 3.0).reason

    def test_flat(self, make_point, now):
        point = make_point(now, wave_height_ft=0.3, wave_period_s=5.0)
        estimate = ShoalingEstimator().estimate(point, "long-beach", 3.0)
        assert estimate.rating == "Flat"
        assert estimate.breaking_height_label == "<1ft"

    def test_uncalibrated_spot(self, make_point, now):
        assert ShoalingEstimator().estimate(make_point(now), "mavericks", 3.0) is None

    def test_no_swell(self, make_point, now):
        point = make_point(now, wave_height_ft=None)
        assert ShoalingEstimator().estimate(point, "long-beach", 3.0) is None
