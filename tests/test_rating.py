"""Tests for the additive breaking-surf rating."""

from __future__ import annotations

import pytest

from surfcast.forecast.models import SwellComponent, TidePhase
from surfcast.forecast.rating import (
    direction_penalty,
    gust_penalty,
    rate_breaking_surf,
    secondary_swell_bonus,
    tide_points,
    tide_push_multiplier,
    wind_points,
    wind_tier,
)
from surfcast.spots.profiles import get_spot_profile


def _swell(height=4.0, period=11.0, direction=160.0):
    return SwellComponent("primary", height, period, direction, height * height * period)


class TestWindTier:
    @pytest.mark.parametrize("direction, tier", [
        (0, 1), (340, 1), (20, 1),
        (325, 2), (30, 2),
        (40, 3),
        (300, 4),
        (60, 5),
        (90, 6),
        (270, 7),
        (180, 8), (120, 8),
    ])
    def test_south_facing(self, direction, tier):
        assert wind_tier(direction) == tier

    def test_relative_to_offshore(self):
        assert wind_tier(90, offshore_deg=90) == 1
        assert wind_tier(270, offshore_deg=90) == 8


class TestWindPoints:
    def test_missing_wind_is_neutral(self):
        assert wind_points(None, 0, "long-beach", 4.0) == 0
        assert wind_points(8, None, "long-beach", 4.0) == 0

    def test_rockaway_handles_wnw(self):
        assert wind_points(8, 300, "rockaway", 4.0) == 12
        assert wind_points(8, 300, "long-beach", 4.0) == 5

    def test_lido_strong_offshore(self):
        assert wind_points(30, 0, "lido", 4.0) == 5
        assert wind_points(30, 0, "long-beach", 4.0) == 10

    def test_ne_depends_on_wave_size(self):
        assert wind_points(10, 40, "long-beach", 4.5) == 8
        assert wind_points(10, 40, "long-beach", 2.5) == 3

    def test_speed_boundaries(self):
        # Tier 4 edges: <=10 inclusive, <15 exclusive
        assert wind_points(10, 300, "long-beach", 4.0) == 5
        assert wind_points(15, 300, "long-beach", 4.0) == -15


class TestGustPenalty:
    @pytest.mark.parametrize("speed, gusts, direction, penalty", [
        (10, 22, 180, -15),
        (10, 22, 90, -8),
        (10, 28, 180, -20),
        (10, 17, 90, -5),
        (10, 22, 0, 0),
        (18, 22, 180, 0),
        (5, 14, 180, 0),
        (10, None, 180, 0),
    ])
    def test_penalty(self, speed, gusts, direction, penalty):
        assert gust_penalty(speed, gusts, direction) == penalty

    def test_lowers_rating(self, make_point, now, profile):
        calm = make_point(now, wind_speed_kt=10.0, wind_direction_deg=90.0)
        gusty = make_point(now, wind_speed_kt=10.0, wind_direction_deg=90.0, wind_gusts_kt=22.0)
        base = rate_breaking_surf(calm, _swell(), 4.5, profile, 3.0)
        rated = rate_breaking_surf(gusty, _swell(), 4.5, profile, 3.0)
        assert base.score == 58
        assert rated.score == 50
        assert rated.breakdown.gust == -8
        assert "gusty" in rated.reason


class TestSecondarySwellBonus:
    def test_groundswell_under_chop(self, make_point, now):
        point = make_point(now, secondary_swell_height_ft=2.0, secondary_swell_period_s=11.0,
                           secondary_swell_direction_deg=160.0)
        assert secondary_swell_bonus(point, 6.0) == 15

    def test_off_direction(self, make_point, now):
        point = make_point(now, secondary_swell_height_ft=2.0, secondary_swell_period_s=9.0,
                           secondary_swell_direction_deg=240.0)
        assert secondary_swell_bonus(point, 6.0) == 5

    def test_needs_short_period_dominant(self, make_point, now):
        point = make_point(now, secondary_swell_height_ft=2.0, secondary_swell_period_s=11.0)
        assert secondary_swell_bonus(point, 7.0) == 0

    def test_too_small(self, make_point, now):
        point = make_point(now, secondary_swell_height_ft=1.0, secondary_swell_period_s=11.0)
        assert secondary_swell_bonus(point, 6.0) == 0

    def test_raises_rating(self, make_point, now):
        rockaway = get_spot_profile("rockaway")
        chop = _swell(height=4.0, period=6.0)
        plain = make_point(now, wave_height_ft=4.0, wave_period_s=6.0)
        layered = make_point(now, wave_height_ft=4.0, wave_period_s=6.0,
                             secondary_swell_height_ft=2.0, secondary_swell_period_s=11.0,
                             secondary_swell_direction_deg=160.0)
        assert rate_breaking_surf(plain, chop, 2.64, rockaway, 2.0).score == 75
        rated = rate_breaking_surf(layered, chop, 2.64, rockaway, 2.0)
        assert rated.score == 90
        assert rated.breakdown.bonus == 15


class TestTide:
    @pytest.mark.parametrize("phase, tide, height, multiplier", [
        (TidePhase.RISING, 2.0, 4.0, 1.15),
        (TidePhase.RISING, 2.0, 5.5, 1.25),
        (TidePhase.RISING, 3.5, 4.0, 1.0),
        (TidePhase.RISING, 2.0, 2.9, 1.0),
        (TidePhase.FALLING, 2.0, 4.0, 1.0),
        (None, 2.0, 4.0, 1.0),
    ])
    def test_push(self, phase, tide, height, multiplier):
        assert tide_push_multiplier(phase, tide, height) == multiplier

    def test_push_scales_score(self, make_point, now, profile):
        point = make_point(now)
        still = rate_breaking_surf(point, _swell(), 4.5, profile, 2.0)
        pushed = rate_breaking_surf(point, _swell(), 4.5, profile, 2.0, TidePhase.RISING)
        # 50 + 0 + 15 + 20 = 85, * 1.15 = 97.75
        assert still.score == 85
        assert pushed.score == 98

    @pytest.mark.parametrize("tide, height, spot, points", [
        (5.5, 4.0, "long-beach", -20),
        (4.5, 4.5, "long-beach", 10),
        (4.5, 3.0, "long-beach", 4),
        (3.8, 2.5, "long-beach", -10),
        (3.8, 2.5, "rockaway", 4),
        (3.0, 4.0, "long-beach", 20),
        (1.0, 2.0, "long-beach", 20),
    ])
    def test_tide_points(self, tide, height, spot, points):
        assert tide_points(tide, height, spot) == points


class TestDirection:
    def test_inside_window(self, profile):
        assert direction_penalty(160, profile) == 0

    def test_west_blocked(self, profile):
        assert direction_penalty(270, profile) == -20

    def test_east_wrap_bands(self, profile):
        assert direction_penalty(102, profile) == -5
        assert direction_penalty(92, profile) == -12

    def test_east_facing_spot_skips_wrap(self):
        ditch = get_spot_profile("ditch-plains")
        assert direction_penalty(95, ditch, east_wrap=False) == 0

    def test_west_swell_capped(self, make_point, now, profile):
        rated = rate_breaking_surf(make_point(now), _swell(direction=270.0), 4.5, profile, 3.0)
        assert rated.score == 35
        assert "blocked direction" in rated.reason


class TestCaps:
    def test_small_surf_capped(self, make_point, now):
        rockaway = get_spot_profile("rockaway")
        rated = rate_breaking_surf(make_point(now), _swell(height=1.5), 1.5, rockaway, 2.0)
        assert rated.score == 30

    def test_light_onshore_capped(self, make_point, now, profile):
        point = make_point(now, wind_speed_kt=5.0, wind_direction_deg=180.0)
        rated = rate_breaking_surf(point, _swell(), 4.5, profile, 3.0)
        # 50 + 0 + 20 - 10 = 60, light onshore caps at 50
        assert rated.score == 50
