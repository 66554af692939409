"""Per-point surf quality scorer.

Weighted multi-factor score for a single forecast sample:

    raw   = swell*0.35 + period*0.30 + wind*0.20 + tide*0.15
    score = clamp(raw * (0.5 + bathymetry_factor/10), 0, 100)

Every sub-score lives in [0, 100]. Missing inputs never raise: an unknown
swell height scores 0, an unknown tide or wind scores neutral.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import numpy as np

from surfcast.common.types import (
    angular_distance,
    clean_direction,
    clean_number,
    knots_to_ms,
    round_half_up,
)
from surfcast.forecast.models import (
    ConfidenceBand,
    ForecastPoint,
    QualityResult,
    ScoreBreakdown,
    WindType,
)
from surfcast.spots.profiles import SpotProfile
from surfcast.tides.interpolator import tide_score_for_height

logger = logging.getLogger(__name__)

_WEIGHTS = {"swell": 0.35, "period": 0.30, "wind": 0.20, "tide": 0.15}

# Blend of height vs direction inside the swell sub-score
_HEIGHT_WEIGHT = 0.6
_DIRECTION_WEIGHT = 0.4

_LIGHT_WIND_MS = 3.0
_LIGHT_WIND_SCORE = 90.0
_NEUTRAL_WIND_SCORE = 50.0
_MAX_SPEED_PENALTY = 40.0
_PENALTY_PER_MS = 5.0

_WIND_DIRECTION_SCORES = {
    WindType.OFFSHORE: 100.0,
    WindType.CROSS: 70.0,
    WindType.ONSHORE: 30.0,
}

# Sources that are live observations rather than model forecasts
BUOY_SOURCES = frozenset({"buoy", "ndbc"})


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return float(np.clip(value, lo, hi))


def swell_height_score(height_ft: float | None) -> float:
    """Piecewise ramp: ideal 3-8 ft, tapering for very large surf."""
    h = clean_number(height_ft, minimum=0.0)
    if h is None or h < 1.0:
        return 0.0
    if h < 3.0:
        return h / 3.0 * 50.0
    if h <= 8.0:
        return 50.0 + (h - 3.0) / 5.0 * 50.0
    if h <= 12.0:
        return 100.0 - (h - 8.0) / 4.0 * 30.0
    return _clamp(70.0 - (h - 12.0) / 6.5 * 40.0)


def swell_direction_score(direction_deg: float | None, profile: SpotProfile) -> float | None:
    """Score a swell direction against the spot's ideal window.

    100 at the window centre, 80 at its edges; outside the window 60 minus
    half a point per degree to the nearest edge, floored at 0. Returns None
    when the direction is unknown.
    """
    d = clean_direction(direction_deg)
    if d is None:
        return None
    lo, hi = profile.ideal_swell_dir_min, profile.ideal_swell_dir_max
    if lo <= d <= hi:
        half_width = (hi - lo) / 2.0
        if half_width == 0:
            return 100.0
        center = (lo + hi) / 2.0
        return 100.0 - abs(d - center) / half_width * 20.0
    dist = min(angular_distance(d, lo), angular_distance(d, hi))
    return max(0.0, 60.0 - dist * 0.5)


def swell_score(
    height_ft: float | None,
    direction_deg: float | None,
    profile: SpotProfile,
) -> tuple[float, float | None]:
    """Return (swell sub-score, direction component)."""
    if clean_number(height_ft, minimum=0.0) is None:
        return 0.0, swell_direction_score(direction_deg, profile)
    height = swell_height_score(height_ft)
    direction = swell_direction_score(direction_deg, profile)
    if direction is None:
        return _clamp(height), None
    return _clamp(height * _HEIGHT_WEIGHT + direction * _DIRECTION_WEIGHT), direction


def period_score(period_s: float | None) -> float:
    """Non-decreasing step-linear score of swell period (ideal 10-16 s)."""
    p = clean_number(period_s, minimum=0.0)
    if p is None:
        return 0.0
    if p < 5:
        return 10.0
    if p < 8:
        return 30.0 + (p - 5) * 10.0
    if p < 10:
        return 60.0 + (p - 8) * 15.0
    if p < 16:
        return 90.0 + (p - 10) * 1.5
    return 100.0


def _relative_bearing(direction_deg: float, offshore_deg: float) -> float:
    return (direction_deg - offshore_deg) % 360.0


def wind_type(direction_deg: float | None, offshore_deg: float = 0.0) -> WindType | None:
    """Classify wind direction for a coast whose offshore wind blows from *offshore_deg*.

    With the default (offshore = north): offshore 315-45, onshore 135-225,
    everything else cross.
    """
    d = clean_direction(direction_deg)
    if d is None:
        return None
    r = _relative_bearing(d, offshore_deg)
    if r >= 315.0 or r <= 45.0:
        return WindType.OFFSHORE
    if 135.0 <= r <= 225.0:
        return WindType.ONSHORE
    return WindType.CROSS


def is_side_offshore(direction_deg: float | None, offshore_deg: float = 0.0) -> bool:
    """Near-offshore band just west of true offshore (295-315 relative)."""
    d = clean_direction(direction_deg)
    if d is None:
        return False
    return 295.0 <= _relative_bearing(d, offshore_deg) < 315.0


def wind_score(
    speed_kt: float | None,
    direction_deg: float | None,
    offshore_deg: float = 0.0,
    light_wind_ms: float = _LIGHT_WIND_MS,
) -> float:
    """Score wind: light wind is always good, strong onshore is worst."""
    kt = clean_number(speed_kt, minimum=0.0)
    if kt is None:
        return _NEUTRAL_WIND_SCORE
    speed_ms = knots_to_ms(kt)
    if speed_ms < light_wind_ms:
        return _LIGHT_WIND_SCORE

    kind = wind_type(direction_deg, offshore_deg)
    if kind is None:
        return _NEUTRAL_WIND_SCORE
    penalty = min(_MAX_SPEED_PENALTY, (speed_ms - light_wind_ms) * _PENALTY_PER_MS)
    return max(0.0, _WIND_DIRECTION_SCORES[kind] - penalty)


def confidence_band_for_hours(hours_out: float) -> ConfidenceBand:
    """Forecast horizon: <12h High, <48h Medium, else Low."""
    if hours_out < 12:
        return ConfidenceBand.HIGH
    if hours_out < 48:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def confidence_band_for_age(age: timedelta) -> ConfidenceBand:
    """Observation staleness: <1h High, <3h Medium, else Low."""
    if age < timedelta(hours=1):
        return ConfidenceBand.HIGH
    if age < timedelta(hours=3):
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def usability_scores(
    quality_score: float,
    wave_height_ft: float,
    avg_crowd_level: float | None,
) -> tuple[int, int]:
    """Skill-level usability, returned as (intermediate, advanced)."""
    advanced = float(quality_score)
    intermediate = float(quality_score)

    # Advanced surfers want size
    if 4.0 <= wave_height_ft <= 8.0:
        advanced = min(100.0, advanced + 10)
    elif wave_height_ft > 8.0:
        advanced = min(100.0, advanced + 5)
        intermediate = max(0.0, intermediate - 30)

    if 2.0 <= wave_height_ft <= 4.0:
        intermediate = min(100.0, intermediate + 10)
    elif wave_height_ft > 6.0:
        intermediate = max(0.0, intermediate - 20)

    crowd = clean_number(avg_crowd_level, minimum=1.0, maximum=5.0)
    if crowd is not None:
        penalty = (crowd - 1) * 5
        advanced = max(0.0, advanced - penalty)
        # Intermediates feel a crowd more
        intermediate = max(0.0, intermediate - penalty * 1.5)

    return round_half_up(intermediate), round_half_up(advanced)


def score_point(
    point: ForecastPoint,
    profile: SpotProfile,
    tide_height_ft: float | None,
    avg_crowd_level: float | None = None,
    *,
    now: datetime | None = None,
    light_wind_ms: float = _LIGHT_WIND_MS,
) -> QualityResult:
    """Score one forecast sample for a spot.

    Args:
        point: environmental sample
        profile: spot constants (direction window, bathymetry, wind convention)
        tide_height_ft: interpolated tide height, None when unknown
        avg_crowd_level: 1-5 average reported crowd, None when unknown
        now: reference time for buoy-sourced points; their confidence band
            comes from observation age instead of forecast horizon
        light_wind_ms: wind below this speed scores as light whatever its
            direction

    Returns:
        QualityResult with a combined score clamped to [0, 100]
    """
    swell, direction = swell_score(point.wave_height_ft, point.wave_direction_deg, profile)
    period = period_score(point.wave_period_s)
    wind = wind_score(
        point.wind_speed_kt, point.wind_direction_deg, profile.offshore_wind_deg, light_wind_ms,
    )
    tide = float(tide_score_for_height(clean_number(tide_height_ft)))

    raw = (
        swell * _WEIGHTS["swell"]
        + period * _WEIGHTS["period"]
        + wind * _WEIGHTS["wind"]
        + tide * _WEIGHTS["tide"]
    )
    quality = int(_clamp(round_half_up(raw * profile.bathymetry_multiplier)))

    if point.source in BUOY_SOURCES and now is not None:
        band = confidence_band_for_age(now - point.forecast_timestamp)
    else:
        band = confidence_band_for_hours(point.hours_out)

    height = clean_number(point.wave_height_ft, minimum=0.0) or 0.0
    intermediate, advanced = usability_scores(quality, height, avg_crowd_level)

    logger.debug(
        "Scored %s @ %s: swell=%.0f period=%.0f wind=%.0f tide=%.0f -> %d",
        profile.key, point.forecast_timestamp.isoformat(), swell, period, wind, tide, quality,
    )

    return QualityResult(
        quality_score=quality,
        breakdown=ScoreBreakdown(
            swell=swell, period=period, wind=wind, tide=tide, direction=direction,
        ),
        usability_intermediate=intermediate,
        usability_advanced=advanced,
        confidence_band=band,
        wind_type=wind_type(point.wind_direction_deg, profile.offshore_wind_deg),
    )
