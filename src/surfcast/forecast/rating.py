"""Additive surf rating for the breaking-height overlay.

Scores a point from its predicted breaking height rather than raw offshore
swell. Components are summed, not weighted:

    swell quality (5..60) + direction (-20..0) + tide (-20..20)
        + wind (-60..20) + gust penalty (-20..0) + bonuses

then scaled by the tide-push multiplier and capped by a series of
conditions (small surf, blocked swell directions, onshore wind) before the
final 0-100 clamp.

Wind tiers assume a beach whose offshore wind blows from ``offshore_deg``;
all bearings below are relative to it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from surfcast.common.types import angular_distance, clean_direction, clean_number, round_half_up
from surfcast.forecast.models import ForecastPoint, SwellComponent, TidePhase
from surfcast.spots.profiles import SpotProfile

logger = logging.getLogger(__name__)

# (upper bound kt, bound inclusive, score); first matching row wins
_SpeedTable = tuple[tuple[float, bool, int], ...]

_WIND_TABLES: dict[int, _SpeedTable] = {
    1: ((12, True, 20), (18, True, 15), (math.inf, True, 10)),
    2: ((12, True, 18), (18, True, 12), (math.inf, True, 8)),
    4: ((10, True, 5), (15, False, 0), (20, False, -15), (math.inf, True, -30)),
    5: ((10, True, -5), (15, False, -20), (20, False, -40), (math.inf, True, -55)),
    6: ((10, True, -12), (18, True, -25), (math.inf, True, -45)),
    7: ((10, True, -8), (15, False, -20), (math.inf, True, -40)),
    8: ((6, True, -10), (10, True, -45), (math.inf, True, -60)),
}

# Tier 3 (NE) depends on wave size
_NE_BIG_WAVE: _SpeedTable = ((12, True, 8), (18, True, 4), (math.inf, True, 0))
_NE_SMALL_WAVE: _SpeedTable = ((12, True, 3), (18, True, 0), (math.inf, True, -5))

# Per-spot replacements for individual tiers
_SPOT_WIND_TABLES: dict[str, dict[int, _SpeedTable]] = {
    "lido": {1: ((12, True, 20), (18, True, 15), (25, True, 10), (math.inf, True, 5))},
    "rockaway": {
        4: ((10, True, 12), (15, False, 6), (20, False, -8), (math.inf, True, -20)),
        7: ((10, True, -3), (15, False, -12), (math.inf, True, -30)),
    },
}

# Spots where small surf with offshore wind is worth more than the size suggests
_SMALL_WAVE_OFFSHORE_SPOTS = frozenset({"lido", "long-beach"})
_SMALL_WAVE_CAPS = {1: 60, 2: 55, 3: 45, 4: 42}
_SMALL_WAVE_BONUS = {1: 15, 2: 10, 3: 5, 4: 3}

_JUNK_CAP = 30


@dataclass(frozen=True)
class RatingBreakdown:
    swell_quality: int
    direction: int
    tide: int
    wind: int
    gust: int = 0
    bonus: int = 0


@dataclass(frozen=True)
class Rating:
    score: int
    breakdown: RatingBreakdown
    reason: str


def _relative(direction_deg: float, offshore_deg: float) -> float:
    return (direction_deg - offshore_deg) % 360.0


def wind_tier(direction_deg: float, offshore_deg: float = 0.0) -> int:
    """Eight-tier wind class, 1 (premium offshore) to 8 (onshore)."""
    r = _relative(direction_deg, offshore_deg)
    if r >= 330 or r < 21:
        return 1
    if 310 <= r < 330 or 21 <= r < 35:
        return 2
    if 35 <= r <= 50:
        return 3
    if 290 <= r < 310:
        return 4
    if 50 < r <= 70:
        return 5
    if 70 < r <= 110:
        return 6
    if 260 <= r < 290:
        return 7
    return 8


def _lookup(table: _SpeedTable, speed_kt: float) -> int:
    for bound, inclusive, score in table:
        if speed_kt < bound or (inclusive and speed_kt == bound):
            return score
    return table[-1][2]


def swell_quality_score(breaking_height_ft: float) -> int:
    if breaking_height_ft < 1.0:
        return 5
    if breaking_height_ft < 2.0:
        return 20
    if breaking_height_ft < 3.0:
        return 35
    if breaking_height_ft < 5.0:
        return 50
    return 60


def direction_penalty(direction_deg: float | None, profile: SpotProfile, east_wrap: bool = True) -> int:
    """Penalty-only direction score: 0 inside the spot's window, down to -20.

    West (247.5-292.5) and north-west (up to 330) swell is blocked outright.
    With ``east_wrap`` set, swell from east of 105 is penalised in bands.
    """
    d = clean_direction(direction_deg)
    if d is None:
        return 0
    if 247.5 <= d <= 292.5:
        return -20
    if 292.5 < d <= 330:
        return -18
    if east_wrap and d < 105:
        if d >= 100:
            return -5
        if d >= 95:
            return -8
        if d >= 90:
            return -12
        return -15
    target = (profile.ideal_swell_dir_min + profile.ideal_swell_dir_max) / 2.0
    tolerance = (profile.ideal_swell_dir_max - profile.ideal_swell_dir_min) / 2.0
    return 0 if angular_distance(d, target) <= tolerance else -10


def tide_points(tide_ft: float, breaking_height_ft: float, spot_key: str) -> int:
    """Tide score in [-20, 20]; mid tide suits big surf, low tide small surf."""
    big = breaking_height_ft >= 4.0
    if tide_ft > 5.0:
        return -20
    if tide_ft > 4.0:
        return 10 if big else 4
    if tide_ft > 3.5:
        if spot_key in _SMALL_WAVE_OFFSHORE_SPOTS and breaking_height_ft < 3.0:
            return -10
        return 15 if big else 4
    if tide_ft > 2.5:
        return 20 if big else 15
    return 15 if big else 20


def tide_push_multiplier(phase: TidePhase | None, tide_ft: float, breaking_height_ft: float) -> float:
    """Incoming tide between 0 and 3 ft adds push to surf of 3 ft and up."""
    if phase is not TidePhase.RISING or not 0.0 < tide_ft <= 3.0 or breaking_height_ft < 3.0:
        return 1.0
    return 1.25 if breaking_height_ft > 5.0 else 1.15


def wind_points(
    speed_kt: float | None,
    direction_deg: float | None,
    spot_key: str,
    breaking_height_ft: float,
    offshore_deg: float = 0.0,
) -> int:
    kt = clean_number(speed_kt, minimum=0.0)
    d = clean_direction(direction_deg)
    if kt is None or d is None:
        return 0
    tier = wind_tier(d, offshore_deg)
    if tier == 3:
        return _lookup(_NE_BIG_WAVE if breaking_height_ft >= 4.0 else _NE_SMALL_WAVE, kt)
    table = _SPOT_WIND_TABLES.get(spot_key, {}).get(tier, _WIND_TABLES[tier])
    return _lookup(table, kt)


def gust_penalty(
    speed_kt: float | None,
    gusts_kt: float | None,
    direction_deg: float | None,
    offshore_deg: float = 0.0,
) -> int:
    """Penalty in [-20, 0] for gusty onshore or cross-shore wind.

    Applies only when gusts exceed 15 kt and the sustained wind by more
    than 5 kt. Offshore gusts are ignored.
    """
    kt = clean_number(speed_kt, minimum=0.0)
    gusts = clean_number(gusts_kt, minimum=0.0)
    d = clean_direction(direction_deg)
    if kt is None or gusts is None or d is None:
        return 0
    if gusts - kt <= 5 or gusts <= 15:
        return 0
    r = _relative(d, offshore_deg)
    if r >= 315 or r <= 45:
        return 0
    onshore = 135 <= r <= 225
    if gusts > 25:
        return -20 if onshore else -10
    if gusts > 20:
        return -15 if onshore else -8
    return -10 if onshore else -5


def secondary_swell_bonus(point: ForecastPoint, dominant_period_s: float) -> int:
    """Organised secondary swell (>= 1.5 ft, >= 8 s) under short-period chop."""
    height = clean_number(point.secondary_swell_height_ft, minimum=0.0)
    period = clean_number(point.secondary_swell_period_s, minimum=0.0)
    if dominant_period_s >= 7 or height is None or period is None:
        return 0
    if height < 1.5 or period < 8:
        return 0
    direction = clean_direction(point.secondary_swell_direction_deg)
    good_direction = direction is not None and 110 <= direction <= 200
    if period >= 10:
        return 15 if good_direction else 8
    return 10 if good_direction else 5


def small_wave_offshore_bonus(
    breaking_height_ft: float,
    speed_kt: float | None,
    direction_deg: float | None,
    period_s: float,
    offshore_deg: float = 0.0,
) -> int:
    d = clean_direction(direction_deg)
    if breaking_height_ft >= 2.5 or d is None or speed_kt is None or period_s < 8:
        return 0
    return _SMALL_WAVE_BONUS.get(wind_tier(d, offshore_deg), 0)


def _direction_cap(direction_deg: float | None, east_wrap: bool) -> int | None:
    d = clean_direction(direction_deg)
    if d is None:
        return None
    if 247.5 <= d <= 330:
        return 35
    if east_wrap and d < 105:
        if d >= 100:
            return 55
        if d >= 95:
            return 48
        if d >= 90:
            return 42
        return 35
    return None


def _apply_caps(
    raw: float,
    point: ForecastPoint,
    swell: SwellComponent,
    breaking_height_ft: float,
    spot_key: str,
    offshore_deg: float,
    east_wrap: bool,
) -> float:
    period = swell.period_s
    wind_dir = clean_direction(point.wind_direction_deg)
    speed = clean_number(point.wind_speed_kt, minimum=0.0)

    # Small or weak surf
    if spot_key in _SMALL_WAVE_OFFSHORE_SPOTS and breaking_height_ft < 2:
        if wind_dir is not None and breaking_height_ft >= 1.0 and period >= 6:
            raw = min(raw, _SMALL_WAVE_CAPS.get(wind_tier(wind_dir, offshore_deg), _JUNK_CAP))
        else:
            raw = min(raw, _JUNK_CAP)
    elif breaking_height_ft < 2 or period < 6:
        raw = min(raw, _JUNK_CAP)

    cap = _direction_cap(swell.direction_deg, east_wrap)
    if cap is not None:
        raw = min(raw, cap)

    if wind_dir is None or speed is None:
        return raw

    r = _relative(wind_dir, offshore_deg)
    onshore = 110 <= r <= 259
    if onshore and 4.3 <= speed <= 6:
        raw = min(raw, 50)
    if onshore and speed > 6:
        raw = min(raw, 39)

    off_angle = angular_distance(r, 0.0)
    if speed > 15 and off_angle > 45:
        raw = min(raw, 60)
    beneficial = wind_tier(wind_dir, offshore_deg) <= 4
    if speed > 20 and off_angle > 30 and not beneficial:
        raw = min(raw, 39)

    if breaking_height_ft < 2 and onshore and speed > 10:
        raw = min(raw, 20)
    return raw


def _reason(breakdown: RatingBreakdown, breaking_height_ft: float, period_s: float, tide_ft: float) -> str:
    reasons: list[str] = []
    if period_s < 5:
        reasons.append("junk period")
    if breaking_height_ft < 2 and period_s < 6:
        reasons.append("too small and weak")

    if breakdown.swell_quality >= 50:
        reasons.append("good swell")
    elif breakdown.swell_quality <= 5:
        reasons.append("weak swell")

    if breakdown.direction == 0:
        reasons.append("ideal direction")
    elif breakdown.direction <= -18:
        reasons.append("blocked direction")
    elif breakdown.direction <= -15:
        reasons.append("poor wrap")
    else:
        reasons.append("off-angle")

    big = breaking_height_ft >= 4.0
    if tide_ft > 5.0:
        reasons.append("shore-break")
    elif tide_ft > 4.0:
        reasons.append("holdable tide" if big else "mushy tide")
    elif tide_ft > 3.0:
        reasons.append("optimal tide" if big else "mushy tide")
    elif breakdown.tide >= 18:
        reasons.append("optimal tide")

    if breakdown.wind >= 15:
        reasons.append("offshore winds")
    elif breakdown.wind <= -20:
        reasons.append("onshore winds")
    elif breakdown.wind < 0:
        reasons.append("wind issues")
    elif breakdown.wind > 0:
        reasons.append("favorable winds")
    if breakdown.gust < 0:
        reasons.append("gusty")

    return ", ".join(reasons) if reasons else "marginal conditions"


def rate_breaking_surf(
    point: ForecastPoint,
    swell: SwellComponent,
    breaking_height_ft: float,
    profile: SpotProfile,
    tide_ft: float,
    tide_phase: TidePhase | None = None,
    *,
    east_wrap: bool = True,
) -> Rating:
    """Rate surf from its predicted breaking height.

    Args:
        point: raw sample; wind, gusts and the secondary swell come from here
        swell: dominant swell train the breaking height was derived from
        breaking_height_ft: predicted breaking face height
        profile: spot constants
        tide_ft: interpolated tide height
        tide_phase: interpolated tide phase, None when unknown
        east_wrap: penalise and cap swell from east of 105 degrees

    Returns:
        Rating with a score clamped to [0, 100]
    """
    offshore = profile.offshore_wind_deg
    breakdown = RatingBreakdown(
        swell_quality=swell_quality_score(breaking_height_ft),
        direction=direction_penalty(swell.direction_deg, profile, east_wrap),
        tide=tide_points(tide_ft, breaking_height_ft, profile.key),
        wind=wind_points(point.wind_speed_kt, point.wind_direction_deg, profile.key,
                         breaking_height_ft, offshore),
        gust=gust_penalty(point.wind_speed_kt, point.wind_gusts_kt, point.wind_direction_deg, offshore),
    )
    raw = float(
        breakdown.swell_quality + breakdown.direction + breakdown.tide
        + breakdown.wind + breakdown.gust
    )

    bonus = 0
    if profile.key == "lido":
        bonus += small_wave_offshore_bonus(
            breaking_height_ft, point.wind_speed_kt, point.wind_direction_deg, swell.period_s, offshore,
        )
    raw += bonus

    raw *= tide_push_multiplier(tide_phase, tide_ft, breaking_height_ft)

    secondary = secondary_swell_bonus(point, swell.period_s)
    raw += secondary
    bonus += secondary

    # Short-period chop with real size is not surf
    if swell.period_s <= 5 and swell.height_ft >= 2:
        raw -= 15

    raw = _apply_caps(raw, point, swell, breaking_height_ft, profile.key, offshore, east_wrap)
    score = max(0, min(100, round_half_up(raw)))

    breakdown = replace(breakdown, bonus=bonus)
    logger.debug(
        "Rated %s @ %s: %.1fft swell=%d dir=%d tide=%d wind=%d gust=%d bonus=%d -> %d",
        profile.key, point.forecast_timestamp.isoformat(), breaking_height_ft,
        breakdown.swell_quality, breakdown.direction, breakdown.tide, breakdown.wind,
        breakdown.gust, bonus, score,
    )
    return Rating(score=score, breakdown=breakdown, reason=_reason(breakdown, breaking_height_ft,
                                                                 swell.period_s, tide_ft))
