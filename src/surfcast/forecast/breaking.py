"""Breaking wave height estimation.

Turns offshore swell into a predicted breaking face height, a human-readable
range ("3-4ft") and a categorical rating. The transform is spot-calibrated,
so it sits behind the BreakingHeightEstimator protocol and can be replaced
per deployment without touching the core scorer.

Calibration constants are provisional and need re-deriving against logged
break observations before they are trusted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from surfcast.common.types import clean_direction, clean_number, round_half_up
from surfcast.forecast.models import BreakingEstimate, ForecastPoint, SwellComponent, TidePhase
from surfcast.forecast.rating import rate_breaking_surf
from surfcast.spots.profiles import get_spot_profile

logger = logging.getLogger(__name__)

# Swells under this height lose too much energy to use bathymetry
_SMALL_SWELL_FT = 2.0
_SMALL_SWELL_MULTIPLIER = 0.8

_GROUNDSWELL_PERIOD_S = 10.0
_GROUNDSWELL_BONUS = 0.1

# Heights under this are reported as flat
_FLAT_FT = 0.5


@dataclass(frozen=True)
class DirectionDamping:
    """Multiplier applied when swell arrives from [start_deg, end_deg)."""

    start_deg: float
    end_deg: float
    factor: float

    def applies(self, direction_deg: float) -> bool:
        return self.start_deg <= direction_deg < self.end_deg


@dataclass(frozen=True)
class SpotCalibration:
    """Per-spot shoaling constants.

    ``east_wrap`` marks south-facing beaches that east swell has to wrap
    around the island to reach; the rating penalises and caps such swell.
    """

    base_multiplier: float = 1.0
    damping: tuple[DirectionDamping, ...] = ()
    east_wrap: bool = True


# South-facing Long Island beaches: west swell is blocked by the landmass,
# due east swell is shadowed and refracts around the island.
_LONG_ISLAND_DAMPING = (
    DirectionDamping(247.5, 292.5, 0.1),
    DirectionDamping(90.0, 100.0, 0.5),
    DirectionDamping(100.0, 110.0, 0.65),
)

DEFAULT_CALIBRATIONS: dict[str, SpotCalibration] = {
    "lido": SpotCalibration(1.1, _LONG_ISLAND_DAMPING),
    "long-beach": SpotCalibration(1.05, _LONG_ISLAND_DAMPING),
    "rockaway": SpotCalibration(1.1, _LONG_ISLAND_DAMPING),
    "gilgo": SpotCalibration(1.05, _LONG_ISLAND_DAMPING),
    "ditch-plains": SpotCalibration(1.0, (DirectionDamping(247.5, 292.5, 0.1),), east_wrap=False),
}


class BreakingHeightEstimator(Protocol):
    """Pluggable breaking-height model."""

    def estimate(
        self,
        point: ForecastPoint,
        spot_key: str,
        tide_height_ft: float,
        tide_phase: TidePhase | None = None,
    ) -> BreakingEstimate | None:
        """Estimate breaking height and rating for one sample.

        Args:
            point: raw forecast sample
            spot_key: resolved profile key
            tide_height_ft: interpolated tide height
            tide_phase: interpolated tide phase, None when unknown

        Returns:
            BreakingEstimate, or None when the spot is not calibrated or the
            sample has no usable swell
        """
        ...


def swell_components(point: ForecastPoint) -> list[SwellComponent]:
    """All swell trains of *point* with a usable height and period."""
    raw = [
        ("primary", point.wave_height_ft, point.wave_period_s, point.wave_direction_deg),
        ("secondary", point.secondary_swell_height_ft, point.secondary_swell_period_s,
         point.secondary_swell_direction_deg),
        ("tertiary", point.tertiary_swell_height_ft, point.tertiary_swell_period_s,
         point.tertiary_swell_direction_deg),
        ("wind", point.wind_wave_height_ft, point.wind_wave_period_s,
         point.wind_wave_direction_deg),
    ]
    components: list[SwellComponent] = []
    for kind, height, period, direction in raw:
        h = clean_number(height, minimum=0.0)
        p = clean_number(period, minimum=0.0)
        if h is None or p is None:
            continue
        components.append(SwellComponent(
            type=kind,
            height_ft=h,
            period_s=p,
            direction_deg=clean_direction(direction),
            energy=h * h * p,
        ))
    return components


def dominant_swell(point: ForecastPoint) -> SwellComponent | None:
    """The most energetic swell train (H^2 * T), primary first on ties."""
    components = swell_components(point)
    if not components:
        return None
    return max(components, key=lambda c: c.energy)


def spot_multiplier(calibration: SpotCalibration, height_ft: float, period_s: float) -> float:
    if height_ft < _SMALL_SWELL_FT:
        return _SMALL_SWELL_MULTIPLIER
    bonus = _GROUNDSWELL_BONUS if period_s > _GROUNDSWELL_PERIOD_S else 0.0
    return calibration.base_multiplier + bonus


def breaking_height(swell: SwellComponent, calibration: SpotCalibration) -> float:
    """Breaking face height: H * (T/10) * spot multiplier, then direction damping."""
    height = swell.height_ft * (swell.period_s / 10.0) * spot_multiplier(
        calibration, swell.height_ft, swell.period_s,
    )
    if swell.direction_deg is not None:
        for damping in calibration.damping:
            if damping.applies(swell.direction_deg):
                height *= damping.factor
                break
    return height


def format_wave_height(height_ft: float) -> str:
    """Format a height as "3ft" or a one-foot range like "3-4ft"."""
    if height_ft < _FLAT_FT:
        return "<1ft"
    rounded = round_half_up(height_ft * 2) / 2
    whole = round_half_up(rounded)
    if abs(rounded - whole) < 0.2:
        return f"{whole}ft"
    return f"{int(rounded)}-{int(rounded) + 1}ft"


def score_to_rating(score: float) -> str:
    if score <= 39:
        return "Don't Bother"
    if score <= 59:
        return "Worth a Look"
    if score <= 75:
        return "Go Surf"
    if score <= 90:
        return "Firing"
    return "All-Time"


@dataclass
class ShoalingEstimator:
    """Default estimator: dominant swell, period scaling and spot shoaling.

    The rating comes from ``rate_breaking_surf`` on the predicted breaking
    height, so wind gusts, tide push and secondary swell all count.
    """

    calibrations: dict[str, SpotCalibration] = field(
        default_factory=lambda: dict(DEFAULT_CALIBRATIONS),
    )

    def estimate(
        self,
        point: ForecastPoint,
        spot_key: str,
        tide_height_ft: float,
        tide_phase: TidePhase | None = None,
    ) -> BreakingEstimate | None:
        calibration = self.calibrations.get(spot_key)
        profile = get_spot_profile(spot_key)
        if calibration is None or profile is None:
            logger.debug("No shoaling calibration for spot %s", spot_key)
            return None

        swell = dominant_swell(point)
        if swell is None:
            return None

        height = breaking_height(swell, calibration)
        rating = rate_breaking_surf(
            point, swell, height, profile, tide_height_ft, tide_phase,
            east_wrap=calibration.east_wrap,
        )

        return BreakingEstimate(
            breaking_height_ft=round(height, 1),
            breaking_height_label=format_wave_height(height),
            rating="Flat" if height < _FLAT_FT else score_to_rating(rating.score),
            score=rating.score,
            reason=rating.reason,
            dominant_swell=swell,
        )
