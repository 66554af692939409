"""Forecast data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from surfcast.common.types import knots_to_mph, round_half_up


class TideType(Enum):
    """Discrete tide event kind."""

    HIGH = "H"
    LOW = "L"


class TidePhase(Enum):
    """Interpolated tide state at an instant."""

    RISING = "rising"
    FALLING = "falling"
    HIGH = "high"
    LOW = "low"


class WindType(Enum):
    """Wind direction relative to the coastline."""

    OFFSHORE = "offshore"
    ONSHORE = "onshore"
    CROSS = "cross"


class ConfidenceBand(Enum):
    """Coarse trust label from forecast horizon or data freshness."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class ForecastPoint:
    """One environmental sample for a location at a timestamp.

    Heights in feet, periods in seconds, directions in degrees (0-360, the
    bearing the energy comes from), wind in knots, temperatures in F.
    Any field other than the timestamp may be None.
    """

    forecast_timestamp: datetime
    hours_out: float = 0.0
    wave_height_ft: float | None = None
    wave_period_s: float | None = None
    wave_direction_deg: float | None = None
    secondary_swell_height_ft: float | None = None
    secondary_swell_period_s: float | None = None
    secondary_swell_direction_deg: float | None = None
    tertiary_swell_height_ft: float | None = None
    tertiary_swell_period_s: float | None = None
    tertiary_swell_direction_deg: float | None = None
    wind_wave_height_ft: float | None = None
    wind_wave_period_s: float | None = None
    wind_wave_direction_deg: float | None = None
    wind_speed_kt: float | None = None
    wind_direction_deg: float | None = None
    wind_gusts_kt: float | None = None
    water_temp_f: float | None = None
    air_temp_f: float | None = None
    source: str = "open-meteo"


@dataclass(frozen=True)
class TidePrediction:
    """A single high or low tide event."""

    time: datetime
    height_ft: float
    type: TideType


@dataclass(frozen=True)
class TideInfo:
    """Interpolated tide state. Derived per query, never persisted."""

    height_ft: float
    phase: TidePhase


@dataclass(frozen=True)
class ScoreBreakdown:
    """Sub-scores (0-100) that feed the combined quality score.

    ``direction`` is the swell-direction component already blended into
    ``swell``; it is None when the swell direction is unknown.
    """

    swell: float
    period: float
    wind: float
    tide: float
    direction: float | None = None


@dataclass(frozen=True)
class QualityResult:
    """Scorer output for one forecast point."""

    quality_score: int
    breakdown: ScoreBreakdown
    usability_intermediate: int
    usability_advanced: int
    confidence_band: ConfidenceBand
    wind_type: WindType | None = None


@dataclass(frozen=True)
class SwellComponent:
    """One swell train of a forecast point, with its energy (H^2 * T)."""

    type: str  # "primary", "secondary", "tertiary" or "wind"
    height_ft: float
    period_s: float
    direction_deg: float | None
    energy: float

    @property
    def label(self) -> str:
        if self.period_s < 7:
            return "Wind Swell"
        if self.period_s <= 12:
            return "Swell"
        return "Groundswell"


@dataclass(frozen=True)
class BreakingEstimate:
    """Output of a breaking-height estimator for one point."""

    breaking_height_ft: float
    breaking_height_label: str
    rating: str
    score: int
    reason: str
    dominant_swell: SwellComponent | None = None


@dataclass(frozen=True)
class ForecastTimelineResult:
    """A forecast point merged with its quality verdict and tide state."""

    point: ForecastPoint
    quality: QualityResult
    tide: TideInfo | None = None
    dominant_swell: SwellComponent | None = None
    breaking: BreakingEstimate | None = None

    @property
    def forecast_timestamp(self) -> datetime:
        return self.point.forecast_timestamp

    @property
    def hours_out(self) -> float:
        return self.point.hours_out

    @property
    def quality_score(self) -> int:
        return self.quality.quality_score

    @property
    def wind_type(self) -> WindType | None:
        return self.quality.wind_type

    @property
    def wave_height_ft(self) -> float | None:
        """Breaking height when estimated, else dominant, else primary swell height."""
        if self.breaking is not None:
            return self.breaking.breaking_height_ft
        if self.dominant_swell is not None:
            return self.dominant_swell.height_ft
        return self.point.wave_height_ft

    @property
    def period_s(self) -> float | None:
        if self.dominant_swell is not None:
            return self.dominant_swell.period_s
        return self.point.wave_period_s

    @property
    def wind_speed_mph(self) -> int | None:
        if self.point.wind_speed_kt is None:
            return None
        return round_half_up(knots_to_mph(self.point.wind_speed_kt))

    @property
    def wind_gusts_mph(self) -> int | None:
        if self.point.wind_gusts_kt is None:
            return None
        return round_half_up(knots_to_mph(self.point.wind_gusts_kt))
