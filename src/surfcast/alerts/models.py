"""Swell alert data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SwellAlert:
    """A user's notification criteria. Read-only to this package.

    Attributes:
        alert_id: alert identifier
        user_id: owning user
        spot_key: restrict to one spot, None for every active spot
        min_wave_height_ft: minimum wave height, None to ignore
        min_quality_score: minimum quality score, None to ignore
        min_period_s: minimum swell period, None to ignore
        ideal_wind_only: require offshore (or side-offshore) wind
        hours_advance_notice: look-ahead horizon in hours
        days_advance_notice: look-ahead horizon in days, wins over hours
    """

    alert_id: int
    user_id: int
    spot_key: str | None = None
    min_wave_height_ft: float | None = None
    min_quality_score: int | None = None
    min_period_s: float | None = None
    ideal_wind_only: bool = False
    hours_advance_notice: int | None = None
    days_advance_notice: int | None = None


@dataclass(frozen=True)
class SwellCondition:
    """One point of a swell window's condition trace."""

    timestamp: datetime
    wave_height_ft: float
    period_s: float
    wind_type: str | None
    quality_score: int


@dataclass(frozen=True)
class SwellWindow:
    """A contiguous run of forecast points that satisfy one alert."""

    start_time: datetime
    end_time: datetime
    peak_height_ft: float
    peak_score: int
    avg_score: int
    avg_period_s: int
    conditions: tuple[SwellCondition, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DetectedSwell:
    """A swell window bound to the alert and spot it was found for."""

    alert_id: int
    user_id: int
    spot_key: str
    swell_start_time: datetime
    swell_end_time: datetime
    peak_wave_height_ft: float
    peak_quality_score: int
    avg_quality_score: int
    avg_period_s: int
    conditions: tuple[SwellCondition, ...] = field(default_factory=tuple)

    @classmethod
    def from_window(cls, window: SwellWindow, alert: SwellAlert, spot_key: str) -> DetectedSwell:
        return cls(
            alert_id=alert.alert_id,
            user_id=alert.user_id,
            spot_key=spot_key,
            swell_start_time=window.start_time,
            swell_end_time=window.end_time,
            peak_wave_height_ft=window.peak_height_ft,
            peak_quality_score=window.peak_score,
            avg_quality_score=window.avg_score,
            avg_period_s=window.avg_period_s,
            conditions=window.conditions,
        )
