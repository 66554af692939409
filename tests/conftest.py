"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from surfcast.alerts.daylight import DaylightService
from surfcast.config import Settings
from surfcast.forecast.models import (
    ConfidenceBand,
    ForecastPoint,
    ForecastTimelineResult,
    QualityResult,
    ScoreBreakdown,
    TidePrediction,
    TideType,
)
from surfcast.scoring.quality import wind_type
from surfcast.spots.profiles import get_spot_profile


@pytest.fixture
def now():
    """Mid-July morning on Long Island: 08:00 EDT."""
    return datetime(2025, 7, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def profile():
    return get_spot_profile("long-beach")


@pytest.fixture
def daylight():
    return DaylightService()


def _point(ts: datetime, **overrides) -> ForecastPoint:
    values = dict(
        forecast_timestamp=ts,
        wave_height_ft=4.0,
        wave_period_s=11.0,
        wave_direction_deg=160.0,
        wind_speed_kt=5.0,
        wind_direction_deg=0.0,
    )
    values.update(overrides)
    return ForecastPoint(**values)


@pytest.fixture
def make_point():
    """Factory for a clean, south-swell, offshore-wind forecast point."""
    return _point


@pytest.fixture
def make_result():
    """Factory for a timeline result with a chosen quality score.

    Wave height and period come straight from the point (no dominant swell
    or breaking overlay), so thresholds are easy to reason about.
    """

    def _make(
        ts: datetime,
        score: int = 70,
        height: float | None = 4.0,
        period: float | None = 11.0,
        wind_dir: float | None = 0.0,
    ) -> ForecastTimelineResult:
        point = _point(ts, wave_height_ft=height, wave_period_s=period, wind_direction_deg=wind_dir)
        quality = QualityResult(
            quality_score=score,
            breakdown=ScoreBreakdown(swell=0.0, period=0.0, wind=0.0, tide=0.0),
            usability_intermediate=score,
            usability_advanced=score,
            confidence_band=ConfidenceBand.HIGH,
            wind_type=wind_type(wind_dir),
        )
        return ForecastTimelineResult(point=point, quality=quality)

    return _make


@pytest.fixture
def hourly_points(now):
    """24 hourly points starting at *now*, swell building through the day."""
    return [
        _point(now + timedelta(hours=i), hours_out=float(i), wave_height_ft=3.0 + i * 0.1)
        for i in range(24)
    ]


@pytest.fixture
def tide_predictions(now):
    """Alternating highs and lows every ~6h covering the hourly points."""
    start = now - timedelta(hours=2)
    return [
        TidePrediction(start + timedelta(hours=6 * i), 4.8 if i % 2 == 0 else 0.4,
                       TideType.HIGH if i % 2 == 0 else TideType.LOW)
        for i in range(6)
    ]
