"""Forecast timeline generation.

Runs the tide interpolator, the quality scorer and the breaking-height
estimator over an ordered run of forecast points for one spot. Output has
exactly the input's length and order; filtering is left to consumers such
as the swell window detector.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from surfcast.config import Settings, get_settings
from surfcast.forecast.breaking import BreakingHeightEstimator, ShoalingEstimator, dominant_swell
from surfcast.forecast.models import (
    BreakingEstimate,
    ForecastPoint,
    ForecastTimelineResult,
    TideInfo,
    TidePrediction,
)
from surfcast.scoring.quality import score_point
from surfcast.spots.profiles import SpotProfile
from surfcast.tides.interpolator import interpolate

logger = logging.getLogger(__name__)

_DEFAULT_ESTIMATOR = ShoalingEstimator()


def _estimate_breaking(
    estimator: BreakingHeightEstimator | None,
    point: ForecastPoint,
    profile: SpotProfile,
    tide: TideInfo | None,
) -> BreakingEstimate | None:
    if estimator is None or tide is None:
        return None
    try:
        return estimator.estimate(point, profile.key, tide.height_ft, tide.phase)
    except (ValueError, ArithmeticError) as exc:
        logger.warning(
            "Breaking-height estimate failed for %s @ %s: %s",
            profile.key, point.forecast_timestamp.isoformat(), exc,
        )
        return None


def generate_timeline(
    points: list[ForecastPoint],
    profile: SpotProfile,
    tide_predictions: list[TidePrediction],
    avg_crowd_level: float | None = None,
    *,
    estimator: BreakingHeightEstimator | None = _DEFAULT_ESTIMATOR,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> list[ForecastTimelineResult]:
    """Score every forecast point for a spot.

    Args:
        points: samples in ascending timestamp order
        profile: spot constants
        tide_predictions: high/low events; may be empty
        avg_crowd_level: 1-5 average reported crowd, None when unknown
        estimator: breaking-height model, None to skip the overlay
        now: reference time for buoy-sourced points
        settings: tuning overrides; defaults from the environment

    Returns:
        One ForecastTimelineResult per input point, same order. Points the
        tide predictions do not cover get ``tide=None`` and a neutral tide
        sub-score.
    """
    settings = settings or get_settings()
    event_window = timedelta(minutes=settings.tide_event_window_minutes)
    results: list[ForecastTimelineResult] = []
    uncovered = 0

    for point in points:
        tide = interpolate(tide_predictions, point.forecast_timestamp, event_window)
        if tide is None:
            uncovered += 1

        quality = score_point(
            point,
            profile,
            tide.height_ft if tide is not None else None,
            avg_crowd_level,
            now=now,
            light_wind_ms=settings.light_wind_threshold_ms,
        )

        results.append(ForecastTimelineResult(
            point=point,
            quality=quality,
            tide=tide,
            dominant_swell=dominant_swell(point),
            breaking=_estimate_breaking(estimator, point, profile, tide),
        ))

    if uncovered and points:
        logger.warning(
            "Tide predictions cover %d/%d points for %s; the rest use a neutral tide score",
            len(points) - uncovered, len(points), profile.key,
        )
    logger.debug("Generated %d timeline points for %s", len(results), profile.key)
    return results
