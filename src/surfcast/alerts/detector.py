"""Swell window detection for alerts.

Scans a scored timeline against one alert's thresholds and emits contiguous
daylight windows of matching points. Windowing is a two-state machine driven
by TRANSITIONS; each matching point is classified MATCH_NEAR when it follows
the open window's last point within the gap tolerance, MATCH_FAR otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from enum import Enum

import numpy as np

from surfcast.alerts.daylight import DaylightService
from surfcast.alerts.models import DetectedSwell, SwellAlert, SwellCondition, SwellWindow
from surfcast.common.types import round_half_up
from surfcast.config import Settings, get_settings
from surfcast.forecast.models import ForecastTimelineResult, WindType
from surfcast.scoring.quality import is_side_offshore
from surfcast.spots.profiles import SpotProfile, active_spot_profiles, get_spot_profile

logger = logging.getLogger(__name__)


class WindowState(Enum):
    NO_WINDOW = "no_window"
    IN_WINDOW = "in_window"


class WindowEvent(Enum):
    MATCH_NEAR = "match_near"
    MATCH_FAR = "match_far"
    MISS = "miss"


class WindowAction(Enum):
    START = "start"
    EXTEND = "extend"
    FLUSH_AND_START = "flush_and_start"
    FLUSH = "flush"
    IGNORE = "ignore"


TRANSITIONS: dict[tuple[WindowState, WindowEvent], tuple[WindowAction, WindowState]] = {
    (WindowState.NO_WINDOW, WindowEvent.MATCH_NEAR): (WindowAction.START, WindowState.IN_WINDOW),
    (WindowState.NO_WINDOW, WindowEvent.MATCH_FAR): (WindowAction.START, WindowState.IN_WINDOW),
    (WindowState.NO_WINDOW, WindowEvent.MISS): (WindowAction.IGNORE, WindowState.NO_WINDOW),
    (WindowState.IN_WINDOW, WindowEvent.MATCH_NEAR): (WindowAction.EXTEND, WindowState.IN_WINDOW),
    (WindowState.IN_WINDOW, WindowEvent.MATCH_FAR): (
        WindowAction.FLUSH_AND_START, WindowState.IN_WINDOW,
    ),
    (WindowState.IN_WINDOW, WindowEvent.MISS): (WindowAction.FLUSH, WindowState.NO_WINDOW),
}


def search_interval(
    alert: SwellAlert,
    now: datetime,
    settings: Settings | None = None,
) -> tuple[datetime, datetime]:
    """Return (earliest, latest) forecast times an alert looks at."""
    settings = settings or get_settings()
    if alert.days_advance_notice is not None:
        horizon = timedelta(days=alert.days_advance_notice)
    else:
        horizon = timedelta(hours=alert.hours_advance_notice or settings.default_hours_advance_notice)
    return now + timedelta(hours=settings.alert_buffer_hours), now + horizon


def _height(result: ForecastTimelineResult) -> float:
    return result.wave_height_ft or 0.0


def _period(result: ForecastTimelineResult) -> float:
    return result.period_s or 0.0


def has_ideal_wind(
    result: ForecastTimelineResult,
    profile: SpotProfile,
    allow_side_offshore: bool = True,
) -> bool:
    if result.wind_type is WindType.OFFSHORE:
        return True
    return allow_side_offshore and is_side_offshore(
        result.point.wind_direction_deg, profile.offshore_wind_deg,
    )


def matches_alert(
    result: ForecastTimelineResult,
    alert: SwellAlert,
    profile: SpotProfile,
    allow_side_offshore: bool = True,
) -> bool:
    """Threshold predicate; unset alert minimums are skipped."""
    if alert.min_wave_height_ft is not None and _height(result) < alert.min_wave_height_ft:
        return False
    if alert.min_quality_score is not None and result.quality_score < alert.min_quality_score:
        return False
    if alert.min_period_s is not None and _period(result) < alert.min_period_s:
        return False
    if alert.ideal_wind_only and not has_ideal_wind(result, profile, allow_side_offshore):
        return False
    return True


def summarize_window(
    points: list[ForecastTimelineResult],
    profile: SpotProfile,
    daylight: DaylightService,
) -> SwellWindow:
    """Build window statistics; the end time is capped at that day's last light."""
    start = points[0].forecast_timestamp
    end = points[-1].forecast_timestamp
    last_light = daylight.last_light(profile, end)
    if last_light is not None and end > last_light:
        end = last_light

    conditions = tuple(
        SwellCondition(
            timestamp=p.forecast_timestamp,
            wave_height_ft=_height(p),
            period_s=_period(p),
            wind_type=p.wind_type.value if p.wind_type is not None else None,
            quality_score=p.quality_score,
        )
        for p in points
    )
    periods = [c.period_s for c in conditions if c.period_s > 0]

    return SwellWindow(
        start_time=start,
        end_time=end,
        peak_height_ft=max(c.wave_height_ft for c in conditions),
        peak_score=max(c.quality_score for c in conditions),
        avg_score=round_half_up(float(np.mean([c.quality_score for c in conditions]))),
        avg_period_s=round_half_up(float(np.mean(periods))) if periods else 0,
        conditions=conditions,
    )


def detect(
    timeline: list[ForecastTimelineResult],
    alert: SwellAlert,
    now: datetime,
    profile: SpotProfile,
    *,
    daylight: DaylightService | None = None,
    settings: Settings | None = None,
) -> list[SwellWindow]:
    """Find windows in one spot's timeline that satisfy *alert*.

    Args:
        timeline: scored points for the spot, any order
        alert: thresholds and look-ahead horizon
        now: reference time for the search interval
        profile: the spot the timeline belongs to
        daylight: sun-times provider; a fresh one per call when omitted
        settings: tuning overrides; defaults from the environment

    Returns:
        Windows in chronological order, each of at least
        ``settings.min_window_points`` points
    """
    settings = settings or get_settings()
    daylight = daylight or DaylightService(settings.daylight_depression_deg)
    earliest, latest = search_interval(alert, now, settings)
    max_gap = timedelta(hours=settings.max_window_gap_hours)

    candidates = sorted(
        (r for r in timeline if earliest <= r.forecast_timestamp <= latest),
        key=lambda r: r.forecast_timestamp,
    )
    candidates = [r for r in candidates if daylight.is_daylight(profile, r.forecast_timestamp)]

    windows: list[SwellWindow] = []
    current: list[ForecastTimelineResult] = []
    state = WindowState.NO_WINDOW

    def flush() -> None:
        if len(current) >= settings.min_window_points:
            windows.append(summarize_window(current, profile, daylight))

    for result in candidates:
        if not matches_alert(result, alert, profile, settings.side_offshore_is_ideal):
            event = WindowEvent.MISS
        elif current and result.forecast_timestamp - current[-1].forecast_timestamp <= max_gap:
            event = WindowEvent.MATCH_NEAR
        else:
            event = WindowEvent.MATCH_FAR

        action, state = TRANSITIONS[(state, event)]
        if action is WindowAction.START:
            current = [result]
        elif action is WindowAction.EXTEND:
            current.append(result)
        elif action is WindowAction.FLUSH_AND_START:
            flush()
            current = [result]
        elif action is WindowAction.FLUSH:
            flush()
            current = []

    if state is WindowState.IN_WINDOW:
        flush()

    logger.debug(
        "Alert %s @ %s: %d candidates, %d windows",
        alert.alert_id, profile.key, len(candidates), len(windows),
    )
    return windows


def detect_for_alert(
    timelines: Mapping[str, list[ForecastTimelineResult]],
    alert: SwellAlert,
    now: datetime,
    *,
    daylight: DaylightService | None = None,
    settings: Settings | None = None,
) -> list[DetectedSwell]:
    """Run one alert across the spots it covers.

    An alert bound to a spot scans only that spot; otherwise every active
    (not coming-soon) spot with a timeline is scanned.
    """
    settings = settings or get_settings()
    daylight = daylight or DaylightService(settings.daylight_depression_deg)

    if alert.spot_key is not None:
        profile = get_spot_profile(alert.spot_key)
        if profile is None:
            logger.warning("Alert %s names unknown spot %r", alert.alert_id, alert.spot_key)
            return []
        profiles = [profile]
    else:
        profiles = active_spot_profiles()

    detected: list[DetectedSwell] = []
    for profile in profiles:
        timeline = timelines.get(profile.key)
        if not timeline:
            continue
        for window in detect(timeline, alert, now, profile, daylight=daylight, settings=settings):
            detected.append(DetectedSwell.from_window(window, alert, profile.key))

    logger.info("Alert %s: %d swell windows across %d spots", alert.alert_id, len(detected), len(profiles))
    return detected
