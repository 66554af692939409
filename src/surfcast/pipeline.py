"""Top-level pipeline orchestrator.

Wires together: spot inputs → timelines → model agreement → alert scanning.
Each spot is scored in a worker thread; asyncio.gather fans spots out under
a semaphore sized to the number of spots, capped by settings.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from rich.console import Console

from surfcast.alerts.daylight import DaylightService
from surfcast.alerts.detector import detect_for_alert
from surfcast.alerts.models import DetectedSwell, SwellAlert
from surfcast.config import Settings, get_settings
from surfcast.confidence.agreement import (
    AnnotatedPoint,
    ConfidenceSummary,
    Discrepancy,
    LocalHourKey,
    ModelSelection,
    annotate_confidence,
    aggregate_confidence,
    find_discrepancy,
    find_discrepancy_by_day,
    index_by_local_hour,
    select_model,
)
from surfcast.forecast.models import ForecastTimelineResult
from surfcast.forecast.timeline import generate_timeline
from surfcast.ingest import SpotInput
from surfcast.spots.profiles import SpotProfile, get_spot_profile

logger = logging.getLogger(__name__)
console = Console()


@dataclass
class SpotForecast:
    """One spot's scored timeline plus its model-agreement verdicts."""

    profile: SpotProfile
    timeline: list[ForecastTimelineResult] = field(default_factory=list)
    annotated: list[AnnotatedPoint] = field(default_factory=list)
    summary: ConfidenceSummary = field(default_factory=lambda: ConfidenceSummary(overall=None))
    discrepancy: Discrepancy = field(default_factory=Discrepancy)
    discrepancy_by_day: dict[date, Discrepancy] = field(default_factory=dict)
    model_selection: ModelSelection | None = None


def current_hour_estimates(
    timeline: list[ForecastTimelineResult],
    spot_input: SpotInput,
    tz,
    now: datetime,
) -> dict[str, float | None]:
    """Each model's height for the local hour containing *now*, keyed by source."""
    key = LocalHourKey.from_datetime(now, tz)
    estimates: dict[str, float | None] = {}
    for result in timeline:
        if LocalHourKey.from_datetime(result.forecast_timestamp, tz) == key:
            estimates[result.point.source] = result.wave_height_ft
    sample = index_by_local_hour(spot_input.verification, tz).get(key)
    if sample is not None:
        estimates[sample.source] = sample.wave_or_swell_ft
    return estimates


def build_spot_forecast(spot_input: SpotInput, now: datetime, settings: Settings) -> SpotForecast:
    """Score one spot synchronously. Raises ValueError for an unknown spot."""
    profile = get_spot_profile(spot_input.spot)
    if profile is None:
        raise ValueError(f"unknown spot {spot_input.spot!r}")

    timeline = generate_timeline(
        spot_input.points,
        profile,
        spot_input.tides,
        spot_input.avg_crowd_level,
        now=now,
        settings=settings,
    )
    forecast = SpotForecast(profile=profile, timeline=timeline)
    if spot_input.observed_height_ft is not None:
        forecast.model_selection = select_model(
            spot_input.observed_height_ft,
            spot_input.observed_at,
            current_hour_estimates(timeline, spot_input, profile.tz, now),
            now,
            default_model=settings.default_model,
            max_age=timedelta(hours=settings.verification_stale_hours),
        )
    if not spot_input.verification:
        return forecast

    # Agreement is only judged for the near term where verification exists
    horizon = now + timedelta(hours=24)
    forecast.annotated = annotate_confidence(
        timeline,
        spot_input.verification,
        profile.tz,
        high_ft=settings.confidence_high_ft,
        med_ft=settings.confidence_med_ft,
    )
    forecast.summary = aggregate_confidence(
        a.confidence for a in forecast.annotated if now <= a.result.forecast_timestamp <= horizon
    )
    forecast.discrepancy = find_discrepancy(
        timeline,
        spot_input.verification,
        profile.tz,
        now,
        window_hours=settings.discrepancy_window_hours,
        threshold_ft=settings.discrepancy_threshold_ft,
    )
    forecast.discrepancy_by_day = find_discrepancy_by_day(
        timeline,
        spot_input.verification,
        profile.tz,
        now,
        window_days=settings.discrepancy_day_window_days,
        threshold_ft=settings.discrepancy_threshold_ft,
    )
    if forecast.discrepancy.has_large_discrepancy:
        logger.info(
            "Models disagree by up to %.1fft at %s", forecast.discrepancy.max_diff_ft, profile.key,
        )
    return forecast


async def build_forecasts(
    inputs: list[SpotInput],
    now: datetime | None = None,
    settings: Settings | None = None,
) -> dict[str, SpotForecast]:
    """Score every spot concurrently.

    A spot that fails is logged and comes back with an empty timeline;
    unknown spots are dropped.
    """
    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)
    if not inputs:
        return {}

    console.print(f"[bold]Scoring {len(inputs)} spot(s)...[/bold]")
    sem = asyncio.Semaphore(min(settings.max_concurrency, len(inputs)))

    async def _throttled(spot_input: SpotInput) -> SpotForecast:
        async with sem:
            return await asyncio.to_thread(build_spot_forecast, spot_input, now, settings)

    fetched = await asyncio.gather(*[_throttled(i) for i in inputs], return_exceptions=True)

    results: dict[str, SpotForecast] = {}
    for spot_input, result in zip(inputs, fetched):
        if isinstance(result, BaseException):
            logger.warning("Scoring failed for %s: %s", spot_input.spot, result)
            console.print(f"  [red]Error scoring {spot_input.spot}: {result}[/red]")
            profile = get_spot_profile(spot_input.spot)
            if profile is not None:
                results[profile.key] = SpotForecast(profile=profile)
            continue
        results[result.profile.key] = result
        console.print(f"  {result.profile.name}: {len(result.timeline)} point(s)")

    return results


async def scan_alerts(
    alerts: list[SwellAlert],
    forecasts: dict[str, SpotForecast],
    now: datetime | None = None,
    settings: Settings | None = None,
) -> list[DetectedSwell]:
    """Run every alert over the scored timelines."""
    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)
    if not alerts:
        return []

    timelines = {key: f.timeline for key, f in forecasts.items()}
    sem = asyncio.Semaphore(min(settings.max_concurrency, len(alerts)))

    async def _throttled(alert: SwellAlert) -> list[DetectedSwell]:
        async with sem:
            # One daylight cache per alert keeps worker threads from sharing state
            daylight = DaylightService(settings.daylight_depression_deg)
            return await asyncio.to_thread(
                detect_for_alert, timelines, alert, now, daylight=daylight, settings=settings,
            )

    fetched = await asyncio.gather(*[_throttled(a) for a in alerts], return_exceptions=True)

    detected: list[DetectedSwell] = []
    for alert, result in zip(alerts, fetched):
        if isinstance(result, BaseException):
            logger.warning("Alert %s failed: %s", alert.alert_id, result)
            console.print(f"  [red]Error scanning alert {alert.alert_id}: {result}[/red]")
            continue
        detected.extend(result)

    console.print(
        f"[bold]Found [green]{len(detected)}[/green] swell window(s) "
        f"for {len(alerts)} alert(s)[/bold]"
    )
    return detected


async def run_pipeline(
    inputs: list[SpotInput],
    alerts: list[SwellAlert],
    now: datetime | None = None,
) -> tuple[dict[str, SpotForecast], list[DetectedSwell]]:
    """Run the full pipeline: score → compare models → scan alerts."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)

    forecasts = await build_forecasts(inputs, now, settings)
    if not forecasts:
        console.print("[yellow]No spots scored.[/yellow]")
        return forecasts, []

    detected = await scan_alerts(alerts, forecasts, now, settings)
    return forecasts, detected
