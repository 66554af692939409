"""Tests for the concurrent pipeline."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import pytest

from surfcast.alerts.models import SwellAlert
from surfcast.config import Settings
from surfcast.confidence.agreement import ConfidenceLevel, VerificationSample
from surfcast.ingest import SpotInput
from surfcast.pipeline import build_forecasts, build_spot_forecast, run_pipeline, scan_alerts


@pytest.fixture
def spot_input(hourly_points, tide_predictions):
    return SpotInput(spot="long-beach", points=hourly_points, tides=tide_predictions)


def test_build_spot_forecast_without_verification(spot_input, now, settings):
    forecast = build_spot_forecast(spot_input, now, settings)
    assert forecast.profile.key == "long-beach"
    assert len(forecast.timeline) == 24
    assert forecast.annotated == []
    assert forecast.summary.overall is None
    assert not forecast.discrepancy.has_large_discrepancy


def test_build_spot_forecast_with_verification(spot_input, now, settings):
    first = build_spot_forecast(spot_input, now, settings).timeline
    verification = [
        VerificationSample(r.forecast_timestamp, wave_height_ft=r.wave_height_ft + 3.0,
                           swell_height_ft=r.wave_height_ft + 0.1)
        for r in first[:6]
    ]
    spot_input.verification = verification
    forecast = build_spot_forecast(spot_input, now, settings)
    assert forecast.summary.overall is ConfidenceLevel.HIGH
    assert forecast.summary.high_count == 6
    assert forecast.discrepancy.has_large_discrepancy
    assert forecast.discrepancy.max_diff_ft == pytest.approx(3.0)
    assert forecast.discrepancy_by_day


def test_model_selection_from_observation(spot_input, now, settings):
    current = build_spot_forecast(spot_input, now, settings).timeline[0]
    spot_input.verification = [
        VerificationSample(now, wave_height_ft=current.wave_height_ft + 1.0),
    ]
    spot_input.observed_height_ft = current.wave_height_ft + 0.2
    spot_input.observed_at = now - timedelta(minutes=20)

    selection = build_spot_forecast(spot_input, now, settings).model_selection
    assert selection.model_id == "open-meteo"
    assert set(selection.errors_ft) == {"open-meteo", "stormglass"}


def test_stale_observation_gives_no_selection(spot_input, now, settings):
    spot_input.observed_height_ft = 3.0
    spot_input.observed_at = now - timedelta(hours=settings.verification_stale_hours + 1)
    assert build_spot_forecast(spot_input, now, settings).model_selection is None


def test_build_spot_forecast_unknown_spot(now, settings):
    with pytest.raises(ValueError, match="unknown spot"):
        build_spot_forecast(SpotInput(spot="mavericks"), now, settings)


@pytest.mark.asyncio
async def test_build_forecasts_many_spots(hourly_points, tide_predictions, now):
    inputs = [
        SpotInput(spot=key, points=hourly_points, tides=tide_predictions)
        for key in ("lido", "long-beach", "rockaway", "Ditch Plains")
    ]
    forecasts = await build_forecasts(inputs, now, Settings(max_concurrency=2))
    assert set(forecasts) == {"lido", "long-beach", "rockaway", "ditch-plains"}
    for forecast in forecasts.values():
        assert [r.forecast_timestamp for r in forecast.timeline] == [
            p.forecast_timestamp for p in hourly_points
        ]


@pytest.mark.asyncio
async def test_build_forecasts_isolates_failures(spot_input, now, settings):
    real = build_spot_forecast

    def flaky(spot_input, now, settings):
        if spot_input.spot == "lido":
            raise RuntimeError("tide feed exploded")
        return real(spot_input, now, settings)

    inputs = [spot_input, SpotInput(spot="lido", points=spot_input.points)]
    with patch("surfcast.pipeline.build_spot_forecast", side_effect=flaky):
        forecasts = await build_forecasts(inputs, now, settings)

    assert forecasts["lido"].timeline == []
    assert len(forecasts["long-beach"].timeline) == 24


@pytest.mark.asyncio
async def test_build_forecasts_drops_unknown_spot(spot_input, now, settings):
    forecasts = await build_forecasts([spot_input, SpotInput(spot="mavericks")], now, settings)
    assert set(forecasts) == {"long-beach"}


@pytest.mark.asyncio
async def test_build_forecasts_empty(now, settings):
    assert await build_forecasts([], now, settings) == {}


@pytest.mark.asyncio
async def test_scan_alerts(spot_input, now, settings):
    forecasts = await build_forecasts([spot_input], now, settings)
    alerts = [
        SwellAlert(alert_id=1, user_id=1, min_quality_score=0),
        SwellAlert(alert_id=2, user_id=1, min_quality_score=101),
    ]
    detected = await scan_alerts(alerts, forecasts, now, settings)
    assert {d.alert_id for d in detected} == {1}
    # One run from now+1h until dusk, another after first light tomorrow
    assert len(detected) == 2
    assert detected[0].spot_key == "long-beach"
    assert detected[0].swell_start_time == now + timedelta(hours=1)


@pytest.mark.asyncio
async def test_run_pipeline_end_to_end(spot_input, now):
    alerts = [SwellAlert(alert_id=5, user_id=2, spot_key="long-beach", min_wave_height_ft=0.5)]
    forecasts, detected = await run_pipeline([spot_input], alerts, now)
    assert "long-beach" in forecasts
    assert detected
    assert all(d.alert_id == 5 for d in detected)


@pytest.mark.asyncio
async def test_run_pipeline_nothing_scored(now):
    forecasts, detected = await run_pipeline([SpotInput(spot="mavericks")], [], now)
    assert forecasts == {}
    assert detected == []
