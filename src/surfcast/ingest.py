"""Load already-parsed records (JSON-like dicts) into surfcast models.

Out-of-range numbers are sanitised to None here so the scorer only ever sees
values it can trust or missing ones. Naive timestamps are taken as UTC.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from surfcast.alerts.models import SwellAlert
from surfcast.common.types import JsonDict, clean_direction, clean_number
from surfcast.confidence.agreement import VerificationSample
from surfcast.forecast.models import ForecastPoint, TidePrediction, TideType

logger = logging.getLogger(__name__)

# Plausible ranges; anything outside is treated as a bad reading
_MAX_HEIGHT_FT = 100.0
_MAX_PERIOD_S = 30.0
_MAX_WIND_KT = 200.0
_TEMP_RANGE_F = (-40.0, 130.0)
_TIDE_RANGE_FT = (-15.0, 25.0)

_TIDE_TYPES = {
    "h": TideType.HIGH,
    "high": TideType.HIGH,
    "l": TideType.LOW,
    "low": TideType.LOW,
}


@dataclass
class SpotInput:
    """Everything needed to build one spot's timeline."""

    spot: str
    points: list[ForecastPoint] = field(default_factory=list)
    tides: list[TidePrediction] = field(default_factory=list)
    verification: list[VerificationSample] = field(default_factory=list)
    avg_crowd_level: float | None = None
    # Latest nearby buoy reading, used to pick the closer model
    observed_height_ft: float | None = None
    observed_at: datetime | None = None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime; naive values are UTC."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _height(raw: JsonDict, key: str) -> float | None:
    return clean_number(raw.get(key), minimum=0.0, maximum=_MAX_HEIGHT_FT)


def _period(raw: JsonDict, key: str) -> float | None:
    return clean_number(raw.get(key), minimum=0.0, maximum=_MAX_PERIOD_S)


def _direction(raw: JsonDict, key: str) -> float | None:
    return clean_direction(raw.get(key))


def _temp(raw: JsonDict, key: str) -> float | None:
    return clean_number(raw.get(key), minimum=_TEMP_RANGE_F[0], maximum=_TEMP_RANGE_F[1])


def point_from_dict(raw: JsonDict, now: datetime | None = None) -> ForecastPoint | None:
    """Build a ForecastPoint; returns None when the timestamp is unusable.

    ``hours_out`` is taken from the record, else derived from *now*.
    """
    ts = parse_timestamp(raw.get("forecast_timestamp") or raw.get("timestamp"))
    if ts is None:
        logger.warning("Skipping forecast record with bad timestamp: %r", raw.get("forecast_timestamp"))
        return None

    hours_out = clean_number(raw.get("hours_out"))
    if hours_out is None:
        hours_out = (ts - now).total_seconds() / 3600.0 if now is not None else 0.0

    return ForecastPoint(
        forecast_timestamp=ts,
        hours_out=hours_out,
        wave_height_ft=_height(raw, "wave_height_ft"),
        wave_period_s=_period(raw, "wave_period_s"),
        wave_direction_deg=_direction(raw, "wave_direction_deg"),
        secondary_swell_height_ft=_height(raw, "secondary_swell_height_ft"),
        secondary_swell_period_s=_period(raw, "secondary_swell_period_s"),
        secondary_swell_direction_deg=_direction(raw, "secondary_swell_direction_deg"),
        tertiary_swell_height_ft=_height(raw, "tertiary_swell_height_ft"),
        tertiary_swell_period_s=_period(raw, "tertiary_swell_period_s"),
        tertiary_swell_direction_deg=_direction(raw, "tertiary_swell_direction_deg"),
        wind_wave_height_ft=_height(raw, "wind_wave_height_ft"),
        wind_wave_period_s=_period(raw, "wind_wave_period_s"),
        wind_wave_direction_deg=_direction(raw, "wind_wave_direction_deg"),
        wind_speed_kt=clean_number(raw.get("wind_speed_kt"), minimum=0.0, maximum=_MAX_WIND_KT),
        wind_direction_deg=_direction(raw, "wind_direction_deg"),
        wind_gusts_kt=clean_number(raw.get("wind_gusts_kt"), minimum=0.0, maximum=_MAX_WIND_KT),
        water_temp_f=_temp(raw, "water_temp_f"),
        air_temp_f=_temp(raw, "air_temp_f"),
        source=str(raw.get("source") or "open-meteo"),
    )


def tide_from_dict(raw: JsonDict) -> TidePrediction | None:
    ts = parse_timestamp(raw.get("time"))
    height = clean_number(raw.get("height_ft"), minimum=_TIDE_RANGE_FT[0], maximum=_TIDE_RANGE_FT[1])
    kind = _TIDE_TYPES.get(str(raw.get("type", "")).strip().lower())
    if ts is None or height is None or kind is None:
        logger.warning("Skipping malformed tide prediction: %r", raw)
        return None
    return TidePrediction(time=ts, height_ft=height, type=kind)


def verification_from_dict(raw: JsonDict) -> VerificationSample | None:
    ts = parse_timestamp(raw.get("timestamp") or raw.get("forecast_timestamp"))
    if ts is None:
        logger.warning("Skipping verification record with bad timestamp: %r", raw.get("timestamp"))
        return None
    return VerificationSample(
        timestamp=ts,
        wave_height_ft=_height(raw, "wave_height_ft"),
        swell_height_ft=_height(raw, "swell_height_ft"),
        source=str(raw.get("source") or "stormglass"),
    )


def _optional_int(value: Any) -> int | None:
    v = clean_number(value, minimum=0.0)
    return int(v) if v is not None else None


_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "on", "1"})


def _flag(value: Any) -> bool:
    """Loose boolean: JSON bools, 0/1 and "true"/"false" style strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def alert_from_dict(raw: JsonDict) -> SwellAlert:
    """Build a SwellAlert. Raises ValueError when ids are missing."""
    alert_id = _optional_int(raw.get("alert_id", raw.get("id")))
    user_id = _optional_int(raw.get("user_id"))
    if alert_id is None or user_id is None:
        raise ValueError(f"alert record needs alert_id and user_id: {raw!r}")
    return SwellAlert(
        alert_id=alert_id,
        user_id=user_id,
        spot_key=raw.get("spot_key") or None,
        min_wave_height_ft=_height(raw, "min_wave_height_ft"),
        min_quality_score=_optional_int(raw.get("min_quality_score")),
        min_period_s=_period(raw, "min_period_s"),
        ideal_wind_only=_flag(raw.get("ideal_wind_only")),
        hours_advance_notice=_optional_int(raw.get("hours_advance_notice")),
        days_advance_notice=_optional_int(raw.get("days_advance_notice")),
    )


def load_points(records: list[JsonDict], now: datetime | None = None) -> list[ForecastPoint]:
    """Parse, drop unusable records, sort ascending, keep the last record per timestamp."""
    by_time: dict[datetime, ForecastPoint] = {}
    for raw in records:
        point = point_from_dict(raw, now)
        if point is not None:
            by_time[point.forecast_timestamp] = point
    return [by_time[ts] for ts in sorted(by_time)]


def load_tides(records: list[JsonDict]) -> list[TidePrediction]:
    tides = [t for t in (tide_from_dict(r) for r in records) if t is not None]
    return sorted(tides, key=lambda t: t.time)


def load_verification(records: list[JsonDict]) -> list[VerificationSample]:
    samples = [v for v in (verification_from_dict(r) for r in records) if v is not None]
    return sorted(samples, key=lambda v: v.timestamp)


def load_spot_input(data: JsonDict, now: datetime | None = None) -> SpotInput:
    """Parse one spot's input document.

    Expected shape::

        {"spot": "long-beach", "avg_crowd_level": 2.5,
         "points": [...], "tides": [...], "verification": [...],
         "observation": {"height_ft": 3.1, "observed_at": "..."}}
    """
    spot = data.get("spot")
    if not spot:
        raise ValueError("input document has no 'spot'")
    observation = data.get("observation")
    if not isinstance(observation, dict):
        observation = {}
    return SpotInput(
        spot=str(spot),
        points=load_points(list(data.get("points") or []), now),
        tides=load_tides(list(data.get("tides") or [])),
        verification=load_verification(list(data.get("verification") or [])),
        avg_crowd_level=clean_number(data.get("avg_crowd_level"), minimum=1.0, maximum=5.0),
        observed_height_ft=_height(observation, "height_ft"),
        observed_at=parse_timestamp(observation.get("observed_at")),
    )
