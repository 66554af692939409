"""Cross-model confidence and agreement.

Compares the primary forecast timeline against an independent verification
series. Both sides are bucketed by the calendar hour in the spot's home
timezone, so sources stored in different raw timezones line up on the same
physical hour. Nothing here changes a quality score.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from surfcast.common.types import clean_number
from surfcast.forecast.models import ForecastTimelineResult

logger = logging.getLogger(__name__)

HIGH_AGREEMENT_FT = 0.5
MED_AGREEMENT_FT = 1.5
DISCREPANCY_THRESHOLD_FT = 2.0
STALE_GROUND_TRUTH = timedelta(hours=2)

# Share of scored points needed for an overall verdict
_HIGH_SHARE = 0.6
_LOW_SHARE = 0.4


class ConfidenceLevel(Enum):
    HIGH = "HIGH"
    MED = "MED"
    LOW = "LOW"


def _zone(tz: ZoneInfo | str) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


@dataclass(frozen=True, order=True)
class LocalHourKey:
    """A calendar hour in a specific timezone."""

    year: int
    month: int
    day: int
    hour: int

    @classmethod
    def from_datetime(cls, ts: datetime, tz: ZoneInfo | str) -> LocalHourKey:
        local = ts.astimezone(_zone(tz))
        return cls(local.year, local.month, local.day, local.hour)

    @property
    def day_key(self) -> date:
        return date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}T{self.hour:02d}"


@dataclass(frozen=True)
class VerificationSample:
    """One hour of the verification model.

    ``swell_height_ft`` is what per-point confidence compares against (the
    primary timeline shows swell); ``wave_height_ft`` is total sea state and
    is what discrepancy flagging uses. Each falls back to the other.
    """

    timestamp: datetime
    wave_height_ft: float | None = None
    swell_height_ft: float | None = None
    source: str = "stormglass"

    @property
    def swell_or_wave_ft(self) -> float | None:
        swell = clean_number(self.swell_height_ft, minimum=0.0)
        return swell if swell is not None else clean_number(self.wave_height_ft, minimum=0.0)

    @property
    def wave_or_swell_ft(self) -> float | None:
        wave = clean_number(self.wave_height_ft, minimum=0.0)
        return wave if wave is not None else clean_number(self.swell_height_ft, minimum=0.0)


@dataclass(frozen=True)
class AnnotatedPoint:
    result: ForecastTimelineResult
    confidence: ConfidenceLevel | None
    verification_height_ft: float | None = None


@dataclass(frozen=True)
class ConfidenceSummary:
    overall: ConfidenceLevel | None
    high_count: int = 0
    med_count: int = 0
    low_count: int = 0

    @property
    def total_with_data(self) -> int:
        return self.high_count + self.med_count + self.low_count


@dataclass(frozen=True)
class Discrepancy:
    has_large_discrepancy: bool = False
    max_diff_ft: float | None = None


@dataclass(frozen=True)
class ModelSelection:
    """Which forecast model tracks ground truth best right now."""

    model_id: str
    errors_ft: dict[str, float] = field(default_factory=dict)
    reason: str = ""


def model_confidence(
    primary_ft: float | None,
    verification_ft: float | None,
    high_ft: float = HIGH_AGREEMENT_FT,
    med_ft: float = MED_AGREEMENT_FT,
) -> ConfidenceLevel | None:
    """Agreement between two height estimates; None if either is missing."""
    a = clean_number(primary_ft)
    b = clean_number(verification_ft)
    if a is None or b is None:
        return None
    diff = abs(a - b)
    if diff < high_ft:
        return ConfidenceLevel.HIGH
    if diff < med_ft:
        return ConfidenceLevel.MED
    return ConfidenceLevel.LOW


def index_by_local_hour(
    verification: Iterable[VerificationSample],
    tz: ZoneInfo | str,
) -> dict[LocalHourKey, VerificationSample]:
    """Later samples for the same local hour replace earlier ones."""
    zone = _zone(tz)
    return {LocalHourKey.from_datetime(v.timestamp, zone): v for v in verification}


def annotate_confidence(
    timeline: list[ForecastTimelineResult],
    verification: list[VerificationSample],
    tz: ZoneInfo | str,
    *,
    high_ft: float = HIGH_AGREEMENT_FT,
    med_ft: float = MED_AGREEMENT_FT,
) -> list[AnnotatedPoint]:
    """Attach a model-agreement level to every timeline point.

    Args:
        timeline: scored points for one spot
        verification: independent model series for the same spot
        tz: the spot's home timezone
        high_ft: |diff| below this is HIGH
        med_ft: |diff| below this is MED, otherwise LOW

    Returns:
        One AnnotatedPoint per timeline point, same order. Points without a
        verification sample for their local hour get ``confidence=None``.
    """
    zone = _zone(tz)
    index = index_by_local_hour(verification, zone)
    annotated: list[AnnotatedPoint] = []
    for result in timeline:
        sample = index.get(LocalHourKey.from_datetime(result.forecast_timestamp, zone))
        other = sample.swell_or_wave_ft if sample is not None else None
        annotated.append(AnnotatedPoint(
            result=result,
            confidence=model_confidence(result.wave_height_ft, other, high_ft, med_ft),
            verification_height_ft=other,
        ))
    return annotated


def aggregate_confidence(levels: Iterable[ConfidenceLevel | None]) -> ConfidenceSummary:
    """Overall verdict: HIGH at >=60% HIGH, LOW at >=40% LOW, else MED."""
    scored = [level for level in levels if level is not None]
    if not scored:
        return ConfidenceSummary(overall=None)

    high = sum(1 for level in scored if level is ConfidenceLevel.HIGH)
    low = sum(1 for level in scored if level is ConfidenceLevel.LOW)
    med = len(scored) - high - low

    if high / len(scored) >= _HIGH_SHARE:
        overall = ConfidenceLevel.HIGH
    elif low / len(scored) >= _LOW_SHARE:
        overall = ConfidenceLevel.LOW
    else:
        overall = ConfidenceLevel.MED
    return ConfidenceSummary(overall=overall, high_count=high, med_count=med, low_count=low)


def _diffs_in_window(
    timeline: list[ForecastTimelineResult],
    verification: list[VerificationSample],
    zone: ZoneInfo,
    start: datetime,
    end: datetime,
) -> Iterable[tuple[LocalHourKey, float | None]]:
    index = index_by_local_hour(verification, zone)
    for result in timeline:
        ts = result.forecast_timestamp
        if ts < start or ts > end:
            continue
        key = LocalHourKey.from_datetime(ts, zone)
        sample = index.get(key)
        primary = clean_number(result.wave_height_ft)
        other = sample.wave_or_swell_ft if sample is not None else None
        if primary is None or other is None:
            yield key, None
        else:
            yield key, abs(primary - other)


def find_discrepancy(
    timeline: list[ForecastTimelineResult],
    verification: list[VerificationSample],
    tz: ZoneInfo | str,
    now: datetime,
    window_hours: int = 48,
    threshold_ft: float = DISCREPANCY_THRESHOLD_FT,
) -> Discrepancy:
    """Largest primary/verification height gap over the next *window_hours*."""
    zone = _zone(tz)
    diffs = [
        d for _, d in _diffs_in_window(
            timeline, verification, zone, now, now + timedelta(hours=window_hours),
        )
        if d is not None
    ]
    if not diffs:
        return Discrepancy()
    max_diff = max(diffs)
    return Discrepancy(has_large_discrepancy=max_diff >= threshold_ft, max_diff_ft=round(max_diff, 2))


def find_discrepancy_by_day(
    timeline: list[ForecastTimelineResult],
    verification: list[VerificationSample],
    tz: ZoneInfo | str,
    now: datetime,
    window_days: int = 7,
    threshold_ft: float = DISCREPANCY_THRESHOLD_FT,
) -> dict[date, Discrepancy]:
    """Same as find_discrepancy, bucketed by local calendar day.

    Every day that has a timeline point in the window gets an entry, even
    when no verification data exists for it.
    """
    zone = _zone(tz)
    max_by_day: dict[date, float | None] = {}
    for key, diff in _diffs_in_window(
        timeline, verification, zone, now, now + timedelta(days=window_days),
    ):
        current = max_by_day.setdefault(key.day_key, None)
        if diff is not None and (current is None or diff > current):
            max_by_day[key.day_key] = diff

    return {
        day: Discrepancy(
            has_large_discrepancy=diff is not None and diff >= threshold_ft,
            max_diff_ft=round(diff, 2) if diff is not None else None,
        )
        for day, diff in max_by_day.items()
    }


def select_model(
    ground_truth_ft: float | None,
    observed_at: datetime | None,
    estimates: Mapping[str, float | None],
    now: datetime,
    default_model: str = "open-meteo",
    max_age: timedelta = STALE_GROUND_TRUTH,
) -> ModelSelection | None:
    """Pick the model whose current-hour estimate is closest to ground truth.

    Args:
        ground_truth_ft: observed height, e.g. from a nearby buoy
        observed_at: when the observation was taken
        estimates: model id -> that model's height for the current hour
        now: reference time for staleness
        default_model: wins ties
        max_age: observations older than this are not trusted

    Returns:
        ModelSelection, or None when ground truth is missing or stale or no
        model has an estimate
    """
    truth = clean_number(ground_truth_ft, minimum=0.0)
    if truth is None or observed_at is None:
        return None
    age = now - observed_at
    if age > max_age:
        logger.info("Ground truth is %.1fh old; no model recommendation", age.total_seconds() / 3600)
        return None

    errors: dict[str, float] = {}
    for model, raw in estimates.items():
        height = clean_number(raw, minimum=0.0)
        if height is not None:
            errors[model] = abs(height - truth)
    if not errors:
        return None

    best = min(errors.values())
    # Heights carry float noise, e.g. |1.7 - 2.0| != |2.3 - 2.0|
    tied = sorted(model for model, err in errors.items() if math.isclose(err, best, abs_tol=1e-9))
    chosen = default_model if default_model in tied else tied[0]
    rounded = {model: round(err, 2) for model, err in errors.items()}

    if len(tied) > 1:
        reason = f"Models tie at {best:.1f}ft error against observed {truth:.1f}ft; using {chosen}"
    else:
        others = ", ".join(
            f"{model} off by {err:.1f}ft" for model, err in sorted(errors.items()) if model != chosen
        )
        reason = f"{chosen} is closest to observed {truth:.1f}ft (off by {best:.1f}ft)"
        if others:
            reason += f"; {others}"
    return ModelSelection(model_id=chosen, errors_ft=rounded, reason=reason)


def confidence_badge_text(level: ConfidenceLevel | None) -> str | None:
    """Badge label; MED and unknown get no badge."""
    if level is ConfidenceLevel.HIGH:
        return "High Confidence"
    if level is ConfidenceLevel.LOW:
        return "Forecast Uncertain"
    return None
