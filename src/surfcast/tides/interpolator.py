"""Tide interpolation between discrete high/low events.

Providers only publish the times and heights of highs and lows. Height at an
arbitrary instant is a linear blend of the bracketing events; no
extrapolation happens outside the span the events cover.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from surfcast.forecast.models import TideInfo, TidePhase, TidePrediction, TideType

logger = logging.getLogger(__name__)

# Within this distance of an event the phase reads "high"/"low"
_EVENT_WINDOW = timedelta(minutes=30)

# Score for a tide we know nothing about
NEUTRAL_TIDE_SCORE = 50


def _bracket(
    predictions: list[TidePrediction],
    t: datetime,
) -> tuple[TidePrediction, TidePrediction] | None:
    """Return (latest event <= t, earliest event > t), or None if either is missing."""
    prev: TidePrediction | None = None
    nxt: TidePrediction | None = None
    for p in predictions:
        if p.time <= t:
            if prev is None or p.time > prev.time:
                prev = p
        elif nxt is None or p.time < nxt.time:
            nxt = p
    if prev is None or nxt is None:
        return None
    return prev, nxt


def _height_at(prev: TidePrediction, nxt: TidePrediction, t: datetime) -> float:
    total = (nxt.time - prev.time).total_seconds()
    elapsed = (t - prev.time).total_seconds()
    return prev.height_ft + (nxt.height_ft - prev.height_ft) * (elapsed / total)


def interpolate(
    predictions: list[TidePrediction],
    t: datetime,
    event_window: timedelta = _EVENT_WINDOW,
) -> TideInfo | None:
    """Interpolate tide height and phase at *t*.

    Args:
        predictions: high/low events, any order
        t: instant to evaluate (timezone-aware)
        event_window: distance from the closer event inside which the phase
            is reported as "high" or "low"

    Returns:
        TideInfo with height rounded to 0.1 ft, or None when *t* is not
        bracketed by the predictions.
    """
    bracket = _bracket(predictions, t)
    if bracket is None:
        logger.debug("No tide events bracket %s (%d predictions)", t.isoformat(), len(predictions))
        return None
    prev, nxt = bracket

    height = _height_at(prev, nxt, t)
    phase = TidePhase.RISING if nxt.type is TideType.HIGH else TidePhase.FALLING

    from_prev = t - prev.time
    to_next = nxt.time - t
    closer = prev if from_prev < to_next else nxt
    if min(from_prev, to_next) < event_window:
        phase = TidePhase.HIGH if closer.type is TideType.HIGH else TidePhase.LOW

    return TideInfo(height_ft=round(height, 1), phase=phase)


def tide_score_for_height(height_ft: float | None) -> int:
    """Coarse tide quality: mid-tide is best for beach breaks."""
    if height_ft is None:
        return NEUTRAL_TIDE_SCORE
    if 2.0 <= height_ft <= 4.0:
        return 90
    if 1.0 <= height_ft <= 5.0:
        return 70
    return 40


def tide_score(predictions: list[TidePrediction], t: datetime) -> int:
    """Tide score at *t* without building a full TideInfo.

    Neutral when fewer than two predictions exist or *t* is not bracketed.
    """
    if len(predictions) < 2:
        return NEUTRAL_TIDE_SCORE
    bracket = _bracket(predictions, t)
    if bracket is None:
        return NEUTRAL_TIDE_SCORE
    return tide_score_for_height(_height_at(*bracket, t))


def next_tide(predictions: list[TidePrediction], t: datetime) -> TidePrediction | None:
    """The first event strictly after *t*."""
    upcoming = [p for p in predictions if p.time > t]
    if not upcoming:
        return None
    return min(upcoming, key=lambda p: p.time)
