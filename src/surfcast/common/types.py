"""Shared type aliases and unit helpers."""

from __future__ import annotations

import math
from typing import TypeAlias

# Latitude/longitude pair
LatLon: TypeAlias = tuple[float, float]

# JSON-like dict
JsonDict: TypeAlias = dict[str, object]

_MS_PER_KNOT = 0.514444
_MPH_PER_KNOT = 1.15078


def knots_to_ms(kt: float) -> float:
    """Convert knots to metres per second."""
    return kt * _MS_PER_KNOT


def knots_to_mph(kt: float) -> float:
    """Convert knots to miles per hour."""
    return kt * _MPH_PER_KNOT


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clean_number(value: float | None, *, minimum: float | None = None,
                 maximum: float | None = None) -> float | None:
    """Return *value* as a float, or None if missing, NaN or out of range."""
    if value is None:
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    if minimum is not None and v < minimum:
        return None
    if maximum is not None and v > maximum:
        return None
    return v


def clean_direction(value: float | None) -> float | None:
    """Return a compass bearing in [0, 360], or None if missing/invalid."""
    return clean_number(value, minimum=0.0, maximum=360.0)


def angular_distance(a: float, b: float) -> float:
    """Smallest angle between two bearings, in [0, 180]."""
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)
