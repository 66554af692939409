"""Tests for tide interpolation and tide scoring."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from surfcast.forecast.models import TidePhase, TidePrediction, TideType
from surfcast.tides.interpolator import (
    NEUTRAL_TIDE_SCORE,
    interpolate,
    next_tide,
    tide_score,
    tide_score_for_height,
)

T0 = datetime(2025, 7, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def high_then_low():
    return [
        TidePrediction(T0, 5.0, TideType.HIGH),
        TidePrediction(T0 + timedelta(hours=6), 1.0, TideType.LOW),
    ]


class TestInterpolate:
    def test_midpoint_height_and_falling(self, high_then_low):
        info = interpolate(high_then_low, T0 + timedelta(hours=3))
        assert info.height_ft == 3.0
        assert info.phase is TidePhase.FALLING

    def test_near_low_reads_low(self, high_then_low):
        info = interpolate(high_then_low, T0 + timedelta(hours=6) - timedelta(minutes=10))
        assert info.phase is TidePhase.LOW
        assert info.height_ft == 1.1

    def test_just_after_high_reads_high(self, high_then_low):
        info = interpolate(high_then_low, T0 + timedelta(minutes=5))
        assert info.phase is TidePhase.HIGH

    def test_at_event_time(self, high_then_low):
        info = interpolate(high_then_low, T0)
        assert info.height_ft == 5.0
        assert info.phase is TidePhase.HIGH

    def test_rising_towards_high(self):
        predictions = [
            TidePrediction(T0, 0.5, TideType.LOW),
            TidePrediction(T0 + timedelta(hours=6), 4.5, TideType.HIGH),
        ]
        info = interpolate(predictions, T0 + timedelta(hours=2))
        assert info.phase is TidePhase.RISING
        assert info.height_ft == pytest.approx(1.8)

    def test_unsorted_predictions(self, high_then_low):
        info = interpolate(list(reversed(high_then_low)), T0 + timedelta(hours=3))
        assert info.height_ft == 3.0

    def test_outside_span_returns_none(self, high_then_low):
        assert interpolate(high_then_low, T0 - timedelta(hours=1)) is None
        assert interpolate(high_then_low, T0 + timedelta(hours=7)) is None

    def test_empty_predictions(self):
        assert interpolate([], T0) is None

    def test_custom_event_window(self, high_then_low):
        t = T0 + timedelta(minutes=50)
        assert interpolate(high_then_low, t).phase is TidePhase.FALLING
        assert interpolate(high_then_low, t, timedelta(hours=1)).phase is TidePhase.HIGH


class TestTideScore:
    @pytest.mark.parametrize("height, expected", [
        (3.0, 90),
        (2.0, 90),
        (4.0, 90),
        (4.8, 70),
        (1.0, 70),
        (6.0, 40),
        (0.2, 40),
        (None, NEUTRAL_TIDE_SCORE),
    ])
    def test_bands(self, height, expected):
        assert tide_score_for_height(height) == expected

    def test_needs_two_predictions(self, high_then_low):
        assert tide_score(high_then_low[:1], T0 + timedelta(hours=1)) == NEUTRAL_TIDE_SCORE

    def test_unbracketed_is_neutral(self, high_then_low):
        assert tide_score(high_then_low, T0 + timedelta(hours=9)) == NEUTRAL_TIDE_SCORE

    def test_interpolated_score(self, high_then_low):
        assert tide_score(high_then_low, T0 + timedelta(hours=3)) == 90


def test_next_tide(high_then_low):
    assert next_tide(high_then_low, T0).type is TideType.LOW
    assert next_tide(high_then_low, T0 + timedelta(hours=6)) is None
