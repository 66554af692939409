"""Daylight surfing hours for a spot.

First light and last light are civil dawn and dusk (sun 6 degrees below the
horizon) by default, computed with astral for the spot's local calendar day.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from astral import Observer
from astral.sun import sun

from surfcast.spots.profiles import SpotProfile

logger = logging.getLogger(__name__)

CIVIL_DEPRESSION = 6.0


class DaylightService:
    """Sun times per (spot location, local date), cached per instance."""

    def __init__(self, depression_angle: float = CIVIL_DEPRESSION) -> None:
        """
        Args:
            depression_angle: sun depression defining first/last light.
                0 = geometric sunrise/sunset, 6 = civil twilight,
                12 = nautical, 18 = astronomical
        """
        self.depression_angle = depression_angle
        self._cache: dict[tuple[float, float, str, date], tuple[datetime | None, datetime | None]] = {}

    def light_bounds(
        self,
        profile: SpotProfile,
        local_day: date,
    ) -> tuple[datetime | None, datetime | None]:
        """First and last light on *local_day* in the spot's timezone.

        Returns (None, None) when the sun never reaches the depression angle
        (polar day or night).
        """
        lat, lon = profile.lat_lon
        cache_key = (round(lat, 3), round(lon, 3), profile.timezone, local_day)
        if cache_key in self._cache:
            return self._cache[cache_key]

        tz = ZoneInfo(profile.timezone)
        observer = Observer(latitude=lat, longitude=lon)
        try:
            times = sun(
                observer,
                date=local_day,
                dawn_dusk_depression=self.depression_angle,
                tzinfo=tz,
            )
            if self.depression_angle > 0:
                result = (times["dawn"], times["dusk"])
            else:
                result = (times["sunrise"], times["sunset"])
        except ValueError as exc:
            logger.info("No first/last light at %s on %s: %s", profile.key, local_day, exc)
            result = (None, None)

        self._cache[cache_key] = result
        return result

    def local_day(self, profile: SpotProfile, timestamp: datetime) -> date:
        return timestamp.astimezone(ZoneInfo(profile.timezone)).date()

    def first_light(self, profile: SpotProfile, timestamp: datetime) -> datetime | None:
        return self.light_bounds(profile, self.local_day(profile, timestamp))[0]

    def last_light(self, profile: SpotProfile, timestamp: datetime) -> datetime | None:
        """Last light of the local calendar day containing *timestamp*."""
        return self.light_bounds(profile, self.local_day(profile, timestamp))[1]

    def is_daylight(self, profile: SpotProfile, timestamp: datetime) -> bool:
        """True when *timestamp* falls between first and last light, inclusive."""
        first, last = self.light_bounds(profile, self.local_day(profile, timestamp))
        if first is None or last is None:
            return False
        return first <= timestamp <= last
