"""Surf spot profile registry.

Static per-location tuning constants: the swell direction window a break
works on, its bathymetry factor, where it sits, which tide station serves it
and which way its offshore wind blows. Profiles are looked up by key
("lido") or by display name ("Lido Beach").
"""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from surfcast.common.types import LatLon


@dataclass(frozen=True)
class SpotProfile:
    """Per-location constants used by the scorer and the window detector.

    Attributes:
        key: stable lookup key, e.g. "lido"
        name: display name, e.g. "Lido Beach"
        ideal_swell_dir_min: lower bound of the ideal swell direction window (deg)
        ideal_swell_dir_max: upper bound of the ideal swell direction window (deg)
        bathymetry_factor: 1-10, how much the seafloor amplifies swell
        lat_lon: (lat, lon) of the break, used for daylight
        timezone: IANA home timezone, used for local-hour alignment
        tide_station_id: NOAA CO-OPS station serving the break
        offshore_wind_deg: bearing an offshore wind blows *from*
        coming_soon: excluded from all-spot alert scans
    """

    key: str
    name: str
    ideal_swell_dir_min: float
    ideal_swell_dir_max: float
    bathymetry_factor: float
    lat_lon: LatLon = (40.588, -73.658)
    timezone: str = "America/New_York"
    tide_station_id: str | None = None
    offshore_wind_deg: float = 0.0
    coming_soon: bool = False

    def __post_init__(self) -> None:
        if self.ideal_swell_dir_min > self.ideal_swell_dir_max:
            raise ValueError(
                f"{self.key}: ideal swell window min {self.ideal_swell_dir_min} "
                f"> max {self.ideal_swell_dir_max}"
            )
        for bound in (self.ideal_swell_dir_min, self.ideal_swell_dir_max):
            if not 0.0 <= bound <= 360.0:
                raise ValueError(f"{self.key}: swell window bound {bound} outside 0-360")
        if not 1.0 <= self.bathymetry_factor <= 10.0:
            raise ValueError(
                f"{self.key}: bathymetry_factor must be in [1, 10], got {self.bathymetry_factor}"
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"{self.key}: unknown timezone {self.timezone!r}") from exc

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def bathymetry_multiplier(self) -> float:
        """Score multiplier in [0.6, 1.5] derived from the bathymetry factor."""
        return 0.5 + self.bathymetry_factor / 10.0


# Long Island breaks. Coordinates and tide stations from the spot seed data.
SPOT_PROFILES: dict[str, SpotProfile] = {
    "lido": SpotProfile(
        key="lido", name="Lido Beach",
        ideal_swell_dir_min=130, ideal_swell_dir_max=200, bathymetry_factor=5,
        lat_lon=(40.5892, -73.6256), tide_station_id="8516945",
    ),
    "long-beach": SpotProfile(
        key="long-beach", name="Long Beach",
        ideal_swell_dir_min=120, ideal_swell_dir_max=200, bathymetry_factor=6,
        lat_lon=(40.5884, -73.6579), tide_station_id="8516945",
    ),
    "rockaway": SpotProfile(
        key="rockaway", name="Rockaway Beach",
        ideal_swell_dir_min=130, ideal_swell_dir_max=210, bathymetry_factor=5,
        lat_lon=(40.5834, -73.8168), tide_station_id="8516945",
    ),
    "gilgo": SpotProfile(
        key="gilgo", name="Gilgo Beach",
        ideal_swell_dir_min=140, ideal_swell_dir_max=200, bathymetry_factor=5,
        lat_lon=(40.6226, -73.3926), tide_station_id="8516945",
        coming_soon=True,
    ),
    "ditch-plains": SpotProfile(
        key="ditch-plains", name="Ditch Plains",
        ideal_swell_dir_min=90, ideal_swell_dir_max=180, bathymetry_factor=8,
        lat_lon=(41.0276, -71.9276), tide_station_id="8510560",
    ),
}

# Lowercased display name -> key
_NAME_TO_KEY: dict[str, str] = {p.name.lower(): k for k, p in SPOT_PROFILES.items()}


def get_spot_profile(identifier: str) -> SpotProfile | None:
    """Look up a profile by key, falling back to display name.

    Returns None for unknown spots.
    """
    profile = SPOT_PROFILES.get(identifier)
    if profile is not None:
        return profile
    key = get_spot_key(identifier)
    return SPOT_PROFILES.get(key) if key else None


def get_spot_key(name: str) -> str | None:
    """Map a display name (case-insensitive) or key to the profile key."""
    if name in SPOT_PROFILES:
        return name
    return _NAME_TO_KEY.get(name.strip().lower())


def all_spot_profiles() -> list[SpotProfile]:
    return list(SPOT_PROFILES.values())


def active_spot_profiles() -> list[SpotProfile]:
    """Profiles that take part in all-spot alert scans."""
    return [p for p in SPOT_PROFILES.values() if not p.coming_soon]
