"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Max locations processed concurrently by the pipeline
    max_concurrency: int = 10

    # Wind below this speed (m/s) counts as light regardless of direction
    light_wind_threshold_ms: float = 3.0

    # Within this many minutes of a tide event the phase reads high/low
    tide_event_window_minutes: float = 30.0

    # Model agreement bands (ft): |diff| < high -> HIGH, < med -> MED, else LOW
    confidence_high_ft: float = 0.5
    confidence_med_ft: float = 1.5

    # Disagreement flag between primary and verification heights
    discrepancy_threshold_ft: float = 2.0
    discrepancy_window_hours: int = 48
    discrepancy_day_window_days: int = 7

    # Ground truth older than this is not used for model selection
    verification_stale_hours: float = 2.0

    # Model chosen when candidate errors tie
    default_model: str = "open-meteo"

    # Alert scanning
    alert_buffer_hours: float = 1.0
    default_hours_advance_notice: int = 24
    max_window_gap_hours: float = 1.0
    min_window_points: int = 2

    # Sun depression for first/last light (6 = civil twilight)
    daylight_depression_deg: float = 6.0

    # Accept side-offshore wind for "ideal wind only" alerts
    side_offshore_is_ideal: bool = True

    @field_validator("max_concurrency", "min_window_points")
    @classmethod
    def _positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}")
        return v

    @field_validator("daylight_depression_deg")
    @classmethod
    def _depression_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 18.0:
            raise ValueError(f"daylight_depression_deg must be in [0, 18], got {v}")
        return v

    @field_validator("discrepancy_threshold_ft", "light_wind_threshold_ms")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"must be >= 0, got {v}")
        return v

    @model_validator(mode="after")
    def _confidence_bands_ordered(self) -> Settings:
        if not 0.0 < self.confidence_high_ft < self.confidence_med_ft:
            raise ValueError(
                "confidence bands must satisfy 0 < confidence_high_ft < confidence_med_ft, "
                f"got {self.confidence_high_ft} / {self.confidence_med_ft}"
            )
        return self


def get_settings() -> Settings:
    """Load settings from the environment and .env."""
    return Settings()
