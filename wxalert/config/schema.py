"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from wxalert.models.observation import Coordinate

OPENWEATHER_BASE_URL = "https://api.openweathermap.org"


class ThresholdConfig(BaseModel):
    """Calibrated alert policy. Tune per deployment, not in code."""

    model_config = {"extra": "forbid"}

    rain_threshold_mm: float = Field(default=10.0, ge=0.0)
    wind_threshold_mps: float = Field(default=12.0, ge=0.0)
    heat_threshold_c: float = 36.0
    near_window_steps: int = Field(default=2, ge=1)
    extended_window_steps: int = Field(default=8, ge=1)
    fingerprint_rounding_unit: float = Field(default=1.0, gt=0.0)
    sample_cadence_hours: float = Field(default=3.0, gt=0.0)

    @property
    def near_window_hours(self) -> float:
        return self.near_window_steps * self.sample_cadence_hours

    @property
    def extended_window_hours(self) -> float:
        return self.extended_window_steps * self.sample_cadence_hours


class ProviderConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = OPENWEATHER_BASE_URL
    api_key: str = ""
    api_key_env: str = "OPENWEATHER_KEY"
    units: str = "metric"
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    deadline_seconds: float = Field(default=20.0, gt=0.0)


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    slug: str
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    enabled: bool = True

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


class OpsConfig(BaseModel):
    model_config = {"extra": "forbid"}

    scan_interval_minutes: int = Field(default=60, ge=1)
    fingerprint_ttl_hours: float = Field(default=24.0, gt=0.0)
    max_concurrent_locations: int = Field(default=4, ge=1)


class AlertEngineConfig(BaseModel):
    model_config = {"extra": "forbid"}

    thresholds: ThresholdConfig = ThresholdConfig()
    provider: ProviderConfig = ProviderConfig()
    ops: OpsConfig = OpsConfig()
    locations: list[LocationConfig] = []
