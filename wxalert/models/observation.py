"""Provider observation models: coordinates, current readings, forecast steps."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import TypeAlias


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError(
                f"Coordinate must be finite, got ({self.latitude}, {self.longitude})"
            )
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.longitude}")


@dataclass(frozen=True)
class CurrentObservation:
    temperature: float
    feels_like: float | None  # None when the provider omits it
    wind_speed: float
    fetched_at: datetime


@dataclass(frozen=True)
class ForecastSample:
    offset: int  # 0 = nearest future step
    precipitation_mm: float
    wind_speed: float
    temperature_max: float
    valid_at: datetime | None = None


# Chronological order; never reordered.
ForecastSeries: TypeAlias = tuple[ForecastSample, ...]
