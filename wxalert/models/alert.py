"""Alert candidate and alert set models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from wxalert.models.observation import Coordinate, CurrentObservation, ForecastSeries


class EventKind(StrEnum):
    HEAVY_RAIN = "HeavyRain"
    STRONG_WIND = "StrongWind"
    HIGH_HEAT = "HighHeat"


class Severity(StrEnum):
    ADVISORY = "advisory"
    WARNING = "warning"


EVENT_TITLES: dict[EventKind, str] = {
    EventKind.HEAVY_RAIN: "Heavy Rain Risk",
    EventKind.STRONG_WIND: "Strong Wind Risk",
    EventKind.HIGH_HEAT: "High Heat Risk",
}


@dataclass(frozen=True)
class AlertCandidate:
    event_kind: EventKind
    window_metric: float
    severity: Severity
    description: str
    observed_at: datetime
    fingerprint: str

    @property
    def title(self) -> str:
        return EVENT_TITLES[self.event_kind]


@dataclass(frozen=True)
class AlertSet:
    """Result of one derivation, with the raw inputs kept for audit."""

    coordinate: Coordinate
    alerts: tuple[AlertCandidate, ...]
    current: CurrentObservation
    forecast: ForecastSeries

    @property
    def fingerprints(self) -> list[str]:
        return [a.fingerprint for a in self.alerts]
