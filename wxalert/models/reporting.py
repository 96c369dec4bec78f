"""Scan reporting models."""

from dataclasses import dataclass, field

from wxalert.models.alert import AlertCandidate


@dataclass(frozen=True)
class LocationResult:
    location_slug: str
    location_name: str
    derived: int
    new_alerts: list[AlertCandidate]


@dataclass
class ScanSummary:
    run_id: str
    locations_scanned: int = 0
    locations_failed: int = 0
    alerts_derived: int = 0
    alerts_new: int = 0
    results: list[LocationResult] = field(default_factory=list)
    duration_seconds: float = 0.0
    errors: list[str] = field(default_factory=list)
    forced: bool = False
