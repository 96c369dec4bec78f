"""High heat: the hotter of current feels-like and the extended-window maximum."""

import math
from datetime import datetime

from wxalert.models.alert import AlertCandidate, EventKind, Severity
from wxalert.signal.fingerprint import compute_fingerprint, round_metric


def check(
    feels_like: float | None,
    extended_max_c: float,
    threshold_c: float,
    window_hours: float,
    observed_at: datetime,
    rounding_unit: float,
) -> AlertCandidate | None:
    now_c = float("-inf")
    if feels_like is not None and math.isfinite(feels_like):
        now_c = feels_like
    peak = max(now_c, extended_max_c)
    # Both inputs unavailable: no data, never a trigger
    if not math.isfinite(peak) or peak < threshold_c:
        return None
    return AlertCandidate(
        event_kind=EventKind.HIGH_HEAT,
        window_metric=peak,
        severity=Severity.ADVISORY,
        description=(
            f"Feels-like/Max temperature may reach ~{round_metric(peak):.0f}°C "
            f"within {window_hours:g} hours."
        ),
        observed_at=observed_at,
        fingerprint=compute_fingerprint(EventKind.HIGH_HEAT, peak, rounding_unit),
    )
