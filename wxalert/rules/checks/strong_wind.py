"""Strong wind: peak wind speed over the near window."""

from datetime import datetime

from wxalert.models.alert import AlertCandidate, EventKind, Severity
from wxalert.signal.fingerprint import compute_fingerprint, round_metric


def check(
    peak_mps: float,
    threshold_mps: float,
    window_hours: float,
    observed_at: datetime,
    rounding_unit: float,
) -> AlertCandidate | None:
    if peak_mps < threshold_mps:
        return None
    return AlertCandidate(
        event_kind=EventKind.STRONG_WIND,
        window_metric=peak_mps,
        severity=Severity.WARNING,
        description=(
            f"Wind up to ~{round_metric(peak_mps):.0f} m/s expected "
            f"within {window_hours:g} hours."
        ),
        observed_at=observed_at,
        fingerprint=compute_fingerprint(EventKind.STRONG_WIND, peak_mps, rounding_unit),
    )
