"""Heavy rain: precipitation summed over the near window."""

from datetime import datetime

from wxalert.models.alert import AlertCandidate, EventKind, Severity
from wxalert.signal.fingerprint import compute_fingerprint, round_metric


def check(
    total_mm: float,
    threshold_mm: float,
    window_hours: float,
    observed_at: datetime,
    rounding_unit: float,
) -> AlertCandidate | None:
    if total_mm < threshold_mm:
        return None
    return AlertCandidate(
        event_kind=EventKind.HEAVY_RAIN,
        window_metric=total_mm,
        severity=Severity.WARNING,
        description=(
            f"Forecast indicates ~{round_metric(total_mm):.0f}mm rain "
            f"in the next {window_hours:g} hours."
        ),
        observed_at=observed_at,
        fingerprint=compute_fingerprint(EventKind.HEAVY_RAIN, total_mm, rounding_unit),
    )
