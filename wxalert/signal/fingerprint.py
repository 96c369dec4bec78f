"""Alert fingerprints and duplicate detection.

A fingerprint identifies an alert's semantic content: same kind and same
rounded metric = same fingerprint = duplicate. The rounding unit controls
how much poll-to-poll drift is absorbed.
"""

import hashlib
import math
from collections.abc import Iterable, Set

from wxalert.models.alert import AlertCandidate, EventKind

DEFAULT_ROUNDING_UNIT = 1.0


def round_metric(value: float, unit: float = DEFAULT_ROUNDING_UNIT) -> float:
    """Round half-up to the nearest multiple of `unit`."""
    if unit <= 0:
        raise ValueError(f"Rounding unit must be positive, got {unit}")
    # 0.35 / 0.1 is 3.4999999999999996; snap the quotient before flooring
    steps = math.floor(round(value / unit, 9) + 0.5)
    # round() on the product strips float noise like 12.300000000000001
    return round(steps * unit, 6) + 0.0


def _canonical(value: float) -> str:
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def compute_fingerprint(
    kind: EventKind, metric: float, unit: float = DEFAULT_ROUNDING_UNIT
) -> str:
    """Generate a deterministic fingerprint from (kind, rounded metric)."""
    raw = f"{kind.value}|{_canonical(round_metric(metric, unit))}"
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def fingerprint(
    candidate: AlertCandidate, unit: float = DEFAULT_ROUNDING_UNIT
) -> str:
    return compute_fingerprint(candidate.event_kind, candidate.window_metric, unit)


def is_duplicate(candidate: AlertCandidate, known_fingerprints: Set[str]) -> bool:
    """Check if the candidate's fingerprint is already known to be active."""
    return candidate.fingerprint in known_fingerprints


def filter_new(
    candidates: Iterable[AlertCandidate], known_fingerprints: Set[str]
) -> list[AlertCandidate]:
    """Candidates not yet known, in their original order. `known` is not mutated."""
    return [c for c in candidates if not is_duplicate(c, known_fingerprints)]
