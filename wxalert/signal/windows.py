"""Forecast window slicing and per-window aggregates.

A window is a prefix of the series: index 0 is the nearest future step.
Windows truncate when the series is short and never pad.
"""

from collections.abc import Sequence

from wxalert.models.observation import ForecastSample

NEAR_WINDOW_STEPS = 2  # ~6h at 3h cadence
EXTENDED_WINDOW_STEPS = 8  # ~24h at 3h cadence


def near_window(
    series: Sequence[ForecastSample], steps: int = NEAR_WINDOW_STEPS
) -> tuple[ForecastSample, ...]:
    return tuple(series[:steps])


def extended_window(
    series: Sequence[ForecastSample], steps: int = EXTENDED_WINDOW_STEPS
) -> tuple[ForecastSample, ...]:
    return tuple(series[:steps])


def sum_precipitation(window: Sequence[ForecastSample]) -> float:
    return sum((s.precipitation_mm for s in window), 0.0)


def max_wind_speed(window: Sequence[ForecastSample]) -> float:
    return max((s.wind_speed for s in window), default=0.0)


def max_temperature(window: Sequence[ForecastSample]) -> float:
    """Peak temperature_max, or -inf for an empty window (no data)."""
    return max((s.temperature_max for s in window), default=float("-inf"))
