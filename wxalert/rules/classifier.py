"""Threshold classifier: runs the rain, wind and heat rules in fixed order."""

from wxalert.config.schema import ThresholdConfig
from wxalert.models.alert import AlertCandidate
from wxalert.models.observation import CurrentObservation, ForecastSeries
from wxalert.rules.checks import heavy_rain, high_heat, strong_wind
from wxalert.signal.windows import (
    extended_window,
    max_temperature,
    max_wind_speed,
    near_window,
    sum_precipitation,
)


class ThresholdClassifier:
    def __init__(self, thresholds: ThresholdConfig | None = None):
        self.thresholds = thresholds or ThresholdConfig()

    def classify(
        self, current: CurrentObservation, series: ForecastSeries
    ) -> list[AlertCandidate]:
        """Evaluate rain -> wind -> heat. Each rule yields at most one candidate.

        Same inputs always give the same candidates in the same order,
        fingerprints included.
        """
        t = self.thresholds
        near = near_window(series, t.near_window_steps)
        extended = extended_window(series, t.extended_window_steps)
        observed_at = current.fetched_at

        results = [
            # 1. Heavy rain
            heavy_rain.check(
                sum_precipitation(near),
                t.rain_threshold_mm,
                t.near_window_hours,
                observed_at,
                t.fingerprint_rounding_unit,
            ),
            # 2. Strong wind
            strong_wind.check(
                max_wind_speed(near),
                t.wind_threshold_mps,
                t.near_window_hours,
                observed_at,
                t.fingerprint_rounding_unit,
            ),
            # 3. High heat
            high_heat.check(
                current.feels_like,
                max_temperature(extended),
                t.heat_threshold_c,
                t.extended_window_hours,
                observed_at,
                t.fingerprint_rounding_unit,
            ),
        ]
        return [r for r in results if r is not None]


def classify(
    current: CurrentObservation,
    series: ForecastSeries,
    thresholds: ThresholdConfig | None = None,
) -> list[AlertCandidate]:
    return ThresholdClassifier(thresholds).classify(current, series)
