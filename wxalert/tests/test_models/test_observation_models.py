"""Tests for observation and alert models."""

import dataclasses
import math

import pytest

from conftest import FIXED_TIME, make_current
from wxalert.models.alert import AlertCandidate, AlertSet, EventKind, Severity
from wxalert.models.observation import Coordinate


class TestCoordinate:
    def test_valid(self):
        c = Coordinate(6.9271, 79.8612)
        assert c.latitude == 6.9271
        assert c.longitude == 79.8612

    def test_bounds_inclusive(self):
        Coordinate(-90.0, -180.0)
        Coordinate(90.0, 180.0)

    @pytest.mark.parametrize(
        "lat,lon",
        [(90.1, 0.0), (-90.1, 0.0), (0.0, 180.1), (0.0, -180.1)],
    )
    def test_out_of_range(self, lat, lon):
        with pytest.raises(ValueError):
            Coordinate(lat, lon)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite(self, bad):
        with pytest.raises(ValueError):
            Coordinate(bad, 0.0)
        with pytest.raises(ValueError):
            Coordinate(0.0, bad)

    def test_immutable(self):
        c = Coordinate(1.0, 2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.latitude = 3.0  # type: ignore[misc]


class TestAlertModels:
    def _alert(self, kind: EventKind) -> AlertCandidate:
        return AlertCandidate(
            event_kind=kind,
            window_metric=12.0,
            severity=Severity.WARNING,
            description="x",
            observed_at=FIXED_TIME,
            fingerprint=f"fp-{kind.value}",
        )

    def test_titles(self):
        assert self._alert(EventKind.HEAVY_RAIN).title == "Heavy Rain Risk"
        assert self._alert(EventKind.STRONG_WIND).title == "Strong Wind Risk"
        assert self._alert(EventKind.HIGH_HEAT).title == "High Heat Risk"

    def test_severity_values(self):
        assert Severity.ADVISORY == "advisory"
        assert Severity.WARNING == "warning"

    def test_alert_set_fingerprints_in_order(self):
        alerts = (self._alert(EventKind.HEAVY_RAIN), self._alert(EventKind.HIGH_HEAT))
        s = AlertSet(
            coordinate=Coordinate(0.0, 0.0),
            alerts=alerts,
            current=make_current(),
            forecast=(),
        )
        assert s.fingerprints == ["fp-HeavyRain", "fp-HighHeat"]
