"""Shared test fixtures."""

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from wxalert.config.defaults import DEFAULT_LOCATIONS
from wxalert.config.schema import AlertEngineConfig, ProviderConfig
from wxalert.models.observation import CurrentObservation, ForecastSample
from wxalert.storage.database import connect, run_migrations

TEST_BASE_URL = "https://test-owm.example.com"
FIXED_TIME = datetime(2026, 10, 19, 6, 0, tzinfo=UTC)


def make_current(
    feels_like: float | None = 30.0, temperature: float = 29.0, wind_speed: float = 3.0
) -> CurrentObservation:
    return CurrentObservation(
        temperature=temperature,
        feels_like=feels_like,
        wind_speed=wind_speed,
        fetched_at=FIXED_TIME,
    )


def make_series(*steps: tuple[float, float, float]) -> tuple[ForecastSample, ...]:
    """Build a series from (precipitation_mm, wind_speed, temperature_max) tuples."""
    return tuple(
        ForecastSample(
            offset=i, precipitation_mm=rain, wind_speed=wind, temperature_max=tmax
        )
        for i, (rain, wind, tmax) in enumerate(steps)
    )


@pytest.fixture
def api_key(monkeypatch) -> str:
    monkeypatch.setenv("OPENWEATHER_KEY", "test-key")
    return "test-key"


@pytest.fixture
def default_config() -> AlertEngineConfig:
    """Return default AlertEngineConfig with default locations."""
    return AlertEngineConfig(
        provider=ProviderConfig(base_url=TEST_BASE_URL, api_key="test-key"),
        locations=DEFAULT_LOCATIONS,
    )


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "thresholds": {"rain_threshold_mm": 10.0},
        "provider": {"base_url": TEST_BASE_URL, "api_key": "test-key"},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def tmp_db(tmp_path: Path) -> sqlite3.Connection:
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def current_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "openweather_current.json") as f:
        return json.load(f)


@pytest.fixture
def forecast_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "openweather_forecast.json") as f:
        return json.load(f)


@pytest.fixture
def calm_forecast_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "openweather_forecast_calm.json") as f:
        return json.load(f)
