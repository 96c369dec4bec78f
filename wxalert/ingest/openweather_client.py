"""OpenWeather free-tier client: current conditions and 5-day/3-hour forecast."""

import logging
import math
import os
from typing import Any

import httpx

from wxalert.config.schema import OPENWEATHER_BASE_URL, ProviderConfig
from wxalert.errors import (
    MalformedProviderResponse,
    MissingCredentialError,
    ProviderTimeout,
    ProviderUnavailable,
)
from wxalert.models.common import from_unix, utc_now
from wxalert.models.observation import (
    Coordinate,
    CurrentObservation,
    ForecastSample,
    ForecastSeries,
)

logger = logging.getLogger(__name__)

CURRENT_PATH = "/data/2.5/weather"
FORECAST_PATH = "/data/2.5/forecast"
DEFAULT_API_KEY_ENV = "OPENWEATHER_KEY"
DEFAULT_USER_AGENT = "wxalert/0.1.0"


class OpenWeatherClient:
    """One GET per fetch, no retries. Retry policy belongs to the caller."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OPENWEATHER_BASE_URL,
        units: str = "metric",
        timeout: float = 10.0,
        api_key_env: str = DEFAULT_API_KEY_ENV,
    ):
        self.api_key = api_key or os.environ.get(api_key_env, "")
        if not self.api_key:
            raise MissingCredentialError(f"{api_key_env} not set")
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "OpenWeatherClient":
        return cls(
            api_key=config.api_key or None,
            base_url=config.base_url,
            units=config.units,
            timeout=config.timeout_seconds,
            api_key_env=config.api_key_env,
        )

    async def fetch_current(self, coordinate: Coordinate) -> CurrentObservation:
        raw = await self._get("current", CURRENT_PATH, coordinate)
        return parse_current(raw)

    async def fetch_forecast(self, coordinate: Coordinate) -> ForecastSeries:
        raw = await self._get("forecast", FORECAST_PATH, coordinate)
        return parse_forecast(raw)

    async def _get(self, fetch: str, path: str, coordinate: Coordinate) -> dict:
        params = {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "appid": self.api_key,
            "units": self.units,
        }
        headers = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    f"{self.base_url}{path}", params=params, headers=headers
                )
        except httpx.TimeoutException as e:
            logger.warning("OpenWeather %s timed out after %.1fs", fetch, self.timeout)
            raise ProviderTimeout(f"OpenWeather {fetch} timed out", fetch) from e
        except httpx.RequestError as e:
            logger.warning("OpenWeather %s request error: %s", fetch, type(e).__name__)
            raise ProviderUnavailable(
                f"OpenWeather {fetch} request failed: {type(e).__name__}", fetch
            ) from e

        if not resp.is_success:
            logger.warning("OpenWeather %s returned %d", fetch, resp.status_code)
            raise ProviderUnavailable(
                f"OpenWeather {fetch} {resp.status_code}", fetch, resp.status_code
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise MalformedProviderResponse(
                f"OpenWeather {fetch} returned non-JSON body", fetch, resp.status_code
            ) from e
        if not isinstance(payload, dict):
            raise MalformedProviderResponse(
                f"OpenWeather {fetch} returned {type(payload).__name__}, expected object",
                fetch,
                resp.status_code,
            )
        return payload


def parse_current(raw: dict) -> CurrentObservation:
    """Extract the instantaneous reading from a /weather payload."""
    try:
        main = raw["main"]
        temperature = _number(main["temp"])
        feels_like = main.get("feels_like")
        wind_speed = _number((raw.get("wind") or {}).get("speed", 0.0))
        return CurrentObservation(
            temperature=temperature,
            feels_like=None if feels_like is None else _number(feels_like),
            wind_speed=wind_speed,
            fetched_at=utc_now(),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise MalformedProviderResponse(
            f"Current payload missing expected fields: {e!r}", "current"
        ) from e


def parse_forecast(raw: dict) -> ForecastSeries:
    """Extract the ordered 3-hour steps from a /forecast payload."""
    steps = raw.get("list")
    if not isinstance(steps, list):
        raise MalformedProviderResponse(
            "Forecast payload has no 'list' of steps", "forecast"
        )

    samples: list[ForecastSample] = []
    for offset, step in enumerate(steps):
        try:
            samples.append(_parse_step(offset, step))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedProviderResponse(
                f"Forecast step {offset} malformed: {e!r}", "forecast"
            ) from e
    return tuple(samples)


def _parse_step(offset: int, step: dict[str, Any]) -> ForecastSample:
    precipitation = _number((step.get("rain") or {}).get("3h", 0.0))
    wind_speed = _number(step["wind"]["speed"])
    if precipitation < 0 or wind_speed < 0:
        raise ValueError("negative precipitation or wind speed")
    return ForecastSample(
        offset=offset,
        precipitation_mm=precipitation,
        wind_speed=wind_speed,
        temperature_max=_number(step["main"]["temp_max"]),
        valid_at=from_unix(step.get("dt")),
    )


def _number(value: Any) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"expected number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"number out of range: {value!r}") from e
    # json accepts NaN/Infinity literals
    if not math.isfinite(number):
        raise ValueError(f"expected finite number, got {value!r}")
    return number
