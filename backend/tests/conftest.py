"""
Shared fixtures for the weather cache proxy test suite.

No external services: OpenWeatherMap is replaced by AsyncMock or
httpx.MockTransport, and cache time is driven by a manual clock.
"""

import os
from unittest.mock import AsyncMock

import pytest

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key-123")

from models import WeatherResponse  # noqa: E402
from payloads import make_current_payload, make_forecast_payload  # noqa: E402
from services.cache import ResponseCache  # noqa: E402
from services.cities import CityDirectory, CityRecord  # noqa: E402
from services.dispatcher import WeatherDispatcher  # noqa: E402


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_ms=600_000, clock=clock)


@pytest.fixture
def current_response():
    return WeatherResponse.model_validate(make_current_payload())


@pytest.fixture
def forecast_response():
    return WeatherResponse.model_validate(make_forecast_payload())


@pytest.fixture
def directory():
    return CityDirectory.build([
        CityRecord(id=1, lat=34.94, lon=36.32, name="Foo", ctry="BR"),
        CityRecord(id=2643743, lat=51.50853, lon=-0.12574, name="London", ctry="GB"),
    ])


@pytest.fixture
def weather_client(current_response):
    client = AsyncMock()
    client.fetch = AsyncMock(return_value=current_response)
    return client


@pytest.fixture
def dispatcher(directory, cache, weather_client):
    return WeatherDispatcher(directory, cache, weather_client)
