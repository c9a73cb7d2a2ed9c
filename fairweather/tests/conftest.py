"""Pytest configuration for Fairweather tests."""

import copy
import os
import pytest
import httpx
from unittest.mock import patch

from fairweather.event_service import EventService
from fairweather.event_store import EventStore
from fairweather.models.config import FairweatherConfig
from fairweather.weather_client import WeatherCache, WeatherClient


CLEAR_SKY = {
    "coord": {"lon": -9.1333, "lat": 38.7167},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {"temp": 295.15, "feels_like": 294.8, "humidity": 52},
    "wind": {"speed": 3.6, "deg": 320},
    "clouds": {"all": 0},
    "name": "Lisbon",
    "cod": 200,
}

LIGHT_RAIN = {
    "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
    "main": {"temp": 288.0},
    "wind": {"speed": 5.0},
    "clouds": {"all": 75},
    "name": "Lisbon",
}

SCATTERED_CLOUDS = {
    "weather": [{"id": 802, "main": "Clouds", "description": "scattered clouds", "icon": "03d"}],
    "main": {"temp": 291.0},
    "wind": {"speed": 4.1},
    "clouds": {"all": 40},
    "name": "Lisbon",
}


class FakeProvider:
    """Stands in for OpenWeatherMap behind an httpx.MockTransport."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload if payload is not None else CLEAR_SKY
        self.status_code = status_code
        self.error = None
        self.requests = []

    def fail_with(self, status_code):
        self.status_code = status_code
        self.payload = {"cod": str(status_code), "message": "city not found"}

    def disconnect(self):
        self.error = httpx.ConnectError("Connection refused")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def call_count(self):
        return len(self.requests)


@pytest.fixture(scope="session", autouse=True)
def mock_env_vars():
    """Mock environment variables for testing."""
    with patch.dict(os.environ, {"WEATHER_API_KEY": "test_weather_key"}):
        yield


@pytest.fixture
def fairweather_config(tmp_path):
    """Create a FairweatherConfig for testing."""
    return FairweatherConfig(
        weather_api_key="test_weather_key",
        db_path=str(tmp_path / "db.json"),
    )


@pytest.fixture
def clear_sky():
    return copy.deepcopy(CLEAR_SKY)


@pytest.fixture
def light_rain():
    return copy.deepcopy(LIGHT_RAIN)


@pytest.fixture
def scattered_clouds():
    return copy.deepcopy(SCATTERED_CLOUDS)


@pytest.fixture
def provider(clear_sky):
    return FakeProvider(payload=clear_sky)


@pytest.fixture
def weather_cache():
    return WeatherCache()


@pytest.fixture
def weather_client(provider, weather_cache):
    return WeatherClient(
        api_key="test_weather_key",
        cache=weather_cache,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(provider)),
    )


@pytest.fixture
def store(fairweather_config):
    return EventStore(fairweather_config.db_path)


@pytest.fixture
def service(store, weather_client):
    return EventService(store=store, weather_client=weather_client)
