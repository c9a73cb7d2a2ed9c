"""Tests for the weather client, cache and normalization."""

import httpx
import pytest

from fairweather.exceptions import ProviderError
from fairweather.models.event import WeatherObservation
from fairweather.weather_client import WeatherCache, WeatherClient, normalize_weather


class TestNormalizeWeather:
    """Test mapping of provider payloads."""

    def test_full_payload(self, clear_sky):
        weather = normalize_weather(clear_sky)

        assert weather == WeatherObservation(
            temp=295.15,
            description="clear sky",
            wind=3.6,
            clouds=0,
            icon="01d",
        )

    def test_empty_payload_uses_defaults(self):
        weather = normalize_weather({})

        assert weather.temp == 0
        assert weather.description == "unknown"
        assert weather.wind == 0
        assert weather.clouds is None
        assert weather.icon == ""

    def test_malformed_sections_use_defaults(self):
        weather = normalize_weather(
            {
                "main": "hot",
                "weather": [],
                "wind": {"speed": "fast"},
                "clouds": None,
            }
        )

        assert weather == WeatherObservation()

    def test_empty_description_falls_back(self):
        weather = normalize_weather({"weather": [{"description": "", "icon": "50n"}]})

        assert weather.description == "unknown"
        assert weather.icon == "50n"

    def test_normalization_is_repeatable(self, clear_sky):
        assert normalize_weather(clear_sky) == normalize_weather(clear_sky)

    def test_observation_is_immutable(self, clear_sky):
        weather = normalize_weather(clear_sky)

        with pytest.raises(Exception):
            weather.temp = 0


class TestWeatherCache:
    """Test the (city, date) cache."""

    def test_entries_never_expire_by_default(self, clear_sky):
        now = [0.0]
        cache = WeatherCache(clock=lambda: now[0])
        cache.set("Lisbon", "2025-06-01", clear_sky)

        now[0] = 10 ** 9

        assert cache.get("Lisbon", "2025-06-01") == clear_sky
        assert ("Lisbon", "2025-06-01") in cache

    def test_ttl_expires_entries(self, clear_sky):
        now = [0.0]
        cache = WeatherCache(ttl_seconds=60, clock=lambda: now[0])
        cache.set("Lisbon", "2025-06-01", clear_sky)

        now[0] = 30.0
        assert cache.get("Lisbon", "2025-06-01") == clear_sky

        now[0] = 61.0
        assert cache.get("Lisbon", "2025-06-01") is None
        assert len(cache) == 0

    def test_key_includes_date(self, clear_sky):
        cache = WeatherCache()
        cache.set("Lisbon", "2025-06-01", clear_sky)

        assert cache.get("Lisbon", "2025-06-02") is None
        assert cache.get("Porto", "2025-06-01") is None

    def test_stats(self, clear_sky):
        cache = WeatherCache()
        cache.set("Lisbon", "2025-06-01", clear_sky)
        cache.get("Lisbon", "2025-06-01")
        cache.get("Lisbon", "2025-06-02")

        stats = cache.stats()
        assert stats["entries"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 50

    def test_clear(self, clear_sky):
        cache = WeatherCache()
        cache.set("Lisbon", "2025-06-01", clear_sky)
        cache.clear()

        assert len(cache) == 0


class TestWeatherClient:
    """Test provider calls."""

    @pytest.mark.asyncio
    async def test_fetch_returns_normalized_weather(self, weather_client, provider):
        weather = await weather_client.fetch("Lisbon", "2025-06-01")

        assert weather.description == "clear sky"
        assert weather.temp == 295.15
        assert provider.call_count == 1

    @pytest.mark.asyncio
    async def test_request_queries_current_weather_by_city(self, weather_client, provider):
        await weather_client.fetch_raw("Lisbon", "2025-06-01")

        request = provider.requests[0]
        assert request.url.path == "/data/2.5/weather"
        assert request.url.params["q"] == "Lisbon"
        assert request.url.params["appid"] == "test_weather_key"
        assert "date" not in request.url.params

    @pytest.mark.asyncio
    async def test_repeated_fetch_hits_cache(self, weather_client, provider):
        first = await weather_client.fetch("Lisbon", "2025-06-01")
        second = await weather_client.fetch("Lisbon", "2025-06-01")

        assert first == second
        assert provider.call_count == 1

    @pytest.mark.asyncio
    async def test_cache_hit_survives_provider_outage(self, weather_client, provider, clear_sky):
        await weather_client.fetch_raw("Lisbon", "2025-06-01")
        provider.disconnect()

        raw = await weather_client.fetch_raw("Lisbon", "2025-06-01")

        assert raw == clear_sky

    @pytest.mark.asyncio
    async def test_different_dates_are_fetched_separately(self, weather_client, provider):
        await weather_client.fetch("Lisbon", "2025-06-01")
        await weather_client.fetch("Lisbon", "2025-06-02")

        assert provider.call_count == 2

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self, weather_client, provider, weather_cache):
        provider.fail_with(404)

        with pytest.raises(ProviderError) as exc_info:
            await weather_client.fetch_raw("Atlantis", "2025-06-01")

        assert exc_info.value.status_code == 404
        assert len(weather_cache) == 0

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, weather_client, provider, clear_sky):
        provider.fail_with(503)
        with pytest.raises(ProviderError):
            await weather_client.fetch("Lisbon", "2025-06-01")

        provider.status_code = 200
        provider.payload = clear_sky
        weather = await weather_client.fetch("Lisbon", "2025-06-01")

        assert weather.description == "clear sky"
        assert provider.call_count == 2

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, weather_client, provider):
        provider.disconnect()

        with pytest.raises(ProviderError):
            await weather_client.fetch("Lisbon", "2025-06-01")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops</html>")

        client = WeatherClient(
            api_key="key",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(ProviderError):
            await client.fetch_raw("Lisbon", "2025-06-01")

    @pytest.mark.asyncio
    async def test_non_object_json_raises(self, weather_client, provider):
        provider.payload = ["not", "an", "object"]

        with pytest.raises(ProviderError):
            await weather_client.fetch_raw("Lisbon", "2025-06-01")

    @pytest.mark.asyncio
    async def test_missing_city_fails_without_request(self, weather_client, provider):
        with pytest.raises(ProviderError):
            await weather_client.fetch_raw("", "2025-06-01")

        assert provider.call_count == 0

    @pytest.mark.asyncio
    async def test_or_none_variants_swallow_provider_errors(self, weather_client, provider):
        provider.fail_with(500)

        assert await weather_client.fetch_or_none("Lisbon", "2025-06-01") is None
        assert await weather_client.fetch_raw_or_none("Lisbon", "2025-06-01") is None

    @pytest.mark.asyncio
    async def test_or_none_returns_data_on_success(self, weather_client):
        weather = await weather_client.fetch_or_none("Lisbon", "2025-06-01")

        assert isinstance(weather, WeatherObservation)

    @pytest.mark.asyncio
    async def test_owned_http_client_is_closed(self):
        client = WeatherClient(api_key="key")
        http_client = client._client()

        async with client:
            pass

        assert http_client.is_closed
