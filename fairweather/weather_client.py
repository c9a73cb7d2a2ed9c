"""
Weather Client - Fetches and caches current conditions from OpenWeatherMap
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
import structlog

from fairweather.exceptions import ProviderError
from fairweather.models.event import WeatherObservation

logger = structlog.get_logger(__name__)

CacheKey = Tuple[str, str]


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name)
    return value if isinstance(value, dict) else {}


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def normalize_weather(raw: Dict[str, Any]) -> WeatherObservation:
    """
    Map a raw provider payload onto a WeatherObservation.

    Missing or malformed nested fields fall back to defaults instead of
    failing, so the same payload always normalizes to the same observation.
    """
    conditions = raw.get("weather")
    first = conditions[0] if isinstance(conditions, list) and conditions else {}
    if not isinstance(first, dict):
        first = {}

    clouds = _number(_section(raw, "clouds").get("all"))

    return WeatherObservation(
        temp=_number(_section(raw, "main").get("temp")) or 0,
        description=_text(first.get("description")) or "unknown",
        wind=_number(_section(raw, "wind").get("speed")) or 0,
        clouds=round(clouds) if clouds is not None else None,
        icon=_text(first.get("icon")) or "",
    )


class WeatherCache:
    """
    Raw provider payloads keyed by (city, date)

    With ttl_seconds=None entries live as long as the cache does.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, Dict[str, Any]]] = {}
        self.hits = 0
        self.misses = 0

    def _expired(self, stored_at: float) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._clock() - stored_at > self.ttl_seconds

    def get(self, city: str, date: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get((city, date))
        if entry is None:
            self.misses += 1
            return None

        stored_at, payload = entry
        if self._expired(stored_at):
            del self._entries[(city, date)]
            self.misses += 1
            return None

        self.hits += 1
        return payload

    def set(self, city: str, date: str, payload: Dict[str, Any]) -> None:
        self._entries[(city, date)] = (self._clock(), payload)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": (self.hits / lookups * 100) if lookups else 0,
            "ttl_seconds": self.ttl_seconds,
        }

    def __contains__(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry[0])

    def __len__(self) -> int:
        return len(self._entries)


class WeatherClient:
    """Fetches current weather from OpenWeatherMap with a (city, date) cache"""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5",
        timeout: float = 10.0,
        cache: Optional[WeatherCache] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize WeatherClient

        Args:
            api_key: OpenWeatherMap API key
            base_url: Provider base URL
            timeout: Request timeout in seconds
            cache: Cache to memoize payloads in (a fresh one if omitted)
            http_client: Client to issue requests with; owned by this
                instance when omitted
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache if cache is not None else WeatherCache()
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self.logger = logger.bind(component="weather_client")

        if not self.api_key:
            self.logger.warning("No weather API key configured, provider calls will fail")

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "WeatherClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def fetch_raw(self, city: str, date: str) -> Dict[str, Any]:
        """
        Get the raw provider payload for a city

        The provider only reports current conditions; date takes part in
        the cache key but is not sent upstream.

        Raises:
            ProviderError: non-success status, transport failure or an
                unusable response body
        """
        if not city:
            raise ProviderError("City is required for a weather lookup")

        cached = self.cache.get(city, date)
        if cached is not None:
            self.logger.debug("Weather cache hit", city=city, date=date)
            return cached

        url = f"{self.base_url}/weather"
        params = {"q": city, "appid": self.api_key}

        try:
            response = await self._client().get(url, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            self.logger.error("Weather fetch failed", city=city, date=date, error=str(e))
            raise ProviderError(f"Weather request failed: {e}") from e

        if not response.is_success:
            self.logger.error(
                "Weather API request failed",
                status_code=response.status_code,
                city=city,
                date=date,
            )
            raise ProviderError(f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error("Weather API returned invalid JSON", city=city, date=date)
            raise ProviderError("Malformed weather response") from e

        if not isinstance(data, dict):
            self.logger.error("Weather API returned unexpected payload", city=city, date=date)
            raise ProviderError("Malformed weather response")

        self.cache.set(city, date, data)
        return data

    async def fetch(self, city: str, date: str) -> WeatherObservation:
        """Get normalized weather, raising ProviderError on failure."""
        return normalize_weather(await self.fetch_raw(city, date))

    async def fetch_raw_or_none(self, city: str, date: str) -> Optional[Dict[str, Any]]:
        """Like fetch_raw, but returns None instead of raising."""
        try:
            return await self.fetch_raw(city, date)
        except ProviderError as e:
            self.logger.warning("Weather unavailable", city=city, date=date, error=str(e))
            return None

    async def fetch_or_none(self, city: str, date: str) -> Optional[WeatherObservation]:
        """Like fetch, but returns None instead of raising."""
        raw = await self.fetch_raw_or_none(city, date)
        return normalize_weather(raw) if raw is not None else None
