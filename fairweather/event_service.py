"""Event lifecycle orchestration: storage, weather enrichment and scoring."""

import asyncio
import datetime
from typing import Any, Dict, List, Optional

import structlog

from fairweather.event_store import EventStore
from fairweather.exceptions import (
    EventNotFoundError,
    InvalidEventDateError,
    NoAlternativesError,
    ProviderError,
    WeatherUnavailableError,
)
from fairweather.models.event import (
    AlternativeDate,
    Event,
    EventUpdate,
    SuitabilityResult,
    WeatherObservation,
)
from fairweather.scoring import score_suitability
from fairweather.weather_client import WeatherClient

logger = structlog.get_logger(__name__)

# Days around the event date considered as alternatives, in the order they are tried
ALTERNATIVE_OFFSETS = (-3, -2, -1, 1, 2, 3)


def _enrichment(weather: Optional[WeatherObservation], result: SuitabilityResult) -> Dict[str, Any]:
    """Fields written together from one weather snapshot."""
    return {
        "weather": weather.model_dump() if weather is not None else None,
        "score": result.score,
        "suitability": result.label,
    }


class EventService:
    """Implements the event operations exposed over HTTP."""

    def __init__(self, store: EventStore, weather_client: WeatherClient):
        self.store = store
        self.weather_client = weather_client
        self.logger = logger.bind(component="event_service")

    async def create_event(
        self,
        name: Optional[str],
        city: Optional[str],
        date: Optional[str],
        type: Optional[str],
    ) -> Event:
        """
        Create an event, enriching it with weather when available.

        Weather trouble never fails creation: the event is stored with no
        weather, score 0 and an "Unknown" suitability.
        """
        weather = await self.weather_client.fetch_or_none(city, date)
        result = score_suitability(weather, type)

        event = await self.store.create_event(
            {
                "name": name,
                "city": city,
                "date": date,
                "type": type,
                **_enrichment(weather, result),
            }
        )
        self.logger.info(
            "Event created",
            event_id=event.id,
            city=city,
            date=date,
            score=event.score,
            has_weather=weather is not None,
        )
        return event

    async def list_events(self) -> List[Event]:
        return await self.store.list_events()

    async def get_event(self, event_id: int) -> Event:
        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def update_event(self, event_id: int, changes: EventUpdate) -> Event:
        """
        Overwrite the provided fields of an event.

        Weather and score are not recomputed; a weather check resyncs them.

        Raises:
            EventNotFoundError: If the event does not exist
        """
        return await self.store.update_event(event_id, changes.model_dump(exclude_unset=True))

    async def get_weather(self, city: str, date: str) -> Dict[str, Any]:
        """Raw provider payload for a city and date; raises ProviderError."""
        return await self.weather_client.fetch_raw(city, date)

    async def refresh_weather(self, event_id: int) -> Event:
        """
        Re-fetch weather for an event and recompute its suitability.

        Raises:
            EventNotFoundError: If the event does not exist
            WeatherUnavailableError: If the provider call fails; the event
                is left unchanged
        """
        event = await self.get_event(event_id)

        try:
            weather = await self.weather_client.fetch(event.city, event.date)
        except ProviderError as e:
            self.logger.warning("Weather check failed", event_id=event_id, error=str(e))
            raise WeatherUnavailableError(event_id, e) from e

        result = score_suitability(weather, event.type)
        return await self.store.update_event(event_id, _enrichment(weather, result))

    async def get_suitability(self, event_id: int) -> Dict[str, Any]:
        """Last computed score and suitability, without refetching."""
        event = await self.get_event(event_id)
        return {"score": event.score, "suitability": event.suitability}

    async def _score_date(self, event: Event, candidate: str) -> Optional[AlternativeDate]:
        weather = await self.weather_client.fetch_or_none(event.city, candidate)
        if weather is None:
            return None

        result = score_suitability(weather, event.type)
        return AlternativeDate(date=candidate, score=result.score, suitability=result.label)

    async def suggest_alternatives(self, event_id: int) -> List[AlternativeDate]:
        """
        Rank the dates within three days of an event by suitability.

        Dates whose weather cannot be fetched are skipped. Equal scores keep
        the order of ALTERNATIVE_OFFSETS.

        Raises:
            EventNotFoundError: If the event does not exist
            InvalidEventDateError: If the event date is not YYYY-MM-DD
            NoAlternativesError: If no candidate date could be scored
        """
        event = await self.get_event(event_id)

        try:
            base_date = datetime.date.fromisoformat(event.date or "")
            # fromisoformat also takes basic and week forms; only YYYY-MM-DD passes
            if base_date.isoformat() != event.date:
                raise ValueError(f"not YYYY-MM-DD: {event.date}")
            candidates = [(base_date + datetime.timedelta(days=offset)).isoformat() for offset in ALTERNATIVE_OFFSETS]
        except (ValueError, OverflowError) as e:
            raise InvalidEventDateError(event_id, event.date) from e

        scored = await asyncio.gather(*(self._score_date(event, candidate) for candidate in candidates))

        suggestions = [s for s in scored if s is not None]
        if not suggestions:
            raise NoAlternativesError(event_id)

        suggestions.sort(key=lambda s: s.score, reverse=True)
        self.logger.info(
            "Alternatives ranked",
            event_id=event_id,
            candidates=len(candidates),
            scored=len(suggestions),
        )
        return suggestions
