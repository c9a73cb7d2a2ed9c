"""HTTP API for Fairweather."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from fairweather.event_service import EventService
from fairweather.event_store import EventStore
from fairweather.exceptions import (
    EventNotFoundError,
    InvalidEventDateError,
    NoAlternativesError,
    ProviderError,
    WeatherUnavailableError,
)
from fairweather.models.config import FairweatherConfig
from fairweather.models.event import AlternativeDate, Event, EventCreate, EventUpdate
from fairweather.weather_client import WeatherCache, WeatherClient

logger = logging.getLogger(__name__)


class SuitabilityResponse(BaseModel):
    """Last computed suitability of an event."""
    score: Optional[int] = Field(None, description="Suitability score, 0-100")
    suitability: Optional[str] = Field(None, description="Suitability label")


class ErrorResponse(BaseModel):
    """Error response format."""
    error: str = Field(..., examples=["Event not found"])


class MessageResponse(BaseModel):
    """Informational response used when no alternatives exist."""
    message: str


def build_event_service(config: FairweatherConfig) -> EventService:
    """Wire the store, weather client and cache from configuration."""
    weather_client = WeatherClient(
        api_key=config.weather_api_key,
        base_url=config.weather_base_url,
        timeout=config.weather_timeout_seconds,
        cache=WeatherCache(ttl_seconds=config.weather_cache_ttl_seconds),
    )
    return EventService(store=EventStore(config.db_path), weather_client=weather_client)


# Global service instance
event_service: Optional[EventService] = None


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Application lifespan manager."""
    global event_service
    config = FairweatherConfig()
    event_service = build_event_service(config)
    logger.info(f"Fairweather HTTP server started, events stored in {config.db_path}")
    yield
    await event_service.weather_client.aclose()
    logger.info("Fairweather HTTP server shutting down")


app = FastAPI(
    title="Fairweather Events API",
    description="Event planning service with weather-based suitability scoring",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service() -> EventService:
    if event_service is None:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return event_service


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(EventNotFoundError)
async def event_not_found_handler(request: Request, exc: EventNotFoundError):
    return JSONResponse(status_code=404, content={"error": "Event not found"})


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    return JSONResponse(
        status_code=500,
        content={"error": "Weather API unavailable or invalid location"},
    )


@app.exception_handler(WeatherUnavailableError)
async def weather_unavailable_handler(request: Request, exc: WeatherUnavailableError):
    return JSONResponse(status_code=500, content={"error": "Weather check failed"})


@app.exception_handler(NoAlternativesError)
async def no_alternatives_handler(request: Request, exc: NoAlternativesError):
    return JSONResponse(
        status_code=404,
        content={"message": "No suitable alternatives found due to weather data unavailability."},
    )


@app.exception_handler(InvalidEventDateError)
async def invalid_date_handler(request: Request, exc: InvalidEventDateError):
    return JSONResponse(status_code=400, content={"error": "Event date must be in YYYY-MM-DD format"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Fairweather Events API",
        "version": "1.0.0",
        "endpoints": {
            "events": "/events",
            "weather": "/weather/{city}/{date}",
            "weather_check": "/events/{id}/weather-check",
            "suitability": "/events/{id}/suitability",
            "alternatives": "/events/{id}/alternatives",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


@app.post("/events", response_model=Event)
async def create_event(request: Optional[EventCreate] = Body(None)) -> Event:
    """Create an event; weather is attached when the provider answers.

    A missing body creates an event with every field null.
    """
    request = request or EventCreate()
    return await get_service().create_event(
        name=request.name,
        city=request.city,
        date=request.date,
        type=request.type,
    )


@app.get("/events", response_model=List[Event])
async def list_events() -> List[Event]:
    """List all events."""
    return await get_service().list_events()


@app.put(
    "/events/{event_id}",
    response_model=Event,
    responses={404: {"model": ErrorResponse}},
)
async def update_event(event_id: int, request: EventUpdate) -> Event:
    """Update event details without recomputing weather."""
    return await get_service().update_event(event_id, request)


@app.get("/weather/{city}/{date}", responses={500: {"model": ErrorResponse}})
async def get_weather(city: str, date: str) -> Dict[str, Any]:
    """Raw provider payload for a city."""
    return await get_service().get_weather(city, date)


@app.post(
    "/events/{event_id}/weather-check",
    response_model=Event,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def weather_check(event_id: int) -> Event:
    """Refresh an event's weather and suitability."""
    return await get_service().refresh_weather(event_id)


@app.get(
    "/events/{event_id}/suitability",
    response_model=SuitabilityResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_suitability(event_id: int) -> SuitabilityResponse:
    """Last computed suitability of an event."""
    return SuitabilityResponse(**await get_service().get_suitability(event_id))


@app.get(
    "/events/{event_id}/alternatives",
    response_model=List[AlternativeDate],
    responses={404: {"model": MessageResponse}},
)
async def get_alternatives(event_id: int) -> List[AlternativeDate]:
    """Nearby dates ranked by projected suitability, best first."""
    return await get_service().suggest_alternatives(event_id)
