"""Event and weather data models."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SuitabilityLabel(str, Enum):
    """Categorical suitability bands."""

    POOR = "Poor"
    OKAY = "Okay"
    GOOD = "Good"
    GREAT = "Great"
    UNKNOWN = "Unknown"  # no weather data


class WeatherObservation(BaseModel):
    """Normalized weather snapshot used for scoring."""

    model_config = ConfigDict(frozen=True)

    temp: float = Field(0.0, description="Temperature in Kelvin")
    description: str = Field("unknown", description="Provider condition text")
    wind: float = Field(0.0, description="Wind speed in m/s")
    clouds: Optional[int] = Field(None, description="Cloud coverage percent")
    icon: str = Field("", description="Provider icon code")


class SuitabilityResult(BaseModel):
    """Score and label derived from one weather snapshot."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    suitability: SuitabilityLabel

    @property
    def label(self) -> str:
        return self.suitability.value


class Event(BaseModel):
    """Event as returned to clients."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: Optional[str] = None
    city: Optional[str] = None
    date: Optional[str] = None
    type: Optional[str] = None
    score: Optional[int] = None
    suitability: Optional[str] = None
    weather: Optional[WeatherObservation] = None


def _loose_text(value: Any) -> Optional[str]:
    """Scalars become their text form; lists, objects and null become None."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


class EventCreate(BaseModel):
    """Request body for creating an event.

    Every field is optional and values of the wrong JSON type are coerced
    rather than rejected, so a create request never fails validation.
    """

    name: Optional[str] = Field(None, description="Event name")
    city: Optional[str] = Field(None, description="City used as the weather location")
    date: Optional[str] = Field(None, description="ISO date, YYYY-MM-DD")
    type: Optional[str] = Field(None, description="Event category, e.g. wedding or sports")

    @field_validator("name", "city", "date", "type", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        return _loose_text(value)


class EventUpdate(BaseModel):
    """Partial update of an event's user-editable fields.

    Weather, score and suitability are only ever written together by a
    weather check, so they are not accepted here. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    city: Optional[str] = None
    date: Optional[str] = None
    type: Optional[str] = None

    @field_validator("name", "city", "date", "type", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        return _loose_text(value)


class AlternativeDate(BaseModel):
    """Candidate date ranked by projected suitability."""

    date: str
    score: int
    suitability: str
