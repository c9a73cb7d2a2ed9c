"""Error taxonomy for Fairweather."""


class FairweatherError(Exception):
    """Base class for service errors."""


class EventNotFoundError(FairweatherError):
    """Raised when a referenced event id does not exist."""

    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"Event {event_id} not found")


class ProviderError(FairweatherError):
    """Raised when the weather provider call fails or returns unusable data."""

    def __init__(self, message: str, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class WeatherUnavailableError(FairweatherError):
    """Raised when an explicit weather check cannot obtain data."""

    def __init__(self, event_id: int, cause: ProviderError):
        self.event_id = event_id
        self.cause = cause
        super().__init__(f"Weather check failed for event {event_id}: {cause}")


class NoAlternativesError(FairweatherError):
    """Raised when no alternative date could be scored."""

    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"No alternative dates could be scored for event {event_id}")


class InvalidEventDateError(FairweatherError):
    """Raised when an event's stored date is not an ISO calendar date."""

    def __init__(self, event_id: int, value):
        self.event_id = event_id
        self.value = value
        super().__init__(f"Event {event_id} has an invalid date: {value!r}")
