from __future__ import annotations


class WeatherDashError(Exception):
    """Base class for errors raised by the weather and advice core."""


class ConfigurationError(WeatherDashError):
    """A required credential or setting is missing."""


class CityNotFound(WeatherDashError):
    """The weather provider could not resolve the requested city."""

    def __init__(self, city: str, status_code: int | None = None) -> None:
        super().__init__(f"City not found: {city!r}")
        self.city = city
        self.status_code = status_code


class NetworkFailure(WeatherDashError):
    """An outbound call failed to complete or timed out."""


class MalformedResponse(WeatherDashError):
    """A successful response was missing required fields."""
