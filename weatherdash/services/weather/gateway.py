from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from weatherdash.core.errors import CityNotFound, ConfigurationError, MalformedResponse, NetworkFailure
from weatherdash.core.http import get_with_retries
from weatherdash.schemas.openweather import (
    AirPollution,
    GeoCity,
    OpenWeatherCurrent,
    OpenWeatherForecast,
)


OPENWEATHER_BASE_URL = "https://api.openweathermap.org"

CURRENT_PATH = "/data/2.5/weather"
FORECAST_PATH = "/data/2.5/forecast"
AIR_POLLUTION_PATH = "/data/2.5/air_pollution"
GEO_DIRECT_PATH = "/geo/1.0/direct"

M = TypeVar("M", bound=BaseModel)


class OpenWeatherGateway:
    """Thin client over the OpenWeather REST endpoints.

    Returns provider-shaped records; mapping into the canonical snapshot is
    the aggregator's job.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None,
        base_url: str = OPENWEATHER_BASE_URL,
        units: str = "metric",
        retries: int = 0,
        backoff_seconds: float = 0.0,
        timeout_seconds: float | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("OpenWeather API key is not configured")
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._units = units
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self._timeout_seconds = timeout_seconds

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        return await get_with_retries(
            self._client,
            f"{self._base_url}{path}",
            params={**params, "appid": self._api_key},
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
            timeout=self._timeout_seconds,
        )

    @staticmethod
    def _parse(model: type[M], resp: httpx.Response) -> M:
        try:
            return model.model_validate(resp.json())
        except ValueError as exc:
            raise MalformedResponse(f"Unexpected {model.__name__} payload") from exc

    async def current(self, city: str) -> OpenWeatherCurrent:
        resp = await self._get(CURRENT_PATH, {"q": city, "units": self._units})
        if resp.status_code != 200:
            raise CityNotFound(city, resp.status_code)
        return self._parse(OpenWeatherCurrent, resp)

    async def forecast(self, city: str) -> OpenWeatherForecast:
        resp = await self._get(FORECAST_PATH, {"q": city, "units": self._units})
        if resp.status_code != 200:
            raise NetworkFailure(f"Forecast upstream status {resp.status_code}")
        return self._parse(OpenWeatherForecast, resp)

    async def air_quality(self, lat: float, lon: float) -> int | None:
        resp = await self._get(AIR_POLLUTION_PATH, {"lat": lat, "lon": lon})
        if resp.status_code != 200:
            raise NetworkFailure(f"Air quality upstream status {resp.status_code}")
        data = self._parse(AirPollution, resp)
        if not data.samples:
            return None
        return data.samples[0].main.aqi

    async def search_cities(self, query: str, *, limit: int = 5) -> list[GeoCity]:
        resp = await self._get(GEO_DIRECT_PATH, {"q": query, "limit": limit})
        if resp.status_code != 200:
            raise NetworkFailure(f"Geocoding upstream status {resp.status_code}")
        try:
            raw = resp.json()
        except ValueError as exc:
            raise MalformedResponse("Unexpected geocoding payload") from exc
        if not isinstance(raw, list):
            raise MalformedResponse("Unexpected geocoding payload")
        return [self._validate_city(item) for item in raw]

    @staticmethod
    def _validate_city(item: Any) -> GeoCity:
        try:
            return GeoCity.model_validate(item)
        except ValueError as exc:
            raise MalformedResponse("Unexpected geocoding entry") from exc
