from __future__ import annotations

from weatherdash.core.cache import AsyncTTLCache
from weatherdash.core.config import get_settings
from weatherdash.core.errors import WeatherDashError
from weatherdash.core.logging import get_logger
from weatherdash.schemas.weather import CitySearchResult
from weatherdash.services.weather.gateway import OpenWeatherGateway


MIN_QUERY_LENGTH = 3
SEARCH_LIMIT = 5

_settings = get_settings()
_search_cache = AsyncTTLCache(maxsize=1024, ttl_seconds=_settings.search_ttl_seconds)
_log = get_logger(__name__)


async def search_cities(gateway: OpenWeatherGateway, query: str) -> list[CitySearchResult]:
    """Autocomplete city names. Short queries and upstream errors yield no results."""
    needle = (query or "").strip()
    if len(needle) < MIN_QUERY_LENGTH:
        return []

    async def loader() -> list[CitySearchResult]:
        cities = await gateway.search_cities(needle, limit=SEARCH_LIMIT)
        return [CitySearchResult(name=c.name, country=c.country, state=c.state) for c in cities]

    try:
        return await _search_cache.get_or_load(needle.casefold(), loader)
    except WeatherDashError as exc:
        _log.warning("city_search_failed", query=needle, error=str(exc))
        return []
