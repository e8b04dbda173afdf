import os

# Settings are cached at import time; pin a predictable environment first.
os.environ.setdefault("WEATHERDASH_OPENWEATHER_API_KEY", "test-key")
os.environ["WEATHERDASH_HTTP_RETRIES"] = "0"
for _name in ("GEMINI_API_KEY", "GROQ_API_KEY", "CEREBRAS_API_KEY"):
    os.environ.pop(f"WEATHERDASH_{_name}", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from weatherdash.api.v1.deps import limiter  # noqa: E402
from weatherdash.core.http import set_http_client  # noqa: E402
from weatherdash.schemas.weather import DayPart, WeatherSnapshot  # noqa: E402
from weatherdash.services.weather.search import _search_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_state():
    limiter.reset()
    _search_cache.clear()
    yield
    _search_cache.clear()


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient(timeout=httpx.Timeout(5.0)) as client:
        set_http_client(client)
        try:
            yield client
        finally:
            set_http_client(None)


def make_snapshot(**overrides) -> WeatherSnapshot:
    data = {
        "city": "Dubai",
        "country": "AE",
        "current_temp": 35.0,
        "current_condition": "Clear",
        "description": "clear sky",
        "humidity": 40,
        "wind_speed": 5.5,
        "aqi": 1,
        "max_temp": 35.0,
        "min_temp": 24.0,
        "visibility_km": 10.0,
        "sunrise": "8:00 AM",
        "sunset": "8:00 PM",
        "day_length": "12h 0m",
        "day_parts": (
            DayPart(name="Morning", temp=30.0, condition="Clear"),
            DayPart(name="Afternoon", temp=34.0, condition="Clear"),
            DayPart(name="Evening", temp=28.0, condition="Clear"),
        ),
    }
    data.update(overrides)
    return WeatherSnapshot(**data)


@pytest.fixture
def snapshot() -> WeatherSnapshot:
    return make_snapshot()
