import pytest
import respx
from httpx import ASGITransport, AsyncClient, Response

from conftest import make_snapshot
from weatherdash.api.v1.deps import get_advice_service, get_digest_dispatcher
from weatherdash.core.config import Settings, get_settings
from weatherdash.main import create_app
from weatherdash.services.advice import AdviceService
from weatherdash.services.llm.base import InsightProvider


CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
AQI_URL = "https://api.openweathermap.org/data/2.5/air_pollution"
GEO_URL = "https://api.openweathermap.org/geo/1.0/direct"


CURRENT = {
    "name": "London",
    "sys": {"country": "GB", "sunrise": 1700000000, "sunset": 1700030000},
    "main": {"temp": 12.3, "humidity": 81, "temp_min": 10.0, "temp_max": 14.0},
    "wind": {"speed": 4.1},
    "weather": [{"main": "Rain", "description": "light rain"}],
    "coord": {"lat": 51.5, "lon": -0.12},
    "visibility": 8000,
    "timezone": 0,
}
FORECAST = {
    "list": [
        {"main": {"temp": 12.0 + i, "temp_min": 10.0 + i, "temp_max": 13.0 + i}, "weather": [{"main": "Rain"}]}
        for i in range(6)
    ]
}


def _mock_weather():
    respx.get(CURRENT_URL).mock(return_value=Response(200, json=CURRENT))
    respx.get(FORECAST_URL).mock(return_value=Response(200, json=FORECAST))
    respx.get(AQI_URL).mock(return_value=Response(200, json={"list": [{"main": {"aqi": 2}}]}))


class EchoProvider(InsightProvider):
    name = "Echo"

    async def generate(self, snapshot, prompt):
        return f'Here: {{"summary": "Rainy in {snapshot.city}.", "outfit": "Raincoat.", "safety": "Umbrella."}}'


@pytest.mark.asyncio
async def test_health():
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_weather_by_city_success(http_client):
    app = create_app()

    with respx.mock:
        _mock_weather()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/London")
            assert r.status_code == 200
            body = r.json()
            assert body["city"] == "London"
            assert body["current_temp"] == 12.3
            assert body["visibility_km"] == 8.0
            assert body["aqi"] == 2
            assert body["max_temp"] == 18.0
            assert body["min_temp"] == 10.0
            assert [p["name"] for p in body["day_parts"]] == ["Morning", "Afternoon", "Evening"]


@pytest.mark.asyncio
async def test_weather_unknown_city_is_404(http_client):
    app = create_app()

    with respx.mock(assert_all_called=False) as router:
        router.get(CURRENT_URL).mock(return_value=Response(404, json={"cod": "404"}))
        router.get(FORECAST_URL).mock(return_value=Response(404, json={"cod": "404"}))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/Atlantis")
            assert r.status_code == 404
            assert r.json() == {"detail": "City not found"}


@pytest.mark.asyncio
async def test_weather_upstream_outage_is_502(http_client):
    app = create_app()

    with respx.mock(assert_all_called=False) as router:
        router.get(CURRENT_URL).mock(return_value=Response(200, json=CURRENT))
        router.get(FORECAST_URL).mock(return_value=Response(500))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/London")
            assert r.status_code == 502


@pytest.mark.asyncio
async def test_missing_weather_key_is_503(http_client):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(openweather_api_key=None)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.get("/api/v1/weather/London")
        assert r.status_code == 503


@pytest.mark.asyncio
async def test_advice_falls_back_without_ai_keys(http_client):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(
        openweather_api_key="test-key", http_retries=0, gemini_api_key=None, groq_api_key=None, cerebras_api_key=None
    )

    with respx.mock:
        _mock_weather()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/advice", params={"city": "London"})
            assert r.status_code == 200
            body = r.json()
            assert body["weather"]["city"] == "London"
            assert body["advice"] == {
                "summary": "Enjoy the atmosphere in London.",
                "outfit": "Wear comfortable clothes suitable for the weather.",
                "safety": "No specific hazards.",
            }


@pytest.mark.asyncio
async def test_advice_uses_provider_output(http_client):
    app = create_app()
    app.dependency_overrides[get_advice_service] = lambda: AdviceService([EchoProvider()])

    with respx.mock:
        _mock_weather()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/advice", params={"city": "London"})
            assert r.status_code == 200
            assert r.json()["advice"]["summary"] == "Rainy in London."


@pytest.mark.asyncio
async def test_search_short_query_returns_empty(http_client):
    app = create_app()

    with respx.mock:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/search", params={"query": "Lo"})
            assert r.status_code == 200
            assert r.json() == []


@pytest.mark.asyncio
async def test_search_returns_cities(http_client):
    app = create_app()

    with respx.mock:
        route = respx.get(GEO_URL).mock(
            return_value=Response(
                200,
                json=[
                    {"name": "Springfield", "country": "US", "state": "Illinois", "lat": 39.8, "lon": -89.6},
                    {"name": "Springfield", "country": "US", "lat": 37.2, "lon": -93.3},
                ],
            )
        )
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/search", params={"query": "Springfield"})
            assert r.status_code == 200
            assert r.json() == [
                {"name": "Springfield", "country": "US", "state": "Illinois"},
                {"name": "Springfield", "country": "US", "state": None},
            ]
            assert route.calls.last.request.url.params["limit"] == "5"


@pytest.mark.asyncio
async def test_search_upstream_error_returns_empty(http_client):
    app = create_app()

    with respx.mock:
        respx.get(GEO_URL).mock(return_value=Response(401))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.get("/api/v1/weather/search", params={"query": "Nowhereville"})
            assert r.status_code == 200
            assert r.json() == []


@pytest.mark.asyncio
async def test_digest_send_endpoint(http_client):
    app = create_app()
    sent = []

    class _Dispatcher:
        async def send(self, recipient, snapshot, advice):
            sent.append((recipient, snapshot.city, advice.safety))
            return True

    app.dependency_overrides[get_digest_dispatcher] = lambda: _Dispatcher()
    app.dependency_overrides[get_advice_service] = lambda: AdviceService([])

    with respx.mock:
        _mock_weather()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            r = await client.post("/api/v1/digest/send", json={"recipient": "t@t.com", "city": "London"})
            assert r.status_code == 200
            assert r.json() == {"recipient": "t@t.com", "city": "London", "sent": True}

    assert sent == [("t@t.com", "London", "No specific hazards.")]


def test_snapshot_is_immutable():
    snapshot = make_snapshot()
    with pytest.raises(Exception):
        snapshot.city = "Elsewhere"


@pytest.mark.asyncio
async def test_digest_send_rejects_multiline_recipient(http_client):
    app = create_app()
    sent = []

    class _Dispatcher:
        async def send(self, recipient, snapshot, advice):
            sent.append(recipient)
            return True

    app.dependency_overrides[get_digest_dispatcher] = lambda: _Dispatcher()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.post(
            "/api/v1/digest/send",
            json={"recipient": "t@t.com\r\nBcc: all@t.com", "city": "London"},
        )
        assert r.status_code == 422

    assert sent == []


@pytest.mark.asyncio
async def test_search_is_rate_limited_per_client(http_client):
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        for _ in range(30):
            r = await client.get("/api/v1/weather/search", params={"query": "Lo"})
            assert r.status_code == 200
        r = await client.get("/api/v1/weather/search", params={"query": "Lo"})
        assert r.status_code == 429
