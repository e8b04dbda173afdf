from fastapi import APIRouter, Depends, Path, Query, Request

from weatherdash.api.v1.deps import get_advice_service, get_weather_aggregator, get_weather_gateway, limiter
from weatherdash.schemas.weather import CitySearchResult, WeatherAdviceResponse, WeatherSnapshot
from weatherdash.services.advice import AdviceService
from weatherdash.services.weather.aggregator import WeatherAggregator
from weatherdash.services.weather.gateway import OpenWeatherGateway
from weatherdash.services.weather.search import search_cities


router = APIRouter()


@router.get("/search", response_model=list[CitySearchResult])
@limiter.limit("30/minute")
async def city_search(
    request: Request,
    query: str = Query("", max_length=120),
    gateway: OpenWeatherGateway = Depends(get_weather_gateway),
):
    return await search_cities(gateway, query)


@router.get("/advice", response_model=WeatherAdviceResponse)
@limiter.limit("20/minute")
async def weather_advice(
    request: Request,
    city: str = Query(..., min_length=1, max_length=128),
    aggregator: WeatherAggregator = Depends(get_weather_aggregator),
    advisor: AdviceService = Depends(get_advice_service),
):
    snapshot = await aggregator.fetch(city)
    advice = await advisor.advise(snapshot)
    return WeatherAdviceResponse(weather=snapshot, advice=advice)


@router.get("/{city}", response_model=WeatherSnapshot)
@limiter.limit("60/minute")
async def current_weather(
    request: Request,
    city: str = Path(..., min_length=1, max_length=128),
    aggregator: WeatherAggregator = Depends(get_weather_aggregator),
):
    return await aggregator.fetch(city)
