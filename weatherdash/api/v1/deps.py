from __future__ import annotations

from fastapi import Depends
from slowapi import Limiter
from slowapi.util import get_remote_address

from weatherdash.core.config import Settings, get_settings
from weatherdash.core.http import get_http_client
from weatherdash.services.advice import AdviceService
from weatherdash.services.digest.mailer import EmailDigestDispatcher
from weatherdash.services.llm import build_providers
from weatherdash.services.weather.aggregator import WeatherAggregator
from weatherdash.services.weather.gateway import OpenWeatherGateway


# Rate limiter shared by every v1 router and app.state
limiter = Limiter(key_func=get_remote_address)


def get_weather_gateway(settings: Settings = Depends(get_settings)) -> OpenWeatherGateway:
    return OpenWeatherGateway(
        get_http_client(),
        api_key=settings.openweather_api_key,
        base_url=settings.openweather_base_url,
        units=settings.openweather_units,
        retries=settings.http_retries,
        backoff_seconds=settings.http_retry_backoff_seconds,
        timeout_seconds=settings.http_timeout_seconds,
    )


def get_weather_aggregator(gateway: OpenWeatherGateway = Depends(get_weather_gateway)) -> WeatherAggregator:
    return WeatherAggregator(gateway)


def get_advice_service(settings: Settings = Depends(get_settings)) -> AdviceService:
    return AdviceService(
        build_providers(settings, get_http_client()),
        aqi_mask_threshold=settings.aqi_mask_threshold,
    )


def get_digest_dispatcher(settings: Settings = Depends(get_settings)) -> EmailDigestDispatcher:
    return EmailDigestDispatcher(settings)
