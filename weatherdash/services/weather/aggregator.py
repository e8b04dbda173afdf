from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Sequence

from pydantic import ValidationError

from weatherdash.core.errors import CityNotFound, MalformedResponse, WeatherDashError
from weatherdash.core.logging import get_logger
from weatherdash.schemas.openweather import Conditions, ForecastSample, OpenWeatherCurrent
from weatherdash.schemas.weather import DayPart, WeatherSnapshot
from weatherdash.services.weather.gateway import OpenWeatherGateway


# ~24h of 3-hour forecast samples.
NEAR_TERM_SAMPLES = 8

# Fixed sampling policy: assumes 3-hour granularity starting at the next slot.
DAY_PART_SLOTS = (("Morning", 0), ("Afternoon", 2), ("Evening", 4))
MIN_SAMPLES_FOR_DAY_PARTS = 5

DEFAULT_AQI = 1
DEFAULT_CONDITION = "Clear"


def primary_condition(conditions: Sequence[Conditions]) -> Conditions:
    if conditions:
        first = conditions[0]
        return Conditions(
            main=first.main or DEFAULT_CONDITION,
            description=first.description or DEFAULT_CONDITION,
        )
    return Conditions(main=DEFAULT_CONDITION, description=DEFAULT_CONDITION)


def near_term_window(samples: Sequence[ForecastSample]) -> list[ForecastSample]:
    return list(samples[:NEAR_TERM_SAMPLES])


def temperature_bounds(window: Sequence[ForecastSample], current: OpenWeatherCurrent) -> tuple[float, float]:
    """Return ``(max_temp, min_temp)`` over the window, or the current
    conditions' own bounds when the window is empty."""
    if not window:
        return current.main.temp_max, current.main.temp_min
    return (
        max(sample.main.temp_max for sample in window),
        min(sample.main.temp_min for sample in window),
    )


def local_clock(epoch_seconds: int, utc_offset_seconds: int) -> str:
    tz = dt_timezone(timedelta(seconds=utc_offset_seconds))
    local = datetime.fromtimestamp(epoch_seconds, tz=tz)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def day_length(sunrise: int, sunset: int) -> str:
    seconds = max(sunset - sunrise, 0)
    hours, remainder = divmod(seconds, 3600)
    return f"{hours}h {remainder // 60}m"


def build_day_parts(window: Sequence[ForecastSample]) -> tuple[DayPart, ...]:
    if len(window) < MIN_SAMPLES_FOR_DAY_PARTS:
        return ()
    return tuple(
        DayPart(
            name=name,
            temp=window[index].main.temp,
            condition=primary_condition(window[index].weather).main,
        )
        for name, index in DAY_PART_SLOTS
    )


async def _abandon(task: asyncio.Task) -> None:
    if not task.done():
        task.cancel()
    await asyncio.wait([task])
    if not task.cancelled():
        # Retrieve the outcome so it is not reported as unhandled.
        task.exception()


class WeatherAggregator:
    """Merges current conditions, forecast and air quality into one snapshot."""

    def __init__(self, gateway: OpenWeatherGateway, *, logger=None) -> None:
        self._gateway = gateway
        self._log = logger or get_logger(__name__)

    async def fetch(self, city: str) -> WeatherSnapshot:
        city = (city or "").strip()
        if not city:
            raise CityNotFound(city)

        self._log.info("weather_fetch_started", city=city)
        forecast_task = asyncio.create_task(self._gateway.forecast(city))
        try:
            current = await self._gateway.current(city)
            forecast = await forecast_task
        except CityNotFound:
            await _abandon(forecast_task)
            self._log.info("city_not_found", city=city)
            raise
        except WeatherDashError as exc:
            await _abandon(forecast_task)
            self._log.warning("weather_upstream_failed", city=city, error=str(exc))
            raise
        except BaseException:
            await _abandon(forecast_task)
            raise

        aqi = await self._air_quality(current)
        try:
            return self._build(current, forecast.samples, aqi)
        except ValidationError as exc:
            raise MalformedResponse(f"Provider values out of range for {city!r}") from exc

    async def _air_quality(self, current: OpenWeatherCurrent) -> int:
        try:
            aqi = await self._gateway.air_quality(current.coord.lat, current.coord.lon)
        except WeatherDashError as exc:
            self._log.warning("aqi_degraded", city=current.name, error=str(exc), aqi=DEFAULT_AQI)
            return DEFAULT_AQI
        if aqi is None or aqi < 1:
            self._log.warning("aqi_degraded", city=current.name, error="no samples", aqi=DEFAULT_AQI)
            return DEFAULT_AQI
        return aqi

    @staticmethod
    def _build(current: OpenWeatherCurrent, samples: Sequence[ForecastSample], aqi: int) -> WeatherSnapshot:
        window = near_term_window(samples)
        max_temp, min_temp = temperature_bounds(window, current)
        conditions = primary_condition(current.weather)
        return WeatherSnapshot(
            city=current.name,
            country=current.sys.country,
            current_temp=current.main.temp,
            current_condition=conditions.main,
            description=conditions.description,
            humidity=current.main.humidity,
            wind_speed=current.wind.speed,
            aqi=aqi,
            max_temp=max_temp,
            min_temp=min_temp,
            visibility_km=current.visibility / 1000,
            sunrise=local_clock(current.sys.sunrise, current.timezone),
            sunset=local_clock(current.sys.sunset, current.timezone),
            day_length=day_length(current.sys.sunrise, current.sys.sunset),
            day_parts=build_day_parts(window),
        )
