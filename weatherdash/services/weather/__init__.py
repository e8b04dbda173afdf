from __future__ import annotations

from weatherdash.services.weather.aggregator import WeatherAggregator
from weatherdash.services.weather.gateway import OpenWeatherGateway

__all__ = ["OpenWeatherGateway", "WeatherAggregator"]
