from __future__ import annotations

from weatherdash.schemas.advice import AdvicePayload
from weatherdash.schemas.weather import DayPart, WeatherSnapshot

__all__ = ["AdvicePayload", "DayPart", "WeatherSnapshot"]
