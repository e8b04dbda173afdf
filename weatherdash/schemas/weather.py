from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from weatherdash.schemas.advice import AdvicePayload


class DayPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Morning, Afternoon or Evening.")
    temp: float = Field(..., description="Sample temperature (C).")
    condition: str


class WeatherSnapshot(BaseModel):
    """Canonical weather record built once per request from provider responses."""

    model_config = ConfigDict(frozen=True)

    city: str = ""
    country: str = ""
    current_temp: float = Field(..., description="Air temperature (C).")
    current_condition: str
    description: str
    humidity: int = Field(..., ge=0, le=100, description="Relative humidity (%).")
    wind_speed: float = Field(..., description="Wind speed in the provider's unit (m/s for metric).")
    aqi: int = Field(1, ge=1, description="Provider air-quality index, 1 is best.")
    max_temp: float = Field(..., description="Highest temperature in the near-term window (C).")
    min_temp: float = Field(..., description="Lowest temperature in the near-term window (C).")
    visibility_km: float
    sunrise: str = Field(..., description="Local clock time, e.g. 6:30 AM.")
    sunset: str = Field(..., description="Local clock time, e.g. 6:15 PM.")
    day_length: str = Field(..., description="Formatted as 11h 45m.")
    day_parts: tuple[DayPart, ...] = ()


class CitySearchResult(BaseModel):
    name: str
    country: str = ""
    state: str | None = None


class WeatherAdviceResponse(BaseModel):
    weather: WeatherSnapshot
    advice: AdvicePayload
