from __future__ import annotations

from pydantic import BaseModel, Field


class Conditions(BaseModel):
    main: str = ""
    description: str = ""


class MainData(BaseModel):
    temp: float
    temp_min: float
    temp_max: float
    humidity: int = 0


class Wind(BaseModel):
    speed: float = 0.0


class Coord(BaseModel):
    lat: float
    lon: float


class Sys(BaseModel):
    country: str = ""
    sunrise: int
    sunset: int


class OpenWeatherCurrent(BaseModel):
    name: str = ""
    main: MainData
    weather: list[Conditions] = Field(default_factory=list)
    wind: Wind = Field(default_factory=Wind)
    coord: Coord
    sys: Sys
    visibility: int = 0
    timezone: int = Field(0, description="Shift in seconds from UTC.")


class ForecastSample(BaseModel):
    main: MainData
    weather: list[Conditions] = Field(default_factory=list)


class OpenWeatherForecast(BaseModel):
    samples: list[ForecastSample] = Field(..., alias="list")


class AqiMain(BaseModel):
    aqi: int


class AirPollutionSample(BaseModel):
    main: AqiMain


class AirPollution(BaseModel):
    samples: list[AirPollutionSample] = Field(default_factory=list, alias="list")


class GeoCity(BaseModel):
    name: str
    country: str = ""
    state: str | None = None
