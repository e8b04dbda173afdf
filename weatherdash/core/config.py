from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_GEMINI_MODELS = [
    "gemini-2.0-flash-exp",
    "gemini-2.5-flash-lite",
    "gemini-1.5-flash",
]


DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def _split_list(raw: str) -> list[str]:
    parsed = raw.strip()
    if parsed.startswith("["):
        try:
            return [str(x).strip() for x in json.loads(parsed) if str(x).strip()]
        except ValueError:
            pass
    return [s.strip() for s in parsed.split(",") if s.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WEATHERDASH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    http_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)
    http_retries: int = Field(default=2, ge=0, le=5)
    http_retry_backoff_seconds: float = Field(default=0.35, ge=0.0, le=5.0)

    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    # OpenWeather
    openweather_api_key: str | None = Field(default=None)
    openweather_base_url: str = Field(default="https://api.openweathermap.org")
    openweather_units: str = Field(default="metric")
    search_ttl_seconds: int = Field(default=3600, ge=60, le=86400)

    # AI backends, a missing key disables that backend
    gemini_api_key: str | None = Field(default=None)
    gemini_models: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_GEMINI_MODELS))
    groq_api_key: str | None = Field(default=None)
    groq_model: str = Field(default="llama-3.3-70b-versatile")
    cerebras_api_key: str | None = Field(default=None)
    cerebras_model: str = Field(default="llama3.1-8b")
    llm_timeout_seconds: float = Field(default=20.0, ge=1.0, le=120.0)
    llm_max_retries: int = Field(default=0, ge=0, le=5)
    aqi_mask_threshold: int = Field(default=150, ge=1)

    # Digest email
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587)
    smtp_username: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    email_from: str | None = Field(default=None)

    @field_validator("cors_origins", "gemini_models", mode="before")
    @classmethod
    def _split_lists(cls, value: Any) -> Any:
        # Allow list values as JSON array or comma-separated string.
        if isinstance(value, str):
            return _split_list(value)
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
