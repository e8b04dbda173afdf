from __future__ import annotations

from abc import ABC, abstractmethod

from weatherdash.schemas.weather import WeatherSnapshot


class InsightProvider(ABC):
    """One language-model backend able to turn a prompt into advice text."""

    name: str

    @abstractmethod
    async def generate(self, snapshot: WeatherSnapshot, prompt: str) -> str | None:
        """Return raw model text, or None when this backend is unusable right now."""


def clean_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None
