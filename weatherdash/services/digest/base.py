from __future__ import annotations

from typing import Protocol

from weatherdash.schemas.advice import AdvicePayload
from weatherdash.schemas.weather import WeatherSnapshot


class DigestDispatcher(Protocol):
    async def send(self, recipient: str, snapshot: WeatherSnapshot, advice: AdvicePayload) -> bool:
        """Deliver one digest. Returns False on transport failure instead of raising."""
        ...
