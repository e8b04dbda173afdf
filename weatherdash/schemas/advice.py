from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


FALLBACK_OUTFIT = "Wear comfortable clothes suitable for the weather."
NO_HAZARDS = "No specific hazards."


def fallback_summary(city: str) -> str:
    return f"Enjoy the atmosphere in {city}."


class AdvicePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    outfit: str = FALLBACK_OUTFIT
    safety: str = NO_HAZARDS

    @classmethod
    def fallback(cls, city: str) -> "AdvicePayload":
        return cls(summary=fallback_summary(city), outfit=FALLBACK_OUTFIT, safety=NO_HAZARDS)

    @classmethod
    def from_model_output(cls, data: dict[str, Any], city: str) -> "AdvicePayload":
        """Build a payload from parsed model JSON, substituting defaults for
        missing, blank or non-string fields."""
        defaults = cls.fallback(city)
        values: dict[str, str] = {}
        for field in ("summary", "outfit", "safety"):
            raw = data.get(field)
            if isinstance(raw, str) and raw.strip():
                values[field] = raw.strip()
            else:
                values[field] = getattr(defaults, field)
        return cls(**values)
