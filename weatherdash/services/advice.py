from __future__ import annotations

import json
from typing import Sequence

from weatherdash.core.logging import get_logger
from weatherdash.schemas.advice import NO_HAZARDS, AdvicePayload
from weatherdash.schemas.weather import WeatherSnapshot
from weatherdash.services.llm.base import InsightProvider


DEFAULT_AQI_MASK_THRESHOLD = 150

RAIN_WORDS = ("rain", "drizzle", "thunderstorm", "shower")
SUN_WORDS = ("clear", "sunny")

UMBRELLA_HINT = "Suggest an umbrella or raincoat."
MASK_HINT = "Suggest wearing a mask."
SUN_HINT = "Suggest sunscreen and sunglasses."


def safety_hints(snapshot: WeatherSnapshot, *, aqi_mask_threshold: int = DEFAULT_AQI_MASK_THRESHOLD) -> list[str]:
    """Safety guidance that applies to this snapshot, in rule order."""
    condition = f"{snapshot.current_condition} {snapshot.description}".casefold()
    hints: list[str] = []
    if any(word in condition for word in RAIN_WORDS):
        hints.append(UMBRELLA_HINT)
    if snapshot.aqi > aqi_mask_threshold:
        hints.append(MASK_HINT)
    if any(word in condition for word in SUN_WORDS):
        hints.append(SUN_HINT)
    return hints or [NO_HAZARDS]


def build_prompt(snapshot: WeatherSnapshot, *, aqi_mask_threshold: int = DEFAULT_AQI_MASK_THRESHOLD) -> str:
    hints = " ".join(safety_hints(snapshot, aqi_mask_threshold=aqi_mask_threshold))
    return (
        "Role: You are a friendly, practical style companion giving everyday weather advice.\n"
        f"Context: {snapshot.city}, {snapshot.country}.\n"
        f"Data: Temp {snapshot.current_temp:.0f}°C, {snapshot.current_condition}. "
        f"Humidity {snapshot.humidity}%. Wind {snapshot.wind_speed}m/s. AQI {snapshot.aqi}.\n"
        "\n"
        "Task: Reply with ONLY a flat JSON object (no nesting, no prose) with the keys "
        "'summary', 'outfit' and 'safety'.\n"
        "\n"
        "Guidelines:\n"
        "- 'summary': A warm, human summary of how the weather feels (max 2 sentences).\n"
        "- 'outfit': Comfortable smart-casual or streetwear for daily life. Skip luxury items "
        "unless the cold is extreme.\n"
        "- 'safety': Practical tips.\n"
        "   * IF Rain/Drizzle -> Suggest an umbrella or raincoat.\n"
        f"   * IF AQI > {aqi_mask_threshold} -> Suggest a mask.\n"
        "   * IF Clear/Sunny -> Suggest sunscreen and sunglasses.\n"
        f"   * ELSE -> '{NO_HAZARDS}'\n"
        f"Applicable now: {hints}\n"
        "\n"
        "Example output:\n"
        '{"summary": "It is a warm and humid day, so stick to breathable fabrics.", '
        '"outfit": "Cotton tee with lightweight trousers or shorts.", '
        '"safety": "Stay hydrated and seek shade."}'
    )


def extract_json(text: str) -> str:
    """Cut the outermost ``{...}`` span out of model output.

    Surrounding prose and code fences are dropped. Text without a usable
    brace pair comes back stripped so the caller's parse step rejects it.
    """
    if not text:
        return "{}"
    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        return text[start : end + 1]
    return text.strip()


class AdviceService:
    """Tries each provider in order; the first parseable JSON answer wins."""

    def __init__(
        self,
        providers: Sequence[InsightProvider],
        *,
        aqi_mask_threshold: int = DEFAULT_AQI_MASK_THRESHOLD,
        logger=None,
    ) -> None:
        self._providers = list(providers)
        self._aqi_mask_threshold = aqi_mask_threshold
        self._log = logger or get_logger(__name__)

    async def advise(self, snapshot: WeatherSnapshot) -> AdvicePayload:
        prompt = build_prompt(snapshot, aqi_mask_threshold=self._aqi_mask_threshold)

        for provider in self._providers:
            name = getattr(provider, "name", type(provider).__name__)
            self._log.info("provider_attempt", provider=name)
            try:
                text = await provider.generate(snapshot, prompt)
            except Exception as exc:
                self._log.error("provider_failed", provider=name, error=str(exc))
                continue

            if not isinstance(text, str) or not text.strip():
                self._log.info("provider_failed", provider=name, error="no output")
                continue

            try:
                data = json.loads(extract_json(text))
            except ValueError:
                self._log.warning("provider_unparseable", provider=name)
                continue
            if not isinstance(data, dict):
                self._log.warning("provider_unparseable", provider=name)
                continue

            self._log.info("provider_succeeded", provider=name)
            return AdvicePayload.from_model_output(data, snapshot.city)

        self._log.warning("advice_fallback", city=snapshot.city, providers=len(self._providers))
        return AdvicePayload.fallback(snapshot.city)
