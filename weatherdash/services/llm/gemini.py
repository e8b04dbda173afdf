from __future__ import annotations

from typing import Any, Sequence

import httpx

from weatherdash.core.config import DEFAULT_GEMINI_MODELS
from weatherdash.core.logging import get_logger
from weatherdash.schemas.weather import WeatherSnapshot
from weatherdash.services.llm.base import InsightProvider, clean_text


GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


def _candidate_text(payload: Any) -> str | None:
    try:
        return clean_text(payload["candidates"][0]["content"]["parts"][0]["text"])
    except (KeyError, IndexError, TypeError):
        return None


class GeminiProvider(InsightProvider):
    """Gemini backend that walks a list of models until one answers."""

    name = "Gemini (Multi-Model)"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None,
        models: Sequence[str] = DEFAULT_GEMINI_MODELS,
        timeout_seconds: float = 20.0,
        logger=None,
    ) -> None:
        self._client = client
        self._api_key = api_key or ""
        self._models = list(models)
        self._timeout = httpx.Timeout(timeout_seconds)
        self._log = logger or get_logger(__name__)

    async def generate(self, snapshot: WeatherSnapshot, prompt: str) -> str | None:
        if not self._api_key:
            return None

        body = {"contents": [{"parts": [{"text": prompt}]}]}
        for model in self._models:
            try:
                resp = await self._client.post(
                    GEMINI_URL.format(model=model),
                    params={"key": self._api_key},
                    json=body,
                    timeout=self._timeout,
                )
            except httpx.HTTPError as exc:
                self._log.warning("gemini_model_failed", model=model, error=type(exc).__name__)
                continue

            if resp.status_code != 200:
                self._log.warning("gemini_model_failed", model=model, status=resp.status_code)
                continue

            self._log.info("gemini_model_succeeded", model=model)
            try:
                return _candidate_text(resp.json())
            except ValueError:
                return None

        self._log.warning("gemini_models_exhausted", models=self._models)
        return None
