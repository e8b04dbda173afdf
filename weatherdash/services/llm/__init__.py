from __future__ import annotations

import httpx

from weatherdash.core.config import Settings
from weatherdash.services.llm.base import InsightProvider
from weatherdash.services.llm.gemini import GeminiProvider
from weatherdash.services.llm.openai_compat import CerebrasProvider, GroqProvider, OpenAICompatibleProvider


def build_providers(settings: Settings, client: httpx.AsyncClient) -> list[InsightProvider]:
    """Providers in priority order. Backends without a key stay in the list and answer None."""
    return [
        GeminiProvider(
            client,
            api_key=settings.gemini_api_key,
            models=settings.gemini_models,
            timeout_seconds=settings.llm_timeout_seconds,
        ),
        GroqProvider(
            api_key=settings.groq_api_key,
            model=settings.groq_model,
            timeout_seconds=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
            http_client=client,
        ),
        CerebrasProvider(
            api_key=settings.cerebras_api_key,
            model=settings.cerebras_model,
            timeout_seconds=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
            http_client=client,
        ),
    ]


__all__ = [
    "CerebrasProvider",
    "GeminiProvider",
    "GroqProvider",
    "InsightProvider",
    "OpenAICompatibleProvider",
    "build_providers",
]
