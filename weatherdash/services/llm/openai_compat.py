from __future__ import annotations

import httpx
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from weatherdash.core.logging import get_logger
from weatherdash.schemas.weather import WeatherSnapshot
from weatherdash.services.llm.base import InsightProvider, clean_text


class OpenAICompatibleProvider(InsightProvider):
    """Backend speaking the OpenAI chat-completions protocol."""

    base_url: str

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        timeout_seconds: float = 20.0,
        max_retries: int = 0,
        http_client: httpx.AsyncClient | None = None,
        logger=None,
    ) -> None:
        self.model = model
        self._log = logger or get_logger(__name__)
        self._llm: ChatOpenAI | None = None
        if api_key:
            self._llm = ChatOpenAI(
                model=model,
                api_key=api_key,
                base_url=self.base_url,
                timeout=timeout_seconds,
                max_retries=max_retries,
                http_async_client=http_client,
            )

    async def generate(self, snapshot: WeatherSnapshot, prompt: str) -> str | None:
        if self._llm is None:
            return None

        try:
            response = await self._llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as exc:
            self._log.warning("chat_completion_failed", provider=self.name, model=self.model, error=type(exc).__name__)
            return None

        return clean_text(getattr(response, "content", None))


class GroqProvider(OpenAICompatibleProvider):
    name = "Groq"
    base_url = "https://api.groq.com/openai/v1"


class CerebrasProvider(OpenAICompatibleProvider):
    name = "Cerebras"
    base_url = "https://api.cerebras.ai/v1"
