from __future__ import annotations

from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from weatherdash.core.config import Settings
from weatherdash.core.errors import NetworkFailure


RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})

_client: Optional[httpx.AsyncClient] = None


class _RetryableStatus(Exception):
    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"upstream status {response.status_code}")
        self.response = response


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """One pooled client per process, shared by the weather gateway and the AI backends."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds, connect=min(settings.http_timeout_seconds, 5.0)),
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
        headers={"User-Agent": "weatherdash/0.1"},
    )


def set_http_client(client: httpx.AsyncClient | None) -> None:
    global _client
    _client = client


def get_http_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client not initialized; the app lifespan has not run")
    return _client


async def get_with_retries(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any],
    retries: int,
    backoff_seconds: float,
    timeout: float | None = None,
) -> httpx.Response:
    """GET with exponential backoff on 429/5xx and transport errors.

    Returns the last response once retries run out on a retryable status.
    Transport errors and timeouts that survive every attempt become
    ``NetworkFailure``.
    """
    kwargs: dict[str, Any] = {"params": params}
    if timeout is not None:
        kwargs["timeout"] = timeout

    retrying = AsyncRetrying(
        wait=wait_exponential(multiplier=backoff_seconds, max=5),
        stop=stop_after_attempt(retries + 1),
        retry=retry_if_exception_type((_RetryableStatus, httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                resp = await client.get(url, **kwargs)
                if resp.status_code in RETRYABLE_STATUS:
                    raise _RetryableStatus(resp)
                return resp
    except _RetryableStatus as exc:
        return exc.response
    except httpx.HTTPError as exc:
        raise NetworkFailure(f"Weather upstream error: {type(exc).__name__}") from exc
    raise NetworkFailure("Weather upstream produced no response")
