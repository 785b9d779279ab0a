"""Resilient HTTP client for the upstream market data API.

One job: return a fresh parsed payload or fail cleanly with
``FetchExhausted``. Deciding what to show the user instead is left to the
source operations built on top of it.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from marketdash.core.config import settings
from marketdash.core.errors import (
    FetchExhausted,
    MalformedResponse,
    RateLimited,
    RequestTimeout,
    TransportError,
    UpstreamStatusError,
)
from marketdash.core.logging import get_logger

log = get_logger("ingestion.client")

RETRYABLE = (TransportError, RequestTimeout)

Sleeper = Callable[[float], Awaitable[None]]


class FetchConfig(BaseModel):
    """Retry policy: up to ``max_retries + 1`` attempts, linear backoff."""

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default_factory=lambda: settings.FETCH_MAX_RETRIES, ge=0)
    timeout_ms: int = Field(default_factory=lambda: settings.FETCH_TIMEOUT_MS, gt=0)
    backoff_base_ms: int = Field(default_factory=lambda: settings.FETCH_BACKOFF_BASE_MS, ge=0)

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000

    def backoff_s(self, attempt_index: int) -> float:
        """Delay before retry number ``attempt_index`` (starting at 1)."""
        return self.backoff_base_ms * attempt_index / 1000


class ResilientFetchClient:
    """GET JSON with a per-attempt timeout and bounded linear-backoff retry.

    Timeouts, transport failures and HTTP 429 are retried. A body that is not
    JSON raises ``MalformedResponse`` immediately. When every attempt fails the
    call raises ``FetchExhausted`` carrying the last cause; raw transport
    errors never escape.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[FetchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.base_url = (base_url or settings.COINGECKO_BASE_URL).rstrip("/")
        self.config = config or FetchConfig()
        self._transport = transport
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._sleep = sleep

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        base_s = self.config.backoff_base_ms / 1000
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.attempts),
            wait=wait_incrementing(start=base_s, increment=base_s),
            retry=retry_if_exception_type(RETRYABLE),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=False,
        )

        payload: Any = None
        try:
            async for attempt in retrying:
                with attempt:
                    payload = await self._attempt(url, params, attempt.retry_state.attempt_number)
        except RetryError as exc:
            cause = exc.last_attempt.exception()
            log.error(f"All {self.config.attempts} fetch attempts failed for {url}: {cause}")
            raise FetchExhausted(url, exc.last_attempt.attempt_number, cause) from cause
        return payload

    async def _attempt(self, url: str, params: Optional[Dict[str, Any]], attempt_number: int) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_s,
                transport=self._transport,
                headers=self._headers,
            ) as client:
                response = await asyncio.wait_for(
                    client.get(url, params=params),
                    timeout=self.config.timeout_s,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            log.warning(f"Attempt {attempt_number}/{self.config.attempts} timed out for {url}")
            raise RequestTimeout(f"Request timeout after {self.config.timeout_ms}ms for {url}") from exc
        except httpx.TransportError as exc:
            log.warning(f"Attempt {attempt_number}/{self.config.attempts} failed for {url}: {exc}")
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code == 429:
            log.warning(f"Attempt {attempt_number}/{self.config.attempts} rate limited for {url}")
            raise RateLimited(url)
        if response.is_error:
            log.warning(f"Attempt {attempt_number}/{self.config.attempts} got HTTP {response.status_code} for {url}")
            raise UpstreamStatusError(response.status_code, url)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Response from {url} is not valid JSON") from exc

    def _log_retry(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        log.info(f"Retry attempt {retry_state.attempt_number} scheduled in {delay:.2f}s")
