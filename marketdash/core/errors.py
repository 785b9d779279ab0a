"""Error taxonomy for upstream market data access.

Retryable failures (``TransportError``, ``RequestTimeout``, ``RateLimited``) are
recovered inside the resilient fetch client. ``FetchExhausted`` and
``MalformedResponse`` are terminal and are recovered one layer up by the
source operations, which substitute synthetic data.
"""

from __future__ import annotations

from typing import Optional


class MarketDataError(Exception):
    """Base class for market data failures."""


class TransportError(MarketDataError):
    """Network, DNS or non-success HTTP failure."""


class UpstreamStatusError(TransportError):
    """Upstream answered with a non-success status code."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"API error: {status_code} for {url}")
        self.status_code = status_code
        self.url = url


class RateLimited(TransportError):
    """HTTP 429 from upstream."""

    def __init__(self, url: str):
        super().__init__(f"API rate limit exceeded for {url}")
        self.url = url


class RequestTimeout(MarketDataError, TimeoutError):
    """A single attempt exceeded its timeout."""


class FetchExhausted(MarketDataError):
    """Every attempt failed; ``cause`` holds the last underlying error."""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException]):
        super().__init__(f"All {attempts} fetch attempts failed for {url}: {cause}")
        self.url = url
        self.attempts = attempts
        self.cause = cause


class MalformedResponse(MarketDataError):
    """Payload did not match the expected shape. Never retried."""


class InvalidFilterRange(ValueError):
    """A filter range was submitted with min greater than max."""

    def __init__(self, field: str, minimum: float, maximum: float):
        super().__init__(f"{field}: min {minimum} is greater than max {maximum}")
        self.field = field
        self.minimum = minimum
        self.maximum = maximum
