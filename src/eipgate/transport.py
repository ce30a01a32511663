from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import httpx

from .constants import Limits
from .errors import RateLimitError
from .logging import GateLogger
from .models import RateLimitState


class RateLimitKind(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or ""
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""


def classify_rate_limit(response: httpx.Response) -> Optional[RateLimitKind]:
    """Tell quota exhaustion apart from abuse detection; None for anything else."""
    if response.status_code not in (403, 429):
        return None
    if response.headers.get("x-ratelimit-remaining") == "0":
        return RateLimitKind.PRIMARY
    if "secondary rate limit" in _error_message(response).lower():
        return RateLimitKind.SECONDARY
    if response.headers.get("retry-after") is not None:
        return RateLimitKind.SECONDARY
    return None


def retry_after_seconds(response: httpx.Response, now: Optional[float] = None) -> int:
    retry_after = response.headers.get("retry-after")
    if retry_after is not None:
        try:
            return max(0, int(retry_after))
        except ValueError:
            pass
    reset = response.headers.get("x-ratelimit-reset")
    if reset is not None:
        try:
            current = time.time() if now is None else now
            return max(0, int(reset) - int(current))
        except ValueError:
            pass
    return Limits.DEFAULT_RETRY_AFTER_SECONDS


class ThrottlePolicy:
    """Decides what happens when GitHub signals a rate limit."""

    def __init__(self, logger: GateLogger, max_retries: int = Limits.MAX_PRIMARY_RETRIES):
        self.logger = logger
        self.max_retries = max_retries

    def on_rate_limit(self, retry_after: int, method: str, url: str, retry_count: int) -> bool:
        self.logger.warning(
            f"Request quota exhausted for request {method or '<unknown>'} {url or '<unknown>'}",
            annotate=False,
            retry_count=retry_count,
        )
        if retry_count <= self.max_retries:
            self.logger.info("rate_limit_retry", retry_after=retry_after, retry_count=retry_count)
            return True
        return False

    def on_secondary_rate_limit(self, retry_after: int, method: str, url: str) -> None:
        self.logger.warning(
            f"Abuse detected for request {method or '<unknown>'} {url or '<unknown>'}",
            annotate=False,
            retry_after=retry_after,
        )


class RateLimitedTransport:
    """httpx client wrapper applying the throttle policy to every request."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: ThrottlePolicy,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.policy = policy
        self._sleep = sleep

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        state = RateLimitState()
        while True:
            response = await self.client.request(method, url, **kwargs)
            kind = classify_rate_limit(response)
            if kind is None:
                return response

            retry_after = retry_after_seconds(response)
            if kind is RateLimitKind.SECONDARY:
                self.policy.on_secondary_rate_limit(retry_after, method, url)
                raise RateLimitError(
                    f"Secondary rate limit hit for {method} {url}",
                    status_code=response.status_code,
                    secondary=True,
                )

            if not self.policy.on_rate_limit(retry_after, method, url, state.retry_count):
                raise RateLimitError(
                    f"Request quota exhausted for {method} {url}",
                    status_code=response.status_code,
                )
            await self._sleep(retry_after)
            state.retry_count += 1

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "RateLimitedTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
