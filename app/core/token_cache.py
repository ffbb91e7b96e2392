"""
Bearer token cache for the generation provider.

One TokenCache is created at startup and injected into every component that
needs account-level auth. Reads take a shared lock; refresh takes an exclusive
lock and re-checks the token before calling the IAM endpoint, so callers
that queued behind a refresh reuse its token.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Protocol

import httpx

from app.core.config import (
    IAM_GRANT_TYPE,
    IAM_HTTP_TIMEOUT,
    IAM_TOKEN_URL,
    TOKEN_REFRESH_MARGIN_SECONDS,
)

logger = logging.getLogger(__name__)

# Used when the IAM response carries neither "expiration" nor "expires_in".
DEFAULT_TOKEN_LIFETIME = 3600.0


class TokenRefreshError(Exception):
    """Raised when the IAM endpoint does not hand out a usable token."""


@dataclass(frozen=True)
class CachedToken:
    value: str
    expires_at: float  # epoch seconds

    def is_expired(self, now: float, margin: float = 0.0) -> bool:
        return now >= self.expires_at - margin


class TokenProvider(Protocol):
    async def get_token(self, secret: str) -> tuple[str, float]:
        """Exchange secret for (token, expires_at epoch seconds)."""
        ...


class ReadWriteLock:
    """
    Async lock with many concurrent readers or one writer.

    asyncio primitives belong to one event loop, so the condition is rebuilt
    the first time the lock is used from a different running loop.
    """

    def __init__(self) -> None:
        self._cond: asyncio.Condition | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._readers = 0
        self._writer = False

    def _condition(self) -> asyncio.Condition:
        loop = asyncio.get_running_loop()
        if self._cond is None or self._loop is not loop:
            self._cond = asyncio.Condition()
            self._loop = loop
            self._readers = 0
            self._writer = False
        return self._cond

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        cond = self._condition()
        async with cond:
            await cond.wait_for(lambda: not self._writer)
            self._readers += 1
        try:
            yield
        finally:
            async with cond:
                self._readers -= 1
                if self._readers == 0:
                    cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        cond = self._condition()
        async with cond:
            await cond.wait_for(lambda: not self._writer and self._readers == 0)
            self._writer = True
        try:
            yield
        finally:
            async with cond:
                self._writer = False
                cond.notify_all()


class IamTokenProvider:
    """Exchanges an IBM Cloud API key for a short-lived IAM bearer token."""

    def __init__(
        self,
        url: str = IAM_TOKEN_URL,
        timeout: float = IAM_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def get_token(self, secret: str) -> tuple[str, float]:
        logger.info("[token:iam] requesting token url=%s", self.url)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.url,
                data={"grant_type": IAM_GRANT_TYPE, "apikey": secret},
                headers={"Accept": "application/json"},
            )
        if response.status_code != 200:
            raise TokenRefreshError(
                f"IAM token request failed {response.status_code}: {response.text[:200]}"
            )
        try:
            data = response.json()
        except ValueError as e:
            raise TokenRefreshError("IAM token response is not JSON") from e
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise TokenRefreshError("No access token found in IAM response")
        if data.get("expiration"):
            expires_at = float(data["expiration"])
        else:
            expires_at = time.time() + float(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        logger.info("[token:iam] OUT token_len=%d expires_at=%.0f", len(token), expires_at)
        return token, expires_at


class TokenCache:
    """Shared, lazily refreshed bearer token for one secret."""

    def __init__(
        self,
        provider: TokenProvider,
        secret: str,
        *,
        refresh_margin: float = TOKEN_REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.provider = provider
        self.secret = secret
        self.refresh_margin = refresh_margin
        self._clock = clock
        self._token: CachedToken | None = None
        self._lock = ReadWriteLock()

    def _fresh(self) -> CachedToken | None:
        token = self._token
        if token is None or token.is_expired(self._clock(), self.refresh_margin):
            return None
        return token

    async def get(self) -> str:
        """Return a valid token, refreshing it first if it is missing or expired."""
        async with self._lock.read():
            token = self._fresh()
        if token is not None:
            return token.value

        async with self._lock.write():
            token = self._fresh()
            if token is not None:
                return token.value
            logger.info("[token:cache] refreshing expired or missing token")
            value, expires_at = await self.provider.get_token(self.secret)
            self._token = CachedToken(value=value, expires_at=expires_at)
            return value
