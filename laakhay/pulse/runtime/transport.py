"""Transport capability and its aiohttp implementation.

Architecture:
    Executors and streaming sessions only talk to the ``Transport`` protocol:
    one call for a full request/response exchange, one for a chunked body.
    Sockets, TLS and connection pooling belong to the transport (aiohttp's
    ``ClientSession`` here); the layers above add decoding and classification.

Design Decisions:
    - One lazily created ``ClientSession`` per transport, recreated if closed
    - Timeouts are per request (``WireRequest.timeout``), not per session
    - Transport failures are translated into ``TransportError`` subclasses at
      this boundary so callers never see aiohttp exception types
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import aiohttp

from ..core.enums import CachePolicy
from ..core.exceptions import (
    NoDataOrBadResponseError,
    TransportError,
    TransportTimeoutError,
)
from ..core.request import RequestContext, WireRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and body of a completed exchange."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299


@runtime_checkable
class Transport(Protocol):
    """What the executor and streaming session need from the network layer."""

    async def send(self, request: WireRequest) -> TransportResponse | None:
        """Perform one exchange.

        Raises:
            TransportError: Connection, DNS, TLS or timeout failure
        """
        ...

    def stream(self, request: WireRequest) -> AsyncIterator[bytes]:
        """Yield raw body chunks in arrival order until the body ends.

        Raises:
            TransportError: Connection, DNS, TLS or timeout failure
        """
        ...

    async def close(self) -> None:
        ...


@dataclass(frozen=True)
class TransportConfig:
    limit: int = 100  # total pooled connections
    limit_per_host: int = 0  # 0 = unlimited
    trust_env: bool = False  # honour HTTP(S)_PROXY etc.
    user_agent: str | None = None


class AiohttpTransport:
    """``Transport`` backed by a shared ``aiohttp.ClientSession``."""

    def __init__(self, config: TransportConfig | None = None) -> None:
        self._conf = config or TransportConfig()
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            headers = {"User-Agent": self._conf.user_agent} if self._conf.user_agent else None
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(
                    limit=self._conf.limit,
                    limit_per_host=self._conf.limit_per_host,
                ),
                headers=headers,
                trust_env=self._conf.trust_env,
            )
        return self._session

    def _request_kwargs(self, request: WireRequest, *, streaming: bool = False) -> dict:
        headers = dict(request.headers)
        if request.cache_policy == CachePolicy.RELOAD_IGNORING_CACHE and request.header(
            "Cache-Control"
        ) is None:
            headers["Cache-Control"] = "no-cache"
        if streaming:
            # Long-lived bodies: bound idle time, not total duration.
            timeout = aiohttp.ClientTimeout(
                total=None, sock_connect=request.timeout, sock_read=request.timeout
            )
        else:
            timeout = aiohttp.ClientTimeout(total=request.timeout)
        return {
            "method": request.method.value,
            "url": request.url,
            "headers": headers,
            "data": request.body,
            "timeout": timeout,
        }

    async def send(self, request: WireRequest) -> TransportResponse:
        logger.debug(f"{request.method.value} {request.url}")
        try:
            async with self.session.request(**self._request_kwargs(request)) as response:
                body = await response.read()
                logger.debug(f"{request.method.value} {request.url} -> {response.status}")
                return TransportResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=body,
                )
        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(
                f"Request timed out after {request.timeout}s",
                e,
                request=RequestContext.from_request(request),
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                str(e) or type(e).__name__, e, request=RequestContext.from_request(request)
            ) from e

    async def stream(self, request: WireRequest) -> AsyncIterator[bytes]:
        logger.debug(f"stream {request.method.value} {request.url}")
        context = RequestContext.from_request(request)
        try:
            async with self.session.request(
                **self._request_kwargs(request, streaming=True)
            ) as response:
                if not 200 <= response.status <= 299:
                    raise NoDataOrBadResponseError(
                        f"Stream opened with status {response.status}",
                        status_code=response.status,
                        request=context,
                    )
                async for chunk in response.content.iter_any():
                    yield chunk
        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(
                f"Stream timed out after {request.timeout}s", e, request=context
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(str(e) or type(e).__name__, e, request=context) from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> AiohttpTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
