"""Wire request model.

A ``WireRequest`` is the fully resolved, ready-to-send request derived from an
``Endpoint``. It is produced fresh for every call and never mutated; the
``with_*`` helpers return copies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from .enums import CachePolicy, HTTPMethod

DEFAULT_TIMEOUT = 30.0


def merge_header(headers: Mapping[str, str], name: str, value: str) -> dict[str, str]:
    """Return a copy of ``headers`` with ``name`` set to ``value``.

    Header names are case-insensitive, so any existing spelling of ``name`` is
    replaced rather than duplicated.
    """
    lowered = name.lower()
    merged = {k: v for k, v in headers.items() if k.lower() != lowered}
    merged[name] = value
    return merged


@dataclass(frozen=True)
class WireRequest:
    """Transport-level request handed to executors and streaming sessions."""

    url: str
    method: HTTPMethod = HTTPMethod.GET
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    cache_policy: CachePolicy = CachePolicy.USE_PROTOCOL
    body: bytes | None = None

    def with_url(self, url: str) -> WireRequest:
        return replace(self, url=url)

    def with_header(self, name: str, value: str) -> WireRequest:
        return replace(self, headers=merge_header(self.headers, name, value))

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class RequestContext:
    """Diagnostic snapshot of the request an error belongs to."""

    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_request(cls, request: WireRequest) -> RequestContext:
        return cls(url=request.url, method=request.method.value, headers=dict(request.headers))

    def __str__(self) -> str:
        return f"{self.method} {self.url}"
