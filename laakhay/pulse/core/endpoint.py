"""Endpoint descriptor: one logical call against an ``API``.

Architecture:
    Endpoints are plain frozen records built by ordinary factory functions,
    typically grouped next to the ``API`` they belong to:

        >>> weather = API("https://weather.example.com")
        >>> def forecast(location: str) -> Endpoint:
        ...     return Endpoint(weather, f"/api/forecast/{location}")

    ``build_request`` turns an endpoint into a ``WireRequest``; it performs no
    I/O. The fluent helpers (``using``, ``with_headers``...) return modified
    copies, so a shared endpoint is never changed under another caller.

Design Decisions:
    - Path is percent-encoded with the URL-query-allowed character set, so a
      path may carry its own ``?query`` part
    - Pagination appends ``?limit=&offset=`` verbatim; endpoints that already
      carry a query string must merge pagination themselves
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from urllib.parse import quote

from .api import API
from .enums import CachePolicy, ContentType, HTTPMethod
from .request import DEFAULT_TIMEOUT, WireRequest, merge_header

# Characters allowed unescaped in a URL query component.
QUERY_SAFE_CHARACTERS = "!$&'()*+,-./:;=?@_~"


@dataclass(frozen=True)
class Endpoint:
    """Declarative description of a single network call."""

    api: API
    path: str
    method: HTTPMethod = HTTPMethod.GET
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    cache_policy: CachePolicy = CachePolicy.USE_PROTOCOL
    content_type: str = ContentType.JSON.value
    body: bytes | None = None

    @property
    def url(self) -> str:
        """Base address joined with the percent-encoded path.

        Falls back to the bare base address when the path cannot be encoded.
        """
        try:
            escaped = quote(self.path, safe=QUERY_SAFE_CHARACTERS)
        except UnicodeEncodeError:
            return self.api.base_address
        return f"{self.api.base_address}{escaped}"

    def build_request(self, limit: int | None = None, offset: int | None = None) -> WireRequest:
        """Resolve this endpoint into an authenticated ``WireRequest``.

        Args:
            limit: Page size; only applied together with ``offset``
            offset: Page offset; only applied together with ``limit``

        Returns:
            Fresh request decorated by the owning API
        """
        target_url = self.url
        if limit is not None and offset is not None:
            target_url = f"{target_url}?limit={limit}&offset={offset}"

        request = WireRequest(
            url=target_url,
            method=self.method,
            headers=merge_header(self.headers, "Content-Type", _content_type_value(self.content_type)),
            timeout=self.timeout,
            cache_policy=self.cache_policy,
            body=self.body,
        )
        return self.api.decorate(request)

    # Fluent copy helpers

    def using(self, method: HTTPMethod | str) -> Endpoint:
        if not isinstance(method, HTTPMethod):
            method = HTTPMethod(method.upper())
        return replace(self, method=method)

    def with_headers(self, headers: Mapping[str, str]) -> Endpoint:
        return replace(self, headers=dict(headers))

    def with_timeout(self, timeout: float) -> Endpoint:
        return replace(self, timeout=timeout)

    def with_cache_policy(self, cache_policy: CachePolicy) -> Endpoint:
        return replace(self, cache_policy=cache_policy)

    def setting_content_type(self, content_type: ContentType | str) -> Endpoint:
        return replace(self, content_type=_content_type_value(content_type))

    def attaching(self, body: bytes) -> Endpoint:
        return replace(self, body=body)

    def adding_query_items(self, items: Mapping[str, str] | Iterable[tuple[str, str]]) -> Endpoint:
        """Append query items to the path, after any it already carries.

        Names and values are joined as-is; ``url`` percent-encodes them later,
        so they must not contain a literal ``&``, ``=`` or ``#``.
        """
        pairs = list(items.items()) if isinstance(items, Mapping) else list(items)
        if not pairs:
            return self
        query = "&".join(f"{name}={value}" for name, value in pairs)
        if self.path.endswith(("?", "&")):
            separator = ""
        else:
            separator = "&" if "?" in self.path else "?"
        return replace(self, path=f"{self.path}{separator}{query}")


def _content_type_value(content_type: ContentType | str) -> str:
    return content_type.value if isinstance(content_type, ContentType) else content_type
