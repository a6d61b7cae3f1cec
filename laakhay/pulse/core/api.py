"""API descriptor: a base address plus an authentication strategy.

Many endpoints share one ``API`` value. It is a frozen record; the only
behaviour it owns is decorating an outgoing request with its credential.

Example:
    >>> weather = API("https://weather.example.com")
    >>> secured = weather.authenticated(AuthenticationStyle.BEARER, "s3cr3t")
    >>> secured.decorate(WireRequest("https://weather.example.com/today")).headers
    {'Authorization': 'Bearer s3cr3t'}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from yarl import URL

from .enums import AuthenticationStyle
from .request import WireRequest

logger = logging.getLogger(__name__)

DEFAULT_KEY_NAME = "key"


@dataclass(frozen=True)
class API:
    """Base address and credential shared by a family of endpoints.

    Attributes:
        base_address: Origin/prefix every endpoint path is appended to
        authentication_style: How the credential is attached
        authentication_key_name: Query key (PARAMETER) or header name (HEADER);
            ignored for BEARER, which always uses ``Authorization``
        authentication_key_value: The secret; when empty, decoration is a no-op
    """

    base_address: str
    authentication_style: AuthenticationStyle = AuthenticationStyle.NONE
    authentication_key_name: str = DEFAULT_KEY_NAME
    authentication_key_value: str = ""

    @property
    def base_url(self) -> URL | None:
        """Parsed base address, or None when it is not an absolute http(s) URL."""
        try:
            url = URL(self.base_address)
        except (TypeError, ValueError):
            return None
        if not url.is_absolute() or url.scheme not in ("http", "https"):
            return None
        return url

    def authenticated(
        self,
        style: AuthenticationStyle,
        value: str,
        key_name: str | None = None,
    ) -> API:
        """Return a copy using ``style`` with credential ``value``."""
        return replace(
            self,
            authentication_style=style,
            authentication_key_value=value,
            authentication_key_name=key_name or self.authentication_key_name,
        )

    def decorate(self, request: WireRequest) -> WireRequest:
        """Attach this API's credential to ``request``.

        Returns a new request; the input is never modified. Call once per
        request: decorating twice attaches the credential twice for
        PARAMETER style.
        """
        if self.authentication_style == AuthenticationStyle.NONE:
            return request
        if not self.authentication_key_value:
            logger.warning(
                f"Authentication attempted against {self.base_address} without a credential; "
                "set authentication_key_value"
            )
            return request

        style = self.authentication_style
        if style == AuthenticationStyle.PARAMETER:
            separator = "&" if "?" in request.url else "?"
            pair = f"{self.authentication_key_name}={self.authentication_key_value}"
            return request.with_url(f"{request.url}{separator}{pair}")
        if style == AuthenticationStyle.HEADER:
            return request.with_header(self.authentication_key_name, self.authentication_key_value)
        if style == AuthenticationStyle.BEARER:
            return request.with_header("Authorization", f"Bearer {self.authentication_key_value}")
        return request
