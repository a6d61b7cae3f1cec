"""Core enumerations shared by API, endpoint and transport layers.

Design Decisions:
    - String enums: values are the exact strings that go on the wire
    - CachePolicy is a hint only; transports decide what (if anything) to do with it
"""

from enum import Enum


class HTTPMethod(str, Enum):
    """HTTP verbs supported by endpoints."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"


class AuthenticationStyle(str, Enum):
    """How an API attaches its credential to outgoing requests."""

    NONE = "none"
    PARAMETER = "parameter"  # ?<key>=<value>
    HEADER = "header"  # <key>: <value>
    BEARER = "bearer"  # Authorization: Bearer <value>


class ContentType(str, Enum):
    """Common MIME types for request bodies.

    Endpoints accept any MIME string; these are the usual ones.
    """

    JSON = "application/json"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"
    TEXT = "text/plain"
    OCTET_STREAM = "application/octet-stream"


class CachePolicy(str, Enum):
    """Transport-level cache hint carried by every wire request."""

    USE_PROTOCOL = "use_protocol"
    RELOAD_IGNORING_CACHE = "reload_ignoring_cache"
    RETURN_CACHE_ELSE_LOAD = "return_cache_else_load"
    RETURN_CACHE_DONT_LOAD = "return_cache_dont_load"
