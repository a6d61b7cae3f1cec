"""Core descriptors, request model and error taxonomy."""

from .api import API
from .endpoint import Endpoint
from .enums import AuthenticationStyle, CachePolicy, ContentType, HTTPMethod
from .exceptions import (
    AllLoadedError,
    BackendError,
    BackendErrorEnvelope,
    DecodeError,
    EmptyContentError,
    NoDataOrBadResponseError,
    PaginationError,
    PreconditionFailure,
    PulseError,
    RequestCancelledError,
    StreamingError,
    TransportError,
    TransportTimeoutError,
    UnknownContentError,
)
from .request import RequestContext, WireRequest

__all__ = [
    "API",
    "Endpoint",
    "WireRequest",
    "RequestContext",
    # Enums
    "AuthenticationStyle",
    "CachePolicy",
    "ContentType",
    "HTTPMethod",
    # Errors
    "PulseError",
    "TransportError",
    "TransportTimeoutError",
    "RequestCancelledError",
    "NoDataOrBadResponseError",
    "DecodeError",
    "BackendError",
    "BackendErrorEnvelope",
    "PreconditionFailure",
    "StreamingError",
    "UnknownContentError",
    "EmptyContentError",
    "PaginationError",
    "AllLoadedError",
]
