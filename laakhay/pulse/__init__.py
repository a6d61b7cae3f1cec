"""Laakhay Pulse - declarative async HTTP endpoints with typed decoding and streaming."""

from .core import (
    API,
    AllLoadedError,
    AuthenticationStyle,
    BackendError,
    BackendErrorEnvelope,
    CachePolicy,
    ContentType,
    DecodeError,
    EmptyContentError,
    Endpoint,
    HTTPMethod,
    NoDataOrBadResponseError,
    PaginationError,
    PreconditionFailure,
    PulseError,
    RequestCancelledError,
    RequestContext,
    StreamingError,
    TransportError,
    TransportTimeoutError,
    UnknownContentError,
    WireRequest,
)
from .runtime import (
    AiohttpTransport,
    ExecutorConfig,
    JSONLinesParser,
    Paginator,
    RequestExecutor,
    ResultStream,
    ServerSentEventsParser,
    SessionState,
    StreamingSession,
    StreamParser,
    StreamResult,
    Transport,
    TransportConfig,
    TransportResponse,
    decode_body,
    open_stream,
)
from .utils import to_json, to_json_bytes

__version__ = "0.1.0"

__all__ = [
    # Descriptors
    "API",
    "Endpoint",
    "WireRequest",
    "RequestContext",
    "AuthenticationStyle",
    "CachePolicy",
    "ContentType",
    "HTTPMethod",
    # Execution
    "RequestExecutor",
    "ExecutorConfig",
    "decode_body",
    "Paginator",
    # Streaming
    "StreamingSession",
    "StreamParser",
    "StreamResult",
    "ResultStream",
    "SessionState",
    "open_stream",
    "JSONLinesParser",
    "ServerSentEventsParser",
    # Transport
    "Transport",
    "TransportResponse",
    "TransportConfig",
    "AiohttpTransport",
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
    # Utilities
    "to_json",
    "to_json_bytes",
]
