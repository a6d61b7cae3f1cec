"""Request execution and streaming runtime."""

from .executor import ExecutorConfig, RequestExecutor, decode_body, resolve_request
from .paginator import Paginator
from .parsers import JSONLinesParser, ServerSentEventsParser
from .streaming import (
    ResultStream,
    SessionState,
    StreamingSession,
    StreamParser,
    StreamResult,
    open_stream,
)
from .transport import AiohttpTransport, Transport, TransportConfig, TransportResponse

__all__ = [
    "RequestExecutor",
    "ExecutorConfig",
    "decode_body",
    "resolve_request",
    "Paginator",
    "StreamingSession",
    "StreamParser",
    "StreamResult",
    "ResultStream",
    "SessionState",
    "open_stream",
    "JSONLinesParser",
    "ServerSentEventsParser",
    "Transport",
    "TransportResponse",
    "TransportConfig",
    "AiohttpTransport",
]
