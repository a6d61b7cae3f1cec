"""Custom exception hierarchy.

Single-exchange failures are raised to the caller; streaming failures are
delivered as failure events. Every error the library raises derives from
``PulseError`` and may carry the ``RequestContext`` it belongs to.
"""

from __future__ import annotations

import asyncio

from pydantic import BaseModel

from .request import RequestContext


class BackendErrorEnvelope(BaseModel):
    """Minimal ``{"error": "..."}`` payload some backends return on failure."""

    error: str

    @property
    def is_record_not_found(self) -> bool:
        return self.error == "record not found"


class PulseError(Exception):
    """Base exception for all library errors."""

    def __init__(self, message: str, *, request: RequestContext | None = None) -> None:
        super().__init__(message)
        self.request = request


class TransportError(PulseError):
    """Connection, DNS, TLS, timeout or cancellation failure.

    Not retried by the library. The original exception is kept on
    ``underlying`` (and chained via ``raise ... from``).
    """

    def __init__(
        self,
        message: str,
        underlying: BaseException | None = None,
        *,
        request: RequestContext | None = None,
    ) -> None:
        super().__init__(message, request=request)
        self.underlying = underlying


class TransportTimeoutError(TransportError):
    """The request's own timeout expired before the exchange finished."""

    pass


class RequestCancelledError(TransportError, asyncio.CancelledError):
    """The in-flight exchange was cancelled.

    Also an ``asyncio.CancelledError`` so task cancellation still unwinds
    normally through code that only knows about asyncio. Because it is a
    ``TransportError`` it is also an ``Exception``: a broad ``except Exception``
    catches it, and such handlers must re-raise it to keep the task cancelled.
    """

    pass


class NoDataOrBadResponseError(PulseError):
    """The transport finished but produced no usable response or body."""

    def __init__(
        self,
        message: str = "No data or bad response",
        *,
        status_code: int | None = None,
        request: RequestContext | None = None,
    ) -> None:
        super().__init__(message, request=request)
        self.status_code = status_code


class DecodeError(PulseError):
    """Body received but it does not match the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        body_text: str = "",
        underlying: BaseException | None = None,
        request: RequestContext | None = None,
    ) -> None:
        super().__init__(message, request=request)
        self.body_text = body_text
        self.underlying = underlying


class BackendError(PulseError):
    """The body did not decode, but matched the backend error envelope."""

    def __init__(
        self,
        envelope: BackendErrorEnvelope,
        *,
        status_code: int | None = None,
        request: RequestContext | None = None,
    ) -> None:
        super().__init__(envelope.error, request=request)
        self.envelope = envelope
        self.status_code = status_code

    @property
    def message(self) -> str:
        return self.envelope.error

    @property
    def is_record_not_found(self) -> bool:
        return self.envelope.is_record_not_found


class PreconditionFailure(PulseError):
    """Body decoded but failed the caller-supplied predicate."""

    pass


class StreamingError(PulseError):
    """Per-chunk processing failure inside a streaming session."""

    pass


class UnknownContentError(StreamingError):
    """A chunk could not be decoded as UTF-8 text. Non-fatal."""

    def __init__(self, message: str = "Chunk is not valid UTF-8 text", **kwargs) -> None:
        super().__init__(message, **kwargs)


class EmptyContentError(StreamingError):
    """A chunk decoded to an empty string. Non-fatal."""

    def __init__(self, message: str = "Chunk is empty", **kwargs) -> None:
        super().__init__(message, **kwargs)


class PaginationError(PulseError):
    """Paginator misuse or exhaustion."""

    pass


class AllLoadedError(PaginationError):
    """Every page has been loaded, or a load is already in flight."""

    def __init__(self, message: str = "All pages loaded") -> None:
        super().__init__(message)
