"""Streaming session: incremental parsing of a chunked response body.

Architecture:
    A ``StreamingSession`` owns one transport stream and one accumulation
    buffer. A single asyncio task reads chunks in arrival order and drives a
    small state machine:

        IDLE -> ACTIVE -> COMPLETED | FAILED | CANCELLED

    For every chunk the session decodes UTF-8 text, appends it to the buffer
    and hands the whole buffer to the caller's ``StreamParser``. Results are
    reported through three callback slots (content, processing error,
    completion). ``open_stream`` wires those callbacks into a ``ResultStream``:
    an ordered async iterator of ``StreamResult`` events.

Design Decisions:
    - The buffer keeps the full accumulated text until the parser declares
      completion; parsers see every byte since the start and must skip what
      they already emitted. This grows without bound for parsers that never
      complete.
    - Undecodable and empty chunks are reported but do not end the session;
      parser exceptions and transport failures do.
    - Chunks that arrive after a terminal state are ignored.

Example:
    >>> async with executor.stream(endpoint, JSONLinesParser(Message)) as events:
    ...     async for event in events:
    ...         if event.is_success:
    ...             handle(event.value)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from ..core.exceptions import (
    EmptyContentError,
    PulseError,
    TransportError,
    UnknownContentError,
)
from ..core.request import RequestContext, WireRequest
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

ErrorHook = Callable[[BaseException, str], None]


class StreamParser(Protocol[T_co]):
    """Caller-supplied chunk parser.

    ``buffer`` is always the full accumulation since the stream started,
    never a truncated or offset view.
    """

    def parse(self, buffer: bytes) -> Sequence[T_co]:
        """Return the results found in ``buffer``; raise on malformed input."""
        ...

    def is_stream_complete(self, buffer: bytes) -> bool:
        """Pure predicate; called after every ``parse``."""
        ...


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.FAILED, SessionState.CANCELLED)


@dataclass(frozen=True)
class StreamResult(Generic[T]):
    """One event of a stream: a parsed value or an error."""

    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> StreamResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> StreamResult[T]:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class StreamingSession(Generic[T]):
    """Reads one transport stream and feeds it through a ``StreamParser``."""

    def __init__(
        self,
        request: WireRequest,
        parser: StreamParser[T],
        transport: Transport,
        *,
        error_hook: ErrorHook | None = None,
    ) -> None:
        self.on_receive_content: Callable[[T], None] | None = None
        self.on_processing_error: Callable[[BaseException], None] | None = None
        self.on_complete: Callable[[BaseException | None], None] | None = None

        self._request = request
        self._context = RequestContext.from_request(request)
        self._parser = parser
        self._transport = transport
        self._error_hook = error_hook
        self._buffer = ""
        self._state = SessionState.IDLE
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def buffer(self) -> str:
        """Text accumulated since the stream started (empty once terminal)."""
        return self._buffer

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def perform(self) -> asyncio.Task[None]:
        """Open the transport stream in a new task. Must run inside an event loop."""
        if self._state is not SessionState.IDLE:
            raise RuntimeError(f"StreamingSession already {self._state.value}")
        self._state = SessionState.ACTIVE
        self._task = asyncio.create_task(self._run())
        return self._task

    def cancel(self) -> bool:
        """Cancel the transport task. Returns False if nothing was running."""
        if self._task is None:
            if self._state is SessionState.IDLE:
                self._state = SessionState.CANCELLED
            return False
        if self._task.done():
            return False
        if self._state is SessionState.ACTIVE:
            # The task may be cancelled before its first step, so _run never sees it.
            self._state = SessionState.CANCELLED
            self._buffer = ""
            logger.debug(f"Stream cancelled: {self._context}")
        return self._task.cancel()

    async def _run(self) -> None:
        chunks = self._transport.stream(self._request)
        try:
            async for chunk in chunks:
                self.receive(chunk)
                if self._state is not SessionState.ACTIVE:
                    break
        except asyncio.CancelledError:
            if self._state is SessionState.ACTIVE:
                self._state = SessionState.CANCELLED
                self._buffer = ""
                logger.debug(f"Stream cancelled: {self._context}")
            raise
        except PulseError as e:
            if e.request is None:
                e.request = self._context
            self._finish(SessionState.FAILED, e)
        except Exception as e:  # noqa: BLE001 - foreign transports raise their own types
            error = TransportError(str(e) or type(e).__name__, e, request=self._context)
            error.__cause__ = e
            self._finish(SessionState.FAILED, error)
        else:
            if self._state is SessionState.ACTIVE:
                self._finish(SessionState.COMPLETED, None)
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

    def receive(self, chunk: bytes) -> None:
        """Process one raw chunk from the transport."""
        if self._state is not SessionState.ACTIVE:
            logger.debug(f"Ignoring {len(chunk)} bytes received while {self._state.value}")
            return

        try:
            text = chunk.decode("utf-8")
        except UnicodeDecodeError:
            self._processing_error(UnknownContentError(request=self._context))
            return
        if not text:
            self._processing_error(EmptyContentError(request=self._context))
            return

        window = self._buffer + text
        data = window.encode("utf-8")
        try:
            results = self._parser.parse(data)
        except Exception as e:  # noqa: BLE001 - parser errors are delivered, then end the stream
            self._processing_error(e)
            self._finish(SessionState.FAILED, None)
            return

        for result in results:
            if self.on_receive_content is not None:
                self.on_receive_content(result)

        try:
            complete = self._parser.is_stream_complete(data)
        except Exception as e:  # noqa: BLE001
            self._processing_error(e)
            self._finish(SessionState.FAILED, None)
            return

        if complete:
            self._finish(SessionState.COMPLETED, None)
        else:
            self._buffer = window

    def _processing_error(self, error: BaseException) -> None:
        self._log(error)
        if self.on_processing_error is not None:
            self.on_processing_error(error)

    def _finish(self, state: SessionState, error: BaseException | None) -> None:
        self._state = state
        self._buffer = ""
        logger.debug(f"Stream {state.value}: {self._context}")
        if error is not None:
            self._log(error)
        if self.on_complete is not None:
            self.on_complete(error)

    def _log(self, error: BaseException) -> None:
        if self._error_hook is None:
            return
        try:
            self._error_hook(error, "stream")
        except Exception:  # noqa: BLE001
            logger.exception(f"Error hook failed while reporting {type(error).__name__}")


_END: Any = object()


class ResultStream(Generic[T]):
    """Ordered, single-use async iterator over a session's events.

    Leaving ``async with`` or calling ``aclose()`` cancels the transport
    task. One of the two is required to release the connection: breaking
    out of ``async for`` alone leaves the transport task reading.
    """

    def __init__(self, session: StreamingSession[T]) -> None:
        self._session = session
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._finished = False
        session.on_receive_content = self._on_content
        session.on_processing_error = self._on_error
        session.on_complete = self._on_complete

    @property
    def session(self) -> StreamingSession[T]:
        return self._session

    def _on_content(self, value: T) -> None:
        self._queue.put_nowait(StreamResult.success(value))

    def _on_error(self, error: BaseException) -> None:
        self._queue.put_nowait(StreamResult.failure(error))

    def _on_complete(self, error: BaseException | None) -> None:
        if error is not None:
            self._queue.put_nowait(StreamResult.failure(error))
        self._queue.put_nowait(_END)

    def _start(self) -> None:
        task = self._session.perform()
        # Cancelled sessions never report completion; end the iterator anyway.
        task.add_done_callback(lambda _: self._queue.put_nowait(_END))

    def __aiter__(self) -> ResultStream[T]:
        return self

    async def __anext__(self) -> StreamResult[T]:
        if self._finished:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END:
            self._finished = True
            raise StopAsyncIteration
        return item

    def cancel(self) -> None:
        """Stop consuming and cancel the transport task."""
        self._finished = True
        self._session.cancel()

    async def aclose(self) -> None:
        """Cancel and wait until the transport task has unwound."""
        self.cancel()
        task = self._session.task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def collect(self) -> list[StreamResult[T]]:
        """Drain the stream into a list."""
        return [event async for event in self]

    async def __aenter__(self) -> ResultStream[T]:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def open_stream(
    request: WireRequest,
    parser: StreamParser[T],
    transport: Transport,
    *,
    error_hook: ErrorHook | None = None,
) -> ResultStream[T]:
    """Start a streaming session for ``request`` and return its event stream.

    Must be called from inside a running event loop; the transport stream is
    opened immediately.
    """
    session = StreamingSession(request, parser, transport, error_hook=error_hook)
    stream = ResultStream(session)
    stream._start()
    return stream
