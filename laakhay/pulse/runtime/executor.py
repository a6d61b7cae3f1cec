"""Request executor: one exchange, decoded and classified.

Architecture:
    ``RequestExecutor.execute`` resolves an ``Endpoint`` (or takes a ready
    ``WireRequest``), awaits the transport once and maps the outcome onto the
    error taxonomy, strictly in this order:

        transport failure     -> TransportError (TransportTimeoutError,
                                 RequestCancelledError)
        no response / body    -> NoDataOrBadResponseError
        body decodes          -> value, or PreconditionFailure if the
                                 caller's predicate rejects it
        body does not decode  -> BackendError if it matches {"error": str},
                                 otherwise DecodeError carrying the body

    Decoding goes through ``pydantic.TypeAdapter`` so any type pydantic can
    validate (models, dataclasses, ``list[Model]``, ``dict[str, int]``...)
    works as a response type.

Design Decisions:
    - Typed execution does not look at the status code; a non-2xx body that
      decodes into the requested type is returned as-is
    - ``execute_status`` checks presence of a body, the predicate and the
      2xx range, and decodes nothing
    - Every failure path calls ``log(error, category)``; a failing error hook
      is logged and never replaces the error being raised
    - No retries and no caching
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..core.endpoint import Endpoint
from ..core.exceptions import (
    BackendError,
    BackendErrorEnvelope,
    DecodeError,
    NoDataOrBadResponseError,
    PreconditionFailure,
    PulseError,
    RequestCancelledError,
    TransportError,
    TransportTimeoutError,
)
from ..core.request import RequestContext, WireRequest
from ..utils.serialization import preview_body
from .streaming import ErrorHook, ResultStream, StreamParser, open_stream
from .transport import AiohttpTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

EndpointOrRequest = Endpoint | WireRequest


@dataclass(frozen=True)
class ExecutorConfig:
    log_response_bodies: bool = False  # log every response body at DEBUG
    body_preview_limit: int = 2000  # characters of body kept in DEBUG logs


@lru_cache(maxsize=256)
def _cached_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def _type_adapter(response_type: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(response_type)
    except TypeError:
        # Unhashable type expressions cannot be cached.
        return TypeAdapter(response_type)


def decode_body(body: bytes, response_type: type[T] | Any) -> T:
    """Validate a JSON body into ``response_type``.

    Raises:
        pydantic.ValidationError: Body is not JSON or does not match the type
    """
    return _type_adapter(response_type).validate_json(body)


def resolve_request(target: EndpointOrRequest) -> WireRequest:
    if isinstance(target, Endpoint):
        return target.build_request()
    return target


class RequestExecutor:
    """Executes endpoints and wire requests over a ``Transport``."""

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        config: ExecutorConfig | None = None,
        error_hook: ErrorHook | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            transport: Transport to use; an ``AiohttpTransport`` owned (and
                closed) by this executor when omitted
            config: Logging options
            error_hook: ``hook(error, category)`` called on every failure path
        """
        self._owns_transport = transport is None
        self._t: Transport = transport if transport is not None else AiohttpTransport()
        self._conf = config or ExecutorConfig()
        self._error_hook = error_hook

    @property
    def transport(self) -> Transport:
        return self._t

    def log(self, error: BaseException, category: str) -> None:
        """Report a failure to the module logger and the error hook. Never raises."""
        logger.debug(f"[{category}] {type(error).__name__}: {error}")
        if self._error_hook is None:
            return
        try:
            self._error_hook(error, category)
        except Exception:  # noqa: BLE001
            logger.exception(f"Error hook failed while reporting {type(error).__name__}")

    async def execute(
        self,
        target: EndpointOrRequest,
        response_type: type[T] | Any,
        predicate: Callable[[T], bool] | None = None,
    ) -> T:
        """Perform one exchange and decode the body into ``response_type``.

        Args:
            target: Endpoint to resolve, or a ready wire request
            response_type: Anything ``pydantic.TypeAdapter`` accepts
            predicate: Optional semantic check on the decoded value

        Raises:
            TransportError: Network-level failure, timeout or cancellation
            NoDataOrBadResponseError: No response or no body
            PreconditionFailure: ``predicate`` returned False
            BackendError: Body is the backend's ``{"error": ...}`` envelope
            DecodeError: Body matches neither shape
        """
        request = resolve_request(target)
        context = RequestContext.from_request(request)
        response = await self._send(request, context)
        body = self._require_body(response, context)

        try:
            result = decode_body(body, response_type)
        except ValidationError as e:
            raise self._classify_decode_failure(e, response, context) from e

        if predicate is not None and not predicate(result):
            error = PreconditionFailure(
                f"Response from {context} failed the custom precondition", request=context
            )
            self.log(error, "precondition")
            raise error
        return result

    async def execute_status(
        self,
        target: EndpointOrRequest,
        predicate: Callable[[], bool] | None = None,
    ) -> None:
        """Perform one exchange and only check that it succeeded.

        Success needs a response with a body, a passing ``predicate`` (if
        given) and a status in 200..299.
        """
        request = resolve_request(target)
        context = RequestContext.from_request(request)
        response = await self._send(request, context)
        self._require_body(response, context)

        if predicate is not None and not predicate():
            error = PreconditionFailure(
                f"Response from {context} failed the custom precondition", request=context
            )
            self.log(error, "precondition")
            raise error

        if not response.ok:
            error = NoDataOrBadResponseError(
                f"{context} returned status {response.status}",
                status_code=response.status,
                request=context,
            )
            self.log(error, "response")
            raise error

    def stream(self, target: EndpointOrRequest, parser: StreamParser[T]) -> ResultStream[T]:
        """Open a streaming session; see ``open_stream``.

        Must be called from inside a running event loop. Use the result with
        ``async with`` or call its ``aclose()``; otherwise the connection stays
        open after the consumer stops iterating.
        """
        return open_stream(resolve_request(target), parser, self._t, error_hook=self.log)

    async def _send(self, request: WireRequest, context: RequestContext) -> TransportResponse | None:
        try:
            response = await self._t.send(request)
        except RequestCancelledError as e:
            self.log(e, "transport")
            raise
        except asyncio.CancelledError as e:
            error = RequestCancelledError("Request cancelled", e, request=context)
            self.log(error, "transport")
            raise error from e
        except TransportError as e:
            if e.request is None:
                e.request = context
            self.log(e, "transport")
            raise
        except PulseError as e:
            self.log(e, "transport")
            raise
        except asyncio.TimeoutError as e:
            error = TransportTimeoutError(
                f"Request timed out after {request.timeout}s", e, request=context
            )
            self.log(error, "transport")
            raise error from e
        except Exception as e:  # noqa: BLE001 - foreign transports raise their own types
            error = TransportError(str(e) or type(e).__name__, e, request=context)
            self.log(error, "transport")
            raise error from e

        if response is not None and self._conf.log_response_bodies:
            logger.debug(
                f"{context} -> {response.status}\n"
                f"{preview_body(response.body, self._conf.body_preview_limit)}"
            )
        return response

    def _require_body(
        self, response: TransportResponse | None, context: RequestContext
    ) -> bytes:
        if response is None or response.body is None:
            error = NoDataOrBadResponseError(
                f"No data or bad response from {context}",
                status_code=response.status if response is not None else None,
                request=context,
            )
            self.log(error, "response")
            raise error
        return response.body

    def _classify_decode_failure(
        self,
        error: ValidationError,
        response: TransportResponse,
        context: RequestContext,
    ) -> PulseError:
        body = response.body or b""
        try:
            envelope = BackendErrorEnvelope.model_validate_json(body)
        except ValidationError:
            failure: PulseError = DecodeError(
                f"Could not decode response from {context}: "
                f"{error.error_count()} validation error(s)",
                body_text=preview_body(body),
                underlying=error,
                request=context,
            )
            self.log(failure, "decode")
            return failure

        failure = BackendError(envelope, status_code=response.status, request=context)
        self.log(failure, "backend")
        return failure

    async def close(self) -> None:
        """Close the transport if this executor created it."""
        if self._owns_transport:
            await self._t.close()

    async def __aenter__(self) -> RequestExecutor:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
