"""Unit tests for AiohttpTransport against a local aiohttp test server."""

from __future__ import annotations

import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils
from pydantic import BaseModel

from laakhay.pulse.core import (
    API,
    AuthenticationStyle,
    BackendError,
    CachePolicy,
    Endpoint,
    HTTPMethod,
    NoDataOrBadResponseError,
    TransportError,
    TransportTimeoutError,
    WireRequest,
)
from laakhay.pulse.runtime import (
    AiohttpTransport,
    JSONLinesParser,
    RequestExecutor,
    SessionState,
    TransportConfig,
)


class Echo(BaseModel):
    method: str
    path: str
    query: dict[str, str]
    headers: dict[str, str]
    body: str


async def echo(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "headers": dict(request.headers),
            "body": (await request.read()).decode(),
        }
    )


async def missing(request: web.Request) -> web.Response:
    return web.json_response({"error": "record not found"}, status=404)


async def slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1)
    return web.json_response({})


async def lines(request: web.Request) -> web.StreamResponse:
    response = web.StreamResponse()
    await response.prepare(request)
    for part in (b'{"n": 1}\n{"n"', b": 2}\n", b"END\n"):
        await response.write(part)
        await asyncio.sleep(0.01)
    await response.write_eof()
    return response


async def broken_stream(request: web.Request) -> web.Response:
    return web.Response(status=500, text="nope")


class Count(BaseModel):
    n: int


def base_address(server: test_utils.TestServer) -> str:
    return str(server.make_url("/")).rstrip("/")


def make_app() -> web.Application:
    app = web.Application()
    app.router.add_route("*", "/echo", echo)
    app.router.add_get("/missing", missing)
    app.router.add_get("/slow", slow)
    app.router.add_get("/lines", lines)
    app.router.add_get("/broken", broken_stream)
    return app


class TestAiohttpTransport:
    @pytest.mark.asyncio
    async def test_endpoint_round_trip(self):
        async with test_utils.TestServer(make_app()) as server:
            api = API(base_address(server)).authenticated(
                AuthenticationStyle.HEADER, "k1", key_name="X-Api-Key"
            )
            endpoint = Endpoint(api, "/echo", method=HTTPMethod.POST).attaching(b'{"a": 1}')

            async with RequestExecutor() as executor:
                result = await executor.execute(endpoint, Echo)

        assert result.method == "POST"
        assert result.path == "/echo"
        assert result.body == '{"a": 1}'
        assert result.headers["X-Api-Key"] == "k1"
        assert result.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_query_authentication_reaches_server(self):
        async with test_utils.TestServer(make_app()) as server:
            api = API(base_address(server)).authenticated(AuthenticationStyle.PARAMETER, "s3")
            async with RequestExecutor() as executor:
                result = await executor.execute(Endpoint(api, "/echo?x=1"), Echo)
        assert result.query == {"x": "1", "key": "s3"}

    @pytest.mark.asyncio
    async def test_reload_policy_adds_no_cache(self):
        async with test_utils.TestServer(make_app()) as server:
            endpoint = Endpoint(
                API(base_address(server)),
                "/echo",
                cache_policy=CachePolicy.RELOAD_IGNORING_CACHE,
            )
            async with RequestExecutor() as executor:
                result = await executor.execute(endpoint, Echo)
        assert result.headers["Cache-Control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_backend_error_over_http(self):
        async with test_utils.TestServer(make_app()) as server:
            endpoint = Endpoint(API(base_address(server)), "/missing")
            async with RequestExecutor() as executor:
                with pytest.raises(BackendError) as exc_info:
                    await executor.execute(endpoint, Echo)
        assert exc_info.value.message == "record not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_status_only_execution(self):
        async with test_utils.TestServer(make_app()) as server:
            api = API(base_address(server))
            async with RequestExecutor() as executor:
                await executor.execute_status(Endpoint(api, "/echo"))
                with pytest.raises(NoDataOrBadResponseError) as exc_info:
                    await executor.execute_status(Endpoint(api, "/missing"))
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_timeout_maps_to_transport_timeout(self):
        async with test_utils.TestServer(make_app()) as server:
            endpoint = Endpoint(API(base_address(server)), "/slow", timeout=0.1)
            async with AiohttpTransport() as transport:
                with pytest.raises(TransportTimeoutError):
                    await transport.send(endpoint.build_request())

    @pytest.mark.asyncio
    async def test_connection_refused_maps_to_transport_error(self):
        async with test_utils.TestServer(make_app()) as server:
            url = str(server.make_url("/echo"))
        # Server is shut down; nothing listens on the port any more.
        async with AiohttpTransport() as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(WireRequest(url=url, timeout=2.0))
        assert isinstance(exc_info.value.underlying, aiohttp.ClientError)

    @pytest.mark.asyncio
    async def test_stream_json_lines(self):
        async with test_utils.TestServer(make_app()) as server:
            endpoint = Endpoint(API(base_address(server)), "/lines")
            async with RequestExecutor() as executor:
                stream = executor.stream(endpoint, JSONLinesParser(Count, done_marker="END"))
                events = await stream.collect()
        assert [e.unwrap().n for e in events] == [1, 2]
        assert stream.session.state is SessionState.COMPLETED

    @pytest.mark.asyncio
    async def test_stream_bad_status(self):
        async with test_utils.TestServer(make_app()) as server:
            endpoint = Endpoint(API(base_address(server)), "/broken")
            async with RequestExecutor() as executor:
                events = await executor.stream(endpoint, JSONLinesParser(Count)).collect()
        assert len(events) == 1
        assert isinstance(events[0].error, NoDataOrBadResponseError)
        assert events[0].error.status_code == 500


class TestSessionManagement:
    @pytest.mark.asyncio
    async def test_session_created_lazily_and_recreated(self):
        transport = AiohttpTransport(TransportConfig(limit=5, user_agent="pulse-test"))
        assert transport._session is None

        first = transport.session
        assert isinstance(first, aiohttp.ClientSession)
        await first.close()

        second = transport.session
        assert second is not first
        assert not second.closed
        await transport.close()
        assert second.closed

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        transport = AiohttpTransport()
        await transport.close()
        await transport.close()
