"""Unit tests for WireRequest and RequestContext."""

from __future__ import annotations

from laakhay.pulse.core import HTTPMethod, RequestContext, WireRequest


def test_with_header_is_case_insensitive_replace():
    request = WireRequest(url="https://x.test", headers={"content-type": "text/plain"})
    updated = request.with_header("Content-Type", "application/json")
    assert updated.headers == {"Content-Type": "application/json"}
    assert request.headers == {"content-type": "text/plain"}


def test_header_lookup():
    request = WireRequest(url="https://x.test", headers={"X-Api-Key": "k"})
    assert request.header("x-api-key") == "k"
    assert request.header("missing") is None


def test_with_url_copies():
    request = WireRequest(url="https://x.test/a", method=HTTPMethod.PUT, body=b"1")
    moved = request.with_url("https://x.test/b")
    assert moved.url == "https://x.test/b"
    assert moved.method == HTTPMethod.PUT
    assert moved.body == b"1"
    assert request.url == "https://x.test/a"


def test_request_context_snapshot():
    request = WireRequest(url="https://x.test/a", method=HTTPMethod.POST, headers={"A": "1"})
    context = RequestContext.from_request(request)
    assert context.url == "https://x.test/a"
    assert context.method == "POST"
    assert context.headers == {"A": "1"}
    assert str(context) == "POST https://x.test/a"
