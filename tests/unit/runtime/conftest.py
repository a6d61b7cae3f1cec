"""Shared fixtures for runtime tests."""

import pytest

from laakhay.pulse.core import WireRequest


@pytest.fixture
def wire_request():
    return WireRequest(url="https://api.example.com/v1/items", headers={"X-Trace": "t-1"})
