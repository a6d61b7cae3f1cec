"""Unit tests for Paginator."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from laakhay.pulse.core import API, AllLoadedError, Endpoint
from laakhay.pulse.runtime import Paginator, RequestExecutor


class User(BaseModel):
    id: int


def users(*ids):
    return [User(id=i) for i in ids]


@pytest.fixture
def endpoint():
    return Endpoint(API("https://api.example.com"), "/users")


@pytest.fixture
def executor():
    executor = MagicMock(spec=RequestExecutor)
    executor.execute = AsyncMock()
    return executor


class TestPaginator:
    @pytest.mark.asyncio
    async def test_requests_successive_offsets(self, executor, endpoint):
        executor.execute.side_effect = [users(1, 2), users(3, 4)]
        pages = Paginator(executor, endpoint, User, limit=2)

        assert await pages.load() == users(1, 2)
        assert await pages.load() == users(3, 4)

        urls = [call.args[0].url for call in executor.execute.call_args_list]
        assert urls == [
            "https://api.example.com/users?limit=2&offset=0",
            "https://api.example.com/users?limit=2&offset=2",
        ]
        assert executor.execute.call_args_list[0].args[1] == list[User]

    @pytest.mark.asyncio
    async def test_short_page_marks_all_loaded(self, executor, endpoint):
        executor.execute.return_value = users(1)
        pages = Paginator(executor, endpoint, User, limit=2)

        await pages.load()

        assert pages.all_loaded
        with pytest.raises(AllLoadedError):
            await pages.load()

    @pytest.mark.asyncio
    async def test_fresh_restarts(self, executor, endpoint):
        executor.execute.return_value = users(1)
        pages = Paginator(executor, endpoint, User, limit=2)
        await pages.load()

        await pages.load(fresh=True)

        assert executor.execute.call_args.args[0].url.endswith("offset=0")
        assert pages.offset == 1

    @pytest.mark.asyncio
    async def test_concurrent_load_rejected(self, executor, endpoint):
        pages = Paginator(executor, endpoint, User)
        pages.loading = True
        with pytest.raises(AllLoadedError):
            await pages.load()

    @pytest.mark.asyncio
    async def test_loading_reset_after_failure(self, executor, endpoint):
        executor.execute.side_effect = RuntimeError("boom")
        pages = Paginator(executor, endpoint, User)
        with pytest.raises(RuntimeError):
            await pages.load()
        assert pages.loading is False
        assert pages.offset == 0

    def test_limit_must_be_positive(self, executor, endpoint):
        with pytest.raises(ValueError):
            Paginator(executor, endpoint, User, limit=0)

    @pytest.mark.asyncio
    async def test_fresh_during_load_keeps_offset(self, executor, endpoint):
        release = asyncio.Event()

        async def slow_page(*args):
            await release.wait()
            return users(1, 2)

        executor.execute.side_effect = slow_page
        pages = Paginator(executor, endpoint, User, limit=2)
        first = asyncio.create_task(pages.load())
        await asyncio.sleep(0)

        with pytest.raises(AllLoadedError):
            await pages.load(fresh=True)
        release.set()
        await first

        assert pages.offset == 2
        assert executor.execute.await_count == 1
