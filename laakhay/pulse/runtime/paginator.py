"""Offset/limit paginator over a list endpoint."""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from ..core.endpoint import Endpoint
from ..core.exceptions import AllLoadedError
from .executor import RequestExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Paginator(Generic[T]):
    """Loads successive pages of ``item_type`` from ``endpoint``.

    Each page is requested with ``endpoint.build_request(limit, offset)``. A
    page shorter than ``limit`` marks the end of the collection.

    Example:
        >>> pages = Paginator(executor, Endpoint(api, "/users"), User, limit=50)
        >>> first = await pages.load()
        >>> second = await pages.load()
        >>> again = await pages.load(fresh=True)
    """

    def __init__(
        self,
        executor: RequestExecutor,
        endpoint: Endpoint,
        item_type: type[T] | Any,
        limit: int = 20,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        self.endpoint = endpoint
        self.loading = False
        self.all_loaded = False
        self._executor = executor
        self._item_type = item_type
        self._limit = limit
        self._offset = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def offset(self) -> int:
        return self._offset

    async def load(self, fresh: bool = False) -> list[T]:
        """Fetch the next page.

        Args:
            fresh: Restart from offset 0

        Raises:
            AllLoadedError: Collection exhausted, or a load is already running
        """
        if self.loading:
            raise AllLoadedError()
        if fresh:
            self._offset = 0
            self.all_loaded = False
        if self.all_loaded:
            raise AllLoadedError()

        self.loading = True
        try:
            results: list[T] = await self._executor.execute(
                self.endpoint.build_request(limit=self._limit, offset=self._offset),
                list[self._item_type],  # type: ignore[name-defined]
            )
        finally:
            self.loading = False

        if len(results) < self._limit:
            self.all_loaded = True
        self._offset += len(results)
        logger.debug(f"Loaded {len(results)} items from {self.endpoint.path} (offset={self._offset})")
        return results
