"""Ready-made ``StreamParser`` implementations.

Both parsers re-read the whole accumulated buffer on every call and keep a
count of the records they already returned, so each record is emitted once.
An instance belongs to a single stream.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class JSONLinesParser(Generic[T]):
    """Newline-delimited JSON; one record per line.

    A trailing line without a newline is treated as partial and left for a
    later chunk. When ``done_marker`` is set, a line equal to it ends the
    stream and is not decoded.
    """

    def __init__(self, item_type: type[T] | Any, *, done_marker: str | None = None) -> None:
        self._adapter: TypeAdapter[Any] = TypeAdapter(item_type)
        self._done_marker = done_marker
        self._emitted = 0

    def _lines(self, buffer: bytes) -> list[str]:
        complete = buffer.decode("utf-8").split("\n")[:-1]
        return [line.strip() for line in complete if line.strip()]

    def parse(self, buffer: bytes) -> list[T]:
        records = [line for line in self._lines(buffer) if line != self._done_marker]
        fresh = [self._adapter.validate_json(line) for line in records[self._emitted :]]
        self._emitted = len(records)
        return fresh

    def is_stream_complete(self, buffer: bytes) -> bool:
        if self._done_marker is None:
            return False
        return self._done_marker in self._lines(buffer)


class ServerSentEventsParser(Generic[T]):
    """``text/event-stream`` bodies whose ``data:`` fields hold JSON.

    Events end with a blank line; multi-line ``data:`` fields are joined with
    newlines. An event whose data equals ``done_marker`` ends the stream.
    """

    def __init__(self, item_type: type[T] | Any, *, done_marker: str | None = "[DONE]") -> None:
        self._adapter: TypeAdapter[Any] = TypeAdapter(item_type)
        self._done_marker = done_marker
        self._emitted = 0

    def _payloads(self, buffer: bytes) -> list[str]:
        text = buffer.decode("utf-8").replace("\r\n", "\n")
        payloads = []
        for block in text.split("\n\n")[:-1]:
            data_lines = []
            for line in block.split("\n"):
                if not line.startswith("data:"):
                    continue  # comments, event:, id:, retry:
                value = line[5:]
                data_lines.append(value[1:] if value.startswith(" ") else value)
            if data_lines:
                payloads.append("\n".join(data_lines))
        return payloads

    def parse(self, buffer: bytes) -> list[T]:
        records = [p for p in self._payloads(buffer) if p != self._done_marker]
        fresh = [self._adapter.validate_json(p) for p in records[self._emitted :]]
        self._emitted = len(records)
        return fresh

    def is_stream_complete(self, buffer: bytes) -> bool:
        if self._done_marker is None:
            return False
        return self._done_marker in self._payloads(buffer)
