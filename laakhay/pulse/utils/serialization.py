"""JSON helpers for payloads and diagnostics."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

logger = logging.getLogger(__name__)


def to_json(value: Any, pretty: bool = False) -> str | None:
    """Serialise ``value`` (pydantic model, dataclass, plain data) to JSON text.

    Returns None, after logging, when the value is not serialisable.
    """
    try:
        raw = TypeAdapter(type(value)).dump_json(value, indent=2 if pretty else None)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        logger.warning(f"Error encoding JSON: {e}")
        return None
    return raw.decode("utf-8")


def to_json_bytes(value: Any) -> bytes:
    """Serialise ``value`` for use as a request body; raises on failure."""
    return TypeAdapter(type(value)).dump_json(value)


def preview_body(body: bytes | None, limit: int | None = None) -> str:
    """Render a response body for logs and error messages.

    Valid JSON is pretty-printed; anything else is shown as text with
    undecodable bytes replaced.
    """
    if body is None:
        return "There was no data returned."
    text = body.decode("utf-8", errors="replace")
    try:
        text = json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        pass
    if limit is not None and len(text) > limit:
        return f"{text[:limit]}... ({len(text) - limit} more characters)"
    return text
