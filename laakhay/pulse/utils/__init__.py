"""Utility functions."""

from .serialization import preview_body, to_json, to_json_bytes

__all__ = ["preview_body", "to_json", "to_json_bytes"]
