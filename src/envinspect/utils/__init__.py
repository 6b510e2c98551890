"""Utility helpers."""

from .serialization import to_json, to_jsonable

__all__ = ["to_json", "to_jsonable"]
