"""Best-effort accessors for loosely-typed JSON documents.

Each accessor returns a default when the container is not a dict, the key is
absent, or the value has the wrong shape. Nothing here raises.
"""

from __future__ import annotations

from typing import Any


def get_dict(obj: Any, key: str) -> dict[str, Any]:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, dict):
            return value
    return {}


def get_list(obj: Any, key: str) -> list[Any]:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, list):
            return value
    return []


def get_str(obj: Any, key: str, default: str = "") -> str:
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return default


def get_int(obj: Any, key: str, default: int = 0) -> int:
    """Integer lookup; integral floats count, bools and strings do not."""
    if isinstance(obj, dict):
        value = obj.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    return default
