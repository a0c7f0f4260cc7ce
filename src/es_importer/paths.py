"""Read and write dotted paths inside nested documents."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any


class _Missing:
    """Marker for a path that does not resolve."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    if not path or any(not segment for segment in path.split(".")):
        raise ValueError(f"Invalid path: {path!r}")
    return path.split(".")


def dig(container: Any, path: Sequence[str]) -> Any:
    """Return the value at ``path`` or ``MISSING`` if any segment is absent."""
    current = container
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return MISSING
        current = current[key]
    return current


def exists(container: Any, path: Sequence[str]) -> bool:
    return dig(container, path) is not MISSING


def first_missing_index(container: Any, path: Sequence[str]) -> int | None:
    """Index of the first segment whose prefix does not resolve."""
    current = container
    for index, key in enumerate(path):
        if not isinstance(current, Mapping) or key not in current:
            return index
        current = current[key]
    return None


def set_creating(
    container: MutableMapping[str, Any], path: Sequence[str], value: Any
) -> None:
    """Assign ``value`` at ``path``, creating missing intermediate maps.

    Existing maps along the way are reused; a non-map intermediate is
    replaced with an empty map.
    """
    if not path:
        raise ValueError("Path must contain at least one segment")

    current = container
    for key in path[:-1]:
        child = current.get(key)
        if not isinstance(child, MutableMapping):
            child = {}
            current[key] = child
        current = child
    current[path[-1]] = value
