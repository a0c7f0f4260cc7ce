"""Deep key normalization for incoming documents."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any


def canonical_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, Enum):
        return canonical_key(key.value)
    if isinstance(key, (bytes, bytearray)):
        return bytes(key).decode("utf-8", errors="backslashreplace")
    return str(key)


def normalize_keys(
    node: Any, canonicalize: Callable[[Any], str] = canonical_key
) -> Any:
    """Return a copy of ``node`` with every map key passed through ``canonicalize``.

    Maps and sequences (lists, tuples) are rebuilt; every other value is
    returned as is. The input is left untouched.
    """
    if isinstance(node, Mapping):
        return {
            canonicalize(key): normalize_keys(value, canonicalize)
            for key, value in node.items()
        }
    if isinstance(node, (list, tuple)):
        return [normalize_keys(item, canonicalize) for item in node]
    return node
