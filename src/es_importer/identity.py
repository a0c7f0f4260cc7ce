"""Derive the external document identifier from identity-key fields."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .converters.engine import ConversionError
from .descriptor import Descriptor
from .models import ID_SEPARATOR


class IdentifierError(ConversionError):
    """Raised when an identity-key field holds a map or a sequence."""

    def __init__(self, field_name: str, value: Any) -> None:
        super().__init__(
            field_name,
            TypeError(f"identity field holds a {type(value).__name__}, expected a scalar"),
        )
        self.field_name = field_name


def _segment(document: Mapping[str, Any], field_name: str) -> str:
    value = document.get(field_name)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple, set)):
        raise IdentifierError(field_name, value)
    return str(value)


def derive_id(descriptor: Descriptor, document: Mapping[str, Any]) -> str:
    """Return the identifier for ``document``.

    Missing fields contribute an empty segment, so ``["a", "b"]`` over
    ``{"a": 1}`` yields ``"1-"``.
    """
    if descriptor.is_composite:
        return ID_SEPARATOR.join(
            _segment(document, name) for name in descriptor.identity_key
        )
    return _segment(document, descriptor.identity_key)
