"""Per-collection descriptors and their YAML representation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union

import yaml

from .converters import catalog
from .converters.engine import Converter, DocumentConverter, ValueConverter
from .keys import canonical_key
from .models import DEFAULT_ID_FIELD
from .paths import split_path

IdentityKey = Union[str, Tuple[str, ...]]


class ConfigurationError(Exception):
    """Raised when a collection is missing or misconfigured."""


@dataclass
class Descriptor:
    """Everything the importer needs to know about one collection."""

    identity_key: Any
    mapping: Dict[str, Any] = field(default_factory=dict)
    keywords: FrozenSet[str] = frozenset()
    settings: Optional[Dict[str, Any]] = None
    converters: Dict[str, Converter] = field(default_factory=dict)
    id_field: str = DEFAULT_ID_FIELD
    doc_type: Optional[str] = None

    def __post_init__(self) -> None:
        self.identity_key = _identity_key(self.identity_key)
        self.mapping = {canonical_key(k): v for k, v in (self.mapping or {}).items()}
        self.keywords = frozenset(canonical_key(k) for k in (self.keywords or ()))
        self.converters = _converters(self.converters or {})

    @property
    def is_composite(self) -> bool:
        return isinstance(self.identity_key, tuple)


def _identity_key(value: Any) -> IdentityKey:
    if isinstance(value, (list, tuple)):
        if not value:
            raise ConfigurationError("identity_key must name at least one field")
        return tuple(canonical_key(item) for item in value)
    if value is None or value == "":
        raise ConfigurationError("identity_key is required")
    return canonical_key(value)


def _converters(
    value: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]
) -> Dict[str, Converter]:
    pairs = value.items() if isinstance(value, Mapping) else value
    result: Dict[str, Converter] = {}
    for path, converter in pairs:
        path = str(path)
        try:
            split_path(path)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if not isinstance(converter, (ValueConverter, DocumentConverter)):
            raise ConfigurationError(
                f"Converter for '{path}' must be a ValueConverter or DocumentConverter, "
                f"got {type(converter).__name__}"
            )
        result[path] = converter
    return result


def descriptor_from_dict(data: Mapping[str, Any]) -> Descriptor:
    """Build a descriptor from plain data, resolving converters by name."""
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Descriptor must be a mapping, got {type(data).__name__}")
    try:
        converters = {
            str(path): catalog.resolve(spec)
            for path, spec in (data.get("converters") or {}).items()
        }
    except catalog.UnknownConverterError as exc:
        raise ConfigurationError(str(exc)) from exc

    return Descriptor(
        identity_key=data.get("identity_key"),
        mapping=dict(data.get("mapping") or {}),
        keywords=frozenset(data.get("keywords") or ()),
        settings=data.get("settings"),
        converters=converters,
        id_field=data.get("id_field") or DEFAULT_ID_FIELD,
        doc_type=data.get("doc_type"),
    )


def load_descriptors(path: Union[str, Path]) -> Dict[str, Descriptor]:
    """Read a YAML file mapping collection names to descriptors."""
    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigurationError(f"Cannot read descriptors from {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{path}: top level must map collection names to descriptors")
    return {str(name): descriptor_from_dict(spec) for name, spec in data.items()}
