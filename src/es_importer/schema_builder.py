"""Translate a descriptor into an index-creation request body."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict

from .descriptor import ConfigurationError, Descriptor

LOGGER = logging.getLogger("es_importer.schema")

KEYWORD_SUBFIELD = {"keyword": {"type": "keyword"}}


def field_definition(name: str, declared: Any, keyword: bool) -> Dict[str, Any]:
    if isinstance(declared, dict):
        definition = copy.deepcopy(declared)
    elif isinstance(declared, str) and declared:
        definition = {"type": declared}
    else:
        raise ConfigurationError(f"Field '{name}' has an invalid type: {declared!r}")

    if keyword:
        fields = definition.setdefault("fields", {})
        fields.update(copy.deepcopy(KEYWORD_SUBFIELD))
    return definition


def build_schema(descriptor: Descriptor) -> Dict[str, Any]:
    """Return the ``mappings``/``settings`` payload for ``descriptor``."""
    if not descriptor.mapping:
        raise ConfigurationError("Descriptor has no mapping; refusing to build an empty schema")

    unknown = sorted(descriptor.keywords - set(descriptor.mapping))
    if unknown:
        LOGGER.warning("Ignoring keyword fields missing from mapping: %s", ", ".join(unknown))

    properties = {
        name: field_definition(name, declared, name in descriptor.keywords)
        for name, declared in descriptor.mapping.items()
    }
    mappings: Dict[str, Any] = {"dynamic": False, "properties": properties}
    if descriptor.doc_type:
        mappings = {descriptor.doc_type: mappings}

    payload: Dict[str, Any] = {"mappings": mappings}
    if descriptor.settings:
        payload["settings"] = descriptor.settings
    return payload
