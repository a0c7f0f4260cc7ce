"""Apply per-path converters to a normalized document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Union

from ..paths import MISSING, dig, first_missing_index, set_creating, split_path

if TYPE_CHECKING:
    from ..descriptor import Descriptor

LOGGER = logging.getLogger("es_importer.converters")


class ConversionError(Exception):
    """Raised when a document cannot be transformed."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"Converter for '{path}' failed: {cause}")
        self.path = path
        self.cause = cause


@dataclass(frozen=True)
class ValueConverter:
    """Rewrites the value already stored at a path.

    With ``with_document`` set the function also receives the whole document.
    When the path is missing the function is called with the document alone,
    unless ``skip_missing`` is set, in which case the path stays absent.
    """

    func: Callable[..., Any]
    with_document: bool = False
    skip_missing: bool = False

    def transform(self, value: Any, document: Dict[str, Any]) -> Any:
        if self.with_document:
            return self.func(value, document)
        return self.func(value)

    def synthesize(self, document: Dict[str, Any]) -> Any:
        if self.skip_missing:
            return MISSING
        return self.func(document)


@dataclass(frozen=True)
class DocumentConverter:
    """Computes a value from the whole document."""

    func: Callable[[Dict[str, Any]], Any]

    def transform(self, value: Any, document: Dict[str, Any]) -> Any:
        return self.func(document)

    def synthesize(self, document: Dict[str, Any]) -> Any:
        return self.func(document)


Converter = Union[ValueConverter, DocumentConverter]


def value_converter(func=None, *, with_document: bool = False, skip_missing: bool = False):
    """Decorator form of :class:`ValueConverter`."""

    def wrap(target: Callable[..., Any]) -> ValueConverter:
        return ValueConverter(target, with_document=with_document, skip_missing=skip_missing)

    return wrap(func) if func is not None else wrap


def document_converter(func: Callable[[Dict[str, Any]], Any]) -> DocumentConverter:
    return DocumentConverter(func)


def apply_converter(
    document: Dict[str, Any], path: str, converter: Converter
) -> None:
    keys = split_path(path)
    current = dig(document, keys)

    try:
        if current is not MISSING:
            result = converter.transform(current, document)
        else:
            result = converter.synthesize(document)
    except ConversionError:
        raise
    except Exception as exc:
        raise ConversionError(path, exc) from exc

    if result is MISSING:
        return
    if current is MISSING:
        LOGGER.debug(
            "Creating '%s' from segment %s", path, first_missing_index(document, keys)
        )
    set_creating(document, keys, result)


def apply_converters(descriptor: "Descriptor", document: Dict[str, Any]) -> Dict[str, Any]:
    """Run every converter of ``descriptor`` over ``document`` in registration order.

    The document is mutated and returned.
    """
    for path, converter in descriptor.converters.items():
        apply_converter(document, path, converter)
    return document
