"""Converter variants, the converter engine and built-in converters."""

from . import catalog, common
from .engine import (ConversionError, Converter, DocumentConverter,
                     ValueConverter, apply_converter, apply_converters,
                     document_converter, value_converter)

__all__ = [
    "ConversionError",
    "Converter",
    "DocumentConverter",
    "ValueConverter",
    "apply_converter",
    "apply_converters",
    "catalog",
    "common",
    "document_converter",
    "value_converter",
]
