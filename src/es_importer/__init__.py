"""Transform nested documents and bulk-index them into Elasticsearch."""

from .backend import (BackendError, ElasticsearchBackend,
                      ResourceNotFoundError, SearchBackend)
from .config import Settings
from .converters import (ConversionError, DocumentConverter, ValueConverter,
                         apply_converters, document_converter,
                         value_converter)
from .descriptor import (ConfigurationError, Descriptor, descriptor_from_dict,
                         load_descriptors)
from .identity import IdentifierError, derive_id
from .importer import DocumentImporter, transform
from .keys import normalize_keys
from .models import ImportResult
from .registry import Registry
from .schema_builder import build_schema

__all__ = [
    "BackendError",
    "ConfigurationError",
    "ConversionError",
    "Descriptor",
    "DocumentConverter",
    "DocumentImporter",
    "ElasticsearchBackend",
    "IdentifierError",
    "ImportResult",
    "Registry",
    "ResourceNotFoundError",
    "SearchBackend",
    "Settings",
    "ValueConverter",
    "apply_converters",
    "build_schema",
    "derive_id",
    "descriptor_from_dict",
    "document_converter",
    "load_descriptors",
    "normalize_keys",
    "transform",
    "value_converter",
]
