"""Orchestrates transforming documents and sending them to the backend."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Tuple, Union

from .backend import BackendError, SearchBackend
from .converters.engine import ConversionError, apply_converters
from .descriptor import Descriptor
from .identity import derive_id
from .keys import normalize_keys
from .models import ImportResult
from .registry import Registry
from .schema_builder import build_schema

LOGGER = logging.getLogger("es_importer.importer")

Document = Mapping[Any, Any]
Documents = Union[Document, Iterable[Document]]


def _as_documents(documents: Documents) -> Iterable[Document]:
    if isinstance(documents, Mapping):
        return (documents,)
    return documents


def transform(descriptor: Descriptor, document: Document) -> Dict[str, Any]:
    """Normalize keys, run converters and stamp the identifier field."""
    normalized = normalize_keys(document)
    apply_converters(descriptor, normalized)
    normalized[descriptor.id_field] = derive_id(descriptor, normalized)
    return normalized


def _fallback_id(descriptor: Descriptor, document: Document) -> str:
    try:
        return derive_id(descriptor, normalize_keys(document))
    except ConversionError:
        return ""


class DocumentImporter:
    """Runs the transform pipeline for registered collections."""

    def __init__(self, registry: Registry, backend: SearchBackend) -> None:
        self._registry = registry
        self._backend = backend

    @property
    def registry(self) -> Registry:
        return self._registry

    def create_collection(self, index: str) -> Any:
        payload = build_schema(self._registry.get(index))
        LOGGER.info("Creating %s index", index)
        try:
            return self._backend.create_collection(index, payload)
        except BackendError as exc:
            LOGGER.error("Error creating %s index. %s: %s", index, type(exc).__name__, exc)
            raise

    def delete_collection(self, index: str) -> Any:
        LOGGER.info("Deleting %s index", index)
        try:
            return self._backend.delete_collection(index)
        except BackendError as exc:
            LOGGER.error("Error deleting %s index. %s: %s", index, type(exc).__name__, exc)
            raise

    def transform_document(self, index: str, document: Document) -> Dict[str, Any]:
        return transform(self._registry.get(index), document)

    def import_documents(self, index: str, documents: Documents) -> ImportResult:
        """Index documents one at a time, recording each outcome.

        Conversion and backend failures are counted against the document and
        never stop the loop.
        """
        descriptor = self._registry.get(index)
        result = ImportResult()
        start = time.perf_counter()

        for position, document in enumerate(_as_documents(documents), start=1):
            try:
                body = transform(descriptor, document)
            except ConversionError as exc:
                document_id = _fallback_id(descriptor, document)
                LOGGER.debug("#%s failed %s: %s", position, document_id, exc)
                result.record_failure(document_id, exc)
                continue

            document_id = body[descriptor.id_field]
            try:
                self._backend.index_one(index, document_id, body)
            except BackendError as exc:
                LOGGER.debug("#%s failed %s: %s", position, document_id, exc)
                result.record_failure(document_id, exc)
                continue
            LOGGER.debug("#%s imported %s", position, document_id)
            result.record_success()

        result.elapsed = time.perf_counter() - start
        LOGGER.info(
            "%s import statistics: imported=%s failed=%s time=%.3fs",
            index,
            result.imported.count,
            result.failed.count,
            result.elapsed,
        )
        return result

    def import_in_bulk(self, index: str, documents: Documents) -> Any:
        """Transform every document and send them in a single bulk request.

        A conversion failure in any document aborts the call before the
        backend is contacted; the backend response is returned unchanged.
        An empty input sends nothing and returns an empty bulk-shaped response.
        """
        descriptor = self._registry.get(index)
        items: List[Tuple[str, Dict[str, Any]]] = []
        for document in _as_documents(documents):
            body = transform(descriptor, document)
            items.append((body.pop(descriptor.id_field), body))

        if not items:
            LOGGER.info("No documents to bulk import into %s", index)
            return {"took": 0, "errors": False, "items": []}

        LOGGER.info("Bulk importing %s documents into %s", len(items), index)
        return self._backend.index_batch(index, items)
