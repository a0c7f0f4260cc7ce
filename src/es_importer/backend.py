"""Search backend interface and its Elasticsearch REST implementation."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple
from urllib.parse import quote

import httpx
from pydantic_core import to_json

from .config import Settings

LOGGER = logging.getLogger("es_importer.backend")

BatchItem = Tuple[str, Mapping[str, Any]]


class BackendError(Exception):
    """Raised when the search backend cannot fulfil a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFoundError(BackendError):
    """Raised when the addressed index or document does not exist."""


class SearchBackend(Protocol):
    def create_collection(self, name: str, payload: Mapping[str, Any]) -> Any: ...

    def delete_collection(self, name: str) -> Any: ...

    def index_one(self, collection: str, document_id: str, body: Mapping[str, Any]) -> Any: ...

    def index_batch(self, collection: str, items: Sequence[BatchItem]) -> Any: ...


def encode(value: Any) -> bytes:
    """Serialize a request body, reporting unencodable values as ``BackendError``."""
    try:
        return to_json(value)
    except ValueError as exc:
        raise BackendError(f"Cannot encode request body: {exc}") from exc


def bulk_body(items: Sequence[BatchItem]) -> bytes:
    """Encode ``(id, body)`` pairs as an NDJSON ``_bulk`` request."""
    lines: List[bytes] = []
    for document_id, body in items:
        action: Dict[str, Any] = {"index": {"_id": document_id}} if document_id else {"index": {}}
        lines.append(encode(action))
        lines.append(encode(body))
    return b"\n".join(lines) + b"\n"


class ElasticsearchBackend:
    """Synchronous Elasticsearch client with retry and backoff logic."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._headers = {"Accept": "application/json"}
        if settings.api_key:
            self._headers["Authorization"] = f"ApiKey {settings.api_key}"

    def __enter__(self) -> "ElasticsearchBackend":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._client is not None:
            return
        auth = None
        if self._settings.username and not self._settings.api_key:
            auth = httpx.BasicAuth(self._settings.username, self._settings.password or "")
        self._client = httpx.Client(
            base_url=self._settings.es_url,
            timeout=self._settings.timeout,
            headers=self._headers,
            auth=auth,
            transport=self._transport,
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def create_collection(self, name: str, payload: Mapping[str, Any]) -> Any:
        return self._request_json("PUT", _index_path(name), content=encode(payload))

    def delete_collection(self, name: str) -> Any:
        return self._request_json("DELETE", _index_path(name))

    def index_one(self, collection: str, document_id: str, body: Mapping[str, Any]) -> Any:
        if document_id:
            method, path = "PUT", f"{_index_path(collection)}/_doc/{quote(document_id, safe='')}"
        else:
            method, path = "POST", f"{_index_path(collection)}/_doc"
        return self._request_json(method, path, content=encode(body), params=self._write_params())

    def index_batch(self, collection: str, items: Sequence[BatchItem]) -> Any:
        return self._request_json(
            "POST",
            f"{_index_path(collection)}/_bulk",
            content=bulk_body(items),
            params=self._write_params(),
            content_type="application/x-ndjson",
        )

    def _write_params(self) -> Dict[str, str]:
        return {"refresh": "true"} if self._settings.refresh else {}

    def _request_json(
        self,
        method: str,
        path: str,
        content: Optional[bytes] = None,
        params: Optional[Mapping[str, Any]] = None,
        content_type: str = "application/json",
    ) -> Any:
        if self._client is None:
            raise RuntimeError("HTTP client is not ready; call open() first")

        headers = {"Content-Type": content_type} if content is not None else None
        max_attempts = max(1, self._settings.max_retries + 1)
        base_backoff = max(self._settings.backoff_factor, 0.0) or 1.0
        backoff_ceiling = (
            self._settings.backoff_max
            if self._settings.backoff_max and self._settings.backoff_max > 0
            else float("inf")
        )
        sleep_time = base_backoff

        attempt = 0
        while attempt < max_attempts:
            attempt += 1
            try:
                LOGGER.debug("%s %s (attempt %s/%s)", method, path, attempt, max_attempts)
                response = self._client.request(
                    method, path, content=content, params=dict(params or {}), headers=headers
                )
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                preview = exc.response.text[:500]
                if status_code == 404:
                    LOGGER.warning("Not found: %s %s (preview: %s)", method, path, preview)
                    raise ResourceNotFoundError(
                        f"{method} {path} returned 404: {preview}", status_code
                    ) from exc

                retryable_status = status_code >= 500 or status_code in {408, 429}
                if not self._should_retry(attempt, max_attempts, retryable_status):
                    LOGGER.error(
                        "HTTP %s for %s %s; response preview: %s",
                        status_code,
                        method,
                        path,
                        preview,
                    )
                    raise BackendError(
                        f"{method} {path} returned {status_code}: {preview}", status_code
                    ) from exc
                wait_time = min(sleep_time, backoff_ceiling)
                LOGGER.warning(
                    "HTTP %s for %s %s (attempt %s/%s). Retrying in %.1fs",
                    status_code,
                    method,
                    path,
                    attempt,
                    max_attempts,
                    wait_time,
                )
                time.sleep(wait_time)
                sleep_time = self._next_backoff(sleep_time, base_backoff, backoff_ceiling)
            except httpx.RequestError as exc:
                if not self._should_retry(attempt, max_attempts, True):
                    raise BackendError(f"{method} {path} failed: {exc}") from exc
                wait_time = min(sleep_time, backoff_ceiling)
                LOGGER.warning(
                    "Network error for %s %s (attempt %s/%s): %s. Retrying in %.1fs",
                    method,
                    path,
                    attempt,
                    max_attempts,
                    exc,
                    wait_time,
                )
                time.sleep(wait_time)
                sleep_time = self._next_backoff(sleep_time, base_backoff, backoff_ceiling)
            except ValueError as exc:
                raise BackendError(f"{method} {path} returned invalid JSON: {exc}") from exc

        raise BackendError(f"{method} {path} failed after {max_attempts} attempts")

    @staticmethod
    def _should_retry(attempt: int, max_attempts: int, retryable: bool) -> bool:
        return retryable and attempt < max_attempts

    @staticmethod
    def _next_backoff(current: float, base: float, ceiling: float) -> float:
        next_value = max(current, base) * 2
        if ceiling > 0:
            next_value = min(next_value, ceiling)
        return max(next_value, base)


def _index_path(name: str) -> str:
    return f"/{quote(str(name), safe='')}"
