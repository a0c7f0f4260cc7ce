from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_ES_URL = "http://localhost:9200"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5
DEFAULT_BACKOFF_MAX = 8.0
DEFAULT_ID_FIELD = "es_id"
ID_SEPARATOR = "-"


class ImportedStats(BaseModel):
    count: int = 0


class FailedItem(BaseModel):
    id: str
    error: str


class FailedStats(BaseModel):
    count: int = 0
    items: list[FailedItem] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Per-call accumulator for ``DocumentImporter.import_documents``."""

    imported: ImportedStats = Field(default_factory=ImportedStats)
    failed: FailedStats = Field(default_factory=FailedStats)
    elapsed: float = 0.0

    def record_success(self) -> None:
        self.imported.count += 1

    def record_failure(self, document_id: str, error: BaseException | str) -> None:
        self.failed.count += 1
        self.failed.items.append(FailedItem(id=document_id, error=str(error)))

    @property
    def total(self) -> int:
        return self.imported.count + self.failed.count
