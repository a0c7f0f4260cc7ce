"""Configuration loading for the importer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .models import (DEFAULT_BACKOFF_FACTOR, DEFAULT_BACKOFF_MAX,
                     DEFAULT_ES_URL, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT)


def _int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    es_url: str = DEFAULT_ES_URL
    api_key: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    backoff_max: float = DEFAULT_BACKOFF_MAX
    refresh: bool = False
    descriptors_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            es_url=os.getenv("ES_URL", DEFAULT_ES_URL).rstrip("/"),
            api_key=os.getenv("ES_API_KEY") or None,
            username=os.getenv("ES_USERNAME") or None,
            password=os.getenv("ES_PASSWORD") or None,
            timeout=_float(os.getenv("ES_TIMEOUT"), DEFAULT_TIMEOUT),
            max_retries=max(0, _int(os.getenv("ES_MAX_RETRIES"), DEFAULT_MAX_RETRIES)),
            backoff_factor=_float(os.getenv("ES_BACKOFF_FACTOR"), DEFAULT_BACKOFF_FACTOR),
            backoff_max=_float(os.getenv("ES_BACKOFF_MAX"), DEFAULT_BACKOFF_MAX),
            # Ask Elasticsearch to make writes visible to search before returning.
            refresh=_bool(os.getenv("ES_REFRESH")),
            descriptors_path=os.getenv("ES_DESCRIPTORS") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
