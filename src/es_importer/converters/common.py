"""Shared value converters usable from code and from YAML descriptors."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as dtparse


def dt(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    try:
        return dtparse.parse(str(value)).isoformat()
    except (ValueError, OverflowError):
        return value


def d(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return (value.date() if isinstance(value, datetime) else value).isoformat()
    try:
        return dtparse.parse(str(value)).date().isoformat()
    except (ValueError, OverflowError):
        return value


def lowercase(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def uppercase(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


def strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]
