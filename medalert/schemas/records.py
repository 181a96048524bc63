"""Helpers for reading loosely-typed backend rows.

The backend is a spreadsheet behind a web app, so the same column can come
back as a JSON list, a comma separated cell, a bare scalar, or nothing at all.
"""
import json
import math
import re
from collections.abc import Mapping
from datetime import date
from typing import Any

_MISSING = object()
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def pick(raw: Mapping, *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = raw.get(key, _MISSING)
        if value is not _MISSING:
            return value
    return default


def as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except ValueError:
                decoded = None
            if isinstance(decoded, list):
                return decoded
        return [part.strip() for part in text.split(",") if part.strip()]
    return [value]


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def as_date_text(value: Any) -> Any:
    """Calendar dates become "YYYY-MM-DD"; anything else is left for validation."""
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value


def parse_int(value: Any) -> int | None:
    """Leading-integer parse: "5" -> 5, "5.9" -> 5, " 7 pills" -> 7, "abc" -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None
