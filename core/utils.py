"""
General utility functions.

Provides date/time helpers and the value coercions used when normalizing
rule payloads.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

UTC = dt.timezone.utc


def utcnow() -> dt.datetime:
    return dt.datetime.now(tz=UTC)


def iso_to_dt(value: Optional[str]) -> Optional[dt.datetime]:
    if not value:
        return None
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            try:
                return int(stripped)
            except ValueError:
                return default
    return default


def coerce_flag(value: Any) -> int:
    """Only an explicit 1 (or True) turns a flag on."""
    if value is True:
        return 1
    return 1 if safe_int(value) == 1 else 0


def blank_to_none(value: Any, strip: bool = True) -> Optional[str]:
    """Return None for missing or whitespace-only strings."""
    if value is None:
        return None
    text = str(value)
    if not text.strip():
        return None
    return text.strip() if strip else text
