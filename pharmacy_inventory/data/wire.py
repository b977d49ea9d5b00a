"""Small helpers for reading backend JSON records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional


def as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def as_int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_date(value: Any) -> Optional[date]:
    """Parse a 'YYYY-MM-DD' (or ISO datetime) string into a date."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        day = parse_date(text)
        return datetime(day.year, day.month, day.day) if day else None


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date the way the backend expects it (YYYY-MM-DD)."""
    if value is None:
        return None
    return value.strftime("%Y-%m-%d")
