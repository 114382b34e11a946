"""
Value parsing and checks used by the component validators.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from typing import Any
from urllib.parse import urlparse

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_UNSAFE_FILENAME = re.compile(r"[^a-zA-Z0-9.-]")


def parse_datetime(value: Any) -> datetime | None:
    """
    Coerce form input into an aware UTC datetime.

    Accepts None/"" (-> None), date, datetime, and ISO strings, including
    date-only strings like "2024-05-01".
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ValueError(f"Unsupported date value: {value!r}")


def is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value))


def sanitize_filename(name: str) -> str:
    """Drop every character outside [a-zA-Z0-9.-]."""
    return _UNSAFE_FILENAME.sub("", name)


def file_extension(name: str, default: str = "bin") -> str:
    if "." not in name:
        return default
    return name.rsplit(".", 1)[-1].lower() or default
