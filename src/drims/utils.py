"""Small helpers for timestamps, free-text numbers and generated identifiers."""

from __future__ import annotations

import math
import re
import unicodedata
from datetime import datetime, timezone

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
HONORIFIC_PATTERN = re.compile(r"^(dr|prof|mr|mrs|ms)\.+")
EMAIL_LOCAL_PATTERN = re.compile(r"[^a-z0-9.]")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def parse_impact_factor(value: str | None) -> float | None:
    """Return the numeric impact factor, or None when it cannot be read."""
    if is_blank(value):
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def slugify(value: str, max_length: int = 80) -> str:
    """Create a filesystem-safe slug."""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    value = value.lower()
    value = SLUG_PATTERN.sub("-", value).strip("-")
    if not value:
        value = "item"
    return value[:max_length]


def email_local_part(name: str) -> str:
    """Derive ``first.last`` from a display name, dropping honorifics."""
    value = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    value = re.sub(r"\s+", ".", value.strip().lower())
    value = EMAIL_LOCAL_PATTERN.sub("", value)
    value = re.sub(r"\.+", ".", value)
    value = HONORIFIC_PATTERN.sub("", value).strip(".")
    return value or "faculty"
