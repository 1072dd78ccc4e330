"""Date parsing shared by imports, metrics, and validation."""
from __future__ import annotations

from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
]


def to_date(raw: str | None) -> Optional[date]:
    """Parse a user or stored date string, or return ``None`` when it is not a date."""

    if not raw:
        return None
    text = " ".join(raw.strip().split())
    if not text:
        return None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    return (parsed.astimezone(timezone.utc) if parsed.tzinfo else parsed).date()


def normalize_date(raw: str | None) -> Optional[str]:
    """Return ``raw`` as ``YYYY-MM-DD`` or ``None`` when it cannot be parsed."""

    parsed = to_date(raw)
    return parsed.isoformat() if parsed else None
