"""Quick-add clients from pasted or dropped text."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from studio_crm.core.dates import normalize_date
from studio_crm.core.models import CLIENT_STATUSES
from studio_crm.ingestion.common import read_text

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".txt", ".csv"}


@dataclass
class ImportResult:
    """Client payloads parsed from text plus the lines that could not be used."""

    created: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def summary(self) -> str:
        parts = [f"Added {len(self.created)} client{'' if len(self.created) == 1 else 's'}."]
        if self.skipped:
            parts.append(
                f"Skipped {len(self.skipped)} line{'' if len(self.skipped) == 1 else 's'} that we couldn't parse."
            )
        return " ".join(parts)


def split_line(line: str) -> List[str]:
    """Split on ``|``, then ``,``, then `` - ``; otherwise keep the line whole."""

    for separator in ("|", ",", " - "):
        parts = [part.strip() for part in line.split(separator) if part.strip()]
        if len(parts) > 1:
            return parts
    return [line.strip()]


def normalize_status(value: str | None) -> str:
    """Map free-form status text onto a pipeline stage, defaulting to ``lead``."""

    if not value:
        return "lead"
    normalized = value.strip().lower()
    if normalized in CLIENT_STATUSES:
        return normalized
    if "book" in normalized:
        return "booked"
    if "plan" in normalized:
        return "planning"
    if "wrap" in normalized or "complete" in normalized:
        return "completed"
    return "lead"


def parse_date_value(value: str | None) -> Optional[str]:
    return normalize_date(value)


def parse_budget_value(value: str | None) -> Optional[float]:
    """Strip currency symbols and thousands separators, then read the leading number."""

    if not value:
        return None
    cleaned = re.sub(r"[^0-9.,-]", "", value).replace(",", "")
    match = re.match(r"-?(\d+\.?\d*|\.\d+)", cleaned)
    if not match:
        return None
    return float(match.group(0))


def parse_clients_from_text(text: str) -> ImportResult:
    """Turn each non-empty line into a client payload.

    Fields map positionally to name, email, phone, status, event date,
    budget; anything after the budget is joined into notes.
    """

    result = ImportResult()
    for raw_line in re.split(r"\r?\n", text):
        line = raw_line.strip()
        if not line:
            continue

        fields = [re.sub(r"\t+", " ", part).strip() for part in split_line(line)]
        name = fields[0] if fields else ""
        # punctuation-only lines such as ",,," carry no name
        if not re.search(r"\w", name):
            result.skipped.append(line)
            continue

        email = fields[1] if len(fields) > 1 else ""
        phone = fields[2] if len(fields) > 2 else ""
        status_raw = fields[3] if len(fields) > 3 else None
        event_date_raw = fields[4] if len(fields) > 4 else None
        budget_raw = fields[5] if len(fields) > 5 else None
        notes = ", ".join(fields[6:]).strip()

        result.created.append(
            {
                "name": name,
                "email": email,
                "phone": phone or None,
                "status": normalize_status(status_raw),
                "event_date": parse_date_value(event_date_raw),
                "budget": parse_budget_value(budget_raw),
                "notes": notes or None,
            }
        )
    return result


def read_import_files(paths: Iterable[Path]) -> str:
    """Concatenate text files for import; only ``.txt`` and ``.csv`` are accepted."""

    fragments: List[str] = []
    for path in paths:
        if path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ValueError("Only text drops or .txt/.csv files are supported.")
        content = read_text(path)
        if content:
            fragments.append(content)
    return "\n".join(fragments)


def import_clients(store: Any, text: str) -> ImportResult:
    """Parse ``text`` and add every recognised client to ``store``."""

    if not text.strip():
        raise ValueError("Drop text snippets or text files to import clients.")

    result = parse_clients_from_text(text)
    if not result.created:
        raise ValueError("No recognizable client rows were found in that drop.")

    for payload in result.created:
        store.add_client(payload)
    logger.info("Imported %d clients (%d lines skipped)", len(result.created), len(result.skipped))
    if result.skipped:
        logger.warning("Skipped import lines: %s", "; ".join(result.skipped))
    return result
