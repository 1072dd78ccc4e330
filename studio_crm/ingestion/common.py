"""Shared helpers for reading import sources."""
from __future__ import annotations

from pathlib import Path


def read_text(path: Path) -> str:
    """Read UTF-8 text from disk, tolerating a byte-order mark.

    Centralizing file IO makes it easier to swap sources (e.g., cloud storage)
    without touching the parsing functions.
    """

    return path.read_text(encoding="utf-8-sig")
