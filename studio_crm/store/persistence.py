"""Local JSON persistence for the CRM aggregate."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from studio_crm.core.models import CRMData

STORAGE_KEY = "aacrm-storage-v1"

logger = logging.getLogger(__name__)


def ensure_output_dir(output_path: Path) -> None:
    """Create the parent directory for the output file when missing."""

    output_path.parent.mkdir(parents=True, exist_ok=True)


class LocalStorage:
    """A key/value JSON file that keeps the aggregate under a fixed key.

    Other keys in the same file are left untouched, so several tools can
    share one storage file the way browser storage is shared.
    """

    def __init__(self, path: Path, key: str = STORAGE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        content = self.path.read_text(encoding="utf-8").strip()
        if not content:
            return {}
        document = json.loads(content)
        if not isinstance(document, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object")
        return document

    def load(self) -> Optional[CRMData]:
        """Return the stored aggregate, or ``None`` when missing or unreadable."""

        try:
            document = self._read_document()
            if self.key not in document:
                return None
            return CRMData.from_dict(document[self.key])
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Failed to parse stored CRM data in %s: %s", self.path, exc)
            return None

    def save(self, data: CRMData) -> None:
        """Write the aggregate atomically (temp file, then replace)."""

        try:
            document = self._read_document()
        except (OSError, ValueError):
            document = {}
        document[self.key] = data.to_dict()

        ensure_output_dir(self.path)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.path.parent, prefix=f"{self.path.name}.", suffix=".tmp", delete=False
        ) as handle:
            json.dump(document, handle, ensure_ascii=False, indent=2)
        try:
            os.replace(handle.name, self.path)
        except OSError:
            os.unlink(handle.name)
            raise

    def clear(self) -> None:
        """Remove the aggregate while keeping unrelated keys."""

        try:
            document = self._read_document()
        except (OSError, ValueError):
            document = {}
        if document.pop(self.key, None) is None:
            return
        ensure_output_dir(self.path)
        self.path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
