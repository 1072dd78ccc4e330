"""Local session handling for the optional remote mirror."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from studio_crm.store.persistence import ensure_output_dir

AUTH_STORAGE_KEY = "aacrm-auth-session"

logger = logging.getLogger(__name__)


@dataclass
class SessionUser:
    email: str
    name: Optional[str] = None


@dataclass
class Session:
    """An established identity; credentials are never checked here."""

    user: SessionUser
    established_at: str

    def to_dict(self) -> Dict[str, Any]:
        user: Dict[str, Any] = {"email": self.user.email}
        if self.user.name:
            user["name"] = self.user.name
        return {"user": user, "establishedAt": self.established_at}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Session":
        user = raw["user"]
        email = str(user["email"]).strip()
        if not email:
            raise ValueError("Stored session has no email")
        established = raw.get("establishedAt") or raw.get("signedInAt") or ""
        return cls(user=SessionUser(email=email, name=user.get("name") or None), established_at=established)


def user_identifier(session: Optional[Session]) -> Optional[str]:
    """Return the id used to address the user's remote document."""

    if session is None:
        return None
    return session.user.email.strip().lower() or None


class SessionStore:
    """Keeps the current session in a small JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[Session]:
        if not self.path.exists():
            return None
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            return Session.from_dict(document[AUTH_STORAGE_KEY])
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Failed to parse stored auth session: %s", exc)
            return None

    def sign_in(self, email: str, name: str | None = None) -> Session:
        """Establish a session for ``email``; a blank email raises ``ValueError``."""

        trimmed_email = (email or "").strip()
        if not trimmed_email:
            raise ValueError("Email is required to sign in.")
        session = Session(
            user=SessionUser(email=trimmed_email, name=(name or "").strip() or None),
            established_at=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        ensure_output_dir(self.path)
        self.path.write_text(json.dumps({AUTH_STORAGE_KEY: session.to_dict()}, indent=2), encoding="utf-8")
        logger.info("Signed in as %s", trimmed_email)
        return session

    def sign_out(self) -> None:
        if self.path.exists():
            self.path.unlink()
        logger.info("Signed out")
