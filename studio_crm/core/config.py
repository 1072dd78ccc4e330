"""Environment-driven settings for the CLI and dashboard."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from studio_crm.core.utils import get_config_value, load_env_file

DEFAULT_ENV_FILE = Path("secrets/crm.env")
DEFAULT_DATA_FILE = Path("data/crm.json")
DEFAULT_SESSION_FILE = Path("data/session.json")
DEFAULT_SERVICE_ACCOUNT_PATHS = [
    Path("secrets/service_account.json"),
    Path("credentials/service_account.json"),
]
UPCOMING_POLICIES = ("all", "future")

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Resolved configuration for one process."""

    data_file: Path = DEFAULT_DATA_FILE
    session_file: Path = DEFAULT_SESSION_FILE
    remote_url: Optional[str] = None
    remote_token: Optional[str] = None
    upcoming_policy: str = "all"
    spreadsheet_id: Optional[str] = None
    service_account_path: Optional[Path] = None

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_url)


def _default_service_account_path() -> Optional[Path]:
    for candidate in DEFAULT_SERVICE_ACCOUNT_PATHS:
        if candidate.exists():
            return candidate
    return None


def load_settings() -> Settings:
    """Build settings from ``secrets/crm.env``, Streamlit secrets, and the environment."""

    env_path = Path(os.getenv("STUDIO_CRM_ENV_FILE", DEFAULT_ENV_FILE))
    load_env_file(env_path)

    policy = get_config_value("STUDIO_CRM_UPCOMING_POLICY", "all").strip().lower() or "all"
    if policy not in UPCOMING_POLICIES:
        logger.warning("Unknown upcoming policy %r; falling back to 'all'", policy)
        policy = "all"

    account_env = get_config_value("GOOGLE_SHEETS_SERVICE_ACCOUNT")
    return Settings(
        data_file=Path(get_config_value("STUDIO_CRM_DATA_FILE", str(DEFAULT_DATA_FILE))),
        session_file=Path(get_config_value("STUDIO_CRM_SESSION_FILE", str(DEFAULT_SESSION_FILE))),
        remote_url=get_config_value("STUDIO_CRM_REMOTE_URL") or None,
        remote_token=get_config_value("STUDIO_CRM_REMOTE_TOKEN") or None,
        upcoming_policy=policy,
        spreadsheet_id=get_config_value("GOOGLE_SHEETS_SPREADSHEET_ID") or None,
        service_account_path=Path(account_env) if account_env else _default_service_account_path(),
    )
