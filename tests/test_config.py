"""Tests for settings resolution and shared date parsing."""
from datetime import date
from pathlib import Path

import pytest

from studio_crm.core.config import load_settings
from studio_crm.core.dates import normalize_date, to_date
from studio_crm.core.utils import ID_ALPHABET, generate_id


def test_settings_come_from_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    env_file = tmp_path / "crm.env"
    env_file.write_text(
        "# local overrides\nSTUDIO_CRM_REMOTE_URL=https://sync.example\nSTUDIO_CRM_UPCOMING_POLICY='future'\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("STUDIO_CRM_ENV_FILE", str(env_file))

    settings = load_settings()

    assert settings.remote_enabled
    assert settings.remote_url == "https://sync.example"
    assert settings.upcoming_policy == "future"
    assert settings.data_file == tmp_path / "crm.json"


def test_unknown_upcoming_policy_falls_back_to_all(monkeypatch: pytest.MonkeyPatch, caplog):
    monkeypatch.setenv("STUDIO_CRM_UPCOMING_POLICY", "tomorrow")
    caplog.set_level("WARNING")

    settings = load_settings()

    assert settings.upcoming_policy == "all"
    assert not settings.remote_enabled
    assert "Unknown upcoming policy" in caplog.text


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-06-14", "2025-06-14"),
        ("2025-06-14T18:30:00Z", "2025-06-14"),
        ("06/14/2025", "2025-06-14"),
        ("June 14, 2025", "2025-06-14"),
        ("14 Jun 2025", "2025-06-14"),
        ("not a date", None),
        ("", None),
    ],
)
def test_normalize_date_formats(raw, expected):
    assert normalize_date(raw) == expected


def test_to_date_returns_date_objects():
    assert to_date("2025/01/02") == date(2025, 1, 2)


def test_generate_id_uses_url_safe_alphabet():
    ids = {generate_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(len(value) == 21 and set(value) <= set(ID_ALPHABET) for value in ids)
