"""Logging coverage to ensure problems are surfaced without stopping the app."""
import logging
from pathlib import Path

import pytest

import studio_crm.ingestion.text_import as text_import
from studio_crm.core.logging import configure_logging
from studio_crm.store.persistence import LocalStorage


def test_configure_logging_honours_env_level(monkeypatch: pytest.MonkeyPatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", logging.WARNING)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configure_logging()

    assert root.level == logging.DEBUG


def test_import_logs_summary_and_skipped_lines(store, caplog):
    caplog.set_level("INFO")

    text_import.import_clients(store, "Amy,amy@x.com\n|||")

    assert any("Imported 1 clients (1 lines skipped)" in message for message in caplog.messages)
    assert any("|||" in message for message in caplog.messages if "Skipped" in message)


def test_unreadable_storage_logs_and_continues(tmp_path: Path, caplog):
    path = tmp_path / "crm.json"
    path.write_text("[]", encoding="utf-8")
    caplog.set_level("WARNING")

    assert LocalStorage(path).load() is None
    assert str(path) in caplog.text
