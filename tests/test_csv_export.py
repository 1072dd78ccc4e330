"""Tests for the per-collection CSV exports."""
import csv
from pathlib import Path

import pytest

from studio_crm.core.models import CRMData, Client, Event
from studio_crm.reporting.csv_export import (
    COLLECTION_HEADERS,
    collection_to_csv,
    export_csv_blobs,
    format_value,
    quote_csv_value,
    write_csv_exports,
)


def test_values_with_commas_quotes_or_newlines_are_quoted():
    assert quote_csv_value("plain") == "plain"
    assert quote_csv_value("Smith, Jane") == '"Smith, Jane"'
    assert quote_csv_value('The "Loft"') == '"The ""Loft"""'
    assert quote_csv_value("line one\nline two") == '"line one\nline two"'


def test_format_value_matches_display_conventions():
    assert format_value(None) == ""
    assert format_value(True) == "true"
    assert format_value(1500.0) == "1500"
    assert format_value(99.5) == "99.5"


def test_client_csv_is_parseable_by_the_csv_module():
    data = CRMData(
        clients=[Client(id="c1", name="Smith, Jane", email="jane@example.com", notes='Wants "rustic" decor\nno lilies')]
    )

    rows = list(csv.DictReader(collection_to_csv(data, "clients").splitlines(keepends=True)))

    assert rows[0]["Name"] == "Smith, Jane"
    assert rows[0]["Notes"] == 'Wants "rustic" decor\nno lilies'
    assert rows[0]["Phone"] == ""


def test_client_csv_quotes_only_fields_that_need_it():
    data = CRMData(clients=[Client(id="c1", name="Smith, Jane", email="jane@example.com", budget=1500.0)])

    lines = collection_to_csv(data, "clients").splitlines()

    assert lines[1] == 'c1,"Smith, Jane",jane@example.com,,lead,,1500,'


def test_event_rows_resolve_client_and_vendor_names(sample: CRMData):
    sample.events.append(Event(id="orphan", name="Orphan", date="2025-01-01", client_id="gone"))

    rows = list(csv.DictReader(collection_to_csv(sample, "events").splitlines(keepends=True)))

    by_id = {row["ID"]: row for row in rows}
    assert by_id["event-ava"]["Client"] == "Ava Martinez"
    assert by_id["event-ava"]["Vendors"] == "Bloom & Vine; Golden Hour Studio"
    assert by_id["event-ava"]["Deposit_Paid"] == "true"
    assert by_id["orphan"]["Client"] == "Unknown client"


def test_export_blobs_cover_every_collection(sample: CRMData):
    blobs = export_csv_blobs(sample)

    assert list(blobs) == ["clients", "vendors", "events", "invoices"]
    for collection, text in blobs.items():
        assert text.splitlines()[0] == ",".join(COLLECTION_HEADERS[collection])
    assert "Design consultation: 600; Timeline planning: 1200" in blobs["invoices"]


def test_unknown_collection_is_rejected(sample: CRMData):
    with pytest.raises(ValueError, match="Unknown collection"):
        collection_to_csv(sample, "tasks")


def test_write_csv_exports_creates_one_file_per_collection(tmp_path: Path, sample: CRMData, caplog):
    caplog.set_level("INFO")

    written = write_csv_exports(sample, tmp_path / "exports")

    assert [path.name for path in written] == ["clients.csv", "vendors.csv", "events.csv", "invoices.csv"]
    assert all(path.exists() for path in written)
    assert any("Wrote 4 CSV exports" in message for message in caplog.messages)
