"""Spreadsheet sinks for exporting the CRM collections beyond CSV output."""
from __future__ import annotations

from pathlib import Path
from typing import Any, List

from studio_crm.core.models import COLLECTIONS, CRMData
from studio_crm.reporting.csv_export import COLLECTION_HEADERS, collection_rows, format_value
from studio_crm.store.persistence import ensure_output_dir


def _cell(value: Any) -> Any:
    return "" if value is None else value


def _table(data: CRMData, collection: str, as_text: bool = True) -> List[List[Any]]:
    headers = COLLECTION_HEADERS[collection]
    render = format_value if as_text else _cell
    rows = [[render(row.get(header)) for header in headers] for row in collection_rows(data, collection)]
    return [headers] + rows


def push_to_google_sheets(
    data: CRMData,
    spreadsheet_id: str,
    service_account_path: Path | None = None,
) -> None:
    """Replace one worksheet per collection in a Google Sheets document."""

    try:
        import gspread
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("gspread is required for Google Sheets sinks") from exc

    client = (
        gspread.service_account(filename=str(service_account_path))
        if service_account_path
        else gspread.service_account()
    )
    spreadsheet = client.open_by_key(spreadsheet_id)
    existing = {worksheet.title: worksheet for worksheet in spreadsheet.worksheets()}
    for collection in COLLECTIONS:
        table = _table(data, collection)
        worksheet = existing.get(collection) or spreadsheet.add_worksheet(
            title=collection, rows=max(len(table), 1), cols=len(table[0])
        )
        worksheet.clear()
        worksheet.append_rows(table)


def write_excel(data: CRMData, output_path: Path) -> None:
    """Write one worksheet per collection to an Excel workbook using openpyxl."""

    try:
        from openpyxl import Workbook
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("openpyxl is required for Excel sinks") from exc

    ensure_output_dir(output_path)
    workbook = Workbook()
    workbook.remove(workbook.active)
    for collection in COLLECTIONS:
        sheet = workbook.create_sheet(title=collection)
        for row in _table(data, collection, as_text=False):
            sheet.append(row)
    workbook.save(output_path)
