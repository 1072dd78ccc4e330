"""CSV export of the four CRM collections."""
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

from studio_crm.core.models import COLLECTIONS, CRMData
from studio_crm.metrics.aggregator import client_display_name
from studio_crm.store.persistence import ensure_output_dir

logger = logging.getLogger(__name__)

COLLECTION_HEADERS: Dict[str, List[str]] = {
    "clients": ["ID", "Name", "Email", "Phone", "Status", "Event_Date", "Budget", "Notes"],
    "vendors": ["ID", "Name", "Service", "Cost", "Email", "Phone", "Website", "Preferred_Contact", "Notes"],
    "events": [
        "ID",
        "Name",
        "Date",
        "Client",
        "Venue",
        "Venue_Cost",
        "Coordinator",
        "Status",
        "Vendors",
        "Estimate",
        "Deposit",
        "Deposit_Paid",
        "Timeline",
    ],
    "invoices": [
        "ID",
        "Client",
        "Issue_Date",
        "Due_Date",
        "Status",
        "Total",
        "Items",
        "Notes",
        "Billing_Status",
    ],
}


def format_value(value: Any) -> str:
    """Render a field the way it is shown in the app (``1500`` not ``1500.0``)."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def quote_csv_value(value: Any) -> str:
    """Quote a value when it contains a comma, quote, or newline; double inner quotes."""

    text = format_value(value)
    if any(marker in text for marker in (",", '"', "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def _client_rows(data: CRMData) -> List[Dict[str, Any]]:
    return [
        {
            "ID": client.id,
            "Name": client.name,
            "Email": client.email,
            "Phone": client.phone,
            "Status": client.status,
            "Event_Date": client.event_date,
            "Budget": client.budget,
            "Notes": client.notes,
        }
        for client in data.clients
    ]


def _vendor_rows(data: CRMData) -> List[Dict[str, Any]]:
    return [
        {
            "ID": vendor.id,
            "Name": vendor.name,
            "Service": vendor.service,
            "Cost": vendor.cost,
            "Email": vendor.email,
            "Phone": vendor.phone,
            "Website": vendor.website,
            "Preferred_Contact": vendor.preferred_contact,
            "Notes": vendor.notes,
        }
        for vendor in data.vendors
    ]


def _event_rows(data: CRMData) -> List[Dict[str, Any]]:
    vendor_names = {vendor.id: vendor.name for vendor in data.vendors}
    return [
        {
            "ID": event.id,
            "Name": event.name,
            "Date": event.date,
            "Client": client_display_name(data, event.client_id),
            "Venue": event.venue,
            "Venue_Cost": event.venue_cost,
            "Coordinator": event.coordinator,
            "Status": event.status,
            "Vendors": "; ".join(vendor_names.get(vendor_id, vendor_id) for vendor_id in event.vendor_ids or []),
            "Estimate": event.estimate,
            "Deposit": event.deposit,
            "Deposit_Paid": event.deposit_paid,
            "Timeline": event.timeline,
        }
        for event in data.events
    ]


def _invoice_rows(data: CRMData) -> List[Dict[str, Any]]:
    return [
        {
            "ID": invoice.id,
            "Client": client_display_name(data, invoice.client_id),
            "Issue_Date": invoice.issue_date,
            "Due_Date": invoice.due_date,
            "Status": invoice.status,
            "Total": invoice.total,
            "Items": "; ".join(f"{item.description}: {format_value(item.amount)}" for item in invoice.items),
            "Notes": invoice.notes,
            "Billing_Status": invoice.sync.status if invoice.sync else "not_created",
        }
        for invoice in data.invoices
    ]


_ROW_BUILDERS: Dict[str, Callable[[CRMData], List[Dict[str, Any]]]] = {
    "clients": _client_rows,
    "vendors": _vendor_rows,
    "events": _event_rows,
    "invoices": _invoice_rows,
}


def collection_rows(data: CRMData, collection: str) -> List[Dict[str, Any]]:
    """Return template-aligned dictionaries for one collection."""

    if collection not in _ROW_BUILDERS:
        raise ValueError(f"Unknown collection: {collection}")
    return _ROW_BUILDERS[collection](data)


def collection_to_csv(data: CRMData, collection: str) -> str:
    """Render one collection as CSV text with a header row."""

    rows = collection_rows(data, collection)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=COLLECTION_HEADERS[collection], lineterminator="\n")
    writer.writeheader()
    writer.writerows({header: format_value(value) for header, value in row.items()} for row in rows)
    return buffer.getvalue()


def export_csv_blobs(data: CRMData) -> Dict[str, str]:
    """CSV text for every collection, keyed by collection name."""

    return {collection: collection_to_csv(data, collection) for collection in COLLECTIONS}


def write_csv_exports(data: CRMData, output_dir: Path) -> List[Path]:
    """Write ``<collection>.csv`` files under ``output_dir`` and return their paths."""

    written: List[Path] = []
    for collection, text in export_csv_blobs(data).items():
        path = output_dir / f"{collection}.csv"
        ensure_output_dir(path)
        path.write_text(text, encoding="utf-8")
        written.append(path)
    logger.info("Wrote %d CSV exports to %s", len(written), output_dir)
    return written
