"""Convert validated editor forms into store payloads.

Forms carry raw widget values (strings, checkboxes, selections). Blank
optional fields become ``None`` so that an edit can clear them.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from studio_crm.core.dates import normalize_date

Payload = Dict[str, Any]


def _optional_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _optional_amount(value: Any) -> Optional[float]:
    text = str(value).strip().replace(",", "") if value is not None else ""
    return float(text) if text else None


def _date(value: Any) -> Optional[str]:
    text = _optional_text(value)
    return normalize_date(text) or text


def client_payload(form: Mapping[str, Any]) -> Payload:
    return {
        "name": str(form.get("name", "")).strip(),
        "email": str(form.get("email", "")).strip(),
        "phone": _optional_text(form.get("phone")),
        "status": form.get("status") or "lead",
        "event_date": _date(form.get("event_date")),
        "budget": _optional_amount(form.get("budget")),
        "notes": _optional_text(form.get("notes")),
    }


def vendor_payload(form: Mapping[str, Any]) -> Payload:
    return {
        "name": str(form.get("name", "")).strip(),
        "service": str(form.get("service", "")).strip(),
        "cost": _optional_amount(form.get("cost")),
        "email": _optional_text(form.get("email")),
        "phone": _optional_text(form.get("phone")),
        "website": _optional_text(form.get("website")),
        "preferred_contact": _optional_text(form.get("preferred_contact")),
        "notes": _optional_text(form.get("notes")),
    }


def event_payload(form: Mapping[str, Any]) -> Payload:
    """Build an event payload; vendor costs are kept only for assigned vendors with a value."""

    vendor_ids: List[str] = list(form.get("vendor_ids") or [])
    raw_costs = form.get("vendor_costs") or {}
    vendor_costs: Dict[str, float] = {}
    for vendor_id in vendor_ids:
        cost = _optional_amount(raw_costs.get(vendor_id))
        if cost is not None:
            vendor_costs[vendor_id] = cost
    deposit = _optional_amount(form.get("deposit"))
    return {
        "name": str(form.get("name", "")).strip(),
        "date": _date(form.get("date")) or "",
        "client_id": str(form.get("client_id", "")).strip(),
        "venue": str(form.get("venue") or "").strip(),
        "coordinator": str(form.get("coordinator") or "").strip(),
        "status": form.get("status") or "contacted",
        "venue_cost": _optional_amount(form.get("venue_cost")),
        "timeline": _optional_text(form.get("timeline")),
        "vendor_ids": vendor_ids or None,
        "vendor_costs": vendor_costs or None,
        "estimate": _optional_amount(form.get("estimate")),
        "deposit": deposit,
        "deposit_paid": bool(form.get("deposit_paid")) and deposit is not None,
    }


def invoice_payload(form: Mapping[str, Any]) -> Payload:
    """Build an invoice payload from priced line items.

    Rows missing a description or an amount are dropped. A blank total is
    sent as ``None`` so the store derives it from the items.
    """

    items: List[Payload] = []
    for row in form.get("items") or []:
        description = _optional_text(row.get("description"))
        amount = _optional_amount(row.get("amount"))
        if description is None or amount is None:
            continue
        item: Payload = {"description": description, "amount": amount}
        if row.get("id"):
            item["id"] = row["id"]
        items.append(item)
    return {
        "client_id": str(form.get("client_id", "")).strip(),
        "issue_date": _date(form.get("issue_date")) or "",
        "due_date": _date(form.get("due_date")) or "",
        "status": form.get("status") or "draft",
        "total": _optional_amount(form.get("total")),
        "items": items,
        "notes": _optional_text(form.get("notes")),
    }
