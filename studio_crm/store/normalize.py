"""Normalization rules applied to every record written to the store."""
from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from studio_crm.core.models import Client, Event, Invoice, InvoiceItem, Vendor
from studio_crm.core.utils import generate_id


def _is_amount(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value) and value >= 0


def normalize_client(client: Client) -> Client:
    """Fill the default pipeline status."""

    if not client.status:
        return replace(client, status="lead")
    return client


def normalize_vendor(vendor: Vendor) -> Vendor:
    return vendor


def normalize_event(event: Event, known_vendor_ids: Iterable[str]) -> Event:
    """Apply set semantics to vendor assignments and prune the cost map.

    ``vendor_ids`` keeps the first occurrence of every id that exists in the
    vendor collection; ``vendor_costs`` keeps non-negative amounts for assigned
    vendors only. Either collapses to ``None`` when nothing valid remains. A
    deposit can only be marked paid when a deposit amount exists.
    """

    known = set(known_vendor_ids)
    vendor_ids: List[str] = []
    for vendor_id in event.vendor_ids or []:
        if vendor_id in known and vendor_id not in vendor_ids:
            vendor_ids.append(vendor_id)

    vendor_costs: Dict[str, float] = {
        vendor_id: cost
        for vendor_id, cost in (event.vendor_costs or {}).items()
        if vendor_id in vendor_ids and _is_amount(cost)
    }

    deposit_paid = bool(event.deposit_paid) if event.deposit is not None else False
    return replace(
        event,
        vendor_ids=vendor_ids or None,
        vendor_costs=vendor_costs or None,
        deposit_paid=deposit_paid,
    )


def prune_vendor(event: Event, vendor_id: str) -> Event:
    """Drop a deleted vendor from an event's assignments and cost map."""

    if vendor_id not in (event.vendor_ids or []) and vendor_id not in (event.vendor_costs or {}):
        return event

    vendor_ids = [existing for existing in event.vendor_ids or [] if existing != vendor_id]
    vendor_costs = {
        existing: cost for existing, cost in (event.vendor_costs or {}).items() if existing != vendor_id
    }
    return replace(event, vendor_ids=vendor_ids or None, vendor_costs=vendor_costs or None)


def _coerce_item(item: Any) -> InvoiceItem:
    if isinstance(item, InvoiceItem):
        return item
    return InvoiceItem.from_dict(dict(item))


def normalize_items(items: Iterable[Any], id_factory: Callable[[], str] = generate_id) -> List[InvoiceItem]:
    """Give every item an id, keeping ids that are already set."""

    normalized: List[InvoiceItem] = []
    for item in items:
        coerced = _coerce_item(item)
        normalized.append(coerced if coerced.id else replace(coerced, id=id_factory()))
    return normalized


def normalize_invoice(invoice: Invoice, id_factory: Callable[[], str] = generate_id) -> Invoice:
    """Assign missing item ids and derive the total from items when unset."""

    items = normalize_items(invoice.items or [], id_factory)
    total: Optional[float] = invoice.total
    if total is None:
        total = sum(item.amount for item in items)
    return replace(invoice, items=items, total=total)
