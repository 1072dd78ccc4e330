"""Dashboard figures derived from the current CRM snapshot.

Everything here is a pure function of the aggregate: nothing is cached and
empty collections produce zeros and empty lists.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from studio_crm.core.dates import to_date
from studio_crm.core.models import CLIENT_STATUSES, CRMData, Client, Event, Invoice, Vendor

CLIENT_PIPELINE_LABELS = {
    "lead": "Leads",
    "booked": "Booked",
    "planning": "Planning",
    "completed": "Wrapped",
}
UNKNOWN_CLIENT = "Unknown client"


@dataclass
class PipelineColumn:
    status: str
    label: str
    clients: List[Client] = field(default_factory=list)


@dataclass
class DashboardOverview:
    """Figures rendered on the overview tab."""

    total_clients: int = 0
    pipeline: List[PipelineColumn] = field(default_factory=list)
    pipeline_confirmed: float = 0
    pipeline_proposed: float = 0
    confirmed_after_vendor_cost: float = 0
    held_deposits: float = 0
    held_deposit_count: int = 0
    upcoming_events: List[Event] = field(default_factory=list)
    recent_invoices: List[Invoice] = field(default_factory=list)


def client_pipeline(clients: List[Client]) -> List[PipelineColumn]:
    """Bucket clients by status, keeping collection order inside each bucket."""

    return [
        PipelineColumn(
            status=status,
            label=CLIENT_PIPELINE_LABELS[status],
            clients=[client for client in clients if client.status == status],
        )
        for status in CLIENT_STATUSES
    ]


def confirmed_pipeline(events: List[Event]) -> float:
    """Estimates minus deposits across confirmed events, never below zero."""

    confirmed = [event for event in events if event.status == "confirmed"]
    estimates = sum(event.estimate or 0 for event in confirmed)
    deposits = sum(event.deposit or 0 for event in confirmed)
    return max(estimates - deposits, 0)


def confirmed_vendor_cost(data: CRMData) -> float:
    vendor_costs = {vendor.id: vendor.cost or 0 for vendor in data.vendors}
    return sum(
        vendor_costs.get(vendor_id, 0)
        for event in data.events
        if event.status == "confirmed"
        for vendor_id in event.vendor_ids or []
    )


def proposed_pipeline(events: List[Event]) -> float:
    """Estimates of every event that is not confirmed yet (contacted, bid, proposed)."""

    return sum(event.estimate or 0 for event in events if event.status != "confirmed")


def held_deposits(events: List[Event]) -> Tuple[float, int]:
    """Total and count of deposits that have actually been paid."""

    paid = [
        event.deposit
        for event in events
        if event.deposit_paid and isinstance(event.deposit, (int, float)) and not isinstance(event.deposit, bool)
    ]
    return sum(paid), len(paid)


def upcoming_events(
    events: List[Event],
    policy: str = "all",
    today: Optional[date] = None,
    limit: int = 4,
) -> List[Event]:
    """Events in ascending date order.

    ``policy="all"`` keeps past events; ``policy="future"`` drops events dated
    before ``today`` along with events whose date cannot be read.
    """

    if policy not in ("all", "future"):
        raise ValueError(f"Unknown upcoming policy: {policy}")

    candidates = list(events)
    if policy == "future":
        cutoff = today or date.today()
        candidates = [event for event in candidates if (to_date(event.date) or date.min) >= cutoff]

    def _key(event: Event) -> Tuple[bool, date]:
        parsed = to_date(event.date)
        return (parsed is None, parsed or date.max)

    return sorted(candidates, key=_key)[:limit]


def recent_invoices(invoices: List[Invoice], limit: int = 4) -> List[Invoice]:
    """Invoices with the newest issue date first."""

    def _key(invoice: Invoice) -> Tuple[bool, date]:
        parsed = to_date(invoice.issue_date)
        return (parsed is not None, parsed or date.min)

    return sorted(invoices, key=_key, reverse=True)[:limit]


def compute_overview(
    data: CRMData,
    upcoming_policy: str = "all",
    today: Optional[date] = None,
    limit: int = 4,
) -> DashboardOverview:
    """Compute every overview figure from one snapshot."""

    pipeline_confirmed = confirmed_pipeline(data.events)
    deposits_total, deposits_count = held_deposits(data.events)
    return DashboardOverview(
        total_clients=len(data.clients),
        pipeline=client_pipeline(data.clients),
        pipeline_confirmed=pipeline_confirmed,
        pipeline_proposed=proposed_pipeline(data.events),
        confirmed_after_vendor_cost=max(pipeline_confirmed - confirmed_vendor_cost(data), 0),
        held_deposits=deposits_total,
        held_deposit_count=deposits_count,
        upcoming_events=upcoming_events(data.events, upcoming_policy, today, limit),
        recent_invoices=recent_invoices(data.invoices, limit),
    )


def client_display_name(data: CRMData, client_id: str) -> str:
    """Name of the referenced client, tolerating ids whose client was deleted."""

    for client in data.clients:
        if client.id == client_id:
            return client.name
    return UNKNOWN_CLIENT


def vendor_service_counts(vendors: List[Vendor]) -> Dict[str, int]:
    """Count vendors per service, alphabetically; blank services count as "Other"."""

    counts: Dict[str, int] = {}
    for vendor in vendors:
        key = (vendor.service or "").strip() or "Other"
        counts[key] = counts.get(key, 0) + 1
    return dict(sorted(counts.items(), key=lambda item: item[0].lower()))


def filter_vendors(vendors: List[Vendor], search: str = "", service: str = "all") -> List[Vendor]:
    """Filter the roster by service and a case-insensitive search over name, service, notes."""

    needle = search.strip().lower()
    matches: List[Vendor] = []
    for vendor in vendors:
        if service != "all" and (vendor.service or "").lower() != service.lower():
            continue
        if needle:
            haystack = " ".join(part for part in (vendor.name, vendor.service, vendor.notes) if part).lower()
            if needle not in haystack:
                continue
        matches.append(vendor)
    return matches
