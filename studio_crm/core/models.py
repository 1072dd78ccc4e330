"""Data models for the four CRM collections and the aggregate that holds them."""
from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

CLIENT_STATUSES = ("lead", "booked", "planning", "completed")
EVENT_STATUSES = ("contacted", "bid", "proposed", "confirmed")
INVOICE_STATUSES = ("draft", "sent", "paid", "overdue")
SYNC_STATUSES = ("not_created", "generated", "sent", "paid")
PREFERRED_CONTACTS = ("email", "phone", "text")

COLLECTIONS = ("clients", "vendors", "events", "invoices")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def field_values(cls: type, raw: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase or snake_case keys onto dataclass field names."""

    names = {f.name for f in fields(cls)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        attr = key if key in names else _snake(key)
        if attr in names:
            values[attr] = value
    return values


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_camel(key): value for key, value in data.items() if value is not None}


@dataclass
class Client:
    """A prospective or booked customer."""

    id: str = ""
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    status: str = "lead"
    event_date: Optional[str] = None
    budget: Optional[float] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Client":
        return cls(**field_values(cls, raw))


@dataclass
class Vendor:
    """A supplier the studio books for events."""

    id: str = ""
    name: str = ""
    service: str = ""
    cost: Optional[float] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    preferred_contact: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Vendor":
        return cls(**field_values(cls, raw))


@dataclass
class Event:
    """A production on the calendar, optionally staffed by vendors."""

    id: str = ""
    name: str = ""
    date: str = ""
    client_id: str = ""
    venue: str = ""
    coordinator: str = ""
    status: str = "contacted"
    venue_cost: Optional[float] = None
    timeline: Optional[str] = None
    vendor_ids: Optional[List[str]] = None
    vendor_costs: Optional[Dict[str, float]] = None
    estimate: Optional[float] = None
    deposit: Optional[float] = None
    deposit_paid: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Event":
        values = field_values(cls, raw)
        if values.get("vendor_ids") is not None:
            values["vendor_ids"] = list(values["vendor_ids"])
        if values.get("vendor_costs") is not None:
            values["vendor_costs"] = dict(values["vendor_costs"])
        return cls(**values)


@dataclass
class InvoiceItem:
    """A single billable line."""

    id: str = ""
    description: str = ""
    amount: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "InvoiceItem":
        return cls(**field_values(cls, raw))


@dataclass
class InvoiceSync:
    """One-way mirror of an invoice into an external billing system."""

    status: str = "not_created"
    external_id: Optional[str] = None
    external_url: Optional[str] = None
    last_action_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "InvoiceSync":
        return cls(**field_values(cls, raw))


@dataclass
class Invoice:
    """A bill issued to a client."""

    id: str = ""
    client_id: str = ""
    issue_date: str = ""
    due_date: str = ""
    status: str = "draft"
    total: Optional[float] = None
    items: List[InvoiceItem] = field(default_factory=list)
    notes: Optional[str] = None
    sync: Optional[InvoiceSync] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "clientId": self.client_id,
            "issueDate": self.issue_date,
            "dueDate": self.due_date,
            "status": self.status,
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
        }
        if self.notes is not None:
            data["notes"] = self.notes
        if self.sync is not None:
            data["sync"] = self.sync.to_dict()
        return data

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Invoice":
        values = field_values(cls, raw)
        values["items"] = [
            item if isinstance(item, InvoiceItem) else InvoiceItem.from_dict(item)
            for item in values.get("items") or []
        ]
        sync = values.get("sync")
        if isinstance(sync, dict):
            values["sync"] = InvoiceSync.from_dict(sync)
        return cls(**values)


RECORD_TYPES = {
    "clients": Client,
    "vendors": Vendor,
    "events": Event,
    "invoices": Invoice,
}


@dataclass
class CRMData:
    """The whole aggregate; replaced wholesale on every mutation."""

    clients: List[Client] = field(default_factory=list)
    vendors: List[Vendor] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    invoices: List[Invoice] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready document stored locally and mirrored remotely."""

        return {name: [record.to_dict() for record in getattr(self, name)] for name in COLLECTIONS}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CRMData":
        if not isinstance(raw, dict):
            raise ValueError("CRM data must be a JSON object")
        return cls(
            **{
                name: [RECORD_TYPES[name].from_dict(entry) for entry in raw.get(name) or []]
                for name in COLLECTIONS
            }
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "CRMData":
        return cls.from_dict(json.loads(text))
