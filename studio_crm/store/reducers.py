"""Pure reducers: ``(state, action) -> new state`` for every store mutation."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from studio_crm.core.models import COLLECTIONS, RECORD_TYPES, CRMData, Event, Vendor, field_values
from studio_crm.core.utils import generate_id
from studio_crm.store.normalize import (
    normalize_client,
    normalize_event,
    normalize_invoice,
    normalize_vendor,
    prune_vendor,
)

ACTION_KINDS = ("add", "update", "delete", "replace")


@dataclass
class Action:
    """A single mutation request against one collection."""

    kind: str
    collection: str = ""
    record_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    snapshot: Optional[CRMData] = None

    def __post_init__(self) -> None:
        if self.kind not in ACTION_KINDS:
            raise ValueError(f"Unknown action kind: {self.kind}")
        if self.kind != "replace" and self.collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {self.collection}")


def _normalize(collection: str, record: Any, state: CRMData, id_factory: Callable[[], str]) -> Any:
    if collection == "clients":
        return normalize_client(record)
    if collection == "vendors":
        return normalize_vendor(record)
    if collection == "events":
        return normalize_event(record, (vendor.id for vendor in state.vendors))
    return normalize_invoice(record, id_factory)


def _build(collection: str, record_id: str, payload: Dict[str, Any]) -> Any:
    record_type = RECORD_TYPES[collection]
    values = field_values(record_type, payload)
    values["id"] = record_id
    return record_type.from_dict(values)


def _add(state: CRMData, action: Action, id_factory: Callable[[], str]) -> CRMData:
    record_id = action.record_id or id_factory()
    record = _normalize(action.collection, _build(action.collection, record_id, action.payload), state, id_factory)
    return replace(state, **{action.collection: [record, *getattr(state, action.collection)]})


def _update(state: CRMData, action: Action, id_factory: Callable[[], str]) -> CRMData:
    records: List[Any] = getattr(state, action.collection)
    updated: List[Any] = []
    for record in records:
        if record.id != action.record_id:
            updated.append(record)
            continue
        patch = field_values(type(record), action.payload)
        merged = {**asdict(record), **patch}
        if action.collection == "invoices" and "items" in patch and "total" not in patch:
            # new items without a total: derive it from the items again
            merged["total"] = None
        rebuilt = _build(action.collection, record.id, merged)
        updated.append(_normalize(action.collection, rebuilt, state, id_factory))
    return replace(state, **{action.collection: updated})


def _delete(state: CRMData, action: Action) -> CRMData:
    remaining = [record for record in getattr(state, action.collection) if record.id != action.record_id]
    next_state = replace(state, **{action.collection: remaining})
    if action.collection == "vendors":
        next_state = replace(
            next_state,
            events=[prune_vendor(event, action.record_id) for event in next_state.events],
        )
    return next_state


def reduce(state: CRMData, action: Action, id_factory: Callable[[], str] = generate_id) -> CRMData:
    """Return the aggregate that results from applying ``action`` to ``state``.

    The input state is never mutated. Updates and deletes that target an
    unknown id return an equivalent aggregate without raising.
    """

    if action.kind == "replace":
        return action.snapshot if action.snapshot is not None else CRMData()
    if action.kind == "add":
        return _add(state, action, id_factory)
    if action.kind == "update":
        return _update(state, action, id_factory)
    return _delete(state, action)


def find_record(state: CRMData, collection: str, record_id: str) -> Optional[Any]:
    """Look up a record by id, or ``None`` when it does not exist."""

    return next((record for record in getattr(state, collection) if record.id == record_id), None)


def assigned_vendors(state: CRMData, event: Event) -> List[Vendor]:
    """Return the vendor records assigned to ``event`` that still exist."""

    by_id = {vendor.id: vendor for vendor in state.vendors}
    return [by_id[vendor_id] for vendor_id in event.vendor_ids or [] if vendor_id in by_id]
