"""The CRM data store: owns the aggregate, applies reducers, persists changes."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from studio_crm.core.models import CRMData, Invoice
from studio_crm.core.utils import generate_id
from studio_crm.sample_data import sample_data
from studio_crm.store.persistence import LocalStorage
from studio_crm.store.reducers import Action, find_record, reduce
from studio_crm.sync.billing import advance_sync
from studio_crm.sync.mirror import RemoteMirror

logger = logging.getLogger(__name__)

Listener = Callable[[CRMData], None]
Payload = Dict[str, Any]


class CRMStore:
    """Single owner of the clients, vendors, events, and invoices collections.

    Every mutation runs a pure reducer, swaps in the new aggregate, writes it
    to local storage, and hands a snapshot to the remote mirror when one is
    attached. The store does not validate input; forms do that upstream.
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        mirror: RemoteMirror | None = None,
        id_factory: Callable[[], str] = generate_id,
        initial: CRMData | None = None,
        billing_link_base: str | None = None,
    ) -> None:
        self.storage = storage
        self.mirror = mirror
        self.id_factory = id_factory
        self.billing_link_base = billing_link_base
        self._state = initial if initial is not None else CRMData()
        self._listeners: List[Listener] = []
        self.is_hydrated = initial is not None
        # remote snapshots arrive on the sync thread
        self._lock = threading.RLock()

    @property
    def state(self) -> CRMData:
        return self._state

    # ------------------------------------------------------------------ lifecycle

    def hydrate(self) -> CRMData:
        """Load the last persisted aggregate, falling back to the sample dataset."""

        stored = self.storage.load() if self.storage else None
        if stored is None:
            logger.info("No stored CRM data found; starting from the sample dataset")
            stored = sample_data()
        with self._lock:
            self._state = stored
            self.is_hydrated = True
            self._notify()
            return self._state

    def attach_mirror(self, mirror: RemoteMirror, listen: bool = True) -> None:
        """Start mirroring to ``mirror`` and optionally follow remote changes."""

        self.detach_mirror()
        self.mirror = mirror
        if listen:
            mirror.listen(self.apply_remote_snapshot)

    def detach_mirror(self) -> None:
        if self.mirror:
            self.mirror.unlisten()
        self.mirror = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def apply_remote_snapshot(self, data: CRMData) -> None:
        """Replace local state with a remote snapshot (last writer wins)."""

        logger.info("Applying remote CRM snapshot")
        with self._lock:
            self._state = reduce(self._state, Action(kind="replace", snapshot=data), self.id_factory)
            self._persist_locally()
            self._notify()

    # ------------------------------------------------------------------ internals

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)

    def _persist_locally(self) -> None:
        if not self.storage:
            return
        try:
            self.storage.save(self._state)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to persist CRM data to %s: %s", self.storage.path, exc)

    def dispatch(self, action: Action) -> CRMData:
        """Apply an action, persist the new aggregate, and publish it."""

        with self._lock:
            self._state = reduce(self._state, action, self.id_factory)
            self._persist_locally()
            if self.mirror:
                self.mirror.publish(self._state)
            self._notify()
            return self._state

    def _add(self, collection: str, payload: Payload) -> None:
        self.dispatch(Action("add", collection, self.id_factory(), dict(payload)))

    def _update(self, collection: str, record_id: str, payload: Payload) -> None:
        if find_record(self._state, collection, record_id) is None:
            logger.debug("Update for unknown %s id %s left the collection unchanged", collection, record_id)
        self.dispatch(Action("update", collection, record_id, dict(payload)))

    def _delete(self, collection: str, record_id: str) -> None:
        self.dispatch(Action("delete", collection, record_id))

    # ------------------------------------------------------------------ clients

    def add_client(self, payload: Payload) -> None:
        self._add("clients", payload)

    def update_client(self, client_id: str, payload: Payload) -> None:
        self._update("clients", client_id, payload)

    def delete_client(self, client_id: str) -> None:
        self._delete("clients", client_id)

    # ------------------------------------------------------------------ vendors

    def add_vendor(self, payload: Payload) -> None:
        self._add("vendors", payload)

    def update_vendor(self, vendor_id: str, payload: Payload) -> None:
        self._update("vendors", vendor_id, payload)

    def delete_vendor(self, vendor_id: str) -> None:
        """Remove a vendor and strip it from every event that references it."""

        self._delete("vendors", vendor_id)

    # ------------------------------------------------------------------ events

    def add_event(self, payload: Payload) -> None:
        self._add("events", payload)

    def update_event(self, event_id: str, payload: Payload) -> None:
        self._update("events", event_id, payload)

    def delete_event(self, event_id: str) -> None:
        self._delete("events", event_id)

    # ------------------------------------------------------------------ invoices

    def add_invoice(self, payload: Payload) -> None:
        self._add("invoices", payload)

    def update_invoice(self, invoice_id: str, payload: Payload) -> None:
        self._update("invoices", invoice_id, payload)

    def delete_invoice(self, invoice_id: str) -> None:
        self._delete("invoices", invoice_id)

    def _billing_action(self, invoice_id: str, action: str) -> Optional[Invoice]:
        with self._lock:
            invoice = find_record(self._state, "invoices", invoice_id)
            if invoice is None:
                logger.warning("Cannot %s unknown invoice %s", action, invoice_id)
                return None
            sync = advance_sync(invoice.sync, action, self.id_factory, self.billing_link_base)
            if sync is not invoice.sync:
                self.dispatch(Action("update", "invoices", invoice_id, {"sync": sync}))
            return find_record(self._state, "invoices", invoice_id)

    def generate_invoice_sync(self, invoice_id: str) -> Optional[Invoice]:
        """Create the external billing record once; repeated calls are no-ops."""

        return self._billing_action(invoice_id, "generate")

    def send_invoice_sync(self, invoice_id: str) -> Optional[Invoice]:
        return self._billing_action(invoice_id, "send")

    def collect_invoice_sync(self, invoice_id: str) -> Optional[Invoice]:
        return self._billing_action(invoice_id, "collect")
