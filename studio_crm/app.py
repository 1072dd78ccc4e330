"""Wire settings, local storage, session, and the optional remote mirror into a store."""
from __future__ import annotations

import logging
from typing import Optional

from studio_crm.auth import Session, SessionStore, user_identifier
from studio_crm.core.config import Settings
from studio_crm.store.persistence import LocalStorage
from studio_crm.store.store import CRMStore
from studio_crm.sync.documents import DocumentStore, HttpDocumentStore
from studio_crm.sync.mirror import RemoteMirror

logger = logging.getLogger(__name__)


def open_store(
    settings: Settings,
    session: Optional[Session] = None,
    documents: Optional[DocumentStore] = None,
    start_worker: bool = True,
) -> CRMStore:
    """Hydrate from local storage, then mirror remotely when a session is active.

    Local data is available immediately; a remote document, when present,
    overwrites it (last writer wins) and later remote changes keep doing so.
    """

    store = CRMStore(storage=LocalStorage(settings.data_file))
    store.hydrate()
    logger.info("Loaded %d clients from %s", len(store.state.clients), settings.data_file)

    if session is None:
        session = SessionStore(settings.session_file).load()
    user_id = user_identifier(session)
    if not user_id:
        return store

    if documents is None:
        if not settings.remote_enabled:
            return store
        documents = HttpDocumentStore(settings.remote_url or "", token=settings.remote_token)

    mirror = RemoteMirror(documents, user_id)
    remote = mirror.fetch()
    if remote is not None:
        store.apply_remote_snapshot(remote)
    store.attach_mirror(mirror)
    if start_worker:
        mirror.start()
    logger.info("Remote mirror active for %s", user_id)
    return store


def close_store(store: CRMStore) -> None:
    """Drain pending remote writes and stop following remote changes."""

    if store.mirror:
        store.mirror.close()
        store.detach_mirror()
