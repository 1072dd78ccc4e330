"""Remote mirroring and invoice billing status."""
from studio_crm.sync.billing import BILLING_ACTIONS, advance_sync
from studio_crm.sync.documents import DocumentStore, HttpDocumentStore, InMemoryDocumentStore
from studio_crm.sync.mirror import RemoteMirror

__all__ = [
    "BILLING_ACTIONS",
    "DocumentStore",
    "HttpDocumentStore",
    "InMemoryDocumentStore",
    "RemoteMirror",
    "advance_sync",
]
