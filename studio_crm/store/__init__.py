"""Reducers, normalization, persistence, and the store that ties them together."""
from studio_crm.store.persistence import STORAGE_KEY, LocalStorage
from studio_crm.store.reducers import Action, reduce
from studio_crm.store.store import CRMStore

__all__ = ["Action", "CRMStore", "LocalStorage", "STORAGE_KEY", "reduce"]
