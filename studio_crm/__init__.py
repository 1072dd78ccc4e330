"""Client, vendor, event, and invoice tracking for a small event studio."""
from studio_crm.core import CRMData, configure_logging, load_settings
from studio_crm.ingestion import import_clients
from studio_crm.metrics import compute_overview
from studio_crm.reporting import write_csv_exports
from studio_crm.store import Action, CRMStore, reduce

__all__ = [
    "Action",
    "CRMData",
    "CRMStore",
    "compute_overview",
    "configure_logging",
    "import_clients",
    "load_settings",
    "reduce",
    "write_csv_exports",
]
