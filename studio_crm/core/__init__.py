"""Core building blocks for the studio CRM package."""
from studio_crm.core.config import Settings, load_settings
from studio_crm.core.logging import configure_logging
from studio_crm.core.models import (
    COLLECTIONS,
    CRMData,
    Client,
    Event,
    Invoice,
    InvoiceItem,
    InvoiceSync,
    Vendor,
)
from studio_crm.core.utils import generate_id

__all__ = [
    "COLLECTIONS",
    "CRMData",
    "Client",
    "Event",
    "Invoice",
    "InvoiceItem",
    "InvoiceSync",
    "Settings",
    "Vendor",
    "configure_logging",
    "generate_id",
    "load_settings",
]
