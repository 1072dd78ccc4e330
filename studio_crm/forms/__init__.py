"""Form validation and payload conversion for the CRM editors."""
from studio_crm.forms.payloads import client_payload, event_payload, invoice_payload, vendor_payload
from studio_crm.forms.validation import validate_client, validate_event, validate_invoice, validate_vendor

__all__ = [
    "client_payload",
    "event_payload",
    "invoice_payload",
    "validate_client",
    "validate_event",
    "validate_invoice",
    "validate_vendor",
    "vendor_payload",
]
