"""Form-level validation run before any store mutation.

The store accepts whatever it is given; these checks are the only guard
against empty names, malformed contact details, and negative amounts.
Each validator returns ``{field: message}`` and an empty dict when valid.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Iterable, Mapping, Optional
from urllib.parse import urlparse

from studio_crm.core.dates import to_date
from studio_crm.core.models import INVOICE_STATUSES, PREFERRED_CONTACTS

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9+().\-\s]{7,}$")

logger = logging.getLogger(__name__)


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    return str(value).strip() if value is not None else ""


def _amount(value: Any) -> Optional[float]:
    """Parse a form amount; ``None`` means the value is not a usable number."""

    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _invalid_amount(value: Any) -> bool:
    if value is None or str(value).strip() == "":
        return False
    number = _amount(value)
    return number is None or number < 0


def validate_client(form: Mapping[str, Any]) -> Dict[str, str]:
    """Return problems with a client form, keyed by field."""

    errors: Dict[str, str] = {}

    name = _text(form, "name")
    if not name:
        errors["name"] = "Client name is required."
    elif len(name) < 2:
        errors["name"] = "Use at least two characters."

    email = _text(form, "email")
    if not email:
        errors["email"] = "Email is required."
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = "Enter a valid email address."

    phone = _text(form, "phone")
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = "Enter a valid phone number (digits, spaces, or symbols)."

    event_date = _text(form, "event_date")
    if event_date and to_date(event_date) is None:
        errors["event_date"] = "Enter a valid event date."

    if _invalid_amount(form.get("budget")):
        errors["budget"] = "Budget must be a positive number."

    return errors


def validate_vendor(form: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if not _text(form, "name"):
        errors["name"] = "Vendor name is required."
    if not _text(form, "service"):
        errors["service"] = "Service is required."

    email = _text(form, "email")
    if email and not EMAIL_PATTERN.match(email):
        errors["email"] = "Enter a valid email."

    if _invalid_amount(form.get("cost")):
        errors["cost"] = "Enter a valid cost or leave blank."

    phone = _text(form, "phone")
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = "Enter a valid phone number."

    website = _text(form, "website")
    if website:
        parsed = urlparse(website)
        if parsed.scheme and parsed.scheme not in ("http", "https"):
            errors["website"] = "Include http:// or https://"
        elif not parsed.scheme or not parsed.netloc:
            errors["website"] = "Enter a valid URL."

    preferred = _text(form, "preferred_contact")
    if preferred and preferred not in PREFERRED_CONTACTS:
        errors["preferred_contact"] = "Choose email, phone, or text."

    return errors


def validate_event(form: Mapping[str, Any], known_client_ids: Iterable[str]) -> Dict[str, str]:
    """Validate an event form against the clients that currently exist."""

    errors: Dict[str, str] = {}

    if not _text(form, "name"):
        errors["name"] = "Event name is required."

    event_date = _text(form, "date")
    if not event_date:
        errors["date"] = "Event date is required."
    elif to_date(event_date) is None:
        errors["date"] = "Enter a valid date."

    client_id = _text(form, "client_id")
    if not client_id:
        errors["client_id"] = "Select a client."
    elif client_id not in set(known_client_ids):
        errors["client_id"] = "Client no longer exists."

    if _invalid_amount(form.get("venue_cost")):
        errors["venue_cost"] = "Enter a valid venue cost."
    if _invalid_amount(form.get("estimate")):
        errors["estimate"] = "Enter a valid estimate."
    if _invalid_amount(form.get("deposit")):
        errors["deposit"] = "Enter a valid deposit."

    if not _text(form, "deposit") and form.get("deposit_paid"):
        errors["deposit_paid"] = "Add a deposit amount before marking it paid."

    vendor_costs = form.get("vendor_costs") or {}
    for vendor_id in form.get("vendor_ids") or []:
        if _invalid_amount(vendor_costs.get(vendor_id)):
            errors[f"vendor_cost-{vendor_id}"] = "Enter a valid vendor cost."

    return errors


def validate_invoice(form: Mapping[str, Any]) -> Dict[str, str]:
    """Require a client, both dates, and at least one priced line item."""

    errors: Dict[str, str] = {}

    if not _text(form, "client_id"):
        errors["client_id"] = "Select a client."
    for key, label in (("issue_date", "Issue date"), ("due_date", "Due date")):
        value = _text(form, key)
        if not value:
            errors[key] = f"{label} is required."
        elif to_date(value) is None:
            errors[key] = f"Enter a valid {label.lower()}."

    items = [
        item
        for item in form.get("items") or []
        if _text(item, "description") and _text(item, "amount")
    ]
    if not items:
        errors["items"] = "Add at least one line item."
    elif any(_invalid_amount(item.get("amount")) for item in items):
        errors["items"] = "Line item amounts must be positive numbers."

    if _invalid_amount(form.get("total")):
        errors["total"] = "Enter a valid total."

    status = _text(form, "status")
    if status and status not in INVOICE_STATUSES:
        errors["status"] = "Choose a valid invoice status."

    if errors:
        logger.debug("Invoice form rejected: %s", errors)
    return errors
