"""Tests for the form validators that guard store mutations."""
from studio_crm.forms.validation import validate_client, validate_event, validate_invoice, validate_vendor


def test_valid_client_has_no_errors():
    form = {"name": "Ava Martinez", "email": "ava@example.com", "phone": "(555) 010-1010", "budget": "28000"}

    assert validate_client(form) == {}


def test_client_requires_name_and_well_formed_email():
    assert validate_client({"name": "", "email": ""}) == {
        "name": "Client name is required.",
        "email": "Email is required.",
    }
    errors = validate_client({"name": "A", "email": "not-an-email", "budget": "-5", "event_date": "someday"})
    assert errors["name"] == "Use at least two characters."
    assert errors["email"] == "Enter a valid email address."
    assert errors["budget"] == "Budget must be a positive number."
    assert "event_date" in errors


def test_vendor_optional_fields_are_checked_only_when_present():
    assert validate_vendor({"name": "Bloom", "service": "Florals"}) == {}

    errors = validate_vendor(
        {"name": "Bloom", "service": "Florals", "website": "ftp://bloom.example", "phone": "abc", "cost": "x"}
    )
    assert errors == {
        "website": "Include http:// or https://",
        "phone": "Enter a valid phone number.",
        "cost": "Enter a valid cost or leave blank.",
    }
    assert validate_vendor({"name": "Bloom", "service": "Florals", "website": "bloom"})["website"] == "Enter a valid URL."


def test_event_requires_existing_client_and_deposit_before_paid():
    form = {
        "name": "Gala",
        "date": "2025-10-01",
        "client_id": "client-gone",
        "deposit_paid": True,
        "vendor_ids": ["v1"],
        "vendor_costs": {"v1": "-20"},
    }

    errors = validate_event(form, known_client_ids=["client-ava"])

    assert errors == {
        "client_id": "Client no longer exists.",
        "deposit_paid": "Add a deposit amount before marking it paid.",
        "vendor_cost-v1": "Enter a valid vendor cost.",
    }


def test_valid_event_passes():
    form = {"name": "Gala", "date": "10/01/2025", "client_id": "client-ava", "deposit": "500", "deposit_paid": True}

    assert validate_event(form, ["client-ava"]) == {}


def test_invoice_needs_dates_and_a_priced_item():
    errors = validate_invoice({"client_id": "c1", "issue_date": "2025-01-01", "items": [{"description": "", "amount": ""}]})

    assert errors == {"due_date": "Due date is required.", "items": "Add at least one line item."}


def test_invoice_rejects_negative_line_items():
    form = {
        "client_id": "c1",
        "issue_date": "2025-01-01",
        "due_date": "2025-02-01",
        "items": [{"description": "Refund", "amount": "-10"}],
    }

    assert validate_invoice(form) == {"items": "Line item amounts must be positive numbers."}


def test_vendor_preferred_contact_and_invoice_status_use_known_values():
    vendor = validate_vendor({"name": "Bloom", "service": "Florals", "preferred_contact": "pigeon"})
    invoice = validate_invoice(
        {
            "client_id": "c1",
            "issue_date": "2025-01-01",
            "due_date": "2025-02-01",
            "status": "lost",
            "items": [{"description": "Deposit", "amount": 500}],
        }
    )

    assert vendor == {"preferred_contact": "Choose email, phone, or text."}
    assert invoice == {"status": "Choose a valid invoice status."}
