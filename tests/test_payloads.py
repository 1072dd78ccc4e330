"""Tests for turning editor forms into store payloads."""
from studio_crm.forms.payloads import client_payload, event_payload, invoice_payload, vendor_payload
from studio_crm.forms.validation import validate_event, validate_invoice
from studio_crm.store.reducers import find_record
from studio_crm.store.store import CRMStore


def test_client_payload_parses_amounts_dates_and_blanks():
    payload = client_payload(
        {"name": " Mia Rossi ", "email": "mia@example.com", "phone": "", "event_date": "10/04/2025", "budget": "12,500"}
    )

    assert payload == {
        "name": "Mia Rossi",
        "email": "mia@example.com",
        "phone": None,
        "status": "lead",
        "event_date": "2025-10-04",
        "budget": 12500.0,
        "notes": None,
    }


def test_vendor_edit_can_clear_optional_fields(sample_store: CRMStore):
    sample_store.update_vendor(
        "vendor-bloom", vendor_payload({"name": "Bloom & Vine", "service": "Florals", "cost": "", "website": ""})
    )

    vendor = find_record(sample_store.state, "vendors", "vendor-bloom")
    assert vendor.cost is None
    assert vendor.website is None
    assert vendor.preferred_contact is None


def test_event_form_keeps_costs_only_for_assigned_vendors(sample_store: CRMStore):
    form = {
        "name": "Garden Party",
        "date": "2026-05-02",
        "client_id": "client-ava",
        "vendor_ids": ["vendor-bloom"],
        "vendor_costs": {"vendor-bloom": "1,200", "vendor-lens": "900"},
        "estimate": "9000",
        "deposit": "",
        "deposit_paid": True,
    }

    payload = event_payload(form)
    sample_store.add_event(payload)

    event = sample_store.state.events[0]
    assert payload["vendor_costs"] == {"vendor-bloom": 1200.0}
    assert event.vendor_ids == ["vendor-bloom"]
    assert event.estimate == 9000.0
    assert event.deposit_paid is False


def test_event_form_is_validated_against_current_clients(sample_store: CRMStore):
    form = {"name": "Gala", "date": "2026-01-10", "client_id": "client-gone"}

    errors = validate_event(form, [client.id for client in sample_store.state.clients])

    assert errors == {"client_id": "Client no longer exists."}


def test_invoice_form_drops_blank_rows_and_lets_the_store_sum(store: CRMStore):
    form = {
        "client_id": "c1",
        "issue_date": "2025-09-01",
        "due_date": "2025-09-15",
        "items": [
            {"id": "", "description": "Florals", "amount": "300"},
            {"id": "", "description": "Venue", "amount": "700"},
            {"id": "", "description": "", "amount": ""},
        ],
        "total": "",
    }

    assert validate_invoice(form) == {}
    store.add_invoice(invoice_payload(form))

    invoice = store.state.invoices[0]
    assert [item.description for item in invoice.items] == ["Florals", "Venue"]
    assert all(item.id for item in invoice.items)
    assert invoice.total == 1000


def test_invoice_edit_keeps_item_ids_and_recomputes_total(store: CRMStore):
    store.add_invoice(
        invoice_payload(
            {
                "client_id": "c1",
                "issue_date": "2025-09-01",
                "due_date": "2025-09-15",
                "items": [{"description": "Deposit", "amount": "500"}],
            }
        )
    )
    invoice = store.state.invoices[0]
    deposit_id = invoice.items[0].id

    form = {
        "client_id": "c1",
        "issue_date": "2025-09-01",
        "due_date": "2025-09-15",
        "items": [
            {"id": deposit_id, "description": "Deposit", "amount": "500"},
            {"id": "", "description": "Balance", "amount": "700"},
        ],
        "total": "",
    }
    store.update_invoice(invoice.id, invoice_payload(form))

    updated = store.state.invoices[0]
    assert updated.items[0].id == deposit_id
    assert updated.total == 1200
