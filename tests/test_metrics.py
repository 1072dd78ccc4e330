"""Tests for the dashboard metrics derived from a CRM snapshot."""
from datetime import date

import pytest

from studio_crm.core.models import CRMData, Client, Event, Invoice, Vendor
from studio_crm.metrics.aggregator import (
    UNKNOWN_CLIENT,
    client_display_name,
    client_pipeline,
    compute_overview,
    confirmed_pipeline,
    filter_vendors,
    held_deposits,
    proposed_pipeline,
    recent_invoices,
    upcoming_events,
    vendor_service_counts,
)


def test_pipeline_sums_for_mixed_statuses():
    events = [
        Event(id="1", status="proposed", estimate=1000),
        Event(id="2", status="bid", estimate=2000),
        Event(id="3", status="contacted", estimate=500),
        Event(id="4", status="confirmed", estimate=4000, deposit=1000),
    ]

    assert proposed_pipeline(events) == 3500
    assert confirmed_pipeline(events) == 3000


def test_confirmed_pipeline_never_goes_negative():
    events = [Event(id="1", status="confirmed", estimate=1000, deposit=4000)]

    assert confirmed_pipeline(events) == 0


def test_held_deposits_only_count_paid_amounts():
    events = [
        Event(id="1", deposit=500, deposit_paid=True),
        Event(id="2", deposit=700, deposit_paid=False),
        Event(id="3", deposit=None, deposit_paid=True),
    ]

    assert held_deposits(events) == (500, 1)


def test_overview_of_sample_data(sample: CRMData):
    overview = compute_overview(sample)

    assert overview.total_clients == 3
    assert overview.pipeline_confirmed == 23000
    assert overview.pipeline_proposed == 12000
    assert overview.confirmed_after_vendor_cost == 23000 - 2400 - 3800
    assert overview.held_deposits == 5000
    assert overview.held_deposit_count == 1
    assert [event.id for event in overview.upcoming_events] == ["event-ava", "event-liam"]
    assert [invoice.id for invoice in overview.recent_invoices] == ["invoice-liam-1", "invoice-ava-1"]


def test_overview_of_empty_data_is_all_zero():
    overview = compute_overview(CRMData())

    assert overview.total_clients == 0
    assert overview.pipeline_confirmed == 0
    assert overview.pipeline_proposed == 0
    assert overview.held_deposits == 0
    assert overview.upcoming_events == []
    assert overview.recent_invoices == []
    assert all(column.clients == [] for column in overview.pipeline)


def test_client_pipeline_buckets_preserve_order():
    clients = [
        Client(id="a", name="A", status="lead"),
        Client(id="b", name="B", status="booked"),
        Client(id="c", name="C", status="lead"),
    ]

    columns = {column.status: column for column in client_pipeline(clients)}

    assert [client.id for client in columns["lead"].clients] == ["a", "c"]
    assert columns["booked"].label == "Booked"
    assert columns["completed"].clients == []


def test_upcoming_events_policy_controls_past_dates():
    events = [
        Event(id="past", date="2024-01-01"),
        Event(id="later", date="2026-05-01"),
        Event(id="soon", date="2025-12-01"),
        Event(id="unknown", date="sometime"),
    ]
    today = date(2025, 6, 1)

    assert [event.id for event in upcoming_events(events, "all", today)] == ["past", "soon", "later", "unknown"]
    assert [event.id for event in upcoming_events(events, "future", today)] == ["soon", "later"]
    assert len(upcoming_events(events, "all", today, limit=2)) == 2


def test_upcoming_events_rejects_unknown_policy():
    with pytest.raises(ValueError, match="Unknown upcoming policy"):
        upcoming_events([], "next-week")


def test_recent_invoices_sort_newest_first():
    invoices = [
        Invoice(id="old", issue_date="2024-02-01"),
        Invoice(id="new", issue_date="2025-03-01"),
        Invoice(id="bad", issue_date=""),
    ]

    assert [invoice.id for invoice in recent_invoices(invoices)] == ["new", "old", "bad"]


def test_client_display_name_tolerates_deleted_clients(sample: CRMData):
    assert client_display_name(sample, "client-ava") == "Ava Martinez"
    assert client_display_name(sample, "client-gone") == UNKNOWN_CLIENT


def test_vendor_roster_filters(sample: CRMData):
    sample.vendors.append(Vendor(id="v-x", name="Petal Co", service="florals", notes="Peonies"))

    assert vendor_service_counts(sample.vendors) == {"Catering": 1, "Florals": 1, "florals": 1, "Photography": 1}
    assert [vendor.id for vendor in filter_vendors(sample.vendors, service="Florals")] == ["vendor-bloom", "v-x"]
    assert [vendor.id for vendor in filter_vendors(sample.vendors, search="peon")] == ["v-x"]
