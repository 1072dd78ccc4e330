"""Built-in starter dataset used when no stored CRM data is available."""
from __future__ import annotations

from studio_crm.core.models import CRMData

SAMPLE_DOCUMENT = {
    "clients": [
        {
            "id": "client-ava",
            "name": "Ava Martinez",
            "email": "ava@example.com",
            "phone": "555-0101",
            "status": "booked",
            "eventDate": "2025-06-14",
            "budget": 28000,
            "notes": "Garden ceremony, 120 guests",
        },
        {
            "id": "client-noah",
            "name": "Noah Patel",
            "email": "noah@example.com",
            "status": "lead",
            "budget": 15000,
        },
        {
            "id": "client-liam",
            "name": "Liam Chen",
            "email": "liam@example.com",
            "phone": "555-0133",
            "status": "planning",
            "eventDate": "2025-09-20",
        },
    ],
    "vendors": [
        {
            "id": "vendor-bloom",
            "name": "Bloom & Vine",
            "service": "Florals",
            "cost": 2400,
            "email": "hello@bloomvine.example",
            "preferredContact": "email",
        },
        {
            "id": "vendor-lens",
            "name": "Golden Hour Studio",
            "service": "Photography",
            "cost": 3800,
            "phone": "555-0199",
            "website": "https://goldenhour.example",
            "preferredContact": "phone",
        },
        {
            "id": "vendor-feast",
            "name": "Harvest Table",
            "service": "Catering",
            "cost": 9600,
            "preferredContact": "text",
        },
    ],
    "events": [
        {
            "id": "event-ava",
            "name": "Martinez Wedding",
            "date": "2025-06-14",
            "clientId": "client-ava",
            "venue": "Rosewood Estate",
            "venueCost": 6500,
            "coordinator": "Jordan",
            "status": "confirmed",
            "vendorIds": ["vendor-bloom", "vendor-lens"],
            "vendorCosts": {"vendor-bloom": 2400},
            "estimate": 28000,
            "deposit": 5000,
            "depositPaid": True,
        },
        {
            "id": "event-liam",
            "name": "Chen Rehearsal Dinner",
            "date": "2025-09-19",
            "clientId": "client-liam",
            "venue": "Harbor Loft",
            "coordinator": "Sam",
            "status": "bid",
            "vendorIds": ["vendor-feast"],
            "estimate": 12000,
            "depositPaid": False,
        },
    ],
    "invoices": [
        {
            "id": "invoice-ava-1",
            "clientId": "client-ava",
            "issueDate": "2025-01-10",
            "dueDate": "2025-02-10",
            "status": "paid",
            "total": 5000,
            "items": [{"id": "item-ava-deposit", "description": "Planning deposit", "amount": 5000}],
        },
        {
            "id": "invoice-liam-1",
            "clientId": "client-liam",
            "issueDate": "2025-03-02",
            "dueDate": "2025-04-01",
            "status": "sent",
            "total": 1800,
            "items": [
                {"id": "item-liam-consult", "description": "Design consultation", "amount": 600},
                {"id": "item-liam-plan", "description": "Timeline planning", "amount": 1200},
            ],
            "notes": "Net 30",
        },
    ],
}


def sample_data() -> CRMData:
    """Return a fresh copy of the starter dataset."""

    return CRMData.from_dict(SAMPLE_DOCUMENT)
