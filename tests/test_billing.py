"""Tests for the external billing status transitions."""
import pytest

from studio_crm.core.models import InvoiceSync
from studio_crm.sync.billing import advance_sync


def _now() -> str:
    return "2025-01-01T00:00:00+00:00"


def test_generate_allocates_external_id_once(id_factory):
    generated = advance_sync(None, "generate", id_factory, now=_now)

    assert generated == InvoiceSync(
        status="generated", external_id="inv_id-1", last_action_at="2025-01-01T00:00:00+00:00"
    )
    assert advance_sync(generated, "generate", id_factory, now=_now) is generated


def test_collect_before_generate_creates_the_record(id_factory):
    paid = advance_sync(InvoiceSync(), "collect", id_factory, now=_now)

    assert paid.status == "paid"
    assert paid.external_id == "inv_id-1"


def test_status_never_moves_backwards(id_factory):
    paid = advance_sync(None, "collect", id_factory, now=_now)

    assert advance_sync(paid, "send", id_factory, now=_now) is paid


def test_link_base_sets_external_url(id_factory):
    sent = advance_sync(None, "send", id_factory, link_base="https://pay.example/i", now=_now)

    assert sent.external_url == "https://pay.example/i/inv_id-1"


def test_unknown_action_is_rejected():
    with pytest.raises(ValueError, match="Unknown billing action"):
        advance_sync(None, "refund")
