"""Idempotent state transitions for an invoice's external billing mirror."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from studio_crm.core.models import SYNC_STATUSES, InvoiceSync
from studio_crm.core.utils import generate_id

BILLING_ACTIONS = {
    "generate": "generated",
    "send": "sent",
    "collect": "paid",
}

_RANK = {status: index for index, status in enumerate(SYNC_STATUSES)}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def advance_sync(
    sync: Optional[InvoiceSync],
    action: str,
    id_factory: Callable[[], str] = generate_id,
    link_base: str | None = None,
    now: Callable[[], str] = _utc_now,
) -> InvoiceSync:
    """Return the sync record after running ``action`` (generate, send or collect).

    The external id is allocated once and reused afterwards. Status only moves
    forward; repeating an action, or running one that is already implied by
    the current status, returns the record unchanged.
    """

    if action not in BILLING_ACTIONS:
        raise ValueError(f"Unknown billing action: {action}")

    current = sync or InvoiceSync()
    target = BILLING_ACTIONS[action]
    if current.external_id and _RANK.get(current.status, 0) >= _RANK[target]:
        return current

    external_id = current.external_id or f"inv_{id_factory()}"
    external_url = current.external_url
    if external_url is None and link_base:
        external_url = f"{link_base.rstrip('/')}/{external_id}"

    status = target if _RANK[target] > _RANK.get(current.status, 0) else current.status
    return InvoiceSync(
        status=status,
        external_id=external_id,
        external_url=external_url,
        last_action_at=now(),
    )
