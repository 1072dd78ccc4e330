"""Streamlit dashboard for the studio CRM."""
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import streamlit as st

# Allow running via "streamlit run studio_crm/ui/dashboard.py" without installing the package
# by ensuring the repository root is on ``sys.path``.
if __package__ in {None, ""}:
    import sys

    sys.path.append(str(Path(__file__).resolve().parents[2]))

from studio_crm.app import close_store, open_store
from studio_crm.auth import SessionStore
from studio_crm.core.config import Settings, load_settings
from studio_crm.core.logging import configure_logging
from studio_crm.core.models import (
    CLIENT_STATUSES,
    EVENT_STATUSES,
    INVOICE_STATUSES,
    PREFERRED_CONTACTS,
    SYNC_STATUSES,
    Client,
    Event,
    Invoice,
    InvoiceItem,
    Vendor,
)
from studio_crm.forms.payloads import client_payload, event_payload, invoice_payload, vendor_payload
from studio_crm.forms.validation import validate_client, validate_event, validate_invoice, validate_vendor
from studio_crm.ingestion.text_import import import_clients
from studio_crm.metrics.aggregator import (
    client_display_name,
    compute_overview,
    filter_vendors,
    vendor_service_counts,
)
from studio_crm.reporting.csv_export import export_csv_blobs, format_value
from studio_crm.reporting.sinks import push_to_google_sheets, write_excel
from studio_crm.store.reducers import assigned_vendors
from studio_crm.store.store import CRMStore

BLANK_ITEM_ROWS = 2


def _rerun_app() -> None:
    """Trigger a Streamlit rerun, compatible with newer and older APIs."""

    rerun = getattr(st, "rerun", None) or getattr(st, "experimental_rerun", None)
    if not rerun:
        raise RuntimeError("Streamlit does not expose a rerun helper.")
    rerun()


def _session_store(settings: Settings) -> CRMStore:
    """Open the store once per browser session."""

    if "store" not in st.session_state:
        st.session_state.store = open_store(settings)
    return st.session_state.store


def _money(value: float | None) -> str:
    return f"${value:,.0f}" if value is not None else "-"


def _show_errors(errors: Dict[str, str]) -> None:
    for message in errors.values():
        st.error(message)


def _overview_tab(store: CRMStore, policy: str) -> None:
    overview = compute_overview(store.state, upcoming_policy=policy)

    row1 = st.columns(3)
    row1[0].metric("Clients", overview.total_clients)
    row1[1].metric("Confirmed pipeline", _money(overview.pipeline_confirmed))
    row1[2].metric("Proposed pipeline", _money(overview.pipeline_proposed))

    row2 = st.columns(2)
    row2[0].metric("Confirmed after vendor cost", _money(overview.confirmed_after_vendor_cost))
    row2[1].metric(
        "Held deposits",
        _money(overview.held_deposits),
        help=f"{overview.held_deposit_count} events with paid deposits",
    )

    st.markdown("### Client pipeline")
    columns = st.columns(len(overview.pipeline))
    for column, bucket in zip(columns, overview.pipeline):
        with column:
            st.markdown(f"**{bucket.label}** ({len(bucket.clients)})")
            for client in bucket.clients:
                st.caption(client.name)

    lower = st.columns(2)
    with lower[0]:
        st.markdown("### Upcoming events")
        if not overview.upcoming_events:
            st.caption("No events scheduled yet.")
        for event in overview.upcoming_events:
            st.write(f"{event.date} · {event.name} · {client_display_name(store.state, event.client_id)}")
    with lower[1]:
        st.markdown("### Recent invoices")
        if not overview.recent_invoices:
            st.caption("No invoices yet.")
        for invoice in overview.recent_invoices:
            st.write(
                f"{invoice.issue_date} · {client_display_name(store.state, invoice.client_id)} · "
                f"{_money(invoice.total)} · {invoice.status}"
            )


def _pick(label: str, records: Sequence[Any], key: str, describe: Callable[[Any], str]) -> Optional[Any]:
    """Choose a record to edit; the empty choice starts a new one."""

    labels = {record.id: describe(record) for record in records}
    choice = st.selectbox(
        label,
        ["", *labels],
        format_func=lambda record_id: labels.get(record_id, "New") if record_id else "New",
        key=key,
    )
    return next((record for record in records if record.id == choice), None)


def _save(errors: Dict[str, str], save: Callable[[], None], message: str) -> None:
    if errors:
        _show_errors(errors)
        return
    save()
    st.success(message)


def _delete_button(label: str, pick_key: str, delete: Callable[[], None], hint: str | None = None) -> None:
    if st.button(label, type="secondary", help=hint, key=f"{pick_key}_delete"):
        delete()
        st.session_state.pop(pick_key, None)
        _rerun_app()


def _index(options: Sequence[str], value: Optional[str]) -> int:
    return list(options).index(value) if value in options else 0


def _client_editor(store: CRMStore) -> None:
    client = _pick("Client", store.state.clients, "client_pick", lambda record: record.name)
    current = client or Client()
    with st.form(f"client_form_{current.id or 'new'}", clear_on_submit=client is None):
        st.markdown("### Edit client" if client else "### Add client")
        cols = st.columns(3)
        form = {
            "name": cols[0].text_input("Name", value=current.name),
            "email": cols[1].text_input("Email", value=current.email),
            "phone": cols[2].text_input("Phone", value=format_value(current.phone)),
        }
        cols = st.columns(3)
        form["status"] = cols[0].selectbox("Status", CLIENT_STATUSES, index=_index(CLIENT_STATUSES, current.status))
        form["event_date"] = cols[1].text_input("Event date (YYYY-MM-DD)", value=format_value(current.event_date))
        form["budget"] = cols[2].text_input("Budget", value=format_value(current.budget))
        form["notes"] = st.text_area("Notes", value=format_value(current.notes))
        submitted = st.form_submit_button("Save client" if client else "Add client")

    if submitted:
        if client:
            _save(validate_client(form), lambda: store.update_client(client.id, client_payload(form)), "Client updated")
        else:
            _save(validate_client(form), lambda: store.add_client(client_payload(form)), f"Added {form['name'].strip()}")
    if client:
        _delete_button("Delete client", "client_pick", lambda: store.delete_client(client.id))


def _clients_tab(store: CRMStore) -> None:
    _client_editor(store)

    rows = [
        {
            "Name": client.name,
            "Email": client.email,
            "Phone": client.phone or "",
            "Status": client.status,
            "Event date": client.event_date or "",
            "Budget": client.budget,
        }
        for client in store.state.clients
    ]
    st.dataframe(rows, use_container_width=True, hide_index=True)


def _vendor_editor(store: CRMStore) -> None:
    vendor = _pick("Vendor", store.state.vendors, "vendor_pick", lambda record: f"{record.name} ({record.service})")
    current = vendor or Vendor()
    contacts = ["", *PREFERRED_CONTACTS]
    with st.form(f"vendor_form_{current.id or 'new'}", clear_on_submit=vendor is None):
        st.markdown("### Edit vendor" if vendor else "### Add vendor")
        cols = st.columns(3)
        form = {
            "name": cols[0].text_input("Name", value=current.name),
            "service": cols[1].text_input("Service", value=current.service),
            "cost": cols[2].text_input("Cost", value=format_value(current.cost)),
        }
        cols = st.columns(4)
        form["email"] = cols[0].text_input("Email", value=format_value(current.email))
        form["phone"] = cols[1].text_input("Phone", value=format_value(current.phone))
        form["website"] = cols[2].text_input("Website", value=format_value(current.website))
        form["preferred_contact"] = cols[3].selectbox(
            "Preferred contact",
            contacts,
            index=_index(contacts, current.preferred_contact),
            format_func=lambda value: value or "-",
        )
        form["notes"] = st.text_area("Notes", value=format_value(current.notes))
        submitted = st.form_submit_button("Save vendor" if vendor else "Add vendor")

    if submitted:
        if vendor:
            _save(validate_vendor(form), lambda: store.update_vendor(vendor.id, vendor_payload(form)), "Vendor updated")
        else:
            _save(validate_vendor(form), lambda: store.add_vendor(vendor_payload(form)), f"Added {form['name'].strip()}")
    if vendor:
        _delete_button(
            "Delete vendor",
            "vendor_pick",
            lambda: store.delete_vendor(vendor.id),
            hint="Also removes the vendor from every event",
        )


def _vendors_tab(store: CRMStore) -> None:
    vendors = store.state.vendors
    counts = vendor_service_counts(vendors)
    if counts:
        st.bar_chart(counts)

    filter_cols = st.columns([2, 1])
    search = filter_cols[0].text_input("Search vendors")
    service = filter_cols[1].selectbox("Service", ["all", *sorted(counts)])
    st.dataframe(
        [
            {
                "Name": vendor.name,
                "Service": vendor.service,
                "Cost": vendor.cost,
                "Email": vendor.email or "",
                "Phone": vendor.phone or "",
                "Preferred contact": vendor.preferred_contact or "",
            }
            for vendor in filter_vendors(vendors, search, service)
        ],
        use_container_width=True,
        hide_index=True,
    )

    _vendor_editor(store)


def _event_editor(store: CRMStore) -> None:
    state = store.state
    event = _pick("Event", state.events, "event_pick", lambda record: f"{record.date} · {record.name}")
    if not state.clients:
        st.info("Add a client before planning events.")
        return
    current = event or Event()
    form_key = f"event_form_{current.id or 'new'}"

    client_ids = [client.id for client in state.clients]
    if current.client_id and current.client_id not in client_ids:
        client_ids.insert(0, current.client_id)
    vendor_names = {vendor.id: f"{vendor.name} ({vendor.service})" for vendor in state.vendors}

    # outside the form so the cost inputs follow the selection
    vendor_ids = st.multiselect(
        "Vendors",
        list(vendor_names),
        default=[vendor_id for vendor_id in current.vendor_ids or [] if vendor_id in vendor_names],
        format_func=vendor_names.get,
        key=f"{form_key}_vendors",
    )

    with st.form(form_key, clear_on_submit=event is None):
        st.markdown("### Edit event" if event else "### Plan event")
        cols = st.columns(3)
        form: Dict[str, Any] = {
            "name": cols[0].text_input("Name", value=current.name),
            "date": cols[1].text_input("Date (YYYY-MM-DD)", value=current.date),
            "client_id": cols[2].selectbox(
                "Client",
                client_ids,
                index=_index(client_ids, current.client_id),
                format_func=lambda client_id: client_display_name(state, client_id),
            ),
        }
        cols = st.columns(4)
        form["venue"] = cols[0].text_input("Venue", value=current.venue)
        form["venue_cost"] = cols[1].text_input("Venue cost", value=format_value(current.venue_cost))
        form["coordinator"] = cols[2].text_input("Coordinator", value=current.coordinator)
        form["status"] = cols[3].selectbox("Status", EVENT_STATUSES, index=_index(EVENT_STATUSES, current.status))

        form["vendor_ids"] = vendor_ids
        form["vendor_costs"] = {
            vendor_id: st.text_input(
                f"Cost for {vendor_names[vendor_id]}",
                value=format_value((current.vendor_costs or {}).get(vendor_id)),
                key=f"{form_key}_cost_{vendor_id}",
            )
            for vendor_id in vendor_ids
        }

        cols = st.columns(3)
        form["estimate"] = cols[0].text_input("Estimate", value=format_value(current.estimate))
        form["deposit"] = cols[1].text_input("Deposit", value=format_value(current.deposit))
        form["deposit_paid"] = cols[2].checkbox("Deposit paid", value=current.deposit_paid)
        form["timeline"] = st.text_area("Timeline", value=format_value(current.timeline))
        submitted = st.form_submit_button("Save event" if event else "Add event")

    if submitted:
        errors = validate_event(form, [client.id for client in state.clients])
        if event:
            _save(errors, lambda: store.update_event(event.id, event_payload(form)), "Event updated")
        else:
            _save(errors, lambda: store.add_event(event_payload(form)), f"Added {form['name'].strip()}")
    if event:
        _delete_button("Delete event", "event_pick", lambda: store.delete_event(event.id))


def _events_tab(store: CRMStore) -> None:
    rows: List[dict] = []
    for event in store.state.events:
        rows.append(
            {
                "Date": event.date,
                "Event": event.name,
                "Client": client_display_name(store.state, event.client_id),
                "Status": event.status,
                "Estimate": event.estimate,
                "Deposit": event.deposit,
                "Deposit paid": event.deposit_paid,
                "Vendors": ", ".join(vendor.name for vendor in assigned_vendors(store.state, event)),
            }
        )
    st.dataframe(rows, use_container_width=True, hide_index=True)

    _event_editor(store)


def _invoice_editor(store: CRMStore) -> None:
    state = store.state
    invoice = _pick(
        "Invoice",
        state.invoices,
        "invoice_pick",
        lambda record: f"{record.issue_date} · {client_display_name(state, record.client_id)} · {_money(record.total)}",
    )
    if not state.clients:
        st.info("Add a client before issuing invoices.")
        return
    current = invoice or Invoice()
    form_key = f"invoice_form_{current.id or 'new'}"

    client_ids = [client.id for client in state.clients]
    if current.client_id and current.client_id not in client_ids:
        client_ids.insert(0, current.client_id)
    item_sum = sum(item.amount for item in current.items)
    explicit_total = current.total is not None and current.total != item_sum
    rows = [*current.items, *[InvoiceItem() for _ in range(BLANK_ITEM_ROWS)]]

    with st.form(form_key, clear_on_submit=invoice is None):
        st.markdown("### Edit invoice" if invoice else "### New invoice")
        cols = st.columns(4)
        form: Dict[str, Any] = {
            "client_id": cols[0].selectbox(
                "Client",
                client_ids,
                index=_index(client_ids, current.client_id),
                format_func=lambda client_id: client_display_name(state, client_id),
            ),
            "issue_date": cols[1].text_input("Issue date", value=current.issue_date),
            "due_date": cols[2].text_input("Due date", value=current.due_date),
            "status": cols[3].selectbox("Status", INVOICE_STATUSES, index=_index(INVOICE_STATUSES, current.status)),
        }

        st.markdown("**Line items**")
        items: List[Dict[str, Any]] = []
        for position, item in enumerate(rows):
            cols = st.columns([3, 1])
            items.append(
                {
                    "id": item.id,
                    "description": cols[0].text_input(
                        "Description", value=item.description, key=f"{form_key}_desc_{position}"
                    ),
                    "amount": cols[1].text_input(
                        "Amount", value=format_value(item.amount) if item.id else "", key=f"{form_key}_amount_{position}"
                    ),
                }
            )
        form["items"] = items
        form["total"] = st.text_input(
            "Total",
            value=format_value(current.total) if explicit_total else "",
            help="Leave blank to use the sum of the line items.",
        )
        form["notes"] = st.text_area("Notes", value=format_value(current.notes))
        submitted = st.form_submit_button("Save invoice" if invoice else "Create invoice")

    if submitted:
        errors = validate_invoice(form)
        if invoice:
            _save(errors, lambda: store.update_invoice(invoice.id, invoice_payload(form)), "Invoice updated")
        else:
            _save(errors, lambda: store.add_invoice(invoice_payload(form)), "Invoice created")
    if invoice:
        _delete_button("Delete invoice", "invoice_pick", lambda: store.delete_invoice(invoice.id))


def _invoices_tab(store: CRMStore) -> None:
    for invoice in store.state.invoices:
        sync_status = invoice.sync.status if invoice.sync else SYNC_STATUSES[0]
        cols = st.columns([3, 1, 1, 1])
        cols[0].write(
            f"{invoice.issue_date} · {client_display_name(store.state, invoice.client_id)} · "
            f"{_money(invoice.total)} · {invoice.status} · billing: {sync_status}"
        )
        if cols[1].button("Generate", key=f"generate_{invoice.id}"):
            store.generate_invoice_sync(invoice.id)
            _rerun_app()
        if cols[2].button("Send", key=f"send_{invoice.id}"):
            store.send_invoice_sync(invoice.id)
            _rerun_app()
        if cols[3].button("Collect", key=f"collect_{invoice.id}"):
            store.collect_invoice_sync(invoice.id)
            _rerun_app()
        if invoice.sync and invoice.sync.external_url:
            st.caption(f"[Open billing record]({invoice.sync.external_url})")

    _invoice_editor(store)


def _import_export_tab(store: CRMStore, settings: Settings) -> None:
    st.markdown("### Bulk import clients")
    st.caption("One client per line: name, email, phone, status, event date, budget, notes.")
    pasted = st.text_area("Paste client lines", key="import_text")
    uploads = st.file_uploader("Or drop .txt/.csv files", type=["txt", "csv"], accept_multiple_files=True)
    if st.button("Import clients"):
        fragments = [pasted] + [upload.getvalue().decode("utf-8-sig") for upload in uploads or []]
        try:
            result = import_clients(store, "\n".join(fragment for fragment in fragments if fragment))
        except ValueError as exc:
            st.warning(str(exc))
        else:
            st.success(result.summary())

    st.markdown("### Export")
    blobs = export_csv_blobs(store.state)
    cols = st.columns(len(blobs))
    for column, (collection, text) in zip(cols, blobs.items()):
        column.download_button(
            f"{collection}.csv",
            data=text,
            file_name=f"{collection}.csv",
            mime="text/csv",
        )

    excel_path = Path(st.text_input("Excel output", value="output/studio_crm.xlsx"))
    if st.button("Write Excel workbook"):
        try:
            write_excel(store.state, excel_path)
            st.success(f"Excel export saved to {excel_path}")
        except Exception as exc:  # pragma: no cover - UI feedback
            st.error(f"Excel export failed: {exc}")

    spreadsheet_id = st.text_input("Spreadsheet ID", value=settings.spreadsheet_id or "")
    if st.button("Push to Google Sheets"):
        if not spreadsheet_id:
            st.warning("Provide a spreadsheet ID to sync with Google Sheets.")
        elif not settings.service_account_path:
            st.warning("Provide a service account file via GOOGLE_SHEETS_SERVICE_ACCOUNT.")
        else:
            try:
                push_to_google_sheets(store.state, spreadsheet_id, settings.service_account_path)
                st.success("Pushed every collection to Google Sheets.")
            except Exception as exc:  # pragma: no cover - UI feedback
                st.error(f"Google Sheets sync failed: {exc}")


def _reset_store() -> None:
    store = st.session_state.pop("store", None)
    if store is not None:
        close_store(store)


def _sidebar(settings: Settings) -> str:
    sessions = SessionStore(settings.session_file)
    session = sessions.load()
    with st.sidebar:
        st.markdown("### Account")
        if session:
            st.caption(f"Signed in as {session.user.email}")
            if st.button("Sign out"):
                sessions.sign_out()
                _reset_store()
                _rerun_app()
        else:
            email = st.text_input("Email", key="sign_in_email")
            if st.button("Sign in"):
                try:
                    sessions.sign_in(email)
                except ValueError as exc:
                    st.warning(str(exc))
                else:
                    _reset_store()
                    _rerun_app()
        if not settings.remote_enabled:
            st.caption("Remote sync is off; set STUDIO_CRM_REMOTE_URL to enable it.")

        return st.radio(
            "Upcoming events",
            ["all", "future"],
            index=0 if settings.upcoming_policy == "all" else 1,
            help="'future' hides events whose date has passed.",
        )


def main() -> None:
    """Launch the studio CRM dashboard."""

    configure_logging()
    st.set_page_config(page_title="Studio CRM", layout="wide", initial_sidebar_state="expanded")
    st.title("Studio CRM")

    settings = load_settings()
    policy = _sidebar(settings)
    store = _session_store(settings)

    overview_tab, clients_tab, vendors_tab, events_tab, invoices_tab, io_tab = st.tabs(
        ["Overview", "Clients", "Vendors", "Events", "Invoices", "Import & export"]
    )
    with overview_tab:
        _overview_tab(store, policy)
    with clients_tab:
        _clients_tab(store)
    with vendors_tab:
        _vendors_tab(store)
    with events_tab:
        _events_tab(store)
    with invoices_tab:
        _invoices_tab(store)
    with io_tab:
        _import_export_tab(store, settings)


if __name__ == "__main__":
    main()
