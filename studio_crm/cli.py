"""Command line entry point for the studio CRM."""
import argparse
from pathlib import Path

from studio_crm.app import close_store, open_store
from studio_crm.auth import SessionStore
from studio_crm.core.config import Settings, load_settings
from studio_crm.core.logging import configure_logging
from studio_crm.ingestion.text_import import import_clients, read_import_files
from studio_crm.metrics.aggregator import client_display_name, compute_overview
from studio_crm.reporting.csv_export import write_csv_exports
from studio_crm.reporting.sinks import push_to_google_sheets, write_excel


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with one sub-command per task."""

    parser = argparse.ArgumentParser(description="Manage studio clients, vendors, events, and invoices")
    parser.add_argument(
        "--data-file",
        type=Path,
        help="JSON file holding the CRM data (defaults to STUDIO_CRM_DATA_FILE or data/crm.json)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    overview = commands.add_parser("overview", help="Print pipeline and deposit figures")
    overview.add_argument(
        "--upcoming",
        choices=["all", "future"],
        help="Whether upcoming events include past dates",
    )

    importer = commands.add_parser("import", help="Quick-add clients from .txt or .csv files")
    importer.add_argument("files", nargs="+", type=Path, help="Text files with one client per line")

    export = commands.add_parser("export", help="Export every collection")
    export.add_argument(
        "--sink",
        choices=["csv", "excel", "sheets"],
        default="csv",
        help="Where to send the exported collections",
    )
    export.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Folder for CSV files",
    )
    export.add_argument(
        "--excel-output",
        type=Path,
        default=Path("output/studio_crm.xlsx"),
        help="Excel file to write when --sink=excel",
    )
    export.add_argument("--spreadsheet-id", help="Google Sheets spreadsheet ID for the sheets sink")
    export.add_argument(
        "--service-account",
        type=Path,
        help="Path to a Google service account JSON key used for Sheets pushes",
    )

    sign_in = commands.add_parser("sign-in", help="Establish a session to enable remote sync")
    sign_in.add_argument("email")
    sign_in.add_argument("--name")

    commands.add_parser("sign-out", help="Forget the current session")
    return parser


def _print_overview(store, settings: Settings, policy: str | None) -> None:
    overview = compute_overview(store.state, upcoming_policy=policy or settings.upcoming_policy)
    print(f"Clients: {overview.total_clients}")
    for column in overview.pipeline:
        print(f"  {column.label}: {len(column.clients)}")
    print(f"Confirmed pipeline: {overview.pipeline_confirmed:,.0f}")
    print(f"Confirmed after vendor cost: {overview.confirmed_after_vendor_cost:,.0f}")
    print(f"Proposed pipeline: {overview.pipeline_proposed:,.0f}")
    print(f"Held deposits: {overview.held_deposits:,.0f} across {overview.held_deposit_count} events")
    print("Upcoming events:")
    for event in overview.upcoming_events:
        print(f"  {event.date}  {event.name} ({client_display_name(store.state, event.client_id)})")
    print("Recent invoices:")
    for invoice in overview.recent_invoices:
        print(f"  {invoice.issue_date}  {client_display_name(store.state, invoice.client_id)}  {invoice.status}")


def _export(store, settings: Settings, args: argparse.Namespace) -> None:
    if args.sink == "csv":
        for path in write_csv_exports(store.state, args.output_dir):
            print(f"Wrote {path}")
    elif args.sink == "excel":
        write_excel(store.state, args.excel_output)
        print(f"Wrote {args.excel_output}")
    else:
        spreadsheet_id = args.spreadsheet_id or settings.spreadsheet_id
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required when sink='sheets'")
        account_path = args.service_account or settings.service_account_path
        if not account_path:
            raise ValueError(
                "Provide --service-account pointing to your Google credentials or set GOOGLE_SHEETS_SERVICE_ACCOUNT"
            )
        push_to_google_sheets(store.state, spreadsheet_id=spreadsheet_id, service_account_path=account_path)
        print(f"Pushed collections to Google Sheets document {spreadsheet_id}")


def main() -> None:
    """Entrypoint for running the CRM from the command line."""

    configure_logging()
    args = build_parser().parse_args()
    settings = load_settings()
    if args.data_file:
        settings.data_file = args.data_file

    sessions = SessionStore(settings.session_file)
    if args.command == "sign-in":
        session = sessions.sign_in(args.email, args.name)
        print(f"Signed in as {session.user.email}")
        return
    if args.command == "sign-out":
        sessions.sign_out()
        print("Signed out")
        return

    store = open_store(settings)
    try:
        if args.command == "overview":
            _print_overview(store, settings, args.upcoming)
        elif args.command == "import":
            result = import_clients(store, read_import_files(args.files))
            print(result.summary())
        elif args.command == "export":
            _export(store, settings, args)
    finally:
        close_store(store)


if __name__ == "__main__":
    main()
