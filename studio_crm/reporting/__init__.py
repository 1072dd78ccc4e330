"""CSV, Excel, and Google Sheets exports."""
from studio_crm.reporting.csv_export import export_csv_blobs, write_csv_exports
from studio_crm.reporting.sinks import push_to_google_sheets, write_excel

__all__ = ["export_csv_blobs", "push_to_google_sheets", "write_csv_exports", "write_excel"]
