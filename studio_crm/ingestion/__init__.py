"""Bulk client import from pasted text or files."""
from studio_crm.ingestion.text_import import ImportResult, import_clients, parse_clients_from_text

__all__ = ["ImportResult", "import_clients", "parse_clients_from_text"]
