"""Domain models for the purchase invoice importer.

This package contains the dataclasses passed between the ingestion adapters,
the validator, the batch importer and the import session.
"""

from .config_models import DatabaseConfig, ImportConfig
from .error_record import ErrorRecord
from .import_summary import ImportSummary, RowOutcome
from .parsed_row import ParsedRow, PurchaseInvoiceStatus
from .raw_row import InvoiceFields, NamedRow, PositionalRow, RawRow
from .supplier import Supplier

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Input models
    "InvoiceFields",
    "NamedRow",
    "PositionalRow",
    "RawRow",
    "Supplier",
    # Output models
    "ErrorRecord",
    "ImportSummary",
    "ParsedRow",
    "PurchaseInvoiceStatus",
    "RowOutcome",
]
