from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .raw_row import InvoiceFields

"""ParsedRow model for the purchase invoice importer.

One ParsedRow is built per raw row by the validator, never mutated afterwards,
and consumed once by the batch importer (valid rows) or shown back to the user
(invalid rows).
"""

__all__ = [
    "PurchaseInvoiceStatus",
    "ParsedRow",
]


class PurchaseInvoiceStatus(Enum):
    """Purchase invoice lifecycle as stored by the application.

    Imported invoices always start as PENDING.
    """
    PENDING = "Pendiente"
    PAID = "Pagada"
    OVERDUE = "Vencida"


@dataclass(frozen=True)
class ParsedRow:
    """Validated, normalized representation of one candidate purchase invoice."""
    raw_fields: InvoiceFields  # trimmed source strings
    errors: tuple[str, ...] = ()  # detection order
    supplier_id: Any = None  # set only when the supplier resolved
    issue_date: str | None = None  # ISO YYYY-MM-DD
    due_date: str | None = None  # ISO YYYY-MM-DD
    subtotal: float | None = None  # 2 decimals, only when total parsed
    tax: float | None = None
    total: float | None = None
    line_number: int | None = None  # 1-based source line (paste, CSV, xlsx)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def invoice_number(self) -> str:
        return self.raw_fields.invoice_number

    def report_row(self, position: int) -> int:
        """Row number for error reports: source line when known, else 1-based position."""
        return self.line_number if self.line_number is not None else position + 1

    def to_payload(self) -> dict[str, Any]:
        """Build the storage payload for this row.

        Raises:
            ValueError: if the row did not pass validation
        """
        if not self.is_valid:
            raise ValueError(f"row '{self.invoice_number}' is not valid: {'; '.join(self.errors)}")
        return {
            "supplier_id": self.supplier_id,
            "invoice_number": self.raw_fields.invoice_number,
            "issue_date": self.issue_date,
            "due_date": self.due_date,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "status": PurchaseInvoiceStatus.PENDING.value,
        }
