from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

"""Raw row models for the purchase invoice importer.

A raw row is untrusted input coming out of an ingestion adapter. Two shapes
exist and are kept apart on purpose:

- PositionalRow: ordered cells from pasted text, CSV or xlsx files
- NamedRow: field-keyed object produced by the AI extractor

Both are reduced to an InvoiceFields record (ingest.columns.extract_fields)
before validation, so the validator only ever sees named, trimmed strings.
"""

__all__ = [
    "PositionalRow",
    "NamedRow",
    "RawRow",
    "InvoiceFields",
]


@dataclass(frozen=True)
class PositionalRow:
    """Ordered cells of one input line (already split and trimmed).

    Cells are text, except non-integral spreadsheet numbers which stay floats.
    """
    cells: tuple[str | float, ...]
    line_number: int | None = None  # 1-based source line, for error reporting

    def __len__(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class NamedRow:
    """Loosely typed object with named invoice fields (AI extractor output)."""
    fields: Mapping[str, Any] = field(default_factory=dict)


RawRow = Union[PositionalRow, NamedRow]


@dataclass(frozen=True)
class InvoiceFields:
    """Canonical record handed to the validator.

    The logical fields are trimmed strings ("" when absent). Amounts that
    arrive as numbers (AI-JSON values, spreadsheet cells) are kept as numbers so
    separator rules never apply to them. Explicit subtotal / tax are only ever
    set from a NamedRow and are kept raw as well.
    """
    invoice_number: str = ""
    supplier_name: str = ""
    issue_date: str = ""
    due_date: str = ""
    amount: str | float = ""
    subtotal: Any = None
    tax: Any = None
