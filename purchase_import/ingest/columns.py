from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..models.raw_row import InvoiceFields, NamedRow, PositionalRow, RawRow
from ..normalize.fields import looks_like_amount, normalize_date

"""Column-to-field mapping for raw rows.

This is the only place that knows how raw rows are laid out; swapping the
heuristic does not touch validation.

NamedRow: fields are taken by name (the extractor already assigned them).

PositionalRow, decided per row:
- 9+ cells: detailed export layout
  [file, supplier, issue date, due date, invoice number, ..., total]
- otherwise invoice number is cell 0 and supplier is cell 1. Among the
  remaining cells, if exactly one is date-shaped and exactly one other is
  amount-shaped they are taken by content. Else positional:
  4 cells [invoice, supplier, issue date, amount],
  5+ cells [invoice, supplier, issue date, due date, amount].
"""

__all__ = [
    "DETAILED_LAYOUT_MIN_CELLS",
    "extract_fields",
    "map_positional_cells",
    "map_named_fields",
]

DETAILED_LAYOUT_MIN_CELLS = 9


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float):
        return repr(value)
    return str(value).strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _cell(cells: Sequence[Any], index: int) -> str:
    return _text(cells[index]) if index < len(cells) else ""


def _amount(value: Any) -> str | float:
    # numbers pass through so lone-dot rules never apply to them
    return value if _is_number(value) else _text(value)


def _amount_cell(cells: Sequence[Any], index: int) -> str | float:
    return _amount(cells[index]) if index < len(cells) else ""


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def map_named_fields(fields: Mapping[str, Any]) -> InvoiceFields:
    amount = fields.get("total")
    if not _present(amount):
        amount = fields.get("amount")
    subtotal = fields.get("subtotal")
    tax = fields.get("tax")
    return InvoiceFields(
        invoice_number=_text(fields.get("invoice_number")),
        supplier_name=_text(fields.get("supplier_name")),
        issue_date=_text(fields.get("issue_date")),
        due_date=_text(fields.get("due_date")),
        amount=_amount(amount),
        subtotal=subtotal if _present(subtotal) else None,
        tax=tax if _present(tax) else None,
    )


def map_positional_cells(cells: Sequence[Any]) -> InvoiceFields:
    if len(cells) >= DETAILED_LAYOUT_MIN_CELLS:
        return InvoiceFields(
            invoice_number=_cell(cells, 4),
            supplier_name=_cell(cells, 1),
            issue_date=_cell(cells, 2),
            due_date=_cell(cells, 3),
            amount=_amount_cell(cells, 8),
        )

    invoice_number = _cell(cells, 0)
    supplier_name = _cell(cells, 1)

    date_idx = [i for i in range(2, len(cells)) if normalize_date(cells[i])]
    amount_idx = [
        i for i in range(2, len(cells)) if i not in date_idx and looks_like_amount(cells[i])
    ]
    if len(date_idx) == 1 and len(amount_idx) == 1:
        return InvoiceFields(
            invoice_number=invoice_number,
            supplier_name=supplier_name,
            issue_date=_cell(cells, date_idx[0]),
            amount=_amount_cell(cells, amount_idx[0]),
        )

    if len(cells) >= 5:
        return InvoiceFields(
            invoice_number=invoice_number,
            supplier_name=supplier_name,
            issue_date=_cell(cells, 2),
            due_date=_cell(cells, 3),
            amount=_amount_cell(cells, 4),
        )
    return InvoiceFields(
        invoice_number=invoice_number,
        supplier_name=supplier_name,
        issue_date=_cell(cells, 2),
        amount=_amount_cell(cells, 3),
    )


def extract_fields(row: RawRow) -> InvoiceFields:
    """Resolve a raw row (either shape) to the canonical InvoiceFields record."""
    if isinstance(row, NamedRow):
        return map_named_fields(row.fields)
    if isinstance(row, PositionalRow):
        return map_positional_cells(row.cells)
    raise TypeError(f"unsupported raw row type: {type(row).__name__}")
