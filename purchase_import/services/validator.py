from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..ingest.columns import extract_fields
from ..models.config_models import LONE_DOT_DECIMAL, ImportConfig
from ..models.parsed_row import ParsedRow
from ..models.raw_row import InvoiceFields, PositionalRow, RawRow
from ..normalize.fields import add_months, normalize_amount, normalize_date, round_money
from .supplier_resolver import SupplierRegistry

"""Row validation: RawRow -> ParsedRow.

Every check runs independently and appends its own message, so a row shows
all of its problems at once. Error order is fixed:

1. missing invoice number
2. missing supplier / supplier not registered
3. invalid issue date
4. invalid amount
5. invalid explicit subtotal / tax (AI-JSON rows only)

A missing or unreadable due date is not an error: it defaults to the issue
date (or issue date + N months when configured).

Tax split:
- explicit subtotal and tax: trusted as given
- only subtotal: tax = total - subtotal
- only tax: subtotal = total - tax
- neither: subtotal = total / (1 + vat/100), tax = total - subtotal

Amounts are rounded to 2 decimals only when assigned to the ParsedRow.
"""

__all__ = [
    "ValidationOptions",
    "validate_fields",
    "validate_row",
    "validate_rows",
]

logger = logging.getLogger(__name__)

MSG_MISSING_INVOICE_NUMBER = "Missing invoice number."
MSG_MISSING_SUPPLIER = "Missing supplier."
MSG_SUPPLIER_NOT_REGISTERED = "Supplier '{name}' not registered."
MSG_INVALID_ISSUE_DATE = "Invalid issue date."
MSG_INVALID_AMOUNT = "Invalid amount."
MSG_INVALID_SUBTOTAL = "Invalid subtotal."
MSG_INVALID_TAX = "Invalid tax."


@dataclass(frozen=True)
class ValidationOptions:
    """Caller supplied settings for validation."""
    vat_rate: float = 21.0
    amount_lone_dot: str = LONE_DOT_DECIMAL
    due_date_offset_months: int = 0

    @staticmethod
    def from_config(config: ImportConfig) -> ValidationOptions:
        return ValidationOptions(
            vat_rate=config.vat_rate,
            amount_lone_dot=config.amount_lone_dot,
            due_date_offset_months=config.due_date_offset_months,
        )


def _split_total(
    total: float,
    subtotal: float | None,
    tax: float | None,
    vat_rate: float,
) -> tuple[float, float]:
    if subtotal is not None and tax is not None:
        return subtotal, tax
    if subtotal is not None:
        return subtotal, total - subtotal
    if tax is not None:
        return total - tax, tax
    derived = total / (1 + vat_rate / 100)
    return derived, total - derived


def validate_fields(
    fields: InvoiceFields,
    registry: SupplierRegistry,
    options: ValidationOptions,
    line_number: int | None = None,
) -> ParsedRow:
    """Validate an already-extracted InvoiceFields record."""
    errors: list[str] = []

    if not fields.invoice_number:
        errors.append(MSG_MISSING_INVOICE_NUMBER)

    supplier_id = None
    if not fields.supplier_name:
        errors.append(MSG_MISSING_SUPPLIER)
    else:
        supplier = registry.resolve(fields.supplier_name)
        if supplier is None:
            errors.append(MSG_SUPPLIER_NOT_REGISTERED.format(name=fields.supplier_name))
        else:
            supplier_id = supplier.id

    issue_date = normalize_date(fields.issue_date)
    if issue_date is None:
        errors.append(MSG_INVALID_ISSUE_DATE)

    due_date = normalize_date(fields.due_date)
    if due_date is None and issue_date is not None:
        if options.due_date_offset_months:
            due_date = add_months(issue_date, options.due_date_offset_months)
        else:
            due_date = issue_date

    total = normalize_amount(fields.amount, options.amount_lone_dot)
    if total is None:
        errors.append(MSG_INVALID_AMOUNT)

    explicit_subtotal = None
    if fields.subtotal is not None:
        explicit_subtotal = normalize_amount(fields.subtotal, options.amount_lone_dot)
        if explicit_subtotal is None:
            errors.append(MSG_INVALID_SUBTOTAL)
    explicit_tax = None
    if fields.tax is not None:
        explicit_tax = normalize_amount(fields.tax, options.amount_lone_dot)
        if explicit_tax is None:
            errors.append(MSG_INVALID_TAX)

    subtotal = tax = None
    if total is not None:
        raw_subtotal, raw_tax = _split_total(total, explicit_subtotal, explicit_tax, options.vat_rate)
        subtotal = round_money(raw_subtotal)
        tax = round_money(raw_tax)
        total = round_money(total)

    return ParsedRow(
        raw_fields=fields,
        errors=tuple(errors),
        supplier_id=supplier_id,
        issue_date=issue_date,
        due_date=due_date,
        subtotal=subtotal,
        tax=tax,
        total=total,
        line_number=line_number,
    )


def validate_row(
    row: RawRow,
    registry: SupplierRegistry,
    options: ValidationOptions | None = None,
) -> ParsedRow:
    """Extract and validate one raw row. Pure: same input, same output."""
    line_number = row.line_number if isinstance(row, PositionalRow) else None
    return validate_fields(extract_fields(row), registry, options or ValidationOptions(), line_number)


def validate_rows(
    rows: Iterable[RawRow],
    registry: SupplierRegistry,
    options: ValidationOptions | None = None,
) -> list[ParsedRow]:
    """Validate rows preserving input order."""
    options = options or ValidationOptions()
    parsed = [validate_row(r, registry, options) for r in rows]
    invalid = sum(1 for p in parsed if not p.is_valid)
    logger.debug("validated rows=%d invalid=%d", len(parsed), invalid)
    return parsed
