from __future__ import annotations

from collections.abc import Sequence

from ..models.import_summary import ImportSummary
from ..models.parsed_row import ParsedRow

"""SUMMARY line and preview table rendering.

SUMMARY format:
SUMMARY rows={rows} valid={valid} invalid={invalid} success={success}
failed={failed} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
    "render_preview",
]

PREVIEW_HEADER = ("", "Supplier", "Invoice", "Issue", "Due", "Total")


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation and without trailing zeros."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(rows: Sequence[ParsedRow], summary: ImportSummary) -> str:
    """Render the SUMMARY line for one import.

    >>> render_summary_line([], ImportSummary())
    'SUMMARY rows=0 valid=0 invalid=0 success=0 failed=0 elapsed_sec=0'
    """
    valid = sum(1 for r in rows if r.is_valid)
    return (
        f"SUMMARY rows={len(rows)} "
        f"valid={valid} "
        f"invalid={len(rows) - valid} "
        f"success={summary.success} "
        f"failed={summary.failed} "
        f"elapsed_sec={format_seconds(summary.elapsed_seconds)}"
    )


def _preview_cells(row: ParsedRow) -> tuple[str, ...]:
    fields = row.raw_fields
    total = f"{row.total:.2f}" if row.is_valid and row.total is not None else str(fields.amount)
    return (
        "OK" if row.is_valid else "ERR",
        fields.supplier_name or "---",
        fields.invoice_number or "---",
        row.issue_date or fields.issue_date,
        row.due_date or "",
        total,
    )


def render_preview(rows: Sequence[ParsedRow]) -> list[str]:
    """Render the preview as aligned text lines, errors under each invalid row."""
    table = [PREVIEW_HEADER] + [_preview_cells(r) for r in rows]
    widths = [max(len(line[i]) for line in table) for i in range(len(PREVIEW_HEADER))]
    lines = []
    for idx, cells in enumerate(table):
        lines.append("  ".join(c.ljust(w) for c, w in zip(cells, widths, strict=True)).rstrip())
        if idx > 0 and not rows[idx - 1].is_valid:
            for err in rows[idx - 1].errors:
                lines.append(f"    - {err}")
    lines.append(f"{len(rows)} rows detected, {sum(1 for r in rows if r.is_valid)} valid")
    return lines
