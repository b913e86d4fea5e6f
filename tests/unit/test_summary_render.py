from __future__ import annotations

import pytest

from purchase_import.models.import_summary import ImportSummary
from purchase_import.models.raw_row import PositionalRow
from purchase_import.services.summary import format_seconds, render_preview, render_summary_line
from purchase_import.services.validator import validate_rows


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (2.0, "2"), (1.25, "1.25"), (0.0012, "0.0012"), (0.0000004, "0")],
)
def test_format_seconds(value, expected):
    assert format_seconds(value) == expected


def test_summary_line(registry):
    rows = validate_rows(
        [
            PositionalRow(cells=("F-1", "Acme SL", "15/01/2024", "10")),
            PositionalRow(cells=("F-2", "Nobody", "15/01/2024", "10")),
        ],
        registry,
    )
    line = render_summary_line(rows, ImportSummary(success=1, failed=0, elapsed_seconds=0.5))
    assert line == "SUMMARY rows=2 valid=1 invalid=1 success=1 failed=0 elapsed_sec=0.5"


def test_preview_lists_rows_and_errors(registry):
    rows = validate_rows(
        [
            PositionalRow(cells=("F-1", "Acme SL", "15/01/2024", "121,00")),
            PositionalRow(cells=("", "Nobody", "15/01/2024", "abc")),
        ],
        registry,
    )
    lines = render_preview(rows)

    assert lines[0].split() == ["Supplier", "Invoice", "Issue", "Due", "Total"]
    assert lines[1].split() == ["OK", "Acme", "SL", "F-1", "2024-01-15", "2024-01-15", "121.00"]
    assert lines[2].startswith("ERR")
    assert "---" in lines[2]
    assert lines[3:6] == [
        "    - Missing invoice number.",
        "    - Supplier 'Nobody' not registered.",
        "    - Invalid amount.",
    ]
    assert lines[-1] == "2 rows detected, 1 valid"


def test_empty_preview():
    lines = render_preview([])
    assert lines[-1] == "0 rows detected, 0 valid"
