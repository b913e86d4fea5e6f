from __future__ import annotations

import math
from datetime import date, datetime
from pathlib import Path
from typing import IO, Any

import pandas as pd

from ..models.raw_row import PositionalRow
from .delimited import drop_header
from .errors import IngestionError

"""Spreadsheet (.xlsx) ingestion.

Reads the first sheet with pandas, without header inference, and renders every
cell back to text so rows go through the same column mapping and validation as
pasted cells:

- empty cells (NaN) -> ""
- Excel dates -> ISO text (accepted by the date normalizer)
- integral floats -> "121" instead of "121.0"
- other numbers stay floats (never re-read through separator rules)

Fully blank rows are skipped and a header first row is dropped.
"""

__all__ = [
    "cell_to_text",
    "cell_value",
    "read_spreadsheet_file",
]


def cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):  # pragma: no cover (array-like cell)
        pass
    return str(value).strip()


def cell_value(value: Any) -> str | float:
    """Like cell_to_text, but non-integral numbers stay floats.

    A numeric cell such as 7.125 is already a number; rendering it as "7.125"
    would let the lone-dot thousands policy read it as 7125.
    """
    if isinstance(value, float) and math.isfinite(value) and not value.is_integer():
        return float(value)
    return cell_to_text(value)


def read_spreadsheet_file(source: str | Path | IO[Any], sheet: int | str = 0) -> list[PositionalRow]:
    """Read an uploaded spreadsheet into positional rows.

    Parameters
    ----------
    source: path or binary file-like of an .xlsx workbook
    sheet: sheet index or name (first sheet by default)

    Raises:
        IngestionError: if the workbook cannot be read
    """
    try:
        df = pd.read_excel(source, sheet_name=sheet, header=None, dtype=object)
    except Exception as e:
        raise IngestionError(f"could not read spreadsheet: {e}") from e

    rows: list[PositionalRow] = []
    # Excel row numbers are 1-based
    for idx, raw in enumerate(df.itertuples(index=False, name=None), start=1):
        cells = [cell_value(v) for v in raw]
        while cells and cells[-1] == "":
            cells.pop()
        if not cells:
            continue
        rows.append(PositionalRow(cells=tuple(cells), line_number=idx))
    return drop_header(rows)
