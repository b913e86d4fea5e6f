from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any

from ..models.raw_row import PositionalRow
from .errors import IngestionError

"""Delimited-text ingestion (pasted spreadsheet cells and CSV uploads).

Each line is split on the first delimiter present on that line, in priority
order tab, semicolon, comma. Lines are handled independently so a paste mixing
delimiters still works line by line. There is no quoting/escaping support: a
delimiter inside a quoted field splits the field.

When the first line looks like a header (any cell contains one of
HEADER_KEYWORDS) it is dropped.
"""

__all__ = [
    "DELIMITERS",
    "HEADER_KEYWORDS",
    "split_line",
    "looks_like_header",
    "split_delimited_text",
    "read_text_file",
    "read_csv_file",
]

logger = logging.getLogger(__name__)

DELIMITERS = ("\t", ";", ",")
HEADER_KEYWORDS = ("factura", "proveedor", "fecha", "vto", "vencimiento", "total")


def split_line(line: str) -> list[str]:
    """Split one line on its first matching delimiter and trim cells.

    Trailing empty cells (e.g. a trailing tab from a spreadsheet copy) are
    dropped; empty cells in the middle keep their position.
    """
    cells = [line]
    for delimiter in DELIMITERS:
        if delimiter in line:
            cells = line.split(delimiter)
            break
    cells = [c.strip() for c in cells]
    while cells and not cells[-1]:
        cells.pop()
    return cells


def looks_like_header(cells: list[str] | tuple[str, ...]) -> bool:
    for cell in cells:
        lowered = str(cell).lower()
        if any(kw in lowered for kw in HEADER_KEYWORDS):
            return True
    return False


def drop_header(rows: list[PositionalRow]) -> list[PositionalRow]:
    if rows and looks_like_header(rows[0].cells):
        logger.debug("header line detected and dropped: %s", list(rows[0].cells))
        return rows[1:]
    return rows


def split_delimited_text(text: str | None) -> list[PositionalRow]:
    """Turn pasted text into positional rows.

    Blank lines are ignored; an empty or blank paste yields an empty list
    (not an error).
    """
    if not text or not text.strip():
        return []
    rows: list[PositionalRow] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        rows.append(PositionalRow(cells=tuple(split_line(line)), line_number=line_number))
    return drop_header(rows)


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # spreadsheet exports on Windows are often cp1252/latin-1
        logger.debug("input is not utf-8, decoding as latin-1")
        return data.decode("latin-1")


def read_text_file(source: str | Path | IO[Any]) -> str:
    """Read a whole text upload (path or file-like), utf-8 with latin-1 fallback.

    Raises:
        IngestionError: if the file cannot be read
    """
    try:
        if isinstance(source, (str, Path)):
            data: Any = Path(source).read_bytes()
        else:
            data = source.read()
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(f"could not read file: {e}") from e

    return _decode(data) if isinstance(data, bytes) else str(data)


def read_csv_file(source: str | Path | IO[Any]) -> list[PositionalRow]:
    """Read an uploaded CSV file (path or file-like) and split it like pasted text.

    Raises:
        IngestionError: if the file cannot be read
    """
    return split_delimited_text(read_text_file(source))
