from __future__ import annotations

import math
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from ..models.config_models import LONE_DOT_DECIMAL, LONE_DOT_THOUSANDS

"""Field normalizers: raw date / amount text -> canonical values.

All functions here are pure and return None for anything they cannot read
with confidence. They never guess: month names, ordinal text or other date
shapes are rejected.

Amount conventions are Spanish/European:
- a comma is the decimal separator ("1.234,56" -> 1234.56)
- several dots without a comma are thousands separators ("1.234.567" -> 1234567)
- a lone dot is read as decimal by default ("1.234" -> 1.234). With the
  "thousands" policy a lone dot followed by exactly three digits is read as a
  thousands separator instead ("1.234" -> 1234). There is no way to tell the
  two apart from the text alone.
"""

__all__ = [
    "normalize_date",
    "normalize_amount",
    "looks_like_amount",
    "round_money",
    "add_months",
]

_DMY_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2}|\d{4})$")
_YMD_RE = re.compile(r"^(\d{4})[/-](\d{2})[/-](\d{2})$")

_CURRENCY_RE = re.compile(r"[€$£\s]|EUR", re.IGNORECASE)
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_AMOUNT_SHAPE_RE = re.compile(r"-?\d[\d.,]*")
_LONE_DOT_THOUSANDS_RE = re.compile(r"-?\d{1,3}\.\d{3}")

_CENT = Decimal("0.01")


def _to_iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        # e.g. 31/02 or month 13
        return None


def normalize_date(text: Any) -> str | None:
    """Normalize a date cell to ISO ``YYYY-MM-DD``.

    Accepted shapes:
    - ``D/M/Y`` or ``D-M-Y`` with 1-2 digit day/month and 2 or 4 digit year
      (two digit years are prefixed with "20": "99" -> 2099)
    - ``YYYY-MM-DD`` or ``YYYY/MM/DD``

    Returns None for any other shape or for impossible calendar dates.
    """
    if text is None:
        return None
    clean = str(text).strip()
    if not clean:
        return None

    m = _DMY_RE.match(clean)
    if m:
        day, month, year = m.groups()
        if len(year) == 2:
            year = "20" + year
        return _to_iso(int(year), int(month), int(day))

    m = _YMD_RE.match(clean)
    if m:
        year, month, day = m.groups()
        return _to_iso(int(year), int(month), int(day))

    return None


def _clean_amount_text(text: str) -> str:
    return _CURRENCY_RE.sub("", text).strip()


def normalize_amount(value: Any, lone_dot: str = LONE_DOT_DECIMAL) -> float | None:
    """Normalize an amount (string or number) to a float.

    Numbers pass through unchanged. Strings have currency symbols and
    whitespace removed and European separators resolved (see module doc).

    Parameters
    ----------
    value: raw cell / JSON value
    lone_dot: LONE_DOT_DECIMAL (default) or LONE_DOT_THOUSANDS

    Returns None when the value cannot be read as a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None

    clean = _clean_amount_text(str(value))
    if not clean:
        return None

    if "," in clean:
        # comma decimal: every dot is a thousands separator
        clean = clean.replace(".", "").replace(",", ".", 1)
    elif clean.count(".") > 1:
        clean = clean.replace(".", "")
    elif lone_dot == LONE_DOT_THOUSANDS and _LONE_DOT_THOUSANDS_RE.fullmatch(clean):
        clean = clean.replace(".", "")

    if not _NUMBER_RE.fullmatch(clean):
        return None
    number = float(clean)
    return number if math.isfinite(number) else None


def looks_like_amount(text: Any) -> bool:
    """True when a cell is numeric-looking (digits with optional separators/currency)."""
    if text is None or isinstance(text, bool):
        return False
    if isinstance(text, (int, float, Decimal)):
        return math.isfinite(text)
    clean = _clean_amount_text(str(text))
    if not _AMOUNT_SHAPE_RE.fullmatch(clean):
        return False
    return normalize_amount(clean) is not None


def round_money(value: float) -> float:
    """Round half-up to 2 decimals (currency units)."""
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def add_months(iso_date: str, months: int) -> str:
    """Shift an ISO date by whole calendar months, clamped to the month end.

    >>> add_months("2024-01-31", 1)
    '2024-02-29'
    """
    shifted = pd.Timestamp(iso_date) + pd.DateOffset(months=months)
    return shifted.date().isoformat()
