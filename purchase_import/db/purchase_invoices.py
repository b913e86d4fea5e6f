from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..models.supplier import Supplier

"""Storage adapter for purchase invoices (psycopg2).

The importer only needs two things from storage:
- a supplier snapshot (load_suppliers)
- a way to insert one invoice (PurchaseInvoiceWriter, used as the persist
  callable of the batch importer)

The connection is expected in autocommit mode: each invoice is its own
transaction, so a failing row never undoes the ones before it.
"""

__all__ = [
    "PersistenceError",
    "INVOICE_COLUMNS",
    "load_suppliers",
    "PurchaseInvoiceWriter",
]

logger = logging.getLogger(__name__)

INVOICE_COLUMNS: tuple[str, ...] = (
    "supplier_id",
    "invoice_number",
    "issue_date",
    "due_date",
    "subtotal",
    "tax",
    "total",
    "status",
)


class PersistenceError(Exception):
    pass


def load_suppliers(cursor: Any, user_id: str | None = None) -> list[Supplier]:
    """Read the supplier snapshot, ordered by name then id."""
    sql = "SELECT id, name FROM suppliers"
    params: tuple[Any, ...] = ()
    if user_id:
        sql += " WHERE user_id = %s"
        params = (user_id,)
    sql += " ORDER BY name, id"
    try:
        cursor.execute(sql, params)
        rows = cursor.fetchall()
    except Exception as e:
        raise PersistenceError(f"failed loading suppliers: {e}") from e
    return [Supplier(id=r[0], name=r[1] or "") for r in rows]


class PurchaseInvoiceWriter:
    """Insert one purchase invoice per call.

    Usable directly as the batch importer's ``persist`` callable.
    """

    def __init__(self, cursor: Any, table: str = "purchase_invoices", user_id: str | None = None) -> None:
        self.cursor = cursor
        self.table = table
        self.user_id = user_id
        self.inserted = 0

    def _columns(self) -> Sequence[str]:
        if self.user_id:
            return ("user_id",) + INVOICE_COLUMNS
        return INVOICE_COLUMNS

    def build_insert(self, payload: dict[str, Any]) -> tuple[str, tuple[Any, ...]]:
        columns = self._columns()
        values = [self.user_id] if self.user_id else []
        values.extend(payload[c] for c in INVOICE_COLUMNS)
        cols_sql = ",".join(f'"{c}"' for c in columns)
        placeholders = ",".join(["%s"] * len(columns))
        return f"INSERT INTO {self.table} ({cols_sql}) VALUES ({placeholders})", tuple(values)

    def __call__(self, payload: dict[str, Any]) -> None:
        sql, params = self.build_insert(payload)
        try:
            self.cursor.execute(sql, params)
        except Exception as e:
            raise PersistenceError(str(e)) from e
        self.inserted += 1
        logger.debug("inserted invoice=%s table=%s", payload.get("invoice_number"), self.table)
