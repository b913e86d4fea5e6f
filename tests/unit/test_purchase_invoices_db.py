from __future__ import annotations

import pytest

from purchase_import.db.purchase_invoices import PersistenceError, PurchaseInvoiceWriter, load_suppliers
from purchase_import.models.supplier import Supplier

PAYLOAD = {
    "supplier_id": 7,
    "invoice_number": "F-001",
    "issue_date": "2024-01-15",
    "due_date": "2024-01-15",
    "subtotal": 100.0,
    "tax": 21.0,
    "total": 121.0,
    "status": "Pendiente",
}


class DummyCursor:
    def __init__(self, rows=None, fail=False):
        self.rows = rows or []
        self.fail = fail
        self.executed = []

    def execute(self, sql, params=None):
        if self.fail:
            raise RuntimeError("relation does not exist")
        self.executed.append((sql, params))

    def fetchall(self):
        return self.rows


def test_load_suppliers():
    cur = DummyCursor(rows=[(1, "Acme SL"), (2, None)])
    assert load_suppliers(cur) == [Supplier(1, "Acme SL"), Supplier(2, "")]
    sql, params = cur.executed[0]
    assert "WHERE" not in sql
    assert params == ()


def test_load_suppliers_for_user():
    cur = DummyCursor()
    load_suppliers(cur, user_id="u-1")
    sql, params = cur.executed[0]
    assert "WHERE user_id = %s" in sql
    assert sql.endswith("ORDER BY name, id")
    assert params == ("u-1",)


def test_load_suppliers_failure():
    with pytest.raises(PersistenceError):
        load_suppliers(DummyCursor(fail=True))


def test_writer_inserts_payload():
    cur = DummyCursor()
    writer = PurchaseInvoiceWriter(cur)
    writer(PAYLOAD)
    sql, params = cur.executed[0]
    assert sql.startswith('INSERT INTO purchase_invoices ("supplier_id","invoice_number"')
    assert sql.count("%s") == 8
    assert params == (7, "F-001", "2024-01-15", "2024-01-15", 100.0, 21.0, 121.0, "Pendiente")
    assert writer.inserted == 1


def test_writer_stamps_user_id():
    sql, params = PurchaseInvoiceWriter(DummyCursor(), user_id="u-1").build_insert(PAYLOAD)
    assert '("user_id","supplier_id"' in sql
    assert params[0] == "u-1"
    assert len(params) == 9


def test_writer_wraps_driver_errors():
    writer = PurchaseInvoiceWriter(DummyCursor(fail=True))
    with pytest.raises(PersistenceError, match="relation does not exist"):
        writer(PAYLOAD)
    assert writer.inserted == 0
