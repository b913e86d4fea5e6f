from __future__ import annotations

from purchase_import.ingest.delimited import split_delimited_text
from purchase_import.logging.error_log import ErrorLogBuffer
from purchase_import.models.raw_row import PositionalRow
from purchase_import.services.batch_importer import import_rows
from purchase_import.services.validator import validate_rows


def _parsed(registry, *rows):
    return validate_rows([PositionalRow(cells=r) for r in rows], registry)


def test_failure_is_counted_and_loop_continues(registry, recording_persist, tmp_path):
    rows = _parsed(
        registry,
        ("F-1", "Acme SL", "15/01/2024", "10"),
        ("F-2", "Acme SL", "15/01/2024", "20"),
        ("F-3", "Acme SL", "15/01/2024", "30"),
    )
    persist = recording_persist(fail_on={2})
    buf = ErrorLogBuffer(tmp_path)

    summary = import_rows(rows, persist, error_log=buf, source="facturas.csv")

    assert (summary.success, summary.failed) == (2, 1)
    assert summary.attempted == 3
    assert persist.attempted == ["F-1", "F-2", "F-3"]
    assert [p["invoice_number"] for p in persist.persisted] == ["F-1", "F-3"]
    assert [o.ok for o in summary.outcomes] == [True, False, True]
    assert "duplicate key" in summary.outcomes[1].error

    (record,) = buf.records
    assert record.error_type == "PERSISTENCE_ERROR"
    assert record.row == 2
    assert record.source == "facturas.csv"
    assert record.message.startswith("F-2:")


def test_invalid_rows_are_skipped_not_counted(registry, recording_persist):
    rows = _parsed(
        registry,
        ("F-1", "Acme SL", "15/01/2024", "10"),
        ("F-2", "Nobody", "15/01/2024", "20"),
        ("F-3", "Proveedor SL", "15/01/2024", "30"),
    )
    persist = recording_persist()

    summary = import_rows(rows, persist)

    assert (summary.success, summary.failed) == (2, 0)
    assert persist.attempted == ["F-1", "F-3"]
    assert [o.position for o in summary.outcomes] == [0, 2]
    assert all(p["status"] == "Pendiente" for p in persist.persisted)


def test_nothing_to_import(recording_persist):
    persist = recording_persist()
    summary = import_rows([], persist)
    assert summary.as_counts() == {"success": 0, "failed": 0}
    assert summary.outcomes == ()
    assert summary.elapsed_seconds >= 0
    assert persist.attempted == []


def test_every_row_failing(registry, recording_persist):
    rows = _parsed(
        registry,
        ("F-1", "Acme SL", "15/01/2024", "10"),
        ("F-2", "Acme SL", "15/01/2024", "20"),
    )
    summary = import_rows(rows, recording_persist(fail_on={1, 2}))
    assert (summary.success, summary.failed) == (0, 2)


def test_failed_row_reports_source_line(registry, recording_persist, tmp_path):
    rows = validate_rows(
        split_delimited_text("Factura;Proveedor;Fecha;Total\n\nF-1;Acme SL;15/01/2024;10\nF-2;Acme SL;15/01/2024;20\n"),
        registry,
    )
    buf = ErrorLogBuffer(tmp_path)
    import_rows(rows, recording_persist(fail_on={2}), error_log=buf)
    (record,) = buf.records
    assert record.row == 4
