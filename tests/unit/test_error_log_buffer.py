from __future__ import annotations

import json
import re

from purchase_import.logging.error_log import ErrorLogBuffer, ErrorRecord


def test_create_sets_utc_timestamp():
    rec = ErrorRecord.create("<paste>", 3, "VALIDATION_ERROR", "Invalid amount.")
    assert rec.timestamp.endswith("Z")
    assert rec.row == 3


def test_json_line_keeps_non_ascii():
    rec = ErrorRecord("2024-01-15T10:00:00Z", "<paste>", 1, "VALIDATION_ERROR", "Supplier 'Papelería' not registered.")
    line = rec.to_json_line()
    assert "Papelería" in line
    assert json.loads(line) == {
        "timestamp": "2024-01-15T10:00:00Z",
        "source": "<paste>",
        "row": 1,
        "error_type": "VALIDATION_ERROR",
        "message": "Supplier 'Papelería' not registered.",
    }


def test_empty_buffer_writes_nothing(tmp_path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines(tmp_path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("a.csv", 1, "VALIDATION_ERROR", "Invalid amount."))
    buf.append(ErrorRecord.create("a.csv", -1, "INGESTION_ERROR", "could not read file"))

    path = buf.flush()

    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [1, -1]
    assert buf.records == ()

    # later flushes append to the same file
    buf.append(ErrorRecord.create("a.csv", 2, "PERSISTENCE_ERROR", "F-2: boom"))
    assert buf.flush() == path
    assert len(path.read_text(encoding="utf-8").splitlines()) == 3
