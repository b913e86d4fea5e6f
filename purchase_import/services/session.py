from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from pathlib import Path
from typing import IO, Any

from ..ingest.ai_json import Extractor, extract_with_ai, parse_ai_response
from ..ingest.delimited import read_csv_file, split_delimited_text
from ..ingest.errors import IngestionError
from ..ingest.spreadsheet import read_spreadsheet_file
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.import_summary import ImportSummary
from ..models.parsed_row import ParsedRow
from ..models.raw_row import RawRow
from ..models.supplier import Supplier
from .batch_importer import Persist, import_rows
from .supplier_resolver import SupplierRegistry
from .validator import ValidationOptions, validate_rows

"""Import session state machine.

State transitions: upload -> preview -> importing -> summary

- upload -> preview: after any ingestion, even one producing zero rows
- preview -> upload: go_back() (parsed rows are discarded)
- summary -> upload: reset() / close()
- any step but importing -> upload: reset() / close(), no side effects

An ingestion failure keeps the session in upload, stores the message in
``error`` and re-raises IngestionError so the caller can show it.
"""

__all__ = [
    "ImportStep",
    "IngestionMethod",
    "SessionStateError",
    "ImportSession",
]

logger = logging.getLogger(__name__)


class ImportStep(Enum):
    UPLOAD = "upload"
    PREVIEW = "preview"
    IMPORTING = "importing"
    SUMMARY = "summary"


class IngestionMethod(Enum):
    PASTE = "paste"
    FILE = "file"
    SPREADSHEET = "spreadsheet"
    AI = "ai"


class SessionStateError(Exception):
    """Raised on an operation that is not allowed in the current step."""


class ImportSession:
    """Process-local state of one purchase invoice import.

    The supplier snapshot is taken once, when the session is created.
    """

    def __init__(
        self,
        suppliers: Iterable[Supplier],
        options: ValidationOptions | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.registry = SupplierRegistry(suppliers)
        self.options = options or ValidationOptions()
        self.error_log = error_log
        self._reset_state()

    def _reset_state(self) -> None:
        self.step = ImportStep.UPLOAD
        self.method = IngestionMethod.PASTE
        self.rows: list[ParsedRow] = []
        self.summary = ImportSummary()
        self.error: str | None = None
        self.source = "<paste>"

    def _require(self, *steps: ImportStep) -> None:
        if self.step not in steps:
            allowed = "/".join(s.value for s in steps)
            raise SessionStateError(f"not allowed in step '{self.step.value}' (expected {allowed})")

    @property
    def valid_rows(self) -> list[ParsedRow]:
        return [r for r in self.rows if r.is_valid]

    def choose_method(self, method: IngestionMethod) -> None:
        self._require(ImportStep.UPLOAD)
        self.method = method

    def _ingest(
        self,
        method: IngestionMethod,
        source: str,
        produce: Callable[[], Sequence[RawRow]],
    ) -> list[ParsedRow]:
        self._require(ImportStep.UPLOAD)
        self.method = method
        self.source = source
        self.error = None
        try:
            raw_rows = produce()
        except IngestionError as e:
            self.error = str(e)
            logger.error("ingestion failed source=%s: %s", source, e)
            if self.error_log is not None:
                self.error_log.append(ErrorRecord.create(source, -1, "INGESTION_ERROR", str(e)))
            raise
        self.rows = validate_rows(raw_rows, self.registry, self.options)
        if self.error_log is not None:
            for pos, row in enumerate(self.rows):
                if not row.is_valid:
                    self.error_log.append(
                        ErrorRecord.create(source, row.report_row(pos), "VALIDATION_ERROR", " ".join(row.errors))
                    )
        self.step = ImportStep.PREVIEW
        logger.info(
            "source=%s rows=%d valid=%d", source, len(self.rows), len(self.valid_rows)
        )
        return self.rows

    def load_paste(self, text: str | None) -> list[ParsedRow]:
        return self._ingest(IngestionMethod.PASTE, "<paste>", lambda: split_delimited_text(text))

    def load_file(self, source: str | Path | IO[Any], name: str | None = None) -> list[ParsedRow]:
        label = name or (Path(source).name if isinstance(source, (str, Path)) else "<file>")
        return self._ingest(IngestionMethod.FILE, label, lambda: read_csv_file(source))

    def load_spreadsheet(self, source: str | Path | IO[Any], name: str | None = None) -> list[ParsedRow]:
        label = name or (Path(source).name if isinstance(source, (str, Path)) else "<spreadsheet>")
        return self._ingest(IngestionMethod.SPREADSHEET, label, lambda: read_spreadsheet_file(source))

    def load_ai_text(self, text: str, extractor: Extractor) -> list[ParsedRow]:
        return self._ingest(IngestionMethod.AI, "<ai>", lambda: extract_with_ai(text, extractor))

    def load_ai_response(self, payload: Any, name: str = "<ai>") -> list[ParsedRow]:
        return self._ingest(IngestionMethod.AI, name, lambda: parse_ai_response(payload))

    def go_back(self) -> None:
        self._require(ImportStep.PREVIEW)
        self.rows = []
        self.step = ImportStep.UPLOAD

    def run_import(self, persist: Persist) -> ImportSummary:
        """Persist the valid preview rows and move to summary."""
        self._require(ImportStep.PREVIEW)
        self.step = ImportStep.IMPORTING
        self.summary = import_rows(self.rows, persist, error_log=self.error_log, source=self.source)
        self.step = ImportStep.SUMMARY
        return self.summary

    def reset(self) -> None:
        """Discard everything and start again from upload."""
        if self.step is ImportStep.IMPORTING:
            raise SessionStateError("cannot reset while importing")
        self._reset_state()

    close = reset
