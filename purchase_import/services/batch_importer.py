from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.import_summary import ImportSummary, RowOutcome
from ..models.parsed_row import ParsedRow
from .progress import ProgressTracker

"""Batch import of validated purchase invoices.

Rows are persisted strictly one after another, in preview order. A failing row
is counted, logged and skipped; earlier successes stay in place (the import is
not atomic) and the loop carries on with the next row.

Sequential on purpose: invoice numbering and uniqueness constraints in the
store are easier to reason about without concurrent writes.
"""

__all__ = [
    "Persist",
    "import_rows",
]

logger = logging.getLogger(__name__)

# payload -> anything; raising means the row failed
Persist = Callable[[dict[str, Any]], Any]


def import_rows(
    rows: Sequence[ParsedRow],
    persist: Persist,
    error_log: ErrorLogBuffer | None = None,
    source: str = "<import>",
) -> ImportSummary:
    """Persist the valid rows of a preview and count successes / failures.

    Invalid rows are skipped without being counted. Outcomes keep the
    position each row had in ``rows``.

    Parameters
    ----------
    rows: parsed rows as shown in the preview
    persist: storage collaborator taking the payload of one invoice
    error_log: optional buffer receiving one PERSISTENCE_ERROR per failed row
    source: input name recorded in the error log
    """
    start_time = datetime.now(UTC)
    targets = [(pos, row) for pos, row in enumerate(rows) if row.is_valid]
    outcomes: list[RowOutcome] = []
    success = 0
    failed = 0

    with ProgressTracker(len(targets)) as progress:
        for pos, row in targets:
            progress.start_row(row.invoice_number)
            try:
                persist(row.to_payload())
            except Exception as e:
                failed += 1
                logger.warning("row=%d invoice=%s import failed: %s", row.report_row(pos), row.invoice_number, e)
                outcomes.append(RowOutcome(pos, row.invoice_number, ok=False, error=str(e)))
                if error_log is not None:
                    error_log.append(
                        ErrorRecord.create(
                            source=source,
                            row=row.report_row(pos),
                            error_type="PERSISTENCE_ERROR",
                            message=f"{row.invoice_number}: {e}",
                        )
                    )
                progress.finish_row(success=False)
            else:
                success += 1
                outcomes.append(RowOutcome(pos, row.invoice_number, ok=True))
                progress.finish_row(success=True)
            progress.set_postfix(success=success, failed=failed)

    end_time = datetime.now(UTC)
    return ImportSummary(
        success=success,
        failed=failed,
        outcomes=tuple(outcomes),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )
