from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

"""Import result models for the purchase invoice importer.

ImportSummary is what the batch importer returns and what the SUMMARY line is
rendered from. Outcomes are kept in attempt order so the summary lines up with
the preview the user reviewed.
"""

__all__ = [
    "RowOutcome",
    "ImportSummary",
]


@dataclass(frozen=True)
class RowOutcome:
    """Result of persisting one valid row."""
    position: int  # 0-based index in the preview list
    invoice_number: str
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class ImportSummary:
    """Per-batch success / failure counters (the import is not atomic)."""
    success: int = 0
    failed: int = 0
    outcomes: tuple[RowOutcome, ...] = field(default_factory=tuple)
    start_time: datetime | None = None
    end_time: datetime | None = None
    elapsed_seconds: float = 0.0

    @property
    def attempted(self) -> int:
        return self.success + self.failed

    def as_counts(self) -> dict[str, int]:
        return {"success": self.success, "failed": self.failed}
