from __future__ import annotations


class IngestionError(Exception):
    """Raised when an input cannot be turned into rows at all.

    Aborts the whole ingestion attempt (no partial recovery). The message is
    meant to be shown to the user as-is.
    """
