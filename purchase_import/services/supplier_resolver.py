from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ..models.supplier import Supplier

"""Supplier resolution: free-text supplier name -> registered Supplier.

Resolution order:
1. exact match on the normalized name (lower-cased, trimmed, inner whitespace
   collapsed)
2. substring match in either direction (registry name contains the query or
   the query contains the registry name), case-insensitive

The fallback scan walks suppliers in the order they were loaded into the
registry and the first match wins, so results are reproducible for a given
snapshot. There is no best-match scoring.
"""

__all__ = [
    "SupplierRegistry",
    "normalize_name",
]

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def normalize_name(name: str | None) -> str:
    return _WS_RE.sub(" ", (name or "").strip()).lower()


class SupplierRegistry:
    """Read-only supplier snapshot indexed by normalized name.

    Built once per import session; suppliers added elsewhere afterwards are
    not seen by that session.
    """

    def __init__(self, suppliers: Iterable[Supplier]) -> None:
        self._suppliers: list[Supplier] = []
        self._by_name: dict[str, Supplier] = {}
        for supplier in suppliers:
            key = normalize_name(supplier.name)
            if not key:
                logger.debug("skipping supplier id=%s with empty name", supplier.id)
                continue
            if key in self._by_name:
                # first loaded wins for duplicate names
                logger.debug("duplicate supplier name=%r id=%s ignored", supplier.name, supplier.id)
                continue
            self._by_name[key] = supplier
            self._suppliers.append(supplier)

    def __len__(self) -> int:
        return len(self._suppliers)

    def __iter__(self):
        return iter(self._suppliers)

    def resolve(self, name: str | None) -> Supplier | None:
        """Return the matching supplier or None when the name is not registered."""
        query = normalize_name(name)
        if not query:
            return None
        exact = self._by_name.get(query)
        if exact is not None:
            return exact
        for key, supplier in self._by_name.items():
            if query in key or key in query:
                return supplier
        return None
