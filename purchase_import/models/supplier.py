from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Supplier model for the purchase invoice importer.

Suppliers are owned by the storage layer; the importer only reads a snapshot
of them once per session.
"""

__all__ = [
    "Supplier",
]


@dataclass(frozen=True)
class Supplier:
    """Registered supplier (read-only for the importer)."""
    id: Any  # uuid string in the database, anything hashable offline
    name: str

    @staticmethod
    def from_mapping(data: dict[str, Any]) -> Supplier:
        return Supplier(id=data["id"], name=str(data.get("name") or ""))
