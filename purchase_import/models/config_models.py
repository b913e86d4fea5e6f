from __future__ import annotations

from dataclasses import dataclass, field

from .supplier import Supplier

"""Config dataclasses for the purchase invoice importer.

Built by config.loader from config/import.yml after schema validation.
"""

__all__ = [
    "DatabaseConfig",
    "ImportConfig",
    "LONE_DOT_DECIMAL",
    "LONE_DOT_THOUSANDS",
]

# How a lone dot with exactly three trailing digits ("1.234") is read
LONE_DOT_DECIMAL = "decimal"
LONE_DOT_THOUSANDS = "thousands"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    user_id: str | None = None  # owner stamped on inserted invoices, if the table needs one


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import process."""
    vat_rate: float = 21.0  # percent, used when no explicit subtotal/tax split is given
    amount_lone_dot: str = LONE_DOT_DECIMAL
    due_date_offset_months: int = 0  # 0 = due date falls back to the issue date
    logs_dir: str = "./logs"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    suppliers: tuple[Supplier, ...] = ()  # offline registry (used without a DB)
