# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
import pytest

from purchase_import.logging.init import reset_logging
from purchase_import.models.supplier import Supplier
from purchase_import.services.supplier_resolver import SupplierRegistry


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """vat_rate: 21
amount_lone_dot: decimal
logs_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
suppliers:
  - id: sup-1
    name: Acme SL
  - id: sup-2
    name: Proveedor SL
  - id: sup-3
    name: Papelería Central S.A.
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def suppliers() -> list[Supplier]:
    return [
        Supplier(id="sup-1", name="Acme SL"),
        Supplier(id="sup-2", name="Proveedor SL"),
        Supplier(id="sup-3", name="Papelería Central S.A."),
    ]


@pytest.fixture()
def registry(suppliers) -> SupplierRegistry:
    return SupplierRegistry(suppliers)


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


class RecordingPersist:
    """Persistence collaborator double: records payloads, fails on chosen calls."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.attempted: list[str] = []
        self.persisted: list[dict] = []

    def __call__(self, payload: dict) -> None:
        self.attempted.append(payload["invoice_number"])
        if len(self.attempted) in self.fail_on:
            raise RuntimeError("duplicate key value violates unique constraint")
        self.persisted.append(payload)


@pytest.fixture()
def recording_persist():
    return RecordingPersist
