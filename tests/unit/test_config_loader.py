from __future__ import annotations

import pytest

from purchase_import.config.loader import ConfigError, load_config
from purchase_import.models.config_models import LONE_DOT_DECIMAL
from purchase_import.models.supplier import Supplier


def test_load_sample(write_config):
    cfg = load_config(write_config)
    assert cfg.vat_rate == 21.0
    assert cfg.amount_lone_dot == LONE_DOT_DECIMAL
    assert cfg.database.host == "localhost"
    assert cfg.database.port == 5432
    assert cfg.suppliers[0] == Supplier(id="sup-1", name="Acme SL")
    assert len(cfg.suppliers) == 3


def test_defaults(tmp_path):
    path = tmp_path / "import.yml"
    path.write_text("", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.vat_rate == 21.0
    assert cfg.due_date_offset_months == 0
    assert cfg.logs_dir == "./logs"
    assert cfg.suppliers == ()
    assert cfg.database.dsn is None


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(tmp_path / "nope.yml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "import.yml"
    path.write_text("vat_rate: [21\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "vat_rate: 150\n",
        "amount_lone_dot: comma\n",
        "unknown_key: 1\n",
        "suppliers:\n  - name: Acme SL\n",
    ],
)
def test_schema_violations(tmp_path, text):
    path = tmp_path / "import.yml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(path)
