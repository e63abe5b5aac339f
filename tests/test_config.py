"""Tests for configuration loading."""

import tempfile
from pathlib import Path

import pytest

from sqlbench.config import Config, DataSourceConfig, load_config


def _write_config(text: str) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(text)
        return f.name


def test_load_full_config():
    config_path = _write_config("""
datasources:
  app_db:
    type: sqlite
    path: /tmp/app.db
  warehouse:
    type: postgresql
    host: localhost
    port: 5432
    database: analytics
    user: test
    password: test

default_datasource: warehouse

editor:
  hidden_columns: [created_on]

logging:
  level: DEBUG
  structured: true
""")
    try:
        config = load_config(config_path)

        assert set(config.datasources) == {"app_db", "warehouse"}
        assert config.datasources["app_db"].type == "sqlite"
        assert config.datasources["app_db"].config == {"path": "/tmp/app.db"}
        assert config.datasources["warehouse"].config["port"] == 5432
        assert config.get_default_datasource().name == "warehouse"
        assert config.editor.hidden_columns == ["created_on"]
        assert config.logging.level == "DEBUG"
        assert config.logging.structured is True
        assert config.logging.file is None
    finally:
        Path(config_path).unlink()


def test_defaults_when_sections_missing():
    config_path = _write_config("""
datasources:
  local:
    type: duckdb
    path: ":memory:"
""")
    try:
        config = load_config(config_path)

        assert config.get_default_datasource().name == "local"
        assert config.editor.hidden_columns == ["createdAt", "updatedAt"]
        assert config.logging.level == "INFO"
    finally:
        Path(config_path).unlink()


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/sqlbench.yaml")


def test_default_datasource_errors():
    with pytest.raises(ValueError):
        Config().get_default_datasource()

    config = Config(
        datasources={"a": DataSourceConfig(name="a", type="sqlite", config={})},
        default_datasource="b",
    )
    with pytest.raises(ValueError):
        config.get_default_datasource()
