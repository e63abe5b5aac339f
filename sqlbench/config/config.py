"""Configuration management for the SQL workbench."""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import yaml
from pathlib import Path


@dataclass
class DataSourceConfig:
    """Configuration for a single data source."""

    name: str
    type: str  # "duckdb", "sqlite" or "postgresql"
    config: Dict[str, Any]


@dataclass
class EditorConfig:
    """Configuration for table browsing and editing."""

    hidden_columns: List[str] = field(
        default_factory=lambda: ["createdAt", "updatedAt"]
    )


@dataclass
class LoggingConfig:
    """Configuration for log output."""

    level: str = "INFO"
    structured: bool = False
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    datasources: Dict[str, DataSourceConfig] = field(default_factory=dict)
    default_datasource: Optional[str] = None
    editor: EditorConfig = field(default_factory=EditorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_default_datasource(self) -> DataSourceConfig:
        """Return the default data source, or the first one configured.

        Raises:
            ValueError: If no data source is configured or the default is unknown
        """
        if not self.datasources:
            raise ValueError("No data sources configured")
        if self.default_datasource is None:
            return next(iter(self.datasources.values()))
        if self.default_datasource not in self.datasources:
            raise ValueError(f"Unknown default data source: {self.default_datasource}")
        return self.datasources[self.default_datasource]


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        datasources:
          app_db:
            type: sqlite
            path: /data/app.db

          warehouse:
            type: postgresql
            host: localhost
            port: 5432
            database: mydb
            user: user
            password: pass
            schema: public

          scratch:
            type: duckdb
            path: /data/scratch.duckdb

        default_datasource: app_db

        editor:
          hidden_columns: [createdAt, updatedAt]

        logging:
          level: DEBUG
          structured: false
          file: workbench.log
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    datasources = {}
    for name, ds_config in data.get("datasources", {}).items():
        ds_config = dict(ds_config)
        ds_type = ds_config.pop("type")
        datasources[name] = DataSourceConfig(name=name, type=ds_type, config=ds_config)

    editor = EditorConfig(**data.get("editor", {}))
    logging_config = LoggingConfig(**data.get("logging", {}))

    return Config(
        datasources=datasources,
        default_datasource=data.get("default_datasource"),
        editor=editor,
        logging=logging_config,
    )
