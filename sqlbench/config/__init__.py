"""Configuration management."""

from .config import (
    Config,
    DataSourceConfig,
    EditorConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "Config",
    "DataSourceConfig",
    "EditorConfig",
    "LoggingConfig",
    "load_config",
]
