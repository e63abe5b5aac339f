"""SQL workbench: batch SQL execution and generic table editing."""

__version__ = "0.1.0"
