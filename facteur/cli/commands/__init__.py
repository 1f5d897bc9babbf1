"""CLI commands module."""

from . import config, count, delete, list, read

__all__ = ["config", "count", "list", "read", "delete"]
