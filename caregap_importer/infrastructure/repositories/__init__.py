"""Repository adapters: system configuration files and the SQLite store."""

from .sqlite_store import SqliteCareGapStore
from .system_config_repository import SystemConfigLoadError, SystemConfigRepository

__all__ = ["SqliteCareGapStore", "SystemConfigLoadError", "SystemConfigRepository"]
