from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ...domain.entities.system_config import SystemConfig, SystemInfo, SystemsRegistry
from ...domain.services.errors import UnknownSystemError
from ..io.exceptions import DataParseError, DataSourceNotFoundError

if TYPE_CHECKING:
    from typing import Any

REGISTRY_FILE = "systems.json"


class SystemConfigLoadError(DataParseError):
    pass


class SystemConfigRepository:
    """Reads the systems registry and per-system mapping files from disk."""

    def __init__(self, systems_dir: Path, default_system: str | None = None) -> None:
        super().__init__()
        self._systems_dir = Path(systems_dir)
        self._default_override = default_system
        self._registry: SystemsRegistry | None = None
        self._configs: dict[str, SystemConfig] = {}

    def registry(self) -> SystemsRegistry:
        if self._registry is None:
            data = _read_json(self._systems_dir / REGISTRY_FILE)
            try:
                self._registry = SystemsRegistry.model_validate(data)
            except ValidationError as exc:
                raise SystemConfigLoadError(
                    f"Invalid systems registry {REGISTRY_FILE}: {exc}"
                ) from exc
        return self._registry

    def list_systems(self) -> list[SystemInfo]:
        registry = self.registry()
        default = self.get_default_system_id()
        return [
            SystemInfo(id=system_id, name=entry.name, is_default=system_id == default)
            for system_id, entry in registry.systems.items()
        ]

    def get_default_system_id(self) -> str:
        if self._default_override and self.is_valid_system(self._default_override):
            return self._default_override
        return self.registry().default

    def is_valid_system(self, system_id: str) -> bool:
        return bool(system_id) and system_id in self.registry().systems

    def load(self, system_id: str) -> SystemConfig:
        cached = self._configs.get(system_id)
        if cached is not None:
            return cached
        entry = self.registry().systems.get(system_id)
        if entry is None:
            raise UnknownSystemError(system_id)
        path = self._systems_dir / entry.config_file
        data = _read_json(path)
        try:
            config = SystemConfig.model_validate(data)
        except ValidationError as exc:
            raise SystemConfigLoadError(
                f"Invalid configuration for system {system_id}: {exc}"
            ) from exc
        self._configs[system_id] = config
        return config


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise DataSourceNotFoundError(f"System configuration not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise SystemConfigLoadError(f"Invalid JSON in {path}: {exc}") from exc
    except OSError as exc:
        raise SystemConfigLoadError(f"Failed to read {path}: {exc}") from exc
