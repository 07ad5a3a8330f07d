from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import cast
import warnings

from .constants import Defaults


def _bundled_systems_dir() -> Path:
    return Path(__file__).parent / "infrastructure" / "repositories" / "systems"


@dataclass(frozen=True, slots=True)
class ImporterConfig:
    systems_dir: Path = field(default_factory=_bundled_systems_dir)
    database_path: Path = field(default_factory=lambda: Path(Defaults.DATABASE))
    preview_ttl_seconds: int = Defaults.PREVIEW_TTL_SECONDS
    sweep_interval_seconds: int = Defaults.SWEEP_INTERVAL_SECONDS
    default_system: str | None = None

    def __post_init__(self) -> None:
        if self.preview_ttl_seconds < 1:
            raise ValueError(
                f"preview_ttl_seconds must be positive, got {self.preview_ttl_seconds}"
            )
        if self.sweep_interval_seconds < 1:
            raise ValueError(
                f"sweep_interval_seconds must be positive, got {self.sweep_interval_seconds}"
            )

    @classmethod
    def from_env(cls) -> ImporterConfig:
        raw_systems_dir = os.getenv("CAREGAP_SYSTEMS_DIR")
        raw_default_system = os.getenv("CAREGAP_DEFAULT_SYSTEM")
        default_system = raw_default_system.strip() if raw_default_system else None
        return cls(
            systems_dir=Path(raw_systems_dir)
            if raw_systems_dir
            else _bundled_systems_dir(),
            database_path=Path(os.getenv("CAREGAP_DATABASE", Defaults.DATABASE)),
            preview_ttl_seconds=_env_int(
                "CAREGAP_PREVIEW_TTL", Defaults.PREVIEW_TTL_SECONDS
            ),
            sweep_interval_seconds=_env_int(
                "CAREGAP_SWEEP_INTERVAL", Defaults.SWEEP_INTERVAL_SECONDS
            ),
            default_system=default_system or None,
        )


class ConfigLoader:
    pass

    @staticmethod
    def load(config_file: Path | None = None) -> ImporterConfig:
        config = ImporterConfig.from_env()
        if config_file is None:
            config_file = Path(Defaults.CONFIG_FILE)
        if config_file.exists():
            try:
                config = ConfigLoader._load_from_toml(config_file, config)
            except (OSError, tomllib.TOMLDecodeError, ValueError) as e:
                warnings.warn(
                    f"Failed to load config from {config_file}: {e}", stacklevel=2
                )
        return config

    @staticmethod
    def _load_from_toml(
        config_file: Path, base_config: ImporterConfig
    ) -> ImporterConfig:
        with config_file.open("rb") as handle:
            data = tomllib.load(handle)
        section = _get_table(data, "default")
        systems_dir = base_config.systems_dir
        if "CAREGAP_SYSTEMS_DIR" not in os.environ and (
            value := section.get("systems_dir")
        ):
            systems_dir = Path(str(value))
        database_path = base_config.database_path
        if "CAREGAP_DATABASE" not in os.environ and (value := section.get("database")):
            database_path = Path(str(value))
        preview_ttl = base_config.preview_ttl_seconds
        if "CAREGAP_PREVIEW_TTL" not in os.environ and (
            (value := section.get("preview_ttl_seconds")) is not None
        ):
            preview_ttl = _coerce_int(value, key="default.preview_ttl_seconds")
        sweep_interval = base_config.sweep_interval_seconds
        if "CAREGAP_SWEEP_INTERVAL" not in os.environ and (
            (value := section.get("sweep_interval_seconds")) is not None
        ):
            sweep_interval = _coerce_int(value, key="default.sweep_interval_seconds")
        default_system = base_config.default_system
        if default_system is None and (raw := section.get("default_system")):
            default_system = str(raw).strip() or None
        return ImporterConfig(
            systems_dir=systems_dir,
            database_path=database_path,
            preview_ttl_seconds=preview_ttl,
            sweep_interval_seconds=sweep_interval,
            default_system=default_system,
        )


def _env_int(name: str, default: int) -> int:
    """Read a positive int from the environment, else return ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


def _get_table(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    if isinstance(value, Mapping):
        return cast("Mapping[str, object]", value)
    return {}


def _coerce_int(value: object, *, key: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an int, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        return int(value)
    raise ValueError(f"{key} must be int-like or string, got {type(value).__name__}")
