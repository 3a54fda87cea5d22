from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import tomllib

from .models import SLOTS_PER_DAY


def _default_config_root() -> Path:
    return Path.home() / ".config" / "dayslots"


def _default_database() -> Path:
    return Path.home() / ".scheduler" / "scheduler.db"


def _default_log_file() -> Path:
    return Path.home() / ".local" / "state" / "dayslots" / "dayslots.log"


@dataclass(slots=True)
class StorageSettings:
    database: Path = field(default_factory=_default_database)


@dataclass(slots=True)
class PlannerSettings:
    viewport_height: int = 6
    default_duration: int = 30
    banner_seconds: float = 3.0
    tick_seconds: float = 60.0


@dataclass(slots=True)
class LoggingSettings:
    file: Path = field(default_factory=_default_log_file)
    level: str = "INFO"

    @property
    def level_number(self) -> int:
        value = logging.getLevelName(self.level.upper())
        return value if isinstance(value, int) else logging.INFO


@dataclass(slots=True)
class DaySlotsConfig:
    storage: StorageSettings
    planner: PlannerSettings
    logging: LoggingSettings

    @classmethod
    def default(cls) -> "DaySlotsConfig":
        return cls(
            storage=StorageSettings(),
            planner=PlannerSettings(),
            logging=LoggingSettings(),
        )

    def to_dict(self) -> dict:
        return {
            "storage": {
                "database": str(self.storage.database),
            },
            "planner": {
                "viewport_height": self.planner.viewport_height,
                "default_duration": self.planner.default_duration,
                "banner_seconds": self.planner.banner_seconds,
                "tick_seconds": self.planner.tick_seconds,
            },
            "logging": {
                "file": str(self.logging.file),
                "level": self.logging.level,
            },
        }


class ConfigManager:
    """Simple TOML configuration loader."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or (_default_config_root() / "config.toml")
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self._errors: list[str] = []

    def errors(self) -> list[str]:
        return list(self._errors)

    def load(self) -> DaySlotsConfig:
        self._errors.clear()
        if not self.config_path.exists():
            config = DaySlotsConfig.default()
            self._write(config)
            return config

        try:
            with self.config_path.open("rb") as handle:
                raw = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            self._errors.append(f"Invalid config file {self.config_path}: {exc}")
            return DaySlotsConfig.default()

        storage_cfg = raw.get("storage", {})
        planner_cfg = raw.get("planner", {})
        logging_cfg = raw.get("logging", {})
        defaults = PlannerSettings()

        def _int_in_range(key: str, default: int, low: int, high: int) -> int:
            value = planner_cfg.get(key, default)
            try:
                number = int(value)
            except (TypeError, ValueError):
                self._errors.append(f"Invalid planner.{key}: {value!r}")
                return default
            if not low <= number <= high:
                self._errors.append(f"planner.{key} must be between {low} and {high}")
                return default
            return number

        def _positive_float(key: str, default: float) -> float:
            value = planner_cfg.get(key, default)
            try:
                number = float(value)
            except (TypeError, ValueError):
                self._errors.append(f"Invalid planner.{key}: {value!r}")
                return default
            if number <= 0:
                self._errors.append(f"planner.{key} must be positive")
                return default
            return number

        database_value = storage_cfg.get("database") or str(_default_database())
        log_file_value = logging_cfg.get("file") or str(_default_log_file())

        return DaySlotsConfig(
            storage=StorageSettings(database=Path(database_value).expanduser()),
            planner=PlannerSettings(
                viewport_height=_int_in_range("viewport_height", defaults.viewport_height, 1, SLOTS_PER_DAY),
                default_duration=_int_in_range("default_duration", defaults.default_duration, 1, 999),
                banner_seconds=_positive_float("banner_seconds", defaults.banner_seconds),
                tick_seconds=_positive_float("tick_seconds", defaults.tick_seconds),
            ),
            logging=LoggingSettings(
                file=Path(log_file_value).expanduser(),
                level=str(logging_cfg.get("level", "INFO")),
            ),
        )

    def _write(self, config: DaySlotsConfig) -> None:
        data = config.to_dict()
        lines = [
            "[storage]",
            f"database = \"{data['storage']['database']}\"",
            "",
            "[planner]",
            f"viewport_height = {data['planner']['viewport_height']}",
            f"default_duration = {data['planner']['default_duration']}",
            f"banner_seconds = {data['planner']['banner_seconds']}",
            f"tick_seconds = {data['planner']['tick_seconds']}",
            "",
            "[logging]",
            f"file = \"{data['logging']['file']}\"",
            f"level = \"{data['logging']['level']}\"",
        ]
        self.config_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
