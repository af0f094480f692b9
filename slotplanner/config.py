"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    DEFAULT_BREAK_DURATION,
    DEFAULT_BUFFER_DURATION,
    DEFAULT_SLOT_DURATION,
    SlotConfig,
)
from .domain.validation import minutes_since_midnight, parse_clock

CONFIG_FILENAME = "slotplanner.yaml"


class DefaultsConfig(BaseModel):
    """Seed values for a new slot configuration."""
    start_time: str = "10:00"
    end_time: str = "18:00"
    days: int = 5
    slot_duration: int = DEFAULT_SLOT_DURATION
    break_duration: int = DEFAULT_BREAK_DURATION
    buffer_duration: int = DEFAULT_BUFFER_DURATION

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Validate clock strings are strict HH:mm."""
        if parse_clock(value) is None:
            raise ValueError(f"Time must be in HH:mm format, got {value!r}")
        return value

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: int) -> int:
        """Ensure the default range covers at least one day."""
        if value <= 0:
            raise ValueError("days must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_window_order(self) -> "DefaultsConfig":
        """Ensure the default window opens before it closes."""
        if minutes_since_midnight(parse_clock(self.end_time)) <= minutes_since_midnight(
            parse_clock(self.start_time)
        ):
            raise ValueError("end_time must be later than start_time")
        return self

    def to_slot_config(self, time_zone: str, today: date) -> SlotConfig:
        """Build a slot configuration starting ``today`` from these defaults."""
        return SlotConfig(
            start_date=today.isoformat(),
            end_date=(today + timedelta(days=self.days)).isoformat(),
            start_time=self.start_time,
            end_time=self.end_time,
            time_zone=time_zone,
            slot_duration=self.slot_duration,
            break_duration=self.break_duration,
            buffer_duration=self.buffer_duration,
        )


class StorageConfig(BaseModel):
    """Where generated data is kept between sessions."""
    path: Path = Path(".slotplanner") / "store.json"
    namespace: str = "@slotplanner_v1:"

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, value: str) -> str:
        """An empty prefix would let ``clear`` remove unrelated keys."""
        if not value.strip():
            raise ValueError("namespace must not be empty")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: Optional[str] = None  # None: the machine's zone
    log_level: str = "WARNING"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a {CONFIG_FILENAME} file (see slotplanner.example.yaml) or omit --config to use defaults."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for the config in the current directory
    config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        # Try in the project root (parent of slotplanner/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / CONFIG_FILENAME

    return config_path


def load_app_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load an explicit config file, or the default one when it exists.

    A missing explicit file is an error; a missing default file means
    built-in defaults.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
