"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WorkingHours


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 30
    start_hour: int = 10
    end_hour: int = 18

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure minimum slot duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_start_time(self) -> time:
        """Get start time as time object."""
        return time(hour=self.start_hour, minute=0)

    def get_end_time(self) -> time:
        """Get end time as time object."""
        return time(hour=self.end_hour, minute=0)


class AppConfig(BaseModel):
    """Application configuration."""
    client_secret_file: Path = Path("client_secret.json")
    token_cache_file: Path = Field(default_factory=lambda: Path.home() / ".credentials" / "freetime.json")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    timezone: Optional[str] = None  # None: local system timezone
    lookahead_days: int = 3
    busy_calendars: List[str] = Field(default_factory=lambda: ["UIUC", "Personal", "YMCA"])
    exclude_days: List[int] = Field(default_factory=lambda: [5, 6])  # Saturday, Sunday
    mock_data_file: Optional[Path] = None

    @field_validator("client_secret_file", "token_cache_file", "mock_data_file")
    @classmethod
    def expand_user(cls, value: Optional[Path]) -> Optional[Path]:
        """Expand ``~`` in configured paths."""
        if value is None:
            return value
        return value.expanduser()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        """Ensure the timezone is a known IANA name."""
        if value is None:
            return value
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("lookahead_days")
    @classmethod
    def validate_lookahead_days(cls, value: int) -> int:
        """Ensure at least one day is searched."""
        if value < 1:
            raise ValueError("lookahead_days must be at least 1")
        return value

    @field_validator("busy_calendars")
    @classmethod
    def validate_busy_calendars(cls, value: List[str]) -> List[str]:
        """Ensure calendar names are non-empty."""
        if any(not name for name in value):
            raise ValueError("busy_calendars must not contain empty names")
        return value

    @field_validator("exclude_days")
    @classmethod
    def validate_exclude_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range, deduplicated and not all excluded."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"exclude_days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        if len(deduped) == 7:
            raise ValueError("exclude_days must leave at least one working day")
        return deduped

    def working_hours(self) -> WorkingHours:
        """Build the working hours the slot calculation runs on."""
        return WorkingHours(
            start_time=self.defaults.get_start_time(),
            end_time=self.defaults.get_end_time(),
            exclude_weekdays=list(self.exclude_days),
            timezone=self.timezone,
        )

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
                f"Please create a config.yaml file. See config.example.yaml for reference."
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
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
