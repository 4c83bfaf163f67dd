"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidInput
from .domain.models import WorkingWindow, parse_clock_time


class BookingPolicy(BaseModel):
    """Salon-wide booking rules, resolved once and handed to the engine."""
    buffer_time_minutes: int = 15
    min_advance_hours: float = 2
    max_cancel_hours: float = 24
    slot_cadence_minutes: int = 30
    max_daily_bookings: Optional[int] = None
    auto_confirm: bool = False
    business_hours_start: str = "09:00"
    business_hours_end: str = "18:00"

    @field_validator("buffer_time_minutes", "min_advance_hours", "max_cancel_hours")
    @classmethod
    def validate_not_negative(cls, value):
        """Ensure notice and buffer values are not negative."""
        if value < 0:
            raise ValueError(f"Value must not be negative, got {value}")
        return value

    @field_validator("slot_cadence_minutes")
    @classmethod
    def validate_cadence(cls, value: int) -> int:
        """Ensure the slot grid advances."""
        if value <= 0:
            raise ValueError("slot_cadence_minutes must be greater than zero")
        return value

    @field_validator("max_daily_bookings")
    @classmethod
    def validate_daily_cap(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("max_daily_bookings must be greater than zero when set")
        return value

    @field_validator("business_hours_start", "business_hours_end")
    @classmethod
    def validate_clock_time(cls, value: str) -> str:
        """Validate HH:MM format."""
        try:
            parse_clock_time(value)
        except InvalidInput as exc:
            raise ValueError(str(exc)) from exc
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "BookingPolicy":
        """Ensure the salon opens before it closes."""
        if parse_clock_time(self.business_hours_end) <= parse_clock_time(self.business_hours_start):
            raise ValueError("business_hours_end must be later than business_hours_start")
        return self

    def business_window(self) -> WorkingWindow:
        """Single open/close window used when no professional is chosen."""
        return WorkingWindow.from_strings(self.business_hours_start, self.business_hours_end)


class AppConfig(BaseModel):
    """Application configuration."""
    salon_name: str = "Salon"
    timezone: str = "America/Sao_Paulo"
    data_file: Path = Path("salon_data.json")
    policy: BookingPolicy = Field(default_factory=BookingPolicy)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``data_file`` paths are resolved against the config file's
        directory.

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

        config = cls(**data)
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of salonslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
