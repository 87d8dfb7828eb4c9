"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import SERVICE_DURATION_HOURS, BusinessHours
from .domain.pricing import PriceRange, PricingRates

DEFAULT_BUSINESS_HOURS: Dict[str, Any] = {
    "sunday": None,
    "monday": {"open_hour": 9, "close_hour": 16},
    "tuesday": {"open_hour": 9, "close_hour": 16},
    "wednesday": {"open_hour": 9, "close_hour": 16},
    "thursday": {"open_hour": 9, "close_hour": 16},
    "friday": {"open_hour": 9, "close_hour": 16},
    "saturday": {"open_hour": 9, "close_hour": 11},
}


class RateConfig(BaseModel):
    """A min/max dollar range."""
    min: int
    max: int

    @model_validator(mode="after")
    def validate_order(self) -> "RateConfig":
        """Ensure the range is non-negative and ordered."""
        if self.min < 0 or self.max < 0:
            raise ValueError("rates must not be negative")
        if self.min > self.max:
            raise ValueError(f"rate min {self.min} is greater than max {self.max}")
        return self

    def to_price_range(self) -> PriceRange:
        return PriceRange(self.min, self.max)


class PricingConfig(BaseModel):
    """Per-window and per-floor rates for the price estimate."""
    small_window_exterior: RateConfig = Field(default_factory=lambda: RateConfig(min=5, max=8))
    small_window_interior_exterior: RateConfig = Field(default_factory=lambda: RateConfig(min=8, max=12))
    large_window_exterior: RateConfig = Field(default_factory=lambda: RateConfig(min=8, max=12))
    large_window_interior_exterior: RateConfig = Field(default_factory=lambda: RateConfig(min=16, max=20))
    extra_floor: RateConfig = Field(default_factory=lambda: RateConfig(min=20, max=30))

    def get_rates(self) -> PricingRates:
        return PricingRates(
            small_window_exterior=self.small_window_exterior.to_price_range(),
            small_window_interior_exterior=self.small_window_interior_exterior.to_price_range(),
            large_window_exterior=self.large_window_exterior.to_price_range(),
            large_window_interior_exterior=self.large_window_interior_exterior.to_price_range(),
            extra_floor=self.extra_floor.to_price_range(),
        )


class FirestoreConfig(BaseModel):
    """Cloud Firestore connection settings."""
    project_id: Optional[str] = None
    credentials_path: Optional[Path] = None
    collection: str = "reservations"
    locks_collection: str = "slotLocks"


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Toronto"
    locale: str = "fr"
    service_duration_hours: int = SERVICE_DURATION_HOURS
    calendar_days: int = 28
    # Parsed leniently: malformed weekdays become closed days.
    business_hours: Dict[Any, Any] = Field(default_factory=lambda: dict(DEFAULT_BUSINESS_HOURS))
    firestore: FirestoreConfig = Field(default_factory=FirestoreConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("service_duration_hours", "calendar_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"must be at least 1, got {value}")
        return value

    @field_validator("business_hours", mode="before")
    @classmethod
    def validate_business_hours(cls, value: Any) -> Any:
        # Handled by BusinessHours.from_mapping; a non-mapping means every day closed.
        return value if isinstance(value, dict) else {}

    def get_business_hours(self) -> BusinessHours:
        """Get the business hours rule set."""
        return BusinessHours.from_mapping(self.business_hours)

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
