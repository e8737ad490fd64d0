"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from .domain.exceptions import InvalidConfigError
from .domain.models import TimeWindowConfig, parse_time_of_day
from .domain.slot_generator import DEFAULT_GRANULARITY_MINUTES, validate_granularity

ZAPIER_WEBHOOK_PATTERN = re.compile(r"^https://hooks\.zapier\.com/hooks/catch/[A-Za-z0-9/_-]+/?$")

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def validate_webhook_url(url: str, zapier_only: bool = True) -> str:
    """
    Validate a webhook URL.

    Args:
        url: URL to validate
        zapier_only: Require a Zapier "Catch Hook" URL

    Returns:
        The stripped URL

    Raises:
        InvalidConfigError: If the URL is malformed or not a Zapier webhook
    """
    candidate = (url or "").strip()
    try:
        _HTTP_URL.validate_python(candidate)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid webhook URL '{candidate}' (expected https://…)") from exc

    if zapier_only and not ZAPIER_WEBHOOK_PATTERN.match(candidate):
        raise InvalidConfigError(
            f"Webhook URL must be a Zapier webhook "
            f"(https://hooks.zapier.com/hooks/catch/…), got '{candidate}'"
        )

    return candidate


class SlotsConfig(BaseModel):
    """Opening hours and slot spacing."""
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    morning_start: str = "08:00"
    morning_end: str = "12:00"
    afternoon_start: str = "13:30"
    afternoon_end: str = "18:00"

    @field_validator("granularity_minutes")
    @classmethod
    def validate_granularity(cls, value: int) -> int:
        return validate_granularity(value)

    @field_validator("morning_start", "morning_end", "afternoon_start", "afternoon_end")
    @classmethod
    def validate_time_of_day(cls, value: str) -> str:
        """Normalize to zero-padded HH:MM."""
        return parse_time_of_day(value).strftime("%H:%M")

    @model_validator(mode="after")
    def validate_window_order(self) -> "SlotsConfig":
        """Ensure the windows are neither inverted nor overlapping."""
        self.to_time_windows()
        return self

    def to_time_windows(self) -> TimeWindowConfig:
        """Get the opening hours as domain object."""
        return TimeWindowConfig.from_strings(
            morning_start=self.morning_start,
            morning_end=self.morning_end,
            afternoon_start=self.afternoon_start,
            afternoon_end=self.afternoon_end,
        )


class WebhookConfig(BaseModel):
    """Webhook defaults. A URL saved via ``slotbooker webhook set`` takes precedence."""
    url: Optional[str] = None
    timeout_seconds: float = 10.0
    zapier_only: bool = True

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_url(self) -> "WebhookConfig":
        if self.url:
            self.url = validate_webhook_url(self.url, zapier_only=self.zapier_only)
        return self


def get_default_settings_path() -> Path:
    """Get the default location of the persisted user settings."""
    return Path.home() / ".slotbooker_settings.yaml"


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    slots: SlotsConfig = Field(default_factory=SlotsConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    settings_file: Path = Field(default_factory=get_default_settings_path)

    @field_validator("settings_file")
    @classmethod
    def expand_settings_file(cls, value: Path) -> Path:
        return value.expanduser()

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
        # Try in the project root (parent of slotbooker/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_file: Optional[Path] = None) -> AppConfig:
    """
    Load the configuration for a CLI invocation.

    An explicitly given file must exist. Without one, the default location
    is used when present and the built-in defaults otherwise.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()
