"""
Persistence of user preferences (currently the webhook URL).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..domain.exceptions import SettingsStorageError

logger = logging.getLogger(__name__)

WEBHOOK_URL_KEY = "webhook_url"


class InMemorySettingsRepository:
    """Settings repository without persistence, used in tests and mock mode."""

    def __init__(self, webhook_url: Optional[str] = None) -> None:
        self._webhook_url = webhook_url

    def get_webhook_url(self) -> Optional[str]:
        return self._webhook_url

    def set_webhook_url(self, url: str) -> None:
        self._webhook_url = url

    def clear(self) -> None:
        self._webhook_url = None


class YamlSettingsRepository:
    """
    Stores user preferences in a small YAML file.

    Unreadable or malformed files are treated as empty so that a broken
    settings file never blocks booking. Failing writes raise
    ``SettingsStorageError``.
    """

    def __init__(self, settings_file: Path):
        self.settings_file = settings_file

    def get_webhook_url(self) -> Optional[str]:
        value = self._load().get(WEBHOOK_URL_KEY)
        return value if isinstance(value, str) and value else None

    def set_webhook_url(self, url: str) -> None:
        data = self._load()
        data[WEBHOOK_URL_KEY] = url
        self._save(data)
        logger.info("Webhook URL saved to %s", self.settings_file)

    def clear(self) -> None:
        """Remove the settings file (fall back to the configured defaults)."""
        if not self.settings_file.exists():
            return

        try:
            self.settings_file.unlink()
        except OSError as exc:
            logger.warning("Could not remove settings file %s: %s", self.settings_file, exc)
            raise SettingsStorageError(
                f"Could not remove settings file {self.settings_file}: {exc}"
            ) from exc
        logger.info("Removed settings file %s", self.settings_file)

    def _load(self) -> Dict[str, Any]:
        if not self.settings_file.exists():
            return {}

        try:
            with open(self.settings_file, "r", encoding="utf-8") as file_handle:
                data = yaml.safe_load(file_handle) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Could not load settings file %s: %s", self.settings_file, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a mapping", self.settings_file)
            return {}

        return data

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, "w", encoding="utf-8") as file_handle:
                yaml.safe_dump(data, file_handle, default_flow_style=False)
            self.settings_file.chmod(0o600)
        except OSError as exc:
            logger.warning("Could not save settings to %s: %s", self.settings_file, exc)
            raise SettingsStorageError(
                f"Could not save settings to {self.settings_file}: {exc}"
            ) from exc
