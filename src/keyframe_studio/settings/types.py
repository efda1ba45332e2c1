"""
Shared types for the settings package.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, cast

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings


class ConfigVersion(Enum):
    """Configuration layout versions."""
    V1_0 = "1.0"
    CURRENT = "1.0"


class ConfigError(Exception):
    """Raised on invalid access to configuration values."""


@dataclass
class ValidationResult:
    """Outcome of AppSettings.validate()."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class SettingsSection:
    """Base for one settings subsystem sharing the application QSettings."""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _get_str(self, key: str, default: str = "") -> str:
        """Type-safe string retrieval from settings."""
        value = self.settings.value(key, default)
        return str(value) if value is not None else default

    def _get_bool(self, key: str, default: bool = False) -> bool:
        """Type-safe boolean retrieval from settings."""
        value = self.settings.value(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    def _get_int(self, key: str, default: int = 0) -> int:
        """Type-safe integer retrieval from settings."""
        value = self.settings.value(key, default)
        try:
            if value is None:
                return default
            return int(cast(str | int, value))
        except (ValueError, TypeError):
            return default

    def _set(self, key: str, value: object) -> None:
        self.settings.setValue(key, value)
        self.settings.sync()
