"""
Settings package for keyframe-studio.

Type-safe configuration on top of Qt's QSettings.

Usage:
    from keyframe_studio.settings import AppSettings

    settings = AppSettings()
    result = settings.validate()
"""

from .core import AppSettings
from .editor import EditorSettings
from .logging import LoggingSettings
from .types import ConfigError, ConfigVersion, ValidationResult
from .ui import UISettings

__all__ = [
    "AppSettings",
    "EditorSettings",
    "LoggingSettings",
    "UISettings",
    "ConfigVersion",
    "ConfigError",
    "ValidationResult",
]
