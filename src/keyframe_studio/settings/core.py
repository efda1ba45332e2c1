"""
AppSettings: entry point to keyframe-studio configuration.
"""

import logging
from typing import Optional

from PySide6.QtCore import QSettings

from .editor import EditorSettings
from .logging import LoggingSettings
from .types import ConfigVersion, ValidationResult
from .ui import UISettings
from .validation import SettingsValidator

logger = logging.getLogger(__name__)

ORGANIZATION = "keyframe_studio"
APPLICATION = "keyframe_studio"


class AppSettings:
    """
    Application configuration backed by QSettings.

    Keys live under ``<profile>/`` and are split into the editor, logging
    and ui sections, all writing to the same store.
    """

    def __init__(self, profile: str = "default", settings: Optional[QSettings] = None):
        """
        Args:
            profile: Settings group to read and write
            settings: Store to use instead of the per-user one (tests pass
                an INI file store here)
        """
        self.settings = settings if settings is not None else QSettings(ORGANIZATION, APPLICATION)
        self.profile = profile
        self.settings.beginGroup(profile)

        self._editor = EditorSettings(self.settings)
        self._logging = LoggingSettings(self.settings)
        self._ui = UISettings(self.settings)
        self._validator = SettingsValidator(self)

        self._stamp_version()
        logger.debug(f"Profile '{profile}' settings at {self.settings.fileName()}")

    def _stamp_version(self) -> None:
        stored = str(self.settings.value("app/version", "") or "")
        if not stored:
            self.settings.setValue("app/first_run", True)
            logger.info("First run detected, initializing configuration")
        elif stored != ConfigVersion.CURRENT.value:
            logger.info(f"Settings layout {stored} updated to {ConfigVersion.CURRENT.value}")
        else:
            return
        self.settings.setValue("app/version", ConfigVersion.CURRENT.value)
        self.settings.sync()

    @property
    def editor(self) -> EditorSettings:
        return self._editor

    @property
    def logging(self) -> LoggingSettings:
        return self._logging

    @property
    def ui(self) -> UISettings:
        return self._ui

    @property
    def version(self) -> str:
        return str(self.settings.value("app/version", ConfigVersion.CURRENT.value))

    @property
    def is_first_run(self) -> bool:
        flag = self.settings.value("app/first_run", True)
        if isinstance(flag, str):
            return flag.lower() in ("true", "1", "yes")
        return bool(flag)

    def set_first_run_complete(self) -> None:
        self.settings.setValue("app/first_run", False)
        self.settings.sync()

    def validate(self) -> ValidationResult:
        """Check stored values; see SettingsValidator."""
        return self._validator.validate()

    def get_settings_file_path(self) -> str:
        return self.settings.fileName()

    def sync(self) -> None:
        self.settings.sync()
