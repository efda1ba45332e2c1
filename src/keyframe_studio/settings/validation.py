"""
Settings validation.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List

from ..animation.easings import is_known_easing
from ..animation.host import ROTATION_UNITS
from ..animation.models import LoopMode
from .logging import VALID_LEVELS
from .types import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []
        store = self.settings.settings

        stored_easing = store.value("editor/default_easing")
        if stored_easing is not None and not is_known_easing(str(stored_easing)):
            errors.append(f"Unknown default easing: {stored_easing}")

        stored_loop = store.value("editor/default_loop_mode")
        if stored_loop is not None and LoopMode.parse(str(stored_loop)) is None:
            errors.append(f"Unknown default loop mode: {stored_loop}")

        stored_unit = store.value("editor/rotation_unit")
        if stored_unit is not None and str(stored_unit) not in ROTATION_UNITS:
            errors.append(f"Unknown rotation unit: {stored_unit}")

        stored_duration = store.value("editor/default_duration")
        if stored_duration is not None:
            duration = self.settings.editor.default_duration
            if str(duration) != str(stored_duration):
                warnings.append(f"Default duration {stored_duration} clamped to {duration}ms")

        if self.settings.logging.console_log_level not in VALID_LEVELS:
            errors.append(f"Invalid console log level: {self.settings.logging.console_log_level}")

        # Drop recent files that no longer exist
        recent_files = self.settings.ui.recent_files
        valid_recent = [path for path in recent_files if Path(path).exists()]
        for missing in set(recent_files) - set(valid_recent):
            warnings.append(f"Recent file no longer exists: {missing}")
        if len(valid_recent) != len(recent_files):
            store.setValue("ui/recent_files", valid_recent)
            store.sync()

        if errors:
            logger.warning(f"Settings validation failed: {errors}")
        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)
