"""
Timeline editor settings.
"""

import logging

from ..animation.easings import is_known_easing
from ..animation.host import ROTATION_UNITS
from ..animation.models import DEFAULT_DURATION_MS, LoopMode
from .types import ConfigError, SettingsSection

logger = logging.getLogger(__name__)

MIN_DURATION_MS = 100
MAX_DURATION_MS = 30000


class EditorSettings(SettingsSection):
    """Defaults for new clips and the editor's playback loop."""

    @property
    def default_duration(self) -> int:
        """Preview window / new clip duration in ms (100-30000)."""
        value = self._get_int("editor/default_duration", DEFAULT_DURATION_MS)
        return max(MIN_DURATION_MS, min(MAX_DURATION_MS, value))

    @default_duration.setter
    def default_duration(self, value: int) -> None:
        self._set("editor/default_duration", max(MIN_DURATION_MS, min(MAX_DURATION_MS, int(value))))

    @property
    def default_loop_mode(self) -> LoopMode:
        """Loop mode of the editor's preview playback."""
        raw = self._get_str("editor/default_loop_mode", LoopMode.PINGPONG.value)
        mode = LoopMode.parse(raw)
        if mode is None:
            logger.warning(f"Invalid stored loop mode '{raw}', using pingpong")
            return LoopMode.PINGPONG
        return mode

    @default_loop_mode.setter
    def default_loop_mode(self, value: LoopMode | str) -> None:
        mode = LoopMode.parse(value)
        if mode is None:
            raise ConfigError(f"Unknown loop mode: {value!r}")
        self._set("editor/default_loop_mode", mode.value)

    @property
    def default_easing(self) -> str:
        """Easing of keyframes created in the editor."""
        return self._get_str("editor/default_easing", "easeInOutQuad")

    @default_easing.setter
    def default_easing(self, value: str) -> None:
        if not is_known_easing(value):
            raise ConfigError(f"Unknown easing: {value!r}")
        self._set("editor/default_easing", value)

    @property
    def frame_interval(self) -> int:
        """Playback tick interval in milliseconds (1-1000 ms)."""
        value = self._get_int("editor/frame_interval", 16)
        return max(1, min(1000, value))

    @frame_interval.setter
    def frame_interval(self, value: int) -> None:
        self._set("editor/frame_interval", max(1, min(1000, int(value))))

    @property
    def keyframe_hitbox(self) -> int:
        """Keyframe hit-test half width in pixels."""
        return max(1, self._get_int("editor/keyframe_hitbox", 6))

    @keyframe_hitbox.setter
    def keyframe_hitbox(self, value: int) -> None:
        self._set("editor/keyframe_hitbox", max(1, int(value)))

    @property
    def rotation_unit(self) -> str:
        """Rotation unit of the preview host ("radians" or "degrees")."""
        return self._get_str("editor/rotation_unit", "radians")

    @rotation_unit.setter
    def rotation_unit(self, value: str) -> None:
        if value not in ROTATION_UNITS:
            raise ConfigError(f"Unknown rotation unit: {value!r}")
        self._set("editor/rotation_unit", value)
