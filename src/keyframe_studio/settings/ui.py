"""
UI-related settings: window geometry and recent library files.
"""

from pathlib import Path
from typing import Any, List, Union

from PySide6.QtCore import QByteArray
from PySide6.QtWidgets import QMainWindow, QWidget

from .types import SettingsSection

MAX_RECENT_FILES = 10


class UISettings(SettingsSection):
    """Manages UI-related settings."""

    def save_window_geometry(self, widget: Union[QWidget, QMainWindow]) -> None:
        """Save window geometry and state."""
        self.settings.setValue("ui/window_geometry", widget.saveGeometry())
        if isinstance(widget, QMainWindow):
            self.settings.setValue("ui/window_state", widget.saveState())
        self.settings.sync()

    def restore_window_geometry(self, widget: Union[QWidget, QMainWindow]) -> bool:
        """Restore window geometry and state. Returns True if restored."""
        geometry: Any = self.settings.value("ui/window_geometry")
        state: Any = self.settings.value("ui/window_state")

        restored = False
        if isinstance(geometry, bytes):
            geometry = QByteArray(geometry)
        if isinstance(geometry, QByteArray) and not geometry.isEmpty():
            restored = widget.restoreGeometry(geometry)

        if isinstance(state, bytes):
            state = QByteArray(state)
        if isinstance(widget, QMainWindow) and isinstance(state, QByteArray) and not state.isEmpty():
            widget.restoreState(state)

        return restored

    @property
    def recent_files(self) -> List[str]:
        """Recently opened animation libraries, newest first."""
        value = self.settings.value("ui/recent_files", [])
        if isinstance(value, str):
            return [value] if value else []
        if isinstance(value, list):
            return [str(item) for item in value]
        return []

    def add_recent_file(self, file_path: Union[str, Path]) -> None:
        path = str(file_path)
        recent = [item for item in self.recent_files if item != path]
        recent.insert(0, path)
        self._set("ui/recent_files", recent[:MAX_RECENT_FILES])

    def clear_recent_files(self) -> None:
        self._set("ui/recent_files", [])
