"""
Transport bar: playback buttons, time display and the editor-wide
duration / loop controls.
"""

import logging
from typing import Optional

import qtawesome as qta  # type: ignore
from PySide6.QtCore import QSize
from PySide6.QtGui import QIcon, QPalette
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QSpinBox,
    QToolButton,
    QWidget,
)

from ..animation.models import LoopMode
from ..editor.timeline import MAX_DURATION_MS, MIN_DURATION_MS, TimelineEditor

LOOP_LABELS = {
    LoopMode.NONE: "Once",
    LoopMode.LOOP: "Loop",
    LoopMode.PINGPONG: "Ping-pong",
    LoopMode.HOLD: "Hold",
}


class TransportBar(QWidget):
    """Play / pause / stop, keyframe navigation and timing controls."""

    ICON_PLAY = "mdi.play"
    ICON_PAUSE = "mdi.pause"
    ICON_STOP = "mdi.stop"
    ICON_PREVIOUS = "mdi.skip-previous"
    ICON_NEXT = "mdi.skip-next"

    def __init__(self, editor: TimelineEditor, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.editor = editor
        # Suppress feedback while syncing widgets from the editor
        self._is_syncing = False

        self._setup_ui()
        self._connect_signals()
        self.sync_from_editor()

    def _icon(self, name: str) -> QIcon:
        color = self.palette().color(QPalette.ColorRole.WindowText)
        return QIcon(qta.icon(name, color=color))  # type: ignore[arg-type]

    def _tool_button(self, icon_name: str, tooltip: str) -> QToolButton:
        button = QToolButton()
        button.setIcon(self._icon(icon_name))
        button.setIconSize(QSize(20, 20))
        button.setToolTip(tooltip)
        button.setAutoRaise(True)
        return button

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(6)

        self.previous_button = self._tool_button(self.ICON_PREVIOUS, "Previous keyframe")
        self.play_button = self._tool_button(self.ICON_PLAY, "Play / pause (Space)")
        self.stop_button = self._tool_button(self.ICON_STOP, "Stop")
        self.next_button = self._tool_button(self.ICON_NEXT, "Next keyframe")
        for button in (self.previous_button, self.play_button, self.stop_button, self.next_button):
            layout.addWidget(button)

        self.time_label = QLabel()
        self.time_label.setMinimumWidth(110)
        layout.addWidget(self.time_label)

        layout.addStretch(1)

        layout.addWidget(QLabel("Duration"))
        self.duration_spin = QSpinBox()
        self.duration_spin.setRange(MIN_DURATION_MS, MAX_DURATION_MS)
        self.duration_spin.setSingleStep(100)
        self.duration_spin.setSuffix(" ms")
        layout.addWidget(self.duration_spin)

        layout.addWidget(QLabel("Loop"))
        self.loop_combo = QComboBox()
        for mode, label in LOOP_LABELS.items():
            self.loop_combo.addItem(label, mode.value)
        layout.addWidget(self.loop_combo)

    def _connect_signals(self) -> None:
        self.previous_button.clicked.connect(self.editor.go_to_previous_keyframe)
        self.play_button.clicked.connect(self.editor.toggle_play)
        self.stop_button.clicked.connect(self.editor.stop)
        self.next_button.clicked.connect(self.editor.go_to_next_keyframe)
        self.duration_spin.editingFinished.connect(self._on_duration_edited)
        self.loop_combo.currentIndexChanged.connect(self._on_loop_changed)

        self.editor.timeChanged.connect(self._update_time_label)
        self.editor.playStateChanged.connect(self._on_play_state_changed)
        self.editor.libraryReplaced.connect(self.sync_from_editor)

    def sync_from_editor(self) -> None:
        """Refresh all controls from the editor state."""
        self._is_syncing = True
        try:
            self.duration_spin.setValue(self.editor.duration)
            self.loop_combo.setCurrentIndex(self.loop_combo.findData(self.editor.loop_mode.value))
        finally:
            self._is_syncing = False
        self._update_time_label(self.editor.current_time)
        self._on_play_state_changed(self.editor.is_playing)

    def _update_time_label(self, time_ms: float) -> None:
        self.time_label.setText(f"{time_ms / 1000:.2f}s / {self.editor.duration / 1000:.2f}s")

    def _on_play_state_changed(self, playing: bool) -> None:
        self.play_button.setIcon(self._icon(self.ICON_PAUSE if playing else self.ICON_PLAY))

    def _on_duration_edited(self) -> None:
        if self._is_syncing or self.duration_spin.value() == self.editor.duration:
            return
        self.editor.set_duration(self.duration_spin.value())
        self._update_time_label(self.editor.current_time)
        self.logger.debug(f"Duration set to {self.editor.duration}ms for all clips")

    def _on_loop_changed(self, index: int) -> None:
        if self._is_syncing:
            return
        mode = LoopMode.parse(self.loop_combo.itemData(index))
        if mode is not None and mode != self.editor.loop_mode:
            self.editor.set_loop_mode(mode)
            self.logger.debug(f"Loop mode set to {mode.value} for all clips")
