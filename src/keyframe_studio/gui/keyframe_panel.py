"""
Keyframe panel: auto-key buttons for the active entity, the selected
keyframe's time / value / easing and preset application.
"""

import logging
from typing import Dict, Optional

import qtawesome as qta  # type: ignore
from PySide6.QtGui import QIcon, QPalette
from PySide6.QtWidgets import (
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSpinBox,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from ..animation.easings import EASING_GROUPS
from ..animation.evaluation import evaluate_track
from ..animation.presets import apply_preset, list_presets_by_category
from ..editor.timeline import MAX_DURATION_MS, TimelineEditor


class KeyframePanel(QWidget):
    """Side panel editing the active entity and the selected keyframe."""

    ICON_KEY = "mdi.key-variant"
    ICON_CLEAR = "mdi.delete-outline"

    def __init__(self, editor: TimelineEditor, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.editor = editor
        self._is_syncing = False
        self.key_buttons: Dict[str, QToolButton] = {}

        self._setup_ui()
        self._connect_signals()
        self.refresh()

    def _icon(self, name: str) -> QIcon:
        color = self.palette().color(QPalette.ColorRole.WindowText)
        return QIcon(qta.icon(name, color=color))  # type: ignore[arg-type]

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)

        self.entity_label = QLabel()
        layout.addWidget(self.entity_label)

        # Auto-key: one toggle per property at the playhead
        autokey_group = QGroupBox("Key at playhead")
        autokey_layout = QHBoxLayout(autokey_group)
        for property in self.editor.properties:
            button = QToolButton()
            button.setIcon(self._icon(self.ICON_KEY))
            button.setText(property)
            button.setToolTip(f"Add or remove a {property} keyframe at the playhead")
            button.clicked.connect(lambda _=False, p=property: self._toggle_key(p))
            autokey_layout.addWidget(button)
            self.key_buttons[property] = button
        layout.addWidget(autokey_group)

        # Selected keyframe
        self.keyframe_group = QGroupBox("Keyframe")
        form = QFormLayout(self.keyframe_group)
        self.time_spin = QSpinBox()
        self.time_spin.setRange(0, MAX_DURATION_MS)
        self.time_spin.setSuffix(" ms")
        form.addRow("Time", self.time_spin)

        self.value_spin = QDoubleSpinBox()
        self.value_spin.setRange(-100000.0, 100000.0)
        self.value_spin.setDecimals(3)
        form.addRow("Value", self.value_spin)

        self.easing_combo = QComboBox()
        for group, names in EASING_GROUPS.items():
            if self.easing_combo.count():
                self.easing_combo.insertSeparator(self.easing_combo.count())
            for name in names:
                self.easing_combo.addItem(f"{group}: {name}", name)
        form.addRow("Easing", self.easing_combo)
        layout.addWidget(self.keyframe_group)

        # Presets
        preset_group = QGroupBox("Preset")
        preset_layout = QHBoxLayout(preset_group)
        self.preset_combo = QComboBox()
        for category, presets in list_presets_by_category().items():
            if self.preset_combo.count():
                self.preset_combo.insertSeparator(self.preset_combo.count())
            for preset in presets:
                self.preset_combo.addItem(f"{category}: {preset['name']}", preset["key"])
        self.apply_preset_button = QPushButton("Apply")
        self.clear_button = QToolButton()
        self.clear_button.setIcon(self._icon(self.ICON_CLEAR))
        self.clear_button.setToolTip("Remove the active entity's animation")
        preset_layout.addWidget(self.preset_combo, 1)
        preset_layout.addWidget(self.apply_preset_button)
        preset_layout.addWidget(self.clear_button)
        layout.addWidget(preset_group)

        layout.addStretch(1)

    def _connect_signals(self) -> None:
        self.time_spin.editingFinished.connect(self._on_time_edited)
        self.value_spin.editingFinished.connect(self._on_value_edited)
        self.easing_combo.currentIndexChanged.connect(self._on_easing_changed)
        self.apply_preset_button.clicked.connect(self._apply_preset)
        self.clear_button.clicked.connect(self._clear_animation)

        self.editor.selectionChanged.connect(self.refresh)
        self.editor.layerSelected.connect(self.refresh)
        self.editor.keyframeChanged.connect(self.refresh)
        self.editor.libraryReplaced.connect(self.refresh)

    # === STATE ===

    def refresh(self, *args: object) -> None:
        """Sync controls with the active entity and selected keyframe."""
        entity_id = self.editor.active_entity
        self.entity_label.setText(f"Entity: {entity_id}" if entity_id else "No entity selected")
        for button in self.key_buttons.values():
            button.setEnabled(entity_id is not None)
        self.apply_preset_button.setEnabled(entity_id is not None)
        self.clear_button.setEnabled(entity_id is not None and entity_id in self.editor.library)

        resolved = self.editor.selected_keyframe()
        self.keyframe_group.setEnabled(resolved is not None)
        if resolved is None:
            return

        entity, property, index = resolved
        clip = self.editor.get_clip(entity)
        if clip is None:
            return
        keyframe = clip.tracks[property].keyframes[index]

        self._is_syncing = True
        try:
            self.keyframe_group.setTitle(f"Keyframe: {entity}.{property}")
            self.time_spin.setValue(keyframe.time)
            self.value_spin.setValue(keyframe.value)
            self.easing_combo.setCurrentIndex(self.easing_combo.findData(keyframe.easing))
        finally:
            self._is_syncing = False

    # === ACTIONS ===

    def _toggle_key(self, property: str) -> None:
        entity_id = self.editor.active_entity
        if entity_id is None:
            return
        clip = self.editor.get_clip(entity_id)
        track = clip.get_track(property) if clip is not None else None
        value = evaluate_track(track, self.editor.current_time) if track is not None else None
        added = self.editor.toggle_keyframe(entity_id, property, value)
        self.logger.debug(f"{'Added' if added else 'Removed'} {property} key on {entity_id}")

    def _on_time_edited(self) -> None:
        resolved = self.editor.selected_keyframe()
        if self._is_syncing or resolved is None:
            return
        self.editor.move_keyframe(*resolved, self.time_spin.value())

    def _on_value_edited(self) -> None:
        resolved = self.editor.selected_keyframe()
        if self._is_syncing or resolved is None:
            return
        self.editor.set_keyframe_value(*resolved, self.value_spin.value())

    def _on_easing_changed(self, index: int) -> None:
        resolved = self.editor.selected_keyframe()
        easing = self.easing_combo.itemData(index)
        if self._is_syncing or resolved is None or not easing:
            return
        self.editor.set_keyframe_easing(*resolved, str(easing))

    def _apply_preset(self) -> None:
        entity_id = self.editor.active_entity
        preset_id = self.preset_combo.currentData()
        if entity_id is None or not preset_id:
            return
        clip = apply_preset(str(preset_id), entity_id)
        if clip is not None:
            self.editor.set_clip(entity_id, clip)
            self.editor.select_entity(entity_id)
            self.logger.info(f"Applied preset '{preset_id}' to {entity_id}")

    def _clear_animation(self) -> None:
        entity_id = self.editor.active_entity
        if entity_id is not None:
            self.editor.set_clip(entity_id, None)
            self.logger.info(f"Cleared animation of {entity_id}")
