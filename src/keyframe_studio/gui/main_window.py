"""
Main application window for keyframe-studio.
"""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent, QKeySequence, QPainter
from PySide6.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QGraphicsView,
    QMainWindow,
    QMessageBox,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from ..animation.diagnostics import AnimationDiagnostic
from ..animation.exchange import dumps_library, loads_library
from ..animation.host import rotation_converter
from ..animation.models import AnimationLibrary
from ..animation.presets import apply_preset
from ..editor.preview import PreviewCoordinator
from ..editor.scheduler import QtFrameScheduler
from ..editor.timeline import TimelineEditor
from ..settings import AppSettings
from .keyframe_panel import KeyframePanel
from .preview_scene import PreviewScene
from .timeline_widget import TimelineWidget
from .transport_bar import TransportBar

LIBRARY_FILTER = "Animation Library (*.json);;All Files (*)"

# Demo entities: id, x, y, width, height
DEMO_ENTITIES = [
    ("platform_1", -200, -120, 120, 24),
    ("platform_2", 120, -40, 90, 24),
    ("spinner", -60, 80, 70, 70),
    ("pulse", 200, 140, 50, 50),
]


class MainWindow(QMainWindow):
    """Timeline editor window: preview scene, timeline, keyframe panel."""

    def __init__(self, settings: AppSettings, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.setObjectName("main_window")
        self.settings = settings
        self.current_file: Optional[Path] = None

        editor_settings = settings.editor
        self.scheduler = QtFrameScheduler(editor_settings.frame_interval, parent=self)
        self.editor = TimelineEditor(
            scheduler=self.scheduler,
            duration=editor_settings.default_duration,
            loop_mode=editor_settings.default_loop_mode,
            default_easing=editor_settings.default_easing,
            keyframe_hitbox=editor_settings.keyframe_hitbox,
            parent=self,
        )

        self.scene = PreviewScene(rotation_unit=editor_settings.rotation_unit, parent=self)
        self.preview = PreviewCoordinator(
            self.editor,
            self.scene,
            rotation_to_host=rotation_converter(editor_settings.rotation_unit),
            parent=self,
        )

        self._setup_central_widget()
        self._setup_docks()
        self._setup_actions()
        self._setup_menus()
        self._connect_signals()

        self.status_bar = self.statusBar()
        self.status_bar.showMessage("Ready", 5000)

        if not self.settings.ui.restore_window_geometry(self):
            self.resize(1200, 800)
        self._update_title()

        self.setup_demo_content()
        self.logger.info("Main window initialized")

    # === UI SETUP ===

    def _setup_central_widget(self) -> None:
        self.view = QGraphicsView(self.scene)
        self.view.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.view.setObjectName("preview_view")

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.view, 1)

        self.transport_bar = TransportBar(self.editor)
        layout.addWidget(self.transport_bar)

        self.timeline_widget = TimelineWidget(self.editor)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.timeline_widget)
        scroll.setMinimumHeight(180)
        layout.addWidget(scroll)

        self.setCentralWidget(central)

    def _setup_docks(self) -> None:
        self.keyframe_panel = KeyframePanel(self.editor)
        self.panel_dock = QDockWidget("Keyframes", self)
        self.panel_dock.setObjectName("keyframe_panel_dock")
        self.panel_dock.setWidget(self.keyframe_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.panel_dock)

    def _setup_actions(self) -> None:
        self.action_new = QAction("&New Library", self)
        self.action_new.setShortcut(QKeySequence.StandardKey.New)
        self.action_new.setStatusTip("Remove every animation")
        self.action_new.triggered.connect(self.new_library)

        self.action_open = QAction("&Open Library...", self)
        self.action_open.setShortcut(QKeySequence.StandardKey.Open)
        self.action_open.setStatusTip("Load animations from a JSON file")
        self.action_open.triggered.connect(self.open_library)

        self.action_save = QAction("&Save Library", self)
        self.action_save.setShortcut(QKeySequence.StandardKey.Save)
        self.action_save.triggered.connect(self.save_library)

        self.action_save_as = QAction("Save Library &As...", self)
        self.action_save_as.setShortcut(QKeySequence.StandardKey.SaveAs)
        self.action_save_as.triggered.connect(self.save_library_as)

        self.action_exit = QAction("E&xit", self)
        self.action_exit.setShortcut(QKeySequence.StandardKey.Quit)
        self.action_exit.triggered.connect(self.close)

        self.action_toggle_panel = self.panel_dock.toggleViewAction()

    def _setup_menus(self) -> None:
        menubar = self.menuBar()
        file_menu = menubar.addMenu("&File")
        file_menu.addAction(self.action_new)
        file_menu.addAction(self.action_open)
        file_menu.addSeparator()
        file_menu.addAction(self.action_save)
        file_menu.addAction(self.action_save_as)
        file_menu.addSeparator()
        file_menu.addAction(self.action_exit)

        view_menu = menubar.addMenu("&View")
        view_menu.addAction(self.action_toggle_panel)

    def _connect_signals(self) -> None:
        self.scene.entityClicked.connect(self.editor.select_entity)
        self.editor.layerSelected.connect(self.scene.highlight)
        self.preview.diagnosticRaised.connect(self._on_diagnostic)

    def _update_title(self) -> None:
        name = self.current_file.name if self.current_file else "untitled"
        self.setWindowTitle(f"keyframe-studio - {name}")

    # === CONTENT ===

    def setup_demo_content(self) -> None:
        """Populate the preview with demo entities and starter animations."""
        for entity_id, x, y, width, height in DEMO_ENTITIES:
            self.scene.add_entity(entity_id, x, y, width, height)

        library = AnimationLibrary()
        for entity_id, preset_id in (("platform_1", "slideLeftRight"), ("spinner", "spinCW")):
            clip = apply_preset(preset_id, entity_id, {"duration": self.editor.duration})
            if clip is not None:
                library.set(entity_id, clip)
        self.editor.set_library(library)
        self.logger.info(f"Demo scene ready with {len(library)} animations")

    def new_library(self) -> None:
        self.editor.set_library(AnimationLibrary())
        self.current_file = None
        self._update_title()
        self.status_bar.showMessage("New animation library", 3000)

    def open_library(self) -> None:
        start_dir = str(self.current_file.parent if self.current_file else Path.cwd())
        file_path, _ = QFileDialog.getOpenFileName(self, "Open Animation Library", start_dir, LIBRARY_FILTER)
        if file_path:
            self.load_library_file(Path(file_path))

    def load_library_file(self, path: Path) -> bool:
        """Load ``path`` into the editor; orphans of the scene are skipped."""
        try:
            library = loads_library(path.read_bytes(), existing_ids=self.scene.entity_ids(),
                                    sink=self._on_diagnostic)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load {path}: {e}")
            QMessageBox.critical(self, "Open Failed", f"Could not load {path.name}:\n{e}")
            return False

        self.editor.set_library(library)
        self.current_file = path
        self.settings.ui.add_recent_file(path)
        self._update_title()
        self.status_bar.showMessage(f"Loaded {len(library)} animations from {path.name}", 5000)
        return True

    def save_library(self) -> None:
        if self.current_file is None:
            self.save_library_as()
        else:
            self.save_library_file(self.current_file)

    def save_library_as(self) -> None:
        default = self.current_file or Path.cwd() / "animations.json"
        file_path, _ = QFileDialog.getSaveFileName(self, "Save Animation Library", str(default), LIBRARY_FILTER)
        if file_path:
            self.save_library_file(Path(file_path))

    def save_library_file(self, path: Path) -> bool:
        payload = dumps_library(self.editor.library, existing_ids=self.scene.entity_ids(), indent=True)
        try:
            path.write_bytes(payload)
        except OSError as e:
            self.logger.error(f"Failed to save {path}: {e}")
            QMessageBox.critical(self, "Save Failed", f"Could not save {path.name}:\n{e}")
            return False

        self.current_file = path
        self.settings.ui.add_recent_file(path)
        self._update_title()
        self.status_bar.showMessage(f"Saved {path.name}", 5000)
        self.logger.info(f"Saved animation library to {path}")
        return True

    def _on_diagnostic(self, diagnostic: AnimationDiagnostic) -> None:
        self.status_bar.showMessage(str(diagnostic), 5000)

    # === EVENTS ===

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop playback, restore the scene and save window geometry."""
        self.editor.destroy()
        self.preview.detach()
        self.settings.ui.save_window_geometry(self)
        self.logger.info("Window geometry saved")
        super().closeEvent(event)
