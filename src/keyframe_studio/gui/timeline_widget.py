"""
Timeline widget: paints the editor's layers and forwards pointer and
keyboard input to the TimelineEditor.

Layout: a label column on the left, a time ruler on top, then one row per
animated entity followed, when expanded, by one row per property.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPaintEvent,
    QPen,
    QPolygonF,
)
from PySide6.QtWidgets import QSizePolicy, QWidget

from ..editor.timeline import TimelineEditor

HEADER_WIDTH = 140
RULER_HEIGHT = 24
ROW_HEIGHT = 22
KEYFRAME_SIZE = 5

RULER_STEPS_MS = [50, 100, 250, 500, 1000, 2000, 5000]
MIN_TICK_SPACING_PX = 50

KEY_NAMES = {
    Qt.Key.Key_Space: "space",
    Qt.Key.Key_Delete: "delete",
    Qt.Key.Key_Backspace: "backspace",
    Qt.Key.Key_K: "k",
}

COLOR_BACKGROUND = QColor("#282c34")
COLOR_HEADER = QColor("#21252b")
COLOR_ROW_ACTIVE = QColor("#2c313c")
COLOR_GRID = QColor("#3e4451")
COLOR_TEXT = QColor("#abb2bf")
COLOR_KEYFRAME = QColor("#e5c07b")
COLOR_KEYFRAME_SELECTED = QColor("#61afef")
COLOR_PLAYHEAD = QColor("#e06c75")


@dataclass(frozen=True)
class TimelineRow:
    entity_id: str
    property: Optional[str]  # None for the entity summary row


class TimelineWidget(QWidget):
    """Painted multi-layer timeline bound to a TimelineEditor."""

    def __init__(self, editor: TimelineEditor, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.editor = editor

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(False)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)

        editor.layersChanged.connect(self._on_layers_changed)
        editor.selectionChanged.connect(self.update)
        editor.timeChanged.connect(self.update)
        editor.keyframeChanged.connect(self.update)

        self._on_layers_changed()

    # === GEOMETRY ===

    @property
    def track_width(self) -> float:
        return max(1.0, float(self.width() - HEADER_WIDTH))

    def rows(self) -> List[TimelineRow]:
        rows: List[TimelineRow] = []
        for layer in self.editor.layers():
            rows.append(TimelineRow(layer.entity_id, None))
            if layer.expanded:
                properties = list(self.editor.properties)
                properties += [p for p in layer.properties if p not in properties]
                rows.extend(TimelineRow(layer.entity_id, p) for p in properties)
        return rows

    def row_at(self, y: float) -> Optional[TimelineRow]:
        if y < RULER_HEIGHT:
            return None
        index = int((y - RULER_HEIGHT) // ROW_HEIGHT)
        rows = self.rows()
        return rows[index] if 0 <= index < len(rows) else None

    def _on_layers_changed(self) -> None:
        self.setMinimumHeight(RULER_HEIGHT + ROW_HEIGHT * max(1, len(self.rows())))
        self.update()

    # === INPUT ===

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.position()
        track_x = pos.x() - HEADER_WIDTH

        if pos.y() < RULER_HEIGHT:
            if track_x >= 0:
                self.editor.press_playhead()
                self.editor.pointer_move(track_x, self.track_width)
            return

        row = self.row_at(pos.y())
        if row is None:
            self.editor.clear_selection()
            return

        if track_x < 0:
            # Label column: select and expand/collapse
            if row.property is None:
                self.editor.select_entity(row.entity_id)
                self.editor.toggle_layer(row.entity_id)
            else:
                self.editor.select_entity(row.entity_id)
            return

        if row.property is None:
            self.editor.select_entity(row.entity_id)
            self.editor.press_playhead()
            self.editor.pointer_move(track_x, self.track_width)
        else:
            self.editor.press_track(row.entity_id, row.property, track_x, self.track_width)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        self.editor.pointer_move(event.position().x() - HEADER_WIDTH, self.track_width)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self.editor.pointer_release()

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        track_x = pos.x() - HEADER_WIDTH
        row = self.row_at(pos.y())
        if row is None or row.property is None or track_x < 0:
            return
        if self.editor.keyframe_at(row.entity_id, row.property, track_x, self.track_width) is None:
            self.editor.double_click_track(row.entity_id, row.property, track_x, self.track_width)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = KEY_NAMES.get(Qt.Key(event.key()))
        if key is not None and self.editor.handle_key(key):
            event.accept()
            return
        super().keyPressEvent(event)

    # === PAINTING ===

    def _x(self, time_ms: float) -> float:
        return HEADER_WIDTH + self.editor.x_for_time(time_ms, self.track_width)

    def _ruler_step(self) -> int:
        for step in RULER_STEPS_MS:
            if self.editor.x_for_time(step, self.track_width) >= MIN_TICK_SPACING_PX:
                return step
        return RULER_STEPS_MS[-1]

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), COLOR_BACKGROUND)
        painter.fillRect(QRectF(0, 0, HEADER_WIDTH, self.height()), COLOR_HEADER)

        self._paint_ruler(painter)
        self._paint_rows(painter)
        self._paint_playhead(painter)
        painter.end()

    def _paint_ruler(self, painter: QPainter) -> None:
        painter.setPen(QPen(COLOR_GRID))
        painter.drawLine(QPointF(0, RULER_HEIGHT), QPointF(self.width(), RULER_HEIGHT))

        step = self._ruler_step()
        painter.setPen(QPen(COLOR_TEXT))
        for time_ms in range(0, self.editor.duration + 1, step):
            x = self._x(time_ms)
            painter.drawLine(QPointF(x, RULER_HEIGHT - 6), QPointF(x, RULER_HEIGHT))
            painter.drawText(QPointF(x + 2, RULER_HEIGHT - 8), f"{time_ms / 1000:g}s")

    def _paint_rows(self, painter: QPainter) -> None:
        selected = self.editor.selected_keyframe()

        for index, row in enumerate(self.rows()):
            top = RULER_HEIGHT + index * ROW_HEIGHT
            center_y = top + ROW_HEIGHT / 2

            if row.entity_id == self.editor.active_entity and row.property is None:
                painter.fillRect(QRectF(0, top, self.width(), ROW_HEIGHT), COLOR_ROW_ACTIVE)
            painter.setPen(QPen(COLOR_GRID))
            painter.drawLine(QPointF(0, top + ROW_HEIGHT), QPointF(self.width(), top + ROW_HEIGHT))

            painter.setPen(QPen(COLOR_TEXT))
            if row.property is None:
                marker = "▾" if row.entity_id in self.editor.expanded else "▸"
                label = f"{marker} {row.entity_id}"
            else:
                label = f"    {row.property}"
            painter.drawText(QRectF(4, top, HEADER_WIDTH - 8, ROW_HEIGHT),
                             Qt.AlignmentFlag.AlignVCenter, label)

            clip = self.editor.get_clip(row.entity_id)
            if clip is None:
                continue
            tracks = clip.tracks.values() if row.property is None else [clip.tracks.get(row.property)]
            for track in tracks:
                if track is None:
                    continue
                for kf_index, keyframe in enumerate(track.keyframes):
                    is_selected = selected == (row.entity_id, track.property, kf_index)
                    self._paint_keyframe(painter, self._x(keyframe.time), center_y, is_selected)

    def _paint_keyframe(self, painter: QPainter, x: float, y: float, selected: bool) -> None:
        s = KEYFRAME_SIZE
        diamond = QPolygonF([QPointF(x, y - s), QPointF(x + s, y), QPointF(x, y + s), QPointF(x - s, y)])
        color = COLOR_KEYFRAME_SELECTED if selected else COLOR_KEYFRAME
        painter.setPen(QPen(color.darker(130)))
        painter.setBrush(color)
        painter.drawPolygon(diamond)

    def _paint_playhead(self, painter: QPainter) -> None:
        x = self._x(self.editor.current_time)
        painter.setPen(QPen(COLOR_PLAYHEAD, 2))
        painter.drawLine(QPointF(x, 0), QPointF(x, self.height()))
