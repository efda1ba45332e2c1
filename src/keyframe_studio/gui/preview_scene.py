"""
Preview scene: a QGraphicsScene acting as the animation host.

Each entity is a rectangle item keyed by its id. The scene reports resting
transforms and accepts animated ones in the configured rotation unit.
"""

import logging
import math
from typing import Dict, List, Optional

from PySide6.QtCore import QRectF, Signal
from PySide6.QtGui import QBrush, QColor, QPen, QTransform
from PySide6.QtWidgets import QGraphicsItem, QGraphicsRectItem, QGraphicsScene

from ..animation.host import BaseTransform

ENTITY_ID_ROLE = 0

# Fixed palette for demo entities
ENTITY_COLORS = ["#e06c75", "#61afef", "#98c379", "#e5c07b", "#c678dd", "#56b6c2"]


class PreviewScene(QGraphicsScene):
    """
    Scene holding one graphics item per entity.

    Implements the AnimationHost protocol: get_base_transform() and
    apply_transform(). Qt rotates items in degrees; values in radians are
    converted when rotation_unit is "radians".
    """

    # Emitted when the user selects an entity in the scene
    entityClicked = Signal(str)

    def __init__(self, rotation_unit: str = "radians", parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.rotation_unit = rotation_unit
        self._items: Dict[str, QGraphicsRectItem] = {}
        self._scales: Dict[str, tuple[float, float]] = {}
        self._highlighted: Optional[str] = None

        self.setSceneRect(QRectF(-400, -300, 800, 600))
        self.selectionChanged.connect(self._on_selection_changed)

    # === ENTITIES ===

    def add_entity(
        self,
        entity_id: str,
        x: float,
        y: float,
        width: float = 60,
        height: float = 40,
        rotation: float = 0.0,
    ) -> QGraphicsRectItem:
        """Add an entity rectangle centered at (x, y); rotation in host units."""
        color = QColor(ENTITY_COLORS[len(self._items) % len(ENTITY_COLORS)])
        item = QGraphicsRectItem(QRectF(-width / 2, -height / 2, width, height))
        item.setBrush(QBrush(color))
        item.setPen(QPen(color.darker(150), 2))
        item.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        item.setData(ENTITY_ID_ROLE, entity_id)
        item.setToolTip(entity_id)
        item.setPos(x, y)
        item.setRotation(self._to_degrees(rotation))

        self.addItem(item)
        self._items[entity_id] = item
        self._scales[entity_id] = (1.0, 1.0)
        self.logger.debug(f"Added entity {entity_id} at ({x}, {y})")
        return item

    def remove_entity(self, entity_id: str) -> None:
        item = self._items.pop(entity_id, None)
        self._scales.pop(entity_id, None)
        if item is not None:
            self.removeItem(item)

    def entity_ids(self) -> List[str]:
        return list(self._items)

    def item_for(self, entity_id: str) -> Optional[QGraphicsRectItem]:
        return self._items.get(entity_id)

    def highlight(self, entity_id: str) -> None:
        """Outline the entity selected in the timeline."""
        if self._highlighted in self._items:
            previous = self._items[self._highlighted]
            previous.setPen(QPen(previous.brush().color().darker(150), 2))
        item = self._items.get(entity_id)
        if item is not None:
            item.setPen(QPen(QColor("#ffffff"), 3))
        self._highlighted = entity_id

    # === ANIMATION HOST ===

    def get_base_transform(self, entity_id: str) -> Optional[BaseTransform]:
        item = self._items.get(entity_id)
        if item is None:
            return None
        scale_x, scale_y = self._scales[entity_id]
        return BaseTransform(
            x=item.pos().x(),
            y=item.pos().y(),
            rotation=self._from_degrees(item.rotation()),
            scale_x=scale_x,
            scale_y=scale_y,
        )

    def apply_transform(self, entity_id: str, transform: Dict[str, float]) -> None:
        item = self._items.get(entity_id)
        if item is None:
            return

        if "x" in transform or "y" in transform:
            item.setPos(transform.get("x", item.pos().x()), transform.get("y", item.pos().y()))
        if "rotation" in transform:
            item.setRotation(self._to_degrees(transform["rotation"]))
        if "scaleX" in transform or "scaleY" in transform:
            scale_x, scale_y = self._scales[entity_id]
            scale_x = transform.get("scaleX", scale_x)
            scale_y = transform.get("scaleY", scale_y)
            self._scales[entity_id] = (scale_x, scale_y)
            item.setTransform(QTransform.fromScale(scale_x, scale_y))

    # === HELPERS ===

    def _to_degrees(self, rotation: float) -> float:
        return math.degrees(rotation) if self.rotation_unit == "radians" else rotation

    def _from_degrees(self, degrees: float) -> float:
        return math.radians(degrees) if self.rotation_unit == "radians" else degrees

    def _on_selection_changed(self) -> None:
        for item in self.selectedItems():
            entity_id = item.data(ENTITY_ID_ROLE)
            if entity_id:
                self.entityClicked.emit(str(entity_id))
                return
