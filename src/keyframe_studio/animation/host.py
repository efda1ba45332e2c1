"""
Host collaborator interface and the application boundary.

The host (render / physics side) owns entity transforms. Evaluated values
are applied relative to each entity's base transform: position and rotation
as offsets, scale as a multiplier. Rotation is authored in degrees and
converted to the host's unit here, never inside the evaluation engine.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Protocol

from .diagnostics import DiagnosticKind, DiagnosticSink, report

logger = logging.getLogger(__name__)

RotationConverter = Callable[[float], float]

ROTATION_UNITS: Dict[str, RotationConverter] = {
    "radians": math.radians,
    "degrees": lambda degrees: degrees,
}


def rotation_converter(unit: str) -> RotationConverter:
    """Converter from clip degrees to the host unit ("radians" or "degrees")."""
    converter = ROTATION_UNITS.get(unit)
    if converter is None:
        logger.warning(f"Unknown rotation unit '{unit}', using radians")
        return math.radians
    return converter


@dataclass(frozen=True)
class BaseTransform:
    """Resting transform of an entity, in host units."""
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "rotation": self.rotation,
            "scaleX": self.scale_x,
            "scaleY": self.scale_y,
        }


class AnimationHost(Protocol):
    """Operations the animation core requires from the render/physics host."""

    def get_base_transform(self, entity_id: str) -> Optional[BaseTransform]:
        """Current resting transform, None if the entity does not exist."""
        ...

    def apply_transform(self, entity_id: str, transform: Dict[str, float]) -> None:
        """Apply a partial transform (keys x, y, rotation, scaleX, scaleY)."""
        ...


class TransformApplier:
    """Applies evaluated values to a host relative to captured bases.

    Bases are captured lazily the first time an entity is applied and stay
    frozen until forget() is called.
    """

    def __init__(
        self,
        host: AnimationHost,
        rotation_to_host: RotationConverter = math.radians,
        sink: Optional[DiagnosticSink] = None,
    ):
        self.host = host
        self.rotation_to_host = rotation_to_host
        self.sink = sink
        self._bases: Dict[str, BaseTransform] = {}

    def base_for(self, entity_id: str) -> Optional[BaseTransform]:
        """Captured base of ``entity_id``, capturing it on first use."""
        base = self._bases.get(entity_id)
        if base is None:
            base = self.host.get_base_transform(entity_id)
            if base is not None:
                self._bases[entity_id] = base
                logger.debug(f"Captured base transform for {entity_id}: {base}")
        return base

    def has_base(self, entity_id: str) -> bool:
        return entity_id in self._bases

    def compose(self, base: BaseTransform, values: Dict[str, float]) -> Dict[str, float]:
        """Combine animated values with ``base`` into host values."""
        result: Dict[str, float] = {}
        for property, value in values.items():
            if property == "x":
                result["x"] = base.x + value
            elif property == "y":
                result["y"] = base.y + value
            elif property == "rotation":
                result["rotation"] = base.rotation + self.rotation_to_host(value)
            elif property == "scaleX":
                result["scaleX"] = base.scale_x * value
            elif property == "scaleY":
                result["scaleY"] = base.scale_y * value
            else:
                result[property] = value
        return result

    def apply(self, entity_id: str, values: Dict[str, float]) -> Optional[Dict[str, float]]:
        """Apply animated ``values`` to ``entity_id``.

        Non-finite channels are skipped for this call and reported.

        Returns:
            The transform pushed to the host, or None if nothing was applied
        """
        base = self.base_for(entity_id)
        if base is None:
            return None

        transform: Dict[str, float] = {}
        for property, value in self.compose(base, values).items():
            if math.isfinite(value):
                transform[property] = value
            else:
                report(
                    self.sink,
                    DiagnosticKind.NON_FINITE_RESULT,
                    f"Non-finite {property}={value!r} not applied",
                    entity_id,
                    property,
                )
        if not transform:
            return None

        self.host.apply_transform(entity_id, transform)
        return transform

    def restore(self, entity_id: str, properties: Optional[Iterable[str]] = None) -> None:
        """Put ``entity_id`` back at its captured base, if one was captured.

        Only ``properties`` are reset when given.
        """
        base = self._bases.get(entity_id)
        if base is None:
            return
        transform = base.to_dict()
        if properties is not None:
            wanted = set(properties)
            transform = {key: value for key, value in transform.items() if key in wanted}
        if transform:
            self.host.apply_transform(entity_id, transform)

    def restore_all(self, entity_ids: Optional[Iterable[str]] = None) -> None:
        for entity_id in list(entity_ids if entity_ids is not None else self._bases):
            self.restore(entity_id)

    def forget(self, entity_id: Optional[str] = None) -> None:
        """Drop captured bases (all of them when ``entity_id`` is None)."""
        if entity_id is None:
            self._bases.clear()
        else:
            self._bases.pop(entity_id, None)
