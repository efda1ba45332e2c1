"""
Runtime animation player.

Evaluates the same clips as the editor during gameplay. The host calls
update(entities, time_ms, host) once per frame; the player evaluates every
animated entity and applies the result relative to its base transform.
"""

import logging
import math
import time
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from .diagnostics import DiagnosticSink
from .evaluation import PropertyValues, describe_clip, drop_non_finite, evaluate
from .exchange import load_library
from .host import AnimationHost, RotationConverter, TransformApplier
from .models import AnimationClip, AnimationLibrary

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic wall clock in milliseconds."""
    return time.perf_counter() * 1000


class AnimationPlayer:
    """Plays an AnimationLibrary against a host at runtime."""

    def __init__(
        self,
        clock: Clock = monotonic_ms,
        rotation_to_host: RotationConverter = math.radians,
        sink: Optional[DiagnosticSink] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.library = AnimationLibrary()
        self.clock = clock
        self.rotation_to_host = rotation_to_host
        self.sink = sink

        self.is_playing = False
        self._start_time: float = 0.0
        self._applier: Optional[TransformApplier] = None

    # === LOADING ===

    def load_library(
        self,
        data: AnimationLibrary | Mapping[str, Any] | None,
        existing_ids: Optional[Iterable[str]] = None,
    ) -> None:
        """Replace the played animations.

        Raw exchange data is normalized; orphans are skipped when
        ``existing_ids`` is given. Captured bases are dropped.
        """
        if isinstance(data, AnimationLibrary):
            library = data
            if existing_ids is not None:
                valid_ids = set(existing_ids)
                library = AnimationLibrary(
                    {eid: clip for eid, clip in data.items() if eid in valid_ids}
                )
        else:
            library = load_library(data, existing_ids, self.sink)

        self.library = library
        self._applier = None
        self.logger.info(f"Loaded {len(self.library)} animations")

    def has_animation(self, entity_id: str) -> bool:
        return entity_id in self.library

    def get_clip(self, entity_id: str) -> Optional[AnimationClip]:
        return self.library.get(entity_id)

    # === CLOCK ===

    def start(self, offset_ms: float = 0.0) -> None:
        """Start playback ``offset_ms`` into the animations."""
        self._start_time = self.clock() - offset_ms
        self.is_playing = True
        self.logger.debug(f"Playback started at {offset_ms}ms")

    def stop(self) -> None:
        self.is_playing = False

    def reset(self) -> None:
        """Restart the clock from zero without changing the play state."""
        self._start_time = self.clock()

    def current_time(self) -> float:
        """Elapsed playback time in ms, 0 when stopped."""
        if not self.is_playing:
            return 0.0
        return self.clock() - self._start_time

    # === EVALUATION ===

    def evaluate(self, entity_id: str, time_ms: Optional[float] = None) -> Optional[PropertyValues]:
        """Animated values of ``entity_id`` at ``time_ms`` (default: now)."""
        clip = self.library.get(entity_id)
        if clip is None:
            return None
        raw_time = self.current_time() if time_ms is None else time_ms
        values = evaluate(clip, raw_time, self.sink, entity_id)
        return values or None

    def update(
        self,
        entities: Iterable[str],
        time_ms: Optional[float],
        host: AnimationHost,
    ) -> Dict[str, Dict[str, float]]:
        """Per-frame call site: apply animations of ``entities`` to ``host``.

        Args:
            entities: Ids of entities currently alive in the host
            time_ms: Frame time; None uses the player clock
            host: Render / physics collaborator

        Returns:
            Transforms pushed to the host, per entity
        """
        applied: Dict[str, Dict[str, float]] = {}
        if not self.is_playing and time_ms is None:
            return applied

        applier = self._applier_for(host)
        for entity_id in entities:
            if not self.has_animation(entity_id):
                continue
            values = self.evaluate(entity_id, time_ms)
            if not values:
                continue
            values = drop_non_finite(values, self.sink, entity_id)
            transform = applier.apply(entity_id, values)
            if transform is not None:
                applied[entity_id] = transform
        return applied

    def describe(self, entity_id: str) -> str:
        """Debug summary of an entity's clip."""
        return describe_clip(self.library.get(entity_id))

    def _applier_for(self, host: AnimationHost) -> TransformApplier:
        if self._applier is None or self._applier.host is not host:
            self._applier = TransformApplier(host, self.rotation_to_host, self.sink)
        return self._applier
