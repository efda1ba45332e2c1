"""
Preview/playback coordinator.

Keeps every animated entity of the host in sync with the timeline editor:
on each scrub, playback tick or clip edit the whole library is evaluated at
the editor's current time and applied relative to each entity's base.
"""

import logging
import math
from typing import Dict, Optional, Set

from PySide6.QtCore import QObject, Signal

from ..animation.diagnostics import AnimationDiagnostic
from ..animation.evaluation import evaluate_all
from ..animation.host import AnimationHost, RotationConverter, TransformApplier
from .timeline import TimelineEditor


class PreviewCoordinator(QObject):
    """Bridges a TimelineEditor and an AnimationHost.

    Signals:
        diagnosticRaised(AnimationDiagnostic): bad data degraded a channel
        frameApplied(dict): transforms pushed to the host for one refresh
    """

    diagnosticRaised = Signal(object)
    frameApplied = Signal(object)

    def __init__(
        self,
        editor: TimelineEditor,
        host: AnimationHost,
        rotation_to_host: RotationConverter = math.radians,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.editor = editor
        self.host = host
        self.applier = TransformApplier(host, rotation_to_host, self._on_diagnostic)
        # entity -> host channels moved away from the base this session
        self._channels: Dict[str, Set[str]] = {}

        editor.timeChanged.connect(self._on_time_changed)
        editor.keyframeChanged.connect(self._on_keyframe_changed)
        editor.libraryReplaced.connect(self.reset_session)

    def refresh(self) -> Dict[str, Dict[str, float]]:
        """Evaluate the library at the editor's time and apply it.

        Channels whose track was removed since the last refresh go back to
        the entity's base first.
        """
        self._restore_vanished_channels()
        values = evaluate_all(self.editor.library, self.editor.current_time, self._on_diagnostic)

        applied: Dict[str, Dict[str, float]] = {}
        for entity_id, entity_values in values.items():
            transform = self.applier.apply(entity_id, entity_values)
            if transform is not None:
                applied[entity_id] = transform
                self._channels.setdefault(entity_id, set()).update(transform)

        self.frameApplied.emit(applied)
        return applied

    def reset_session(self) -> None:
        """Return animated entities to their bases and forget the bases."""
        self.applier.restore_all(self._channels)
        self.applier.forget()
        self._channels.clear()
        self.logger.debug("Preview session reset")

    def detach(self) -> None:
        """Disconnect from the editor and restore the host."""
        self.editor.timeChanged.disconnect(self._on_time_changed)
        self.editor.keyframeChanged.disconnect(self._on_keyframe_changed)
        self.editor.libraryReplaced.disconnect(self.reset_session)
        self.reset_session()

    def _restore_vanished_channels(self) -> None:
        for entity_id, channels in list(self._channels.items()):
            clip = self.editor.library.get(entity_id)
            if clip is None:
                self.applier.restore(entity_id)
                del self._channels[entity_id]
                continue
            gone = channels - set(clip.tracks)
            if gone:
                self.applier.restore(entity_id, gone)
                channels -= gone
                self.logger.debug(f"Restored {sorted(gone)} on {entity_id}")

    def _on_time_changed(self, time_ms: float) -> None:
        self.refresh()

    def _on_keyframe_changed(self, entity_id: str, clip: object) -> None:
        self.refresh()

    def _on_diagnostic(self, diagnostic: AnimationDiagnostic) -> None:
        self.diagnosticRaised.emit(diagnostic)
