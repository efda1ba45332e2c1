"""
Timeline editing: editor state machine, frame scheduling, live preview.
"""

from .preview import PreviewCoordinator
from .scheduler import FrameScheduler, QtFrameScheduler
from .timeline import EditorMode, KeyframeSelection, LayerRow, TimelineEditor

__all__ = [
    "TimelineEditor",
    "EditorMode",
    "KeyframeSelection",
    "LayerRow",
    "FrameScheduler",
    "QtFrameScheduler",
    "PreviewCoordinator",
]
