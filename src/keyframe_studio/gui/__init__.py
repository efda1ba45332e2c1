"""
Qt widgets for the timeline editor application.
"""

from .main_window import MainWindow
from .preview_scene import PreviewScene
from .timeline_widget import TimelineWidget

__all__ = ["MainWindow", "PreviewScene", "TimelineWidget"]
