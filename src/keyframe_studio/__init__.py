"""
keyframe-studio: keyframe animation editor and runtime

Per-entity keyframe animation of position, rotation and scale with easing,
a multi-layer timeline editor with live preview, and a runtime player that
evaluates the same clips.
"""

__version__ = "0.1.0"
__author__ = "keyframe-studio Contributors"

from .animation import (
    AnimationClip,
    AnimationLibrary,
    AnimationPlayer,
    Keyframe,
    LoopMode,
    Track,
    evaluate,
    evaluate_all,
)
from .utils.logging_config import setup_logging

__all__ = [
    # Data models
    "Keyframe",
    "Track",
    "AnimationClip",
    "AnimationLibrary",
    "LoopMode",
    # Evaluation / runtime
    "evaluate",
    "evaluate_all",
    "AnimationPlayer",
    # Logging
    "setup_logging",
]
