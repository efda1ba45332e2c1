"""
Keyframe animation core: models, easings, evaluation, presets and the
runtime player. Nothing in this package depends on Qt.
"""

from .diagnostics import (
    AnimationDiagnostic,
    AnimationError,
    DiagnosticKind,
    KeyframeLookupError,
)
from .easings import EASING_GROUPS, list_easings, resolve
from .evaluation import apply_loop, evaluate, evaluate_all, evaluate_track, interpolate
from .exchange import dumps_library, export_library, load_library, loads_library
from .host import AnimationHost, BaseTransform, TransformApplier
from .models import (
    ANIMATABLE_PROPERTIES,
    KEYFRAME_EPSILON_MS,
    AnimationClip,
    AnimationLibrary,
    Keyframe,
    LoopMode,
    Track,
    default_value_for,
    normalize_clip,
)
from .player import AnimationPlayer
from .presets import apply_preset, list_preset_keys, list_presets_by_category

__all__ = [
    # Models
    "Keyframe",
    "Track",
    "AnimationClip",
    "AnimationLibrary",
    "LoopMode",
    "normalize_clip",
    "default_value_for",
    "ANIMATABLE_PROPERTIES",
    "KEYFRAME_EPSILON_MS",
    # Easings
    "EASING_GROUPS",
    "resolve",
    "list_easings",
    # Evaluation
    "apply_loop",
    "interpolate",
    "evaluate_track",
    "evaluate",
    "evaluate_all",
    # Exchange
    "load_library",
    "export_library",
    "dumps_library",
    "loads_library",
    # Host / runtime
    "AnimationHost",
    "BaseTransform",
    "TransformApplier",
    "AnimationPlayer",
    # Presets
    "apply_preset",
    "list_presets_by_category",
    "list_preset_keys",
    # Diagnostics
    "AnimationDiagnostic",
    "AnimationError",
    "DiagnosticKind",
    "KeyframeLookupError",
]
