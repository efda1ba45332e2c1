"""
Animation presets.

Pre-built clip templates that can be applied to an entity. Values are
relative to the entity's base transform (offsets for position and rotation,
multipliers for scale). Templates are never mutated: applying one deep
copies its tracks.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from .models import AnimationClip, LoopMode, normalize_clip

logger = logging.getLogger(__name__)


def _kf(time: int, value: float, easing: str = "linear") -> Dict[str, Any]:
    return {"time": time, "value": value, "easing": easing}


def _pingpong(start: float, end: float, duration: int, easing: str) -> Dict[str, Any]:
    return {"keyframes": [_kf(0, start, easing), _kf(duration, end, easing)]}


def _uniform(times: List[int], values: List[float], easing: str) -> Dict[str, Any]:
    return {"keyframes": [_kf(t, v, easing) for t, v in zip(times, values)]}


PRESETS: Dict[str, Dict[str, Any]] = {
    # === MOVEMENT ===
    "slideLeftRight": {
        "name": "Slide Left-Right",
        "category": "Movement",
        "duration": 2000,
        "loop": "pingpong",
        "tracks": {"x": _pingpong(-50, 50, 2000, "easeInOutQuad")},
    },
    "slideUpDown": {
        "name": "Slide Up-Down",
        "category": "Movement",
        "duration": 2000,
        "loop": "pingpong",
        "tracks": {"y": _pingpong(-50, 50, 2000, "easeInOutQuad")},
    },
    "slideDiagonal": {
        "name": "Slide Diagonal",
        "category": "Movement",
        "duration": 2000,
        "loop": "pingpong",
        "tracks": {
            "x": _pingpong(-40, 40, 2000, "easeInOutQuad"),
            "y": _pingpong(-40, 40, 2000, "easeInOutQuad"),
        },
    },
    "circlePath": {
        "name": "Circle Path",
        "category": "Movement",
        "duration": 3000,
        "loop": "loop",
        "tracks": {
            "x": _uniform([0, 750, 1500, 2250, 3000], [50, 0, -50, 0, 50], "easeInOutSine"),
            "y": _uniform([0, 750, 1500, 2250, 3000], [0, -50, 0, 50, 0], "easeInOutSine"),
        },
    },
    "figure8": {
        "name": "Figure-8 Path",
        "category": "Movement",
        "duration": 4000,
        "loop": "loop",
        "tracks": {
            "x": _uniform([0, 1000, 2000, 3000, 4000], [0, 40, 0, -40, 0], "easeInOutSine"),
            "y": _uniform([0, 1000, 2000, 3000, 4000], [-30, 0, 30, 0, -30], "easeInOutSine"),
        },
    },
    # === ROTATION ===
    "spinCW": {
        "name": "Spin Clockwise",
        "category": "Rotation",
        "duration": 2000,
        "loop": "loop",
        "tracks": {"rotation": _pingpong(0, 360, 2000, "linear")},
    },
    "spinCCW": {
        "name": "Spin Counter-Clockwise",
        "category": "Rotation",
        "duration": 2000,
        "loop": "loop",
        "tracks": {"rotation": _pingpong(0, -360, 2000, "linear")},
    },
    "spinFast": {
        "name": "Spin Fast",
        "category": "Rotation",
        "duration": 500,
        "loop": "loop",
        "tracks": {"rotation": _pingpong(0, 360, 500, "linear")},
    },
    "pendulum": {
        "name": "Pendulum Swing",
        "category": "Rotation",
        "duration": 1500,
        "loop": "pingpong",
        "tracks": {"rotation": _pingpong(-45, 45, 1500, "easeInOutSine")},
    },
    "wobble": {
        "name": "Wobble",
        "category": "Rotation",
        "duration": 500,
        "loop": "loop",
        "tracks": {
            "rotation": _uniform([0, 125, 250, 375, 500], [0, 10, 0, -10, 0], "easeInOutQuad"),
        },
    },
    # === SCALE ===
    "pulse": {
        "name": "Pulse",
        "category": "Scale",
        "duration": 1000,
        "loop": "loop",
        "tracks": {
            "scaleX": _uniform([0, 500, 1000], [1, 1.2, 1], "easeInOutSine"),
            "scaleY": _uniform([0, 500, 1000], [1, 1.2, 1], "easeInOutSine"),
        },
    },
    "heartbeat": {
        "name": "Heartbeat",
        "category": "Scale",
        "duration": 1000,
        "loop": "loop",
        "tracks": {
            prop: {
                "keyframes": [
                    _kf(0, 1, "easeOutQuad"),
                    _kf(150, 1.15, "easeInQuad"),
                    _kf(300, 1, "easeOutQuad"),
                    _kf(450, 1.1, "easeInQuad"),
                    _kf(600, 1),
                    _kf(1000, 1),
                ]
            }
            for prop in ("scaleX", "scaleY")
        },
    },
    "bounceIn": {
        "name": "Bounce In",
        "category": "Scale",
        "duration": 1000,
        "loop": "none",
        "tracks": {
            "scaleX": {"keyframes": [_kf(0, 0, "easeOutBounce"), _kf(1000, 1)]},
            "scaleY": {"keyframes": [_kf(0, 0, "easeOutBounce"), _kf(1000, 1)]},
        },
    },
    "squeeze": {
        "name": "Squeeze (Squash & Stretch)",
        "category": "Scale",
        "duration": 800,
        "loop": "pingpong",
        "tracks": {
            "scaleX": _uniform([0, 400, 800], [1, 1.3, 1], "easeInOutQuad"),
            "scaleY": _uniform([0, 400, 800], [1, 0.7, 1], "easeInOutQuad"),
        },
    },
    "breathe": {
        "name": "Breathe",
        "category": "Scale",
        "duration": 3000,
        "loop": "loop",
        "tracks": {
            "scaleX": _uniform([0, 1500, 3000], [1, 1.1, 1], "easeInOutSine"),
            "scaleY": _uniform([0, 1500, 3000], [1, 1.1, 1], "easeInOutSine"),
        },
    },
    # === COMBINED ===
    "floating": {
        "name": "Floating",
        "category": "Combined",
        "duration": 3000,
        "loop": "loop",
        "tracks": {
            "y": _uniform([0, 1500, 3000], [0, -20, 0], "easeInOutSine"),
            "rotation": _uniform([0, 1500, 3000], [-3, 3, -3], "easeInOutSine"),
        },
    },
    "orbiting": {
        "name": "Orbiting",
        "category": "Combined",
        "duration": 4000,
        "loop": "loop",
        "tracks": {
            "x": _uniform([0, 1000, 2000, 3000, 4000], [60, 0, -60, 0, 60], "linear"),
            "y": _uniform([0, 1000, 2000, 3000, 4000], [0, -60, 0, 60, 0], "linear"),
            "rotation": _pingpong(0, 360, 4000, "linear"),
        },
    },
    "bouncing": {
        "name": "Bouncing Ball",
        "category": "Combined",
        "duration": 1000,
        "loop": "loop",
        "tracks": {
            "y": {
                "keyframes": [
                    _kf(0, 0, "easeInQuad"),
                    _kf(500, 50, "easeOutQuad"),
                    _kf(1000, 0, "easeInQuad"),
                ]
            },
            "scaleX": {
                "keyframes": [
                    _kf(0, 1), _kf(450, 1), _kf(500, 1.2, "easeOutQuad"), _kf(550, 1), _kf(1000, 1),
                ]
            },
            "scaleY": {
                "keyframes": [
                    _kf(0, 1), _kf(450, 1), _kf(500, 0.8, "easeOutQuad"), _kf(550, 1), _kf(1000, 1),
                ]
            },
        },
    },
    "jitter": {
        "name": "Jitter/Shake",
        "category": "Combined",
        "duration": 500,
        "loop": "loop",
        "tracks": {
            "x": _uniform(
                [0, 50, 100, 150, 200, 250, 300, 350, 400, 500],
                [0, 3, -3, 2, -2, 3, -3, 1, -1, 0],
                "linear",
            ),
            "y": _uniform(
                [0, 50, 100, 150, 200, 250, 300, 350, 400, 500],
                [0, -2, 2, -3, 1, -1, 2, -2, 1, 0],
                "linear",
            ),
        },
    },
}


def get_preset(key: str) -> Optional[Dict[str, Any]]:
    """Get a deep copy of the preset template for ``key``."""
    preset = PRESETS.get(key)
    return copy.deepcopy(preset) if preset is not None else None


def apply_preset(
    preset_id: str,
    entity_id: str,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Optional[AnimationClip]:
    """Create a normalized clip for ``entity_id`` from a preset.

    Args:
        preset_id: Preset key (e.g. "slideLeftRight")
        entity_id: Entity the clip is created for
        overrides: Optional "duration", "loop" and "loopCount" replacements

    Returns:
        New AnimationClip, or None if the preset does not exist
    """
    preset = get_preset(preset_id)
    if preset is None:
        logger.warning(f"Unknown preset: {preset_id}")
        return None

    overrides = overrides or {}
    loop = overrides.get("loop") or preset["loop"]
    if isinstance(loop, LoopMode):
        loop = loop.value

    raw = {
        "duration": overrides.get("duration") or preset["duration"],
        "loop": loop,
        "loopCount": overrides.get("loopCount") or 0,
        "tracks": preset["tracks"],
    }
    clip = normalize_clip(raw, entity_id)
    if clip is not None:
        logger.debug(f"Applied preset '{preset_id}' to {entity_id}")
    return clip


def list_presets_by_category() -> Dict[str, List[Dict[str, Any]]]:
    """Presets grouped by category for display: {category: [{key, name, ...}]}."""
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for key, preset in PRESETS.items():
        groups.setdefault(preset.get("category", "Other"), []).append(
            {
                "key": key,
                "name": preset["name"],
                "duration": preset["duration"],
                "loop": preset["loop"],
            }
        )
    return groups


def list_preset_keys() -> List[str]:
    return list(PRESETS)
