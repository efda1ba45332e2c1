"""
Easing curves for keyframe interpolation.

Every curve maps progress t (normally 0..1) to eased progress. Curves are
pure and deterministic. Names follow the CSS / After Effects convention:
easeIn starts slow, easeOut ends slow, easeInOut is slow at both ends.
"""

import math
from typing import Callable, Dict, List

from .diagnostics import DiagnosticKind, report

EasingFunction = Callable[[float], float]

LINEAR = "linear"

_BACK_C1 = 1.70158
_BACK_C2 = _BACK_C1 * 1.525
_BACK_C3 = _BACK_C1 + 1
_ELASTIC_C4 = (2 * math.pi) / 3
_ELASTIC_C5 = (2 * math.pi) / 4.5
_BOUNCE_N1 = 7.5625
_BOUNCE_D1 = 2.75


def _exp2(x: float) -> float:
    """2 ** x, saturating to inf instead of raising on overflow."""
    try:
        return 2.0 ** x
    except OverflowError:
        return math.inf


def _sin(x: float) -> float:
    return math.sin(x) if math.isfinite(x) else math.nan


def _cos(x: float) -> float:
    return math.cos(x) if math.isfinite(x) else math.nan


def linear(t: float) -> float:
    return t


# === POLYNOMIAL ===
# Powers are written as products: float ** int raises OverflowError for
# large t where a product saturates to inf.

def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_quad(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    u = -2 * t + 2
    return 1 - u * u / 2


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_out_cubic(t: float) -> float:
    u = 1 - t
    return 1 - u * u * u


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    u = -2 * t + 2
    return 1 - u * u * u / 2


def ease_in_quart(t: float) -> float:
    return t * t * t * t


def ease_out_quart(t: float) -> float:
    u = 1 - t
    return 1 - u * u * u * u


def ease_in_out_quart(t: float) -> float:
    if t < 0.5:
        return 8 * t * t * t * t
    u = -2 * t + 2
    return 1 - u * u * u * u / 2


# === SINE / EXPO / CIRC ===

def ease_in_sine(t: float) -> float:
    return 1 - _cos((t * math.pi) / 2)


def ease_out_sine(t: float) -> float:
    return _sin((t * math.pi) / 2)


def ease_in_out_sine(t: float) -> float:
    return -(_cos(math.pi * t) - 1) / 2


def ease_in_expo(t: float) -> float:
    return 0.0 if t == 0 else _exp2(10 * t - 10)


def ease_out_expo(t: float) -> float:
    return 1.0 if t == 1 else 1 - _exp2(-10 * t)


def ease_in_out_expo(t: float) -> float:
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    if t < 0.5:
        return _exp2(20 * t - 10) / 2
    return (2 - _exp2(-20 * t + 10)) / 2


def ease_in_circ(t: float) -> float:
    return 1 - math.sqrt(max(0.0, 1 - t * t))


def ease_out_circ(t: float) -> float:
    return math.sqrt(max(0.0, 1 - (t - 1) * (t - 1)))


def ease_in_out_circ(t: float) -> float:
    if t < 0.5:
        return (1 - math.sqrt(max(0.0, 1 - 4 * t * t))) / 2
    u = -2 * t + 2
    return (math.sqrt(max(0.0, 1 - u * u)) + 1) / 2


# === BACK / ELASTIC (overshoot) ===

def ease_in_back(t: float) -> float:
    return _BACK_C3 * t * t * t - _BACK_C1 * t * t


def ease_out_back(t: float) -> float:
    u = t - 1
    return 1 + _BACK_C3 * u * u * u + _BACK_C1 * u * u


def ease_in_out_back(t: float) -> float:
    if t < 0.5:
        return (4 * t * t * ((_BACK_C2 + 1) * 2 * t - _BACK_C2)) / 2
    u = 2 * t - 2
    return (u * u * ((_BACK_C2 + 1) * u + _BACK_C2) + 2) / 2


def ease_in_elastic(t: float) -> float:
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    return -_exp2(10 * t - 10) * _sin((t * 10 - 10.75) * _ELASTIC_C4)


def ease_out_elastic(t: float) -> float:
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    return _exp2(-10 * t) * _sin((t * 10 - 0.75) * _ELASTIC_C4) + 1


def ease_in_out_elastic(t: float) -> float:
    if t == 0:
        return 0.0
    if t == 1:
        return 1.0
    if t < 0.5:
        return -(_exp2(20 * t - 10) * _sin((20 * t - 11.125) * _ELASTIC_C5)) / 2
    return (_exp2(-20 * t + 10) * _sin((20 * t - 11.125) * _ELASTIC_C5)) / 2 + 1


# === BOUNCE ===

def ease_out_bounce(t: float) -> float:
    if t < 1 / _BOUNCE_D1:
        return _BOUNCE_N1 * t * t
    if t < 2 / _BOUNCE_D1:
        t -= 1.5 / _BOUNCE_D1
        return _BOUNCE_N1 * t * t + 0.75
    if t < 2.5 / _BOUNCE_D1:
        t -= 2.25 / _BOUNCE_D1
        return _BOUNCE_N1 * t * t + 0.9375
    t -= 2.625 / _BOUNCE_D1
    return _BOUNCE_N1 * t * t + 0.984375


def ease_in_bounce(t: float) -> float:
    return 1 - ease_out_bounce(1 - t)


def ease_in_out_bounce(t: float) -> float:
    if t < 0.5:
        return (1 - ease_out_bounce(1 - 2 * t)) / 2
    return (1 + ease_out_bounce(2 * t - 1)) / 2


EASINGS: Dict[str, EasingFunction] = {
    LINEAR: linear,
    "easeInQuad": ease_in_quad,
    "easeOutQuad": ease_out_quad,
    "easeInOutQuad": ease_in_out_quad,
    "easeInCubic": ease_in_cubic,
    "easeOutCubic": ease_out_cubic,
    "easeInOutCubic": ease_in_out_cubic,
    "easeInQuart": ease_in_quart,
    "easeOutQuart": ease_out_quart,
    "easeInOutQuart": ease_in_out_quart,
    "easeInSine": ease_in_sine,
    "easeOutSine": ease_out_sine,
    "easeInOutSine": ease_in_out_sine,
    "easeInExpo": ease_in_expo,
    "easeOutExpo": ease_out_expo,
    "easeInOutExpo": ease_in_out_expo,
    "easeInCirc": ease_in_circ,
    "easeOutCirc": ease_out_circ,
    "easeInOutCirc": ease_in_out_circ,
    "easeInBack": ease_in_back,
    "easeOutBack": ease_out_back,
    "easeInOutBack": ease_in_out_back,
    "easeInElastic": ease_in_elastic,
    "easeOutElastic": ease_out_elastic,
    "easeInOutElastic": ease_in_out_elastic,
    "easeInBounce": ease_in_bounce,
    "easeOutBounce": ease_out_bounce,
    "easeInOutBounce": ease_in_out_bounce,
    # After Effects style aliases
    "ease": ease_in_out_quad,
    "easeIn": ease_in_quad,
    "easeOut": ease_out_quad,
    "easeInOut": ease_in_out_quad,
}

# Curve picker categories, in display order
EASING_GROUPS: Dict[str, List[str]] = {
    "Basic": [LINEAR, "ease", "easeIn", "easeOut", "easeInOut"],
    "Quad": ["easeInQuad", "easeOutQuad", "easeInOutQuad"],
    "Cubic": ["easeInCubic", "easeOutCubic", "easeInOutCubic"],
    "Quart": ["easeInQuart", "easeOutQuart", "easeInOutQuart"],
    "Sine": ["easeInSine", "easeOutSine", "easeInOutSine"],
    "Expo": ["easeInExpo", "easeOutExpo", "easeInOutExpo"],
    "Circ": ["easeInCirc", "easeOutCirc", "easeInOutCirc"],
    "Back": ["easeInBack", "easeOutBack", "easeInOutBack"],
    "Elastic": ["easeInElastic", "easeOutElastic", "easeInOutElastic"],
    "Bounce": ["easeInBounce", "easeOutBounce", "easeInOutBounce"],
}


def resolve(name: str | None) -> EasingFunction:
    """Get the easing curve for ``name``.

    Unknown or empty names fall back to linear; this is never an error.
    """
    if name:
        easing = EASINGS.get(name)
        if easing is not None:
            return easing
        report(None, DiagnosticKind.UNKNOWN_EASING, f"Unknown easing '{name}', using linear")
    return linear


def is_known_easing(name: str | None) -> bool:
    """Check whether ``name`` is a catalogued easing."""
    return bool(name) and name in EASINGS


def list_easings() -> List[str]:
    """Flat list of every easing name, aliases included."""
    return list(EASINGS)
