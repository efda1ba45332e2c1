"""
Keyframe evaluation engine.

Maps raw elapsed time into clip time (loop remap), then interpolates every
track of a clip at that time. Used identically by the editor preview and
the runtime player, so results are deterministic for a given clip and time.
Evaluation never raises for malformed animation data.
"""

import logging
import math
from typing import Dict, List, Optional

from .diagnostics import DiagnosticKind, DiagnosticSink, report
from .easings import resolve
from .models import AnimationClip, AnimationLibrary, Keyframe, LoopMode, Track

logger = logging.getLogger(__name__)

PropertyValues = Dict[str, float]


def _exhausted_time(duration: float, loop_mode: LoopMode, loop_count: int) -> float:
    """Clip time once every allowed repeat has played."""
    if loop_mode is LoopMode.PINGPONG:
        return float(duration) if loop_count % 2 == 0 else 0.0
    if loop_mode in (LoopMode.NONE, LoopMode.HOLD, LoopMode.LOOP):
        return float(duration)
    raise AssertionError(f"Unhandled loop mode: {loop_mode}")


def apply_loop(
    raw_time: float,
    duration: float,
    loop_mode: LoopMode,
    loop_count: int = 0,
) -> float:
    """Map raw elapsed time into clip time.

    Args:
        raw_time: Elapsed time in ms (negative values and NaN count as 0)
        duration: Clip duration in ms
        loop_mode: Loop policy
        loop_count: Allowed repeats, 0 for infinite

    Returns:
        Effective time inside [0, duration]
    """
    if duration <= 0 or math.isnan(raw_time):
        return 0.0
    raw_time = max(0.0, raw_time)

    if math.isinf(raw_time):
        # Endless repeats have no phase at infinity: restart at 0
        if loop_count > 0 or loop_mode in (LoopMode.NONE, LoopMode.HOLD):
            return _exhausted_time(duration, loop_mode, max(loop_count, 1))
        return 0.0

    loop_index = math.floor(raw_time / duration)
    if loop_count > 0 and loop_index >= loop_count:
        return _exhausted_time(duration, loop_mode, loop_count)

    if loop_mode in (LoopMode.NONE, LoopMode.HOLD):
        return min(raw_time, float(duration))
    if loop_mode is LoopMode.LOOP:
        return math.fmod(raw_time, duration)
    if loop_mode is LoopMode.PINGPONG:
        phase = math.fmod(raw_time, 2 * duration)
        return phase if phase <= duration else 2 * duration - phase
    raise AssertionError(f"Unhandled loop mode: {loop_mode}")


def interpolate(
    k1: Keyframe,
    k2: Keyframe,
    time: float,
    sink: Optional[DiagnosticSink] = None,
    entity_id: Optional[str] = None,
    property: Optional[str] = None,
) -> float:
    """Interpolate between two keyframes.

    The outgoing keyframe's easing (k1) governs the k1 -> k2 segment.
    Degenerate ranges resolve to k2's value.
    """
    span = k2.time - k1.time
    if span <= 0:
        report(
            sink,
            DiagnosticKind.DEGENERATE_KEYFRAME_RANGE,
            f"Keyframes at {k1.time}ms and {k2.time}ms, using later value",
            entity_id,
            property,
        )
        return k2.value

    t = max(0.0, min(1.0, (time - k1.time) / span))
    eased = resolve(k1.easing)(t)
    return k1.value + (k2.value - k1.value) * eased


def evaluate_track(
    track: Track,
    time: float,
    sink: Optional[DiagnosticSink] = None,
    entity_id: Optional[str] = None,
) -> Optional[float]:
    """Value of a track at clip time ``time``, None if it has no keyframes.

    Times outside the keyframe range return the nearest endpoint value.
    Keyframes sharing a time resolve to the later one, reported as a
    DEGENERATE_KEYFRAME_RANGE diagnostic.
    """
    keyframes = track.keyframes
    if not keyframes:
        return None
    if time < keyframes[0].time:
        return keyframes[0].value

    # Last keyframe at or before time; keyframes are kept sorted
    index = 0
    for candidate, keyframe in enumerate(keyframes):
        if keyframe.time > time:
            break
        index = candidate

    k1 = keyframes[index]
    if index > 0 and keyframes[index - 1].time == k1.time:
        report(
            sink,
            DiagnosticKind.DEGENERATE_KEYFRAME_RANGE,
            f"Keyframes share time {k1.time}ms, using later value",
            entity_id,
            track.property,
        )
    if index == len(keyframes) - 1 or time == k1.time:
        return k1.value
    return interpolate(k1, keyframes[index + 1], time, sink, entity_id, track.property)


def evaluate(
    clip: Optional[AnimationClip],
    raw_time: float,
    sink: Optional[DiagnosticSink] = None,
    entity_id: Optional[str] = None,
) -> Optional[PropertyValues]:
    """Evaluate every track of ``clip`` at raw elapsed time ``raw_time``.

    Returns:
        Mapping property -> value, or None if the clip is absent
    """
    if clip is None or clip.is_empty:
        return None

    looped = apply_loop(raw_time, clip.duration, clip.loop_mode, clip.loop_count)
    result: PropertyValues = {}
    for property, track in clip.tracks.items():
        value = evaluate_track(track, looped, sink, entity_id)
        if value is not None:
            result[property] = value
    return result


def evaluate_all(
    library: AnimationLibrary,
    time: float,
    sink: Optional[DiagnosticSink] = None,
) -> Dict[str, PropertyValues]:
    """Evaluate every clip of ``library`` at ``time``.

    Entities without a clip are skipped; non-finite channels are dropped
    for this call and reported.
    """
    results: Dict[str, PropertyValues] = {}
    for entity_id, clip in library.items():
        values = evaluate(clip, time, sink, entity_id)
        if not values:
            continue
        finite = drop_non_finite(values, sink, entity_id)
        if finite:
            results[entity_id] = finite
    return results


def drop_non_finite(
    values: PropertyValues,
    sink: Optional[DiagnosticSink] = None,
    entity_id: Optional[str] = None,
) -> PropertyValues:
    """Copy of ``values`` without NaN / infinite channels (each reported)."""
    finite: PropertyValues = {}
    for property, value in values.items():
        if isinstance(value, (int, float)) and math.isfinite(value):
            finite[property] = value
        else:
            report(
                sink,
                DiagnosticKind.NON_FINITE_RESULT,
                f"Non-finite value {value!r} dropped",
                entity_id,
                property,
            )
    return finite


def describe_clip(clip: Optional[AnimationClip]) -> str:
    """Short debug description, e.g. ``2000ms, pingpong, [x:2kf]``."""
    if clip is None:
        return "No animation"
    counts: List[str] = [f"{name}:{len(track)}kf" for name, track in clip.tracks.items()]
    loop = clip.loop_mode.value
    if clip.loop_count:
        loop += f" x{clip.loop_count}"
    return f"{clip.duration}ms, {loop}, [{', '.join(counts)}]"
