"""
Data models for keyframe animation.

Contains the clip / track / keyframe shapes shared by the editor, the
preview coordinator and the runtime player, plus normalization of the
plain serializable form. Models carry no evaluation or UI logic.
"""

import copy
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, cast

from .diagnostics import DiagnosticKind, DiagnosticSink, report
from .easings import LINEAR

# Two keyframes closer than this are the same keyframe on insert
KEYFRAME_EPSILON_MS = 10

DEFAULT_DURATION_MS = 2000
DEFAULT_LOOP_COUNT = 0

ANIMATABLE_PROPERTIES: Tuple[str, ...] = ("x", "y", "rotation", "scaleX", "scaleY")
SCALE_PROPERTIES: Tuple[str, ...] = ("scaleX", "scaleY")


def default_value_for(property: str) -> float:
    """Resting value of a property: 1 for scale channels, 0 otherwise."""
    return 1.0 if property in SCALE_PROPERTIES else 0.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class LoopMode(Enum):
    """How raw elapsed time maps into clip time."""

    NONE = "none"
    """Play once and freeze at the end."""

    LOOP = "loop"
    """Restart from the beginning."""

    PINGPONG = "pingpong"
    """Play forwards, then backwards."""

    HOLD = "hold"
    """Play once and hold the last frame."""

    @classmethod
    def parse(cls, value: Any) -> Optional["LoopMode"]:
        """Convert a wire value (or a LoopMode) to a LoopMode, None if unknown."""
        if isinstance(value, LoopMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


# =============================================================================
# Keyframe / Track / Clip
# =============================================================================

@dataclass
class Keyframe:
    """A (time, value, easing) anchor point.

    The easing belongs to the segment that starts at this keyframe.
    """
    time: int
    value: float
    easing: str = LINEAR

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "value": self.value, "easing": self.easing}


@dataclass
class Track:
    """Ordered keyframes for one named property."""
    property: str
    keyframes: List[Keyframe] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.keyframes)

    @property
    def is_empty(self) -> bool:
        return not self.keyframes

    def sort(self) -> None:
        """Restore ascending time order (stable for equal times)."""
        self.keyframes.sort(key=lambda kf: kf.time)

    def find_near(self, time: float, tolerance: float = KEYFRAME_EPSILON_MS) -> Optional[int]:
        """Index of the first keyframe closer than ``tolerance`` to ``time``."""
        for index, keyframe in enumerate(self.keyframes):
            if abs(keyframe.time - time) < tolerance:
                return index
        return None

    def find_at(self, time: int) -> Optional[int]:
        """Index of the keyframe exactly at ``time``."""
        for index, keyframe in enumerate(self.keyframes):
            if keyframe.time == time:
                return index
        return None

    def index_of(self, keyframe: Keyframe) -> int:
        """Index of ``keyframe`` by identity, -1 if it is not in this track."""
        for index, candidate in enumerate(self.keyframes):
            if candidate is keyframe:
                return index
        return -1

    def insert(self, keyframe: Keyframe) -> int:
        """Insert a keyframe keeping time order; returns its index."""
        self.keyframes.append(keyframe)
        self.sort()
        return self.index_of(keyframe)

    def to_dict(self) -> Dict[str, Any]:
        return {"keyframes": [kf.to_dict() for kf in self.keyframes]}


@dataclass
class AnimationClip:
    """Full animation definition for one entity."""
    duration: int = DEFAULT_DURATION_MS
    loop_mode: LoopMode = LoopMode.NONE
    loop_count: int = DEFAULT_LOOP_COUNT  # 0 = infinite
    tracks: Dict[str, Track] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """A clip without keyframes is considered absent."""
        return all(track.is_empty for track in self.tracks.values())

    def get_track(self, property: str) -> Optional[Track]:
        return self.tracks.get(property)

    def ensure_track(self, property: str) -> Track:
        """Get the track for ``property``, creating it if missing."""
        track = self.tracks.get(property)
        if track is None:
            track = Track(property=property)
            self.tracks[property] = track
        return track

    def prune_empty_tracks(self) -> List[str]:
        """Remove tracks without keyframes; returns removed property names."""
        removed = [name for name, track in self.tracks.items() if track.is_empty]
        for name in removed:
            del self.tracks[name]
        return removed

    def keyframe_count(self) -> int:
        return sum(len(track) for track in self.tracks.values())

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used for library exchange."""
        return {
            "duration": self.duration,
            "loop": self.loop_mode.value,
            "loopCount": self.loop_count,
            "tracks": {
                name: track.to_dict()
                for name, track in self.tracks.items()
                if not track.is_empty
            },
        }

    def copy(self) -> "AnimationClip":
        return copy.deepcopy(self)


# =============================================================================
# Library
# =============================================================================

class AnimationLibrary:
    """Mapping entity id -> AnimationClip.

    Empty clips are never stored: setting one removes the entity instead.
    This is the unit exchanged between editor, player and persistence.
    """

    def __init__(self, clips: Optional[Mapping[str, AnimationClip]] = None):
        self._clips: Dict[str, AnimationClip] = {}
        if clips:
            self.replace(clips)

    def __len__(self) -> int:
        return len(self._clips)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._clips))

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._clips

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnimationLibrary):
            return NotImplemented
        return self._clips == other._clips

    def __repr__(self) -> str:
        return f"AnimationLibrary({len(self._clips)} clips)"

    def get(self, entity_id: str) -> Optional[AnimationClip]:
        return self._clips.get(entity_id)

    def set(self, entity_id: str, clip: Optional[AnimationClip]) -> bool:
        """Store ``clip`` for ``entity_id``.

        Returns:
            True if the clip was stored, False if it was empty and the
            entity was removed instead
        """
        if clip is None or clip.is_empty:
            self._clips.pop(entity_id, None)
            return False
        self._clips[entity_id] = clip
        return True

    def remove(self, entity_id: str) -> Optional[AnimationClip]:
        return self._clips.pop(entity_id, None)

    def clear(self) -> None:
        self._clips.clear()

    def replace(self, clips: Mapping[str, AnimationClip]) -> None:
        """Replace the whole content with ``clips`` (empty clips dropped)."""
        self._clips.clear()
        for entity_id, clip in clips.items():
            self.set(entity_id, clip)

    def entity_ids(self) -> List[str]:
        return list(self._clips)

    def items(self) -> List[Tuple[str, AnimationClip]]:
        return list(self._clips.items())

    def copy(self) -> "AnimationLibrary":
        return AnimationLibrary({eid: clip.copy() for eid, clip in self._clips.items()})

    def to_dict(self) -> Dict[str, Any]:
        return {eid: clip.to_dict() for eid, clip in self._clips.items() if not clip.is_empty}


# =============================================================================
# Normalization
# =============================================================================

def _normalize_keyframe(
    raw: Any,
    entity_id: Optional[str],
    property: str,
    sink: Optional[DiagnosticSink],
) -> Optional[Keyframe]:
    if not isinstance(raw, Mapping):
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, "Keyframe is not a mapping", entity_id, property)
        return None

    data = cast(Mapping[str, Any], raw)
    time = data.get("time")
    value = data.get("value")
    if not _is_number(time) or not math.isfinite(time):
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, f"Invalid keyframe time: {time!r}", entity_id, property)
        return None
    if not _is_number(value):
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, f"Invalid keyframe value: {value!r}", entity_id, property)
        return None

    easing = data.get("easing")
    return Keyframe(
        time=max(0, int(round(time))),
        value=float(value),
        easing=easing if isinstance(easing, str) and easing else LINEAR,
    )


def normalize_clip(
    raw: Any,
    entity_id: Optional[str] = None,
    sink: Optional[DiagnosticSink] = None,
) -> Optional[AnimationClip]:
    """Build an AnimationClip from a partially specified clip-like mapping.

    Missing fields get defaults (duration 2000, loop none, loopCount 0).
    Input without a ``tracks`` mapping is rejected, as is a clip whose
    tracks hold no usable keyframes.

    Args:
        raw: Clip-like mapping in exchange form
        entity_id: Owner id, used for diagnostics only
        sink: Optional receiver for diagnostics

    Returns:
        Normalized clip, or None if the input is invalid
    """
    if isinstance(raw, AnimationClip):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping) or not isinstance(raw.get("tracks"), Mapping):
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, "Clip has no tracks mapping", entity_id)
        return None

    data = cast(Mapping[str, Any], raw)

    duration = data.get("duration")
    if duration is None:
        duration = DEFAULT_DURATION_MS
    elif not _is_number(duration) or not math.isfinite(duration) or duration <= 0:
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, f"Invalid duration {duration!r}, using default", entity_id)
        duration = DEFAULT_DURATION_MS

    loop_raw = data.get("loop")
    loop_mode = LoopMode.NONE if loop_raw is None else LoopMode.parse(loop_raw)
    if loop_mode is None:
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, f"Unknown loop mode {loop_raw!r}, using none", entity_id)
        loop_mode = LoopMode.NONE

    loop_count = data.get("loopCount")
    if not _is_number(loop_count) or loop_count < 0:
        if loop_count is not None:
            report(sink, DiagnosticKind.INVALID_CLIP_DATA, f"Invalid loopCount {loop_count!r}, using 0", entity_id)
        loop_count = DEFAULT_LOOP_COUNT

    clip = AnimationClip(
        duration=max(1, int(round(duration))),
        loop_mode=loop_mode,
        loop_count=int(loop_count),
    )

    for property, raw_track in cast(Mapping[str, Any], data["tracks"]).items():
        if isinstance(raw_track, Mapping):
            raw_keyframes = cast(Mapping[str, Any], raw_track).get("keyframes")
        else:
            raw_keyframes = raw_track
        if not isinstance(raw_keyframes, list):
            report(sink, DiagnosticKind.INVALID_CLIP_DATA, "Track has no keyframes list", entity_id, str(property))
            continue

        track = Track(property=str(property))
        for raw_keyframe in cast(List[Any], raw_keyframes):
            keyframe = _normalize_keyframe(raw_keyframe, entity_id, track.property, sink)
            if keyframe is not None:
                track.keyframes.append(keyframe)
        track.sort()
        if not track.is_empty:
            clip.tracks[track.property] = track

    if clip.is_empty:
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, "Clip has no keyframes", entity_id)
        return None
    return clip
