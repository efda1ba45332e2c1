"""
Timeline editor state machine.

Holds the transient edit state (scrub time, mode, expanded layers,
selection) on top of an AnimationLibrary passed in by reference. Every
mutation is synchronous; consumers learn about changes through Qt signals.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set, Tuple

from PySide6.QtCore import QObject, Signal

from ..animation.diagnostics import KeyframeLookupError
from ..animation.easings import is_known_easing
from ..animation.evaluation import apply_loop
from ..animation.models import (
    ANIMATABLE_PROPERTIES,
    DEFAULT_DURATION_MS,
    AnimationClip,
    AnimationLibrary,
    Keyframe,
    LoopMode,
    Track,
    default_value_for,
)
from ..animation.player import monotonic_ms
from .scheduler import FrameScheduler, QtFrameScheduler

MIN_DURATION_MS = 100
MAX_DURATION_MS = 30000

# Auto-key button removes a keyframe this close to the playhead
TOGGLE_TOLERANCE_MS = 20

DEFAULT_EASING = "easeInOutQuad"
DEFAULT_HITBOX_PX = 6


class EditorMode(Enum):
    IDLE = "idle"
    PLAYING_PREVIEW = "playing_preview"
    DRAGGING_PLAYHEAD = "dragging_playhead"
    DRAGGING_KEYFRAME = "dragging_keyframe"


@dataclass
class KeyframeSelection:
    """Selected keyframe, identified by track and time.

    ``keyframe`` pins the selected object, so retiming it onto another
    keyframe's time keeps the selection on the one that moved.
    """
    entity_id: str
    property: str
    time: int
    keyframe: Optional[Keyframe] = field(default=None, compare=False, repr=False)

    def matches(self, entity_id: str, property: str, keyframe: Keyframe, time: int) -> bool:
        if self.entity_id != entity_id or self.property != property:
            return False
        if self.keyframe is not None:
            return self.keyframe is keyframe
        return self.time == time


@dataclass(frozen=True)
class LayerRow:
    """One visible row of the timeline: an entity with a non-empty clip."""
    entity_id: str
    expanded: bool
    active: bool
    properties: Tuple[str, ...]


def clamp_duration(duration: float) -> int:
    return int(max(MIN_DURATION_MS, min(MAX_DURATION_MS, round(duration))))


class TimelineEditor(QObject):
    """Multi-entity keyframe timeline.

    Signals:
        keyframeChanged(entity_id, clip or None): a clip was created, edited or removed
        timeChanged(time_ms): the scrub position moved
        playStateChanged(playing): preview playback started or stopped
        layerSelected(entity_id): the active entity changed
        layersChanged(): visible rows changed (expansion, rows, keyframes)
        selectionChanged(): the selected keyframe changed
        libraryReplaced(): set_library() swapped the whole animation set
    """

    keyframeChanged = Signal(str, object)
    timeChanged = Signal(float)
    playStateChanged = Signal(bool)
    layerSelected = Signal(str)
    layersChanged = Signal()
    selectionChanged = Signal()
    libraryReplaced = Signal()

    def __init__(
        self,
        library: Optional[AnimationLibrary] = None,
        scheduler: Optional[FrameScheduler] = None,
        clock: Callable[[], float] = monotonic_ms,
        duration: int = DEFAULT_DURATION_MS,
        loop_mode: LoopMode = LoopMode.PINGPONG,
        default_easing: str = DEFAULT_EASING,
        keyframe_hitbox: int = DEFAULT_HITBOX_PX,
        properties: Iterable[str] = ANIMATABLE_PROPERTIES,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.library = library if library is not None else AnimationLibrary()
        self.scheduler: FrameScheduler = scheduler if scheduler is not None else QtFrameScheduler(parent=self)
        self.clock = clock

        self.duration = clamp_duration(duration)
        self.loop_mode = loop_mode
        self.default_easing = default_easing
        self.keyframe_hitbox = keyframe_hitbox
        self.properties: Tuple[str, ...] = tuple(properties)

        self.current_time: float = 0.0
        self.mode = EditorMode.IDLE
        self.expanded: Set[str] = set()
        self.active_entity: Optional[str] = None
        self.selection: Optional[KeyframeSelection] = None

        self._layers: List[str] = []
        self._play_clock_start = 0.0
        self._play_time_start = 0.0
        self._destroyed = False

        self._rebuild_layers()

    # === STATE ===

    @property
    def is_playing(self) -> bool:
        return self.mode == EditorMode.PLAYING_PREVIEW

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def get_clip(self, entity_id: str) -> Optional[AnimationClip]:
        return self.library.get(entity_id)

    def layer_ids(self) -> List[str]:
        return list(self._layers)

    def layers(self) -> List[LayerRow]:
        """Visible rows in library order."""
        rows = []
        for entity_id in self._layers:
            clip = self.library.get(entity_id)
            properties = tuple(clip.tracks) if clip is not None else ()
            rows.append(
                LayerRow(
                    entity_id=entity_id,
                    expanded=entity_id in self.expanded,
                    active=entity_id == self.active_entity,
                    properties=properties,
                )
            )
        return rows

    def _rebuild_layers(self) -> None:
        self._layers = [eid for eid, clip in self.library.items() if not clip.is_empty]
        self.expanded &= set(self._layers)

    # === LIBRARY / LAYERS ===

    def set_library(self, library: AnimationLibrary) -> None:
        """Replace the whole animation set and reset the edit state."""
        self.pause()
        self.scheduler.cancel()
        self.library = library
        self.current_time = 0.0
        self.mode = EditorMode.IDLE
        self.selection = None
        self.expanded.clear()
        self.active_entity = None
        self._rebuild_layers()

        self.logger.info(f"Library set: {len(self._layers)} animated entities")
        self.libraryReplaced.emit()
        self.layersChanged.emit()
        self.selectionChanged.emit()
        self.timeChanged.emit(self.current_time)

    def clear(self) -> None:
        self.set_library(AnimationLibrary())

    def select_entity(self, entity_id: str) -> None:
        """Make ``entity_id`` the active entity and expand its row."""
        self.active_entity = entity_id
        if entity_id in self._layers:
            self.expanded.add(entity_id)
        self.layerSelected.emit(entity_id)
        self.layersChanged.emit()

    def toggle_layer(self, entity_id: str) -> bool:
        """Expand or collapse a row; returns the new expanded state."""
        if entity_id in self.expanded:
            self.expanded.discard(entity_id)
            expanded = False
        else:
            self.expanded.add(entity_id)
            expanded = True
        self.layersChanged.emit()
        return expanded

    def set_clip(self, entity_id: str, clip: Optional[AnimationClip]) -> None:
        """Replace one entity's clip (None or an empty clip removes it)."""
        self.library.set(entity_id, clip)
        self._rebuild_layers()
        if self.selection is not None and self.selection.entity_id == entity_id:
            self.selection = None
            self.selectionChanged.emit()
        self._notify_clip(entity_id)

    # === KEYFRAME EDITING ===

    def _clip_or_raise(self, entity_id: str) -> AnimationClip:
        clip = self.library.get(entity_id)
        if clip is None:
            raise KeyframeLookupError(f"No animation for entity '{entity_id}'")
        return clip

    def _track_or_raise(self, entity_id: str, property: str) -> Track:
        track = self._clip_or_raise(entity_id).get_track(property)
        if track is None:
            raise KeyframeLookupError(f"Entity '{entity_id}' has no '{property}' track")
        return track

    def _keyframe_or_raise(self, entity_id: str, property: str, index: int) -> Keyframe:
        track = self._track_or_raise(entity_id, property)
        if not 0 <= index < len(track):
            raise KeyframeLookupError(
                f"Keyframe index {index} out of range for {entity_id}.{property} ({len(track)} keyframes)"
            )
        return track.keyframes[index]

    def _notify_clip(self, entity_id: str) -> None:
        self.keyframeChanged.emit(entity_id, self.library.get(entity_id))
        self.layersChanged.emit()

    def add_keyframe(
        self,
        entity_id: str,
        property: str,
        time_ms: float,
        value: Optional[float] = None,
        easing: Optional[str] = None,
    ) -> int:
        """Insert a keyframe, creating the clip and track on demand.

        A keyframe within the 10ms epsilon is reused: its value is
        overwritten only when ``value`` is given.

        Returns:
            Index of the inserted or reused keyframe
        """
        time = max(0, int(round(time_ms)))
        clip = self.library.get(entity_id)
        if clip is None:
            clip = AnimationClip(duration=self.duration, loop_mode=self.loop_mode)

        track = clip.get_track(property) or Track(property=property)
        existing = track.find_near(time)
        if existing is not None:
            index = existing
            if value is not None:
                track.keyframes[index].value = float(value)
        else:
            keyframe = Keyframe(
                time=time,
                value=float(value) if value is not None else default_value_for(property),
                easing=easing or self.default_easing,
            )
            index = track.insert(keyframe)

        clip.tracks[property] = track
        if entity_id not in self.library:
            self.library.set(entity_id, clip)
            self._rebuild_layers()
            self.logger.debug(f"Created animation for {entity_id}")

        self._notify_clip(entity_id)
        return index

    def move_keyframe(self, entity_id: str, property: str, index: int, new_time_ms: float) -> int:
        """Retime a keyframe; returns its index after re-sorting."""
        keyframe = self._keyframe_or_raise(entity_id, property, index)
        track = self._track_or_raise(entity_id, property)

        old_time = keyframe.time
        keyframe.time = max(0, int(round(new_time_ms)))
        track.sort()
        new_index = track.index_of(keyframe)

        selection = self.selection
        if selection is not None and selection.matches(entity_id, property, keyframe, old_time):
            selection.time = keyframe.time

        self._notify_clip(entity_id)
        return new_index

    def delete_keyframe(self, entity_id: str, property: str, index: int) -> None:
        """Remove a keyframe, pruning its track, clip and row when emptied."""
        keyframe = self._keyframe_or_raise(entity_id, property, index)
        clip = self._clip_or_raise(entity_id)
        track = clip.tracks[property]
        del track.keyframes[index]

        if track.is_empty:
            del clip.tracks[property]
        if clip.is_empty:
            self.library.remove(entity_id)
            self._rebuild_layers()
            self.logger.debug(f"Removed empty animation for {entity_id}")

        selection = self.selection
        if (
            selection is not None
            and selection.matches(entity_id, property, keyframe, keyframe.time)
            and (selection.keyframe is not None or track.find_at(keyframe.time) is None)
        ):
            self.selection = None
            self.selectionChanged.emit()

        self._notify_clip(entity_id)

    def delete_selected_keyframe(self) -> bool:
        """Delete the selected keyframe; False if nothing is selected."""
        resolved = self.selected_keyframe()
        if resolved is None:
            return False
        self.delete_keyframe(*resolved)
        return True

    def set_keyframe_easing(self, entity_id: str, property: str, index: int, easing: str) -> None:
        """Set the easing of the segment starting at this keyframe."""
        keyframe = self._keyframe_or_raise(entity_id, property, index)
        if not is_known_easing(easing):
            self.logger.warning(f"Unknown easing '{easing}' on {entity_id}.{property}, evaluates as linear")
        keyframe.easing = easing
        self._notify_clip(entity_id)

    def set_keyframe_value(self, entity_id: str, property: str, index: int, value: float) -> None:
        keyframe = self._keyframe_or_raise(entity_id, property, index)
        keyframe.value = float(value)
        self._notify_clip(entity_id)

    def toggle_keyframe(self, entity_id: str, property: str, value: Optional[float] = None) -> bool:
        """Auto-key at the playhead.

        Removes the keyframe within 20ms of the current time if there is
        one, otherwise adds a keyframe there.

        Returns:
            True if a keyframe was added, False if one was removed
        """
        time = int(round(self.current_time))
        clip = self.library.get(entity_id)
        track = clip.get_track(property) if clip is not None else None
        if track is not None:
            index = track.find_near(time, TOGGLE_TOLERANCE_MS)
            if index is not None:
                self.delete_keyframe(entity_id, property, index)
                return False
        self.add_keyframe(entity_id, property, time, value)
        return True

    # === CLIP SETTINGS ===

    def set_clip_duration(self, entity_id: str, duration: float) -> None:
        clip = self._clip_or_raise(entity_id)
        clip.duration = clamp_duration(duration)
        self._notify_clip(entity_id)

    def set_clip_loop_mode(self, entity_id: str, loop_mode: LoopMode) -> None:
        clip = self._clip_or_raise(entity_id)
        clip.loop_mode = loop_mode
        self._notify_clip(entity_id)

    def set_clip_loop_count(self, entity_id: str, loop_count: int) -> None:
        clip = self._clip_or_raise(entity_id)
        clip.loop_count = max(0, int(loop_count))
        self._notify_clip(entity_id)

    def set_duration(self, duration: float) -> None:
        """Set the editor's preview window and apply it to every clip."""
        self.duration = clamp_duration(duration)
        for entity_id, clip in self.library.items():
            clip.duration = self.duration
            self.keyframeChanged.emit(entity_id, clip)
        self.layersChanged.emit()
        if self.current_time > self.duration:
            self.set_current_time(self.duration)

    def set_loop_mode(self, loop_mode: LoopMode) -> None:
        """Set the editor's loop mode and apply it to every clip."""
        self.loop_mode = loop_mode
        for entity_id, clip in self.library.items():
            clip.loop_mode = loop_mode
            self.keyframeChanged.emit(entity_id, clip)
        self.layersChanged.emit()

    # === TIME / NAVIGATION ===

    def set_current_time(self, time_ms: float) -> None:
        """Move the playhead, clamped to [0, duration]."""
        self.current_time = float(max(0.0, min(float(self.duration), time_ms)))
        self.timeChanged.emit(self.current_time)

    def _all_keyframe_times(self) -> List[int]:
        return [
            keyframe.time
            for _, clip in self.library.items()
            for track in clip.tracks.values()
            for keyframe in track.keyframes
        ]

    def nearest_keyframe_before(self, time_ms: float) -> Optional[int]:
        """Latest keyframe time strictly before ``time_ms`` across all entities."""
        earlier = [t for t in self._all_keyframe_times() if t < time_ms]
        return max(earlier) if earlier else None

    def nearest_keyframe_after(self, time_ms: float) -> Optional[int]:
        """Earliest keyframe time strictly after ``time_ms`` across all entities."""
        later = [t for t in self._all_keyframe_times() if t > time_ms]
        return min(later) if later else None

    def go_to_previous_keyframe(self) -> None:
        previous = self.nearest_keyframe_before(self.current_time)
        self.set_current_time(previous if previous is not None else 0)

    def go_to_next_keyframe(self) -> None:
        following = self.nearest_keyframe_after(self.current_time)
        self.set_current_time(following if following is not None else self.duration)

    # === PLAYBACK ===

    def play(self) -> None:
        """Start preview playback from the current time (no-op if playing)."""
        if self._destroyed or self.is_playing:
            return
        if self.loop_mode == LoopMode.NONE and self.current_time >= self.duration:
            self.current_time = 0.0

        self.mode = EditorMode.PLAYING_PREVIEW
        self._play_clock_start = self.clock()
        self._play_time_start = self.current_time
        self.logger.debug(f"Playback started at {self.current_time:.0f}ms")
        self.playStateChanged.emit(True)
        self.scheduler.request_frame(self._on_frame)

    def pause(self) -> None:
        if not self.is_playing:
            return
        self._halt_playback()
        self.playStateChanged.emit(False)

    def stop(self) -> None:
        """Pause and rewind to 0. Safe to call from any state."""
        self.pause()
        if self.mode != EditorMode.IDLE:
            self.mode = EditorMode.IDLE
        if self.current_time != 0.0:
            self.set_current_time(0)

    def toggle_play(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def destroy(self) -> None:
        """Stop playback for good. Idempotent."""
        if self._destroyed:
            return
        self.pause()
        self.scheduler.cancel()
        self.mode = EditorMode.IDLE
        self._destroyed = True
        self.logger.debug("Timeline editor destroyed")

    def _halt_playback(self) -> None:
        self.scheduler.cancel()
        if self.is_playing:
            self.mode = EditorMode.IDLE

    def _on_frame(self) -> None:
        if not self.is_playing:
            return

        raw_time = self._play_time_start + (self.clock() - self._play_clock_start)
        if self.loop_mode == LoopMode.NONE and raw_time >= self.duration:
            self.set_current_time(self.duration)
            self.pause()
            return

        self.set_current_time(apply_loop(raw_time, self.duration, self.loop_mode))
        if self.is_playing:
            self.scheduler.request_frame(self._on_frame)

    # === SELECTION ===

    def select_keyframe(self, entity_id: str, property: str, index: int) -> None:
        keyframe = self._keyframe_or_raise(entity_id, property, index)
        self.selection = KeyframeSelection(entity_id, property, keyframe.time, keyframe)
        if entity_id != self.active_entity:
            self.select_entity(entity_id)
        self.selectionChanged.emit()

    def clear_selection(self) -> None:
        if self.selection is not None:
            self.selection = None
            self.selectionChanged.emit()

    def selected_keyframe(self) -> Optional[Tuple[str, str, int]]:
        """Resolve the selection to ``(entity_id, property, index)``.

        Returns None if nothing is selected or the keyframe no longer exists.
        """
        selection = self.selection
        if selection is None:
            return None
        clip = self.library.get(selection.entity_id)
        track = clip.get_track(selection.property) if clip is not None else None
        if track is None:
            return None
        if selection.keyframe is not None:
            found = track.index_of(selection.keyframe)
            index = found if found >= 0 else None
        else:
            index = track.find_at(selection.time)
        if index is None:
            return None
        return selection.entity_id, selection.property, index

    # === POINTER ===

    def time_at(self, x: float, width: float) -> float:
        """Map a pixel offset on a track to a time in ms."""
        if width <= 0:
            return 0.0
        return max(0.0, min(1.0, x / width)) * self.duration

    def x_for_time(self, time_ms: float, width: float) -> float:
        return time_ms / self.duration * width

    def keyframe_at(self, entity_id: str, property: str, x: float, width: float) -> Optional[int]:
        """Index of the keyframe whose hitbox contains ``x``, nearest first."""
        clip = self.library.get(entity_id)
        track = clip.get_track(property) if clip is not None else None
        if track is None:
            return None

        best: Optional[int] = None
        best_distance = float(self.keyframe_hitbox)
        for index, keyframe in enumerate(track.keyframes):
            distance = abs(self.x_for_time(keyframe.time, width) - x)
            if distance <= best_distance:
                best, best_distance = index, distance
        return best

    def press_track(self, entity_id: str, property: str, x: float, width: float) -> Optional[int]:
        """Pointer press on a track row.

        Selects a keyframe under the pointer and starts dragging it, or sets
        the scrub time. Playback is paused first.

        Returns:
            Index of the keyframe hit, None for a scrub
        """
        self.pause()
        index = self.keyframe_at(entity_id, property, x, width)
        if index is not None:
            self.select_keyframe(entity_id, property, index)
            self.mode = EditorMode.DRAGGING_KEYFRAME
            return index

        self.clear_selection()
        self.set_current_time(self.time_at(x, width))
        return None

    def press_playhead(self) -> None:
        self.pause()
        self.mode = EditorMode.DRAGGING_PLAYHEAD

    def pointer_move(self, x: float, width: float) -> None:
        if self.mode == EditorMode.DRAGGING_PLAYHEAD:
            self.set_current_time(self.time_at(x, width))
        elif self.mode == EditorMode.DRAGGING_KEYFRAME:
            resolved = self.selected_keyframe()
            if resolved is None:
                self.mode = EditorMode.IDLE
                return
            entity_id, property, index = resolved
            self.move_keyframe(entity_id, property, index, self.time_at(x, width))

    def pointer_release(self) -> None:
        if self.mode in (EditorMode.DRAGGING_PLAYHEAD, EditorMode.DRAGGING_KEYFRAME):
            self.mode = EditorMode.IDLE

    def double_click_track(self, entity_id: str, property: str, x: float, width: float) -> int:
        """Insert a default-valued keyframe at the clicked time."""
        self.pointer_release()
        return self.add_keyframe(entity_id, property, self.time_at(x, width))

    # === KEYBOARD ===

    def handle_key(self, key: str) -> bool:
        """Editor shortcuts; returns True if the key was handled.

        space toggles playback, delete/backspace delete the selected
        keyframe, k keys the selected property at the playhead.
        """
        key = key.lower()
        if key == "space":
            self.toggle_play()
            return True
        if key in ("delete", "backspace"):
            return self.delete_selected_keyframe()
        if key == "k":
            if self.selection is None:
                return False
            self.add_keyframe(self.selection.entity_id, self.selection.property, self.current_time)
            return True
        return False
