"""Shared fixtures and test doubles for keyframe-studio tests."""

import os
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QSettings  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from keyframe_studio.animation.diagnostics import AnimationDiagnostic  # noqa: E402
from keyframe_studio.animation.host import BaseTransform  # noqa: E402
from keyframe_studio.animation.models import LoopMode, normalize_clip  # noqa: E402
from keyframe_studio.editor.timeline import TimelineEditor  # noqa: E402


class ManualScheduler:
    """Frame scheduler fired by hand from tests."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[], None]] = None
        self.requests = 0
        self.cancels = 0

    def request_frame(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.requests += 1

    def cancel(self) -> None:
        self.callback = None
        self.cancels += 1

    def is_pending(self) -> bool:
        return self.callback is not None

    def fire(self) -> bool:
        """Run the pending callback; False if nothing was pending."""
        callback, self.callback = self.callback, None
        if callback is None:
            return False
        callback()
        return True


class FakeClock:
    """Millisecond clock advanced explicitly."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeHost:
    """AnimationHost recording every applied transform."""

    def __init__(self, bases: Optional[Dict[str, BaseTransform]] = None) -> None:
        self.bases: Dict[str, BaseTransform] = dict(bases or {})
        self.applied: List[Tuple[str, Dict[str, float]]] = []
        self.base_requests: List[str] = []

    def get_base_transform(self, entity_id: str) -> Optional[BaseTransform]:
        self.base_requests.append(entity_id)
        return self.bases.get(entity_id)

    def apply_transform(self, entity_id: str, transform: Dict[str, float]) -> None:
        self.applied.append((entity_id, dict(transform)))

    def last(self, entity_id: str) -> Optional[Dict[str, float]]:
        for applied_id, transform in reversed(self.applied):
            if applied_id == entity_id:
                return transform
        return None


@pytest.fixture(scope="session")
def qapp() -> QApplication:
    """Session-wide QApplication (offscreen)."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app  # type: ignore[return-value]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def editor(qapp: QApplication, scheduler: ManualScheduler, clock: FakeClock) -> Iterator[TimelineEditor]:
    """Editor with a 2000ms pingpong preview window and manual frames."""
    timeline = TimelineEditor(scheduler=scheduler, clock=clock, duration=2000, loop_mode=LoopMode.PINGPONG)
    yield timeline
    timeline.destroy()


@pytest.fixture
def diagnostics() -> List[AnimationDiagnostic]:
    """List collecting diagnostics; pass ``diagnostics.append`` as sink."""
    return []


@pytest.fixture
def slide_clip_data() -> Dict:
    """Pingpong slide from -50 to 50 over 2000ms."""
    return {
        "duration": 2000,
        "loop": "pingpong",
        "loopCount": 0,
        "tracks": {
            "x": {
                "keyframes": [
                    {"time": 0, "value": -50, "easing": "linear"},
                    {"time": 2000, "value": 50, "easing": "linear"},
                ]
            }
        },
    }


@pytest.fixture
def slide_clip(slide_clip_data: Dict):
    clip = normalize_clip(slide_clip_data)
    assert clip is not None
    return clip


@pytest.fixture
def ini_settings(qapp: QApplication, tmp_path: Path) -> QSettings:
    """QSettings store in a temporary INI file."""
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)


@pytest.fixture
def host() -> FakeHost:
    """Host with one entity "box" resting at (100, 50), rotated 0.5rad, scaled 2x."""
    return FakeHost({"box": BaseTransform(x=100.0, y=50.0, rotation=0.5, scale_x=2.0, scale_y=1.0)})
