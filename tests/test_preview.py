"""Tests for the preview coordinator between editor and host."""

import math
from typing import List

import pytest

from keyframe_studio.animation.diagnostics import AnimationDiagnostic, DiagnosticKind
from keyframe_studio.animation.host import BaseTransform
from keyframe_studio.animation.models import (
    AnimationClip,
    AnimationLibrary,
    Keyframe,
    LoopMode,
    Track,
)
from keyframe_studio.editor.preview import PreviewCoordinator

BASE = BaseTransform(x=100.0, y=50.0, rotation=0.5, scale_x=2.0, scale_y=1.0)


@pytest.fixture
def preview(editor, host):
    coordinator = PreviewCoordinator(editor, host)
    yield coordinator
    coordinator.deleteLater()


class TestApplyRelativeToBase:
    """Test that evaluated values land on the host relative to the base."""

    def test_scrub_applies_offsets(self, editor, host, preview, slide_clip) -> None:
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        assert host.last("box") == {"x": 50.0}

        editor.set_current_time(1000)
        assert host.last("box") == {"x": pytest.approx(100.0)}

    def test_rotation_converted_to_host_unit(self, editor, host, preview) -> None:
        editor.add_keyframe("box", "rotation", 0, 90)
        assert host.last("box")["rotation"] == pytest.approx(0.5 + math.pi / 2)

    def test_scale_is_multiplier(self, editor, host, preview) -> None:
        editor.add_keyframe("box", "scaleX", 0, 1.5)
        assert host.last("box")["scaleX"] == pytest.approx(3.0)

    def test_base_captured_once(self, editor, host, preview, slide_clip) -> None:
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        editor.set_current_time(300)
        editor.set_current_time(900)
        assert host.base_requests.count("box") == 1

    def test_entity_without_base_is_skipped(self, editor, host, preview) -> None:
        editor.add_keyframe("ghost", "x", 0, 10)
        assert host.last("ghost") is None

    def test_frame_applied_signal(self, editor, preview, slide_clip) -> None:
        frames: List[dict] = []
        preview.frameApplied.connect(frames.append)
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        assert frames[-1] == {"box": {"x": 50.0}}


class TestSessionReset:
    """Test restoring entities when animations go away."""

    def test_new_library_restores_and_recaptures(self, editor, host, preview, slide_clip) -> None:
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        editor.set_current_time(1000)

        editor.set_library(AnimationLibrary())
        assert host.last("box") == BASE.to_dict()

        host.bases["box"] = BaseTransform(x=10.0)
        editor.set_library(AnimationLibrary({"box": slide_clip.copy()}))
        assert host.base_requests.count("box") == 2
        assert host.last("box") == {"x": -40.0}

    def test_removed_clip_restores_entity(self, editor, host, preview) -> None:
        editor.add_keyframe("box", "x", 0, 25)
        assert host.last("box") == {"x": 125.0}

        editor.delete_keyframe("box", "x", 0)
        assert host.last("box") == BASE.to_dict()

    def test_removed_track_restores_channel(self, editor, host, preview) -> None:
        """Dropping one track resets that channel while the others stay animated."""
        editor.add_keyframe("box", "x", 0, 40)
        editor.add_keyframe("box", "y", 0, 7)
        assert host.last("box") == {"x": 140.0, "y": 57.0}

        count = len(host.applied)
        editor.delete_keyframe("box", "x", 0)
        assert host.applied[count:] == [("box", {"x": 100.0}), ("box", {"y": 57.0})]

        editor.set_current_time(500)
        assert host.last("box") == {"y": 57.0}
        assert ("box", {"x": 100.0}) not in host.applied[count + 2:]

    def test_detach_stops_updates(self, editor, host, preview, slide_clip) -> None:
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        preview.detach()
        assert host.last("box") == BASE.to_dict()

        count = len(host.applied)
        editor.set_current_time(1500)
        assert len(host.applied) == count


class TestDiagnostics:
    """Test that bad data is reported and never applied."""

    def test_non_finite_value_reported(self, editor, host, preview) -> None:
        raised: List[AnimationDiagnostic] = []
        preview.diagnosticRaised.connect(raised.append)

        clip = AnimationClip(
            duration=1000,
            loop_mode=LoopMode.NONE,
            tracks={"x": Track("x", [Keyframe(0, float("inf"))])},
        )
        editor.set_library(AnimationLibrary({"box": clip}))

        assert any(d.kind is DiagnosticKind.NON_FINITE_RESULT for d in raised)
        assert host.last("box") is None

    def test_finite_channels_still_applied(self, editor, host, preview) -> None:
        clip = AnimationClip(
            duration=1000,
            tracks={
                "x": Track("x", [Keyframe(0, float("nan"))]),
                "y": Track("y", [Keyframe(0, 5.0)]),
            },
        )
        editor.set_library(AnimationLibrary({"box": clip}))
        assert host.last("box") == {"y": 55.0}
