"""Tests for the runtime animation player."""

from typing import List

import pytest

from keyframe_studio.animation.diagnostics import AnimationDiagnostic
from keyframe_studio.animation.host import rotation_converter
from keyframe_studio.animation.models import AnimationLibrary
from keyframe_studio.animation.player import AnimationPlayer


@pytest.fixture
def player(clock, diagnostics: List[AnimationDiagnostic]) -> AnimationPlayer:
    return AnimationPlayer(clock=clock, sink=diagnostics.append)


class TestLoading:
    """Test library loading into the player."""

    def test_load_raw_skips_orphans(self, player: AnimationPlayer, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data, "gone": slide_clip_data}, existing_ids=["box"])
        assert player.has_animation("box")
        assert not player.has_animation("gone")

    def test_load_library_instance(self, player: AnimationPlayer, slide_clip) -> None:
        library = AnimationLibrary({"box": slide_clip, "gone": slide_clip.copy()})
        player.load_library(library, existing_ids=["box"])
        assert player.library.entity_ids() == ["box"]

    def test_load_none(self, player: AnimationPlayer) -> None:
        player.load_library(None)
        assert len(player.library) == 0

    def test_invalid_clip_reported(self, player: AnimationPlayer, diagnostics) -> None:
        player.load_library({"box": {"duration": 1000}})
        assert not player.has_animation("box")
        assert len(diagnostics) == 1


class TestUpdate:
    """Test the per-frame update against a host."""

    def test_stopped_without_time_does_nothing(self, player: AnimationPlayer, host, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data})
        assert player.update(["box"], None, host) == {}
        assert host.applied == []

    def test_explicit_time(self, player: AnimationPlayer, host, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data})
        applied = player.update(["box"], 0, host)
        assert applied == {"box": {"x": 50.0}}
        assert host.last("box") == {"x": 50.0}

    def test_clock_time_when_playing(self, player: AnimationPlayer, host, clock, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data})
        player.start()
        clock.advance(1000)
        player.update(["box"], None, host)
        assert host.last("box") == {"x": pytest.approx(100.0)}

    def test_pingpong_past_duration(self, player: AnimationPlayer, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data})
        assert player.evaluate("box", 3000) == {"x": pytest.approx(0.0)}

    def test_skips_unknown_entities(self, player: AnimationPlayer, host, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data, "ghost": slide_clip_data})
        applied = player.update(["ghost", "plain"], 0, host)
        assert applied == {}

    def test_stop_returns_zero_time(self, player: AnimationPlayer, clock) -> None:
        player.start(offset_ms=200)
        clock.advance(100)
        assert player.current_time() == pytest.approx(300)
        player.stop()
        assert player.current_time() == 0.0

    def test_degrees_host(self, clock, host, slide_clip_data) -> None:
        data = dict(slide_clip_data)
        data["tracks"] = {"rotation": {"keyframes": [{"time": 0, "value": 45}]}}
        player = AnimationPlayer(clock=clock, rotation_to_host=rotation_converter("degrees"))
        player.load_library({"box": data})
        player.update(["box"], 0, host)
        assert host.last("box") == {"rotation": pytest.approx(45.5)}


class TestDescribe:
    """Test debug descriptions."""

    def test_describe(self, player: AnimationPlayer, slide_clip_data) -> None:
        player.load_library({"box": slide_clip_data})
        assert player.describe("box") == "2000ms, pingpong, [x:2kf]"
        assert player.describe("nothing") == "No animation"
