"""Tests for loop remapping and keyframe evaluation."""

import math
from typing import List

import pytest

from keyframe_studio.animation.diagnostics import AnimationDiagnostic, DiagnosticKind
from keyframe_studio.animation.evaluation import (
    apply_loop,
    describe_clip,
    drop_non_finite,
    evaluate,
    evaluate_all,
    evaluate_track,
    interpolate,
)
from keyframe_studio.animation.models import (
    AnimationClip,
    AnimationLibrary,
    Keyframe,
    LoopMode,
    Track,
    normalize_clip,
)


class TestApplyLoop:
    """Test the raw time -> clip time remap."""

    @pytest.mark.parametrize("duration", [1, 250, 1000, 2000])
    @pytest.mark.parametrize("raw", [0, 1, 999, 1000, 1001, 2500, 12345.5])
    def test_loop_is_modulo(self, raw: float, duration: int) -> None:
        assert apply_loop(raw, duration, LoopMode.LOOP, 0) == pytest.approx(math.fmod(raw, duration))

    def test_pingpong_continuous_at_boundary(self) -> None:
        before = apply_loop(2000 - 0.001, 2000, LoopMode.PINGPONG)
        after = apply_loop(2000 + 0.001, 2000, LoopMode.PINGPONG)
        assert before == pytest.approx(2000, abs=0.01)
        assert after == pytest.approx(2000, abs=0.01)

    def test_pingpong_reflects(self) -> None:
        assert apply_loop(3000, 2000, LoopMode.PINGPONG) == pytest.approx(1000)
        assert apply_loop(4000, 2000, LoopMode.PINGPONG) == pytest.approx(0)

    def test_none_and_hold_clamp(self) -> None:
        assert apply_loop(5000, 2000, LoopMode.NONE) == 2000
        assert apply_loop(5000, 2000, LoopMode.HOLD) == 2000
        assert apply_loop(500, 2000, LoopMode.HOLD) == 500

    def test_loop_count_exhausted_holds_end(self) -> None:
        assert apply_loop(2500, 1000, LoopMode.LOOP, 2) == 1000

    def test_loop_count_within_allowance(self) -> None:
        assert apply_loop(1500, 1000, LoopMode.LOOP, 2) == pytest.approx(500)

    def test_pingpong_exhausted_parity(self) -> None:
        """Even repeat counts end at the end, odd counts at the start."""
        assert apply_loop(5000, 1000, LoopMode.PINGPONG, 2) == 1000
        assert apply_loop(5000, 1000, LoopMode.PINGPONG, 3) == 0

    def test_degenerate_duration(self) -> None:
        assert apply_loop(500, 0, LoopMode.LOOP) == 0.0

    def test_negative_time_is_zero(self) -> None:
        assert apply_loop(-300, 1000, LoopMode.LOOP) == 0.0

    def test_infinite_time(self) -> None:
        assert apply_loop(math.inf, 1000, LoopMode.LOOP) == 0.0
        assert apply_loop(math.inf, 1000, LoopMode.PINGPONG) == 0.0
        assert apply_loop(math.inf, 1000, LoopMode.NONE) == 1000
        assert apply_loop(math.inf, 1000, LoopMode.HOLD) == 1000
        assert apply_loop(math.inf, 1000, LoopMode.LOOP, 2) == 1000
        assert apply_loop(math.inf, 1000, LoopMode.PINGPONG, 3) == 0

    def test_nan_time_is_zero(self) -> None:
        assert apply_loop(math.nan, 1000, LoopMode.LOOP) == 0.0


class TestInterpolate:
    """Test segment interpolation."""

    def test_linear_midpoint(self) -> None:
        assert interpolate(Keyframe(0, 0.0), Keyframe(100, 10.0), 50) == pytest.approx(5.0)

    def test_outgoing_easing_governs_segment(self) -> None:
        """The first keyframe's easing shapes the k1 -> k2 transition."""
        k1 = Keyframe(0, 0.0, "easeInQuad")
        k2 = Keyframe(100, 100.0, "linear")
        assert interpolate(k1, k2, 50) == pytest.approx(25.0)

        k1 = Keyframe(0, 0.0, "linear")
        k2 = Keyframe(100, 100.0, "easeInQuad")
        assert interpolate(k1, k2, 50) == pytest.approx(50.0)

    def test_degenerate_range_uses_later_value(self, diagnostics: List[AnimationDiagnostic]) -> None:
        value = interpolate(Keyframe(100, 1.0), Keyframe(100, 7.0), 100, diagnostics.append, "e", "x")
        assert value == 7.0
        assert diagnostics[0].kind is DiagnosticKind.DEGENERATE_KEYFRAME_RANGE
        assert diagnostics[0].property == "x"

    def test_unknown_easing_is_linear(self) -> None:
        assert interpolate(Keyframe(0, 0.0, "mystery"), Keyframe(100, 10.0), 30) == pytest.approx(3.0)


class TestEvaluateTrack:
    """Test single-track evaluation."""

    def test_empty_track(self) -> None:
        assert evaluate_track(Track("x"), 100) is None

    @pytest.mark.parametrize("time", [0, 300, 500, 10000])
    def test_single_keyframe_is_constant(self, time: float) -> None:
        assert evaluate_track(Track("x", [Keyframe(500, 4.0)]), time) == 4.0

    def test_no_extrapolation(self) -> None:
        track = Track("x", [Keyframe(200, 1.0), Keyframe(800, 3.0)])
        assert evaluate_track(track, 0) == 1.0
        assert evaluate_track(track, 1000) == 3.0

    def test_multi_segment(self) -> None:
        track = Track("x", [Keyframe(0, 0.0), Keyframe(100, 10.0), Keyframe(200, 0.0)])
        assert evaluate_track(track, 150) == pytest.approx(5.0)

    def test_shared_time_uses_later_keyframe(self, diagnostics: List[AnimationDiagnostic]) -> None:
        track = Track("x", [Keyframe(0, 0.0), Keyframe(1000, 10.0), Keyframe(1000, 20.0), Keyframe(2000, 30.0)])
        assert evaluate_track(track, 500, diagnostics.append, "e") == pytest.approx(5.0)
        assert diagnostics == []

        assert evaluate_track(track, 1000, diagnostics.append, "e") == 20.0
        assert evaluate_track(track, 1500, diagnostics.append, "e") == pytest.approx(25.0)
        assert diagnostics[0].kind is DiagnosticKind.DEGENERATE_KEYFRAME_RANGE
        assert diagnostics[0].entity_id == "e"
        assert diagnostics[0].property == "x"

    def test_shared_time_at_end(self, diagnostics: List[AnimationDiagnostic]) -> None:
        track = Track("x", [Keyframe(0, 0.0), Keyframe(500, 1.0), Keyframe(500, 2.0)])
        assert evaluate_track(track, 800, diagnostics.append) == 2.0
        assert len(diagnostics) == 1


class TestEvaluateClip:
    """Test whole-clip evaluation scenarios."""

    def test_absent_clip(self) -> None:
        assert evaluate(None, 100) is None
        assert evaluate(AnimationClip(), 100) is None

    def test_pingpong_slide_scenario(self, slide_clip: AnimationClip) -> None:
        assert evaluate(slide_clip, 1000)["x"] == pytest.approx(0)
        assert evaluate(slide_clip, 3000)["x"] == pytest.approx(0)
        assert evaluate(slide_clip, 4000)["x"] == pytest.approx(-50)

    def test_infinite_time(self, slide_clip: AnimationClip) -> None:
        assert evaluate(slide_clip, math.inf)["x"] == pytest.approx(-50)

    def test_endpoints_per_track(self) -> None:
        clip = normalize_clip({"duration": 3000, "tracks": {
            "x": [{"time": 500, "value": 1}, {"time": 1000, "value": 2}],
            "y": [{"time": 1500, "value": 5}, {"time": 2500, "value": 6}],
        }})
        assert evaluate(clip, 0) == {"x": 1.0, "y": 5.0}
        assert evaluate(clip, 3000) == {"x": 2.0, "y": 6.0}

    def test_describe_clip(self, slide_clip: AnimationClip) -> None:
        assert describe_clip(slide_clip) == "2000ms, pingpong, [x:2kf]"
        assert describe_clip(None) == "No animation"


class TestEvaluateAll:
    """Test batch evaluation over a library."""

    def test_evaluates_every_entity(self, slide_clip: AnimationClip) -> None:
        other = slide_clip.copy()
        other.tracks["x"].keyframes[0].value = 0.0
        library = AnimationLibrary({"a": slide_clip, "b": other})
        values = evaluate_all(library, 1000)
        assert values["a"]["x"] == pytest.approx(0.0)
        assert values["b"]["x"] == pytest.approx(25.0)

    def test_drops_non_finite_channels(self, diagnostics: List[AnimationDiagnostic]) -> None:
        clip = AnimationClip(tracks={
            "x": Track("x", [Keyframe(0, math.inf)]),
            "y": Track("y", [Keyframe(0, 2.0)]),
        })
        values = evaluate_all(AnimationLibrary({"a": clip}), 0, diagnostics.append)
        assert values == {"a": {"y": 2.0}}
        assert diagnostics[0].kind is DiagnosticKind.NON_FINITE_RESULT

    def test_skips_entity_with_only_non_finite_values(self) -> None:
        clip = AnimationClip(tracks={"x": Track("x", [Keyframe(0, math.nan)])})
        assert evaluate_all(AnimationLibrary({"a": clip}), 0) == {}

    def test_drop_non_finite(self) -> None:
        assert drop_non_finite({"x": 1.0, "y": -math.inf}) == {"x": 1.0}
