"""Tests for animation presets."""

import pytest

from keyframe_studio.animation.evaluation import evaluate
from keyframe_studio.animation.models import LoopMode
from keyframe_studio.animation.presets import (
    PRESETS,
    apply_preset,
    get_preset,
    list_preset_keys,
    list_presets_by_category,
)


class TestPresetCatalog:
    """Test the static preset templates."""

    def test_catalog_size(self) -> None:
        assert len(list_preset_keys()) == 19

    @pytest.mark.parametrize("key", sorted(PRESETS))
    def test_every_preset_normalizes(self, key: str) -> None:
        clip = apply_preset(key, "entity")
        assert clip is not None
        assert not clip.is_empty

    def test_grouped_by_category(self) -> None:
        groups = list_presets_by_category()
        assert set(groups) == {"Movement", "Rotation", "Scale", "Combined"}
        assert sum(len(items) for items in groups.values()) == len(PRESETS)
        assert {"key", "name", "duration", "loop"} <= set(groups["Movement"][0])

    def test_get_preset_returns_copy(self) -> None:
        preset = get_preset("slideLeftRight")
        preset["tracks"]["x"]["keyframes"][0]["value"] = 999
        assert PRESETS["slideLeftRight"]["tracks"]["x"]["keyframes"][0]["value"] == -50

    def test_unknown_preset(self) -> None:
        assert get_preset("nope") is None
        assert apply_preset("nope", "entity") is None


class TestApplyPreset:
    """Test creating clips from presets."""

    def test_uses_template_timing(self) -> None:
        clip = apply_preset("pendulum", "door")
        assert clip.duration == 1500
        assert clip.loop_mode is LoopMode.PINGPONG
        assert evaluate(clip, 0)["rotation"] == pytest.approx(-45)

    def test_overrides(self) -> None:
        clip = apply_preset("spinCW", "gear", {"duration": 4000, "loop": "hold", "loopCount": 3})
        assert clip.duration == 4000
        assert clip.loop_mode is LoopMode.HOLD
        assert clip.loop_count == 3

    def test_applied_clips_are_independent(self) -> None:
        first = apply_preset("pulse", "a")
        second = apply_preset("pulse", "b")
        first.tracks["scaleX"].keyframes[1].value = 5.0
        assert second.tracks["scaleX"].keyframes[1].value == pytest.approx(1.2)
