"""Tests for the preview scene and timeline widgets (offscreen)."""

import math

import pytest

from keyframe_studio.animation.models import AnimationLibrary, LoopMode
from keyframe_studio.gui.preview_scene import PreviewScene
from keyframe_studio.gui.timeline_widget import HEADER_WIDTH, TimelineRow, TimelineWidget
from keyframe_studio.gui.transport_bar import TransportBar


class TestPreviewScene:
    """Test the scene as an animation host."""

    def test_base_transform_in_radians(self, qapp) -> None:
        scene = PreviewScene()
        scene.add_entity("box", 10, 20, rotation=math.pi / 2)
        base = scene.get_base_transform("box")
        assert base is not None
        assert (base.x, base.y) == (10, 20)
        assert base.rotation == pytest.approx(math.pi / 2)
        assert scene.item_for("box").rotation() == pytest.approx(90)

    def test_degrees_unit(self, qapp) -> None:
        scene = PreviewScene(rotation_unit="degrees")
        scene.add_entity("box", 0, 0)
        scene.apply_transform("box", {"rotation": 30.0})
        assert scene.item_for("box").rotation() == pytest.approx(30)

    def test_apply_partial_transform(self, qapp) -> None:
        scene = PreviewScene()
        scene.add_entity("box", 10, 20)
        scene.apply_transform("box", {"x": 50.0, "scaleY": 2.0})
        item = scene.item_for("box")
        assert (item.pos().x(), item.pos().y()) == (50, 20)
        base = scene.get_base_transform("box")
        assert (base.scale_x, base.scale_y) == (1.0, 2.0)

    def test_unknown_entity(self, qapp) -> None:
        scene = PreviewScene()
        assert scene.get_base_transform("nope") is None
        scene.apply_transform("nope", {"x": 1.0})

    def test_remove_entity(self, qapp) -> None:
        scene = PreviewScene()
        scene.add_entity("a", 0, 0)
        scene.add_entity("b", 0, 0)
        scene.remove_entity("a")
        assert scene.entity_ids() == ["b"]


class TestTimelineWidget:
    """Test row layout of the painted timeline."""

    def test_rows_follow_expansion(self, editor, slide_clip) -> None:
        widget = TimelineWidget(editor)
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        assert widget.rows() == [TimelineRow("box", None)]

        editor.toggle_layer("box")
        rows = widget.rows()
        assert rows[0] == TimelineRow("box", None)
        assert [row.property for row in rows[1:]] == list(editor.properties)

    def test_track_geometry(self, editor, slide_clip) -> None:
        widget = TimelineWidget(editor)
        widget.resize(HEADER_WIDTH + 1000, 200)
        editor.set_library(AnimationLibrary({"box": slide_clip}))
        assert widget.track_width == 1000
        assert widget.row_at(0) is None


class TestTransportBar:
    """Test transport controls driving the editor."""

    def test_loop_combo_broadcasts(self, editor) -> None:
        bar = TransportBar(editor)
        index = bar.loop_combo.findData(LoopMode.LOOP.value)
        bar.loop_combo.setCurrentIndex(index)
        assert editor.loop_mode is LoopMode.LOOP

    def test_sync_from_editor(self, editor) -> None:
        editor.set_duration(3500)
        bar = TransportBar(editor)
        assert bar.duration_spin.value() == 3500
        assert bar.loop_combo.currentData() == LoopMode.PINGPONG.value
