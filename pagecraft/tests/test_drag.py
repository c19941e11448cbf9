"""Tests for the drag engine."""

import pytest

from pagecraft.constraints.snapping import SnapThreshold
from pagecraft.dsl.schema import PageSideLayout, TextBlock
from pagecraft.interaction.drag import begin_drag, drag_limits, drag_move
from pagecraft.interaction.session import Pointer

THRESHOLD = SnapThreshold(0.02, 0.02)


def _moved(pointer: Pointer, dx_px: float, dy_px: float = 0.0) -> Pointer:
    return Pointer(x=pointer.x + dx_px, y=pointer.y + dy_px)


class TestBeginDrag:
    def test_captures_origins(self, sample_layout, origin_pointer, viewport):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        assert session.block_ids == ("img",)
        assert session.origins[0].rect == sample_layout.get_block("img").rect

    def test_skips_missing_ids(self, sample_layout, origin_pointer, viewport):
        session = begin_drag(sample_layout, ["ghost", "target"], origin_pointer, viewport)
        assert session.block_ids == ("target",)

    def test_nothing_to_drag(self, sample_layout, origin_pointer, viewport):
        assert begin_drag(sample_layout, ["ghost"], origin_pointer, viewport) is None


class TestDragMove:
    """Tests for drag_move."""

    def test_snaps_right_edge_to_neighbour(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        # 9 px on a 600 px canvas is 0.015; the right edge lands 0.005 short of 0.42
        update = drag_move(sample_layout, session, _moved(origin_pointer, 9), THRESHOLD)
        check_invariants(update.layout)

        block = update.layout.get_block("img")
        assert block.x == pytest.approx(0.12)
        assert block.y == pytest.approx(0.1)
        assert update.guide_x == pytest.approx(0.42)
        assert update.guide_y is None
        assert update.applied

    def test_exact_delta_without_snap(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        update = drag_move(sample_layout, session, _moved(origin_pointer, -30, 30), THRESHOLD)
        check_invariants(update.layout)

        block = update.layout.get_block("img")
        assert block.x == pytest.approx(0.05)
        assert block.y == pytest.approx(0.15)
        assert update.guide_x is None
        assert update.guide_y is None

    def test_unselected_blocks_untouched(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        update = drag_move(sample_layout, session, _moved(origin_pointer, 60, 60), THRESHOLD)
        check_invariants(update.layout)
        assert update.layout.get_block("target") == sample_layout.get_block("target")

    def test_clamped_to_page(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        update = drag_move(sample_layout, session, _moved(origin_pointer, -5000, 5000), THRESHOLD)
        check_invariants(update.layout)

        block = update.layout.get_block("img")
        assert block.x == 0
        assert block.y + block.h == pytest.approx(1.0)

    def test_recomputes_from_origin(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        pointer = _moved(origin_pointer, -30, 30)
        first = drag_move(sample_layout, session, pointer, THRESHOLD)
        second = drag_move(first.layout, session, pointer, THRESHOLD)
        check_invariants(second.layout)
        assert second.layout == first.layout

    def test_missing_block_is_noop(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        without = PageSideLayout(blocks=[sample_layout.get_block("target")])

        update = drag_move(without, session, _moved(origin_pointer, 30), THRESHOLD)
        check_invariants(update.layout)
        assert update.layout == without
        assert not update.applied
        assert update.guide_x is None

    def test_default_threshold_from_viewport(self, sample_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(sample_layout, ["img"], origin_pointer, viewport)
        # 8 px default is 0.0133 here; 0.015 short of the target is out of reach
        update = drag_move(sample_layout, session, _moved(origin_pointer, 3), None)
        check_invariants(update.layout)
        assert update.layout.get_block("img").x == pytest.approx(0.105)
        assert update.guide_x is None


class TestGroupDrag:
    """Multi-select drags move every block by one delta."""

    @pytest.fixture
    def group_layout(self) -> PageSideLayout:
        return PageSideLayout(
            blocks=[
                TextBlock(id="a", x=0.7, y=0.1, w=0.29, h=0.1, aspect_ratio=2.9),
                TextBlock(id="b", x=0.1, y=0.1, w=0.1, h=0.1, aspect_ratio=1.0),
                TextBlock(id="other", x=0.125, y=0.8, w=0.1, h=0.1, aspect_ratio=1.0),
            ]
        )

    def test_drag_limits(self, group_layout):
        rects = [group_layout.get_block("a").rect, group_layout.get_block("b").rect]
        min_dx, max_dx, min_dy, max_dy = drag_limits(rects)
        assert min_dx == pytest.approx(-0.1)
        assert max_dx == pytest.approx(0.01)
        assert min_dy == pytest.approx(-0.1)
        assert max_dy == pytest.approx(0.8)

    def test_shared_delta(self, group_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(group_layout, ["a", "b"], origin_pointer, viewport)
        update = drag_move(group_layout, session, _moved(origin_pointer, 120, -30), THRESHOLD)
        check_invariants(update.layout)

        deltas = []
        for block_id in ("a", "b"):
            before = group_layout.get_block(block_id)
            after = update.layout.get_block(block_id)
            deltas.append((after.x - before.x, after.y - before.y))

        assert deltas[0] == pytest.approx(deltas[1])
        assert deltas[0][0] == pytest.approx(0.01)
        assert deltas[0][1] == pytest.approx(-0.05)

    def test_guide_dropped_when_clamp_undoes_snap(self, group_layout, origin_pointer, viewport, check_invariants):
        session = begin_drag(group_layout, ["a", "b"], origin_pointer, viewport)
        # b's anchors want +0.015 more to meet "other", but a already touches the page edge
        update = drag_move(group_layout, session, _moved(origin_pointer, 6), THRESHOLD)
        check_invariants(update.layout)

        assert update.layout.get_block("a").x == pytest.approx(0.71)
        assert update.layout.get_block("b").x == pytest.approx(0.11)
        assert update.guide_x is None
