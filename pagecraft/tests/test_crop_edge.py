"""Tests for edge handles: crop for image/svg blocks, plain resize otherwise."""

import pytest

from pagecraft.constraints.snapping import SnapThreshold
from pagecraft.dsl.schema import CropEdge, ImageBlock, PageSideLayout, Rect, TextBlock, VisualCrop
from pagecraft.interaction.crop_edge import (
    base_aspect_ratio,
    begin_crop_edge,
    build_dragged_crop,
    crop_candidate,
    crop_edge_move,
    end_crop_edge,
    rect_for_extent,
    solve_crop_for_extent,
)
from pagecraft.interaction.session import CanvasViewport, CropEdgeSession, Pointer

NO_SNAP = SnapThreshold(0.0, 0.0)


def _session(edge: CropEdge, crop: VisualCrop = VisualCrop(left=0.25)) -> CropEdgeSession:
    """Edge session on a 0.3 x 0.2 image at (0.2, 0.2) showing a 2:1 source."""
    return CropEdgeSession(
        block_id="cropped",
        edge=edge,
        start=Pointer(x=300, y=300),
        viewport=CanvasViewport(width_px=600, height_px=600),
        start_rect=Rect(x=0.2, y=0.2, w=0.3, h=0.2),
        start_crop=crop,
        start_aspect_ratio=1.5,
        croppable=True,
    )


class TestInverseCropFormulas:
    """Each edge's closed-form solution reproduces the requested extent."""

    def test_base_ratio(self):
        assert base_aspect_ratio(_session(CropEdge.LEFT)) == pytest.approx(2.0)

    def test_left_edge(self):
        session = _session(CropEdge.LEFT)
        crop = solve_crop_for_extent(session, 0.24)
        assert crop.left == pytest.approx(0.4)
        assert crop.right == 0

        candidate = crop_candidate(session, crop)
        assert candidate.rect.w == pytest.approx(0.24)
        assert candidate.rect.x + candidate.rect.w == pytest.approx(0.5)

    def test_right_edge(self):
        session = _session(CropEdge.RIGHT)
        crop = solve_crop_for_extent(session, 0.24)
        assert crop.right == pytest.approx(0.15)
        assert crop.left == pytest.approx(0.25)

        candidate = crop_candidate(session, crop)
        assert candidate.rect.x == pytest.approx(0.2)
        assert candidate.rect.w == pytest.approx(0.24)

    def test_top_edge(self):
        session = _session(CropEdge.TOP)
        crop = solve_crop_for_extent(session, 0.15)
        assert crop.top == pytest.approx(0.25)

        candidate = crop_candidate(session, crop)
        assert candidate.rect.h == pytest.approx(0.15)
        assert candidate.rect.y + candidate.rect.h == pytest.approx(0.4)
        assert candidate.aspect_ratio == pytest.approx(2.0)

    def test_bottom_edge(self):
        session = _session(CropEdge.BOTTOM)
        crop = solve_crop_for_extent(session, 0.15)
        assert crop.bottom == pytest.approx(0.25)

        candidate = crop_candidate(session, crop)
        assert candidate.rect.y == pytest.approx(0.2)
        assert candidate.rect.h == pytest.approx(0.15)

    def test_unreachable_extent_is_clamped(self):
        # growing past the uncropped source would need a negative crop
        crop = solve_crop_for_extent(_session(CropEdge.LEFT), 0.9)
        assert crop.left == 0


class TestBuildDraggedCrop:
    def test_left_edge_scaled_by_remaining_width(self):
        # block is 180 px wide, 30 px trims a sixth of the visible 75%
        crop = build_dragged_crop(_session(CropEdge.LEFT), Pointer(x=330, y=300))
        assert crop.left == pytest.approx(0.375)

    def test_right_edge_is_reversed(self):
        crop = build_dragged_crop(_session(CropEdge.RIGHT), Pointer(x=282, y=300))
        assert crop.right == pytest.approx(0.075)

    def test_bottom_edge(self):
        crop = build_dragged_crop(_session(CropEdge.BOTTOM, VisualCrop()), Pointer(x=300, y=288))
        assert crop.bottom == pytest.approx(0.1)

    def test_clamped_against_opposite_edge(self):
        crop = build_dragged_crop(_session(CropEdge.LEFT, VisualCrop(right=0.3)), Pointer(x=5000, y=300))
        assert crop.left == pytest.approx(0.65)
        assert crop.left + crop.right <= 0.95 + 1e-12

    def test_never_negative(self):
        crop = build_dragged_crop(_session(CropEdge.LEFT), Pointer(x=-5000, y=300))
        assert crop.left == 0


class TestRectForExtent:
    def test_left_keeps_right_edge(self):
        rect = rect_for_extent(Rect(x=0.2, y=0.2, w=0.3, h=0.2), CropEdge.LEFT, 0.9)
        assert rect.x == 0
        assert rect.w == pytest.approx(0.5)

    def test_minimum_size(self):
        rect = rect_for_extent(Rect(x=0.2, y=0.2, w=0.3, h=0.2), CropEdge.BOTTOM, 0.001)
        assert rect.h == pytest.approx(0.05)
        assert rect.y == pytest.approx(0.2)

    def test_right_stays_on_page(self):
        rect = rect_for_extent(Rect(x=0.8, y=0.2, w=0.1, h=0.2), CropEdge.RIGHT, 0.5)
        assert rect.w == pytest.approx(0.2)


class TestCropEdgeMove:
    """Tests for crop_edge_move on croppable blocks."""

    @pytest.fixture
    def layout(self, cropped_image_block) -> PageSideLayout:
        return PageSideLayout(blocks=[cropped_image_block])

    def test_begin_captures_state(self, layout, origin_pointer, viewport):
        session = begin_crop_edge(layout, "cropped", "left", origin_pointer, viewport)
        assert session.edge == CropEdge.LEFT
        assert session.croppable
        assert session.start_crop == VisualCrop(left=0.25)
        assert session.start_aspect_ratio == 1.5
        assert session.fixed_aspect_ratio is None

    def test_begin_missing_block(self, layout, origin_pointer, viewport):
        assert begin_crop_edge(layout, "ghost", CropEdge.LEFT, origin_pointer, viewport) is None

    def test_crop_moves_edge(self, layout, origin_pointer, viewport, check_invariants):
        session = begin_crop_edge(layout, "cropped", CropEdge.LEFT, origin_pointer, viewport)
        update = crop_edge_move(layout, session, Pointer(x=330, y=300), NO_SNAP)

        block = update.layout.get_block("cropped")
        assert block.crop.left == pytest.approx(0.375)
        assert block.aspect_ratio == pytest.approx(1.25)
        assert block.w == pytest.approx(0.25)
        assert block.x == pytest.approx(0.25)
        assert block.h == pytest.approx(0.2)
        assert update.guide_x is None
        check_invariants(update.layout)

    def test_snaps_edge_to_neighbour(self, cropped_image_block, origin_pointer, viewport, check_invariants):
        neighbour = TextBlock(id="n", x=0.07, y=0.7, w=0.2, h=0.1, aspect_ratio=2.0)
        layout = PageSideLayout(blocks=[cropped_image_block, neighbour])
        session = begin_crop_edge(layout, "cropped", CropEdge.LEFT, origin_pointer, viewport)

        # unsnapped left edge would sit at 0.25, 0.02 short of the neighbour's right edge
        update = crop_edge_move(layout, session, Pointer(x=330, y=300), SnapThreshold(0.03, 0.03))
        check_invariants(update.layout)

        block = update.layout.get_block("cropped")
        assert block.x == pytest.approx(0.27)
        assert block.x + block.w == pytest.approx(0.5)
        assert block.crop.left == pytest.approx(0.425)
        assert update.guide_x == pytest.approx(0.27)
        assert update.guide_y is None

    def test_circle_keeps_square_ratio(self, origin_pointer, viewport, check_invariants):
        circle = ImageBlock(id="c", x=0.2, y=0.2, w=0.2, h=0.2, aspect_ratio=1.0, shape="circle")
        layout = PageSideLayout(blocks=[circle])
        session = begin_crop_edge(layout, "c", CropEdge.RIGHT, origin_pointer, viewport)
        update = crop_edge_move(layout, session, Pointer(x=270, y=300), NO_SNAP)
        check_invariants(update.layout)

        block = update.layout.get_block("c")
        assert block.aspect_ratio == 1.0
        assert block.w == pytest.approx(0.2)
        assert block.crop.right > 0

    def test_missing_block_is_noop(self, layout, origin_pointer, viewport):
        session = begin_crop_edge(layout, "cropped", CropEdge.LEFT, origin_pointer, viewport)
        empty = PageSideLayout()
        update = crop_edge_move(empty, session, Pointer(x=330, y=300))
        assert update.layout == empty
        assert not update.applied


class TestPlainResize:
    """Edges of non-croppable blocks move the box only."""

    @pytest.fixture
    def layout(self) -> PageSideLayout:
        return PageSideLayout(
            blocks=[
                TextBlock(id="t", x=0.1, y=0.1, w=0.2, h=0.1, aspect_ratio=2.0),
                TextBlock(id="target", x=0.42, y=0.6, w=0.2, h=0.1, aspect_ratio=2.0),
            ]
        )

    def test_right_edge(self, layout, origin_pointer, viewport, check_invariants):
        session = begin_crop_edge(layout, "t", CropEdge.RIGHT, origin_pointer, viewport)
        assert not session.croppable
        update = crop_edge_move(layout, session, Pointer(x=360, y=300), NO_SNAP)
        check_invariants(update.layout)

        block = update.layout.get_block("t")
        assert block.x == pytest.approx(0.1)
        assert block.w == pytest.approx(0.3)
        assert block.aspect_ratio == pytest.approx(3.0)

    def test_left_edge_clamped_to_minimum(self, layout, origin_pointer, viewport, check_invariants):
        session = begin_crop_edge(layout, "t", CropEdge.LEFT, origin_pointer, viewport)
        update = crop_edge_move(layout, session, Pointer(x=900, y=300), NO_SNAP)
        check_invariants(update.layout)

        block = update.layout.get_block("t")
        assert block.w == pytest.approx(0.05)
        assert block.x + block.w == pytest.approx(0.3)

    def test_top_edge_clamped_to_page(self, layout, origin_pointer, viewport, check_invariants):
        session = begin_crop_edge(layout, "t", CropEdge.TOP, origin_pointer, viewport)
        update = crop_edge_move(layout, session, Pointer(x=300, y=-900), NO_SNAP)
        check_invariants(update.layout)

        block = update.layout.get_block("t")
        assert block.y == 0
        assert block.h == pytest.approx(0.2)

    def test_snaps_to_neighbour(self, layout, origin_pointer, viewport, check_invariants):
        session = begin_crop_edge(layout, "t", CropEdge.RIGHT, origin_pointer, viewport)
        # 66 px puts the right edge at 0.41
        update = crop_edge_move(layout, session, Pointer(x=366, y=300), SnapThreshold(0.02, 0.02))
        check_invariants(update.layout)

        block = update.layout.get_block("t")
        assert block.x + block.w == pytest.approx(0.42)
        assert update.guide_x == pytest.approx(0.42)


class TestEndCropEdge:
    def test_degenerate_crop_stored_as_absent(self, origin_pointer, viewport):
        image = ImageBlock(id="i", x=0.2, y=0.2, w=0.3, h=0.2, aspect_ratio=1.5)
        layout = PageSideLayout(blocks=[image])
        session = begin_crop_edge(layout, "i", CropEdge.LEFT, origin_pointer, viewport)
        update = crop_edge_move(layout, session, origin_pointer, NO_SNAP)

        result = end_crop_edge(update.layout, session, update)
        assert result.get_block("i").crop is None

    def test_stores_last_candidate(self, cropped_image_block, origin_pointer, viewport):
        layout = PageSideLayout(blocks=[cropped_image_block])
        session = begin_crop_edge(layout, "cropped", CropEdge.LEFT, origin_pointer, viewport)
        update = crop_edge_move(layout, session, Pointer(x=330, y=300), NO_SNAP)

        result = end_crop_edge(layout, session, update)
        assert result.get_block("cropped") == update.layout.get_block("cropped")

    def test_without_update(self, cropped_image_block, origin_pointer, viewport):
        layout = PageSideLayout(blocks=[cropped_image_block])
        session = begin_crop_edge(layout, "cropped", CropEdge.LEFT, origin_pointer, viewport)
        assert end_crop_edge(layout, session, None) == layout

    def test_block_removed_mid_gesture(self, cropped_image_block, origin_pointer, viewport):
        layout = PageSideLayout(blocks=[cropped_image_block])
        session = begin_crop_edge(layout, "cropped", CropEdge.LEFT, origin_pointer, viewport)
        update = crop_edge_move(layout, session, Pointer(x=330, y=300), NO_SNAP)

        empty = PageSideLayout()
        assert end_crop_edge(empty, session, update) == empty
