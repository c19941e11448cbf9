"""Edge handle interaction for a single block.

Image and svg blocks crop: moving an edge trims or restores source content on
that side and the box follows the cropped aspect ratio, keeping the opposite
edge and the other dimension fixed. Every other block type plain-resizes: the
dragged edge moves and the opposite edge stays put.

Snapping works backwards from each nearby target anchor. For the dragged edge
and the box center, the extent that would put that anchor on the target is
solved in closed form (and, for croppable blocks, the crop fraction that yields
that extent). The closest candidate whose solved box really lands on its
target wins.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from pagecraft.constraints.snapping import SnapThreshold, collect_anchors
from pagecraft.dsl.schema import CropEdge, ImageBlock, PageSideLayout, Rect, SvgBlock, VisualCrop
from pagecraft.engine.aspect_ratio import get_block_aspect_ratio, normalize_aspect_ratio
from pagecraft.engine.units import MIN_INTERACTIVE_BLOCK_SIZE, SNAP_EPSILON, clamp
from pagecraft.engine.visual_crop import (
    MIN_VISUAL_CROP_REMAINING_RATIO,
    apply_visual_crop_to_aspect_ratio,
    derive_visual_crop_base_aspect_ratio,
    get_visual_crop_remaining_ratios,
    normalize_visual_crop,
)
from pagecraft.interaction.commands import SetCropCommand, SetRectCommand, apply_command
from pagecraft.interaction.session import (
    CanvasViewport,
    CropEdgeSession,
    GestureUpdate,
    Pointer,
    unselected_rects,
)

logger = logging.getLogger(__name__)

_OPPOSITE_EDGE = {
    CropEdge.LEFT: CropEdge.RIGHT,
    CropEdge.RIGHT: CropEdge.LEFT,
    CropEdge.TOP: CropEdge.BOTTOM,
    CropEdge.BOTTOM: CropEdge.TOP,
}


@dataclass(frozen=True)
class EdgeCandidate:
    """Box (and crop) produced for one pointer position or snap target."""

    rect: Rect
    crop: Optional[VisualCrop] = None
    aspect_ratio: Optional[float] = None
    guide: Optional[float] = None


def is_croppable(block: object) -> bool:
    """True for block types whose edges crop instead of resize."""
    return isinstance(block, (ImageBlock, SvgBlock))


def begin_crop_edge(
    layout: PageSideLayout,
    block_id: str,
    edge: Union[CropEdge, str],
    pointer: Pointer,
    viewport: CanvasViewport,
) -> Optional[CropEdgeSession]:
    """Capture the block's box, crop and ratio at pointer-down."""
    block = layout.get_block(block_id)
    if block is None:
        logger.debug(f"Edge gesture not started, block {block_id} not found")
        return None

    croppable = is_croppable(block)
    fixed_ratio = 1.0 if isinstance(block, ImageBlock) and block.shape == "circle" else None
    return CropEdgeSession(
        block_id=block.id,
        edge=CropEdge(edge),
        start=pointer,
        viewport=viewport,
        start_rect=block.rect,
        start_crop=normalize_visual_crop(block.crop) if croppable else VisualCrop(),
        start_aspect_ratio=get_block_aspect_ratio(block),
        croppable=croppable,
        fixed_aspect_ratio=fixed_ratio,
    )


# ============================================================================
# Box geometry
# ============================================================================


def fixed_edge_position(rect: Rect, edge: CropEdge) -> float:
    """Coordinate of the edge opposite to the dragged one."""
    if edge == CropEdge.LEFT:
        return rect.right
    if edge == CropEdge.RIGHT:
        return rect.x
    if edge == CropEdge.TOP:
        return rect.bottom
    return rect.y


def moving_anchors(rect: Rect, edge: CropEdge) -> tuple[float, float]:
    """(dragged edge, center) of rect on the dragged axis."""
    if edge == CropEdge.LEFT:
        return rect.x, rect.center_x
    if edge == CropEdge.RIGHT:
        return rect.right, rect.center_x
    if edge == CropEdge.TOP:
        return rect.y, rect.center_y
    return rect.bottom, rect.center_y


def rect_for_extent(start_rect: Rect, edge: CropEdge, extent: float) -> Rect:
    """Box whose dragged-axis size is extent, with the opposite edge fixed.

    The extent is clamped to the interactive minimum and to the page.
    """
    if edge == CropEdge.LEFT:
        w = clamp(extent, MIN_INTERACTIVE_BLOCK_SIZE, start_rect.right)
        return Rect(x=start_rect.right - w, y=start_rect.y, w=w, h=start_rect.h)
    if edge == CropEdge.RIGHT:
        w = clamp(extent, MIN_INTERACTIVE_BLOCK_SIZE, 1.0 - start_rect.x)
        return Rect(x=start_rect.x, y=start_rect.y, w=w, h=start_rect.h)
    if edge == CropEdge.TOP:
        h = clamp(extent, MIN_INTERACTIVE_BLOCK_SIZE, start_rect.bottom)
        return Rect(x=start_rect.x, y=start_rect.bottom - h, w=start_rect.w, h=h)
    h = clamp(extent, MIN_INTERACTIVE_BLOCK_SIZE, 1.0 - start_rect.y)
    return Rect(x=start_rect.x, y=start_rect.y, w=start_rect.w, h=h)


def plain_resize_extent(start_rect: Rect, edge: CropEdge, dx: float, dy: float) -> float:
    """Unclamped dragged-axis size after moving the edge by (dx, dy)."""
    if edge == CropEdge.LEFT:
        return start_rect.w - dx
    if edge == CropEdge.RIGHT:
        return start_rect.w + dx
    if edge == CropEdge.TOP:
        return start_rect.h - dy
    return start_rect.h + dy


# ============================================================================
# Crop algebra
# ============================================================================


def _with_edge_value(crop: VisualCrop, edge: CropEdge, value: float) -> VisualCrop:
    opposite = getattr(crop, _OPPOSITE_EDGE[edge].value)
    limit = max(0.0, 1.0 - opposite - MIN_VISUAL_CROP_REMAINING_RATIO)
    return normalize_visual_crop(crop.model_copy(update={edge.value: clamp(value, 0.0, limit)}))


def build_dragged_crop(session: CropEdgeSession, pointer: Pointer) -> VisualCrop:
    """Crop after moving the session's edge to the pointer.

    Pointer travel is measured against the block's on-screen size and scaled by
    the visible fraction on that axis, so a pixel of travel trims the same
    amount of displayed content however much is already cropped.
    """
    crop = session.start_crop
    remaining = get_visual_crop_remaining_ratios(crop)
    edge = session.edge

    if edge.is_horizontal:
        block_px = max(1.0, session.start_rect.w * session.viewport.width_px)
        delta = (pointer.x - session.start.x) / block_px * remaining.width_ratio
    else:
        block_px = max(1.0, session.start_rect.h * session.viewport.height_px)
        delta = (pointer.y - session.start.y) / block_px * remaining.height_ratio

    if edge in (CropEdge.RIGHT, CropEdge.BOTTOM):
        delta = -delta
    return _with_edge_value(crop, edge, getattr(crop, edge.value) + delta)


def base_aspect_ratio(session: CropEdgeSession) -> float:
    """Uncropped source ratio recovered from the starting block."""
    return derive_visual_crop_base_aspect_ratio(session.start_aspect_ratio, session.start_crop)


def target_aspect_ratio(session: CropEdgeSession, crop: VisualCrop) -> float:
    """Box ratio that shows crop without distortion."""
    if session.fixed_aspect_ratio is not None:
        return session.fixed_aspect_ratio
    return apply_visual_crop_to_aspect_ratio(base_aspect_ratio(session), crop)


def extent_for_ratio(session: CropEdgeSession, ratio: float) -> float:
    """Dragged-axis size that gives ratio while the other dimension is held."""
    rect = session.start_rect
    if session.edge.is_horizontal:
        return rect.h * ratio
    return rect.w / ratio


def solve_crop_for_extent(session: CropEdgeSession, extent: float) -> VisualCrop:
    """Crop on the dragged edge that makes the box extent long on its axis.

    With the base ratio B and the visible fractions (rw, rh), the box ratio is
    B * rw / rh. Holding the other dimension and the opposite crop fraction:

    - left / right: w = H * B * rw / rh, so rw = w * rh / (H * B)
    - top / bottom: h = W * rh / (B * rw), so rh = h * B * rw / W

    and the dragged fraction is 1 - opposite - visible.
    """
    crop = session.start_crop
    base = base_aspect_ratio(session)
    remaining = get_visual_crop_remaining_ratios(crop)
    rect = session.start_rect

    if session.edge.is_horizontal:
        visible = extent * remaining.height_ratio / (rect.h * base)
    else:
        visible = extent * base * remaining.width_ratio / rect.w

    opposite = getattr(crop, _OPPOSITE_EDGE[session.edge].value)
    return _with_edge_value(crop, session.edge, 1.0 - opposite - visible)


def crop_candidate(session: CropEdgeSession, crop: VisualCrop, guide: Optional[float] = None) -> EdgeCandidate:
    """Box and ratio that display crop."""
    ratio = target_aspect_ratio(session, crop)
    rect = rect_for_extent(session.start_rect, session.edge, extent_for_ratio(session, ratio))
    return EdgeCandidate(rect=rect, crop=crop, aspect_ratio=normalize_aspect_ratio(ratio), guide=guide)


# ============================================================================
# Snapping
# ============================================================================


def _candidate_for_extent(session: CropEdgeSession, extent: float, guide: float) -> EdgeCandidate:
    if session.croppable:
        return crop_candidate(session, solve_crop_for_extent(session, extent), guide)
    return EdgeCandidate(rect=rect_for_extent(session.start_rect, session.edge, extent), guide=guide)


def snap_edge_candidate(
    session: CropEdgeSession,
    proposed: EdgeCandidate,
    target_anchors: list[float],
    threshold: float,
) -> EdgeCandidate:
    """Snap the proposed box against the target anchors on the dragged axis.

    Args:
        session: Active edge session.
        proposed: Unsnapped candidate for the current pointer.
        target_anchors: Anchors of every other block on the dragged axis.
        threshold: Snap distance on that axis.

    Returns:
        The snapped candidate, or proposed when nothing lands on a target.
    """
    if threshold <= 0 or not target_anchors:
        return proposed

    edge = session.edge
    fixed = fixed_edge_position(session.start_rect, edge)
    sign = -1.0 if edge in (CropEdge.LEFT, CropEdge.TOP) else 1.0
    edge_anchor, center_anchor = moving_anchors(proposed.rect, edge)

    # (distance, target, anchor index, extent)
    options: list[tuple[float, float, int, float]] = []
    for target in target_anchors:
        for index, (moving, factor) in enumerate(((edge_anchor, 1.0), (center_anchor, 2.0))):
            distance = abs(target - moving)
            extent = factor * sign * (target - fixed)
            if distance <= threshold and extent > 0:
                options.append((distance, target, index, extent))

    options.sort(key=lambda option: option[0])
    for _, target, index, extent in options:
        candidate = _candidate_for_extent(session, extent, target)
        landed = moving_anchors(candidate.rect, edge)[index]
        if abs(landed - target) <= SNAP_EPSILON:
            return candidate

    return proposed


# ============================================================================
# Gesture
# ============================================================================


def crop_edge_move(
    layout: PageSideLayout,
    session: CropEdgeSession,
    pointer: Pointer,
    threshold: Optional[SnapThreshold] = None,
) -> GestureUpdate:
    """Candidate layout for the current pointer position.

    Args:
        layout: Current page side.
        session: Session opened by begin_crop_edge.
        pointer: Current pointer position.
        threshold: Snap distance; derived from the viewport when omitted.

    Returns:
        GestureUpdate with the edited block and at most one guide on the
        dragged axis.
    """
    if layout.get_block(session.block_id) is None:
        logger.debug(f"Edge target {session.block_id} disappeared, ignoring move")
        return GestureUpdate(layout=layout, applied=False)

    if threshold is None:
        threshold = SnapThreshold.from_pixels(
            width_px=session.viewport.width_px,
            height_px=session.viewport.height_px,
        )

    edge = session.edge
    if session.croppable:
        proposed = crop_candidate(session, build_dragged_crop(session, pointer))
    else:
        dx, dy = session.viewport.normalized_delta(session.start, pointer)
        extent = plain_resize_extent(session.start_rect, edge, dx, dy)
        proposed = EdgeCandidate(rect=rect_for_extent(session.start_rect, edge, extent))

    candidate = proposed
    if session.fixed_aspect_ratio is None:
        targets = collect_anchors(
            unselected_rects(layout, (session.block_id,)),
            horizontal=edge.is_horizontal,
        )
        axis_threshold = threshold.x if edge.is_horizontal else threshold.y
        candidate = snap_edge_candidate(session, proposed, targets, axis_threshold)

    if candidate.guide is not None:
        logger.debug(f"Edge {edge.value} of {session.block_id} snapped to {candidate.guide:.4f}")

    updated = apply_command(layout, _command_for(session, candidate))
    return GestureUpdate(
        layout=updated,
        guide_x=candidate.guide if edge.is_horizontal else None,
        guide_y=None if edge.is_horizontal else candidate.guide,
    )


def _command_for(session: CropEdgeSession, candidate: EdgeCandidate) -> Union[SetCropCommand, SetRectCommand]:
    if session.croppable:
        return SetCropCommand(
            block_id=session.block_id,
            crop=candidate.crop,
            rect=candidate.rect,
            aspect_ratio=candidate.aspect_ratio,
        )
    return SetRectCommand(block_id=session.block_id, rect=candidate.rect)


def end_crop_edge(
    layout: PageSideLayout,
    session: CropEdgeSession,
    update: Optional[GestureUpdate],
) -> PageSideLayout:
    """Store the last candidate on the block.

    The candidate is discarded when no move produced one or the block was
    removed during the gesture. Degenerate crops are stored as absent.
    """
    if update is None or not update.applied:
        return layout
    if layout.get_block(session.block_id) is None:
        logger.debug(f"Edge target {session.block_id} removed before release, discarding")
        return layout

    block = update.layout.get_block(session.block_id)
    if block is None:
        return layout

    if session.croppable and is_croppable(block):
        command = SetCropCommand(
            block_id=block.id,
            crop=block.crop,
            rect=block.rect,
            aspect_ratio=block.aspect_ratio,
        )
        return apply_command(layout, command)
    return apply_command(layout, SetRectCommand(block_id=block.id, rect=block.rect))
