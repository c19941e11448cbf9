"""Uniform resize of the selection from its bottom-right corner handle."""

import logging
import math
from typing import Optional

from pagecraft.constraints.snapping import SnapThreshold, snapped_uniform_resize_scale
from pagecraft.dsl.schema import PageSideLayout, Rect
from pagecraft.engine.units import MIN_INTERACTIVE_BLOCK_SIZE
from pagecraft.interaction.commands import ScaleCommand, apply_command
from pagecraft.interaction.session import (
    CanvasViewport,
    GestureUpdate,
    Pointer,
    ResizeSession,
    capture_origins,
    has_all_blocks,
    unselected_rects,
    with_origin_rects,
)

logger = logging.getLogger(__name__)


def begin_resize(
    layout: PageSideLayout,
    block_ids: list[str],
    pointer: Pointer,
    viewport: CanvasViewport,
) -> Optional[ResizeSession]:
    """Capture origins and the selection bounds at pointer-down."""
    origins = capture_origins(layout, block_ids)
    if not origins:
        logger.debug(f"Resize not started, no block found among {block_ids}")
        return None
    return ResizeSession(
        block_ids=tuple(origin.id for origin in origins),
        origins=origins,
        bounds=Rect.union([origin.rect for origin in origins]),
        start=pointer,
        viewport=viewport,
    )


def resize_scale_limits(bounds: Rect, origins: list[Rect]) -> tuple[float, float]:
    """Scale range for the selection.

    The lower limit keeps every block at least MIN_INTERACTIVE_BLOCK_SIZE on
    both axes; the upper limit keeps the bounds on the page.

    Returns:
        (min_scale, max_scale)
    """
    max_scale = math.inf
    if bounds.w > 0:
        max_scale = min(max_scale, (1.0 - bounds.x) / bounds.w)
    if bounds.h > 0:
        max_scale = min(max_scale, (1.0 - bounds.y) / bounds.h)
    if not math.isfinite(max_scale):
        max_scale = 1.0

    min_scale = 0.0
    for rect in origins:
        if rect.w > 0:
            min_scale = max(min_scale, MIN_INTERACTIVE_BLOCK_SIZE / rect.w)
        if rect.h > 0:
            min_scale = max(min_scale, MIN_INTERACTIVE_BLOCK_SIZE / rect.h)

    return min_scale, max_scale


def desired_resize_scale(bounds: Rect, dx: float, dy: float) -> float:
    """Scale implied by the pointer; the axis that grew (or shrank) more wins."""
    scale_x = (bounds.w + dx) / bounds.w if bounds.w > 0 else 1.0
    scale_y = (bounds.h + dy) / bounds.h if bounds.h > 0 else 1.0
    return scale_x if abs(scale_x - 1.0) >= abs(scale_y - 1.0) else scale_y


def resize_move(
    layout: PageSideLayout,
    session: ResizeSession,
    pointer: Pointer,
    threshold: Optional[SnapThreshold] = None,
) -> GestureUpdate:
    """Candidate layout for the current pointer position.

    Args:
        layout: Current page side.
        session: Session opened by begin_resize.
        pointer: Current pointer position.
        threshold: Snap distance; derived from the viewport when omitted.

    Returns:
        GestureUpdate with every selected block scaled about the bounds'
        top-left corner.
    """
    if not has_all_blocks(layout, session.block_ids):
        logger.debug("Resize target disappeared, ignoring move")
        return GestureUpdate(layout=layout, applied=False)

    if threshold is None:
        threshold = SnapThreshold.from_pixels(
            width_px=session.viewport.width_px,
            height_px=session.viewport.height_px,
        )

    bounds = session.bounds
    origins = [origin.rect for origin in session.origins]
    min_scale, max_scale = resize_scale_limits(bounds, origins)

    dx, dy = session.viewport.normalized_delta(session.start, pointer)
    snap = snapped_uniform_resize_scale(
        desired_resize_scale(bounds, dx, dy),
        min_scale,
        max_scale,
        bounds,
        unselected_rects(layout, session.block_ids),
        threshold,
    )
    logger.debug(f"Resize scale {snap.scale:.4f} in [{min_scale:.4f}, {max_scale:.4f}]")

    resized = apply_command(
        with_origin_rects(layout, session.origins),
        ScaleCommand(
            block_ids=session.block_ids,
            factor=snap.scale,
            anchor_x=bounds.x,
            anchor_y=bounds.y,
        ),
    )
    return GestureUpdate(layout=resized, guide_x=snap.guide_x, guide_y=snap.guide_y)
