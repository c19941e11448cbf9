"""Rigid drag of one or more selected blocks."""

import logging
from typing import Optional

from pagecraft.constraints.snapping import SnapThreshold, snapped_drag_delta
from pagecraft.dsl.schema import PageSideLayout, Rect
from pagecraft.engine.units import SNAP_EPSILON, clamp
from pagecraft.interaction.commands import TranslateCommand, apply_command
from pagecraft.interaction.session import (
    CanvasViewport,
    DragSession,
    GestureUpdate,
    Pointer,
    capture_origins,
    has_all_blocks,
    unselected_rects,
    with_origin_rects,
)

logger = logging.getLogger(__name__)


def begin_drag(
    layout: PageSideLayout,
    block_ids: list[str],
    pointer: Pointer,
    viewport: CanvasViewport,
) -> Optional[DragSession]:
    """Capture the selection's origins at pointer-down.

    Ids missing from the layout are skipped; None is returned when none of
    them exist.
    """
    origins = capture_origins(layout, block_ids)
    if not origins:
        logger.debug(f"Drag not started, no block found among {block_ids}")
        return None
    return DragSession(
        block_ids=tuple(origin.id for origin in origins),
        origins=origins,
        start=pointer,
        viewport=viewport,
    )


def drag_limits(origins: list[Rect]) -> tuple[float, float, float, float]:
    """Translation range keeping every origin on the page.

    Returns:
        (min_dx, max_dx, min_dy, max_dy)
    """
    return (
        -min(rect.x for rect in origins),
        min(1.0 - rect.right for rect in origins),
        -min(rect.y for rect in origins),
        min(1.0 - rect.bottom for rect in origins),
    )


def drag_move(
    layout: PageSideLayout,
    session: DragSession,
    pointer: Pointer,
    threshold: Optional[SnapThreshold] = None,
) -> GestureUpdate:
    """Candidate layout for the current pointer position.

    The whole selection moves by one delta: the raw pointer delta clamped to
    the group's page limits, snapped against the unselected blocks and clamped
    again. A guide is only reported when the final delta still honors it.

    Args:
        layout: Current page side.
        session: Session opened by begin_drag.
        pointer: Current pointer position.
        threshold: Snap distance; derived from the viewport when omitted.

    Returns:
        GestureUpdate with the moved blocks and the guide lines.
    """
    if not has_all_blocks(layout, session.block_ids):
        logger.debug("Drag target disappeared, ignoring move")
        return GestureUpdate(layout=layout, applied=False)

    if threshold is None:
        threshold = SnapThreshold.from_pixels(
            width_px=session.viewport.width_px,
            height_px=session.viewport.height_px,
        )

    origins = [origin.rect for origin in session.origins]
    min_dx, max_dx, min_dy, max_dy = drag_limits(origins)

    raw_dx, raw_dy = session.viewport.normalized_delta(session.start, pointer)
    proposed_dx = clamp(raw_dx, min_dx, max_dx)
    proposed_dy = clamp(raw_dy, min_dy, max_dy)

    snap = snapped_drag_delta(
        proposed_dx,
        proposed_dy,
        origins,
        unselected_rects(layout, session.block_ids),
        threshold,
    )

    dx = clamp(snap.dx, min_dx, max_dx)
    dy = clamp(snap.dy, min_dy, max_dy)
    guide_x = snap.guide_x if abs(dx - snap.dx) <= SNAP_EPSILON else None
    guide_y = snap.guide_y if abs(dy - snap.dy) <= SNAP_EPSILON else None

    moved = apply_command(
        with_origin_rects(layout, session.origins),
        TranslateCommand(block_ids=session.block_ids, dx=dx, dy=dy),
    )
    return GestureUpdate(layout=moved, guide_x=guide_x, guide_y=guide_y)
