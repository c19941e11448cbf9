"""Alignment snapping shared by the drag, resize and crop-edge engines.

Every rectangle contributes three anchors per axis (left/center/right,
top/center/bottom). The moving anchors of the manipulated block(s) are matched
against the anchors of every other block; the closest pair within the axis
threshold wins and its target becomes the guide line to render.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from pagecraft.dsl.schema import Rect
from pagecraft.engine.units import DEFAULT_SNAP_THRESHOLD_PX, clamp


@dataclass(frozen=True)
class SnapThreshold:
    """Per-axis snap distance in normalized units."""

    x: float
    y: float

    @classmethod
    def from_pixels(
        cls,
        threshold_px: float = DEFAULT_SNAP_THRESHOLD_PX,
        width_px: float = 1.0,
        height_px: float = 1.0,
    ) -> "SnapThreshold":
        """Convert a fixed pixel distance into normalized thresholds.

        Args:
            threshold_px: Snap distance on screen.
            width_px: Width of the safe area on screen.
            height_px: Height of the safe area on screen.
        """
        return cls(
            x=threshold_px / width_px if width_px > 0 else 0.0,
            y=threshold_px / height_px if height_px > 0 else 0.0,
        )


@dataclass(frozen=True)
class SnapMatch:
    """Closest (moving, target) pair."""

    offset: float  # target - moving
    target: float


@dataclass(frozen=True)
class AxisSnap:
    """Snap outcome for one axis."""

    offset: float = 0.0
    guide: Optional[float] = None

    @property
    def snapped(self) -> bool:
        """True when an anchor was captured."""
        return self.guide is not None


@dataclass(frozen=True)
class DragSnap:
    """Snapped translation."""

    dx: float
    dy: float
    guide_x: Optional[float] = None
    guide_y: Optional[float] = None


@dataclass(frozen=True)
class ResizeSnap:
    """Snapped uniform scale."""

    scale: float
    guide_x: Optional[float] = None
    guide_y: Optional[float] = None


def horizontal_anchors(rect: Rect, dx: float = 0.0) -> list[float]:
    """Left, center and right of rect shifted by dx."""
    left = rect.x + dx
    return [left, left + rect.w * 0.5, left + rect.w]


def vertical_anchors(rect: Rect, dy: float = 0.0) -> list[float]:
    """Top, center and bottom of rect shifted by dy."""
    top = rect.y + dy
    return [top, top + rect.h * 0.5, top + rect.h]


def collect_anchors(rects: Iterable[Rect], horizontal: bool) -> list[float]:
    """Anchors of every rect on one axis."""
    anchors: list[float] = []
    for rect in rects:
        anchors.extend(horizontal_anchors(rect) if horizontal else vertical_anchors(rect))
    return anchors


def closest_snap_match(
    moving_anchors: Sequence[float],
    target_anchors: Sequence[float],
    threshold: float,
) -> Optional[SnapMatch]:
    """Find the closest moving/target pair within threshold.

    Ties keep the first pair found.

    Args:
        moving_anchors: Anchors of the proposal being manipulated.
        target_anchors: Anchors of the stationary blocks.
        threshold: Maximum accepted distance.

    Returns:
        The best match, or None if no pair is close enough.
    """
    if not moving_anchors or not target_anchors or threshold <= 0:
        return None

    best: Optional[SnapMatch] = None
    best_distance = math.inf

    for moving in moving_anchors:
        for target in target_anchors:
            offset = target - moving
            distance = abs(offset)
            if distance <= threshold and distance < best_distance:
                best_distance = distance
                best = SnapMatch(offset=offset, target=target)

    return best


def snap_axis(
    moving_anchors: Sequence[float],
    target_anchors: Sequence[float],
    threshold: float,
) -> AxisSnap:
    """Offset and guide for one axis; zero offset and no guide when nothing is close."""
    match = closest_snap_match(moving_anchors, target_anchors, threshold)
    if match is None:
        return AxisSnap()
    return AxisSnap(offset=match.offset, guide=match.target)


def closest_guide(
    moving_anchors: Sequence[float],
    target_anchors: Sequence[float],
    threshold: float,
) -> Optional[float]:
    """Target coordinate of the closest match, if any."""
    match = closest_snap_match(moving_anchors, target_anchors, threshold)
    return match.target if match else None


def snapped_drag_delta(
    proposed_dx: float,
    proposed_dy: float,
    moving_rects: Sequence[Rect],
    target_rects: Sequence[Rect],
    threshold: SnapThreshold,
) -> DragSnap:
    """Snap a group translation against the stationary blocks.

    Args:
        proposed_dx: Translation on X before snapping.
        proposed_dy: Translation on Y before snapping.
        moving_rects: Origin rects of the moving blocks.
        target_rects: Current rects of every other block.
        threshold: Per-axis snap distance.

    Returns:
        DragSnap with the adjusted delta and the guide lines.
    """
    if not moving_rects or not target_rects:
        return DragSnap(dx=proposed_dx, dy=proposed_dy)

    moving_x: list[float] = []
    moving_y: list[float] = []
    for rect in moving_rects:
        moving_x.extend(horizontal_anchors(rect, proposed_dx))
        moving_y.extend(vertical_anchors(rect, proposed_dy))

    snap_x = snap_axis(moving_x, collect_anchors(target_rects, horizontal=True), threshold.x)
    snap_y = snap_axis(moving_y, collect_anchors(target_rects, horizontal=False), threshold.y)

    return DragSnap(
        dx=proposed_dx + snap_x.offset,
        dy=proposed_dy + snap_y.offset,
        guide_x=snap_x.guide,
        guide_y=snap_y.guide,
    )


def _closest_scale_candidate(
    desired_scale: float,
    candidates: Sequence[float],
    min_scale: float,
    max_scale: float,
) -> Optional[float]:
    best: Optional[float] = None
    best_delta = math.inf

    for candidate in candidates:
        if not math.isfinite(candidate):
            continue
        clamped = clamp(candidate, min_scale, max_scale)
        delta = abs(clamped - desired_scale)
        if delta < best_delta:
            best_delta = delta
            best = clamped

    return best


def snapped_uniform_resize_scale(
    desired_scale: float,
    min_scale: float,
    max_scale: float,
    bounds: Rect,
    target_rects: Sequence[Rect],
    threshold: SnapThreshold,
) -> ResizeSnap:
    """Snap a uniform scale of the selection bounds (anchored at top-left).

    Candidates are the scales that put the bounds' right/bottom edge or center
    exactly on a target anchor. Only the bounding box is considered, not the
    individual blocks inside it.

    Args:
        desired_scale: Scale implied by the pointer.
        min_scale: Smallest scale keeping every block above the minimum size.
        max_scale: Largest scale keeping the bounds on the page.
        bounds: Selection bounds at gesture start.
        target_rects: Current rects of every other block.
        threshold: Per-axis snap distance.

    Returns:
        ResizeSnap with the final scale and guide lines.
    """
    clamped_desired = clamp(desired_scale, min_scale, max_scale)
    if not target_rects:
        return ResizeSnap(scale=clamped_desired)

    target_x = collect_anchors(target_rects, horizontal=True)
    target_y = collect_anchors(target_rects, horizontal=False)

    desired_right = bounds.x + bounds.w * clamped_desired
    desired_center_x = bounds.x + bounds.w * clamped_desired * 0.5
    desired_bottom = bounds.y + bounds.h * clamped_desired
    desired_center_y = bounds.y + bounds.h * clamped_desired * 0.5

    x_candidates: list[float] = []
    if bounds.w > 0:
        for target in target_x:
            if abs(desired_right - target) <= threshold.x:
                x_candidates.append((target - bounds.x) / bounds.w)
            if abs(desired_center_x - target) <= threshold.x:
                x_candidates.append(2 * (target - bounds.x) / bounds.w)

    y_candidates: list[float] = []
    if bounds.h > 0:
        for target in target_y:
            if abs(desired_bottom - target) <= threshold.y:
                y_candidates.append((target - bounds.y) / bounds.h)
            if abs(desired_center_y - target) <= threshold.y:
                y_candidates.append(2 * (target - bounds.y) / bounds.h)

    best_x = _closest_scale_candidate(clamped_desired, x_candidates, min_scale, max_scale)
    best_y = _closest_scale_candidate(clamped_desired, y_candidates, min_scale, max_scale)

    snapped_scale = clamped_desired
    if best_x is not None and best_y is not None:
        if abs(best_x - clamped_desired) <= abs(best_y - clamped_desired):
            snapped_scale = best_x
        else:
            snapped_scale = best_y
    elif best_x is not None:
        snapped_scale = best_x
    elif best_y is not None:
        snapped_scale = best_y

    moving_x = [
        bounds.x,
        bounds.x + bounds.w * snapped_scale * 0.5,
        bounds.x + bounds.w * snapped_scale,
    ]
    moving_y = [
        bounds.y,
        bounds.y + bounds.h * snapped_scale * 0.5,
        bounds.y + bounds.h * snapped_scale,
    ]

    return ResizeSnap(
        scale=snapped_scale,
        guide_x=closest_guide(moving_x, target_x, threshold.x),
        guide_y=closest_guide(moving_y, target_y, threshold.y),
    )
