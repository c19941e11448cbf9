"""Layout constraints - validation/repair and alignment snapping."""

from pagecraft.constraints.snapping import (
    AxisSnap,
    DragSnap,
    ResizeSnap,
    SnapMatch,
    SnapThreshold,
    closest_snap_match,
    snap_axis,
    snapped_drag_delta,
    snapped_uniform_resize_scale,
)
from pagecraft.constraints.validation import (
    ValidationResult,
    can_add_block,
    clamp_normalized_rect,
    validate_layout,
)

__all__ = [
    # Validation
    "ValidationResult",
    "validate_layout",
    "can_add_block",
    "clamp_normalized_rect",
    # Snapping
    "SnapThreshold",
    "SnapMatch",
    "AxisSnap",
    "DragSnap",
    "ResizeSnap",
    "closest_snap_match",
    "snap_axis",
    "snapped_drag_delta",
    "snapped_uniform_resize_scale",
]
