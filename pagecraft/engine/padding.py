"""Safe content area of a page canvas."""

from dataclasses import dataclass
from typing import Optional

from pagecraft.dsl.schema import PaddingConfig
from pagecraft.engine.units import clamp

DEFAULT_PAD_X_RATIO = 0.08
DEFAULT_PAD_Y_RATIO = 0.10
PAD_X_MIN = 24
PAD_X_MAX = 140
PAD_Y_MIN = 24
PAD_Y_MAX = 180


@dataclass(frozen=True)
class SafeArea:
    """Padded sub-region of a canvas, in pixels."""

    x: float
    y: float
    w: float
    h: float


def compute_safe_area(
    canvas_width: float,
    canvas_height: float,
    override: Optional[PaddingConfig] = None,
) -> SafeArea:
    """Compute the safe content area (after padding) for a canvas size.

    Args:
        canvas_width: Total canvas width in pixels.
        canvas_height: Total canvas height in pixels.
        override: Optional per-page-side padding ratios.

    Returns:
        SafeArea in canvas pixels.
    """
    ratio_x = override.pad_x_ratio if override is not None else DEFAULT_PAD_X_RATIO
    ratio_y = override.pad_y_ratio if override is not None else DEFAULT_PAD_Y_RATIO

    pad_x = clamp(canvas_width * ratio_x, PAD_X_MIN, PAD_X_MAX)
    pad_y = clamp(canvas_height * ratio_y, PAD_Y_MIN, PAD_Y_MAX)

    return SafeArea(
        x=pad_x,
        y=pad_y,
        w=canvas_width - 2 * pad_x,
        h=canvas_height - 2 * pad_y,
    )
