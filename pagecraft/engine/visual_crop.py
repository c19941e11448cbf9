"""Visual crop math for image and SVG blocks.

A crop is four fractions of the source trimmed from each edge. At least
MIN_VISUAL_CROP_REMAINING_RATIO of the source stays visible on each axis.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pagecraft.dsl.schema import MAX_CROP_VALUE, VisualCrop
from pagecraft.engine.units import clamp, is_number, to_number

MIN_VISUAL_CROP_REMAINING_RATIO = 0.05
ZERO_EPSILON = 1e-4
# Float slack when comparing an axis sum against its cap
_CAP_TOLERANCE = 1e-12

CropLike = Union[VisualCrop, Mapping[str, Any], None]


@dataclass(frozen=True)
class RemainingRatios:
    """Visible fraction of the source on each axis."""

    width_ratio: float
    height_ratio: float


@dataclass(frozen=True)
class SourceRect:
    """Crop window in source pixel coordinates."""

    x: float
    y: float
    width: float
    height: float


def _crop_value(crop: CropLike, edge: str) -> float:
    if crop is None:
        return 0.0
    if isinstance(crop, VisualCrop):
        return getattr(crop, edge)
    if isinstance(crop, Mapping):
        return to_number(crop.get(edge))
    return 0.0


def normalize_visual_crop(crop: CropLike) -> VisualCrop:
    """Clamp each fraction and keep opposite edges within the visible minimum.

    When an axis over-crops, both of its fractions are scaled down
    proportionally so their sum is exactly the cap.
    """
    left = clamp(_crop_value(crop, "left"), 0.0, MAX_CROP_VALUE)
    right = clamp(_crop_value(crop, "right"), 0.0, MAX_CROP_VALUE)
    top = clamp(_crop_value(crop, "top"), 0.0, MAX_CROP_VALUE)
    bottom = clamp(_crop_value(crop, "bottom"), 0.0, MAX_CROP_VALUE)

    max_axis_crop = 1 - MIN_VISUAL_CROP_REMAINING_RATIO

    if left + right > max_axis_crop + _CAP_TOLERANCE:
        scale = max_axis_crop / (left + right)
        left *= scale
        right = min(right * scale, max_axis_crop - left)
    if top + bottom > max_axis_crop + _CAP_TOLERANCE:
        scale = max_axis_crop / (top + bottom)
        top *= scale
        bottom = min(bottom * scale, max_axis_crop - top)

    return VisualCrop(left=left, right=right, top=top, bottom=bottom)


def is_zero_visual_crop(crop: VisualCrop) -> bool:
    """True when every fraction is effectively zero."""
    return (
        abs(crop.left) < ZERO_EPSILON
        and abs(crop.right) < ZERO_EPSILON
        and abs(crop.top) < ZERO_EPSILON
        and abs(crop.bottom) < ZERO_EPSILON
    )


def to_optional_visual_crop(crop: CropLike) -> Optional[VisualCrop]:
    """Normalized crop, or None when it trims nothing."""
    normalized = normalize_visual_crop(crop)
    return None if is_zero_visual_crop(normalized) else normalized


def get_visual_crop_remaining_ratios(crop: CropLike) -> RemainingRatios:
    """Visible fraction per axis, never below the minimum."""
    normalized = normalize_visual_crop(crop)
    return RemainingRatios(
        width_ratio=max(MIN_VISUAL_CROP_REMAINING_RATIO, 1 - normalized.left - normalized.right),
        height_ratio=max(MIN_VISUAL_CROP_REMAINING_RATIO, 1 - normalized.top - normalized.bottom),
    )


def get_visual_crop_aspect_ratio_multiplier(crop: CropLike) -> float:
    """Factor the crop applies to the uncropped aspect ratio."""
    remaining = get_visual_crop_remaining_ratios(crop)
    return remaining.width_ratio / remaining.height_ratio


def derive_visual_crop_base_aspect_ratio(current_aspect_ratio: float, current_crop: CropLike) -> float:
    """Recover the uncropped source ratio from a cropped block's ratio."""
    safe_aspect = current_aspect_ratio if is_number(current_aspect_ratio) and current_aspect_ratio > 0 else 1.0
    multiplier = get_visual_crop_aspect_ratio_multiplier(current_crop)
    return safe_aspect / max(multiplier, MIN_VISUAL_CROP_REMAINING_RATIO)


def apply_visual_crop_to_aspect_ratio(base_aspect_ratio: float, crop: CropLike) -> float:
    """Inverse of derive_visual_crop_base_aspect_ratio."""
    safe_base = base_aspect_ratio if is_number(base_aspect_ratio) and base_aspect_ratio > 0 else 1.0
    return safe_base * get_visual_crop_aspect_ratio_multiplier(crop)


def get_visual_crop_source_rect(source_width: float, source_height: float, crop: CropLike) -> SourceRect:
    """Map crop fractions onto source pixel coordinates.

    Args:
        source_width: Source width in pixels.
        source_height: Source height in pixels.
        crop: Crop to apply.

    Returns:
        The visible window of the source.
    """
    safe_width = max(1.0, source_width)
    safe_height = max(1.0, source_height)
    normalized = normalize_visual_crop(crop)
    remaining = get_visual_crop_remaining_ratios(normalized)

    return SourceRect(
        x=normalized.left * safe_width,
        y=normalized.top * safe_height,
        width=remaining.width_ratio * safe_width,
        height=remaining.height_ratio * safe_height,
    )
