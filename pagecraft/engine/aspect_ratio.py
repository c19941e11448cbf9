"""Aspect ratio resolution for blocks.

A block's aspect ratio is width / height in normalized page units. Because the
page is taller than it is wide, a pixel-space ratio (image or SVG intrinsic
size) is multiplied by PAGE_HEIGHT_WIDTH_RATIO to get the block-space ratio
that preserves the visual proportions.
"""

import re
from typing import Any, Optional

from pagecraft.engine.units import (
    MAX_ASPECT_RATIO,
    MIN_ASPECT_RATIO,
    PAGE_HEIGHT_WIDTH_RATIO,
    clamp,
    is_number,
)

_ATTR_VALUE = r"""\s*=\s*(?:"([^"]+)"|'([^']+)'|([^\s>]+))"""
_VIEWBOX_PATTERN = re.compile(r"viewBox" + _ATTR_VALUE, re.IGNORECASE)
_WIDTH_PATTERN = re.compile(r"\bwidth" + _ATTR_VALUE, re.IGNORECASE)
_HEIGHT_PATTERN = re.compile(r"\bheight" + _ATTR_VALUE, re.IGNORECASE)
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def normalize_aspect_ratio(value: Any, fallback: float = 1.0) -> float:
    """Clamp a declared ratio into [0.05, 20], falling back when it is unusable.

    Args:
        value: Declared ratio (anything; only finite numbers are honored).
        fallback: Ratio used when value is not a finite positive number.

    Returns:
        A ratio in [MIN_ASPECT_RATIO, MAX_ASPECT_RATIO].
    """
    numeric = float(value) if is_number(value) else fallback
    safe_fallback = fallback if is_number(fallback) and fallback > 0 else 1.0
    positive = numeric if is_number(numeric) and numeric > 0 else safe_fallback
    return clamp(positive, MIN_ASPECT_RATIO, MAX_ASPECT_RATIO)


def get_block_aspect_ratio(block: Any) -> float:
    """Declared ratio of a block (or rect), defaulting to its box ratio."""
    h = getattr(block, "h", 0)
    fallback = block.w / h if h > 0 else 1.0
    return normalize_aspect_ratio(getattr(block, "aspect_ratio", None), fallback)


def image_pixel_ratio_to_block_ratio(pixel_ratio: float) -> float:
    """Convert naturalWidth / naturalHeight into a block-space ratio."""
    safe = pixel_ratio if is_number(pixel_ratio) and pixel_ratio > 0 else 1.0
    return normalize_aspect_ratio(safe * PAGE_HEIGHT_WIDTH_RATIO)


def _parse_float(raw: str) -> Optional[float]:
    """parseFloat-style: read the leading number of raw, if any."""
    match = _LEADING_FLOAT.match(raw)
    if not match:
        return None
    return float(match.group(1))


def _attr_value(match: re.Match) -> str:
    return match.group(1) or match.group(2) or match.group(3) or ""


def parse_svg_aspect_ratio(svg_code: str) -> Optional[float]:
    """Intrinsic width / height of SVG markup.

    The viewBox wins; width/height attributes are used otherwise.

    Args:
        svg_code: Raw SVG markup.

    Returns:
        Pixel-space ratio clamped to the allowed range, or None if the markup
        declares no usable size.
    """
    if not isinstance(svg_code, str):
        return None

    viewbox = _VIEWBOX_PATTERN.search(svg_code)
    if viewbox:
        parts = [p for p in re.split(r"[\s,]+", _attr_value(viewbox).strip()) if p]
        if len(parts) == 4:
            width = _parse_float(parts[2])
            height = _parse_float(parts[3])
            if width is not None and height is not None and height > 0:
                return normalize_aspect_ratio(width / height)

    width_match = _WIDTH_PATTERN.search(svg_code)
    height_match = _HEIGHT_PATTERN.search(svg_code)
    if width_match and height_match:
        width = _parse_float(_attr_value(width_match))
        height = _parse_float(_attr_value(height_match))
        if width is not None and height is not None and height > 0:
            return normalize_aspect_ratio(width / height)

    return None


def svg_block_aspect_ratio(svg_code: str, fallback: float) -> float:
    """Block-space ratio for SVG markup, or fallback when it declares no size."""
    pixel_ratio = parse_svg_aspect_ratio(svg_code)
    if pixel_ratio is None:
        return normalize_aspect_ratio(fallback)
    return image_pixel_ratio_to_block_ratio(pixel_ratio)
