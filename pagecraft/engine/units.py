"""
units.py — Normalized-coordinate constants and numeric helpers.

This is the foundation module. ALL geometry math uses these constants and helpers.
Never hardcode limits anywhere else in the codebase.

Coordinates are fractions of the page's safe area: x/w of its width, y/h of its height.
"""

import math
from typing import Any

# =============================================================================
# PAGE GEOMETRY
# =============================================================================

# Height / width of a physical book page (1.71 tall x 1.28 wide)
PAGE_HEIGHT_WIDTH_RATIO = 1.71 / 1.28

# =============================================================================
# BLOCK LIMITS
# =============================================================================

MAX_BLOCKS_PER_SIDE = 20

# Smallest size a committed block may have
MIN_BLOCK_SIZE = 0.01

# Smallest size an interaction (resize, edge drag) may produce
MIN_INTERACTIVE_BLOCK_SIZE = 0.05

MIN_ASPECT_RATIO = 0.05
MAX_ASPECT_RATIO = 20.0

# Creation defaults
DEFAULT_BLOCK_X = 0.05
DEFAULT_BLOCK_Y = 0.05

# =============================================================================
# STYLE LIMITS
# =============================================================================

MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 200
MIN_FONT_WEIGHT = 100
MAX_FONT_WEIGHT = 900
MIN_LINE_HEIGHT = 0.8
MAX_LINE_HEIGHT = 3.0

MIN_LINK_FONT_SIZE = 10
MAX_LINK_FONT_SIZE = 96
MAX_LINK_BORDER_RADIUS = 200

MIN_OUTLINE_WIDTH = 1
MAX_OUTLINE_WIDTH = 100
MAX_CORNER_RADIUS = 500
MAX_STROKE_WIDTH = 100

MAX_PADDING_RATIO = 0.4

# =============================================================================
# SNAPPING
# =============================================================================

DEFAULT_SNAP_THRESHOLD_PX = 8.0

# Tolerance used to decide that a solved rectangle really sits on its target
SNAP_EPSILON = 1e-6


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp value into [minimum, maximum]. The upper bound wins if they cross."""
    return min(maximum, max(minimum, value))


def is_number(value: Any) -> bool:
    """True for finite ints/floats (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def to_number(value: Any, fallback: float = 0.0) -> float:
    """Return value as a float if it is a finite number, else fallback."""
    return float(value) if is_number(value) else fallback
