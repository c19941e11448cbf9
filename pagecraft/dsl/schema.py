"""Pydantic v2 models for page-side layouts.

This module defines the data structures for a page side: the blocks positioned
on it, their type-specific payloads and the visual crop applied to image and
vector blocks. All geometry is normalized to the page's safe area, so every
coordinate and size lies in [0, 1].

JSON interchange uses camelCase keys (``zIndex``, ``aspectRatio``); Python code
uses the snake_case attribute names.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pagecraft.engine.units import (
    MAX_ASPECT_RATIO,
    MAX_CORNER_RADIUS,
    MAX_FONT_SIZE,
    MAX_FONT_WEIGHT,
    MAX_LINE_HEIGHT,
    MAX_LINK_BORDER_RADIUS,
    MAX_LINK_FONT_SIZE,
    MAX_OUTLINE_WIDTH,
    MAX_PADDING_RATIO,
    MAX_STROKE_WIDTH,
    MIN_ASPECT_RATIO,
    MIN_BLOCK_SIZE,
    MIN_FONT_SIZE,
    MIN_FONT_WEIGHT,
    MIN_LINE_HEIGHT,
    MIN_LINK_FONT_SIZE,
    MIN_OUTLINE_WIDTH,
)

# Upper bound of a single crop fraction (1 - minimum remaining ratio)
MAX_CROP_VALUE = 0.95


class BlockType(str, Enum):
    """Supported block types."""

    TEXT = "text"
    IMAGE = "image"
    SVG = "svg"
    LINK = "link"
    SHAPE = "shape"


class PageSide(str, Enum):
    """Which face of a physical sheet."""

    FRONT = "front"
    BACK = "back"


class CropEdge(str, Enum):
    """Edge handle of a block."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"

    @property
    def is_horizontal(self) -> bool:
        """True for edges that move along the X axis."""
        return self in (CropEdge.LEFT, CropEdge.RIGHT)


class LayoutModel(BaseModel):
    """Base for frozen, camelCase-serialized layout models."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Geometry Models
# ============================================================================


class Rect(LayoutModel):
    """Normalized rectangle (top-left + size)."""

    x: float = Field(description="Left position (0-1)")
    y: float = Field(description="Top position (0-1)")
    w: float = Field(ge=0, description="Width (0-1)")
    h: float = Field(ge=0, description="Height (0-1)")

    @property
    def right(self) -> float:
        """Right edge position."""
        return self.x + self.w

    @property
    def bottom(self) -> float:
        """Bottom edge position."""
        return self.y + self.h

    @property
    def center_x(self) -> float:
        """Horizontal center."""
        return self.x + self.w * 0.5

    @property
    def center_y(self) -> float:
        """Vertical center."""
        return self.y + self.h * 0.5

    @classmethod
    def union(cls, rects: list["Rect"]) -> "Rect":
        """Smallest rectangle containing every rect."""
        left = min(r.x for r in rects)
        top = min(r.y for r in rects)
        right = max(r.right for r in rects)
        bottom = max(r.bottom for r in rects)
        return cls(x=left, y=top, w=right - left, h=bottom - top)


class VisualCrop(LayoutModel):
    """Fractions of the source trimmed from each edge."""

    left: float = Field(default=0.0, ge=0.0, le=MAX_CROP_VALUE)
    right: float = Field(default=0.0, ge=0.0, le=MAX_CROP_VALUE)
    top: float = Field(default=0.0, ge=0.0, le=MAX_CROP_VALUE)
    bottom: float = Field(default=0.0, ge=0.0, le=MAX_CROP_VALUE)


class PaddingConfig(LayoutModel):
    """Safe-area padding ratios."""

    pad_x_ratio: float = Field(default=0.08, ge=0.0, le=MAX_PADDING_RATIO)
    pad_y_ratio: float = Field(default=0.10, ge=0.0, le=MAX_PADDING_RATIO)


# ============================================================================
# Style Models
# ============================================================================


class Outline(LayoutModel):
    """Block outline."""

    color: str = Field(default="#000000", description="CSS color")
    width: float = Field(default=2, ge=MIN_OUTLINE_WIDTH, le=MAX_OUTLINE_WIDTH)


class TextStyleConfig(LayoutModel):
    """Text rendering style."""

    font_size: float = Field(default=24, ge=MIN_FONT_SIZE, le=MAX_FONT_SIZE, description="Font size in px")
    font_weight: int = Field(default=400, ge=MIN_FONT_WEIGHT, le=MAX_FONT_WEIGHT)
    text_align: Literal["left", "center", "right"] = "left"
    color: str = "#000000"
    line_height: float = Field(default=1.4, ge=MIN_LINE_HEIGHT, le=MAX_LINE_HEIGHT)
    font_family: str = "sans-serif"


class LinkStyleConfig(LayoutModel):
    """Link button style."""

    font_size: float = Field(default=20, ge=MIN_LINK_FONT_SIZE, le=MAX_LINK_FONT_SIZE)
    font_weight: int = Field(default=600, ge=MIN_FONT_WEIGHT, le=MAX_FONT_WEIGHT)
    text_align: Literal["left", "center", "right"] = "center"
    background_color: str = "#1f2937"
    text_color: str = "#ffffff"
    font_family: str = "sans-serif"
    border_radius: float = Field(default=12, ge=0, le=MAX_LINK_BORDER_RADIUS)


# ============================================================================
# Block Models
# ============================================================================


class BlockBase(LayoutModel):
    """Fields shared by every block."""

    id: str = Field(description="Unique block identifier within the page side")
    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)
    w: float = Field(ge=MIN_BLOCK_SIZE, le=1.0)
    h: float = Field(ge=MIN_BLOCK_SIZE, le=1.0)
    z_index: int = Field(default=0, description="Stacking order (higher = on top)")
    aspect_ratio: float = Field(default=1.0, ge=MIN_ASPECT_RATIO, le=MAX_ASPECT_RATIO)
    outline: Optional[Outline] = None
    corner_radius: Optional[float] = Field(default=None, ge=0, le=MAX_CORNER_RADIUS)
    link_url: Optional[str] = None

    @property
    def rect(self) -> Rect:
        """The block's box."""
        return Rect(x=self.x, y=self.y, w=self.w, h=self.h)


class TextBlock(BlockBase):
    """Multi-line text."""

    type: Literal["text"] = "text"
    content: str = ""
    style: TextStyleConfig = Field(default_factory=TextStyleConfig)


class ImageBlock(BlockBase):
    """Raster image."""

    type: Literal["image"] = "image"
    asset_path: str = Field(default="", description="Storage path or URL, empty until uploaded")
    object_fit: Literal["cover", "contain"] = "cover"
    crop: Optional[VisualCrop] = None
    shape: Literal["rect", "circle"] = "rect"


class SvgBlock(BlockBase):
    """Inline vector markup."""

    type: Literal["svg"] = "svg"
    svg_code: str = ""
    object_fit: Literal["cover", "contain"] = "contain"
    crop: Optional[VisualCrop] = None


class LinkBlock(BlockBase):
    """Clickable link button."""

    type: Literal["link"] = "link"
    label: str = "Open Link"
    url: str = ""
    style: LinkStyleConfig = Field(default_factory=LinkStyleConfig)


class ShapeBlock(BlockBase):
    """Plain vector shape."""

    type: Literal["shape"] = "shape"
    shape_kind: Literal["rectangle", "ellipse", "triangle", "line"] = "rectangle"
    fill_color: str = "#d1d5db"
    stroke_color: str = "#111827"
    stroke_width: float = Field(default=0, ge=0, le=MAX_STROKE_WIDTH)


Block = Annotated[
    Union[TextBlock, ImageBlock, SvgBlock, LinkBlock, ShapeBlock],
    Field(discriminator="type"),
]

CroppableBlock = Union[ImageBlock, SvgBlock]


# ============================================================================
# Page Side Models
# ============================================================================


class PageSideLayout(LayoutModel):
    """Everything placed on one side of a page."""

    blocks: list[Block] = Field(default_factory=list, description="Blocks in insertion order")
    background_color: str = Field(default="#ffffff")
    padding_override: Optional[PaddingConfig] = None

    def get_block(self, block_id: str) -> Optional[Block]:
        """Find a block by its ID."""
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    def sorted_blocks(self) -> list[Block]:
        """Blocks in paint order (z-index, then insertion order)."""
        return sorted(self.blocks, key=lambda b: b.z_index)

    def to_json_dict(self) -> dict:
        """camelCase, JSON-compatible representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def page_side_key(page_index: int, side: PageSide) -> str:
    """Key used to look up content for a page side, e.g. ``p3:front``."""
    return f"p{page_index}:{PageSide(side).value}"


def logical_page_number(page_index: int, side: PageSide) -> int:
    """1-based reading-order page number of a sheet side."""
    return (page_index - 1) * 2 + (1 if PageSide(side) == PageSide.FRONT else 2)
