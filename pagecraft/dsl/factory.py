"""Deterministic defaults for newly added blocks."""

import uuid
from typing import Optional

from pagecraft.dsl.schema import (
    Block,
    BlockType,
    ImageBlock,
    LinkBlock,
    PageSideLayout,
    ShapeBlock,
    SvgBlock,
    TextBlock,
)
from pagecraft.engine.aspect_ratio import normalize_aspect_ratio
from pagecraft.engine.units import DEFAULT_BLOCK_X, DEFAULT_BLOCK_Y

# Default (w, h) per block type
DEFAULT_BLOCK_SIZES: dict[BlockType, tuple[float, float]] = {
    BlockType.TEXT: (0.4, 0.15),
    BlockType.IMAGE: (0.4, 0.3),
    BlockType.SVG: (0.2, 0.2),
    BlockType.LINK: (0.3, 0.08),
    BlockType.SHAPE: (0.3, 0.2),
}

DEFAULT_SVG_CODE = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="#000000">'
    '<path d="M12 2L2 22h20L12 2z"/></svg>'
)


def new_block_id() -> str:
    """Fresh unique block identifier."""
    return str(uuid.uuid4())


def next_z_index(layout: PageSideLayout) -> int:
    """Z-index that puts a new block on top of every existing one."""
    return max((b.z_index for b in layout.blocks), default=0) + 1


def create_block(
    block_type: BlockType,
    z_index: int,
    block_id: Optional[str] = None,
) -> Block:
    """Build a block with the default position and size for its type.

    Args:
        block_type: Kind of block to create.
        z_index: Stacking order to assign.
        block_id: Identifier to use; a UUID is generated when omitted.

    Returns:
        A new block satisfying every layout invariant.
    """
    block_type = BlockType(block_type)
    w, h = DEFAULT_BLOCK_SIZES[block_type]
    common = {
        "id": block_id or new_block_id(),
        "x": DEFAULT_BLOCK_X,
        "y": DEFAULT_BLOCK_Y,
        "w": w,
        "h": h,
        "z_index": z_index,
        "aspect_ratio": normalize_aspect_ratio(w / h),
    }

    if block_type == BlockType.TEXT:
        return TextBlock(content="New text", **common)
    if block_type == BlockType.IMAGE:
        return ImageBlock(**common)
    if block_type == BlockType.SVG:
        return SvgBlock(svg_code=DEFAULT_SVG_CODE, **common)
    if block_type == BlockType.LINK:
        return LinkBlock(**common)
    if block_type == BlockType.SHAPE:
        return ShapeBlock(**common)
    raise ValueError(f"Unsupported block type: {block_type}")
