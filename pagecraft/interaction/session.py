"""Gesture sessions.

A session is the immutable snapshot captured once at pointer-down: the selected
block ids, their starting geometry and the pointer/canvas it started from.
Every pointer-move recomputes its candidate from the session plus the current
pointer, so repeated delivery of the same move yields the same result.
"""

from typing import Literal, Optional

from pydantic import Field

from pagecraft.dsl.schema import CropEdge, LayoutModel, PageSideLayout, Rect, VisualCrop


class Pointer(LayoutModel):
    """Pointer position in screen pixels."""

    x: float
    y: float


class CanvasViewport(LayoutModel):
    """On-screen size of the page's safe area, in pixels."""

    width_px: float = Field(gt=0)
    height_px: float = Field(gt=0)

    def normalized_delta(self, start: Pointer, current: Pointer) -> tuple[float, float]:
        """Pointer travel converted to normalized units."""
        return (
            (current.x - start.x) / self.width_px,
            (current.y - start.y) / self.height_px,
        )


class BlockOrigin(LayoutModel):
    """Starting box of one selected block."""

    id: str
    rect: Rect


class DragSession(LayoutModel):
    """Rigid multi-block translation."""

    kind: Literal["drag"] = "drag"
    block_ids: tuple[str, ...]
    origins: tuple[BlockOrigin, ...]
    start: Pointer
    viewport: CanvasViewport


class ResizeSession(LayoutModel):
    """Uniform scale of the selection about its bounds' top-left corner."""

    kind: Literal["resize"] = "resize"
    block_ids: tuple[str, ...]
    origins: tuple[BlockOrigin, ...]
    bounds: Rect
    start: Pointer
    viewport: CanvasViewport


class CropEdgeSession(LayoutModel):
    """One edge handle of one block."""

    kind: Literal["crop_edge"] = "crop_edge"
    block_id: str
    edge: CropEdge
    start: Pointer
    viewport: CanvasViewport
    start_rect: Rect
    start_crop: VisualCrop = Field(default_factory=VisualCrop)
    start_aspect_ratio: float = Field(gt=0)
    croppable: bool = False
    # Set for blocks whose box ratio never follows the crop (circle images)
    fixed_aspect_ratio: Optional[float] = None


class GestureUpdate(LayoutModel):
    """Candidate layout produced by one pointer-move."""

    layout: PageSideLayout
    guide_x: Optional[float] = None
    guide_y: Optional[float] = None
    applied: bool = True


def capture_origins(layout: PageSideLayout, block_ids: list[str]) -> tuple[BlockOrigin, ...]:
    """Origins of the requested blocks that exist, in layout order."""
    wanted = set(block_ids)
    return tuple(
        BlockOrigin(id=block.id, rect=block.rect)
        for block in layout.blocks
        if block.id in wanted
    )


def has_all_blocks(layout: PageSideLayout, block_ids: tuple[str, ...]) -> bool:
    """True when every id is still present in the layout."""
    present = {block.id for block in layout.blocks}
    return all(block_id in present for block_id in block_ids)


def with_origin_rects(layout: PageSideLayout, origins: tuple[BlockOrigin, ...]) -> PageSideLayout:
    """Layout with the selected blocks moved back to their starting boxes."""
    by_id = {origin.id: origin.rect for origin in origins}
    blocks = []
    for block in layout.blocks:
        rect = by_id.get(block.id)
        if rect is None:
            blocks.append(block)
        else:
            blocks.append(block.model_copy(update={"x": rect.x, "y": rect.y, "w": rect.w, "h": rect.h}))
    return layout.model_copy(update={"blocks": blocks})


def unselected_rects(layout: PageSideLayout, block_ids: tuple[str, ...]) -> list[Rect]:
    """Current boxes of every block outside the selection."""
    selected = set(block_ids)
    return [block.rect for block in layout.blocks if block.id not in selected]
