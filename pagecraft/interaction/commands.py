"""Layout reducer.

Every mutation of a page side goes through a command: the gesture engines
build geometry commands (translate, scale, set-rect, set-crop) and the editor
adds the discrete ones (add, delete, commit, cancel). Applying a command never
raises; a command naming an unknown block leaves the layout unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from pagecraft.constraints.validation import can_add_block, clamp_normalized_rect, validate_layout
from pagecraft.dsl.factory import create_block, next_z_index
from pagecraft.dsl.schema import (
    Block,
    BlockType,
    ImageBlock,
    LayoutModel,
    PageSideLayout,
    Rect,
    SvgBlock,
    VisualCrop,
)
from pagecraft.engine.aspect_ratio import normalize_aspect_ratio
from pagecraft.engine.units import MIN_INTERACTIVE_BLOCK_SIZE, clamp
from pagecraft.engine.visual_crop import to_optional_visual_crop

logger = logging.getLogger(__name__)


# ============================================================================
# Commands
# ============================================================================


class TranslateCommand(LayoutModel):
    """Move blocks by the same normalized delta."""

    kind: Literal["translate"] = "translate"
    block_ids: tuple[str, ...]
    dx: float = 0.0
    dy: float = 0.0


class ScaleCommand(LayoutModel):
    """Scale blocks uniformly about an anchor point."""

    kind: Literal["scale"] = "scale"
    block_ids: tuple[str, ...]
    factor: float = Field(gt=0)
    anchor_x: float = 0.0
    anchor_y: float = 0.0


class SetRectCommand(LayoutModel):
    """Replace one block's box."""

    kind: Literal["set_rect"] = "set_rect"
    block_id: str
    rect: Rect


class SetCropCommand(LayoutModel):
    """Replace one image/svg block's crop, optionally with its new box and ratio."""

    kind: Literal["set_crop"] = "set_crop"
    block_id: str
    crop: Optional[VisualCrop] = None
    rect: Optional[Rect] = None
    aspect_ratio: Optional[float] = None


class AddBlockCommand(LayoutModel):
    kind: Literal["add_block"] = "add_block"
    block_type: BlockType
    block_id: Optional[str] = None


class DeleteBlockCommand(LayoutModel):
    kind: Literal["delete_block"] = "delete_block"
    block_id: str


class CommitCommand(LayoutModel):
    """Validate the draft and make it the committed layout."""

    kind: Literal["commit"] = "commit"


class CancelCommand(LayoutModel):
    """Throw away the draft."""

    kind: Literal["cancel"] = "cancel"


GeometryCommand = Union[TranslateCommand, ScaleCommand, SetRectCommand, SetCropCommand]

EditorCommand = Annotated[
    Union[
        TranslateCommand,
        ScaleCommand,
        SetRectCommand,
        SetCropCommand,
        AddBlockCommand,
        DeleteBlockCommand,
        CommitCommand,
        CancelCommand,
    ],
    Field(discriminator="kind"),
]


# ============================================================================
# Geometry
# ============================================================================


def _with_rect(block: Block, x: float, y: float, w: float, h: float) -> Block:
    return block.model_copy(
        update={
            "x": x,
            "y": y,
            "w": w,
            "h": h,
            "aspect_ratio": normalize_aspect_ratio(w / h if h > 0 else None),
        }
    )


def _translate(block: Block, dx: float, dy: float) -> Block:
    x = clamp(block.x + dx, 0.0, max(0.0, 1.0 - block.w))
    y = clamp(block.y + dy, 0.0, max(0.0, 1.0 - block.h))
    return block.model_copy(update={"x": x, "y": y})


def _scale(block: Block, factor: float, anchor_x: float, anchor_y: float) -> Block:
    x = anchor_x + (block.x - anchor_x) * factor
    y = anchor_y + (block.y - anchor_y) * factor
    x = clamp(x, 0.0, 1.0 - MIN_INTERACTIVE_BLOCK_SIZE)
    y = clamp(y, 0.0, 1.0 - MIN_INTERACTIVE_BLOCK_SIZE)
    w = clamp(block.w * factor, MIN_INTERACTIVE_BLOCK_SIZE, 1.0 - x)
    h = clamp(block.h * factor, MIN_INTERACTIVE_BLOCK_SIZE, 1.0 - y)
    return _with_rect(block, x, y, w, h)


def _set_rect(block: Block, rect: Rect) -> Block:
    clamped = clamp_normalized_rect(rect)
    return _with_rect(block, clamped.x, clamped.y, clamped.w, clamped.h)


def _set_crop(block: Block, command: SetCropCommand) -> Block:
    if not isinstance(block, (ImageBlock, SvgBlock)):
        logger.debug(f"Ignoring crop for non-croppable block {block.id}")
        return block

    update: dict = {"crop": to_optional_visual_crop(command.crop)}
    if command.rect is not None:
        clamped = clamp_normalized_rect(command.rect)
        update.update({"x": clamped.x, "y": clamped.y, "w": clamped.w, "h": clamped.h})
    if command.aspect_ratio is not None:
        update["aspect_ratio"] = normalize_aspect_ratio(command.aspect_ratio)
    return block.model_copy(update=update)


def apply_command(layout: PageSideLayout, command: GeometryCommand) -> PageSideLayout:
    """Apply a geometry command to the targeted blocks.

    Args:
        layout: Current page side.
        command: Translate, scale, set-rect or set-crop command.

    Returns:
        A new layout; blocks not named by the command are untouched.
    """
    if not isinstance(command, (TranslateCommand, ScaleCommand, SetRectCommand, SetCropCommand)):
        logger.warning(f"Unsupported geometry command: {type(command).__name__}")
        return layout

    if isinstance(command, (TranslateCommand, ScaleCommand)):
        targets = set(command.block_ids)
    else:
        targets = {command.block_id}

    blocks = [_apply_to_block(block, command) if block.id in targets else block for block in layout.blocks]
    return layout.model_copy(update={"blocks": blocks})


def _apply_to_block(block: Block, command: GeometryCommand) -> Block:
    if isinstance(command, TranslateCommand):
        return _translate(block, command.dx, command.dy)
    if isinstance(command, ScaleCommand):
        return _scale(block, command.factor, command.anchor_x, command.anchor_y)
    if isinstance(command, SetRectCommand):
        return _set_rect(block, command.rect)
    return _set_crop(block, command)


# ============================================================================
# Add / delete
# ============================================================================


@dataclass(frozen=True)
class AddBlockResult:
    """Outcome of the add path."""

    layout: PageSideLayout
    block: Optional[Block] = None

    @property
    def added(self) -> bool:
        return self.block is not None


def add_block(
    layout: PageSideLayout,
    block_type: BlockType,
    block_id: Optional[str] = None,
) -> AddBlockResult:
    """Append a default block on top of the stack.

    The layout is returned unchanged once it already holds the maximum number
    of blocks, or when block_id is already taken.
    """
    if not can_add_block(layout):
        logger.info(f"Block limit reached, not adding {BlockType(block_type).value} block")
        return AddBlockResult(layout=layout)
    if block_id is not None and layout.get_block(block_id) is not None:
        logger.info(f"Block id {block_id} already in use")
        return AddBlockResult(layout=layout)

    block = create_block(block_type, next_z_index(layout), block_id)
    return AddBlockResult(
        layout=layout.model_copy(update={"blocks": [*layout.blocks, block]}),
        block=block,
    )


def delete_block(layout: PageSideLayout, block_id: str) -> PageSideLayout:
    """Remove a block by id; unknown ids leave the layout as is."""
    blocks = [block for block in layout.blocks if block.id != block_id]
    if len(blocks) == len(layout.blocks):
        return layout
    return layout.model_copy(update={"blocks": blocks})


# ============================================================================
# Editor state
# ============================================================================


class EditorState(LayoutModel):
    """Draft layout being edited plus the last committed layout."""

    layout: PageSideLayout = Field(default_factory=PageSideLayout)
    committed: PageSideLayout = Field(default_factory=PageSideLayout)
    errors: tuple[str, ...] = ()

    @classmethod
    def open(cls, raw_layout: object) -> "EditorState":
        """Start editing an arbitrary incoming layout after validating it."""
        result = validate_layout(raw_layout)
        return cls(layout=result.layout, committed=result.layout, errors=tuple(result.errors))


def reduce(state: EditorState, command: EditorCommand) -> EditorState:
    """Apply any editor command to the state.

    Geometry, add and delete commands change the draft only. Commit runs the
    validator over the draft; cancel restores the committed layout.
    """
    if isinstance(command, (TranslateCommand, ScaleCommand, SetRectCommand, SetCropCommand)):
        return state.model_copy(update={"layout": apply_command(state.layout, command)})
    if isinstance(command, AddBlockCommand):
        result = add_block(state.layout, command.block_type, command.block_id)
        return state.model_copy(update={"layout": result.layout})
    if isinstance(command, DeleteBlockCommand):
        return state.model_copy(update={"layout": delete_block(state.layout, command.block_id)})
    if isinstance(command, CommitCommand):
        result = validate_layout(state.layout)
        return EditorState(layout=result.layout, committed=result.layout, errors=tuple(result.errors))
    if isinstance(command, CancelCommand):
        return state.model_copy(update={"layout": state.committed, "errors": ()})

    logger.warning(f"Unsupported editor command: {type(command).__name__}")
    return state
