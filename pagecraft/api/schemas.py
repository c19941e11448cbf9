"""
schemas.py — Pydantic request/response models for the API.

Layouts arriving from clients are taken as raw JSON and repaired by the
validator; sessions, pointers and commands are strict models.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pagecraft.dsl.schema import Block, BlockType, CropEdge, PageSideLayout
from pagecraft.interaction.commands import EditorCommand, EditorState
from pagecraft.interaction.session import (
    CanvasViewport,
    CropEdgeSession,
    DragSession,
    GestureUpdate,
    Pointer,
    ResizeSession,
)


class ApiModel(BaseModel):
    """camelCase request/response body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# LAYOUT MODELS
# =============================================================================

class ValidationResponse(ApiModel):
    """Outcome of validating a layout."""
    valid: bool
    errors: list[str] = Field(default_factory=list)
    layout: PageSideLayout


class AddBlockRequest(ApiModel):
    """Add a default block of the given type."""
    layout: Any = None
    type: BlockType
    id: Optional[str] = Field(None, description="Identifier to use instead of a generated one")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"example": {"layout": {"blocks": []}, "type": "text"}},
    )


class AddBlockResponse(ApiModel):
    """Layout after the add path, with the created block if any."""
    layout: PageSideLayout
    block: Optional[Block] = None
    added: bool


class DeleteBlockRequest(ApiModel):
    layout: Any = None


class CommandRequest(ApiModel):
    """Apply one editor command."""
    state: EditorState
    command: EditorCommand


# =============================================================================
# GESTURE MODELS
# =============================================================================

class SelectionGestureBegin(ApiModel):
    """Pointer-down on a selection (drag or resize)."""
    layout: Any = None
    block_ids: list[str] = Field(..., min_length=1)
    pointer: Pointer
    viewport: CanvasViewport


class DragMoveRequest(ApiModel):
    layout: Any = None
    session: DragSession
    pointer: Pointer


class ResizeMoveRequest(ApiModel):
    layout: Any = None
    session: ResizeSession
    pointer: Pointer


class CropEdgeBegin(ApiModel):
    """Pointer-down on an edge handle."""
    layout: Any = None
    block_id: str
    edge: CropEdge
    pointer: Pointer
    viewport: CanvasViewport


class CropEdgeMoveRequest(ApiModel):
    layout: Any = None
    session: CropEdgeSession
    pointer: Pointer


class CropEdgeEndRequest(ApiModel):
    """Pointer-up; update is the last move result, if any."""
    layout: Any = None
    session: CropEdgeSession
    update: Optional[GestureUpdate] = None


class DragSessionResponse(ApiModel):
    session: Optional[DragSession] = None


class ResizeSessionResponse(ApiModel):
    session: Optional[ResizeSession] = None


class CropEdgeSessionResponse(ApiModel):
    session: Optional[CropEdgeSession] = None


class LayoutResponse(ApiModel):
    layout: PageSideLayout
