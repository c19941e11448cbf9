"""Layout routes: validation, the add/delete path and the editor reducer."""

import logging
from typing import Any

from fastapi import APIRouter, Body

from pagecraft.api.schemas import (
    AddBlockRequest,
    AddBlockResponse,
    CommandRequest,
    DeleteBlockRequest,
    LayoutResponse,
    ValidationResponse,
)
from pagecraft.constraints.validation import validate_layout
from pagecraft.interaction.commands import EditorState, add_block, delete_block, reduce

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/validate", response_model=ValidationResponse)
async def validate(payload: Any = Body(None)):
    """Repair an arbitrary layout and report structural problems."""
    result = validate_layout(payload)
    return ValidationResponse(valid=result.valid, errors=result.errors, layout=result.layout)


@router.post("/blocks", response_model=AddBlockResponse)
async def create_block(request: AddBlockRequest):
    """Add a default block unless the side is full."""
    layout = validate_layout(request.layout).layout
    result = add_block(layout, request.type, request.id)
    return AddBlockResponse(layout=result.layout, block=result.block, added=result.added)


@router.delete("/blocks/{block_id}", response_model=LayoutResponse)
async def remove_block(block_id: str, request: DeleteBlockRequest):
    """Delete one block by id."""
    layout = validate_layout(request.layout).layout
    return LayoutResponse(layout=delete_block(layout, block_id))


@router.post("/commands", response_model=EditorState)
async def apply_editor_command(request: CommandRequest):
    """Run one command through the editor reducer."""
    logger.debug(f"Applying {request.command.kind} command")
    return reduce(request.state, request.command)
