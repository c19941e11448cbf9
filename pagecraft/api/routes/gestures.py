"""Gesture routes.

The server keeps no gesture state: begin returns the session, and the client
sends it back with every move.
"""

from fastapi import APIRouter, Depends

from pagecraft.api.config import Settings, get_settings
from pagecraft.api.schemas import (
    CropEdgeBegin,
    CropEdgeEndRequest,
    CropEdgeMoveRequest,
    CropEdgeSessionResponse,
    DragMoveRequest,
    DragSessionResponse,
    LayoutResponse,
    ResizeMoveRequest,
    ResizeSessionResponse,
    SelectionGestureBegin,
)
from pagecraft.constraints.snapping import SnapThreshold
from pagecraft.constraints.validation import validate_layout
from pagecraft.interaction.crop_edge import begin_crop_edge, crop_edge_move, end_crop_edge
from pagecraft.interaction.drag import begin_drag, drag_move
from pagecraft.interaction.resize import begin_resize, resize_move
from pagecraft.interaction.session import CanvasViewport, GestureUpdate

router = APIRouter()


def _threshold(viewport: CanvasViewport, settings: Settings) -> SnapThreshold:
    return SnapThreshold.from_pixels(settings.snap_threshold_px, viewport.width_px, viewport.height_px)


# =============================================================================
# DRAG
# =============================================================================

@router.post("/drag/begin", response_model=DragSessionResponse)
async def drag_begin(request: SelectionGestureBegin):
    """Open a drag session for the selection."""
    layout = validate_layout(request.layout).layout
    return DragSessionResponse(
        session=begin_drag(layout, request.block_ids, request.pointer, request.viewport)
    )


@router.post("/drag/move", response_model=GestureUpdate)
async def drag_update(request: DragMoveRequest, settings: Settings = Depends(get_settings)):
    """Candidate layout for the current pointer position."""
    layout = validate_layout(request.layout).layout
    threshold = _threshold(request.session.viewport, settings)
    return drag_move(layout, request.session, request.pointer, threshold)


# =============================================================================
# RESIZE
# =============================================================================

@router.post("/resize/begin", response_model=ResizeSessionResponse)
async def resize_begin(request: SelectionGestureBegin):
    """Open a uniform resize session for the selection."""
    layout = validate_layout(request.layout).layout
    return ResizeSessionResponse(
        session=begin_resize(layout, request.block_ids, request.pointer, request.viewport)
    )


@router.post("/resize/move", response_model=GestureUpdate)
async def resize_update(request: ResizeMoveRequest, settings: Settings = Depends(get_settings)):
    """Candidate layout for the current pointer position."""
    layout = validate_layout(request.layout).layout
    threshold = _threshold(request.session.viewport, settings)
    return resize_move(layout, request.session, request.pointer, threshold)


# =============================================================================
# CROP EDGE
# =============================================================================

@router.post("/crop-edge/begin", response_model=CropEdgeSessionResponse)
async def crop_edge_begin(request: CropEdgeBegin):
    """Open an edge session for one block."""
    layout = validate_layout(request.layout).layout
    return CropEdgeSessionResponse(
        session=begin_crop_edge(layout, request.block_id, request.edge, request.pointer, request.viewport)
    )


@router.post("/crop-edge/move", response_model=GestureUpdate)
async def crop_edge_update(request: CropEdgeMoveRequest, settings: Settings = Depends(get_settings)):
    """Candidate layout for the current pointer position."""
    layout = validate_layout(request.layout).layout
    threshold = _threshold(request.session.viewport, settings)
    return crop_edge_move(layout, request.session, request.pointer, threshold)


@router.post("/crop-edge/end", response_model=LayoutResponse)
async def crop_edge_end(request: CropEdgeEndRequest):
    """Store the last candidate on the block."""
    layout = validate_layout(request.layout).layout
    return LayoutResponse(layout=end_crop_edge(layout, request.session, request.update))
