"""Gesture engines and the layout reducer."""

from pagecraft.interaction.commands import (
    AddBlockCommand,
    CancelCommand,
    CommitCommand,
    DeleteBlockCommand,
    EditorCommand,
    EditorState,
    ScaleCommand,
    SetCropCommand,
    SetRectCommand,
    TranslateCommand,
    add_block,
    apply_command,
    delete_block,
    reduce,
)
from pagecraft.interaction.crop_edge import begin_crop_edge, crop_edge_move, end_crop_edge
from pagecraft.interaction.drag import begin_drag, drag_move
from pagecraft.interaction.resize import begin_resize, resize_move
from pagecraft.interaction.session import (
    CanvasViewport,
    CropEdgeSession,
    DragSession,
    GestureUpdate,
    Pointer,
    ResizeSession,
)

__all__ = [
    # Sessions
    "Pointer",
    "CanvasViewport",
    "DragSession",
    "ResizeSession",
    "CropEdgeSession",
    "GestureUpdate",
    # Engines
    "begin_drag",
    "drag_move",
    "begin_resize",
    "resize_move",
    "begin_crop_edge",
    "crop_edge_move",
    "end_crop_edge",
    # Reducer
    "TranslateCommand",
    "ScaleCommand",
    "SetRectCommand",
    "SetCropCommand",
    "AddBlockCommand",
    "DeleteBlockCommand",
    "CommitCommand",
    "CancelCommand",
    "EditorCommand",
    "EditorState",
    "apply_command",
    "add_block",
    "delete_block",
    "reduce",
]
