"""Layout validation and repair.

validate_layout never raises: whatever it receives, it returns a layout that
satisfies every block invariant, plus the list of structural problems it had
to repair (dropped or truncated blocks, reassigned ids). Out-of-range numbers
are clamped silently.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from pagecraft.dsl.factory import DEFAULT_BLOCK_SIZES, new_block_id
from pagecraft.dsl.schema import (
    Block,
    BlockType,
    ImageBlock,
    LinkBlock,
    LinkStyleConfig,
    Outline,
    PaddingConfig,
    PageSideLayout,
    Rect,
    ShapeBlock,
    SvgBlock,
    TextBlock,
    TextStyleConfig,
    VisualCrop,
)
from pagecraft.engine.aspect_ratio import normalize_aspect_ratio, svg_block_aspect_ratio
from pagecraft.engine.links import DEFAULT_LINK_LABEL, sanitize_link_label, sanitize_link_url
from pagecraft.engine.padding import DEFAULT_PAD_X_RATIO, DEFAULT_PAD_Y_RATIO
from pagecraft.engine.units import (
    DEFAULT_BLOCK_X,
    DEFAULT_BLOCK_Y,
    MAX_BLOCKS_PER_SIDE,
    MAX_CORNER_RADIUS,
    MAX_FONT_SIZE,
    MAX_FONT_WEIGHT,
    MAX_LINE_HEIGHT,
    MAX_LINK_BORDER_RADIUS,
    MAX_LINK_FONT_SIZE,
    MAX_OUTLINE_WIDTH,
    MAX_PADDING_RATIO,
    MAX_STROKE_WIDTH,
    MIN_BLOCK_SIZE,
    MIN_FONT_SIZE,
    MIN_FONT_WEIGHT,
    MIN_LINE_HEIGHT,
    MIN_LINK_FONT_SIZE,
    MIN_OUTLINE_WIDTH,
    clamp,
    is_number,
    to_number,
)
from pagecraft.engine.visual_crop import to_optional_visual_crop

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND_COLOR = "#ffffff"
TEXT_ALIGNMENTS = ("left", "center", "right")
OBJECT_FITS = ("cover", "contain")
IMAGE_SHAPES = ("rect", "circle")
SHAPE_KINDS = ("rectangle", "ellipse", "triangle", "line")


@dataclass
class ValidationResult:
    """Repaired layout plus the structural problems found."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    layout: PageSideLayout = field(default_factory=PageSideLayout)


# ============================================================================
# Raw-field helpers
# ============================================================================


def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    """Layout/block input as a mapping with camelCase keys, if possible."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, Mapping):
        return value
    return None


def _field(raw: Mapping[str, Any], camel: str, snake: Optional[str] = None) -> Any:
    """Read a field by its JSON name, accepting the Python name too."""
    if camel in raw:
        return raw[camel]
    if snake is not None:
        return raw.get(snake)
    return None


def _text(value: Any, default: str) -> str:
    """Non-empty string or default."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _choice(value: Any, choices: tuple[str, ...], default: str) -> str:
    return value if isinstance(value, str) and value in choices else default


def _round_font_weight(value: Any, default: int) -> int:
    weight = to_number(value, default)
    rounded = math.floor(weight / 100 + 0.5) * 100
    return int(clamp(rounded, MIN_FONT_WEIGHT, MAX_FONT_WEIGHT))


# ============================================================================
# Geometry
# ============================================================================


def clamp_normalized_rect(rect: Rect) -> Rect:
    """Clamp a rect so it stays on the page with at least the minimum size.

    x/y are clamped before w/h so the resulting box never exceeds the page.
    """
    x = clamp(rect.x, 0.0, 1.0 - MIN_BLOCK_SIZE)
    y = clamp(rect.y, 0.0, 1.0 - MIN_BLOCK_SIZE)
    w = clamp(rect.w, MIN_BLOCK_SIZE, 1.0 - x)
    h = clamp(rect.h, MIN_BLOCK_SIZE, 1.0 - y)
    return Rect(x=x, y=y, w=w, h=h)


def _repair_rect(raw: Mapping[str, Any], block_type: BlockType) -> Rect:
    default_w, default_h = DEFAULT_BLOCK_SIZES[block_type]
    x = clamp(to_number(raw.get("x"), DEFAULT_BLOCK_X), 0.0, 1.0 - MIN_BLOCK_SIZE)
    y = clamp(to_number(raw.get("y"), DEFAULT_BLOCK_Y), 0.0, 1.0 - MIN_BLOCK_SIZE)
    w = clamp(to_number(raw.get("w"), default_w), MIN_BLOCK_SIZE, 1.0 - x)
    h = clamp(to_number(raw.get("h"), default_h), MIN_BLOCK_SIZE, 1.0 - y)
    return Rect(x=x, y=y, w=w, h=h)


# ============================================================================
# Styles
# ============================================================================


def validate_text_style(style: Any) -> TextStyleConfig:
    """Clamp text style values to their allowed ranges."""
    raw = _as_mapping(style) or {}
    defaults = TextStyleConfig()
    return TextStyleConfig(
        font_size=clamp(to_number(_field(raw, "fontSize", "font_size"), defaults.font_size), MIN_FONT_SIZE, MAX_FONT_SIZE),
        font_weight=_round_font_weight(_field(raw, "fontWeight", "font_weight"), defaults.font_weight),
        text_align=_choice(_field(raw, "textAlign", "text_align"), TEXT_ALIGNMENTS, "left"),
        color=_text(raw.get("color"), defaults.color),
        line_height=clamp(
            to_number(_field(raw, "lineHeight", "line_height"), defaults.line_height),
            MIN_LINE_HEIGHT,
            MAX_LINE_HEIGHT,
        ),
        font_family=_text(_field(raw, "fontFamily", "font_family"), defaults.font_family),
    )


def validate_link_style(style: Any) -> LinkStyleConfig:
    """Clamp link button style values to their allowed ranges."""
    raw = _as_mapping(style) or {}
    defaults = LinkStyleConfig()
    return LinkStyleConfig(
        font_size=clamp(
            to_number(_field(raw, "fontSize", "font_size"), defaults.font_size),
            MIN_LINK_FONT_SIZE,
            MAX_LINK_FONT_SIZE,
        ),
        font_weight=_round_font_weight(_field(raw, "fontWeight", "font_weight"), defaults.font_weight),
        text_align=_choice(_field(raw, "textAlign", "text_align"), TEXT_ALIGNMENTS, defaults.text_align),
        background_color=_text(_field(raw, "backgroundColor", "background_color"), defaults.background_color),
        text_color=_text(_field(raw, "textColor", "text_color"), defaults.text_color),
        font_family=_text(_field(raw, "fontFamily", "font_family"), defaults.font_family),
        border_radius=clamp(
            to_number(_field(raw, "borderRadius", "border_radius"), defaults.border_radius),
            0,
            MAX_LINK_BORDER_RADIUS,
        ),
    )


def _validate_outline(value: Any) -> Optional[Outline]:
    raw = _as_mapping(value)
    if raw is None:
        return None
    defaults = Outline()
    return Outline(
        color=_text(raw.get("color"), defaults.color),
        width=clamp(to_number(raw.get("width"), defaults.width), MIN_OUTLINE_WIDTH, MAX_OUTLINE_WIDTH),
    )


def _validate_crop(value: Any) -> Optional[VisualCrop]:
    if isinstance(value, VisualCrop) or isinstance(value, Mapping):
        return to_optional_visual_crop(value)
    return None


def _validate_padding(value: Any) -> Optional[PaddingConfig]:
    raw = _as_mapping(value)
    if raw is None:
        return None
    return PaddingConfig(
        pad_x_ratio=clamp(to_number(_field(raw, "padXRatio", "pad_x_ratio"), DEFAULT_PAD_X_RATIO), 0.0, MAX_PADDING_RATIO),
        pad_y_ratio=clamp(to_number(_field(raw, "padYRatio", "pad_y_ratio"), DEFAULT_PAD_Y_RATIO), 0.0, MAX_PADDING_RATIO),
    )


# ============================================================================
# Blocks
# ============================================================================


def _text_payload(raw: Mapping[str, Any]) -> dict[str, Any]:
    content = raw.get("content")
    return {
        "content": content if isinstance(content, str) else "",
        "style": validate_text_style(raw.get("style")),
    }


def _image_payload(raw: Mapping[str, Any]) -> dict[str, Any]:
    asset_path = _field(raw, "assetPath", "asset_path")
    return {
        "asset_path": asset_path if isinstance(asset_path, str) else "",
        "object_fit": _choice(_field(raw, "objectFit", "object_fit"), OBJECT_FITS, "cover"),
        "crop": _validate_crop(raw.get("crop")),
        "shape": _choice(raw.get("shape"), IMAGE_SHAPES, "rect"),
    }


def _svg_payload(raw: Mapping[str, Any]) -> dict[str, Any]:
    svg_code = _field(raw, "svgCode", "svg_code")
    return {
        "svg_code": svg_code if isinstance(svg_code, str) else "",
        "object_fit": _choice(_field(raw, "objectFit", "object_fit"), OBJECT_FITS, "contain"),
        "crop": _validate_crop(raw.get("crop")),
    }


def _link_payload(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "label": sanitize_link_label(raw.get("label", DEFAULT_LINK_LABEL)),
        "url": sanitize_link_url(raw.get("url")),
        "style": validate_link_style(raw.get("style")),
    }


def _shape_payload(raw: Mapping[str, Any]) -> dict[str, Any]:
    defaults = ShapeBlock.model_fields
    return {
        "shape_kind": _choice(_field(raw, "shapeKind", "shape_kind"), SHAPE_KINDS, defaults["shape_kind"].default),
        "fill_color": _text(_field(raw, "fillColor", "fill_color"), defaults["fill_color"].default),
        "stroke_color": _text(_field(raw, "strokeColor", "stroke_color"), defaults["stroke_color"].default),
        "stroke_width": clamp(
            to_number(_field(raw, "strokeWidth", "stroke_width"), defaults["stroke_width"].default),
            0,
            MAX_STROKE_WIDTH,
        ),
    }


_BLOCK_BUILDERS: dict[BlockType, tuple[type, Callable[[Mapping[str, Any]], dict[str, Any]]]] = {
    BlockType.TEXT: (TextBlock, _text_payload),
    BlockType.IMAGE: (ImageBlock, _image_payload),
    BlockType.SVG: (SvgBlock, _svg_payload),
    BlockType.LINK: (LinkBlock, _link_payload),
    BlockType.SHAPE: (ShapeBlock, _shape_payload),
}

_KNOWN_TYPES = frozenset(t.value for t in BlockType)


def _repair_block(raw: Mapping[str, Any], block_id: str, index: int) -> Block:
    block_type = BlockType(raw["type"])
    model, payload_builder = _BLOCK_BUILDERS[block_type]
    rect = _repair_rect(raw, block_type)
    payload = payload_builder(raw)

    box_ratio = rect.w / rect.h
    declared_ratio = _field(raw, "aspectRatio", "aspect_ratio")
    fallback_ratio = box_ratio
    if block_type == BlockType.SVG and not (is_number(declared_ratio) and declared_ratio > 0):
        fallback_ratio = svg_block_aspect_ratio(payload["svg_code"], box_ratio)

    corner_radius = _field(raw, "cornerRadius", "corner_radius")
    link_url = sanitize_link_url(_field(raw, "linkUrl", "link_url"))

    return model(
        id=block_id,
        x=rect.x,
        y=rect.y,
        w=rect.w,
        h=rect.h,
        z_index=int(math.floor(to_number(_field(raw, "zIndex", "z_index"), index) + 0.5)),
        aspect_ratio=normalize_aspect_ratio(declared_ratio, fallback_ratio),
        outline=_validate_outline(raw.get("outline")),
        corner_radius=clamp(corner_radius, 0, MAX_CORNER_RADIUS) if is_number(corner_radius) else None,
        link_url=link_url or None,
        **payload,
    )


# ============================================================================
# Layout
# ============================================================================


def validate_layout(layout: Any) -> ValidationResult:
    """Validate a full page-side layout.

    Args:
        layout: A PageSideLayout, a JSON-like mapping, or anything else.

    Returns:
        ValidationResult with the repaired layout and structural errors.
    """
    errors: list[str] = []

    raw = _as_mapping(layout)
    if raw is None:
        errors.append("Layout must be an object; treated as an empty layout.")
        raw = {}

    raw_blocks = raw.get("blocks", [])
    if not isinstance(raw_blocks, (list, tuple)):
        errors.append("Layout blocks must be a list; treated as empty.")
        raw_blocks = []

    kept: list[Mapping[str, Any]] = []
    for index, entry in enumerate(raw_blocks):
        entry = _as_mapping(entry)
        if entry is None:
            errors.append(f"Block {index} is not an object; dropped.")
            continue
        block_type = entry.get("type")
        if isinstance(block_type, BlockType):
            block_type = block_type.value
        if not isinstance(block_type, str) or block_type not in _KNOWN_TYPES:
            errors.append(f"Block {index} has unknown type {block_type!r}; dropped.")
            continue
        kept.append(entry)

    if len(kept) > MAX_BLOCKS_PER_SIDE:
        errors.append(
            f"At most {MAX_BLOCKS_PER_SIDE} blocks per side. {len(kept)} blocks found."
        )
        kept = kept[:MAX_BLOCKS_PER_SIDE]

    seen_ids: set[str] = set()
    blocks: list[Block] = []
    for index, entry in enumerate(kept):
        block_id = entry.get("id")
        if not isinstance(block_id, str) or not block_id.strip() or block_id in seen_ids:
            replacement = new_block_id()
            errors.append(f"Block {index} has a missing or duplicate id; assigned {replacement}.")
            block_id = replacement
        seen_ids.add(block_id)
        blocks.append(_repair_block(entry, block_id, index))

    background = _field(raw, "backgroundColor", "background_color")
    validated = PageSideLayout(
        blocks=blocks,
        background_color=_text(background, DEFAULT_BACKGROUND_COLOR),
        padding_override=_validate_padding(_field(raw, "paddingOverride", "padding_override")),
    )

    if errors:
        logger.info(f"Layout repaired with {len(errors)} structural issue(s)")

    return ValidationResult(valid=not errors, errors=errors, layout=validated)


def can_add_block(layout: PageSideLayout) -> bool:
    """Check whether one more block fits on the page side."""
    return len(layout.blocks) < MAX_BLOCKS_PER_SIDE
