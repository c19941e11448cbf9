"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from pagecraft.api.main import app
from pagecraft.dsl.schema import (
    ImageBlock,
    PageSideLayout,
    SvgBlock,
    TextBlock,
    VisualCrop,
)
from pagecraft.interaction.session import CanvasViewport, Pointer


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def viewport() -> CanvasViewport:
    """600x600 px safe area: 6 px is 0.01 normalized."""
    return CanvasViewport(width_px=600, height_px=600)


@pytest.fixture
def origin_pointer() -> Pointer:
    return Pointer(x=300, y=300)


@pytest.fixture
def image_block() -> ImageBlock:
    return ImageBlock(id="img", x=0.1, y=0.1, w=0.3, h=0.2, z_index=1, aspect_ratio=1.5)


@pytest.fixture
def cropped_image_block() -> ImageBlock:
    """Image whose source is 2:1 with a quarter trimmed on the left."""
    return ImageBlock(
        id="cropped",
        x=0.2,
        y=0.2,
        w=0.3,
        h=0.2,
        z_index=1,
        aspect_ratio=1.5,
        crop=VisualCrop(left=0.25),
    )


@pytest.fixture
def target_block() -> TextBlock:
    """Stationary block whose left edge sits at x=0.42."""
    return TextBlock(id="target", x=0.42, y=0.6, w=0.2, h=0.1, z_index=2, aspect_ratio=2.0, content="Target")


@pytest.fixture
def sample_layout(image_block, target_block) -> PageSideLayout:
    return PageSideLayout(blocks=[image_block, target_block])


@pytest.fixture
def sample_layout_dict() -> dict:
    """Layout as it arrives over the wire (camelCase, partly invalid)."""
    return {
        "backgroundColor": "#fafafa",
        "blocks": [
            {
                "id": "title",
                "type": "text",
                "x": 0.1,
                "y": 0.05,
                "w": 0.8,
                "h": 0.15,
                "zIndex": 1,
                "content": "Hello",
                "style": {"fontSize": 400, "fontWeight": 449, "textAlign": "justify"},
            },
            {
                "id": "photo",
                "type": "image",
                "x": 0.95,
                "y": 0.3,
                "w": 0.4,
                "h": 0.3,
                "zIndex": 2,
                "assetPath": "books/1/photo.jpg",
                "crop": {"left": 0.6, "right": 0.6, "top": 0, "bottom": 0},
            },
            {
                "id": "logo",
                "type": "svg",
                "x": 0.5,
                "y": 0.5,
                "w": 0.2,
                "h": 0.2,
                "zIndex": 3,
                "svgCode": '<svg viewBox="0 0 200 100"></svg>',
            },
            {
                "id": "cta",
                "type": "link",
                "x": 0.1,
                "y": 0.8,
                "w": 0.3,
                "h": 0.08,
                "zIndex": 4,
                "label": "  ",
                "url": "example.com/shop",
            },
        ],
    }


@pytest.fixture
def raw_text_blocks():
    """Factory for count valid text blocks as raw dicts."""

    def make(count: int) -> list[dict]:
        return [
            {
                "id": f"t{i}",
                "type": "text",
                "x": 0.05,
                "y": 0.01 * i,
                "w": 0.2,
                "h": 0.05,
                "zIndex": i,
                "content": f"Block {i}",
            }
            for i in range(count)
        ]

    return make


@pytest.fixture
def full_layout() -> PageSideLayout:
    """Layout holding the maximum number of blocks."""
    return PageSideLayout(
        blocks=[
            TextBlock(id=f"t{i}", x=0.05, y=0.01 * i, w=0.2, h=0.05, z_index=i, aspect_ratio=4.0)
            for i in range(20)
        ]
    )


@pytest.fixture
def svg_block() -> SvgBlock:
    return SvgBlock(id="vec", x=0.3, y=0.3, w=0.2, h=0.2, z_index=1, aspect_ratio=1.0, svg_code="<svg/>")


@pytest.fixture
def check_invariants():
    """Assert that every block of a layout is a valid committed block."""

    def check(layout: PageSideLayout) -> None:
        ids = [block.id for block in layout.blocks]
        assert len(ids) == len(set(ids))
        assert len(ids) <= 20
        for block in layout.blocks:
            assert 0 <= block.x <= 1
            assert 0 <= block.y <= 1
            assert block.w >= 0.01
            assert block.h >= 0.01
            assert block.x + block.w <= 1 + 1e-9
            assert block.y + block.h <= 1 + 1e-9
            assert 0.05 <= block.aspect_ratio <= 20
            crop = getattr(block, "crop", None)
            if crop is not None:
                assert crop.left + crop.right <= 0.95 + 1e-9
                assert crop.top + crop.bottom <= 0.95 + 1e-9

    return check
