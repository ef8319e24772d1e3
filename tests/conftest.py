"""Shared test fixtures for bentopress."""

from __future__ import annotations

import base64
import io
import json
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from bentopress.model import Block, BlockType, Profile, SiteData

CHANNEL_ID = "UC" + "a" * 22
VIDEO_IDS = ("dQw4w9WgXcQ", "9bZkp7q19f0", "kJQP7kiw5Fk", "JGwWNGJdvx8", "OPf0YbXqDm0")


def make_block(block_id: str = "b1", block_type: BlockType = BlockType.TEXT, **kwargs: Any) -> Block:
    """Build a Block with test-friendly defaults."""
    return Block(id=block_id, type=block_type, **kwargs)


def make_site(*blocks: Block, **profile: Any) -> SiteData:
    profile.setdefault("name", "Jane Doe")
    profile.setdefault("bio", "Designer & developer")
    return SiteData(profile=Profile(**profile), blocks=tuple(blocks))


def png_bytes(color: str = "red", size: tuple[int, int] = (4, 4)) -> bytes:
    """Real PNG bytes produced by Pillow."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_uri(color: str = "red") -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(color)).decode("ascii")


@pytest.fixture
def png_uri() -> str:
    return png_data_uri()


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A camelCase site document as the editor stores it."""
    return {
        "profile": {
            "name": "Jane Doe",
            "bio": "Designer & developer\nBased in Lyon",
            "avatarUrl": "https://example.com/avatar.png",
            "theme": "light",
            "primaryColor": "#8b5cf6",
            "showBranding": True,
            "showSocialInHeader": True,
            "showFollowerCount": True,
            "socialAccounts": [
                {"platform": "x", "handle": "@jane", "followerCount": 1250},
                {"platform": "github", "handle": "jane"},
            ],
        },
        "blocks": [
            {
                "id": "link",
                "type": "LINK",
                "title": "My portfolio",
                "subtext": "Selected work",
                "content": "https://jane.example.com",
                "colSpan": 3,
                "rowSpan": 2,
                "gridColumn": 1,
                "gridRow": 1,
                "color": "bg-violet-100",
            },
            {
                "id": "note",
                "type": "TEXT",
                "title": "Hello",
                "content": "Welcome to my page",
                "colSpan": 3,
                "rowSpan": 1,
                "gridColumn": 4,
                "gridRow": 1,
            },
            {
                "id": "social",
                "type": "SOCIAL",
                "socialPlatform": "x",
                "socialHandle": "@jane",
                "colSpan": 3,
                "rowSpan": 1,
                "gridColumn": 4,
                "gridRow": 2,
            },
            {
                "id": "map",
                "type": "MAP",
                "content": "Lyon, France",
                "colSpan": 3,
                "rowSpan": 3,
            },
        ],
        "gridVersion": 2,
    }


@pytest.fixture
def sample_site(sample_document: dict[str, Any]) -> SiteData:
    return SiteData.from_dict(sample_document)


@pytest.fixture
def project(tmp_path: Path, sample_document: dict[str, Any]) -> Path:
    """Project root holding a ``site.json`` document."""
    (tmp_path / "site.json").write_text(json.dumps(sample_document), encoding="utf-8")
    return tmp_path
