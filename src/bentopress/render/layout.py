"""Style/layout resolver — grid placement, size tiers and text scale.

Everything derived from a block's spans lives here so the preview and the
export path resolve identical classes and declarations.  The tables are
module-level constants and are never mutated at render time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bentopress._types import SizeTier
    from bentopress.model import Block

SIZE_TIERS: tuple[SizeTier, ...] = ("xs", "sm", "md", "lg")

# Breakpoints (min-width, px) for the second and third column of TEXT_SCALE
BREAKPOINTS: tuple[int, int] = (640, 1024)

# Font sizes in rem per visual role and tier: (base, >=640px, >=1024px).
# Every role grows monotonically from xs to lg at every breakpoint.
TEXT_SCALE: MappingProxyType[str, MappingProxyType[str, tuple[float, float, float]]] = (
    MappingProxyType({
        "title_default": MappingProxyType({
            "xs": (0.7, 0.85, 0.95),
            "sm": (0.8, 0.95, 1.05),
            "md": (0.85, 1.0, 1.25),
            "lg": (0.95, 1.15, 1.4),
        }),
        "title_text": MappingProxyType({
            "xs": (0.8, 1.0, 1.1),
            "sm": (1.0, 1.2, 1.35),
            "md": (1.05, 1.35, 1.75),
            "lg": (1.15, 1.5, 2.0),
        }),
        "subtext": MappingProxyType({
            "xs": (0.55, 0.65, 0.7),
            "sm": (0.65, 0.75, 0.8),
            "md": (0.7, 0.8, 0.9),
            "lg": (0.75, 0.875, 1.0),
        }),
        "body": MappingProxyType({
            "xs": (0.65, 0.75, 0.85),
            "sm": (0.7, 0.85, 0.95),
            "md": (0.75, 0.9, 1.1),
            "lg": (0.85, 1.0, 1.2),
        }),
        "overlay_title": MappingProxyType({
            "xs": (0.75, 0.75, 0.8),
            "sm": (0.875, 0.875, 0.95),
            "md": (1.0, 1.125, 1.125),
            "lg": (1.125, 1.25, 1.35),
        }),
        "overlay_subtitle": MappingProxyType({
            "xs": (0.625, 0.625, 0.65),
            "sm": (0.75, 0.75, 0.75),
            "md": (0.8, 0.875, 0.875),
            "lg": (0.875, 1.0, 1.0),
        }),
    })
)

# CSS selector (inside ``.bento-item.size-<tier>``) for each role
ROLE_SELECTORS = MappingProxyType({
    "title_default": ".block-title",
    "title_text": ".type-text .block-title",
    "subtext": ".block-sub",
    "body": ".block-body",
    "overlay_title": ".media-title",
    "overlay_subtitle": ".media-subtext",
})


@dataclass(frozen=True, slots=True)
class ShapeFlags:
    """Coarse block shape used by the feed renderer."""

    is_large: bool
    is_wide: bool
    is_tall: bool
    is_small: bool


def size_tier(col_span: int, row_span: int) -> SizeTier:
    """Bucket a block by area, floored by its smaller dimension."""
    min_dim = min(col_span, row_span)
    area = col_span * row_span
    if min_dim <= 1 or area <= 4:
        return "xs"
    if min_dim <= 2 or area <= 8:
        return "sm"
    if min_dim <= 3 or area <= 12:
        return "md"
    return "lg"


def block_size_tier(block: Block) -> SizeTier:
    return size_tier(block.col_span, block.row_span)


def text_sizes(tier: SizeTier) -> dict[str, tuple[float, float, float]]:
    """Per-role font sizes for a tier."""
    return {role: scale[tier] for role, scale in TEXT_SCALE.items()}


def clamp_col_span(block: Block, columns: int) -> int:
    return max(1, min(block.col_span, columns))


def grid_placement(block: Block, columns: int) -> str:
    """CSS grid declarations for a block.

    Explicit coordinates emit ``start / span N``; otherwise only ``span N``
    so dense auto-flow places the block.
    """
    col_span = clamp_col_span(block, columns)
    row_span = block.row_span
    column = block.grid_column if block.grid_column and block.grid_column >= 1 else None
    row = block.grid_row if block.grid_row and block.grid_row >= 1 else None

    col_decl = f"{column} / span {col_span}" if column is not None else f"span {col_span}"
    row_decl = f"{row} / span {row_span}" if row is not None else f"span {row_span}"
    return f"grid-column: {col_decl}; grid-row: {row_decl};"


def border_radius(block: Block) -> str:
    """Corner radius stepping up with the block's smaller dimension."""
    min_dim = min(block.col_span, block.row_span)
    if min_dim <= 1:
        return "0.5rem"
    if min_dim <= 2:
        return "0.625rem"
    if min_dim <= 3:
        return "0.75rem"
    return "0.875rem"


def shape_flags(block: Block) -> ShapeFlags:
    c, r = block.col_span, block.row_span
    return ShapeFlags(
        is_large=c >= 2 and r >= 2,
        is_wide=c >= 2 and r == 1,
        is_tall=c == 1 and r >= 2,
        is_small=c == 1 and r == 1,
    )


def youtube_size_class(flags: ShapeFlags) -> str:
    if flags.is_large:
        return "size-large"
    if flags.is_small:
        return "size-small"
    if flags.is_tall:
        return "size-tall"
    return ""


def sort_key(block: Block) -> tuple[float, float]:
    """Reading-order key: row, then column; unplaced blocks sort last."""
    row = block.grid_row if block.grid_row is not None else math.inf
    column = block.grid_column if block.grid_column is not None else math.inf
    return (row, column)
