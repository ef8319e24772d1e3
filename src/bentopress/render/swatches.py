"""Colour swatches — named background/text tokens and their CSS values.

The editor stores Tailwind-style tokens (``bg-blue-100``, ``text-white``).
Static output has no utility framework, so tokens resolve to literal colours
through these read-only tables.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from bentopress.render.sanitize import safe_css_value

if TYPE_CHECKING:
    from bentopress.model import Block

DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_TEXT = "#000000"

BACKGROUND_SWATCHES = MappingProxyType({
    "bg-transparent": "transparent",
    "bg-white": "#ffffff",
    "bg-gray-50": "#f9fafb",
    "bg-gray-100": "#f3f4f6",
    "bg-gray-200": "#e5e7eb",
    "bg-gray-800": "#1f2937",
    "bg-gray-900": "#111827",
    "bg-black": "#000000",
    "bg-red-100": "#fee2e2",
    "bg-red-500": "#ef4444",
    "bg-orange-100": "#ffedd5",
    "bg-orange-500": "#f97316",
    "bg-amber-100": "#fef3c7",
    "bg-yellow-100": "#fef9c3",
    "bg-yellow-400": "#facc15",
    "bg-green-100": "#dcfce7",
    "bg-green-500": "#22c55e",
    "bg-emerald-100": "#d1fae5",
    "bg-teal-100": "#ccfbf1",
    "bg-cyan-100": "#cffafe",
    "bg-blue-100": "#dbeafe",
    "bg-blue-500": "#3b82f6",
    "bg-blue-600": "#2563eb",
    "bg-indigo-100": "#e0e7ff",
    "bg-indigo-600": "#4f46e5",
    "bg-violet-100": "#ede9fe",
    "bg-violet-600": "#7c3aed",
    "bg-purple-100": "#f3e8ff",
    "bg-pink-100": "#fce7f3",
    "bg-pink-500": "#ec4899",
    "bg-rose-100": "#ffe4e6",
})

TEXT_SWATCHES = MappingProxyType({
    "text-black": "#000000",
    "text-white": "#ffffff",
    "text-gray-700": "#374151",
    "text-gray-900": "#111827",
})


def resolve_background(block: Block) -> str:
    """Background CSS value for a block.

    A raw ``custom_background`` wins over the ``color`` token; a raw value
    that fails the CSS safety check is ignored and the token is used instead.
    """
    raw = safe_css_value(block.custom_background)
    if raw:
        return raw
    return BACKGROUND_SWATCHES.get(block.color, DEFAULT_BACKGROUND)


def resolve_text_color(block: Block) -> str:
    return TEXT_SWATCHES.get(block.text_color, DEFAULT_TEXT)


def resolve_icon_color(text_color: str, brand_color: str) -> str:
    """Icon tint: brand colour unless the block pins a neutral text token."""
    if not text_color or text_color == "text-brand":
        return brand_color
    return TEXT_SWATCHES.get(text_color, brand_color)
