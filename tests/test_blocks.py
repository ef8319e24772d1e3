"""Tests for bentopress.render.blocks — per-variant tile rendering."""

from __future__ import annotations

import re
from types import MappingProxyType

import pytest
from markupsafe import Markup

from bentopress.model import BlockType, VideoSummary
from bentopress.render.blocks import (
    RenderContext,
    block_classes,
    image_key,
    render_block,
)

from .conftest import CHANNEL_ID, VIDEO_IDS, make_block

PAYLOAD = '<script>alert("x")</script>&\'"'
UNSAFE_URLS = ("javascript:alert(1)", "data:text/html,<b>", "vbscript:x", "//evil.example")


def _render(block_type: BlockType = BlockType.TEXT, *, context: RenderContext | None = None,
            **kwargs: object) -> str:
    return str(render_block(make_block("b1", block_type, **kwargs), context or RenderContext()))


def _text_nodes(markup: str) -> str:
    """Markup with all tags removed; what remains is escaped text."""
    return re.sub(r"<[^>]*>", "", markup)


class TestTileShell:
    def test_returns_markup(self) -> None:
        assert isinstance(render_block(make_block(), RenderContext()), Markup)

    def test_classes_and_data_attributes(self) -> None:
        out = _render(BlockType.TEXT, col_span=3, row_span=2, title="Hi")
        assert out.startswith('<div data-block-id="b1" data-block-type="TEXT"')
        assert 'class="bento-item col-span-3 row-span-2 size-sm"' in out

    def test_row_span_one_has_no_row_class(self) -> None:
        assert "row-span" not in block_classes(make_block(col_span=2), RenderContext())

    def test_col_span_clamped_to_context_columns(self) -> None:
        out = _render(col_span=12, context=RenderContext(columns=6))
        assert "col-span-6" in out
        assert "grid-column: span 6;" in out

    def test_inline_style(self) -> None:
        out = _render(color="bg-black", text_color="text-white", grid_row=2, grid_column=3)
        assert "background: #000000;" in out
        assert "color: #ffffff;" in out
        assert "grid-column: 3 / span 1; grid-row: 2 / span 1;" in out

    def test_deterministic(self) -> None:
        block = make_block("b1", BlockType.LINK, title="T", content="https://example.com")
        assert render_block(block, RenderContext()) == render_block(block, RenderContext())


class TestEscaping:
    @pytest.mark.parametrize(
        "block_type",
        [BlockType.LINK, BlockType.TEXT, BlockType.MEDIA, BlockType.SOCIAL, BlockType.MAP],
    )
    def test_user_text_never_unescaped(self, block_type: BlockType) -> None:
        out = _render(block_type, title=PAYLOAD, subtext=PAYLOAD, content=PAYLOAD)
        assert "<script>" not in out
        assert 'alert("x")' not in out

    def test_escaped_exactly_once(self) -> None:
        out = _render(BlockType.TEXT, title="Tom & Jerry")
        assert "Tom &amp; Jerry" in out
        assert "&amp;amp;" not in out

    def test_text_content_escaped(self) -> None:
        out = _render(BlockType.TEXT, title="a<b", content='"quoted"')
        text = _text_nodes(out)
        assert "a&lt;b" in text
        assert "&#34;quoted&#34;" in text

    def test_attribute_values_escaped(self) -> None:
        out = _render(BlockType.SOCIAL, social_platform='x" onclick="1', social_handle="jane")
        assert 'onclick="1"' not in out


class TestLinkBlock:
    def test_safe_link(self) -> None:
        out = _render(BlockType.LINK, title="Site", content="https://example.com/a")
        assert out.startswith("<a ")
        assert 'href="https://example.com/a"' in out
        assert 'target="_blank" rel="noopener noreferrer"' in out

    @pytest.mark.parametrize("url", UNSAFE_URLS)
    def test_unsafe_link_dropped_text_kept(self, url: str) -> None:
        out = _render(BlockType.LINK, title="My title", subtext="My sub", content=url)
        assert "href" not in out
        assert out.startswith("<div ")
        assert "My title" in out
        assert "My sub" in out

    def test_javascript_scenario(self) -> None:
        out = _render(BlockType.LINK, title="Click", subtext="me", content="javascript:alert(1)")
        assert "javascript" not in out
        assert "Click" in out

    def test_link_with_image_uses_background(self) -> None:
        out = _render(BlockType.LINK, content="https://example.com",
                      image_url="https://cdn.example.com/pic.jpg")
        assert "background-image:url(&#39;https://cdn.example.com/pic.jpg&#39;)" in out
        assert '<div class="media-title">Link</div>' in out

    def test_unsafe_image_not_emitted(self) -> None:
        out = _render(BlockType.LINK, title="T", image_url="javascript:alert(1)")
        assert "background-image" not in out
        assert "link-only" in out

    def test_extracted_asset_preferred(self) -> None:
        block = make_block("b1", BlockType.LINK, image_url="data:image/png;base64,AAAA")
        context = RenderContext(images=MappingProxyType({image_key(block): "assets/block-b1.png"}))
        out = str(render_block(block, context))
        assert "assets/block-b1.png" in out
        assert "data:image" not in out


class TestMediaBlock:
    def test_image_with_position(self) -> None:
        from bentopress.model import MediaPosition

        out = _render(BlockType.MEDIA, image_url="https://example.com/p.jpg",
                      media_position=MediaPosition(x=20, y=80), title="Cap")
        assert 'src="https://example.com/p.jpg"' in out
        assert "object-position:20% 80%;" in out
        assert '<div class="media-title">Cap</div>' in out

    def test_empty_media(self) -> None:
        out = _render(BlockType.MEDIA)
        assert 'class="media-empty"' in out
        assert "media-overlay" not in out

    def test_data_uri_kept_for_preview(self) -> None:
        out = _render(BlockType.MEDIA, image_url="data:image/png;base64,AAAA")
        assert 'src="data:image/png;base64,AAAA"' in out


class TestSocialBlocks:
    def test_handle_scenario(self) -> None:
        out = _render(BlockType.SOCIAL, social_platform="x", social_handle="@jane")
        assert 'href="https://x.com/jane"' in out
        assert 'data-social-platform="x"' in out
        assert 'data-social-handle="@jane"' in out
        assert '<div class="block-title">X</div>' in out

    def test_fallback_to_content_url(self) -> None:
        out = _render(BlockType.SOCIAL, social_platform="x", social_handle="bad handle",
                      content="https://x.com/other")
        assert 'href="https://x.com/other"' in out

    def test_unknown_platform_renders_without_link(self) -> None:
        out = _render(BlockType.SOCIAL, social_platform="myspace", social_handle="jane")
        assert "href" not in out
        assert "Social" in out

    def test_social_icon_block(self) -> None:
        out = _render(BlockType.SOCIAL_ICON, social_platform="github", social_handle="jane")
        assert 'href="https://github.com/jane"' in out
        assert "social-icon-block" in out
        assert "https://cdn.simpleicons.org/github/181717" in out
        assert "data-social-platform" not in out


class TestMapBlock:
    def test_iframe(self) -> None:
        out = _render(BlockType.MAP, content="Lyon, France")
        assert '<iframe class="map-frame"' in out
        assert "q=Lyon%2C%20France" in out
        assert 'sandbox="allow-scripts allow-same-origin"' in out

    def test_default_location(self) -> None:
        assert "q=Paris" in _render(BlockType.MAP)

    def test_data_uri_scenario(self) -> None:
        out = _render(BlockType.MAP, content="data:text/html,<script>alert(1)</script>")
        assert "Invalid location" in out
        assert "<iframe" not in out
        assert "<script>" not in out


class TestSpacer:
    def test_spacer(self) -> None:
        out = _render(BlockType.SPACER, title="ignored")
        assert "no-hover" in out
        assert "ignored" not in out


class TestFeedBlocks:
    def _videos(self, n: int) -> tuple[VideoSummary, ...]:
        return tuple(VideoSummary(id=v, title=f"Video {i}") for i, v in enumerate(VIDEO_IDS[:n]))

    def test_grid_with_cached_videos(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid",
                      col_span=2, row_span=2, channel_title="Jane TV",
                      youtube_videos=self._videos(4))
        assert out.count('class="yt-video"') == 4
        assert "yt-grid" in out
        assert "size-large" in out
        assert "Jane TV" in out
        assert "https://www.youtube.com/watch?v=dQw4w9WgXcQ" in out

    def test_small_block_shows_two(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid",
                      youtube_videos=self._videos(4))
        assert out.count('class="yt-video"') == 2

    def test_max_videos_caps_count(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="list",
                      col_span=2, row_span=2, youtube_videos=self._videos(4),
                      context=RenderContext(max_videos=3))
        assert out.count('class="yt-video"') == 3
        assert "yt-list" in out

    def test_tall_block_uses_list(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid",
                      col_span=1, row_span=3)
        assert "yt-list" in out

    def test_invalid_cached_video_ids_skipped(self) -> None:
        videos = (VideoSummary(id='"><script>'), VideoSummary(id=VIDEO_IDS[0]))
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid",
                      col_span=2, row_span=2, youtube_videos=videos)
        assert out.count('class="yt-video"') == 1
        assert "<script>" not in out

    def test_static_empty_cache_placeholder(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid")
        assert "No videos" in out
        assert "data-channel-id" not in out
        assert "youtube-fetcher" not in out

    def test_hydrated_empty_cache(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid",
                      context=RenderContext(hydrate=True))
        assert "Loading..." in out
        assert f'data-channel-id="{CHANNEL_ID}"' in out
        assert 'data-mode="grid"' in out
        assert "youtube-fetcher" in out

    def test_invalid_channel_never_hydrated(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id="UC-bad", youtube_mode="grid",
                      context=RenderContext(hydrate=True))
        assert "data-channel-id" not in out

    def test_single_mode_with_video(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="single",
                      youtube_video_id=VIDEO_IDS[1], title="Latest", subtext="Watch this")
        assert "yt-single" in out
        assert f"https://img.youtube.com/vi/{VIDEO_IDS[1]}/maxresdefault.jpg" in out
        assert f'href="https://www.youtube.com/watch?v={VIDEO_IDS[1]}"' in out
        assert "Watch this" in out

    def test_single_mode_placeholder_heading(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID)
        assert '<span class="placeholder">Add title…</span>' in out
        assert "yt-single-bg" in out
        assert "background-image" not in out

    def test_feed_tile_is_not_a_link(self) -> None:
        out = _render(BlockType.SOCIAL, channel_id=CHANNEL_ID, youtube_mode="grid",
                      content="https://youtube.com/@jane")
        assert out.startswith("<div ")
