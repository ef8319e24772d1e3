"""Block renderer — one pure function per block variant.

``render_block`` is the single entry point shared by the preview and the
export path.  Dispatch is an explicit table keyed by :class:`BlockType`;
SOCIAL blocks carrying a channel id branch into the video-feed renderers,
keyed by ``youtube_mode``.

Escaping:
    Every fragment is built with ``markupsafe.Markup.format``.  Plain ``str``
    values are escaped exactly once at interpolation; nested fragments are
    already ``Markup`` and pass through untouched.  Sub-renderers never
    pre-escape.

Determinism:
    Output depends only on the block and the :class:`RenderContext`.  Equal
    inputs produce byte-identical markup.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import quote

from markupsafe import Markup

from bentopress.model import Block, BlockType, MediaPosition, VideoSummary
from bentopress.render.layout import (
    block_size_tier,
    border_radius,
    clamp_col_span,
    grid_placement,
    shape_flags,
    youtube_size_class,
)
from bentopress.render.sanitize import (
    css_url,
    is_valid_location_string,
    is_valid_youtube_channel_id,
    is_valid_youtube_video_id,
    safe_image_src,
    sanitize_url,
)
from bentopress.render.swatches import resolve_background, resolve_icon_color, resolve_text_color
from bentopress.social import build_url, get_platform, icon_src

DEFAULT_LOCATION = "Paris"
WATCH_URL = "https://www.youtube.com/watch?v="
MAP_EMBED = "https://maps.google.com/maps?q={}&t=&z=13&ie=UTF8&iwloc=&output=embed"

_EXTERNAL = Markup(' target="_blank" rel="noopener noreferrer"')

_YT_ICON = Markup(
    '<svg width="{size}" height="{size}" viewBox="0 0 24 24" fill="none" '
    'stroke="currentColor" stroke-width="2" aria-hidden="true">'
    '<path d="M2.5 17a24.12 24.12 0 0 1 0-10 2 2 0 0 1 1.4-1.4 49.56 49.56 0 0 1 '
    '16.2 0A2 2 0 0 1 21.5 7a24.12 24.12 0 0 1 0 10 2 2 0 0 1-1.4 1.4 49.55 49.55 '
    '0 0 1-16.2 0A2 2 0 0 1 2.5 17"/><path d="m10 15 5-3-5-3z"/></svg>'
)

_PLAY_ICON = Markup(
    '<svg width="24" height="24" viewBox="0 0 24 24" fill="white" aria-hidden="true">'
    '<polygon points="10 8 16 12 10 16 10 8"/></svg>'
)


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Inputs shared by every block of one render.

    Attributes:
        images: Image key (``profile_avatar``, ``block_<id>``) to the bundle
            path the asset was extracted to.  Empty for the preview.
        hydrate: Emit ``data-*`` hooks for runtime feed hydration.
        columns: Active grid column count; column spans are clamped to it.
        max_videos: Upper bound on video summaries shown per feed block.

    """

    images: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    hydrate: bool = False
    columns: int = 9
    max_videos: int = 4


@dataclass(frozen=True, slots=True)
class _Fragment:
    """Inner markup of a tile plus the tile-level link and class it asks for."""

    content: Markup
    href: str = ""
    extra_class: str = ""


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def image_key(block: Block) -> str:
    return f"block_{block.id}"


def resolve_block_image(block: Block, context: RenderContext) -> str:
    """Extracted asset path if the image was decoded, else the stored value."""
    if not block.image_url:
        return ""
    return safe_image_src(context.images.get(image_key(block)) or block.image_url)


def _overlay(title: str, subtext: str) -> Markup:
    sub = Markup('<div class="media-subtext">{}</div>').format(subtext) if subtext else Markup()
    return Markup(
        '<div class="media-overlay"><div class="media-title">{}</div>{}</div>',
    ).format(title, sub)


def _position(block: Block) -> str:
    return (block.media_position or MediaPosition()).css


def _icon(platform_id: str, color: str, label: str, *, wrapper: str) -> Markup:
    """Brand icon with a letter fallback underneath."""
    letter = label[:1].upper()
    src = icon_src(platform_id, color)
    img = (
        Markup(
            '<img src="{}" alt="{}" loading="lazy" onerror="this.style.display=\'none\';">',
        ).format(src, label)
        if src
        else Markup()
    )
    return Markup('<{w} class="{cls}"><span class="{fb}">{}</span>{}</{w}>').format(
        letter,
        img,
        w=Markup(wrapper),
        cls="social-icon" if wrapper == "div" else "icon-box",
        fb="social-fallback" if wrapper == "div" else "icon-fallback",
    )


def _text_pair(title: str, subtext: str, *, fallback: str) -> Markup:
    return Markup(
        '<div><div class="block-title">{}</div><div class="block-sub">{}</div></div>',
    ).format(title or fallback, subtext)


# ---------------------------------------------------------------------------
# Variant renderers
# ---------------------------------------------------------------------------


def _render_link(block: Block, context: RenderContext) -> _Fragment:
    href = sanitize_url(block.content)
    background = css_url(resolve_block_image(block, context))
    if background:
        content = Markup(
            '<div class="full-img link-bg" style="background-image:{}; '
            'background-position:{};"></div>{}',
        ).format(background, _position(block), _overlay(block.title or "Link", block.subtext))
        return _Fragment(content, href)
    content = Markup('<div class="content-wrapper link-only">{}</div>').format(
        _text_pair(block.title, block.subtext, fallback="Link"),
    )
    return _Fragment(content, href)


def _render_text(block: Block, context: RenderContext) -> _Fragment:
    return _Fragment(
        Markup(
            '<div class="content-wrapper type-text">'
            '<h3 class="block-title">{}</h3><p class="block-body">{}</p></div>',
        ).format(block.title, block.content),
    )


def _render_media(block: Block, context: RenderContext) -> _Fragment:
    src = resolve_block_image(block, context)
    img = (
        Markup(
            '<img src="{}" class="full-img" style="object-position:{};" alt="{}" loading="lazy">',
        ).format(src, _position(block), block.title)
        if src
        else Markup('<div class="media-empty"></div>')
    )
    overlay = _overlay(block.title, block.subtext) if block.title else Markup()
    return _Fragment(img + overlay, sanitize_url(block.content))


def _render_social(block: Block, context: RenderContext) -> _Fragment:
    if block.is_youtube:
        return _render_feed(block, context)
    platform = get_platform(block.social_platform)
    label = platform.label if platform else "Social"
    color = resolve_icon_color(block.text_color, platform.brand_color if platform else "")
    href = build_url(block.social_platform, block.social_handle) or sanitize_url(block.content)
    content = Markup('<div class="content-wrapper">{}{}</div>').format(
        _icon(block.social_platform, color, label, wrapper="span"),
        _text_pair(block.title, block.subtext, fallback=label),
    )
    return _Fragment(content, href)


def _render_social_icon(block: Block, context: RenderContext) -> _Fragment:
    platform = get_platform(block.social_platform)
    label = platform.label if platform else "Social"
    color = resolve_icon_color(block.text_color, platform.brand_color if platform else "")
    return _Fragment(
        _icon(block.social_platform, color, label, wrapper="div"),
        build_url(block.social_platform, block.social_handle),
        "social-icon-block",
    )


def _render_map(block: Block, context: RenderContext) -> _Fragment:
    location = block.content.strip() or DEFAULT_LOCATION
    if not is_valid_location_string(location):
        return _Fragment(Markup('<div class="map-invalid">Invalid location</div>'))
    src = MAP_EMBED.format(quote(location, safe=""))
    return _Fragment(
        Markup(
            '<iframe class="map-frame" src="{}" title="{}" width="100%" height="100%" '
            'frameborder="0" loading="lazy" sandbox="allow-scripts allow-same-origin">'
            "</iframe>",
        ).format(src, location),
    )


def _render_spacer(block: Block, context: RenderContext) -> _Fragment:
    return _Fragment(Markup(), extra_class="no-hover")


# ---------------------------------------------------------------------------
# Video feed (SOCIAL + channel id)
# ---------------------------------------------------------------------------


def _hydration_attrs(block: Block, context: RenderContext, mode: str, size: str) -> Markup:
    """``data-*`` hooks read by the runtime script; absent when not hydrating."""
    if not context.hydrate or not is_valid_youtube_channel_id(block.channel_id):
        return Markup()
    return Markup(' data-channel-id="{}" data-mode="{}" data-size="{}"').format(
        block.channel_id, mode, size,
    )


def _valid_videos(block: Block, limit: int) -> tuple[VideoSummary, ...]:
    return tuple(v for v in block.youtube_videos if is_valid_youtube_video_id(v.id))[:limit]


def thumbnail_url(video_id: str, quality: str = "mqdefault") -> str:
    return f"https://img.youtube.com/vi/{video_id}/{quality}.jpg"


def _video_item(video: VideoSummary) -> Markup:
    thumb = safe_image_src(video.thumbnail) or thumbnail_url(video.id)
    return Markup(
        '<a class="yt-video" href="{}"{}><img src="{}" alt="{}" loading="lazy">'
        '<span class="yt-video-title">{}</span></a>',
    ).format(WATCH_URL + video.id, _EXTERNAL, thumb, video.title, video.title)


def _render_feed(block: Block, context: RenderContext) -> _Fragment:
    mode = block.youtube_mode or "single"
    if mode == "single":
        return _render_feed_single(block, context)

    flags = shape_flags(block)
    size = youtube_size_class(flags)
    count = min(2 if flags.is_small or flags.is_wide else 4, context.max_videos)
    layout = "list" if mode == "list" or flags.is_tall else "grid"
    videos = _valid_videos(block, count)

    if videos:
        items = Markup("").join(_video_item(v) for v in videos)
    else:
        placeholder = "Loading..." if context.hydrate else "No videos"
        items = Markup('<div class="yt-placeholder">{}</div>').format(placeholder)

    hydration = _hydration_attrs(block, context, mode, size)
    content = Markup(
        '<div class="yt-container{fetcher}{size}"{attrs}>'
        '<div class="yt-header"><div class="yt-icon">{icon}</div>'
        '<div class="yt-header-text"><h3 data-role="channel-title">{title}</h3>'
        "<span>Latest Videos</span></div></div>"
        '<div class="yt-videos yt-{layout}" data-role="video-container" '
        'data-max-videos="{count}">{items}</div></div>',
    ).format(
        fetcher=" youtube-fetcher" if hydration else "",
        size=f" {size}" if size else "",
        attrs=hydration,
        icon=_YT_ICON.format(size=14 if flags.is_small else 18),
        title=block.channel_title or block.title or "YouTube",
        layout=layout,
        count=count,
        items=items,
    )
    return _Fragment(content)


def _render_feed_single(block: Block, context: RenderContext) -> _Fragment:
    size = youtube_size_class(shape_flags(block))
    videos = _valid_videos(block, 1)
    if videos:
        video_id, video_title = videos[0].id, videos[0].title
    elif is_valid_youtube_video_id(block.youtube_video_id):
        video_id, video_title = block.youtube_video_id, block.subtext
    else:
        video_id, video_title = "", block.subtext

    background = css_url(thumbnail_url(video_id, "maxresdefault")) if video_id else ""
    bg_style = Markup(' style="background-image:{};"').format(background) if background else Markup()
    play_href = (
        Markup(' href="{}"{}').format(WATCH_URL + video_id, _EXTERNAL) if video_id else Markup()
    )
    hydration = _hydration_attrs(block, context, "single", size)
    heading = block.channel_title or block.title
    heading_markup = (
        Markup("{}").format(heading)
        if heading
        else Markup('<span class="placeholder">Add title…</span>')
    )

    content = Markup(
        '<div class="yt-single{fetcher}"{attrs}>'
        '<div class="yt-single-bg" data-role="bg-image"{bg}></div>'
        '<div class="yt-single-overlay"></div>'
        '<div class="yt-single-content">'
        '<div class="yt-single-icon">{icon}</div>'
        '<a class="yt-single-play" data-role="play-link"{play}>{play_icon}</a>'
        '<div class="yt-single-info"><h3 data-role="channel-title">{heading}</h3>'
        '<p data-role="video-title">{video_title}</p></div></div></div>',
    ).format(
        fetcher=" youtube-fetcher" if hydration else "",
        attrs=hydration,
        bg=bg_style,
        icon=_YT_ICON.format(size=22),
        play=play_href,
        play_icon=_PLAY_ICON,
        heading=heading_markup,
        video_title=video_title,
    )
    return _Fragment(content)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_RENDERERS: MappingProxyType[BlockType, Callable[[Block, RenderContext], _Fragment]] = (
    MappingProxyType({
        BlockType.LINK: _render_link,
        BlockType.TEXT: _render_text,
        BlockType.MEDIA: _render_media,
        BlockType.SOCIAL: _render_social,
        BlockType.SOCIAL_ICON: _render_social_icon,
        BlockType.MAP: _render_map,
        BlockType.SPACER: _render_spacer,
    })
)


def block_classes(block: Block, context: RenderContext, extra: str = "") -> str:
    """Class list of the tile element."""
    classes = ["bento-item", f"col-span-{clamp_col_span(block, context.columns)}"]
    if block.row_span > 1:
        classes.append(f"row-span-{block.row_span}")
    if extra:
        classes.append(extra)
    classes.append(f"size-{block_size_tier(block)}")
    return " ".join(classes)


def block_style(block: Block, context: RenderContext) -> str:
    """Inline declarations: colours, corner radius and grid placement."""
    return (
        f"background: {resolve_background(block)}; "
        f"color: {resolve_text_color(block)}; "
        f"border-radius: {border_radius(block)}; "
        f"{grid_placement(block, context.columns)}"
    )


def render_block(block: Block, context: RenderContext) -> Markup:
    """Render one tile.

    The outer element is an ``<a>`` when the variant resolved a safe link and
    a ``<div>`` otherwise.  Unsafe URLs never reach an attribute; they are
    dropped and the tile's text still renders.
    """
    fragment = _RENDERERS[block.type](block, context)
    tag = Markup("a") if fragment.href else Markup("div")
    link = Markup(' href="{}"{}').format(fragment.href, _EXTERNAL) if fragment.href else Markup()

    analytics = Markup(' data-block-id="{}" data-block-type="{}"').format(
        block.id, block.type.value,
    )
    if block.type is BlockType.SOCIAL:
        if block.social_platform:
            analytics += Markup(' data-social-platform="{}"').format(block.social_platform)
        if block.social_handle:
            analytics += Markup(' data-social-handle="{}"').format(block.social_handle)

    return Markup('<{tag}{link}{analytics} class="{cls}" style="{style}">{content}</{tag}>').format(
        tag=tag,
        link=link,
        analytics=analytics,
        cls=block_classes(block, context, fragment.extra_class),
        style=block_style(block, context),
        content=fragment.content,
    )
