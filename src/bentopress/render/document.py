"""Document assembler — profile header plus sorted tiles in one HTML shell.

Both output paths go through :func:`render_document`:

- **Export** links ``styles.css`` and ``app.js`` as external files.
- **Preview** inlines the stylesheet and script so the result works as a
  sandboxed ``srcdoc`` with no sibling files.

Tiles are emitted in reading order (row, then column) so a linearized DOM
matches the visual grid even though CSS places tiles independently.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from markupsafe import Markup

from bentopress.model import AvatarStyle, Block, Profile, SiteData
from bentopress.observability.events import BlockRendered, now_ns
from bentopress.render.blocks import RenderContext, render_block
from bentopress.render.layout import block_size_tier, sort_key
from bentopress.render.runtime import generate_runtime_script, resolve_analytics
from bentopress.render.sanitize import safe_css_value, safe_image_src
from bentopress.render.styles import generate_css
from bentopress.social import build_url, format_follower_count, get_platform, icon_src

if TYPE_CHECKING:
    from bentopress.config import BentoConfig
    from bentopress.observability.log import EventLog

AVATAR_KEY = "profile_avatar"
FONT_HREF = "https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;800&display=swap"

_AVATAR_RADIUS = {"circle": "9999px", "square": "0"}
_DEFAULT_AVATAR_RADIUS = "1.5rem"
_AVATAR_SHADOW = "0 25px 50px -12px rgba(0,0,0,0.15)"
_MAX_BORDER_WIDTH = 16

_EXTERNAL = Markup(' target="_blank" rel="noopener noreferrer"')

_DOCUMENT = Markup("""\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<meta name="description" content="{description}">
<link href="{font_href}" rel="stylesheet">
{styles}
{script}
</head>
<body>
{blur}<div class="container">
<div class="profile-section">
{header}
</div>
<div class="grid-section">
<main class="bento-grid">
{tiles}
</main>
</div>
</div>
{footer}</body>
</html>
""")

_FOOTER = Markup(
    '<footer><p>Made with <span class="heart">♥</span> using '
    "<strong>bentopress</strong></p></footer>\n"
)


def sort_blocks(blocks: Iterable[Block]) -> list[Block]:
    """Blocks in reading order: row, then column; unplaced blocks last.

    ``sorted`` is stable, so blocks with equal coordinates keep model order.
    """
    return sorted(blocks, key=sort_key)


# ---------------------------------------------------------------------------
# Profile header
# ---------------------------------------------------------------------------


def avatar_inline_style(style: AvatarStyle | None) -> str:
    resolved = style or AvatarStyle()
    radius = _AVATAR_RADIUS.get(resolved.shape, _DEFAULT_AVATAR_RADIUS)
    shadow = _AVATAR_SHADOW if resolved.shadow else "none"
    if resolved.border:
        width = max(0, min(resolved.border_width, _MAX_BORDER_WIDTH))
        color = safe_css_value(resolved.border_color) or "#ffffff"
        border = f"{width}px solid {color}"
    else:
        border = "none"
    return f"border-radius:{radius}; box-shadow:{shadow}; border:{border};"


def _render_avatar(profile: Profile, context: RenderContext) -> Markup:
    src = safe_image_src(context.images.get(AVATAR_KEY) or profile.avatar_url)
    if src:
        inner = Markup('<img src="{}" alt="{}">').format(src, profile.name)
    else:
        inner = Markup('<span class="avatar-fallback">{}</span>').format(profile.name[:1].upper())
    return Markup('<div class="avatar" style="{}">{}</div>').format(
        avatar_inline_style(profile.avatar_style), inner,
    )


def _render_social_row(profile: Profile) -> Markup:
    if not profile.show_social_in_header or not profile.social_accounts:
        return Markup()

    items = []
    for account in profile.social_accounts:
        platform = get_platform(account.platform)
        label = platform.label if platform else account.platform
        url = build_url(account.platform, account.handle)
        count = format_follower_count(account.follower_count) if profile.show_follower_count else ""
        src = icon_src(account.platform, platform.brand_color if platform else "")

        img = (
            Markup(
                '<img src="{}" alt="{}" loading="lazy" onerror="this.style.display=\'none\';">',
            ).format(src, label)
            if src
            else Markup()
        )
        icon = Markup(
            '<span class="social-icon"><span class="social-fallback">{}</span>{}</span>',
        ).format(label[:1].upper(), img)
        count_markup = Markup('<span class="social-count">{}</span>').format(count) if count else Markup()

        tag = Markup("a") if url else Markup("div")
        link = Markup(' href="{}"{}').format(url, _EXTERNAL) if url else Markup()
        items.append(
            Markup('<{tag} class="{cls}"{link} aria-label="{label}">{icon}{count}</{tag}>').format(
                tag=tag,
                cls="profile-social" if count else "profile-social icon-only",
                link=link,
                label=label,
                icon=icon,
                count=count_markup,
            ),
        )
    return Markup('<div class="profile-socials">{}</div>').format(Markup("").join(items))


def render_profile_header(profile: Profile, context: RenderContext) -> Markup:
    """Avatar, name, bio and the optional social row."""
    return Markup(
        '{avatar}\n<h1 class="profile-name">{name}</h1>\n'
        '<p class="profile-bio">{bio}</p>{socials}',
    ).format(
        avatar=_render_avatar(profile, context),
        name=profile.name,
        bio=profile.bio,
        socials=_render_social_row(profile),
    )


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


def render_tiles(
    blocks: Iterable[Block],
    context: RenderContext,
    log: EventLog | None = None,
) -> Markup:
    """Render blocks in reading order, recording one event per tile."""
    tiles = []
    for block in sort_blocks(blocks):
        tile = render_block(block, context)
        if log is not None:
            log.append(BlockRendered(
                block_id=block.id,
                block_type=block.type.value,
                size_tier=block_size_tier(block),
                bytes=len(tile.encode("utf-8")),
                timestamp_ns=now_ns(),
            ))
        tiles.append(tile)
    return Markup("\n").join(tiles)


def render_document(
    site: SiteData,
    context: RenderContext,
    *,
    css_href: str = "styles.css",
    script_src: str = "app.js",
    inline_css: str | None = None,
    inline_js: str | None = None,
    log: EventLog | None = None,
) -> str:
    """Full HTML document for a site.

    When ``inline_css`` / ``inline_js`` are given they replace the external
    ``<link>`` / ``<script src>`` references.  Callers are responsible for
    passing generated text only; user data reaches inline code through
    :func:`bentopress.render.runtime.generate_runtime_script`, which encodes
    it as JSON.
    """
    profile = site.profile
    if inline_css is not None:
        styles = Markup("<style>\n{}</style>").format(Markup(inline_css))
    else:
        styles = Markup('<link rel="stylesheet" href="{}">').format(css_href)
    if inline_js is not None:
        script = Markup("<script>\n{}</script>").format(Markup(inline_js))
    else:
        script = Markup('<script src="{}" defer></script>').format(script_src)

    has_blur = bool(safe_image_src(profile.background_image)) and profile.background_blur > 0
    return str(_DOCUMENT.format(
        title=profile.name or "Bento",
        description=" ".join(profile.bio.splitlines()),
        font_href=FONT_HREF,
        styles=styles,
        script=script,
        blur=Markup('<div class="bg-blur-overlay"></div>\n') if has_blur else Markup(),
        header=render_profile_header(profile, context),
        tiles=render_tiles(site.blocks, context, log),
        footer=_FOOTER if profile.show_branding else Markup(),
    ))


def render_preview(
    site: SiteData,
    config: BentoConfig | None = None,
    *,
    site_id: str = "",
    log: EventLog | None = None,
) -> str:
    """Single self-contained document for sandboxed ``srcdoc`` embedding.

    The preview renders cached feed videos only; no live feed refresh code
    is emitted.  Analytics are included when the profile enables them and a
    ``site_id`` is given, exactly as in the export.
    """
    columns = config.grid_columns if config is not None else 9
    max_videos = config.max_videos if config is not None else 4
    context = RenderContext(hydrate=False, columns=columns, max_videos=max_videos)
    return render_document(
        site,
        context,
        inline_css=generate_css(site.profile, columns),
        inline_js=generate_runtime_script(analytics=resolve_analytics(site.profile, site_id)),
        log=log,
    )
