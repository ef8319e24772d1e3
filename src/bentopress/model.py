"""Site data model — profile header plus an ordered list of typed blocks.

The editor hands the engine a finished ``SiteData`` snapshot.  Everything here
is frozen: renderers derive throwaway artifacts (escaped strings, resolved
URLs, CSS classes) and never mutate the model.

The JSON shape is the editor's camelCase document, which is also what the
bundle ships as ``data.json`` so an export can be re-imported.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from bentopress._errors import ModelError
from bentopress._types import YoutubeMode

# Video summaries cached on a block beyond this count are dropped.
MAX_CACHED_VIDEOS = 4

_EMPTY: Mapping[str, Any] = MappingProxyType({})

# Document keys read into typed fields; anything else is carried in ``extra``
_SITE_KEYS = frozenset({"profile", "blocks", "gridVersion"})
_PROFILE_KEYS = frozenset({
    "name", "bio", "avatarUrl", "avatarStyle", "theme", "primaryColor", "showBranding",
    "showSocialInHeader", "showFollowerCount", "backgroundColor", "backgroundImage",
    "backgroundBlur", "analytics", "socialAccounts",
})
_BLOCK_KEYS = frozenset({
    "id", "type", "colSpan", "rowSpan", "title", "content", "subtext", "imageUrl",
    "mediaPosition", "color", "customBackground", "textColor", "gridColumn", "gridRow",
    "zIndex", "channelId", "youtubeVideoId", "channelTitle", "youtubeMode", "youtubeVideos",
    "socialPlatform", "socialHandle",
})


class BlockType(StrEnum):
    """Discriminator of the block union."""

    LINK = "LINK"
    TEXT = "TEXT"
    MEDIA = "MEDIA"
    SOCIAL = "SOCIAL"
    SOCIAL_ICON = "SOCIAL_ICON"
    MAP = "MAP"
    SPACER = "SPACER"


@dataclass(frozen=True, slots=True)
class MediaPosition:
    """Percentage anchor used for ``object-position`` / ``background-position``."""

    x: float = 50
    y: float = 50

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _clamp_percent(self.x))
        object.__setattr__(self, "y", _clamp_percent(self.y))

    @property
    def css(self) -> str:
        return f"{_fmt_number(self.x)}% {_fmt_number(self.y)}%"


@dataclass(frozen=True, slots=True)
class VideoSummary:
    """One entry of a channel feed, shared by pre-fetch and rendering."""

    id: str
    title: str = ""
    thumbnail: str = ""


@dataclass(frozen=True, slots=True)
class Block:
    """A single grid tile.

    Attributes:
        id: Stable, unique identifier.
        type: Block variant.
        col_span: Columns covered (>= 1).
        row_span: Rows covered (>= 1).
        grid_column: Optional explicit 1-based start column.
        grid_row: Optional explicit 1-based start row.
        color: Named background swatch token (``bg-blue-100``).
        custom_background: Raw CSS background; wins over ``color``.
        text_color: Text colour token (``text-white``).
        channel_id: Channel identifier; turns a SOCIAL block into a feed block.
        youtube_videos: Cached feed entries, at most ``MAX_CACHED_VIDEOS``.
        extra: Document keys the engine does not interpret, written back
            unchanged to ``data.json``.

    """

    id: str
    type: BlockType
    col_span: int = 1
    row_span: int = 1
    title: str = ""
    content: str = ""
    subtext: str = ""
    image_url: str = ""
    media_position: MediaPosition | None = None
    color: str = ""
    custom_background: str = ""
    text_color: str = ""
    grid_column: int | None = None
    grid_row: int | None = None
    z_index: int | None = None
    channel_id: str = ""
    youtube_video_id: str = ""
    channel_title: str = ""
    youtube_mode: YoutubeMode | None = None
    youtube_videos: tuple[VideoSummary, ...] = ()
    social_platform: str = ""
    social_handle: str = ""
    extra: Mapping[str, Any] = field(default_factory=lambda: _EMPTY, compare=False, repr=False)

    @property
    def is_youtube(self) -> bool:
        """SOCIAL blocks with a channel identifier render as a video feed."""
        return self.type is BlockType.SOCIAL and bool(self.channel_id)


@dataclass(frozen=True, slots=True)
class AvatarStyle:
    shape: str = "rounded"
    shadow: bool = True
    border: bool = True
    border_color: str = "#ffffff"
    border_width: int = 4


@dataclass(frozen=True, slots=True)
class SocialAccount:
    platform: str
    handle: str
    follower_count: int | None = None


@dataclass(frozen=True, slots=True)
class AnalyticsSettings:
    """Analytics descriptor stored on the profile.

    The site identifier comes from export options, not from here.
    """

    enabled: bool = False
    endpoint: str = ""
    anon_key: str = ""


@dataclass(frozen=True, slots=True)
class Profile:
    name: str = ""
    bio: str = ""
    avatar_url: str = ""
    avatar_style: AvatarStyle | None = None
    theme: str = "light"
    primary_color: str = ""
    show_branding: bool = True
    show_social_in_header: bool = False
    show_follower_count: bool = False
    background_color: str = ""
    background_image: str = ""
    background_blur: float = 0
    analytics: AnalyticsSettings | None = None
    social_accounts: tuple[SocialAccount, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=lambda: _EMPTY, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class SiteData:
    profile: Profile
    blocks: tuple[Block, ...] = field(default_factory=tuple)
    grid_version: int | None = None
    extra: Mapping[str, Any] = field(default_factory=lambda: _EMPTY, compare=False, repr=False)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for block in self.blocks:
            if block.id in seen:
                msg = f"Duplicate block id {block.id!r}"
                raise ModelError(msg)
            seen.add(block.id)
            if block.col_span < 1 or block.row_span < 1:
                msg = (
                    f"Block {block.id!r} has non-positive span "
                    f"({block.col_span}x{block.row_span})"
                )
                raise ModelError(msg)

    # ------------------------------------------------------------------
    # JSON conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SiteData:
        """Build a SiteData from the editor's camelCase document.

        Raises:
            ModelError: If the document is structurally invalid.

        """
        if not isinstance(data, dict):
            msg = "Site document must be a JSON object"
            raise ModelError(msg)
        raw_profile = data.get("profile")
        if not isinstance(raw_profile, dict):
            msg = "Site document is missing a 'profile' object"
            raise ModelError(msg)
        raw_blocks = data.get("blocks") or []
        if not isinstance(raw_blocks, list):
            msg = "'blocks' must be a list"
            raise ModelError(msg)

        return cls(
            profile=_profile_from_dict(raw_profile),
            blocks=tuple(_block_from_dict(b, i) for i, b in enumerate(raw_blocks)),
            grid_version=_opt_int(data.get("gridVersion"), "gridVersion"),
            extra=_extra(data, _SITE_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the camelCase document shape."""
        result: dict[str, Any] = {
            "profile": _profile_to_dict(self.profile),
            "blocks": [_block_to_dict(b) for b in self.blocks],
        }
        if self.grid_version is not None:
            result["gridVersion"] = self.grid_version
        _merge_extra(result, self.extra)
        return result


def load_site(path: Path) -> SiteData:
    """Read a SiteData JSON document from disk."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"{path.name} is not valid JSON: {exc}"
        raise ModelError(msg) from exc
    return SiteData.from_dict(raw)


def dump_site(site: SiteData) -> str:
    """Serialize a SiteData to pretty-printed JSON text."""
    return json.dumps(site.to_dict(), indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _block_from_dict(raw: object, index: int) -> Block:
    if not isinstance(raw, dict):
        msg = f"Block #{index} is not an object"
        raise ModelError(msg)
    block_id = raw.get("id")
    if not isinstance(block_id, str) or not block_id:
        msg = f"Block #{index} has no id"
        raise ModelError(msg)
    try:
        block_type = BlockType(raw.get("type"))
    except ValueError as exc:
        msg = f"Block {block_id!r} has unknown type {raw.get('type')!r}"
        raise ModelError(msg) from exc

    col_span = _opt_int(raw.get("colSpan"), "colSpan", block_id)
    row_span = _opt_int(raw.get("rowSpan"), "rowSpan", block_id)

    mode = raw.get("youtubeMode")
    videos = tuple(
        VideoSummary(
            id=_str(v.get("id")),
            title=_str(v.get("title")),
            thumbnail=_str(v.get("thumbnail")),
        )
        for v in (raw.get("youtubeVideos") or [])
        if isinstance(v, dict) and v.get("id")
    )[:MAX_CACHED_VIDEOS]

    return Block(
        id=block_id,
        type=block_type,
        col_span=1 if col_span is None else col_span,
        row_span=1 if row_span is None else row_span,
        title=_str(raw.get("title")),
        content=_str(raw.get("content")),
        subtext=_str(raw.get("subtext")),
        image_url=_str(raw.get("imageUrl")),
        media_position=_position_from_dict(raw.get("mediaPosition")),
        color=_str(raw.get("color")),
        custom_background=_str(raw.get("customBackground")),
        text_color=_str(raw.get("textColor")),
        grid_column=_opt_int(raw.get("gridColumn"), "gridColumn", block_id),
        grid_row=_opt_int(raw.get("gridRow"), "gridRow", block_id),
        z_index=_opt_int(raw.get("zIndex"), "zIndex", block_id),
        channel_id=_str(raw.get("channelId")),
        youtube_video_id=_str(raw.get("youtubeVideoId")),
        channel_title=_str(raw.get("channelTitle")),
        youtube_mode=mode if mode in ("single", "grid", "list") else None,
        youtube_videos=videos,
        social_platform=_str(raw.get("socialPlatform")),
        social_handle=_str(raw.get("socialHandle")),
        extra=_extra(raw, _BLOCK_KEYS),
    )


def _profile_from_dict(raw: dict[str, Any]) -> Profile:
    style = raw.get("avatarStyle")
    avatar_style = None
    if isinstance(style, dict):
        avatar_style = AvatarStyle(
            shape=_str(style.get("shape")) or "rounded",
            shadow=style.get("shadow") is not False,
            border=style.get("border") is not False,
            border_color=_str(style.get("borderColor")) or "#ffffff",
            border_width=_opt_int(style.get("borderWidth"), "avatarStyle.borderWidth") or 4,
        )

    analytics = None
    raw_analytics = raw.get("analytics")
    if isinstance(raw_analytics, dict):
        analytics = AnalyticsSettings(
            enabled=bool(raw_analytics.get("enabled")),
            endpoint=_str(raw_analytics.get("supabaseUrl") or raw_analytics.get("endpoint")),
            anon_key=_str(raw_analytics.get("anonKey")),
        )

    accounts = tuple(
        SocialAccount(
            platform=_str(a.get("platform")),
            handle=_str(a.get("handle")),
            follower_count=_opt_int(a.get("followerCount"), "followerCount"),
        )
        for a in (raw.get("socialAccounts") or [])
        if isinstance(a, dict) and a.get("platform")
    )

    blur = raw.get("backgroundBlur")
    return Profile(
        name=_str(raw.get("name")),
        bio=_str(raw.get("bio")),
        avatar_url=_str(raw.get("avatarUrl")),
        avatar_style=avatar_style,
        theme=_str(raw.get("theme")) or "light",
        primary_color=_str(raw.get("primaryColor")),
        show_branding=raw.get("showBranding") is not False,
        show_social_in_header=bool(raw.get("showSocialInHeader")),
        show_follower_count=bool(raw.get("showFollowerCount")),
        background_color=_str(raw.get("backgroundColor")),
        background_image=_str(raw.get("backgroundImage")),
        background_blur=blur if _is_number(blur) else 0,
        analytics=analytics,
        social_accounts=accounts,
        extra=_extra(raw, _PROFILE_KEYS),
    )


def _position_from_dict(raw: object) -> MediaPosition | None:
    if not isinstance(raw, dict):
        return None
    x, y = raw.get("x", 50), raw.get("y", 50)
    if not _is_number(x) or not _is_number(y):
        return None
    return MediaPosition(x=x, y=y)


def _block_to_dict(block: Block) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": block.id,
        "type": block.type.value,
        "colSpan": block.col_span,
        "rowSpan": block.row_span,
    }
    optional: dict[str, Any] = {
        "title": block.title,
        "content": block.content,
        "subtext": block.subtext,
        "imageUrl": block.image_url,
        "color": block.color,
        "customBackground": block.custom_background,
        "textColor": block.text_color,
        "gridColumn": block.grid_column,
        "gridRow": block.grid_row,
        "zIndex": block.z_index,
        "channelId": block.channel_id,
        "youtubeVideoId": block.youtube_video_id,
        "channelTitle": block.channel_title,
        "youtubeMode": block.youtube_mode,
        "socialPlatform": block.social_platform,
        "socialHandle": block.social_handle,
    }
    out.update({k: v for k, v in optional.items() if v not in ("", None)})
    if block.media_position is not None:
        out["mediaPosition"] = {"x": block.media_position.x, "y": block.media_position.y}
    if block.youtube_videos:
        out["youtubeVideos"] = [
            {"id": v.id, "title": v.title, "thumbnail": v.thumbnail}
            for v in block.youtube_videos
        ]
    _merge_extra(out, block.extra)
    return out


def _profile_to_dict(profile: Profile) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": profile.name,
        "bio": profile.bio,
        "avatarUrl": profile.avatar_url,
        "theme": profile.theme,
        "primaryColor": profile.primary_color,
        "showBranding": profile.show_branding,
        "showSocialInHeader": profile.show_social_in_header,
        "showFollowerCount": profile.show_follower_count,
    }
    if profile.avatar_style is not None:
        s = profile.avatar_style
        out["avatarStyle"] = {
            "shape": s.shape,
            "shadow": s.shadow,
            "border": s.border,
            "borderColor": s.border_color,
            "borderWidth": s.border_width,
        }
    if profile.background_color:
        out["backgroundColor"] = profile.background_color
    if profile.background_image:
        out["backgroundImage"] = profile.background_image
    if profile.background_blur:
        out["backgroundBlur"] = profile.background_blur
    if profile.analytics is not None:
        out["analytics"] = {
            "enabled": profile.analytics.enabled,
            "supabaseUrl": profile.analytics.endpoint,
            "anonKey": profile.analytics.anon_key,
        }
    if profile.social_accounts:
        out["socialAccounts"] = [
            {
                "platform": a.platform,
                "handle": a.handle,
                **({"followerCount": a.follower_count} if a.follower_count is not None else {}),
            }
            for a in profile.social_accounts
        ]
    _merge_extra(out, profile.extra)
    return out


def _str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _is_number(value: object) -> bool:
    """Finite int or float; bools and NaN/Infinity do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _opt_int(value: object, key: str, block_id: str = "") -> int | None:
    """Integer field value; non-numbers read as missing.

    Raises:
        ModelError: If the value is a non-finite float (NaN, Infinity, or an
            overflowing literal such as ``1e400``).

    """
    if isinstance(value, float) and not math.isfinite(value):
        where = f"Block {block_id!r} field" if block_id else "Field"
        msg = f"{where} {key!r} must be a finite number, got {value!r}"
        raise ModelError(msg)
    if _is_number(value):
        return int(value)  # type: ignore[arg-type]
    return None


def _extra(raw: Mapping[str, Any], known: frozenset[str]) -> Mapping[str, Any]:
    extra = {k: v for k, v in raw.items() if k not in known}
    return MappingProxyType(extra) if extra else _EMPTY


def _merge_extra(out: dict[str, Any], extra: Mapping[str, Any]) -> None:
    for key, value in extra.items():
        out.setdefault(key, value)


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def _fmt_number(value: float) -> str:
    """Render 50.0 as ``50`` and 33.5 as ``33.5`` for stable CSS output."""
    return f"{value:g}"
