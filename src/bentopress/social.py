"""Social-platform registry — closed table of platform descriptors.

Each descriptor knows how to turn a handle into a profile URL and how to
display it.  Platforms are resolved through the table, never by ad-hoc
pattern matching at call sites.  Every builder returns ``""`` for malformed
input instead of a partially built URL.

Thread Safety:
    ``PLATFORMS`` is a read-only mapping of frozen descriptors built at
    import time.  Safe to share between concurrent renders.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal
from urllib.parse import quote, urlsplit

from bentopress.render.sanitize import is_valid_domain, sanitize_url

_HANDLE = re.compile(r"[^\s/?#]+")
_SUBDOMAIN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?")
_HEX_COLOR = re.compile(r"[0-9A-Fa-f]{3,8}")


@dataclass(frozen=True, slots=True)
class SocialPlatform:
    """Descriptor of one supported platform.

    Attributes:
        id: Stable platform key stored on blocks and accounts.
        label: Human-readable name.
        kind: ``handle`` platforms take a username, ``url`` ones a full URL.
        placeholder: Example input shown by the editor.
        brand_color: Hex brand colour used to tint icons.
        icon_slug: simple-icons slug, empty when no brand icon exists.
        build: Maps a raw handle to a profile URL (``""`` when malformed).
        display: Optional display formatter for a handle.

    """

    id: str
    label: str
    kind: Literal["handle", "url"]
    placeholder: str
    brand_color: str
    icon_slug: str
    build: Callable[[str], str]
    display: Callable[[str], str] | None = None


def _strip_at(value: str) -> str:
    return value.strip().lstrip("@")


def _ensure_https(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        return ""
    if re.match(r"^https?://", trimmed, re.IGNORECASE):
        return trimmed
    return "https://" + trimmed.lstrip("/")


def _handle_builder(template: str) -> Callable[[str], str]:
    """Builder that drops a single URL-encoded handle into ``template``."""

    def build(raw: str) -> str:
        handle = _strip_at(raw)
        if not handle or not _HANDLE.fullmatch(handle):
            return ""
        return template.format(quote(handle, safe=""))

    return build


def _at(raw: str) -> str:
    handle = _strip_at(raw)
    return f"@{handle}" if handle else ""


def _build_mastodon(raw: str) -> str:
    value = raw.strip()
    if not value:
        return ""
    if re.match(r"^https?://", value, re.IGNORECASE):
        return sanitize_url(value)
    user, sep, instance = value.lstrip("@").partition("@")
    if not sep or not user or not _HANDLE.fullmatch(user) or not is_valid_domain(instance):
        return ""
    return f"https://{instance.lower()}/@{quote(user, safe='')}"


def _substack_name(raw: str) -> str:
    name = re.sub(r"^https?://", "", _strip_at(raw), flags=re.IGNORECASE)
    name = name.split("/", 1)[0]
    return re.sub(r"\.substack\.com$", "", name, flags=re.IGNORECASE)


def _build_substack(raw: str) -> str:
    name = _substack_name(raw)
    if not name or not _SUBDOMAIN.fullmatch(name):
        return ""
    return f"https://{name.lower()}.substack.com"


def _build_whatsapp(raw: str) -> str:
    digits = re.sub(r"[\s()+-]", "", raw)
    if not digits.isdigit():
        return ""
    return f"https://wa.me/{digits}"


def _build_url(raw: str) -> str:
    return sanitize_url(_ensure_https(raw))


_TABLE: tuple[SocialPlatform, ...] = (
    SocialPlatform("x", "X", "handle", "yourhandle", "#000000", "x",
                   _handle_builder("https://x.com/{}"), _at),
    SocialPlatform("instagram", "Instagram", "handle", "yourhandle", "#E4405F", "instagram",
                   _handle_builder("https://instagram.com/{}"), _at),
    SocialPlatform("tiktok", "TikTok", "handle", "yourhandle", "#000000", "tiktok",
                   _handle_builder("https://www.tiktok.com/@{}"), _at),
    SocialPlatform("youtube", "YouTube", "handle", "yourhandle", "#FF0000", "youtube",
                   _handle_builder("https://www.youtube.com/@{}"), _at),
    SocialPlatform("github", "GitHub", "handle", "yourhandle", "#181717", "github",
                   _handle_builder("https://github.com/{}"), _at),
    SocialPlatform("gitlab", "GitLab", "handle", "yourhandle", "#FC6D26", "gitlab",
                   _handle_builder("https://gitlab.com/{}"), _at),
    SocialPlatform("linkedin", "LinkedIn", "handle", "your-handle", "#0A66C2", "linkedin",
                   _handle_builder("https://www.linkedin.com/in/{}"), _strip_at),
    SocialPlatform("facebook", "Facebook", "handle", "yourhandle", "#0866FF", "facebook",
                   _handle_builder("https://facebook.com/{}"), _strip_at),
    SocialPlatform("twitch", "Twitch", "handle", "yourhandle", "#9146FF", "twitch",
                   _handle_builder("https://twitch.tv/{}"), _strip_at),
    SocialPlatform("dribbble", "Dribbble", "handle", "yourhandle", "#EA4C89", "dribbble",
                   _handle_builder("https://dribbble.com/{}"), _strip_at),
    SocialPlatform("medium", "Medium", "handle", "yourhandle", "#000000", "medium",
                   _handle_builder("https://medium.com/@{}"), _at),
    SocialPlatform("devto", "Dev.to", "handle", "yourhandle", "#0A0A0A", "devdotto",
                   _handle_builder("https://dev.to/{}"), _strip_at),
    SocialPlatform("reddit", "Reddit", "handle", "yourhandle", "#FF4500", "reddit",
                   _handle_builder("https://reddit.com/u/{}"),
                   lambda h: f"u/{_strip_at(h)}" if _strip_at(h) else ""),
    SocialPlatform("pinterest", "Pinterest", "handle", "yourhandle", "#BD081C", "pinterest",
                   _handle_builder("https://pinterest.com/{}"), _strip_at),
    SocialPlatform("threads", "Threads", "handle", "yourhandle", "#000000", "threads",
                   _handle_builder("https://www.threads.net/@{}"), _at),
    SocialPlatform("bluesky", "Bluesky", "handle", "name.bsky.social", "#1185FE", "bluesky",
                   _handle_builder("https://bsky.app/profile/{}"), _strip_at),
    SocialPlatform("mastodon", "Mastodon", "handle", "@user@instance.tld", "#6364FF", "mastodon",
                   _build_mastodon, _at),
    SocialPlatform("substack", "Substack", "handle", "newsletter", "#FF6719", "substack",
                   _build_substack, _substack_name),
    SocialPlatform("patreon", "Patreon", "handle", "yourhandle", "#000000", "patreon",
                   _handle_builder("https://patreon.com/{}"), _strip_at),
    SocialPlatform("kofi", "Ko-fi", "handle", "yourhandle", "#FF5E5B", "kofi",
                   _handle_builder("https://ko-fi.com/{}"), _strip_at),
    SocialPlatform("buymeacoffee", "Buy Me a Coffee", "handle", "yourhandle", "#FFDD00",
                   "buymeacoffee",
                   _handle_builder("https://www.buymeacoffee.com/{}"), _strip_at),
    SocialPlatform("snapchat", "Snapchat", "handle", "yourhandle", "#FFFC00", "snapchat",
                   _handle_builder("https://www.snapchat.com/add/{}"), _strip_at),
    SocialPlatform("discord", "Discord", "handle", "invite-code", "#5865F2", "discord",
                   _handle_builder("https://discord.gg/{}"), _strip_at),
    SocialPlatform("telegram", "Telegram", "handle", "yourhandle", "#26A5E4", "telegram",
                   _handle_builder("https://t.me/{}"), _at),
    SocialPlatform("whatsapp", "WhatsApp", "handle", "15551234567", "#25D366", "whatsapp",
                   _build_whatsapp, lambda h: h.strip()),
    SocialPlatform("website", "Website", "url", "example.com", "#374151", "",
                   _build_url),
    SocialPlatform("custom", "Custom URL", "url", "https://...", "#374151", "",
                   _build_url),
)

PLATFORMS: MappingProxyType[str, SocialPlatform] = MappingProxyType(
    {p.id: p for p in _TABLE},
)

# Domain fragments checked in order by infer_platform_from_url()
_DOMAIN_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("x.com/", "twitter.com/"), "x"),
    (("instagram.com/",), "instagram"),
    (("tiktok.com/",), "tiktok"),
    (("youtube.com/", "youtu.be/"), "youtube"),
    (("github.com/",), "github"),
    (("gitlab.com/",), "gitlab"),
    (("linkedin.com/",), "linkedin"),
    (("facebook.com/",), "facebook"),
    (("twitch.tv/",), "twitch"),
    (("dribbble.com/",), "dribbble"),
    (("medium.com/",), "medium"),
    (("dev.to/",), "devto"),
    (("reddit.com/",), "reddit"),
    (("pinterest.com/",), "pinterest"),
    (("threads.net/",), "threads"),
    (("bsky.app/",), "bluesky"),
    ((".substack.com", "substack.com"), "substack"),
    (("patreon.com/",), "patreon"),
    (("ko-fi.com/",), "kofi"),
    (("buymeacoffee.com/",), "buymeacoffee"),
    (("snapchat.com/",), "snapchat"),
    (("discord.gg/", "discord.com/invite/"), "discord"),
    (("t.me/",), "telegram"),
    (("wa.me/",), "whatsapp"),
)

_SIMPLE_SEGMENT = frozenset({
    "x", "instagram", "github", "gitlab", "facebook", "twitch", "dribbble",
    "devto", "pinterest", "telegram", "discord",
})


def get_platform(platform_id: str | None) -> SocialPlatform | None:
    if not platform_id:
        return None
    return PLATFORMS.get(platform_id)


def normalize_handle(platform_id: str | None, value: str) -> str:
    """Canonical handle: trimmed, leading ``@`` removed.

    Mastodon keeps its inner ``user@instance`` separator; URL platforms keep
    the input as typed.
    """
    if platform_id in ("custom", "website"):
        return value.strip()
    return _strip_at(value)


def build_url(platform_id: str | None, value: str | None) -> str:
    """Profile URL for a handle, or ``""`` when it cannot be built.

    A full profile URL pasted into a handle platform is reduced to its handle
    first, so ``https://x.com/jane`` and ``@jane`` resolve identically.
    """
    platform = get_platform(platform_id)
    raw = (value or "").strip()
    if platform is None or not raw:
        return ""
    if (
        platform.kind == "handle"
        and platform.id != "mastodon"
        and re.match(r"^https?://", raw, re.IGNORECASE)
    ):
        extracted = extract_handle_from_url(platform.id, raw)
        if not extracted:
            return ""
        raw = extracted
    return platform.build(raw)


def display_handle(platform_id: str | None, handle: str | None) -> str:
    platform = get_platform(platform_id)
    if platform is None or not handle:
        return ""
    if platform.display is not None:
        return platform.display(handle)
    return handle.strip()


def extract_handle_from_url(platform_id: str | None, url: str | None) -> str | None:
    """Inverse of :func:`build_url` for pasted profile URLs."""
    if not platform_id or not url:
        return None
    try:
        parts = urlsplit(_ensure_https(url))
        hostname = parts.hostname or ""
    except ValueError:
        return None
    segments = [s for s in parts.path.split("/") if s]
    first = segments[0] if segments else ""
    second = segments[1] if len(segments) > 1 else ""

    if platform_id in _SIMPLE_SEGMENT:
        if platform_id == "discord" and first == "invite":
            return second or None
        return first or None
    if platform_id == "reddit":
        return second if first in ("u", "user") and second else None
    if platform_id == "linkedin":
        return second if first == "in" and second else None
    if platform_id == "snapchat":
        return second if first == "add" and second else None
    if platform_id == "tiktok":
        if first == "@" and second:
            return second
        if first == "share" and second:
            return second
        return first.lstrip("@") or None
    if platform_id == "youtube":
        if first.startswith("@"):
            return first[1:] or None
        return second if first == "channel" and second else None
    if platform_id in ("threads", "medium"):
        return first[1:] or None if first.startswith("@") else None
    if platform_id == "bluesky":
        return second if first == "profile" and second else None
    if platform_id == "substack":
        name = re.sub(r"\.substack\.com$", "", hostname, flags=re.IGNORECASE)
        return name if name and name != hostname else None
    if platform_id == "mastodon":
        if first.startswith("@") and len(first) > 1 and hostname:
            return f"{first[1:]}@{hostname}"
        return None
    if platform_id in ("patreon", "kofi", "buymeacoffee"):
        return first or None
    if platform_id == "whatsapp":
        return first or None
    if platform_id in ("website", "custom"):
        return url
    return None


def infer_platform_from_url(url: str | None) -> str | None:
    """Best-effort platform guess for a pasted URL.  Advisory only."""
    if not url:
        return None
    value = url.lower()
    for needles, platform_id in _DOMAIN_HINTS:
        if any(n in value for n in needles):
            return platform_id
    return None


def format_follower_count(count: int | None) -> str:
    """Compact follower count: ``950``, ``1.2K``, ``3.4M``."""
    if count is None or count < 0:
        return ""
    if count < 1_000:
        return str(count)
    if count < 1_000_000:
        return _compact(count / 1_000) + "K"
    return _compact(count / 1_000_000) + "M"


def _compact(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def icon_src(platform_id: str | None, color: str = "") -> str:
    """simple-icons CDN URL for a platform, optionally tinted."""
    platform = get_platform(platform_id)
    if platform is None or not platform.icon_slug:
        return ""
    hex_color = color.strip().lstrip("#")
    if hex_color and _HEX_COLOR.fullmatch(hex_color):
        return f"https://cdn.simpleicons.org/{platform.icon_slug}/{hex_color}"
    return f"https://cdn.simpleicons.org/{platform.icon_slug}"
