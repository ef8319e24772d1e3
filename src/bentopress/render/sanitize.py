"""Sanitization primitives — escaping, URL allow-listing, identifier checks.

Pure functions, no state.  None of them raise on bad input: invalid values
degrade to ``False`` / ``""`` and callers omit the attribute or show a
placeholder.  An empty string from :func:`sanitize_url` means "leave the
attribute out", never "substitute a default URL".
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

from markupsafe import escape

_SAFE_SCHEMES = frozenset({"http", "https"})

_DANGEROUS_LOCATION = re.compile(
    r"^\s*(javascript|data|vbscript|file|about|blob):", re.IGNORECASE,
)

# Matched with fullmatch(); "$" would accept a trailing newline
_CHANNEL_ID = re.compile(r"UC[A-Za-z0-9_-]{22}")
_VIDEO_ID = re.compile(r"[A-Za-z0-9_-]{11}")
_DOMAIN = re.compile(r"[A-Za-z0-9][A-Za-z0-9.-]*\.[A-Za-z]{2,}")

# Relative paths produced by the asset decoder (assets/avatar.png, ...)
_ASSET_PATH = re.compile(r"assets/[A-Za-z0-9_-][A-Za-z0-9._-]*")

# Anything that could leave a CSS declaration or open a nested resource
_CSS_BREAKOUT = re.compile(r"[;{}<>\"'\\]|url\s*\(|expression\s*\(|@import", re.IGNORECASE)


def escape_html(value: str | None) -> str:
    """Map ``& < > " '`` to entity references.

    Returns a plain ``str``; use ``markupsafe.Markup`` formatting inside the
    renderers so every interpolation is escaped exactly once.
    """
    if not value:
        return ""
    return str(escape(value))


def is_safe_url(url: str | None) -> bool:
    """True only for absolute http(s) URLs with a host."""
    return bool(sanitize_url(url))


def sanitize_url(url: str | None) -> str:
    """Return the canonicalized URL if it is http(s), else ``""``."""
    if not url or not isinstance(url, str):
        return ""
    candidate = url.strip()
    # Control characters and whitespace inside a URL are never legitimate
    if any(ord(ch) < 0x21 or ch == "\x7f" for ch in candidate):
        return ""
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return ""
    scheme = parts.scheme.lower()
    if scheme not in _SAFE_SCHEMES or not parts.netloc:
        return ""
    try:
        hostname = parts.hostname
        parts.port  # noqa: B018  (raises on an out-of-range port)
    except ValueError:
        return ""
    if not hostname:
        return ""
    netloc = parts.netloc
    host_start = netloc.rfind("@") + 1
    netloc = netloc[:host_start] + netloc[host_start:].lower()
    path = parts.path or "/"
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def is_valid_image_url(url: str | None) -> bool:
    """http(s) URLs, or inline ``data:image/`` references."""
    if not url or not isinstance(url, str):
        return False
    if url.startswith("data:image/"):
        return True
    return is_safe_url(url)


def safe_image_src(src: str | None) -> str:
    """Resolve a value for an ``src`` / ``url(...)`` context, or ``""``.

    Accepts sanitized http(s) URLs, bundle-relative asset paths and inline
    ``data:image/`` references (the live preview shows images before they
    are extracted into ``assets/``).
    """
    if not src or not isinstance(src, str):
        return ""
    if _ASSET_PATH.fullmatch(src):
        return src
    if src.startswith("data:image/") and not re.search(r"[\s\"'()<>\\]", src):
        return src
    return sanitize_url(src)


def is_valid_location_string(location: str | None) -> bool:
    """Reject locations that start with a script-capable or local scheme."""
    if not location or not isinstance(location, str):
        return False
    return _DANGEROUS_LOCATION.match(location) is None


def is_valid_youtube_channel_id(channel_id: str | None) -> bool:
    """``UC`` followed by 22 id characters."""
    if not channel_id or not isinstance(channel_id, str):
        return False
    return _CHANNEL_ID.fullmatch(channel_id) is not None


def is_valid_youtube_video_id(video_id: str | None) -> bool:
    """Exactly 11 id characters."""
    if not video_id or not isinstance(video_id, str):
        return False
    return _VIDEO_ID.fullmatch(video_id) is not None


def is_valid_domain(domain: str | None) -> bool:
    if not domain or not isinstance(domain, str):
        return False
    return _DOMAIN.fullmatch(domain) is not None


def safe_css_value(value: str | None) -> str:
    """Return a raw CSS value usable inside a ``style`` attribute, or ``""``."""
    if not value or not isinstance(value, str):
        return ""
    cleaned = value.strip()
    if not cleaned or _CSS_BREAKOUT.search(cleaned):
        return ""
    return cleaned


_CSS_URL_ESCAPES = str.maketrans({
    "'": "%27",
    '"': "%22",
    "(": "%28",
    ")": "%29",
    "\\": "%5C",
    "<": "%3C",
    ">": "%3E",
})


def css_url(src: str | None) -> str:
    """``url('…')`` value for an already-validated image source, or ``""``."""
    resolved = safe_image_src(src)
    if not resolved:
        return ""
    return f"url('{resolved.translate(_CSS_URL_ESCAPES)}')"
