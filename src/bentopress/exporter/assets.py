"""Asset extraction — decode inline ``data:`` images into bundle files.

The editor stores uploaded images inline (``data:image/png;base64,...``).
The bundle ships them as files under ``assets/`` so ``index.html`` stays
small:

- profile avatar -> ``assets/avatar.<ext>``  (key ``profile_avatar``)
- block image    -> ``assets/block-<id>.<ext>`` (key ``block_<id>``)

Each reference is decoded independently on a thread pool.  A reference
that fails to decode or verify is skipped: its key stays out of the image
map and the renderer falls back to the original inline value.  SVG is
always skipped this way, so it is only ever shown through an ``<img>``
data URI and never served as a document from the site origin.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import io
import re
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING
from urllib.parse import unquote_to_bytes

from PIL import Image, UnidentifiedImageError

from bentopress.model import BlockType
from bentopress.observability.events import AssetDecoded, AssetSkipped, now_ns
from bentopress.render.blocks import image_key
from bentopress.render.document import AVATAR_KEY

if TYPE_CHECKING:
    from bentopress.model import SiteData
    from bentopress.observability.log import EventLog

ASSETS_DIR = "assets"

# Inline references above this size are skipped rather than decoded
MAX_ASSET_BYTES = 20 * 1024 * 1024

_MIME_EXTENSIONS = MappingProxyType({
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/avif": ".avif",
    "image/bmp": ".bmp",
    "image/x-icon": ".ico",
    "image/vnd.microsoft.icon": ".ico",
})

# Never written to assets/
_INLINE_ONLY = frozenset({"image/svg+xml"})

# Block types whose renderer reads image_url
_IMAGE_BLOCKS = frozenset({BlockType.LINK, BlockType.MEDIA})

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True, slots=True)
class DecodedAsset:
    """One decoded image ready to be written into the bundle.

    Attributes:
        key: Image key used by the renderer's image map.
        filename: Bundle-relative path (``assets/avatar.png``).
        mime: MIME type declared by the inline reference.
        data: Decoded bytes.

    """

    key: str
    filename: str
    mime: str
    data: bytes


@dataclass(frozen=True, slots=True)
class AssetBundle:
    """Result of :func:`collect_assets`.

    Attributes:
        files: Decoded assets in deterministic order (avatar, then blocks
            in model order).
        images: Image key to bundle path, for :class:`RenderContext`.
        skipped: ``(key, reason)`` for references that were not extracted.

    """

    files: tuple[DecodedAsset, ...] = ()
    images: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    skipped: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class _Reference:
    key: str
    stem: str
    uri: str


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a ``data:`` URI into ``(mime, payload bytes)``.

    Raises:
        ValueError: If the URI is malformed or its base64 payload is invalid.

    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.lower().startswith("data:"):
        msg = "not a data: URI"
        raise ValueError(msg)
    params = header[5:].split(";")
    mime = params[0].strip().lower() or "text/plain"
    if any(p.strip().lower() == "base64" for p in params[1:]):
        try:
            data = base64.b64decode("".join(payload.split()), validate=True)
        except binascii.Error as exc:
            msg = f"invalid base64 payload: {exc}"
            raise ValueError(msg) from exc
    else:
        data = unquote_to_bytes(payload)
    return mime, data


def extension_for(mime: str) -> str:
    """File extension for an image MIME type.

    Raises:
        ValueError: If the MIME type is not a supported image type.

    """
    if mime in _INLINE_ONLY:
        msg = f"{mime} images are kept inline"
        raise ValueError(msg)
    try:
        return _MIME_EXTENSIONS[mime]
    except KeyError:
        msg = f"unsupported image type {mime!r}"
        raise ValueError(msg) from None


def verify_image(mime: str, data: bytes) -> None:
    """Check decoded bytes are a readable raster image.

    Raises:
        ValueError: If the bytes cannot be identified as an image.

    """
    if not data:
        msg = "empty image"
        raise ValueError(msg)
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
    except Image.DecompressionBombError as exc:
        msg = f"image too large: {exc}"
        raise ValueError(msg) from exc
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        msg = f"unreadable image: {exc}"
        raise ValueError(msg) from exc


def asset_stem(block_id: str) -> str:
    """Filesystem-safe stem for a block's asset.

    Ids that need rewriting get a short hash suffix so two ids never map to
    the same file.
    """
    safe = _UNSAFE_NAME.sub("-", block_id)
    if safe == block_id:
        return f"block-{safe}"
    digest = hashlib.sha1(block_id.encode("utf-8")).hexdigest()[:8]
    return f"block-{safe}-{digest}"


def _references(site: SiteData) -> list[_Reference]:
    refs: list[_Reference] = []
    if site.profile.avatar_url.startswith("data:"):
        refs.append(_Reference(AVATAR_KEY, "avatar", site.profile.avatar_url))
    for block in site.blocks:
        if block.type in _IMAGE_BLOCKS and block.image_url.startswith("data:"):
            refs.append(_Reference(image_key(block), asset_stem(block.id), block.image_url))
    return refs


def _decode(ref: _Reference, log: EventLog | None) -> DecodedAsset | tuple[str, str]:
    try:
        if len(ref.uri) > MAX_ASSET_BYTES * 2:
            msg = "inline image exceeds size limit"
            raise ValueError(msg)
        mime, data = decode_data_uri(ref.uri)
        filename = f"{ASSETS_DIR}/{ref.stem}{extension_for(mime)}"
        verify_image(mime, data)
    except ValueError as exc:
        if log is not None:
            log.append(AssetSkipped(key=ref.key, reason=str(exc), timestamp_ns=now_ns()))
        return (ref.key, str(exc))

    if log is not None:
        log.append(AssetDecoded(
            key=ref.key,
            filename=filename,
            mime=mime,
            size_bytes=len(data),
            timestamp_ns=now_ns(),
        ))
    return DecodedAsset(key=ref.key, filename=filename, mime=mime, data=data)


def collect_assets(
    site: SiteData,
    *,
    log: EventLog | None = None,
    max_workers: int = 4,
) -> AssetBundle:
    """Decode every inline image reference of a site.

    Decoding runs concurrently; results are gathered in reference order so
    the bundle layout does not depend on scheduling.
    """
    refs = _references(site)
    if not refs:
        return AssetBundle()

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bentopress-asset") as pool:
        results = list(pool.map(lambda ref: _decode(ref, log), refs))

    files = tuple(r for r in results if isinstance(r, DecodedAsset))
    skipped = tuple(r for r in results if isinstance(r, tuple))
    return AssetBundle(
        files=files,
        images=MappingProxyType({f.key: f.filename for f in files}),
        skipped=skipped,
    )
