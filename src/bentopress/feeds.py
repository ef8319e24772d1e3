"""Video-feed pre-fetch — fill a site's cached channel videos before rendering.

This is the "bake at export time" half of the feed story; the other half
is the optional runtime hydration in ``app.js``.  Both produce the same
:class:`~bentopress.model.VideoSummary` values.

The renderer never calls this module.  It only reads ``youtube_videos`` and
``channel_title`` from the blocks this module returns.
"""

from __future__ import annotations

import dataclasses
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from bentopress._errors import FeedError
from bentopress.model import MAX_CACHED_VIDEOS, Block, SiteData, VideoSummary
from bentopress.observability.events import FeedFailed, FeedFetched, now_ns
from bentopress.render.runtime import FEED_URL
from bentopress.render.sanitize import (
    is_valid_youtube_channel_id,
    is_valid_youtube_video_id,
    sanitize_url,
)

if TYPE_CHECKING:
    from bentopress.config import BentoConfig
    from bentopress.observability.log import EventLog

_NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "yt": "http://www.youtube.com/xml/schemas/2015",
    "media": "http://search.yahoo.com/mrss/",
}


@dataclass(frozen=True, slots=True)
class FeedRefresh:
    """Outcome of :func:`refresh_site_videos`.

    Attributes:
        site: New site with refreshed caches (the input is untouched).
        refreshed: Ids of blocks whose cache was replaced.
        failed: ``(block_id, reason)`` for blocks whose fetch failed.  Their
            previous cache is kept.
        skipped: Ids of feed blocks with an invalid channel id.

    """

    site: SiteData
    refreshed: tuple[str, ...] = ()
    failed: tuple[tuple[str, str], ...] = ()
    skipped: tuple[str, ...] = ()


def feed_url(channel_id: str, proxy: str = "") -> str:
    """Feed URL for a channel, optionally wrapped in a proxy prefix.

    Raises:
        FeedError: If ``channel_id`` is not a valid channel identifier.

    """
    if not is_valid_youtube_channel_id(channel_id):
        msg = f"Invalid channel id {channel_id!r}"
        raise FeedError(msg)
    url = FEED_URL + channel_id
    if proxy:
        return proxy + quote(url, safe="")
    return url


def parse_feed(text: str, limit: int = MAX_CACHED_VIDEOS) -> tuple[str, tuple[VideoSummary, ...]]:
    """Parse an Atom channel feed into ``(channel_title, videos)``.

    Entries without a valid video id are dropped.  At most ``limit`` videos
    are returned, in feed order.

    Raises:
        FeedError: If the document is not well-formed XML.

    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        msg = f"Feed is not valid XML: {exc}"
        raise FeedError(msg) from exc

    author = root.findtext("atom:author/atom:name", default="", namespaces=_NS).strip()
    title = author or root.findtext("atom:title", default="", namespaces=_NS).strip()

    videos: list[VideoSummary] = []
    for entry in root.iterfind("atom:entry", _NS):
        if len(videos) >= limit:
            break
        video_id = entry.findtext("yt:videoId", default="", namespaces=_NS).strip()
        if not is_valid_youtube_video_id(video_id):
            continue
        thumb = entry.find("media:group/media:thumbnail", _NS)
        thumbnail = sanitize_url(thumb.get("url")) if thumb is not None else ""
        videos.append(VideoSummary(
            id=video_id,
            title=entry.findtext("atom:title", default="", namespaces=_NS).strip(),
            thumbnail=thumbnail or f"https://img.youtube.com/vi/{video_id}/mqdefault.jpg",
        ))
    return title, tuple(videos)


def fetch_channel_videos(
    channel_id: str,
    *,
    client: httpx.Client,
    config: BentoConfig,
    via_proxy: bool = False,
) -> tuple[str, tuple[VideoSummary, ...]]:
    """Fetch and parse one channel feed.

    The feed is requested directly unless ``via_proxy`` is set, in which
    case the configured CORS proxy is used exactly as the runtime script
    would.

    Raises:
        FeedError: On an invalid channel id, a transport error, a non-2xx
            response or an unparsable body.

    """
    url = feed_url(channel_id, config.cors_proxy if via_proxy else "")
    try:
        response = client.get(url, timeout=config.feed_timeout)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        msg = f"Timed out fetching feed for {channel_id}"
        raise FeedError(msg) from exc
    except httpx.HTTPStatusError as exc:
        msg = f"Feed for {channel_id} returned HTTP {exc.response.status_code}"
        raise FeedError(msg) from exc
    except httpx.HTTPError as exc:
        msg = f"Could not fetch feed for {channel_id}: {exc}"
        raise FeedError(msg) from exc
    return parse_feed(response.text, config.max_videos)


def refresh_site_videos(
    site: SiteData,
    *,
    client: httpx.Client,
    config: BentoConfig,
    via_proxy: bool = False,
    log: EventLog | None = None,
) -> FeedRefresh:
    """Refresh every feed block's cached videos.

    Channels are fetched one after another; a failing channel is recorded
    and leaves its block unchanged without affecting the others.  Each
    fetch and failure is also appended to ``log`` when one is given.
    """
    blocks: list[Block] = []
    refreshed: list[str] = []
    failed: list[tuple[str, str]] = []
    skipped: list[str] = []

    for block in site.blocks:
        if not block.is_youtube:
            blocks.append(block)
            continue
        if not is_valid_youtube_channel_id(block.channel_id):
            skipped.append(block.id)
            blocks.append(block)
            continue
        try:
            title, videos = fetch_channel_videos(
                block.channel_id, client=client, config=config, via_proxy=via_proxy,
            )
        except FeedError as exc:
            failed.append((block.id, str(exc)))
            blocks.append(block)
            if log is not None:
                log.append(FeedFailed(block_id=block.id, reason=str(exc), timestamp_ns=now_ns()))
            continue
        if log is not None:
            log.append(FeedFetched(
                block_id=block.id,
                channel_id=block.channel_id,
                videos=len(videos),
                timestamp_ns=now_ns(),
            ))
        blocks.append(dataclasses.replace(
            block,
            youtube_videos=videos[:MAX_CACHED_VIDEOS],
            channel_title=title or block.channel_title,
        ))
        refreshed.append(block.id)

    return FeedRefresh(
        site=dataclasses.replace(site, blocks=tuple(blocks)),
        refreshed=tuple(refreshed),
        failed=tuple(failed),
        skipped=tuple(skipped),
    )
