"""Pipeline event model.

Every render and export step records a frozen event:

- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific step

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.
    Asset decoding produces events from worker threads.

"""

import time
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Render events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BlockRendered:
    """A block was rendered into a tile.

    Attributes:
        block_id: Identifier of the rendered block.
        block_type: Block variant (``LINK``, ``MEDIA``, ...).
        size_tier: Resolved size tier of the tile.
        bytes: Length of the emitted markup in UTF-8 bytes.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    block_id: str
    block_type: str
    size_tier: str
    bytes: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Export events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AssetDecoded:
    """An inline image was decoded into a bundle file.

    Attributes:
        key: Image key (``profile_avatar``, ``block_<id>``).
        filename: Bundle path of the decoded file.
        mime: Declared MIME type of the inline reference.
        size_bytes: Decoded size.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    key: str
    filename: str
    mime: str
    size_bytes: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class AssetSkipped:
    """An inline image could not be decoded and keeps its original reference."""

    key: str
    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BundleWritten:
    """A bundle was written to disk.

    Attributes:
        target: Deployment target of the bundle.
        path: Archive file or output directory.
        entries: Number of files in the bundle.
        size_bytes: Total bytes written.
        duration_ms: Wall time of the export.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    target: str
    path: str
    entries: int
    size_bytes: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Feed events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FeedFetched:
    """A channel feed was fetched and cached on a block."""

    block_id: str
    channel_id: str
    videos: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class FeedFailed:
    """A channel feed could not be fetched; the block keeps its old cache."""

    block_id: str
    reason: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type PipelineEvent = (
    BlockRendered | AssetDecoded | AssetSkipped | BundleWritten | FeedFetched | FeedFailed
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()


def format_event(event: PipelineEvent) -> str:
    """One-line human description of an event, for verbose CLI output."""
    match event:
        case BlockRendered():
            return (
                f"rendered {event.block_id} ({event.block_type}, {event.size_tier}, "
                f"{event.bytes} bytes)"
            )
        case AssetDecoded():
            return f"decoded {event.key} -> {event.filename} ({event.size_bytes} bytes)"
        case AssetSkipped():
            return f"kept inline {event.key}: {event.reason}"
        case BundleWritten():
            return f"wrote {event.entries} files to {event.path} ({event.size_bytes} bytes)"
        case FeedFetched():
            return f"fetched {event.videos} videos for {event.block_id} ({event.channel_id})"
        case FeedFailed():
            return f"feed failed for {event.block_id}: {event.reason}"
    return repr(event)
