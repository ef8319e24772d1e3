"""Pipeline observability — frozen events plus a bounded event log.

Renderers, the exporter and the feed refresh accept an optional
:class:`EventLog` and record one event per step (block rendered, asset
decoded or skipped, bundle written, feed fetched or failed).  Nothing is
recorded when no log is passed.  The app layer always passes one and builds
its command summary from it.

Quick Start:
    >>> from bentopress.observability import EventLog, BlockRendered
    >>> log = EventLog()
    >>> # render_document(site, context, log=log)
    >>> log.query(event_type=BlockRendered)

"""

from bentopress.observability.events import (
    AssetDecoded,
    AssetSkipped,
    BlockRendered,
    BundleWritten,
    FeedFailed,
    FeedFetched,
    PipelineEvent,
    format_event,
    now_ns,
)
from bentopress.observability.log import EventLog

__all__ = [
    "AssetDecoded",
    "AssetSkipped",
    "BlockRendered",
    "BundleWritten",
    "EventLog",
    "FeedFailed",
    "FeedFetched",
    "PipelineEvent",
    "format_event",
    "now_ns",
]
