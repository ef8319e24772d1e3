"""bentopress application — load a site document and turn it into output.

The three public functions (preview, export, refresh_videos) are the
primary entry points; the CLI is a thin argument layer over them.  Each run
records what it did in an :class:`~bentopress.observability.EventLog` and
prints its summary from that log.
"""

from __future__ import annotations

import os
import sys
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from bentopress._errors import ConfigError
from bentopress.config_loader import load_config
from bentopress.model import dump_site, load_site
from bentopress.observability import (
    AssetDecoded,
    AssetSkipped,
    BlockRendered,
    EventLog,
    FeedFailed,
    FeedFetched,
    format_event,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from bentopress.config import BentoConfig
    from bentopress.exporter.bundle import ExportResult
    from bentopress.feeds import FeedRefresh
    from bentopress.model import SiteData
    from bentopress.watcher import ChangeEvent

_USER_AGENT = "bentopress feed refresh"


def _load_source(config: BentoConfig) -> SiteData:
    """Read the site document named by the config.

    Raises:
        ConfigError: If the document does not exist or cannot be read.
        ModelError: If the document is not a valid site.

    """
    path = config.source_path
    if not path.is_file():
        msg = f"Site document not found: {path}"
        raise ConfigError(msg)
    try:
        return load_site(path)
    except OSError as exc:
        msg = f"Cannot read site document {path}: {exc}"
        raise ConfigError(msg) from exc


def _write_text(path: Path, text: str) -> None:
    """Replace a file's contents in one rename."""
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, path)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _print_events(log: EventLog) -> None:
    """Print every recorded event, one per line, to stderr."""
    lines = [f"    {format_event(event)}" for event in log]
    if log.dropped:
        lines.append(f"    ({log.dropped} earlier events dropped)")
    if lines:
        print("\n".join(lines), file=sys.stderr)


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


def render_preview_file(
    config: BentoConfig,
    destination: Path,
    *,
    log: EventLog | None = None,
) -> SiteData:
    """Render the single-file preview for ``config`` into ``destination``."""
    from bentopress.render.document import render_preview

    site = _load_source(config)
    html = render_preview(site, config, site_id=config.site_id, log=log)
    destination.parent.mkdir(parents=True, exist_ok=True)
    _write_text(destination, html)
    return site


def preview(
    root: str | Path = ".",
    *,
    destination: str | Path = "preview.html",
    watch: bool = False,
    verbose: bool = False,
    **kwargs: object,
) -> Path:
    """Render a self-contained preview document.

    The preview inlines its stylesheet and script so it can be opened
    directly or embedded through ``srcdoc``.

    Args:
        root: Project root directory.
        destination: Output file, relative to root unless absolute.
        watch: Keep running and re-render whenever the site document or
            config file changes.  A config change is reloaded first.
        verbose: Print every render event.
        **kwargs: Override BentoConfig fields.

    Returns:
        Absolute path of the written preview file.

    """
    from bentopress.banner import print_banner

    config = load_config(Path(root), **kwargs)
    target = Path(destination)
    if not target.is_absolute():
        target = config.root / target

    log = EventLog()
    t0 = time.perf_counter()
    site = render_preview_file(config, target, log=log)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(config, len(site.blocks), mode="preview", load_ms=load_ms, watching=watch)
    rendered = len(log.query(event_type=BlockRendered))
    print(f"  Rendered {_plural(rendered, 'tile')}", file=sys.stderr)
    if verbose:
        _print_events(log)
    print(f"  Preview: {target}", file=sys.stderr)

    if watch:
        _watch_preview(config, target, root=Path(root), overrides=kwargs, verbose=verbose)
    return target


def _preview_change_handler(
    current_config: Callable[[], BentoConfig],
    target: Path,
    *,
    verbose: bool = False,
) -> Callable[[ChangeEvent], None]:
    """Build the watch callback that re-renders ``target``.

    ``current_config`` is consulted on every change so a reloaded config
    file takes effect on the next render.  Deleting the site document
    leaves the last preview in place.
    """

    def on_change(event: ChangeEvent) -> None:
        if event.kind == "deleted" and event.category == "source":
            return
        log = EventLog()
        t0 = time.perf_counter()
        render_preview_file(current_config(), target, log=log)
        ms = (time.perf_counter() - t0) * 1000
        print(f"  Re-rendered after {event.path.name} changed ({ms:.0f}ms)", file=sys.stderr)
        if verbose:
            _print_events(log)

    return on_change


def _watch_preview(
    config: BentoConfig,
    target: Path,
    *,
    root: Path,
    overrides: dict[str, object],
    verbose: bool = False,
) -> None:
    """Block until interrupted, re-rendering the preview on every change."""
    from bentopress.watcher import SourceWatcher

    def current_config() -> BentoConfig:
        return watcher.config

    watcher = SourceWatcher(
        config,
        _preview_change_handler(current_config, target, verbose=verbose),
        reload_config=lambda: load_config(root, **overrides),
    )
    watcher.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export(
    root: str | Path = ".",
    *,
    log: EventLog | None = None,
    verbose: bool = False,
    **kwargs: object,
) -> ExportResult:
    """Export the site as a deployable static bundle.

    Args:
        root: Project root directory.
        log: Event log receiving render and export events; a fresh one is
            used when omitted.
        verbose: Print every recorded event after the summary.
        **kwargs: Override BentoConfig fields.

    Returns:
        ExportResult describing the written bundle.

    Raises:
        ExportError: If the bundle cannot be written.

    """
    from bentopress.banner import print_banner
    from bentopress.exporter.bundle import BundleExporter

    if log is None:
        log = EventLog()
    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    site = _load_source(config)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(config, len(site.blocks), mode="export", load_ms=load_ms)

    result = BundleExporter(site, config, log=log).export()
    _print_export_summary(result, log)
    if verbose:
        _print_events(log)
    return result


def _print_export_summary(result: ExportResult, log: EventLog) -> None:
    """Print export completion summary to stderr."""
    rendered = len(log.query(event_type=BlockRendered))
    decoded = len(log.query(event_type=AssetDecoded))
    lines = [
        "",
        "─" * 41,
        f"  Bundled {_plural(len(result.files), 'file')}",
        f"  Rendered {_plural(rendered, 'tile')}",
    ]
    if decoded > 0:
        lines.append(f"  Extracted {_plural(decoded, 'image')}")
    for event in log.query(event_type=AssetSkipped):
        lines.append(f"  Kept inline {event.key}: {event.reason}")
    lines.append(f"  Output: {result.output_path} ({result.size_bytes:,} bytes)")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


# ---------------------------------------------------------------------------
# Feed refresh
# ---------------------------------------------------------------------------


def refresh_videos(
    root: str | Path = ".",
    *,
    via_proxy: bool = False,
    client: httpx.Client | None = None,
    log: EventLog | None = None,
    verbose: bool = False,
    **kwargs: object,
) -> FeedRefresh:
    """Refresh cached feed videos and write them back to the site document.

    The document is only rewritten when at least one feed block was
    refreshed.

    Args:
        root: Project root directory.
        via_proxy: Request feeds through the configured CORS proxy.
        client: HTTP client to use; one is created (and closed) when omitted.
        log: Event log receiving feed events; a fresh one is used when omitted.
        verbose: Print every recorded event after the summary.
        **kwargs: Override BentoConfig fields.

    """
    from bentopress.banner import print_banner
    from bentopress.feeds import refresh_site_videos

    if log is None:
        log = EventLog()
    config = load_config(Path(root), **kwargs)
    site = _load_source(config)
    print_banner(config, len(site.blocks), mode="refresh")

    if client is None:
        with httpx.Client(
            timeout=config.feed_timeout,
            follow_redirects=True,
            headers={"User-Agent": _USER_AGENT},
        ) as owned:
            outcome = refresh_site_videos(
                site, client=owned, config=config, via_proxy=via_proxy, log=log,
            )
    else:
        outcome = refresh_site_videos(
            site, client=client, config=config, via_proxy=via_proxy, log=log,
        )

    if outcome.refreshed:
        _write_text(config.source_path, dump_site(outcome.site))

    fetched = len(log.query(event_type=FeedFetched))
    lines = [f"  Refreshed {fetched} feed block(s)"]
    lines.extend(
        f"  Failed {event.block_id}: {event.reason}"
        for event in log.query(event_type=FeedFailed)
    )
    lines.extend(f"  Skipped {block_id}: invalid channel id" for block_id in outcome.skipped)
    print("\n".join(lines), file=sys.stderr)
    if verbose:
        _print_events(log)
    return outcome
