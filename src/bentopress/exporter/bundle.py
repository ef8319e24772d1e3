"""Bundle assembly — render a site into its deployable file set.

``BundleExporter.entries()`` produces the complete, ordered file list in
memory; ``export()`` writes it either as a ``.zip`` archive or as a plain
directory.  Entry order is fixed:

    styles.css, app.js, index.html, assets/*, data.json, DEPLOY.md, scaffold

Archive members carry a fixed timestamp and mode, so exporting the same
site twice yields byte-identical archives.

Writes go to a temporary sibling first and are renamed into place only
after every entry was written; a failed export leaves no partial output.
"""

from __future__ import annotations

import io
import os
import shutil
import tempfile
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Literal

from bentopress._errors import ExportError
from bentopress.exporter.assets import collect_assets
from bentopress.exporter.scaffold import deploy_docs, scaffold_files, slugify
from bentopress.model import dump_site
from bentopress.observability.events import BundleWritten, now_ns
from bentopress.render.blocks import RenderContext
from bentopress.render.document import render_document
from bentopress.render.runtime import feed_options, generate_runtime_script, resolve_analytics
from bentopress.render.styles import generate_css

if TYPE_CHECKING:
    from bentopress._types import DeploymentTarget
    from bentopress.config import BentoConfig
    from bentopress.exporter.assets import AssetBundle
    from bentopress.model import SiteData
    from bentopress.observability.log import EventLog

# Earliest timestamp a zip member can carry
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

type EntryKind = Literal["style", "script", "page", "asset", "data", "docs", "scaffold"]


@dataclass(frozen=True, slots=True)
class BundleEntry:
    """One file of the bundle, held in memory.

    Attributes:
        path: Bundle-relative POSIX path.
        data: File contents.
        kind: Category of the file.

    """

    path: str
    data: bytes
    kind: EntryKind


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Record of a single file written during export."""

    path: str
    kind: EntryKind
    size_bytes: int


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Aggregate result of an export.

    Attributes:
        files: All files written, in bundle order.
        output_path: The archive file, or the bundle directory.
        archive: True if ``output_path`` is a ``.zip`` archive.
        target: Deployment target the bundle was scaffolded for.
        size_bytes: Size of the archive, or total size of the files.
        skipped_assets: ``(key, reason)`` for inline images left in place.
        duration_ms: Total wall-clock time for the export.

    """

    files: tuple[ExportedFile, ...]
    output_path: Path
    archive: bool
    target: DeploymentTarget
    size_bytes: int
    skipped_assets: tuple[tuple[str, str], ...]
    duration_ms: float


def archive_name(site: SiteData, target: DeploymentTarget) -> str:
    """``<name-slug>-bento-<target>.zip``."""
    return f"{slugify(site.profile.name)}-bento-{target}.zip"


class BundleExporter:
    """Renders and writes the deployable bundle for one site.

    The site is rendered once; ``entries()`` and ``export()`` reuse the
    result.

    Args:
        site: Frozen site snapshot.
        config: Export configuration (target, site id, feed options).
        log: Optional event log for render and export events.

    """

    def __init__(
        self,
        site: SiteData,
        config: BentoConfig,
        *,
        log: EventLog | None = None,
    ) -> None:
        self._site = site
        self._config = config
        self._log = log
        self._entries: tuple[BundleEntry, ...] | None = None
        self._assets: AssetBundle | None = None

    @property
    def target(self) -> DeploymentTarget:
        return self._config.deployment_target

    def entries(self) -> tuple[BundleEntry, ...]:
        """The full bundle in write order."""
        if self._entries is None:
            self._entries = self._build_entries()
        return self._entries

    def _build_entries(self) -> tuple[BundleEntry, ...]:
        site, config = self._site, self._config
        self._assets = collect_assets(site, log=self._log)

        analytics = resolve_analytics(site.profile, config.site_id)
        feed = feed_options(config)
        context = RenderContext(
            images=self._assets.images,
            hydrate=feed is not None,
            columns=config.grid_columns,
            max_videos=config.max_videos,
        )

        css = generate_css(site.profile, config.grid_columns)
        js = generate_runtime_script(analytics=analytics, feed=feed)
        html = render_document(site, context, log=self._log)
        scaffold = scaffold_files(self.target, site)
        docs = deploy_docs(
            self.target,
            site,
            scaffold=scaffold,
            analytics_endpoint=analytics.endpoint if analytics else "",
            site_id=analytics.site_id if analytics else "",
            live_feed=feed is not None,
        )

        entries = [
            BundleEntry("styles.css", css.encode("utf-8"), "style"),
            BundleEntry("app.js", js.encode("utf-8"), "script"),
            BundleEntry("index.html", html.encode("utf-8"), "page"),
            *(BundleEntry(a.filename, a.data, "asset") for a in self._assets.files),
            BundleEntry("data.json", dump_site(site).encode("utf-8"), "data"),
            BundleEntry("DEPLOY.md", docs.encode("utf-8"), "docs"),
            *(BundleEntry(path, text.encode("utf-8"), "scaffold") for path, text in scaffold),
        ]
        return tuple(entries)

    def archive_bytes(self) -> bytes:
        """The bundle as an in-memory zip archive."""
        buffer = io.BytesIO()
        self._write_zip(buffer)
        return buffer.getvalue()

    def export(self) -> ExportResult:
        """Write the bundle to ``config.output_path``.

        Returns:
            ExportResult describing the written files.

        Raises:
            ExportError: If the bundle cannot be written.  No partial
                archive or directory is left behind.

        """
        start = time.perf_counter()
        entries = self.entries()
        output_dir = self._config.output_path
        name = archive_name(self._site, self.target)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            if self._config.archive:
                destination = output_dir / name
                self._atomic_zip(destination)
                size = destination.stat().st_size
            else:
                destination = output_dir / name.removesuffix(".zip")
                self._atomic_directory(destination)
                size = sum(len(e.data) for e in entries)
        except OSError as exc:
            msg = f"Failed to write bundle to {output_dir}: {exc}"
            raise ExportError(msg) from exc

        duration_ms = (time.perf_counter() - start) * 1000
        if self._log is not None:
            self._log.append(BundleWritten(
                target=self.target,
                path=str(destination),
                entries=len(entries),
                size_bytes=size,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            ))

        return ExportResult(
            files=tuple(ExportedFile(e.path, e.kind, len(e.data)) for e in entries),
            output_path=destination,
            archive=self._config.archive,
            target=self.target,
            size_bytes=size,
            skipped_assets=self._assets.skipped if self._assets else (),
            duration_ms=duration_ms,
        )

    # -- Writers --

    def _write_zip(self, fileobj: BinaryIO) -> None:
        with zipfile.ZipFile(fileobj, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for entry in self.entries():
                info = zipfile.ZipInfo(entry.path, date_time=ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                archive.writestr(info, entry.data)

    def _atomic_zip(self, destination: Path) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent,
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                self._write_zip(fh)
            os.replace(tmp_path, destination)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def _atomic_directory(self, destination: Path) -> None:
        staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}.", dir=destination.parent))
        try:
            for entry in self.entries():
                path = staging / entry.path
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(entry.data)
            if destination.exists():
                shutil.rmtree(destination)
            os.replace(staging, destination)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
