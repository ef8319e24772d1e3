"""Source watcher — re-render the preview when the site document changes.

Monitors the project root and reports changes to the two files that
affect output:

- Site document changed -> reload the document and re-render
- Config file changed -> reload the config, then re-render
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

from bentopress._errors import BentoError
from bentopress.config_loader import CONFIG_FILENAMES

if TYPE_CHECKING:
    from collections.abc import Callable

    from bentopress.config import BentoConfig


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: Which input changed.

    """

    path: Path
    kind: Literal["created", "modified", "deleted"]
    category: Literal["source", "config"]


_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def categorize_change(path: Path, config: BentoConfig) -> Literal["source", "config"] | None:
    """Determine whether a changed file is the site document or a config file.

    Returns None for anything else, including files under the output
    directory.

    """
    try:
        rel = path.relative_to(config.root)
    except ValueError:
        return None

    if path == config.source_path or rel == Path(config.source):
        return "source"
    if len(rel.parts) == 1 and rel.parts[0] in CONFIG_FILENAMES:
        return "config"
    return None


class SourceWatcher:
    """Watches the project root and calls ``on_change`` for relevant edits.

    Runs watchfiles in a daemon thread.  The callback is invoked on that
    thread, once per relevant change in a batch.  An exception raised by
    the callback is reported to stderr and does not stop the watcher.

    When a batch touches a config file and ``reload_config`` is given, the
    watcher replaces :attr:`config` with its result before delivering the
    batch.  A reload that raises ``BentoError`` is reported and the previous
    config stays in effect.

    """

    def __init__(
        self,
        config: BentoConfig,
        on_change: Callable[[ChangeEvent], None],
        *,
        reload_config: Callable[[], BentoConfig] | None = None,
    ) -> None:
        self._config = config
        self._on_change = on_change
        self._reload_config = reload_config
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def config(self) -> BentoConfig:
        """Config currently used to categorize changes."""
        return self._config

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching for file changes in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="bentopress-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def dispatch(self, raw_changes: set[tuple[Change, str]]) -> list[ChangeEvent]:
        """Categorize one batch of raw changes and call the callback.

        Returns the events that were delivered, in path order.
        """
        events: list[ChangeEvent] = []
        for change_type, path_str in sorted(raw_changes, key=lambda c: c[1]):
            path = Path(path_str)
            category = categorize_change(path, self._config)
            if category is None:
                continue
            kind = _CHANGE_KIND_MAP.get(change_type, "modified")
            events.append(ChangeEvent(path=path, kind=kind, category=category))

        if self._reload_config is not None and any(e.category == "config" for e in events):
            try:
                self._config = self._reload_config()
            except BentoError as exc:
                print(f"  Config reload failed: {exc}", file=sys.stderr)

        for event in events:
            try:
                self._on_change(event)
            except Exception as exc:  # noqa: BLE001
                print(f"  Re-render failed: {exc}", file=sys.stderr)
        return events

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and dispatch each batch."""
        from watchfiles import watch

        for raw_changes in watch(
            self._config.root,
            stop_event=self._stop_event,
            debounce=300,
            step=100,
        ):
            self.dispatch(raw_changes)
