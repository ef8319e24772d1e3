"""Status banner — mode-aware summary output on stderr.

Prints a short branded header followed by what was loaded and where the
output goes.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bentopress.config import BentoConfig


# ---------------------------------------------------------------------------
# ANSI helpers — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_VIOLET = "\033[38;5;141m" if _COLOR else ""


_MODE_STYLES: dict[str, tuple[str, str]] = {
    "preview": (_GREEN, "preview"),
    "export": (_YELLOW, "export"),
    "refresh": (_CYAN, "refresh-videos"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: BentoConfig,
    block_count: int,
    mode: str,
    *,
    load_ms: float = 0.0,
    watching: bool = False,
    warnings: list[str] | None = None,
) -> None:
    """Print the bentopress status banner to stderr.

    Args:
        config: Resolved BentoConfig.
        block_count: Number of blocks in the loaded site document.
        mode: One of ``"preview"``, ``"export"``, ``"refresh"``.
        load_ms: Time spent loading the site document in milliseconds.
        watching: Whether the source watcher is active.
        warnings: Optional list of warning messages to display.

    """
    from bentopress import __version__

    lines: list[str] = [
        "",
        f"  {_VIOLET}{_BOLD}▦{_RESET}  bentopress {_DIM}v{__version__}{_RESET}  "
        f"{_mode_badge(mode)}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {_plural(block_count, 'block')} loaded{timing}")
    lines.append(f"  {_DIM}├─{_RESET} source: {_DIM}{config.source_path}{_RESET}")

    if mode == "export":
        feed = f"{_GREEN}live{_RESET}" if config.live_feed_refresh else "static"
        lines.append(f"  {_DIM}├─{_RESET} target: {config.deployment_target}")
        lines.append(f"  {_DIM}├─{_RESET} feed: {feed}")
        lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")

    if watching:
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
