"""bentopress CLI — bentopress preview / bentopress export / bentopress refresh-videos.

Entry point for the ``bentopress`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys

from bentopress._types import DEPLOYMENT_TARGETS


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the bentopress CLI."""
    parser = argparse.ArgumentParser(
        prog="bentopress",
        description="Render bento link-in-bio grids to previews and deployable bundles.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # bentopress preview
    preview_parser = subparsers.add_parser(
        "preview",
        help="Render a self-contained preview document",
    )
    preview_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    preview_parser.add_argument("--source", default=None, help="Site document (JSON)")
    preview_parser.add_argument("--output", default="preview.html", help="Preview file")
    preview_parser.add_argument("--site-id", default=None, help="Analytics site id")
    preview_parser.add_argument(
        "--watch", action="store_true", help="Re-render when the site document changes",
    )
    preview_parser.add_argument(
        "-v", "--verbose", action="store_true", help="List every rendered tile",
    )

    # bentopress export
    export_parser = subparsers.add_parser(
        "export",
        help="Export a deployable static bundle",
    )
    export_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    export_parser.add_argument("--source", default=None, help="Site document (JSON)")
    export_parser.add_argument("--output", default=None, help="Output directory")
    export_parser.add_argument(
        "--target", choices=DEPLOYMENT_TARGETS, default=None, help="Deployment target",
    )
    export_parser.add_argument("--site-id", default=None, help="Analytics site id")
    export_parser.add_argument(
        "--no-archive", action="store_true", help="Write a directory instead of a .zip",
    )
    export_parser.add_argument(
        "--static-feed",
        action="store_true",
        help="Ship only the cached feed videos, without live refresh in app.js",
    )
    export_parser.add_argument(
        "-v", "--verbose", action="store_true", help="List every render and export event",
    )

    # bentopress refresh-videos
    refresh_parser = subparsers.add_parser(
        "refresh-videos",
        help="Fetch channel feeds and update cached videos in the site document",
    )
    refresh_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    refresh_parser.add_argument("--source", default=None, help="Site document (JSON)")
    refresh_parser.add_argument(
        "--via-proxy", action="store_true", help="Request feeds through the CORS proxy",
    )
    refresh_parser.add_argument(
        "-v", "--verbose", action="store_true", help="List every feed fetch and failure",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from bentopress import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from bentopress._errors import BentoError
    from bentopress.app import export, preview, refresh_videos

    try:
        if args.command == "preview":
            preview(
                root=args.root,
                destination=args.output,
                watch=args.watch,
                verbose=args.verbose,
                source=args.source,
                site_id=args.site_id,
            )
        elif args.command == "export":
            export(
                root=args.root,
                verbose=args.verbose,
                source=args.source,
                output=args.output,
                deployment_target=args.target,
                site_id=args.site_id,
                archive=False if args.no_archive else None,
                live_feed_refresh=False if args.static_feed else None,
            )
        elif args.command == "refresh-videos":
            refresh_videos(
                root=args.root,
                via_proxy=args.via_proxy,
                verbose=args.verbose,
                source=args.source,
            )
    except BentoError as exc:
        print(f"bentopress: error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
