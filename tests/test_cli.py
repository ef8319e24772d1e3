"""Tests for bentopress._cli — argument parsing and command dispatch."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from bentopress._cli import _build_parser, main
from bentopress._errors import ConfigError


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_preview_default_args(self) -> None:
        args = _build_parser().parse_args(["preview"])
        assert args.command == "preview"
        assert args.root == "."
        assert args.output == "preview.html"
        assert args.source is None
        assert args.watch is False

    def test_preview_all_flags(self) -> None:
        args = _build_parser().parse_args([
            "preview", "my-site/", "--source", "me.json", "--output", "out.html",
            "--site-id", "s1", "--watch",
        ])
        assert args.root == "my-site/"
        assert args.source == "me.json"
        assert args.output == "out.html"
        assert args.site_id == "s1"
        assert args.watch is True

    def test_export_default_args(self) -> None:
        args = _build_parser().parse_args(["export"])
        assert args.command == "export"
        assert args.target is None
        assert args.output is None
        assert args.no_archive is False
        assert args.static_feed is False

    def test_export_target(self) -> None:
        args = _build_parser().parse_args(["export", "--target", "github-pages"])
        assert args.target == "github-pages"

    def test_export_rejects_unknown_target(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["export", "--target", "mainframe"])

    @pytest.mark.parametrize("command", ["preview", "export", "refresh-videos"])
    def test_verbose_flag(self, command: str) -> None:
        assert _build_parser().parse_args([command, "-v"]).verbose is True
        assert _build_parser().parse_args([command]).verbose is False

    def test_refresh_videos(self) -> None:
        args = _build_parser().parse_args(["refresh-videos", "--via-proxy"])
        assert args.command == "refresh-videos"
        assert args.via_proxy is True

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        from bentopress import __version__

        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    """main — dispatch to the application functions."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "preview" in capsys.readouterr().out

    def test_preview_dispatch(self) -> None:
        with patch("bentopress.app.preview") as preview:
            main(["preview", "site", "--output", "p.html", "--site-id", "s1"])
        preview.assert_called_once_with(
            root="site", destination="p.html", watch=False, verbose=False,
            source=None, site_id="s1",
        )

    def test_export_dispatch(self) -> None:
        with patch("bentopress.app.export") as export:
            main(["export", "--target", "docker", "--no-archive", "--static-feed"])
        export.assert_called_once_with(
            root=".",
            verbose=False,
            source=None,
            output=None,
            deployment_target="docker",
            site_id=None,
            archive=False,
            live_feed_refresh=False,
        )

    def test_export_flags_unset_fall_through(self) -> None:
        with patch("bentopress.app.export") as export:
            main(["export"])
        kwargs = export.call_args.kwargs
        assert kwargs["archive"] is None
        assert kwargs["live_feed_refresh"] is None

    def test_refresh_dispatch(self) -> None:
        with patch("bentopress.app.refresh_videos") as refresh:
            main(["refresh-videos", "--via-proxy"])
        refresh.assert_called_once_with(
            root=".", via_proxy=True, verbose=False, source=None,
        )

    def test_verbose_passed_through(self) -> None:
        with patch("bentopress.app.export") as export:
            main(["export", "--verbose"])
        assert export.call_args.kwargs["verbose"] is True

    def test_error_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("bentopress.app.export", side_effect=ConfigError("Site document not found")):
            with pytest.raises(SystemExit) as exc_info:
                main(["export"])
        assert exc_info.value.code == 1
        assert "bentopress: error: Site document not found" in capsys.readouterr().err

    def test_missing_document_end_to_end(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["export", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "Site document not found" in capsys.readouterr().err
