"""Tests for bentopress.model — site document parsing and serialization."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from bentopress._errors import ModelError
from bentopress.model import (
    MAX_CACHED_VIDEOS,
    Block,
    BlockType,
    MediaPosition,
    Profile,
    SiteData,
    dump_site,
    load_site,
)


class TestSiteDataFromDict:
    """Parsing the editor's camelCase document."""

    def test_profile_fields(self, sample_site: SiteData) -> None:
        profile = sample_site.profile
        assert profile.name == "Jane Doe"
        assert profile.show_social_in_header is True
        assert profile.social_accounts[0].platform == "x"
        assert profile.social_accounts[0].follower_count == 1250
        assert profile.social_accounts[1].follower_count is None

    def test_block_fields(self, sample_site: SiteData) -> None:
        link = sample_site.blocks[0]
        assert link.type is BlockType.LINK
        assert link.col_span == 3
        assert link.row_span == 2
        assert link.grid_column == 1
        assert link.grid_row == 1
        assert link.color == "bg-violet-100"

    def test_grid_version(self, sample_site: SiteData) -> None:
        assert sample_site.grid_version == 2

    def test_spans_default_to_one(self) -> None:
        site = SiteData.from_dict({"profile": {}, "blocks": [{"id": "a", "type": "TEXT"}]})
        assert (site.blocks[0].col_span, site.blocks[0].row_span) == (1, 1)

    def test_missing_profile_raises(self) -> None:
        with pytest.raises(ModelError, match="profile"):
            SiteData.from_dict({"blocks": []})

    def test_non_object_raises(self) -> None:
        with pytest.raises(ModelError):
            SiteData.from_dict([])  # type: ignore[arg-type]

    def test_unknown_block_type_raises(self) -> None:
        with pytest.raises(ModelError, match="unknown type"):
            SiteData.from_dict({"profile": {}, "blocks": [{"id": "a", "type": "VIDEO"}]})

    def test_block_without_id_raises(self) -> None:
        with pytest.raises(ModelError, match="no id"):
            SiteData.from_dict({"profile": {}, "blocks": [{"type": "TEXT"}]})

    def test_duplicate_ids_raise(self) -> None:
        doc = {"profile": {}, "blocks": [{"id": "a", "type": "TEXT"}, {"id": "a", "type": "MAP"}]}
        with pytest.raises(ModelError, match="Duplicate"):
            SiteData.from_dict(doc)

    def test_non_positive_span_raises(self) -> None:
        doc = {"profile": {}, "blocks": [{"id": "a", "type": "TEXT", "colSpan": 0}]}
        with pytest.raises(ModelError, match="non-positive span"):
            SiteData.from_dict(doc)

    def test_cached_videos_truncated(self) -> None:
        videos = [{"id": f"vid{i:08d}", "title": str(i)} for i in range(10)]
        doc = {
            "profile": {},
            "blocks": [{"id": "yt", "type": "SOCIAL", "channelId": "UC" + "x" * 22,
                        "youtubeVideos": videos}],
        }
        block = SiteData.from_dict(doc).blocks[0]
        assert len(block.youtube_videos) == MAX_CACHED_VIDEOS
        assert block.is_youtube

    def test_unknown_youtube_mode_dropped(self) -> None:
        doc = {"profile": {}, "blocks": [{"id": "a", "type": "SOCIAL", "youtubeMode": "carousel"}]}
        assert SiteData.from_dict(doc).blocks[0].youtube_mode is None

    def test_analytics_supabase_url_key(self) -> None:
        doc = {"profile": {"analytics": {"enabled": True, "supabaseUrl": "https://x.supabase.co"}}}
        analytics = SiteData.from_dict(doc).profile.analytics
        assert analytics is not None
        assert analytics.endpoint == "https://x.supabase.co"

    def test_legacy_analytics_endpoint_key(self) -> None:
        doc = {"profile": {"analytics": {"enabled": True, "endpoint": "https://y.supabase.co"}}}
        analytics = SiteData.from_dict(doc).profile.analytics
        assert analytics is not None
        assert analytics.endpoint == "https://y.supabase.co"

    def test_show_branding_defaults_true(self) -> None:
        assert SiteData.from_dict({"profile": {}}).profile.show_branding is True


class TestRoundTrip:
    """``data.json`` re-imports to an equal snapshot."""

    def test_round_trip_equal(self, sample_site: SiteData) -> None:
        again = SiteData.from_dict(json.loads(dump_site(sample_site)))
        assert again == sample_site

    def test_dump_is_deterministic(self, sample_site: SiteData) -> None:
        assert dump_site(sample_site) == dump_site(sample_site)

    def test_dump_keeps_non_ascii(self) -> None:
        site = SiteData(profile=Profile(name="Zoë"))
        assert "Zoë" in dump_site(site)

    def test_z_index_persisted(self) -> None:
        site = SiteData(profile=Profile(), blocks=(Block(id="a", type=BlockType.TEXT, z_index=5),))
        assert json.loads(dump_site(site))["blocks"][0]["zIndex"] == 5

    def test_editor_document_survives_round_trip(self, tmp_path: Path) -> None:
        doc = {
            "profile": {
                "name": "Jane",
                "analytics": {"enabled": True, "supabaseUrl": "https://x.supabase.co", "anonKey": "k"},
                "customDomain": "jane.example.com",
            },
            "blocks": [
                {"id": "a", "type": "TEXT", "zIndex": 3, "rotation": 4, "meta": {"pinned": True}},
            ],
            "gridVersion": 2,
            "historyCursor": 7,
        }
        path = tmp_path / "site.json"
        path.write_text(json.dumps(doc), encoding="utf-8")

        exported = json.loads(dump_site(load_site(path)))
        assert exported["profile"]["analytics"] == {
            "enabled": True, "supabaseUrl": "https://x.supabase.co", "anonKey": "k",
        }
        assert exported["profile"]["customDomain"] == "jane.example.com"
        block = exported["blocks"][0]
        assert block["zIndex"] == 3
        assert block["rotation"] == 4
        assert block["meta"] == {"pinned": True}
        assert exported["historyCursor"] == 7

        path.write_text(json.dumps(exported), encoding="utf-8")
        assert json.loads(dump_site(load_site(path))) == exported

    def test_unknown_keys_do_not_override_fields(self) -> None:
        doc = {"profile": {"name": "Jane"}, "blocks": [{"id": "a", "type": "TEXT", "x-note": "keep"}]}
        out = SiteData.from_dict(doc).to_dict()
        assert list(out["blocks"][0])[:2] == ["id", "type"]
        assert out["blocks"][0]["x-note"] == "keep"

    def test_load_site(self, tmp_path: Path, sample_document: dict[str, Any]) -> None:
        path = tmp_path / "site.json"
        path.write_text(json.dumps(sample_document), encoding="utf-8")
        assert load_site(path).profile.name == "Jane Doe"

    def test_load_site_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "site.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ModelError, match="not valid JSON"):
            load_site(path)


class TestMediaPosition:
    def test_clamped(self) -> None:
        pos = MediaPosition(x=-10, y=150)
        assert (pos.x, pos.y) == (0.0, 100.0)

    def test_css(self) -> None:
        assert MediaPosition(x=50, y=33.5).css == "50% 33.5%"

    def test_non_numeric_position_ignored(self) -> None:
        doc = {"profile": {}, "blocks": [{"id": "a", "type": "MEDIA", "mediaPosition": {"x": "left"}}]}
        assert SiteData.from_dict(doc).blocks[0].media_position is None


class TestNonFiniteNumbers:
    """JSON NaN / Infinity / overflowing literals are rejected as model errors."""

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e400"])
    def test_span_rejected(self, tmp_path: Path, literal: str) -> None:
        path = tmp_path / "site.json"
        path.write_text(
            '{"profile": {}, "blocks": [{"id": "b1", "type": "TEXT", "colSpan": %s}]}' % literal,
            encoding="utf-8",
        )
        with pytest.raises(ModelError, match="colSpan"):
            load_site(path)

    def test_grid_position_rejected(self) -> None:
        doc = {"profile": {}, "blocks": [{"id": "b1", "type": "TEXT", "gridRow": float("inf")}]}
        with pytest.raises(ModelError, match="'b1'"):
            SiteData.from_dict(doc)

    def test_follower_count_rejected(self) -> None:
        doc = {"profile": {"socialAccounts": [
            {"platform": "x", "handle": "j", "followerCount": float("nan")},
        ]}}
        with pytest.raises(ModelError, match="followerCount"):
            SiteData.from_dict(doc)

    def test_non_finite_blur_and_position_ignored(self) -> None:
        doc = {
            "profile": {"backgroundBlur": float("nan")},
            "blocks": [{"id": "m", "type": "MEDIA", "mediaPosition": {"x": float("inf"), "y": 10}}],
        }
        site = SiteData.from_dict(doc)
        assert site.profile.background_blur == 0
        assert site.blocks[0].media_position is None
