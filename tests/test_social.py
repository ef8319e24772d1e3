"""Tests for bentopress.social — platform registry and URL builders."""

from __future__ import annotations

import pytest

from bentopress.social import (
    PLATFORMS,
    build_url,
    display_handle,
    extract_handle_from_url,
    format_follower_count,
    get_platform,
    icon_src,
    infer_platform_from_url,
    normalize_handle,
)


class TestRegistry:
    def test_lookup(self) -> None:
        platform = get_platform("instagram")
        assert platform is not None
        assert platform.label == "Instagram"
        assert platform.kind == "handle"

    def test_unknown_platform(self) -> None:
        assert get_platform("myspace") is None
        assert get_platform(None) is None

    def test_registry_read_only(self) -> None:
        with pytest.raises(TypeError):
            PLATFORMS["myspace"] = PLATFORMS["x"]  # type: ignore[index]

    def test_every_handle_platform_builds_safe_url(self) -> None:
        for platform_id, platform in PLATFORMS.items():
            sample = "jane@mastodon.social" if platform_id == "mastodon" else "jane"
            if platform_id == "whatsapp":
                sample = "15551234567"
            url = build_url(platform_id, sample)
            assert url.startswith("https://"), platform_id
            assert platform.build is not None


class TestBuildUrl:
    @pytest.mark.parametrize(
        ("platform", "handle", "url"),
        [
            ("x", "@jane", "https://x.com/jane"),
            ("x", "jane", "https://x.com/jane"),
            ("instagram", "jane.doe", "https://instagram.com/jane.doe"),
            ("tiktok", "@jane", "https://www.tiktok.com/@jane"),
            ("youtube", "jane", "https://www.youtube.com/@jane"),
            ("linkedin", "jane-doe", "https://www.linkedin.com/in/jane-doe"),
            ("reddit", "jane", "https://reddit.com/u/jane"),
            ("bluesky", "jane.bsky.social", "https://bsky.app/profile/jane.bsky.social"),
            ("mastodon", "@jane@Mastodon.Social", "https://mastodon.social/@jane"),
            ("substack", "janewrites", "https://janewrites.substack.com"),
            ("whatsapp", "+1 (555) 123-4567", "https://wa.me/15551234567"),
            ("website", "jane.example.com", "https://jane.example.com/"),
        ],
    )
    def test_builds(self, platform: str, handle: str, url: str) -> None:
        assert build_url(platform, handle) == url

    def test_handle_is_url_encoded(self) -> None:
        assert build_url("x", "jäne") == "https://x.com/j%C3%A4ne"

    @pytest.mark.parametrize(
        ("platform", "handle"),
        [
            ("x", ""),
            ("x", "@"),
            ("x", "jane doe"),
            ("x", "jane/../admin"),
            ("x", "jane?x=1"),
            ("mastodon", "jane"),
            ("mastodon", "jane@localhost"),
            ("substack", "bad_name!"),
            ("whatsapp", "call me"),
            ("website", "javascript:alert(1)"),
            ("myspace", "jane"),
        ],
    )
    def test_malformed_returns_empty(self, platform: str, handle: str) -> None:
        assert build_url(platform, handle) == ""

    def test_pasted_profile_url_reduced_to_handle(self) -> None:
        assert build_url("x", "https://x.com/jane") == build_url("x", "@jane")
        assert build_url("linkedin", "https://linkedin.com/in/jane-doe") == (
            "https://www.linkedin.com/in/jane-doe"
        )

    def test_pasted_url_without_handle_is_empty(self) -> None:
        assert build_url("linkedin", "https://linkedin.com/company/acme") == ""


class TestHandles:
    def test_normalize(self) -> None:
        assert normalize_handle("x", "  @jane ") == "jane"
        assert normalize_handle("custom", " https://a.example ") == "https://a.example"

    def test_display(self) -> None:
        assert display_handle("x", "jane") == "@jane"
        assert display_handle("reddit", "@jane") == "u/jane"
        assert display_handle("github", "@jane") == "@jane"
        assert display_handle("linkedin", "@jane") == "jane"
        assert display_handle("myspace", "jane") == ""

    @pytest.mark.parametrize(
        ("platform", "url", "handle"),
        [
            ("x", "https://twitter.com/jane", "jane"),
            ("youtube", "https://www.youtube.com/@jane", "jane"),
            ("youtube", "https://www.youtube.com/channel/UCabc", "UCabc"),
            ("tiktok", "https://www.tiktok.com/@jane", "jane"),
            ("reddit", "https://reddit.com/user/jane", "jane"),
            ("bluesky", "https://bsky.app/profile/jane.bsky.social", "jane.bsky.social"),
            ("substack", "https://janewrites.substack.com/p/post", "janewrites"),
            ("mastodon", "https://mastodon.social/@jane", "jane@mastodon.social"),
            ("discord", "https://discord.com/invite/abc123", "abc123"),
            ("threads", "https://www.threads.net/@jane", "jane"),
        ],
    )
    def test_extract(self, platform: str, url: str, handle: str) -> None:
        assert extract_handle_from_url(platform, url) == handle

    def test_extract_unrecognised_path(self) -> None:
        assert extract_handle_from_url("medium", "https://medium.com/tag/python") is None


class TestInference:
    @pytest.mark.parametrize(
        ("url", "platform"),
        [
            ("https://twitter.com/jane", "x"),
            ("https://youtu.be/dQw4w9WgXcQ", "youtube"),
            ("https://jane.substack.com", "substack"),
            ("https://t.me/jane", "telegram"),
            ("https://example.com", None),
        ],
    )
    def test_infer(self, url: str, platform: str | None) -> None:
        assert infer_platform_from_url(url) == platform


class TestFollowerCount:
    @pytest.mark.parametrize(
        ("count", "text"),
        [
            (0, "0"),
            (950, "950"),
            (1000, "1K"),
            (1260, "1.3K"),
            (12_000, "12K"),
            (3_400_000, "3.4M"),
            (None, ""),
            (-5, ""),
        ],
    )
    def test_format(self, count: int | None, text: str) -> None:
        assert format_follower_count(count) == text


class TestIcons:
    def test_tinted(self) -> None:
        assert icon_src("instagram", "#E4405F") == "https://cdn.simpleicons.org/instagram/E4405F"

    def test_untinted_when_colour_invalid(self) -> None:
        assert icon_src("github", "red; x") == "https://cdn.simpleicons.org/github"

    def test_no_icon_for_url_platforms(self) -> None:
        assert icon_src("website") == ""
        assert icon_src("unknown") == ""
