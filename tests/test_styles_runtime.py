"""Tests for bentopress.render.styles and bentopress.render.runtime."""

from __future__ import annotations

import json
import re

import pytest

from bentopress.config import BentoConfig
from bentopress.model import AnalyticsSettings, Profile
from bentopress.render.runtime import (
    ANALYTICS_TABLE_PATH,
    AnalyticsOptions,
    FeedOptions,
    feed_options,
    generate_runtime_script,
    resolve_analytics,
)
from bentopress.render.styles import DEFAULT_ACCENT, DEFAULT_PAGE_BACKGROUND, generate_css


class TestGenerateCss:
    def test_defaults(self) -> None:
        css = generate_css(Profile())
        assert f"--bg-color: {DEFAULT_PAGE_BACKGROUND};" in css
        assert f"--accent: {DEFAULT_ACCENT};" in css
        assert "background: var(--bg-color);" in css

    def test_deterministic(self) -> None:
        profile = Profile(primary_color="#ff0000", background_image="https://example.com/bg.jpg")
        assert generate_css(profile) == generate_css(profile)

    def test_profile_colours(self) -> None:
        css = generate_css(Profile(primary_color="#ff0000", background_color="#111111"))
        assert "--accent: #ff0000;" in css
        assert "--bg-color: #111111;" in css

    def test_unsafe_colour_ignored(self) -> None:
        css = generate_css(Profile(primary_color="red;} body { display:none"))
        assert "display:none" not in css
        assert f"--accent: {DEFAULT_ACCENT};" in css

    def test_background_image(self) -> None:
        css = generate_css(Profile(background_image="https://example.com/bg.jpg"))
        assert "background-image: url('https://example.com/bg.jpg');" in css

    def test_background_image_cannot_close_style(self) -> None:
        css = generate_css(Profile(background_image="https://example.com/</style><script>"))
        assert "</style>" not in css

    def test_blur_clamped(self) -> None:
        assert "--bg-blur: 50px;" in generate_css(Profile(background_blur=500))
        assert "--bg-blur: 0px;" in generate_css(Profile(background_blur=-3))

    def test_dark_theme(self) -> None:
        assert "--text-main: #f9fafb;" in generate_css(Profile(theme="dark"))

    def test_grid_columns(self) -> None:
        css = generate_css(Profile(), columns=4)
        assert "grid-template-columns: repeat(4, 1fr);" in css
        assert ".col-span-4 { grid-column: span 4; }" in css
        assert ".col-span-5" not in css

    def test_text_scale_for_every_tier(self) -> None:
        css = generate_css(Profile())
        for tier in ("xs", "sm", "md", "lg"):
            assert f".bento-item.size-{tier} .block-title" in css
        assert "@media (min-width: 640px)" in css
        assert "@media (min-width: 1024px)" in css


class TestResolveAnalytics:
    def test_requires_enabled_and_site_id(self) -> None:
        enabled = Profile(analytics=AnalyticsSettings(enabled=True, endpoint="https://a.example"))
        disabled = Profile(analytics=AnalyticsSettings(enabled=False, endpoint="https://a.example"))
        assert resolve_analytics(enabled, "") is None
        assert resolve_analytics(disabled, "site") is None
        assert resolve_analytics(Profile(), "site") is None

    def test_endpoint_normalized(self) -> None:
        profile = Profile(analytics=AnalyticsSettings(
            enabled=True, endpoint="https://a.example///", anon_key=" key ",
        ))
        options = resolve_analytics(profile, " site-1 ")
        assert options == AnalyticsOptions(
            endpoint="https://a.example" + ANALYTICS_TABLE_PATH, site_id="site-1", anon_key="key",
        )

    @pytest.mark.parametrize("endpoint", ["http://a.example", "javascript:alert(1)", ""])
    def test_https_required(self, endpoint: str) -> None:
        profile = Profile(analytics=AnalyticsSettings(enabled=True, endpoint=endpoint))
        assert resolve_analytics(profile, "site") is None


class TestFeedOptions:
    def test_from_config(self) -> None:
        options = feed_options(BentoConfig(feed_timeout=2.5, max_videos=3))
        assert options is not None
        assert options.timeout_ms == 2500
        assert options.max_videos == 3
        assert options.proxy == BentoConfig().cors_proxy

    def test_disabled(self) -> None:
        assert feed_options(BentoConfig(live_feed_refresh=False)) is None


class TestGenerateRuntimeScript:
    def test_tilt_only(self) -> None:
        script = generate_runtime_script()
        assert "// Tilt" in script
        assert "// Video feeds" not in script
        assert "// Analytics" not in script
        assert "fetch(" not in script

    def test_feed_section(self) -> None:
        script = generate_runtime_script(feed=FeedOptions(proxy="https://proxy.example/?u="))
        assert "// Video feeds" in script
        assert '"proxy": "https://proxy.example/?u="' in script
        assert '"timeoutMs": 8000' in script
        assert "AbortController" in script
        assert "__FEED_OPTIONS__" not in script

    def test_analytics_section(self) -> None:
        options = AnalyticsOptions(endpoint="https://a.example/rest", site_id="s1", anon_key="")
        script = generate_runtime_script(analytics=options)
        assert "// Analytics" in script
        assert "'page_view'" in script
        assert "'session_end'" in script
        assert "__ANALYTICS_OPTIONS__" not in script
        literal = re.search(r"var analytics = (\{.*?\});", script)
        assert literal is not None
        assert json.loads(literal.group(1)) == {
            "anonKey": "", "endpoint": "https://a.example/rest", "siteId": "s1",
        }

    def test_embedded_values_cannot_close_script(self) -> None:
        options = AnalyticsOptions(endpoint="https://a.example/", site_id="</script><script>x")
        script = generate_runtime_script(analytics=options)
        assert "</script>" not in script
        assert "\\u003c/script\\u003e" in script

    def test_deterministic(self) -> None:
        feed = FeedOptions(proxy="https://p.example/?u=")
        analytics = AnalyticsOptions(endpoint="https://a.example/", site_id="s")
        assert generate_runtime_script(analytics=analytics, feed=feed) == generate_runtime_script(
            analytics=analytics, feed=feed,
        )

    def test_sections_guarded(self) -> None:
        feed = FeedOptions(proxy="https://p.example/?u=")
        analytics = AnalyticsOptions(endpoint="https://a.example/", site_id="s")
        script = generate_runtime_script(analytics=analytics, feed=feed)
        assert script.count("} catch (err) {}") >= 3
