"""Stylesheet generation shared by the preview and the exported bundle.

The stylesheet is a static base plus three generated sections: page
background (from the profile), grid columns, and the per-tier text scale
(from :data:`bentopress.render.layout.TEXT_SCALE`).  Nothing here reads the
blocks, so one stylesheet serves every block arrangement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bentopress.render.layout import BREAKPOINTS, ROLE_SELECTORS, SIZE_TIERS, TEXT_SCALE
from bentopress.render.sanitize import css_url, safe_css_value

if TYPE_CHECKING:
    from bentopress.model import Profile

DEFAULT_PAGE_BACKGROUND = "#f8fafc"
DEFAULT_ACCENT = "#8b5cf6"
MAX_BLUR_PX = 50

# ---------------------------------------------------------------------------
# Static base
# ---------------------------------------------------------------------------

_BASE_CSS = """\
* { box-sizing: border-box; margin: 0; padding: 0; }

body {
  font-family: var(--font-family);
  color: var(--text-main);
  min-height: 100vh;
  position: relative;
  opacity: 0;
  animation: page-in 0.8s ease-out forwards;
}

@keyframes page-in { from { opacity: 0; } to { opacity: 1; } }

.bg-blur-overlay {
  position: fixed;
  inset: 0;
  z-index: 0;
  pointer-events: none;
  backdrop-filter: blur(var(--bg-blur));
  -webkit-backdrop-filter: blur(var(--bg-blur));
}

.container {
  max-width: 1600px;
  margin: 0 auto;
  display: flex;
  flex-direction: column;
  position: relative;
  z-index: 1;
}

.profile-section {
  padding: 2rem 1rem;
  display: flex;
  flex-direction: column;
  align-items: center;
  text-align: center;
  position: relative;
  z-index: 20;
}

.avatar {
  width: 6rem;
  height: 6rem;
  overflow: hidden;
  margin-bottom: 1rem;
  background: #f3f4f6;
  transition: transform 0.4s cubic-bezier(0.25, 1, 0.5, 1);
}

.avatar:hover { transform: scale(1.05) rotate(2deg); }
.avatar img { width: 100%; height: 100%; object-fit: cover; display: block; }

.profile-name {
  font-size: 1.5rem;
  font-weight: 800;
  letter-spacing: -0.04em;
  line-height: 1;
  margin-bottom: 0.5rem;
}

.profile-bio {
  font-size: 0.85rem;
  color: var(--text-muted);
  white-space: pre-wrap;
  max-width: 20rem;
  line-height: 1.5;
  font-weight: 500;
}

.profile-socials {
  display: flex;
  flex-wrap: wrap;
  gap: 0.75rem;
  margin-top: 1.5rem;
  justify-content: center;
}

.profile-social {
  display: inline-flex;
  align-items: center;
  gap: 0.5rem;
  padding: 0.5rem 0.75rem;
  border-radius: 999px;
  background: #ffffff;
  color: #111827;
  text-decoration: none;
  font-weight: 600;
  box-shadow: 0 6px 14px rgba(0, 0, 0, 0.08);
  transition: transform 0.2s ease, box-shadow 0.2s ease;
}

.profile-social.icon-only { width: 2.5rem; height: 2.5rem; padding: 0; justify-content: center; }
.profile-social:hover { transform: translateY(-2px); box-shadow: 0 10px 18px rgba(0, 0, 0, 0.12); }
.profile-social .social-icon { width: 1.25rem; height: 1.25rem; position: relative; display: flex; align-items: center; justify-content: center; }
.profile-social .social-icon img { position: absolute; inset: 0; width: 100%; height: 100%; }
.profile-social .social-fallback { font-size: 0.7rem; font-weight: 700; }
.profile-social .social-count { font-size: 0.85rem; }

.grid-section { padding: 1rem; flex: 1; }

.bento-grid {
  display: grid;
  grid-template-columns: 1fr;
  grid-auto-rows: 64px;
  grid-auto-flow: dense;
  gap: var(--gap);
  padding-bottom: 2rem;
}

.bento-item {
  position: relative;
  display: block;
  overflow: hidden;
  text-decoration: none;
  color: inherit;
  box-shadow: 0 4px 6px -1px rgba(0, 0, 0, 0.04), 0 0 0 1px rgba(0, 0, 0, 0.03);
  transform-style: preserve-3d;
  will-change: transform;
  transition: transform 0.4s cubic-bezier(0.25, 1, 0.5, 1), box-shadow 0.4s ease;
  opacity: 0;
  animation: tile-in 0.6s cubic-bezier(0.2, 0.8, 0.2, 1) forwards;
}

@keyframes tile-in {
  from { opacity: 0; transform: translateY(20px); }
  to { opacity: 1; transform: translateY(0); }
}

.bento-item::before {
  content: '';
  position: absolute;
  inset: 0;
  border-radius: inherit;
  background: radial-gradient(circle at var(--glare-x, 50%) var(--glare-y, 50%), rgba(255, 255, 255, 0.25) 0%, transparent 60%);
  opacity: 0;
  transition: opacity 0.3s ease;
  pointer-events: none;
  z-index: 20;
}

.bento-item:hover::before { opacity: 1; }
.bento-item.no-hover::before { display: none; }
.bento-item.no-hover:hover { transform: none; cursor: default; }

.content-wrapper {
  position: relative;
  z-index: 10;
  height: 100%;
  padding: 0.75rem;
  display: flex;
  flex-direction: column;
  justify-content: space-between;
}

.content-wrapper.link-only { justify-content: flex-end; }
.type-text { justify-content: center; }
.type-text .block-title { margin-bottom: 0.35rem; letter-spacing: -0.03em; }
.type-text .block-body { opacity: 0.8; line-height: 1.5; white-space: pre-wrap; }

.block-title { font-weight: 800; line-height: 1.1; letter-spacing: -0.02em; }
.block-sub { opacity: 0.8; margin-top: 0.25rem; font-weight: 500; }

.icon-box {
  width: 2rem;
  height: 2rem;
  border-radius: 0.5rem;
  position: relative;
  background: rgba(255, 255, 255, 0.9);
  display: flex;
  align-items: center;
  justify-content: center;
  box-shadow: 0 4px 6px rgba(0, 0, 0, 0.05);
}

.icon-box img { position: absolute; width: 1rem; height: 1rem; }
.icon-box .icon-fallback { font-size: 0.65rem; font-weight: 700; }

.social-icon-block { display: flex; align-items: center; justify-content: center; }
.social-icon-block .social-icon { width: 28px; height: 28px; position: relative; display: flex; align-items: center; justify-content: center; }
.social-icon-block .social-icon img { position: absolute; inset: 0; width: 100%; height: 100%; }
.social-icon-block .social-fallback { font-size: 0.9rem; font-weight: 700; }

.full-img {
  position: absolute;
  inset: 0;
  width: 100%;
  height: 100%;
  object-fit: cover;
  display: block;
  transition: transform 0.6s cubic-bezier(0.25, 0.8, 0.25, 1);
}

.link-bg { background-size: cover; }
.bento-item:hover .full-img { transform: scale(1.05); }
.media-empty { position: absolute; inset: 0; background: #f3f4f6; }

.media-overlay {
  position: absolute;
  left: 0;
  right: 0;
  bottom: 0;
  padding: 1rem;
  color: #ffffff;
  background: linear-gradient(to top, rgba(0, 0, 0, 0.65), rgba(0, 0, 0, 0));
}

.media-title { font-weight: 600; line-height: 1.3; }
.media-subtext { opacity: 0.8; margin-top: 0.25rem; font-weight: 500; }

.map-frame {
  position: absolute;
  inset: 0;
  border: 0;
  pointer-events: none;
  filter: grayscale(0.5) contrast(1.1);
}

.map-invalid {
  position: absolute;
  inset: 0;
  display: flex;
  align-items: center;
  justify-content: center;
  color: #9ca3af;
}

.yt-container { background: #ffffff; height: 100%; display: flex; flex-direction: column; padding: 1rem; }
.yt-container.size-large { padding: 1.25rem; }
.yt-container.size-small { padding: 0.75rem; }

.yt-header {
  display: flex;
  align-items: center;
  gap: 0.5rem;
  padding-bottom: 0.75rem;
  margin-bottom: 0.75rem;
  border-bottom: 1px solid #f3f4f6;
}

.yt-icon {
  width: 2rem;
  height: 2rem;
  flex-shrink: 0;
  border-radius: 0.5rem;
  background: #dc2626;
  color: #ffffff;
  display: flex;
  align-items: center;
  justify-content: center;
}

.yt-header-text { min-width: 0; }
.yt-header-text h3 { font-size: 0.875rem; font-weight: 700; color: #111827; line-height: 1.2; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
.yt-header-text span { display: block; font-size: 0.65rem; font-weight: 500; color: #9ca3af; }
.size-small .yt-header-text h3 { font-size: 0.75rem; }
.size-small .yt-header-text span { display: none; }

.yt-videos { flex: 1; overflow: hidden; display: grid; gap: 0.5rem; }
.yt-grid { grid-template-columns: 1fr 1fr; }
.yt-list { grid-template-columns: 1fr; align-content: start; }

.yt-video {
  position: relative;
  display: block;
  overflow: hidden;
  border-radius: 0.5rem;
  background: #f3f4f6;
  text-decoration: none;
  aspect-ratio: 16 / 9;
  transition: transform 0.2s ease;
}

.yt-video:hover { transform: scale(1.02); }
.yt-video img { width: 100%; height: 100%; object-fit: cover; display: block; }

.yt-video-title {
  position: absolute;
  left: 0;
  right: 0;
  bottom: 0;
  padding: 0.375rem;
  color: #ffffff;
  font-size: 0.6rem;
  font-weight: 600;
  line-height: 1.2;
  background: linear-gradient(to top, rgba(0, 0, 0, 0.7), rgba(0, 0, 0, 0));
  white-space: nowrap;
  overflow: hidden;
  text-overflow: ellipsis;
}

.yt-list .yt-video { aspect-ratio: auto; display: flex; gap: 0.5rem; min-height: 3rem; background: transparent; }
.yt-list .yt-video img { width: 5rem; height: auto; flex-shrink: 0; border-radius: 0.375rem; }
.yt-list .yt-video-title { position: static; background: none; color: #374151; font-size: 0.7rem; white-space: normal; display: flex; align-items: center; }
.size-small .yt-video-title { display: none; }

.yt-placeholder { grid-column: 1 / -1; padding: 1rem; text-align: center; font-size: 0.75rem; color: #9ca3af; }

.yt-single { position: relative; height: 100%; }
.yt-single-bg { position: absolute; inset: 0; background-color: #111827; background-size: cover; background-position: center; transition: transform 0.5s ease; }
.bento-item:hover .yt-single-bg { transform: scale(1.05); }
.yt-single-overlay { position: absolute; inset: 0; background: rgba(0, 0, 0, 0.55); }

.yt-single-content {
  position: relative;
  z-index: 10;
  height: 100%;
  padding: 1.5rem;
  color: #ffffff;
  display: flex;
  flex-direction: column;
  justify-content: space-between;
}

.yt-single-icon {
  width: 3rem;
  height: 3rem;
  border-radius: 1rem;
  background: rgba(255, 255, 255, 0.2);
  display: flex;
  align-items: center;
  justify-content: center;
}

.yt-single-play {
  position: absolute;
  top: 50%;
  left: 50%;
  width: 4rem;
  height: 4rem;
  transform: translate(-50%, -50%);
  border-radius: 50%;
  background: #ef4444;
  display: flex;
  align-items: center;
  justify-content: center;
  transition: transform 0.3s ease;
  z-index: 15;
}

.bento-item:hover .yt-single-play { transform: translate(-50%, -50%) scale(1.1); }
.yt-single-info { margin: auto -1.5rem -1.5rem; padding: 1.25rem; background: rgba(0, 0, 0, 0.4); }
.yt-single-info h3 { font-size: 1.125rem; font-weight: 700; line-height: 1.3; }
.yt-single-info p { font-size: 0.875rem; opacity: 0.7; margin-top: 0.25rem; font-weight: 500; }
.placeholder { opacity: 0.4; font-style: italic; }
.avatar-fallback { width: 100%; height: 100%; display: flex; align-items: center; justify-content: center; font-size: 2.5rem; font-weight: 800; color: #9ca3af; }

footer {
  width: 100%;
  padding: 3rem 0 2rem;
  text-align: center;
  font-size: 0.875rem;
  font-weight: 500;
  color: var(--text-muted);
}

footer a { color: var(--text-muted); font-weight: 600; text-decoration: none; transition: color 0.2s ease; }
footer a:hover { color: var(--accent); }
footer .heart { color: #f87171; display: inline-block; animation: heartbeat 1.5s ease-in-out infinite; }

@keyframes heartbeat { 0%, 100% { transform: scale(1); } 50% { transform: scale(1.15); } }

@media (max-width: 639px) {
  .bento-item { grid-column: auto !important; grid-row: auto !important; }
}

@media (min-width: 640px) {
  .profile-section { padding: 3rem 1.5rem; }
  .avatar { width: 7rem; height: 7rem; margin-bottom: 1.25rem; }
  .profile-name { font-size: 2rem; margin-bottom: 0.6rem; }
  .profile-bio { font-size: 0.9rem; line-height: 1.6; }
  .content-wrapper { padding: 1rem; }
  .icon-box { width: 2.5rem; height: 2.5rem; border-radius: 0.75rem; }
  .icon-box img { width: 1.2rem; height: 1.2rem; }
}

@media (min-width: 1024px) {
  .container { flex-direction: row; }
  .profile-section {
    width: 450px;
    height: 100vh;
    position: sticky;
    top: 0;
    align-items: flex-start;
    text-align: left;
    padding: 6rem 4rem;
  }
  .grid-section { padding: 6rem 4rem 4rem; }
  .avatar { width: 12rem; height: 12rem; }
  .profile-name { font-size: 3rem; }
  .profile-bio { font-size: 1rem; line-height: 1.7; }
  .profile-socials { justify-content: flex-start; }
  .content-wrapper { padding: 1.75rem; }
  .icon-box { width: 3rem; height: 3rem; border-radius: 1rem; }
  .icon-box img { width: 1.4rem; height: 1.4rem; }
}
"""


# ---------------------------------------------------------------------------
# Generated sections
# ---------------------------------------------------------------------------


def _root_section(profile: Profile) -> str:
    dark = profile.theme == "dark"
    page_bg = safe_css_value(profile.background_color) or DEFAULT_PAGE_BACKGROUND
    accent = safe_css_value(profile.primary_color) or DEFAULT_ACCENT
    blur = max(0.0, min(float(profile.background_blur or 0), MAX_BLUR_PX))
    return (
        ":root {\n"
        "  --font-family: 'Inter', system-ui, -apple-system, sans-serif;\n"
        f"  --bg-color: {page_bg};\n"
        f"  --text-main: {'#f9fafb' if dark else '#111827'};\n"
        f"  --text-muted: {'#9ca3af' if dark else '#6b7280'};\n"
        f"  --accent: {accent};\n"
        f"  --bg-blur: {blur:g}px;\n"
        "  --gap: 1.25rem;\n"
        "}\n"
    )


def _background_section(profile: Profile) -> str:
    image = css_url(profile.background_image)
    if image:
        declarations = (
            f"  background-image: {image};\n"
            "  background-size: cover;\n"
            "  background-position: center;\n"
            "  background-attachment: fixed;\n"
        )
    else:
        declarations = "  background: var(--bg-color);\n"
    return "body {\n" + declarations + "}\n"


def _grid_section(columns: int) -> str:
    spans = "\n".join(
        f"  .col-span-{n} {{ grid-column: span {n}; }}" for n in range(1, columns + 1)
    )
    return (
        f"@media (min-width: {BREAKPOINTS[0]}px) {{\n"
        f"  .bento-grid {{ grid-template-columns: repeat({columns}, 1fr); }}\n"
        f"{spans}\n"
        "}\n"
    )


def _text_scale_rules(index: int, indent: str) -> list[str]:
    rules = []
    for tier in SIZE_TIERS:
        for role, selector in ROLE_SELECTORS.items():
            size = TEXT_SCALE[role][tier][index]
            rules.append(f"{indent}.bento-item.size-{tier} {selector} {{ font-size: {size:g}rem; }}")
    return rules


def _text_scale_section() -> str:
    parts = ["\n".join(_text_scale_rules(0, ""))]
    for index, width in enumerate(BREAKPOINTS, start=1):
        body = "\n".join(_text_scale_rules(index, "  "))
        parts.append(f"@media (min-width: {width}px) {{\n{body}\n}}")
    return "\n\n".join(parts) + "\n"


def generate_css(profile: Profile, columns: int = 9) -> str:
    """Full stylesheet for a profile.

    Deterministic: the same profile and column count always produce the same
    text.
    """
    return "\n".join([
        _root_section(profile),
        _BASE_CSS,
        _background_section(profile),
        _grid_section(columns),
        _text_scale_section(),
    ])
