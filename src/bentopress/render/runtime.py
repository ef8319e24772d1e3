"""Runtime script generator — the vanilla ``app.js`` shipped with a page.

Three independent concerns, each emitted as its own guarded section:

1. Pointer tilt on interactive tiles (always present).
2. Video-feed hydration through a CORS proxy (only with :class:`FeedOptions`).
3. Analytics beacons (only with :class:`AnalyticsOptions`).

A concern without configuration is left out of the text entirely rather
than disabled at runtime.  Every section runs inside its own ``try`` and
swallows network failures, so one broken concern never stops the others.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from bentopress.render.sanitize import sanitize_url

if TYPE_CHECKING:
    from bentopress.config import BentoConfig
    from bentopress.model import Profile

ANALYTICS_TABLE_PATH = "/rest/v1/openbento_analytics_events"
FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id="


@dataclass(frozen=True, slots=True)
class AnalyticsOptions:
    """Resolved beacon target.  ``endpoint`` is the full table URL."""

    endpoint: str
    site_id: str
    anon_key: str = ""


@dataclass(frozen=True, slots=True)
class FeedOptions:
    proxy: str
    timeout_ms: int = 8000
    max_videos: int = 4


def resolve_analytics(profile: Profile, site_id: str) -> AnalyticsOptions | None:
    """Analytics options when the profile enables them and a site id is given.

    The endpoint must be an https URL; trailing slashes are dropped before
    the REST table path is appended.
    """
    settings = profile.analytics
    if settings is None or not settings.enabled or not site_id.strip():
        return None
    base = sanitize_url(settings.endpoint)
    if not base.startswith("https://"):
        return None
    return AnalyticsOptions(
        endpoint=base.rstrip("/") + ANALYTICS_TABLE_PATH,
        site_id=site_id.strip(),
        anon_key=settings.anon_key.strip(),
    )


def feed_options(config: BentoConfig) -> FeedOptions | None:
    """Feed hydration options, or ``None`` when live refresh is turned off."""
    if not config.live_feed_refresh:
        return None
    return FeedOptions(
        proxy=config.cors_proxy,
        timeout_ms=int(config.feed_timeout * 1000),
        max_videos=config.max_videos,
    )


def _js_literal(value: Any) -> str:
    """JSON literal safe to embed inside an inline ``<script>``."""
    return (
        json.dumps(value, sort_keys=True)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


# ---------------------------------------------------------------------------
# Script sections
# ---------------------------------------------------------------------------

_PRELUDE = """\
(function () {
  'use strict';
  var ready = function (fn) {
    if (document.readyState === 'loading') {
      document.addEventListener('DOMContentLoaded', fn);
    } else {
      fn();
    }
  };
  ready(function () {
"""

_EPILOGUE = """\
  });
})();
"""

_TILT = """\
    // Tilt
    try {
      var MAX_TILT = 10;
      var tiles = document.querySelectorAll('.bento-item:not(.no-hover)');
      Array.prototype.forEach.call(tiles, function (item) {
        item.addEventListener('mouseenter', function () {
          item.style.transition = 'transform 0.1s ease-out, box-shadow 0.1s ease-out';
        });
        item.addEventListener('mousemove', function (e) {
          var rect = item.getBoundingClientRect();
          if (!rect.width || !rect.height) return;
          var x = e.clientX - rect.left;
          var y = e.clientY - rect.top;
          var cx = rect.width / 2;
          var cy = rect.height / 2;
          var rotateX = Math.max(-MAX_TILT, Math.min(MAX_TILT, ((y - cy) / cy) * -MAX_TILT));
          var rotateY = Math.max(-MAX_TILT, Math.min(MAX_TILT, ((x - cx) / cx) * MAX_TILT));
          item.style.transform = 'perspective(800px) rotateX(' + rotateX + 'deg) rotateY(' + rotateY + 'deg) scale3d(1.02, 1.02, 1.02)';
          item.style.boxShadow = (rotateY * 1.5) + 'px ' + (rotateX * -1.5) + 'px 25px rgba(0,0,0,0.15), 0 8px 30px rgba(0,0,0,0.1)';
          item.style.setProperty('--glare-x', (x / rect.width) * 100 + '%');
          item.style.setProperty('--glare-y', (y / rect.height) * 100 + '%');
        });
        item.addEventListener('mouseleave', function () {
          item.style.transition = 'transform 0.5s ease-out, box-shadow 0.5s ease-out';
          item.style.transform = 'perspective(800px) rotateX(0deg) rotateY(0deg) scale3d(1, 1, 1)';
          item.style.boxShadow = '';
        });
      });
    } catch (err) {}
"""

_FEED = """\
    // Video feeds
    try {
      var feed = __FEED_OPTIONS__;
      var FEED_URL = __FEED_URL__;
      var WATCH_URL = 'https://www.youtube.com/watch?v=';
      var VIDEO_ID = /^[A-Za-z0-9_-]{11}$/;
      var thumb = function (id, quality) {
        return 'https://img.youtube.com/vi/' + id + '/' + quality + '.jpg';
      };
      var loadFeed = function (channelId) {
        var controller = typeof AbortController === 'function' ? new AbortController() : null;
        var timer = controller ? setTimeout(function () { controller.abort(); }, feed.timeoutMs) : null;
        var done = function () { if (timer) clearTimeout(timer); };
        return fetch(feed.proxy + encodeURIComponent(FEED_URL + channelId), controller ? { signal: controller.signal } : {})
          .then(function (res) {
            if (!res.ok) throw new Error('feed ' + res.status);
            return res.text();
          })
          .then(function (text) {
            done();
            var xml = new DOMParser().parseFromString(text, 'text/xml');
            var author = xml.querySelector('author > name');
            var entries = Array.prototype.slice.call(xml.getElementsByTagName('entry'));
            var videos = entries.map(function (entry) {
              var id = entry.getElementsByTagName('yt:videoId')[0];
              var title = entry.getElementsByTagName('title')[0];
              return { id: id ? id.textContent : '', title: title ? title.textContent : '' };
            }).filter(function (v) { return VIDEO_ID.test(v.id); });
            return { author: author ? author.textContent : '', videos: videos.slice(0, feed.maxVideos) };
          }, function (err) { done(); throw err; });
      };
      var videoItem = function (video) {
        var link = document.createElement('a');
        link.className = 'yt-video';
        link.href = WATCH_URL + video.id;
        link.target = '_blank';
        link.rel = 'noopener noreferrer';
        var img = document.createElement('img');
        img.src = thumb(video.id, 'mqdefault');
        img.alt = video.title;
        img.loading = 'lazy';
        var caption = document.createElement('span');
        caption.className = 'yt-video-title';
        caption.textContent = video.title;
        link.appendChild(img);
        link.appendChild(caption);
        return link;
      };
      var hydrate = function (el) {
        var channelId = el.getAttribute('data-channel-id');
        var mode = el.getAttribute('data-mode') || 'single';
        if (!channelId) return;
        loadFeed(channelId).then(function (data) {
          var heading = el.querySelector('[data-role="channel-title"]');
          if (heading && data.author) heading.textContent = data.author;
          if (!data.videos.length) return;
          if (mode === 'single') {
            var first = data.videos[0];
            var bg = el.querySelector('[data-role="bg-image"]');
            var title = el.querySelector('[data-role="video-title"]');
            var play = el.querySelector('[data-role="play-link"]');
            if (bg) bg.style.backgroundImage = "url('" + thumb(first.id, 'maxresdefault') + "')";
            if (title) title.textContent = first.title;
            if (play) {
              play.href = WATCH_URL + first.id;
              play.target = '_blank';
              play.rel = 'noopener noreferrer';
            }
            return;
          }
          var container = el.querySelector('[data-role="video-container"]');
          if (!container) return;
          var max = parseInt(container.getAttribute('data-max-videos'), 10) || feed.maxVideos;
          while (container.firstChild) container.removeChild(container.firstChild);
          data.videos.slice(0, max).forEach(function (video) {
            container.appendChild(videoItem(video));
          });
        }).catch(function () {});
      };
      Array.prototype.forEach.call(document.querySelectorAll('.youtube-fetcher'), hydrate);
    } catch (err) {}
"""

_ANALYTICS = """\
    // Analytics
    try {
      var analytics = __ANALYTICS_OPTIONS__;
      var sessionStart = Date.now();
      var maxScroll = 0;
      var visitorId = function () {
        try {
          var id = localStorage.getItem('_ob_vid');
          if (!id) {
            id = 'v_' + Math.random().toString(36).slice(2, 11) + Date.now().toString(36);
            localStorage.setItem('_ob_vid', id);
          }
          return id;
        } catch (err) {
          return null;
        }
      };
      window.addEventListener('scroll', function () {
        var top = window.scrollY || document.documentElement.scrollTop;
        var height = document.documentElement.scrollHeight - window.innerHeight;
        var percent = height > 0 ? Math.round((top / height) * 100) : 0;
        maxScroll = Math.max(maxScroll, Math.min(100, percent));
      }, { passive: true });
      var track = function (eventType, extra) {
        try {
          var params = new URLSearchParams(window.location.search);
          var payload = {
            site_id: analytics.siteId,
            event_type: eventType,
            visitor_id: visitorId(),
            session_id: sessionStart.toString(36),
            page_url: window.location.href,
            referrer: document.referrer || null,
            utm_source: params.get('utm_source'),
            utm_medium: params.get('utm_medium'),
            utm_campaign: params.get('utm_campaign'),
            utm_term: params.get('utm_term'),
            utm_content: params.get('utm_content'),
            user_agent: navigator.userAgent,
            language: navigator.language || null,
            screen_w: (window.screen && window.screen.width) || null,
            screen_h: (window.screen && window.screen.height) || null,
            viewport_w: window.innerWidth || null,
            viewport_h: window.innerHeight || null,
            timezone: Intl.DateTimeFormat().resolvedOptions().timeZone || null
          };
          Object.keys(extra || {}).forEach(function (key) { payload[key] = extra[key]; });
          var headers = { 'Content-Type': 'application/json', 'Prefer': 'return=minimal' };
          if (analytics.anonKey) {
            headers.apikey = analytics.anonKey;
            headers.Authorization = 'Bearer ' + analytics.anonKey;
          }
          fetch(analytics.endpoint, {
            method: 'POST',
            headers: headers,
            body: JSON.stringify(payload),
            keepalive: true
          }).catch(function () {});
        } catch (err) {}
      };
      track('page_view');
      document.addEventListener('click', function (ev) {
        var target = ev.target;
        if (!(target instanceof Element)) return;
        var link = target.closest('a.bento-item');
        if (!link) return;
        var title = link.querySelector('.block-title, .media-title');
        track('click', {
          block_id: link.getAttribute('data-block-id'),
          destination_url: link.getAttribute('href'),
          block_title: title ? title.textContent : null
        });
      }, { capture: true });
      var ended = false;
      var sessionEnd = function () {
        if (ended) return;
        ended = true;
        var duration = Math.round((Date.now() - sessionStart) / 1000);
        track('session_end', {
          duration_seconds: duration,
          scroll_depth: maxScroll,
          engaged: duration > 10 && maxScroll > 25
        });
      };
      document.addEventListener('visibilitychange', function () {
        if (document.visibilityState === 'hidden') sessionEnd();
      });
      window.addEventListener('pagehide', sessionEnd);
    } catch (err) {}
"""


def generate_runtime_script(
    *,
    analytics: AnalyticsOptions | None = None,
    feed: FeedOptions | None = None,
) -> str:
    """Assemble ``app.js``.  Deterministic for equal options."""
    sections = [_PRELUDE, _TILT]
    if feed is not None:
        sections.append(
            _FEED.replace(
                "__FEED_OPTIONS__",
                _js_literal({
                    "proxy": feed.proxy,
                    "timeoutMs": feed.timeout_ms,
                    "maxVideos": feed.max_videos,
                }),
            ).replace("__FEED_URL__", _js_literal(FEED_URL)),
        )
    if analytics is not None:
        sections.append(
            _ANALYTICS.replace(
                "__ANALYTICS_OPTIONS__",
                _js_literal({
                    "endpoint": analytics.endpoint,
                    "siteId": analytics.site_id,
                    "anonKey": analytics.anon_key,
                }),
            ),
        )
    sections.append(_EPILOGUE)
    return "".join(sections)
