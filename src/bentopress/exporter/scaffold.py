"""Deployment scaffolds — the per-target files shipped next to the site.

Target selection is a plain table lookup.  Nothing here touches the HTML,
CSS or JS; a bundle differs between targets only in these files and in the
target named in ``DEPLOY.md``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bentopress._types import DeploymentTarget
    from bentopress.model import SiteData

type ScaffoldFile = tuple[str, str]

# ---------------------------------------------------------------------------
# File templates
# ---------------------------------------------------------------------------

VERCEL_JSON = """\
{
  "routes": [
    { "handle": "filesystem" },
    { "src": "/(.*)", "dest": "/index.html" }
  ]
}
"""

NETLIFY_TOML = """\
[build]
  publish = "."
  command = "echo 'no build step'"

[[redirects]]
  from = "/*"
  to = "/index.html"
  status = 200
"""

GITHUB_PAGES_WORKFLOW = """\
name: Deploy to GitHub Pages

on:
  push:
    branches: [main]
  workflow_dispatch:

permissions:
  contents: read
  pages: write
  id-token: write

concurrency:
  group: pages
  cancel-in-progress: true

jobs:
  deploy:
    runs-on: ubuntu-latest
    environment:
      name: github-pages
      url: ${{ steps.deployment.outputs.page_url }}
    steps:
      - uses: actions/checkout@v4
      - uses: actions/configure-pages@v5
      - uses: actions/upload-pages-artifact@v3
        with:
          path: .
      - id: deployment
        uses: actions/deploy-pages@v4
"""

NGINX_CONF = """\
server {{
  listen 80;
  server_name _;

  root {root};
  index index.html;

  location /assets/ {{
    expires 30d;
    add_header Cache-Control "public";
  }}

  location / {{
    try_files $uri $uri/ /index.html;
  }}
}}
"""

DOCKERFILE = """\
FROM nginx:alpine
COPY nginx.conf /etc/nginx/conf.d/default.conf
COPY . /usr/share/nginx/html
EXPOSE 80
"""

DOCKERIGNORE = """\
.git
Dockerfile
.dockerignore
DEPLOY.md
"""

PROCFILE = "web: npm start\n"

SERVER_JS = """\
import http from 'node:http';
import fs from 'node:fs/promises';
import path from 'node:path';
import { fileURLToPath } from 'node:url';

const root = path.dirname(fileURLToPath(import.meta.url));

const types = {
  '.html': 'text/html; charset=utf-8',
  '.css': 'text/css; charset=utf-8',
  '.js': 'application/javascript; charset=utf-8',
  '.json': 'application/json; charset=utf-8',
  '.png': 'image/png',
  '.jpg': 'image/jpeg',
  '.gif': 'image/gif',
  '.webp': 'image/webp',
  '.avif': 'image/avif',
  '.svg': 'image/svg+xml',
  '.ico': 'image/x-icon',
};

const resolve = (pathname) => {
  const target = path.normalize(path.join(root, pathname));
  return target === root || target.startsWith(root + path.sep) ? target : null;
};

const send = async (res, file) => {
  const body = await fs.readFile(file);
  res.writeHead(200, { 'Content-Type': types[path.extname(file)] || 'application/octet-stream' });
  res.end(body);
};

http.createServer(async (req, res) => {
  try {
    const { pathname } = new URL(req.url || '/', 'http://localhost');
    let file = resolve(decodeURIComponent(pathname === '/' ? '/index.html' : pathname));
    if (file) {
      const stat = await fs.stat(file).catch(() => null);
      if (stat && stat.isDirectory()) file = path.join(file, 'index.html');
      else if (!stat) file = null;
    }
    await send(res, file || path.join(root, 'index.html'));
  } catch {
    res.writeHead(500, { 'Content-Type': 'text/plain; charset=utf-8' });
    res.end('Server error');
  }
}).listen(process.env.PORT || 3000);
"""


def slugify(value: str, fallback: str = "my") -> str:
    """Lowercase, hyphen-separated ASCII slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or fallback


def package_json(name: str) -> str:
    manifest = {
        "name": f"{slugify(name)}-bento",
        "private": True,
        "version": "1.0.0",
        "type": "module",
        "engines": {"node": ">=20"},
        "scripts": {"start": "node server.js"},
    }
    return json.dumps(manifest, indent=2) + "\n"


# ---------------------------------------------------------------------------
# Target table
# ---------------------------------------------------------------------------


def _vercel(site: SiteData) -> tuple[ScaffoldFile, ...]:
    return (("vercel.json", VERCEL_JSON),)


def _netlify(site: SiteData) -> tuple[ScaffoldFile, ...]:
    return (("netlify.toml", NETLIFY_TOML),)


def _github_pages(site: SiteData) -> tuple[ScaffoldFile, ...]:
    return (
        (".github/workflows/deploy.yml", GITHUB_PAGES_WORKFLOW),
        (".nojekyll", ""),
    )


def _docker(site: SiteData) -> tuple[ScaffoldFile, ...]:
    return (
        ("Dockerfile", DOCKERFILE),
        ("nginx.conf", NGINX_CONF.format(root="/usr/share/nginx/html")),
        (".dockerignore", DOCKERIGNORE),
    )


def _vps(site: SiteData) -> tuple[ScaffoldFile, ...]:
    return (("nginx.conf", NGINX_CONF.format(root="/var/www/bento")),)


def _heroku(site: SiteData) -> tuple[ScaffoldFile, ...]:
    return (
        ("Procfile", PROCFILE),
        ("package.json", package_json(site.profile.name)),
        ("server.js", SERVER_JS),
    )


_SCAFFOLDS: MappingProxyType[str, Callable[[SiteData], tuple[ScaffoldFile, ...]]] = (
    MappingProxyType({
        "vercel": _vercel,
        "netlify": _netlify,
        "github-pages": _github_pages,
        "docker": _docker,
        "vps": _vps,
        "heroku": _heroku,
    })
)

_INSTRUCTIONS = MappingProxyType({
    "vercel": (
        "Import the unzipped folder as a Vercel project (framework: Other, no build "
        "command). `vercel.json` routes unknown paths to `index.html`."
    ),
    "netlify": (
        "Drag and drop the unzipped folder into Netlify's manual deploy, or connect "
        "a repository. `netlify.toml` publishes the folder as-is."
    ),
    "github-pages": (
        "Push the files to the `main` branch of a repository, then choose "
        "Settings -> Pages -> Source: GitHub Actions. "
        "`.github/workflows/deploy.yml` publishes every push."
    ),
    "docker": (
        "Build with `docker build -t my-bento .` and run with "
        "`docker run --rm -p 8080:80 my-bento`. The image serves the site "
        "with nginx using `nginx.conf`."
    ),
    "vps": (
        "Copy the files to your server (for example `/var/www/bento`) and use "
        "`nginx.conf` as the server block, adjusting `root` if needed."
    ),
    "heroku": (
        "Deploy as a Node app: `Procfile` runs `npm start`, which starts "
        "`server.js`, a dependency-free static file server."
    ),
})


def scaffold_files(target: DeploymentTarget, site: SiteData) -> tuple[ScaffoldFile, ...]:
    """``(path, text)`` pairs for exactly one deployment target.

    Raises:
        KeyError: If ``target`` is not a known deployment target.

    """
    return _SCAFFOLDS[target](site)


def deploy_docs(
    target: DeploymentTarget,
    site: SiteData,
    *,
    scaffold: tuple[ScaffoldFile, ...],
    analytics_endpoint: str = "",
    site_id: str = "",
    live_feed: bool = False,
) -> str:
    """Text of ``DEPLOY.md`` for a bundle."""
    lines = [
        f"# Deploy {site.profile.name or 'your bento page'}",
        "",
        "This bundle is a static website:",
        "",
        "- `index.html`",
        "- `styles.css`",
        "- `app.js`",
        "- `data.json` (site snapshot, re-importable)",
        "- `assets/` (decoded images, when any)",
        "",
        f"Deployment target: **{target}**",
        "",
        "## Deploy",
        "",
        _INSTRUCTIONS[target],
        "",
        "Files for this target:",
        "",
        *(f"- `{path}`" for path, _ in scaffold),
        "",
        "## Analytics",
        "",
        f"- Enabled: **{'yes' if analytics_endpoint else 'no'}**",
    ]
    if analytics_endpoint:
        lines += [f"- Site ID: `{site_id}`", f"- Endpoint: `{analytics_endpoint}`"]

    lines += ["", "## Third-party requests", ""]
    if live_feed:
        lines += [
            "Video feed tiles refresh in the visitor's browser through a public CORS",
            "proxy. If the proxy is unavailable the videos baked in at export time",
            "stay visible. Export with `--static-feed` to ship without this request.",
        ]
    else:
        lines.append("Video feed tiles show only the videos cached at export time.")
    lines += [
        "Fonts load from Google Fonts and brand icons from the simple-icons CDN.",
        "",
    ]
    return "\n".join(lines)
