"""bentopress configuration.

BentoConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

from bentopress._errors import ConfigError
from bentopress._types import DEPLOYMENT_TARGETS, DeploymentTarget


@dataclass(frozen=True, slots=True)
class BentoConfig:
    """Configuration for rendering and exporting a bento site.

    Attributes:
        root: Project directory (holds the site document and config file).
              Always resolved to an absolute path on construction.
        source: Site document (``SiteData`` JSON), relative to root.
        output: Output directory for exports.
        deployment_target: Hosting platform whose scaffold ships in the bundle.
        site_id: Analytics site identifier.  Analytics code is only emitted
            when this is set and the profile carries an endpoint.
        grid_columns: Column count of the desktop grid.  Block column spans
            are clamped to it.
        cors_proxy: Prefix prepended to the URL-encoded feed URL when the
            runtime script or the pre-fetch collaborator requests a feed.
        feed_timeout: Seconds before a feed request counts as failed.
        max_videos: Upper bound on video summaries cached or hydrated per block.
        live_feed_refresh: Emit runtime feed hydration into ``app.js``.  When
            False, exported pages only show the videos baked in at export time.
        archive: Write a ``.zip`` archive (True) or a plain directory (False).

    """

    root: Path = field(default_factory=Path.cwd)
    source: str = "site.json"
    output: Path = field(default_factory=lambda: Path("dist"))
    deployment_target: DeploymentTarget = "vercel"
    site_id: str = ""
    grid_columns: int = 9
    cors_proxy: str = "https://api.allorigins.win/raw?url="
    feed_timeout: float = 8.0
    max_videos: int = 4
    live_feed_refresh: bool = True
    archive: bool = True

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if self.deployment_target not in DEPLOYMENT_TARGETS:
            msg = (
                f"Unknown deployment target {self.deployment_target!r}; "
                f"expected one of {', '.join(DEPLOYMENT_TARGETS)}"
            )
            raise ConfigError(msg)
        if self.grid_columns < 1:
            msg = f"grid_columns must be at least 1, got {self.grid_columns}"
            raise ConfigError(msg)
        if self.max_videos < 1:
            msg = f"max_videos must be at least 1, got {self.max_videos}"
            raise ConfigError(msg)

    @property
    def source_path(self) -> Path:
        """Absolute path to the site document."""
        return self.root / self.source

    @property
    def output_path(self) -> Path:
        """Absolute path to the output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output
