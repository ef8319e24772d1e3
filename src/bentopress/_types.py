"""Shared type definitions for bentopress."""

from typing import Literal

# Hosting platform a bundle is scaffolded for
type DeploymentTarget = Literal[
    "vercel", "netlify", "github-pages", "docker", "vps", "heroku",
]

DEPLOYMENT_TARGETS: tuple[DeploymentTarget, ...] = (
    "vercel", "netlify", "github-pages", "docker", "vps", "heroku",
)

# Coarse size bucket derived from a block's spans
type SizeTier = Literal["xs", "sm", "md", "lg"]

# Display mode of a channel feed block
type YoutubeMode = Literal["single", "grid", "list"]
