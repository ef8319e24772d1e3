"""bentopress error hierarchy.

All bentopress-specific errors inherit from BentoError for easy catching.
Unsafe field values never raise; they degrade to empty output instead.
"""


class BentoError(Exception):
    """Base error for all bentopress operations."""


class ConfigError(BentoError):
    """Invalid or missing configuration."""


class ModelError(BentoError):
    """A site document violates a structural invariant."""


class FeedError(BentoError):
    """Fetching or parsing a channel video feed failed."""


class ExportError(BentoError):
    """Error while assembling or writing an export bundle."""
