"""bentopress — render bento link-in-bio grids to static sites.

Turns a site document (a profile plus a grid of typed blocks) into a
self-contained preview or a deployable bundle for one hosting target.

Quick start::

    import bentopress

    bentopress.preview("my-bento/")             # preview.html with inline CSS/JS
    bentopress.export("my-bento/", deployment_target="netlify")
    bentopress.refresh_videos("my-bento/")      # bake the latest feed videos

Lower-level pieces::

    from bentopress import SiteData, BentoConfig
    from bentopress.render import render_document, RenderContext
    from bentopress.exporter import BundleExporter

"""

__version__ = "0.1.0-dev"
__all__ = [
    "BentoConfig",
    "SiteData",
    "__version__",
    "export",
    "load_site",
    "preview",
    "refresh_videos",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import bentopress`` fast while providing a clean top-level API.
    """
    if name == "BentoConfig":
        from bentopress.config import BentoConfig

        return BentoConfig

    if name in ("SiteData", "load_site"):
        from bentopress import model

        return getattr(model, name)

    if name in ("preview", "export", "refresh_videos"):
        from bentopress import app

        return getattr(app, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
