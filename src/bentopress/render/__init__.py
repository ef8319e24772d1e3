"""Render layer — model to markup, stylesheet and runtime script.

Pure functions over a frozen :class:`bentopress.model.SiteData`.  The
preview and the export call the same block renderer and stylesheet
generator; they differ only in inlining and in runtime hydration.

Names are resolved lazily so leaf modules (``render.sanitize``,
``render.layout``) can be imported without loading the block renderer.
"""

_EXPORTS = {
    "RenderContext": "bentopress.render.blocks",
    "render_block": "bentopress.render.blocks",
    "render_document": "bentopress.render.document",
    "render_preview": "bentopress.render.document",
    "render_profile_header": "bentopress.render.document",
    "sort_blocks": "bentopress.render.document",
    "AnalyticsOptions": "bentopress.render.runtime",
    "FeedOptions": "bentopress.render.runtime",
    "generate_runtime_script": "bentopress.render.runtime",
    "resolve_analytics": "bentopress.render.runtime",
    "generate_css": "bentopress.render.styles",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> object:
    """Lazy imports for the render API."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
