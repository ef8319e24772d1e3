"""Export layer — deployable bundle generation.

Turns a site snapshot into a static bundle (HTML, CSS, JS, decoded image
assets, a data snapshot and per-target deployment files), written as a
``.zip`` archive or a directory.
"""

from bentopress.exporter.bundle import (
    BundleEntry,
    BundleExporter,
    ExportedFile,
    ExportResult,
    archive_name,
)

__all__ = ["BundleEntry", "BundleExporter", "ExportResult", "ExportedFile", "archive_name"]
