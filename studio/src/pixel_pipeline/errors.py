from __future__ import annotations


class PixelPipelineError(RuntimeError):
    pass


class ImageLoadError(PixelPipelineError):
    """Image bytes could not be fetched or decoded."""


class ExtractionError(PixelPipelineError):
    """Dominant-color extraction failed because its image could not be loaded."""


class ExportError(PixelPipelineError):
    """A raster artifact could not be encoded."""
