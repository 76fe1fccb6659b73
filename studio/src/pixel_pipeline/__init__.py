from .errors import ExportError, ExtractionError, ImageLoadError, PixelPipelineError
from .io import PixelBuffer, get_pixel_color, load_pixel_buffer, load_remote_pixel_buffer
from .mask import MaskPainterSession, draw_brush_stroke, export_mask, export_mask_png
from .models import EditMode, EditResult, SampledColor, ScaleFactor
from .pipeline import InpaintingPipeline
from .sampling import ColorSamplingSession
from .surface import RasterSurface

__all__ = [
    "ColorSamplingSession",
    "EditMode",
    "EditResult",
    "ExportError",
    "ExtractionError",
    "ImageLoadError",
    "InpaintingPipeline",
    "MaskPainterSession",
    "PixelBuffer",
    "PixelPipelineError",
    "RasterSurface",
    "SampledColor",
    "ScaleFactor",
    "draw_brush_stroke",
    "export_mask",
    "export_mask_png",
    "get_pixel_color",
    "load_pixel_buffer",
    "load_remote_pixel_buffer",
]
