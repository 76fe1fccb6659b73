from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from PIL import Image

from .colorspace import relative_luminance
from .errors import ExtractionError, ImageLoadError
from .io import PixelBuffer, get_pixel_color, load_pixel_buffer
from .magnifier import draw_magnifier
from .models import SampledColor, ScaleFactor
from .quantize import quantize_colors
from .surface import RasterSurface

logger = logging.getLogger(__name__)

MAX_SAMPLE_SIDE = 150
MIN_ALPHA = 128
MIN_BRIGHTNESS = 7
MAX_BRIGHTNESS = 248
DEFAULT_EXTRACTION_COUNT = 8

BufferLoader = Callable[[str], PixelBuffer]


def sample_population(buffer: PixelBuffer, max_side: int = MAX_SAMPLE_SIDE) -> np.ndarray:
    """Down-sample ``buffer`` and return the RGB pixels worth quantizing.

    The longer edge is scaled to at most ``max_side`` with box (area) filtering.
    Near-transparent pixels and near-white/near-black background pixels are
    dropped. Returns an ``(N, 3)`` integer array, possibly empty.
    """
    scale = min(1.0, max_side / float(max(buffer.width, buffer.height)))
    sample_w = max(1, int(buffer.width * scale))
    sample_h = max(1, int(buffer.height * scale))

    if (sample_w, sample_h) == (buffer.width, buffer.height):
        rgba = np.asarray(buffer.pixels)
    else:
        resized = buffer.to_image().resize(
            (sample_w, sample_h), Image.Resampling.BOX
        )
        rgba = np.asarray(resized, dtype=np.uint8)

    flat = rgba.reshape(-1, 4).astype(np.int64)
    opaque = flat[:, 3] >= MIN_ALPHA
    brightness = flat[:, :3].sum(axis=1) / 3.0
    keep = opaque & (brightness <= MAX_BRIGHTNESS) & (brightness >= MIN_BRIGHTNESS)

    logger.debug(
        "sampled %sx%s, kept %s of %s pixels",
        sample_w,
        sample_h,
        int(keep.sum()),
        flat.shape[0],
    )
    return flat[keep, :3]


class ColorSamplingSession:
    """Eyedropper state for one editing session.

    Holds the user's palette, the active palette entry, the hover preview and
    the dominant colors of the current image. Callers serialize operations per
    session; nothing here guards against overlapping extractions.
    """

    def __init__(
        self,
        loader: BufferLoader | None = None,
        quantize_method: str = "median_cut",
    ) -> None:
        self.loader = loader or load_pixel_buffer
        self.quantize_method = quantize_method

        self.palette: list[SampledColor] = []
        self.active_index: int | None = None
        self.dominant_colors: list[SampledColor] = []
        self.is_extracting = False
        self.hover_color: SampledColor | None = None

        self.image_url: str | None = None
        self.buffer: PixelBuffer | None = None

    # Palette

    def add_color(self, color: SampledColor) -> None:
        self.palette.append(color)
        self.active_index = len(self.palette) - 1

    def remove_color(self, index: int) -> None:
        if not 0 <= index < len(self.palette):
            raise IndexError(f"palette index {index} out of range")

        del self.palette[index]
        if self.active_index == index:
            self.active_index = min(index, len(self.palette) - 1) if self.palette else None
        elif self.active_index is not None and self.active_index > index:
            self.active_index -= 1

    def set_active_index(self, index: int | None) -> None:
        self.active_index = index

    def set_hover_color(self, color: SampledColor | None) -> None:
        self.hover_color = color

    def set_dominant_colors(self, colors: list[SampledColor]) -> None:
        self.dominant_colors = list(colors)

    @property
    def active_color(self) -> SampledColor | None:
        if self.active_index is None or not 0 <= self.active_index < len(self.palette):
            return None
        return self.palette[self.active_index]

    @property
    def displayed_color(self) -> SampledColor | None:
        return self.hover_color or self.active_color

    def add_dominant_to_palette(self) -> None:
        existing = {color.hex for color in self.palette}
        new_colors = [c for c in self.dominant_colors if c.hex not in existing]
        if not new_colors:
            return
        self.palette.extend(new_colors)
        self.active_index = len(self.palette) - 1

    def clear_palette(self) -> None:
        self.palette = []
        self.active_index = None

    def clear_all(self) -> None:
        self.clear_palette()
        self.dominant_colors = []
        self.hover_color = None

    # Active image

    def load_image(self, image_url: str) -> PixelBuffer:
        """Make ``image_url`` the image under the eyedropper.

        The previous buffer is dropped first, so a failed load leaves the
        session with no buffer rather than a stale one.
        """
        self.buffer = None
        self.image_url = image_url
        self.dominant_colors = []
        self.hover_color = None
        self.buffer = self.loader(image_url)
        return self.buffer

    def sample_at(
        self, x: float, y: float, scale: ScaleFactor | None = None
    ) -> SampledColor:
        buffer = self._require_buffer()
        if scale is not None:
            x, y = scale.apply(x, y)
        r, g, b = get_pixel_color(buffer, x, y)
        position = (
            min(1.0, max(0.0, x / buffer.width)),
            min(1.0, max(0.0, y / buffer.height)),
        )
        return SampledColor.from_rgb(r, g, b, position=position)

    def preview_at(
        self, x: float, y: float, scale: ScaleFactor | None = None
    ) -> SampledColor:
        color = self.sample_at(x, y, scale)
        self.set_hover_color(color)
        return color

    def pick_at(
        self, x: float, y: float, scale: ScaleFactor | None = None
    ) -> SampledColor:
        color = self.sample_at(x, y, scale)
        self.add_color(color)
        return color

    def render_magnifier(
        self,
        target: RasterSurface,
        x: float,
        y: float,
        scale: ScaleFactor | None = None,
    ) -> None:
        buffer = self._require_buffer()
        if scale is not None:
            x, y = scale.apply(x, y)
        draw_magnifier(target, buffer, x, y)

    def _require_buffer(self) -> PixelBuffer:
        if self.buffer is None:
            raise RuntimeError("no image loaded; call load_image first")
        return self.buffer

    # Extraction

    def extract_dominant_colors(
        self,
        image_url: str,
        count: int = DEFAULT_EXTRACTION_COUNT,
    ) -> list[SampledColor]:
        self.is_extracting = True
        try:
            try:
                buffer = self.loader(image_url)
            except ImageLoadError as exc:
                raise ExtractionError(
                    f"could not extract colors from {image_url}: {exc}"
                ) from exc

            population = sample_population(buffer)
            if population.shape[0] == 0:
                logger.warning("no usable pixels in %s after filtering", image_url)
                colors: list[SampledColor] = []
            else:
                quantized = quantize_colors(population, count, method=self.quantize_method)
                quantized.sort(key=lambda rgb: relative_luminance(*rgb))
                colors = [SampledColor.from_rgb(*rgb) for rgb in quantized]

            self.dominant_colors = colors
            return colors
        finally:
            self.is_extracting = False
