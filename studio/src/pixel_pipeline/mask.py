"""Brush-painted inpainting masks.

Strokes are painted onto a :class:`RasterSurface` sized like the on-screen
image. Export turns that surface into a strict black/white mask at the source
image's native resolution: white marks the region to modify.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image

from .models import EditMode, ScaleFactor
from .surface import RGBA, RasterSurface, encode_image

logger = logging.getLogger(__name__)

MASK_COLOR: RGBA = (0, 235, 2, 0.35)
DEFAULT_BRUSH_SIZE = 30
MIN_BRUSH_SIZE = 5
MAX_BRUSH_SIZE = 100
STEP_RATIO = 0.3
PAINTED_ALPHA = 10
MASK_THRESHOLD = 64
REMOVE_INSTRUCTION = (
    "Remove the selected object and fill the area naturally to match the surrounding background."
)


def clamp_brush_size(size: float) -> int:
    return int(max(MIN_BRUSH_SIZE, min(MAX_BRUSH_SIZE, round(size))))


def draw_brush_stroke(
    surface: RasterSurface,
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    radius: float,
    color: RGBA = MASK_COLOR,
    scale: ScaleFactor | None = None,
) -> int:
    """Stamp filled circles along the segment from ``(x0, y0)`` to ``(x1, y1)``.

    Coordinates and radius are in surface pixels unless ``scale`` is given, in
    which case they are display pixels mapped through it. Stamps are spaced at
    30% of the radius so fast pointer moves leave no gaps. Returns the number
    of stamps drawn.
    """
    if radius <= 0:
        raise ValueError("brush radius must be positive")
    if scale is not None:
        x0, y0 = scale.apply(x0, y0)
        x1, y1 = scale.apply(x1, y1)
        radius = scale.scale_length(radius)

    distance = math.hypot(x1 - x0, y1 - y0)
    steps = max(math.ceil(distance / (radius * STEP_RATIO)), 1)
    for i in range(steps + 1):
        t = i / steps
        surface.fill_circle(x0 + (x1 - x0) * t, y0 + (y1 - y0) * t, radius, color)
    return steps + 1


def export_mask(
    surface: RasterSurface, target_width: int, target_height: int
) -> Image.Image:
    if target_width <= 0 or target_height <= 0:
        raise ValueError("target dimensions must be positive")

    painted = surface.alpha > PAINTED_ALPHA
    binary = Image.fromarray(np.where(painted, 255, 0).astype(np.uint8))

    if binary.size != (target_width, target_height):
        logger.debug(
            "resampling mask %sx%s by %s",
            surface.width,
            surface.height,
            ScaleFactor.between(surface.size, (target_width, target_height)),
        )
        binary = binary.resize(
            (target_width, target_height), Image.Resampling.BILINEAR
        )

    gray = np.asarray(binary, dtype=np.uint8)
    mask = np.where(gray > MASK_THRESHOLD, 255, 0).astype(np.uint8)
    return Image.fromarray(np.repeat(mask[:, :, None], 3, axis=2))


def export_mask_png(
    surface: RasterSurface, target_width: int, target_height: int
) -> bytes:
    return encode_image(export_mask(surface, target_width, target_height), "PNG")


class MaskPainterSession:
    """Brush state for one mask-editing session.

    ``brush_size`` is stored as given; callers clamp it with
    :func:`clamp_brush_size`. ``has_mask`` turns on with the first stroke and
    only turns off through :meth:`clear_mask` or :meth:`reset`.
    """

    def __init__(self, surface: RasterSurface | None = None) -> None:
        self.brush_size: float = DEFAULT_BRUSH_SIZE
        self.has_mask = False
        self.edit_mode = EditMode.EDIT
        self.prompt = ""
        self.surface = surface
        self._last_point: tuple[float, float] | None = None

    def set_brush_size(self, size: float) -> None:
        self.brush_size = size

    def set_has_mask(self, has_mask: bool) -> None:
        self.has_mask = has_mask

    def set_edit_mode(self, mode: EditMode | str) -> None:
        self.edit_mode = EditMode(mode)

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def attach_surface(self, surface: RasterSurface | None) -> None:
        self.surface = surface
        self._last_point = None

    def effective_prompt(self) -> str:
        if self.edit_mode is EditMode.REMOVE:
            return REMOVE_INSTRUCTION
        return self.prompt.strip()

    def surface_radius(self, zoom: float = 1.0) -> float:
        if zoom <= 0:
            raise ValueError("zoom must be positive")
        return self.brush_size / zoom

    def begin_stroke(
        self, x: float, y: float, scale: ScaleFactor | None = None, zoom: float = 1.0
    ) -> None:
        surface = self._require_surface()
        point = scale.apply(x, y) if scale is not None else (x, y)
        surface.fill_circle(point[0], point[1], self.surface_radius(zoom), MASK_COLOR)
        self._last_point = point
        self.has_mask = True

    def continue_stroke(
        self, x: float, y: float, scale: ScaleFactor | None = None, zoom: float = 1.0
    ) -> None:
        if self._last_point is None:
            return
        surface = self._require_surface()
        point = scale.apply(x, y) if scale is not None else (x, y)
        draw_brush_stroke(
            surface,
            self._last_point[0],
            self._last_point[1],
            point[0],
            point[1],
            self.surface_radius(zoom),
        )
        self._last_point = point

    def end_stroke(self) -> None:
        self._last_point = None

    def clear_mask(self) -> None:
        if self.surface is not None:
            self.surface.clear()
        self._last_point = None
        self.has_mask = False

    def reset(self) -> None:
        self.brush_size = DEFAULT_BRUSH_SIZE
        self.has_mask = False
        self.edit_mode = EditMode.EDIT
        self.prompt = ""
        self.surface = None
        self._last_point = None

    def export(self, target_width: int, target_height: int) -> bytes:
        return export_mask_png(self._require_surface(), target_width, target_height)

    def _require_surface(self) -> RasterSurface:
        if self.surface is None:
            raise RuntimeError("no paint surface attached")
        return self.surface
