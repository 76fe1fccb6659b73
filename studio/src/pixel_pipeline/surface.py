from __future__ import annotations

import io

import numpy as np
from PIL import Image
from skimage.draw import disk

from .errors import ExportError

RGBA = tuple[int, int, int, float]


class RasterSurface:
    """Mutable RGBA raster with source-over compositing.

    Pixels live in an ``(H, W, 4)`` ``uint8`` array. Colors passed to the
    drawing methods are ``(r, g, b, alpha)`` with alpha in ``[0, 1]``.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray | None = None):
        if width <= 0 or height <= 0:
            raise ValueError("surface dimensions must be positive")
        if pixels is None:
            pixels = np.zeros((height, width, 4), dtype=np.uint8)
        elif pixels.shape != (height, width, 4):
            raise ValueError("pixel array must have shape (height, width, 4)")
        self.width = int(width)
        self.height = int(height)
        self.pixels = pixels

    @classmethod
    def from_image(cls, image: Image.Image) -> RasterSurface:
        rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
        return cls(image.width, image.height, pixels=rgba)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    def clear(self) -> None:
        self.pixels[:] = 0

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def fill(self, color: RGBA) -> None:
        self.pixels[:] = _rgba_array(color)

    def fill_circle(self, cx: float, cy: float, radius: float, color: RGBA) -> None:
        # Canvas coordinates address pixel edges; skimage addresses pixel centers.
        rows, cols = disk(
            (cy - 0.5, cx - 0.5), radius, shape=(self.height, self.width)
        )
        if rows.size == 0:
            return
        self._composite(rows, cols, color)

    def fill_rect(self, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
        """Composite ``color`` over the half-open rectangle ``[x0, x1) x [y0, y1)``."""
        x0, x1 = max(0, x0), min(self.width, x1)
        y0, y1 = max(0, y0), min(self.height, y1)
        if x0 >= x1 or y0 >= y1:
            return
        rows, cols = np.mgrid[y0:y1, x0:x1]
        self._composite(rows.ravel(), cols.ravel(), color)

    def stroke_rect(self, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
        """Draw a one-pixel outline just inside ``[x0, x1) x [y0, y1)``."""
        if x1 - x0 <= 0 or y1 - y0 <= 0:
            return
        self.fill_rect(x0, y0, x1, y0 + 1, color)
        if y1 - 1 > y0:
            self.fill_rect(x0, y1 - 1, x1, y1, color)
        self.fill_rect(x0, y0 + 1, x0 + 1, y1 - 1, color)
        if x1 - 1 > x0:
            self.fill_rect(x1 - 1, y0 + 1, x1, y1 - 1, color)

    def _composite(self, rows: np.ndarray, cols: np.ndarray, color: RGBA) -> None:
        r, g, b, alpha = color
        src_a = float(np.clip(alpha, 0.0, 1.0))
        if src_a == 0.0:
            return

        dst = self.pixels[rows, cols].astype(np.float64)
        dst_a = dst[:, 3] / 255.0
        out_a = src_a + dst_a * (1.0 - src_a)

        src_rgb = np.array([r, g, b], dtype=np.float64)
        weighted = src_rgb * src_a + dst[:, :3] * (dst_a * (1.0 - src_a))[:, None]
        out_rgb = weighted / out_a[:, None]

        out = np.empty_like(dst)
        out[:, :3] = out_rgb
        out[:, 3] = out_a * 255.0
        self.pixels[rows, cols] = np.clip(np.round(out), 0, 255).astype(np.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels.copy())

    def to_bytes(self) -> bytes:
        return encode_image(self.to_image())


def encode_image(image: Image.Image, format: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=format)
    except (OSError, ValueError, MemoryError) as exc:
        raise ExportError(f"failed to encode {format} image: {exc}") from exc
    return buffer.getvalue()


def _rgba_array(color: RGBA) -> np.ndarray:
    r, g, b, alpha = color
    return np.array(
        [r, g, b, int(round(float(np.clip(alpha, 0.0, 1.0)) * 255))], dtype=np.uint8
    )
