from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from .colorspace import RGB
from .errors import ExportError, ImageLoadError
from .surface import encode_image

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10
REMOTE_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded RGBA copy of an image at its natural pixel size.

    The backing array is marked read-only, so a buffer handed to callers can
    never be observed half-written or mutated afterwards.
    """

    pixels: np.ndarray
    source: str | None = None

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError("pixels must have shape (H, W, 4)")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("pixel buffer must not be empty")
        pixels = np.array(self.pixels, dtype=np.uint8, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_image(cls, image: Image.Image, source: str | None = None) -> PixelBuffer:
        return cls(pixels=np.asarray(image.convert("RGBA"), dtype=np.uint8), source=source)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.array(self.pixels))


def fetch_image_bytes(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise ImageLoadError(f"failed to fetch image {url}: {exc}") from exc
    return response.content


def is_remote_url(value: str) -> bool:
    return value.startswith(REMOTE_SCHEMES)


def load_remote_pixel_buffer(
    url: str, timeout: float = DEFAULT_FETCH_TIMEOUT
) -> PixelBuffer:
    """Like :func:`load_pixel_buffer` but refuses anything except HTTP(S) URLs."""
    if not is_remote_url(url):
        raise ImageLoadError(f"only http(s) image URLs are accepted, got {url!r}")
    return load_pixel_buffer(url, timeout=timeout)


def load_pixel_buffer(
    image_path: str | Path, timeout: float = DEFAULT_FETCH_TIMEOUT
) -> PixelBuffer:
    path_str = str(image_path)
    if is_remote_url(path_str):
        data = io.BytesIO(fetch_image_bytes(path_str, timeout=timeout))
        buffer = _decode(data, path_str)
    else:
        path = Path(image_path)
        if not path.exists():
            raise ImageLoadError(f"image file does not exist: {path}")
        buffer = _decode(path, path_str)

    logger.debug(
        "loaded pixel buffer %sx%s from %s", buffer.width, buffer.height, path_str
    )
    return buffer


def _decode(source: io.BytesIO | Path, label: str) -> PixelBuffer:
    try:
        with Image.open(source) as image:
            image.load()
            return PixelBuffer.from_image(image, source=label)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise ImageLoadError(f"failed to decode image {label}: {exc}") from exc


def get_pixel_color(buffer: PixelBuffer, x: float, y: float) -> RGB:
    px = max(0, min(buffer.width - 1, int(np.floor(x))))
    py = max(0, min(buffer.height - 1, int(np.floor(y))))
    r, g, b = buffer.pixels[py, px, :3]
    return int(r), int(g), int(b)


def encode_png(image: Image.Image) -> bytes:
    return encode_image(image, format="PNG")


def write_png(image: Image.Image, output_path: str | Path) -> Path:
    payload = encode_png(image)
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_bytes(payload)
    except OSError as exc:
        raise ExportError(f"failed to write {path}: {exc}") from exc
    return path


def write_text_export(text: str, output_path: str | Path) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    return path
