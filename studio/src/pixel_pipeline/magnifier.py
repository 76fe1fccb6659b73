from __future__ import annotations

import math

import numpy as np

from .io import PixelBuffer
from .surface import RasterSurface

MAGNIFIER_SIZE = 140
MAGNIFIER_GRID = 15
BACKGROUND = (10, 10, 10, 1.0)
HIGHLIGHT_LIGHT = (255, 255, 255, 0.95)
HIGHLIGHT_DARK = (0, 0, 0, 0.6)


def draw_magnifier(
    target: RasterSurface,
    source: PixelBuffer,
    focus_x: float,
    focus_y: float,
) -> None:
    """Render a pixelated zoom of the 15x15 neighborhood around the focus pixel.

    Called on every pointer move, so it stays nearest-neighbor and touches only
    the fixed-size output. Cells outside the source keep the background fill.
    """
    if target.size != (MAGNIFIER_SIZE, MAGNIFIER_SIZE):
        raise ValueError(
            f"magnifier surface must be {MAGNIFIER_SIZE}x{MAGNIFIER_SIZE}"
        )

    size = MAGNIFIER_SIZE
    half = MAGNIFIER_GRID // 2
    cell = size / MAGNIFIER_GRID
    fx = int(math.floor(focus_x))
    fy = int(math.floor(focus_y))

    target.fill(BACKGROUND)

    coords = np.arange(size)
    grid = np.minimum((coords / cell).astype(int), MAGNIFIER_GRID - 1)
    src_x = fx - half + grid
    src_y = fy - half + grid

    ys, xs = np.meshgrid(coords, coords, indexing="ij")
    center = size / 2.0
    radius = size / 2.0 - 1.0
    inside = (xs + 0.5 - center) ** 2 + (ys + 0.5 - center) ** 2 <= radius**2

    sx = src_x[xs]
    sy = src_y[ys]
    in_bounds = (sx >= 0) & (sx < source.width) & (sy >= 0) & (sy < source.height)
    visible = inside & in_bounds

    rows, cols = np.nonzero(visible)
    sampled = source.pixels[sy[rows, cols], sx[rows, cols]].astype(np.float64)
    alpha = sampled[:, 3:4] / 255.0
    background = np.array(BACKGROUND[:3], dtype=np.float64)
    blended = sampled[:, :3] * alpha + background * (1.0 - alpha)
    target.pixels[rows, cols, :3] = np.round(blended).astype(np.uint8)
    target.pixels[rows, cols, 3] = 255

    x0 = int(round(half * cell))
    x1 = int(round((half + 1) * cell))
    target.stroke_rect(x0, x0, x1, x1, HIGHLIGHT_LIGHT)
    target.stroke_rect(x0 + 1, x0 + 1, x1 - 1, x1 - 1, HIGHLIGHT_DARK)
