from __future__ import annotations

import math
import re

RGB = tuple[int, int, int]
HSL = tuple[int, int, int]

_HEX_PATTERN = re.compile(r"^#?[0-9A-Fa-f]{6}$")

DARK_TEXT = "rgba(0,0,0,0.8)"
LIGHT_TEXT = "rgba(255,255,255,0.9)"
_CONTRAST_THRESHOLD = 128.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_channel(value: float) -> int:
    return max(0, min(255, round_half_up(value)))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#" + "".join(f"{clamp_channel(v):02X}" for v in (r, g, b))


def hex_to_rgb(value: str) -> RGB:
    if not _HEX_PATTERN.match(value):
        raise ValueError(f"invalid hex color '{value}'")

    normalized = value[1:] if value.startswith("#") else value
    return (
        int(normalized[0:2], 16),
        int(normalized[2:4], 16),
        int(normalized[4:6], 16),
    )


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    r_n, g_n, b_n = r / 255.0, g / 255.0, b / 255.0
    high = max(r_n, g_n, b_n)
    low = min(r_n, g_n, b_n)
    lightness = (high + low) / 2.0

    if high == low:
        return (0, 0, round_half_up(lightness * 100.0))

    delta = high - low
    if lightness > 0.5:
        saturation = delta / (2.0 - high - low)
    else:
        saturation = delta / (high + low)

    if high == r_n:
        hue = ((g_n - b_n) / delta + (6.0 if g_n < b_n else 0.0)) / 6.0
    elif high == g_n:
        hue = ((b_n - r_n) / delta + 2.0) / 6.0
    else:
        hue = ((r_n - g_n) / delta + 4.0) / 6.0

    # A hue just below 1.0 rounds up to 360, which is the same angle as 0.
    degrees = round_half_up(hue * 360.0) % 360
    return (degrees, round_half_up(saturation * 100.0), round_half_up(lightness * 100.0))


def relative_luminance(r: float, g: float, b: float) -> float:
    """Perceptual brightness used for UI contrast and palette ordering.

    This is the simple 0.299/0.587/0.114 weighting, not the sRGB-linear
    relative luminance from WCAG.
    """
    return 0.299 * r + 0.587 * g + 0.114 * b


def contrast_text_color(hex_value: str) -> str:
    r, g, b = hex_to_rgb(hex_value)
    if relative_luminance(r, g, b) > _CONTRAST_THRESHOLD:
        return DARK_TEXT
    return LIGHT_TEXT
