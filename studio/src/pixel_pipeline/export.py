from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any, Sequence

from PIL import Image, ImageDraw, ImageFont

from .colorspace import hex_to_rgb
from .models import SampledColor
from .surface import encode_image

EXPORT_FORMATS = ("json", "css", "tailwind", "png")

SWATCH_SIZE = 80
SWATCH_GAP = 12
SWATCH_RADIUS = 8
SHEET_PADDING = 32
LABEL_HEIGHT = 36
HEADER_HEIGHT = 64
MAX_COLUMNS = 8
SHEET_BACKGROUND = (10, 10, 10)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def export_json(
    palette: Sequence[SampledColor],
    dominant: Sequence[SampledColor],
    exported_at: datetime | None = None,
) -> str:
    payload: dict[str, Any] = {
        "palette": [color.to_dict() for color in palette],
        "dominant_colors": [color.to_dict() for color in dominant],
        "exported_at": (exported_at or _utcnow()).isoformat(),
    }
    return json.dumps(payload, indent=2)


def palette_from_json(text: str) -> tuple[list[SampledColor], list[SampledColor]]:
    """Rebuild ``(palette, dominant)`` from :func:`export_json` output.

    Only the ``hex`` field is read; ``rgb`` and ``hsl`` are derived from it.
    """
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("palette export must be a JSON object")

    def _group(key: str) -> list[SampledColor]:
        records = payload.get(key, [])
        if not isinstance(records, list):
            raise ValueError(f"'{key}' must be a list")
        colors = []
        for idx, record in enumerate(records, start=1):
            if not isinstance(record, dict) or "hex" not in record:
                raise ValueError(f"{key}[{idx}] must be an object with a 'hex' field")
            colors.append(SampledColor(rgb=hex_to_rgb(str(record["hex"]))))
        return colors

    return _group("palette"), _group("dominant_colors")


def export_css(
    palette: Sequence[SampledColor], dominant: Sequence[SampledColor]
) -> str:
    lines = ["/* Color Palette exported from Studio */", ":root {"]
    for idx, color in enumerate(palette, start=1):
        lines.append(f"  --palette-{idx}: {color.hex};")
    if dominant:
        lines.append("")
        for idx, color in enumerate(dominant, start=1):
            lines.append(f"  --dominant-{idx}: {color.hex};")
    lines.append("}")
    return "\n".join(lines)


def export_tailwind(
    palette: Sequence[SampledColor], dominant: Sequence[SampledColor]
) -> str:
    colors: dict[str, str] = {}
    for idx, color in enumerate(palette, start=1):
        colors[f"palette-{idx}"] = color.hex
    for idx, color in enumerate(dominant, start=1):
        colors[f"dominant-{idx}"] = color.hex
    return (
        "// Tailwind config exported from Studio\n"
        f"const colors = {json.dumps(colors, indent=2)};\n"
    )


def swatch_sheet_size(color_count: int) -> tuple[int, int]:
    if color_count < 1:
        raise ValueError("swatch sheet needs at least one color")
    columns = min(color_count, MAX_COLUMNS)
    rows = math.ceil(color_count / columns)
    width = SHEET_PADDING * 2 + columns * (SWATCH_SIZE + SWATCH_GAP) - SWATCH_GAP
    height = (
        SHEET_PADDING * 2
        + HEADER_HEIGHT
        + rows * (SWATCH_SIZE + LABEL_HEIGHT + SWATCH_GAP)
    )
    return width, height


def _load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default()


def render_swatch_sheet(
    palette: Sequence[SampledColor],
    dominant: Sequence[SampledColor],
    generated_at: datetime | None = None,
) -> Image.Image:
    colors = list(palette) + list(dominant)
    width, height = swatch_sheet_size(len(colors))
    columns = min(len(colors), MAX_COLUMNS)

    sheet = Image.new("RGB", (width, height), SHEET_BACKGROUND)
    draw = ImageDraw.Draw(sheet, "RGBA")

    title_font = _load_font(20, bold=True)
    caption_font = _load_font(12)
    hex_font = _load_font(11, bold=True)
    rgb_font = _load_font(10)

    stamp = (generated_at or _utcnow()).strftime("%Y-%m-%d")
    draw.text(
        (SHEET_PADDING, SHEET_PADDING + 4), "Color Palette", fill=(255, 255, 255, 255),
        font=title_font,
    )
    draw.text(
        (SHEET_PADDING, SHEET_PADDING + 34),
        f"{len(colors)} colors · Studio · {stamp}",
        fill=(255, 255, 255, 102),
        font=caption_font,
    )

    for idx, color in enumerate(colors):
        col = idx % columns
        row = idx // columns
        x = SHEET_PADDING + col * (SWATCH_SIZE + SWATCH_GAP)
        y = SHEET_PADDING + HEADER_HEIGHT + row * (SWATCH_SIZE + LABEL_HEIGHT + SWATCH_GAP)

        draw.rounded_rectangle(
            (x, y, x + SWATCH_SIZE - 1, y + SWATCH_SIZE - 1),
            radius=SWATCH_RADIUS,
            fill=color.rgb,
        )
        draw.text(
            (x, y + SWATCH_SIZE + 6), color.hex, fill=(255, 255, 255, 217), font=hex_font
        )
        r, g, b = color.rgb
        draw.text(
            (x, y + SWATCH_SIZE + 21), f"{r}, {g}, {b}", fill=(255, 255, 255, 102),
            font=rgb_font,
        )

    return sheet


def swatch_sheet_png(
    palette: Sequence[SampledColor],
    dominant: Sequence[SampledColor],
    generated_at: datetime | None = None,
) -> bytes:
    return encode_image(render_swatch_sheet(palette, dominant, generated_at), "PNG")


def export_text(
    fmt: str,
    palette: Sequence[SampledColor],
    dominant: Sequence[SampledColor],
) -> str:
    if fmt == "json":
        return export_json(palette, dominant)
    if fmt == "css":
        return export_css(palette, dominant)
    if fmt == "tailwind":
        return export_tailwind(palette, dominant)
    raise ValueError(f"unsupported text export format '{fmt}'. Use json, css or tailwind")
