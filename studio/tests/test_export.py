from __future__ import annotations

import io
import json
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from PIL import Image

from studio.src.pixel_pipeline.errors import ExportError
from studio.src.pixel_pipeline.export import (
    export_css,
    export_json,
    export_tailwind,
    export_text,
    palette_from_json,
    render_swatch_sheet,
    swatch_sheet_png,
    swatch_sheet_size,
)
from studio.src.pixel_pipeline.models import SampledColor

PALETTE = [SampledColor.from_rgb(255, 0, 0), SampledColor.from_rgb(18, 52, 86)]
DOMINANT = [SampledColor.from_rgb(0, 128, 0)]
STAMP = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_json_export_lists_both_groups():
    payload = json.loads(export_json(PALETTE, DOMINANT, exported_at=STAMP))

    assert payload["palette"][0] == {
        "hex": "#FF0000",
        "rgb": "rgb(255, 0, 0)",
        "hsl": "hsl(0, 100%, 50%)",
    }
    assert payload["palette"][1]["hex"] == "#123456"
    assert payload["dominant_colors"] == [
        {"hex": "#008000", "rgb": "rgb(0, 128, 0)", "hsl": "hsl(120, 100%, 25%)"}
    ]
    assert payload["exported_at"] == "2026-03-01T12:00:00+00:00"


def test_json_export_round_trips_through_hex():
    palette, dominant = palette_from_json(export_json(PALETTE, DOMINANT))

    assert [c.hex for c in palette] == ["#FF0000", "#123456"]
    assert [c.rgb for c in dominant] == [(0, 128, 0)]


def test_palette_from_json_rejects_entries_without_hex():
    with pytest.raises(ValueError):
        palette_from_json(json.dumps({"palette": [{"rgb": "rgb(1, 2, 3)"}]}))


def test_css_export_numbers_variables_from_one():
    css = export_css(PALETTE, DOMINANT)

    assert ":root {" in css
    assert "  --palette-1: #FF0000;" in css
    assert "  --palette-2: #123456;" in css
    assert "  --dominant-1: #008000;" in css
    assert css.rstrip().endswith("}")


def test_css_export_without_dominant_colors():
    css = export_css(PALETTE, [])
    assert "--dominant" not in css


def test_tailwind_export_is_an_object_literal():
    text = export_tailwind(PALETTE, DOMINANT)

    assert text.startswith("// Tailwind config")
    literal = text.split("const colors = ", 1)[1].rstrip().rstrip(";")
    assert json.loads(literal) == {
        "palette-1": "#FF0000",
        "palette-2": "#123456",
        "dominant-1": "#008000",
    }


def test_export_text_rejects_unknown_format():
    with pytest.raises(ValueError):
        export_text("yaml", PALETTE, DOMINANT)


def test_swatch_sheet_is_sized_from_color_count():
    assert swatch_sheet_size(3) == (32 * 2 + 3 * 92 - 12, 32 * 2 + 64 + 128)
    assert swatch_sheet_size(8)[0] == swatch_sheet_size(20)[0]
    assert swatch_sheet_size(9)[1] == 32 * 2 + 64 + 2 * 128
    with pytest.raises(ValueError):
        swatch_sheet_size(0)


def test_swatch_sheet_paints_each_swatch():
    sheet = render_swatch_sheet(PALETTE, DOMINANT, generated_at=STAMP)

    assert sheet.size == swatch_sheet_size(3)
    # Center of each swatch in the first row.
    for idx, color in enumerate(PALETTE + DOMINANT):
        x = 32 + idx * 92 + 40
        y = 32 + 64 + 40
        assert sheet.getpixel((x, y)) == color.rgb
    assert sheet.getpixel((2, 2)) == (10, 10, 10)


def test_swatch_sheet_png_is_a_png():
    data = swatch_sheet_png(PALETTE, [], generated_at=STAMP)

    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "PNG"
        assert image.size == swatch_sheet_size(2)


def test_swatch_sheet_png_wraps_encoder_failures():
    with patch.object(Image.Image, "save", side_effect=OSError("encoder missing")):
        with pytest.raises(ExportError) as excinfo:
            swatch_sheet_png(PALETTE, DOMINANT, generated_at=STAMP)

    assert "encoder missing" in str(excinfo.value)
