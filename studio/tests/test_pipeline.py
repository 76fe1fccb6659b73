from __future__ import annotations

import io
from unittest.mock import MagicMock

import numpy as np
import pytest
from PIL import Image

from studio.src.pixel_pipeline.errors import ExportError
from studio.src.pixel_pipeline.mask import REMOVE_INSTRUCTION, MaskPainterSession
from studio.src.pixel_pipeline.models import EditMode, EditResult
from studio.src.pixel_pipeline.pipeline import InpaintingPipeline
from studio.src.pixel_pipeline.surface import RasterSurface


def _painted_session(mode=EditMode.REMOVE, prompt=""):
    painter = MaskPainterSession(RasterSurface(64, 48))
    painter.set_edit_mode(mode)
    painter.set_prompt(prompt)
    painter.begin_stroke(32, 24)
    return painter


def _fake_client():
    client = MagicMock()
    client.fetch_image_bytes.return_value = b"source"
    client.submit_edit.return_value = EditResult(id="new", url="https://cdn/new.png")
    return client


def test_run_exports_mask_at_target_size_and_submits():
    client = _fake_client()
    painter = _painted_session()

    result = InpaintingPipeline(client).run(
        "https://cdn/src.png", painter, 128, 96, project_id="p", parent_id="src"
    )

    assert result.url == "https://cdn/new.png"
    client.fetch_image_bytes.assert_called_once_with("https://cdn/src.png")
    kwargs = client.submit_edit.call_args.kwargs
    assert kwargs["image_bytes"] == b"source"
    assert kwargs["mode"] is EditMode.REMOVE
    assert kwargs["prompt"] == REMOVE_INSTRUCTION
    with Image.open(io.BytesIO(kwargs["mask_bytes"])) as mask:
        assert mask.size == (128, 96)
        values = set(np.unique(np.asarray(mask)).tolist())
        assert values == {0, 255}


def test_run_requires_painted_mask():
    client = _fake_client()
    painter = MaskPainterSession(RasterSurface(10, 10))

    with pytest.raises(ValueError):
        InpaintingPipeline(client).run("u", painter, 10, 10, "p", "x")

    client.fetch_image_bytes.assert_not_called()


def test_edit_mode_requires_prompt():
    client = _fake_client()
    painter = _painted_session(EditMode.EDIT, prompt="   ")

    with pytest.raises(ValueError):
        InpaintingPipeline(client).run("u", painter, 10, 10, "p", "x")

    painter.set_prompt("swap the jacket for leather")
    InpaintingPipeline(client).run("u", painter, 10, 10, "p", "x")
    assert client.submit_edit.call_args.kwargs["prompt"] == "swap the jacket for leather"


def test_export_failure_stops_before_network(monkeypatch):
    client = _fake_client()
    painter = _painted_session()

    def broken_export(width, height):
        raise ExportError("failed to encode PNG image: out of memory")

    monkeypatch.setattr(painter, "export", broken_export)

    with pytest.raises(ExportError):
        InpaintingPipeline(client).run("u", painter, 10, 10, "p", "x")

    client.fetch_image_bytes.assert_not_called()
    client.submit_edit.assert_not_called()
