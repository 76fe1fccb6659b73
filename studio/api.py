from __future__ import annotations

from typing import Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from studio.src.pixel_pipeline.colorspace import hex_to_rgb
from studio.src.pixel_pipeline.export import export_text
from studio.src.pixel_pipeline.io import load_remote_pixel_buffer
from studio.src.pixel_pipeline.models import SampledColor
from studio.src.pixel_pipeline.sampling import ColorSamplingSession


class ExtractRequest(BaseModel):
    image_url: str = Field(..., description="HTTP(S) image URL")
    count: int = Field(default=8, ge=1, le=32, description="Maximum colors to return")
    method: Literal["median_cut", "kmeans"] = Field(
        default="median_cut", description="Quantization method"
    )


class ColorItem(BaseModel):
    hex: str
    rgb: str
    hsl: str


class ExtractResponse(BaseModel):
    colors: list[ColorItem]


class ExportRequest(BaseModel):
    palette: list[str] = Field(default_factory=list, description="Palette hex values")
    dominant: list[str] = Field(default_factory=list, description="Dominant hex values")
    format: Literal["json", "css", "tailwind"] = "json"


class ExportResponse(BaseModel):
    format: str
    content: str


app = FastAPI(
    title="Studio Pixel Pipeline API",
    version="1.0.0",
    description="Dominant-color extraction and palette export.",
)


def _build_session(method: str) -> ColorSamplingSession:
    # Requests never read from the server's filesystem.
    return ColorSamplingSession(loader=load_remote_pixel_buffer, quantize_method=method)


@app.post("/extract", response_model=ExtractResponse)
async def extract_colors(payload: ExtractRequest) -> ExtractResponse:
    session = _build_session(payload.method)
    try:
        colors = await run_in_threadpool(
            session.extract_dominant_colors, payload.image_url, payload.count
        )
    except Exception as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_extract_colors: {exc}"
        ) from exc

    return ExtractResponse(colors=[ColorItem(**color.to_dict()) for color in colors])


@app.post("/export", response_model=ExportResponse)
async def export_palette(payload: ExportRequest) -> ExportResponse:
    try:
        palette = [SampledColor(rgb=hex_to_rgb(value)) for value in payload.palette]
        dominant = [SampledColor(rgb=hex_to_rgb(value)) for value in payload.dominant]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ExportResponse(
        format=payload.format,
        content=export_text(payload.format, palette, dominant),
    )
