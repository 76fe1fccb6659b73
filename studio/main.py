from __future__ import annotations

import argparse
import logging
from functools import partial
from pathlib import Path

from PIL import Image

from studio.src.pixel_pipeline.config import load_config
from studio.src.pixel_pipeline.errors import PixelPipelineError
from studio.src.pixel_pipeline.export import export_text, render_swatch_sheet
from studio.src.pixel_pipeline.io import load_pixel_buffer, write_png, write_text_export
from studio.src.pixel_pipeline.mask import export_mask
from studio.src.pixel_pipeline.quantize import QUANTIZE_METHODS
from studio.src.pixel_pipeline.sampling import ColorSamplingSession
from studio.src.pixel_pipeline.surface import RasterSurface


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studio-pixels",
        description="Client-side palette extraction and inpainting mask export.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    parser.add_argument(
        "--config", default=None, help="Optional JSON configuration file."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser(
        "extract", help="Extract the dominant colors of an image."
    )
    extract.add_argument(
        "--image", required=True, help="Path or URL to the input image."
    )
    extract.add_argument(
        "--count",
        type=int,
        default=None,
        help="Maximum number of dominant colors (default from config, 8).",
    )
    extract.add_argument(
        "--method",
        choices=QUANTIZE_METHODS,
        default=None,
        help="Quantization method (default from config, median_cut).",
    )
    extract.add_argument(
        "--format",
        choices=("json", "css", "tailwind", "png"),
        default="json",
        help="Export format.",
    )
    extract.add_argument(
        "--out",
        default=None,
        help="Output path. Required for png; text formats print to stdout if omitted.",
    )

    mask = subparsers.add_parser(
        "mask", help="Convert a painted surface into a black/white inpainting mask."
    )
    mask.add_argument(
        "--surface", required=True, help="PNG of the paint surface (with alpha)."
    )
    mask.add_argument("--width", type=int, required=True, help="Target mask width.")
    mask.add_argument("--height", type=int, required=True, help="Target mask height.")
    mask.add_argument("--out", required=True, help="Output mask PNG path.")

    return parser


def _run_extract(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    config = load_config(args.config)
    session = ColorSamplingSession(
        loader=partial(load_pixel_buffer, timeout=config.request_timeout),
        quantize_method=args.method or config.quantize_method,
    )
    count = args.count if args.count is not None else config.extraction_count
    dominant = session.extract_dominant_colors(args.image, count=count)

    if args.format == "png":
        if not args.out:
            parser.error("--out is required for png export")
        if not dominant:
            parser.exit(1, "no dominant colors found; nothing to render\n")
        write_png(render_swatch_sheet([], dominant), args.out)
        return

    text = export_text(args.format, [], dominant)
    if args.out:
        write_text_export(text, args.out)
    else:
        print(text)


def _run_mask(args: argparse.Namespace) -> None:
    with Image.open(Path(args.surface)) as image:
        surface = RasterSurface.from_image(image)
    write_png(export_mask(surface, args.width, args.height), args.out)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    try:
        if args.command == "extract":
            _run_extract(args, parser)
            return
        if args.command == "mask":
            _run_mask(args)
            return
    except (PixelPipelineError, ValueError, OSError) as exc:
        parser.exit(1, f"error: {exc}\n")

    parser.error("unknown command")


if __name__ == "__main__":
    main()
