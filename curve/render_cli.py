"""Headless renderer: draw formulas, apply fills, and save a PNG.

Each formula is rendered and frozen in turn, so later curves stack on
earlier ones, exactly like pressing Freeze between formulas in the app.
Fills are applied after all curves are drawn.

Usage:
    python -m curve.render_cli "sin(a*x + b)*c" [--param a=2] [--size 800x400]
        [--tilt 30] [--fill 400,100,#ff0000] [--random 2] [--magic 10]
        [--seed 1] [--output fxart.png]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import numpy as np
from PyQt6.QtGui import QGuiApplication

from bucket.batch import FillRequest, fill_many, fill_random_points
from bucket.engine import DEFAULT_GAP_CLOSE_RADIUS, DEFAULT_TOLERANCE
from curve.coloring import parse_hex
from curve.export import save_png
from curve.rasterizer import RenderConfig, render
from curve.surface import RasterSurface
from expression import CompileError, ParameterSet, compile_expression, random_expression

logger = logging.getLogger(__name__)


def parse_size(text: str) -> tuple[int, int]:
    """Parse "WIDTHxHEIGHT"."""
    try:
        w, h = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must look like 800x400, got {text!r}") from None
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return w, h


def parse_param(text: str) -> tuple[str, float]:
    """Parse "NAME=VALUE" for one of a, b, c."""
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or name not in ("a", "b", "c"):
        raise argparse.ArgumentTypeError(f"parameter must be a=, b= or c=, got {text!r}")
    try:
        return name, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"parameter value is not a number: {text!r}") from None


def parse_color(text: str) -> str:
    try:
        parse_hex(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None
    return text if text.startswith("#") else "#" + text


def parse_fill(text: str) -> tuple[float, float, str]:
    """Parse "X,Y,#RRGGBB" (logical coordinates)."""
    parts = text.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"fill must look like 10,20,#ff0000, got {text!r}")
    try:
        x, y = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"fill coordinates are not numbers: {text!r}") from None
    return x, y, parse_color(parts[2].strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render formulas as curves, bucket-fill regions, and save a PNG.",
    )
    parser.add_argument("expressions", nargs="*", help="Formula(s) in x with parameters a, b, c")
    parser.add_argument(
        "--random", type=int, default=0,
        help="Append N formulas picked from the presets (seeded by --seed)",
    )
    parser.add_argument(
        "--param", type=parse_param, action="append", default=[],
        help="Parameter value, e.g. a=2 (repeatable; defaults a=1 b=0 c=1)",
    )
    parser.add_argument("--size", type=parse_size, default=(800, 400), help="Logical size (default: 800x400)")
    parser.add_argument("--dpr", type=float, default=1.0, help="Device pixel ratio (default: 1)")
    parser.add_argument("--tilt", type=float, default=0.0, help="Rotation in degrees (default: 0)")
    parser.add_argument("--line-color", type=parse_color, default="#111827")
    parser.add_argument("--line-width", type=float, default=2.0)
    parser.add_argument("--opacity", type=float, default=1.0)
    parser.add_argument("--bg-color", type=parse_color, default="#ffffff")
    parser.add_argument(
        "--fill", type=parse_fill, action="append", default=[],
        help="Bucket fill at logical X,Y with a color, e.g. 10,20,#ff0000 (repeatable)",
    )
    parser.add_argument("--magic", type=int, default=0, help="Number of random fills to apply")
    parser.add_argument("--tolerance", type=int, default=DEFAULT_TOLERANCE)
    parser.add_argument("--gap-close", type=int, default=DEFAULT_GAP_CLOSE_RADIUS)
    parser.add_argument("--seed", type=int, default=None, help="Random seed for --random and --magic")
    parser.add_argument("--output", type=str, default="fxart.png", help="Output PNG path")
    return parser


def run(args: argparse.Namespace) -> int:
    """Render according to parsed arguments. Returns a process exit code."""
    params = ParameterSet()
    for name, value in args.param:
        setattr(params, name, value)

    rng = np.random.default_rng(args.seed)
    texts = list(args.expressions) + [random_expression(rng) for _ in range(args.random)]
    if not texts:
        logger.error("No formula given")
        return 2
    try:
        compiled = [compile_expression(text) for text in texts]
    except CompileError as exc:
        logger.error("%s", exc)
        return 2

    width, height = args.size
    surface = RasterSurface(width, height, args.dpr, bg_color=args.bg_color)
    config = RenderConfig(
        line_color=args.line_color,
        bg_color=args.bg_color,
        line_width=args.line_width,
        line_opacity=args.opacity,
        tilt_deg=args.tilt,
    )
    for expr in compiled:
        render(surface, expr, params, config)
        surface.freeze(expr.text)

    requests = [
        FillRequest(surface.logical_to_device(x, y), color) for x, y, color in args.fill
    ]
    fill_kwargs = dict(
        tolerance=args.tolerance,
        gap_close_radius=args.gap_close,
        background_color=args.bg_color,
    )
    if requests:
        fill_many(surface, requests, **fill_kwargs)
    if args.magic > 0:
        fill_random_points(
            surface, args.magic, rng=rng, **fill_kwargs,
        )

    try:
        save_png(surface, args.output)
    except OSError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    # Text rendering in the footer needs a QGuiApplication
    _app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
