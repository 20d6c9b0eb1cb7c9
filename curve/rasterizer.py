"""Curve rasterizer: sample an expression over the domain and stroke it.

The mathematical domain [x_min, x_max] is fixed. When the curve is
tilted, the pixel range it is drawn across is widened by an overscan
margin on both sides so that, after rotation about the canvas center,
the curve's endpoints fall outside the visible frame instead of showing
as cut stubs. Sampling density grows with the widened range.

A failed or non-finite sample breaks the polyline: the next valid
sample starts a new segment. That is the only discontinuity handling.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from PyQt6.QtCore import QPointF, Qt
from PyQt6.QtGui import QPainterPath, QPen

from curve.coloring import hex_to_qcolor
from curve.surface import RasterSurface
from expression import EvaluationError, Expression, ParameterSet

logger = logging.getLogger(__name__)

# Minimum number of sample intervals across the domain
MIN_STEPS = 300

# Thinnest stroke the rasterizer will draw (logical px)
MIN_LINE_WIDTH = 0.5

# Pixel coordinates are clipped to this magnitude before stroking
COORD_LIMIT = 1e6


@dataclass(frozen=True)
class RenderConfig:
    """Everything a render needs besides the surface, formula and parameters."""

    x_min: float = -10.0
    x_max: float = 10.0
    y_min: float = -5.0
    y_max: float = 5.0
    line_color: str = "#111827"
    bg_color: str = "#ffffff"
    line_width: float = 2.0
    line_opacity: float = 1.0
    tilt_deg: float = 0.0
    min_steps: int = MIN_STEPS


def compute_overscan(width: float, height: float, tilt_deg: float) -> float:
    """Horizontal margin needed on each side for a tilted curve.

    The horizontal extent of the canvas rotated by theta is
    W' = |W cos(theta)| + |H sin(theta)|; half the excess goes on each side.
    """
    if not tilt_deg:
        return 0.0
    rad = math.radians(tilt_deg)
    rotated_width = abs(width * math.cos(rad)) + abs(height * math.sin(rad))
    return max(0.0, (rotated_width - width) / 2)


def sample_step_count(width: float, overscan: float, min_steps: int = MIN_STEPS) -> int:
    """Number of sample intervals for the (overscanned) drawing width."""
    return max(min_steps, math.floor(width + 2 * overscan))


def sample_segments(
    expression: Expression,
    params: ParameterSet,
    config: RenderConfig,
    width: float,
    height: float,
) -> list[np.ndarray]:
    """Evaluate the expression across the domain and map it to pixels.

    Args:
        expression: Compiled formula.
        params: Parameter values, read fresh for every sample.
        config: Domain bounds, tilt and sampling density.
        width: Logical canvas width.
        height: Logical canvas height.

    Returns:
        List of (n, 2) float arrays of unrotated pixel coordinates, one per
        unbroken polyline segment.
    """
    x_min, x_max = config.x_min, config.x_max
    y_min, y_max = config.y_min, config.y_max
    span_x = x_max - x_min
    px_per_y = height / (y_max - y_min)

    overscan = compute_overscan(width, height, config.tilt_deg)
    # Pixel range becomes [-overscan, width + overscan]
    px_per_x_ext = (width + 2 * overscan) / span_x
    steps = sample_step_count(width, overscan, config.min_steps)

    segments: list[np.ndarray] = []
    current: list[tuple[float, float]] = []
    for i in range(steps + 1):
        x = x_min + (i / steps) * span_x
        try:
            y = expression.evaluate(params.bindings(x))
        except EvaluationError:
            y = math.nan
        if not math.isfinite(y):
            if current:
                segments.append(np.array(current, dtype=np.float64))
                current = []
            continue
        px = (x - x_min) * px_per_x_ext - overscan
        py = height - (y - y_min) * px_per_y
        current.append((px, py))
    if current:
        segments.append(np.array(current, dtype=np.float64))

    logger.debug(
        "Sampled %r: %d steps, %d segments, overscan %.1f px",
        expression.text, steps, len(segments), overscan,
    )
    return segments


def rotate_about_center(
    points: np.ndarray,
    width: float,
    height: float,
    tilt_deg: float,
) -> np.ndarray:
    """Apply the same center rotation QPainter.rotate() applies (y axis down)."""
    rad = math.radians(tilt_deg)
    cos_t, sin_t = math.cos(rad), math.sin(rad)
    cx, cy = width / 2, height / 2
    dx = points[..., 0] - cx
    dy = points[..., 1] - cy
    out = np.empty_like(points, dtype=np.float64)
    out[..., 0] = cx + dx * cos_t - dy * sin_t
    out[..., 1] = cy + dx * sin_t + dy * cos_t
    return out


def build_path(segments: list[np.ndarray]) -> QPainterPath:
    """Build one QPainterPath with a moveTo per segment."""
    path = QPainterPath()
    for segment in segments:
        pts = np.clip(segment, -COORD_LIMIT, COORD_LIMIT)
        path.moveTo(QPointF(pts[0, 0], pts[0, 1]))
        for px, py in pts[1:]:
            path.lineTo(QPointF(px, py))
    return path


def make_pen(config: RenderConfig) -> QPen:
    """Stroke pen: configured color, width floored at MIN_LINE_WIDTH."""
    pen = QPen(hex_to_qcolor(config.line_color))
    pen.setWidthF(max(MIN_LINE_WIDTH, float(config.line_width)))
    pen.setCapStyle(Qt.PenCapStyle.FlatCap)
    pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
    return pen


def render(
    surface: RasterSurface,
    expression: Expression | None,
    params: ParameterSet,
    config: RenderConfig | None = None,
) -> None:
    """Draw one frame: snapshot or background, then the curve on top.

    With a frozen snapshot the surface is not cleared to the background;
    the snapshot is drawn and the stroke composites over it. A None
    expression (the formula failed to compile) draws no curve.
    """
    if config is None:
        config = RenderConfig()
    width, height = surface.width, surface.height

    painter = surface.begin_painter()
    try:
        if not surface.draw_snapshot(painter):
            surface.fill_background(painter, config.bg_color)

        if expression is None or width <= 0 or height <= 0:
            return

        segments = sample_segments(expression, params, config, width, height)
        if not segments:
            return

        painter.save()
        if config.tilt_deg:
            cx, cy = width / 2, height / 2
            painter.translate(cx, cy)
            painter.rotate(config.tilt_deg)
            painter.translate(-cx, -cy)
        painter.setOpacity(min(1.0, max(0.0, float(config.line_opacity))))
        painter.setPen(make_pen(config))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(build_path(segments))
        painter.restore()
    finally:
        painter.end()
