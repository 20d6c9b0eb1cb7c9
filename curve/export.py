"""Export: surface image plus a text footer listing the formulas used."""

from __future__ import annotations

import logging
import math
from pathlib import Path

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QImage, QPainter

from curve.coloring import IMAGE_FORMAT
from curve.surface import RasterSurface

logger = logging.getLogger(__name__)

CREDIT_LINE = "Made possible by fxART"
EXPRESSION_SEPARATOR = " | "

FOOTER_FONT_SIZE = 12
FOOTER_LINE_HEIGHT = FOOTER_FONT_SIZE + 4
FOOTER_PADDING = 10
FOOTER_MARGIN_LEFT = 10
FOOTER_BACKGROUND = QColor(255, 255, 255)
FOOTER_TEXT_COLOR = QColor(0x37, 0x41, 0x51)


def footer_lines(used_expressions) -> list[str]:
    """Footer text: the formulas line (when any were used), then the credit."""
    lines = []
    exprs = list(used_expressions)
    if exprs:
        lines.append("Functions used: " + EXPRESSION_SEPARATOR.join(exprs))
    lines.append(CREDIT_LINE)
    return lines


def footer_height(n_lines: int) -> int:
    """Footer height in logical pixels."""
    return FOOTER_LINE_HEIGHT * n_lines + FOOTER_PADDING


def _footer_font() -> QFont:
    font = QFont()
    font.setFamilies(["Menlo", "Consolas", "Liberation Mono", "DejaVu Sans Mono", "monospace"])
    font.setStyleHint(QFont.StyleHint.Monospace)
    font.setPixelSize(FOOTER_FONT_SIZE)
    return font


def compose_export(surface: RasterSurface) -> QImage:
    """Render the surface with the footer appended below it.

    Requires a QGuiApplication (text rendering needs the font database).
    """
    lines = footer_lines(surface.used_expressions)
    w, h = surface.width, surface.height
    extra = footer_height(len(lines))
    dpr = surface.dpr

    out = QImage(surface.device_width, math.ceil((h + extra) * dpr), IMAGE_FORMAT)
    out.fill(FOOTER_BACKGROUND)

    painter = QPainter(out)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        painter.scale(dpr, dpr)
        painter.drawImage(QRectF(0, 0, w, h), surface.image)
        painter.fillRect(QRectF(0, h, w, extra), FOOTER_BACKGROUND)

        painter.setPen(FOOTER_TEXT_COLOR)
        painter.setFont(_footer_font())
        text_width = max(0.0, w - 2 * FOOTER_MARGIN_LEFT)
        y = h + FOOTER_PADDING / 2
        for line in lines:
            rect = QRectF(FOOTER_MARGIN_LEFT, y, text_width, FOOTER_LINE_HEIGHT)
            elided = painter.fontMetrics().elidedText(
                line, Qt.TextElideMode.ElideRight, int(text_width),
            )
            painter.drawText(rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop, elided)
            y += FOOTER_LINE_HEIGHT
    finally:
        painter.end()
    return out


def save_png(surface: RasterSurface, path) -> Path:
    """Write the composed export image to *path* as PNG.

    Raises:
        OSError: if Qt fails to write the file.
    """
    path = Path(path)
    image = compose_export(surface)
    if not image.save(str(path), "PNG"):
        raise OSError(f"Could not write PNG to {path}")
    logger.info("Saved %dx%d image to %s", image.width(), image.height(), path)
    return path
