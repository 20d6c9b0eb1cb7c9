"""Raster surface: device-pixel buffer, background, and frozen snapshot.

A RasterSurface owns one ARGB32 QImage whose size is the logical
(CSS-like) size times the device pixel ratio, rounded up. Drawing goes
through begin_painter(), which scales so callers work in logical units.

The frozen snapshot is a baked copy of earlier renders and fills. While
it is set, every render draws it first and strokes on top instead of
clearing to the background.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PyQt6.QtCore import QRectF
from PyQt6.QtGui import QImage, QPainter

from curve.coloring import hex_to_qcolor, new_image, numpy_to_qimage, qimage_to_numpy

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = "#ffffff"


class BufferAccessError(RuntimeError):
    """Raised when the pixel buffer cannot be read."""


def device_size(width: float, height: float, dpr: float) -> tuple[int, int]:
    """Physical buffer size for a logical size and device pixel ratio."""
    return math.ceil(width * dpr), math.ceil(height * dpr)


class RasterSurface:
    """Pixel buffer plus the optional frozen snapshot stacked beneath renders."""

    def __init__(
        self,
        width: float,
        height: float,
        dpr: float = 1.0,
        bg_color: str = DEFAULT_BACKGROUND,
    ):
        self.bg_color = bg_color
        self._frozen: QImage | None = None
        self._used_expressions: dict[str, None] = {}
        self.resize(width, height, dpr)

    # -- Geometry --

    @property
    def width(self) -> float:
        """Logical width."""
        return self._width

    @property
    def height(self) -> float:
        """Logical height."""
        return self._height

    @property
    def dpr(self) -> float:
        return self._dpr

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def device_width(self) -> int:
        return self._image.width()

    @property
    def device_height(self) -> int:
        return self._image.height()

    def resize(self, width: float, height: float, dpr: float = 1.0) -> None:
        """Reallocate the buffer for a new logical size and pixel ratio.

        The old image is replaced, never resized in place. The buffer is
        filled with the background; the frozen snapshot survives and is
        scaled to the new size on the next draw_snapshot().
        """
        if width < 0 or height < 0:
            raise ValueError(f"Surface size must be non-negative, got {width}x{height}")
        if dpr <= 0:
            raise ValueError(f"Device pixel ratio must be positive, got {dpr}")
        self._width = float(width)
        self._height = float(height)
        self._dpr = float(dpr)
        dw, dh = device_size(width, height, dpr)
        self._image = new_image(dw, dh, self.bg_color)
        logger.debug("Surface resized to %gx%g @%g (%dx%d px)", width, height, dpr, dw, dh)

    def logical_to_device(self, x: float, y: float) -> tuple[int, int]:
        """Map a logical point (e.g. a mouse click) to a device pixel."""
        return math.floor(x * self._dpr), math.floor(y * self._dpr)

    # -- Drawing --

    def begin_painter(self) -> QPainter:
        """Open an antialiased QPainter in logical units. Caller must end() it."""
        painter = QPainter(self._image)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.scale(self._dpr, self._dpr)
        return painter

    def fill_background(self, painter: QPainter | None = None, color: str | None = None) -> None:
        """Clear the whole buffer to *color* (default: the surface background)."""
        qcolor = hex_to_qcolor(color or self.bg_color)
        if painter is None:
            self._image.fill(qcolor)
            return
        painter.save()
        self._device_space(painter)
        painter.fillRect(self._device_rect(), qcolor)
        painter.restore()

    def draw_snapshot(self, painter: QPainter) -> bool:
        """Replace the buffer contents with the frozen snapshot, if any.

        Returns:
            True if a snapshot was drawn.
        """
        if self._frozen is None:
            return False
        painter.save()
        self._device_space(painter)
        painter.drawImage(self._device_rect(), self._frozen)
        painter.restore()
        return True

    def _device_rect(self) -> QRectF:
        return QRectF(0, 0, self.device_width, self.device_height)

    @staticmethod
    def _device_space(painter: QPainter) -> None:
        # Device pixels, no antialiasing: every buffer pixel is replaced
        painter.resetTransform()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)

    # -- Snapshot state --

    @property
    def frozen(self) -> QImage | None:
        return self._frozen

    @property
    def has_snapshot(self) -> bool:
        return self._frozen is not None

    @property
    def used_expressions(self) -> tuple[str, ...]:
        """Distinct expressions baked by freeze(), in first-use order."""
        return tuple(self._used_expressions)

    def freeze(self, expression_text: str | None = None) -> None:
        """Bake the current pixels as the background of later renders.

        Args:
            expression_text: Formula that produced the strokes being baked;
                recorded in used_expressions when non-blank.
        """
        self._frozen = self._image.copy()
        text = (expression_text or "").strip()
        if text:
            self._used_expressions[text] = None
        logger.debug("Surface frozen (%d expressions used)", len(self._used_expressions))

    def bake(self) -> None:
        """Snapshot the current pixels without recording an expression."""
        self._frozen = self._image.copy()

    def reset(self) -> None:
        """Clear to background, drop the snapshot and the used-expression set."""
        self.fill_background()
        self._frozen = None
        self._used_expressions = {}
        logger.debug("Surface reset")

    # -- Pixel access --

    def read_pixels(self) -> np.ndarray:
        """Copy the whole buffer into a (H, W, 4) uint8 BGRA array.

        Raises:
            BufferAccessError: if the image holds no readable pixels.
        """
        if self._image.isNull():
            raise BufferAccessError("Surface image is null")
        return qimage_to_numpy(self._image)

    def write_pixels(self, pixels: np.ndarray) -> None:
        """Replace the buffer with a (H, W, 4) BGRA array of the same size."""
        h, w = pixels.shape[:2]
        if (w, h) != (self.device_width, self.device_height):
            raise ValueError(
                f"Pixel array is {w}x{h}, surface is "
                f"{self.device_width}x{self.device_height}"
            )
        self._image = numpy_to_qimage(pixels).copy()
