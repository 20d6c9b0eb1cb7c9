"""Studio view: orchestrates canvas, controls, surface, renders and fills.

Every action runs synchronously on the GUI thread. A resize reallocates
the surface and re-renders in the same handler, so no render ever writes
into a buffer that has been replaced.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QSplitter, QFileDialog, QApplication

from bucket.batch import fill_random_points
from bucket.engine import flood_fill
from curve.export import save_png
from curve.rasterizer import RenderConfig, render
from curve.surface import BufferAccessError, DEFAULT_BACKGROUND, RasterSurface
from expression import CompileError, compile_expression, random_expression
from studio.canvas import StudioCanvas, TOOL_BUCKET, TOOL_LINE
from studio.controls import StudioControls

logger = logging.getLogger(__name__)

TILT_STEP_DEG = 10


class StudioView(QWidget):
    """Complete studio: canvas + controls + the core state they drive."""

    def __init__(self, parent=None):
        super().__init__(parent)

        self.bg_color = DEFAULT_BACKGROUND
        self.tilt_deg = 0.0
        self.tool_mode = TOOL_LINE

        self.canvas = StudioCanvas()
        self.controls = StudioControls()

        self._splitter = QSplitter(Qt.Orientation.Horizontal)
        self._splitter.addWidget(self.canvas)
        self._splitter.addWidget(self.controls)
        self._splitter.setStretchFactor(0, 3)
        self._splitter.setStretchFactor(1, 1)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._splitter)

        self.surface = RasterSurface(
            self.canvas.width(), self.canvas.height(),
            self.canvas.devicePixelRatioF(), bg_color=self.bg_color,
        )
        self.canvas.set_surface(self.surface)
        self._expression = None
        self._compile(self.controls.expression_text())

        # Wire signals
        self.canvas.resized.connect(self._on_resized)
        self.canvas.clicked.connect(self._on_canvas_clicked)
        self.controls.expression_changed.connect(self._on_expression_changed)
        self.controls.style_changed.connect(self.redraw)
        self.controls.random_clicked.connect(self._on_random)
        self.controls.tilt_clicked.connect(self._on_tilt)
        self.controls.freeze_clicked.connect(self.freeze)
        self.controls.reset_clicked.connect(self.reset)
        self.controls.magic_clicked.connect(self.magic)
        self.controls.save_clicked.connect(self._on_save)

    # -- Public interface --

    def set_tool_mode(self, mode: str) -> None:
        self.tool_mode = mode
        self.canvas.set_tool_mode(mode)

    def render_config(self) -> RenderConfig:
        return RenderConfig(
            line_color=self.controls.line_color(),
            bg_color=self.bg_color,
            line_width=self.controls.line_width(),
            line_opacity=self.controls.line_opacity(),
            tilt_deg=self.tilt_deg,
        )

    def redraw(self) -> None:
        render(self.surface, self._expression, self.controls.get_params(), self.render_config())
        self.canvas.update()

    def freeze(self) -> None:
        self.surface.freeze(self.controls.expression_text())
        logger.info("Froze canvas with %r", self.controls.expression_text())
        self.redraw()

    def reset(self) -> None:
        self.surface.reset()
        self.canvas.update()
        logger.info("Canvas reset")

    def magic(self) -> None:
        self.set_tool_mode(TOOL_BUCKET)
        self.controls.setEnabled(False)
        try:
            fill_random_points(
                self.surface,
                tolerance=self.controls.tolerance(),
                gap_close_radius=self.controls.gap_close_radius(),
                background_color=self.bg_color,
                on_yield=self._present,
            )
        except BufferAccessError:
            logger.warning("Random fill aborted")
        finally:
            self.controls.setEnabled(True)
        self.canvas.update()

    # -- Internals --

    def _present(self) -> None:
        self.canvas.repaint()
        QApplication.processEvents()

    def _compile(self, text: str) -> None:
        try:
            self._expression = compile_expression(text)
            self.controls.set_error(None)
        except CompileError as exc:
            logger.debug("Compile failed for %r: %s", text, exc)
            self._expression = None
            self.controls.set_error("Invalid function")

    def _on_expression_changed(self, text: str) -> None:
        self._compile(text)
        self.redraw()

    def _on_random(self) -> None:
        self.controls.set_expression_text(random_expression())

    def _on_tilt(self) -> None:
        self.tilt_deg = (self.tilt_deg + TILT_STEP_DEG) % 360
        self.redraw()

    def _on_resized(self, width: int, height: int, dpr: float) -> None:
        self.surface.resize(width, height, max(1.0, dpr))
        self.redraw()

    def _on_canvas_clicked(self, x: float, y: float) -> None:
        if self.tool_mode != TOOL_BUCKET:
            return
        # Without a snapshot the buffer may be stale; draw the current frame first
        if not self.surface.has_snapshot:
            self.redraw()
        seed = self.surface.logical_to_device(x, y)
        try:
            flood_fill(
                self.surface, seed, self.controls.bucket_color(),
                tolerance=self.controls.tolerance(),
                gap_close_radius=self.controls.gap_close_radius(),
                background_color=self.bg_color,
            )
        except BufferAccessError:
            return
        self.canvas.update()

    def _on_save(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Save PNG", "fxart.png", "PNG images (*.png)")
        if not path:
            return
        try:
            save_png(self.surface, path)
        except OSError:
            logger.exception("Saving %s failed", path)
