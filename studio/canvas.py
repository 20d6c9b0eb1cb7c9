"""Studio canvas: presents a RasterSurface and reports clicks and resizes."""

from __future__ import annotations

from PyQt6.QtCore import Qt, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QColor
from PyQt6.QtWidgets import QWidget

from curve.surface import RasterSurface

# Tool modes
TOOL_LINE = "line"
TOOL_BUCKET = "bucket"


class StudioCanvas(QWidget):
    """Widget that blits the surface image; the view owns all drawing."""

    # logical x, y of a left click
    clicked = pyqtSignal(float, float)
    # logical width, height, device pixel ratio
    resized = pyqtSignal(int, int, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.surface: RasterSurface | None = None
        self.tool_mode = TOOL_LINE
        self.setMinimumSize(320, 240)

    def set_surface(self, surface: RasterSurface) -> None:
        self.surface = surface
        self.update()

    def set_tool_mode(self, mode: str) -> None:
        self.tool_mode = mode
        if mode == TOOL_BUCKET:
            self.setCursor(Qt.CursorShape.PointingHandCursor)
        else:
            self.setCursor(Qt.CursorShape.CrossCursor)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.resized.emit(self.width(), self.height(), self.devicePixelRatioF())

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        self.clicked.emit(pos.x(), pos.y())

    def paintEvent(self, event):
        painter = QPainter(self)
        if self.surface is None:
            painter.fillRect(self.rect(), QColor(255, 255, 255))
        else:
            painter.drawImage(
                QRectF(0, 0, self.surface.width, self.surface.height),
                self.surface.image,
            )
        painter.end()
