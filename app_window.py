"""App window: hosts the studio view with a tool toolbar.

The toolbar switches between the line tool (curve preview only) and
the bucket tool (clicks flood-fill the canvas).
"""

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QActionGroup
from PyQt6.QtWidgets import QMainWindow, QToolBar, QStatusBar, QLabel

from studio.canvas import TOOL_BUCKET, TOOL_LINE
from studio.view import StudioView

logger = logging.getLogger(__name__)


class AppWindow(QMainWindow):
    """Top-level window with tool switching between line and bucket."""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("fxART")
        self.resize(1200, 750)

        # --- View ---
        self.studio_view = StudioView()
        self.setCentralWidget(self.studio_view)

        # --- Toolbar ---
        toolbar = QToolBar("Tools")
        toolbar.setMovable(False)
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, toolbar)

        self._tool_group = QActionGroup(self)
        self._tool_group.setExclusive(True)

        self._line_action = QAction("Line", self)
        self._line_action.setCheckable(True)
        self._line_action.setChecked(True)
        self._line_action.triggered.connect(lambda: self._switch_tool(TOOL_LINE))
        self._tool_group.addAction(self._line_action)
        toolbar.addAction(self._line_action)

        self._bucket_action = QAction("Bucket", self)
        self._bucket_action.setCheckable(True)
        self._bucket_action.triggered.connect(lambda: self._switch_tool(TOOL_BUCKET))
        self._tool_group.addAction(self._bucket_action)
        toolbar.addAction(self._bucket_action)

        # --- Status bar ---
        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._tool_label = QLabel()
        self._tilt_label = QLabel()
        self._used_label = QLabel()
        self._status_bar.addWidget(self._tool_label)
        self._status_bar.addWidget(self._tilt_label)
        self._status_bar.addWidget(self._used_label)

        self.studio_view.controls.tilt_clicked.connect(self._update_status)
        self.studio_view.controls.freeze_clicked.connect(self._update_status)
        self.studio_view.controls.reset_clicked.connect(self._update_status)
        self.studio_view.controls.magic_clicked.connect(self._sync_tool_action)
        self._update_status()

    def _switch_tool(self, mode: str) -> None:
        if self.studio_view.tool_mode == mode:
            return
        self.studio_view.set_tool_mode(mode)
        self._update_status()
        logger.info("Switched to %s tool", mode)

    def _sync_tool_action(self) -> None:
        """Magic switches the view to the bucket tool; mirror it here."""
        self._bucket_action.setChecked(self.studio_view.tool_mode == TOOL_BUCKET)
        self._update_status()

    def _update_status(self) -> None:
        view = self.studio_view
        self._tool_label.setText(f"  Tool: {view.tool_mode}  ")
        self._tilt_label.setText(f"  Tilt: {view.tilt_deg:.0f}°  ")
        self._used_label.setText(f"  Frozen functions: {len(view.surface.used_expressions)}  ")
