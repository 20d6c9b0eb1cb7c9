"""Studio control panel: formula, parameters, line style, bucket settings.

Emits coarse signals; the view reads current values through getters.
"""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QGridLayout, QHBoxLayout,
    QLabel, QLineEdit, QPushButton, QGroupBox,
)

from bucket.engine import DEFAULT_GAP_CLOSE_RADIUS, DEFAULT_TOLERANCE
from expression import DEFAULT_EXPRESSION
from ui_common import ColorButton, ParamsWidget, add_slider_row, make_slider, slider_value


class StudioControls(QWidget):
    """Side panel with every user-facing setting."""

    expression_changed = pyqtSignal(str)
    style_changed = pyqtSignal()
    random_clicked = pyqtSignal()
    tilt_clicked = pyqtSignal()
    freeze_clicked = pyqtSignal()
    reset_clicked = pyqtSignal()
    magic_clicked = pyqtSignal()
    save_clicked = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(8, 8, 8, 8)

        # --- Function ---
        fn_group = QGroupBox("Function")
        fn_layout = QVBoxLayout(fn_group)

        row = QHBoxLayout()
        self.expression_edit = QLineEdit(DEFAULT_EXPRESSION)
        self.expression_edit.setPlaceholderText("f(x) =")
        self.expression_edit.textChanged.connect(self.expression_changed)
        row.addWidget(self.expression_edit)
        random_btn = QPushButton("Rnd")
        random_btn.setToolTip("Random function")
        random_btn.clicked.connect(self.random_clicked)
        row.addWidget(random_btn)
        fn_layout.addLayout(row)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #dc2626;")
        self.error_label.hide()
        fn_layout.addWidget(self.error_label)

        self.params_widget = ParamsWidget()
        for slider in self.params_widget.sliders:
            slider.valueChanged.connect(lambda _val: self.style_changed.emit())
        fn_layout.addWidget(self.params_widget)

        params_reset = QPushButton("Reset a, b, c")
        params_reset.clicked.connect(self.params_widget.reset)
        fn_layout.addWidget(params_reset)

        main_layout.addWidget(fn_group)

        # --- Line ---
        line_group = QGroupBox("Line")
        line_layout = QGridLayout(line_group)

        line_layout.addWidget(QLabel("Color"), 0, 0)
        self.line_color_btn = ColorButton("#111827")
        self.line_color_btn.color_changed.connect(lambda _c: self.style_changed.emit())
        line_layout.addWidget(self.line_color_btn, 0, 1)

        self.line_width_slider = make_slider(1, 10, 2, resolution=1)
        self.line_opacity_slider = make_slider(0.05, 1.0, 1.0, resolution=100)
        add_slider_row(line_layout, 1, "Thickness", self.line_width_slider, fmt="{:.0f}", unit=" px")
        add_slider_row(line_layout, 2, "Opacity", self.line_opacity_slider)
        self.line_width_slider.valueChanged.connect(lambda _val: self.style_changed.emit())
        self.line_opacity_slider.valueChanged.connect(lambda _val: self.style_changed.emit())

        tilt_btn = QPushButton("Tilt +10°")
        tilt_btn.clicked.connect(self.tilt_clicked)
        line_layout.addWidget(tilt_btn, 3, 0, 1, 3)

        main_layout.addWidget(line_group)

        # --- Bucket ---
        bucket_group = QGroupBox("Bucket")
        bucket_layout = QGridLayout(bucket_group)

        bucket_layout.addWidget(QLabel("Color"), 0, 0)
        self.bucket_color_btn = ColorButton("#111827")
        bucket_layout.addWidget(self.bucket_color_btn, 0, 1)

        self.tolerance_slider = make_slider(0, 200, DEFAULT_TOLERANCE, resolution=1)
        self.gap_close_slider = make_slider(0, 3, DEFAULT_GAP_CLOSE_RADIUS, resolution=1)
        add_slider_row(bucket_layout, 1, "Tolerance", self.tolerance_slider, fmt="{:.0f}")
        add_slider_row(bucket_layout, 2, "Close gaps", self.gap_close_slider, fmt="{:.0f}", unit=" px")

        magic_btn = QPushButton("Magic")
        magic_btn.setToolTip("Auto-fill 10 random points with random colors")
        magic_btn.clicked.connect(self.magic_clicked)
        bucket_layout.addWidget(magic_btn, 3, 0, 1, 3)

        main_layout.addWidget(bucket_group)

        # --- Canvas ---
        canvas_group = QGroupBox("Canvas")
        canvas_layout = QHBoxLayout(canvas_group)
        for text, signal in (
            ("Freeze", self.freeze_clicked),
            ("Reset", self.reset_clicked),
            ("Save PNG", self.save_clicked),
        ):
            btn = QPushButton(text)
            btn.clicked.connect(signal)
            canvas_layout.addWidget(btn)
        main_layout.addWidget(canvas_group)

        main_layout.addStretch()

    # -- Getters --

    def expression_text(self) -> str:
        return self.expression_edit.text()

    def set_expression_text(self, text: str) -> None:
        self.expression_edit.setText(text)

    def set_error(self, message: str | None) -> None:
        self.error_label.setText(message or "")
        self.error_label.setVisible(bool(message))

    def get_params(self):
        return self.params_widget.get_params()

    def line_color(self) -> str:
        return self.line_color_btn.color

    def line_width(self) -> float:
        return slider_value(self.line_width_slider)

    def line_opacity(self) -> float:
        return slider_value(self.line_opacity_slider)

    def bucket_color(self) -> str:
        return self.bucket_color_btn.color

    def tolerance(self) -> int:
        return self.tolerance_slider.value()

    def gap_close_radius(self) -> int:
        return self.gap_close_slider.value()
