"""Shared UI widgets: slider helpers, the a/b/c parameter panel, color button."""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QWidget, QGridLayout, QSlider, QLabel, QPushButton, QColorDialog,
)

from expression import ParameterSet


# ---------------------------------------------------------------------------
# Slider helpers
# ---------------------------------------------------------------------------

def make_slider(minimum, maximum, value, resolution=100):
    """Create an integer QSlider that maps to float values.

    The slider range is [minimum*resolution, maximum*resolution].
    """
    slider = QSlider(Qt.Orientation.Horizontal)
    slider.setMinimum(round(minimum * resolution))
    slider.setMaximum(round(maximum * resolution))
    slider.setValue(round(value * resolution))
    slider.resolution = resolution
    return slider


def slider_value(slider):
    """Read the float value from a slider created by make_slider."""
    return slider.value() / slider.resolution


def add_slider_row(layout, row, label_text, slider, fmt="{:.2f}", unit=""):
    """Add label | slider | live value label to a grid layout."""
    label = QLabel(label_text)
    value_label = QLabel()
    value_label.setMinimumWidth(48)
    value_label.setAlignment(
        Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
    )
    layout.addWidget(label, row, 0)
    layout.addWidget(slider, row, 1)
    layout.addWidget(value_label, row, 2)

    def _update(_val, vl=value_label, sl=slider):
        vl.setText(fmt.format(slider_value(sl)) + unit)

    slider.valueChanged.connect(_update)
    _update(slider.value())
    return value_label


# ---------------------------------------------------------------------------
# ParamsWidget
# ---------------------------------------------------------------------------

class ParamsWidget(QWidget):
    """Sliders for the formula parameters a, b, c (step 0.1).

    a and b span [-10, 10]; c spans [0, 10]. Call get_params() to read
    the current values; the parent connects slider.valueChanged.
    """

    DEFAULTS = ParameterSet()

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.a_slider = make_slider(-10, 10, self.DEFAULTS.a, resolution=10)
        self.b_slider = make_slider(-10, 10, self.DEFAULTS.b, resolution=10)
        self.c_slider = make_slider(0, 10, self.DEFAULTS.c, resolution=10)

        add_slider_row(layout, 0, "a", self.a_slider, fmt="{:.1f}")
        add_slider_row(layout, 1, "b", self.b_slider, fmt="{:.1f}")
        add_slider_row(layout, 2, "c", self.c_slider, fmt="{:.1f}")

    @property
    def sliders(self):
        return (self.a_slider, self.b_slider, self.c_slider)

    def get_params(self):
        """Return a ParameterSet from the current slider values."""
        return ParameterSet(
            a=slider_value(self.a_slider),
            b=slider_value(self.b_slider),
            c=slider_value(self.c_slider),
        )

    def set_params(self, params):
        """Set slider positions from a ParameterSet."""
        for slider, value in zip(self.sliders, (params.a, params.b, params.c)):
            slider.setValue(round(value * slider.resolution))

    def reset(self):
        self.set_params(self.DEFAULTS)


# ---------------------------------------------------------------------------
# ColorButton
# ---------------------------------------------------------------------------

class ColorButton(QPushButton):
    """Swatch button that opens a color dialog and emits the picked hex."""

    color_changed = pyqtSignal(str)

    def __init__(self, color="#111827", parent=None):
        super().__init__(parent)
        self.setFixedSize(32, 24)
        self._color = color
        self._apply_swatch()
        self.clicked.connect(self._pick)

    @property
    def color(self):
        return self._color

    def set_color(self, color):
        self._color = color
        self._apply_swatch()
        self.color_changed.emit(color)

    def _apply_swatch(self):
        self.setStyleSheet(
            f"background-color: {self._color}; border: 1px solid #ccc; border-radius: 3px;"
        )

    def _pick(self):
        picked = QColorDialog.getColor(QColor(self._color), self, "Pick color")
        if picked.isValid():
            self.set_color(picked.name())
