"""Tests for curve/export.py: footer text, export geometry, PNG output."""

import numpy as np
import pytest
from PyQt6.QtGui import QImage

from curve.coloring import qimage_to_numpy
from curve.export import (
    CREDIT_LINE, FOOTER_LINE_HEIGHT, FOOTER_PADDING,
    compose_export, footer_height, footer_lines, save_png,
)
from curve.surface import RasterSurface
from raster_helpers import RED, WHITE


class TestFooterText:

    def test_credit_only(self):
        assert footer_lines(()) == [CREDIT_LINE]

    def test_expressions_joined(self):
        lines = footer_lines(["sin(x)", "x^2"])
        assert lines == ["Functions used: sin(x) | x^2", CREDIT_LINE]

    def test_height(self):
        assert footer_height(1) == FOOTER_LINE_HEIGHT + FOOTER_PADDING
        assert footer_height(2) == 42


class TestComposeExport:

    def test_size_with_expressions(self):
        surface = RasterSurface(100, 50)
        surface.freeze("sin(x)")
        image = compose_export(surface)
        assert (image.width(), image.height()) == (100, 92)

    def test_size_credit_only(self):
        image = compose_export(RasterSurface(100, 50))
        assert (image.width(), image.height()) == (100, 76)

    def test_size_with_pixel_ratio(self):
        surface = RasterSurface(100, 50, dpr=2.0)
        surface.freeze("sin(x)")
        image = compose_export(surface)
        assert (image.width(), image.height()) == (200, 184)

    def test_canvas_copied_above_footer(self):
        surface = RasterSurface(100, 50, bg_color="#ff0000")
        pixels = qimage_to_numpy(compose_export(surface))
        assert np.all(pixels[:50] == RED)
        # right end of the footer is past any text
        assert np.all(pixels[50:, 95:] == WHITE)

    def test_long_text_is_elided(self):
        surface = RasterSurface(60, 20)
        surface.freeze("sin(x) * " * 40 + "1")
        pixels = qimage_to_numpy(compose_export(surface))
        assert np.all(pixels[20:, 55:] == WHITE)


class TestSavePng:

    def test_writes_file(self, tmp_path):
        surface = RasterSurface(40, 20)
        surface.freeze("x")
        path = save_png(surface, tmp_path / "out.png")
        assert path.exists()
        image = QImage(str(path))
        assert (image.width(), image.height()) == (40, 62)

    def test_unwritable_path(self, tmp_path):
        surface = RasterSurface(10, 10)
        with pytest.raises(OSError):
            save_png(surface, tmp_path / "missing" / "out.png")
