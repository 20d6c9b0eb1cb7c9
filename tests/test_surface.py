"""Tests for curve/surface.py: sizing, snapshot state, pixel access."""

import numpy as np
import pytest

from curve.surface import BufferAccessError, RasterSurface, device_size
from raster_helpers import RED, WHITE, white_pixels


class TestGeometry:

    def test_device_size_rounds_up(self):
        assert device_size(100.5, 50.2, 1.5) == (151, 76)

    def test_surface_device_size(self):
        surface = RasterSurface(100.5, 50.2, 1.5)
        assert (surface.device_width, surface.device_height) == (151, 76)
        assert surface.width == 100.5
        assert surface.dpr == 1.5

    def test_logical_to_device(self):
        surface = RasterSurface(50, 50, dpr=2.0)
        assert surface.logical_to_device(10.7, 3.2) == (21, 6)

    @pytest.mark.parametrize("width, height, dpr", [(-1, 10, 1.0), (10, -1, 1.0), (10, 10, 0.0)])
    def test_invalid_resize(self, width, height, dpr):
        with pytest.raises(ValueError):
            RasterSurface(width, height, dpr)

    def test_resize_refills_background(self):
        surface = RasterSurface(10, 10, bg_color="#ff0000")
        surface.write_pixels(white_pixels(10, 10))
        surface.resize(20, 5, 2.0)
        pixels = surface.read_pixels()
        assert pixels.shape == (10, 40, 4)
        assert np.all(pixels == RED)

    def test_resize_keeps_snapshot(self):
        surface = RasterSurface(10, 10)
        surface.freeze("x")
        surface.resize(30, 30)
        assert surface.has_snapshot
        assert surface.used_expressions == ("x",)


class TestSnapshot:

    def test_initially_clear(self):
        surface = RasterSurface(10, 10)
        assert not surface.has_snapshot
        assert surface.frozen is None
        assert surface.used_expressions == ()

    def test_freeze_records_expressions_in_order(self):
        surface = RasterSurface(10, 10)
        surface.freeze("sin(x)")
        surface.freeze("  cos(x) ")
        surface.freeze("sin(x)")
        assert surface.used_expressions == ("sin(x)", "cos(x)")

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_expression_not_recorded(self, text):
        surface = RasterSurface(10, 10)
        surface.freeze(text)
        assert surface.has_snapshot
        assert surface.used_expressions == ()

    def test_bake_does_not_record(self):
        surface = RasterSurface(10, 10)
        surface.bake()
        assert surface.has_snapshot
        assert surface.used_expressions == ()

    def test_snapshot_is_a_copy(self):
        surface = RasterSurface(4, 4)
        surface.freeze("x")
        pixels = surface.read_pixels()
        pixels[:] = RED
        surface.write_pixels(pixels)
        frozen = surface.frozen
        assert frozen.pixelColor(0, 0).red() == 255
        assert frozen.pixelColor(0, 0).green() == 255

    def test_reset(self):
        surface = RasterSurface(8, 8)
        pixels = surface.read_pixels()
        pixels[:] = RED
        surface.write_pixels(pixels)
        surface.freeze("x")
        surface.reset()
        assert not surface.has_snapshot
        assert surface.used_expressions == ()
        assert np.all(surface.read_pixels() == WHITE)


class TestPixelAccess:

    def test_background_fill(self):
        surface = RasterSurface(5, 4, bg_color="#ff0000")
        pixels = surface.read_pixels()
        assert pixels.shape == (4, 5, 4)
        assert np.all(pixels == RED)

    def test_write_then_read(self):
        pixels = white_pixels(6, 3)
        pixels[1, 2] = RED
        surface = RasterSurface(6, 3)
        surface.write_pixels(pixels)
        np.testing.assert_array_equal(surface.read_pixels(), pixels)

    def test_write_size_mismatch(self):
        surface = RasterSurface(6, 3)
        with pytest.raises(ValueError):
            surface.write_pixels(white_pixels(3, 6))

    def test_read_null_image(self):
        surface = RasterSurface(0, 0)
        with pytest.raises(BufferAccessError):
            surface.read_pixels()
