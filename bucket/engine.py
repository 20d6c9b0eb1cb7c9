"""Edge-aware flood fill on a RasterSurface.

Pipeline for one fill, over a single read of the pixel buffer:

1. Barrier mask: pixels whose RGB distance from the background exceeds
   EDGE_THRESHOLD are curve/line pixels and block the fill.
2. Gap closing: the mask is dilated gap_close_radius times with an
   8-connected neighbourhood to seal small breaks in lines.
3. Carve-out: pixels within max(tolerance, CARVE_TOLERANCE_FLOOR) of the
   seed color are removed from the mask so already-filled or
   line-colored regions can be refilled.
4. Scanline fill through non-barrier pixels within tolerance of the seed.

Color distance is the Manhattan (sum of absolute channel differences)
distance, not Euclidean. Tolerances are expressed in those units.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy import ndimage

from bucket._numba_kernels import scanline_fill
from curve.coloring import A, hex_to_bgra
from curve.surface import BufferAccessError, RasterSurface

logger = logging.getLogger(__name__)

# Sum |RGB - background| above this marks a barrier pixel
EDGE_THRESHOLD = 40

# Carve-out always uses at least this tolerance
CARVE_TOLERANCE_FLOOR = 24

DEFAULT_TOLERANCE = 24
DEFAULT_GAP_CLOSE_RADIUS = 1

_EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def color_distance(pixels: np.ndarray, color: np.ndarray, channels: slice = slice(None)) -> np.ndarray:
    """Manhattan distance of every pixel to *color* over the given channels.

    Args:
        pixels: (..., 4) uint8 pixel array.
        color: (4,) pixel in the same channel order.
        channels: Channel slice; all four by default.

    Returns:
        int32 array of shape pixels.shape[:-1].
    """
    diff = pixels[..., channels].astype(np.int32) - color[channels].astype(np.int32)
    return np.abs(diff).sum(axis=-1)


def build_barrier_mask(
    pixels: np.ndarray,
    background: np.ndarray,
    edge_threshold: int = EDGE_THRESHOLD,
) -> np.ndarray:
    """Mark pixels that differ from the background by more than the threshold.

    Only the color channels count; alpha is ignored here.
    """
    return color_distance(pixels, background, slice(0, A)) > edge_threshold


def close_gaps(mask: np.ndarray, radius: int) -> np.ndarray:
    """Dilate a barrier mask *radius* times with an 8-connected neighbourhood.

    radius 0 returns an unchanged copy.
    """
    if radius <= 0:
        return mask.copy()
    # iterations=0 would mean "until stable" to scipy; guarded above
    return ndimage.binary_dilation(mask, structure=_EIGHT_CONNECTED, iterations=int(radius))


def carve_out(
    mask: np.ndarray,
    pixels: np.ndarray,
    target: np.ndarray,
    tolerance: int,
    floor: int = CARVE_TOLERANCE_FLOOR,
) -> np.ndarray:
    """Clear barrier pixels whose color is close to the seed color."""
    close = color_distance(pixels, target) <= max(tolerance, floor)
    return mask & ~close


def fillable_mask(
    pixels: np.ndarray,
    target: np.ndarray,
    background: np.ndarray,
    tolerance: int = DEFAULT_TOLERANCE,
    gap_close_radius: int = DEFAULT_GAP_CLOSE_RADIUS,
    edge_threshold: int = EDGE_THRESHOLD,
    carve_floor: int = CARVE_TOLERANCE_FLOOR,
) -> tuple[np.ndarray, np.ndarray]:
    """Compute the final barrier mask and the fill predicate for a target color.

    Returns:
        (barrier, fillable) boolean (H, W) arrays. A pixel is fillable when
        it is not a barrier and within *tolerance* of *target*.
    """
    barrier = build_barrier_mask(pixels, background, edge_threshold)
    barrier = close_gaps(barrier, gap_close_radius)
    barrier = carve_out(barrier, pixels, target, tolerance, carve_floor)
    fillable = ~barrier & (color_distance(pixels, target) <= tolerance)
    return barrier, fillable


def flood_fill(
    surface: RasterSurface,
    seed: tuple[int, int],
    fill_color: str,
    tolerance: int = DEFAULT_TOLERANCE,
    gap_close_radius: int = DEFAULT_GAP_CLOSE_RADIUS,
    background_color: str = "#ffffff",
    bake: bool = True,
    edge_threshold: int = EDGE_THRESHOLD,
    carve_floor: int = CARVE_TOLERANCE_FLOOR,
) -> bool:
    """Recolor the region around *seed* without leaking across curve lines.

    Args:
        surface: Surface to modify in place.
        seed: (x, y) in device pixels.
        fill_color: "#RGB" / "#RRGGBB"; written at full opacity.
        tolerance: Max Manhattan RGBA distance from the seed color.
        gap_close_radius: Barrier dilation passes.
        background_color: Color that is never a barrier.
        bake: Re-freeze the surface afterwards so later renders stack on
            top of the fill.
        edge_threshold: Barrier threshold against the background.
        carve_floor: Minimum carve-out tolerance.

    Returns:
        True if pixels changed; False when the fill is a no-op (seed
        outside the buffer, seed already the fill color, or seed on a
        barrier).

    Raises:
        BufferAccessError: if the surface pixels cannot be read.
    """
    if tolerance < 0 or gap_close_radius < 0:
        raise ValueError("tolerance and gap_close_radius must be >= 0")

    x, y = int(seed[0]), int(seed[1])
    if not (0 <= x < surface.device_width and 0 <= y < surface.device_height):
        logger.debug("Fill seed (%d, %d) outside surface; no-op", x, y)
        return False

    try:
        pixels = surface.read_pixels()
    except BufferAccessError:
        logger.warning("Fill aborted: surface pixels unreadable")
        raise

    fill = hex_to_bgra(fill_color)
    target = pixels[y, x].copy()
    if np.array_equal(target, fill):
        logger.debug("Seed already has fill color; no-op")
        return False

    background = hex_to_bgra(background_color)
    barrier, fillable = fillable_mask(
        pixels, target, background,
        tolerance=tolerance,
        gap_close_radius=gap_close_radius,
        edge_threshold=edge_threshold,
        carve_floor=carve_floor,
    )
    if barrier[y, x]:
        logger.debug("Seed (%d, %d) is a barrier pixel; no-op", x, y)
        return False

    region = scanline_fill(fillable, x, y)
    count = int(region.sum())
    if count == 0:
        return False

    pixels[region] = fill
    surface.write_pixels(pixels)
    if bake:
        surface.bake()

    logger.debug("Filled %d px from seed (%d, %d) with %s", count, x, y, fill_color)
    return True
