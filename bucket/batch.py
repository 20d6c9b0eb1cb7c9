"""Batch fills: many flood fills in sequence, e.g. the "magic" random fill.

Each fill reads the buffer left by the previous one, so fills run one
after another. on_yield is called periodically so a host UI can present
the surface between fills.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import NamedTuple

import numpy as np

from bucket.engine import (
    DEFAULT_GAP_CLOSE_RADIUS, DEFAULT_TOLERANCE, flood_fill,
)
from curve.coloring import random_hex
from curve.surface import RasterSurface

logger = logging.getLogger(__name__)

# Fills between host yields
DEFAULT_YIELD_EVERY = 8

# Number of fills for the magic action
MAGIC_FILL_COUNT = 10


class FillRequest(NamedTuple):
    """One fill in a batch: device-pixel seed and hex color."""

    seed: tuple[int, int]
    color: str


def fill_many(
    surface: RasterSurface,
    requests: Iterable[FillRequest],
    tolerance: int = DEFAULT_TOLERANCE,
    gap_close_radius: int = DEFAULT_GAP_CLOSE_RADIUS,
    background_color: str = "#ffffff",
    on_yield: Callable[[], None] | None = None,
    yield_every: int = DEFAULT_YIELD_EVERY,
) -> int:
    """Apply fills in order, yielding to the host every *yield_every* fills.

    on_yield runs after fill i whenever i % yield_every == 0.

    Returns:
        Number of fills that changed pixels.
    """
    changed = 0
    for i, request in enumerate(requests):
        if flood_fill(
            surface, request.seed, request.color,
            tolerance=tolerance,
            gap_close_radius=gap_close_radius,
            background_color=background_color,
        ):
            changed += 1
        if on_yield is not None and yield_every > 0 and i % yield_every == 0:
            on_yield()
    return changed


def random_requests(
    surface: RasterSurface,
    count: int,
    rng: np.random.Generator,
) -> list[FillRequest]:
    """Uniformly random seeds over the device buffer with random colors."""
    requests = []
    for _ in range(count):
        x = int(rng.integers(0, surface.device_width))
        y = int(rng.integers(0, surface.device_height))
        requests.append(FillRequest((x, y), random_hex(rng)))
    return requests


def fill_random_points(
    surface: RasterSurface,
    count: int = MAGIC_FILL_COUNT,
    tolerance: int = DEFAULT_TOLERANCE,
    gap_close_radius: int = DEFAULT_GAP_CLOSE_RADIUS,
    background_color: str = "#ffffff",
    rng: np.random.Generator | None = None,
    on_yield: Callable[[], None] | None = None,
    yield_every: int = DEFAULT_YIELD_EVERY,
) -> int:
    """Fill *count* random points with random colors.

    Returns:
        Number of fills that changed pixels.
    """
    if surface.device_width == 0 or surface.device_height == 0:
        return 0
    if rng is None:
        rng = np.random.default_rng()
    requests = random_requests(surface, count, rng)
    changed = fill_many(
        surface, requests,
        tolerance=tolerance,
        gap_close_radius=gap_close_radius,
        background_color=background_color,
        on_yield=on_yield,
        yield_every=yield_every,
    )
    logger.info("Random fill: %d of %d fills changed the surface", changed, count)
    return changed
