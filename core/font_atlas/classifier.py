"""
Ink/background classification for sheet pixels.

The background colour is sampled once from the top-left pixel. On a
transparent canvas anything sufficiently opaque is ink; on a solid canvas
anything far enough from the background colour in RGB space is ink.
"""

from typing import Sequence

import numpy as np

from .pixels import PixelGrid

DEFAULT_TOLERANCE = 20


def sample_background(grid: PixelGrid) -> tuple:
    """Background RGBA colour, taken from the top-left pixel."""
    return grid.pixel(0, 0)


def is_ink(
    pixel: Sequence[int],
    background: Sequence[int],
    tolerance: int = DEFAULT_TOLERANCE,
) -> bool:
    """
    Decide whether one RGBA pixel is ink relative to the background.

    Args:
        pixel: (r, g, b, a) of the pixel under test
        background: (r, g, b, a) of the sampled background
        tolerance: Alpha threshold on transparent canvases, RGB distance
                   threshold otherwise

    Returns:
        True if the pixel belongs to a glyph
    """
    r, g, b, a = (int(c) for c in pixel)
    bg_r, bg_g, bg_b, bg_a = (int(c) for c in background)

    if bg_a == 0:
        return a > tolerance

    # Compare squared integers so the result is exact
    dist_sq = (r - bg_r) ** 2 + (g - bg_g) ** 2 + (b - bg_b) ** 2
    return dist_sq > tolerance * tolerance if tolerance >= 0 else True


def ink_mask(grid: PixelGrid, tolerance: int = DEFAULT_TOLERANCE) -> np.ndarray:
    """
    Vectorised form of :func:`is_ink` over the whole grid.

    Returns:
        Boolean array of shape (height, width); True where the pixel is ink
    """
    if grid.width == 0 or grid.height == 0:
        return np.zeros((grid.height, grid.width), dtype=bool)

    pixels = grid.pixels.astype(np.int32)
    background = pixels[0, 0]

    if background[3] == 0:
        return pixels[:, :, 3] > tolerance

    if tolerance < 0:
        return np.ones((grid.height, grid.width), dtype=bool)

    diff = pixels[:, :, :3] - background[:3]
    dist_sq = np.sum(diff * diff, axis=2)
    return dist_sq > tolerance * tolerance
