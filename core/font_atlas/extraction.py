"""
Connected-component extraction.

Finds every 4-connected region of ink pixels and reports its bounding box.
Components are discovered in row-major order, so identical pixel data always
yields the same blobs with the same ids.
"""

import logging
from collections import deque
from typing import List

import numpy as np

from .classifier import DEFAULT_TOLERANCE, ink_mask
from .models import Glyph
from .pixels import PixelGrid

logger = logging.getLogger(__name__)


def extract_blobs(grid: PixelGrid, tolerance: int = DEFAULT_TOLERANCE) -> List[Glyph]:
    """
    Extract one bounding box per 4-connected ink region.

    Args:
        grid: Source pixels
        tolerance: Classification tolerance (see :func:`classifier.is_ink`)

    Returns:
        Glyphs with ids 0..n-1 in discovery order, ``char`` empty,
        offsets zero and ``xadvance = width + 1``
    """
    mask = ink_mask(grid, tolerance)
    return extract_blobs_from_mask(mask)


def extract_blobs_from_mask(mask: np.ndarray) -> List[Glyph]:
    """Flood-fill a boolean ink mask of shape (height, width)."""
    height, width = mask.shape
    flat = mask.ravel()
    visited = np.zeros(width * height, dtype=bool)
    blobs: List[Glyph] = []

    # Non-ink pixels can never start a blob, so only ink indices are scanned;
    # flatnonzero returns them in row-major order
    for start in np.flatnonzero(flat):
        start = int(start)
        if visited[start]:
            continue

        min_x = max_x = start % width
        min_y = max_y = start // width

        visited[start] = True
        queue = deque([start])

        while queue:
            current = queue.popleft()
            cy, cx = divmod(current, width)

            if cx < min_x:
                min_x = cx
            if cx > max_x:
                max_x = cx
            if cy < min_y:
                min_y = cy
            if cy > max_y:
                max_y = cy

            # Right, left, down, up
            if cx + 1 < width:
                n = current + 1
                if not visited[n] and flat[n]:
                    visited[n] = True
                    queue.append(n)
            if cx > 0:
                n = current - 1
                if not visited[n] and flat[n]:
                    visited[n] = True
                    queue.append(n)
            if cy + 1 < height:
                n = current + width
                if not visited[n] and flat[n]:
                    visited[n] = True
                    queue.append(n)
            if cy > 0:
                n = current - width
                if not visited[n] and flat[n]:
                    visited[n] = True
                    queue.append(n)

        w = max_x - min_x + 1
        h = max_y - min_y + 1
        if w <= 0 or h <= 0:
            continue

        blobs.append(Glyph(
            id=len(blobs),
            x=min_x,
            y=min_y,
            width=w,
            height=h,
            xadvance=w + 1,
        ))

    logger.debug(f"Extracted {len(blobs)} blobs from {width}x{height} mask")
    return blobs
