"""
Glyph detection pipeline for font sheets.

Runs classification, blob extraction, merging and row organisation in
order and returns finalized glyph metadata in reading order.
"""

import logging
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from .classifier import DEFAULT_TOLERANCE
from .extraction import extract_blobs
from .merging import merge_blobs
from .models import Glyph
from .pixels import PixelGrid, decode_image
from .rows import organize_rows

logger = logging.getLogger(__name__)
console = logging.getLogger("console")


def detect_glyphs(grid: PixelGrid, tolerance: int = DEFAULT_TOLERANCE) -> List[Glyph]:
    """
    Detect every character on a sheet.

    Args:
        grid: Decoded sheet pixels
        tolerance: Ink classification tolerance

    Returns:
        Glyphs in row-major, left-to-right order with ``yoffset`` set
    """
    blobs = extract_blobs(grid, tolerance)
    merged = merge_blobs(blobs)
    glyphs = organize_rows(merged)

    logger.info(
        f"Detected {len(glyphs)} glyphs ({len(blobs)} blobs before merging) "
        f"on {grid.width}x{grid.height} sheet"
    )
    return glyphs


def detect_glyphs_in_file(
    path: Path | str,
    tolerance: int = DEFAULT_TOLERANCE,
) -> tuple:
    """
    Decode a sheet and detect its glyphs.

    Returns:
        Tuple of (PixelGrid, glyph list)

    Raises:
        ImageDecodeError: If the sheet cannot be decoded
    """
    grid = decode_image(path)
    return grid, detect_glyphs(grid, tolerance)


def realign_glyphs(
    grid: PixelGrid,
    previous: List[Glyph],
    tolerance: int = DEFAULT_TOLERANCE,
) -> List[Glyph]:
    """
    Re-run detection, keeping labels when the glyph count is unchanged.

    When the fresh detection finds exactly as many glyphs as ``previous``,
    each new glyph takes the char and id of the glyph at the same index.
    Otherwise the fresh list is returned as-is. Manually adjusted
    coordinates are always replaced by detected ones.
    """
    detected = detect_glyphs(grid, tolerance)

    if len(detected) != len(previous):
        logger.info(
            f"Realign: glyph count changed ({len(previous)} -> {len(detected)}), "
            "labels not carried over"
        )
        return detected

    return [
        new.copy(char=old.char, id=old.id)
        for new, old in zip(detected, previous)
    ]


def render_preview(
    grid: PixelGrid,
    glyphs: List[Glyph],
    output_path: Optional[Path | str] = None,
) -> np.ndarray:
    """
    Draw glyph boxes and labels over the sheet.

    Args:
        grid: Sheet pixels
        glyphs: Glyphs to outline
        output_path: If given, the preview is also written there

    Returns:
        RGB preview image
    """
    rgba = np.ascontiguousarray(grid.pixels)
    preview = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)

    # Transparent sheets render black; lift them onto white
    alpha = grid.pixels[:, :, 3]
    if alpha.size and alpha[0, 0] == 0:
        preview[alpha == 0] = (255, 255, 255)

    for glyph in glyphs:
        x, y, w, h = glyph.bbox
        cv2.rectangle(preview, (x, y), (x + w - 1, y + h - 1), (0, 255, 0), 1)

        label = glyph.char or str(glyph.id)
        label_pos = (x, y - 3) if y > 12 else (x, y + h + 12)
        cv2.putText(
            preview, label, label_pos,
            cv2.FONT_HERSHEY_SIMPLEX, 0.35, (0, 0, 255), 1
        )

    if output_path is not None:
        if not cv2.imwrite(str(output_path), preview):
            logger.error(f"Could not write preview to {output_path}")
        else:
            console.info(f"Preview written to {output_path}")

    return cv2.cvtColor(preview, cv2.COLOR_BGR2RGB)
