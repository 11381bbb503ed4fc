"""
Row grouping and vertical offsets.

Glyphs are clustered into visual text lines with a single first-fit pass
over an approximate reading order. Within a line, each glyph's ``yoffset``
is its distance below the line's topmost glyph.

The clustering is order-dependent: a glyph is compared only against the
currently open row, whose bounds grow as members join.
"""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import List

from .models import Glyph

logger = logging.getLogger(__name__)

# Top edges closer than this are treated as the same line when sorting
ROW_SORT_TOLERANCE = 20

# A glyph joins a row if its centre is within max(height)/ROW_CENTER_DIVISOR
ROW_CENTER_DIVISOR = 1.5


@dataclass
class GlyphRow:
    """A horizontal band of glyphs treated as one line of text."""

    y: int  # Running top of the band
    height: int  # Running height of the band
    glyphs: List[Glyph] = field(default_factory=list)

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def min_y(self) -> int:
        """Top of the highest member; reference for yoffset."""
        return min(g.y for g in self.glyphs)

    @classmethod
    def start(cls, glyph: Glyph) -> "GlyphRow":
        return cls(y=glyph.y, height=glyph.height, glyphs=[glyph])

    def accepts(self, glyph: Glyph) -> bool:
        limit = max(glyph.height, self.height) / ROW_CENTER_DIVISOR
        return abs(glyph.center_y - self.center_y) < limit

    def add(self, glyph: Glyph) -> None:
        self.glyphs.append(glyph)
        self.y = min(self.y, glyph.y)
        self.height = max(self.height, glyph.height + (glyph.y - self.y))


def _reading_order(a: Glyph, b: Glyph) -> int:
    if abs(a.y - b.y) > ROW_SORT_TOLERANCE:
        return a.y - b.y
    return a.x - b.x


def sort_reading_order(glyphs: List[Glyph]) -> List[Glyph]:
    """Approximate top-to-bottom, left-to-right order."""
    return sorted(glyphs, key=cmp_to_key(_reading_order))


def group_rows(glyphs: List[Glyph]) -> List[GlyphRow]:
    """Cluster glyphs (already in reading order) into rows, first fit."""
    rows: List[GlyphRow] = []
    if not glyphs:
        return rows

    current = GlyphRow.start(glyphs[0])
    for glyph in glyphs[1:]:
        if current.accepts(glyph):
            current.add(glyph)
        else:
            rows.append(current)
            current = GlyphRow.start(glyph)
    rows.append(current)
    return rows


def organize_rows(glyphs: List[Glyph]) -> List[Glyph]:
    """
    Order glyphs by line and assign each one's ``yoffset``.

    Args:
        glyphs: Merged glyphs. Their ``yoffset`` fields are updated in place.

    Returns:
        The same glyph objects, flattened row by row, left to right
    """
    rows = group_rows(sort_reading_order(glyphs))

    ordered: List[Glyph] = []
    for row in rows:
        row_min_y = row.min_y
        row.glyphs.sort(key=lambda g: g.x)
        for glyph in row.glyphs:
            glyph.yoffset = glyph.y - row_min_y
            ordered.append(glyph)

    logger.debug(f"Organized {len(ordered)} glyphs into {len(rows)} rows")
    return ordered
