"""Manual corrections to a detected glyph list."""

import logging
from typing import Iterable, List

from .models import Glyph

logger = logging.getLogger(__name__)


def merge_selected(glyphs: List[Glyph], ids: Iterable[int]) -> List[Glyph]:
    """
    Combine the selected glyphs into one.

    The merged glyph covers the union of the selected boxes and keeps the id,
    char and offsets of the first selected glyph in list order. It is
    appended after the unselected glyphs. Fewer than two selected glyphs
    leaves the list unchanged.
    """
    selected_ids = set(ids)
    targets = [g for g in glyphs if g.id in selected_ids]
    if len(targets) < 2:
        return list(glyphs)

    min_x = min(g.x for g in targets)
    min_y = min(g.y for g in targets)
    max_x = max(g.right for g in targets)
    max_y = max(g.bottom for g in targets)
    width = max_x - min_x

    merged = targets[0].copy(
        x=min_x,
        y=min_y,
        width=width,
        height=max_y - min_y,
        xadvance=width + 1,
    )

    remaining = [g for g in glyphs if g.id not in selected_ids]
    logger.info(f"Merged glyphs {sorted(selected_ids)} into glyph {merged.id}")
    return remaining + [merged]


def delete_glyphs(glyphs: List[Glyph], ids: Iterable[int]) -> List[Glyph]:
    """Drop the glyphs with the given ids."""
    doomed = set(ids)
    return [g for g in glyphs if g.id not in doomed]


def update_glyph(glyphs: List[Glyph], updated: Glyph) -> List[Glyph]:
    """Replace the glyph sharing ``updated``'s id."""
    return [updated if g.id == updated.id else g for g in glyphs]


def count_unlabeled(glyphs: List[Glyph]) -> int:
    """Glyphs with no character assigned; they export with id -1."""
    return sum(1 for g in glyphs if not g.char)
