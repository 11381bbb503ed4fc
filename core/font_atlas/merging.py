"""
Merging of multi-part characters.

Characters such as ``i``, ``j``, ``!``, ``:``, ``;``, ``=`` and ``?`` are
drawn as several disjoint ink regions. Extraction reports one blob per
region; this module fuses blobs that sit above one another with a small
vertical gap so that each logical character ends up as a single glyph.

The horizontal test is deliberately permissive (any positive overlap), so an
accent offset from its body still merges. In dense layouts this can fuse
neighbouring characters; that behaviour is kept as-is.
"""

import logging
from typing import Dict, List

from .models import Glyph

logger = logging.getLogger(__name__)

# Vertical overlap tolerated between two parts (pixels)
MAX_VERTICAL_OVERLAP = 5

# Minimum allowed gap, and the gap as a fraction of the taller part's height
MIN_ALLOWED_GAP = 5
GAP_HEIGHT_RATIO = 0.5


def horizontal_overlap(g1: Glyph, g2: Glyph) -> int:
    """Width of the shared horizontal interval (negative when apart)."""
    return min(g1.right, g2.right) - max(g1.x, g2.x)


def allowed_gap(g1: Glyph, g2: Glyph) -> float:
    """Largest vertical gap (exclusive) that still counts as one character."""
    return max(MIN_ALLOWED_GAP, GAP_HEIGHT_RATIO * max(g1.height, g2.height))


def should_merge(g1: Glyph, g2: Glyph) -> bool:
    """
    Decide whether ``g2`` is another part of the character ``g1``.

    ``g1`` is treated as the upper part: the gap is measured from the bottom
    of ``g1`` to the top of ``g2``.
    """
    if horizontal_overlap(g1, g2) <= 0:
        return False

    dist_y = g2.y - g1.bottom
    return -MAX_VERTICAL_OVERLAP <= dist_y < allowed_gap(g1, g2)


def union_into(target: Glyph, other: Glyph) -> None:
    """Grow ``target`` to cover ``other`` and refresh its advance."""
    new_x = min(target.x, other.x)
    new_y = min(target.y, other.y)
    new_right = max(target.right, other.right)
    new_bottom = max(target.bottom, other.bottom)

    target.x = new_x
    target.y = new_y
    target.width = new_right - new_x
    target.height = new_bottom - new_y
    target.xadvance = target.width + 1


def merge_blobs(glyphs: List[Glyph]) -> List[Glyph]:
    """
    Fuse blobs belonging to one logical character, to a fixed point.

    Each pass sorts the working set by top edge and scans every ordered
    pair; the first match is merged and the scan restarts, so bounding boxes
    are always current before the next pair is evaluated. A pass without a
    merge ends the loop.

    Args:
        glyphs: Blobs to merge; ids must be unique. Not modified.

    Returns:
        New list of merged glyphs, sorted by top edge

    Raises:
        ValueError: If two input glyphs share an id
    """
    store: Dict[int, Glyph] = {}
    for glyph in glyphs:
        if glyph.id in store:
            raise ValueError(f"Duplicate glyph id {glyph.id}")
        store[glyph.id] = glyph.copy()

    active: List[int] = [g.id for g in glyphs]
    merge_count = 0

    while True:
        active.sort(key=lambda gid: store[gid].y)
        pair = _find_merge_pair(store, active)
        if pair is None:
            break

        keep_id, drop_id = pair
        union_into(store[keep_id], store[drop_id])
        active.remove(drop_id)
        del store[drop_id]
        merge_count += 1
        logger.debug(f"Merged blob {drop_id} into {keep_id} -> bbox {store[keep_id].bbox}")

    if merge_count:
        logger.info(f"Merged {merge_count} blob parts: {len(glyphs)} -> {len(active)} glyphs")

    return [store[gid] for gid in active]


def _find_merge_pair(store: Dict[int, Glyph], active: List[int]):
    """First (keep_id, drop_id) pair in scan order, or None."""
    for id1 in active:
        g1 = store[id1]
        for id2 in active:
            if id1 == id2:
                continue
            if should_merge(g1, store[id2]):
                return id1, id2
    return None
