"""
Texture repacking.

Crops every glyph out of the source sheet and lays the crops out again on a
compact power-of-two canvas using shelf packing: items go left to right,
tallest first, and a new shelf opens whenever the current one is full.
This is a heuristic, not an optimal packing.
"""

import logging
import math
from dataclasses import dataclass
from typing import List

from PIL import Image

from .errors import PackingError
from .models import Glyph, PackedAtlas
from .pixels import PixelGrid

logger = logging.getLogger(__name__)

# Spacing around and between packed glyphs
PACK_PADDING = 2

# Smallest atlas width
MIN_ATLAS_WIDTH = 128

# Extra area allowed for padding and fragmentation losses
AREA_SLACK = 1.1


@dataclass
class _PackItem:
    glyph: Glyph
    image: Image.Image
    new_x: int = 0
    new_y: int = 0

    @property
    def width(self) -> int:
        return self.glyph.width

    @property
    def height(self) -> int:
        return self.glyph.height


def atlas_width_for(total_area: int) -> int:
    """Smallest power of two >= ceil(sqrt(area * slack)), at least 128."""
    side = math.ceil(math.sqrt(total_area * AREA_SLACK))
    width = MIN_ATLAS_WIDTH
    while width < side:
        width *= 2
    return width


def shelf_pack(sizes: List[tuple], target_width: int, padding: int = PACK_PADDING):
    """
    Place rectangles on shelves in the given order.

    An item wider than ``target_width - 2 * padding`` is not resized: it
    opens a fresh shelf at ``x = padding`` and runs past the right edge, so
    its pixels are clipped when composited. When such an item comes first,
    the shelf it closes is empty and only adds one padding of height.

    Args:
        sizes: (width, height) per item, already in packing order
        target_width: Width of the atlas
        padding: Margin around and between items

    Returns:
        Tuple of (positions, total_height) where positions is a list of
        (x, y) in the same order as ``sizes``
    """
    x = padding
    y = padding
    shelf_height = 0
    positions = []

    for w, h in sizes:
        if x + w + padding > target_width:
            x = padding
            y += shelf_height + padding
            shelf_height = 0

        positions.append((x, y))
        shelf_height = max(shelf_height, h)
        x += w + padding

    return positions, y + shelf_height + padding


def pack_texture(
    grid: PixelGrid,
    glyphs: List[Glyph],
    padding: int = PACK_PADDING,
) -> PackedAtlas:
    """
    Repack glyph pixels into a compact square-ish atlas.

    Args:
        grid: The sheet the glyphs refer to
        glyphs: Glyphs whose rectangles lie inside ``grid``
        padding: Margin around and between packed glyphs

    Returns:
        PackedAtlas with new glyph records (only x/y changed), sorted by id

    Raises:
        PackingError: If the atlas canvas cannot be created
    """
    source = grid.to_pil()

    items = [
        _PackItem(glyph=g, image=source.crop((g.x, g.y, g.right, g.bottom)))
        for g in glyphs
    ]

    # Tallest first keeps shelves even; sorted() is stable for ties
    items = sorted(items, key=lambda item: -item.height)

    total_area = sum(item.width * item.height for item in items)
    target_width = atlas_width_for(total_area)

    positions, final_height = shelf_pack(
        [(item.width, item.height) for item in items], target_width, padding
    )
    for item, (px, py) in zip(items, positions):
        item.new_x = px
        item.new_y = py

    try:
        canvas = Image.new("RGBA", (target_width, final_height), (0, 0, 0, 0))
    except (MemoryError, ValueError) as e:
        raise PackingError(
            f"Could not create {target_width}x{final_height} atlas canvas: {e}"
        ) from e

    new_glyphs: List[Glyph] = []
    for item in items:
        canvas.paste(item.image, (item.new_x, item.new_y))
        new_glyphs.append(item.glyph.copy(x=item.new_x, y=item.new_y))

    new_glyphs.sort(key=lambda g: g.id)

    logger.info(
        f"Packed {len(new_glyphs)} glyphs into {target_width}x{final_height} atlas "
        f"(source {grid.width}x{grid.height})"
    )
    return PackedAtlas(
        width=target_width,
        height=final_height,
        glyphs=new_glyphs,
        image=canvas,
    )
