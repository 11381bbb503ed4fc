"""
Data model for bitmap font sheets.

Glyphs are plain mutable records so the merge step can grow bounding boxes
in place; the packer and the editing helpers always hand back new objects.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image


@dataclass
class Glyph:
    """Metadata for one character on a sheet."""

    # Stable identifier, assigned in discovery order
    id: int

    # Identified character ("" = not identified yet)
    char: str = ""

    # Pixel bounding box in the source (or atlas) image
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    # Rendering offsets and advance
    xoffset: int = 0
    yoffset: int = 0
    xadvance: int = 0

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def char_code(self) -> int:
        """Code point of the assigned character, or -1 when unset."""
        if self.char:
            return ord(self.char[0])
        return -1

    def contains(self, other: "Glyph") -> bool:
        """True if this glyph's box fully covers ``other``'s box."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and self.right >= other.right
            and self.bottom >= other.bottom
        )

    def copy(self, **changes) -> "Glyph":
        return replace(self, **changes)


@dataclass
class FontSettings:
    """Font-level metadata written to the BMFont ``info``/``common`` lines."""

    face: str = "CustomFont"
    size: int = 32
    bold: bool = False
    italic: bool = False
    line_height: int = 32
    base: int = 24
    scale_w: int = 512
    scale_h: int = 512

    # Extra spacing added to every glyph's xadvance on export
    tracking: int = 0

    @classmethod
    def for_sheet(
        cls,
        image_path: Path | str,
        image_size: Tuple[int, int],
        glyphs: List[Glyph],
        **overrides,
    ) -> "FontSettings":
        """
        Derive settings for a freshly loaded sheet.

        The face comes from the file name, the scale from the image size and
        the line height from the first detected glyph.

        Args:
            image_path: Path of the source sheet
            image_size: (width, height) of the sheet
            glyphs: Detected glyphs in reading order
            **overrides: Explicit values that win over derived ones

        Returns:
            FontSettings instance
        """
        width, height = image_size
        settings = cls(
            face=Path(image_path).stem or "CustomFont",
            scale_w=width,
            scale_h=height,
            line_height=glyphs[0].height + 2 if glyphs else 32,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(settings, **overrides)


@dataclass
class PackedAtlas:
    """Result of repacking glyphs into a compact texture."""

    width: int
    height: int
    glyphs: List[Glyph] = field(default_factory=list)

    # Composited RGBA canvas
    image: Optional[Image.Image] = None

    def save(self, path: Path | str) -> Path:
        """Encode the atlas canvas to disk."""
        path = Path(path)
        if self.image is None:
            raise ValueError("Atlas has no image to save")
        self.image.save(path)
        return path
