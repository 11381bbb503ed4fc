"""
BMFont text (.fnt) serialization.

Writes the AngelCode text format: one ``info``, ``common`` and ``page``
line, a ``chars count`` line and one ``char`` line per glyph. The parser
reads the same format back, which is also enough to load simple ``.fnt``
files produced by other tools.
"""

import re
import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .models import FontSettings, Glyph

CHAR_FIELDS = ("id", "x", "y", "width", "height", "xoffset", "yoffset", "xadvance")


def _flag(value: bool) -> int:
    return 1 if value else 0


def generate_fnt(glyphs: List[Glyph], settings: FontSettings, image_file_name: str) -> str:
    """
    Render glyph metadata as BMFont text.

    Args:
        glyphs: Finalized glyphs, written in list order
        settings: Font-level metadata
        image_file_name: File name of the texture page

    Returns:
        The .fnt text, lines joined with newlines
    """
    lines = [
        f'info face="{settings.face}" size={settings.size} bold={_flag(settings.bold)} '
        f'italic={_flag(settings.italic)} charset="" unicode=1 stretchH=100 smooth=1 aa=1 '
        f'padding=0,0,0,0 spacing=1,1 outline=0',
        f'common lineHeight={settings.line_height} base={settings.base} '
        f'scaleW={settings.scale_w} scaleH={settings.scale_h} pages=1 packed=0 '
        f'alphaChnl=1 redChnl=0 greenChnl=0 blueChnl=0',
        f'page id=0 file="{image_file_name}"',
        f'chars count={len(glyphs)}',
    ]

    tracking = settings.tracking or 0
    for g in glyphs:
        lines.append(
            f"char id={g.char_code} x={g.x} y={g.y} width={g.width} height={g.height} "
            f"xoffset={g.xoffset} yoffset={g.yoffset} xadvance={g.xadvance + tracking} "
            f"page=0 chnl=15"
        )

    return "\n".join(lines)


@dataclass
class FntDocument:
    """Parsed contents of a BMFont text file."""

    info: Dict[str, object] = field(default_factory=dict)
    common: Dict[str, object] = field(default_factory=dict)
    pages: List[Dict[str, object]] = field(default_factory=list)
    chars: List[Dict[str, object]] = field(default_factory=list)
    declared_count: int = 0

    def char_tuples(self) -> List[Tuple[int, ...]]:
        """(id, x, y, width, height, xoffset, yoffset, xadvance) per char line."""
        return [tuple(int(c[name]) for name in CHAR_FIELDS) for c in self.chars]

    def to_glyphs(self, tracking: int = 0) -> List[Glyph]:
        """
        Rebuild glyphs from char lines.

        ``tracking`` is subtracted from xadvance to undo the export-time
        adjustment. Glyph ids are assigned by line order.
        """
        glyphs = []
        for index, c in enumerate(self.chars):
            code = int(c["id"])
            glyphs.append(Glyph(
                id=index,
                char=chr(code) if code >= 0 else "",
                x=int(c["x"]),
                y=int(c["y"]),
                width=int(c["width"]),
                height=int(c["height"]),
                xoffset=int(c["xoffset"]),
                yoffset=int(c["yoffset"]),
                xadvance=int(c["xadvance"]) - tracking,
            ))
        return glyphs


_INT_RE = re.compile(r"^-?\d+$")


def _parse_value(raw: str) -> object:
    if _INT_RE.match(raw):
        return int(raw)
    return raw


def _parse_line(line: str) -> Tuple[str, Dict[str, object]]:
    tokens = shlex.split(line, posix=True)
    if not tokens:
        return "", {}
    tag, pairs = tokens[0], {}
    for token in tokens[1:]:
        key, sep, value = token.partition("=")
        if sep:
            pairs[key] = _parse_value(value)
    return tag, pairs


def parse_fnt(text: str) -> FntDocument:
    """
    Parse BMFont text produced by :func:`generate_fnt`.

    Unknown tags (``kerning``, ``kernings``) are ignored.

    Raises:
        ValueError: If a line cannot be tokenized
    """
    doc = FntDocument()
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            tag, pairs = _parse_line(line)
        except ValueError as e:
            raise ValueError(f"Malformed .fnt line {line_no}: {line!r}") from e

        if tag == "info":
            doc.info = pairs
        elif tag == "common":
            doc.common = pairs
        elif tag == "page":
            doc.pages.append(pairs)
        elif tag == "chars":
            doc.declared_count = int(pairs.get("count", 0))
        elif tag == "char":
            doc.chars.append(pairs)

    return doc
