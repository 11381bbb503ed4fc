#!/usr/bin/env python3
"""
Tests for BMFont (.fnt) generation, parsing and export to disk.
"""

import os
import sys

import numpy as np
import pytest
from PIL import Image

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.font_atlas import (
    FontSettings,
    Glyph,
    PixelGrid,
    detect_glyphs,
    export_font,
    generate_fnt,
    pack_texture,
    parse_fnt,
)


def sample_glyphs():
    return [
        Glyph(id=0, char="A", x=5, y=5, width=10, height=14, xadvance=11),
        Glyph(id=1, char="g", x=20, y=7, width=9, height=16, yoffset=2, xadvance=10),
        Glyph(id=2, char="", x=35, y=5, width=3, height=3, xadvance=4),
    ]


def test_header_lines():
    settings = FontSettings(face="Demo", size=24, bold=True, line_height=30, base=20,
                            scale_w=256, scale_h=128)
    lines = generate_fnt(sample_glyphs(), settings, "Demo.png").split("\n")

    assert lines[0].startswith('info face="Demo" size=24 bold=1 italic=0 ')
    assert lines[1].startswith("common lineHeight=30 base=20 scaleW=256 scaleH=128 pages=1")
    assert lines[2] == 'page id=0 file="Demo.png"'
    assert lines[3] == "chars count=3"
    assert len(lines) == 7


def test_char_lines_apply_tracking():
    settings = FontSettings(tracking=2)
    lines = generate_fnt(sample_glyphs(), settings, "sheet.png").split("\n")

    assert lines[4] == (
        "char id=65 x=5 y=5 width=10 height=14 xoffset=0 yoffset=0 "
        "xadvance=13 page=0 chnl=15"
    )
    assert lines[5] == (
        "char id=103 x=20 y=7 width=9 height=16 xoffset=0 yoffset=2 "
        "xadvance=12 page=0 chnl=15"
    )


def test_unlabeled_glyph_exports_as_minus_one():
    text = generate_fnt(sample_glyphs(), FontSettings(), "sheet.png")
    assert text.split("\n")[6].startswith("char id=-1 x=35 y=5 ")


def test_parse_round_trip():
    glyphs = sample_glyphs()
    settings = FontSettings(face="My Font", tracking=3)

    doc = parse_fnt(generate_fnt(glyphs, settings, "My Font.png"))

    assert doc.info["face"] == "My Font"
    assert doc.info["size"] == 32
    assert doc.common["lineHeight"] == 32
    assert doc.pages == [{"id": 0, "file": "My Font.png"}]
    assert doc.declared_count == 3
    assert doc.char_tuples()[0] == (65, 5, 5, 10, 14, 0, 0, 14)

    restored = doc.to_glyphs(tracking=3)
    assert [(g.char, g.bbox, g.yoffset, g.xadvance) for g in restored] == [
        (g.char, g.bbox, g.yoffset, g.xadvance) for g in glyphs
    ]


def test_parse_ignores_unknown_tags_and_blank_lines():
    text = (
        'info face="X" size=16\n'
        "\n"
        "common lineHeight=18 base=14\n"
        "chars count=1\n"
        "char id=33 x=1 y=2 width=3 height=4 xoffset=0 yoffset=1 xadvance=4 page=0 chnl=15\n"
        "kernings count=0\n"
    )
    doc = parse_fnt(text)

    assert doc.declared_count == 1
    assert doc.char_tuples() == [(33, 1, 2, 3, 4, 0, 1, 4)]


def test_font_settings_for_sheet():
    glyphs = sample_glyphs()
    settings = FontSettings.for_sheet("/tmp/fonts/pixel_serif.png", (300, 200), glyphs)

    assert settings.face == "pixel_serif"
    assert (settings.scale_w, settings.scale_h) == (300, 200)
    assert settings.line_height == 16

    overridden = FontSettings.for_sheet("x.png", (10, 10), [], line_height=None, face="Other")
    assert overridden.face == "Other"
    assert overridden.line_height == 32


def write_sheet(path):
    pixels = np.zeros((40, 60, 4), dtype=np.uint8)
    pixels[5:19, 5:15] = (0, 0, 0, 255)
    pixels[8:20, 30:38] = (0, 0, 0, 255)
    Image.fromarray(pixels).save(path)
    return PixelGrid(pixels)


def test_export_copies_source_sheet(tmp_path):
    source = tmp_path / "sheet.png"
    grid = write_sheet(source)
    glyphs = detect_glyphs(grid)
    glyphs[0].char = "A"

    settings = FontSettings.for_sheet(source, grid.size, glyphs, face="Demo Font")
    result = export_font(glyphs, settings, tmp_path / "out", source)

    assert result.fnt_path == tmp_path / "out" / "Demo_Font.fnt"
    assert result.image_path == tmp_path / "out" / "Demo_Font.png"
    assert result.image_path.read_bytes() == source.read_bytes()
    assert result.glyph_count == 2
    assert result.unlabeled_count == 1

    doc = parse_fnt(result.fnt_path.read_text(encoding="utf-8"))
    assert doc.pages[0]["file"] == "Demo_Font.png"
    assert [t[0] for t in doc.char_tuples()] == [65, -1]


def test_export_writes_packed_atlas(tmp_path):
    source = tmp_path / "sheet.png"
    grid = write_sheet(source)
    glyphs = detect_glyphs(grid)
    atlas = pack_texture(grid, glyphs)

    settings = FontSettings.for_sheet(source, (atlas.width, atlas.height), atlas.glyphs)
    result = export_font(atlas.glyphs, settings, tmp_path / "out", source, atlas=atlas)

    with Image.open(result.image_path) as image:
        assert image.size == (atlas.width, atlas.height)

    doc = parse_fnt(result.fnt_path.read_text(encoding="utf-8"))
    assert doc.common["scaleW"] == atlas.width
    assert [t[1:3] for t in doc.char_tuples()] == [(g.x, g.y) for g in atlas.glyphs]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
