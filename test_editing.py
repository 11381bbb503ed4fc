#!/usr/bin/env python3
"""
Tests for manual glyph corrections and re-detection.
"""

import os
import sys

import numpy as np
import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.font_atlas import (
    Glyph,
    PixelGrid,
    count_unlabeled,
    delete_glyphs,
    detect_glyphs,
    merge_selected,
    realign_glyphs,
    render_preview,
    update_glyph,
)


def glyphs_abc():
    return [
        Glyph(id=0, char="a", x=0, y=10, width=6, height=8, xadvance=7),
        Glyph(id=1, char="b", x=10, y=4, width=6, height=14, yoffset=3, xadvance=7),
        Glyph(id=2, char="", x=20, y=10, width=6, height=8, xadvance=7),
    ]


def sheet(rects, width=60, height=30):
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for x, y, w, h in rects:
        pixels[y:y + h, x:x + w] = (0, 0, 0, 255)
    return PixelGrid(pixels)


def test_merge_selected_unions_and_appends():
    merged = merge_selected(glyphs_abc(), [2, 0])

    assert [g.id for g in merged] == [1, 0]
    combined = merged[-1]
    assert combined.bbox == (0, 10, 26, 8)
    assert combined.char == "a"
    assert combined.xadvance == 27


def test_merge_selected_needs_two_glyphs():
    glyphs = glyphs_abc()
    assert merge_selected(glyphs, [1]) == glyphs
    assert merge_selected(glyphs, [1, 99]) == glyphs


def test_delete_and_update():
    glyphs = glyphs_abc()

    assert [g.id for g in delete_glyphs(glyphs, {1})] == [0, 2]

    updated = update_glyph(glyphs, glyphs[2].copy(char="c", xadvance=9))
    assert [g.char for g in updated] == ["a", "b", "c"]
    assert updated[2].xadvance == 9
    # Original list is untouched
    assert glyphs[2].char == ""


def test_count_unlabeled():
    assert count_unlabeled(glyphs_abc()) == 1
    assert count_unlabeled([]) == 0


def test_realign_keeps_labels_when_count_matches():
    grid = sheet([(4, 5, 6, 10), (20, 5, 6, 10)])
    previous = detect_glyphs(grid)
    previous = [g.copy(char=c, id=i + 100, x=g.x + 3) for i, (g, c) in enumerate(zip(previous, "xy"))]

    realigned = realign_glyphs(grid, previous)

    assert [(g.id, g.char) for g in realigned] == [(100, "x"), (101, "y")]
    # Coordinates come from fresh detection
    assert [g.x for g in realigned] == [4, 20]


def test_realign_discards_labels_when_count_changes():
    grid = sheet([(4, 5, 6, 10), (20, 5, 6, 10), (40, 5, 6, 10)])
    previous = [Glyph(id=7, char="q", x=4, y=5, width=6, height=10)]

    realigned = realign_glyphs(grid, previous)

    assert len(realigned) == 3
    assert all(g.char == "" for g in realigned)
    assert [g.id for g in realigned] == [0, 1, 2]


def test_render_preview(tmp_path):
    grid = sheet([(4, 5, 6, 10)])
    glyphs = detect_glyphs(grid)
    glyphs[0].char = "I"

    path = tmp_path / "preview.png"
    preview = render_preview(grid, glyphs, path)

    assert preview.shape == (30, 60, 3)
    assert path.exists()
    # Transparent background is drawn white
    assert tuple(preview[29, 59]) == (255, 255, 255)
    # Box outline in green
    assert tuple(preview[5, 4]) == (0, 255, 0)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
