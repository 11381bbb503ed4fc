"""Utility functions for FontArchitect."""

import re
from pathlib import Path
from typing import Optional
from datetime import datetime

# Characters kept as-is in exported file names besides letters and digits
_NAME_PUNCTUATION = "-_.()"


def sanitize_filename(name: str, max_len: int = 100) -> str:
    """
    Turn a font face name into a file stem.

    Letters and digits (including non-ASCII ones) are kept, runs of
    anything else collapse to a single underscore.

    Args:
        name: Face name or other free text
        max_len: Maximum length of the stem

    Returns:
        Safe stem, "font" when nothing usable is left
    """
    kept = "".join(c if c.isalnum() or c in _NAME_PUNCTUATION else "_" for c in name)
    stem = re.sub(r"_+", "_", kept).strip("_")[:max_len]

    # Windows rejects trailing dots
    stem = stem.rstrip(".")
    return stem or "font"


def read_key_file(path: Path) -> Optional[str]:
    """
    Read API key from a file.

    Args:
        path: Path to key file

    Returns:
        API key string or None if not found
    """
    try:
        # Read first non-empty line as key
        for line in path.read_text(encoding="utf-8").splitlines():
            s = line.strip()
            if s:
                return s
    except (OSError, IOError, UnicodeDecodeError):
        return None
    return None


def generate_timestamp() -> str:
    """
    Generate a timestamp string for filenames.

    Returns:
        Timestamp in format YYYYMMDD_HHMMSS
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def format_glyph_table(glyphs) -> str:
    """Render glyphs as a fixed-width text table for the console."""
    header = f"{'id':>5} {'char':>4} {'x':>5} {'y':>5} {'w':>4} {'h':>4} {'xoff':>4} {'yoff':>4} {'xadv':>4}"
    lines = [header, "-" * len(header)]
    for g in glyphs:
        char = g.char if g.char else "·"
        lines.append(
            f"{g.id:>5} {char:>4} {g.x:>5} {g.y:>5} {g.width:>4} {g.height:>4} "
            f"{g.xoffset:>4} {g.yoffset:>4} {g.xadvance:>4}"
        )
    return "\n".join(lines)
