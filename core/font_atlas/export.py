"""
Writing a finished font to disk.

A BMFont export is two files that must sit side by side with matching
names: ``<face>.fnt`` and the texture page it references.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..utils import sanitize_filename

from .editing import count_unlabeled
from .fnt_writer import generate_fnt
from .models import FontSettings, Glyph, PackedAtlas

logger = logging.getLogger(__name__)
console = logging.getLogger("console")


@dataclass
class ExportResult:
    fnt_path: Path
    image_path: Path
    glyph_count: int
    unlabeled_count: int


def export_font(
    glyphs: List[Glyph],
    settings: FontSettings,
    output_dir: Path | str,
    source_image: Path | str,
    atlas: Optional[PackedAtlas] = None,
) -> ExportResult:
    """
    Write the .fnt file and its texture page.

    Args:
        glyphs: Finalized glyphs (from the atlas when repacked)
        settings: Font metadata; ``face`` names both files
        output_dir: Destination directory (created if missing)
        source_image: Original sheet, copied unchanged when no atlas is given
        atlas: Repacked atlas to write instead of the original sheet

    Returns:
        ExportResult with the written paths
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    source_image = Path(source_image)

    base_name = sanitize_filename(settings.face, max_len=80)

    unlabeled = count_unlabeled(glyphs)
    if unlabeled:
        logger.warning(
            f"{unlabeled} glyph(s) have no character assigned; they will be written with id=-1"
        )

    if atlas is not None:
        # Atlases carry alpha, so they are always PNG
        image_path = output_dir / f"{base_name}.png"
        atlas.save(image_path)
    else:
        image_path = output_dir / f"{base_name}{source_image.suffix}"
        if source_image.resolve() != image_path.resolve():
            shutil.copy2(source_image, image_path)

    fnt_path = output_dir / f"{base_name}.fnt"
    fnt_path.write_text(generate_fnt(glyphs, settings, image_path.name), encoding="utf-8")

    console.info(f"Wrote {fnt_path} and {image_path}")
    return ExportResult(
        fnt_path=fnt_path,
        image_path=image_path,
        glyph_count=len(glyphs),
        unlabeled_count=unlabeled,
    )
