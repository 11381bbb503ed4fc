"""
Font atlas package for FontArchitect.

Turns a sheet of hand-drawn or rendered characters into BMFont metadata and
can repack the characters into a compact texture.

Workflow:
1. Decode the sheet into a PixelGrid
2. Detect glyphs (extraction -> merging -> row organisation)
3. Optionally identify characters with an AI vision model
4. Optionally repack glyphs into a power-of-two atlas
5. Export the .fnt file and its texture page
"""

from .errors import (
    FontAtlasError,
    ImageDecodeError,
    PackingError,
    IdentificationError,
)
from .models import (
    Glyph,
    FontSettings,
    PackedAtlas,
)
from .pixels import (
    PixelGrid,
    decode_image,
    decode_image_async,
    decode_bytes,
)
from .classifier import (
    DEFAULT_TOLERANCE,
    is_ink,
    ink_mask,
    sample_background,
)
from .extraction import extract_blobs
from .merging import merge_blobs
from .rows import (
    GlyphRow,
    group_rows,
    organize_rows,
)
from .packing import pack_texture
from .detection import (
    detect_glyphs,
    detect_glyphs_in_file,
    realign_glyphs,
    render_preview,
)
from .editing import (
    merge_selected,
    delete_glyphs,
    update_glyph,
    count_unlabeled,
)
from .fnt_writer import (
    FntDocument,
    generate_fnt,
    parse_fnt,
)
from .glyph_identifier import (
    GlyphIdentifier,
    IdentificationReport,
    extract_glyph_images,
)
from .export import (
    ExportResult,
    export_font,
)

__all__ = [
    # Errors
    "FontAtlasError",
    "ImageDecodeError",
    "PackingError",
    "IdentificationError",
    # Model
    "Glyph",
    "FontSettings",
    "PackedAtlas",
    "PixelGrid",
    "decode_image",
    "decode_image_async",
    "decode_bytes",
    # Detection
    "DEFAULT_TOLERANCE",
    "is_ink",
    "ink_mask",
    "sample_background",
    "extract_blobs",
    "merge_blobs",
    "GlyphRow",
    "group_rows",
    "organize_rows",
    "detect_glyphs",
    "detect_glyphs_in_file",
    "realign_glyphs",
    "render_preview",
    # Packing
    "pack_texture",
    # Editing
    "merge_selected",
    "delete_glyphs",
    "update_glyph",
    "count_unlabeled",
    # Export
    "FntDocument",
    "generate_fnt",
    "parse_fnt",
    "ExportResult",
    "export_font",
    # AI identification
    "GlyphIdentifier",
    "IdentificationReport",
    "extract_glyph_images",
]
