"""CLI runner for FontArchitect."""

import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Optional, Tuple

from core import ConfigManager, get_api_key_url, read_key_file, format_glyph_table
from core.logging_config import ErrorLogger
from core.font_atlas import (
    FontSettings,
    GlyphIdentifier,
    IdentificationError,
    ImageDecodeError,
    PackingError,
    detect_glyphs_in_file,
    export_font,
    pack_texture,
    render_preview,
)

logger = logging.getLogger(__name__)

ENV_VARS = {
    "gemini": ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
    "anthropic": ["ANTHROPIC_API_KEY"],
}


def resolve_api_key(
    cli_key: Optional[str],
    key_file: Optional[str],
    provider: str = "gemini",
    config: Optional[ConfigManager] = None,
) -> Tuple[Optional[str], str]:
    """
    Resolve API key from various sources.

    Args:
        cli_key: API key from command line
        key_file: Path to key file
        provider: Provider name
        config: Config manager to consult (default: a fresh one)

    Returns:
        Tuple of (api_key, source_description)
    """
    # Priority: CLI arg > file > config > env
    if cli_key:
        return cli_key, "command-line"

    if key_file:
        fp = Path(key_file).expanduser()
        if fp.exists():
            key = read_key_file(fp)
            if key:
                return key, f"file:{fp}"

    config = config or ConfigManager()
    key = config.get_api_key(provider)
    if key:
        return key, "config"

    for var in ENV_VARS.get(provider, []):
        key = os.getenv(var)
        if key:
            return key, f"env:{var}"

    return None, "none"


def store_api_key(api_key: str, provider: str, config: ConfigManager) -> None:
    """Store API key in configuration."""
    config.set_api_key(provider, api_key)
    config.save()


def run_cli(args, config: Optional[ConfigManager] = None) -> int:
    """
    Run CLI with parsed arguments.

    Args:
        args: Parsed command-line arguments
        config: Config manager (default: the user's config)

    Returns:
        Exit code (0 for success, 1 for pipeline failure, 2 for usage errors)
    """
    config = config or ConfigManager()
    provider = (args.provider or config.identify_provider).strip().lower()

    # Handle --set-key
    if args.set_key:
        set_key = args.api_key
        if not set_key and args.api_key_file:
            set_key = read_key_file(Path(args.api_key_file).expanduser())

        if not set_key:
            print("No API key provided to --set-key. Use --api-key or --api-key-file.")
            return 2

        store_api_key(set_key, provider, config)
        print(f"API key saved to {config.config_path}")
        if not args.sheet:
            return 0

    if not args.sheet:
        print("Error: a font sheet image is required")
        return 2

    tolerance = args.tolerance if args.tolerance is not None else config.tolerance

    try:
        with ErrorLogger("glyph detection", logger):
            grid, detected = detect_glyphs_in_file(args.sheet, tolerance)
    except ImageDecodeError as e:
        print(f"Error: {e}")
        return 1

    glyphs = detected

    if args.identify:
        key, source = resolve_api_key(args.api_key, args.api_key_file, provider, config)
        if not key:
            print(f"No API key found for {provider}. Provide with --api-key/--api-key-file or set via --set-key.")
            print(f"Get a key at: {get_api_key_url(provider)}")
            return 2
        logger.info(f"Using {provider} API key from {source}")

        identifier = GlyphIdentifier(
            provider=provider,
            api_key=key,
            model=args.model or config.identify_model,
        )
        batch_size = args.batch_size if args.batch_size is not None else config.batch_size
        if batch_size < 1:
            print("Error: --batch-size must be at least 1")
            return 2
        try:
            report = identifier.identify_glyphs(grid, glyphs, batch_size=batch_size)
        except IdentificationError as e:
            print(f"Error: {e}")
            return 2

        glyphs = report.glyphs
        print(f"Identified {report.identified_count} of {len(glyphs)} glyphs")
        if report.error:
            print(
                f"Warning: identification stopped after {report.batches_completed} of "
                f"{report.total_batches} batches: {report.error}"
            )

    if args.preview:
        render_preview(grid, glyphs, args.preview)

    atlas = None
    if args.repack:
        try:
            with ErrorLogger("texture packing", logger):
                atlas = pack_texture(grid, glyphs, padding=config.padding)
        except PackingError as e:
            print(f"Error: {e}")
            return 1
        glyphs = atlas.glyphs
        print(f"Repacked into {atlas.width}x{atlas.height} atlas")

    if args.json:
        print(json.dumps([asdict(g) for g in glyphs], ensure_ascii=False, indent=2))
    else:
        print(format_glyph_table(glyphs))
        print(f"\n{len(glyphs)} glyphs")

    if args.out:
        # Line height follows the first glyph in reading order, even after repacking
        image_size = (atlas.width, atlas.height) if atlas else grid.size
        settings = FontSettings.for_sheet(
            args.sheet,
            image_size,
            detected,
            face=args.face,
            size=args.size,
            line_height=args.line_height,
            base=args.base,
            tracking=args.tracking,
            bold=args.bold,
            italic=args.italic,
        )
        try:
            result = export_font(glyphs, settings, args.out, args.sheet, atlas=atlas)
        except OSError as e:
            logger.error(f"Export failed: {e}", exc_info=True)
            print(f"Error: could not write export: {e}")
            return 1

        if result.unlabeled_count:
            print(
                f"Warning: {result.unlabeled_count} glyph(s) have no character and were "
                "written with id=-1. Use --identify to label them."
            )
        print(f"Saved {result.fnt_path}")
        print(f"Saved {result.image_path}")

    return 0
