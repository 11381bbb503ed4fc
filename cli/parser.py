"""Argument parser for FontArchitect CLI."""

import argparse
from core.constants import (
    VERSION,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BASE,
    DEFAULT_FONT_SIZE,
    PROVIDER_MODELS,
    __author__,
    __email__,
    __copyright__,
)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="fontarchitect",
        description="Detect characters on a font sheet and export BMFont (.fnt) metadata"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}\n{__copyright__}\nAuthor: {__author__} <{__email__}>"
    )

    parser.add_argument(
        "sheet",
        nargs="?",
        help="Font sheet image (PNG or JPEG)"
    )

    # Actions
    action_group = parser.add_argument_group("actions")
    action_group.add_argument(
        "-o", "--out",
        metavar="DIR",
        help="Export <face>.fnt and its texture page to this directory"
    )
    action_group.add_argument(
        "--identify",
        action="store_true",
        help="Identify characters with an AI vision model"
    )
    action_group.add_argument(
        "--repack",
        action="store_true",
        help="Repack glyphs into a compact power-of-two atlas"
    )
    action_group.add_argument(
        "--preview",
        metavar="PNG",
        help="Write a preview of detected glyph boxes"
    )
    action_group.add_argument(
        "--json",
        action="store_true",
        help="Print detected glyphs as JSON instead of a table"
    )
    action_group.add_argument(
        "-s", "--set-key",
        action="store_true",
        help="Save API key to config file"
    )

    # Detection options
    detect_group = parser.add_argument_group("detection options")
    detect_group.add_argument(
        "--tolerance",
        type=int,
        help="Ink tolerance: alpha threshold on transparent sheets, "
             "RGB distance otherwise (default: config or 20)"
    )

    # Font options
    font_group = parser.add_argument_group("font options")
    font_group.add_argument(
        "--face",
        help="Font face name, also names exported files (default: sheet file name)"
    )
    font_group.add_argument(
        "--size",
        type=int,
        default=DEFAULT_FONT_SIZE,
        help=f"Font size (default: {DEFAULT_FONT_SIZE})"
    )
    font_group.add_argument(
        "--line-height",
        type=int,
        help="Line height (default: first glyph height + 2)"
    )
    font_group.add_argument(
        "--base",
        type=int,
        default=DEFAULT_BASE,
        help=f"Baseline (default: {DEFAULT_BASE})"
    )
    font_group.add_argument(
        "--tracking",
        type=int,
        default=0,
        help="Extra spacing added to every xadvance (default: 0)"
    )
    font_group.add_argument(
        "--bold",
        action="store_true",
        help="Mark the font as bold"
    )
    font_group.add_argument(
        "--italic",
        action="store_true",
        help="Mark the font as italic"
    )

    # Identification options
    ident_group = parser.add_argument_group("identification options")
    ident_group.add_argument(
        "--provider",
        choices=["gemini", "anthropic"],
        help="AI provider for --identify (default: config or gemini)"
    )
    known_models = ", ".join(m for models in PROVIDER_MODELS.values() for m in models)
    ident_group.add_argument(
        "-m", "--model",
        help=f"Model to use for identification (e.g. {known_models})"
    )
    ident_group.add_argument(
        "-k", "--api-key",
        help="API key for the selected provider"
    )
    ident_group.add_argument(
        "-K", "--api-key-file",
        help="Path to file containing API key"
    )
    ident_group.add_argument(
        "--batch-size",
        type=int,
        help=f"Glyphs per identification request (default: config or {DEFAULT_BATCH_SIZE})"
    )

    # Logging
    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show progress details on the console"
    )
    log_group.add_argument(
        "--no-log-file",
        action="store_true",
        help="Do not write a log file"
    )

    return parser
