#!/usr/bin/env python3
"""
FontArchitect - Bitmap Font Builder

Detects characters on a font sheet, optionally identifies them with an AI
vision model, repacks them into a compact atlas and exports BMFont (.fnt)
metadata.
"""

import logging
import sys
import threading


def main(argv=None):
    """Main entry point for FontArchitect."""
    from cli import build_arg_parser, run_cli
    from core.logging_config import setup_logging, get_error_report_info

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    log_file = setup_logging(
        log_to_file=not args.no_log_file,
        verbose=args.verbose,
    )

    def _log_unhandled(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger = logging.getLogger(__name__)
        logger.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
        if log_file:
            info = get_error_report_info()
            print(f"\nAn unexpected error occurred. See {log_file} for details.")
            print(f"Please include this file when reporting the problem ({info['platform']}).")
        else:
            print(f"\nAn unexpected error occurred: {exc_value}")
    sys.excepthook = _log_unhandled

    def _thread_excepthook(hook_args):
        logger = logging.getLogger(__name__)
        logger.error(
            "Unhandled thread exception",
            exc_info=(hook_args.exc_type, hook_args.exc_value, hook_args.exc_traceback),
        )
    threading.excepthook = _thread_excepthook

    exit_code = run_cli(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
