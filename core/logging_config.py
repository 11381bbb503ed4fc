"""
Centralized logging configuration for FontArchitect.
Logs errors to both console and file for easy debugging and error reporting.
"""

import logging
import logging.handlers
from pathlib import Path
import platform
import sys
import warnings

from .constants import APP_NAME, VERSION, get_user_data_dir
from .utils import generate_timestamp


def get_log_dir() -> Path:
    """Platform-specific directory for log files."""
    return get_user_data_dir() / 'logs'


def setup_logging(log_level=logging.INFO, log_to_file=True, verbose=False):
    """
    Set up comprehensive logging for the entire application.

    Args:
        log_level: Minimum level to log (default: INFO)
        log_to_file: Whether to also log to file (default: True)
        verbose: Show INFO messages (not just warnings) on the console

    Returns:
        Path to log file if logging to file, None otherwise
    """
    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    # Console handler (simple format for user)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(simple_formatter)
    # "console" records already have their own stdout handler
    console_handler.addFilter(lambda record: record.name != "console")
    root_logger.addHandler(console_handler)

    # User-facing progress messages go to stdout regardless of verbosity
    console_logger = logging.getLogger("console")
    console_logger.handlers.clear()
    progress_handler = logging.StreamHandler(sys.stdout)
    progress_handler.setLevel(logging.INFO)
    progress_handler.setFormatter(logging.Formatter('%(message)s'))
    console_logger.addHandler(progress_handler)
    console_logger.setLevel(logging.INFO)

    if not log_to_file:
        return None

    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    # Create timestamp for log file
    timestamp = generate_timestamp()
    log_file = log_dir / f"fontarchitect_{timestamp}.log"

    # File handler (detailed format for debugging)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(file_handler)

    # Log startup information
    root_logger.info("=" * 60)
    root_logger.info(f"{APP_NAME} {VERSION} Started")
    root_logger.info(f"Python: {sys.executable}")
    root_logger.info(f"Version: {sys.version}")
    root_logger.info(f"Platform: {platform.platform()}")
    root_logger.info(f"Log file: {log_file}")
    root_logger.info("=" * 60)

    # Capture Python warnings to the log file
    logging.captureWarnings(True)
    warnings_logger = logging.getLogger('py.warnings')
    warnings_logger.setLevel(logging.WARNING)
    warnings.simplefilter('default')

    return log_file


def get_error_report_info():
    """
    Get information for error reporting.

    Returns:
        Dictionary with system info and recent log location
    """
    log_dir = get_log_dir()

    # Find most recent log file
    recent_log = None
    if log_dir.exists():
        log_files = sorted(log_dir.glob("fontarchitect_*.log"), key=lambda p: p.stat().st_mtime, reverse=True)
        if log_files:
            recent_log = log_files[0]

    return {
        "platform": platform.platform(),
        "python_version": sys.version,
        "log_directory": str(log_dir),
        "recent_log": str(recent_log) if recent_log else None,
    }


class ErrorLogger:
    """Context manager for logging exceptions with additional context"""

    def __init__(self, operation_name, logger=None, reraise=True):
        """
        Args:
            operation_name: Description of the operation being performed
            logger: Logger instance to use (default: root logger)
            reraise: Whether to re-raise the exception after logging
        """
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger()
        self.reraise = reraise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.error(
                f"Error during {self.operation_name}: {exc_type.__name__}: {exc_val}",
                exc_info=True
            )
            if not self.reraise:
                return True  # Suppress exception
        return False
