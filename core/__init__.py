"""Core functionality for FontArchitect."""

from .config import ConfigManager, get_api_key_url
from .constants import (
    APP_NAME,
    VERSION,
    __version__,
    __author__,
    __email__,
    __license__,
    __copyright__,
    DEFAULT_PROVIDER,
    DEFAULT_TOLERANCE,
    DEFAULT_BATCH_SIZE,
    PROVIDER_MODELS,
    PROVIDER_KEY_URLS,
)
from .utils import (
    sanitize_filename,
    read_key_file,
    generate_timestamp,
    format_glyph_table,
)

# Export metadata at package level
__version__ = __version__
__author__ = __author__
__email__ = __email__
__license__ = __license__
__copyright__ = __copyright__

__all__ = [
    "ConfigManager",
    "get_api_key_url",
    "APP_NAME",
    "VERSION",
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
    "DEFAULT_PROVIDER",
    "DEFAULT_TOLERANCE",
    "DEFAULT_BATCH_SIZE",
    "PROVIDER_MODELS",
    "PROVIDER_KEY_URLS",
    "sanitize_filename",
    "read_key_file",
    "generate_timestamp",
    "format_glyph_table",
]
