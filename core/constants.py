"""Constants and default values for FontArchitect."""

import os
import platform
from pathlib import Path

# Application metadata
APP_NAME = "FontArchitect"
VERSION = "0.4.0"
__version__ = VERSION
__author__ = "FontArchitect contributors"
__email__ = "fontarchitect@users.noreply.github.com"
__license__ = "MIT"
__copyright__ = "Copyright 2025 FontArchitect contributors"

# Detection defaults
DEFAULT_TOLERANCE = 20
DEFAULT_PACK_PADDING = 2

# Identification defaults
DEFAULT_PROVIDER = "gemini"
DEFAULT_BATCH_SIZE = 50

# Identification provider models
PROVIDER_MODELS = {
    "gemini": {
        "gemini-2.5-flash": "Gemini 2.5 Flash",
        "gemini-2.5-pro": "Gemini 2.5 Pro",
    },
    "anthropic": {
        "claude-opus-4-5-20251101": "Claude Opus 4.5",
    },
}

# Provider API key URLs
PROVIDER_KEY_URLS = {
    "gemini": "https://aistudio.google.com/apikey",
    "anthropic": "https://console.anthropic.com/settings/keys",
}

# Font defaults
DEFAULT_FONT_SIZE = 32
DEFAULT_BASE = 24


def get_user_data_dir() -> Path:
    """Get platform-specific user data directory for FontArchitect.

    Returns:
        Path to the user data directory where configuration and logs are stored.
    """
    system = platform.system()
    home = Path.home()

    if system == "Windows":
        base = Path(os.getenv("APPDATA", home / "AppData" / "Roaming"))
        return base / APP_NAME
    elif system == "Darwin":  # macOS
        return home / "Library" / "Application Support" / APP_NAME
    else:  # Linux/Unix
        base = Path(os.getenv("XDG_CONFIG_HOME", home / ".config"))
        return base / APP_NAME
