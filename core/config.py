"""Configuration management for FontArchitect."""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_PACK_PADDING,
    DEFAULT_PROVIDER,
    DEFAULT_TOLERANCE,
    PROVIDER_KEY_URLS,
    get_user_data_dir,
)

logger = logging.getLogger(__name__)

# Values used when the config file does not set them
DEFAULTS: Dict[str, Any] = {
    "tolerance": DEFAULT_TOLERANCE,
    "batch_size": DEFAULT_BATCH_SIZE,
    "padding": DEFAULT_PACK_PADDING,
    "identify_provider": DEFAULT_PROVIDER,
    "identify_model": None,
}


class ConfigManager:
    """Manages application configuration and persistence."""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Override for the platform config directory
        """
        self.config_dir = Path(config_dir) if config_dir else get_user_data_dir()
        self.config_path = self.config_dir / "config.json"
        self.config = self._load_config()

        # Migrate legacy API keys to providers structure
        self._migrate_api_keys()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                return json.loads(self.config_path.read_text(encoding="utf-8"))
            except (OSError, IOError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
                return {}
        return {}

    def _migrate_api_keys(self) -> None:
        """Migrate legacy top-level API keys to providers structure."""
        migrated = False

        for provider in ("gemini", "anthropic"):
            top_level_key = f"{provider}_api_key"
            key_value = self.config.pop(top_level_key, None)
            if key_value:
                provider_config = self.get_provider_config(provider)
                if "api_key" not in provider_config:
                    provider_config["api_key"] = key_value
                    self.set_provider_config(provider, provider_config)
                migrated = True

        if migrated:
            self.save()

    def save(self) -> None:
        """Save current configuration to disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            json.dumps(self.config, indent=2),
            encoding="utf-8"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value, falling back to built-in defaults."""
        if key in self.config:
            return self.config[key]
        if default is None:
            return DEFAULTS.get(key)
        return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self.config[key] = value

    def get_provider_config(self, provider: str) -> Dict[str, Any]:
        """Get provider-specific configuration."""
        providers = self.config.get("providers", {})
        return providers.get(provider, {})

    def set_provider_config(self, provider: str, config: Dict[str, Any]) -> None:
        """Set provider-specific configuration."""
        if "providers" not in self.config:
            self.config["providers"] = {}
        self.config["providers"][provider] = config

    def get_api_key(self, provider: str) -> Optional[str]:
        """Get the stored API key for a provider."""
        provider_config = self.get_provider_config(provider)
        key = provider_config.get("api_key")
        if key:
            logger.debug(f"API key for {provider} retrieved from config file (len={len(key)})")
            return key

        logger.debug(f"No API key found for {provider} in config")
        return None

    def set_api_key(self, provider: str, api_key: str) -> None:
        """Set API key for a provider."""
        provider_config = self.get_provider_config(provider)
        provider_config["api_key"] = api_key
        self.set_provider_config(provider, provider_config)

    @property
    def tolerance(self) -> int:
        return int(self.get("tolerance"))

    @property
    def batch_size(self) -> int:
        return int(self.get("batch_size"))

    @property
    def padding(self) -> int:
        return int(self.get("padding"))

    @property
    def identify_provider(self) -> str:
        return str(self.get("identify_provider"))

    @property
    def identify_model(self) -> Optional[str]:
        return self.get("identify_model")


def get_api_key_url(provider: str) -> str:
    """Get the API key documentation URL for a provider."""
    provider = (provider or DEFAULT_PROVIDER).strip().lower()
    return PROVIDER_KEY_URLS.get(provider, PROVIDER_KEY_URLS[DEFAULT_PROVIDER])
