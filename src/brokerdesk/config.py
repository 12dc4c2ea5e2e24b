# src/brokerdesk/config.py
"""
Configuration loader for BrokerDesk.
Loads configuration from YAML files, a .env file and environment variables.

Precedence (later wins): default.yaml, <env>.yaml, environment variables.
"""

from typing import Any, Dict, Optional
from pathlib import Path
import logging
import os

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class BrokerDeskConfig(BaseModel):
    """Main BrokerDesk configuration."""
    model_config = ConfigDict(extra="allow")

    # Environment
    environment: str = "development"
    debug: bool = False

    # Remote service
    supabase_url: str = ""
    supabase_key: str = ""

    # OAuth sign-in
    oauth_provider: str = "google"
    oauth_redirect_url: str = ""
    oauth_query_params: Dict[str, str] = Field(
        default_factory=lambda: {"access_type": "offline", "prompt": "consent"}
    )
    password_reset_redirect_url: str = ""

    # Local preferences
    storage_path: str = "~/.brokerdesk/storage.json"
    settings_key: str = "brokerdesk_settings"

    # Logging
    log_level: str = "INFO"

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


class ConfigLoader:
    """Load and manage BrokerDesk configuration."""

    def __init__(self, config_dir: str = "config"):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
        """
        self.config_dir = Path(config_dir)
        self.config: Optional[BrokerDeskConfig] = None
        self.load()

    def load(self) -> BrokerDeskConfig:
        """Load configuration from YAML and environment variables."""
        load_dotenv()

        env = os.getenv("BROKERDESK_ENV", "development")
        config_file = self.config_dir / f"{env}.yaml"

        data = self._load_yaml(self.config_dir / "default.yaml")

        if config_file.exists():
            data.update(self._load_yaml(config_file))
        else:
            logger.debug(f"Config file not found: {config_file}, using defaults")

        env_config = self._load_from_env()
        query_params = env_config.pop("oauth_query_params", None)
        data.update(env_config)
        if query_params:
            data["oauth_query_params"] = {**data.get("oauth_query_params", {}), **query_params}

        data.setdefault("environment", env)
        self.config = BrokerDeskConfig(**data)

        logger.info(f"Configuration loaded (environment: {self.config.environment})")
        return self.config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML config file."""
        if not path.exists():
            return {}

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
                return data or {}
        except Exception as e:
            logger.error(f"Failed to load YAML config {path}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if supabase_url := os.getenv("SUPABASE_URL"):
            config["supabase_url"] = supabase_url
        if supabase_key := os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY"):
            config["supabase_key"] = supabase_key

        if redirect := os.getenv("BROKERDESK_OAUTH_REDIRECT_URL"):
            config["oauth_redirect_url"] = redirect
        if client_id := os.getenv("BROKERDESK_OAUTH_CLIENT_ID"):
            config["oauth_query_params"] = {"client_id": client_id}
        if reset_redirect := os.getenv("BROKERDESK_PASSWORD_RESET_REDIRECT_URL"):
            config["password_reset_redirect_url"] = reset_redirect

        if storage_path := os.getenv("BROKERDESK_STORAGE_PATH"):
            config["storage_path"] = storage_path
        if settings_key := os.getenv("BROKERDESK_SETTINGS_KEY"):
            config["settings_key"] = settings_key

        if log_level := os.getenv("BROKERDESK_LOG_LEVEL"):
            config["log_level"] = log_level
        if debug := os.getenv("BROKERDESK_DEBUG"):
            config["debug"] = debug.lower() == "true"

        return config

    def get(self) -> BrokerDeskConfig:
        """Get current configuration."""
        if not self.config:
            self.load()
        return self.config

    def reload(self) -> BrokerDeskConfig:
        """Reload configuration (useful for development)."""
        logger.info("Reloading configuration...")
        return self.load()


# Global config instance
_global_config_loader: Optional[ConfigLoader] = None


def get_config() -> BrokerDeskConfig:
    """Get the global BrokerDesk configuration."""
    global _global_config_loader
    if _global_config_loader is None:
        _global_config_loader = ConfigLoader()
    return _global_config_loader.get()


def initialize_config(config_dir: str = "config") -> BrokerDeskConfig:
    """Initialize the global configuration loader."""
    global _global_config_loader
    _global_config_loader = ConfigLoader(config_dir)
    return _global_config_loader.get()


def reset_config() -> None:
    """Forget the global configuration (tests)."""
    global _global_config_loader
    _global_config_loader = None
