"""
Configuration Management for the Maps list scraper

This module provides centralized configuration management with:
- Environment variable loading
- Type validation
- Sensible defaults
- Configuration documentation
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default) not in {"0", "false", "False"}


class Config:
    """
    Application configuration loaded from environment variables.

    All configuration is read from configs/.env file or environment variables.
    See configs/.env.example for documentation of all settings.
    """

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration from environment.

        Args:
            env_path: Path to .env file (default: configs/.env)
        """
        if env_path is None:
            env_path = Path("configs/.env")

        # Load environment variables
        load_dotenv(dotenv_path=env_path, override=True)

        # === Browser Configuration ===
        self.headless: bool = _flag("HEADLESS", "1")
        self.nav_timeout_ms: int = int(os.getenv("NAV_TIMEOUT_MS", "30000"))
        self.sidebar_timeout_ms: int = int(os.getenv("SIDEBAR_TIMEOUT_MS", "15000"))

        # === Traversal Configuration ===
        self.default_max_items: int = int(os.getenv("DEFAULT_MAX_ITEMS", "200"))
        self.max_consecutive_failures: int = int(os.getenv("MAX_CONSECUTIVE_FAILURES", "3"))
        self.max_duplicates: int = int(os.getenv("MAX_DUPLICATES", "5"))
        self.count_max_scroll_attempts: int = int(os.getenv("COUNT_MAX_SCROLL_ATTEMPTS", "30"))

        # === Session Configuration ===
        self.session_ttl_seconds: float = float(os.getenv("SESSION_TTL_SECONDS", "0"))

        # === Supabase Configuration ===
        self.supabase_enabled: bool = _flag("SUPABASE_ENABLED", "0")
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.supabase_places_table: str = os.getenv("SUPABASE_PLACES_TABLE", "places")

        # === API Configuration ===
        self.api_host: str = os.getenv("API_HOST", "127.0.0.1")
        self.api_port: int = int(os.getenv("API_PORT", "3000"))

        # === Logging Configuration ===
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: Path = Path(os.getenv("LOG_DIR", "logs"))

        # === Output Paths ===
        self.base_out_dir: Path = Path(os.getenv("BASE_OUT_DIR", "out"))

    def validate(self) -> None:
        """
        Validate required configuration is present.

        Raises:
            ValueError: If required configuration is missing or invalid
        """
        errors = []

        # Check Supabase config if enabled
        if self.supabase_enabled:
            if not self.supabase_url:
                errors.append("SUPABASE_URL is required when Supabase is enabled")
            if not self.supabase_service_role_key:
                errors.append("SUPABASE_SERVICE_ROLE_KEY is required when Supabase is enabled")

        # Validate numeric ranges
        if self.nav_timeout_ms <= 0:
            errors.append(f"NAV_TIMEOUT_MS must be positive, got {self.nav_timeout_ms}")

        if self.sidebar_timeout_ms <= 0:
            errors.append(f"SIDEBAR_TIMEOUT_MS must be positive, got {self.sidebar_timeout_ms}")

        if self.default_max_items <= 0:
            errors.append(f"DEFAULT_MAX_ITEMS must be positive, got {self.default_max_items}")

        if self.max_consecutive_failures <= 0:
            errors.append(f"MAX_CONSECUTIVE_FAILURES must be positive, got {self.max_consecutive_failures}")

        if self.max_duplicates <= 0:
            errors.append(f"MAX_DUPLICATES must be positive, got {self.max_duplicates}")

        if self.count_max_scroll_attempts <= 0:
            errors.append(f"COUNT_MAX_SCROLL_ATTEMPTS must be positive, got {self.count_max_scroll_attempts}")

        if self.session_ttl_seconds < 0:
            errors.append(f"SESSION_TTL_SECONDS must be non-negative, got {self.session_ttl_seconds}")

        if errors:
            raise ValueError(f"Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    def __repr__(self) -> str:
        """Return string representation of config (without secrets)."""
        return (
            f"Config(\n"
            f"  headless={self.headless},\n"
            f"  nav_timeout_ms={self.nav_timeout_ms},\n"
            f"  default_max_items={self.default_max_items},\n"
            f"  supabase_enabled={self.supabase_enabled},\n"
            f"  supabase_url={self.supabase_url or 'NOT SET'},\n"
            f"  supabase_key={'***' if self.supabase_service_role_key else 'NOT SET'},\n"
            f"  session_ttl_seconds={self.session_ttl_seconds},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


# Global configuration instance (lazy-loaded)
_config: Optional[Config] = None


def get_config(env_path: Optional[Path] = None) -> Config:
    """
    Get the global configuration instance.

    Args:
        env_path: Optional path to .env file (only used on first call)

    Returns:
        Global Config instance

    Example:
        >>> config = get_config()
        >>> print(config.default_max_items)
    """
    global _config
    if _config is None:
        _config = Config(env_path=env_path)
    return _config


def validate_config(env_path: Optional[Path] = None) -> None:
    """
    Validate configuration and raise error if invalid.

    This should be called at application startup to fail fast
    if configuration is incorrect.

    Args:
        env_path: Optional path to .env file

    Raises:
        ValueError: If configuration is invalid

    Example:
        >>> validate_config()  # Raises ValueError if config is bad
        >>> print("Configuration OK")
    """
    config = get_config(env_path=env_path)
    config.validate()
