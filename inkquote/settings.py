"""
Settings and configuration for Inkquote.
Handles environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """
    Application settings with environment variable support.

    Environment variables (with defaults):
    - PRICE_TABLES_PATH: JSON file with per-technique price tables
    - PRICING_CONFIG_PATH: JSON file with global pricing knobs
    - DATABASE_PATH: SQLite database for saved quotes and price tables
    - UPLOADS_PATH: Directory for uploaded artwork
    - MAX_UPLOAD_SIZE: Maximum artwork upload size in bytes
    - CONFIG_CACHE_TTL: Seconds a loaded price table/config snapshot stays fresh
    - GEOCODER_URL: Nominatim search endpoint for courier distances
    - DISTANCE_TIMEOUT: Timeout in seconds for geocoding requests

    Hardcoded values (not overridable):
    - REVIEW_EMAIL: Recipient for express approval requests
    """

    # Paths (overridable via env vars)
    PRICE_TABLES_PATH: str = "config/price_tables.json"
    PRICING_CONFIG_PATH: str = "config/pricing_config.json"
    DATABASE_PATH: str = "data/quotes.db"
    UPLOADS_PATH: str = "uploads"
    MAX_UPLOAD_SIZE: int = 20971520  # 20MB in bytes

    # Caching and external services
    CONFIG_CACHE_TTL: float = 60.0  # seconds
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org/search"
    DISTANCE_TIMEOUT: float = 10.0  # seconds

    # Business constants
    REVIEW_EMAIL: str = "orders@inkquote.example"

    def __post_init__(self):
        """Override defaults with environment variables if present."""
        if "PRICE_TABLES_PATH" in os.environ:
            self.PRICE_TABLES_PATH = os.environ["PRICE_TABLES_PATH"]

        if "PRICING_CONFIG_PATH" in os.environ:
            self.PRICING_CONFIG_PATH = os.environ["PRICING_CONFIG_PATH"]

        if "DATABASE_PATH" in os.environ:
            self.DATABASE_PATH = os.environ["DATABASE_PATH"]

        if "UPLOADS_PATH" in os.environ:
            self.UPLOADS_PATH = os.environ["UPLOADS_PATH"]

        if "MAX_UPLOAD_SIZE" in os.environ:
            self.MAX_UPLOAD_SIZE = int(os.environ["MAX_UPLOAD_SIZE"])

        if "CONFIG_CACHE_TTL" in os.environ:
            self.CONFIG_CACHE_TTL = float(os.environ["CONFIG_CACHE_TTL"])

        if "GEOCODER_URL" in os.environ:
            self.GEOCODER_URL = os.environ["GEOCODER_URL"]

        if "DISTANCE_TIMEOUT" in os.environ:
            self.DISTANCE_TIMEOUT = float(os.environ["DISTANCE_TIMEOUT"])


# Global cache for settings instance
_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns the same Settings instance on subsequent calls.
    Safe to import and call multiple times without side effects.

    Returns:
        Settings instance with current configuration
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = Settings()

    return _settings_cache
