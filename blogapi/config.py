"""
Configuration and application state management.
"""

import os
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from .exceptions import ConfigError

if TYPE_CHECKING:
    from .database import Database
    from .geolocation import GeoLocator
    from .mailer import Mailer

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    # Database
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "blog")

    # Sessions and internal access
    SESSION_SECRET: str = os.getenv("SESSION_SECRET", "")
    SESSION_MAX_AGE: int = int(os.getenv("SESSION_MAX_AGE", str(30 * 24 * 3600)))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    SESSION_COOKIE_SECURE: bool = _parse_bool(os.getenv("SESSION_COOKIE_SECURE"), default=True)
    INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "")

    # Public site URL used for canonical and email links
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:3000")

    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "120"))

    # Geolocation providers (primary -> fallback -> default region)
    GEO_PRIMARY_URL: str = os.getenv("GEO_PRIMARY_URL", "https://ipapi.co")
    GEO_FALLBACK_URL: str = os.getenv("GEO_FALLBACK_URL", "https://ipinfo.io")
    GEO_DEFAULT_REGION: str = os.getenv("GEO_DEFAULT_REGION", "US")
    GEO_CACHE_TTL: int = int(os.getenv("GEO_CACHE_TTL", "86400"))
    GEO_TIMEOUT: float = float(os.getenv("GEO_TIMEOUT", "5"))

    PASSWORD_RESET_TTL_MINUTES: int = int(os.getenv("PASSWORD_RESET_TTL_MINUTES", "60"))

    def require(self, name: str) -> str:
        """Return a required setting or fail loudly."""
        value = getattr(self, name, "")
        if not value:
            raise ConfigError(f"{name} is not configured")
        return value


config = Config()


class AppState:
    """Process-scoped services, built once by the server lifespan."""
    db: "Database | None" = None
    mailer: "Mailer | None" = None
    geolocator: "GeoLocator | None" = None


state = AppState()


def get_db() -> "Database":
    """Dependency to get database instance."""
    if not state.db:
        raise ConfigError("Database not initialized")
    return state.db


def get_mailer() -> "Mailer":
    """Dependency to get the outgoing mailer."""
    if not state.mailer:
        raise ConfigError("Mailer not initialized")
    return state.mailer


def get_geolocator() -> "GeoLocator":
    """Dependency to get the region lookup service."""
    if not state.geolocator:
        raise ConfigError("Geolocation not initialized")
    return state.geolocator
