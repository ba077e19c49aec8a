"""Application configuration module."""

import os
from datetime import timedelta


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PORT = int(os.getenv("PORT", "5000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Super-admin bootstrap
    SUPER_ADMIN_EMAIL = os.getenv("SUPER_ADMIN_EMAIL", "superadmin@example.com")
    SUPER_ADMIN_PASSWORD = os.getenv("SUPER_ADMIN_PASSWORD", "123456789")
    SUPER_ADMIN_NAME = os.getenv("SUPER_ADMIN_NAME", "Super Admin")
    SUPER_ADMIN_PHONE = os.getenv("SUPER_ADMIN_PHONE", "01000000000")
    SUPER_ADMIN_ID = int(os.getenv("SUPER_ADMIN_ID", "1"))
    SEED_SUPER_ADMIN = _env_flag("SEED_SUPER_ADMIN", True)

    # Emergency reset endpoint, off unless explicitly enabled
    ENABLE_SUPER_ADMIN_RESET = _env_flag("ENABLE_SUPER_ADMIN_RESET", False)
    SUPER_ADMIN_RESET_SECRET = os.getenv("SUPER_ADMIN_RESET_SECRET")

    # Credentials
    PASSWORD_HASH_COST = int(os.getenv("PASSWORD_HASH_COST", "10"))
    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
    MIN_NAME_LENGTH = int(os.getenv("MIN_NAME_LENGTH", "2"))

    # Tokens: "legacy" (token_<id>_<millis>) or "jwt" (signed, expiring)
    TOKEN_SCHEME = os.getenv("TOKEN_SCHEME", "legacy")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_MINUTES", "60"))
    )

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")
