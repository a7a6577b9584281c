"""
Configuration management.
Loads from config_local.py (gitignored) when present, otherwise from environment
variables, with defaults.
"""
import os
from typing import Optional


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


# Try to import local config (gitignored)
try:
    from cryptotracker.config_local import (
        CMC_API_KEY,
        SESSION_SECRET,
        DATABASE_FILE,
    )
    # Optional settings fall back to the environment
    try:
        from cryptotracker.config_local import ALLOW_INSECURE_DEV_SECRET
    except ImportError:
        ALLOW_INSECURE_DEV_SECRET = _env_bool("ALLOW_INSECURE_DEV_SECRET")
    try:
        from cryptotracker.config_local import PORT
    except ImportError:
        PORT = int(os.environ.get("PORT", "5000"))
except ImportError:
    CMC_API_KEY: str = os.environ.get("CMC_API_KEY", "")
    SESSION_SECRET: Optional[str] = os.environ.get("SESSION_SECRET") or None
    ALLOW_INSECURE_DEV_SECRET: bool = _env_bool("ALLOW_INSECURE_DEV_SECRET")
    DATABASE_FILE: str = os.environ.get("DATABASE_FILE", "./database.sqlite")
    PORT: int = int(os.environ.get("PORT", "5000"))

# Upstream providers
CMC_BASE_URL: str = os.environ.get("CMC_BASE_URL", "https://pro-api.coinmarketcap.com/v1")
COINGECKO_BASE_URL: str = os.environ.get("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
UPSTREAM_TIMEOUT_SECONDS: float = float(os.environ.get("UPSTREAM_TIMEOUT_SECONDS", "10"))

# Database (SQLite file unless a full URL is given)
DATABASE_URL: str = os.environ.get("DATABASE_URL") or f"sqlite:///{DATABASE_FILE}"

# Sessions
TOKEN_EXPIRY_DAYS: int = int(os.environ.get("TOKEN_EXPIRY_DAYS", "7"))

# Response cache
CACHE_TTL_SECONDS: int = int(os.environ.get("CACHE_TTL_SECONDS", "3600"))  # 1 hour
CACHE_MAX_ENTRIES: int = int(os.environ.get("CACHE_MAX_ENTRIES", "1024"))
COIN_LIST_TTL_SECONDS: int = int(os.environ.get("COIN_LIST_TTL_SECONDS", "86400"))

# HTTP
CORS_ORIGINS: list[str] = _env_list("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()


def get_settings():
    """Return settings object (for FastAPI dependency injection if needed)."""
    return type("Settings", (), {
        "cmc_api_key": CMC_API_KEY,
        "cmc_base_url": CMC_BASE_URL,
        "coingecko_base_url": COINGECKO_BASE_URL,
        "upstream_timeout_seconds": UPSTREAM_TIMEOUT_SECONDS,
        "session_secret": SESSION_SECRET,
        "allow_insecure_dev_secret": ALLOW_INSECURE_DEV_SECRET,
        "token_expiry_days": TOKEN_EXPIRY_DAYS,
        "port": PORT,
        "database_file": DATABASE_FILE,
        "database_url": DATABASE_URL,
        "cache_ttl_seconds": CACHE_TTL_SECONDS,
        "cache_max_entries": CACHE_MAX_ENTRIES,
        "coin_list_ttl_seconds": COIN_LIST_TTL_SECONDS,
        "cors_origins": CORS_ORIGINS,
        "log_level": LOG_LEVEL,
    })()
