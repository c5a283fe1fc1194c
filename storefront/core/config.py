# storefront/core/config.py - Client settings for the storefront backend

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Backend API (same-origin proxy in front of the REST backend)
    API_BASE_URL: str = "http://localhost:3000/api"
    REQUEST_TIMEOUT_SECONDS: Optional[float] = None  # None = httpx transport default

    # Client-side persistence
    STORAGE_BACKEND: str = "file"  # file, redis or memory
    STORAGE_FILE: str = ".storefront/storage.json"
    REDIS_URL: Optional[str] = None
    STORAGE_KEY_PREFIX: str = "storefront:"

    # Session
    SESSION_STORAGE_KEY: str = "session"
    SESSION_TTL_DAYS: int = 7

    # Search history
    RECENT_SEARCHES_KEY: str = "recentSearches"
    RECENT_SEARCHES_LIMIT: int = 5

    # Cart clearing after checkout
    CART_CLEAR_MAX_ATTEMPTS: int = 3
    CART_CLEAR_RETRY_DELAY_SECONDS: float = 1.0

    # Business rules (whole currency units)
    FREE_SHIPPING_THRESHOLD: float = 50000
    FLAT_SHIPPING_FEE: float = 500
    CURRENCY: str = "PHP"
    CURRENCY_SYMBOL: str = "₱"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    class Config:
        env_file = ".env"
        case_sensitive = False  # Allow lowercase env vars
        extra = "ignore"

settings = Settings()
