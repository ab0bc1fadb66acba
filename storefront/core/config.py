# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized storefront settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)

    Optional:
      - SUPABASE_JWT_SECRET (verify session tokens locally when set)
      - LOCAL_STORAGE_URL (SQLite file backing the local key-value slots)
    """

    PROJECT_NAME: str = "Dang Storefront"
    API_V1_STR: str = "/api/v1"

    # Supabase (backend-as-a-service)
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # Session token checks (client-side)
    SUPABASE_JWT_SECRET: str | None = None
    SUPABASE_JWT_ALG: str = "HS256"

    # Durable local storage
    LOCAL_STORAGE_URL: str = "sqlite:///./storefront.db"
    CART_STORAGE_KEY: str = "dang-cart"
    LANGUAGE_STORAGE_KEY: str = "language"

    # Remote wishlist collection
    WISHLIST_TABLE: str = "Wishlist"

    # Where signed-out users are sent
    LOGIN_URL: str = "/Login"

    # Query engine retry policy
    QUERY_RETRY: int = 0
    QUERY_RETRY_DELAY: float = 0.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
