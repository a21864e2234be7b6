"""
Configuration management for Menu Island
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Menu Island"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./menuisland.db"

    # Tenants
    BASE_DOMAIN: str = "menuisland.it"
    DEFAULT_TEMPLATE_ID: int = 1  # template used when a restaurant has none

    # Translation
    SOURCE_LANGUAGE: str = "it"
    TRANSLATION_PROVIDER: str = "google"  # "google", "claude" or "none"
    GOOGLE_TRANSLATE_API_KEY: str = ""
    TRANSLATION_TIMEOUT_SECONDS: float = 5.0
    TRANSLATION_MAX_CONCURRENCY: int = 8  # provider calls in flight per process
    TRANSLATION_CACHE_MAX_ENTRIES: int = 5000
    TRANSLATION_CACHE_TTL_SECONDS: int = 60 * 60 * 24  # 24 hours

    # Claude API
    ANTHROPIC_API_KEY: str = ""
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    CLAUDE_MAX_TOKENS: int = 1024

    # Cloudflare DNS (subdomain provisioning)
    CLOUDFLARE_API_TOKEN: str = ""
    CLOUDFLARE_ZONE_ID: str = ""
    DNS_TARGET_IP: str = "1.1.1.1"
    PROVISIONING_TIMEOUT_SECONDS: float = 10.0

    # Analytics
    TOP_VIEWED_LIMIT: int = 10
    DEFAULT_ANALYTICS_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
