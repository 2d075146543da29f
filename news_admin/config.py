"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),  # Check parent dir first, then current
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "News Admin API"
    app_version: str = "1.0.0"
    debug: bool = False

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Database (written by the external ingester, read-only here)
    database_url: str = "sqlite+aiosqlite:///./instance/news.db"
    create_tables: bool = False

    # Admin authentication
    admin_username: str = "admin"
    admin_password: str = "admin123"
    admin_password_hash: str | None = None  # bcrypt hash, wins over admin_password
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 hours
    enable_auth: bool = True

    # News list
    default_page_size: int = 50
    max_page_size: int = 200
    search_debounce_ms: int = 300

    # Statistics
    high_priority_threshold: float = 2.0
    recent_logs_limit: int = 50
    dashboard_top_news: int = 10

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/app.log"
    log_error_file: str = "logs/errors.log"
    log_rotation: str = "10 MB"
    log_retention_days: int = 30


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
