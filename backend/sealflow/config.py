"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Production
    deployments point DATABASE_URL at PostgreSQL.

    Environment Variables:
        DATABASE_URL: SQLAlchemy connection string
        ENV: Deployment environment (development, production)
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
        CORS_ORIGINS: Comma-separated list of allowed origins
        UPLOAD_DIR: Root directory for the local file store
        MAX_UPLOAD_SIZE_BYTES: Upload size limit (default 10 MB)
        APPLICATION_NO_MAX_ATTEMPTS: Retries when an application number collides
    """

    # Database
    DATABASE_URL: str = "sqlite:///./sealflow.db"

    # Application
    ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # File store
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE_BYTES: int = 10 * 1024 * 1024

    # Workflow
    APPLICATION_NO_MAX_ATTEMPTS: int = 20

    # Paging
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 200

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()


# Module-level settings instance
settings = get_settings()
