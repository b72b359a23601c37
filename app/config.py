"""
Application Configuration
Uses Pydantic Settings for environment-based configuration
"""

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Inkwell API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")
    DEBUG: bool = Field(default=False)
    API_V1_STR: str = "/api/v1"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    # Allow str because it can be a comma-separated string in .env
    CORS_ORIGINS: str | list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"]
    )

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Redis (site settings cache)
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    CACHE_TTL: int = 300  # 5 minutes

    # Arq worker
    ARQ_REDIS_URL: str = Field(default="redis://localhost:6379/1")
    ARQ_KEEP_RESULT: int = 3600  # 1 hour

    # Reply count repair interval for the scheduled job
    REPLY_COUNT_REFRESH_MINUTES: int = Field(default=15, ge=1, le=60)

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Comments
    COMMENT_MAX_LENGTH: int = 1000
    RECENT_COMMENTS_LIMIT: int = 5

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="console", pattern="^(console|json)$")

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v


# Create global settings instance
load_dotenv()
settings = Settings()  # type: ignore[call-arg]


class CommentStatus:
    """Approval status filter values accepted by admin listings"""

    ALL = "all"
    APPROVED = "approved"
    PENDING = "pending"


class SiteDefaults:
    """Fallback values used when the site_settings row is missing"""

    SITE_NAME = "Inkwell"
    SITE_TITLE = "Inkwell"
    SITE_DESCRIPTION = "A blog powered by Inkwell"
    SITE_EMAIL = "admin@example.com"
    SITE_URL = "https://example.com"
    POSTS_PER_PAGE = 10
    INTRODUCTION = "Welcome to the blog"
    SITE_FOOTER = "All rights reserved."
    COMMENTS_ENABLED = True
