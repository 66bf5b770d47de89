"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Hosted database (REST interface)
    database_url: str = Field(
        default="https://db.example.com",
        description="Base URL of the hosted database REST interface"
    )
    database_api_key: str = Field(
        default="",
        description="API key sent as both apikey and bearer token"
    )
    database_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for database requests"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for database calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Farm grid
    block_size: int = Field(
        default=24,
        description="Width and height of a layout block in grid units"
    )
    planting_guide_step: int = Field(
        default=3,
        description="Spacing of planting guide cells inside a block"
    )

    # Caches
    cart_ttl_seconds: float = Field(
        default=60 * 60,
        description="Idle time after which a cart is discarded"
    )
    tree_catalog_ttl_seconds: float = Field(
        default=5 * 60,
        description="How long the tree type catalog is served from cache"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Whether per-client rate limiting is enforced"
    )
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Farm Market API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
