"""
Configuration settings for User Service.
Uses pydantic-settings for environment variable management.
"""

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from user_service.errors import ConfigError


class Settings(BaseSettings):
    """Application configuration from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # Application
    app_name: str = "User Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="production", description="development/staging/production")
    
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    request_timeout: float = Field(default=10.0, gt=0, description="Deadline for one write request, in seconds")
    
    # Database
    database_url: str = Field(..., description="PostgreSQL connection URL")
    db_pool_min_size: int = Field(default=1, ge=0)
    db_pool_max_size: int = Field(default=5, ge=1)
    db_pool_timeout: float = Field(default=5.0, gt=0, description="Seconds to wait for a free pooled connection")
    db_command_timeout: float = 30.0
    db_connect_attempts: int = Field(default=3, ge=1)
    db_connect_backoff: float = Field(default=0.5, ge=0, description="Initial delay between startup connection attempts")
    
    # Monitoring
    enable_metrics: bool = True
    
    # Logging
    log_level: str = "INFO"
    
    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Accept SQLAlchemy-style asyncpg URLs and reject non-PostgreSQL ones."""
        if v.startswith("postgresql+asyncpg://"):
            v = v.replace("postgresql+asyncpg://", "postgresql://", 1)
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError("DATABASE_URL must be a postgresql:// URL")
        return v
    
    @model_validator(mode="after")
    def check_pool_bounds(self) -> "Settings":
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError("DB_POOL_MIN_SIZE cannot exceed DB_POOL_MAX_SIZE")
        return self


def load_settings() -> Settings:
    """Read settings from the environment, raising ConfigError when invalid."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
