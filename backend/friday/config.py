"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_FILENAME = "leaderboard.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("environment", "node_env"),
        description="Environment: development, staging, production",
    )
    app_version: str = Field(default="1.0.0", description="Version reported by /api/health")
    render_instance_id: str = Field(default="local", description="Hosting instance identifier")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")
    trust_proxy: bool = Field(
        default=False,
        description="Use the first X-Forwarded-For hop as the client address",
    )
    max_body_bytes: int = Field(default=10 * 1024, description="Maximum JSON body size")

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Data directory")
    database_url: str = Field(
        default="",
        description="sqlite:<path> connection string; defaults to <data_dir>/leaderboard.db",
    )

    # Admin
    admin_token: Optional[str] = Field(default=None, description="Bearer token for admin routes")

    # Rate limiting
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000, description="General limiter window")
    rate_limit_max_requests: int = Field(default=100, description="General limiter threshold")
    leaderboard_rate_limit: int = Field(
        default=10,
        description="Maximum submissions per hour per instance/IP",
    )

    # Feature toggles
    enable_leaderboard: bool = True
    enable_analytics: bool = True
    enable_public_stats: bool = True

    # CORS
    cors_origins: str = Field(
        default="https://friday-boi.pages.dev",
        description="Comma-separated list of allowed CORS origins",
    )

    # Observability
    logfire_token: str = Field(default="", description="Logfire observability token")

    # Backups
    backup_retention_days: int = Field(default=7, description="Local snapshot retention")
    backup_interval_hours: int = Field(default=6, description="Scheduled backup interval")
    s3_bucket_name: str = ""
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "us-east-1"

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    @field_validator("leaderboard_rate_limit", "rate_limit_max_requests", "rate_limit_window_ms")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Rate limit settings must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def database_path(self) -> Path:
        """
        Resolve the SQLite file path.

        Accepts both ``sqlite:/path/to.db`` and SQLAlchemy style
        ``sqlite:///relative.db`` / ``sqlite:////absolute.db`` strings.
        """
        url = self.database_url.strip()
        if not url:
            return self.data_dir / DEFAULT_DATABASE_FILENAME

        if "://" in url:
            database = make_url(url).database
            if not database:
                raise ValueError(f"DATABASE_URL has no database path: {url}")
            return Path(database).resolve()

        if url.startswith("sqlite:"):
            url = url[len("sqlite:"):]
        return Path(url).resolve()

    @property
    def s3_upload_enabled(self) -> bool:
        """Remote upload needs a bucket and both AWS credentials."""
        return bool(self.s3_bucket_name and self.aws_access_key_id and self.aws_secret_access_key)


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    return Settings()
