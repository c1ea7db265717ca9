"""Application settings using Pydantic."""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Matching engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///job_match.db",
        description="SQLAlchemy database URL",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for a rotating log file",
    )

    # Scoring
    default_currency: str = Field(
        default="USD",
        description="Currency assumed when a salary range omits one",
    )
    min_store_score: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Minimum score for a new (candidate, job) pair to be stored",
    )

    # Repository writes
    match_write_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for a match write before surfacing a conflict",
    )
    match_write_backoff_seconds: float = Field(
        default=0.05,
        ge=0,
        description="Linear backoff step between write attempts (seconds)",
    )

    # Batch rescoring
    rescore_max_workers: int = Field(
        default=4,
        ge=1,
        description="Thread pool size for parallel score computation",
    )

    # Paths
    config_dir: Path = Field(
        default=Path(__file__).parent,
        description="Configuration directory",
    )

    @property
    def catalog_path(self) -> Path:
        """Default path to the YAML catalog used by scripts."""
        return self.config_dir / "catalog.yaml"

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return self.config_dir.parent


# Global settings instance
settings = Settings()
