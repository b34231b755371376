"""Application settings using Pydantic."""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///talent_match.db",
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

    # Scoring weights
    weights_file: Optional[Path] = Field(
        default=None,
        description="YAML file with named weight sets (defaults to config/weights.yaml)",
    )
    weight_set: str = Field(
        default="default",
        description="Name of the weight set to score with",
    )

    # Ranking
    min_match_score: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Minimum total score for a pair to be kept in a ranking",
    )
    cache_limit: int = Field(
        default=50,
        gt=0,
        description="Max number of cached matches per job / jobseeker",
    )
    default_limit: int = Field(
        default=20,
        gt=0,
        description="Number of matches returned when the caller gives no limit",
    )
    population_batch_size: int = Field(
        default=500,
        gt=0,
        description="Rows fetched per round trip while streaming a population",
    )
    ranking_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Abandon a ranking scan after this many seconds",
    )

    # Scheduler
    refresh_interval_minutes: int = Field(
        default=60,
        gt=0,
        description="How often the refresher recomputes every cached ranking (minutes)",
    )

    # Paths
    config_dir: Path = Field(
        default=Path(__file__).parent,
        description="Configuration directory",
    )

    @property
    def weights_path(self) -> Path:
        """Path to the weights YAML file."""
        return self.weights_file or self.config_dir / "weights.yaml"

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return self.config_dir.parent


# Global settings instance
settings = Settings()
