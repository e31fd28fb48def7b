"""
Configuration management for the jingle catalogue graph tooling.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Neo4jSettings(BaseSettings):
    """Graph database connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="NEO4J_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: str = "bolt://localhost:7687"
    user: str = "neo4j"  # AuraDB only accepts "neo4j"
    password: str = ""  # Required: Set NEO4J_PASSWORD in .env
    database: Optional[str] = None

    max_connection_pool_size: int = 100
    connection_timeout: float = 30.0  # seconds

    # Retry behaviour for transient driver failures
    retry_max: int = 3
    retry_initial_delay: float = 1.0  # seconds


class ImportSettings(BaseSettings):
    """CSV import settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    import_dir: Path = Field(default=Path("./data/import"))
    batch_size: int = 100

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None  # Also write a rotating log here when set
    log_rotation: str = "10 MB"
    log_retention: str = "1 week"

    @field_validator("import_dir", mode="before")
    @classmethod
    def ensure_path(cls, v):
        """Convert string to Path."""
        return Path(v)

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("batch_size")
    @classmethod
    def positive_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("batch_size must be at least 1")
        return v


class Settings(BaseSettings):
    """Main settings class that combines all settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    neo4j: Neo4jSettings = Field(default_factory=Neo4jSettings)
    importer: ImportSettings = Field(default_factory=ImportSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for quick access
settings = get_settings()
