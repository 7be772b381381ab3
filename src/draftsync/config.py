"""Draft engine configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class DraftSyncConfig(BaseSettings):
    """Draft engine configuration loaded from environment variables.

    Settings are loaded from DRAFTSYNC_* environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Reference cache
    cache_default_ttl_seconds: int = Field(
        default=300,
        gt=0,
        description="TTL for per-teacher reference data (subjects, grade levels, classes)",
    )
    cache_roster_ttl_seconds: int = Field(
        default=900,
        gt=0,
        description="TTL for the school-wide class roster",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "DRAFTSYNC_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: DraftSyncConfig | None = None


def get_config() -> DraftSyncConfig:
    """Get the draft engine configuration singleton.

    Returns:
        DraftSyncConfig: Draft engine configuration instance
    """
    global _config
    if _config is None:
        _config = DraftSyncConfig()
    return _config


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config
    _config = None
