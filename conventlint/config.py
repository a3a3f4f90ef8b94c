"""
conventlint Configuration — pydantic-settings based.

Runtime knobs are read from environment variables (CONVENTLINT_*) or a .env
file. The convention rule set itself lives in a separate YAML file and is
loaded once per run by the rule loader, never through these settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide settings sourced from environment variables."""

    # ── Rule set ──
    config_path: str | None = Field(
        default=None,
        description="Rule set file used when --config is not given",
    )

    # ── Checking ──
    max_workers: int = Field(
        default=8, ge=1, description="Maximum files checked concurrently"
    )
    max_file_size_bytes: int = Field(
        default=1_000_000, ge=1, description="Files above this size fail with FileTooLarge"
    )
    read_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Per-file read timeout before ReadTimeout"
    )

    # ── Output ──
    default_format: str = Field(
        default="text", description="Report format when --format is not given"
    )
    log_level: str = Field(default="WARNING", description="Root log level for the CLI")

    model_config = {
        "env_prefix": "CONVENTLINT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Shared settings instance
settings = Settings()
