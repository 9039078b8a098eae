"""
Configuration management for LeaseKeeper.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# The version token is two digits wide.
MAX_VERSION_TOKEN = 99


def _parse_bool(v) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "y")
    return bool(v)


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: str = Field(default="production", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # Directory layout
    root_dir: Path = Field(default=Path("~/Documents"), alias="LEASE_ROOT_DIR")
    base_dir_name: str = Field(default="Leases", alias="LEASE_BASE_DIR_NAME")

    # Completed lease naming
    max_versions: int = Field(
        default=MAX_VERSION_TOKEN, ge=1, le=MAX_VERSION_TOKEN, alias="LEASE_MAX_VERSIONS"
    )

    # Template import
    seed_templates: bool = Field(default=False, alias="LEASE_SEED_TEMPLATES")

    @field_validator("debug", "log_json", "seed_templates", mode="before")
    @classmethod
    def parse_flags(cls, v):
        return _parse_bool(v)

    @field_validator("root_dir", mode="after")
    @classmethod
    def expand_root_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("base_dir_name")
    @classmethod
    def validate_base_dir_name(cls, v: str) -> str:
        v = v.strip()
        if not v or "/" in v or "\\" in v:
            raise ValueError("LEASE_BASE_DIR_NAME must be a single directory name")
        return v

    @property
    def lease_base_dir(self) -> Path:
        """Directory holding the three lease tiers."""
        return self.root_dir / self.base_dir_name

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global settings
    settings = None


def print_configuration_summary(config: Optional[Settings] = None) -> None:
    """Print a summary of the current configuration for debugging."""
    config = config or get_settings()
    print("=== LeaseKeeper Configuration Summary ===")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"JSON Logs: {config.log_json}")
    print()
    print(f"Root Directory: {config.root_dir}")
    print(f"Lease Directory: {config.lease_base_dir}")
    print(f"Max Versions: {config.max_versions}")
    print(f"Seed Templates: {'✓' if config.seed_templates else '✗'}")
    print("=" * 41)
