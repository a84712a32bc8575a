"""Configuration management for the gridmesh engine."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Grid Defaults
    grid_default_primary_lines: int = Field(
        default=10, ge=2, description="Primary lines created on placement"
    )
    grid_default_secondary_lines: int = Field(
        default=10, ge=2, description="Common points per primary line on placement"
    )
    grid_default_spacing: float = Field(
        default=5.0, ge=1.0, description="Distance between adjacent common points"
    )
    grid_subdivision: int = Field(
        default=4, ge=2, description="Refinement subdivision factor"
    )
    grid_refinement_enabled: bool = Field(
        default=False, description="Global refinement flag for newly viewed images"
    )

    # Interaction
    grid_handle_radius: int = Field(
        default=3, ge=1, description="Radius of common point handles (px)"
    )
    grid_hit_radius: float = Field(
        default=6.0, gt=0.0, description="Handle hit-test radius in image space"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path"
    )

    # Development Configuration
    debug_mode: bool = Field(
        default=False, description="Verify grid invariants after every edit"
    )

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ["json", "text"]:
            raise ValueError(f"Invalid log format: {v}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    # Load .env file if it exists
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    return Settings()
