# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to extraction options, cache paths, and logging config

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="POKEDICT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Root for the fetch cache and image cache")
    output_path: Path = Field(
        default=Path("ddk/Dictionary.xml"), description="Where the generated dictionary XML is written"
    )

    # Extraction
    hq_pokemon_images: bool = Field(
        default=False, description="Load full-resolution gallery images instead of thumbnails"
    )
    hq_body_images: bool = Field(
        default=False, description="Load full-resolution info box and body images instead of thumbnails"
    )
    max_body_sections: int = Field(
        default=1, ge=0, description="How many body sections (Biology, In the anime, ...) to keep"
    )

    # Batch execution
    max_workers: int | None = Field(
        default=None, ge=1, description="Worker threads for page extraction (defaults to CPU count)"
    )
    keep_going: bool = Field(default=False, description="Continue the batch after a page fails")

    # Network
    request_delay: float = Field(default=0.5, ge=0.0, description="Pause before each network request in seconds")
    fetch_attempts: int = Field(default=3, ge=1, description="Attempts per request for transient failures")

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Logging output mode")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")

    @property
    def fetch_cache_dir(self) -> Path:
        return self.data_dir / "fetch_cache"

    @property
    def image_dir(self) -> Path:
        return self.data_dir / "images"


# Global config instance - lazy loaded when first accessed
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Creates the config on first access, subsequent calls return the same instance.

    Returns:
        Config: The application configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        Config: A fresh configuration instance
    """
    global _config_instance
    _config_instance = Config()
    return _config_instance
