"""Configuration management for famgraph.

Loads settings from environment variables (or a `.env` file).
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Build settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Record collection
    family_data_dir: Path = Path("examples/royal-family-files")
    family_root_person: str = ""

    # Output
    site_output_dir: Path = Path("output")

    # Build behaviour
    layout_hint: bool = True
    write_ids: bool = True


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
