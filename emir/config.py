"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    assets_dir: Path = Field(default=Path("assets"), alias="ASSETS_DIR")
    output_dir: Path = Field(default=Path("output"), alias="OUTPUT_DIR")

    # Remote image fetching
    fetch_timeout_seconds: float = Field(default=10.0, alias="EMIR_FETCH_TIMEOUT_SECONDS")
    user_agent: str = Field(default="EMIR-Quote-Card-Generator/1.0", alias="EMIR_USER_AGENT")
    max_image_bytes: int = Field(default=15 * 1024 * 1024, alias="MAX_PORTRAIT_BYTES")
    allow_private_image_hosts: bool = Field(default=False, alias="ALLOW_PRIVATE_IMAGE_HOSTS")

    # HTTP API keys (unset = open endpoint)
    quote_cards_api_key: Optional[str] = Field(default=None, alias="QUOTE_CARDS_API_KEY")
    thumbnails_api_key: Optional[str] = Field(default=None, alias="THUMBNAILS_API_KEY")

    # Server
    host: str = Field(default="127.0.0.1", alias="EMIR_HOST")
    port: int = Field(default=8000, alias="EMIR_PORT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    gcp_project_id: Optional[str] = Field(default=None, alias="GCP_PROJECT_ID")

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def fonts_dir(self) -> Path:
        """Path to the fonts directory."""
        return self.assets_dir / "fonts"

    @property
    def body_font_path(self) -> Path:
        """Path to the regular-weight body font (Akkurat)."""
        return self.fonts_dir / "AkkRg_Pro_1.otf"

    @property
    def bold_font_path(self) -> Path:
        """Path to the bold body font (Akkurat Bold)."""
        return self.fonts_dir / "AkkBd_Pro_1.otf"

    @property
    def logo_path(self) -> Path:
        """Path to the EMIR wordmark."""
        return self.assets_dir / "logo.png"


# Global settings instance
settings = Settings()
