"""
Application settings using Pydantic Settings.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from barcode_bridge.models.formats import ImageFormat


class Settings(BaseSettings):
    """Configuration loaded from BARCODE_BRIDGE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BARCODE_BRIDGE_",
        # Prefer local overrides while keeping .env as the default source
        env_file=(".env.local", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "staging", "prod"] = "dev"

    # Logging; the format defaults to json in prod and text elsewhere
    log_level: str = "INFO"
    log_format: Literal["json", "text"] | None = None

    # Encoding
    default_image_format: ImageFormat = ImageFormat.JPEG
    jpeg_quality: int = Field(95, ge=1, le=100, description="Quality for JPEG output")
    max_dimension: int = Field(10000, gt=0, description="Max encoded image side in pixels")

    # Decoding
    max_input_bytes: int = Field(50 * 1024 * 1024, gt=0, description="Max image size accepted")

    @field_validator("default_image_format", mode="before")
    @classmethod
    def parse_image_format(cls, v: object) -> ImageFormat:
        return ImageFormat.parse(v)  # type: ignore[arg-type]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "prod"

    @property
    def effective_log_format(self) -> Literal["json", "text"]:
        if self.log_format is not None:
            return self.log_format
        return "json" if self.is_production else "text"


def get_settings() -> Settings:
    """
    Load settings from the environment.

    Built fresh on every call: decode and encode keep no state between calls.
    """
    return Settings()
