"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vocab_wallpaper.models.schemas import WallpaperTheme


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="Vocabulary Wallpaper", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3001, description="Server port")

    # Storage Configuration
    public_dir: Path = Field(default=Path("./public"), description="Public serving directory")
    image_filename: str = Field(default="daily.png", description="Wallpaper artifact file name")

    # Word Selection
    word_count: int = Field(default=3, ge=1, description="Words per wallpaper")

    # Dictionary Configuration
    dictionary_api_url: str = Field(
        default="https://api.dictionaryapi.dev/api/v2/entries/en",
        description="Free Dictionary API base URL",
    )
    dictionary_timeout: float = Field(
        default=10.0, gt=0, description="Dictionary request timeout in seconds"
    )

    # Rendering Configuration
    canvas_width: int = Field(default=1290, gt=0, description="Wallpaper width in pixels")
    canvas_height: int = Field(default=2796, gt=0, description="Wallpaper height in pixels")
    wallpaper_theme: WallpaperTheme = Field(
        default=WallpaperTheme.LIGHT, description="Wallpaper colour theme"
    )
    render_target_selector: str = Field(
        default="#wallpaper-target", description="CSS selector of the captured element"
    )
    render_settle_delay: float = Field(
        default=2.0, ge=0, description="Wait after fonts/visibility before capture, in seconds"
    )

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")

    # Scheduling Configuration
    schedule_enabled: bool = Field(default=True, description="Enable the daily timer")
    schedule_cron: str = Field(default="0 0 * * *", description="Five-field cron expression")
    schedule_timezone: str = Field(default="Asia/Dubai", description="Timezone for the cron")
    generate_on_startup: bool = Field(
        default=True, description="Generate at startup when no wallpaper exists"
    )
    generation_single_flight: bool = Field(
        default=False, description="Skip new triggers while a generation is in flight"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("image_filename")
    @classmethod
    def validate_image_filename(cls, v: str) -> str:
        """Validate the artifact is a bare PNG file name."""
        if "/" in v or "\\" in v or not v.lower().endswith(".png"):
            raise ValueError("Image filename must be a bare file name ending in .png")
        return v

    @field_validator("schedule_cron")
    @classmethod
    def validate_schedule_cron(cls, v: str) -> str:
        """Validate cron expression has five fields."""
        fields = v.split()
        if len(fields) != 5:
            raise ValueError("Cron expression must have five fields: m h dom mon dow")
        return " ".join(fields)

    @field_validator("schedule_timezone")
    @classmethod
    def validate_schedule_timezone(cls, v: str) -> str:
        """Validate timezone name against the IANA database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("public_dir")
    @classmethod
    def create_directories(cls, v: Path) -> Path:
        """Ensure directories exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def image_path(self) -> Path:
        """Location of the wallpaper artifact."""
        return self.public_dir / self.image_filename

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="VOCAB_WALLPAPER_",
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
