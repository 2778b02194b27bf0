"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "Chart Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS (Frontend URL)
    frontend_url: str = "http://localhost:3000"
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Pane layout (pixels)
    main_pane_height: int = 500
    secondary_pane_height: int = 150

    # Control surface: how many oscillators may be active before the
    # selection dialog stops offering more. None disables the limit.
    max_oscillators: Optional[int] = 1

    # Series defaults
    main_price_scale_id: str = "right"
    histogram_positive_color: str = "#26A69A"
    histogram_negative_color: str = "#EF5350"
    guide_line_color: str = "#787B86"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CHART_"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
