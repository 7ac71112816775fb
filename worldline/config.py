"""
Configuration settings using Pydantic Settings.
"""

from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings
from functools import lru_cache

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    DATABASE_PATH: str = "database/worldline.db"

    VIEWPORT_DEFAULT_START: float = 0.0
    VIEWPORT_DEFAULT_END: float = 1000.0
    VIEWPORT_MIN_SPAN: float = 1.0
    VIEWPORT_MAX_SPAN: Optional[float] = None
    VIEWPORT_AREA_X: float = 0.0
    VIEWPORT_AREA_WIDTH: float = 1000.0

    ZOOM_STEP: float = 1.2
    WHEEL_ZOOM_STEP: float = 1.1
    FIT_PADDING_RATIO: float = 0.1

    DRAG_MIN_TIME: float = 0.0
    DRAG_SNAP_TO_INTEGER: bool = True
    AUTO_PAN_ENABLED: bool = True
    AUTO_PAN_LEADING_FRACTION: float = 0.2
    AUTO_PAN_TRAILING_FRACTION: float = 0.8

    TICK_TARGET_COUNT: int = 8
    TICK_STEP_MULTIPLE: float = 50.0

    RESOLVER_CACHE_SIZE: int = 1000
    CONFLICT_AGE_WINDOW: float = 365.0

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    DEBUG: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    @model_validator(mode="after")
    def resolve_relative_paths(self):
        db_path = Path(self.DATABASE_PATH)
        if not db_path.is_absolute():
            self.DATABASE_PATH = str((BASE_DIR / db_path).resolve())
        return self

    @model_validator(mode="after")
    def check_viewport_defaults(self):
        if self.VIEWPORT_MIN_SPAN <= 0:
            raise ValueError("VIEWPORT_MIN_SPAN must be positive")
        if self.VIEWPORT_MAX_SPAN is not None and self.VIEWPORT_MAX_SPAN < self.VIEWPORT_MIN_SPAN:
            raise ValueError("VIEWPORT_MAX_SPAN must not be smaller than VIEWPORT_MIN_SPAN")
        if self.VIEWPORT_AREA_WIDTH <= 0:
            raise ValueError("VIEWPORT_AREA_WIDTH must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()


settings = get_settings()
