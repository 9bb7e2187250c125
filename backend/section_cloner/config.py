from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    anthropic_api_key: str = ""

    # Generation defaults
    default_model: str = "claude-sonnet-4-5-20250929"
    generation_concurrency: int = 4
    generation_max_retries: int = 3
    generation_max_tokens: int = 8000

    # Scrape defaults
    scrape_timeout: int = 90  # seconds
    page_load_timeout: int = 15000  # milliseconds
    viewport_width: int = 1920
    viewport_height: int = 1080
    section_screenshot_timeout: int = 5000  # milliseconds
    screenshot_quality: int = 60
    max_full_page_height: int = 12000

    # Segmentation thresholds (empirical, tune per site family)
    max_flatten_depth: int = 20
    min_section_size: int = 50  # px, both axes
    wrapper_height_ratio: float = 0.8  # of viewport height
    containment_ratio: float = 0.6  # inner area / outer area
    page_cover_ratio: float = 0.9  # of document height
    strict_html: bool = False

    log_level: str = "INFO"

    class Config:
        # Look for .env in the repo root (two levels up from backend/section_cloner/)
        _env_path = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
        env_file = _env_path if os.path.exists(_env_path) else None
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()
