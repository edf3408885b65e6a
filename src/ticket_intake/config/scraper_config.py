# ============================================================================
# src/ticket_intake/config/scraper_config.py
# ============================================================================
"""
Browser Automation Settings
- Headless mode and browser identity
- Per-state timeouts for the portal state machine
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScraperSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    HEADLESS: bool = Field(
        default=True,
        description="Run Chromium headless"
    )
    NAVIGATION_TIMEOUT_MS: int = Field(
        default=30000,
        gt=0,
        description="Budget for loading the portal search page"
    )
    FORM_TIMEOUT_MS: int = Field(
        default=15000,
        gt=0,
        description="Budget for the jurisdiction's search inputs to appear"
    )
    RESULTS_TIMEOUT_MS: int = Field(
        default=10000,
        gt=0,
        description="Budget for a recognizable results container after submit"
    )
    RESULTS_GRACE_MS: int = Field(
        default=3000,
        ge=0,
        description="Settle time when no results container is recognized"
    )
    SESSION_TIMEOUT_SECONDS: float = Field(
        default=75.0,
        gt=0,
        description="Hard ceiling on one browser session; exceeding it forces teardown"
    )
    USER_AGENT: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User agent presented to court portals"
    )
    VIEWPORT_WIDTH: int = Field(default=1280, gt=0)
    VIEWPORT_HEIGHT: int = Field(default=720, gt=0)


scraper_settings = ScraperSettings()
