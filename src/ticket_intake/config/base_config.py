# ============================================================================
# src/ticket_intake/config/base_config.py
# ============================================================================
"""
Intake Configuration
- Execution environment (gates the local scraping service tier)
- Remote managed function endpoint
- Tier and OCR time budgets
- Concurrency ceiling for browser sessions
"""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutionEnvironment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"


class IntakeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENVIRONMENT: ExecutionEnvironment = Field(
        default=ExecutionEnvironment.PRODUCTION,
        description="Execution context. Only 'development' enables the local scraping service tier"
    )

    REMOTE_FUNCTION_URL: Optional[str] = Field(
        default=None,
        description="URL of the managed scrape-tickets function. Unset means the tier is absent"
    )
    REMOTE_FUNCTION_KEY: Optional[str] = Field(
        default=None,
        description="Bearer key sent to the managed function"
    )

    LOCAL_SERVICE_URL: str = Field(
        default="http://localhost:3001",
        description="Base URL of the development-only local scraping service"
    )

    TIER_TIMEOUT_SECONDS: float = Field(
        default=90.0,
        gt=0,
        description="Budget for one execution tier; exceeding it counts as that tier's failure"
    )
    OCR_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Budget for one OCR recognition call"
    )

    MAX_CONCURRENT_SESSIONS: int = Field(
        default=4,
        ge=1, le=5,
        description="Ceiling on parallel source branches, to avoid overwhelming third-party portals"
    )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == ExecutionEnvironment.DEVELOPMENT


intake_settings = IntakeSettings()
