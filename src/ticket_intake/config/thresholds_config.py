# ============================================================================
# src/ticket_intake/config/thresholds_config.py
# ============================================================================
"""
Confidence Priors and Plausibility Bounds
- Base confidence per acquisition path
- Fine amount plausibility range

The priors are uncalibrated starting points, not measured accuracy. They
must keep the ordering structured > scraped text > OCR.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThresholdSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    STRUCTURED_CONFIDENCE: float = Field(
        default=0.95,
        ge=0.0, le=1.0,
        description="Records read from a tier's structured JSON response"
    )
    SCRAPED_TEXT_CONFIDENCE: float = Field(
        default=0.85,
        ge=0.0, le=1.0,
        description="Records recovered by pattern matching a rendered portal page"
    )
    OCR_CONFIDENCE_CEILING: float = Field(
        default=0.75,
        ge=0.0, le=1.0,
        description="Upper bound for records derived from OCR text"
    )
    FINE_AMOUNT_MIN: float = Field(
        default=1.0,
        ge=0.0,
        description="Smallest plausible fine amount (inclusive)"
    )
    FINE_AMOUNT_MAX: float = Field(
        default=10000.0,
        gt=0.0,
        description="Largest plausible fine amount (exclusive)"
    )

    @model_validator(mode="after")
    def check_ordering(self):
        if not (self.STRUCTURED_CONFIDENCE > self.SCRAPED_TEXT_CONFIDENCE > self.OCR_CONFIDENCE_CEILING):
            raise ValueError(
                "Confidence priors must satisfy STRUCTURED > SCRAPED_TEXT > OCR_CEILING"
            )
        if self.FINE_AMOUNT_MIN >= self.FINE_AMOUNT_MAX:
            raise ValueError("FINE_AMOUNT_MIN must be below FINE_AMOUNT_MAX")
        return self


threshold_settings = ThresholdSettings()
