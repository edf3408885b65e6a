# ============================================================================
# src/ticket_intake/config/ocr_config.py
# ============================================================================
"""
OCR Settings
- Tesseract language and page segmentation
- Image enhancement retry for faint photos
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OCRSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    TESSERACT_LANG: str = Field(
        default="eng",
        description="Tesseract language pack"
    )
    TESSERACT_CONFIG: str = Field(
        default="--psm 6",
        description="Extra tesseract CLI flags (uniform block of text suits printed citations)"
    )
    OCR_ENHANCE: bool = Field(
        default=True,
        description="Retry on an enhanced image when the first pass is weak"
    )
    OCR_MAX_DIMENSION: int = Field(
        default=2500,
        gt=0,
        description="Photos larger than this are downscaled before recognition"
    )
    MIN_TEXT_LENGTH: int = Field(
        default=20,
        ge=0,
        description="Below this many characters the first pass counts as weak"
    )


ocr_settings = OCRSettings()
