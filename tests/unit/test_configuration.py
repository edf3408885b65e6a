# ============================================================================
# FILE: tests/unit/test_configuration.py
# ============================================================================
"""
Unit tests for settings
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ticket_intake.config import (
    ExecutionEnvironment,
    IntakeSettings,
    OCRSettings,
    ScraperSettings,
    ThresholdSettings,
    intake_settings,
    threshold_settings,
)


def test_defaults_load():
    """Test that module-level settings load with sane defaults"""
    assert intake_settings.TIER_TIMEOUT_SECONDS > 0
    assert 1 <= intake_settings.MAX_CONCURRENT_SESSIONS <= 5
    assert threshold_settings.FINE_AMOUNT_MIN == 1.0
    assert threshold_settings.FINE_AMOUNT_MAX == 10000.0


def test_confidence_priors_are_ordered():
    """Test structured > scraped text > OCR ceiling"""
    t = ThresholdSettings()
    assert t.STRUCTURED_CONFIDENCE > t.SCRAPED_TEXT_CONFIDENCE > t.OCR_CONFIDENCE_CEILING


def test_misordered_priors_rejected():
    """Test the ordering validator"""
    with pytest.raises(PydanticValidationError):
        ThresholdSettings(STRUCTURED_CONFIDENCE=0.6, SCRAPED_TEXT_CONFIDENCE=0.8)


def test_fine_range_must_be_increasing():
    with pytest.raises(PydanticValidationError):
        ThresholdSettings(FINE_AMOUNT_MIN=500, FINE_AMOUNT_MAX=100)


def test_concurrency_ceiling_bounded():
    """Test MAX_CONCURRENT_SESSIONS stays within 1..5"""
    with pytest.raises(PydanticValidationError):
        IntakeSettings(MAX_CONCURRENT_SESSIONS=12)
    with pytest.raises(PydanticValidationError):
        IntakeSettings(MAX_CONCURRENT_SESSIONS=0)


def test_environment_defaults_to_production(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    settings = IntakeSettings(_env_file=None)
    assert settings.ENVIRONMENT == ExecutionEnvironment.PRODUCTION
    assert settings.is_development is False


def test_environment_from_env(monkeypatch):
    """Test the environment is read from process env"""
    monkeypatch.setenv("ENVIRONMENT", "development")
    settings = IntakeSettings(_env_file=None)
    assert settings.is_development is True


def test_scraper_timeouts_positive():
    with pytest.raises(PydanticValidationError):
        ScraperSettings(NAVIGATION_TIMEOUT_MS=0)


def test_ocr_settings_defaults():
    settings = OCRSettings()
    assert settings.TESSERACT_LANG == "eng"
    assert settings.OCR_MAX_DIMENSION > 0
