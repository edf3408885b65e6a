# ============================================================================
# src/ticket_intake/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import intake_settings, IntakeSettings, ExecutionEnvironment
from .scraper_config import scraper_settings, ScraperSettings
from .thresholds_config import threshold_settings, ThresholdSettings
from .ocr_config import ocr_settings, OCRSettings
from .logging_config import logging_settings, LoggingSettings
