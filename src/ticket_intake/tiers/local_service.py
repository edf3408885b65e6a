# ============================================================================
# src/ticket_intake/tiers/local_service.py
# ============================================================================
"""
Local scraping service tier (development only).

Talks to the FastAPI service in ``ticket_intake.api.local_service``.
Constructing this tier outside a development environment is a
configuration error, so production tier lists can never contain it.
"""

from typing import Optional

import aiohttp

from ..config import intake_settings, IntakeSettings, threshold_settings, ThresholdSettings
from ..core.context import AcquisitionMethod
from ..utils.exceptions import ConfigurationError
from .http_tier import HttpTier


class LocalServiceTier(HttpTier):
    """Its tickets are regex matches over rendered page text, scored as such."""

    name = "local_service"
    method = AcquisitionMethod.SCRAPED_TEXT

    def __init__(
        self,
        settings: Optional[IntakeSettings] = None,
        thresholds: Optional[ThresholdSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        settings = settings or intake_settings
        if not settings.is_development:
            raise ConfigurationError(
                f"Local scraping service tier is only available in development "
                f"(ENVIRONMENT={settings.ENVIRONMENT.value})"
            )
        thresholds = thresholds or threshold_settings
        super().__init__(
            url=f"{settings.LOCAL_SERVICE_URL.rstrip('/')}/scrape",
            timeout_seconds=settings.TIER_TIMEOUT_SECONDS,
            thresholds=thresholds,
            session=session,
            prior=thresholds.SCRAPED_TEXT_CONFIDENCE,
        )
