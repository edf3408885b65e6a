# ============================================================================
# src/ticket_intake/tiers/remote_function.py
# ============================================================================
"""
Remote managed function tier (first choice in every environment).
"""

from typing import Optional

import aiohttp

from ..config import intake_settings, IntakeSettings, ThresholdSettings
from .http_tier import HttpTier


class RemoteFunctionTier(HttpTier):
    """Calls the hosted scrape-tickets function. Unconfigured means unavailable."""

    name = "remote_function"

    def __init__(
        self,
        settings: Optional[IntakeSettings] = None,
        thresholds: Optional[ThresholdSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        settings = settings or intake_settings
        headers = {}
        if settings.REMOTE_FUNCTION_KEY:
            headers["Authorization"] = f"Bearer {settings.REMOTE_FUNCTION_KEY}"
        super().__init__(
            url=settings.REMOTE_FUNCTION_URL,
            timeout_seconds=settings.TIER_TIMEOUT_SECONDS,
            headers=headers,
            thresholds=thresholds,
            session=session,
        )
