# ============================================================================
# src/ticket_intake/tiers/direct_scrape.py
# ============================================================================
"""
Direct in-process scrape tier (last resort).

Runs the portal state machine in this process with a fresh browser session.
"""

import logging
from typing import List, Optional

from ..config import ScraperSettings, ThresholdSettings
from ..core.context import SearchCriteria, UnifiedTicketRecord
from ..extractors.field_extractor import FieldExtractor
from ..scrapers.browser import BrowserFactory
from ..scrapers.portal_scraper import PortalScraper
from ..scrapers.registry import JurisdictionRegistry
from ..utils.logging import log_performance
from .base import ExecutionTier

logger = logging.getLogger(__name__)


class DirectScrapeTier(ExecutionTier):
    name = "direct_scrape"

    def __init__(
        self,
        registry: JurisdictionRegistry,
        browser_factory: Optional[BrowserFactory] = None,
        extractor: Optional[FieldExtractor] = None,
        settings: Optional[ScraperSettings] = None,
        thresholds: Optional[ThresholdSettings] = None,
    ):
        super().__init__()
        self.registry = registry
        self.browser_factory = browser_factory
        self.extractor = extractor
        self.settings = settings
        self.thresholds = thresholds

    def scraper_for(self, source_id: str) -> PortalScraper:
        return PortalScraper(
            self.registry.get(source_id),
            browser_factory=self.browser_factory,
            extractor=self.extractor,
            settings=self.settings,
            thresholds=self.thresholds,
        )

    @log_performance(logger, "Direct scrape")
    async def fetch(self, source_id: str, criteria: SearchCriteria) -> List[UnifiedTicketRecord]:
        return await self.scraper_for(source_id).scrape(criteria)
