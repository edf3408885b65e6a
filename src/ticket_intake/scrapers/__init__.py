"""Browser automation against court payment portals."""

from .browser import BrowserFactory, BrowserSession, PlaywrightBrowserFactory, PlaywrightSession
from .portal_scraper import PortalScraper, ScrapeOutcome, ScrapeState, html_to_text
from .registry import JurisdictionRegistry
