# ============================================================================
# src/ticket_intake/scrapers/browser.py
# ============================================================================
"""
Browser session factory.

Every scrape gets its own Playwright driver, Chromium process and context;
nothing is shared or reused between scrapes or requests.
"""

import logging
from typing import Any, Optional, Protocol

from playwright.async_api import async_playwright, Error as PlaywrightError

from ..config import scraper_settings, ScraperSettings
from ..constants import CHROMIUM_ARGS
from ..utils.exceptions import BrowserLaunchFailed

logger = logging.getLogger(__name__)


class BrowserSession(Protocol):
    """An isolated page plus whatever must be closed afterwards."""

    page: Any

    async def close(self) -> None:
        ...


class BrowserFactory(Protocol):
    async def launch(self) -> BrowserSession:
        ...


class PlaywrightSession:
    """Owns one driver/browser/context/page chain."""

    def __init__(self, playwright, browser, context, page):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self._closed = False

    async def close(self) -> None:
        """Tear everything down. Safe to call more than once; never raises."""
        if self._closed:
            return
        self._closed = True

        for name, closer in (
            ("context", self.context.close if self.context else None),
            ("browser", self.browser.close if self.browser else None),
            ("playwright", self.playwright.stop if self.playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except (PlaywrightError, OSError) as e:
                logger.warning(f"Browser teardown: closing {name} failed: {e}")


class PlaywrightBrowserFactory:
    """Launches headless Chromium sessions configured from ScraperSettings."""

    def __init__(self, settings: Optional[ScraperSettings] = None):
        self.settings = settings or scraper_settings
        self.logger = logging.getLogger(__name__)

    async def launch(self) -> PlaywrightSession:
        """
        Start a fresh Chromium session.

        Raises:
            BrowserLaunchFailed: driver, browser or context could not start
        """
        playwright = browser = context = None
        try:
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(
                headless=self.settings.HEADLESS,
                args=list(CHROMIUM_ARGS),
            )
            context = await browser.new_context(
                user_agent=self.settings.USER_AGENT,
                viewport={
                    "width": self.settings.VIEWPORT_WIDTH,
                    "height": self.settings.VIEWPORT_HEIGHT,
                },
            )
            page = await context.new_page()
        except (PlaywrightError, OSError) as e:
            await PlaywrightSession(playwright, browser, context, None).close()
            raise BrowserLaunchFailed(f"Could not launch browser: {e}") from e
        except BaseException:
            # Cancelled mid-launch (session or tier budget): stop what already started
            await PlaywrightSession(playwright, browser, context, None).close()
            raise

        self.logger.debug("Chromium session launched")
        return PlaywrightSession(playwright, browser, context, page)
