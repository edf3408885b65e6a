# ============================================================================
# FILE: tests/unit/test_browser.py
# ============================================================================
"""
Unit tests for the Playwright browser factory
"""

import asyncio
from unittest.mock import patch

import pytest
from playwright.async_api import Error as PlaywrightError

from ticket_intake.config import ScraperSettings
from ticket_intake.scrapers.browser import PlaywrightBrowserFactory, PlaywrightSession
from ticket_intake.utils.exceptions import BrowserLaunchFailed


class FakeChromium:
    def __init__(self, delay=0.0, error=None):
        self.delay = delay
        self.error = error

    async def launch(self, headless=True, args=None):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        raise AssertionError("launch was expected to stall or fail")


class FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakeStarter:
    def __init__(self, playwright):
        self.playwright = playwright

    async def start(self):
        return self.playwright


def patched_driver(playwright):
    return patch(
        "ticket_intake.scrapers.browser.async_playwright",
        return_value=FakeStarter(playwright),
    )


@pytest.mark.asyncio
async def test_cancelled_launch_stops_driver():
    """Test a launch cut short by a timeout still stops the Playwright driver"""
    playwright = FakePlaywright(FakeChromium(delay=10))
    factory = PlaywrightBrowserFactory(ScraperSettings())

    with patched_driver(playwright):
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(factory.launch(), 0.1)

    assert playwright.stopped


@pytest.mark.asyncio
async def test_failed_launch_raises_and_stops_driver():
    playwright = FakePlaywright(FakeChromium(error=PlaywrightError("Executable doesn't exist")))
    factory = PlaywrightBrowserFactory(ScraperSettings())

    with patched_driver(playwright):
        with pytest.raises(BrowserLaunchFailed, match="Executable doesn't exist"):
            await factory.launch()

    assert playwright.stopped


@pytest.mark.asyncio
async def test_session_close_is_idempotent():
    playwright = FakePlaywright(FakeChromium())
    session = PlaywrightSession(playwright, None, None, None)

    await session.close()
    playwright.stopped = False
    await session.close()

    assert not playwright.stopped
