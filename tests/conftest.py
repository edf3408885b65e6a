# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.

Browsers and tiers are replaced with in-memory fakes; nothing here touches
the network or launches Chromium.
"""

import io

import pytest
from PIL import Image

from ticket_intake.config import IntakeSettings, ScraperSettings, ThresholdSettings
from ticket_intake.core.context import SearchCriteria, UnifiedTicketRecord
from ticket_intake.utils.exceptions import BrowserLaunchFailed

from fakes import FakeBrowserFactory


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def thresholds():
    return ThresholdSettings()


@pytest.fixture
def fast_scraper_settings():
    """Scraper settings with no settle delay and a short session budget."""
    return ScraperSettings(RESULTS_GRACE_MS=0, SESSION_TIMEOUT_SECONDS=5)


@pytest.fixture
def dev_settings():
    return IntakeSettings(ENVIRONMENT="development", REMOTE_FUNCTION_URL=None, TIER_TIMEOUT_SECONDS=5)


@pytest.fixture
def prod_settings():
    return IntakeSettings(ENVIRONMENT="production", REMOTE_FUNCTION_URL=None, TIER_TIMEOUT_SECONDS=5)


@pytest.fixture
def criteria():
    return SearchCriteria(license_number="D123456789", state="TX")


@pytest.fixture
def criteria_with_dob():
    return SearchCriteria(license_number="D123456789", state="TX", date_of_birth="1990-04-12")


@pytest.fixture
def make_record():
    def _make(citation_id="215064-1", source="shavano", confidence=0.85, **fields):
        return UnifiedTicketRecord(citation_id=citation_id, source=source, confidence=confidence, **fields)
    return _make


@pytest.fixture
def portal_results_text():
    """Visible text of a portal results page with two citations"""
    return """
    Search Results
    Citation No: 215064 - 1
    Violation: SPEEDING 10% ABOVE LIMIT
    Fine Amount: $185.00
    Due Date: 03/15/2025

    Citation No: 215064 - 2
    Violation: FAILURE TO MAINTAIN FINANCIAL RESPONSIBILITY
    Fine Amount: $1,250.00
    Due Date: 04/01/2025

    Shavano Park Municipal Court
    """


@pytest.fixture
def no_results_text():
    return """
    Search Results
    No outstanding citations were found for the information provided.
    Questions? Call the court clerk.
    """


@pytest.fixture
def citation_photo_text():
    """Recognized text of a photographed paper citation"""
    return "\n".join([
        "CITY OF CIBOLO MUNICIPAL COURT",
        "CITATION NO: C-48213",
        "Defendant: JOHN Q PUBLIC",
        "DOB: 04/12/1990",
        "DL#: D123456789",
        "Violation: SPEEDING 45 IN 30",
        "Fine: $150.00",
        "Court Date: 05/20/2025",
        "Pay by 05/01/2025",
    ])


@pytest.fixture
def png_bytes():
    """A small white PNG"""
    buffer = io.BytesIO()
    Image.new("RGB", (200, 100), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def failing_browser_factory():
    return FakeBrowserFactory(launch_error=BrowserLaunchFailed("no chromium"))
