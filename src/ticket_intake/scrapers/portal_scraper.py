# ============================================================================
# src/ticket_intake/scrapers/portal_scraper.py
# ============================================================================
"""
Court Portal Scraper

One state machine shared by every jurisdiction:

    INIT -> LAUNCH -> NAVIGATE -> AWAIT_FORM -> FILL_FORM -> SUBMIT
         -> AWAIT_RESULTS -> EXTRACT -> SUCCESS

FAILURE is reachable from every non-terminal state. What differs between
portals (URL, selectors, form schema, court details) comes from a
JurisdictionProfile. The browser session is closed on every exit path.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from ..config import scraper_settings, ScraperSettings, threshold_settings, ThresholdSettings
from ..constants import CriteriaField, FieldKind, FormField, JurisdictionProfile
from ..core.context import AcquisitionMethod, SearchCriteria, UnifiedTicketRecord
from ..extractors.field_extractor import FieldExtractor
from ..utils.exceptions import (
    BrowserLaunchFailed,
    FormNotFound,
    NavigationFailed,
    NavigationTimeout,
    ScrapeFailure,
    SubmitFailed,
)
from ..utils.logging import mask_license
from ..utils.parsing import format_date, normalize_date
from .browser import BrowserFactory, PlaywrightBrowserFactory


class ScrapeState(str, Enum):
    INIT = "init"
    LAUNCH = "launch"
    NAVIGATE = "navigate"
    AWAIT_FORM = "await_form"
    FILL_FORM = "fill_form"
    SUBMIT = "submit"
    AWAIT_RESULTS = "await_results"
    EXTRACT = "extract"
    SUCCESS = "success"
    FAILURE = "failure"


# Failure raised when the session budget runs out while in a given state
TIMEOUT_FAILURES = {
    ScrapeState.INIT: BrowserLaunchFailed,
    ScrapeState.LAUNCH: BrowserLaunchFailed,
    ScrapeState.NAVIGATE: NavigationTimeout,
    ScrapeState.AWAIT_FORM: FormNotFound,
    ScrapeState.FILL_FORM: SubmitFailed,
    ScrapeState.SUBMIT: SubmitFailed,
    ScrapeState.AWAIT_RESULTS: SubmitFailed,
    ScrapeState.EXTRACT: SubmitFailed,
}


@dataclass
class ScrapeOutcome:
    """Terminal state of one scrape plus the path taken to get there."""
    source_id: str
    state: ScrapeState = ScrapeState.INIT
    trace: List[ScrapeState] = field(default_factory=lambda: [ScrapeState.INIT])
    records: List[UnifiedTicketRecord] = field(default_factory=list)
    error: Optional[ScrapeFailure] = None
    text_length: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state == ScrapeState.SUCCESS

    def enter(self, state: ScrapeState) -> None:
        self.state = state
        self.trace.append(state)


class PortalScraper:
    """
    Drives one browser session through a jurisdiction's search form.

    Usage:
        scraper = PortalScraper(SHAVANO, PlaywrightBrowserFactory())
        records = await scraper.scrape(criteria)
    """

    def __init__(
        self,
        profile: JurisdictionProfile,
        browser_factory: Optional[BrowserFactory] = None,
        extractor: Optional[FieldExtractor] = None,
        settings: Optional[ScraperSettings] = None,
        thresholds: Optional[ThresholdSettings] = None,
    ):
        self.profile = profile
        self.settings = settings or scraper_settings
        self.thresholds = thresholds or threshold_settings
        self.browser_factory = browser_factory or PlaywrightBrowserFactory(self.settings)
        self.extractor = extractor or FieldExtractor(self.thresholds)
        self.logger = logging.getLogger(__name__)

    @property
    def source_id(self) -> str:
        return self.profile.source_id

    async def scrape(self, criteria: SearchCriteria) -> List[UnifiedTicketRecord]:
        """
        Search the portal for the subject's outstanding citations.

        Returns:
            Records found; empty when the portal shows nothing outstanding

        Raises:
            ScrapeFailure subclass naming the state that failed
        """
        outcome = await self.run(criteria)
        if outcome.error is not None:
            raise outcome.error
        return outcome.records

    async def run(self, criteria: SearchCriteria) -> ScrapeOutcome:
        """Run the state machine; failures are recorded on the outcome, not raised."""
        outcome = ScrapeOutcome(source_id=self.source_id)
        self.logger.info(
            f"[{self.source_id}] Starting portal search ({mask_license(criteria.license_number)})"
        )

        try:
            await asyncio.wait_for(
                self._drive(criteria, outcome),
                timeout=self.settings.SESSION_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            failure_cls = TIMEOUT_FAILURES.get(outcome.state, SubmitFailed)
            self._fail(outcome, failure_cls(
                f"Session exceeded {self.settings.SESSION_TIMEOUT_SECONDS:.0f}s "
                f"during {outcome.state.value}",
                source_id=self.source_id,
            ))
        except ScrapeFailure as e:
            e.source_id = e.source_id or self.source_id
            self._fail(outcome, e)
        except PlaywrightError as e:
            failure_cls = TIMEOUT_FAILURES.get(outcome.state, SubmitFailed)
            self._fail(outcome, failure_cls(
                f"Browser error during {outcome.state.value}: {e}",
                source_id=self.source_id,
            ))

        return outcome

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def _drive(self, criteria: SearchCriteria, outcome: ScrapeOutcome) -> None:
        session = None
        try:
            self._transition(outcome, ScrapeState.LAUNCH)
            session = await self.browser_factory.launch()
            page = session.page

            self._transition(outcome, ScrapeState.NAVIGATE)
            await self._navigate(page)

            self._transition(outcome, ScrapeState.AWAIT_FORM)
            await self._await_form(page)

            self._transition(outcome, ScrapeState.FILL_FORM)
            await self._fill_form(page, criteria)

            self._transition(outcome, ScrapeState.SUBMIT)
            await self._submit(page)

            self._transition(outcome, ScrapeState.AWAIT_RESULTS)
            await self._await_results(page)

            self._transition(outcome, ScrapeState.EXTRACT)
            text = await self._page_text(page)
            outcome.text_length = len(text)
            outcome.records = self._extract(text, criteria, getattr(page, "url", None))

            self._transition(outcome, ScrapeState.SUCCESS)
            self.logger.info(f"[{self.source_id}] Found {len(outcome.records)} record(s)")
        finally:
            if session is not None:
                await session.close()
                self.logger.debug(f"[{self.source_id}] Session closed")

    def _transition(self, outcome: ScrapeOutcome, state: ScrapeState) -> None:
        outcome.enter(state)
        self.logger.debug(f"[{self.source_id}] -> {state.value}")

    def _fail(self, outcome: ScrapeOutcome, error: ScrapeFailure) -> None:
        failed_in = outcome.state
        outcome.error = error
        outcome.records = []
        outcome.enter(ScrapeState.FAILURE)
        self.logger.warning(f"[{self.source_id}] {error.kind} in {failed_in.value}: {error}")

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _navigate(self, page) -> None:
        try:
            await page.goto(
                self.profile.base_url,
                wait_until=self.profile.wait_until,
                timeout=self.settings.NAVIGATION_TIMEOUT_MS,
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"Portal did not load within {self.settings.NAVIGATION_TIMEOUT_MS}ms",
                source_id=self.source_id,
            ) from e
        except PlaywrightError as e:
            raise NavigationFailed(f"Portal failed to load: {e}", source_id=self.source_id) from e

    async def _await_form(self, page) -> None:
        try:
            await page.wait_for_selector(
                self.profile.ready_selector,
                timeout=self.settings.FORM_TIMEOUT_MS,
            )
        except PlaywrightError as e:
            raise FormNotFound(
                f"Search form not found ({self.profile.ready_selector})",
                source_id=self.source_id,
            ) from e

    async def _fill_form(self, page, criteria: SearchCriteria) -> None:
        for form_field in self.profile.form_fields:
            value = self.form_value(form_field, criteria)
            if value is None:
                if form_field.criteria_field in self.profile.required_fields:
                    raise SubmitFailed(
                        f"No value for required field {form_field.criteria_field.value}",
                        source_id=self.source_id,
                    )
                continue

            try:
                if form_field.kind == FieldKind.SELECT:
                    await page.select_option(
                        form_field.selector, value, timeout=self.settings.FORM_TIMEOUT_MS
                    )
                else:
                    await page.fill(
                        form_field.selector, value, timeout=self.settings.FORM_TIMEOUT_MS
                    )
            except PlaywrightError as e:
                raise SubmitFailed(
                    f"Could not set {form_field.criteria_field.value}: {e}",
                    source_id=self.source_id,
                ) from e

    async def _submit(self, page) -> None:
        try:
            await page.click(self.profile.submit_selector, timeout=self.settings.FORM_TIMEOUT_MS)
        except PlaywrightError as e:
            raise SubmitFailed(f"Search submit failed: {e}", source_id=self.source_id) from e

    async def _await_results(self, page) -> None:
        """Wait for a results container; a missing one falls through to a grace period."""
        try:
            await page.wait_for_selector(
                self.profile.results_selector,
                timeout=self.settings.RESULTS_TIMEOUT_MS,
            )
            return
        except PlaywrightError as e:
            self.logger.debug(f"[{self.source_id}] No results container ({e}); settling")

        try:
            await page.wait_for_timeout(self.settings.RESULTS_GRACE_MS)
        except PlaywrightError as e:
            self.logger.debug(f"[{self.source_id}] Grace wait interrupted: {e}")

    async def _page_text(self, page) -> str:
        """Visible text of the results page, from the DOM or from its HTML."""
        try:
            return await page.inner_text("body")
        except PlaywrightError as e:
            self.logger.debug(f"[{self.source_id}] inner_text failed ({e}); parsing HTML")

        try:
            html = await page.content()
        except PlaywrightError as e:
            raise SubmitFailed(f"Results page unreadable: {e}", source_id=self.source_id) from e
        return html_to_text(html)

    def _extract(
        self,
        text: str,
        criteria: SearchCriteria,
        url: Optional[str],
    ) -> List[UnifiedTicketRecord]:
        defaults: Dict[str, Any] = {
            "court_name": self.profile.court_name,
            "court_address": self.profile.court_address,
            "license_number": (criteria.license_number or "").upper() or None,
            "date_of_birth": normalize_date(criteria.date_of_birth),
            "subject_name": criteria.subject_name,
        }
        return self.extractor.extract_records(
            text,
            source=self.source_id,
            base_confidence=self.thresholds.SCRAPED_TEXT_CONFIDENCE,
            method=AcquisitionMethod.SCRAPED_TEXT,
            defaults={k: v for k, v in defaults.items() if v is not None},
            evidence={"url": url, "portal": self.profile.display_name},
        )

    def form_value(self, form_field: FormField, criteria: SearchCriteria) -> Optional[str]:
        """Criteria value rendered the way this portal's form expects it."""
        if form_field.criteria_field == CriteriaField.LICENSE_NUMBER:
            return criteria.license_number.upper() if criteria.license_number else None
        if form_field.criteria_field == CriteriaField.STATE:
            return criteria.state.upper() if criteria.state else None
        if form_field.criteria_field == CriteriaField.DATE_OF_BIRTH:
            return format_date(criteria.date_of_birth, self.profile.dob_format)
        return None


def html_to_text(html: Optional[str]) -> str:
    """Reduce page HTML to its visible text, one block per line."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    return soup.get_text(separator="\n", strip=True)
