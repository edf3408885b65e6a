# ============================================================================
# src/ticket_intake/api/local_service.py
# ============================================================================
"""
Local Scraping Service (development only)

FastAPI wrapper around the portal state machine, used as the middle
fallback tier while developing. Speaks the same contract as the remote
managed function.

Run with:
    ENVIRONMENT=development uvicorn ticket_intake.api.local_service:app --port 3001
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    intake_settings,
    IntakeSettings,
    scraper_settings,
    ScraperSettings,
    threshold_settings,
    ThresholdSettings,
)
from ..core.context import AcquisitionMethod, SearchCriteria
from ..extractors.field_extractor import FieldExtractor
from ..scrapers.browser import BrowserFactory, PlaywrightBrowserFactory
from ..scrapers.portal_scraper import PortalScraper
from ..scrapers.registry import JurisdictionRegistry
from ..utils.exceptions import ConfigurationError, ScrapeFailure, UnknownSourceError
from ..utils.logging import mask_license

logger = logging.getLogger(__name__)


# ============================================================================
# Models
# ============================================================================

class ScrapeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    license_number: str = Field(alias="licenseNumber", min_length=1)
    state: str = Field(min_length=2, max_length=2)
    dob: Optional[str] = None


class ScrapedTicket(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    citation_no: str = Field(alias="citationNo")
    violation: Optional[str] = None
    fine_amount: Optional[float] = Field(default=None, alias="fineAmount")
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    court_name: Optional[str] = Field(default=None, alias="courtName")
    court_address: Optional[str] = Field(default=None, alias="courtAddress")
    court_date: Optional[str] = Field(default=None, alias="courtDate")
    confidence: float
    method: str = AcquisitionMethod.SCRAPED_TEXT.value


class ScrapeResult(BaseModel):
    tickets: list[ScrapedTicket]
    count: int
    source: str


# ============================================================================
# App factory
# ============================================================================

def create_app(
    settings: Optional[IntakeSettings] = None,
    registry: Optional[JurisdictionRegistry] = None,
    browser_factory: Optional[BrowserFactory] = None,
    scraper_config: Optional[ScraperSettings] = None,
    thresholds: Optional[ThresholdSettings] = None,
) -> FastAPI:
    """
    Build the local scraping service.

    Raises:
        ConfigurationError: ENVIRONMENT is not development
    """
    settings = settings or intake_settings
    if not settings.is_development:
        raise ConfigurationError(
            f"Local scraping service is development-only (ENVIRONMENT={settings.ENVIRONMENT.value})"
        )

    registry = registry or JurisdictionRegistry()
    scraper_config = scraper_config or scraper_settings
    thresholds = thresholds or threshold_settings
    browser_factory = browser_factory or PlaywrightBrowserFactory(scraper_config)
    extractor = FieldExtractor(thresholds)

    app = FastAPI(
        title="Ticket Scraping Service",
        description="Development-only court portal scraping service",
        version="0.1.0",
    )

    @app.get("/health")
    async def health():
        """Health check for the fallback tier."""
        return {"status": "healthy", "environment": settings.ENVIRONMENT.value}

    @app.get("/sources")
    async def sources():
        """Jurisdictions this service can scrape."""
        return {"sources": registry.list_sources()}

    @app.post("/scrape", response_model=ScrapeResult, response_model_by_alias=True)
    async def scrape(request: ScrapeRequest):
        try:
            profile = registry.get(request.source)
        except UnknownSourceError as e:
            raise HTTPException(status_code=400, detail=str(e))

        criteria = SearchCriteria(
            license_number=request.license_number.strip(),
            state=request.state.strip().upper(),
            date_of_birth=request.dob,
        )
        if profile.requires_dob and not criteria.date_of_birth:
            raise HTTPException(status_code=400, detail=f"dob is required for {profile.source_id}")

        logger.info(f"Scrape request: {profile.source_id} {mask_license(criteria.license_number)}")
        scraper = PortalScraper(
            profile,
            browser_factory=browser_factory,
            extractor=extractor,
            settings=scraper_config,
            thresholds=thresholds,
        )

        try:
            records = await scraper.scrape(criteria)
        except ScrapeFailure as e:
            return JSONResponse(status_code=502, content={"error": str(e), "kind": e.kind})

        tickets = [
            ScrapedTicket(
                citation_no=r.citation_id,
                violation=r.violation,
                fine_amount=r.fine_amount,
                due_date=r.due_date,
                court_name=r.court_name,
                court_address=r.court_address,
                court_date=r.court_date,
                confidence=r.confidence,
            )
            for r in records
        ]
        return ScrapeResult(tickets=tickets, count=len(tickets), source=profile.source_id)

    return app


def _default_app() -> Optional[FastAPI]:
    try:
        return create_app()
    except ConfigurationError as e:
        logger.debug(f"Local scraping service disabled: {e}")
        return None


# Only constructed in development; None otherwise
app = _default_app()


if __name__ == "__main__":
    import uvicorn

    if app is None:
        raise SystemExit("Set ENVIRONMENT=development to run the local scraping service")
    uvicorn.run(app, host="127.0.0.1", port=3001)
