# ============================================================================
# src/ticket_intake/core/intake.py
# ============================================================================
"""
Intake Coordinator

Entry point for one ticket lookup:

1. Validate the request (all violations at once, before any network work)
2. Fan out: one OCR branch if an image was given, one fallback-orchestrated
   branch per requested source, bounded by MAX_CONCURRENT_SESSIONS
3. Collect every branch; a failing branch is recorded, never fatal
4. Deduplicate and rank the merged records

Only ValidationError escapes run().
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import (
    intake_settings,
    IntakeSettings,
    ocr_settings,
    OCRSettings,
    scraper_settings,
    ScraperSettings,
    threshold_settings,
    ThresholdSettings,
)
from ..utils.exceptions import AllTiersExhausted, RecognitionFailed, TicketIntakeError
from ..utils.logging import LogContext
from .context import (
    IntakeRequest,
    IntakeResult,
    OCR_SOURCE,
    SearchCriteria,
    SourceStatus,
    UnifiedTicketRecord,
)
from .dedup import deduplicate_and_rank
from .fallback_orchestrator import FallbackOrchestrator


@dataclass
class BranchOutcome:
    """Result of one OCR or source branch."""
    branch: str
    records: List[UnifiedTicketRecord] = field(default_factory=list)
    error: Optional[BaseException] = None
    tier: Optional[str] = None

    @property
    def status(self) -> SourceStatus:
        if self.error is not None:
            return SourceStatus.FAILED
        return SourceStatus.FOUND if self.records else SourceStatus.EMPTY

    @property
    def error_kind(self) -> Optional[str]:
        if self.error is None:
            return None
        if isinstance(self.error, AllTiersExhausted):
            return self.error.last_kind
        if isinstance(self.error, TicketIntakeError):
            return self.error.kind
        return type(self.error).__name__

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        if isinstance(self.error, RecognitionFailed):
            return self.error.user_message
        return str(self.error)


class IntakeCoordinator:
    """
    Runs the OCR and per-source branches of one intake request.

    All collaborators are passed in; see create_intake_coordinator() for
    the default wiring.
    """

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        validator,
        ocr_stage=None,
        settings: Optional[IntakeSettings] = None,
    ):
        self.orchestrator = orchestrator
        self.validator = validator
        self.ocr_stage = ocr_stage
        self.settings = settings or intake_settings
        self.logger = logging.getLogger(__name__)

    async def run(self, request: IntakeRequest) -> IntakeResult:
        """
        Process one intake request.

        Raises:
            ValidationError: request rejected before any work started
        """
        self.validator.validate(request)

        sources = request.unique_sources
        limit = max(1, min(self.settings.MAX_CONCURRENT_SESSIONS, len(sources) or 1))
        semaphore = asyncio.Semaphore(limit)

        branches = []
        coroutines = []
        if request.image is not None:
            branches.append(OCR_SOURCE)
            coroutines.append(self._run_ocr(request.image))
        for source_id in sources:
            branches.append(source_id)
            coroutines.append(self._run_source(source_id, request.criteria, semaphore))

        self.logger.info(
            f"Intake started: {len(sources)} source(s), image={'yes' if request.image is not None else 'no'}, "
            f"{request.criteria.describe()}, concurrency={limit}"
        )

        gathered = await asyncio.gather(*coroutines, return_exceptions=True)

        outcomes = []
        for branch, outcome in zip(branches, gathered):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                self.logger.error(f"[{branch}] Branch crashed: {outcome!r}")
                outcome = BranchOutcome(branch, error=outcome)
            outcomes.append(outcome)

        return self._merge(outcomes)

    async def _run_source(
        self,
        source_id: str,
        criteria: SearchCriteria,
        semaphore: asyncio.Semaphore,
    ) -> BranchOutcome:
        async with semaphore:
            with LogContext(self.logger, source_id=source_id):
                try:
                    result = await self.orchestrator.run(source_id, criteria)
                except TicketIntakeError as e:
                    self.logger.warning(f"[{source_id}] Branch failed: {e}")
                    return BranchOutcome(source_id, error=e)
                return BranchOutcome(source_id, records=result.records, tier=result.tier)

    async def _run_ocr(self, image: bytes) -> BranchOutcome:
        if self.ocr_stage is None:
            return BranchOutcome(OCR_SOURCE, error=RecognitionFailed("OCR is not available"))
        with LogContext(self.logger, source_id=OCR_SOURCE):
            try:
                outcome = await self.ocr_stage.process_async(
                    image, timeout=self.settings.OCR_TIMEOUT_SECONDS
                )
            except RecognitionFailed as e:
                self.logger.warning(f"[ocr] Recognition failed: {e}")
                return BranchOutcome(OCR_SOURCE, error=e)
            return BranchOutcome(OCR_SOURCE, records=outcome.records)

    def _merge(self, outcomes: List[BranchOutcome]) -> IntakeResult:
        result = IntakeResult()
        collected: List[UnifiedTicketRecord] = []

        for outcome in outcomes:
            result.per_source_status[outcome.branch] = outcome.status
            if outcome.error is not None:
                result.per_source_errors[outcome.branch] = outcome.error_kind
                result.error_messages[outcome.branch] = outcome.error_message
            collected.extend(outcome.records)

        result.records = deduplicate_and_rank(collected)
        self.logger.info(
            f"Intake finished: {len(result.records)} record(s), "
            f"{len(result.per_source_errors)} failed branch(es)"
        )
        return result


def create_intake_coordinator(
    settings: Optional[IntakeSettings] = None,
    scraper_config: Optional[ScraperSettings] = None,
    thresholds: Optional[ThresholdSettings] = None,
    ocr_config: Optional[OCRSettings] = None,
    registry=None,
    browser_factory=None,
) -> IntakeCoordinator:
    """
    Wire a coordinator from settings.

    Tier order: remote function, local service (development only), direct
    scrape. The environment decides here, once, whether the local service
    tier exists.
    """
    # Deferred so importing core stays light and free of import cycles
    from ..extractors import FieldExtractor, OCRStage
    from ..scrapers import JurisdictionRegistry, PlaywrightBrowserFactory
    from ..tiers import DirectScrapeTier, LocalServiceTier, RemoteFunctionTier
    from ..validators import CriteriaValidator

    settings = settings or intake_settings
    scraper_config = scraper_config or scraper_settings
    thresholds = thresholds or threshold_settings
    ocr_config = ocr_config or ocr_settings
    registry = registry or JurisdictionRegistry()
    browser_factory = browser_factory or PlaywrightBrowserFactory(scraper_config)
    extractor = FieldExtractor(thresholds)

    tiers = [RemoteFunctionTier(settings, thresholds)]
    if settings.is_development:
        tiers.append(LocalServiceTier(settings, thresholds))
    tiers.append(DirectScrapeTier(registry, browser_factory, extractor, scraper_config, thresholds))

    return IntakeCoordinator(
        orchestrator=FallbackOrchestrator.from_settings(tiers, settings),
        validator=CriteriaValidator(registry),
        ocr_stage=OCRStage(extractor, ocr_config, thresholds),
        settings=settings,
    )
