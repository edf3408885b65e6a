# ============================================================================
# src/ticket_intake/core/__init__.py
# ============================================================================
"""
Core pipeline: records, confidence, dedup/ranking, orchestration.

The orchestrator and coordinator are imported from their modules
(``core.fallback_orchestrator``, ``core.intake``) to keep this package
importable from the extractors and tiers.
"""

from .context import (
    SourceTag,
    SourceStatus,
    AcquisitionMethod,
    OCR_SOURCE,
    UnifiedTicketRecord,
    missing_required_fields,
    REQUIRED_FOR_PAYMENT,
    SearchCriteria,
    IntakeRequest,
    IntakeResult,
)
from .confidence import prior_for, coverage, score_fields, COVERAGE_WEIGHTS
from .dedup import deduplicate_and_rank
