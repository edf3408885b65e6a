# ============================================================================
# src/ticket_intake/core/confidence.py
# ============================================================================
"""
Confidence scoring for ticket records.

A record's confidence is the prior of the path that produced it scaled by
how much of the core citation was recovered:

    confidence = prior * (0.5 + 0.5 * coverage)

Priors come from ThresholdSettings and are ordered
structured > scraped text > OCR. They are uncalibrated; tune them against
observed outcomes rather than treating them as accuracy.
"""

from typing import Any, Mapping, Optional

from ..config import threshold_settings, ThresholdSettings
from .context import AcquisitionMethod

# How much each field contributes to coverage (sums to 1.0)
COVERAGE_WEIGHTS = {
    "citation_id": 0.40,
    "fine_amount": 0.25,
    "due_date": 0.20,
    "violation": 0.15,
}


def prior_for(method: AcquisitionMethod, thresholds: Optional[ThresholdSettings] = None) -> float:
    """Base confidence for an acquisition method."""
    thresholds = thresholds or threshold_settings
    if method == AcquisitionMethod.STRUCTURED:
        return thresholds.STRUCTURED_CONFIDENCE
    if method == AcquisitionMethod.SCRAPED_TEXT:
        return thresholds.SCRAPED_TEXT_CONFIDENCE
    return thresholds.OCR_CONFIDENCE_CEILING


def coverage(fields: Mapping[str, Any]) -> float:
    """Weighted share of core citation fields that are present."""
    return sum(
        weight for name, weight in COVERAGE_WEIGHTS.items()
        if fields.get(name) not in (None, "")
    )


def score_fields(fields: Mapping[str, Any], prior: float) -> float:
    """Confidence for a set of extracted fields; 0.0 when nothing was found."""
    if not any(v not in (None, "") for v in fields.values()):
        return 0.0
    score = prior * (0.5 + 0.5 * coverage(fields))
    return round(max(0.0, min(score, prior, 1.0)), 4)
