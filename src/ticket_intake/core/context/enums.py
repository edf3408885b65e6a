# ============================================================================
# src/ticket_intake/core/context/enums.py
# ============================================================================
"""
Intake Enums
- Provenance tags
- Per-source branch status
- Acquisition method (drives the confidence prior)
"""

from enum import Enum


class SourceTag(str, Enum):
    OCR = "ocr"
    SHAVANO = "shavano"
    CIBOLO = "cibolo"


class SourceStatus(str, Enum):
    FOUND = "found"      # at least one record
    EMPTY = "empty"      # searched successfully, nothing outstanding
    FAILED = "failed"    # see per-source error kind


class AcquisitionMethod(str, Enum):
    STRUCTURED = "structured"      # tier JSON response fields
    SCRAPED_TEXT = "scraped_text"  # patterns over rendered page text
    OCR = "ocr"                    # patterns over recognized image text


OCR_SOURCE = SourceTag.OCR.value
