# ============================================================================
# src/ticket_intake/core/context/__init__.py
# ============================================================================

from .enums import SourceTag, SourceStatus, AcquisitionMethod, OCR_SOURCE
from .ticket_record import UnifiedTicketRecord, missing_required_fields, REQUIRED_FOR_PAYMENT
from .search_criteria import SearchCriteria, IntakeRequest, IntakeResult

__all__ = [
    "SourceTag",
    "SourceStatus",
    "AcquisitionMethod",
    "OCR_SOURCE",
    "UnifiedTicketRecord",
    "missing_required_fields",
    "REQUIRED_FOR_PAYMENT",
    "SearchCriteria",
    "IntakeRequest",
    "IntakeResult",
]
