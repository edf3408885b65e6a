# ============================================================================
# src/ticket_intake/core/context/ticket_record.py
# ============================================================================
"""
Unified ticket record
- One outstanding citation, normalized across portals and OCR
- Immutable; each stage builds a new value with dataclasses.replace
"""

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .enums import OCR_SOURCE


# Fields a caller needs before a ticket can be paid without manual completion
REQUIRED_FOR_PAYMENT = ("citation_id", "fine_amount", "due_date")


@dataclass(frozen=True)
class UnifiedTicketRecord:
    citation_id: str
    source: str                                  # "ocr" or a jurisdiction id
    confidence: float = 0.0

    # Subject
    subject_name: Optional[str] = None
    address: Optional[str] = None
    license_number: Optional[str] = None
    date_of_birth: Optional[str] = None          # ISO YYYY-MM-DD

    # Citation
    fine_amount: Optional[float] = None
    due_date: Optional[str] = None               # ISO YYYY-MM-DD
    court_date: Optional[str] = None             # ISO YYYY-MM-DD
    violation: Optional[str] = None
    court_name: Optional[str] = None
    court_address: Optional[str] = None

    # Audit only: raw text/DOM snippet, capture timestamp, tier
    raw_evidence: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if self.fine_amount is not None and self.fine_amount < 0:
            raise ValueError(f"fine_amount must be >= 0, got {self.fine_amount}")
        object.__setattr__(self, "raw_evidence", MappingProxyType(dict(self.raw_evidence)))

    @property
    def dedup_key(self) -> str:
        return self.citation_id.strip().upper()

    @property
    def is_ocr(self) -> bool:
        return self.source == OCR_SOURCE

    def with_updates(self, **changes) -> "UnifiedTicketRecord":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["raw_evidence"] = dict(self.raw_evidence)
        return data

    def to_response(self) -> Dict[str, Any]:
        """Camel-cased shape handed to the API layer."""
        return {
            "citationId": self.citation_id,
            "subjectName": self.subject_name,
            "address": self.address,
            "licenseNumber": self.license_number,
            "dateOfBirth": self.date_of_birth,
            "fineAmount": self.fine_amount,
            "dueDate": self.due_date,
            "courtDate": self.court_date,
            "violation": self.violation,
            "courtName": self.court_name,
            "courtAddress": self.court_address,
            "confidence": self.confidence,
            "source": self.source,
            "rawEvidence": dict(self.raw_evidence),
        }


def missing_required_fields(record: UnifiedTicketRecord) -> List[str]:
    """
    Fields still needed before this ticket can be paid.

    Used to prompt for manual completion of partially-read citations.
    """
    missing = []
    for name in REQUIRED_FOR_PAYMENT:
        value = getattr(record, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing
