# ============================================================================
# src/ticket_intake/core/context/search_criteria.py
# ============================================================================
"""
Search criteria and intake request/result containers
- SearchCriteria: who to look up
- IntakeRequest: what to search (sources and/or an image)
- IntakeResult: merged records plus per-source outcome
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .enums import SourceStatus
from .ticket_record import UnifiedTicketRecord
from ...utils.logging import mask_license


@dataclass(frozen=True)
class SearchCriteria:
    license_number: Optional[str] = None
    state: Optional[str] = None
    date_of_birth: Optional[str] = None     # YYYY-MM-DD or MM/DD/YYYY
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    radius_miles: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchCriteria":
        """Build from the inbound request's camel-cased criteria object."""
        return cls(
            license_number=_clean(data.get("licenseNumber")),
            state=_clean(data.get("state"), upper=True),
            date_of_birth=_clean(data.get("dob")),
            first_name=_clean(data.get("firstName")),
            last_name=_clean(data.get("lastName")),
            radius_miles=data.get("radius"),
        )

    @property
    def subject_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None

    def describe(self) -> str:
        """Log-safe summary."""
        return f"license={mask_license(self.license_number)} state={self.state or '?'}"


@dataclass(frozen=True)
class IntakeRequest:
    sources: Tuple[str, ...] = ()
    criteria: SearchCriteria = field(default_factory=SearchCriteria)
    image: Optional[bytes] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntakeRequest":
        sources = data.get("sources") or ()
        if isinstance(sources, str):
            sources = (sources,)
        return cls(
            sources=tuple(sources),
            criteria=SearchCriteria.from_dict(data.get("criteria") or {}),
            image=data.get("image"),
        )

    @property
    def unique_sources(self) -> Tuple[str, ...]:
        """
        Requested source ids, lower-cased, duplicates collapsed, order kept.

        Non-string entries are skipped here and reported by the validator.
        """
        seen = []
        for source in self.sources:
            if not isinstance(source, str):
                continue
            key = source.strip().lower()
            if key and key not in seen:
                seen.append(key)
        return tuple(seen)


@dataclass
class IntakeResult:
    records: List[UnifiedTicketRecord] = field(default_factory=list)
    per_source_errors: Dict[str, str] = field(default_factory=dict)
    per_source_status: Dict[str, SourceStatus] = field(default_factory=dict)
    error_messages: Dict[str, str] = field(default_factory=dict)

    @property
    def manual_entry_suggested(self) -> bool:
        return not self.records or bool(self.per_source_errors)

    def to_response(self) -> Dict[str, Any]:
        return {
            "records": [r.to_response() for r in self.records],
            "perSourceErrors": dict(self.per_source_errors),
            "perSourceStatus": {k: v.value for k, v in self.per_source_status.items()},
            "manualEntrySuggested": self.manual_entry_suggested,
        }


def _clean(value: Any, upper: bool = False) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text.upper() if upper else text
