# ============================================================================
# src/ticket_intake/extractors/field_extractor.py
# ============================================================================
"""
Field Extraction Engine

Table-driven extraction of citation fields from unstructured text (OCR
output or a rendered portal page's visible text).

For every field an ordered list of matchers is tried, most specific first;
the first matcher that yields an acceptable value wins. Fields are
independent of each other. Absent fields are simply left out of the result:
"unknown" is never turned into 0 or "".

Candidate policy inside the winning matcher:
- fine amount: largest value inside the plausible range
- due date: first candidate (in text order) that parses as a date
- everything else: first candidate that normalizes

The engine never raises on text content.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..config import threshold_settings, ThresholdSettings
from ..constants import field_patterns as fp
from ..core.confidence import COVERAGE_WEIGHTS, coverage, score_fields
from ..core.context import AcquisitionMethod, UnifiedTicketRecord
from ..utils.parsing import (
    amount_in_range,
    collapse_whitespace,
    normalize_date,
    parse_amount,
)

logger = logging.getLogger(__name__)

Matcher = Tuple[str, "re.Pattern", Optional["re.Pattern"]]

# Fields read once per document, shared by every citation found in it
DOCUMENT_FIELDS = (
    "subject_name",
    "address",
    "license_number",
    "date_of_birth",
    "court_name",
    "court_address",
)

# Fields that belong to one citation
CITATION_FIELDS = (
    "fine_amount",
    "due_date",
    "court_date",
    "violation",
)

EVIDENCE_TEXT_LIMIT = 4000


@dataclass
class ExtractionResult:
    """Fields found in one block of text, plus which matcher produced each."""
    fields: Dict[str, Any] = field(default_factory=dict)
    matchers: Dict[str, str] = field(default_factory=dict)
    confidence: float = 0.0

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.fields

    @property
    def coverage(self) -> float:
        return coverage(self.fields)


class FieldExtractor:
    """
    Extracts UnifiedTicketRecord fields from free text.

    One instance is stateless after construction and safe to share across
    branches.
    """

    def __init__(self, thresholds: Optional[ThresholdSettings] = None):
        self.logger = logging.getLogger(__name__)
        self.thresholds = thresholds or threshold_settings

        # field -> (ordered matchers, candidate normalizer, selection policy)
        self._table: Dict[str, Tuple[Sequence[Matcher], Callable, str]] = {
            "citation_id": (fp.CITATION_PATTERNS, self._normalize_citation, "first"),
            "subject_name": (fp.NAME_PATTERNS, self._normalize_text, "first"),
            "address": (fp.ADDRESS_PATTERNS, self._normalize_text, "first"),
            "license_number": (fp.LICENSE_PATTERNS, self._normalize_license, "first"),
            "date_of_birth": (fp.DOB_PATTERNS, self._normalize_date, "first"),
            "fine_amount": (fp.FINE_AMOUNT_PATTERNS, self._normalize_amount, "max"),
            "due_date": (fp.DUE_DATE_PATTERNS, self._normalize_date, "first"),
            "court_date": (fp.COURT_DATE_PATTERNS, self._normalize_date, "first"),
            "violation": (fp.VIOLATION_PATTERNS, self._normalize_violation, "first"),
            "court_name": (fp.COURT_NAME_PATTERNS, self._normalize_text, "first"),
            "court_address": (fp.COURT_ADDRESS_PATTERNS, self._normalize_text, "first"),
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, text: Optional[str], base_confidence: float = 1.0) -> ExtractionResult:
        """
        Extract every known field from one block of text.

        Args:
            text: OCR output or rendered page text
            base_confidence: prior for the acquisition path producing the text

        Returns:
            ExtractionResult; fields with no acceptable match are absent
        """
        result = ExtractionResult()
        if not text or not isinstance(text, str):
            return result

        for name in self._table:
            self._extract_into(result, name, text)

        result.confidence = self.score(result, base_confidence)
        return result

    def extract_field(self, name: str, text: Optional[str]) -> Optional[Any]:
        """Run a single field's matcher list; None when nothing acceptable matched."""
        if name not in self._table:
            raise KeyError(f"Unknown field: {name}")
        if not text or not isinstance(text, str):
            return None
        result = ExtractionResult()
        self._extract_into(result, name, text)
        return result.get(name)

    def find_citations(self, text: Optional[str]) -> List[Tuple[str, int, int]]:
        """
        All distinct citation identifiers in text order.

        Uses the first citation matcher that finds anything, so a labelled
        citation number is never mixed with looser guesses.

        Returns:
            [(citation_id, start, end), ...]
        """
        if not text or not isinstance(text, str):
            return []

        for matcher_name, pattern, exclude in fp.CITATION_PATTERNS:
            found = []
            seen = set()
            try:
                for match in pattern.finditer(text):
                    if self._excluded(text, match.start(), exclude):
                        continue
                    citation = self._normalize_citation(match)
                    if not citation or citation.upper() in seen:
                        continue
                    seen.add(citation.upper())
                    found.append((citation, match.start(), match.end()))
            except Exception as e:
                self.logger.debug(f"Citation matcher {matcher_name} failed: {e}")
                continue
            if found:
                return found
        return []

    def extract_records(
        self,
        text: Optional[str],
        source: str,
        base_confidence: float,
        method: AcquisitionMethod,
        defaults: Optional[Dict[str, Any]] = None,
        evidence: Optional[Dict[str, Any]] = None,
    ) -> List[UnifiedTicketRecord]:
        """
        Recover zero or more citation records from one block of text.

        Document-level fields (subject, court) are read from the whole text.
        Per-citation fields are read from the segment running from the
        citation's line to the next citation's line.

        Args:
            text: text to read
            source: provenance tag of the component producing the text
            base_confidence: acquisition-path prior
            method: acquisition method, recorded in the evidence
            defaults: values used when a field is not found (e.g. court name)
            evidence: extra audit entries

        Returns:
            Records with a non-empty citation id. Never raises.
        """
        try:
            return self._extract_records(text, source, base_confidence, method, defaults, evidence)
        except Exception as e:
            self.logger.warning(f"Record extraction failed for {source}: {e}")
            return []

    def score(self, result: ExtractionResult, base_confidence: float) -> float:
        """Prior scaled by how much of the core citation was recovered."""
        return score_fields(result.fields, base_confidence)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _extract_records(self, text, source, base_confidence, method, defaults, evidence):
        if not text or not isinstance(text, str):
            return []

        citations = self.find_citations(text)
        if not citations:
            self.logger.debug(f"No citation identifiers found in {len(text)} chars from {source}")
            return []

        document = ExtractionResult()
        for name in DOCUMENT_FIELDS:
            self._extract_into(document, name, text)

        captured_at = datetime.now(timezone.utc).isoformat()
        records = []

        for index, segment in enumerate(self._segments(text, citations)):
            citation_id = citations[index][0]
            if len(citations) == 1:
                segment = text

            local = ExtractionResult(fields={"citation_id": citation_id})
            for name in CITATION_FIELDS:
                self._extract_into(local, name, segment)

            values = dict(defaults or {})
            values.update(document.fields)
            values.update(local.fields)

            scored = ExtractionResult(fields=values)
            confidence = self.score(scored, base_confidence)

            raw = {
                "text": segment[:EVIDENCE_TEXT_LIMIT],
                "captured_at": captured_at,
                "method": method.value,
                "matchers": {**document.matchers, **local.matchers},
            }
            if evidence:
                raw.update(evidence)

            records.append(UnifiedTicketRecord(
                source=source,
                confidence=confidence,
                raw_evidence=raw,
                **{k: v for k, v in values.items() if k in _RECORD_FIELDS},
            ))

        self.logger.debug(f"Extracted {len(records)} record(s) from {source}")
        return records

    @staticmethod
    def _segments(text: str, citations: List[Tuple[str, int, int]]) -> List[str]:
        """Split text into one slice per citation, each starting at its line."""
        starts = []
        previous_end = 0
        for _, start, end in citations:
            line_start = text.rfind("\n", 0, start) + 1
            starts.append(max(line_start, previous_end))
            previous_end = end

        segments = []
        for i, start in enumerate(starts):
            stop = starts[i + 1] if i + 1 < len(starts) else len(text)
            segments.append(text[start:stop])
        return segments

    def _extract_into(self, result: ExtractionResult, name: str, text: str) -> None:
        matchers, normalize, policy = self._table[name]
        try:
            found = self._run_matchers(text, matchers, normalize, policy)
        except Exception as e:
            self.logger.debug(f"Field {name} extraction failed: {e}")
            return
        if found is not None:
            value, matcher_name = found
            result.fields[name] = value
            result.matchers[name] = matcher_name

    def _run_matchers(
        self,
        text: str,
        matchers: Sequence[Matcher],
        normalize: Callable,
        policy: str,
    ) -> Optional[Tuple[Any, str]]:
        for matcher_name, pattern, exclude in matchers:
            candidates = []
            for match in pattern.finditer(text):
                if self._excluded(text, match.start(), exclude):
                    continue
                value = normalize(match)
                if value is None:
                    continue
                if policy == "first":
                    return value, matcher_name
                candidates.append(value)

            if candidates:
                return max(candidates), matcher_name
        return None

    @staticmethod
    def _excluded(text: str, start: int, exclude: Optional["re.Pattern"]) -> bool:
        if exclude is None:
            return False
        return bool(exclude.search(text[max(0, start - 30):start]))

    # ------------------------------------------------------------------
    # Normalizers: match -> value, or None to reject the candidate
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_citation(match: "re.Match") -> Optional[str]:
        groups = [g for g in match.groups() if g]
        if not groups:
            return None
        if len(groups) >= 2:
            citation = f"{groups[0].strip()}-{groups[1].strip()}"
        else:
            citation = re.sub(r"\s*-\s*", "-", groups[0].strip())
        citation = citation.strip("-").upper()
        return citation or None

    @staticmethod
    def _normalize_text(match: "re.Match") -> Optional[str]:
        value = collapse_whitespace(match.group(1)).strip(" ,.-")
        return value or None

    @staticmethod
    def _normalize_license(match: "re.Match") -> Optional[str]:
        value = match.group(1).strip().upper()
        return value or None

    @staticmethod
    def _normalize_date(match: "re.Match") -> Optional[str]:
        return normalize_date(match.group(1))

    def _normalize_amount(self, match: "re.Match") -> Optional[float]:
        amount = parse_amount(match.group(1))
        if not amount_in_range(
            amount,
            self.thresholds.FINE_AMOUNT_MIN,
            self.thresholds.FINE_AMOUNT_MAX,
        ):
            return None
        return amount

    @staticmethod
    def _normalize_violation(match: "re.Match") -> Optional[str]:
        value = collapse_whitespace(match.group(1)).strip(" ,.:;-")
        if len(value) < 3:
            return None
        return value


_RECORD_FIELDS = {
    "citation_id",
    "subject_name",
    "address",
    "license_number",
    "date_of_birth",
    "fine_amount",
    "due_date",
    "court_date",
    "violation",
    "court_name",
    "court_address",
}
