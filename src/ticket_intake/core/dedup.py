# ============================================================================
# src/ticket_intake/core/dedup.py
# ============================================================================
"""
Deduplication & Ranking

Merges records from every branch into one list keyed by citation id
(trimmed, case-insensitive). For each key the kept record is the one with
the highest confidence; ties go to a non-OCR record, then to the more
complete record, then to a fixed field ordering so the result never
depends on which branch finished first.

Output is sorted by descending confidence, then citation id.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from .context import UnifiedTicketRecord

logger = logging.getLogger(__name__)

_COMPARABLE_FIELDS = (
    "source",
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
)


def _preference(record: UnifiedTicketRecord) -> Tuple:
    populated = sum(1 for name in _COMPARABLE_FIELDS if getattr(record, name) is not None)
    fingerprint = tuple(
        "" if getattr(record, name) is None else str(getattr(record, name))
        for name in _COMPARABLE_FIELDS
    )
    return (record.confidence, not record.is_ocr, populated, fingerprint)


def _rank_key(record: UnifiedTicketRecord) -> Tuple:
    return (-record.confidence, record.dedup_key)


def deduplicate_and_rank(records: Iterable[UnifiedTicketRecord]) -> List[UnifiedTicketRecord]:
    """
    Keep the best record per citation id and order by confidence.

    Records without a usable citation id are dropped. Pure and idempotent:
    feeding the output back in returns the same sequence.
    """
    best: Dict[str, UnifiedTicketRecord] = {}
    dropped = 0

    for record in records:
        if not record.citation_id or not record.citation_id.strip():
            dropped += 1
            continue
        key = record.dedup_key
        current = best.get(key)
        if current is None or _preference(record) > _preference(current):
            best[key] = record

    if dropped:
        logger.debug(f"Dropped {dropped} record(s) without a citation id")

    return sorted(best.values(), key=_rank_key)
