# ============================================================================
# FILE: tests/unit/test_dedup.py
# ============================================================================
"""
Unit tests for deduplication and ranking
"""

import itertools

from ticket_intake.core.dedup import deduplicate_and_rank


def test_highest_confidence_kept(make_record):
    low = make_record("215064-1", confidence=0.6, fine_amount=100.0)
    high = make_record(" 215064-1 ", confidence=0.9)

    result = deduplicate_and_rank([low, high])

    assert result == [high]


def test_key_is_case_insensitive(make_record):
    result = deduplicate_and_rank([make_record("c-48213"), make_record("C-48213")])
    assert len(result) == 1


def test_tie_prefers_scraped_over_ocr(make_record):
    """Test equal confidence keeps the portal record, not the OCR one"""
    ocr = make_record("C-48213", source="ocr", confidence=0.7, fine_amount=150.0, due_date="2025-05-01")
    portal = make_record("C-48213", source="cibolo", confidence=0.7)

    assert deduplicate_and_rank([ocr, portal]) == [portal]
    assert deduplicate_and_rank([portal, ocr]) == [portal]


def test_tie_prefers_more_complete(make_record):
    sparse = make_record("A1", source="shavano", confidence=0.8)
    full = make_record("A1", source="shavano", confidence=0.8, fine_amount=50.0)
    assert deduplicate_and_rank([sparse, full])[0].fine_amount == 50.0


def test_order_independent(make_record):
    records = [
        make_record("A1", confidence=0.8, source="shavano"),
        make_record("A1", confidence=0.8, source="cibolo"),
        make_record("B2", confidence=0.95),
        make_record("C3", confidence=0.5),
    ]
    results = {tuple(deduplicate_and_rank(p)) for p in itertools.permutations(records)}
    assert len(results) == 1


def test_sorted_by_confidence_then_citation(make_record):
    records = [
        make_record("B", confidence=0.7),
        make_record("A", confidence=0.7),
        make_record("C", confidence=0.9),
    ]
    assert [r.citation_id for r in deduplicate_and_rank(records)] == ["C", "A", "B"]


def test_idempotent(make_record):
    records = [make_record("A1", confidence=0.4), make_record("a1", confidence=0.9), make_record("B1")]
    once = deduplicate_and_rank(records)
    assert deduplicate_and_rank(once) == once


def test_blank_citation_dropped(make_record):
    assert deduplicate_and_rank([make_record("   "), make_record("")]) == []
    assert deduplicate_and_rank([]) == []
