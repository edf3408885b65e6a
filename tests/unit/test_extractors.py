# ============================================================================
# FILE: tests/unit/test_extractors.py
# ============================================================================
"""
Unit tests for the field extraction engine
"""

import pytest

from ticket_intake.core.context import AcquisitionMethod
from ticket_intake.extractors import FieldExtractor


@pytest.fixture
def extractor(thresholds):
    return FieldExtractor(thresholds)


# ----------------------------------------------------------------------------
# Single fields
# ----------------------------------------------------------------------------

def test_extract_full_citation(extractor, citation_photo_text):
    """Test every field is read from a typical paper citation"""
    result = extractor.extract(citation_photo_text, base_confidence=0.75)

    assert result.get("citation_id") == "C-48213"
    assert result.get("subject_name") == "JOHN Q PUBLIC"
    assert result.get("date_of_birth") == "1990-04-12"
    assert result.get("license_number") == "D123456789"
    assert result.get("violation") == "SPEEDING 45 IN 30"
    assert result.get("fine_amount") == 150.0
    assert result.get("court_date") == "2025-05-20"
    assert result.get("due_date") == "2025-05-01"
    assert result.get("court_name") == "CITY OF CIBOLO MUNICIPAL COURT"
    assert result.confidence == pytest.approx(0.75)


def test_portal_citation_number_joined(extractor):
    """Test "215064 - 1" becomes 215064-1"""
    assert extractor.extract_field("citation_id", "Invoice 215064 - 1 open") == "215064-1"


def test_fine_prefers_largest_candidate(extractor):
    """Test line items come before totals, so the maximum wins"""
    text = "Fine: $120.00\nCourt costs: $35.00\nTotal: $155.00"
    assert extractor.extract_field("fine_amount", text) == 155.0


def test_fine_rejects_out_of_range_values(extractor):
    """Test amounts outside [1, 10000) are not found, never clamped"""
    assert extractor.extract_field("fine_amount", "Total due: $12,500.00") is None
    assert extractor.extract_field("fine_amount", "Balance due: $0.50") is None


def test_fine_skips_out_of_range_candidates(extractor):
    text = "Reference $48,213.00\nAmount due: $95.00"
    assert extractor.extract_field("fine_amount", text) == 95.0


def test_fine_upper_bound_is_exclusive(extractor):
    assert extractor.extract_field("fine_amount", "Total: $10,000.00") is None
    assert extractor.extract_field("fine_amount", "Total: $9,999.99") == 9999.99
    assert extractor.extract_field("fine_amount", "Total: $1.00") == 1.0


def test_fine_range_follows_settings():
    from ticket_intake.config import ThresholdSettings

    narrow = FieldExtractor(ThresholdSettings(FINE_AMOUNT_MIN=50, FINE_AMOUNT_MAX=100))
    assert narrow.extract_field("fine_amount", "Total: $150.00") is None
    assert narrow.extract_field("fine_amount", "Total: $75.00") == 75.0


def test_due_date_first_valid_in_text_order(extractor):
    """Test unparseable dates are skipped and the first real one wins"""
    text = "Notice 13/45/2025 issued\nPay on or before 06/30/2025, late after 07/15/2025"
    assert extractor.extract_field("due_date", text) == "2025-06-30"


def test_due_date_ignores_birth_date(extractor):
    text = "Date of Birth: 01/02/1990\nPlease pay 03/15/2025"
    assert extractor.extract_field("due_date", text) == "2025-03-15"


def test_due_date_labelled_wins_over_earlier_date(extractor):
    text = "Printed 01/05/2025\nDue Date: February 3, 2025"
    assert extractor.extract_field("due_date", text) == "2025-02-03"


def test_absent_fields_are_omitted(extractor):
    """Test missing fields are absent, not zero or empty"""
    result = extractor.extract("Citation No: A12345", base_confidence=0.85)
    assert result.get("citation_id") == "A12345"
    assert not result.has("fine_amount")
    assert not result.has("due_date")
    assert "fine_amount" not in result.fields


def test_violation_keyword_fallback(extractor):
    assert extractor.extract_field("violation", "ran a red light at Main St") == "red light at Main St"


def test_unknown_field_name(extractor):
    with pytest.raises(KeyError):
        extractor.extract_field("shoe_size", "text")


# ----------------------------------------------------------------------------
# Never raises
# ----------------------------------------------------------------------------

@pytest.mark.parametrize("text", [
    None,
    "",
    "   \n\t  ",
    "$$$$ ... ////",
    "\x00\x01\x02 binary \xff",
    "9" * 5000,
    "Citation No:",
    "Fine: $",
    "Due Date: 99/99/9999",
    "(((((" * 200,
])
def test_extractor_never_raises(extractor, text):
    """Test arbitrary text yields a result, never an exception"""
    result = extractor.extract(text, base_confidence=0.85)
    assert isinstance(result.fields, dict)
    records = extractor.extract_records(
        text, source="shavano", base_confidence=0.85, method=AcquisitionMethod.SCRAPED_TEXT
    )
    assert isinstance(records, list)


def test_empty_text_scores_zero(extractor):
    assert extractor.extract("", base_confidence=0.9).confidence == 0.0


# ----------------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------------

def test_extract_records_splits_citations(extractor, portal_results_text):
    """Test each citation keeps its own fine, due date and violation"""
    records = extractor.extract_records(
        portal_results_text,
        source="shavano",
        base_confidence=0.85,
        method=AcquisitionMethod.SCRAPED_TEXT,
    )

    assert [r.citation_id for r in records] == ["215064-1", "215064-2"]
    first, second = records
    assert first.fine_amount == 185.0
    assert first.due_date == "2025-03-15"
    assert first.violation == "SPEEDING 10% ABOVE LIMIT"
    assert second.fine_amount == 1250.0
    assert second.due_date == "2025-04-01"
    assert all(r.source == "shavano" for r in records)
    assert all(r.court_name == "Shavano Park Municipal Court" for r in records)


def test_extract_records_confidence_bounded_by_prior(extractor, portal_results_text):
    records = extractor.extract_records(
        portal_results_text, source="shavano", base_confidence=0.85,
        method=AcquisitionMethod.SCRAPED_TEXT,
    )
    assert all(0.0 < r.confidence <= 0.85 for r in records)


def test_partial_record_scores_lower(extractor):
    full = extractor.extract_records(
        "Citation No: A12345\nFine: $100.00\nDue Date: 03/01/2025\nViolation: Speeding",
        source="ocr", base_confidence=0.75, method=AcquisitionMethod.OCR,
    )[0]
    partial = extractor.extract_records(
        "Citation No: A12345", source="ocr", base_confidence=0.75, method=AcquisitionMethod.OCR,
    )[0]
    assert partial.confidence < full.confidence
    assert partial.fine_amount is None


def test_no_citation_means_no_records(extractor, no_results_text):
    records = extractor.extract_records(
        no_results_text, source="shavano", base_confidence=0.85,
        method=AcquisitionMethod.SCRAPED_TEXT,
    )
    assert records == []


def test_defaults_fill_missing_fields(extractor):
    records = extractor.extract_records(
        "Citation No: 215064 - 3\nAmount due: $80.00",
        source="shavano",
        base_confidence=0.85,
        method=AcquisitionMethod.SCRAPED_TEXT,
        defaults={"court_name": "Shavano Park Municipal Court"},
    )
    assert records[0].court_name == "Shavano Park Municipal Court"


def test_records_carry_evidence(extractor, portal_results_text):
    record = extractor.extract_records(
        portal_results_text, source="shavano", base_confidence=0.85,
        method=AcquisitionMethod.SCRAPED_TEXT, evidence={"url": "https://portal.test"},
    )[0]
    assert record.raw_evidence["method"] == "scraped_text"
    assert record.raw_evidence["url"] == "https://portal.test"
    assert "captured_at" in record.raw_evidence
    assert "215064 - 1" in record.raw_evidence["text"]
