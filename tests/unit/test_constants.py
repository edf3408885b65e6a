# ============================================================================
# FILE: tests/unit/test_constants.py
# ============================================================================
"""
Unit tests for jurisdiction profiles and pattern tables
"""

from dataclasses import replace

import pytest

from ticket_intake.constants import (
    BUILTIN_JURISDICTIONS,
    CIBOLO,
    SHAVANO,
    CriteriaField,
    FieldKind,
    field_patterns,
)
from ticket_intake.scrapers import JurisdictionRegistry
from ticket_intake.utils.exceptions import ConfigurationError, UnknownSourceError


def test_builtin_jurisdictions():
    """Test both built-in portals are present with unique ids"""
    ids = [p.source_id for p in BUILTIN_JURISDICTIONS]
    assert ids == ["shavano", "cibolo"]


def test_shavano_profile():
    assert SHAVANO.base_url.startswith("https://www.trafficpayment.com/")
    assert "csdId=520" in SHAVANO.base_url
    assert SHAVANO.requires_dob is False
    assert SHAVANO.ready_selector == 'input[name="ctl00$MainContentPHolder$txtBSDLNumber"]'
    assert SHAVANO.submit_selector == 'button[id="ctl00_MainContentPHolder_btnSearchDL"]'
    kinds = {f.criteria_field: f.kind for f in SHAVANO.form_fields}
    assert kinds[CriteriaField.STATE] == FieldKind.SELECT
    assert kinds[CriteriaField.LICENSE_NUMBER] == FieldKind.FILL


def test_cibolo_requires_dob():
    assert CIBOLO.requires_dob is True
    assert CIBOLO.dob_format == "%m/%d/%Y"
    assert CriteriaField.DATE_OF_BIRTH in {f.criteria_field for f in CIBOLO.form_fields}


def test_profile_catalogue_entry():
    entry = CIBOLO.describe()
    assert entry["id"] == "cibolo"
    assert entry["courtName"] == "Cibolo Municipal Court"
    assert entry["requiredFields"] == ["license_number", "state", "date_of_birth"]


def test_pattern_tables_are_ordered_triples():
    """Test every table entry is (name, compiled regex, exclude-or-None)"""
    tables = [
        field_patterns.CITATION_PATTERNS,
        field_patterns.NAME_PATTERNS,
        field_patterns.DUE_DATE_PATTERNS,
        field_patterns.FINE_AMOUNT_PATTERNS,
        field_patterns.VIOLATION_PATTERNS,
        field_patterns.COURT_NAME_PATTERNS,
    ]
    for table in tables:
        assert table
        for name, pattern, exclude in table:
            assert isinstance(name, str)
            assert hasattr(pattern, "finditer")
            assert exclude is None or hasattr(exclude, "search")


def test_labeled_matchers_come_first():
    assert field_patterns.CITATION_PATTERNS[0][0] == "labeled"
    assert field_patterns.DUE_DATE_PATTERNS[0][0] == "labeled_due"
    assert field_patterns.FINE_AMOUNT_PATTERNS[0][0] == "labeled_amount"


# ============================================================================
# Registry
# ============================================================================

def test_registry_lookup():
    registry = JurisdictionRegistry()
    assert registry.get(" Shavano ") is SHAVANO
    assert "cibolo" in registry
    assert registry.source_ids == ("shavano", "cibolo")

    with pytest.raises(UnknownSourceError) as exc_info:
        registry.get("dallas")
    assert exc_info.value.source_id == "dallas"


def test_registry_lists_sources():
    sources = JurisdictionRegistry().list_sources()
    assert [s["name"] for s in sources] == ["Shavano Park", "Cibolo"]
    assert sources[0]["requiredFields"] == ["license_number", "state"]


def test_registry_extra_profiles():
    extra = replace(SHAVANO, source_id="leon-valley", display_name="Leon Valley")
    registry = JurisdictionRegistry(extra_profiles=[extra])
    assert registry.get("leon-valley").display_name == "Leon Valley"

    with pytest.raises(ConfigurationError):
        registry.register(extra)
    with pytest.raises(ConfigurationError):
        registry.register(replace(SHAVANO, source_id="  "))


def test_registry_with_explicit_profiles():
    registry = JurisdictionRegistry(profiles=[CIBOLO])
    assert registry.source_ids == ("cibolo",)
    assert not registry.has("shavano")
