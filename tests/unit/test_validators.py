# ============================================================================
# FILE: tests/unit/test_validators.py
# ============================================================================
"""
Unit tests for intake request validation
"""

from datetime import date

import pytest

from ticket_intake import IntakeRequest, SearchCriteria
from ticket_intake.scrapers import JurisdictionRegistry
from ticket_intake.utils.exceptions import ValidationError
from ticket_intake.validators import CriteriaValidator


@pytest.fixture
def validator():
    return CriteriaValidator(JurisdictionRegistry(), today=lambda: date(2025, 6, 1))


def request_for(sources=(), image=None, **criteria):
    return IntakeRequest(sources=tuple(sources), criteria=SearchCriteria(**criteria), image=image)


def test_valid_request(validator):
    request = request_for(["shavano"], license_number="D123456789", state="TX")
    assert validator.check(request) == []
    validator.validate(request)


def test_image_only_needs_no_identity(validator):
    assert validator.check(request_for(image=b"\x89PNG")) == []


def test_nothing_to_search(validator):
    assert validator.check(request_for()) == ["Provide an image or at least one source"]


def test_all_violations_reported_together(validator):
    """Test every broken rule shows up in one ValidationError"""
    request = request_for(
        ["cibolo", "dallas"],
        image=b"",
        license_number="D1",
        state="Texas",
        radius_miles=-5,
    )

    with pytest.raises(ValidationError) as exc_info:
        validator.validate(request)

    assert exc_info.value.violations == [
        "image is empty",
        "Unknown source: dallas",
        "licenseNumber must be 6-12 letters or digits",
        "state must be a 2-letter code",
        "dob is required for cibolo",
        "radius must be non-negative",
    ]


def test_missing_identity(validator):
    violations = validator.check(request_for(["shavano"]))
    assert violations == ["licenseNumber is required", "state is required"]


def test_dob_rules(validator):
    base = dict(license_number="D123456789", state="TX")
    assert validator.check(request_for(["cibolo"], date_of_birth="04/12/1990", **base)) == []
    assert validator.check(request_for(["cibolo"], date_of_birth="1990-04-12", **base)) == []
    assert validator.check(request_for(["cibolo"], date_of_birth="sometime", **base)) == [
        "dob must be a date (YYYY-MM-DD or MM/DD/YYYY)"
    ]
    assert validator.check(request_for(["cibolo"], date_of_birth="2030-01-01", **base)) == [
        "dob cannot be in the future"
    ]


def test_duplicate_sources_collapsed(validator):
    request = request_for(["Shavano", "shavano "], license_number="D123456789", state="TX")
    assert request.unique_sources == ("shavano",)
    assert validator.check(request) == []


def test_radius_must_be_number(validator):
    request = request_for(image=b"img", radius_miles="ten")
    assert validator.check(request) == ["radius must be a number"]


def test_non_string_source_reported(validator):
    """Test a malformed source id becomes a violation instead of crashing the check"""
    request = request_for([None, "shavano", 7], license_number="D123456789", state="TX")

    assert request.unique_sources == ("shavano",)
    assert validator.check(request) == ["Invalid source id: None", "Invalid source id: 7"]
