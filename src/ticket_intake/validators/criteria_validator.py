# ============================================================================
# src/ticket_intake/validators/criteria_validator.py
# ============================================================================
"""
Intake Request Validation

Runs before any network or browser activity. Every rule is checked and all
violations are reported together in one ValidationError.

Rules:
- at least one of an image or a source
- every source is a string naming a registered jurisdiction (duplicates
  are collapsed)
- any source: license number (6-12 letters/digits) and a 2-letter state
- jurisdictions that need it: date of birth
- date of birth, when given: parseable and not in the future
- radius, when given: a non-negative number
"""

import logging
import re
from datetime import date
from typing import Callable, List, Optional

from ..constants import CriteriaField
from ..core.context import IntakeRequest, SearchCriteria
from ..scrapers.registry import JurisdictionRegistry
from ..utils.exceptions import ValidationError
from ..utils.parsing import parse_date

logger = logging.getLogger(__name__)

LICENSE_PATTERN = re.compile(r"^[A-Z0-9]{6,12}$", re.IGNORECASE)
STATE_PATTERN = re.compile(r"^[A-Z]{2}$", re.IGNORECASE)


class CriteriaValidator:
    """Validates an IntakeRequest against the registered jurisdictions."""

    def __init__(
        self,
        registry: JurisdictionRegistry,
        today: Optional[Callable[[], date]] = None,
    ):
        self.registry = registry
        self._today = today or date.today

    def check(self, request: IntakeRequest) -> List[str]:
        """Return every violated rule; empty when the request is valid."""
        violations: List[str] = []
        sources = request.unique_sources

        if request.image is not None and len(request.image) == 0:
            violations.append("image is empty")

        if not sources and request.image is None:
            violations.append("Provide an image or at least one source")

        for source in request.sources:
            if not isinstance(source, str):
                violations.append(f"Invalid source id: {source!r}")

        known = []
        for source_id in sources:
            if self.registry.has(source_id):
                known.append(source_id)
            else:
                violations.append(f"Unknown source: {source_id}")

        criteria = request.criteria
        if sources:
            violations.extend(self._check_identity(criteria))

        for source_id in known:
            profile = self.registry.get(source_id)
            if profile.requires_dob and not criteria.date_of_birth:
                violations.append(f"dob is required for {source_id}")

        violations.extend(self._check_dob(criteria))
        violations.extend(self._check_radius(criteria))
        return violations

    def validate(self, request: IntakeRequest) -> None:
        """
        Raises:
            ValidationError: listing every violated rule
        """
        violations = self.check(request)
        if violations:
            logger.info(f"Rejected intake request: {len(violations)} violation(s)")
            raise ValidationError(violations)

    def _check_identity(self, criteria: SearchCriteria) -> List[str]:
        violations = []
        if not criteria.license_number:
            violations.append(f"{_label(CriteriaField.LICENSE_NUMBER)} is required")
        elif not LICENSE_PATTERN.match(criteria.license_number):
            violations.append("licenseNumber must be 6-12 letters or digits")

        if not criteria.state:
            violations.append(f"{_label(CriteriaField.STATE)} is required")
        elif not STATE_PATTERN.match(criteria.state):
            violations.append("state must be a 2-letter code")
        return violations

    def _check_dob(self, criteria: SearchCriteria) -> List[str]:
        if not criteria.date_of_birth:
            return []
        parsed = parse_date(criteria.date_of_birth)
        if parsed is None:
            return ["dob must be a date (YYYY-MM-DD or MM/DD/YYYY)"]
        if parsed > self._today():
            return ["dob cannot be in the future"]
        return []

    @staticmethod
    def _check_radius(criteria: SearchCriteria) -> List[str]:
        radius = criteria.radius_miles
        if radius is None:
            return []
        if isinstance(radius, bool) or not isinstance(radius, (int, float)):
            return ["radius must be a number"]
        if radius < 0:
            return ["radius must be non-negative"]
        return []


def _label(criteria_field: CriteriaField) -> str:
    """Request-side name of a criteria field."""
    return {
        CriteriaField.LICENSE_NUMBER: "licenseNumber",
        CriteriaField.STATE: "state",
        CriteriaField.DATE_OF_BIRTH: "dob",
    }[criteria_field]
