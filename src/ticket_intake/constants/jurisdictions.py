# ============================================================================
# src/ticket_intake/constants/jurisdictions.py
# ============================================================================
"""
Jurisdiction Profiles
- One profile per court payment portal
- Selectors, form schema, required criteria and court details

The portal state machine reads everything it needs from a profile, so a
new jurisdiction is added here as data, not as a scraper subclass.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class FieldKind(str, Enum):
    FILL = "fill"        # text input
    SELECT = "select"    # <select> option by value


class CriteriaField(str, Enum):
    """SearchCriteria attributes a portal form can consume."""
    LICENSE_NUMBER = "license_number"
    STATE = "state"
    DATE_OF_BIRTH = "date_of_birth"


@dataclass(frozen=True)
class FormField:
    criteria_field: CriteriaField
    selector: str
    kind: FieldKind = FieldKind.FILL


@dataclass(frozen=True)
class JurisdictionProfile:
    source_id: str
    display_name: str
    base_url: str
    form_fields: Tuple[FormField, ...]
    submit_selector: str
    results_selector: str
    court_name: str
    court_address: str
    description: str = ""
    # Selector that must be present before filling; defaults to the first input
    form_ready_selector: Optional[str] = None
    required_fields: Tuple[CriteriaField, ...] = (
        CriteriaField.LICENSE_NUMBER,
        CriteriaField.STATE,
    )
    dob_format: str = "%m/%d/%Y"
    wait_until: str = "networkidle"

    @property
    def ready_selector(self) -> str:
        if self.form_ready_selector:
            return self.form_ready_selector
        return self.form_fields[0].selector

    @property
    def requires_dob(self) -> bool:
        return CriteriaField.DATE_OF_BIRTH in self.required_fields

    def describe(self) -> Dict[str, object]:
        """Catalogue entry for listing available sources."""
        return {
            "id": self.source_id,
            "name": self.display_name,
            "description": self.description,
            "courtName": self.court_name,
            "courtAddress": self.court_address,
            "requiredFields": [f.value for f in self.required_fields],
        }


SHAVANO = JurisdictionProfile(
    source_id="shavano",
    display_name="Shavano Park",
    description="Shavano Park Municipal Court citations (trafficpayment.com)",
    base_url=(
        "https://www.trafficpayment.com/SearchByInvoiceInfo.aspx"
        "?csdId=520&AspxAutoDetectCookieSupport=1"
    ),
    form_fields=(
        FormField(
            CriteriaField.LICENSE_NUMBER,
            'input[name="ctl00$MainContentPHolder$txtBSDLNumber"]',
        ),
        FormField(
            CriteriaField.STATE,
            'select[name="ctl00$MainContentPHolder$ddlDriversLicenseState"]',
            FieldKind.SELECT,
        ),
    ),
    submit_selector='button[id="ctl00_MainContentPHolder_btnSearchDL"]',
    results_selector='table, .no-results, .error, [id*="results"], [class*="result"]',
    court_name="Shavano Park Municipal Court",
    court_address="Shavano Park, TX",
)

# Selectors follow the portal's labelled search form; unverified against live markup
CIBOLO = JurisdictionProfile(
    source_id="cibolo",
    display_name="Cibolo",
    description="Cibolo Municipal Court citations (municipalonlinepayments.com)",
    base_url="https://cibolotx.municipalonlinepayments.com/cibolotx/court/search",
    form_fields=(
        FormField(
            CriteriaField.LICENSE_NUMBER,
            'input[name="DriversLicense"], input[id*="DriversLicense"], input[name*="license" i]',
        ),
        FormField(
            CriteriaField.STATE,
            'select[name="State"], select[id*="State"]',
            FieldKind.SELECT,
        ),
        FormField(
            CriteriaField.DATE_OF_BIRTH,
            'input[name="DOB"], input[id*="DOB"], input[name*="birth" i]',
        ),
    ),
    submit_selector='button[type="submit"], input[type="submit"]',
    results_selector='table, .no-results, .alert, [id*="result"], [class*="result"]',
    court_name="Cibolo Municipal Court",
    court_address="Cibolo, TX",
    required_fields=(
        CriteriaField.LICENSE_NUMBER,
        CriteriaField.STATE,
        CriteriaField.DATE_OF_BIRTH,
    ),
)

BUILTIN_JURISDICTIONS: Tuple[JurisdictionProfile, ...] = (SHAVANO, CIBOLO)

# Chromium flags for container hosts without a user namespace or large /dev/shm
CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)
