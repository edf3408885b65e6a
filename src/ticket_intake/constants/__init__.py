# ============================================================================
# src/ticket_intake/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .jurisdictions import (
    JurisdictionProfile,
    FormField,
    FieldKind,
    CriteriaField,
    SHAVANO,
    CIBOLO,
    BUILTIN_JURISDICTIONS,
    CHROMIUM_ARGS,
)
from . import field_patterns
