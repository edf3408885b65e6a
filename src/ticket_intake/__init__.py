# ============================================================================
# src/ticket_intake/__init__.py
# ============================================================================
"""
Ticket Acquisition Engine

Finds outstanding traffic citations for a driver by scraping municipal
court payment portals and reading photographed citations, and returns one
deduplicated, confidence-ranked list of UnifiedTicketRecord values.

Usage:
    coordinator = create_intake_coordinator()
    result = await coordinator.run(IntakeRequest.from_dict({
        "sources": ["shavano"],
        "criteria": {"licenseNumber": "D123456789", "state": "TX"},
    }))
"""

__version__ = "0.1.0"

from .core.context import (
    UnifiedTicketRecord,
    SearchCriteria,
    IntakeRequest,
    IntakeResult,
    SourceStatus,
    missing_required_fields,
)
from .core.intake import IntakeCoordinator, create_intake_coordinator
