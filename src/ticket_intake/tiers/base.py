# ============================================================================
# src/ticket_intake/tiers/base.py
# ============================================================================
"""
Abstract Execution Tier

A tier is one way of fulfilling a scrape request for a source. Every tier:
- returns the records it found (possibly none), or
- raises a TicketIntakeError subclass describing why it could not answer

The fallback orchestrator decides what happens next; tiers never fall back
on their own.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..core.context import SearchCriteria, UnifiedTicketRecord


class ExecutionTier(ABC):
    """Base class for remote function, local service and direct scrape tiers."""

    name: str = "tier"

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.get_name()}")

    @abstractmethod
    async def fetch(self, source_id: str, criteria: SearchCriteria) -> List[UnifiedTicketRecord]:
        """
        Look up outstanding citations for one source.

        Args:
            source_id: registered jurisdiction id
            criteria: validated search criteria

        Returns:
            Records tagged with ``source_id``; empty when none were found
        """
        pass

    def get_name(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_name()}>"
