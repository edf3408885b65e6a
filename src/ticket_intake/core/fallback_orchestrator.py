# ============================================================================
# src/ticket_intake/core/fallback_orchestrator.py
# ============================================================================
"""
Fallback Orchestrator

For one source, tries execution tiers in priority order:

    remote managed function -> local scraping service (development only)
    -> direct in-process scrape

The first tier that returns records wins. A tier that returns nothing is
not trusted as a final answer (an unreachable function and "no tickets"
look the same), so the next tier is tried. Tier failures are logged and
swallowed while later tiers remain. The search ends "empty" only when the
last tier tried answered empty; if it failed, AllTiersExhausted surfaces
carrying that error, so a failed search is never reported as zero found.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import IntakeSettings, intake_settings
from ..utils.exceptions import AllTiersExhausted, TicketIntakeError, TierUnavailable
from ..utils.logging import LogContext
from .context import SearchCriteria, UnifiedTicketRecord


@dataclass
class TierAttempt:
    tier: str
    outcome: str                    # "records" | "empty" | "failed"
    record_count: int = 0
    error_kind: Optional[str] = None
    duration: float = 0.0


@dataclass
class OrchestratorResult:
    source_id: str
    records: List[UnifiedTicketRecord] = field(default_factory=list)
    tier: Optional[str] = None      # tier that produced the records
    attempts: List[TierAttempt] = field(default_factory=list)


class FallbackOrchestrator:
    """
    Runs tiers for one source until one yields records.

    The tier list is fixed at construction; whether the local service tier
    is included is decided by whoever builds the list, from configuration.
    """

    def __init__(
        self,
        tiers: Sequence,
        tier_timeout_seconds: Optional[float] = None,
    ):
        if not tiers:
            raise ValueError("FallbackOrchestrator needs at least one tier")
        self.tiers = list(tiers)
        self.tier_timeout_seconds = tier_timeout_seconds or intake_settings.TIER_TIMEOUT_SECONDS
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, tiers: Sequence, settings: IntakeSettings) -> "FallbackOrchestrator":
        return cls(tiers, tier_timeout_seconds=settings.TIER_TIMEOUT_SECONDS)

    @property
    def tier_names(self) -> List[str]:
        return [tier.get_name() for tier in self.tiers]

    async def run(self, source_id: str, criteria: SearchCriteria) -> OrchestratorResult:
        """
        Fetch records for one source.

        Returns:
            OrchestratorResult; empty records when the last tier tried
            answered with nothing

        Raises:
            AllTiersExhausted: the last tier tried failed
        """
        result = OrchestratorResult(source_id=source_id)
        last_error: Optional[BaseException] = None

        with LogContext(self.logger, source_id=source_id):
            for tier in self.tiers:
                name = tier.get_name()
                start = time.monotonic()
                try:
                    records = await asyncio.wait_for(
                        tier.fetch(source_id, criteria),
                        timeout=self.tier_timeout_seconds,
                    )
                except asyncio.TimeoutError:
                    last_error = TierUnavailable(
                        f"{name} exceeded {self.tier_timeout_seconds:.0f}s", tier=name
                    )
                    self._record_failure(result, name, last_error, start)
                    continue
                except TicketIntakeError as e:
                    last_error = e
                    self._record_failure(result, name, e, start)
                    continue
                except Exception as e:
                    last_error = e
                    self.logger.warning(f"[{source_id}] {name} raised unexpectedly", exc_info=True)
                    self._record_failure(result, name, e, start)
                    continue

                duration = time.monotonic() - start
                if records:
                    result.records = list(records)
                    result.tier = name
                    result.attempts.append(TierAttempt(name, "records", len(records), duration=duration))
                    self.logger.info(f"[{source_id}] {name} returned {len(records)} record(s)")
                    return result

                result.attempts.append(TierAttempt(name, "empty", duration=duration))
                self.logger.info(f"[{source_id}] {name} returned no records; trying next tier")

            if result.attempts[-1].outcome == "empty":
                self.logger.info(f"[{source_id}] No records from any tier")
                return result

            self.logger.error(
                f"[{source_id}] No tier produced a trustworthy answer ({', '.join(self.tier_names)})"
            )
            raise AllTiersExhausted(source_id, last_error)

    def _record_failure(
        self,
        result: OrchestratorResult,
        tier_name: str,
        error: BaseException,
        start: float,
    ) -> None:
        kind = getattr(error, "kind", type(error).__name__)
        duration = time.monotonic() - start
        result.attempts.append(TierAttempt(tier_name, "failed", error_kind=kind, duration=duration))
        self.logger.warning(f"[{result.source_id}] {tier_name} failed ({kind}): {error}")
