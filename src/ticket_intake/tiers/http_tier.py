# ============================================================================
# src/ticket_intake/tiers/http_tier.py
# ============================================================================
"""
HTTP-backed execution tiers.

The remote managed function and the local scraping service speak the same
contract:

    POST {source, licenseNumber, state, dob}
    ->   {tickets: [{citationNo, violation, fineAmount, dueDate, courtName,
                   confidence?, method?}], count}

Responses are parsed into pydantic models and converted into
UnifiedTicketRecord values, scored at the tier's prior and never above a
confidence the ticket already carries.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from ..config import threshold_settings, ThresholdSettings
from ..core.confidence import score_fields
from ..core.context import AcquisitionMethod, SearchCriteria, UnifiedTicketRecord
from ..utils.exceptions import TierUnavailable
from ..utils.logging import log_performance, mask_license
from ..utils.parsing import amount_in_range, collapse_whitespace, normalize_date, parse_amount
from .base import ExecutionTier

logger = logging.getLogger(__name__)


# ============================================================================
# Wire models
# ============================================================================

class ScrapeRequestPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    license_number: Optional[str] = Field(default=None, alias="licenseNumber")
    state: Optional[str] = None
    dob: Optional[str] = None

    @classmethod
    def from_criteria(cls, source_id: str, criteria: SearchCriteria) -> "ScrapeRequestPayload":
        return cls(
            source=source_id,
            license_number=criteria.license_number,
            state=criteria.state,
            dob=normalize_date(criteria.date_of_birth) or criteria.date_of_birth,
        )


class TicketPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    citation_no: Optional[str] = Field(default=None, alias="citationNo")
    violation: Optional[str] = None
    fine_amount: Optional[float] = Field(default=None, alias="fineAmount")
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    court_name: Optional[str] = Field(default=None, alias="courtName")
    court_address: Optional[str] = Field(default=None, alias="courtAddress")
    court_date: Optional[str] = Field(default=None, alias="courtDate")
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    method: Optional[str] = None

    @field_validator("citation_no", "violation", "due_date", "court_name", "court_address", "court_date", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = collapse_whitespace(str(value))
        return text or None

    @field_validator("fine_amount", mode="before")
    @classmethod
    def _parse_fine(cls, value: Any) -> Optional[float]:
        return parse_amount(value)


class ScrapeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tickets: List[TicketPayload] = Field(default_factory=list)
    count: Optional[int] = None
    success: Optional[bool] = None
    message: Optional[str] = None
    error: Optional[str] = None


# ============================================================================
# Tier
# ============================================================================

class HttpTier(ExecutionTier):
    """
    POSTs a scrape request to an HTTP endpoint and converts the answer.

    A session may be injected (tests, connection reuse within one request);
    otherwise a short-lived aiohttp session is opened per call.

    ``prior`` is the confidence ceiling for this tier's tickets and
    ``method`` the acquisition path recorded in their evidence. A ticket that
    carries its own confidence is never scored above it.
    """

    name = "http"
    method = AcquisitionMethod.STRUCTURED

    def __init__(
        self,
        url: Optional[str],
        timeout_seconds: float = 90.0,
        headers: Optional[Dict[str, str]] = None,
        thresholds: Optional[ThresholdSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
        prior: Optional[float] = None,
    ):
        super().__init__()
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.headers = dict(headers or {})
        self.thresholds = thresholds or threshold_settings
        self.prior = self.thresholds.STRUCTURED_CONFIDENCE if prior is None else prior
        self._session = session

    @log_performance(logger, "HTTP tier fetch")
    async def fetch(self, source_id: str, criteria: SearchCriteria) -> List[UnifiedTicketRecord]:
        if not self.url:
            raise TierUnavailable(f"{self.get_name()} is not configured", tier=self.get_name())

        payload = ScrapeRequestPayload.from_criteria(source_id, criteria)
        self.logger.debug(
            f"POST {self.url} source={source_id} license={mask_license(criteria.license_number)}"
        )

        body = await self._post(payload.model_dump(by_alias=True))
        response = self._parse(body)

        if response.success is False:
            raise TierUnavailable(
                f"{self.get_name()} reported failure: {response.message or response.error or 'unknown'}",
                tier=self.get_name(),
            )

        records = self.to_records(source_id, response)
        self.logger.info(f"{self.get_name()} returned {len(records)} record(s) for {source_id}")
        return records

    async def _post(self, payload: Dict[str, Any]) -> Any:
        if self._session is not None:
            return await self._post_with(self._session, payload)

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._post_with(session, payload)

    async def _post_with(self, session, payload: Dict[str, Any]) -> Any:
        try:
            async with session.post(self.url, json=payload, headers=self.headers) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    raise TierUnavailable(
                        f"{self.get_name()} answered {response.status}: {error_text[:200]}",
                        tier=self.get_name(),
                        status=response.status,
                    )
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TierUnavailable(
                f"{self.get_name()} timed out after {self.timeout_seconds:.0f}s",
                tier=self.get_name(),
            ) from e
        except aiohttp.ClientError as e:
            raise TierUnavailable(f"{self.get_name()} unreachable: {e}", tier=self.get_name()) from e
        except ValueError as e:
            raise TierUnavailable(f"{self.get_name()} sent invalid JSON: {e}", tier=self.get_name()) from e

    def _parse(self, body: Any) -> ScrapeResponse:
        try:
            return ScrapeResponse.model_validate(body)
        except PydanticValidationError as e:
            raise TierUnavailable(
                f"{self.get_name()} sent an unexpected payload: {e.error_count()} error(s)",
                tier=self.get_name(),
            ) from e

    def to_records(self, source_id: str, response: ScrapeResponse) -> List[UnifiedTicketRecord]:
        """
        Convert tier tickets into records tagged with the requested source.

        Tickets without a citation number are dropped; fine amounts outside
        the plausible range are left unknown. Confidence is capped by the
        tier prior and by the confidence the ticket arrived with.
        """
        captured_at = datetime.now(timezone.utc).isoformat()
        records = []

        for ticket in response.tickets:
            if not ticket.citation_no:
                continue

            fine = ticket.fine_amount
            if fine is not None and not amount_in_range(
                fine, self.thresholds.FINE_AMOUNT_MIN, self.thresholds.FINE_AMOUNT_MAX
            ):
                self.logger.debug(f"Ignoring implausible fine {fine} for {ticket.citation_no}")
                fine = None

            fields = {
                "citation_id": ticket.citation_no,
                "violation": ticket.violation,
                "fine_amount": fine,
                "due_date": normalize_date(ticket.due_date),
                "court_date": normalize_date(ticket.court_date),
                "court_name": ticket.court_name,
                "court_address": ticket.court_address,
            }

            confidence = score_fields(fields, self.prior)
            if ticket.confidence is not None:
                confidence = min(confidence, ticket.confidence)

            records.append(UnifiedTicketRecord(
                source=source_id,
                confidence=confidence,
                raw_evidence={
                    "tier": self.get_name(),
                    "method": ticket.method or self.method.value,
                    "captured_at": captured_at,
                    "payload": ticket.model_dump(by_alias=True),
                },
                **fields,
            ))

        return records
