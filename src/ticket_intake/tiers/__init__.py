"""Execution tiers tried in order by the fallback orchestrator."""

from .base import ExecutionTier
from .http_tier import HttpTier, ScrapeRequestPayload, ScrapeResponse, TicketPayload
from .remote_function import RemoteFunctionTier
from .local_service import LocalServiceTier
from .direct_scrape import DirectScrapeTier
