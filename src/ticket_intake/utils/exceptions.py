# ============================================================================
# src/ticket_intake/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the ticket acquisition pipeline.

Every error carries a ``kind`` (its class name) so branch failures can be
reported per source without leaking tracebacks to callers.
"""

from typing import List, Optional


class TicketIntakeError(Exception):
    """Base exception for all ticket intake errors."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class ConfigurationError(TicketIntakeError):
    """Invalid configuration."""
    pass


class ValidationError(TicketIntakeError):
    """Request failed input validation before any network activity."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "Invalid request")


class UnknownSourceError(TicketIntakeError):
    """No jurisdiction profile registered under this id."""

    def __init__(self, source_id: str):
        super().__init__(f"Unknown source: {source_id}")
        self.source_id = source_id


# ----------------------------------------------------------------------------
# Scraper failures (always escalate to the next fallback tier)
# ----------------------------------------------------------------------------

class ScrapeFailure(TicketIntakeError):
    """Portal or browser level failure inside a source scraper."""

    def __init__(self, message: str, source_id: Optional[str] = None):
        super().__init__(message)
        self.source_id = source_id


class BrowserLaunchFailed(ScrapeFailure):
    """Could not acquire an isolated browser session."""
    pass


class NavigationFailed(ScrapeFailure):
    """Portal URL could not be loaded."""
    pass


class NavigationTimeout(NavigationFailed):
    """Portal URL did not load within the navigation budget."""
    pass


class FormNotFound(ScrapeFailure):
    """Required search inputs never appeared; portal markup likely changed."""
    pass


class SubmitFailed(ScrapeFailure):
    """Filling or submitting the search form failed."""
    pass


# ----------------------------------------------------------------------------
# Tier / orchestration failures
# ----------------------------------------------------------------------------

class TierUnavailable(TicketIntakeError):
    """Execution tier is not configured, unreachable, or answered badly."""

    def __init__(self, message: str, tier: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.tier = tier
        self.status = status


class AllTiersExhausted(TicketIntakeError):
    """No tier gave a trustworthy answer for one source: the last one tried failed."""

    def __init__(self, source_id: str, last_error: Optional[BaseException] = None):
        detail = f": {last_error}" if last_error else ""
        super().__init__(f"All tiers failed for {source_id}{detail}")
        self.source_id = source_id
        self.last_error = last_error

    @property
    def last_kind(self) -> str:
        """Kind of the last tier's error, used for per-source reporting."""
        if isinstance(self.last_error, TicketIntakeError):
            return self.last_error.kind
        if self.last_error is not None:
            return type(self.last_error).__name__
        return self.kind


# ----------------------------------------------------------------------------
# OCR
# ----------------------------------------------------------------------------

class RecognitionFailed(TicketIntakeError):
    """Image could not be turned into text. Never retried automatically."""

    user_message = "We couldn't read this image. Please enter the ticket details manually."
