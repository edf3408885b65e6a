"""Shared utilities: exceptions, logging, parsing and image helpers."""

from .exceptions import (
    TicketIntakeError,
    ConfigurationError,
    ValidationError,
    UnknownSourceError,
    ScrapeFailure,
    BrowserLaunchFailed,
    NavigationFailed,
    NavigationTimeout,
    FormNotFound,
    SubmitFailed,
    TierUnavailable,
    AllTiersExhausted,
    RecognitionFailed,
)
from .logging import setup_logging, LogContext, log_performance, mask_license
