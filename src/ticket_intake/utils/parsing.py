# src/ticket_intake/utils/parsing.py
"""
Parsing utilities for citation field values.

Dates are normalized to ISO ``YYYY-MM-DD``; anything that does not parse
returns None instead of raising.
"""

import re
from datetime import date, datetime
from typing import Optional


# Tried in order; first successful parse wins
DATE_FORMATS = (
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y-%m-%d",
    "%m/%d/%y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%b. %d, %Y",
    "%d %B %Y",
)


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a date string in any of the supported formats.

    Handles values like:
    - "03/15/2025", "3/5/2025"
    - "2025-03-15"
    - "March 15, 2025", "Mar 15 2025"
    """
    if not value:
        return None

    cleaned = re.sub(r"\s+", " ", str(value)).strip().rstrip(".,")
    # "March 5th, 2025" -> "March 5, 2025"
    cleaned = re.sub(r"(\d{1,2})(st|nd|rd|th)\b", r"\1", cleaned, flags=re.IGNORECASE)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value: Optional[str]) -> Optional[str]:
    """Return the ISO form of a date string, or None when unparseable."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def format_date(value: Optional[str], fmt: str) -> Optional[str]:
    """Re-render a parseable date string in a portal-specific format."""
    parsed = parse_date(value)
    return parsed.strftime(fmt) if parsed else None


def parse_amount(value) -> Optional[float]:
    """
    Extract a currency amount from a string or number.

    "$1,234.50" -> 1234.5, "150" -> 150.0, "abc" -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = re.sub(r"[^\d.]", "", str(value))
    if not cleaned or cleaned.count(".") > 1:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def amount_in_range(amount: Optional[float], minimum: float, maximum: float) -> bool:
    """True when minimum <= amount < maximum."""
    return amount is not None and minimum <= amount < maximum


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()
