# ============================================================================
# src/ticket_intake/constants/field_patterns.py
# ============================================================================
"""
Citation Field Patterns

Ordered pattern tables, most specific first, one table per record field.
Each entry is (matcher_name, regex, exclude_before). ``exclude_before`` is an
optional regex tested against the ~30 characters preceding a match; a hit
discards that candidate (keeps a birth date from being read as a due date).

Capture group 1 is the value. For citation patterns a second group, when
present, is a suffix joined with "-" (portal style "215064 - 1").
"""

import re

FLAGS = re.IGNORECASE | re.MULTILINE

# Any date token the date parser understands
DATE_TOKEN = (
    r"(\d{1,2}/\d{1,2}/\d{2,4}"
    r"|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}-\d{1,2}-\d{4}"
    r"|(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4})"
)

MONEY_TOKEN = r"(\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?)"

# Words that end a free-text label value
_STOP = r"(?=\s*(?:\n|\bdob\b|\bdate of birth\b|\bbirth\b|\bdl\b|\blicense\b|\bfine\b|\bdue\b|\bcourt\b|\baddress\b|\bamount\b|$))"

_COURT_STOP = r"(?=\s*(?:\n|\bfine\b|\bdue\b|\baddress\b|\bdate\b|$))"

_NOT_BIRTH_OR_HEARING = re.compile(
    r"(birth|dob|d\.o\.b|court\s*date|hearing|appear|issued|violation\s*date|offense\s*date)[^\n]{0,20}$",
    re.IGNORECASE,
)


def _p(pattern: str) -> "re.Pattern":
    return re.compile(pattern, FLAGS)


CITATION_PATTERNS = (
    ("labeled", _p(
        r"\b(?:citation|ticket|violation|case)\s*(?:no\.?|number|num\.?|#)\s*[:#]?\s*"
        r"((?=[A-Z-]*\d)(?:\d{6}\s*-\s*\d{1,3}|[A-Z0-9][A-Z0-9-]{3,}))"
    ), None),
    ("portal_compound", _p(r"(?<![\d/.-])(\d{6})\s*-\s*(\d{1,3})(?![\d/.-])"), None),
    ("keyword_digits", _p(r"\b(?:citation|ticket|violation)[\s#:]*(\d{4,})\b"), None),
)

NAME_PATTERNS = (
    ("labeled_name", _p(r"(?<!court )\b(?:defendant|driver|name)\s*(?:name)?\s*[:\-]\s*([A-Z][A-Za-z.'\- ]{1,60}?)" + _STOP), None),
)

ADDRESS_PATTERNS = (
    ("labeled_address", _p(r"(?<!court )\b(?:address|residence)\s*[:\-]\s*([A-Za-z0-9#.,'\- ]{4,100}?)" + _STOP), None),
)

LICENSE_PATTERNS = (
    ("labeled_license", _p(
        r"\b(?:dl|driver'?s?\s*license|license)\s*(?:no\.?|number|#)?\s*[:#]?\s*((?=[A-Z]*\d)[A-Z0-9]{5,15})\b"
    ), None),
)

DOB_PATTERNS = (
    ("labeled_dob", _p(r"\b(?:dob|d\.o\.b\.?|date\s*of\s*birth|birth\s*date)\s*[:\-]?\s*" + DATE_TOKEN), None),
)

DUE_DATE_PATTERNS = (
    ("labeled_due", _p(r"\b(?:due\s*date|pay\s*by|payment\s*due|due\s*on|due\s*by)\s*[:\-]?\s*" + DATE_TOKEN), None),
    ("any_date", _p(DATE_TOKEN), _NOT_BIRTH_OR_HEARING),
)

COURT_DATE_PATTERNS = (
    ("labeled_court_date", _p(
        r"\b(?:court\s*date|hearing\s*date|appearance\s*date|appear\s*on|court\s*appearance)\s*[:\-]?\s*" + DATE_TOKEN
    ), None),
)

FINE_AMOUNT_PATTERNS = (
    ("labeled_amount", _p(
        r"\b(?:fine\s*amount|total\s*amount|amount\s*due|balance\s*due|total\s*due|fine|total|balance)\s*[:\-]?\s*\$?\s*"
        + MONEY_TOKEN
    ), None),
    ("dollar_amount", _p(r"\$\s*" + MONEY_TOKEN), None),
    ("decimal_amount", _p(r"(?<![\d/.,-])(\d+(?:,\d{3})*\.\d{2})(?![\d/])"), None),
)

VIOLATION_KEYWORDS = (
    "speeding",
    "red light",
    "stop sign",
    "parking",
    "expired registration",
    "no insurance",
    "failure to maintain financial responsibility",
    "seat belt",
    "no seat belt",
    "cell phone",
    "texting",
    "reckless driving",
    "failure to yield",
    "improper turn",
    "following too closely",
    "unsafe lane change",
    "expired license",
    "no driver's license",
)

VIOLATION_PATTERNS = (
    ("labeled_violation", _p(
        r"\b(?:violation|offense|charge)\s*(?:description|desc\.?|type)?\s*[:\-]\s*(?!no\b|#)([A-Za-z][^\n$]{2,120}?)\s*(?=\n|\$|$)"
    ), None),
    ("keyword_violation", _p(
        r"\b((?:" + "|".join(re.escape(k) for k in VIOLATION_KEYWORDS) + r")[^\n.$]{0,100})"
    ), None),
)

COURT_NAME_PATTERNS = (
    ("labeled_court", _p(r"\bcourt\s*(?:name)?\s*:\s*([A-Za-z][A-Za-z .,'\-]{2,80}?)" + _COURT_STOP), None),
    ("named_court", re.compile(
        r"\b((?:[A-Z][A-Za-z.'\-]*[ \t]+){1,4}(?i:Municipal|Justice|County|Traffic|District)[ \t]+(?i:Court))\b",
        re.MULTILINE,
    ), None),
)

COURT_ADDRESS_PATTERNS = (
    ("labeled_court_address", _p(
        r"\b(?:court\s*address|court\s*location|location)\s*[:\-]\s*([A-Za-z0-9#.,'\- ]{4,100}?)(?=\s*(?:\n|\bfine\b|\bdue\b|$))"
    ), None),
)
