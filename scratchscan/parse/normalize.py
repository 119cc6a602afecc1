"""Convert raw page strings into typed values.

None of these raise. An amount that is missing and an amount that is
really zero both come back as 0 (and missing odds as "N/A"); pack cost and
max loss are computed with 0 standing for "unknown", so keep it that way.
"""
import re

NOT_AVAILABLE = "N/A"

# Thousands separators only count between digit groups
ODDS_PATTERN = re.compile(r"1\s+in\s+\d+(?:,\d{3})*(?:\.\d+)?", re.IGNORECASE)

_NON_CURRENCY = re.compile(r"[^0-9.]")
_NON_DIGIT = re.compile(r"[^0-9]")


def parse_currency(text: str | None) -> float:
    """'$1,000,000' -> 1000000.0; 0.0 when nothing parses."""
    if not text:
        return 0.0
    cleaned = _NON_CURRENCY.sub("", text)
    # "1.000.00" style leftovers: keep the leading valid float
    match = re.match(r"\d*\.?\d+|\d+", cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group())
    except ValueError:
        return 0.0


def parse_count(text: str | None) -> int:
    """'1,234,567 tickets' -> 1234567; 0 when there are no digits."""
    if not text:
        return 0
    cleaned = _NON_DIGIT.sub("", text)
    if not cleaned:
        return 0
    return int(cleaned)


def parse_odds(text: str | None) -> str:
    """Pull the '1 in N' phrase out of text.

    Empty input gives "N/A". Non-empty text without the phrase is returned
    trimmed so the source wording survives for debugging.
    """
    if not text or not text.strip():
        return NOT_AVAILABLE
    match = ODDS_PATTERN.search(text)
    if match:
        return match.group(0).strip()
    return text.strip()


def has_odds(text: str | None) -> bool:
    """True if text carries a '1 in N' phrase."""
    return bool(text) and ODDS_PATTERN.search(text) is not None
