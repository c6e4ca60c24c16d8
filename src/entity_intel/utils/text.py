"""Small text helpers shared by the matching and scoring stages."""

import re
from decimal import ROUND_HALF_UP, Decimal

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def count_occurrences(haystack: str, needle: str) -> int:
    """Case-insensitive count of non-overlapping occurrences."""
    if not needle:
        return 0
    return haystack.lower().count(needle.lower())


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
