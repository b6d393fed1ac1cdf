"""Small numeric and text helpers shared by the analytics services."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Python's round() uses banker's rounding (round(2.5) == 2); percentage
    figures shown to users are expected to round 2.5 up to 3.
    """
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    """Whole-number percentage of part over whole, 0 when whole is 0."""
    if whole == 0:
        return 0
    return round_half_up(part / whole * 100)


def split_licences(licences: str | None) -> list[str]:
    """Split a comma-joined licence list into trimmed, non-empty names."""
    if not licences:
        return []
    return [name.strip() for name in licences.split(",") if name.strip()]


def contains_any(text: str | None, keywords: list[str] | tuple[str, ...]) -> bool:
    """Case-insensitive substring check against a keyword list."""
    haystack = (text or "").lower()
    return any(keyword.lower() in haystack for keyword in keywords)
