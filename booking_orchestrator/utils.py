"""Shared utilities used across the booking orchestrator."""

import re
from typing import Optional

_INTEGER_RE = re.compile(r"-?\d+")


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(555) 123-4567")
        '5551234567'
        >>> normalize_phone("+1 555 123 4567")
        '+15551234567'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def extract_first_integer(text: str) -> Optional[int]:
    """Return the first integer that appears in the text, or None.

    Examples:
        >>> extract_first_integer("I'll take number 2 please")
        2
        >>> extract_first_integer("the first one") is None
        True
    """
    match = _INTEGER_RE.search(text)
    if match is None:
        return None
    return int(match.group())
