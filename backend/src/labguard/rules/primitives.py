"""Stateless checks shared by every validator."""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Optional

from pydantic import BaseModel

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


class ExpiryStatus(BaseModel):
    expired: bool
    days_remaining: int


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    return (end - start).days


def expiry_status(expiry: date, today: date) -> ExpiryStatus:
    # An item expiring today is already out of date for use.
    remaining = days_between(today, expiry)
    return ExpiryStatus(expired=remaining <= 0, days_remaining=remaining)


def in_range(value: float, low: float, high: float) -> bool:
    return low <= value <= high


def parse_numeric(text: Optional[str]) -> Optional[float]:
    """
    Read the leading number of a free-text value.

    Trailing units are tolerated ("5.2 mmol/L" -> 5.2). Returns None when the
    text does not start with a finite number.
    """
    if text is None:
        return None
    match = _LEADING_NUMBER.match(str(text))
    if not match:
        return None
    try:
        value = float(match.group(0))
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()
