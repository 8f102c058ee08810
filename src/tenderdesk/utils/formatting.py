"""
Display formatting for amounts, dates and deadlines.

Output follows South African conventions (en-ZA): rand amounts use a
non-breaking space as thousands separator and a decimal comma.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import NamedTuple, Optional, Union

NBSP = "\u00a0"
SECONDS_PER_DAY = 24 * 60 * 60

DateLike = Union[date, datetime, str]


class UrgencyLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BidDifference(NamedTuple):
    amount: float
    percentage: float


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves going up."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def format_currency(amount: float, symbol: str = "R") -> str:
    """Format a rand amount.

    Example:
        >>> format_currency(1234567.5)
        'R\\xa01\\xa0234\\xa0567,50'
    """
    grouped = f"{abs(amount):,.2f}".replace(",", NBSP).replace(".", ",")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{NBSP}{grouped}"


def _to_datetime(value: DateLike) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_date(value: DateLike) -> str:
    """Format as ``05 Jan 2024``."""
    return _to_datetime(value).strftime("%d %b %Y")


def format_date_time(value: DateLike) -> str:
    """Format as ``05 Jan 2024, 14:30``."""
    return _to_datetime(value).strftime("%d %b %Y, %H:%M")


def get_days_until(value: DateLike, now: Optional[datetime] = None) -> int:
    """Whole days until ``value``, rounded up; negative once it has passed."""
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    delta = _to_datetime(value) - current
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def get_urgency_level(days_until: int) -> UrgencyLevel:
    if days_until <= 1:
        return UrgencyLevel.CRITICAL
    if days_until <= 3:
        return UrgencyLevel.HIGH
    if days_until <= 7:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW


def calculate_win_rate(won: int, total: int) -> int:
    """Percentage of tenders won, rounded to a whole number."""
    if total == 0:
        return 0
    return int(round_half_up(won / total * 100))


def calculate_bid_difference(our_bid: float, lowest_bid: float) -> BidDifference:
    """How far our bid was above the lowest one, in rand and percent.

    The percentage is rounded to two decimals and is 0 when the lowest
    bid is not positive.
    """
    amount = our_bid - lowest_bid
    percentage = amount / lowest_bid * 100 if lowest_bid > 0 else 0.0
    return BidDifference(amount=amount, percentage=round_half_up(percentage, 2))
