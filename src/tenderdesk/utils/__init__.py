"""Formatting and export helpers shared by the CLI and the feature services."""

from .export import export_tenders, write_tenders_csv
from .formatting import (
    BidDifference,
    UrgencyLevel,
    calculate_bid_difference,
    calculate_win_rate,
    format_currency,
    format_date,
    format_date_time,
    get_days_until,
    get_urgency_level,
    round_half_up,
)

__all__ = [
    "BidDifference",
    "UrgencyLevel",
    "calculate_bid_difference",
    "calculate_win_rate",
    "export_tenders",
    "format_currency",
    "format_date",
    "format_date_time",
    "get_days_until",
    "get_urgency_level",
    "round_half_up",
    "write_tenders_csv",
]
