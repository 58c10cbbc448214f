"""DEC 15-bit date stamps: days counted in 31-day months from 1964."""

from __future__ import annotations

import datetime


def dec_date(timestamp: int) -> tuple[int, int, int]:
    """Return (year, month, day), month and day counted from 1."""
    if timestamp < 0:
        raise ValueError(f"negative DEC date {timestamp}")
    day = timestamp % 31
    month = (timestamp // 31) % 12
    year = timestamp // 31 // 12 + 1964
    return year, month + 1, day + 1


def format_dec_timestamp(timestamp: int) -> str:
    """Format a DEC date as YYYY-MM-DD."""
    year, month, day = dec_date(timestamp)
    return f"{year:4d}-{month:02d}-{day:02d}"


def dec_to_date(timestamp: int) -> datetime.date:
    """Convert a DEC date to a date; impossible days raise ValueError."""
    return datetime.date(*dec_date(timestamp))