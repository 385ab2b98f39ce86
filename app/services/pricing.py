"""Booking price calculation from "HH:MM" intervals."""
import re
from datetime import date, datetime, time as dt_time

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Every interval is measured on the same calendar day
_REFERENCE_DATE = date(1970, 1, 1)


def parse_hhmm(value: str) -> dt_time:
    """Parse a zero-padded 24h "HH:MM" string."""
    match = _HHMM.match(value or "")
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return dt_time(hour=int(match.group(1)), minute=int(match.group(2)))


def hours_between(start_time: str, end_time: str) -> float:
    """
    Duration from start to end in hours.

    Fractional hours are kept (a 30 minute slot is 0.5). The result is zero or
    negative when end is not after start; callers reject that case.
    """
    start = datetime.combine(_REFERENCE_DATE, parse_hhmm(start_time))
    end = datetime.combine(_REFERENCE_DATE, parse_hhmm(end_time))
    return (end - start).total_seconds() / 3600


def compute_price(start_time: str, end_time: str, price_per_hour: float) -> float:
    """Price of an interval: duration in hours times the hourly rate, unrounded."""
    return hours_between(start_time, end_time) * price_per_hour
