# =============================================================================
# Core Utilities for Crew Rotation Engine
# =============================================================================

import math
import re
from datetime import datetime, date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from typing import List, Optional, Tuple
import pandas as pd
from models.constants import EMPTY_DATE_MARKERS, MONTH_ABBREVIATIONS
from models.data_models import DayCountConvention
from core.exceptions import DateRangeError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_YEAR_MON_DAY = re.compile(r"^(\d{4})-([A-Za-z]{3})-(\d{2})$")

# Two defaults that differ in every field; a parse that depends on them is partial
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2004, 2, 2)

def parse_calendar_date(raw) -> Optional[date]:
    """
    Parse a date-like value into a calendar date.
    Returns None for missing, placeholder or unparseable input; never raises.
    """
    if raw is None or raw is pd.NaT:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if text in EMPTY_DATE_MARKERS:
        return None

    try:
        # YYYY-MM-DD
        if _ISO_DATE.match(text):
            return datetime.strptime(text, "%Y-%m-%d").date()

        # YYYY-Mon-DD (e.g. 2025-Sep-05)
        match = _YEAR_MON_DAY.match(text)
        if match:
            year, mon, day = match.groups()
            mon = mon.lower()
            if mon not in MONTH_ABBREVIATIONS:
                return None
            return date(int(year), MONTH_ABBREVIATIONS.index(mon) + 1, int(day))

        first = date_parser.parse(text, default=_DEFAULT_A)
        second = date_parser.parse(text, default=_DEFAULT_B)
        if first.date() != second.date():
            return None
        return first.date()
    except (ValueError, OverflowError):
        return None

def days_between(start: date, end: date) -> int:
    """Whole days from start to end, rounded up and floored at 0."""
    seconds = (end - start).total_seconds()
    return max(0, math.ceil(seconds / 86400))

def inclusive_days(start: date, end: date) -> int:
    """Number of calendar days in the closed span [start, end]."""
    if end < start:
        return 0
    return days_between(start, end) + 1

def validate_year_month(year: int, month: int) -> None:
    """Raise DateRangeError unless (year, month) is a real calendar month."""
    if not isinstance(year, int) or not isinstance(month, int):
        raise DateRangeError(f"Year and month must be integers, got {year!r}-{month!r}")
    if month < 1 or month > 12 or year < 1 or year > 9998:
        raise DateRangeError(f"Invalid calendar month {year}-{month}")

def date_range(start: date, end: date):
    """Generate date range from start to end (inclusive)."""
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)

def month_start_end(year: int, month: int) -> Tuple[date, date]:
    """Get first and last calendar day of a month."""
    validate_year_month(year, month)
    start = date(year, month, 1)
    end = (start + relativedelta(months=1)) - timedelta(days=1)
    return start, end

def make_month_days(year: int, month: int) -> List[date]:
    """Generate list of dates for a month."""
    start, end = month_start_end(year, month)
    return list(date_range(start, end))

def billable_end(sign_off: date, convention: DayCountConvention) -> date:
    """Last billable day of a cycle under the given day-count convention."""
    if convention == DayCountConvention.EXCLUSIVE_SIGN_OFF:
        return sign_off - timedelta(days=1)
    return sign_off

def clip_to_month(start: date, end: date, year: int, month: int) -> Optional[Tuple[date, date]]:
    """
    Clip the closed span [start, end] to a calendar month.
    Returns None when nothing of the span falls inside the month.
    """
    month_start, month_end = month_start_end(year, month)
    if end < start or start > month_end or end < month_start:
        return None
    return max(start, month_start), min(end, month_end)

def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Open-interval intersection; touching endpoints are a changeover, not an overlap."""
    return a_start < b_end and a_end > b_start

def is_in_month(day: date, year: int, month: int) -> bool:
    """Check whether a date falls inside a calendar month."""
    return day.year == year and day.month == month
