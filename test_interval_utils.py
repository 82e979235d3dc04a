#!/usr/bin/env python3
"""
Tests for the date and interval helpers shared by the rotation engine.

Run: python -m pytest test_interval_utils.py -v
"""

from datetime import date, datetime

import pandas as pd
import pytest

from core.allowances import calculate_monthly_statement
from core.exceptions import DateRangeError
from core.pivot import build_pivot
from core.utils import (
    parse_calendar_date, days_between, inclusive_days, month_start_end,
    make_month_days, billable_end, clip_to_month, intervals_overlap, is_in_month,
)
from models.data_models import DayCountConvention


@pytest.mark.parametrize("raw, expected", [
    ("2024-03-10", date(2024, 3, 10)),
    ("  2024-03-10 ", date(2024, 3, 10)),
    ("2025-Sep-05", date(2025, 9, 5)),
    ("2025-sep-05", date(2025, 9, 5)),
    ("10 March 2024", date(2024, 3, 10)),
    (date(2024, 1, 2), date(2024, 1, 2)),
    (datetime(2024, 1, 2, 15, 30), date(2024, 1, 2)),
    (pd.Timestamp("2024-01-02"), date(2024, 1, 2)),
])
def test_parse_calendar_date_accepts_date_like_values(raw, expected):
    assert parse_calendar_date(raw) == expected


@pytest.mark.parametrize("raw", [
    None, "", "   ", "-", "N/A", "not a date", "2024-13-45", "2024-Xyz-01", 42, pd.NaT,
])
def test_parse_calendar_date_returns_none_instead_of_raising(raw):
    assert parse_calendar_date(raw) is None


@pytest.mark.parametrize("raw", ["5", "28", "March", "Sep 2025", "10 March"])
def test_parse_calendar_date_rejects_partial_dates(raw):
    assert parse_calendar_date(raw) is None


def test_partial_dates_do_not_become_billable_cycles():
    today = date.today()
    pivoted = build_pivot([{"crew_id": "J", "crew_name": "JUNK", "post": "OFFSHORE MEDIC",
                            "cycle_number": 1, "sign_on": "5", "sign_off": "28"}])
    assert calculate_monthly_statement(pivoted, today.year, today.month) == []


def test_days_between_rounds_up_and_floors_at_zero():
    assert days_between(date(2024, 3, 10), date(2024, 3, 20)) == 10
    assert days_between(date(2024, 3, 10), date(2024, 3, 10)) == 0
    assert days_between(date(2024, 3, 20), date(2024, 3, 10)) == 0
    assert days_between(datetime(2024, 3, 10), datetime(2024, 3, 10, 1)) == 1


def test_inclusive_days():
    assert inclusive_days(date(2024, 3, 10), date(2024, 3, 10)) == 1
    assert inclusive_days(date(2024, 3, 10), date(2024, 3, 19)) == 10
    assert inclusive_days(date(2024, 3, 10), date(2024, 3, 9)) == 0


def test_month_start_end_handles_leap_february_and_december():
    assert month_start_end(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_start_end(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))
    assert month_start_end(2024, 12) == (date(2024, 12, 1), date(2024, 12, 31))
    assert len(make_month_days(2024, 4)) == 30


@pytest.mark.parametrize("year, month", [(2024, 0), (2024, 13), ("2024", 1)])
def test_month_start_end_rejects_invalid_months(year, month):
    with pytest.raises(DateRangeError):
        month_start_end(year, month)


def test_billable_end_conventions():
    sign_off = date(2024, 3, 20)
    assert billable_end(sign_off, DayCountConvention.EXCLUSIVE_SIGN_OFF) == date(2024, 3, 19)
    assert billable_end(sign_off, DayCountConvention.INCLUSIVE_SIGN_OFF) == sign_off


def test_clip_to_month():
    assert clip_to_month(date(2024, 1, 25), date(2024, 2, 4), 2024, 1) == (date(2024, 1, 25), date(2024, 1, 31))
    assert clip_to_month(date(2024, 1, 25), date(2024, 2, 4), 2024, 2) == (date(2024, 2, 1), date(2024, 2, 4))
    assert clip_to_month(date(2024, 1, 25), date(2024, 2, 4), 2024, 3) is None
    assert clip_to_month(date(2024, 1, 25), date(2024, 1, 24), 2024, 1) is None


def test_intervals_overlap_is_strict():
    assert intervals_overlap(date(2024, 1, 1), date(2024, 1, 10), date(2024, 1, 5), date(2024, 1, 15))
    assert not intervals_overlap(date(2024, 1, 1), date(2024, 1, 10), date(2024, 1, 10), date(2024, 1, 20))
    assert not intervals_overlap(date(2024, 1, 10), date(2024, 1, 20), date(2024, 1, 1), date(2024, 1, 10))


def test_is_in_month():
    assert is_in_month(date(2024, 3, 31), 2024, 3)
    assert not is_in_month(date(2024, 4, 1), 2024, 3)
