#!/usr/bin/env python3
"""
Tests for the monthly allowance statement.

Day-count convention under test: the sign-off date is not billable unless the
policy says inclusive_sign_off.

Run: python -m pytest test_monthly_allowances.py -v
"""

from datetime import date

import pytest

from core.allowances import (
    calculate_monthly_statement, summarize_statement, filter_statement_rows,
    cycle_days_in_month, derived_rate,
)
from core.exceptions import DateRangeError
from core.pivot import build_pivot
from core.utils import days_between
from models.data_models import AllowanceConfig, CrewRateCard, DayCountConvention, TradeClass


def row(crew_id, crew_name, cycle_number, sign_on, sign_off, post="OFFSHORE MEDIC",
        client="SKA", location="BARAM", **extra):
    fields = {
        "crew_id": crew_id,
        "crew_name": crew_name,
        "post": post,
        "client": client,
        "location": location,
        "cycle_number": cycle_number,
        "sign_on": sign_on,
        "sign_off": sign_off,
    }
    fields.update(extra)
    return fields


def statement_for(rows, year, month, **kwargs):
    return calculate_monthly_statement(build_pivot(rows), year, month, **kwargs)


def by_id(statement):
    return {r.crew_id: r for r in statement}


# ============================================================================
# End-to-end scenarios
# ============================================================================

def test_offshore_crew_with_relief():
    statement = statement_for([
        row("X", "CREW X", 1, "2024-03-10", "2024-03-20", day_relief=2, relief_all=150),
    ], 2024, 3)

    assert len(statement) == 1
    x = statement[0]
    assert x.trade == TradeClass.OFFSHORE
    assert x.offshore_days == 10
    assert x.offshore_rate == 200.0
    assert x.offshore_total == 2000.0
    assert x.relief_days == 2
    assert x.relief_total == 300.0
    assert x.relief_rate == 150.0
    assert x.grand_total == x.offshore_total + 300.0


def test_escort_medevac_dates_counted_in_their_own_month():
    rows = [
        row("Y", "CREW Y", 1, "2024-03-01", "2024-04-10", post="ESCORT MEDIC", location="MIRI",
            medevac_dates=["2024-03-05", "2024-04-02"]),
    ]
    march = statement_for(rows, 2024, 3)[0]
    april = statement_for(rows, 2024, 4)[0]

    assert march.medevac_count == 1
    assert march.medevac_total == 500.0
    assert march.cycles[0].medevac_dates == [date(2024, 3, 5)]
    assert april.medevac_count == 1
    assert april.cycles[0].medevac_dates == [date(2024, 4, 2)]
    assert march.offshore_days == 0
    assert march.offshore_total == 0.0
    assert march.grand_total == 500.0


def test_medevac_dates_ignored_for_offshore_crew():
    rows = [row("X", "CREW X", 1, "2024-03-01", "2024-03-20", medevac_dates=["2024-03-05"])]
    x = statement_for(rows, 2024, 3)[0]
    assert x.medevac_count == 0
    assert x.medevac_rate == 0.0
    assert x.medevac_total == 0.0


# ============================================================================
# Month clipping
# ============================================================================

def test_cycle_across_month_boundary_is_split():
    rows = [row("X", "CREW X", 1, "2024-01-25", "2024-02-05")]
    january = statement_for(rows, 2024, 1)[0]
    february = statement_for(rows, 2024, 2)[0]

    assert january.offshore_days == 7
    assert february.offshore_days == 4
    assert january.offshore_days + february.offshore_days == days_between(date(2024, 1, 25), date(2024, 2, 5))


def test_inclusive_convention_counts_sign_off_day_everywhere():
    config = AllowanceConfig(day_count_convention=DayCountConvention.INCLUSIVE_SIGN_OFF)
    rows = [row("X", "CREW X", 1, "2024-01-25", "2024-02-05")]
    january = statement_for(rows, 2024, 1, config=config)[0]
    february = statement_for(rows, 2024, 2, config=config)[0]

    assert january.offshore_days == 7
    assert february.offshore_days == 5
    assert january.offshore_days + february.offshore_days == days_between(date(2024, 1, 25), date(2024, 2, 5)) + 1


@pytest.mark.parametrize("sign_on, sign_off", [
    (date(2023, 12, 20), date(2024, 1, 10)),
    (date(2024, 1, 31), date(2024, 3, 2)),
    (date(2024, 2, 1), date(2024, 3, 1)),
    (date(2023, 11, 15), date(2024, 4, 15)),
])
def test_month_counts_add_up_to_whole_cycle(sign_on, sign_off):
    config = AllowanceConfig()
    months = [(2023, 11), (2023, 12), (2024, 1), (2024, 2), (2024, 3), (2024, 4)]
    total = sum(cycle_days_in_month(sign_on, sign_off, y, m, config) for y, m in months)
    assert total == days_between(sign_on, sign_off)


def test_cycle_ending_on_first_of_month_reaches_that_month_without_billable_days():
    rows = [row("X", "CREW X", 1, "2024-02-20", "2024-03-01", day_relief=1, relief_all=100)]
    march = statement_for(rows, 2024, 3)[0]
    assert march.offshore_days == 0
    assert march.offshore_total == 0.0
    assert march.relief_total == 100.0
    assert march.cycles[0].days == 0
    assert statement_for(rows, 2024, 2)[0].offshore_days == 10
    assert statement_for(rows, 2024, 4) == []


def test_same_day_cycle_has_no_billable_days():
    rows = [row("X", "CREW X", 1, "2024-03-10", "2024-03-10")]
    x = statement_for(rows, 2024, 3)[0]
    assert x.offshore_days == 0
    assert x.grand_total == 0.0
    assert filter_statement_rows([x], payable_only=True) == []


def test_medevac_on_sign_off_day_is_paid_in_the_sign_off_month():
    rows = [row("Y", "CREW Y", 1, "2024-02-20", "2024-03-01", post="ESCORT MEDIC",
                client="SBA", location="KK", medevac_dates=["2024-03-01"])]

    assert statement_for(rows, 2024, 2)[0].medevac_count == 0
    march = statement_for(rows, 2024, 3)[0]
    assert march.medevac_count == 1
    assert march.medevac_total == 500.0
    assert march.cycles[0].medevac_dates == [date(2024, 3, 1)]


def test_relief_and_standby_are_not_clipped():
    rows = [row("X", "CREW X", 1, "2024-01-25", "2024-02-05",
                day_relief=3, relief_all=100, day_standby=2, standby_all=50)]
    for month in (1, 2):
        x = statement_for(rows, 2024, month)[0]
        assert x.relief_days == 3
        assert x.relief_total == 300.0
        assert x.standby_days == 2
        assert x.standby_total == 100.0
        assert x.standby_rate == 50.0


def test_is_offshore_false_cycle_earns_no_offshore_days():
    rows = [
        row("X", "CREW X", 1, "2024-03-01", "2024-03-05", is_offshore=False, day_standby=4, standby_all=80),
        row("X", "CREW X", 2, "2024-03-10", "2024-03-15"),
    ]
    x = statement_for(rows, 2024, 3)[0]
    assert x.offshore_days == 5
    assert [c.is_offshore for c in x.cycles] == [False, True]
    assert x.cycles[0].days == 4
    assert x.standby_total == 320.0


def test_derived_rates_are_weighted_across_cycles():
    rows = [
        row("X", "CREW X", 1, "2024-03-01", "2024-03-05", day_relief=1, relief_all=100),
        row("X", "CREW X", 2, "2024-03-10", "2024-03-15", day_relief=3, relief_all=200),
    ]
    x = statement_for(rows, 2024, 3)[0]
    assert x.relief_days == 4
    assert x.relief_total == 700.0
    assert x.relief_rate == pytest.approx(175.0)


# ============================================================================
# Omission and failure semantics
# ============================================================================

def test_zero_relief_days_reports_zero_rate():
    x = statement_for([row("X", "CREW X", 1, "2024-03-10", "2024-03-20", relief_all=150)], 2024, 3)[0]
    assert x.relief_days == 0
    assert x.relief_rate == 0.0
    assert x.standby_rate == 0.0
    assert derived_rate(0.0, 0) == 0.0


def test_crew_without_cycle_in_month_is_omitted():
    statement = statement_for([
        row("X", "CREW X", 1, "2024-03-10", "2024-03-20"),
        row("Z", "CREW Z", 1, "2024-02-01", "2024-02-20"),
    ], 2024, 3)
    assert [r.crew_id for r in statement] == ["X"]


def test_incomplete_and_unparseable_cycles_are_skipped():
    statement = statement_for([
        row("A", "CREW A", 1, "2024-03-10", None, day_relief=5, relief_all=100),
        row("B", "CREW B", 1, "soon", "2024-03-20"),
        row("C", "CREW C", 1, "2024-03-10", "2024-03-12", medevac_dates=["bad", None]),
    ], 2024, 3)
    assert [r.crew_id for r in statement] == ["C"]
    assert statement[0].cycles[0].medevac_dates == []


def test_empty_pivot_gives_empty_statement():
    assert calculate_monthly_statement({}, 2024, 3) == []


def test_invalid_month_is_rejected():
    with pytest.raises(DateRangeError):
        calculate_monthly_statement({}, 2024, 13)


def test_input_pivot_is_not_modified():
    pivoted = build_pivot([row("X", "CREW X", 1, "2024-03-10", "2024-03-20")])
    before = {k: v.model_dump() for k, v in pivoted.items()}
    calculate_monthly_statement(pivoted, 2024, 3)
    assert {k: v.model_dump() for k, v in pivoted.items()} == before


# ============================================================================
# Rates, ordering, totals and filters
# ============================================================================

def test_configured_and_per_crew_rates():
    rows = [
        row("X", "CREW X", 1, "2024-03-10", "2024-03-20"),
        row("W", "CREW W", 1, "2024-03-10", "2024-03-20"),
        row("Y", "CREW Y", 1, "2024-03-01", "2024-03-20", post="ESCORT MEDIC", medevac_dates=["2024-03-05"]),
    ]
    config = AllowanceConfig(offshore_rate=250.0, medevac_rate=600.0)
    cards = [CrewRateCard(crew_id="W", offshore_rate=300.0)]
    statement = by_id(statement_for(rows, 2024, 3, config=config, rate_cards=cards))

    assert statement["X"].offshore_total == 2500.0
    assert statement["W"].offshore_rate == 300.0
    assert statement["W"].offshore_total == 3000.0
    assert statement["Y"].medevac_total == 600.0


def test_rows_ordered_by_trade_then_name():
    statement = statement_for([
        row("E", "ZARA", 1, "2024-03-01", "2024-03-05", post="ESCORT MEDIC"),
        row("O2", "MAX", 1, "2024-03-01", "2024-03-05"),
        row("H", "ADAM", 1, "2024-03-01", "2024-03-05", post="IM / OHN"),
        row("O1", "BELLA", 1, "2024-03-01", "2024-03-05"),
    ], 2024, 3)
    assert [r.crew_name for r in statement] == ["BELLA", "MAX", "ZARA", "ADAM"]


def test_summarize_statement_sums_each_allowance():
    statement = statement_for([
        row("X", "CREW X", 1, "2024-03-10", "2024-03-20", day_relief=2, relief_all=150),
        row("Y", "CREW Y", 1, "2024-03-01", "2024-03-20", post="ESCORT MEDIC",
            medevac_dates=["2024-03-05", "2024-03-06"], day_standby=1, standby_all=90),
    ], 2024, 3)
    totals = summarize_statement(statement)

    assert totals.rows == 2
    assert totals.offshore == 2000.0
    assert totals.relief == 300.0
    assert totals.standby == 90.0
    assert totals.medevac == 1000.0
    assert totals.grand == 3390.0
    assert totals.grand == sum(r.grand_total for r in statement)


def test_filter_statement_rows():
    statement = statement_for([
        row("X", "CREW X", 1, "2024-03-10", "2024-03-20"),
        row("Y", "CREW Y", 1, "2024-03-01", "2024-03-20", post="ESCORT MEDIC", client="SBA"),
        row("H", "HANA", 1, "2024-03-01", "2024-03-05", post="IM / OHN"),
    ], 2024, 3)

    assert [r.crew_id for r in filter_statement_rows(statement, trade="OM")] == ["X"]
    assert [r.crew_id for r in filter_statement_rows(statement, trade=TradeClass.ESCORT)] == ["Y"]
    assert [r.crew_id for r in filter_statement_rows(statement, trade="IMP/OHN")] == ["H"]
    assert [r.crew_id for r in filter_statement_rows(statement, client="SBA")] == ["Y"]
    assert [r.crew_id for r in filter_statement_rows(statement, search="hana")] == ["H"]
    assert [r.crew_id for r in filter_statement_rows(statement, payable_only=True)] == ["X"]
    assert len(filter_statement_rows(statement, trade="ALL", client="ALL")) == 3
