# =============================================================================
# Monthly Allowance Statement Calculator
# =============================================================================

import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Union
from models.data_models import (
    AllowanceConfig, CrewRateCard, CycleSummary, PivotedCrew, StatementRow,
    StatementTotals, TradeClass
)
from core.trades import get_trade_class, get_trade_rank, matches_trade_filter
from core.utils import (
    parse_calendar_date, billable_end, clip_to_month, inclusive_days,
    month_start_end, is_in_month
)

logger = logging.getLogger(__name__)

def _crew_values(pivoted: Union[Mapping, Iterable[PivotedCrew]]) -> List[PivotedCrew]:
    if isinstance(pivoted, Mapping):
        return list(pivoted.values())
    return list(pivoted)

def _index_rate_cards(rate_cards) -> Dict[str, CrewRateCard]:
    if not rate_cards:
        return {}
    if isinstance(rate_cards, Mapping):
        return dict(rate_cards)
    return {card.crew_id: card for card in rate_cards}

def derived_rate(amount: float, days: int) -> float:
    """Effective per-day rate for display; 0 when there are no days."""
    if not days or not amount:
        return 0.0
    return amount / days

def cycle_reaches_month(sign_on: date, sign_off: date, year: int, month: int) -> bool:
    """Whether the raw span [sign_on, sign_off] touches the month at all."""
    return clip_to_month(sign_on, sign_off, year, month) is not None

def cycle_days_in_month(sign_on: date, sign_off: date, year: int, month: int,
                        config: AllowanceConfig) -> int:
    """
    Billable days of one cycle that fall inside a month.
    The billable span is [sign_on, billable_end(sign_off)] under the
    configured convention; that span is clipped to the month.
    """
    last_day = billable_end(sign_off, config.day_count_convention)
    clipped = clip_to_month(sign_on, last_day, year, month)
    if clipped is None:
        return 0
    return inclusive_days(*clipped)

def medevac_dates_in_month(raw_dates, year: int, month: int) -> List[date]:
    """Parsed medevac dates falling inside the month; unparseable entries are dropped."""
    in_month = []
    for raw in raw_dates or []:
        parsed = parse_calendar_date(raw)
        if parsed and is_in_month(parsed, year, month):
            in_month.append(parsed)
    return in_month

def build_statement_row(crew: PivotedCrew, year: int, month: int,
                        config: AllowanceConfig,
                        rate_card: Optional[CrewRateCard] = None) -> Optional[StatementRow]:
    """
    Compute one crew member's statement row for a month.
    Returns None when no cycle of the crew reaches the month.
    """
    trade = get_trade_class(crew.post)
    is_offshore_crew = trade == TradeClass.OFFSHORE
    is_escort_crew = trade == TradeClass.ESCORT

    offshore_rate = config.offshore_rate
    medevac_rate = config.medevac_rate
    if rate_card is not None:
        if rate_card.offshore_rate is not None:
            offshore_rate = rate_card.offshore_rate
        if rate_card.medevac_rate is not None:
            medevac_rate = rate_card.medevac_rate

    summaries: List[CycleSummary] = []
    offshore_days = 0
    relief_days = 0
    relief_amount = 0.0
    standby_days = 0
    standby_amount = 0.0
    medevac_count = 0

    for cycle_number in sorted(crew.cycles):
        cycle = crew.cycles[cycle_number]
        sign_on = parse_calendar_date(cycle.sign_on)
        sign_off = parse_calendar_date(cycle.sign_off)
        if not sign_on or not sign_off:
            continue

        # Judged on the raw span; billable days may still be 0 (sign-off on the 1st)
        if not cycle_reaches_month(sign_on, sign_off, year, month):
            continue
        days = cycle_days_in_month(sign_on, sign_off, year, month, config)

        cycle_offshore = cycle.is_offshore is not False
        if is_offshore_crew and cycle_offshore:
            offshore_days += days

        # Relief and standby are taken per cycle, not clipped to the month
        cycle_relief_days = cycle.day_relief or 0
        cycle_relief_rate = cycle.relief_all or 0.0
        relief_days += cycle_relief_days
        relief_amount += cycle_relief_days * cycle_relief_rate

        cycle_standby_days = cycle.day_standby or 0
        cycle_standby_rate = cycle.standby_all or 0.0
        standby_days += cycle_standby_days
        standby_amount += cycle_standby_days * cycle_standby_rate

        cycle_medevacs = medevac_dates_in_month(cycle.medevac_dates, year, month)
        if is_escort_crew:
            medevac_count += len(cycle_medevacs)

        logger.debug(f"{crew.crew_name} cycle {cycle_number}: {days} days in {year}-{month:02d}")
        summaries.append(CycleSummary(
            cycle_number=cycle_number,
            sign_on=cycle.sign_on,
            sign_off=cycle.sign_off,
            days=days,
            is_offshore=cycle_offshore,
            day_relief=cycle_relief_days,
            relief_rate=cycle_relief_rate,
            day_standby=cycle_standby_days,
            standby_rate=cycle_standby_rate,
            medevac_dates=cycle_medevacs,
            notes=cycle.notes,
        ))

    if not summaries:
        return None

    offshore_total = offshore_days * offshore_rate if is_offshore_crew else 0.0
    medevac_total = medevac_count * medevac_rate if is_escort_crew else 0.0
    grand_total = offshore_total + relief_amount + standby_amount + medevac_total

    return StatementRow(
        crew_id=crew.crew_id,
        crew_name=crew.crew_name,
        post=crew.post,
        client=crew.client,
        location=crew.location,
        trade=trade,
        offshore_days=offshore_days if is_offshore_crew else 0,
        offshore_rate=offshore_rate if is_offshore_crew else 0.0,
        offshore_total=offshore_total,
        relief_days=relief_days,
        relief_rate=derived_rate(relief_amount, relief_days),
        relief_total=relief_amount,
        standby_days=standby_days,
        standby_rate=derived_rate(standby_amount, standby_days),
        standby_total=standby_amount,
        medevac_count=medevac_count if is_escort_crew else 0,
        medevac_rate=medevac_rate if is_escort_crew else 0.0,
        medevac_total=medevac_total,
        grand_total=grand_total,
        cycles=summaries,
    )

def calculate_monthly_statement(pivoted: Union[Mapping, Iterable[PivotedCrew]],
                                year: int, month: int,
                                config: Optional[AllowanceConfig] = None,
                                rate_cards=None) -> List[StatementRow]:
    """
    Produce the allowance statement for a calendar month.

    One row per crew with at least one cycle whose sign-on to sign-off span
    reaches the month; crew without such a cycle are left out entirely. Rows are ordered
    by trade (offshore, escort, office, other) then crew name.
    Missing or unparseable dates exclude the affected cycle or medevac entry.
    """
    # Validates the month before any crew is processed
    month_start_end(year, month)
    config = config or AllowanceConfig()
    cards = _index_rate_cards(rate_cards)

    rows: List[StatementRow] = []
    crews = _crew_values(pivoted)
    for crew in crews:
        row = build_statement_row(crew, year, month, config, cards.get(crew.crew_id))
        if row is not None:
            rows.append(row)

    rows.sort(key=lambda r: (get_trade_rank(r.post), r.crew_name))
    logger.info(f"Statement {year}-{month:02d}: {len(rows)} of {len(crews)} crew payable")
    return rows

def summarize_statement(rows: Iterable[StatementRow]) -> StatementTotals:
    """Sum each allowance type and the grand total across statement rows."""
    totals = StatementTotals()
    for row in rows:
        totals.rows += 1
        totals.offshore += row.offshore_total
        totals.relief += row.relief_total
        totals.standby += row.standby_total
        totals.medevac += row.medevac_total
        totals.grand += row.grand_total
    return totals

def filter_statement_rows(rows: Iterable[StatementRow], trade=None,
                          client: Optional[str] = None,
                          search: Optional[str] = None,
                          payable_only: bool = False) -> List[StatementRow]:
    """
    Narrow statement rows by trade, client and a case-insensitive name search.
    payable_only drops rows whose grand total is zero.
    """
    needle = (search or "").strip().lower()
    filtered = []
    for row in rows:
        if not matches_trade_filter(row.post, trade):
            continue
        if client and client.upper() != "ALL" and row.client != client:
            continue
        if needle and needle not in (row.crew_name or "").lower():
            continue
        if payable_only and row.grand_total <= 0:
            continue
        filtered.append(row)
    return filtered
