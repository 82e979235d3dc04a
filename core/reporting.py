# =============================================================================
# Statement and Roster Tables
# =============================================================================

from typing import Dict, Iterable, List, Mapping
import pandas as pd
from models.constants import MONTH_NAMES
from models.data_models import (
    OverlapFlag, PivotedCrew, StatementRow, StatementTotals
)
from core.trades import get_trade_short_code

STATEMENT_COLUMNS = [
    "crew_id", "crew_name", "client", "trade", "location",
    "offshore_days", "offshore_rate", "offshore_total",
    "relief_days", "relief_rate", "relief_total",
    "standby_days", "standby_rate", "standby_total",
    "medevac_count", "medevac_rate", "medevac_total",
    "grand_total",
]

def statement_title(year: int, month: int) -> str:
    return f"ALLOWANCE PAYABLE FOR {MONTH_NAMES[month - 1]} {year}"

def statement_to_dataframe(rows: Iterable[StatementRow]) -> pd.DataFrame:
    """One line per crew; trade shown as its short code."""
    records = []
    for row in rows:
        record = row.model_dump(exclude={"cycles", "post"})
        record["trade"] = get_trade_short_code(row.post)
        records.append(record)
    return pd.DataFrame(records, columns=STATEMENT_COLUMNS)

def statement_cycles_to_dataframe(rows: Iterable[StatementRow]) -> pd.DataFrame:
    """Expanded view: one line per contributing cycle."""
    records = []
    for row in rows:
        for cycle in row.cycles:
            record = cycle.model_dump(mode="json")
            record["medevac_dates"] = ", ".join(record["medevac_dates"])
            records.append({"crew_id": row.crew_id, "crew_name": row.crew_name, **record})
    return pd.DataFrame(records)

def totals_to_dict(totals: StatementTotals) -> Dict[str, float]:
    """Totals rounded to cents for display."""
    return {name: round(value, 2) if isinstance(value, float) else value
            for name, value in totals.model_dump().items()}

def pivot_to_dataframe(pivoted: Mapping) -> pd.DataFrame:
    """Roster grid: one line per crew, sign-on/sign-off columns per cycle number."""
    records = []
    crews: List[PivotedCrew] = list(pivoted.values())
    for crew in crews:
        record = {
            "crew_id": crew.crew_id,
            "crew_name": crew.crew_name,
            "post": crew.post,
            "client": crew.client,
            "location": crew.location,
        }
        for cycle_number in sorted(crew.cycles):
            cycle = crew.cycles[cycle_number]
            record[f"sign_on_{cycle_number}"] = cycle.sign_on
            record[f"sign_off_{cycle_number}"] = cycle.sign_off
        records.append(record)
    return pd.DataFrame(records)

def overlaps_to_dataframe(flags: Iterable[OverlapFlag]) -> pd.DataFrame:
    columns = list(OverlapFlag.model_fields)
    return pd.DataFrame([flag.model_dump() for flag in flags], columns=columns)
