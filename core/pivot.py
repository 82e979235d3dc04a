# =============================================================================
# Cycle Pivot Builder
# =============================================================================

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import pandas as pd
from pydantic import ValidationError
from models.data_models import (
    RotationRow, CycleDetail, PivotedCrew, ReliefKind
)
from core.trades import get_client_rank, get_trade_rank

logger = logging.getLogger(__name__)

CrewKey = Tuple[str, str]

# "JOHN DOE (R1)", "JOHN DOE (S)", "JOHN DOE(R)"
_RELIEF_SUFFIX = re.compile(r"^(?P<base>.*?)\s*\((?P<kind>[RS])(?P<seq>\d*)\)\s*$", re.IGNORECASE)

_CYCLE_FIELDS = (
    "id", "sign_on", "sign_off", "relief_all", "standby_all",
    "day_relief", "day_standby", "is_offshore", "medevac_dates", "notes",
)

def split_relief_suffix(crew_name: str) -> Tuple[str, Optional[ReliefKind], Optional[int]]:
    """
    Split a display name into base name, relief kind and relief sequence.
    "JOHN DOE (R1)" -> ("JOHN DOE", ReliefKind.RELIEF, 1)
    "JOHN DOE (S)"  -> ("JOHN DOE", ReliefKind.STANDBY, None)
    """
    match = _RELIEF_SUFFIX.match(crew_name or "")
    if not match:
        return (crew_name or "").strip(), None, None
    kind = ReliefKind.RELIEF if match.group("kind").upper() == "R" else ReliefKind.STANDBY
    seq = int(match.group("seq")) if match.group("seq") else None
    return match.group("base").strip(), kind, seq

def crew_key(row: RotationRow) -> CrewKey:
    return (row.crew_id, row.crew_name)

def _cycle_from_row(row: RotationRow) -> CycleDetail:
    return CycleDetail(**{name: getattr(row, name) for name in _CYCLE_FIELDS})

def _crew_shell(row: RotationRow) -> PivotedCrew:
    _, relief_kind, relief_sequence = split_relief_suffix(row.crew_name)
    return PivotedCrew(
        crew_id=row.crew_id,
        crew_name=row.crew_name,
        post=row.post,
        client=row.client,
        location=row.location,
        relief_kind=relief_kind,
        relief_sequence=relief_sequence,
    )

def _as_row(item: Union[RotationRow, Mapping[str, Any]]) -> RotationRow:
    if isinstance(item, RotationRow):
        return item
    return RotationRow(**_clean_record(item))

def build_pivot(rows: Iterable[Union[RotationRow, Mapping[str, Any]]]) -> Dict[CrewKey, PivotedCrew]:
    """
    Group flat rotation rows into one PivotedCrew per (crew_id, crew_name).
    Each row lands in cycles[cycle_number]; a repeated cycle number for the
    same crew key overwrites the earlier one (input order).
    Dates are copied as received and only interpreted downstream.
    """
    pivoted: Dict[CrewKey, PivotedCrew] = {}
    row_count = 0

    for item in rows:
        row = _as_row(item)
        row_count += 1
        key = crew_key(row)

        if key not in pivoted:
            pivoted[key] = _crew_shell(row)
        entry = pivoted[key]

        if row.cycle_number in entry.cycles:
            logger.warning(
                f"Duplicate cycle {row.cycle_number} for {row.crew_name} ({row.crew_id}); "
                f"row {row.id} replaces row {entry.cycles[row.cycle_number].id}"
            )
        entry.cycles[row.cycle_number] = _cycle_from_row(row)

    logger.debug(f"Pivoted {row_count} rotation rows into {len(pivoted)} crew entries")
    return pivoted

def sort_crew(crews: Iterable[PivotedCrew]) -> List[PivotedCrew]:
    """Sort crew by client, trade rank, location, then name (roster display order)."""
    return sorted(
        crews,
        key=lambda c: (get_client_rank(c.client), get_trade_rank(c.post),
                       c.location or "", c.crew_name or ""),
    )

def pivot_crew_list(rows: Iterable[Union[RotationRow, Mapping[str, Any]]]) -> List[PivotedCrew]:
    """Pivot rows and return the crew entries in roster display order."""
    return sort_crew(build_pivot(rows).values())

def pivot_for_crew(rows: Iterable[Union[RotationRow, Mapping[str, Any]]], crew_id: str) -> Dict[CrewKey, PivotedCrew]:
    """Pivot only the rows of one crew id (including its relief variants)."""
    return build_pivot(r for r in (_as_row(item) for item in rows) if r.crew_id == crew_id)

def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False

def _clean_value(name: str, value: Any) -> Any:
    if _is_missing(value):
        return None
    if name == "medevac_dates":
        if isinstance(value, (str, date)) or not hasattr(value, "__iter__"):
            value = [value]
        return [_clean_value("", v) for v in value if not _is_missing(v)]
    if isinstance(value, datetime):
        # pandas Timestamps are datetimes; the engine works in calendar dates
        return value.date()
    return value

def _clean_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalise one storage record: NaN/NaT to None, timestamps to dates."""
    return {name: _clean_value(name, value) for name, value in record.items()}

def rows_from_records(records: Union[pd.DataFrame, Iterable[Mapping[str, Any]]]) -> List[RotationRow]:
    """
    Convert storage records (list of dicts or a DataFrame) into RotationRows.
    Records that fail validation are skipped with a warning.
    """
    if isinstance(records, pd.DataFrame):
        records = records.to_dict("records")

    rows: List[RotationRow] = []
    skipped = 0
    for record in records:
        try:
            rows.append(RotationRow(**_clean_record(record)))
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Skipping invalid rotation record {record.get('id')}: {e}")

    if skipped:
        logger.info(f"Loaded {len(rows)} rotation rows, skipped {skipped}")
    return rows
