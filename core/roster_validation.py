# =============================================================================
# Roster Validation and Data-Entry Warnings
# =============================================================================

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union
from models.constants import CLIENT_LOCATION_MAP, MAX_MEDEVAC_DATES
from models.data_models import PivotedCrew, RosterWarning, RotationRow
from core.pivot import build_pivot, rows_from_records
from core.trades import get_full_trade_name
from core.utils import parse_calendar_date

logger = logging.getLogger(__name__)

def _as_rows(rows) -> List[RotationRow]:
    rows = list(rows)
    if all(isinstance(r, RotationRow) for r in rows):
        return rows
    return rows_from_records(r.model_dump() if isinstance(r, RotationRow) else r for r in rows)

def find_duplicate_cycles(rows: Iterable[Union[RotationRow, Mapping[str, Any]]]) -> List[RosterWarning]:
    """
    Report rows sharing a cycle number with an earlier row of the same crew.
    The pivot keeps the last of them; this surfaces the collision.
    """
    seen: Dict[Tuple[str, str, int], Any] = {}
    warnings = []
    for row in _as_rows(rows):
        key = (row.crew_id, row.crew_name, row.cycle_number)
        if key in seen:
            warnings.append(RosterWarning(
                code="duplicate_cycle",
                crew_id=row.crew_id,
                crew_name=row.crew_name,
                cycle_number=row.cycle_number,
                message=f"Cycle {row.cycle_number} entered twice (rows {seen[key]} and {row.id})",
            ))
        seen[key] = row.id
    return warnings

def find_incomplete_cycles(pivoted: Union[Mapping, Iterable[PivotedCrew]]) -> List[RosterWarning]:
    """Report cycles with a sign-on but no sign-off, or the reverse."""
    crews = pivoted.values() if isinstance(pivoted, Mapping) else pivoted
    warnings = []
    for crew in crews:
        for cycle_number in sorted(crew.cycles):
            cycle = crew.cycles[cycle_number]
            has_on = parse_calendar_date(cycle.sign_on) is not None
            has_off = parse_calendar_date(cycle.sign_off) is not None
            if has_on == has_off:
                continue
            missing = "sign-off" if has_on else "sign-on"
            warnings.append(RosterWarning(
                code="incomplete_cycle",
                crew_id=crew.crew_id,
                crew_name=crew.crew_name,
                cycle_number=cycle_number,
                message=f"Incomplete date pair ({missing} missing)",
            ))
    return warnings

def _known_locations(client: str, post: str) -> List[str]:
    posts = CLIENT_LOCATION_MAP.get(client)
    if posts is None:
        return []
    trade_name = get_full_trade_name(post)
    for map_post, locations in posts.items():
        if map_post == post or get_full_trade_name(map_post) == trade_name:
            return locations
    return []

def find_unknown_assignments(pivoted: Union[Mapping, Iterable[PivotedCrew]]) -> List[RosterWarning]:
    """Report crew whose client/post/location is not in the client location map."""
    crews = pivoted.values() if isinstance(pivoted, Mapping) else pivoted
    warnings = []
    for crew in crews:
        if crew.location in _known_locations(crew.client, crew.post):
            continue
        warnings.append(RosterWarning(
            code="unknown_assignment",
            crew_id=crew.crew_id,
            crew_name=crew.crew_name,
            message=f"Unknown assignment {crew.client} / {crew.post} / {crew.location}",
        ))
    return warnings

def find_excess_medevac_dates(rows: Iterable[Union[RotationRow, Mapping[str, Any]]]) -> List[RosterWarning]:
    """Report cycles carrying more medevac dates than a cycle allows."""
    warnings = []
    for row in _as_rows(rows):
        count = len(row.medevac_dates or [])
        if count > MAX_MEDEVAC_DATES:
            warnings.append(RosterWarning(
                code="excess_medevac_dates",
                crew_id=row.crew_id,
                crew_name=row.crew_name,
                cycle_number=row.cycle_number,
                message=f"{count} medevac dates recorded, at most {MAX_MEDEVAC_DATES} allowed",
            ))
    return warnings

def validate_roster(rows: Iterable[Union[RotationRow, Mapping[str, Any]]]) -> List[RosterWarning]:
    """
    Run every roster check and collect the warnings.
    Advisory only: nothing here blocks a write.
    """
    rows = _as_rows(rows)
    pivoted = build_pivot(rows)
    warnings = (find_duplicate_cycles(rows)
                + find_incomplete_cycles(pivoted)
                + find_unknown_assignments(pivoted)
                + find_excess_medevac_dates(rows))
    if warnings:
        logger.info(f"Roster validation produced {len(warnings)} warnings for {len(pivoted)} crew")
    return warnings
