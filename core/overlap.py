# =============================================================================
# Overlap Detection for Offshore Rotations
# =============================================================================

import logging
from datetime import date
from typing import Dict, List, Mapping, Tuple, Union, Iterable
from models.data_models import PivotedCrew, OverlapFlag
from core.trades import is_offshore_trade
from core.utils import parse_calendar_date, intervals_overlap

logger = logging.getLogger(__name__)

OverlapKey = Tuple[str, int]

def _crew_values(pivoted: Union[Mapping, Iterable[PivotedCrew]]) -> List[PivotedCrew]:
    if isinstance(pivoted, Mapping):
        return list(pivoted.values())
    return list(pivoted)

def _complete_cycles(crew: PivotedCrew) -> List[Tuple[int, date, date]]:
    """Cycles with both endpoints parseable, in cycle-number order."""
    complete = []
    for cycle_number in sorted(crew.cycles):
        cycle = crew.cycles[cycle_number]
        sign_on = parse_calendar_date(cycle.sign_on)
        sign_off = parse_calendar_date(cycle.sign_off)
        if sign_on and sign_off:
            complete.append((cycle_number, sign_on, sign_off))
    return complete

def list_overlap_flags(pivoted: Union[Mapping, Iterable[PivotedCrew]]) -> List[OverlapFlag]:
    """
    Find every pair of different offshore crew (by crew_id) at the same (post, location)
    whose cycles intersect. Each overlapping pair yields two flags, one from
    each side. Incomplete cycles are ignored.
    """
    offshore = [c for c in _crew_values(pivoted) if is_offshore_trade(c.post)]
    cycles_by_crew = {id(c): _complete_cycles(c) for c in offshore}
    flags: List[OverlapFlag] = []

    for crew_a in offshore:
        for crew_b in offshore:
            # Relief variants share the base crew_id; a crew never conflicts with itself
            if crew_a.crew_id == crew_b.crew_id:
                continue
            if crew_a.post != crew_b.post or crew_a.location != crew_b.location:
                continue

            for num_a, on_a, off_a in cycles_by_crew[id(crew_a)]:
                for num_b, on_b, off_b in cycles_by_crew[id(crew_b)]:
                    if intervals_overlap(on_a, off_a, on_b, off_b):
                        flags.append(OverlapFlag(
                            crew_id=crew_a.crew_id,
                            crew_name=crew_a.crew_name,
                            cycle_number=num_a,
                            other_crew_id=crew_b.crew_id,
                            other_crew_name=crew_b.crew_name,
                            other_cycle_number=num_b,
                            post=crew_a.post,
                            location=crew_a.location,
                        ))

    if flags:
        logger.info(f"Found {len(flags) // 2} overlapping cycle pairs among {len(offshore)} offshore crew")
    return flags

def detect_overlaps(pivoted: Union[Mapping, Iterable[PivotedCrew]]) -> Dict[OverlapKey, List[str]]:
    """
    Map (crew_id, cycle_number) to the names of other crew whose cycles
    overlap it at the same post and location. Advisory only.
    """
    alerts: Dict[OverlapKey, List[str]] = {}
    for flag in list_overlap_flags(pivoted):
        names = alerts.setdefault((flag.crew_id, flag.cycle_number), [])
        if flag.other_crew_name not in names:
            names.append(flag.other_crew_name)
    return alerts
