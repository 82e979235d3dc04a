# =============================================================================
# Personnel On-Board Status
# =============================================================================

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
from models.constants import DEPARTURE_ALERT_DAYS
from models.data_models import PivotedCrew
from core.pivot import sort_crew
from core.trades import is_office_staff
from core.utils import parse_calendar_date

def active_rotation_range(crew: PivotedCrew, day: date) -> Tuple[Optional[date], Optional[date]]:
    """
    Get the (sign_on, sign_off) of the cycle covering a day.
    A crew member is on board from sign-on up to, not including, sign-off.
    Office staff have no rotation and always return (None, None).
    """
    if is_office_staff(crew.post):
        return None, None

    for cycle_number in sorted(crew.cycles):
        cycle = crew.cycles[cycle_number]
        sign_on = parse_calendar_date(cycle.sign_on)
        sign_off = parse_calendar_date(cycle.sign_off)
        if sign_on and sign_off and sign_on <= day < sign_off:
            return sign_on, sign_off
    return None, None

def is_on_board(crew: PivotedCrew, day: date) -> bool:
    """Office staff count as on board Monday to Friday; others during a rotation."""
    if is_office_staff(crew.post):
        return day.weekday() < 5
    start, _ = active_rotation_range(crew, day)
    return start is not None

def days_on_board(crew: PivotedCrew, day: date) -> int:
    """Day number within the current rotation (1 on the sign-on day), 0 when off board."""
    start, _ = active_rotation_range(crew, day)
    if start is None:
        return 0
    return (day - start).days + 1

def is_departure_alert(crew: PivotedCrew, day: date, window: int = DEPARTURE_ALERT_DAYS) -> bool:
    """Check if the current rotation ends within the alert window."""
    _, end = active_rotation_range(crew, day)
    if end is None:
        return False
    remaining = (end - day).days
    return 0 <= remaining <= window

def on_board_personnel(pivoted: Union[Mapping, Iterable[PivotedCrew]], day: date) -> List[PivotedCrew]:
    """Crew on board on a day, in roster display order."""
    crews = pivoted.values() if isinstance(pivoted, Mapping) else pivoted
    return sort_crew(c for c in crews if is_on_board(c, day))

def headcount_by_client(crews: Iterable[PivotedCrew]) -> Dict[str, int]:
    counts = Counter(c.client for c in crews)
    return dict(counts)
