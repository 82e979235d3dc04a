# =============================================================================
# Pending (Unsaved) Cycle Edits
# =============================================================================

import logging
from typing import Any, Dict, List, Mapping, Tuple
from pydantic import ValidationError
from models.constants import MAX_CYCLES
from models.data_models import CycleDetail, PivotedCrew
from core.exceptions import DataValidationError

logger = logging.getLogger(__name__)

EditKey = Tuple[str, int]

EDITABLE_FIELDS = {
    "sign_on", "sign_off", "relief_all", "standby_all", "day_relief",
    "day_standby", "is_offshore", "medevac_dates", "notes",
}

class PendingEditsCache:
    """
    Unsaved notes and allowance edits, keyed by (crew_id, cycle_number).

    Edits are overlaid on a freshly built pivot at read time; storage stays
    the only source of truth once a write succeeds and mark_persisted drops
    the entry.
    """

    def __init__(self):
        self._edits: Dict[EditKey, Dict[str, Any]] = {}

    def stage(self, crew_id: str, cycle_number: int, **fields) -> None:
        """Record edits for one cycle, merging with earlier unsaved edits."""
        if not crew_id:
            raise DataValidationError("Pending edit needs a crew id")
        if not isinstance(cycle_number, int) or not 1 <= cycle_number <= MAX_CYCLES:
            raise DataValidationError(f"Cycle number must be 1..{MAX_CYCLES}, got {cycle_number!r}")
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise DataValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        merged = {**self._edits.get((crew_id, cycle_number), {}), **fields}
        try:
            CycleDetail(**merged)
        except ValidationError as e:
            raise DataValidationError(f"Invalid edit for {crew_id} cycle {cycle_number}: {e}")
        self._edits[(crew_id, cycle_number)] = merged

    def get(self, crew_id: str, cycle_number: int) -> Dict[str, Any]:
        return dict(self._edits.get((crew_id, cycle_number), {}))

    def pending_keys(self) -> List[EditKey]:
        return sorted(self._edits)

    def mark_persisted(self, crew_id: str, cycle_number: int) -> None:
        """Drop an entry after storage confirmed the write."""
        self._edits.pop((crew_id, cycle_number), None)

    def discard_all(self) -> None:
        self._edits.clear()

    def __len__(self) -> int:
        return len(self._edits)

    def __contains__(self, key) -> bool:
        return key in self._edits

    def merge_into(self, pivoted: Mapping[Any, PivotedCrew]) -> Dict[Any, PivotedCrew]:
        """
        Return a copy of the pivot with pending edits applied.
        Relief variants sharing a crew id receive the edit where they hold that
        cycle; an edit for a cycle none of them holds creates an unsaved cycle
        (id None) on the base crew entry. The input pivot is not modified.
        """
        merged: Dict[Any, PivotedCrew] = {
            key: crew.model_copy(deep=True) for key, crew in pivoted.items()
        }
        applied = 0
        for (crew_id, cycle_number), fields in self._edits.items():
            variants = [c for c in merged.values() if c.crew_id == crew_id]
            if not variants:
                continue
            holders = [c for c in variants if cycle_number in c.cycles]
            if not holders:
                base = next((c for c in variants if c.relief_kind is None), variants[0])
                base.cycles[cycle_number] = CycleDetail()
                holders = [base]
            for crew in holders:
                crew.cycles[cycle_number] = crew.cycles[cycle_number].model_copy(update=fields)
            applied += 1

        if applied:
            logger.debug(f"Merged {applied} pending cycle edits into pivot")
        return merged
