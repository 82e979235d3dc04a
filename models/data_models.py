# =============================================================================
# Data Models for Crew Rotation Engine
# =============================================================================

from datetime import date
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field, field_validator
from enum import Enum

from models.constants import FIXED_OFFSHORE_RATE, FIXED_MEDEVAC_RATE, MAX_CYCLES

# Raw date values are kept exactly as received (strings, dates, numbers...);
# parsing happens in core.utils
RawDate = Optional[Any]


class TradeClass(str, Enum):
    """Enum for crew trade classes."""
    OFFSHORE = "offshore"  # Offshore medic
    ESCORT = "escort"      # Escort medic
    OFFICE = "office"      # IMP / OHN office staff
    OTHER = "other"


class ReliefKind(str, Enum):
    """Enum for relief assignment kinds parsed from crew name suffixes."""
    RELIEF = "relief"    # "(R)", "(R1)", "(R2)" ...
    STANDBY = "standby"  # "(S)", "(S1)" ...


class DayCountConvention(str, Enum):
    """Whether the sign-off date itself is a billable day."""
    EXCLUSIVE_SIGN_OFF = "exclusive_sign_off"  # last billable day = sign_off - 1
    INCLUSIVE_SIGN_OFF = "inclusive_sign_off"  # last billable day = sign_off


class RotationRow(BaseModel):
    """One stored roster row: a crew member and one cycle slot."""
    id: Optional[int] = None
    crew_id: str
    crew_name: str
    post: str = ""
    client: str = ""
    location: str = ""
    cycle_number: int = Field(..., ge=1, le=MAX_CYCLES)
    sign_on: RawDate = None
    sign_off: RawDate = None
    relief_all: Optional[float] = None
    standby_all: Optional[float] = None
    day_relief: Optional[int] = None
    day_standby: Optional[int] = None
    is_offshore: Optional[bool] = None
    medevac_dates: Optional[List[RawDate]] = None
    notes: Optional[str] = None

    @field_validator("crew_id", "crew_name", "post", "client", "location", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else str(v)


class CycleDetail(BaseModel):
    """The per-cycle subset of a rotation row."""
    id: Optional[int] = None
    sign_on: RawDate = None
    sign_off: RawDate = None
    relief_all: Optional[float] = None
    standby_all: Optional[float] = None
    day_relief: Optional[int] = None
    day_standby: Optional[int] = None
    is_offshore: Optional[bool] = None
    medevac_dates: Optional[List[RawDate]] = None
    notes: Optional[str] = None


class PivotedCrew(BaseModel):
    """One crew member (or relief variant) with all cycles grouped by number."""
    crew_id: str
    crew_name: str
    post: str = ""
    client: str = ""
    location: str = ""
    relief_kind: Optional[ReliefKind] = None
    relief_sequence: Optional[int] = None
    cycles: Dict[int, CycleDetail] = Field(default_factory=dict)

    @property
    def key(self) -> tuple:
        return (self.crew_id, self.crew_name)


class AllowanceConfig(BaseModel):
    """Allowance policy applied to monthly statements."""
    offshore_rate: float = Field(FIXED_OFFSHORE_RATE, ge=0.0)
    medevac_rate: float = Field(FIXED_MEDEVAC_RATE, ge=0.0)
    day_count_convention: DayCountConvention = DayCountConvention.EXCLUSIVE_SIGN_OFF


class CrewRateCard(BaseModel):
    """Per-crew rate overrides; unset fields fall back to AllowanceConfig."""
    crew_id: str
    offshore_rate: Optional[float] = Field(None, ge=0.0)
    medevac_rate: Optional[float] = Field(None, ge=0.0)


class CycleSummary(BaseModel):
    """A cycle that contributed to a monthly statement row."""
    cycle_number: int
    sign_on: RawDate = None
    sign_off: RawDate = None
    days: int = 0
    is_offshore: bool = True
    day_relief: int = 0
    relief_rate: float = 0.0
    day_standby: int = 0
    standby_rate: float = 0.0
    medevac_dates: List[date] = Field(default_factory=list)
    notes: Optional[str] = None


class StatementRow(BaseModel):
    """Allowance payable to one crew member for one month."""
    crew_id: str
    crew_name: str
    post: str = ""
    client: str = ""
    location: str = ""
    trade: TradeClass = TradeClass.OTHER

    offshore_days: int = 0
    offshore_rate: float = 0.0
    offshore_total: float = 0.0

    relief_days: int = 0
    relief_rate: float = 0.0
    relief_total: float = 0.0

    standby_days: int = 0
    standby_rate: float = 0.0
    standby_total: float = 0.0

    medevac_count: int = 0
    medevac_rate: float = 0.0
    medevac_total: float = 0.0

    grand_total: float = 0.0
    cycles: List[CycleSummary] = Field(default_factory=list)


class StatementTotals(BaseModel):
    """Cross-crew sums of a statement."""
    rows: int = 0
    offshore: float = 0.0
    relief: float = 0.0
    standby: float = 0.0
    medevac: float = 0.0
    grand: float = 0.0


class OverlapFlag(BaseModel):
    """Two different crew members booked on overlapping cycles at one post/location."""
    crew_id: str
    crew_name: str
    cycle_number: int
    other_crew_id: str
    other_crew_name: str
    other_cycle_number: int
    post: str
    location: str


class RosterWarning(BaseModel):
    """Advisory data-entry warning; never blocks a write."""
    code: str
    crew_id: str = ""
    crew_name: str = ""
    cycle_number: Optional[int] = None
    message: str

    def to_display(self) -> Dict[str, Any]:
        """Convert to a flat dictionary for table display."""
        return {
            "code": self.code,
            "crew": self.crew_name or self.crew_id,
            "cycle": self.cycle_number,
            "message": self.message,
        }
