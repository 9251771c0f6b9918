"""Domain models for the shift planning system.

This module contains the core facts the planner works from (representatives,
incidents, swap events, special schedules, calendar days) and the flattened
weekly plan consumed by reporting and audit code.

Weekday indices follow the planning calendar convention used throughout the
package: 0 = Sunday ... 6 = Saturday.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import ClassVar, Optional, Union


def weekday_index(schedule_date: date) -> int:
    """Weekday index of a date with Sunday as 0."""
    return (schedule_date.weekday() + 1) % 7


class ShiftType(Enum):
    """Shifts a representative can work."""

    DAY = "DAY"
    NIGHT = "NIGHT"


class DayStatus(Enum):
    """Operational status of a representative on a day."""

    WORKING = "WORKING"
    OFF = "OFF"


class AssignmentType(Enum):
    """Shape of a shift assignment."""

    NONE = "NONE"
    SINGLE = "SINGLE"
    BOTH = "BOTH"


class MixType(Enum):
    """Weekday group on which a mixed contract is active."""

    WEEKDAY = "WEEKDAY"  # Mon-Thu
    WEEKEND = "WEEKEND"  # Fri-Sun


class IncidentType(Enum):
    """Types of incidents recorded against a representative."""

    VACACIONES = "VACACIONES"  # Vacation, counted in working days
    LICENCIA = "LICENCIA"  # Leave, counted in calendar days
    AUSENCIA = "AUSENCIA"  # Unexcused absence overlay
    OVERRIDE = "OVERRIDE"  # Manual single-day assignment
    SWAP = "SWAP"  # Legacy single-day swap

    @property
    def is_formal(self) -> bool:
        """Formal incidents are hard schedule blocks."""
        return self in (IncidentType.VACACIONES, IncidentType.LICENCIA)


class PresenceSource(Enum):
    """Source reported on the flattened daily presence."""

    BASE = "BASE"
    OVERRIDE = "OVERRIDE"
    INCIDENT = "INCIDENT"
    SWAP = "SWAP"


class Badge(Enum):
    """Visual badges shown next to a representative in the planner."""

    AUSENCIA = "AUSENCIA"
    CUBRIENDO = "CUBRIENDO"
    CUBIERTO = "CUBIERTO"
    VACACIONES = "VACACIONES"
    LICENCIA = "LICENCIA"


class DayKind(Enum):
    """Calendar classification of a day."""

    WORKING = "WORKING"
    HOLIDAY = "HOLIDAY"


class ScheduleScope(Enum):
    """Who a special schedule applies to."""

    GLOBAL = "GLOBAL"
    INDIVIDUAL = "INDIVIDUAL"


class DailyScheduleState(Enum):
    """Definitive state for one weekday inside a special schedule."""

    DAY = "DAY"
    NIGHT = "NIGHT"
    MIXTO = "MIXTO"
    OFF = "OFF"


class SwapType(Enum):
    """Operational swap event types."""

    COVER = "COVER"
    DOUBLE = "DOUBLE"
    SWAP = "SWAP"


@dataclass(frozen=True)
class ShiftAssignment:
    """Assignment of shifts for one representative on one day.

    Attributes:
        type: NONE, SINGLE or BOTH.
        shift: The shift for SINGLE assignments, None otherwise.
    """

    type: AssignmentType
    shift: Optional[ShiftType] = None

    def __post_init__(self):
        if self.type == AssignmentType.SINGLE and self.shift is None:
            raise ValueError("SINGLE assignment requires a shift")
        if self.type != AssignmentType.SINGLE and self.shift is not None:
            raise ValueError(f"{self.type.value} assignment cannot carry a shift")

    @classmethod
    def none(cls) -> "ShiftAssignment":
        return cls(AssignmentType.NONE)

    @classmethod
    def single(cls, shift: ShiftType) -> "ShiftAssignment":
        return cls(AssignmentType.SINGLE, shift)

    @classmethod
    def both(cls) -> "ShiftAssignment":
        return cls(AssignmentType.BOTH)

    @property
    def shifts(self) -> list[ShiftType]:
        """Shifts covered by this assignment, DAY before NIGHT."""
        if self.type == AssignmentType.BOTH:
            return [ShiftType.DAY, ShiftType.NIGHT]
        if self.type == AssignmentType.SINGLE:
            return [self.shift]
        return []

    @property
    def slot_count(self) -> int:
        """Number of schedulable slots (0, 1 or 2)."""
        return len(self.shifts)

    def covers(self, shift: ShiftType) -> bool:
        """Check if the assignment includes the given shift."""
        return shift in self.shifts


@dataclass(frozen=True)
class MixProfile:
    """Mixed contract: eligible for both shifts on a weekday group."""

    type: MixType


@dataclass
class Representative:
    """A call-center representative.

    Attributes:
        id: Unique identifier.
        name: Display name.
        base_shift: Shift worked on a normal working day.
        base_schedule: Weekday (0=Sunday) to WORKING/OFF. Missing weekdays
            are simply not scheduled.
        mix_profile: Optional mixed contract.
        is_active: False for representatives no longer on the roster.
    """

    id: str
    name: str
    base_shift: ShiftType = ShiftType.DAY
    base_schedule: dict[int, DayStatus] = field(default_factory=dict)
    mix_profile: Optional[MixProfile] = None
    is_active: bool = True

    def base_status(self, schedule_date: date) -> Optional[DayStatus]:
        """Base schedule entry for a date, if any."""
        return self.base_schedule.get(weekday_index(schedule_date))


@dataclass(frozen=True)
class DayInfo:
    """A day of the planning calendar.

    Attributes:
        date: The calendar date.
        day_of_week: Weekday index (0=Sunday).
        kind: WORKING or HOLIDAY.
        is_special: Marks days with special operational meaning.
        label: Optional label (e.g. holiday name).
    """

    date: date
    day_of_week: int
    kind: DayKind = DayKind.WORKING
    is_special: bool = False
    label: Optional[str] = None

    @classmethod
    def from_date(
        cls,
        schedule_date: date,
        kind: DayKind = DayKind.WORKING,
        label: Optional[str] = None,
    ) -> "DayInfo":
        """Create a DayInfo, deriving the weekday index from the date."""
        return cls(
            date=schedule_date,
            day_of_week=weekday_index(schedule_date),
            kind=kind,
            is_special=kind == DayKind.HOLIDAY,
            label=label,
        )

    @classmethod
    def week(
        cls,
        week_start: date,
        holidays: Optional[dict[date, str]] = None,
    ) -> list["DayInfo"]:
        """Build the 7 consecutive days starting at week_start."""
        holidays = holidays or {}
        days = []
        for offset in range(7):
            d = week_start + timedelta(days=offset)
            if d in holidays:
                days.append(cls.from_date(d, DayKind.HOLIDAY, holidays[d]))
            else:
                days.append(cls.from_date(d))
        return days


@dataclass(frozen=True)
class Incident:
    """An incident recorded against a representative.

    Attributes:
        id: Unique identifier.
        representative_id: Who the incident belongs to.
        type: Incident type.
        start_date: First affected date (may be None for corrupt records).
        duration: Length in the unit of the type (working days for
            vacations, calendar days for leave, 1 otherwise).
        created_at: Creation timestamp, used to pick the latest incident.
        assignment: Replacement assignment for OVERRIDE/SWAP incidents.
        note: Free text note.
        details: Extra classification (e.g. 'JUSTIFICADA').
        source: Origin of an AUSENCIA ('BASE' or 'COVERAGE').
        slot_owner_id: Owner of the slot for coverage-sourced absences.
    """

    id: str
    representative_id: str
    type: IncidentType
    start_date: Optional[date]
    created_at: datetime
    duration: Optional[int] = None
    assignment: Optional[ShiftAssignment] = None
    note: Optional[str] = None
    details: Optional[str] = None
    source: Optional[str] = None
    slot_owner_id: Optional[str] = None


@dataclass(frozen=True)
class SpecialSchedule:
    """Explicit 7-day pattern applied over a date range.

    Attributes:
        id: Unique identifier.
        scope: GLOBAL (everyone) or INDIVIDUAL (target_id only).
        from_date: First date (inclusive).
        to_date: Last date (inclusive).
        weekly_pattern: Weekday (0=Sunday) to definitive state. An empty
            pattern marks a corrupt record.
        target_id: Representative for INDIVIDUAL schedules.
        note: Free text note.
    """

    id: str
    scope: ScheduleScope
    from_date: date
    to_date: date
    weekly_pattern: dict[int, DailyScheduleState] = field(default_factory=dict)
    target_id: Optional[str] = None
    note: Optional[str] = None

    def is_active_on(self, schedule_date: date) -> bool:
        return self.from_date <= schedule_date <= self.to_date

    def applies_to(self, representative_id: str) -> bool:
        if self.scope == ScheduleScope.INDIVIDUAL:
            return self.target_id == representative_id
        return True


@dataclass(frozen=True)
class CoverSwap:
    """One representative covers another's shift."""

    type: ClassVar[SwapType] = SwapType.COVER

    id: str
    date: date
    shift: ShiftType
    from_representative_id: str
    to_representative_id: str
    note: Optional[str] = None


@dataclass(frozen=True)
class DoubleSwap:
    """A representative works an additional shift."""

    type: ClassVar[SwapType] = SwapType.DOUBLE

    id: str
    date: date
    shift: ShiftType
    representative_id: str
    note: Optional[str] = None


@dataclass(frozen=True)
class ExchangeSwap:
    """Two representatives exchange shifts for a day."""

    type: ClassVar[SwapType] = SwapType.SWAP

    id: str
    date: date
    from_representative_id: str
    from_shift: ShiftType
    to_representative_id: str
    to_shift: ShiftType
    note: Optional[str] = None


SwapEvent = Union[CoverSwap, DoubleSwap, ExchangeSwap]


@dataclass(frozen=True)
class CoverageContext:
    """Counterparts of a coverage relationship, for tooltips."""

    covered_by_rep_id: Optional[str] = None
    covering_rep_id: Optional[str] = None


@dataclass(frozen=True)
class DailyPresence:
    """Flattened view of one representative on one day.

    This is the shape consumed by planner adapters and the snapshot engine.

    Attributes:
        status: WORKING or OFF.
        source: BASE, OVERRIDE, INCIDENT or SWAP.
        assignment: The planned assignment.
        type: Incident type behind the day, if any.
        badge: Badge from the computed layer.
        coverage_context: Coverage counterparts, when a lookup was made.
    """

    status: DayStatus
    source: PresenceSource
    assignment: ShiftAssignment
    type: Optional[IncidentType] = None
    badge: Optional[Badge] = None
    coverage_context: Optional[CoverageContext] = None


@dataclass
class AgentWeek:
    """One representative's row in a weekly plan."""

    representative_id: str
    days: dict[date, DailyPresence] = field(default_factory=dict)


@dataclass
class WeeklyPlan:
    """Resolved plan for a 7-day week.

    Attributes:
        week_start: First date of the week.
        agents: One row per representative, in roster order.
    """

    week_start: date
    agents: list[AgentWeek] = field(default_factory=list)

    def get_agent(self, representative_id: str) -> Optional[AgentWeek]:
        """Find the row for a representative."""
        for agent in self.agents:
            if agent.representative_id == representative_id:
                return agent
        return None

    def get_day(
        self,
        representative_id: str,
        schedule_date: date,
    ) -> Optional[DailyPresence]:
        """Get the presence record for a representative on a date."""
        agent = self.get_agent(representative_id)
        if agent is None:
            return None
        return agent.days.get(schedule_date)

    @property
    def dates(self) -> list[date]:
        """The 7 dates of the week."""
        return [self.week_start + timedelta(days=i) for i in range(7)]
