"""Three-layer day resolution records.

A resolved day is split into three orthogonal records:

- DayPlan: organizational intent (which shifts, and where that came from).
- DayReality: what actually happened (status plus the incident behind it).
- DayComputed: derived display and metrics, the layer consumers read.

Keeping them separate avoids a single status field that would have to mean
"working but absent" or "covered by someone else" at the same time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from shiftledger.domain.models import (
    Badge,
    DayStatus,
    IncidentType,
    ShiftAssignment,
    ShiftType,
)


class PlanSource(Enum):
    """Where a day's plan came from."""

    BASE = "BASE"
    OVERRIDE = "OVERRIDE"
    SWAP = "SWAP"
    SPECIAL = "SPECIAL"


@dataclass(frozen=True)
class DayPlan:
    """Organizational intent for the day. Never mentions absences."""

    assignment: ShiftAssignment
    source: PlanSource = PlanSource.BASE


@dataclass(frozen=True)
class DayReality:
    """What happened. Never decides visibility or metrics."""

    status: DayStatus
    incident_type: Optional[IncidentType] = None
    incident_id: Optional[str] = None


@dataclass(frozen=True)
class DayDisplay:
    """Planner presentation of the day."""

    appears_in_planner: bool
    appears_in_shifts: tuple[ShiftType, ...] = ()
    badge: Optional[Badge] = None


@dataclass(frozen=True)
class DayMetrics:
    """Attendance and incentive flags for the day."""

    counts_as_worked: bool = False
    counts_for_incentives: bool = False
    counts_as_absence: bool = False


@dataclass(frozen=True)
class DayComputed:
    """Derived view: display plus metrics."""

    display: DayDisplay
    metrics: DayMetrics = field(default_factory=DayMetrics)


@dataclass(frozen=True)
class DayResolution:
    """Complete picture of one representative on one day."""

    plan: DayPlan
    reality: DayReality
    computed: DayComputed
