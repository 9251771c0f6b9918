"""Weekly aggregation of daily metrics.

The weekly layer only reads DayResolution.computed. It never looks at plan
or reality and never interprets incidents. A mixed (BOTH) day counts as one
day, not two.
"""

from dataclasses import dataclass
from typing import Iterable

from shiftledger.domain.models import Badge
from shiftledger.domain.resolution import DayResolution


@dataclass(frozen=True)
class AttendanceSummary:
    """Attendance tracking for a week.

    Attributes:
        planned_days: Days that should have been worked (vacations excluded).
        worked_days: Planned days without an absence.
        absent_days: Days marked as absent.
    """

    planned_days: int = 0
    worked_days: int = 0
    absent_days: int = 0


@dataclass(frozen=True)
class IncentiveSummary:
    """Incentive eligibility for a week."""

    eligible: bool = False
    worked_days: int = 0
    covered_days: int = 0
    disqualified_by_absence: bool = False


@dataclass(frozen=True)
class CoverageSummary:
    """Coverage participation for a week."""

    covering_days: int = 0
    covered_days: int = 0


@dataclass(frozen=True)
class WeekComputed:
    """Weekly metrics derived from daily computed layers."""

    attendance: AttendanceSummary
    incentives: IncentiveSummary
    coverage: CoverageSummary


def compute_week_metrics(days: Iterable[DayResolution]) -> WeekComputed:
    """Aggregate daily metrics into weekly attendance and incentives.

    Rules:
    1. Planned days are days that count as worked (absences included).
    2. A single absence disqualifies the week's incentives.
    3. Covering days (CUBRIENDO) count as a positive contribution.
    4. Vacations reduce the denominator without penalty.

    Args:
        days: All DayResolutions of one representative for the week.

    Returns:
        WeekComputed summary.
    """
    planned_days = 0
    worked_days = 0
    absent_days = 0
    incentive_days = 0
    covering_days = 0
    covered_days = 0

    for day in days:
        metrics = day.computed.metrics
        badge = day.computed.display.badge

        if metrics.counts_as_worked:
            planned_days += 1
            if not metrics.counts_as_absence:
                worked_days += 1

        if metrics.counts_as_absence:
            absent_days += 1

        if metrics.counts_for_incentives:
            incentive_days += 1

        if badge == Badge.CUBRIENDO:
            covering_days += 1
        elif badge == Badge.CUBIERTO:
            covered_days += 1

    has_absence = absent_days > 0

    return WeekComputed(
        attendance=AttendanceSummary(
            planned_days=planned_days,
            worked_days=worked_days,
            absent_days=absent_days,
        ),
        incentives=IncentiveSummary(
            eligible=not has_absence and incentive_days > 0,
            worked_days=incentive_days,
            covered_days=covering_days,
            disqualified_by_absence=has_absence,
        ),
        coverage=CoverageSummary(
            covering_days=covering_days,
            covered_days=covered_days,
        ),
    )
