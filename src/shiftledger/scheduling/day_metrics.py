"""Display and metrics derivation for a resolved day.

All "what does this day mean?" logic lives here. The rules are evaluated
in priority order and the first match wins:

1. VACACIONES / LICENCIA: off the grid, nothing counts (planned time off).
2. AUSENCIA: shown where planned, disqualifies incentives, counts as absence.
3. Covered by someone: shown where planned with CUBIERTO.
4. Covering someone: shown in their own shift with CUBRIENDO.
5. Legacy SWAP plan: CUBRIENDO.
6. Working: normal appearance.
7. Otherwise: planned OFF.
"""

from typing import Optional

from shiftledger.domain.coverage import CoverageLookup
from shiftledger.domain.models import Badge, DayStatus, IncidentType
from shiftledger.domain.resolution import (
    DayComputed,
    DayDisplay,
    DayMetrics,
    DayPlan,
    DayReality,
    PlanSource,
)

_POSITIVE = DayMetrics(
    counts_as_worked=True,
    counts_for_incentives=True,
    counts_as_absence=False,
)


def compute_day_metrics(
    plan: DayPlan,
    reality: DayReality,
    coverage: Optional[CoverageLookup] = None,
) -> DayComputed:
    """Derive display and metrics from plan, reality and coverage.

    Coverage never changes plan or reality; it only contributes a badge.
    Covering never relocates a representative to the covered shift column.

    Args:
        plan: The day's plan layer.
        reality: The day's reality layer.
        coverage: Optional coverage lookup for the representative/day.

    Returns:
        DayComputed with display and metrics.
    """
    shifts = tuple(plan.assignment.shifts)

    if reality.incident_type in (IncidentType.VACACIONES, IncidentType.LICENCIA):
        return DayComputed(
            display=DayDisplay(
                appears_in_planner=False,
                badge=Badge(reality.incident_type.value),
            ),
            metrics=DayMetrics(),
        )

    if reality.incident_type == IncidentType.AUSENCIA:
        return DayComputed(
            display=DayDisplay(True, shifts, Badge.AUSENCIA),
            metrics=DayMetrics(
                counts_as_worked=True,  # Was scheduled to work
                counts_for_incentives=False,
                counts_as_absence=True,
            ),
        )

    if coverage is not None and coverage.is_covered:
        return DayComputed(
            display=DayDisplay(True, shifts, Badge.CUBIERTO),
            metrics=_POSITIVE,
        )

    if coverage is not None and coverage.is_covering:
        return DayComputed(
            display=DayDisplay(True, shifts, Badge.CUBRIENDO),
            metrics=_POSITIVE,
        )

    if plan.source == PlanSource.SWAP:
        return DayComputed(
            display=DayDisplay(True, shifts, Badge.CUBRIENDO),
            metrics=_POSITIVE,
        )

    if reality.status == DayStatus.WORKING:
        return DayComputed(
            display=DayDisplay(True, shifts),
            metrics=_POSITIVE,
        )

    return DayComputed(
        display=DayDisplay(appears_in_planner=False),
        metrics=DayMetrics(),
    )
