"""Day resolution engine.

Resolves one representative on one day into the three-layer DayResolution.
The priority order below is a contract; changes to it must come with a test
case that justifies them.

Plan layer (first match wins):
    1. Formal incident (VACACIONES / LICENCIA): assignment purged to NONE.
    2. OVERRIDE incident carrying an assignment.
    3. Legacy SWAP incident carrying an assignment.
    4. Special schedule adapter (special schedule, mixed contract, base).

Reality layer (first match wins):
    1. Formal incident: OFF.
    2. AUSENCIA: stays WORKING. An absence annotates the plan, it never
       turns the day OFF.
    3. OFF if nothing is assigned, WORKING otherwise.
"""

from typing import Iterable, Optional

from shiftledger.domain.coverage import CoverageLookup
from shiftledger.domain.models import (
    DayInfo,
    DayStatus,
    Incident,
    IncidentType,
    Representative,
    ShiftAssignment,
    SpecialSchedule,
)
from shiftledger.domain.policies import (
    DefaultSpecialScheduleAdapter,
    EffectiveScheduleType,
    SpecialScheduleAdapter,
)
from shiftledger.domain.resolution import (
    DayPlan,
    DayReality,
    DayResolution,
    PlanSource,
)
from shiftledger.scheduling.day_metrics import compute_day_metrics


def latest_incident(
    incidents: Iterable[Incident],
    *types: IncidentType,
) -> Optional[Incident]:
    """Most recently created incident of the given types.

    Ties on created_at go to the greater id so the choice never depends on
    input order.
    """
    candidates = [i for i in incidents if i.type in types]
    if not candidates:
        return None
    return max(candidates, key=lambda i: (i.created_at, i.id))


class DayResolver:
    """Resolves the plan, reality and computed layers for a day.

    Example:
        >>> resolver = DayResolver()
        >>> resolution = resolver.resolve(rep, DayInfo.from_date(d), incidents, [])
        >>> resolution.reality.status
        <DayStatus.WORKING: 'WORKING'>
    """

    def __init__(self, schedule_adapter: Optional[SpecialScheduleAdapter] = None):
        self.schedule_adapter = schedule_adapter or DefaultSpecialScheduleAdapter()

    def resolve(
        self,
        representative: Representative,
        day: DayInfo,
        incidents: Iterable[Incident],
        special_schedules: Iterable[SpecialSchedule],
        coverage: Optional[CoverageLookup] = None,
    ) -> DayResolution:
        """Resolve a representative's day.

        Args:
            representative: The representative.
            day: The calendar day.
            incidents: All incidents touching this representative/day.
            special_schedules: Special schedules applicable to the
                representative (global and individual).
            coverage: Optional coverage lookup, used for badges only.

        Returns:
            DayResolution with plan, reality and computed layers.
        """
        incidents = list(incidents)
        formal = latest_incident(incidents, IncidentType.VACACIONES, IncidentType.LICENCIA)
        override = latest_incident(incidents, IncidentType.OVERRIDE)
        swap = latest_incident(incidents, IncidentType.SWAP)
        absence = latest_incident(incidents, IncidentType.AUSENCIA)

        plan = self._resolve_plan(representative, day, formal, override, swap, special_schedules)

        if formal is not None:
            reality = DayReality(
                status=DayStatus.OFF,
                incident_type=formal.type,
                incident_id=formal.id,
            )
        elif absence is not None:
            # Semantically "scheduled to work" but absent
            reality = DayReality(
                status=DayStatus.WORKING,
                incident_type=IncidentType.AUSENCIA,
                incident_id=absence.id,
            )
        else:
            reality = DayReality(
                status=DayStatus.OFF if plan.assignment.slot_count == 0 else DayStatus.WORKING,
            )

        return DayResolution(
            plan=plan,
            reality=reality,
            computed=compute_day_metrics(plan, reality, coverage),
        )

    def _resolve_plan(
        self,
        representative: Representative,
        day: DayInfo,
        formal: Optional[Incident],
        override: Optional[Incident],
        swap: Optional[Incident],
        special_schedules: Iterable[SpecialSchedule],
    ) -> DayPlan:
        if formal is not None:
            return DayPlan(ShiftAssignment.none(), PlanSource.BASE)

        if override is not None and override.assignment is not None:
            return DayPlan(override.assignment, PlanSource.OVERRIDE)

        if swap is not None and swap.assignment is not None:
            return DayPlan(swap.assignment, PlanSource.SWAP)

        effective = self.schedule_adapter.resolve(
            representative,
            day.date,
            representative.base_schedule,
            special_schedules,
        )

        if effective.type == EffectiveScheduleType.MIXTO:
            source = PlanSource.SPECIAL if effective.source is not None else PlanSource.BASE
            return DayPlan(ShiftAssignment.both(), source)

        if effective.type == EffectiveScheduleType.OVERRIDE and effective.shift is not None:
            return DayPlan(ShiftAssignment.single(effective.shift), PlanSource.SPECIAL)

        if effective.type == EffectiveScheduleType.BASE and effective.shift is not None:
            return DayPlan(ShiftAssignment.single(effective.shift), PlanSource.BASE)

        return DayPlan(ShiftAssignment.none(), PlanSource.BASE)
