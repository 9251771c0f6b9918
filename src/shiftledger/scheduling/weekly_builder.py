"""Weekly schedule builder.

This module provides the WeeklyScheduleBuilder that runs the day resolution
engine across a 7-day week for every representative:
- Incidents are expanded once into a (representative, date) index
- Special schedules are split into global and per-representative lists
- Each day is resolved and flattened into the legacy DailyPresence shape
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from shiftledger.domain.coverage import Coverage, CoverageLookup, find_coverage_for_day
from shiftledger.domain.models import (
    AgentWeek,
    CoverageContext,
    DailyPresence,
    DayInfo,
    Incident,
    IncidentType,
    PresenceSource,
    Representative,
    ScheduleScope,
    SpecialSchedule,
    WeeklyPlan,
)
from shiftledger.domain.policies import (
    DefaultIncidentDateResolver,
    DefaultSpecialScheduleAdapter,
    IncidentDateResolver,
    SpecialScheduleAdapter,
)
from shiftledger.domain.resolution import DayResolution, PlanSource
from shiftledger.scheduling.day_resolver import DayResolver

logger = logging.getLogger(__name__)

RANGE_INCIDENT_TYPES = (IncidentType.VACACIONES, IncidentType.LICENCIA)
SINGLE_DAY_INCIDENT_TYPES = (IncidentType.OVERRIDE, IncidentType.AUSENCIA, IncidentType.SWAP)


class WeekLengthError(ValueError):
    """Raised when a week is not exactly 7 days."""


def day_resolution_to_presence(
    resolution: DayResolution,
    coverage: Optional[CoverageLookup] = None,
) -> DailyPresence:
    """Flatten a DayResolution into the legacy DailyPresence shape.

    - SPECIAL plan sources are reported as BASE.
    - Any incident makes the source INCIDENT.
    - An OVERRIDE plan with an AUSENCIA overlay keeps OVERRIDE as the
      audit-visible source.
    """
    plan = resolution.plan
    reality = resolution.reality

    if plan.source == PlanSource.SPECIAL:
        source = PresenceSource.BASE
    else:
        source = PresenceSource(plan.source.value)

    if reality.incident_type is not None:
        source = PresenceSource.INCIDENT

    if plan.source == PlanSource.OVERRIDE and reality.incident_type == IncidentType.AUSENCIA:
        source = PresenceSource.OVERRIDE

    coverage_context = None
    if coverage is not None:
        coverage_context = CoverageContext(
            covered_by_rep_id=coverage.covered_by.rep_id if coverage.covered_by else None,
            covering_rep_id=coverage.covering.rep_id if coverage.covering else None,
        )

    return DailyPresence(
        status=reality.status,
        source=source,
        assignment=plan.assignment,
        type=reality.incident_type,
        badge=resolution.computed.display.badge,
        coverage_context=coverage_context,
    )


class WeeklyScheduleBuilder:
    """Builds the weekly plan for a roster of representatives.

    Example:
        >>> builder = WeeklyScheduleBuilder()
        >>> plan = builder.build(reps, incidents, [], DayInfo.week(monday), calendar)
        >>> plan.get_day("a1", monday).status
        <DayStatus.WORKING: 'WORKING'>
    """

    def __init__(
        self,
        schedule_adapter: Optional[SpecialScheduleAdapter] = None,
        date_resolver: Optional[IncidentDateResolver] = None,
    ):
        """Initialize the builder with its collaborators.

        Args:
            schedule_adapter: Policy resolving special/base schedules.
            date_resolver: Policy expanding incidents into dates.
        """
        self.schedule_adapter = schedule_adapter or DefaultSpecialScheduleAdapter()
        self.date_resolver = date_resolver or DefaultIncidentDateResolver()
        self.day_resolver = DayResolver(self.schedule_adapter)

    def build(
        self,
        representatives: Sequence[Representative],
        incidents: Iterable[Incident],
        special_schedules: Iterable[SpecialSchedule],
        week_days: Sequence[DayInfo],
        calendar_days: Iterable[DayInfo],
        coverages: Iterable[Coverage] = (),
    ) -> WeeklyPlan:
        """Build the flattened weekly plan.

        Args:
            representatives: Roster, in display order.
            incidents: All known incidents.
            special_schedules: All special schedules.
            week_days: Exactly 7 days.
            calendar_days: Full calendar used to expand incident ranges.
            coverages: Coverage relationships, for badges.

        Returns:
            WeeklyPlan with one row per representative.

        Raises:
            WeekLengthError: If week_days does not hold 7 days.
        """
        resolutions, lookups = self._resolve(
            representatives, incidents, special_schedules, week_days, calendar_days, coverages
        )

        agents = []
        for representative in representatives:
            days = {}
            for day in week_days:
                key = (representative.id, day.date)
                days[day.date] = day_resolution_to_presence(
                    resolutions[representative.id][day.date], lookups[key]
                )
            agents.append(AgentWeek(representative_id=representative.id, days=days))

        return WeeklyPlan(week_start=week_days[0].date, agents=agents)

    def resolve_week(
        self,
        representatives: Sequence[Representative],
        incidents: Iterable[Incident],
        special_schedules: Iterable[SpecialSchedule],
        week_days: Sequence[DayInfo],
        calendar_days: Iterable[DayInfo],
        coverages: Iterable[Coverage] = (),
    ) -> dict[str, dict[date, DayResolution]]:
        """Resolve every representative/day of the week.

        Returns:
            Dict mapping representative ID to a date -> DayResolution dict.

        Raises:
            WeekLengthError: If week_days does not hold 7 days.
        """
        resolutions, _ = self._resolve(
            representatives, incidents, special_schedules, week_days, calendar_days, coverages
        )
        return resolutions

    def _resolve(
        self,
        representatives: Sequence[Representative],
        incidents: Iterable[Incident],
        special_schedules: Iterable[SpecialSchedule],
        week_days: Sequence[DayInfo],
        calendar_days: Iterable[DayInfo],
        coverages: Iterable[Coverage],
    ) -> tuple[
        dict[str, dict[date, DayResolution]],
        dict[tuple[str, date], Optional[CoverageLookup]],
    ]:
        """Resolve the week, keeping the coverage lookup of each day."""
        week_days = list(week_days)
        if len(week_days) != 7:
            raise WeekLengthError(
                f"A weekly schedule needs exactly 7 days, got {len(week_days)}"
            )

        incidents = list(incidents)
        coverages = list(coverages)
        representatives_map = {r.id: r for r in representatives}
        incident_index = self._index_incidents(incidents, list(calendar_days), representatives_map)
        global_schedules, individual_schedules = self._partition_schedules(special_schedules)

        logger.debug(
            "Resolving week of %s: %d representatives, %d incidents, %d coverages",
            week_days[0].date,
            len(representatives_map),
            len(incidents),
            len(coverages),
        )

        result: dict[str, dict[date, DayResolution]] = {}
        lookups: dict[tuple[str, date], Optional[CoverageLookup]] = {}
        for representative in representatives:
            applicable = global_schedules + individual_schedules.get(representative.id, [])
            days = {}
            for day in week_days:
                coverage = find_coverage_for_day(representative.id, day.date, coverages)
                lookups[(representative.id, day.date)] = coverage
                days[day.date] = self.day_resolver.resolve(
                    representative,
                    day,
                    incident_index.get((representative.id, day.date), []),
                    applicable,
                    coverage,
                )
            result[representative.id] = days

        return result, lookups

    def _index_incidents(
        self,
        incidents: list[Incident],
        calendar_days: list[DayInfo],
        representatives_map: dict[str, Representative],
    ) -> dict[tuple[str, date], list[Incident]]:
        """Map (representative_id, date) to the incidents touching it.

        Ranged incidents go first, then single-day ones; single-day types go
        through the resolver too so an unexpected multi-day override is
        still handled.
        """
        index: dict[tuple[str, date], list[Incident]] = defaultdict(list)

        for types in (RANGE_INCIDENT_TYPES, SINGLE_DAY_INCIDENT_TYPES):
            for incident in incidents:
                if incident.type not in types:
                    continue
                resolved = self.date_resolver.resolve(
                    incident,
                    calendar_days,
                    representatives_map.get(incident.representative_id),
                )
                for d in resolved.dates:
                    index[(incident.representative_id, d)].append(incident)

        return index

    def _partition_schedules(
        self,
        special_schedules: Iterable[SpecialSchedule],
    ) -> tuple[list[SpecialSchedule], dict[str, list[SpecialSchedule]]]:
        global_schedules = []
        individual: dict[str, list[SpecialSchedule]] = defaultdict(list)

        for schedule in special_schedules:
            if schedule.scope == ScheduleScope.GLOBAL:
                global_schedules.append(schedule)
            elif schedule.target_id:
                individual[schedule.target_id].append(schedule)

        return global_schedules, individual
