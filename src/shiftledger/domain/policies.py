"""Policy definitions for schedule and incident resolution.

This module contains the two collaborators the planning engine delegates to:

- SpecialScheduleAdapter: what a representative's schedule says for a date
  (OFF / MIXTO / OVERRIDE / BASE), before any incident is applied.
- IncidentDateResolver: which concrete dates a ranged incident covers, and
  when the representative returns.

Policies are kept separate from the engine so they can be replaced and
tested independently. The engine never inspects their internals.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from shiftledger.domain.models import (
    DailyScheduleState,
    DayInfo,
    DayKind,
    DayStatus,
    Incident,
    IncidentType,
    MixType,
    Representative,
    ScheduleScope,
    ShiftType,
    SpecialSchedule,
    weekday_index,
)

logger = logging.getLogger(__name__)


class EffectiveScheduleType(Enum):
    """Classification returned by a special schedule adapter."""

    BASE = "BASE"
    OVERRIDE = "OVERRIDE"
    MIXTO = "MIXTO"
    OFF = "OFF"


@dataclass(frozen=True)
class EffectiveSchedule:
    """Effective schedule state of a representative on a date.

    Attributes:
        type: OFF, MIXTO, OVERRIDE (special schedule shift) or BASE.
        shift: Shift for OVERRIDE and BASE results.
        source: Special schedule that produced the result, if any.
    """

    type: EffectiveScheduleType
    shift: Optional[ShiftType] = None
    source: Optional[SpecialSchedule] = None


@dataclass(frozen=True)
class ResolvedIncident:
    """Concrete dates covered by an incident.

    Attributes:
        incident: The incident that was resolved.
        dates: Affected dates, in order.
        start: First affected date.
        end: Last affected date.
        return_date: First date the representative is back.
    """

    incident: Incident
    dates: tuple[date, ...] = ()
    start: Optional[date] = None
    end: Optional[date] = None
    return_date: Optional[date] = None

    def blocks(self, schedule_date: date) -> bool:
        """Check if a date falls in [start, return_date)."""
        if self.start is None or self.return_date is None:
            return False
        return self.start <= schedule_date < self.return_date


class SpecialScheduleAdapter(ABC):
    """Abstract base class for effective schedule resolution."""

    @abstractmethod
    def resolve(
        self,
        representative: Representative,
        schedule_date: date,
        base_schedule: dict[int, DayStatus],
        special_schedules: Iterable[SpecialSchedule],
    ) -> EffectiveSchedule:
        """Resolve the effective schedule for a representative on a date.

        Args:
            representative: The representative.
            schedule_date: Date to resolve.
            base_schedule: Weekday (0=Sunday) to WORKING/OFF.
            special_schedules: Schedules applicable to this representative.

        Returns:
            EffectiveSchedule for the date.
        """
        pass


class IncidentDateResolver(ABC):
    """Abstract base class for incident date-range expansion."""

    @abstractmethod
    def resolve(
        self,
        incident: Incident,
        calendar_days: Iterable[DayInfo],
        representative: Optional[Representative] = None,
    ) -> ResolvedIncident:
        """Expand an incident into concrete dates.

        Args:
            incident: Incident to expand.
            calendar_days: Known calendar days (holidays included).
            representative: Owner of the incident. May be None when the
                representative can no longer be found.

        Returns:
            ResolvedIncident with dates, start, end and return date.
        """
        pass


@dataclass
class DefaultSpecialScheduleAdapter(SpecialScheduleAdapter):
    """Default effective schedule resolution.

    Rules:
    - An INDIVIDUAL schedule beats a GLOBAL one; date ranges are inclusive.
    - The active schedule's weekly pattern is returned as-is: OFF, MIXTO,
      or the pattern shift as OVERRIDE.
    - Without a special schedule: an explicit base OFF is OFF, an active
      mixed contract is MIXTO, otherwise BASE on the base shift.

    Note: A weekday missing from the base schedule is not an explicit OFF.
    """

    weekday_mix_days: frozenset[int] = frozenset({1, 2, 3, 4})  # Mon-Thu
    weekend_mix_days: frozenset[int] = frozenset({0, 5, 6})  # Fri-Sun

    def resolve(
        self,
        representative: Representative,
        schedule_date: date,
        base_schedule: dict[int, DayStatus],
        special_schedules: Iterable[SpecialSchedule],
    ) -> EffectiveSchedule:
        day_of_week = weekday_index(schedule_date)

        applicable = [
            s for s in special_schedules
            if s.is_active_on(schedule_date) and s.applies_to(representative.id)
        ]
        # Stable sort keeps input order within a scope
        applicable.sort(key=lambda s: 0 if s.scope == ScheduleScope.INDIVIDUAL else 1)
        active = applicable[0] if applicable else None

        if active is None:
            return self._resolve_base(representative, day_of_week, base_schedule)

        if not active.weekly_pattern:
            logger.error(
                "Special schedule %s has no weekly pattern; falling back to base schedule",
                active.id,
            )
            if base_schedule.get(day_of_week) == DayStatus.OFF:
                return EffectiveSchedule(EffectiveScheduleType.OFF)
            return EffectiveSchedule(EffectiveScheduleType.BASE, representative.base_shift)

        state = active.weekly_pattern.get(day_of_week)

        if state == DailyScheduleState.OFF:
            return EffectiveSchedule(EffectiveScheduleType.OFF, source=active)

        if state == DailyScheduleState.MIXTO:
            # Eligible for both shifts; a capacity state, not a double shift
            return EffectiveSchedule(EffectiveScheduleType.MIXTO, source=active)

        if state in (DailyScheduleState.DAY, DailyScheduleState.NIGHT):
            return EffectiveSchedule(
                EffectiveScheduleType.OVERRIDE,
                shift=ShiftType(state.value),
                source=active,
            )

        # Pattern without an entry for this weekday
        return self._resolve_base(representative, day_of_week, base_schedule)

    def is_mix_active(self, representative: Representative, day_of_week: int) -> bool:
        """Check if the representative's mixed contract covers a weekday."""
        profile = representative.mix_profile
        if profile is None:
            return False
        if profile.type == MixType.WEEKDAY:
            return day_of_week in self.weekday_mix_days
        if profile.type == MixType.WEEKEND:
            return day_of_week in self.weekend_mix_days
        return False

    def _resolve_base(
        self,
        representative: Representative,
        day_of_week: int,
        base_schedule: dict[int, DayStatus],
    ) -> EffectiveSchedule:
        if base_schedule.get(day_of_week) == DayStatus.OFF:
            return EffectiveSchedule(EffectiveScheduleType.OFF)

        if self.is_mix_active(representative, day_of_week):
            return EffectiveSchedule(EffectiveScheduleType.MIXTO)

        return EffectiveSchedule(EffectiveScheduleType.BASE, representative.base_shift)


@dataclass
class DefaultIncidentDateResolver(IncidentDateResolver):
    """Default incident date expansion.

    - LICENCIA: `duration` consecutive calendar days.
    - VACACIONES: `duration` countable days, skipping holidays, days missing
      from the calendar and the representative's base OFF days.
    - Anything else: the start date only, returning the next day.

    The return date of a range is the next working day after its end.
    """

    default_vacation_days: int = 14
    default_license_days: int = 1
    max_return_search_days: int = 20
    license_return_ignores_holidays: bool = False

    def resolve(
        self,
        incident: Incident,
        calendar_days: Iterable[DayInfo],
        representative: Optional[Representative] = None,
    ) -> ResolvedIncident:
        if incident.start_date is None:
            logger.warning(
                "Incident %s has no start date; skipping date resolution",
                incident.id,
            )
            return ResolvedIncident(incident=incident)

        calendar = {d.date: d for d in calendar_days}

        if incident.type == IncidentType.LICENCIA:
            return self._resolve_license(incident, calendar, representative)
        if incident.type == IncidentType.VACACIONES:
            return self._resolve_vacation(incident, calendar, representative)
        return self._resolve_single_day(incident)

    def _resolve_license(
        self,
        incident: Incident,
        calendar: dict[date, DayInfo],
        representative: Optional[Representative],
    ) -> ResolvedIncident:
        duration = incident.duration or self.default_license_days
        dates = tuple(incident.start_date + timedelta(days=i) for i in range(duration))

        return ResolvedIncident(
            incident=incident,
            dates=dates,
            start=dates[0],
            end=dates[-1],
            return_date=self.find_next_working_day(
                dates[-1],
                calendar,
                representative,
                ignore_holidays=self.license_return_ignores_holidays,
            ),
        )

    def _resolve_vacation(
        self,
        incident: Incident,
        calendar: dict[date, DayInfo],
        representative: Optional[Representative],
    ) -> ResolvedIncident:
        duration = incident.duration or self.default_vacation_days
        max_scan = duration * 3 + 30

        dates = []
        cursor = incident.start_date
        scanned = 0
        while len(dates) < duration and scanned < max_scan:
            if self._is_countable(cursor, calendar, representative):
                dates.append(cursor)
            cursor += timedelta(days=1)
            scanned += 1

        if not dates:
            return ResolvedIncident(
                incident=incident,
                start=incident.start_date,
                end=incident.start_date,
            )

        return ResolvedIncident(
            incident=incident,
            dates=tuple(dates),
            start=dates[0],
            end=dates[-1],
            return_date=self.find_next_working_day(dates[-1], calendar, representative),
        )

    def _resolve_single_day(self, incident: Incident) -> ResolvedIncident:
        d = incident.start_date
        return ResolvedIncident(
            incident=incident,
            dates=(d,),
            start=d,
            end=d,
            return_date=d + timedelta(days=1),
        )

    def _is_countable(
        self,
        d: date,
        calendar: dict[date, DayInfo],
        representative: Optional[Representative],
        ignore_holidays: bool = False,
    ) -> bool:
        day = calendar.get(d)
        if day is None:
            return False
        if day.kind == DayKind.HOLIDAY and not ignore_holidays:
            return False
        if representative is not None:
            return representative.base_status(d) != DayStatus.OFF
        return True

    def find_next_working_day(
        self,
        from_date: date,
        calendar: dict[date, DayInfo],
        representative: Optional[Representative] = None,
        ignore_holidays: bool = False,
    ) -> date:
        """First countable day after from_date.

        Falls back to the following calendar day when nothing is found
        within the search window.
        """
        cursor = from_date + timedelta(days=1)
        for _ in range(self.max_return_search_days):
            if self._is_countable(cursor, calendar, representative, ignore_holidays):
                return cursor
            cursor += timedelta(days=1)
        return from_date + timedelta(days=1)
