"""Effective duty resolution.

Answers "should this representative work this shift on this date?" taking
into account swap events, which are not baked into the weekly plan. The
answer drives disciplinary (punitive) decisions, so the precedence order is
fixed:

1. Blocking formal incident (VACACIONES / LICENCIA).
2. AUSENCIA on a day the base plan says the representative works.
3. Swap events for the date (COVER, DOUBLE, SWAP).
4. The base weekly plan.

Reason strings are shown verbatim in audit views and must not change.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional, Sequence

from shiftledger.domain.models import (
    CoverSwap,
    DayInfo,
    DoubleSwap,
    ExchangeSwap,
    Incident,
    IncidentType,
    Representative,
    ShiftType,
    SwapEvent,
    WeeklyPlan,
)
from shiftledger.domain.policies import DefaultIncidentDateResolver, IncidentDateResolver

logger = logging.getLogger(__name__)


class DutyRole(Enum):
    """Effective role of a representative in a shift."""

    BASE = "BASE"  # Works per base plan
    COVERING = "COVERING"  # Steps in for someone
    COVERED = "COVERED"  # Someone steps in for them
    DOUBLE = "DOUBLE"  # Additional shift on top of their load
    SWAPPED_IN = "SWAPPED_IN"  # Works by exchange
    SWAPPED_OUT = "SWAPPED_OUT"  # Off by exchange
    NONE = "NONE"  # Does not work


class DutySource(Enum):
    """Which layer decided the duty."""

    BASE = "BASE"
    INCIDENT = "INCIDENT"
    SWAP = "SWAP"


@dataclass(frozen=True)
class EffectiveDutyResult:
    """Effective duty for a representative/date/shift.

    Attributes:
        should_work: Whether the representative is responsible for the shift.
        role: Effective role.
        source: Layer that decided the result.
        reason: Human-readable reason (e.g. "Cubierto por X", "VACACIONES").
        partner_id: Counterpart in a swap transaction.
        note: Note propagated from the incident.
        details: Details propagated from the incident (e.g. 'JUSTIFICADA').
    """

    should_work: bool
    role: DutyRole
    source: DutySource = DutySource.BASE
    reason: Optional[str] = None
    partner_id: Optional[str] = None
    note: Optional[str] = None
    details: Optional[str] = None


class EffectiveDutyResolver:
    """Resolves effective duty over the weekly plan and swap events.

    Example:
        >>> resolver = EffectiveDutyResolver()
        >>> result = resolver.resolve(plan, swaps, incidents, d, ShiftType.DAY,
        ...                           "a1", calendar, representatives)
        >>> result.should_work
        True
    """

    def __init__(self, date_resolver: Optional[IncidentDateResolver] = None):
        self.date_resolver = date_resolver or DefaultIncidentDateResolver()

    def resolve(
        self,
        weekly_plan: WeeklyPlan,
        swaps: Iterable[SwapEvent],
        incidents: Iterable[Incident],
        schedule_date: date,
        shift: ShiftType,
        representative_id: str,
        calendar_days: Sequence[DayInfo],
        representatives: Iterable[Representative],
    ) -> EffectiveDutyResult:
        """Resolve whether a representative should work a shift.

        Args:
            weekly_plan: Base weekly plan (swap events not applied).
            swaps: Swap events; only those on schedule_date are considered.
            incidents: All incidents.
            schedule_date: Date to check.
            shift: Shift to check.
            representative_id: Representative to check.
            calendar_days: Calendar used to expand incident ranges.
            representatives: Roster, used for incident date expansion.

        Returns:
            EffectiveDutyResult.
        """
        calendar_days = list(calendar_days)
        own_incidents = [i for i in incidents if i.representative_id == representative_id]

        presence = weekly_plan.get_day(representative_id, schedule_date)
        base_works = presence is not None and presence.assignment.covers(shift)

        representative = next((r for r in representatives if r.id == representative_id), None)
        if representative is None:
            logger.warning(
                "Representative %s not found; incident dates are resolved without "
                "their base schedule",
                representative_id,
            )

        blocking = self._find_blocking_incident(
            own_incidents, schedule_date, calendar_days, representative
        )
        if blocking is not None:
            return EffectiveDutyResult(
                should_work=False,
                role=DutyRole.NONE,
                source=DutySource.INCIDENT,
                reason=blocking.type.value,
            )

        if base_works:
            absence = self._find_absence(own_incidents, schedule_date, calendar_days, representative)
            if absence is not None:
                return EffectiveDutyResult(
                    should_work=False,  # Planned, but did not attend
                    role=DutyRole.NONE,
                    source=DutySource.INCIDENT,
                    reason=IncidentType.AUSENCIA.value,
                    note=absence.note,
                    details=absence.details,
                )

        for event in swaps:
            if event.date != schedule_date:
                continue
            result = self._resolve_swap(event, shift, representative_id)
            if result is not None:
                return result

        if base_works:
            return EffectiveDutyResult(should_work=True, role=DutyRole.BASE)

        return EffectiveDutyResult(should_work=False, role=DutyRole.NONE)

    def is_punishable(
        self,
        weekly_plan: WeeklyPlan,
        swaps: Iterable[SwapEvent],
        incidents: Iterable[Incident],
        schedule_date: date,
        shift: ShiftType,
        representative_id: str,
        calendar_days: Sequence[DayInfo],
        representatives: Iterable[Representative],
    ) -> bool:
        """Whether the representative is responsible for the shift.

        BASE, COVERING, DOUBLE and SWAPPED_IN are responsible; COVERED,
        SWAPPED_OUT and blocked days are not.
        """
        return self.resolve(
            weekly_plan,
            swaps,
            incidents,
            schedule_date,
            shift,
            representative_id,
            calendar_days,
            representatives,
        ).should_work

    def _find_blocking_incident(
        self,
        incidents: list[Incident],
        schedule_date: date,
        calendar_days: list[DayInfo],
        representative: Optional[Representative],
    ) -> Optional[Incident]:
        for incident in incidents:
            if not incident.type.is_formal:
                continue
            resolved = self.date_resolver.resolve(incident, calendar_days, representative)
            if schedule_date in resolved.dates:
                return incident
            # Vacations also consume the non-counted days up to the return
            # date. Leave is already continuous calendar days.
            if incident.type == IncidentType.VACACIONES and resolved.blocks(schedule_date):
                return incident
        return None

    def _find_absence(
        self,
        incidents: list[Incident],
        schedule_date: date,
        calendar_days: list[DayInfo],
        representative: Optional[Representative],
    ) -> Optional[Incident]:
        for incident in incidents:
            if incident.type != IncidentType.AUSENCIA:
                continue
            resolved = self.date_resolver.resolve(incident, calendar_days, representative)
            if schedule_date in resolved.dates:
                return incident
        return None

    def _resolve_swap(
        self,
        event: SwapEvent,
        shift: ShiftType,
        representative_id: str,
    ) -> Optional[EffectiveDutyResult]:
        if isinstance(event, CoverSwap):
            if event.shift != shift:
                return None
            if event.from_representative_id == representative_id:
                return EffectiveDutyResult(
                    should_work=False,
                    role=DutyRole.COVERED,
                    source=DutySource.SWAP,
                    reason=f"Cubierto por {event.to_representative_id}",
                    partner_id=event.to_representative_id,
                )
            if event.to_representative_id == representative_id:
                return EffectiveDutyResult(
                    should_work=True,
                    role=DutyRole.COVERING,
                    source=DutySource.SWAP,
                    reason=f"Cubriendo a {event.from_representative_id}",
                    partner_id=event.from_representative_id,
                )
            return None

        if isinstance(event, DoubleSwap):
            if event.shift == shift and event.representative_id == representative_id:
                return EffectiveDutyResult(
                    should_work=True,
                    role=DutyRole.DOUBLE,
                    source=DutySource.SWAP,
                    reason="Turno adicional",
                )
            return None

        if isinstance(event, ExchangeSwap):
            if event.from_representative_id == representative_id:
                partner = event.to_representative_id
                out_shift, in_shift = event.from_shift, event.to_shift
            elif event.to_representative_id == representative_id:
                partner = event.from_representative_id
                out_shift, in_shift = event.to_shift, event.from_shift
            else:
                return None

            if shift == out_shift:
                return EffectiveDutyResult(
                    should_work=False,
                    role=DutyRole.SWAPPED_OUT,
                    source=DutySource.SWAP,
                    reason=f"Intercambio con {partner}",
                    partner_id=partner,
                )
            if shift == in_shift:
                return EffectiveDutyResult(
                    should_work=True,
                    role=DutyRole.SWAPPED_IN,
                    source=DutySource.SWAP,
                    reason=f"Intercambio con {partner}",
                    partner_id=partner,
                )
        return None


def resolve_punitive_responsibility(
    weekly_plan: WeeklyPlan,
    swaps: Iterable[SwapEvent],
    incidents: Iterable[Incident],
    schedule_date: date,
    shift: ShiftType,
    representative_id: str,
    calendar_days: Sequence[DayInfo],
    representatives: Iterable[Representative],
    date_resolver: Optional[IncidentDateResolver] = None,
) -> bool:
    """Whether a representative can be held responsible for missing a shift."""
    return EffectiveDutyResolver(date_resolver).is_punishable(
        weekly_plan,
        swaps,
        incidents,
        schedule_date,
        shift,
        representative_id,
        calendar_days,
        representatives,
    )
