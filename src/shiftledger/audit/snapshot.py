"""Weekly snapshot engine.

Turns a resolved weekly plan into an auditable slot ledger. Every planned
slot is visited exactly once, from the point of view of its owner; when a
coverage moves responsibility to another representative, the covering side
is credited in the same step.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from shiftledger.audit.models import RepresentativeSlots, SnapshotTotals, WeeklySnapshot
from shiftledger.audit.responsibility import (
    ResponsibilityResolver,
    ResponsibilitySource,
    resolve_slot_responsibility,
)
from shiftledger.audit.signing import sign_snapshot
from shiftledger.domain.coverage import Coverage
from shiftledger.domain.models import Badge, DailyPresence, DayStatus, Representative, WeeklyPlan

logger = logging.getLogger(__name__)


@dataclass
class _SlotTally:
    """Mutable per-representative counters, local to one snapshot run."""

    planned: int = 0
    executed: int = 0
    absences: int = 0
    covered: int = 0
    covering: int = 0

    def record_attendance(self, presence: Optional[DailyPresence]) -> None:
        if presence is not None and presence.status == DayStatus.WORKING:
            self.executed += 1
        else:
            self.absences += 1

    def freeze(self, rep_id: str) -> RepresentativeSlots:
        uncovered = max(0, self.planned - self.executed - self.absences - self.covered)
        return RepresentativeSlots(
            rep_id=rep_id,
            planned_slots=self.planned,
            executed_slots=self.executed,
            absence_slots=self.absences,
            covered_slots=self.covered,
            covering_slots=self.covering,
            uncovered_slots=uncovered,
        )


def iso_week_label(week_start: date) -> str:
    """ISO week label such as '2024-W14'."""
    year, week, _ = week_start.isocalendar()
    return f"{year}-W{week:02d}"


class SnapshotEngine:
    """Builds weekly snapshots.

    Args:
        responsibility_resolver: Decides who answers for each slot. Defaults
            to resolve_slot_responsibility.
        validator: Checks the result. Violations are logged as warnings and
            the snapshot is returned unchanged. Defaults to SnapshotValidator.

    Example:
        >>> engine = SnapshotEngine()
        >>> snapshot = engine.create(plan, coverages, representatives, actor_id="sup-1")
        >>> snapshot.totals.planned_slots
        10
    """

    def __init__(
        self,
        responsibility_resolver: Optional[ResponsibilityResolver] = None,
        validator=None,
    ):
        self.responsibility_resolver = responsibility_resolver or resolve_slot_responsibility
        if validator is None:
            from shiftledger.validation.validator import SnapshotValidator

            validator = SnapshotValidator()
        self.validator = validator

    def create(
        self,
        plan: WeeklyPlan,
        coverages: Iterable[Coverage],
        representatives: Iterable[Representative],
        week_start: Optional[date] = None,
        actor_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> WeeklySnapshot:
        """Create the snapshot of a week.

        Args:
            plan: Resolved weekly plan.
            coverages: Coverage records for the week.
            representatives: Roster.
            week_start: First date of the week. Defaults to plan.week_start.
            actor_id: Who requested the snapshot.
            created_at: Creation timestamp to store on the snapshot.

        Returns:
            WeeklySnapshot with one entry per plan agent, in plan order.
        """
        coverages = list(coverages)
        representatives = list(representatives)
        week_start = week_start or plan.week_start

        tallies = {agent.representative_id: _SlotTally() for agent in plan.agents}

        for agent in plan.agents:
            owner = tallies[agent.representative_id]
            for day_date in sorted(agent.days):
                self._account_day(
                    plan,
                    agent.representative_id,
                    day_date,
                    agent.days[day_date],
                    owner,
                    tallies,
                    coverages,
                    representatives,
                )

        by_rep = tuple(
            tallies[agent.representative_id].freeze(agent.representative_id)
            for agent in plan.agents
        )
        totals = SnapshotTotals(
            planned_slots=sum(r.planned_slots for r in by_rep),
            executed_slots=sum(r.executed_slots for r in by_rep),
            absence_slots=sum(r.absence_slots for r in by_rep),
            coverage_slots=sum(r.covered_slots + r.covering_slots for r in by_rep),
            uncovered_slots=sum(r.uncovered_slots for r in by_rep),
        )

        iso_week = iso_week_label(week_start)
        snapshot = WeeklySnapshot(
            id="",
            week_start=week_start,
            week_end=week_start + timedelta(days=6),
            iso_week=iso_week,
            totals=totals,
            by_representative=by_rep,
            created_by=actor_id,
            created_at=created_at,
        )
        snapshot = WeeklySnapshot(
            id=f"{iso_week}-{sign_snapshot(snapshot)[:12]}",
            week_start=snapshot.week_start,
            week_end=snapshot.week_end,
            iso_week=iso_week,
            totals=totals,
            by_representative=by_rep,
            created_by=actor_id,
            created_at=created_at,
        )

        result = self.validator.validate(snapshot)
        for error in result.errors:
            logger.warning("Snapshot %s: %s", snapshot.iso_week, error)
        for warning in result.warnings:
            logger.warning("Snapshot %s: %s", snapshot.iso_week, warning)

        logger.debug(
            "Snapshot %s: %d planned, %d executed, %d absences, %d uncovered",
            snapshot.iso_week,
            totals.planned_slots,
            totals.executed_slots,
            totals.absence_slots,
            totals.uncovered_slots,
        )
        return snapshot

    def _account_day(
        self,
        plan: WeeklyPlan,
        owner_id: str,
        day_date: date,
        presence: DailyPresence,
        owner: _SlotTally,
        tallies: dict[str, _SlotTally],
        coverages: list[Coverage],
        representatives: list[Representative],
    ) -> None:
        shifts = presence.assignment.shifts
        working = presence.status == DayStatus.WORKING

        for shift in shifts:
            owner.planned += 1
            responsibility = self.responsibility_resolver(
                owner_id, day_date, shift, plan, coverages, representatives
            )
            if not responsibility.is_resolved:
                # Nobody is credited; the slot ends up uncovered.
                continue

            if responsibility.source == ResponsibilitySource.BASE:
                owner.record_attendance(presence)
                continue

            if working:
                owner.executed += 1

            covering = tallies.get(responsibility.target_rep_id)
            if covering is None:
                continue
            covering.covering += 1

            covering_day = plan.get_day(responsibility.target_rep_id, day_date)
            # A base-assigned covering rep is accounted by their own pass.
            base_assigned = covering_day is not None and covering_day.assignment.covers(shift)

            if covering_day is not None and covering_day.status == DayStatus.WORKING:
                owner.covered += 1
                if not base_assigned:
                    covering.executed += 1
            elif not base_assigned:
                covering.absences += 1

        if presence.badge == Badge.CUBRIENDO and not shifts and owner.covering == 0:
            owner.covering += 1
            owner.record_attendance(presence)

        if not shifts and working and presence.badge != Badge.CUBRIENDO:
            owner.executed += 1


def create_weekly_snapshot(
    plan: WeeklyPlan,
    coverages: Iterable[Coverage],
    representatives: Iterable[Representative],
    week_start: Optional[date] = None,
    actor_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> WeeklySnapshot:
    """Create a weekly snapshot with the default resolver and validator."""
    return SnapshotEngine().create(
        plan,
        coverages,
        representatives,
        week_start=week_start,
        actor_id=actor_id,
        created_at=created_at,
    )
