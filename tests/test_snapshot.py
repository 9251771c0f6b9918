"""Tests for the weekly snapshot engine.

Scenarios cover the coverage responsibility rules: failed commitments,
executed coverage, standard absences and the covering representative who
also has their own base shift.
"""

import logging
from datetime import date, datetime

import pytest

from shiftledger.audit.responsibility import (
    DisplayContext,
    ResponsibilityKind,
    SlotResponsibility,
)
from shiftledger.audit.snapshot import SnapshotEngine, create_weekly_snapshot, iso_week_label
from shiftledger.domain.coverage import Coverage
from shiftledger.domain.models import (
    AgentWeek,
    Badge,
    DailyPresence,
    DayStatus,
    PresenceSource,
    Representative,
    ShiftAssignment,
    ShiftType,
    WeeklyPlan,
)

WEEK = date(2026, 2, 2)


def presence(status, assignment=None, badge=None):
    return DailyPresence(
        status=status,
        source=PresenceSource.BASE,
        assignment=assignment or ShiftAssignment.single(ShiftType.DAY),
        badge=badge,
    )


def plan_of(**days_by_rep):
    return WeeklyPlan(
        week_start=WEEK,
        agents=[AgentWeek(rep_id, {WEEK: p}) for rep_id, p in days_by_rep.items()],
    )


@pytest.fixture
def representatives():
    return [Representative(id="REP_A", name="Rep A"), Representative(id="REP_B", name="Rep B")]


@pytest.fixture
def coverage():
    return Coverage(
        id="cov-1",
        date=WEEK,
        shift=ShiftType.DAY,
        covered_rep_id="REP_B",
        covering_rep_id="REP_A",
    )


@pytest.fixture
def engine():
    return SnapshotEngine()


class TestCoverageResponsibility:
    """Slot accounting when coverage moves responsibility."""

    def test_failed_commitment_charges_covering_rep(self, engine, representatives, coverage):
        plan = plan_of(
            REP_A=presence(DayStatus.OFF, badge=Badge.CUBRIENDO),
            REP_B=presence(DayStatus.OFF, badge=Badge.CUBIERTO),
        )

        snapshot = engine.create(plan, [coverage], representatives, actor_id="TEST")

        rep_a = snapshot.for_representative("REP_A")
        rep_b = snapshot.for_representative("REP_B")
        assert rep_a.absence_slots == 1
        assert rep_a.executed_slots == 0
        assert rep_a.covering_slots == 1
        assert rep_a.is_balanced
        assert rep_b.absence_slots == 0
        assert rep_b.executed_slots == 0
        assert rep_b.covered_slots == 0
        assert snapshot.totals.uncovered_slots == 1

    def test_executed_coverage(self, engine, representatives, coverage):
        plan = plan_of(
            REP_A=presence(DayStatus.WORKING, badge=Badge.CUBRIENDO),
            REP_B=presence(DayStatus.OFF, badge=Badge.CUBIERTO),
        )

        snapshot = engine.create(plan, [coverage], representatives)

        rep_a = snapshot.for_representative("REP_A")
        rep_b = snapshot.for_representative("REP_B")
        assert rep_a.absence_slots == 0
        assert rep_a.executed_slots == 1
        assert rep_a.covering_slots == 1
        assert rep_b.absence_slots == 0
        assert rep_b.covered_slots == 1
        assert snapshot.totals.uncovered_slots == 0

    def test_standard_absence(self, engine, representatives):
        plan = plan_of(REP_A=presence(DayStatus.OFF, badge=Badge.AUSENCIA))

        snapshot = engine.create(plan, [], representatives)

        rep_a = snapshot.for_representative("REP_A")
        assert rep_a.absence_slots == 1
        assert rep_a.executed_slots == 0
        assert rep_a.covered_slots == 0
        assert rep_a.covering_slots == 0
        assert snapshot.totals.uncovered_slots == 0

    def test_covering_rep_with_own_shift_is_not_double_counted(self, engine, representatives, coverage):
        plan = plan_of(
            REP_A=presence(DayStatus.WORKING, badge=Badge.CUBRIENDO),
            REP_B=presence(DayStatus.OFF, badge=Badge.CUBIERTO),
        )

        snapshot = engine.create(plan, [coverage], representatives)

        rep_a = snapshot.for_representative("REP_A")
        rep_b = snapshot.for_representative("REP_B")
        assert rep_a.planned_slots == 1
        assert rep_a.executed_slots == 1
        assert rep_a.covering_slots == 1
        assert rep_b.covered_slots == 1
        assert rep_b.uncovered_slots == 0

    def test_covering_other_shift_is_credited_once(self, engine, representatives):
        """Covering a NIGHT slot while working an own DAY shift."""
        plan = plan_of(
            REP_A=presence(DayStatus.WORKING, badge=Badge.CUBRIENDO),
            REP_B=presence(DayStatus.OFF, ShiftAssignment.single(ShiftType.NIGHT), Badge.CUBIERTO),
        )
        night_coverage = Coverage(
            id="cov-n",
            date=WEEK,
            shift=ShiftType.NIGHT,
            covered_rep_id="REP_B",
            covering_rep_id="REP_A",
        )

        snapshot = engine.create(plan, [night_coverage], representatives)

        rep_a = snapshot.for_representative("REP_A")
        rep_b = snapshot.for_representative("REP_B")
        assert rep_a.executed_slots == 2  # Own DAY plus the covered NIGHT
        assert rep_a.covering_slots == 1
        assert rep_b.covered_slots == 1
        assert rep_b.absence_slots == 0
        assert rep_b.is_balanced

    def test_badge_without_record_leaves_slot_uncovered(self, engine, representatives):
        plan = plan_of(REP_B=presence(DayStatus.OFF, badge=Badge.CUBIERTO))

        snapshot = engine.create(plan, [], representatives)

        rep_b = snapshot.for_representative("REP_B")
        assert rep_b.planned_slots == 1
        assert rep_b.absence_slots == 0
        assert rep_b.uncovered_slots == 1


class TestBadgeFallbacks:
    """Accounting for days without assigned shifts."""

    def test_covering_badge_without_record(self, engine, representatives):
        plan = plan_of(REP_A=presence(DayStatus.WORKING, ShiftAssignment.none(), Badge.CUBRIENDO))

        snapshot = engine.create(plan, [], representatives)

        rep_a = snapshot.for_representative("REP_A")
        assert rep_a.covering_slots == 1
        assert rep_a.executed_slots == 1
        assert rep_a.planned_slots == 0

    def test_voluntary_extra_work(self, engine, representatives):
        plan = plan_of(REP_A=presence(DayStatus.WORKING, ShiftAssignment.none()))

        snapshot = engine.create(plan, [], representatives)

        assert snapshot.for_representative("REP_A").executed_slots == 1

    def test_off_day_counts_nothing(self, engine, representatives):
        plan = plan_of(REP_A=presence(DayStatus.OFF, ShiftAssignment.none()))

        snapshot = engine.create(plan, [], representatives)

        rep_a = snapshot.for_representative("REP_A")
        assert (rep_a.planned_slots, rep_a.executed_slots, rep_a.absence_slots) == (0, 0, 0)


class TestSnapshotShape:
    """Tests for snapshot metadata, totals and validation."""

    def test_mixed_day_has_two_slots(self, engine, representatives):
        plan = plan_of(REP_A=presence(DayStatus.WORKING, ShiftAssignment.both()))

        snapshot = engine.create(plan, [], representatives)

        assert snapshot.for_representative("REP_A").planned_slots == 2
        assert snapshot.for_representative("REP_A").executed_slots == 2

    def test_metadata(self, engine, representatives):
        created = datetime(2026, 2, 9, 8, 0)
        plan = plan_of(REP_A=presence(DayStatus.WORKING))

        snapshot = engine.create(plan, [], representatives, actor_id="sup-1", created_at=created)

        assert snapshot.week_start == WEEK
        assert snapshot.week_end == date(2026, 2, 8)
        assert snapshot.iso_week == "2026-W06"
        assert snapshot.created_by == "sup-1"
        assert snapshot.created_at == created
        assert snapshot.id.startswith("2026-W06-")

    def test_id_depends_on_content_only(self, engine, representatives):
        plan = plan_of(REP_A=presence(DayStatus.WORKING))

        first = engine.create(plan, [], representatives, actor_id="x")
        second = engine.create(plan, [], representatives, actor_id="y")

        assert first.id == second.id

    def test_totals(self, engine, representatives, coverage):
        plan = plan_of(
            REP_A=presence(DayStatus.WORKING, badge=Badge.CUBRIENDO),
            REP_B=presence(DayStatus.OFF, badge=Badge.CUBIERTO),
        )

        snapshot = engine.create(plan, [coverage], representatives)

        assert snapshot.totals.planned_slots == 2
        assert snapshot.totals.executed_slots == 1
        assert snapshot.totals.absence_slots == 0
        assert snapshot.totals.coverage_slots == 2  # covered + covering

    def test_plan_order_preserved(self, engine, representatives):
        plan = plan_of(REP_B=presence(DayStatus.WORKING), REP_A=presence(DayStatus.WORKING))

        snapshot = engine.create(plan, [], representatives)

        assert [r.rep_id for r in snapshot.by_representative] == ["REP_B", "REP_A"]

    def test_invariant_violation_is_logged_not_raised(self, engine, representatives, caplog):
        """Extra work on top of a plan breaks the invariant; it is reported."""
        plan = WeeklyPlan(
            week_start=WEEK,
            agents=[
                AgentWeek(
                    "REP_A",
                    {
                        WEEK: presence(DayStatus.OFF),
                        date(2026, 2, 3): presence(DayStatus.WORKING, ShiftAssignment.none()),
                    },
                )
            ],
        )

        with caplog.at_level(logging.WARNING, logger="shiftledger.audit.snapshot"):
            snapshot = engine.create(plan, [], representatives)

        rep_a = snapshot.for_representative("REP_A")
        assert rep_a.executed_slots == 1
        assert rep_a.absence_slots == 1
        assert rep_a.uncovered_slots == 0  # Clamped
        assert not rep_a.is_balanced
        assert "slot_invariant_broken" in caplog.text

    def test_custom_responsibility_resolver(self, representatives):
        def nobody(owner_id, schedule_date, shift, plan, coverages, reps):
            return SlotResponsibility(
                kind=ResponsibilityKind.UNASSIGNED,
                slot_owner_id=owner_id,
                display_context=DisplayContext(title="", subtitle=""),
            )

        plan = plan_of(REP_A=presence(DayStatus.WORKING))

        snapshot = SnapshotEngine(responsibility_resolver=nobody).create(plan, [], representatives)

        assert snapshot.for_representative("REP_A").uncovered_slots == 1

    def test_module_function(self, representatives):
        plan = plan_of(REP_A=presence(DayStatus.WORKING))

        snapshot = create_weekly_snapshot(plan, [], representatives, actor_id="TEST")

        assert snapshot.totals.executed_slots == 1


class TestIsoWeekLabel:
    def test_year_boundary(self):
        assert iso_week_label(date(2024, 12, 30)) == "2025-W01"
        assert iso_week_label(date(2024, 4, 1)) == "2024-W14"
