"""Tests for effective duty resolution over swap events."""

import logging
from datetime import date, datetime, timedelta

import pytest

from shiftledger.domain.models import (
    AgentWeek,
    CoverSwap,
    DailyPresence,
    DayInfo,
    DayStatus,
    DoubleSwap,
    ExchangeSwap,
    Incident,
    IncidentType,
    PresenceSource,
    Representative,
    ShiftAssignment,
    ShiftType,
    WeeklyPlan,
)
from shiftledger.scheduling.effective_duty import (
    DutyRole,
    DutySource,
    EffectiveDutyResolver,
    EffectiveDutyResult,
    resolve_punitive_responsibility,
)

MONDAY = date(2024, 4, 1)


def presence(assignment: ShiftAssignment) -> DailyPresence:
    return DailyPresence(
        status=DayStatus.WORKING if assignment.slot_count else DayStatus.OFF,
        source=PresenceSource.BASE,
        assignment=assignment,
    )


@pytest.fixture
def representatives():
    working = {i: DayStatus.WORKING for i in range(1, 6)}
    working.update({0: DayStatus.OFF, 6: DayStatus.OFF})
    return [
        Representative(id="A", name="A", base_shift=ShiftType.DAY, base_schedule=working),
        Representative(id="B", name="B", base_shift=ShiftType.NIGHT, base_schedule=working),
        Representative(id="C", name="C", base_shift=ShiftType.DAY, base_schedule=working),
    ]


@pytest.fixture
def plan():
    """A works DAY, B works NIGHT and C is off on Monday."""
    return WeeklyPlan(
        week_start=MONDAY,
        agents=[
            AgentWeek("A", {MONDAY: presence(ShiftAssignment.single(ShiftType.DAY))}),
            AgentWeek("B", {MONDAY: presence(ShiftAssignment.single(ShiftType.NIGHT))}),
            AgentWeek("C", {MONDAY: presence(ShiftAssignment.none())}),
        ],
    )


@pytest.fixture
def calendar():
    return [DayInfo.from_date(MONDAY + timedelta(days=i)) for i in range(-14, 28)]


@pytest.fixture
def resolver():
    return EffectiveDutyResolver()


def incident(incident_type, rep_id="A", start=MONDAY, duration=1, **kwargs):
    return Incident(
        id=f"{incident_type.value}-{rep_id}",
        representative_id=rep_id,
        type=incident_type,
        start_date=start,
        created_at=datetime(2024, 3, 1),
        duration=duration,
        **kwargs,
    )


class TestBaseDuty:
    """Tests for the fallback to the weekly plan."""

    def test_base_assignment(self, resolver, plan, calendar, representatives):
        result = resolver.resolve(plan, [], [], MONDAY, ShiftType.DAY, "A", calendar, representatives)

        assert result == EffectiveDutyResult(should_work=True, role=DutyRole.BASE, source=DutySource.BASE)

    def test_other_shift(self, resolver, plan, calendar, representatives):
        result = resolver.resolve(plan, [], [], MONDAY, ShiftType.NIGHT, "A", calendar, representatives)

        assert not result.should_work
        assert result.role == DutyRole.NONE

    def test_no_assignment(self, resolver, plan, calendar, representatives):
        result = resolver.resolve(plan, [], [], MONDAY, ShiftType.DAY, "C", calendar, representatives)

        assert not result.should_work


class TestIncidentDuty:
    """Tests for incident precedence."""

    def test_vacation_blocks(self, resolver, plan, calendar, representatives):
        incidents = [incident(IncidentType.VACACIONES)]

        result = resolver.resolve(plan, [], incidents, MONDAY, ShiftType.DAY, "A", calendar, representatives)

        assert result == EffectiveDutyResult(
            should_work=False,
            role=DutyRole.NONE,
            source=DutySource.INCIDENT,
            reason="VACACIONES",
        )

    def test_vacation_blocks_skipped_days_until_return(self, resolver, plan, calendar, representatives):
        """Days not counted by the vacation still sit inside [start, return)."""
        friday = MONDAY + timedelta(days=4)
        incidents = [incident(IncidentType.VACACIONES, start=friday, duration=2)]
        saturday = MONDAY + timedelta(days=5)

        result = resolver.resolve(plan, [], incidents, saturday, ShiftType.DAY, "A", calendar, representatives)

        assert result.reason == "VACACIONES"
        assert not result.should_work

    def test_formal_incident_beats_swaps(self, resolver, plan, calendar, representatives):
        incidents = [incident(IncidentType.LICENCIA)]
        swaps = [DoubleSwap(id="d1", date=MONDAY, shift=ShiftType.NIGHT, representative_id="A")]

        result = resolver.resolve(plan, swaps, incidents, MONDAY, ShiftType.NIGHT, "A", calendar, representatives)

        assert result.reason == "LICENCIA"
        assert result.source == DutySource.INCIDENT

    def test_absence_on_working_day(self, resolver, plan, calendar, representatives):
        incidents = [incident(IncidentType.AUSENCIA, note="Sin aviso", details="INJUSTIFICADA")]

        result = resolver.resolve(plan, [], incidents, MONDAY, ShiftType.DAY, "A", calendar, representatives)

        assert not result.should_work
        assert result.reason == "AUSENCIA"
        assert result.note == "Sin aviso"
        assert result.details == "INJUSTIFICADA"

    def test_absence_ignored_when_not_planned(self, resolver, plan, calendar, representatives):
        incidents = [incident(IncidentType.AUSENCIA, rep_id="C")]

        result = resolver.resolve(plan, [], incidents, MONDAY, ShiftType.DAY, "C", calendar, representatives)

        assert result.source == DutySource.BASE
        assert result.reason is None


class TestSwapDuty:
    """Tests for COVER, DOUBLE and SWAP events."""

    def test_cover(self, resolver, plan, calendar, representatives):
        swaps = [
            CoverSwap(id="c1", date=MONDAY, shift=ShiftType.DAY,
                      from_representative_id="A", to_representative_id="C")
        ]

        covered = resolver.resolve(plan, swaps, [], MONDAY, ShiftType.DAY, "A", calendar, representatives)
        covering = resolver.resolve(plan, swaps, [], MONDAY, ShiftType.DAY, "C", calendar, representatives)

        assert covered.role == DutyRole.COVERED
        assert not covered.should_work
        assert covered.reason == "Cubierto por C"
        assert covered.partner_id == "C"
        assert covering.role == DutyRole.COVERING
        assert covering.should_work
        assert covering.reason == "Cubriendo a A"

    def test_cover_on_other_shift_does_not_apply(self, resolver, plan, calendar, representatives):
        swaps = [
            CoverSwap(id="c1", date=MONDAY, shift=ShiftType.NIGHT,
                      from_representative_id="A", to_representative_id="C")
        ]

        result = resolver.resolve(plan, swaps, [], MONDAY, ShiftType.DAY, "A", calendar, representatives)

        assert result.role == DutyRole.BASE

    def test_double(self, resolver, plan, calendar, representatives):
        swaps = [DoubleSwap(id="d1", date=MONDAY, shift=ShiftType.NIGHT, representative_id="A")]

        result = resolver.resolve(plan, swaps, [], MONDAY, ShiftType.NIGHT, "A", calendar, representatives)

        assert result == EffectiveDutyResult(
            should_work=True,
            role=DutyRole.DOUBLE,
            source=DutySource.SWAP,
            reason="Turno adicional",
        )

    @pytest.mark.parametrize(
        "rep_id, shift, should_work, role, partner",
        [
            ("A", ShiftType.NIGHT, True, DutyRole.SWAPPED_IN, "B"),
            ("A", ShiftType.DAY, False, DutyRole.SWAPPED_OUT, "B"),
            ("B", ShiftType.DAY, True, DutyRole.SWAPPED_IN, "A"),
            ("B", ShiftType.NIGHT, False, DutyRole.SWAPPED_OUT, "A"),
        ],
    )
    def test_exchange_is_symmetric(
        self, resolver, plan, calendar, representatives, rep_id, shift, should_work, role, partner
    ):
        swaps = [
            ExchangeSwap(
                id="s1",
                date=MONDAY,
                from_representative_id="A",
                from_shift=ShiftType.DAY,
                to_representative_id="B",
                to_shift=ShiftType.NIGHT,
            )
        ]

        result = resolver.resolve(plan, swaps, [], MONDAY, shift, rep_id, calendar, representatives)

        assert result.should_work == should_work
        assert result.role == role
        assert result.reason == f"Intercambio con {partner}"
        assert result.partner_id == partner

    def test_swaps_on_other_dates_are_ignored(self, resolver, plan, calendar, representatives):
        swaps = [DoubleSwap(id="d1", date=MONDAY + timedelta(days=1), shift=ShiftType.NIGHT, representative_id="A")]

        result = resolver.resolve(plan, swaps, [], MONDAY, ShiftType.NIGHT, "A", calendar, representatives)

        assert not result.should_work

    def test_first_matching_swap_wins(self, resolver, plan, calendar, representatives):
        swaps = [
            DoubleSwap(id="d1", date=MONDAY, shift=ShiftType.NIGHT, representative_id="C"),
            CoverSwap(id="c1", date=MONDAY, shift=ShiftType.NIGHT,
                      from_representative_id="B", to_representative_id="C"),
        ]

        result = resolver.resolve(plan, swaps, [], MONDAY, ShiftType.NIGHT, "C", calendar, representatives)

        assert result.role == DutyRole.DOUBLE


class TestMissingRepresentative:
    """Unknown representatives degrade instead of failing."""

    def test_logs_warning_and_continues(self, resolver, plan, calendar, caplog):
        with caplog.at_level(logging.WARNING, logger="shiftledger.scheduling.effective_duty"):
            result = resolver.resolve(plan, [], [], MONDAY, ShiftType.DAY, "A", calendar, [])

        assert result.should_work
        assert "Representative A not found" in caplog.text


class TestPunitiveResponsibility:
    """Tests for resolve_punitive_responsibility."""

    def test_covered_representative_is_not_punishable(self, plan, calendar, representatives):
        swaps = [
            CoverSwap(id="c1", date=MONDAY, shift=ShiftType.DAY,
                      from_representative_id="A", to_representative_id="C")
        ]

        assert not resolve_punitive_responsibility(
            plan, swaps, [], MONDAY, ShiftType.DAY, "A", calendar, representatives
        )
        assert resolve_punitive_responsibility(
            plan, swaps, [], MONDAY, ShiftType.DAY, "C", calendar, representatives
        )
