"""Slot responsibility resolution.

Decides who is actually responsible for a slot (representative, date,
shift). A slot has either exactly one responsible representative or an
explicit UNASSIGNED state; a responsible person is never invented.

Rules:
- An ACTIVE coverage for the slot makes the covering representative
  responsible.
- A CUBIERTO badge without a coverage record leaves the slot UNASSIGNED.
- Otherwise the slot owner is responsible.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Iterable, Optional

from shiftledger.domain.coverage import Coverage
from shiftledger.domain.models import Badge, Representative, ShiftType, WeeklyPlan


class ResponsibilityKind(Enum):
    RESOLVED = "RESOLVED"
    UNASSIGNED = "UNASSIGNED"


class ResponsibilitySource(Enum):
    BASE = "BASE"
    COVERAGE = "COVERAGE"


class UnassignedReason(Enum):
    COVERAGE_FAILED = "COVERAGE_FAILED"
    NO_RESPONSIBLE = "NO_RESPONSIBLE"


@dataclass(frozen=True)
class DisplayContext:
    """Texts shown when registering an absence against a slot."""

    title: str
    subtitle: str
    target_name: Optional[str] = None
    owner_name: Optional[str] = None


@dataclass(frozen=True)
class SlotResponsibility:
    """Who answers for a slot.

    Attributes:
        kind: RESOLVED or UNASSIGNED.
        slot_owner_id: Representative the slot belongs to.
        target_rep_id: Responsible representative (RESOLVED only).
        source: BASE or COVERAGE (RESOLVED only).
        reason: Why nobody is responsible (UNASSIGNED only).
        display_context: Texts for audit views.
    """

    kind: ResponsibilityKind
    slot_owner_id: str
    display_context: DisplayContext
    target_rep_id: Optional[str] = None
    source: Optional[ResponsibilitySource] = None
    reason: Optional[UnassignedReason] = None

    @property
    def is_resolved(self) -> bool:
        return self.kind == ResponsibilityKind.RESOLVED


ResponsibilityResolver = Callable[
    [str, date, ShiftType, WeeklyPlan, list[Coverage], list[Representative]],
    SlotResponsibility,
]


def _unassigned(
    owner_id: str,
    reason: UnassignedReason,
    title: str,
    subtitle: str,
) -> SlotResponsibility:
    return SlotResponsibility(
        kind=ResponsibilityKind.UNASSIGNED,
        slot_owner_id=owner_id,
        reason=reason,
        display_context=DisplayContext(title=title, subtitle=subtitle),
    )


def resolve_slot_responsibility(
    owner_id: str,
    schedule_date: date,
    shift: ShiftType,
    weekly_plan: WeeklyPlan,
    coverages: Iterable[Coverage],
    representatives: Iterable[Representative],
) -> SlotResponsibility:
    """Resolve who is responsible for a slot.

    Args:
        owner_id: Representative owning the slot.
        schedule_date: Date of the slot.
        shift: Shift of the slot.
        weekly_plan: The weekly plan.
        coverages: Coverage records.
        representatives: Roster, used to check the covering representative
            still exists and for display names.

    Returns:
        SlotResponsibility.
    """
    presence = weekly_plan.get_day(owner_id, schedule_date)
    if presence is None:
        return _unassigned(
            owner_id,
            UnassignedReason.NO_RESPONSIBLE,
            "Slot inválido",
            "No existe información de planificación para este día",
        )

    names = {r.id: r.name for r in representatives}
    owner_name = names.get(owner_id, "Desconocido")

    coverage = next(
        (
            c for c in coverages
            if c.is_active
            and c.date == schedule_date
            and c.shift == shift
            and c.covered_rep_id == owner_id
        ),
        None,
    )

    if coverage is not None:
        covering_name = names.get(coverage.covering_rep_id)
        if covering_name is None:
            return _unassigned(
                owner_id,
                UnassignedReason.COVERAGE_FAILED,
                "Slot descubierto",
                "La cobertura estaba asignada a un representante que ya no existe",
            )

        return SlotResponsibility(
            kind=ResponsibilityKind.RESOLVED,
            slot_owner_id=owner_id,
            target_rep_id=coverage.covering_rep_id,
            source=ResponsibilitySource.COVERAGE,
            display_context=DisplayContext(
                title="Ausencia por cobertura fallida",
                subtitle=f"Este turno estaba cubierto por {covering_name}",
                target_name=covering_name,
                owner_name=owner_name,
            ),
        )

    if presence.badge == Badge.CUBIERTO:
        return _unassigned(
            owner_id,
            UnassignedReason.COVERAGE_FAILED,
            "Slot descubierto",
            "Este turno tenía cobertura pero no se encontró registro activo",
        )

    return SlotResponsibility(
        kind=ResponsibilityKind.RESOLVED,
        slot_owner_id=owner_id,
        target_rep_id=owner_id,
        source=ResponsibilitySource.BASE,
        display_context=DisplayContext(
            title="Ausencia estándar",
            subtitle=f"Registrando ausencia para {owner_name}",
            target_name=owner_name,
            owner_name=owner_name,
        ),
    )
