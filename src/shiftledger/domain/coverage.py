"""Coverage relationships between representatives.

A coverage says that one representative stands in for another's shift on a
date. It is a relational fact: it never changes anyone's plan or reality and
never moves a representative to another shift column. It only projects to
badges and to the audit ledger.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from shiftledger.domain.models import ShiftType


class CoverageStatus(Enum):
    """Lifecycle of a coverage record."""

    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class Coverage:
    """One representative covering another's shift.

    Attributes:
        id: Unique identifier.
        date: Date of the covered shift.
        shift: The covered shift.
        covered_rep_id: Representative being covered (CUBIERTO badge).
        covering_rep_id: Representative doing the covering (CUBRIENDO badge).
        status: ACTIVE or CANCELLED.
        created_at: Creation timestamp.
        note: Optional explanation.
    """

    id: str
    date: date
    shift: ShiftType
    covered_rep_id: str
    covering_rep_id: str
    status: CoverageStatus = CoverageStatus.ACTIVE
    created_at: Optional[datetime] = None
    note: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == CoverageStatus.ACTIVE

    def cancel(self) -> "Coverage":
        """Return the cancelled version of this record.

        Coverage records are kept for audit, so cancelling is a status
        transition and never a delete.
        """
        return replace(self, status=CoverageStatus.CANCELLED)


@dataclass(frozen=True)
class CoverageRef:
    """Counterpart of a coverage relationship."""

    rep_id: str
    shift: ShiftType
    coverage_id: str


@dataclass(frozen=True)
class CoverageLookup:
    """Coverage situation of one representative on one day."""

    is_covered: bool = False
    is_covering: bool = False
    covered_by: Optional[CoverageRef] = None
    covering: Optional[CoverageRef] = None


def find_coverage_for_day(
    rep_id: str,
    schedule_date: date,
    coverages: Iterable[Coverage],
    shift: Optional[ShiftType] = None,
) -> CoverageLookup:
    """Determine the coverage status of a representative on a date.

    Args:
        rep_id: Representative to check.
        schedule_date: Date to check.
        coverages: All coverage records; cancelled ones are ignored.
        shift: Restrict to one shift. If None, any shift matches.

    Returns:
        CoverageLookup with cross-references to the counterpart. When
        several records match, the first one in input order is used.
    """
    active = [
        c for c in coverages
        if c.is_active
        and c.date == schedule_date
        and (shift is None or c.shift == shift)
    ]

    covered_by = next((c for c in active if c.covered_rep_id == rep_id), None)
    covering = next((c for c in active if c.covering_rep_id == rep_id), None)

    return CoverageLookup(
        is_covered=covered_by is not None,
        is_covering=covering is not None,
        covered_by=CoverageRef(
            rep_id=covered_by.covering_rep_id,
            shift=covered_by.shift,
            coverage_id=covered_by.id,
        ) if covered_by else None,
        covering=CoverageRef(
            rep_id=covering.covered_rep_id,
            shift=covering.shift,
            coverage_id=covering.id,
        ) if covering else None,
    )
