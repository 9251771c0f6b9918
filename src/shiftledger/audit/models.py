"""Audit records produced by the snapshot engine."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class RepresentativeSlots:
    """Slot accounting for one representative over a week.

    Invariant: planned = executed + absence + covered + uncovered.
    Covering slots are effort credit for someone else's slots and are not
    part of that sum.
    """

    rep_id: str
    planned_slots: int = 0
    executed_slots: int = 0
    absence_slots: int = 0
    covered_slots: int = 0
    covering_slots: int = 0
    uncovered_slots: int = 0

    @property
    def accounted_slots(self) -> int:
        """Right-hand side of the slot invariant."""
        return (
            self.executed_slots
            + self.absence_slots
            + self.covered_slots
            + self.uncovered_slots
        )

    @property
    def is_balanced(self) -> bool:
        return self.accounted_slots == self.planned_slots


@dataclass(frozen=True)
class SnapshotTotals:
    """Totals across all representatives."""

    planned_slots: int = 0
    executed_slots: int = 0
    absence_slots: int = 0
    coverage_slots: int = 0  # covered + covering
    uncovered_slots: int = 0


@dataclass(frozen=True)
class WeeklySnapshot:
    """Auditable slot ledger for one week.

    Attributes:
        id: Identifier derived from the canonical content.
        week_start: First date of the week.
        week_end: Last date of the week.
        iso_week: ISO week label, e.g. "2024-W14".
        totals: Totals across representatives.
        by_representative: One entry per representative, in plan order.
        created_by: Actor that requested the snapshot.
        created_at: Timestamp supplied by the caller.
    """

    id: str
    week_start: date
    week_end: date
    iso_week: str
    totals: SnapshotTotals
    by_representative: tuple[RepresentativeSlots, ...] = ()
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def for_representative(self, rep_id: str) -> Optional[RepresentativeSlots]:
        """Get the entry for a representative."""
        for entry in self.by_representative:
            if entry.rep_id == rep_id:
                return entry
        return None


@dataclass(frozen=True)
class SignedWeeklySnapshot:
    """A snapshot sealed with a hash-chained signature.

    Attributes:
        snapshot: The signed snapshot.
        signature: SHA-256 hex digest over the canonical snapshot and the
            previous signature.
        previous_signature: Signature of the previous week, None for the
            first snapshot of a chain.
        sealed: Marks an official, closed week.
        sealed_at: When the week was sealed.
        sealed_by: Who sealed it.
    """

    snapshot: WeeklySnapshot
    signature: str
    previous_signature: Optional[str] = None
    sealed: bool = False
    sealed_at: Optional[datetime] = None
    sealed_by: Optional[str] = None


@dataclass(frozen=True)
class SlotDelta:
    """Per-representative change between two snapshots."""

    planned_slots: int = 0
    executed_slots: int = 0
    absence_slots: int = 0
    covered_slots: int = 0
    covering_slots: int = 0
    uncovered_slots: int = 0


@dataclass(frozen=True)
class RepresentativeDelta:
    rep_id: str
    delta: SlotDelta
    has_change: bool


@dataclass(frozen=True)
class WeeklySnapshotDiff:
    """Difference between two weekly snapshots."""

    from_week: date
    to_week: date
    totals_delta: SnapshotTotals
    by_representative: tuple[RepresentativeDelta, ...] = field(default_factory=tuple)
