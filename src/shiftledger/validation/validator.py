"""Validation module for weekly plans and audit snapshots.

This module is the single source of truth for the accounting invariants.
Every snapshot produced by the audit engine goes through it; violations are
reported, never silently corrected.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Iterable, Optional

from shiftledger.audit.models import WeeklySnapshot
from shiftledger.domain.models import Representative, WeeklyPlan


class ValidationErrorType(Enum):
    """Types of validation errors."""

    SLOT_INVARIANT_BROKEN = "slot_invariant_broken"
    NEGATIVE_SLOT_COUNT = "negative_slot_count"
    TOTALS_MISMATCH = "totals_mismatch"
    INVALID_WEEK_RANGE = "invalid_week_range"
    INVALID_WEEK_LENGTH = "invalid_week_length"
    DATE_OUTSIDE_WEEK = "date_outside_week"
    UNKNOWN_REPRESENTATIVE = "unknown_representative"
    DUPLICATE_REPRESENTATIVE = "duplicate_representative"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    representative_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.representative_id:
            parts.append(f"Representative {self.representative_id}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of a validation run."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


_REP_COUNTS = (
    "planned_slots",
    "executed_slots",
    "absence_slots",
    "covered_slots",
    "covering_slots",
    "uncovered_slots",
)


class SnapshotValidator:
    """Checks a weekly snapshot against the slot accounting invariants.

    Example:
        >>> result = SnapshotValidator().validate(snapshot)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate(self, snapshot: WeeklySnapshot) -> ValidationResult:
        """Validate a snapshot.

        Args:
            snapshot: Snapshot to check.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult()

        if snapshot.week_end != snapshot.week_start + timedelta(days=6):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_WEEK_RANGE,
                    message=f"Week {snapshot.week_start} - {snapshot.week_end} is not 7 days",
                )
            )

        for rep in snapshot.by_representative:
            negatives = [name for name in _REP_COUNTS if getattr(rep, name) < 0]
            if negatives:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NEGATIVE_SLOT_COUNT,
                        message=f"Negative counts: {', '.join(negatives)}",
                        representative_id=rep.rep_id,
                    )
                )

            if not rep.is_balanced:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SLOT_INVARIANT_BROKEN,
                        message=(
                            f"planned={rep.planned_slots} but executed+absence+covered+"
                            f"uncovered={rep.accounted_slots}"
                        ),
                        representative_id=rep.rep_id,
                        details={
                            "planned": rep.planned_slots,
                            "accounted": rep.accounted_slots,
                        },
                    )
                )

            if rep.covering_slots > 0 and rep.planned_slots == 0 and rep.executed_slots == 0:
                result.add_warning(
                    f"Representative {rep.rep_id} covers {rep.covering_slots} slot(s) "
                    f"without being planned or executing"
                )

        self._validate_totals(snapshot, result)
        return result

    def _validate_totals(self, snapshot: WeeklySnapshot, result: ValidationResult) -> None:
        reps = snapshot.by_representative
        expected = {
            "planned_slots": sum(r.planned_slots for r in reps),
            "executed_slots": sum(r.executed_slots for r in reps),
            "absence_slots": sum(r.absence_slots for r in reps),
            "coverage_slots": sum(r.covered_slots + r.covering_slots for r in reps),
            "uncovered_slots": sum(r.uncovered_slots for r in reps),
        }
        for name, value in expected.items():
            actual = getattr(snapshot.totals, name)
            if actual != value:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.TOTALS_MISMATCH,
                        message=f"Total {name}={actual}, sum of representatives={value}",
                        details={"field": name, "total": actual, "sum": value},
                    )
                )


class PlanValidator:
    """Checks the structure of a weekly plan before it is audited."""

    def validate(
        self,
        plan: WeeklyPlan,
        representatives: Optional[Iterable[Representative]] = None,
    ) -> ValidationResult:
        """Validate a weekly plan.

        Args:
            plan: The plan to check.
            representatives: Roster. If given, every agent must be on it.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult()
        week_dates = set(plan.dates)
        known_ids = {r.id for r in representatives} if representatives is not None else None
        seen: set[str] = set()

        for agent in plan.agents:
            rep_id = agent.representative_id

            if rep_id in seen:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_REPRESENTATIVE,
                        message="Representative appears more than once in the plan",
                        representative_id=rep_id,
                    )
                )
            seen.add(rep_id)

            if known_ids is not None and rep_id not in known_ids:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_REPRESENTATIVE,
                        message="Representative is not on the roster",
                        representative_id=rep_id,
                    )
                )

            outside = sorted(d for d in agent.days if d not in week_dates)
            for d in outside:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DATE_OUTSIDE_WEEK,
                        message=f"Day {d} is outside the week starting {plan.week_start}",
                        representative_id=rep_id,
                    )
                )

            if len(agent.days) != 7:
                result.add_warning(
                    f"Representative {rep_id} has {len(agent.days)} day(s) in the plan, expected 7"
                )

        return result
