"""Validation of weekly plans and snapshots."""

from shiftledger.validation.validator import (
    PlanValidator,
    SnapshotValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "PlanValidator",
    "SnapshotValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
