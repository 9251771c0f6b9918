"""Day and week resolution: plans, metrics and effective duty."""

from shiftledger.scheduling.day_metrics import compute_day_metrics
from shiftledger.scheduling.day_resolver import DayResolver, latest_incident
from shiftledger.scheduling.effective_duty import (
    DutyRole,
    DutySource,
    EffectiveDutyResolver,
    EffectiveDutyResult,
    resolve_punitive_responsibility,
)
from shiftledger.scheduling.week_metrics import (
    AttendanceSummary,
    CoverageSummary,
    IncentiveSummary,
    WeekComputed,
    compute_week_metrics,
)
from shiftledger.scheduling.weekly_builder import (
    WeekLengthError,
    WeeklyScheduleBuilder,
    day_resolution_to_presence,
)

__all__ = [
    "AttendanceSummary",
    "CoverageSummary",
    "DayResolver",
    "DutyRole",
    "DutySource",
    "EffectiveDutyResolver",
    "EffectiveDutyResult",
    "IncentiveSummary",
    "WeekComputed",
    "WeekLengthError",
    "WeeklyScheduleBuilder",
    "compute_day_metrics",
    "compute_week_metrics",
    "day_resolution_to_presence",
    "latest_incident",
    "resolve_punitive_responsibility",
]
