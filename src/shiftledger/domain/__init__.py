"""Domain models and business rules for shift resolution."""

from shiftledger.domain.coverage import (
    Coverage,
    CoverageLookup,
    CoverageRef,
    CoverageStatus,
    find_coverage_for_day,
)
from shiftledger.domain.models import (
    AgentWeek,
    AssignmentType,
    Badge,
    CoverageContext,
    CoverSwap,
    DailyPresence,
    DailyScheduleState,
    DayInfo,
    DayKind,
    DayStatus,
    DoubleSwap,
    ExchangeSwap,
    Incident,
    IncidentType,
    MixProfile,
    MixType,
    PresenceSource,
    Representative,
    ScheduleScope,
    ShiftAssignment,
    ShiftType,
    SpecialSchedule,
    SwapEvent,
    SwapType,
    WeeklyPlan,
    weekday_index,
)
from shiftledger.domain.policies import (
    DefaultIncidentDateResolver,
    DefaultSpecialScheduleAdapter,
    EffectiveSchedule,
    EffectiveScheduleType,
    IncidentDateResolver,
    ResolvedIncident,
    SpecialScheduleAdapter,
)
from shiftledger.domain.resolution import (
    DayComputed,
    DayDisplay,
    DayMetrics,
    DayPlan,
    DayReality,
    DayResolution,
    PlanSource,
)

__all__ = [
    # Models
    "AgentWeek",
    "AssignmentType",
    "Badge",
    "CoverageContext",
    "CoverSwap",
    "DailyPresence",
    "DailyScheduleState",
    "DayInfo",
    "DayKind",
    "DayStatus",
    "DoubleSwap",
    "ExchangeSwap",
    "Incident",
    "IncidentType",
    "MixProfile",
    "MixType",
    "PresenceSource",
    "Representative",
    "ScheduleScope",
    "ShiftAssignment",
    "ShiftType",
    "SpecialSchedule",
    "SwapEvent",
    "SwapType",
    "WeeklyPlan",
    "weekday_index",
    # Coverage
    "Coverage",
    "CoverageLookup",
    "CoverageRef",
    "CoverageStatus",
    "find_coverage_for_day",
    # Resolution layers
    "DayComputed",
    "DayDisplay",
    "DayMetrics",
    "DayPlan",
    "DayReality",
    "DayResolution",
    "PlanSource",
    # Policies
    "DefaultIncidentDateResolver",
    "DefaultSpecialScheduleAdapter",
    "EffectiveSchedule",
    "EffectiveScheduleType",
    "IncidentDateResolver",
    "ResolvedIncident",
    "SpecialScheduleAdapter",
]
