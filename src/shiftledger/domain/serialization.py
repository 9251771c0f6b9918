"""JSON conversion for planning facts and results.

Facts files are plain JSON documents; see ``facts_from_dict`` for the
accepted layout. Malformed input raises ValueError with a message naming
the offending field.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from shiftledger.domain.coverage import Coverage, CoverageStatus
from shiftledger.domain.models import (
    AssignmentType,
    CoverSwap,
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
    Representative,
    ScheduleScope,
    ShiftAssignment,
    ShiftType,
    SpecialSchedule,
    SwapEvent,
    SwapType,
    WeeklyPlan,
)

# Window of calendar days generated around the week when the facts file does
# not list one, so that incident ranges crossing week boundaries expand
# correctly.
CALENDAR_DAYS_BEFORE = 42
CALENDAR_DAYS_AFTER = 48

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class PlanningFacts:
    """Everything needed to resolve and audit one week."""

    week_start: date
    week_days: list[DayInfo]
    calendar_days: list[DayInfo]
    representatives: list[Representative] = field(default_factory=list)
    incidents: list[Incident] = field(default_factory=list)
    special_schedules: list[SpecialSchedule] = field(default_factory=list)
    coverages: list[Coverage] = field(default_factory=list)
    swaps: list[SwapEvent] = field(default_factory=list)


def _require(data: dict, key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object for {what}, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValueError(f"Missing field '{key}' in {what}")
    return data[key]


def _enum(enum_cls, value: Any, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Invalid {what} '{value}' (expected one of: {allowed})") from None


def _date(value: Any, what: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date for {what}: {value!r}") from None


def _datetime(value: Any, what: str) -> datetime:
    """Parse an ISO timestamp; values without an offset are taken as UTC."""
    if isinstance(value, str) and value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timestamp for {what}: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _duration(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Invalid duration {value!r} for {what} (expected a positive integer)")
    return value


def _weekday_map(raw: dict, enum_cls, what: str) -> dict:
    result = {}
    for key, value in (raw or {}).items():
        try:
            weekday = int(key)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid weekday '{key}' in {what}") from None
        if not 0 <= weekday <= 6:
            raise ValueError(f"Weekday {weekday} out of range 0-6 in {what}")
        result[weekday] = _enum(enum_cls, value, what)
    return result


def assignment_from_dict(data: dict) -> ShiftAssignment:
    assignment_type = _enum(AssignmentType, _require(data, "type", "assignment"), "assignment type")
    shift = data.get("shift")
    return ShiftAssignment(
        type=assignment_type,
        shift=_enum(ShiftType, shift, "shift") if shift is not None else None,
    )


def representative_from_dict(data: dict) -> Representative:
    what = f"representative {data.get('id', '?') if isinstance(data, dict) else '?'}"
    mix = data.get("mix_profile") if isinstance(data, dict) else None
    return Representative(
        id=str(_require(data, "id", what)),
        name=str(data.get("name", data["id"])),
        base_shift=_enum(ShiftType, data.get("base_shift", "DAY"), "base_shift"),
        base_schedule=_weekday_map(data.get("base_schedule"), DayStatus, f"{what} base_schedule"),
        mix_profile=MixProfile(_enum(MixType, _require(mix, "type", "mix_profile"), "mix type"))
        if mix
        else None,
        is_active=bool(data.get("is_active", True)),
    )


def incident_from_dict(data: dict) -> Incident:
    what = "incident"
    start = data.get("start_date") if isinstance(data, dict) else None
    created = data.get("created_at") if isinstance(data, dict) else None
    assignment = data.get("assignment") if isinstance(data, dict) else None
    return Incident(
        id=str(_require(data, "id", what)),
        representative_id=str(_require(data, "representative_id", what)),
        type=_enum(IncidentType, _require(data, "type", what), "incident type"),
        start_date=_date(start, "incident start_date") if start else None,
        created_at=_datetime(created, "incident created_at") if created else _EPOCH,
        duration=_duration(data.get("duration"), f"incident {data['id']}"),
        assignment=assignment_from_dict(assignment) if assignment else None,
        note=data.get("note"),
        details=data.get("details"),
        source=data.get("source"),
        slot_owner_id=data.get("slot_owner_id"),
    )


def special_schedule_from_dict(data: dict) -> SpecialSchedule:
    what = "special schedule"
    return SpecialSchedule(
        id=str(_require(data, "id", what)),
        scope=_enum(ScheduleScope, _require(data, "scope", what), "schedule scope"),
        from_date=_date(_require(data, "from", what), "special schedule from"),
        to_date=_date(_require(data, "to", what), "special schedule to"),
        weekly_pattern=_weekday_map(
            data.get("weekly_pattern"), DailyScheduleState, f"{what} weekly_pattern"
        ),
        target_id=data.get("target_id"),
        note=data.get("note"),
    )


def coverage_from_dict(data: dict) -> Coverage:
    what = "coverage"
    created = data.get("created_at") if isinstance(data, dict) else None
    return Coverage(
        id=str(_require(data, "id", what)),
        date=_date(_require(data, "date", what), "coverage date"),
        shift=_enum(ShiftType, _require(data, "shift", what), "shift"),
        covered_rep_id=str(_require(data, "covered_rep_id", what)),
        covering_rep_id=str(_require(data, "covering_rep_id", what)),
        status=_enum(CoverageStatus, data.get("status", "ACTIVE"), "coverage status"),
        created_at=_datetime(created, "coverage created_at") if created else None,
        note=data.get("note"),
    )


def swap_from_dict(data: dict) -> SwapEvent:
    what = "swap"
    swap_type = _enum(SwapType, _require(data, "type", what), "swap type")
    swap_id = str(_require(data, "id", what))
    swap_date = _date(_require(data, "date", what), "swap date")
    note = data.get("note")

    if swap_type == SwapType.COVER:
        return CoverSwap(
            id=swap_id,
            date=swap_date,
            shift=_enum(ShiftType, _require(data, "shift", what), "shift"),
            from_representative_id=str(_require(data, "from_representative_id", what)),
            to_representative_id=str(_require(data, "to_representative_id", what)),
            note=note,
        )
    if swap_type == SwapType.DOUBLE:
        return DoubleSwap(
            id=swap_id,
            date=swap_date,
            shift=_enum(ShiftType, _require(data, "shift", what), "shift"),
            representative_id=str(_require(data, "representative_id", what)),
            note=note,
        )
    return ExchangeSwap(
        id=swap_id,
        date=swap_date,
        from_representative_id=str(_require(data, "from_representative_id", what)),
        from_shift=_enum(ShiftType, _require(data, "from_shift", what), "shift"),
        to_representative_id=str(_require(data, "to_representative_id", what)),
        to_shift=_enum(ShiftType, _require(data, "to_shift", what), "shift"),
        note=note,
    )


def build_calendar(
    week_start: date,
    holidays: Optional[dict[date, str]] = None,
) -> list[DayInfo]:
    """Calendar window around a week, with the given holidays."""
    holidays = holidays or {}
    days = []
    first = week_start - timedelta(days=CALENDAR_DAYS_BEFORE)
    for offset in range(CALENDAR_DAYS_BEFORE + CALENDAR_DAYS_AFTER):
        d = first + timedelta(days=offset)
        if d in holidays:
            days.append(DayInfo.from_date(d, DayKind.HOLIDAY, holidays[d]))
        else:
            days.append(DayInfo.from_date(d))
    return days


def facts_from_dict(data: dict) -> PlanningFacts:
    """Parse a facts document.

    Layout::

        {
          "week_start": "2024-04-01",
          "calendar": [{"date": "2024-04-02", "kind": "HOLIDAY", "label": "..."}],
          "representatives": [...],
          "incidents": [...],
          "special_schedules": [...],
          "coverages": [...],
          "swaps": [...]
        }

    Calendar entries only need to list non-working days; every other date
    in the generated window is a working day.

    Raises:
        ValueError: If a field is missing or holds an invalid value.
    """
    week_start = _date(_require(data, "week_start", "facts"), "week_start")

    holidays = {}
    for entry in data.get("calendar") or []:
        entry_date = _date(_require(entry, "date", "calendar day"), "calendar date")
        kind = _enum(DayKind, entry.get("kind", "HOLIDAY"), "day kind")
        if kind == DayKind.HOLIDAY:
            holidays[entry_date] = entry.get("label")

    return PlanningFacts(
        week_start=week_start,
        week_days=DayInfo.week(week_start, holidays),
        calendar_days=build_calendar(week_start, holidays),
        representatives=[representative_from_dict(r) for r in data.get("representatives") or []],
        incidents=[incident_from_dict(i) for i in data.get("incidents") or []],
        special_schedules=[
            special_schedule_from_dict(s) for s in data.get("special_schedules") or []
        ],
        coverages=[coverage_from_dict(c) for c in data.get("coverages") or []],
        swaps=[swap_from_dict(s) for s in data.get("swaps") or []],
    )


def load_facts(path: Union[str, Path]) -> PlanningFacts:
    """Read and parse a facts file.

    Raises:
        ValueError: If the file is not valid JSON or the facts are malformed.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from None
    return facts_from_dict(data)


def to_jsonable(value: Any) -> Any:
    """Convert result records into JSON-compatible structures.

    Dataclasses become dicts, enums their values, dates ISO strings. Dict
    keys are converted to strings.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def plan_to_dict(plan: WeeklyPlan) -> dict:
    """Weekly plan as a JSON-compatible dict, days sorted by date."""
    return {
        "week_start": plan.week_start.isoformat(),
        "agents": [
            {
                "representative_id": agent.representative_id,
                "days": {
                    d.isoformat(): to_jsonable(agent.days[d]) for d in sorted(agent.days)
                },
            }
            for agent in plan.agents
        ],
    }
