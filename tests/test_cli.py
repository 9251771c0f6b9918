"""Tests for facts parsing and the command-line interface."""

import json
from datetime import date, datetime, timezone

import pytest

from shiftledger.cli import main
from shiftledger.domain.coverage import CoverageStatus
from shiftledger.domain.models import (
    CoverSwap,
    DailyScheduleState,
    DayKind,
    DayStatus,
    DoubleSwap,
    ExchangeSwap,
    IncidentType,
    MixType,
    ScheduleScope,
    ShiftType,
)
from shiftledger.domain.serialization import (
    CALENDAR_DAYS_AFTER,
    CALENDAR_DAYS_BEFORE,
    facts_from_dict,
    load_facts,
    to_jsonable,
)

WEEKDAYS = {"0": "OFF", "1": "WORKING", "2": "WORKING", "3": "WORKING",
            "4": "WORKING", "5": "WORKING", "6": "OFF"}


@pytest.fixture
def facts_data():
    """a1 works days, a2 nights; a2 covers a1 on Monday and misses Tuesday."""
    return {
        "week_start": "2024-04-01",
        "representatives": [
            {"id": "a1", "name": "Ana", "base_shift": "DAY", "base_schedule": WEEKDAYS},
            {"id": "a2", "name": "Luis", "base_shift": "NIGHT", "base_schedule": WEEKDAYS},
        ],
        "incidents": [
            {
                "id": "x1",
                "representative_id": "a2",
                "type": "AUSENCIA",
                "start_date": "2024-04-02",
                "created_at": "2024-04-02T08:00:00",
            }
        ],
        "coverages": [
            {
                "id": "c1",
                "date": "2024-04-01",
                "shift": "DAY",
                "covered_rep_id": "a1",
                "covering_rep_id": "a2",
            }
        ],
    }


@pytest.fixture
def facts_file(tmp_path, facts_data):
    path = tmp_path / "week.json"
    path.write_text(json.dumps(facts_data), encoding="utf-8")
    return path


class TestFactsFromDict:
    """Tests for facts parsing."""

    def test_minimal(self):
        facts = facts_from_dict({"week_start": "2024-04-01"})

        assert facts.week_start == date(2024, 4, 1)
        assert len(facts.week_days) == 7
        assert len(facts.calendar_days) == CALENDAR_DAYS_BEFORE + CALENDAR_DAYS_AFTER
        assert facts.representatives == []

    def test_full_document(self, facts_data):
        facts = facts_from_dict(facts_data)

        rep = facts.representatives[0]
        assert rep.base_shift == ShiftType.DAY
        assert rep.base_schedule[1] == DayStatus.WORKING
        assert rep.base_schedule[0] == DayStatus.OFF
        assert facts.incidents[0].type == IncidentType.AUSENCIA
        assert facts.incidents[0].created_at == datetime(2024, 4, 2, 8, 0, tzinfo=timezone.utc)
        assert facts.coverages[0].status == CoverageStatus.ACTIVE

    def test_holidays(self):
        facts = facts_from_dict(
            {
                "week_start": "2024-04-01",
                "calendar": [{"date": "2024-04-02", "kind": "HOLIDAY", "label": "Feriado"}],
            }
        )

        tuesday = facts.week_days[1]
        assert tuesday.kind == DayKind.HOLIDAY
        assert tuesday.label == "Feriado"
        assert any(d.kind == DayKind.HOLIDAY for d in facts.calendar_days)

    def test_incident_without_timestamp_sorts_first(self):
        facts = facts_from_dict(
            {
                "week_start": "2024-04-01",
                "incidents": [{"id": "i", "representative_id": "a1", "type": "LICENCIA"}],
            }
        )

        assert facts.incidents[0].created_at == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert facts.incidents[0].start_date is None

    def test_timestamps_without_offset_are_utc(self):
        facts = facts_from_dict(
            {
                "week_start": "2024-04-01",
                "incidents": [
                    {"id": "o1", "representative_id": "a1", "type": "OVERRIDE",
                     "created_at": "2024-03-01T10:00:00.000Z"},
                    {"id": "o2", "representative_id": "a1", "type": "OVERRIDE",
                     "created_at": "2024-03-01T12:00:00+02:00"},
                    {"id": "o3", "representative_id": "a1", "type": "OVERRIDE",
                     "created_at": "2024-03-02T10:00:00"},
                ],
            }
        )

        first, second, third = (i.created_at for i in facts.incidents)
        assert first == second
        assert third == datetime(2024, 3, 2, 10, 0, tzinfo=timezone.utc)
        assert third > first

    def test_mix_profile_and_special_schedule(self):
        facts = facts_from_dict(
            {
                "week_start": "2024-04-01",
                "representatives": [{"id": "m1", "mix_profile": {"type": "WEEKEND"}}],
                "special_schedules": [
                    {
                        "id": "s1",
                        "scope": "GLOBAL",
                        "from": "2024-04-01",
                        "to": "2024-04-07",
                        "weekly_pattern": {"6": "MIXTO"},
                    }
                ],
            }
        )

        assert facts.representatives[0].name == "m1"
        assert facts.representatives[0].mix_profile.type == MixType.WEEKEND
        schedule = facts.special_schedules[0]
        assert schedule.scope == ScheduleScope.GLOBAL
        assert schedule.weekly_pattern == {6: DailyScheduleState.MIXTO}

    def test_swaps(self):
        facts = facts_from_dict(
            {
                "week_start": "2024-04-01",
                "swaps": [
                    {"id": "1", "type": "COVER", "date": "2024-04-01", "shift": "DAY",
                     "from_representative_id": "a", "to_representative_id": "b"},
                    {"id": "2", "type": "DOUBLE", "date": "2024-04-01", "shift": "NIGHT",
                     "representative_id": "a"},
                    {"id": "3", "type": "SWAP", "date": "2024-04-01",
                     "from_representative_id": "a", "from_shift": "DAY",
                     "to_representative_id": "b", "to_shift": "NIGHT"},
                ],
            }
        )

        cover, double, exchange = facts.swaps
        assert isinstance(cover, CoverSwap)
        assert isinstance(double, DoubleSwap)
        assert isinstance(exchange, ExchangeSwap)
        assert exchange.to_shift == ShiftType.NIGHT

    @pytest.mark.parametrize(
        "data, message",
        [
            ({}, "Missing field 'week_start'"),
            ({"week_start": "01/04/2024"}, "Invalid date"),
            ({"week_start": "2024-04-01", "representatives": [{"id": "a", "base_shift": "EVENING"}]},
             "Invalid base_shift"),
            ({"week_start": "2024-04-01", "representatives": [{"id": "a", "base_schedule": {"7": "OFF"}}]},
             "out of range"),
            ({"week_start": "2024-04-01", "coverages": [{"id": "c"}]}, "Missing field 'date'"),
            ({"week_start": "2024-04-01", "swaps": [{"id": "s", "type": "TRADE", "date": "2024-04-01"}]},
             "Invalid swap type"),
            ({"week_start": "2024-04-01",
              "incidents": [{"id": "v1", "representative_id": "a", "type": "VACACIONES", "duration": "3"}]},
             "Invalid duration '3' for incident v1"),
            ({"week_start": "2024-04-01",
              "incidents": [{"id": "l1", "representative_id": "a", "type": "LICENCIA", "duration": -2}]},
             "Invalid duration -2 for incident l1"),
            ({"week_start": "2024-04-01",
              "incidents": [{"id": "l2", "representative_id": "a", "type": "LICENCIA", "duration": True}]},
             "Invalid duration True"),
        ],
    )
    def test_invalid_input(self, data, message):
        with pytest.raises(ValueError, match=message):
            facts_from_dict(data)

    def test_load_facts_rejects_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            load_facts(path)

    def test_to_jsonable(self):
        assert to_jsonable({1: [date(2024, 4, 1), ShiftType.DAY]}) == {"1": ["2024-04-01", "DAY"]}


class TestCLI:
    """Tests for the subcommands."""

    def test_plan_json(self, facts_file, capsys):
        assert main(["plan", str(facts_file), "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["week_start"] == "2024-04-01"
        a1 = data["agents"][0]
        assert a1["representative_id"] == "a1"
        assert list(a1["days"]) == [f"2024-04-0{i}" for i in range(1, 8)]
        monday = a1["days"]["2024-04-01"]
        assert monday["badge"] == "CUBIERTO"
        assert monday["assignment"] == {"type": "SINGLE", "shift": "DAY"}
        assert data["agents"][1]["days"]["2024-04-02"]["type"] == "AUSENCIA"

    def test_plan_grid(self, facts_file, capsys):
        assert main(["plan", str(facts_file)]) == 0

        out = capsys.readouterr().out
        assert "Weekly Plan: 2024-04-01 to 2024-04-07" in out
        assert "Ana" in out
        assert "D CUB" in out

    def test_snapshot(self, facts_file, capsys):
        assert main(["snapshot", str(facts_file), "--actor", "sup-1"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert len(data["signature"]) == 64
        assert data["previous_signature"] is None
        assert not data["sealed"]
        snapshot = data["snapshot"]
        assert snapshot["iso_week"] == "2024-W14"
        assert snapshot["id"].startswith("2024-W14-")
        assert snapshot["created_by"] == "sup-1"
        assert snapshot["totals"]["planned_slots"] == 10

    def test_snapshot_chained_and_sealed(self, facts_file, capsys):
        assert main(["snapshot", str(facts_file)]) == 0
        genesis = json.loads(capsys.readouterr().out)

        argv = ["snapshot", str(facts_file), "--previous-signature", "abc", "--seal-by", "sup-2"]
        assert main(argv) == 0
        chained = json.loads(capsys.readouterr().out)

        assert chained["previous_signature"] == "abc"
        assert chained["sealed"]
        assert chained["sealed_by"] == "sup-2"
        assert chained["signature"] != genesis["signature"]

    def test_duty(self, facts_file, capsys):
        argv = ["duty", str(facts_file), "--rep", "a1", "--date", "2024-04-01", "--shift", "DAY"]
        assert main(argv) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["should_work"] is True
        assert data["role"] == "BASE"

    def test_duty_absence(self, facts_file, capsys):
        argv = ["duty", str(facts_file), "--rep", "a2", "--date", "2024-04-02", "--shift", "NIGHT"]
        assert main(argv) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["should_work"] is False
        assert data["reason"] == "AUSENCIA"

    def test_metrics(self, facts_file, capsys):
        assert main(["metrics", str(facts_file), "--rep", "a2"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert list(data) == ["a2"]
        assert data["a2"]["attendance"] == {"planned_days": 5, "worked_days": 4, "absent_days": 1}
        assert data["a2"]["incentives"]["disqualified_by_absence"] is True
        assert data["a2"]["coverage"]["covering_days"] == 1

    def test_metrics_unknown_rep(self, facts_file, capsys):
        assert main(["metrics", str(facts_file), "--rep", "zz"]) == 1

    def test_debug_to_file(self, facts_file, tmp_path, capsys):
        output = tmp_path / "debug.txt"

        assert main(["debug", str(facts_file), "-o", str(output)]) == 0

        content = output.read_text(encoding="utf-8")
        assert "WEEKLY AUDIT DEBUG OUTPUT - 2024-04-01" in content
        assert "SLOT LEDGER - 2024-W14" in content
        assert "COVERAGE -> a2" in content

    def test_compare(self, tmp_path, facts_data, capsys):
        before = tmp_path / "before.json"
        before.write_text(json.dumps(facts_data), encoding="utf-8")
        facts_data["week_start"] = "2024-04-08"
        facts_data["incidents"] = []
        facts_data["coverages"] = []
        after = tmp_path / "after.json"
        after.write_text(json.dumps(facts_data), encoding="utf-8")

        assert main(["compare", str(before), str(after)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["diff"]["from_week"] == "2024-04-01"
        assert data["diff"]["to_week"] == "2024-04-08"
        assert [d["rep_id"] for d in data["diff"]["by_representative"]] == ["a1", "a2"]
        assert isinstance(data["anomalies"], list)

    def test_report(self, facts_file, tmp_path, capsys):
        pytest.importorskip("reportlab")
        output = tmp_path / "week.pdf"

        assert main(["report", str(facts_file), "-o", str(output)]) == 0

        assert output.read_bytes().startswith(b"%PDF")
        assert "PDF created successfully" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["plan", str(tmp_path / "missing.json")]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_facts(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"week_start": "2024-04-01", "incidents": [{"id": "i"}]}))

        assert main(["plan", str(path)]) == 1
        assert "Missing field 'representative_id'" in capsys.readouterr().err

    def test_mixed_timestamp_forms_pick_latest_override(self, tmp_path, facts_data, capsys):
        facts_data["incidents"] = [
            {"id": "o1", "representative_id": "a1", "type": "OVERRIDE", "start_date": "2024-04-01",
             "created_at": "2024-03-01T10:00:00.000Z", "assignment": {"type": "NONE"}},
            {"id": "o2", "representative_id": "a1", "type": "OVERRIDE", "start_date": "2024-04-01",
             "created_at": "2024-03-02T10:00:00", "assignment": {"type": "SINGLE", "shift": "NIGHT"}},
            {"id": "o3", "representative_id": "a1", "type": "OVERRIDE", "start_date": "2024-04-01",
             "assignment": {"type": "NONE"}},
        ]
        facts_data["coverages"] = []
        path = tmp_path / "mixed.json"
        path.write_text(json.dumps(facts_data), encoding="utf-8")

        assert main(["plan", str(path), "--json"]) == 0

        monday = json.loads(capsys.readouterr().out)["agents"][0]["days"]["2024-04-01"]
        assert monday["assignment"] == {"type": "SINGLE", "shift": "NIGHT"}

    def test_invalid_duration(self, tmp_path, capsys):
        incident = {"id": "v1", "representative_id": "a1", "type": "VACACIONES",
                    "start_date": "2024-04-01", "duration": "3"}
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"week_start": "2024-04-01", "incidents": [incident]}))

        assert main(["plan", str(path)]) == 1
        assert "Invalid duration '3' for incident v1" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert main([]) == 1
