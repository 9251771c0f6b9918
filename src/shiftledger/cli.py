"""Command-line interface for the shiftledger planning tool."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date
from typing import Optional

from shiftledger.audit.comparison import compare_weekly_snapshots, detect_snapshot_anomalies
from shiftledger.audit.signing import seal_snapshot, sign_snapshot_chain
from shiftledger.audit.snapshot import SnapshotEngine
from shiftledger.domain.models import ShiftType, WeeklyPlan
from shiftledger.domain.serialization import (
    PlanningFacts,
    load_facts,
    plan_to_dict,
    to_jsonable,
)
from shiftledger.output.debug_generator import DebugGenerator
from shiftledger.output.pdf_generator import PDFGenerator, cell_label
from shiftledger.scheduling.effective_duty import EffectiveDutyResolver
from shiftledger.scheduling.week_metrics import compute_week_metrics
from shiftledger.scheduling.weekly_builder import WeeklyScheduleBuilder
from shiftledger.validation.validator import PlanValidator

logger = logging.getLogger(__name__)


def build_plan(facts: PlanningFacts) -> WeeklyPlan:
    """Resolve the weekly plan described by a facts file."""
    return WeeklyScheduleBuilder().build(
        facts.representatives,
        facts.incidents,
        facts.special_schedules,
        facts.week_days,
        facts.calendar_days,
        facts.coverages,
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def run_plan(facts: PlanningFacts, as_json: bool = False) -> int:
    """Print the weekly plan."""
    plan = build_plan(facts)

    if as_json:
        _print_json(plan_to_dict(plan))
    else:
        names = {r.id: r.name for r in facts.representatives}
        print(f"Weekly Plan: {plan.dates[0]} to {plan.dates[-1]}")
        print(f"{'Name':<20}" + "".join(f"{d.strftime('%a %d'):>9}" for d in plan.dates))
        for agent in plan.agents:
            name = names.get(agent.representative_id, agent.representative_id)[:20]
            print(f"{name:<20}" + "".join(f"{cell_label(agent.days.get(d)):>9}" for d in plan.dates))

    result = PlanValidator().validate(plan, facts.representatives)
    for error in result.errors:
        logger.error("%s", error)
    for warning in result.warnings:
        logger.warning("%s", warning)
    return 0 if result.is_valid else 1


def run_snapshot(
    facts: PlanningFacts,
    actor_id: Optional[str] = None,
    previous_signature: Optional[str] = None,
    sealed_by: Optional[str] = None,
) -> int:
    """Print the weekly snapshot with its chained signature."""
    plan = build_plan(facts)
    snapshot = SnapshotEngine().create(
        plan, facts.coverages, facts.representatives, actor_id=actor_id
    )
    signed = seal_snapshot(snapshot, sealed_by=sealed_by)
    if previous_signature is not None:
        # Chain from a signature recorded elsewhere.
        signed = replace(
            signed,
            previous_signature=previous_signature,
            signature=sign_snapshot_chain(snapshot, previous_signature),
        )
    _print_json(to_jsonable(signed))
    return 0


def run_duty(
    facts: PlanningFacts,
    representative_id: str,
    schedule_date: date,
    shift: ShiftType,
) -> int:
    """Print the effective duty of a representative for one shift."""
    plan = build_plan(facts)
    result = EffectiveDutyResolver().resolve(
        plan,
        facts.swaps,
        facts.incidents,
        schedule_date,
        shift,
        representative_id,
        facts.calendar_days,
        facts.representatives,
    )
    _print_json(to_jsonable(result))
    return 0


def run_metrics(facts: PlanningFacts, representative_id: Optional[str] = None) -> int:
    """Print weekly attendance, incentive and coverage metrics."""
    resolutions = WeeklyScheduleBuilder().resolve_week(
        facts.representatives,
        facts.incidents,
        facts.special_schedules,
        facts.week_days,
        facts.calendar_days,
        facts.coverages,
    )
    output = {}
    for rep_id, days in resolutions.items():
        if representative_id is not None and rep_id != representative_id:
            continue
        output[rep_id] = to_jsonable(compute_week_metrics(days[d] for d in sorted(days)))

    if representative_id is not None and not output:
        logger.error("Representative %s not found", representative_id)
        return 1
    _print_json(output)
    return 0


def run_report(facts: PlanningFacts, output_path: str, include_snapshot: bool = True) -> int:
    """Write the PDF report."""
    plan = build_plan(facts)
    snapshot = None
    if include_snapshot:
        snapshot = SnapshotEngine().create(plan, facts.coverages, facts.representatives)

    print(f"Generating PDF: {output_path}")
    PDFGenerator().generate(
        plan,
        {r.id: r for r in facts.representatives},
        output_path,
        snapshot=snapshot,
    )
    print("  PDF created successfully!")
    return 0


def run_debug(facts: PlanningFacts, output_path: Optional[str] = None) -> int:
    """Print or write the text audit dump."""
    plan = build_plan(facts)
    snapshot = SnapshotEngine().create(plan, facts.coverages, facts.representatives)
    generator = DebugGenerator()
    representatives_map = {r.id: r for r in facts.representatives}

    if output_path:
        generator.generate(plan, representatives_map, output_path, facts.coverages, snapshot)
        print(f"Debug output written to {output_path}")
    else:
        print(generator.generate_to_string(plan, representatives_map, facts.coverages, snapshot))
    return 0


def run_compare(from_facts: PlanningFacts, to_facts: PlanningFacts) -> int:
    """Print the snapshot diff between two weeks and its anomalies."""
    engine = SnapshotEngine()
    before = engine.create(build_plan(from_facts), from_facts.coverages, from_facts.representatives)
    after = engine.create(build_plan(to_facts), to_facts.coverages, to_facts.representatives)

    diff = compare_weekly_snapshots(before, after)
    anomalies = detect_snapshot_anomalies(diff)
    _print_json({"diff": to_jsonable(diff), "anomalies": to_jsonable(anomalies)})
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="shiftledger - Shift resolution and coverage accounting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s plan week.json                       Print the weekly grid
  %(prog)s plan week.json --json                Print the plan as JSON
  %(prog)s snapshot week.json --actor sup-1     Print the signed slot ledger
  %(prog)s duty week.json --rep a1 --date 2024-04-01 --shift DAY
  %(prog)s metrics week.json --rep a1           Weekly metrics for one representative
  %(prog)s report week.json -o week.pdf         Generate PDF output
  %(prog)s debug week.json                      Print the audit dump
  %(prog)s compare last.json this.json          Compare two weeks
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    plan_parser = subparsers.add_parser("plan", help="Resolve and print the weekly plan")
    plan_parser.add_argument("facts", help="JSON facts file")
    plan_parser.add_argument("--json", action="store_true", help="Print as JSON")

    snapshot_parser = subparsers.add_parser("snapshot", help="Create the weekly slot ledger")
    snapshot_parser.add_argument("facts", help="JSON facts file")
    snapshot_parser.add_argument("--actor", help="Actor requesting the snapshot")
    snapshot_parser.add_argument("--previous-signature", help="Signature of the previous week")
    snapshot_parser.add_argument("--seal-by", help="Seal the week as this actor")

    duty_parser = subparsers.add_parser("duty", help="Resolve effective duty for one shift")
    duty_parser.add_argument("facts", help="JSON facts file")
    duty_parser.add_argument("--rep", required=True, help="Representative ID")
    duty_parser.add_argument("--date", required=True, type=date.fromisoformat, help="YYYY-MM-DD")
    duty_parser.add_argument(
        "--shift",
        required=True,
        choices=[s.value for s in ShiftType],
        help="Shift to check",
    )

    metrics_parser = subparsers.add_parser("metrics", help="Weekly attendance and incentives")
    metrics_parser.add_argument("facts", help="JSON facts file")
    metrics_parser.add_argument("--rep", help="Only this representative")

    report_parser = subparsers.add_parser("report", help="Generate the PDF report")
    report_parser.add_argument("facts", help="JSON facts file")
    report_parser.add_argument("--output", "-o", required=True, help="Output PDF file path")
    report_parser.add_argument(
        "--no-snapshot",
        action="store_true",
        help="Leave out the slot ledger page",
    )

    debug_parser = subparsers.add_parser("debug", help="Text audit dump")
    debug_parser.add_argument("facts", help="JSON facts file")
    debug_parser.add_argument("--output", "-o", help="Output text file path")

    compare_parser = subparsers.add_parser("compare", help="Compare two weeks")
    compare_parser.add_argument("from_facts", help="JSON facts file of the earlier week")
    compare_parser.add_argument("to_facts", help="JSON facts file of the later week")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "compare":
            return run_compare(load_facts(args.from_facts), load_facts(args.to_facts))

        facts = load_facts(args.facts)
        if args.command == "plan":
            return run_plan(facts, args.json)
        elif args.command == "snapshot":
            return run_snapshot(facts, args.actor, args.previous_signature, args.seal_by)
        elif args.command == "duty":
            return run_duty(facts, args.rep, args.date, ShiftType(args.shift))
        elif args.command == "metrics":
            return run_metrics(facts, args.rep)
        elif args.command == "report":
            return run_report(facts, args.output, not args.no_snapshot)
        elif args.command == "debug":
            return run_debug(facts, args.output)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
