"""Debug text output for weekly audits.

This module creates text-based debug output to analyze:
- The resolved weekly plan, one line per representative and day
- Who answers for each planned slot
- The slot ledger and any invariant violations
"""

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional, Union

from shiftledger.audit.models import WeeklySnapshot
from shiftledger.audit.responsibility import resolve_slot_responsibility
from shiftledger.domain.coverage import Coverage
from shiftledger.domain.models import Representative, WeeklyPlan
from shiftledger.output.pdf_generator import cell_label
from shiftledger.validation.validator import SnapshotValidator


class DebugGenerator:
    """Generates debug text output for weekly audits.

    Creates human-readable text files showing:
    - The weekly grid
    - Slot responsibility for every planned slot
    - The snapshot ledger with validation results
    """

    def generate(
        self,
        plan: WeeklyPlan,
        representatives_map: dict[str, Representative],
        output_path: Union[str, Path],
        coverages: Iterable[Coverage] = (),
        snapshot: Optional[WeeklySnapshot] = None,
    ) -> str:
        """Generate debug text output and save to file.

        Args:
            plan: The weekly plan to analyze.
            representatives_map: Dict mapping representative IDs to Representatives.
            output_path: Path to save the text file.
            coverages: Coverage records used to resolve slot responsibility.
            snapshot: Optional snapshot to include.

        Returns:
            The generated text content.
        """
        content = self._generate_content(plan, representatives_map, list(coverages), snapshot)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(
        self,
        plan: WeeklyPlan,
        representatives_map: dict[str, Representative],
        coverages: Iterable[Coverage] = (),
        snapshot: Optional[WeeklySnapshot] = None,
    ) -> str:
        """Generate debug text output and return as string."""
        return self._generate_content(plan, representatives_map, list(coverages), snapshot)

    def _generate_content(
        self,
        plan: WeeklyPlan,
        representatives_map: dict[str, Representative],
        coverages: list[Coverage],
        snapshot: Optional[WeeklySnapshot],
    ) -> str:
        """Generate the full debug content."""
        lines = []
        representatives = list(representatives_map.values())

        lines.append("=" * 80)
        lines.append(f"WEEKLY AUDIT DEBUG OUTPUT - {plan.week_start}")
        lines.append("=" * 80)
        lines.append("")
        lines.append(f"Total Representatives: {len(plan.agents)}")
        lines.append(f"Coverage Records: {len(coverages)} ({sum(1 for c in coverages if c.is_active)} active)")
        lines.append("")

        # Weekly grid
        lines.append("-" * 80)
        lines.append("WEEKLY PLAN")
        lines.append("-" * 80)
        header = f"{'Name':<20}" + "".join(f"{d.strftime('%a %d'):>9}" for d in plan.dates)
        lines.append(header)
        lines.append("-" * 80)
        for agent in plan.agents:
            rep = representatives_map.get(agent.representative_id)
            name = (rep.name if rep else agent.representative_id)[:20]
            cells = "".join(f"{cell_label(agent.days.get(d)):>9}" for d in plan.dates)
            lines.append(f"{name:<20}{cells}")
        lines.append("")

        # Slot responsibility
        lines.append("-" * 80)
        lines.append("SLOT RESPONSIBILITY")
        lines.append("-" * 80)
        kinds = defaultdict(int)
        for agent in plan.agents:
            for d in sorted(agent.days):
                for shift in agent.days[d].assignment.shifts:
                    responsibility = resolve_slot_responsibility(
                        agent.representative_id, d, shift, plan, coverages, representatives
                    )
                    if responsibility.is_resolved:
                        label = f"{responsibility.source.value} -> {responsibility.target_rep_id}"
                    else:
                        label = f"UNASSIGNED ({responsibility.reason.value})"
                    kinds[label.split(" ")[0]] += 1
                    lines.append(
                        f"{d} {shift.value:<5} {agent.representative_id:<12} {label:<32} "
                        f"{responsibility.display_context.title}"
                    )
        lines.append("")
        for kind in sorted(kinds):
            lines.append(f"  {kind}: {kinds[kind]} slot(s)")
        lines.append("")

        if snapshot is not None:
            lines.extend(self._snapshot_section(snapshot))

        lines.append("=" * 80)
        lines.append("END OF DEBUG OUTPUT")
        lines.append("=" * 80)

        return "\n".join(lines)

    def _snapshot_section(self, snapshot: WeeklySnapshot) -> list[str]:
        lines = []
        lines.append("-" * 80)
        lines.append(f"SLOT LEDGER - {snapshot.iso_week} ({snapshot.id})")
        lines.append("-" * 80)
        lines.append(
            f"{'Rep':<12} {'Plan':>6} {'Exec':>6} {'Abs':>6} {'Cvd':>6} {'Cvg':>6} {'Unc':>6}  Balanced"
        )
        for rep in snapshot.by_representative:
            lines.append(
                f"{rep.rep_id:<12} {rep.planned_slots:>6} {rep.executed_slots:>6} "
                f"{rep.absence_slots:>6} {rep.covered_slots:>6} {rep.covering_slots:>6} "
                f"{rep.uncovered_slots:>6}  {'yes' if rep.is_balanced else 'NO'}"
            )
        totals = snapshot.totals
        lines.append(
            f"{'TOTAL':<12} {totals.planned_slots:>6} {totals.executed_slots:>6} "
            f"{totals.absence_slots:>6} {'':>6} {totals.coverage_slots:>6} {totals.uncovered_slots:>6}"
        )
        lines.append("")

        result = SnapshotValidator().validate(snapshot)
        lines.append(f"Validation: {'OK' if result.is_valid else 'FAILED'}")
        for error in result.errors:
            lines.append(f"  ERROR {error}")
        for warning in result.warnings:
            lines.append(f"  WARNING {warning}")
        lines.append("")
        return lines
