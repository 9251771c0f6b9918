"""Week-over-week snapshot comparison and anomaly detection."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

from shiftledger.audit.models import (
    RepresentativeDelta,
    RepresentativeSlots,
    SlotDelta,
    SnapshotTotals,
    WeeklySnapshot,
    WeeklySnapshotDiff,
)


class AnomalyLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AnomalyScope(Enum):
    GLOBAL = "GLOBAL"
    REP = "REP"


@dataclass(frozen=True)
class SnapshotAnomaly:
    """Something unusual between two snapshots."""

    level: AnomalyLevel
    scope: AnomalyScope
    message: str
    rep_id: Optional[str] = None


_EMPTY = RepresentativeSlots(rep_id="")


def compare_weekly_snapshots(
    from_snapshot: WeeklySnapshot,
    to_snapshot: WeeklySnapshot,
) -> WeeklySnapshotDiff:
    """Difference from one snapshot to another.

    Representatives missing on one side count as all zeros. Per-representative
    deltas are sorted by representative id.
    """
    before = {r.rep_id: r for r in from_snapshot.by_representative}
    after = {r.rep_id: r for r in to_snapshot.by_representative}

    deltas = []
    for rep_id in sorted(set(before) | set(after)):
        a = before.get(rep_id, _EMPTY)
        b = after.get(rep_id, _EMPTY)
        delta = SlotDelta(
            **{f.name: getattr(b, f.name) - getattr(a, f.name) for f in fields(SlotDelta)}
        )
        has_change = any(getattr(delta, f.name) != 0 for f in fields(SlotDelta))
        deltas.append(RepresentativeDelta(rep_id=rep_id, delta=delta, has_change=has_change))

    totals_delta = SnapshotTotals(
        **{
            f.name: getattr(to_snapshot.totals, f.name) - getattr(from_snapshot.totals, f.name)
            for f in fields(SnapshotTotals)
        }
    )

    return WeeklySnapshotDiff(
        from_week=from_snapshot.week_start,
        to_week=to_snapshot.week_start,
        totals_delta=totals_delta,
        by_representative=tuple(deltas),
    )


def detect_snapshot_anomalies(diff: WeeklySnapshotDiff) -> list[SnapshotAnomaly]:
    """Flag suspicious changes in a snapshot diff.

    Args:
        diff: Result of compare_weekly_snapshots.

    Returns:
        Anomalies, global ones first, then per representative in diff order.
    """
    anomalies: list[SnapshotAnomaly] = []
    totals = diff.totals_delta

    if totals.absence_slots > 0 and totals.executed_slots >= 0 and totals.coverage_slots <= 0:
        anomalies.append(
            SnapshotAnomaly(
                level=AnomalyLevel.WARNING,
                scope=AnomalyScope.GLOBAL,
                message="Aumentan ausencias sin compensación en ejecución ni cobertura",
            )
        )

    if totals.executed_slots > totals.planned_slots:
        anomalies.append(
            SnapshotAnomaly(
                level=AnomalyLevel.CRITICAL,
                scope=AnomalyScope.GLOBAL,
                message="Ejecutados globales superan planificados",
            )
        )

    for rep in diff.by_representative:
        if not rep.has_change:
            continue
        d = rep.delta

        if d.executed_slots > d.planned_slots:
            anomalies.append(
                SnapshotAnomaly(
                    level=AnomalyLevel.CRITICAL,
                    scope=AnomalyScope.REP,
                    rep_id=rep.rep_id,
                    message="Trabajados supera planificados",
                )
            )

        if d.covering_slots > 0 and d.planned_slots <= 0 and d.executed_slots <= 0:
            anomalies.append(
                SnapshotAnomaly(
                    level=AnomalyLevel.CRITICAL,
                    scope=AnomalyScope.REP,
                    rep_id=rep.rep_id,
                    message="Cubre turnos sin estar planificado ni ejecutar",
                )
            )

        accounted = d.executed_slots + d.absence_slots + d.covered_slots + d.uncovered_slots
        if accounted != d.planned_slots:
            anomalies.append(
                SnapshotAnomaly(
                    level=AnomalyLevel.CRITICAL,
                    scope=AnomalyScope.REP,
                    rep_id=rep.rep_id,
                    message="Inconsistencia aritmética en distribución de slots",
                )
            )

    return anomalies
