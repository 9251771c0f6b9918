"""Weekly slot accounting, signatures and comparisons."""

from shiftledger.audit.comparison import (
    AnomalyLevel,
    AnomalyScope,
    SnapshotAnomaly,
    compare_weekly_snapshots,
    detect_snapshot_anomalies,
)
from shiftledger.audit.models import (
    RepresentativeDelta,
    RepresentativeSlots,
    SignedWeeklySnapshot,
    SlotDelta,
    SnapshotTotals,
    WeeklySnapshot,
    WeeklySnapshotDiff,
)
from shiftledger.audit.responsibility import (
    DisplayContext,
    ResponsibilityKind,
    ResponsibilitySource,
    SlotResponsibility,
    UnassignedReason,
    resolve_slot_responsibility,
)
from shiftledger.audit.signing import (
    canonicalize_snapshot,
    seal_snapshot,
    sign_snapshot,
    sign_snapshot_chain,
    verify_snapshot,
    verify_snapshot_chain,
)
from shiftledger.audit.snapshot import SnapshotEngine, create_weekly_snapshot, iso_week_label

__all__ = [
    # Models
    "RepresentativeDelta",
    "RepresentativeSlots",
    "SignedWeeklySnapshot",
    "SlotDelta",
    "SnapshotTotals",
    "WeeklySnapshot",
    "WeeklySnapshotDiff",
    # Responsibility
    "DisplayContext",
    "ResponsibilityKind",
    "ResponsibilitySource",
    "SlotResponsibility",
    "UnassignedReason",
    "resolve_slot_responsibility",
    # Snapshot
    "SnapshotEngine",
    "create_weekly_snapshot",
    "iso_week_label",
    # Integrity
    "canonicalize_snapshot",
    "seal_snapshot",
    "sign_snapshot",
    "sign_snapshot_chain",
    "verify_snapshot",
    "verify_snapshot_chain",
    # Comparison
    "AnomalyLevel",
    "AnomalyScope",
    "SnapshotAnomaly",
    "compare_weekly_snapshots",
    "detect_snapshot_anomalies",
]
