"""Snapshot integrity: canonical serialization and hash-chained signatures."""

import hashlib
import json
import logging
from datetime import datetime
from typing import Optional

from shiftledger.audit.models import SignedWeeklySnapshot, WeeklySnapshot

logger = logging.getLogger(__name__)


def canonicalize_snapshot(snapshot: WeeklySnapshot) -> str:
    """Deterministic JSON for a snapshot.

    Only semantic fields are included (id and creation metadata are not),
    representatives are sorted by id, and keys are emitted in a fixed order,
    so two semantically equal snapshots serialize to the same string.
    """
    totals = snapshot.totals
    return json.dumps(
        {
            "weekStart": snapshot.week_start.isoformat(),
            "weekEnd": snapshot.week_end.isoformat(),
            "isoWeek": snapshot.iso_week,
            "totals": {
                "plannedSlots": totals.planned_slots,
                "executedSlots": totals.executed_slots,
                "absenceSlots": totals.absence_slots,
                "coverageSlots": totals.coverage_slots,
                "uncoveredSlots": totals.uncovered_slots,
            },
            "byRepresentative": [
                {
                    "repId": rep.rep_id,
                    "plannedSlots": rep.planned_slots,
                    "executedSlots": rep.executed_slots,
                    "absenceSlots": rep.absence_slots,
                    "coveredSlots": rep.covered_slots,
                    "coveringSlots": rep.covering_slots,
                    "uncoveredSlots": rep.uncovered_slots,
                }
                for rep in sorted(snapshot.by_representative, key=lambda r: r.rep_id)
            ],
        },
        separators=(",", ":"),
    )


def _sha256(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def sign_snapshot(snapshot: WeeklySnapshot) -> str:
    """SHA-256 hex digest of the canonical snapshot."""
    return _sha256(canonicalize_snapshot(snapshot))


def verify_snapshot(snapshot: WeeklySnapshot, signature: str) -> bool:
    """Check a standalone signature."""
    return sign_snapshot(snapshot) == signature


def sign_snapshot_chain(
    snapshot: WeeklySnapshot,
    previous_signature: Optional[str],
) -> str:
    """Signature linking a snapshot to the previous week's signature."""
    payload = json.dumps(
        {
            "snapshot": canonicalize_snapshot(snapshot),
            "previousSignature": previous_signature,
        },
        separators=(",", ":"),
    )
    return _sha256(payload)


def seal_snapshot(
    snapshot: WeeklySnapshot,
    previous: Optional[SignedWeeklySnapshot] = None,
    sealed_by: Optional[str] = None,
    sealed_at: Optional[datetime] = None,
) -> SignedWeeklySnapshot:
    """Sign a snapshot as the next link of a chain.

    Args:
        snapshot: Snapshot to sign.
        previous: Last signed snapshot of the chain, None to start a chain.
        sealed_by: Actor sealing the week. When given, the result is marked
            as sealed.
        sealed_at: When the week was sealed.
    """
    previous_signature = previous.signature if previous is not None else None
    return SignedWeeklySnapshot(
        snapshot=snapshot,
        signature=sign_snapshot_chain(snapshot, previous_signature),
        previous_signature=previous_signature,
        sealed=sealed_by is not None,
        sealed_at=sealed_at,
        sealed_by=sealed_by,
    )


def verify_snapshot_chain(
    current: SignedWeeklySnapshot,
    previous: Optional[SignedWeeklySnapshot] = None,
) -> bool:
    """Verify a chain link and the integrity of its content.

    Args:
        current: The signed snapshot to verify.
        previous: The previous link, None when current is the first one.

    Returns:
        True if the link and content are intact.
    """
    week = current.snapshot.week_start
    if previous is not None:
        if current.previous_signature != previous.signature:
            logger.error(
                "Broken chain: snapshot %s does not link to previous %s",
                week,
                previous.snapshot.week_start,
            )
            return False
    elif current.previous_signature is not None:
        logger.error("Invalid genesis: snapshot %s has an unexpected previous signature", week)
        return False

    expected = sign_snapshot_chain(current.snapshot, current.previous_signature)
    if expected != current.signature:
        logger.error("Tampered content: snapshot %s does not match its signature", week)
        return False

    return True
