"""
Drift detection and correction between the attribute store and the vector index.

Every record must have exactly one vector entry equal to its stored
embedding, and no vector entry may exist without a record.
"""

from dataclasses import dataclass
from typing import Any, Dict, List
import uuid

import numpy as np

from jobmatch.util.logging import logger
from jobmatch.vector.index import SQLiteVectorIndex

from .config import get_drift_ruleset
from .db import Database
from .entity_store import EntityStore
from .schema import EntityKind


@dataclass
class DriftFinding:
    """Represents a detected inconsistency between a record and the vector index."""
    id: str
    type: str  # 'missing_vector', 'stale_vector', 'orphaned_vector'
    severity: str  # 'low', 'medium', 'high'
    kind: EntityKind
    record_id: int
    details: Dict[str, Any]


@dataclass
class CorrectionAction:
    """Represents a corrective action to resolve drift."""
    type: str  # 'ADD_VECTOR', 'UPDATE_VECTOR', 'REMOVE_VECTOR'
    record_id: int
    metadata: Dict[str, Any]


@dataclass
class CorrectionPlan:
    """A complete plan to resolve a drift finding."""
    id: str
    finding_id: str
    kind: EntityKind
    actions: List[CorrectionAction]
    preview: Dict[str, Any]


def detect_drift(db: Database, kind: EntityKind) -> List[DriftFinding]:
    """
    Detect inconsistencies between records and vector entries of one kind.

    Compares:
    1. records -> vector index (missing vectors, stale vectors)
    2. vector index -> records (orphaned vectors)

    Both sides are read under one snapshot.
    """
    store = EntityStore(db)
    index = SQLiteVectorIndex(db)

    with db.snapshot():
        records = {record.id: record for record in store.list_records(kind)}
        vectors = {entry.id: entry.vector for entry in index.entries(kind)}

    findings = []

    # Rule 1: record without a vector entry
    for record_id, record in records.items():
        if record_id not in vectors:
            findings.append(_finding("missing_vector", kind, record_id, {
                "natural_key": record.natural_key,
                "reason": "Record exists but has no vector entry"
            }))

    # Rule 2: vector entry differs from the record's embedding
    for record_id, vector in vectors.items():
        record = records.get(record_id)
        if record is not None and record.embedding.tobytes() != vector.tobytes():
            findings.append(_finding("stale_vector", kind, record_id, {
                "natural_key": record.natural_key,
                "max_abs_diff": float(np.max(np.abs(record.embedding - vector))),
                "reason": "Vector entry does not match the record's embedding"
            }))

    # Rule 3: vector entry without a record
    for record_id in vectors:
        if record_id not in records:
            findings.append(_finding("orphaned_vector", kind, record_id, {
                "reason": "Vector entry exists but the record is missing"
            }))

    for finding in findings:
        logger.log_drift_finding(finding.type, finding.severity, kind.value, finding.record_id)

    return findings


def _finding(drift_type: str, kind: EntityKind, record_id: int, details: Dict[str, Any]) -> DriftFinding:
    return DriftFinding(
        id=str(uuid.uuid4()),
        type=drift_type,
        severity=_calculate_severity(drift_type),
        kind=kind,
        record_id=record_id,
        details=details,
    )


def _calculate_severity(drift_type: str) -> str:
    """Calculate severity based on drift type and ruleset configuration."""
    ruleset = get_drift_ruleset()

    if ruleset == "strict":
        return "high"

    # lenient ruleset
    if drift_type in ["missing_vector", "stale_vector"]:
        return "medium"
    elif drift_type == "orphaned_vector":
        return "low"

    return "medium"  # default


def create_correction_plan(finding: DriftFinding) -> CorrectionPlan:
    """
    Generate a correction plan for a drift finding.

    Returns an actionable plan with specific correction actions.
    """
    if finding.type == "missing_vector":
        action = CorrectionAction(
            type="ADD_VECTOR",
            record_id=finding.record_id,
            metadata={"reason": "Add missing vector from the record's embedding"}
        )
    elif finding.type == "stale_vector":
        action = CorrectionAction(
            type="UPDATE_VECTOR",
            record_id=finding.record_id,
            metadata={"reason": "Overwrite stale vector with the record's embedding"}
        )
    elif finding.type == "orphaned_vector":
        action = CorrectionAction(
            type="REMOVE_VECTOR",
            record_id=finding.record_id,
            metadata={"reason": "Remove orphaned vector entry"}
        )
    else:
        raise ValueError(f"Unknown drift type: {finding.type}")

    return CorrectionPlan(
        id=str(uuid.uuid4()),
        finding_id=finding.id,
        kind=finding.kind,
        actions=[action],
        preview={
            "drift_type": finding.type,
            "severity": finding.severity,
            "affected_id": finding.record_id,
            "action_type": action.type,
        }
    )


def apply_correction_plan(db: Database, plan: CorrectionPlan) -> None:
    """Apply every action of a plan in one transaction.

    ADD_VECTOR and UPDATE_VECTOR copy the record's stored embedding into the
    index; no embedding provider is needed. REMOVE_VECTOR leaves the entry
    alone when a record with that id exists by the time the plan runs.
    """
    store = EntityStore(db)
    index = SQLiteVectorIndex(db)

    with db.transaction():
        for action in plan.actions:
            if action.type in ("ADD_VECTOR", "UPDATE_VECTOR"):
                record = store.resolve(plan.kind, action.record_id)
                if record is None:
                    raise LookupError(f"No {plan.kind.value} record with id {action.record_id}")
                index.replace(plan.kind, record.id, record.embedding)
            elif action.type == "REMOVE_VECTOR":
                # the record may have been written since the audit read
                if store.resolve(plan.kind, action.record_id) is not None:
                    logger.warning(f"Skipped REMOVE_VECTOR: {plan.kind.value} id {action.record_id} has a record")
                    continue
                index.delete(plan.kind, action.record_id)
            else:
                raise ValueError(f"Unknown correction action: {action.type}")

    logger.log_correction_applied(plan.id, [action.type for action in plan.actions])


def reconcile(db: Database, kind: EntityKind) -> List[CorrectionPlan]:
    """Detect drift for a kind and apply a correction plan for each finding."""
    plans = [create_correction_plan(finding) for finding in detect_drift(db, kind)]
    for plan in plans:
        apply_correction_plan(db, plan)
    return plans
