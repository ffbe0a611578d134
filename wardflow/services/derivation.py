"""
encounter derivation

discharge_ready and workflow_status are never stored as given.
every write goes through derive() first, and the store only commits when
records_equal() says something actually changed.

derive() is a plain function on purpose so it can be tested without a store.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from wardflow.schemas.encounter import EncounterRecord, WorkflowStatus

# everything except updated_at, which changes on every write
COMPARED_FIELDS: tuple[str, ...] = tuple(
    name for name in EncounterRecord.model_fields if name != "updated_at"
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_discharged(record: EncounterRecord) -> bool:
    return record.workflow_status == WorkflowStatus.discharged


def derive(record: EncounterRecord, now: Optional[datetime] = None) -> EncounterRecord:
    """
    Recomputes the derived fields of a candidate record.

    Rules:
    - pending counters are clamped to >= 0
    - a discharged record stays discharged and is never discharge ready
    - otherwise discharge ready means no pending items and all three gate flags set
    - phase: discharged > ready-for-discharge > admitted (if it was admitted) > in-care

    A record without updated_at is stamped with now, or the current UTC time
    when no now is given. The store always passes its own clock.

    Idempotent: derive(derive(r)) == derive(r).
    """
    pending_orders = max(0, record.pending_orders)
    pending_diagnostics = max(0, record.pending_diagnostics)
    pending_medications = max(0, record.pending_medications)

    already_discharged = is_discharged(record)

    discharge_ready = (
        not already_discharged
        and pending_orders == 0
        and pending_diagnostics == 0
        and pending_medications == 0
        and record.billing_cleared
        and record.pharmacy_cleared
        and record.follow_up_ready
    )

    if already_discharged:
        workflow_status = WorkflowStatus.discharged
    elif discharge_ready:
        workflow_status = WorkflowStatus.ready_for_discharge
    elif record.workflow_status == WorkflowStatus.admitted:
        workflow_status = WorkflowStatus.admitted
    else:
        workflow_status = WorkflowStatus.in_care

    return record.model_copy(
        update={
            "pending_orders": pending_orders,
            "pending_diagnostics": pending_diagnostics,
            "pending_medications": pending_medications,
            "discharge_ready": discharge_ready,
            "workflow_status": workflow_status,
            "updated_at": record.updated_at or now or utcnow(),
        }
    )


def records_equal(a: EncounterRecord, b: EncounterRecord) -> bool:
    return all(getattr(a, name) == getattr(b, name) for name in COMPARED_FIELDS)
