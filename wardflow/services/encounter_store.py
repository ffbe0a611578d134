"""
inpatient encounter workflow store

one record per admitted patient, keyed by patient_id.

every write goes the same way:
    read current -> merge patch -> derive -> compare -> commit -> persist -> notify

- derive() recomputes discharge_ready and workflow_status, callers never set them
- if the derived record equals the current one (ignoring updated_at), nothing happens:
  no new snapshot, no cache write, no notification
- a commit swaps in a new read-only snapshot mapping, so a snapshot a screen is
  holding never changes under it

the lock makes the whole read -> notify sequence one step. listeners run while it is
held, after the new snapshot is installed, so a listener that reads the store always
sees the state that triggered it. the lock is re-entrant so that read works from the
same thread.

unknown patient ids are a no-op for callers (ward screens patch opportunistically),
but they are logged so a typo in an id doesn't disappear silently.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import Counter
from collections.abc import Mapping
from datetime import datetime
from itertools import count
from types import MappingProxyType
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from wardflow.schemas.encounter import (
    ClinicalStatus,
    EncounterPatch,
    EncounterRecord,
    RegisterAdmissionInput,
    WorkflowStatus,
)
from wardflow.services.cache import NullCache, SnapshotCache
from wardflow.services.derivation import derive, is_discharged, records_equal, utcnow
from wardflow.services.seed import build_default_records

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Snapshot = Mapping[str, EncounterRecord]
SeedFactory = Callable[[datetime], dict[str, EncounterRecord]]


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


def _sort_key(record: EncounterRecord) -> tuple:
    # discharged patients go last; names compare case-insensitively first so
    # "amit" lands next to "Amit", not after "Zara"
    return (
        is_discharged(record),
        record.patient_name.casefold(),
        record.patient_name,
        record.patient_id,
    )


class EncounterStore:
    def __init__(
        self,
        cache: Optional[SnapshotCache] = None,
        seed: Optional[SeedFactory] = build_default_records,
        sticky_discharge: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._cache = cache if cache is not None else NullCache()
        self._seed = seed
        self._sticky_discharge = sticky_discharge
        self._clock = clock

        self._lock = threading.RLock()
        self._listeners: dict[int, Listener] = {}
        self._listener_ids = count()
        self._state: Optional[Snapshot] = None

    # -------------------------
    # reads
    # -------------------------

    def get_snapshot(self) -> Snapshot:
        """
        Current state, patient_id -> record.

        The same mapping object comes back until a write actually changes something.
        It is read-only.
        """
        return self._ensure_state()

    def get_all(self) -> list[EncounterRecord]:
        return sorted(self._ensure_state().values(), key=_sort_key)

    def get_by_patient_id(self, patient_id: str) -> Optional[EncounterRecord]:
        return self._ensure_state().get(patient_id)

    def get_by_mrn(self, mrn: Optional[str]) -> Optional[EncounterRecord]:
        if not mrn:
            return None
        # active records sort first, so they win over a discharged stay with the same mrn
        return next((r for r in self.get_all() if r.mrn == mrn), None)

    def get_census(self) -> dict[WorkflowStatus, int]:
        counts = Counter(r.workflow_status for r in self._ensure_state().values())
        return {status: counts.get(status, 0) for status in WorkflowStatus}

    # -------------------------
    # writes
    # -------------------------

    def register_admission(
        self, data: Union[RegisterAdmissionInput, Mapping[str, Any]]
    ) -> EncounterRecord:
        """
        Creates a record for a new admission, or refreshes the existing one.

        An existing record with the same mrn is updated in place: descriptive
        fields only change when the input has a non-blank value, and a discharged
        record comes back as in-care. No new identifiers are generated in that case.

        Otherwise a fresh record is created for the mrn. A supplied patient_id is
        kept even if another stay already sits under it; that stay is replaced.
        """
        if not isinstance(data, RegisterAdmissionInput):
            data = RegisterAdmissionInput.model_validate(data)

        with self._lock:
            state = self._ensure_state()
            now = self._clock()

            existing = next((r for r in self.get_all() if r.mrn == data.mrn), None)

            if existing is not None:
                updated = derive(
                    existing.model_copy(
                        update={
                            "patient_name": _text(data.patient_name) or existing.patient_name,
                            "consultant": _text(data.consultant) or existing.consultant,
                            "ward": _text(data.ward) or existing.ward,
                            "diagnosis": _text(data.diagnosis) or existing.diagnosis,
                            "workflow_status": (
                                WorkflowStatus.in_care
                                if is_discharged(existing)
                                else existing.workflow_status
                            ),
                            "updated_at": now,
                        }
                    ),
                    now,
                )
                if records_equal(existing, updated):
                    return existing

                logger.info("Admission refreshed for %s (mrn %s)", existing.patient_id, existing.mrn)
                self._commit({**state, existing.patient_id: updated})
                return updated

            patient_id = data.patient_id or _new_id("ipd")
            replaced = state.get(patient_id)
            if replaced is not None:
                logger.warning(
                    "Admission for mrn %s replaces %s (was mrn %s)", data.mrn, patient_id, replaced.mrn
                )

            record = derive(
                EncounterRecord(
                    patient_id=patient_id,
                    admission_id=_new_id("adm"),
                    encounter_id=_new_id("enc"),
                    mrn=data.mrn,
                    patient_name=_text(data.patient_name),
                    consultant=_text(data.consultant),
                    ward=_text(data.ward),
                    diagnosis=_text(data.diagnosis),
                    clinical_status=ClinicalStatus.stable,
                    workflow_status=WorkflowStatus.admitted,
                    updated_at=now,
                ),
                now,
            )
            logger.info("Admission registered for %s (mrn %s)", record.patient_id, record.mrn)
            self._commit({**state, record.patient_id: record})
            return record

    def patch(self, patient_id: str, patch: Union[EncounterPatch, Mapping[str, Any]]) -> None:
        """
        Merges the non-None fields of patch into the record.

        Raises pydantic.ValidationError for fields that can't be patched
        (identifiers, unknown names). Unknown patient_id is a logged no-op.
        """
        if not isinstance(patch, EncounterPatch):
            patch = EncounterPatch.model_validate(patch)
        self._apply(patient_id, patch, "patch")

    def assign_bed(self, patient_id: str, bed: str, ward: str, diagnosis: Optional[str] = None) -> None:
        patch = EncounterPatch(
            bed=bed,
            ward=ward,
            diagnosis=diagnosis,
            workflow_status=WorkflowStatus.in_care,
        )
        with self._lock:
            if self._holds_discharge(patient_id, "assign_bed"):
                return
            self._apply(patient_id, patch, "assign_bed")

    def sync_clinical(
        self,
        patient_id: str,
        pending_orders: Optional[int] = None,
        pending_diagnostics: Optional[int] = None,
        pending_medications: Optional[int] = None,
        clinical_status: Optional[ClinicalStatus] = None,
        diagnosis: Optional[str] = None,
    ) -> None:
        """Counts and acuity from the orders / medication / diagnostics screens."""
        patch = EncounterPatch(
            pending_orders=pending_orders,
            pending_diagnostics=pending_diagnostics,
            pending_medications=pending_medications,
            clinical_status=clinical_status,
            diagnosis=diagnosis,
            workflow_status=WorkflowStatus.in_care,
        )
        with self._lock:
            if self._holds_discharge(patient_id, "sync_clinical"):
                return
            self._apply(patient_id, patch, "sync_clinical")

    def sync_discharge_checks(
        self,
        patient_id: str,
        billing_cleared: Optional[bool] = None,
        pharmacy_cleared: Optional[bool] = None,
        follow_up_ready: Optional[bool] = None,
    ) -> None:
        patch = EncounterPatch(
            billing_cleared=billing_cleared,
            pharmacy_cleared=pharmacy_cleared,
            follow_up_ready=follow_up_ready,
        )
        self._apply(patient_id, patch, "sync_discharge_checks")

    def mark_discharged(self, patient_id: str) -> None:
        patch = EncounterPatch(
            workflow_status=WorkflowStatus.discharged,
            pending_orders=0,
            pending_diagnostics=0,
            pending_medications=0,
        )
        self._apply(patient_id, patch, "mark_discharged")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Calls listener (no arguments) after every committed change.

        Returns an unsubscribe function. Calling it more than once is fine.
        """
        with self._lock:
            key = next(self._listener_ids)
            self._listeners[key] = listener

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return unsubscribe

    def reset(self) -> None:
        """
        Forgets the cached state and starts again from the defaults.

        Subscribers are only told when that actually changes something.
        """
        with self._lock:
            current = self._ensure_state()
            self._cache.write({})
            fresh = self._hydrate()
            if fresh.keys() == current.keys() and all(
                records_equal(current[pid], record) for pid, record in fresh.items()
            ):
                logger.debug("reset: already at the defaults")
                return
            self._state = MappingProxyType(fresh)
            self._notify()

    # -------------------------
    # internals
    # -------------------------

    def _holds_discharge(self, patient_id: str, operation: str) -> bool:
        # clinical syncs and bed moves carry an in-care hint. applied to a discharged
        # record that hint would reopen it, so with sticky discharge they are dropped.
        if not self._sticky_discharge:
            return False
        current = self._ensure_state().get(patient_id)
        if current is not None and is_discharged(current):
            logger.info("%s ignored for discharged patient %s", operation, patient_id)
            return True
        return False

    def _apply(self, patient_id: str, patch: EncounterPatch, operation: str) -> Optional[EncounterRecord]:
        with self._lock:
            state = self._ensure_state()
            current = state.get(patient_id)
            if current is None:
                logger.warning("%s: unknown patient_id %r, nothing changed", operation, patient_id)
                return None

            now = self._clock()
            candidate = current.model_copy(update={**patch.changes(), "updated_at": now})
            next_record = derive(candidate, now)

            if records_equal(current, next_record):
                logger.debug("%s: no change for %s", operation, patient_id)
                return current

            logger.debug(
                "%s: %s now %s (discharge ready: %s)",
                operation,
                patient_id,
                next_record.workflow_status.value,
                next_record.discharge_ready,
            )
            self._commit({**state, patient_id: next_record})
            return next_record

    def _commit(self, next_state: dict[str, EncounterRecord]) -> None:
        self._state = MappingProxyType(next_state)
        self._cache.write(
            {pid: record.model_dump(mode="json", by_alias=True) for pid, record in next_state.items()}
        )
        self._notify()

    def _notify(self) -> None:
        for listener in tuple(self._listeners.values()):
            try:
                listener()
            except Exception:
                logger.exception("Encounter listener %r failed", listener)

    def _ensure_state(self) -> Snapshot:
        state = self._state
        if state is not None:
            return state
        with self._lock:
            if self._state is None:
                self._state = MappingProxyType(self._hydrate())
            return self._state

    def _hydrate(self) -> dict[str, EncounterRecord]:
        """
        Defaults first, then whatever the cache remembers on top.

        Cached entries are merged field by field over the default record with the
        same id (or over a blank record for ids the defaults don't know), then
        derived again. Entries that can't be turned into a record are skipped.
        """
        now = self._clock()
        records = dict(self._seed(now)) if self._seed is not None else {}

        stored = self._cache.read()
        if not stored:
            logger.info("Encounter store hydrated with %d default records", len(records))
            return records

        restored = 0
        for key, entry in stored.items():
            if not isinstance(entry, Mapping) or not entry.get("patientId"):
                logger.warning("Skipping cached encounter %r without a patientId", key)
                continue

            patient_id = str(entry["patientId"])
            base = records.get(patient_id)
            if base is not None:
                fields = base.model_dump(by_alias=True)
            else:
                fields = {
                    "patientId": patient_id,
                    "admissionId": f"adm-{patient_id}",
                    "encounterId": f"enc-{patient_id}",
                    "mrn": "",
                }
            fields.update({k: v for k, v in entry.items() if v is not None})
            if not fields.get("updatedAt"):
                fields["updatedAt"] = now

            try:
                record = derive(EncounterRecord.model_validate(fields), now)
            except ValidationError as exc:
                logger.warning(
                    "Skipping cached encounter %s: %d invalid field(s)", patient_id, exc.error_count()
                )
                continue

            records[patient_id] = record
            restored += 1

        logger.info("Encounter store hydrated with %d records (%d from cache)", len(records), restored)
        return records
