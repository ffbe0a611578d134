"""
encounter routes

these are how the ward screens (orders, medications, discharge, dashboard) read
the encounter store and send their patches back.

the store itself treats an unknown patient_id as a no-op.
over HTTP that would hide mistakes, so these routes check first and answer 404.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from wardflow.core.state import get_store
from wardflow.schemas.encounter import (
    BedAssignment,
    ClinicalSync,
    DischargeChecks,
    EncounterPatch,
    EncounterRecord,
    RegisterAdmissionInput,
)
from wardflow.services.encounter_store import EncounterStore

router = APIRouter(prefix="/encounters")


def _require(store: EncounterStore, patient_id: str) -> EncounterRecord:
    record = store.get_by_patient_id(patient_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient '{patient_id}' has no encounter.",
        )
    return record


@router.get("", response_model=list[EncounterRecord])
def list_encounters(store: EncounterStore = Depends(get_store)) -> list[EncounterRecord]:
    """Active patients first, then discharged ones, each group by name."""
    return store.get_all()


@router.get("/census")
def ward_census(store: EncounterStore = Depends(get_store)) -> dict[str, int]:
    return {phase.value: total for phase, total in store.get_census().items()}


@router.get("/by-mrn/{mrn}", response_model=EncounterRecord)
def get_encounter_by_mrn(mrn: str, store: EncounterStore = Depends(get_store)) -> EncounterRecord:
    record = store.get_by_mrn(mrn)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No encounter for MRN '{mrn}'.",
        )
    return record


@router.post("/reset", status_code=status.HTTP_204_NO_CONTENT)
def reset_encounters(store: EncounterStore = Depends(get_store)) -> None:
    """Back to the default census. Handy for demos when state gets messy."""
    store.reset()


@router.post("/admissions", response_model=EncounterRecord, status_code=status.HTTP_201_CREATED)
def register_admission(
    data: RegisterAdmissionInput, response: Response, store: EncounterStore = Depends(get_store)
) -> EncounterRecord:
    """
    Registers an admission.

    201 when a new stay was created. A second admission for an MRN that is
    already on the ward refreshes that record instead and answers 200.
    """
    before = store.get_by_mrn(data.mrn)
    record = store.register_admission(data)
    if before is not None and before.admission_id == record.admission_id:
        response.status_code = status.HTTP_200_OK
    return record


@router.get("/{patient_id}", response_model=EncounterRecord)
def get_encounter(patient_id: str, store: EncounterStore = Depends(get_store)) -> EncounterRecord:
    return _require(store, patient_id)


@router.patch("/{patient_id}", response_model=EncounterRecord)
def patch_encounter(
    patient_id: str, patch: EncounterPatch, store: EncounterStore = Depends(get_store)
) -> EncounterRecord:
    _require(store, patient_id)
    store.patch(patient_id, patch)
    return _require(store, patient_id)


@router.post("/{patient_id}/bed", response_model=EncounterRecord)
def assign_bed(
    patient_id: str, data: BedAssignment, store: EncounterStore = Depends(get_store)
) -> EncounterRecord:
    _require(store, patient_id)
    store.assign_bed(patient_id, data.bed, data.ward, data.diagnosis)
    return _require(store, patient_id)


@router.post("/{patient_id}/clinical", response_model=EncounterRecord)
def sync_clinical(
    patient_id: str, data: ClinicalSync, store: EncounterStore = Depends(get_store)
) -> EncounterRecord:
    _require(store, patient_id)
    store.sync_clinical(patient_id, **data.model_dump())
    return _require(store, patient_id)


@router.post("/{patient_id}/discharge-checks", response_model=EncounterRecord)
def sync_discharge_checks(
    patient_id: str, data: DischargeChecks, store: EncounterStore = Depends(get_store)
) -> EncounterRecord:
    _require(store, patient_id)
    store.sync_discharge_checks(patient_id, **data.model_dump())
    return _require(store, patient_id)


@router.post("/{patient_id}/discharge", response_model=EncounterRecord)
def mark_discharged(patient_id: str, store: EncounterStore = Depends(get_store)) -> EncounterRecord:
    _require(store, patient_id)
    store.mark_discharged(patient_id)
    return _require(store, patient_id)
