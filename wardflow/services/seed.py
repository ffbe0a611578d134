"""
default ward census

this is demo data. none of these patients are real.

the store hydrates from this when it starts, so the dashboard and the
order / medication / discharge screens have something to show before anyone
registers an admission.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from wardflow.schemas.encounter import ClinicalStatus, EncounterRecord, WorkflowStatus
from wardflow.services.derivation import derive


@dataclass(frozen=True)
class InpatientStay:
    id: str
    mrn: str
    patient_name: str
    consultant: str
    diagnosis: str
    ward: str
    bed: str


@dataclass(frozen=True)
class DischargeCandidate:
    patient_id: str
    billing_status: str  # "Pending" | "Cleared"
    pharmacy_status: str  # "Pending" | "Ready"
    transport_status: str  # "Pending" | "Arranged"


INPATIENT_STAYS: list[InpatientStay] = [
    InpatientStay(
        id="ipd-1",
        mrn="MRN-245990",
        patient_name="Rahul Menon",
        consultant="Dr. Nisha Rao",
        diagnosis="Community acquired pneumonia",
        ward="Medical Ward - 2",
        bed="B-12",
    ),
    InpatientStay(
        id="ipd-2",
        mrn="MRN-245991",
        patient_name="Sneha Patil",
        consultant="Dr. Sameer Kulkarni",
        diagnosis="Post-op cholecystectomy day 1",
        ward="Surgical Ward - 1",
        bed="A-04",
    ),
    InpatientStay(
        id="ipd-3",
        mrn="MRN-245994",
        patient_name="Arvind Sharma",
        consultant="Dr. K. Anand",
        diagnosis="Acute coronary syndrome",
        ward="ICU",
        bed="ICU-03",
    ),
    InpatientStay(
        id="ipd-4",
        mrn="MRN-245998",
        patient_name="Neha Sinha",
        consultant="Dr. Vidya Iyer",
        diagnosis="Uncontrolled diabetes with ketosis",
        ward="Medical Ward - 1",
        bed="M1-07",
    ),
]

DISCHARGE_CANDIDATES: list[DischargeCandidate] = [
    DischargeCandidate("ipd-1", billing_status="Pending", pharmacy_status="Pending", transport_status="Pending"),
    DischargeCandidate("ipd-2", billing_status="Cleared", pharmacy_status="Ready", transport_status="Arranged"),
    DischargeCandidate("ipd-4", billing_status="Pending", pharmacy_status="Pending", transport_status="Pending"),
]

DEFAULT_CLINICAL_STATUS: dict[str, ClinicalStatus] = {
    "ipd-1": ClinicalStatus.watch,
    "ipd-2": ClinicalStatus.stable,
    "ipd-3": ClinicalStatus.critical,
    "ipd-4": ClinicalStatus.stable,
}

# (orders, diagnostics, medications)
DEFAULT_PENDING: dict[str, tuple[int, int, int]] = {
    "ipd-1": (2, 1, 2),
    "ipd-2": (1, 0, 1),
    "ipd-3": (2, 1, 3),
    "ipd-4": (1, 1, 1),
}


def _candidate_for(patient_id: str) -> Optional[DischargeCandidate]:
    return next((c for c in DISCHARGE_CANDIDATES if c.patient_id == patient_id), None)


def build_default_records(now: datetime) -> dict[str, EncounterRecord]:
    records: dict[str, EncounterRecord] = {}

    for index, stay in enumerate(INPATIENT_STAYS):
        candidate = _candidate_for(stay.id)
        billing_cleared = candidate is not None and candidate.billing_status == "Cleared"
        pharmacy_cleared = candidate is not None and candidate.pharmacy_status == "Ready"
        # follow-up only counts once the other two are done and transport is booked
        follow_up_ready = (
            billing_cleared
            and pharmacy_cleared
            and candidate is not None
            and candidate.transport_status == "Arranged"
        )
        orders, diagnostics, medications = DEFAULT_PENDING.get(stay.id, (0, 0, 0))

        records[stay.id] = derive(
            EncounterRecord(
                patient_id=stay.id,
                admission_id=f"adm-{stay.id}",
                encounter_id=f"enc-{stay.id}",
                mrn=stay.mrn,
                patient_name=stay.patient_name,
                consultant=stay.consultant,
                ward=stay.ward,
                bed=stay.bed,
                diagnosis=stay.diagnosis,
                clinical_status=DEFAULT_CLINICAL_STATUS.get(stay.id, ClinicalStatus.stable),
                pending_orders=orders,
                pending_diagnostics=diagnostics,
                pending_medications=medications,
                billing_cleared=billing_cleared,
                pharmacy_cleared=pharmacy_cleared,
                follow_up_ready=follow_up_ready,
                workflow_status=WorkflowStatus.in_care if index == 0 else WorkflowStatus.admitted,
                updated_at=now,
            )
        )

    return records
