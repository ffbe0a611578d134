from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ClinicalStatus(str, Enum):
    critical = "critical"
    watch = "watch"
    stable = "stable"


class WorkflowStatus(str, Enum):
    admitted = "admitted"
    in_care = "in-care"
    ready_for_discharge = "ready-for-discharge"
    discharged = "discharged"


class CamelModel(BaseModel):
    """
    Base for everything that crosses the cache or the HTTP boundary.

    Python code uses snake_case, the JSON keeps the camelCase names the ward
    screens already send (patientId, pendingOrders, ...).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EncounterRecord(CamelModel):
    """
    One inpatient stay.

    discharge_ready and workflow_status are derived. Whatever a caller puts in
    them gets recomputed by services.derivation.derive before it is stored.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    patient_id: str
    admission_id: str
    encounter_id: str
    mrn: str

    patient_name: str = ""
    consultant: str = ""
    ward: str = ""
    bed: str = ""
    diagnosis: str = ""

    clinical_status: ClinicalStatus = ClinicalStatus.stable

    # negative values are accepted here and clamped by the derivation
    pending_orders: int = 0
    pending_diagnostics: int = 0
    pending_medications: int = 0

    billing_cleared: bool = False
    pharmacy_cleared: bool = False
    follow_up_ready: bool = False

    discharge_ready: bool = False
    workflow_status: WorkflowStatus = WorkflowStatus.admitted

    updated_at: Optional[datetime] = None


class RegisterAdmissionInput(CamelModel):
    patient_id: Optional[str] = None
    mrn: str
    # None and blank both mean "not supplied"
    patient_name: Optional[str] = None
    consultant: Optional[str] = None
    ward: Optional[str] = None
    diagnosis: Optional[str] = None

    @field_validator("mrn")
    @classmethod
    def mrn_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("mrn must not be blank")
        return value


class EncounterPatch(CamelModel):
    """
    Partial update from a ward screen.

    None means "leave it alone". There is no way to clear a field except by
    sending a replacement value.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    patient_name: Optional[str] = None
    consultant: Optional[str] = None
    ward: Optional[str] = None
    bed: Optional[str] = None
    diagnosis: Optional[str] = None
    clinical_status: Optional[ClinicalStatus] = None
    pending_orders: Optional[int] = None
    pending_diagnostics: Optional[int] = None
    pending_medications: Optional[int] = None
    billing_cleared: Optional[bool] = None
    pharmacy_cleared: Optional[bool] = None
    follow_up_ready: Optional[bool] = None

    # input hints only, the derivation decides the final values
    workflow_status: Optional[WorkflowStatus] = None
    discharge_ready: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class BedAssignment(CamelModel):
    bed: str
    ward: str
    diagnosis: Optional[str] = None


class ClinicalSync(CamelModel):
    pending_orders: Optional[int] = None
    pending_diagnostics: Optional[int] = None
    pending_medications: Optional[int] = None
    clinical_status: Optional[ClinicalStatus] = None
    diagnosis: Optional[str] = None


class DischargeChecks(CamelModel):
    billing_cleared: Optional[bool] = None
    pharmacy_cleared: Optional[bool] = None
    follow_up_ready: Optional[bool] = None
