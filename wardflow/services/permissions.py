"""
permission matching

permissions are dotted strings like "ipd.discharge.write".

a granted permission covers a required one when:
- it is "*" (super admin)
- it is the exact same string
- it is a wildcard on a prefix of the required one ("ipd.*", "ipd.discharge.*")

the encounter store never calls this. the screens do, before they issue a patch.
"""

from __future__ import annotations

from typing import Iterable

WILDCARD = "*"

ROLE_PERMISSIONS: dict[str, list[str]] = {
    "SUPER_ADMIN": [WILDCARD],
    "HOSPITAL_ADMIN": [
        "dashboard.read",
        "patients.*",
        "appointments.*",
        "ipd.*",
        "clinical.*",
        "orders.*",
        "diagnostics.*",
        "pharmacy.*",
        "billing.*",
        "inventory.*",
        "staff.*",
        "reports.*",
        "admin.*",
        "help.read",
    ],
    "DOCTOR": [
        "dashboard.read",
        "patients.read",
        "patients.profile.read",
        "appointments.*",
        "ipd.read",
        "ipd.admissions.read",
        "ipd.admissions.write",
        "ipd.transfer.write",
        "ipd.beds.read",
        "ipd.rounds.read",
        "ipd.rounds.write",
        "ipd.discharge.read",
        "ipd.discharge.write",
        "clinical.read",
        "clinical.flow_overview.read",
        "clinical.ambulatory.*",
        "clinical.clindoc.*",
        "clinical.care_companion.read",
        "clinical.notes.write",
        "clinical.orders.read",
        "clinical.orders.write",
        "clinical.prescriptions.write",
        "orders.*",
        "diagnostics.read",
        "pharmacy.read",
        "help.read",
    ],
    "NURSE": [
        "dashboard.read",
        "patients.read",
        "patients.profile.read",
        "appointments.read",
        "ipd.read",
        "ipd.admissions.read",
        "ipd.beds.read",
        "ipd.beds.write",
        "ipd.rounds.read",
        "ipd.rounds.write",
        "ipd.discharge.read",
        "clinical.read",
        "clinical.flow_overview.read",
        "clinical.ambulatory.read",
        "clinical.clindoc.read",
        "clinical.kiosk.read",
        "clinical.care_companion.read",
        "clinical.vitals.write",
        "clinical.notes.write",
        "clinical.orders.read",
        "orders.read",
        "diagnostics.read",
        "help.read",
    ],
    "RECEPTION": [
        "dashboard.read",
        "patients.*",
        "appointments.*",
        "ipd.read",
        "ipd.admissions.read",
        "ipd.admissions.write",
        "clinical.kiosk.*",
        "clinical.flow_overview.read",
        "billing.read",
        "help.read",
    ],
    "CARE_COORDINATOR": [
        "dashboard.read",
        "patients.read",
        "patients.profile.read",
        "appointments.read",
        "ipd.read",
        "ipd.discharge.read",
        "clinical.care_companion.*",
        "clinical.flow_overview.read",
        "help.read",
    ],
    "INFECTION_CONTROL": [
        "dashboard.read",
        "patients.read",
        "patients.profile.read",
        "clinical.infection_control.*",
        "clinical.flow_overview.read",
        "diagnostics.read",
        "ipd.read",
        "help.read",
    ],
    "LAB_TECH": ["dashboard.read", "orders.lab.*", "diagnostics.lab.*", "help.read"],
    "RADIOLOGY_TECH": ["dashboard.read", "orders.radiology.*", "diagnostics.radiology.*", "help.read"],
    "PHARMACIST": [
        "dashboard.read",
        "clinical.prescriptions.write",
        "clinical.prescriptions.read",
        "pharmacy.*",
        "inventory.items.read",
        "help.read",
    ],
    "BILLING": ["dashboard.read", "patients.read", "billing.*", "reports.billing.*", "help.read"],
    "INVENTORY": ["dashboard.read", "inventory.*", "reports.inventory.*", "help.read"],
    "PATIENT_PORTAL": ["patient-portal.*"],
    "AUDITOR": [
        "dashboard.read",
        "patients.read",
        "billing.read",
        "reports.*",
        "admin.audit.read",
        "help.read",
    ],
}


def has_permission(granted: Iterable[str], required: str) -> bool:
    granted = set(granted)

    if WILDCARD in granted or required in granted:
        return True

    # most specific prefix first: a.b.c.* then a.b.* then a.*
    parts = required.split(".")
    for i in range(len(parts), 0, -1):
        if ".".join(parts[:i]) + ".*" in granted:
            return True

    return False


def has_any_permission(granted: Iterable[str], required: Iterable[str]) -> bool:
    granted = set(granted)
    return any(has_permission(granted, perm) for perm in required)


def permissions_for_role(role: str) -> list[str]:
    return list(ROLE_PERMISSIONS.get(role, []))


def roles_for_permissions(required: list[str]) -> list[str]:
    """Roles that satisfy at least one of the required permissions."""
    if not required:
        return []
    return [role for role, granted in ROLE_PERMISSIONS.items() if has_any_permission(granted, required)]
