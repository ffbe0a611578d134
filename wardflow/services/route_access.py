"""
route access

maps a navigation path to the permission(s) needed to open it.

lookup order:
1) route overrides (encounter screens whose path carries an id)
2) the static sidebar route tree
3) /clinical/modules/{slug} -> the clinical module registry, falling back to "clinical.read"

no match means the route has no requirement and anyone may open it.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from wardflow.schemas.access import AccessSource, ClinicalModule, NavItem, RouteAccessInfo
from wardflow.services.permissions import has_any_permission

CLINICAL_MODULE_PREFIX = "/clinical/modules/"
CLINICAL_FALLBACK_PERMISSIONS = ["clinical.read"]

ROUTE_OVERRIDES: list[tuple[re.Pattern[str], list[str]]] = [
    (re.compile(r"^/appointments/visit$"), ["clinical.ambulatory.write"]),
    (re.compile(r"^/encounters/[^/]+$"), ["clinical.ambulatory.write"]),
    (re.compile(r"^/encounters/[^/]+/orders$"), ["clinical.orders.write"]),
    (re.compile(r"^/encounters/[^/]+/prescriptions$"), ["clinical.prescriptions.write"]),
]

# sections whose sub-pages share one sidebar entry: path -> sidebar route, first entry is the default
SECTION_ROUTES: dict[str, dict[str, str]] = {
    "/lab/": {
        "/lab/dashboard": "/lab/dashboard",
        "/lab/samples": "/lab/samples",
        "/lab/worksheets": "/lab/samples",
        "/lab/results": "/lab/samples",
        "/lab/clients": "/lab/clients",
        "/lab/tests": "/lab/clients",
        "/lab/instruments": "/lab/clients",
        "/lab/inventory": "/lab/clients",
        "/lab/reports": "/lab/reports",
        "/lab/quality-control": "/lab/reports",
        "/lab/settings": "/lab/settings",
    },
    "/patient-portal/": {
        "/patient-portal/home": "/patient-portal/home",
        "/patient-portal/appointments": "/patient-portal/appointments",
        "/patient-portal/medications": "/patient-portal/medications",
        "/patient-portal/prescriptions": "/patient-portal/medications",
        "/patient-portal/lab-reports": "/patient-portal/lab-reports",
        "/patient-portal/bills": "/patient-portal/bills",
    },
}


def _item(item_id: str, route: Optional[str], *perms: str, children: Iterable[NavItem] = ()) -> NavItem:
    return NavItem(id=item_id, route=route, required_permissions=list(perms), children=list(children))


NAV_TREE: list[NavItem] = [
    _item("dashboard", "/dashboard", "dashboard.read"),
    _item(
        "patients",
        None,
        "patients.read",
        children=[
            _item("patient-registration", "/patients/registration", "patients.create"),
            _item("patient-list", "/patients/list", "patients.read"),
        ],
    ),
    _item(
        "appointments",
        None,
        "appointments.read",
        children=[
            _item("appointments-calendar", "/appointments/calendar", "appointments.read"),
            _item("appointments-queue", "/appointments/queue", "appointments.read"),
        ],
    ),
    _item(
        "ipd",
        None,
        "ipd.read",
        children=[
            _item("ipd-dashboard", "/ipd/dashboard", "ipd.read"),
            _item("ipd-admissions", "/ipd/admissions", "ipd.admissions.write"),
            _item("ipd-beds", "/ipd/beds", "ipd.beds.read"),
            _item("ipd-rounds", "/ipd/rounds", "ipd.rounds.write"),
            _item("ipd-discharge", "/ipd/discharge", "ipd.discharge.write"),
        ],
    ),
    _item(
        "clinical",
        None,
        "clinical.read",
        children=[
            _item("care-companion", "/clinical/modules/care-companion", "clinical.care_companion.read"),
            _item(
                "infection-control",
                "/clinical/modules/bugsy-infection-control",
                "clinical.infection_control.read",
            ),
        ],
    ),
    _item(
        "orders-tests",
        None,
        "orders.read",
        "diagnostics.read",
        children=[
            _item("ipd-orders", "/ipd/orders-tests/orders", "orders.read", "ipd.rounds.read", "ipd.rounds.write"),
            _item(
                "ipd-lab",
                "/ipd/orders-tests/lab",
                "diagnostics.read",
                "diagnostics.lab.read",
                "diagnostics.lab.results.read",
            ),
            _item("ipd-radiology", "/ipd/orders-tests/radiology", "diagnostics.read", "diagnostics.radiology.read"),
        ],
    ),
    _item(
        "lab",
        None,
        "diagnostics.lab.read",
        children=[
            _item("lab-dashboard", "/lab/dashboard", "diagnostics.lab.read"),
            _item("lab-workflow", "/lab/samples", "diagnostics.lab.read"),
            _item("lab-catalog", "/lab/clients", "diagnostics.lab.read"),
            _item("lab-reports-qc", "/lab/reports", "diagnostics.lab.read"),
            _item("lab-settings", "/lab/settings", "diagnostics.lab.read"),
        ],
    ),
    _item(
        "pharmacy",
        None,
        "pharmacy.read",
        children=[
            _item("pharmacy-dispense", "/pharmacy/dispense", "pharmacy.dispense.write"),
            _item("pharmacy-stock", "/pharmacy/stock", "pharmacy.stock.read"),
            _item("pharmacy-returns", "/pharmacy/returns", "pharmacy.returns.write"),
        ],
    ),
    _item(
        "billing",
        None,
        "billing.read",
        children=[
            _item("ipd-charges", "/ipd/charges", "billing.read"),
            _item("billing-invoices", "/billing/invoices", "billing.invoices.read"),
            _item("billing-payments", "/billing/payments", "billing.payments.write"),
        ],
    ),
    _item(
        "patient-portal",
        None,
        children=[
            _item("pp-home", "/patient-portal/home", "patient-portal.read"),
            _item("pp-appointments", "/patient-portal/appointments", "patient-portal.read"),
            _item("pp-medications", "/patient-portal/medications", "patient-portal.read"),
            _item("pp-lab-reports", "/patient-portal/lab-reports", "patient-portal.read"),
            _item("pp-bills", "/patient-portal/bills", "patient-portal.read"),
        ],
    ),
    _item("help", "/help", "help.read"),
]

# the registry carries no permissions of its own today, so these all resolve to the fallback
CLINICAL_MODULES: list[ClinicalModule] = [
    ClinicalModule(slug="ambulatory-care-opd", name="Ambulatory Care (OPD)"),
    ClinicalModule(slug="inpatient-documentation-clindoc", name="Inpatient Documentation (ClinDoc)"),
    ClinicalModule(slug="welcome-kiosk", name="Welcome Kiosk"),
    ClinicalModule(slug="care-companion", name="Care Companion"),
    ClinicalModule(slug="bugsy-infection-control", name="Infection Control"),
    ClinicalModule(slug="haiku-mobile", name="Mobile Clinician"),
    ClinicalModule(slug="lumens-insights", name="Procedure Insights"),
    ClinicalModule(slug="care-link", name="Care Link"),
    ClinicalModule(slug="reporting-workbench", name="Reporting Workbench"),
    ClinicalModule(slug="chronicles", name="Chronicles"),
]


def normalize_pathname(pathname: str) -> str:
    if not pathname:
        return ""
    if pathname == "/":
        return pathname
    return pathname.rstrip("/") or "/"


def _section_route(pathname: str) -> Optional[str]:
    base = pathname.split("?")[0]
    for prefix, routes in SECTION_ROUTES.items():
        if base.startswith(prefix):
            segment = "/".join(base.split("/")[:3])
            return routes.get(segment, next(iter(routes.values())))
    return None


def _find_item(items: Iterable[NavItem], route: str) -> Optional[NavItem]:
    for item in items:
        if item.route == route:
            return item
        found = _find_item(item.children, route)
        if found is not None:
            return found
    return None


class RouteAccessResolver:
    def __init__(
        self,
        nav_items: Optional[list[NavItem]] = None,
        clinical_modules: Optional[list[ClinicalModule]] = None,
    ):
        self.nav_items = NAV_TREE if nav_items is None else nav_items
        modules = CLINICAL_MODULES if clinical_modules is None else clinical_modules
        self.clinical_modules = {m.slug: m for m in modules}

    def menu_item_for(self, pathname: str) -> Optional[NavItem]:
        route = normalize_pathname(pathname)
        return _find_item(self.nav_items, _section_route(route) or route)

    def resolve(self, pathname: str) -> Optional[RouteAccessInfo]:
        if not pathname:
            return None

        path = normalize_pathname(pathname)

        for pattern, perms in ROUTE_OVERRIDES:
            if pattern.match(path):
                return RouteAccessInfo(required_permissions=list(perms), source=AccessSource.route_override)

        item = self.menu_item_for(path)
        if item is not None and item.required_permissions:
            return RouteAccessInfo(required_permissions=list(item.required_permissions), source=AccessSource.nav)

        if path.startswith(CLINICAL_MODULE_PREFIX):
            slug = next((part for part in reversed(path.split("/")) if part), "")
            module = self.clinical_modules.get(slug)
            if module is not None and module.required_permissions:
                return RouteAccessInfo(
                    required_permissions=list(module.required_permissions),
                    source=AccessSource.clinical_module,
                )
            return RouteAccessInfo(
                required_permissions=list(CLINICAL_FALLBACK_PERMISSIONS),
                source=AccessSource.fallback,
            )

        return None

    def can_access(self, pathname: str, granted: Iterable[str]) -> bool:
        info = self.resolve(pathname)
        if info is None or not info.required_permissions:
            return True
        return has_any_permission(granted, info.required_permissions)


default_resolver = RouteAccessResolver()


def resolve_route(pathname: str) -> Optional[RouteAccessInfo]:
    return default_resolver.resolve(pathname)


def can_access_route(pathname: str, granted: Iterable[str]) -> bool:
    return default_resolver.can_access(pathname, granted)
