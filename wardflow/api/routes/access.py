"""
access routes

lets a screen ask "may this user open that route / do that thing" before it
renders a button or issues a patch. nothing here is enforced server side.
"""

from fastapi import APIRouter, HTTPException, status

from wardflow.schemas.access import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    RouteAccessRequest,
    RouteAccessResponse,
)
from wardflow.services.permissions import ROLE_PERMISSIONS, has_permission, permissions_for_role
from wardflow.services.route_access import default_resolver

router = APIRouter(prefix="/access")


@router.post("/route", response_model=RouteAccessResponse)
def check_route(req: RouteAccessRequest) -> RouteAccessResponse:
    return RouteAccessResponse(
        pathname=req.pathname,
        access=default_resolver.resolve(req.pathname),
        allowed=default_resolver.can_access(req.pathname, req.permissions),
    )


@router.post("/permission", response_model=PermissionCheckResponse)
def check_permission(req: PermissionCheckRequest) -> PermissionCheckResponse:
    return PermissionCheckResponse(
        required=req.required,
        allowed=has_permission(req.permissions, req.required),
    )


@router.get("/roles/{role}", response_model=list[str])
def role_permissions(role: str) -> list[str]:
    if role not in ROLE_PERMISSIONS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown role '{role}'.",
        )
    return permissions_for_role(role)
