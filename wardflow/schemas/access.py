from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AccessSource(str, Enum):
    route_override = "route-override"
    nav = "nav"
    clinical_module = "clinical-module"
    fallback = "fallback"


class RouteAccessInfo(BaseModel):
    required_permissions: list[str]
    source: AccessSource


class NavItem(BaseModel):
    """One entry of the sidebar route tree. Groups have children and may have no route."""
    id: str
    route: Optional[str] = None
    required_permissions: list[str] = Field(default_factory=list)
    children: list[NavItem] = Field(default_factory=list)


class ClinicalModule(BaseModel):
    slug: str
    name: str
    required_permissions: list[str] = Field(default_factory=list)


class RouteAccessRequest(BaseModel):
    pathname: str
    permissions: list[str] = Field(default_factory=list)


class RouteAccessResponse(BaseModel):
    pathname: str
    access: Optional[RouteAccessInfo]
    allowed: bool


class PermissionCheckRequest(BaseModel):
    permissions: list[str] = Field(default_factory=list)
    required: str


class PermissionCheckResponse(BaseModel):
    required: str
    allowed: bool
