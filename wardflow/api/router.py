"""
api router

this file is the "table of contents" for all endpoints.
main.py only creates the app and includes this router.
"""

from fastapi import APIRouter

from wardflow.api.routes.access import router as access_router
from wardflow.api.routes.encounters import router as encounters_router
from wardflow.api.routes.health import router as health_router

api_router = APIRouter()

# liveness probe
api_router.include_router(health_router, tags=["health"])

# the encounter store, read and patched by the ward screens
api_router.include_router(encounters_router, tags=["encounters"])

# permission and route access checks used by navigation
api_router.include_router(access_router, tags=["access"])
