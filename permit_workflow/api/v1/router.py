"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from permit_workflow.api.v1.dependencies (no manual
repo/service construction).
"""

from fastapi import APIRouter

from permit_workflow.api.v1.endpoints import applications, health, officers

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(officers.router, prefix="/officers", tags=["officers"])
api_router.include_router(
    applications.router, prefix="/applications", tags=["applications"]
)
