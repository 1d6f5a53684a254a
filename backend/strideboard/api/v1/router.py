"""
API v1 router registry.
"""
from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .notifications import router as notifications_router
from .projects import router as projects_router
from .users import router as users_router
from .work_items import router as work_items_router
from .workspaces import router as workspaces_router

# Create v1 router
v1_router = APIRouter(prefix="/v1")

# Include all v1 routers
v1_router.include_router(auth_router, tags=["Authentication"])
v1_router.include_router(users_router, prefix="/users", tags=["Users"])
v1_router.include_router(workspaces_router, prefix="/workspaces", tags=["Workspaces"])
v1_router.include_router(
    projects_router,
    prefix="/workspaces/{workspace_id}/projects",
    tags=["Projects"]
)
v1_router.include_router(
    work_items_router,
    prefix="/workspaces/{workspace_id}/projects/{project_id}/work-items",
    tags=["Work Items"]
)
v1_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
v1_router.include_router(health_router, tags=["Health"])


# API information endpoint
@v1_router.get("/info")
async def api_info():
    """Get API v1 information."""
    return {
        "version": "v1",
        "name": "Strideboard API",
        "endpoints": {
            "auth": "/api/v1/auth",
            "users": "/api/v1/users",
            "workspaces": "/api/v1/workspaces",
            "notifications": "/api/v1/notifications",
            "health": "/api/v1/health",
        }
    }
