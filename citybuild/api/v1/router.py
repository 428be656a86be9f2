from fastapi import APIRouter

from citybuild.api.v1.health import router as health_router
from citybuild.api.v1.auth import router as auth_router
from citybuild.api.v1.users import router as users_router
from citybuild.api.v1.projects import router as projects_router
from citybuild.api.v1.bids import router as bids_router
from citybuild.api.v1.notifications import router as notifications_router
from citybuild.api.v1.dashboard import router as dashboard_router
from citybuild.api.v1.dev import router as dev_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(auth_router, tags=["auth"])
v1_router.include_router(users_router, tags=["users"])

# ------------------------------------------------------------------
# MARKETPLACE
# ------------------------------------------------------------------
v1_router.include_router(projects_router, tags=["projects"])
v1_router.include_router(bids_router, tags=["bids"])
v1_router.include_router(notifications_router, tags=["notifications"])
v1_router.include_router(dashboard_router, tags=["dashboard"])

# ------------------------------------------------------------------
# DEV TOOLING (404 outside dev environments)
# ------------------------------------------------------------------
v1_router.include_router(dev_router, tags=["dev"])
