"""
API Routes for the Volunteer Network
"""

from fastapi import APIRouter

from .volunteers import router as volunteers_router
from .missions import router as missions_router
from .resources import router as resources_router
from .training import router as training_router
from .risk import router as risk_router
from .status import router as status_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(
    volunteers_router,
    prefix="/volunteers",
    tags=["Volunteers"]
)

api_router.include_router(
    missions_router,
    prefix="/missions",
    tags=["Missions"]
)

api_router.include_router(
    resources_router,
    prefix="/resources",
    tags=["Resource Sharing"]
)

api_router.include_router(
    training_router,
    prefix="/training",
    tags=["Training"]
)

api_router.include_router(
    risk_router,
    prefix="/risk",
    tags=["Disaster Risk"]
)

api_router.include_router(
    status_router,
    prefix="/status-reports",
    tags=["Status Reports"]
)

__all__ = ["api_router"]
