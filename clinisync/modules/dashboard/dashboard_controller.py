# clinisync/modules/dashboard/dashboard_controller.py
"""Dashboard controller with API endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from clinisync.auth.dependencies import get_current_user
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.models.models import User

from . import dashboard_service as service
from .schemas import ActivityResponse, DashboardStatsResponse


router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    Get dashboard stats for the current role:
    - Active patients
    - Active consultants
    - Upcoming appointments
    - Revenue collected
    """
    return await service.dashboard_stats(store, current_user)


@router.get("/activities", response_model=List[ActivityResponse])
async def get_recent_activities(
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """Get the most recent activities visible to the current user."""
    return await service.recent_activities(store, current_user)
