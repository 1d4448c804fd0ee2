from fastapi import APIRouter, Depends

from ..models.dashboard_models import DashboardStats
from ..dependencies import get_dashboard_service
from ...processing.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_stats()
