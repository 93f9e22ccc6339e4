from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.dashboard.schemas import DashboardStats
from clubflow.modules.dashboard.service import DashboardService
from clubflow.core.dependencies import require_club_member
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/clubs/{club_id}", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    club_id: int,
    user_data: Dict = Depends(require_club_member),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.get_stats(club_id)
