from fastapi import APIRouter, BackgroundTasks, Depends, Request
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.subscriptions.schemas import (
    PlanResponse, PlanComparisonRow, ClubSubscriptionResponse, UsageResponse,
    PlanChangeRequest, PlanChangeResponse, CancelRequest, CancelResponse,
)
from clubflow.modules.subscriptions.service import SubscriptionService
from clubflow.core.dependencies import require_club_permission
from clubflow.core.email import send_plan_change_notification
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


def get_subscription_service(supabase: Client = Depends(get_supabase)) -> SubscriptionService:
    return SubscriptionService(supabase)


@router.get("/plans", response_model=List[PlanResponse])
async def list_plans(service: SubscriptionService = Depends(get_subscription_service)):
    return service.list_plans()


@router.get("/plans/comparison", response_model=List[PlanComparisonRow])
async def compare_plans(service: SubscriptionService = Depends(get_subscription_service)):
    return service.compare_plans()


@router.get("/clubs/{club_id}", response_model=ClubSubscriptionResponse)
async def get_club_subscription(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("subscriptions:read")),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.get_club_subscription(club_id)


@router.post("/clubs/{club_id}", response_model=PlanChangeResponse)
async def change_plan(
    club_id: int,
    data: PlanChangeRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(require_club_permission("subscriptions:update")),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Switch plans; the platform admin is notified by email"""
    response, club_name = service.change_plan(club_id, data, user_data["id"], request)
    background_tasks.add_task(
        send_plan_change_notification,
        club_name,
        response.old_plan,
        response.new_plan,
        data.billing_interval,
        user_data.get("email"),
    )
    return response


@router.put("/clubs/{club_id}/cancel", response_model=CancelResponse)
async def cancel_subscription(
    club_id: int,
    request: Request,
    data: Optional[CancelRequest] = None,
    user_data: Dict = Depends(require_club_permission("subscriptions:update")),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.cancel_subscription(club_id, user_data["id"], data.reason if data else None, request)


@router.get("/clubs/{club_id}/usage", response_model=UsageResponse)
async def get_usage(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("subscriptions:read")),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.get_usage(club_id)
