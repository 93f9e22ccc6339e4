from pydantic import BaseModel
from typing import Optional, Literal, List, Dict, Any
from datetime import datetime

PlanType = Literal["free", "starter", "professional", "enterprise"]
BillingInterval = Literal["monthly", "yearly"]


class PlanResponse(BaseModel):
    id: Optional[int] = None
    name: str
    plan_type: str
    price_monthly: float
    price_yearly: float
    member_limit: Optional[int] = None
    features: Dict[str, bool]
    is_active: bool = True
    sort_order: int = 0

    class Config:
        from_attributes = True


class PlanComparisonRow(BaseModel):
    feature: str
    label: str
    free: bool
    starter: bool
    professional: bool
    enterprise: bool


class SubscriptionRecord(BaseModel):
    id: int
    club_id: int
    plan_id: Optional[int] = None
    plan_type: Optional[str] = None
    status: str
    billing_interval: str = "monthly"
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsageResponse(BaseModel):
    club_id: int
    member_count: int
    member_limit: Optional[int] = None
    remaining_members: Optional[int] = None
    team_count: int
    facility_count: int
    messages_sent: int
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None


class ClubSubscriptionResponse(BaseModel):
    club_id: int
    subscription: Optional[SubscriptionRecord] = None
    plan: PlanResponse
    current_plan: str
    status: str
    is_trialing: bool
    is_expired: bool
    features: List[str]
    member_limit: Optional[int] = None
    remaining_members: Optional[int] = None
    usage: UsageResponse


class PlanChangeRequest(BaseModel):
    plan_type: PlanType
    billing_interval: BillingInterval = "monthly"
    reason: Optional[str] = None


class PlanChangeResponse(BaseModel):
    message: str
    old_plan: str
    new_plan: str
    price: int
    subscription: SubscriptionRecord


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class CancelResponse(BaseModel):
    message: str
    active_until: Optional[datetime] = None
    subscription: SubscriptionRecord
