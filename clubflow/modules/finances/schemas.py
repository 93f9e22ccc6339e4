from pydantic import BaseModel, Field
from typing import Optional, Literal, List
import datetime as dt

FinanceType = Literal["income", "expense"]
FinanceStatus = Literal["pending", "paid", "overdue", "cancelled"]
Priority = Literal["low", "normal", "high", "urgent"]
FeePeriod = Literal["monthly", "quarterly", "yearly", "one-time"]
FeeStatus = Literal["active", "suspended", "cancelled"]


class FinanceCreate(BaseModel):
    type: FinanceType
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = None
    amount: float = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    date: dt.date
    due_date: Optional[dt.date] = None
    member_id: Optional[int] = None
    player_id: Optional[int] = None
    team_id: Optional[int] = None
    reference: Optional[str] = None
    payment_method: Optional[str] = None
    status: FinanceStatus = "pending"
    priority: Priority = "normal"
    recurring: bool = False
    recurring_interval: Optional[Literal["monthly", "quarterly", "yearly"]] = None
    next_due_date: Optional[dt.date] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None


class FinanceUpdate(BaseModel):
    type: Optional[FinanceType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    date: Optional[dt.date] = None
    due_date: Optional[dt.date] = None
    member_id: Optional[int] = None
    player_id: Optional[int] = None
    team_id: Optional[int] = None
    reference: Optional[str] = None
    payment_method: Optional[str] = None
    status: Optional[FinanceStatus] = None
    priority: Optional[Priority] = None
    recurring: Optional[bool] = None
    recurring_interval: Optional[Literal["monthly", "quarterly", "yearly"]] = None
    next_due_date: Optional[dt.date] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class FinanceResponse(BaseModel):
    id: int
    club_id: int
    type: str
    category: str
    subcategory: Optional[str] = None
    amount: float
    description: str
    date: dt.date
    due_date: Optional[dt.date] = None
    member_id: Optional[int] = None
    player_id: Optional[int] = None
    team_id: Optional[int] = None
    reference: Optional[str] = None
    payment_method: Optional[str] = None
    status: str
    priority: Optional[str] = "normal"
    recurring: Optional[bool] = False
    recurring_interval: Optional[str] = None
    next_due_date: Optional[dt.date] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = True
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class FinanceSummary(BaseModel):
    income: float
    expenses: float
    balance: float
    pending: float
    pending_count: int
    overdue: float
    overdue_count: int
    by_category: dict = {}


class MemberFeeCreate(BaseModel):
    member_id: int
    fee_type: Literal["membership", "training", "registration", "equipment"]
    amount: float = Field(..., ge=0)
    period: FeePeriod
    start_date: dt.date
    end_date: Optional[dt.date] = None
    status: FeeStatus = "active"
    next_payment: Optional[dt.date] = None
    notes: Optional[str] = None


class MemberFeeUpdate(BaseModel):
    fee_type: Optional[Literal["membership", "training", "registration", "equipment"]] = None
    amount: Optional[float] = Field(None, ge=0)
    period: Optional[FeePeriod] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    status: Optional[FeeStatus] = None
    last_payment: Optional[dt.date] = None
    next_payment: Optional[dt.date] = None
    total_paid: Optional[float] = None
    total_owed: Optional[float] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class MemberFeeResponse(BaseModel):
    id: int
    club_id: int
    member_id: int
    fee_type: str
    amount: float
    period: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    status: str
    last_payment: Optional[dt.date] = None
    next_payment: Optional[dt.date] = None
    total_paid: Optional[float] = 0
    total_owed: Optional[float] = 0
    notes: Optional[str] = None
    is_active: Optional[bool] = True
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class TrainingFeeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    fee_type: Literal["training", "coaching", "camp", "equipment"]
    amount: float = Field(..., ge=0)
    period: FeePeriod
    start_date: dt.date
    end_date: Optional[dt.date] = None
    target_type: Literal["team", "player", "both"]
    team_ids: Optional[List[int]] = None
    player_ids: Optional[List[int]] = None
    status: FeeStatus = "active"
    auto_generate: bool = True
    notes: Optional[str] = None


class TrainingFeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    fee_type: Optional[Literal["training", "coaching", "camp", "equipment"]] = None
    amount: Optional[float] = Field(None, ge=0)
    period: Optional[FeePeriod] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    target_type: Optional[Literal["team", "player", "both"]] = None
    team_ids: Optional[List[int]] = None
    player_ids: Optional[List[int]] = None
    status: Optional[FeeStatus] = None
    auto_generate: Optional[bool] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class TrainingFeeResponse(BaseModel):
    id: int
    club_id: int
    name: str
    description: Optional[str] = None
    fee_type: str
    amount: float
    period: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    target_type: str
    team_ids: Optional[List[int]] = None
    player_ids: Optional[List[int]] = None
    status: str
    auto_generate: Optional[bool] = True
    total_paid: Optional[float] = 0
    total_owed: Optional[float] = 0
    notes: Optional[str] = None
    is_active: Optional[bool] = True
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
