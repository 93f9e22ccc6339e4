from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.finances.schemas import (
    FinanceCreate, FinanceUpdate, FinanceResponse, FinanceSummary,
    MemberFeeCreate, MemberFeeUpdate, MemberFeeResponse,
    TrainingFeeCreate, TrainingFeeUpdate, TrainingFeeResponse,
)
from clubflow.modules.finances.service import (
    FinanceService, FeeService, member_fee_service, training_fee_service,
)
from clubflow.core.dependencies import require_club_permission, require_feature
from supabase import Client
from typing import List, Optional, Dict
from datetime import date

router = APIRouter(prefix="/clubs/{club_id}", tags=["finances"])


def get_finance_service(supabase: Client = Depends(get_supabase)) -> FinanceService:
    return FinanceService(supabase)


def get_member_fee_service(supabase: Client = Depends(get_supabase)) -> FeeService:
    return member_fee_service(supabase)


def get_training_fee_service(supabase: Client = Depends(get_supabase)) -> FeeService:
    return training_fee_service(supabase)


@router.get("/finances", response_model=List[FinanceResponse])
async def list_finances(
    club_id: int,
    type: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FinanceService = Depends(get_finance_service)
):
    return service.list_finances(club_id, type=type, status=status, date_from=date_from, date_to=date_to)


@router.get(
    "/finances/summary",
    response_model=FinanceSummary,
    dependencies=[Depends(require_feature("financialReports"))],
)
async def get_finance_summary(
    club_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FinanceService = Depends(get_finance_service)
):
    """Income, expenses, balance and open amounts"""
    return service.get_summary(club_id, date_from=date_from, date_to=date_to)


@router.post("/finances", response_model=FinanceResponse, status_code=201)
async def create_finance(
    club_id: int,
    finance_data: FinanceCreate,
    user_data: Dict = Depends(require_club_permission("finances:create")),
    service: FinanceService = Depends(get_finance_service)
):
    return service.create_finance(club_id, finance_data)


@router.get("/finances/{finance_id}", response_model=FinanceResponse)
async def get_finance(
    club_id: int,
    finance_id: int,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FinanceService = Depends(get_finance_service)
):
    return service.get_finance(club_id, finance_id)


@router.put("/finances/{finance_id}", response_model=FinanceResponse)
async def update_finance(
    club_id: int,
    finance_id: int,
    finance_data: FinanceUpdate,
    user_data: Dict = Depends(require_club_permission("finances:update")),
    service: FinanceService = Depends(get_finance_service)
):
    return service.update_finance(club_id, finance_id, finance_data)


@router.delete("/finances/{finance_id}", status_code=204)
async def delete_finance(
    club_id: int,
    finance_id: int,
    user_data: Dict = Depends(require_club_permission("finances:delete")),
    service: FinanceService = Depends(get_finance_service)
):
    service.delete_finance(club_id, finance_id)
    return None


# Member fees
@router.get("/member-fees", response_model=List[MemberFeeResponse])
async def list_member_fees(
    club_id: int,
    status: Optional[str] = None,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FeeService = Depends(get_member_fee_service)
):
    return service.list_fees(club_id, status=status)


@router.post("/member-fees", response_model=MemberFeeResponse, status_code=201)
async def create_member_fee(
    club_id: int,
    fee_data: MemberFeeCreate,
    user_data: Dict = Depends(require_club_permission("finances:create")),
    service: FeeService = Depends(get_member_fee_service)
):
    return service.create_fee(club_id, fee_data)


@router.get("/member-fees/{fee_id}", response_model=MemberFeeResponse)
async def get_member_fee(
    club_id: int,
    fee_id: int,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FeeService = Depends(get_member_fee_service)
):
    return service.get_fee(club_id, fee_id)


@router.put("/member-fees/{fee_id}", response_model=MemberFeeResponse)
async def update_member_fee(
    club_id: int,
    fee_id: int,
    fee_data: MemberFeeUpdate,
    user_data: Dict = Depends(require_club_permission("finances:update")),
    service: FeeService = Depends(get_member_fee_service)
):
    return service.update_fee(club_id, fee_id, fee_data)


@router.delete("/member-fees/{fee_id}", status_code=204)
async def delete_member_fee(
    club_id: int,
    fee_id: int,
    user_data: Dict = Depends(require_club_permission("finances:delete")),
    service: FeeService = Depends(get_member_fee_service)
):
    service.delete_fee(club_id, fee_id)
    return None


# Training fees
@router.get("/training-fees", response_model=List[TrainingFeeResponse])
async def list_training_fees(
    club_id: int,
    status: Optional[str] = None,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FeeService = Depends(get_training_fee_service)
):
    return service.list_fees(club_id, status=status)


@router.post("/training-fees", response_model=TrainingFeeResponse, status_code=201)
async def create_training_fee(
    club_id: int,
    fee_data: TrainingFeeCreate,
    user_data: Dict = Depends(require_club_permission("finances:create")),
    service: FeeService = Depends(get_training_fee_service)
):
    return service.create_fee(club_id, fee_data)


@router.get("/training-fees/{fee_id}", response_model=TrainingFeeResponse)
async def get_training_fee(
    club_id: int,
    fee_id: int,
    user_data: Dict = Depends(require_club_permission("finances:read")),
    service: FeeService = Depends(get_training_fee_service)
):
    return service.get_fee(club_id, fee_id)


@router.put("/training-fees/{fee_id}", response_model=TrainingFeeResponse)
async def update_training_fee(
    club_id: int,
    fee_id: int,
    fee_data: TrainingFeeUpdate,
    user_data: Dict = Depends(require_club_permission("finances:update")),
    service: FeeService = Depends(get_training_fee_service)
):
    return service.update_fee(club_id, fee_id, fee_data)


@router.delete("/training-fees/{fee_id}", status_code=204)
async def delete_training_fee(
    club_id: int,
    fee_id: int,
    user_data: Dict = Depends(require_club_permission("finances:delete")),
    service: FeeService = Depends(get_training_fee_service)
):
    service.delete_fee(club_id, fee_id)
    return None
