from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.members.schemas import MemberCreate, MemberUpdate, MemberResponse
from clubflow.modules.members.service import MemberService
from clubflow.core.dependencies import require_club_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/clubs/{club_id}/members", tags=["members"])


def get_member_service(supabase: Client = Depends(get_supabase)) -> MemberService:
    return MemberService(supabase)


@router.get("", response_model=List[MemberResponse])
async def list_members(
    club_id: int,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 500,
    offset: int = 0,
    user_data: Dict = Depends(require_club_permission("members:read")),
    service: MemberService = Depends(get_member_service)
):
    return service.list_members(club_id, status=status, search=search, limit=limit, offset=offset)


@router.post("", response_model=MemberResponse, status_code=201)
async def create_member(
    club_id: int,
    member_data: MemberCreate,
    user_data: Dict = Depends(require_club_permission("members:create")),
    service: MemberService = Depends(get_member_service)
):
    """Add a member (403 when the plan's member limit is reached)"""
    return service.create_member(club_id, member_data)


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    club_id: int,
    member_id: int,
    user_data: Dict = Depends(require_club_permission("members:read")),
    service: MemberService = Depends(get_member_service)
):
    return service.get_member(club_id, member_id)


@router.put("/{member_id}", response_model=MemberResponse)
async def update_member(
    club_id: int,
    member_id: int,
    member_data: MemberUpdate,
    user_data: Dict = Depends(require_club_permission("members:update")),
    service: MemberService = Depends(get_member_service)
):
    return service.update_member(club_id, member_id, member_data)


@router.delete("/{member_id}", status_code=204)
async def delete_member(
    club_id: int,
    member_id: int,
    user_data: Dict = Depends(require_club_permission("members:delete")),
    service: MemberService = Depends(get_member_service)
):
    service.delete_member(club_id, member_id)
    return None
