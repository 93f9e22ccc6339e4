from fastapi import APIRouter, Depends, Request
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.clubs.schemas import (
    ClubCreate, ClubUpdate, ClubResponse, UserClubResponse, PublicClubResponse,
    MembershipResponse, JoinResponse, MembershipDecision, MembershipDecisionResponse,
    MembershipRoleChange, MembershipStatusChange, ClubUserResponse,
    UserMembershipResponse, PermissionFlags, ActivityLogResponse,
)
from clubflow.modules.clubs.service import ClubService, compute_permission_flags
from clubflow.core.cache_invalidation import get_sync_state
from clubflow.core.dependencies import (
    get_current_user_id,
    require_club_member,
    require_club_permission,
    get_access_cache,
    get_active_membership,
    get_club_permissions,
    is_super_user,
)
from clubflow.config.permissions_config import PERMISSION_MATRIX
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/clubs", tags=["clubs"])


def get_club_service(supabase: Client = Depends(get_supabase)) -> ClubService:
    return ClubService(supabase)


@router.get("/public", response_model=List[PublicClubResponse])
async def list_public_clubs(service: ClubService = Depends(get_club_service)):
    """Clubs a new user can ask to join (no authentication)"""
    return service.list_public_clubs()


@router.get("", response_model=List[UserClubResponse])
async def list_my_clubs(
    user_data: Dict = Depends(get_current_user_id),
    service: ClubService = Depends(get_club_service)
):
    """Clubs where the caller is an active member"""
    return service.list_user_clubs(user_data["id"])


@router.post("", response_model=ClubResponse, status_code=201)
async def create_club(
    club_data: ClubCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ClubService = Depends(get_club_service)
):
    """Create a club; the caller becomes its administrator"""
    return service.create_club(club_data, user_data["id"])


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(
    club_id: int,
    user_data: Dict = Depends(require_club_member),
    service: ClubService = Depends(get_club_service)
):
    return service.get_club(club_id)


@router.patch("/{club_id}", response_model=ClubResponse)
async def update_club(
    club_id: int,
    club_data: ClubUpdate,
    request: Request,
    user_data: Dict = Depends(require_club_permission("clubs:update")),
    service: ClubService = Depends(get_club_service)
):
    """Update club settings (club-administrator or obmann)"""
    return service.update_club(club_id, club_data, user_data["id"], request)


@router.post("/{club_id}/join", response_model=JoinResponse, status_code=201)
async def join_club(
    club_id: int,
    request: Request,
    user_data: Dict = Depends(get_current_user_id),
    service: ClubService = Depends(get_club_service)
):
    """Ask to join a club; an administrator has to approve the request"""
    return service.request_join(club_id, user_data["id"], request)


@router.get("/{club_id}/pending-memberships", response_model=List[ClubUserResponse])
async def list_pending_memberships(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("memberships:approve")),
    service: ClubService = Depends(get_club_service)
):
    return service.list_pending_memberships(club_id)


@router.put("/{club_id}/memberships/{membership_id}/approve", response_model=MembershipDecisionResponse)
async def decide_membership(
    club_id: int,
    membership_id: int,
    decision: MembershipDecision,
    request: Request,
    user_data: Dict = Depends(require_club_permission("memberships:approve")),
    service: ClubService = Depends(get_club_service)
):
    """Approve or reject a pending join request"""
    return service.decide_membership(club_id, membership_id, decision, user_data["id"], request)


@router.get("/{club_id}/users", response_model=List[ClubUserResponse])
async def list_club_users(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("memberships:read")),
    service: ClubService = Depends(get_club_service)
):
    """All memberships of the club with profile and role"""
    return service.list_club_users(club_id)


@router.patch("/{club_id}/memberships/{membership_id}/role", response_model=MembershipResponse)
async def change_membership_role(
    club_id: int,
    membership_id: int,
    change: MembershipRoleChange,
    request: Request,
    user_data: Dict = Depends(require_club_permission("memberships:update")),
    service: ClubService = Depends(get_club_service)
):
    return service.change_role(club_id, membership_id, change, user_data["id"], request)


@router.patch("/{club_id}/memberships/{membership_id}/status", response_model=MembershipResponse)
async def change_membership_status(
    club_id: int,
    membership_id: int,
    change: MembershipStatusChange,
    request: Request,
    user_data: Dict = Depends(require_club_permission("memberships:update")),
    service: ClubService = Depends(get_club_service)
):
    return service.change_status(club_id, membership_id, change.status, user_data["id"], request)


@router.delete("/{club_id}/memberships/{membership_id}", status_code=204)
async def remove_membership(
    club_id: int,
    membership_id: int,
    request: Request,
    user_data: Dict = Depends(require_club_permission("memberships:delete")),
    service: ClubService = Depends(get_club_service)
):
    service.remove_membership(club_id, membership_id, user_data["id"], request)
    return None


@router.get("/{club_id}/user-membership", response_model=UserMembershipResponse)
async def get_user_membership(
    club_id: int,
    user_data: Dict = Depends(get_current_user_id),
    service: ClubService = Depends(get_club_service)
):
    """Caller's own membership in the club (any status)"""
    return service.get_user_membership(club_id, user_data["id"])


@router.get("/{club_id}/permissions", response_model=PermissionFlags)
async def get_permission_flags(
    club_id: int,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Boolean permission object for the caller in this club"""
    if is_super_user(user_data, supabase):
        all_permissions = [p["name"] for p in PERMISSION_MATRIX["permissions"]]
        return compute_permission_flags(all_permissions, True, role="super_user")
    membership = get_active_membership(user_data["id"], club_id, supabase, cache)
    if not membership:
        return compute_permission_flags([], False)
    permissions = get_club_permissions(user_data["id"], club_id, supabase, cache)
    return compute_permission_flags(permissions, True, role=membership.get("role_name"))


@router.get("/{club_id}/activity-logs", response_model=List[ActivityLogResponse])
async def list_activity_logs(
    club_id: int,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_club_permission("activity:read")),
    service: ClubService = Depends(get_club_service)
):
    return service.list_activity_logs(club_id, limit=min(limit, 200), offset=offset)


@router.get("/{club_id}/sync")
async def get_sync_versions(
    club_id: int,
    user_data: Dict = Depends(require_club_member)
):
    """Per-key change counters; clients refetch keys whose counter moved"""
    return get_sync_state(club_id)
