from fastapi import APIRouter, Depends, HTTPException, status
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.users.schemas import UserUpdate, UserResponse, MembershipStatusResponse
from clubflow.modules.users.service import UserService
from clubflow.modules.auth.service import AuthService
from clubflow.core.dependencies import get_auth_service, get_current_user_id, is_super_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def require_super_user(
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> Dict:
    if not is_super_user(user_data, supabase):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Super user required")
    return user_data


@router.get("/me/memberships/status", response_model=MembershipStatusResponse)
async def my_membership_status(
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Memberships of the current user in every club, active and pending"""
    return service.get_membership_status(user_data["id"])


@router.get("/super-admins", response_model=List[UserResponse])
async def list_super_admins(
    user_data: Dict = Depends(require_super_user),
    service: UserService = Depends(get_user_service)
):
    return service.list_super_admins()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
    supabase: Client = Depends(get_supabase)
):
    """Get user by ID (only if same user or shares a club)"""
    if not is_super_user(user_data, supabase) and not service.shares_club(user_data["id"], user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not accessible")
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data_body: UserUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
    supabase: Client = Depends(get_supabase)
):
    """Update a profile (own profile, or any profile for super users)"""
    if user_data["id"] != user_id and not is_super_user(user_data, supabase):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not accessible")
    return service.update_user(user_id, user_data_body)


@router.post("/{user_id}/super-admin", status_code=200)
async def grant_super_admin(
    user_id: str,
    user_data: Dict = Depends(require_super_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.set_super_user(user_id, True)
    return {"user_id": user_id, "is_super_admin": True}


@router.delete("/{user_id}/super-admin", status_code=200)
async def revoke_super_admin(
    user_id: str,
    user_data: Dict = Depends(require_super_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    if user_id == user_data["id"]:
        raise HTTPException(status_code=400, detail="You cannot revoke your own super admin status")
    auth_service.set_super_user(user_id, False)
    return {"user_id": user_id, "is_super_admin": False}
